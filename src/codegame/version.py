""" The CodeGame protocol version implemented here, and the rules deciding
    whether a server speaking some other version can be used.
"""

CG_VERSION = '0.7'


def _split(version):
    parts = str(version).split('.')
    if len(parts) == 1:
        parts.append('0')
    return parts[0], parts[1]


def is_compatible(server_version, client_version=CG_VERSION):
    """ Return True if a client implementing *client_version* can talk to
        a server implementing *server_version*. The major versions must
        match. Before 1.0 every minor release may break compatibility, so
        the minor versions must match as well; after that, the client minor
        version must be at least the server's.
    """

    server_major, server_minor = _split(server_version)
    client_major, client_minor = _split(client_version)

    if server_major != client_major:
        return False

    if client_major == '0':
        return server_minor == client_minor

    try:
        server_minor = int(server_minor)
        client_minor = int(client_minor)
    except ValueError:
        return False

    return client_minor >= server_minor


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
