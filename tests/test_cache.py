from codegame.cache import UsernameCache


def test_basics():
    cache = UsernameCache()
    assert len(cache) == 0
    assert cache.get('p1') is None
    assert cache.get('p1', '') == ''

    cache.set('p1', 'alice')
    assert 'p1' in cache
    assert cache.get('p1') == 'alice'

    cache.update({'p2': 'bob', 'p3': 'carol'})
    assert len(cache) == 3

    cache.remove('p2')
    cache.remove('p2')
    assert 'p2' not in cache
    assert cache.snapshot() == {'p1': 'alice', 'p3': 'carol'}


def test_replace_and_clear():
    cache = UsernameCache()
    cache.set('p1', 'alice')

    cache.replace({'p2': 'bob'})
    assert cache.snapshot() == {'p2': 'bob'}

    cache.clear()
    cache.clear()
    assert len(cache) == 0


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
