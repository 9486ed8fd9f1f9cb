import threading

import codegame
from codegame.registry import CallbackRegistry


def board(data=None):
    return codegame.Event('board', data)


def test_dispatch_by_name():
    registry = CallbackRegistry()
    calls = list()

    registry.register('board', lambda origin, event: calls.append(('a', origin)))
    registry.register('board', lambda origin, event: calls.append(('b', origin)))
    registry.register('move', lambda origin, event: calls.append(('c', origin)))

    registry.dispatch('p1', board())

    assert sorted(calls) == [('a', 'p1'), ('b', 'p1')]


def test_dispatch_unknown_name():
    registry = CallbackRegistry()
    registry.dispatch('server', board())
    assert len(registry) == 0


def test_handles_are_unique():
    registry = CallbackRegistry()
    callback = lambda origin, event: None

    handles = set()
    for name in ('a', 'b', 'a', 'c'):
        handles.add(registry.register(name, callback))
    handles.add(registry.register_once('a', callback))

    assert len(handles) == 5
    assert len(registry) == 5

    # Two registries hand out handles independently.

    other = CallbackRegistry()
    assert other.register('a', callback) in handles


def test_not_callable():
    registry = CallbackRegistry()

    try:
        registry.register('board', 'not a function')
    except TypeError:
        pass
    else:
        raise AssertionError('expected a TypeError for a non-callable callback')


def test_once():
    registry = CallbackRegistry()
    calls = list()

    handle = registry.register_once('board', lambda origin, event: calls.append(event.data))
    assert handle in registry

    registry.dispatch('server', board(1))
    registry.dispatch('server', board(2))

    assert calls == [1]
    assert handle not in registry


def test_once_concurrent():
    """ Two threads dispatching matching events at the same moment must
        only invoke a one-shot callback once.
    """

    registry = CallbackRegistry()
    calls = list()
    barrier = threading.Barrier(8)

    registry.register_once('board', lambda origin, event: calls.append(origin))

    def dispatch(number):
        barrier.wait()
        registry.dispatch(str(number), board())

    threads = [threading.Thread(target=dispatch, args=(number,)) for number in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(calls) == 1


def test_remove():
    registry = CallbackRegistry()
    calls = list()

    handle = registry.register('board', lambda origin, event: calls.append('removed'))
    registry.register('board', lambda origin, event: calls.append('kept'))

    registry.remove(handle)
    registry.dispatch('server', board())
    assert calls == ['kept']

    # Removing again, or removing something that never existed, is a no-op.

    registry.remove(handle)
    registry.remove(12345)
    assert len(registry) == 1


def test_remove_during_dispatch():
    registry = CallbackRegistry()
    calls = list()
    handles = dict()

    def first(origin, event):
        calls.append('first')
        registry.remove(handles['second'])

    def second(origin, event):
        calls.append('second')

    handles['first'] = registry.register('board', first)
    handles['second'] = registry.register('board', second)

    registry.dispatch('server', board())
    assert 'first' in calls

    # Whatever happened during the first dispatch, the removal applies to
    # the next one.

    calls.clear()
    registry.dispatch('server', board())
    assert calls == ['first']


def test_register_during_dispatch():
    registry = CallbackRegistry()
    calls = list()

    def register(origin, event):
        calls.append('register')
        registry.register('board', lambda origin, event: calls.append('added'))

    registry.register_once('board', register)

    registry.dispatch('server', board())
    assert calls == ['register']

    registry.dispatch('server', board())
    assert calls == ['register', 'added']


def test_raising_callback():
    registry = CallbackRegistry()
    calls = list()

    def broken(origin, event):
        raise RuntimeError('broken callback')

    registry.register('board', broken)
    registry.register('board', lambda origin, event: calls.append('ok'))

    registry.dispatch('server', board())
    assert calls == ['ok']


def test_clear():
    registry = CallbackRegistry()
    callback = lambda origin, event: None

    registry.register('board', callback)
    registry.register('move', callback)
    kept = registry.register('cg_error', callback)

    registry.clear(keep=('cg_error',))
    assert len(registry) == 1
    assert kept in registry

    registry.clear()
    registry.clear()
    assert len(registry) == 0


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
