""" The callback registry maps event names to the callbacks interested in
    them. It is shared between the application thread, which registers and
    removes callbacks, and whichever thread is dispatching events.
"""

import itertools
import logging
import threading


logger = logging.getLogger(__name__)


class CallbackRegistry:
    """ A :class:`CallbackRegistry` holds any number of callbacks per event
        name. Every callback is identified by a handle, an integer that is
        unique for the lifetime of this registry instance; the handle is the
        only way to remove a callback.

        Callbacks are invoked as ``callback(origin, event)``, where *origin*
        is the participant id (or origin sentinel) of the sender and *event*
        is a :class:`codegame.protocol.message.Event` instance.
    """

    def __init__(self):

        self._callbacks = dict()
        self._lock = threading.Lock()
        self._ticker = itertools.count(1)


    def __len__(self):
        with self._lock:
            return sum(len(bucket) for bucket in self._callbacks.values())


    def __contains__(self, handle):
        with self._lock:
            return self._find(handle) is not None


    def _find(self, handle):
        """ Return the name bucket containing *handle*, or None. The caller
            must hold the lock.
        """

        for name, bucket in self._callbacks.items():
            if handle in bucket:
                return name

        return None


    def register(self, name, callback):
        """ Register a *callback* to be invoked every time an event with the
            given *name* is dispatched. Returns the handle for this callback.
        """

        if callable(callback):
            pass
        else:
            raise TypeError('callback must be callable')

        handle = next(self._ticker)
        self._insert(name, handle, callback)
        return handle


    def _insert(self, name, handle, callback):

        with self._lock:
            try:
                bucket = self._callbacks[name]
            except KeyError:
                bucket = dict()
                self._callbacks[name] = bucket

            bucket[handle] = callback


    def register_once(self, name, callback):
        """ Register a *callback* that will be invoked for the first event
            with the given *name*, and never again. The callback is removed
            before it is invoked, so two dispatches racing for it will only
            ever see one invocation.
        """

        if callable(callback):
            pass
        else:
            raise TypeError('callback must be callable')

        handle = next(self._ticker)

        def once(origin, event):
            if self._claim(handle):
                callback(origin, event)

        self._insert(name, handle, once)
        return handle


    def _claim(self, handle):
        """ Remove *handle*, returning True if this call was the one that
            removed it.
        """

        with self._lock:
            name = self._find(handle)
            if name is None:
                return False

            self._discard(name, handle)
            return True


    def _discard(self, name, handle):
        bucket = self._callbacks[name]
        del bucket[handle]

        if len(bucket) == 0:
            del self._callbacks[name]


    def remove(self, handle):
        """ Remove the callback registered with *handle*. Removing an unknown
            or already removed handle does nothing.
        """

        with self._lock:
            name = self._find(handle)
            if name is not None:
                self._discard(name, handle)


    def clear(self, keep=()):
        """ Remove every registered callback, except those registered for
            event names in *keep*.
        """

        with self._lock:
            for name in list(self._callbacks.keys()):
                if name in keep:
                    continue
                del self._callbacks[name]


    def dispatch(self, origin, event):
        """ Invoke every callback currently registered for the name of this
            *event*. The set of callbacks is copied before any of them run;
            callbacks may register or remove callbacks freely, and those
            changes apply to the next dispatch. An exception raised by one
            callback is logged and does not prevent the others from running.
        """

        with self._lock:
            try:
                bucket = self._callbacks[event.name]
            except KeyError:
                return
            callbacks = tuple(bucket.values())

        for callback in callbacks:
            try:
                callback(origin, event)
            except Exception:
                logger.exception('callback for %r raised an exception', event.name)
                continue


# end of class CallbackRegistry


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
