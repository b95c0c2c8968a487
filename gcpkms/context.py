# SPDX-License-Identifier: Apache-2.0
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Cancellation and deadline tokens for KMS calls.

A Context is handed to every call made on a KeyManagementClient.  The
client is expected to give up on the call once the context is done,
either because it was cancelled or because its deadline has passed.
"""

import contextlib
import threading
import time
import weakref


class ContextError(Exception):
    pass


class Cancelled(ContextError):
    def __init__(self, message="context canceled"):
        super().__init__(message)


class DeadlineExceeded(ContextError):
    def __init__(self, message="context deadline exceeded"):
        super().__init__(message)


class Context(object):
    """
    A cancellable token with an optional deadline.

    The deadline is an absolute time.monotonic() value.  A child context
    is cancelled whenever its parent is, and never outlives the parent's
    deadline.
    """
    def __init__(self, parent=None, deadline=None):
        if parent is not None and parent.deadline is not None:
            if deadline is None or parent.deadline < deadline:
                deadline = parent.deadline
        self._deadline = deadline
        self._lock = threading.Lock()
        self._done = threading.Event()
        self._err = None
        self._children = weakref.WeakSet()
        if parent is not None:
            parent._add_child(self)

    @property
    def deadline(self):
        return self._deadline

    def _add_child(self, child):
        with self._lock:
            err = self._err
            if err is None:
                self._children.add(child)
                return
        child._cancel(err)

    def _cancel(self, err):
        with self._lock:
            if self._err is not None:
                return
            self._err = err
            children = list(self._children)
            self._children.clear()
        self._done.set()
        for child in children:
            child._cancel(err)

    def cancel(self):
        self._cancel(Cancelled)

    def cancelled(self):
        return self._err is not None

    def remaining(self):
        """Seconds left before the deadline, or None without a deadline."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def err(self):
        """Return the reason this context is done, or None."""
        err = self._err
        if err is not None:
            return err()
        if self._deadline is not None and time.monotonic() >= self._deadline:
            return DeadlineExceeded()
        return None

    def done(self):
        return self.err() is not None

    def check(self):
        err = self.err()
        if err is not None:
            raise err

    def wait(self, timeout=None):
        """Block until the context is done or timeout elapses.

        Returns True if the context is done.
        """
        remaining = self.remaining()
        if remaining is not None and (timeout is None or remaining < timeout):
            timeout = remaining
        self._done.wait(timeout)
        return self.done()

    def __repr__(self):
        return "<Context deadline={} err={!r}>".format(self._deadline,
                                                       self.err())


class _Background(Context):
    """The root context: never cancelled and without a deadline."""

    def _add_child(self, child):
        pass

    def cancel(self):
        pass

    def __repr__(self):
        return "<Context background>"


_background = _Background()


def background():
    return _background


def with_cancel(parent=None):
    return Context(parent)


def with_timeout(seconds, parent=None):
    return Context(parent, deadline=time.monotonic() + seconds)


class ReadWriteLock(object):
    """
    Readers/writer lock.  Any number of readers may hold the lock at the
    same time; a writer holds it alone.  Waiting writers block new
    readers.
    """
    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextlib.contextmanager
    def read(self):
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextlib.contextmanager
    def write(self):
        with self._cond:
            self._writers_waiting += 1
            while self._writer or self._readers:
                self._cond.wait()
            self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class ContextSlot(object):
    """A single context shared by many concurrent operations."""

    def __init__(self, ctx=None):
        self._lock = ReadWriteLock()
        self._ctx = ctx

    def get(self):
        with self._lock.read():
            ctx = self._ctx
        if ctx is None:
            return background()
        return ctx

    def set(self, ctx):
        with self._lock.write():
            self._ctx = ctx
