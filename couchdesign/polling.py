# -*- coding: utf-8 -*-
#
# Copyright (C) 2009 Christopher Lenz
# All rights reserved.
#
# This software is licensed as described in the file COPYING, which
# you should have received as part of this distribution.

"""Waiting for the effects of writes that propagate asynchronously.

Some results only show up some time after the request that caused them, such
as the documents of a ``dbcopy`` database, which the server fills while it
builds the index of a view, or documents arriving through replication. A
`Poller` repeats a check until its result is good enough or time runs out:

>>> from couchdesign.tests.testutil import FakeClock
>>> clock = FakeClock()
>>> attempts = iter([0, 1, 3, 5])
>>> wait_for(lambda: next(attempts), lambda count: count >= 3,
...          timeout=10, interval=1, clock=clock, sleep=clock.sleep)
3
>>> clock.now
2

Running out of time is not an error; the last result is returned and it is up
to the caller to decide whether it is good enough:

>>> clock = FakeClock()
>>> wait_for(lambda: [], bool, timeout=5, interval=2,
...          clock=clock, sleep=clock.sleep)
[]
>>> clock.now
5
"""

import logging
import threading
import time

from couchdesign import http
from couchdesign.errors import CancellationError

__all__ = ['Poller', 'wait_for', 'database_exists', 'all_doc_ids',
           'at_least', 'index_idle']
__docformat__ = 'restructuredtext en'

log = logging.getLogger('couchdesign.polling')

DEFAULT_TIMEOUT = 120
DEFAULT_INTERVAL = 1


class Poller(object):
    """Repeats a check until a condition holds or a timeout elapses.

    The poller holds no connection or lock between checks; each check makes
    its own requests. `cancel()` may be called from another thread and wakes
    the poller up immediately.
    """

    def __init__(self, timeout=DEFAULT_TIMEOUT, interval=DEFAULT_INTERVAL,
                 clock=None, sleep=None):
        """Initialize the poller.

        :param timeout: how long to keep checking, in seconds
        :param interval: time between two checks, in seconds
        :param clock: function returning the current time in seconds,
                      defaults to `time.monotonic`
        :param sleep: function used to wait between checks; defaults to
                      waiting on the cancellation event
        """
        if timeout < 0 or interval <= 0:
            raise ValueError('timeout must not be negative and interval must '
                             'be positive')
        self.timeout = timeout
        self.interval = interval
        self.clock = clock or time.monotonic
        self._sleep = sleep
        self._cancelled = threading.Event()

    def __repr__(self):
        return '<%s timeout=%r interval=%r>' % (type(self).__name__,
                                               self.timeout, self.interval)

    @property
    def cancelled(self):
        return self._cancelled.is_set()

    def cancel(self):
        """Abort a wait in progress, or the next one, which raises
        `CancellationError`. The cancellation is used up by that wait, so the
        poller can be used again afterwards.
        """
        self._cancelled.set()

    def sleep(self, seconds):
        try:
            if self._sleep is None:
                interrupted = self._cancelled.wait(seconds)
            else:
                self._sleep(seconds)
                interrupted = self._cancelled.is_set()
        except KeyboardInterrupt:
            raise CancellationError('interrupted while waiting')
        if interrupted:
            self._cancelled.clear()
            raise CancellationError('wait cancelled')

    def wait_for(self, check, is_satisfied=bool):
        """Call `check` until `is_satisfied` accepts its result.

        `check` is called immediately, then every `interval` seconds. When
        `timeout` seconds have passed the last result is returned, satisfied
        or not.

        :param check: function without arguments producing the value to test
        :param is_satisfied: predicate applied to each value
        :return: the first satisfying value, or the last value seen
        :raise CancellationError: if the wait was cancelled or interrupted
        """
        deadline = self.clock() + self.timeout
        attempts = 1
        value = check()
        while not is_satisfied(value):
            remaining = deadline - self.clock()
            if remaining <= 0:
                log.warning('Condition still not met after %d attempt(s) in '
                            '%s seconds', attempts, self.timeout)
                return value
            self.sleep(min(self.interval, remaining))
            attempts += 1
            value = check()
            log.debug('Attempt %d: %r', attempts, value)
        return value


def wait_for(check, is_satisfied=bool, timeout=DEFAULT_TIMEOUT,
             interval=DEFAULT_INTERVAL, clock=None, sleep=None):
    """Shortcut for ``Poller(timeout, interval, clock, sleep).wait_for()``."""
    poller = Poller(timeout, interval, clock=clock, sleep=sleep)
    return poller.wait_for(check, is_satisfied)


def database_exists(server, name):
    """Return a check telling whether the named database exists."""
    def check():
        return name in server
    return check


def all_doc_ids(server, name):
    """Return a check listing the document IDs of the named database, or
    producing `None` while the database does not exist.
    """
    def check():
        try:
            db = server[name]
            request = db.all_docs_request_builder().build()
            return request.get_response().doc_ids()
        except http.ResourceNotFound:
            return None
    return check


def at_least(count):
    """Return a predicate accepting sequences of at least `count` items."""
    def is_satisfied(value):
        return value is not None and len(value) >= count
    return is_satisfied


def index_idle(manager, id):
    """Return a check telling whether the index of a design document is not
    being updated, based on the ``_info`` of the design document.
    """
    def check():
        info = manager.info(id)
        return not info.get('view_index', {}).get('updater_running', False)
    return check

