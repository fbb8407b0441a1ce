"""
kestrel.transport.threaded
~~~~~~~~~~~~~~~~~~~~~~~~~~

:copyright: (c) 2010-2012 by the Sentry Team, see AUTHORS for more details.
:license: BSD, see LICENSE for more details.
"""
import atexit
import logging
import os
import threading
import time
from queue import Queue

from kestrel.conf import defaults
from kestrel.transport.base import AsyncTransport, DeliveryOutcome
from kestrel.transport.http import HTTPTransport

logger = logging.getLogger('kestrel.errors')


class AsyncWorker(object):
    _terminator = object()

    def __init__(self, shutdown_timeout=defaults.SHUTDOWN_TIMEOUT):
        self._queue = Queue(-1)
        self._lock = threading.Lock()
        self._thread = None
        self._thread_for_pid = None
        self.options = {
            'shutdown_timeout': shutdown_timeout,
        }
        atexit.register(self.main_thread_terminated)
        self.start()

    def is_alive(self):
        if self._thread_for_pid != os.getpid():
            return False
        return bool(self._thread and self._thread.is_alive())

    def _ensure_thread(self):
        if self.is_alive():
            return
        self.start()

    def main_thread_terminated(self):
        self._lock.acquire()
        try:
            if not self.is_alive():
                # thread not started or already stopped - nothing to do
                return

            # wake the processing thread up
            self._queue.put_nowait(self._terminator)

            timeout = self.options['shutdown_timeout']

            # wait briefly, initially
            initial_timeout = min(0.1, timeout)

            if not self._timed_queue_join(initial_timeout):
                # if that didn't work, wait a bit longer
                # NB that size is an approximation, because other threads may
                # add or remove items
                size = self._queue.qsize()

                print("Kestrel is attempting to send %i pending events"
                      % size)
                print("Waiting up to %s seconds" % timeout)

                if os.name == 'nt':
                    print("Press Ctrl-Break to quit")
                else:
                    print("Press Ctrl-C to quit")

                self._timed_queue_join(timeout - initial_timeout)

            self._thread = None

        finally:
            self._lock.release()

    def _timed_queue_join(self, timeout):
        """
        implementation of Queue.join which takes a 'timeout' argument

        returns true on success, false on timeout
        """
        deadline = time.time() + timeout
        queue = self._queue

        queue.all_tasks_done.acquire()
        try:
            while queue.unfinished_tasks:
                delay = deadline - time.time()
                if delay <= 0:
                    # timed out
                    return False

                queue.all_tasks_done.wait(timeout=delay)

            return True

        finally:
            queue.all_tasks_done.release()

    def start(self):
        """
        Starts the task thread.
        """
        self._lock.acquire()
        try:
            if not self.is_alive():
                self._thread = threading.Thread(
                    target=self._target, name="kestrel.AsyncWorker")
                self._thread.daemon = True
                self._thread.start()
                self._thread_for_pid = os.getpid()
        finally:
            self._lock.release()

    def stop(self, timeout=None):
        """
        Stops the task thread. Synchronous!
        """
        self._lock.acquire()
        try:
            if self._thread:
                self._queue.put_nowait(self._terminator)
                self._thread.join(timeout=timeout)
                self._thread = None
                self._thread_for_pid = None
        finally:
            self._lock.release()

    def queue(self, callback, *args, **kwargs):
        self._ensure_thread()
        self._queue.put_nowait((callback, args, kwargs))

    def _target(self):
        while True:
            record = self._queue.get()
            try:
                if record is self._terminator:
                    break
                callback, args, kwargs = record
                try:
                    callback(*args, **kwargs)
                except Exception:
                    logger.error('Failed processing job', exc_info=True)
            finally:
                self._queue.task_done()

            time.sleep(0)


class ThreadedHTTPTransport(AsyncTransport, HTTPTransport):
    """
    Sends inline through ``send`` or hands the request to a background
    worker through ``async_send``. Nothing is reported back to the caller
    of ``async_send``; the callbacks run on the worker thread.
    """

    def __init__(self, timeout=defaults.TIMEOUT, verify_ssl=True,
                 ca_certs=None, shutdown_timeout=defaults.SHUTDOWN_TIMEOUT):
        super(ThreadedHTTPTransport, self).__init__(
            timeout=timeout, verify_ssl=verify_ssl, ca_certs=ca_certs)
        self.shutdown_timeout = shutdown_timeout

    def get_worker(self):
        if not hasattr(self, '_worker') or not self._worker.is_alive():
            self._worker = AsyncWorker(self.shutdown_timeout)
        return self._worker

    def send_sync(self, url, data, headers, success_cb, failure_cb):
        try:
            outcome = self.send(url, data, headers)
        except Exception as exc:
            outcome = DeliveryOutcome(success=False, error=exc)

        if outcome.success:
            success_cb(outcome)
        else:
            failure_cb(outcome)

    def async_send(self, url, data, headers, success_cb, failure_cb):
        self.get_worker().queue(
            self.send_sync, url, data, headers, success_cb, failure_cb)
