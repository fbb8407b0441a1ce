"""
kestrel.transport.base
~~~~~~~~~~~~~~~~~~~~~~

:copyright: (c) 2010-2012 by the Sentry Team, see AUTHORS for more details.
:license: BSD, see LICENSE for more details.
"""
from collections import namedtuple


class DeliveryOutcome(namedtuple('DeliveryOutcome', [
        'success', 'status_code', 'retry_after', 'rate_limited', 'error',
        'event_id'])):
    """
    What became of one delivery attempt.

    ``status_code`` is ``None`` when no response was received, and
    ``error`` then holds the exception raised by the HTTP layer.
    """
    __slots__ = ()

    def __new__(cls, success, status_code=None, retry_after=None,
                rate_limited=False, error=None, event_id=None):
        return super(DeliveryOutcome, cls).__new__(
            cls, success, status_code, retry_after, rate_limited, error,
            event_id)


class Transport(object):
    """
    All transport implementations need to subclass this class

    You must implement a send method (or an async_send method if
    sub-classing AsyncTransport) which returns a ``DeliveryOutcome``.
    """

    is_async = False

    def send(self, url, data, headers):
        """
        You need to override this to do something with the actual
        data. Usually - this is sending to a server
        """
        raise NotImplementedError


class AsyncTransport(Transport):
    """
    All asynchronous transport implementations should subclass this
    class.

    You must implement a async_send method.
    """

    is_async = True

    def async_send(self, url, data, headers, success_cb, failure_cb):
        """
        Override this method for asynchronous transports. Call
        `success_cb(outcome)` if the send succeeds or `failure_cb(outcome)`
        if the send fails.
        """
        raise NotImplementedError
