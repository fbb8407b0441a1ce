"""
kestrel.retry
~~~~~~~~~~~~~

:copyright: (c) 2010-2012 by the Sentry Team, see AUTHORS for more details.
:license: BSD, see LICENSE for more details.
"""
import logging
import random
import time
import uuid

__all__ = ('RetryPolicy',)

logger = logging.getLogger('kestrel.errors')


class RetryPolicy(object):
    """
    Re-runs a capture call while its inline delivery fails.

    Retries are bounded by ``max_attempts`` and spaced with jittered
    exponential backoff. Rate limited outcomes and detached sends are never
    retried. Every attempt reuses one event id so the server can drop
    duplicates.

    >>> policy = RetryPolicy(max_attempts=3)
    >>> outcome = policy.call(client.captureMessage, 'disk full',
    >>>                       level='error')
    """

    def __init__(self, max_attempts=3, base_delay=0.1, max_delay=2.0,
                 sleep=time.sleep):
        if max_attempts < 1:
            raise ValueError('max_attempts must be at least 1')
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.sleep = sleep

    def backoff_delay(self, attempt):
        """Calculate exponential backoff delay with jitter.

        Base delay doubles each attempt, capped at ``max_delay``, then
        multiplied by a random jitter factor between 0.8 and 1.2.
        """
        base = self.base_delay * (2 ** attempt)
        capped = min(base, self.max_delay)
        jitter = random.uniform(0.8, 1.2)
        return capped * jitter

    def call(self, func, *args, **kwargs):
        kwargs.setdefault('event_id', uuid.uuid4().hex)

        outcome = None
        for attempt in range(self.max_attempts):
            outcome = func(*args, **kwargs)
            if outcome is None or outcome.success or outcome.rate_limited:
                return outcome

            if attempt + 1 < self.max_attempts:
                delay = self.backoff_delay(attempt)
                logger.warning(
                    'Send attempt %d/%d failed (%s), retrying in %.2fs',
                    attempt + 1, self.max_attempts, outcome.error, delay)
                self.sleep(delay)

        logger.error('Send failed after %d attempts: %s',
                     self.max_attempts, outcome.error)
        return outcome
