"""
kestrel.utils.http
~~~~~~~~~~~~~~~~~~

Helpers for reading the throttling headers a store API answers with.

:copyright: (c) 2010-2012 by the Sentry Team, see AUTHORS for more details.
:license: BSD, see LICENSE for more details.
"""
import time
from email.utils import parsedate_to_datetime

# categories of a rate limit which apply to error events
EVENT_CATEGORIES = ('', 'default', 'error')


def _seconds(value):
    value = max(float(value), 0)
    if value == int(value):
        return int(value)
    return value


def parse_retry_after(value, now=None):
    """
    Returns the number of seconds a ``Retry-After`` header asks for, or
    ``None`` when it cannot be understood. Both the delta-seconds and the
    HTTP-date forms are supported.
    """
    if value is None:
        return None
    value = value.strip()
    try:
        return _seconds(value)
    except (ValueError, OverflowError):
        pass

    try:
        date = parsedate_to_datetime(value)
    except (TypeError, ValueError, IndexError):
        return None
    if now is None:
        now = time.time()
    return _seconds(date.timestamp() - now)


def parse_rate_limits(value):
    """
    Reads an ``X-Sentry-Rate-Limits`` header such as
    ``60:error;default:organization, 2700::key`` and returns the longest
    window (in seconds) covering error events. Returns ``None`` when no
    entry applies.
    """
    if not value:
        return None

    retry_after = None
    for limit in value.split(','):
        bits = limit.strip().split(':')
        try:
            seconds = _seconds(bits[0])
        except (ValueError, OverflowError):
            continue
        categories = bits[1].split(';') if len(bits) > 1 else ['']
        if not any(c.strip() in EVENT_CATEGORIES for c in categories):
            continue
        if retry_after is None or seconds > retry_after:
            retry_after = seconds
    return retry_after
