import time
from email.utils import formatdate

from kestrel.utils.http import parse_rate_limits, parse_retry_after


class TestParseRetryAfter(object):
    def test_seconds(self):
        assert parse_retry_after('30') == 30

    def test_fractional_seconds(self):
        assert parse_retry_after('1.5') == 1.5

    def test_missing(self):
        assert parse_retry_after(None) is None

    def test_garbage(self):
        assert parse_retry_after('soon') is None

    def test_negative_is_clamped(self):
        assert parse_retry_after('-4') == 0

    def test_http_date(self):
        now = time.time()
        value = formatdate(now + 120, usegmt=True)
        assert 118 <= parse_retry_after(value, now=now) <= 121


class TestParseRateLimits(object):
    def test_empty(self):
        assert parse_rate_limits('') is None
        assert parse_rate_limits(None) is None

    def test_error_category(self):
        assert parse_rate_limits('60:error:key') == 60

    def test_all_categories(self):
        assert parse_rate_limits('2700::organization') == 2700

    def test_longest_applicable_window(self):
        value = '60:error;default:key, 120:transaction:org, 90::project'
        assert parse_rate_limits(value) == 90

    def test_no_applicable_category(self):
        assert parse_rate_limits('60:transaction:key') is None
