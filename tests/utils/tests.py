# -*- coding: utf-8 -*-

from kestrel.utils import get_auth_header
from kestrel.utils.encoding import to_unicode, truncate


class TestGetAuthHeader(object):
    def test_format(self):
        header = get_auth_header(
            protocol='7', timestamp=1328055286510,
            client='kestrel-python/1.0', api_key='pub123')
        assert header == (
            'Sentry sentry_version=7, sentry_timestamp=1328055286510, '
            'sentry_key=pub123, sentry_client=kestrel-python/1.0')

    def test_secret_is_appended(self):
        header = get_auth_header(
            protocol='7', timestamp=42, client='kestrel-python/1.0',
            api_key='foo', api_secret='bar')
        assert header.endswith(
            'sentry_client=kestrel-python/1.0, sentry_secret=bar')


class TestEncoding(object):
    def test_truncate_long_value(self):
        value = truncate('x' * 1001, 1000)
        assert len(value) == 1000
        assert value == 'x' * 997 + '...'

    def test_truncate_leaves_short_value(self):
        assert truncate('x' * 1000, 1000) == 'x' * 1000

    def test_to_unicode_bytes(self):
        assert to_unicode(b'caf\xc3\xa9') == u'café'

    def test_to_unicode_broken_str(self):
        class Broken(object):
            def __str__(self):
                raise ValueError()

        assert to_unicode(Broken()) == str(repr(Broken))
