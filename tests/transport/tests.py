# -*- coding: utf-8 -*-

import mock
import requests
import responses

from kestrel.exceptions import DeliveryError, RateLimited
from kestrel.transport import DeliveryOutcome, HTTPTransport, get_store_url
from kestrel.utils.testutils import TestCase

URL = 'https://o1.ingest.example.com/api/5/store/'
HEADERS = {'X-Sentry-Auth': 'Sentry sentry_key=pub123'}


class GetStoreUrlTest(TestCase):
    def test_url(self):
        assert get_store_url('https://o1.ingest.example.com', '5') == URL

    def test_trailing_slash(self):
        assert get_store_url('https://sentry.local/app/', 1) == \
            'https://sentry.local/app/api/1/store/'


class HTTPTransportTest(TestCase):
    def setUp(self):
        self.transport = HTTPTransport(timeout=1)

    @responses.activate
    def test_success(self):
        responses.add(responses.POST, URL, status=200, json={'id': 'abc'})
        outcome = self.transport.send(URL, b'{}', HEADERS)
        assert outcome == DeliveryOutcome(success=True, status_code=200)

        request = responses.calls[0].request
        assert request.body == b'{}'
        assert request.headers['X-Sentry-Auth'] == 'Sentry sentry_key=pub123'

    @responses.activate
    def test_retry_after(self):
        responses.add(responses.POST, URL, status=429,
                      headers={'Retry-After': '30'})
        outcome = self.transport.send(URL, b'{}', HEADERS)
        assert outcome.success is False
        assert outcome.status_code == 429
        assert outcome.rate_limited is True
        assert outcome.retry_after == 30
        assert isinstance(outcome.error, RateLimited)
        assert outcome.error.retry_after == 30

    @responses.activate
    def test_429_without_retry_after(self):
        responses.add(responses.POST, URL, status=429)
        outcome = self.transport.send(URL, b'{}', HEADERS)
        assert outcome.rate_limited is True
        assert outcome.retry_after is None

    @responses.activate
    def test_rate_limits_header_on_success(self):
        responses.add(responses.POST, URL, status=200,
                      headers={'X-Sentry-Rate-Limits': '60:error:key'})
        outcome = self.transport.send(URL, b'{}', HEADERS)
        assert outcome.success is True
        assert outcome.rate_limited is True
        assert outcome.retry_after == 60
        assert outcome.error is None

    @responses.activate
    def test_rate_limits_for_other_categories_are_ignored(self):
        responses.add(responses.POST, URL, status=200,
                      headers={'X-Sentry-Rate-Limits': '60:transaction:key'})
        outcome = self.transport.send(URL, b'{}', HEADERS)
        assert outcome.success is True
        assert outcome.rate_limited is False
        assert outcome.retry_after is None

    @responses.activate
    def test_longest_window_wins(self):
        responses.add(responses.POST, URL, status=429, headers={
            'Retry-After': '10',
            'X-Sentry-Rate-Limits': '120::organization',
        })
        outcome = self.transport.send(URL, b'{}', HEADERS)
        assert outcome.retry_after == 120

    @responses.activate
    def test_server_error(self):
        responses.add(responses.POST, URL, status=500,
                      headers={'X-Sentry-Error': 'oops'})
        outcome = self.transport.send(URL, b'{}', HEADERS)
        assert outcome.success is False
        assert outcome.status_code == 500
        assert outcome.rate_limited is False
        assert isinstance(outcome.error, DeliveryError)
        assert outcome.error.code == 500
        assert outcome.error.message == 'oops'

    @responses.activate
    def test_connection_error(self):
        responses.add(responses.POST, URL,
                      body=requests.ConnectionError('refused'))
        outcome = self.transport.send(URL, b'{}', HEADERS)
        assert outcome.success is False
        assert outcome.status_code is None
        assert isinstance(outcome.error, requests.ConnectionError)

    @mock.patch('requests.post')
    def test_options_are_passed(self, post):
        post.return_value = mock.Mock(status_code=200, headers={})
        transport = HTTPTransport(timeout='3', verify_ssl=True,
                                  ca_certs='/etc/ssl/bundle.pem')
        transport.send(URL, b'{}', HEADERS)
        post.assert_called_once_with(
            URL, data=b'{}', headers=HEADERS, verify='/etc/ssl/bundle.pem',
            timeout=3.0)

    @mock.patch('requests.post')
    def test_verify_ssl_off(self, post):
        post.return_value = mock.Mock(status_code=200, headers={})
        transport = HTTPTransport(verify_ssl='0', ca_certs='/etc/ssl/b.pem')
        transport.send(URL, b'{}', HEADERS)
        assert post.call_args[1]['verify'] is False
