"""
kestrel.transport.http
~~~~~~~~~~~~~~~~~~~~~~

:copyright: (c) 2010-2012 by the Sentry Team, see AUTHORS for more details.
:license: BSD, see LICENSE for more details.
"""
import requests

from kestrel.conf import defaults
from kestrel.exceptions import DeliveryError, RateLimited
from kestrel.transport.base import DeliveryOutcome, Transport
from kestrel.utils.http import parse_rate_limits, parse_retry_after


def get_store_url(endpoint, project):
    return '%s/api/%s/store/' % (endpoint.rstrip('/'), project)


class HTTPTransport(Transport):

    def __init__(self, timeout=defaults.TIMEOUT, verify_ssl=True,
                 ca_certs=None):
        if isinstance(timeout, str):
            timeout = float(timeout)
        if isinstance(verify_ssl, str):
            verify_ssl = bool(int(verify_ssl))

        self.timeout = timeout
        self.verify_ssl = verify_ssl
        self.ca_certs = ca_certs

    def send(self, url, data, headers):
        """
        Sends a request to a remote webserver using HTTP POST.
        """
        verify = self.verify_ssl
        if verify and self.ca_certs:
            # If SSL verification is enabled use the provided CA bundle to
            # perform the verification.
            verify = self.ca_certs

        try:
            response = requests.post(url, data=data, headers=headers,
                                     verify=verify, timeout=self.timeout)
        except requests.RequestException as exc:
            return DeliveryOutcome(success=False, error=exc)
        return self.get_outcome(response)

    def get_outcome(self, response):
        code = response.status_code
        headers = response.headers

        rate_limited = False
        retry_after = None
        if code == 429:
            rate_limited = True
            retry_after = parse_retry_after(headers.get('retry-after'))

        # quotas are announced on any response, not just on a 429
        limits = headers.get('x-sentry-rate-limits')
        window = parse_rate_limits(limits)
        if window is not None:
            rate_limited = True
            if retry_after is None or window > retry_after:
                retry_after = window

        success = 200 <= code < 300
        error = None
        if not success:
            msg = headers.get('x-sentry-error') or response.reason
            if code == 429:
                error = RateLimited(msg, retry_after or 0, code)
            else:
                error = DeliveryError(msg, code)

        return DeliveryOutcome(
            success=success,
            status_code=code,
            retry_after=retry_after,
            rate_limited=rate_limited,
            error=error,
        )
