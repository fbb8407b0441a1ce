"""
kestrel.transport
~~~~~~~~~~~~~~~~~

:copyright: (c) 2010-2012 by the Sentry Team, see AUTHORS for more details.
:license: BSD, see LICENSE for more details.
"""
from kestrel.transport.base import AsyncTransport, DeliveryOutcome, Transport  # NOQA
from kestrel.transport.http import HTTPTransport, get_store_url  # NOQA
from kestrel.transport.threaded import AsyncWorker, ThreadedHTTPTransport  # NOQA
