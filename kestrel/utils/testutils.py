"""
kestrel.utils.testutils
~~~~~~~~~~~~~~~~~~~~~~~

:copyright: (c) 2010-2013 by the Sentry Team, see AUTHORS for more details.
:license: BSD, see LICENSE for more details.
"""
from unittest import TestCase as BaseTestCase

import kestrel
from kestrel.transport.base import DeliveryOutcome

TEST_DSN = 'http://public@example.com/1'


class TestCase(BaseTestCase):
    pass


class InMemoryClient(kestrel.Client):
    """
    Keeps every event it is asked to send in ``events`` instead of
    delivering it.
    """
    def __init__(self, **kwargs):
        self.events = []
        kwargs.setdefault('dsn', TEST_DSN)
        kwargs.setdefault('release', '1.0')
        kwargs.setdefault('environment', 'test')
        super(InMemoryClient, self).__init__(**kwargs)

    def send(self, auth_header=None, detached=False, **data):
        self.events.append(data)
        if detached:
            return None
        return DeliveryOutcome(success=True, status_code=200)
