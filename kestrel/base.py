"""
kestrel.base
~~~~~~~~~~~~

:copyright: (c) 2010-2012 by the Sentry Team, see AUTHORS for more details.
:license: BSD, see LICENSE for more details.
"""
import logging
import os
import threading
import time

from kestrel.conf import ClientConfig
from kestrel.conf.remote import RemoteConfig
from kestrel.exceptions import DeliveryError, RateLimited, ValidationError
from kestrel.transport.base import DeliveryOutcome
from kestrel.transport.http import get_store_url
from kestrel.transport.threaded import ThreadedHTTPTransport
from kestrel.utils import json, get_auth_header

__all__ = ('Client',)

DEFAULT_TRANSPORT = ThreadedHTTPTransport


class ModuleProxyCache(dict):
    def __missing__(self, key):
        module, class_name = key.rsplit('.', 1)

        handler = getattr(__import__(
            module, {}, {}, [class_name]), class_name)

        self[key] = handler

        return handler


class ClientState(object):
    """
    Tracks whether the store API told us to back off.

    Only rate limits open a window; ordinary delivery failures are
    reported to the caller and leave the client online.
    """
    ONLINE = 1
    ERROR = 0

    def __init__(self):
        self._lock = threading.Lock()
        self.status = self.ONLINE
        self.last_check = None
        self.retry_number = 0
        self.retry_after = 0

    def interval(self):
        return self.retry_after or min(self.retry_number, 6) ** 2

    def should_try(self):
        if self.status == self.ONLINE:
            return True

        if time.time() - self.last_check > self.interval():
            return True

        return False

    def remaining(self):
        if self.status == self.ONLINE:
            return 0
        return max(self.interval() - (time.time() - self.last_check), 0)

    def set_fail(self, retry_after=0):
        with self._lock:
            self.status = self.ERROR
            self.retry_number += 1
            self.last_check = time.time()
            self.retry_after = retry_after or 0

    def set_success(self):
        with self._lock:
            self.status = self.ONLINE
            self.last_check = None
            self.retry_number = 0
            self.retry_after = 0

    def did_fail(self):
        return self.status == self.ERROR


class Client(object):
    """
    The Kestrel client, which turns messages and exceptions into events
    and delivers them to a Sentry-compatible store API.

    Will read default configuration from the environment variables
    ``SENTRY_DSN``, ``SENTRY_RELEASE`` and ``SENTRY_ENVIRONMENT`` if
    available.

    >>> from kestrel import Client

    >>> # Specify a DSN explicitly
    >>> client = Client(dsn='https://public_key@sentry.local/project_id',
    >>>                 release='1.0.2', environment='production')

    >>> # Or the keys
    >>> client = Client(public_key='public_key', project='42',
    >>>                 release='1.0.2', environment='production')

    >>> # Record an exception
    >>> try:
    >>>     1/0
    >>> except ZeroDivisionError:
    >>>     outcome = client.captureException()
    >>>     print("Exception caught; reference is %s" % outcome.event_id)
    """
    logger = logging.getLogger('kestrel')

    def __init__(self, dsn=None, public_key=None, private_key=None,
                 project=None, release=None, environment=None,
                 transport=None, failure_sink=None, **options):
        self.configure_logging()

        cls = self.__class__
        self.state = ClientState()
        self.logger = logging.getLogger(
            '%s.%s' % (cls.__module__, cls.__name__))
        self.error_logger = logging.getLogger('kestrel.errors')

        if not dsn and not public_key and os.environ.get('SENTRY_DSN'):
            msg = "Configuring Kestrel from environment variable 'SENTRY_DSN'"
            self.logger.debug(msg)
            dsn = os.environ['SENTRY_DSN']
        if release is None:
            release = os.environ.get('SENTRY_RELEASE')
        if environment is None:
            environment = os.environ.get('SENTRY_ENVIRONMENT')

        self.config = ClientConfig.from_options(
            dsn=dsn, public_key=public_key, private_key=private_key,
            project=project, release=release, environment=environment,
            **options)
        self.logger.debug(
            'Configuring Kestrel for host: %s', self.config.endpoint)

        self.store_endpoint = get_store_url(
            self.config.endpoint, self.config.project)
        self.transport = (transport or DEFAULT_TRANSPORT)(
            timeout=self.config.timeout, verify_ssl=self.config.verify_ssl)
        self.failure_sink = failure_sink

        self.module_cache = ModuleProxyCache()

    def configure_logging(self):
        logger = logging.getLogger('kestrel')
        if logger.handlers:
            return
        logger.addHandler(logging.StreamHandler())
        logger.setLevel(logging.INFO)

    def get_handler(self, name):
        return self.module_cache[name](**self.config.envelope())

    def get_public_dsn(self, scheme=None):
        """
        Returns a public DSN which is consumable by browser clients

        >>> # Return scheme-less DSN
        >>> print(client.get_public_dsn())

        >>> # Specify a scheme to use (http or https)
        >>> print(client.get_public_dsn('https'))
        """
        url = RemoteConfig(
            base_url=self.config.endpoint,
            project=self.config.project,
            public_key=self.config.public_key,
        ).get_public_dsn()
        if not scheme:
            return url
        return '%s:%s' % (scheme, url)

    def validate_level(self, level):
        if level not in self.config.allowed_levels:
            raise ValidationError('Invalid level %r, expected one of %s' % (
                level, ', '.join(self.config.allowed_levels)))

    def build_msg(self, data, path='', event_id=None, request=None,
                  user=None, date=None):
        """
        Stamps the envelope fields onto an event built by one of the
        ``kestrel.events`` handlers.
        """
        handler = self.get_handler('kestrel.events.BaseEvent')
        return handler.decorate(
            data, path=path, event_id=event_id, request=request, user=user,
            date=date)

    def capture(self, data, path='', event_id=None, request=None, user=None,
                detached=False, date=None):
        """
        Decorates ``data`` with the envelope and sends it.

        In inline mode the ``DeliveryOutcome`` of the request is returned,
        with the ``event_id`` filled in. Detached sends are queued on the
        transport's worker and return ``None``; their failures are logged
        and handed to ``failure_sink`` but never raised.

        :param data: an event built by ``kestrel.events.Message`` or
                     ``kestrel.events.Exception``
        :param path: the transaction, defaults to the url of ``request``
        :param event_id: a 32-length unique string identifying this event
        :param request: the ``RequestContext`` the event happened in
        :param user: a mapping describing the current user
        :param detached: send on the background worker
        """
        self.validate_level(data.get('level'))

        data = self.build_msg(
            data, path=path, event_id=event_id, request=request, user=user,
            date=date)

        outcome = self.send(detached=detached, **data)
        if outcome is None:
            return None
        return outcome._replace(event_id=data['event_id'])

    def _get_log_message(self, data):
        # decode message so we can show the actual event
        try:
            data = self.decode(data)
        except ValueError:
            message = '<failed decoding data>'
        else:
            message = data.pop('message', '<no message value>')
        return message

    def _successful_send(self, outcome):
        if outcome.rate_limited:
            self.state.set_fail(outcome.retry_after)
        else:
            self.state.set_success()

    def _failed_send(self, outcome, url, data, detached=False):
        error = outcome.error
        if error is None:
            error = DeliveryError('Unknown error', outcome.status_code or 0)

        if isinstance(error, RateLimited) or outcome.rate_limited:
            self.error_logger.warning(
                'Sentry responded with an API error: %s(%s)',
                type(error).__name__, error)
        else:
            self.error_logger.error(
                'Unable to reach Sentry log server: %s (url: %s)', error, url,
                extra={'data': {'remote_url': url}})

        message = self._get_log_message(data)
        self.error_logger.error('Failed to submit message: %r', message)

        if outcome.rate_limited:
            self.state.set_fail(outcome.retry_after)

        if detached and self.failure_sink is not None:
            try:
                self.failure_sink(error, url)
            except Exception:
                self.error_logger.error(
                    'Failure sink raised an exception', exc_info=True)

    def send_remote(self, url, data, headers=None, detached=False):
        if headers is None:
            headers = {}

        if not self.state.should_try():
            message = self._get_log_message(data)
            self.error_logger.error(
                'Rate limited for another %.1f seconds, dropping: %r',
                self.state.remaining(), message)
            if detached:
                return None
            return DeliveryOutcome(
                success=False,
                retry_after=self.state.remaining(),
                rate_limited=True,
                error=RateLimited('Rate limited', self.state.remaining()),
            )

        self.logger.debug('Sending message of length %d to %s', len(data), url)

        def failed_send(outcome):
            self._failed_send(outcome, url, data, detached=detached)

        if detached and self.transport.is_async:
            self.transport.async_send(
                url, data, headers, self._successful_send, failed_send)
            return None

        outcome = self.transport.send(url, data, headers)
        if outcome.success:
            self._successful_send(outcome)
        else:
            failed_send(outcome)

        if detached:
            return None
        return outcome

    def send(self, auth_header=None, detached=False, **data):
        """
        Serializes the message and passes the payload onto ``send_encoded``.
        """
        message = self.encode(data)

        return self.send_encoded(
            message, auth_header=auth_header, detached=detached)

    def get_auth_header(self, timestamp=None):
        if timestamp is None:
            timestamp = int(time.time() * 1000)
        return get_auth_header(
            protocol=self.config.protocol_version,
            timestamp=timestamp,
            client=self.config.client_string,
            api_key=self.config.public_key,
            api_secret=self.config.private_key,
        )

    def send_encoded(self, message, auth_header=None, detached=False):
        """
        Given an already serialized message, signs the message and passes the
        payload off to ``send_remote``.
        """
        if not auth_header:
            auth_header = self.get_auth_header()

        headers = {
            'User-Agent': self.config.client_string,
            'X-Sentry-Auth': auth_header,
            'Content-Type': 'application/json',
        }

        return self.send_remote(
            url=self.store_endpoint, data=message, headers=headers,
            detached=detached)

    def encode(self, data):
        """
        Serializes ``data`` into a raw string.
        """
        return json.dumps(data).encode('utf8')

    def decode(self, data):
        """
        Unserializes a string, ``data``.
        """
        return json.loads(data.decode('utf8'))

    def captureMessage(self, message, level='info', path='', params=None,
                       user_info=None, request=None, use_detached=False,
                       event_id=None):
        """
        Creates an event from ``message``.

        >>> client.captureMessage('My event just happened!')
        """
        self.validate_level(level)
        data = self.get_handler('kestrel.events.Message').capture(
            message, level=level, params=params)
        return self.capture(
            data, path=path, event_id=event_id, request=request,
            user=user_info, detached=use_detached)

    def captureException(self, exception=None, level='error', path='',
                         one_line_stacktrace=False, show_raw_stacktrace=False,
                         strip_tabs=False, additional_data=None,
                         user_info=None, request=None, use_detached=False,
                         event_id=None):
        """
        Creates an event from an exception.

        >>> try:
        >>>     exc_info = sys.exc_info()
        >>>     client.captureException(exc_info)
        >>> finally:
        >>>     del exc_info

        If ``exception`` is not provided, or is set to True, then this method
        will perform the ``exc_info = sys.exc_info()`` and the requisite
        clean-up for you. It may also be an exception instance, an
        ``ExceptionInfo`` or a mapping of the ``ExceptionInfo`` fields.
        """
        self.validate_level(level)
        data = self.get_handler('kestrel.events.Exception').capture(
            exception, level=level, one_line_stacktrace=one_line_stacktrace,
            show_raw_stacktrace=show_raw_stacktrace, strip_tabs=strip_tabs,
            additional_data=additional_data)
        return self.capture(
            data, path=path, event_id=event_id, request=request,
            user=user_info, detached=use_detached)
