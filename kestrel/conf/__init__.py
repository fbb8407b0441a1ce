"""
kestrel.conf
~~~~~~~~~~~~

:copyright: (c) 2010-2012 by the Sentry Team, see AUTHORS for more details.
:license: BSD, see LICENSE for more details.
"""
from collections import namedtuple

import kestrel
from kestrel.conf import defaults
from kestrel.conf.remote import RemoteConfig
from kestrel.exceptions import ConfigError

__all__ = ('ClientConfig',)

# the slice of configuration each event carries in its envelope
ENVELOPE_FIELDS = (
    'environment', 'release', 'server_name', 'logger', 'platform',
    'sdk_name', 'sdk_version', 'project',
)


def _to_bool(value):
    if isinstance(value, str):
        return value.lower() not in ('0', 'false', 'no', 'off', '')
    return bool(value)


class ClientConfig(namedtuple('ClientConfig', [
        'environment', 'release', 'server_name', 'logger', 'platform',
        'sdk_name', 'sdk_version', 'protocol_version', 'endpoint',
        'public_key', 'private_key', 'project', 'allowed_levels', 'timeout',
        'verify_ssl'])):
    """
    The frozen settings of a single client.

    Build one through ``from_options``, which resolves a DSN (or the key
    triple) and refuses incomplete credentials.
    """
    __slots__ = ()

    @classmethod
    def from_options(cls, dsn=None, public_key=None, private_key=None,
                     project=None, release=None, environment=None,
                     endpoint=None, server_name=None, logger=None,
                     platform=None, sdk_name=None, sdk_version=None,
                     protocol_version=None, allowed_levels=None,
                     timeout=None, verify_ssl=None, legacy_dsn=None):
        options = {}
        if dsn:
            remote = RemoteConfig.from_string(dsn, legacy=legacy_dsn)
            endpoint = remote.base_url
            public_key = remote.public_key
            private_key = remote.secret_key
            project = remote.project
            options = remote.options
        elif not (public_key and project):
            raise ConfigError(
                'A DSN or both public_key and project must be supplied')

        if not release:
            raise ConfigError('release must be supplied')
        if not environment:
            raise ConfigError('environment must be supplied')

        if allowed_levels is None:
            allowed_levels = defaults.LEVELS
        allowed_levels = tuple(allowed_levels)
        unknown = [level for level in allowed_levels
                   if level not in defaults.LEVELS]
        if unknown or not allowed_levels:
            raise ConfigError('Invalid allowed_levels: %r' % (unknown,))

        if timeout is None:
            timeout = options.get('timeout', defaults.TIMEOUT)
        if verify_ssl is None:
            verify_ssl = options.get('verify_ssl', True)

        try:
            timeout = float(timeout)
        except (TypeError, ValueError):
            raise ConfigError('Invalid timeout: %r' % (timeout,))

        return cls(
            environment=str(environment),
            release=str(release),
            server_name=server_name or defaults.NAME,
            logger=logger or defaults.LOGGER,
            platform=platform or defaults.PLATFORM,
            sdk_name=sdk_name or defaults.SDK_NAME,
            sdk_version=sdk_version or kestrel.VERSION,
            protocol_version=str(protocol_version or defaults.PROTOCOL_VERSION),
            endpoint=(endpoint or defaults.ENDPOINT).rstrip('/'),
            public_key=public_key,
            private_key=private_key or None,
            project=str(project),
            allowed_levels=allowed_levels,
            timeout=timeout,
            verify_ssl=_to_bool(verify_ssl),
        )

    @property
    def client_string(self):
        return '%s/%s' % (self.sdk_name, self.sdk_version)

    def envelope(self):
        return dict((k, getattr(self, k)) for k in ENVELOPE_FIELDS)
