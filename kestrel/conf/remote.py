"""
kestrel.conf.remote
~~~~~~~~~~~~~~~~~~~

:copyright: (c) 2010-2012 by the Sentry Team, see AUTHORS for more details.
:license: BSD, see LICENSE for more details.
"""
from collections import namedtuple
from urllib.parse import parse_qsl

from kestrel.exceptions import ParseError

ERR_MALFORMED = 'malformed DSN: {0} ({1})'
ERR_UNKNOWN_SCHEME = 'Unsupported DSN scheme: {0} ({1})'

SUPPORTED_SCHEMES = ('http', 'https')


Dsn = namedtuple('Dsn', [
    'scheme', 'endpoint', 'public_key', 'private_key', 'project', 'options',
])


def parse_dsn(dsn, legacy=None):
    """
    Splits a DSN into its endpoint and credentials.

    >>> parse_dsn('https://public@sentry.local/app/1').endpoint
    'https://sentry.local/app'

    ``legacy=True`` demands a ``public:private`` key pair, ``legacy=False``
    refuses one and ``None`` accepts either.
    """
    value = (dsn or '').strip()

    def fail(reason):
        return ParseError(ERR_MALFORMED.format(reason, value))

    scheme, sep, rest = value.partition('://')
    if not sep or not scheme:
        raise fail('missing scheme')
    scheme = scheme.lower()
    if scheme not in SUPPORTED_SCHEMES:
        raise ParseError(ERR_UNKNOWN_SCHEME.format(scheme, value))

    rest, _, query = rest.partition('?')
    rest = rest.split('#', 1)[0]

    # the credentials end at the last '@' ahead of the first '/'
    authority, slash, path = rest.partition('/')
    userinfo, at, host = authority.rpartition('@')
    if not at:
        raise fail('missing public key')
    if not host:
        raise fail('missing host')
    if not slash:
        raise fail('missing project')

    public_key, colon, private_key = userinfo.partition(':')
    if not public_key:
        raise fail('missing public key')
    if legacy and not private_key:
        raise fail('missing private key')
    if legacy is False and colon:
        raise fail('unexpected private key')

    path = path.rstrip('/')
    prefix, _, project = path.rpartition('/')
    if not project:
        raise fail('missing project')

    location = host + ('/' + prefix if prefix else '')

    return Dsn(
        scheme=scheme,
        endpoint='%s://%s' % (scheme, location),
        public_key=public_key,
        private_key=private_key or None,
        project=project,
        options=dict(parse_qsl(query)),
    )


class RemoteConfig(object):
    def __init__(self, base_url=None, project=None, public_key=None,
                 secret_key=None, options=None):
        if base_url:
            base_url = base_url.rstrip('/')
            store_endpoint = '%s/api/%s/store/' % (base_url, project)
        else:
            store_endpoint = None

        self.base_url = base_url
        self.project = project
        self.public_key = public_key
        self.secret_key = secret_key
        self.options = options or {}
        self.store_endpoint = store_endpoint

    def __str__(self):
        return str(self.base_url)

    def is_active(self):
        return all([self.base_url, self.project, self.public_key])

    def get_public_dsn(self):
        netloc = self.base_url.partition('://')[2]
        return '//%s@%s/%s' % (self.public_key, netloc, self.project)

    @classmethod
    def from_string(cls, value, legacy=None):
        dsn = parse_dsn(value, legacy=legacy)
        return cls(
            base_url=dsn.endpoint,
            project=dsn.project,
            public_key=dsn.public_key,
            secret_key=dsn.private_key,
            options=dsn.options,
        )
