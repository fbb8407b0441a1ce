"""
kestrel.context
~~~~~~~~~~~~~~~

:copyright: (c) 2010-2012 by the Sentry Team, see AUTHORS for more details.
:license: BSD, see LICENSE for more details.
"""
from collections import namedtuple
from http.cookies import SimpleCookie, CookieError

from kestrel.utils.wsgi import get_environ, get_headers, get_host, is_secure

__all__ = ('RequestContext',)

# environ keys a session middleware may publish its session under
SESSION_KEYS = ('kestrel.session', 'beaker.session')


class RequestContext(namedtuple('RequestContext', [
        'secure', 'host', 'script_name', 'query_string', 'method',
        'headers', 'cookies', 'data', 'env', 'session'])):
    """
    The HTTP request an event was captured during.

    Passed explicitly to the client on every capture; nothing is read from
    global state.

    >>> context = RequestContext(host='example.com', script_name='/index')
    >>> client.captureMessage('hello', request=context)
    """
    __slots__ = ()

    def __new__(cls, secure=False, host='', script_name='', query_string='',
                method='', headers=None, cookies=None, data=None, env=None,
                session=None):
        return super(RequestContext, cls).__new__(
            cls, bool(secure), host or '', script_name or '',
            query_string or '', method or '', dict(headers or {}),
            dict(cookies or {}), data if data is not None else {},
            dict(env or {}), session or None)

    @property
    def scheme(self):
        return 'https' if self.secure else 'http'

    @property
    def url(self):
        if not self.host:
            return None
        return '%s://%s%s' % (self.scheme, self.host, self.script_name)

    @classmethod
    def from_wsgi(cls, environ, data=None):
        """
        Builds a context from a WSGI ``environ``. The request body is not
        read (it can only be consumed once), pass the parsed form as
        ``data`` instead.
        """
        cookies = {}
        try:
            parsed = SimpleCookie(environ.get('HTTP_COOKIE', ''))
        except CookieError:
            parsed = {}
        for key, morsel in parsed.items():
            cookies[key] = morsel.value

        session = None
        for key in SESSION_KEYS:
            if environ.get(key):
                session = dict(environ[key])
                break

        try:
            host = get_host(environ)
        except KeyError:
            host = ''

        return cls(
            secure=is_secure(environ),
            host=host,
            script_name=(environ.get('SCRIPT_NAME', '')
                         + environ.get('PATH_INFO', '')),
            query_string=environ.get('QUERY_STRING', ''),
            method=environ.get('REQUEST_METHOD', ''),
            headers=dict(get_headers(environ)),
            cookies=cookies,
            data=data,
            env=dict(get_environ(environ)),
            session=session,
        )
