from kestrel.context import RequestContext
from kestrel.utils.testutils import TestCase


class RequestContextTest(TestCase):
    def test_defaults(self):
        context = RequestContext()
        assert context.secure is False
        assert context.host == ''
        assert context.headers == {}
        assert context.data == {}
        assert context.session is None
        assert context.url is None

    def test_url(self):
        context = RequestContext(host='example.com', script_name='/a/b')
        assert context.scheme == 'http'
        assert context.url == 'http://example.com/a/b'

    def test_secure_url(self):
        context = RequestContext(secure=True, host='example.com')
        assert context.url == 'https://example.com'

    def test_from_wsgi(self):
        environ = {
            'wsgi.url_scheme': 'https',
            'HTTP_HOST': 'example.com',
            'SCRIPT_NAME': '/app',
            'PATH_INFO': '/index.cfm',
            'QUERY_STRING': 'page=2',
            'REQUEST_METHOD': 'POST',
            'HTTP_ACCEPT': 'text/html',
            'HTTP_COOKIE': 'CFID=12; CFTOKEN=abc',
            'REMOTE_ADDR': '10.0.0.1',
            'SERVER_NAME': 'web-1',
            'SERVER_PORT': '443',
            'wsgi.input': object(),
            'beaker.session': {'user': 'jane'},
        }
        context = RequestContext.from_wsgi(environ, data={'q': 'shoes'})
        assert context.url == 'https://example.com/app/index.cfm'
        assert context.query_string == 'page=2'
        assert context.method == 'POST'
        assert context.headers == {
            'Host': 'example.com',
            'Accept': 'text/html',
            'Cookie': 'CFID=12; CFTOKEN=abc',
        }
        assert context.cookies == {'CFID': '12', 'CFTOKEN': 'abc'}
        assert context.data == {'q': 'shoes'}
        assert context.env == {
            'REMOTE_ADDR': '10.0.0.1',
            'SERVER_NAME': 'web-1',
            'SERVER_PORT': '443',
        }
        assert context.session == {'user': 'jane'}

    def test_from_wsgi_without_host(self):
        context = RequestContext.from_wsgi({'PATH_INFO': '/'})
        assert context.host == ''
        assert context.url is None
