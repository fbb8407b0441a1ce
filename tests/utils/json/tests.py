# -*- coding: utf-8 -*-

import collections
import datetime
import uuid
from decimal import Decimal

from kestrel.utils import json
from kestrel.utils.testutils import TestCase


class JSONTest(TestCase):
    def test_uuid(self):
        res = uuid.uuid4()
        assert json.dumps(res) == '"%s"' % res.hex

    def test_datetime(self):
        res = datetime.datetime(day=1, month=1, year=2011, hour=1, minute=1, second=1)
        assert json.dumps(res) == '"2011-01-01T01:01:01Z"'

    def test_set(self):
        res = set(['foo', 'bar'])
        assert json.dumps(res) in ('["foo", "bar"]', '["bar", "foo"]')

    def test_frozenset(self):
        res = frozenset(['foo', 'bar'])
        assert json.dumps(res) in ('["foo", "bar"]', '["bar", "foo"]')

    def test_bytes(self):
        assert json.dumps(b'caf\xc3\xa9') == '"caf\\u00e9"'

    def test_unknown_type(self):

        class Unknown(object):
            def __repr__(self):
                return 'Unknown object'

        obj = Unknown()
        assert json.dumps(obj) == '"Unknown object"'

    def test_decimal(self):
        d = {'decimal': Decimal('123.45')}
        assert json.dumps(d) == '{"decimal": "Decimal(\'123.45\')"}'

    def test_defaultdict(self):
        d = collections.defaultdict(list)
        d.update({'foo': 'bar'})
        assert json.dumps(d) == '{"foo": "bar"}'

    def test_tuple_keys(self):
        d = {(1, 2): "tuple_key"}
        assert json.dumps(d) == '{"(1, 2)": "tuple_key"}'

    def test_func_keys(self):
        d = {dir: "func_key"}
        assert json.dumps(d) == '{"<built-in function dir>": "func_key"}'

    def test_complex_value(self):
        d = {"complex_value": 2+1j}
        assert json.dumps(d) == '{"complex_value": "(2+1j)"}'

    def test_loads(self):
        assert json.loads('{"level": "error"}') == {'level': 'error'}

    def test_loads_invalid(self):
        with self.assertRaises(json.JSONDecodeError):
            json.loads('{')
