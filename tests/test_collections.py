"""Tests for elasticdata.collections — DictObject."""
from __future__ import annotations

import json

from elasticdata.collections import DictObject


class TestDictObject:
    def test_init_kwargs(self):
        obj = DictObject(_id='1', found=True)
        assert obj['_id'] == '1'
        assert obj.found is True

    def test_init_pairs(self):
        obj = DictObject([('_index', 'orders'), ('_id', '7')])
        assert obj._index == 'orders'
        assert obj['_id'] == '7'

    def test_set_via_attr(self):
        obj = DictObject()
        obj.status = 'shipped'
        assert obj['status'] == 'shipped'

    def test_set_via_item(self):
        obj = DictObject()
        obj['status'] = 'shipped'
        assert obj.status == 'shipped'

    def test_is_dict(self):
        assert isinstance(DictObject(), dict)

    def test_object_pairs_hook(self):
        data = json.loads('{"hits": {"hits": [{"_id": "1"}]}}', object_pairs_hook=DictObject)
        assert data.hits.hits[0]._id == '1'

    def test_copy_keeps_type(self):
        copied = DictObject(a=1).copy()
        assert isinstance(copied, DictObject)
        assert copied.a == 1

    def test_json_roundtrip(self):
        assert json.loads(json.dumps(DictObject(a=1))) == {'a': 1}
