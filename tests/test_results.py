"""Tests for elasticdata.results — normalize_hits and ResultSet."""
from __future__ import annotations

import pytest

from elasticdata.exceptions import ShapeError, UnexpectedResponseError
from elasticdata.results import Hit, ResultSet, normalize_hits


def _hit(id, source=None, sort=None, index='orders-1', score=1.0, doc_type='_doc'):
    hit = {'_index': index, '_type': doc_type, '_id': id, '_score': score,
           '_source': {'n': id} if source is None else source}
    if sort is not None:
        hit['sort'] = sort
    return hit


def _body(*hits):
    return {'hits': {'hits': list(hits)}}


def _columns(result):
    return [result.index, result.doc_type, result.id, result.score, result.data, result.sort]


# ── normalize_hits ─────────────────────────────────────────────────────

class TestNormalizeHits:
    def test_extracts_columns(self):
        page = normalize_hits(_body(_hit('1', sort=[10]), _hit('2', sort=[20])))
        assert page.id == ['1', '2']
        assert page.index == ['orders-1', 'orders-1']
        assert page.doc_type == ['_doc', '_doc']
        assert page.score == [1.0, 1.0]
        assert page.data == [{'n': '1'}, {'n': '2'}]
        assert page.sort == [(10,), (20,)]

    def test_missing_sort_is_none(self):
        page = normalize_hits(_body(_hit('1')))
        assert page.sort == [None]
        assert page.last_cursor is None

    def test_missing_type_and_score(self):
        page = normalize_hits(_body({'_index': 'i', '_id': '1', '_source': {}}))
        assert page.doc_type == [None]
        assert page.score == [None]

    def test_empty_hits(self):
        page = normalize_hits(_body())
        assert len(page) == 0
        assert not page

    def test_absent_hits(self):
        assert len(normalize_hits({'took': 3})) == 0

    def test_none_body(self):
        assert len(normalize_hits(None)) == 0

    def test_array_payload_raises(self):
        with pytest.raises(ShapeError):
            normalize_hits(_body(_hit('1'), _hit('2', source=[1, 2, 3])))

    def test_scalar_payload_raises(self):
        with pytest.raises(ShapeError, match="documents must be objects"):
            normalize_hits(_body(_hit('1', source='text')))

    @pytest.mark.parametrize('body', [
        {'hits': [1, 2]},
        {'hits': {'hits': {'_id': '1'}}},
        {'hits': {'hits': ['oops']}},
    ])
    def test_malformed_envelope_raises(self, body):
        with pytest.raises(UnexpectedResponseError):
            normalize_hits(body)

    def test_reserved_payload_keys_are_escaped(self):
        page = normalize_hits(_body(_hit('1', source={'_meta': 1, 'name': 'a'})))
        assert page.data == [{'xx_meta': 1, 'name': 'a'}]

    def test_last_cursor(self):
        page = normalize_hits(_body(_hit('1', sort=[1, 'a']), _hit('2', sort=[2, 'b'])))
        assert page.last_cursor == (2, 'b')


# ── ResultSet ──────────────────────────────────────────────────────────

class TestResultSet:
    def test_extend_concatenates_in_order(self):
        result = ResultSet()
        result.extend(normalize_hits(_body(_hit('1'), _hit('2'))))
        result.extend(normalize_hits(_body(_hit('3'))))
        assert result.id == ['1', '2', '3']
        assert result.total_count == 3

    def test_columns_stay_equal_after_merges(self):
        result = ResultSet()
        sizes = [3, 0, 5, 1]
        counter = 0
        for size in sizes:
            hits = [_hit(str(counter + i), sort=[counter + i]) for i in range(size)]
            counter += size
            result.extend(normalize_hits(_body(*hits)))
        assert {len(column) for column in _columns(result)} == {sum(sizes)}

    def test_extend_detects_out_of_step_columns(self):
        broken = ResultSet()
        broken.id.append('x')
        with pytest.raises(AssertionError):
            ResultSet().extend(broken)

    def test_truncate(self):
        page = normalize_hits(_body(_hit('1'), _hit('2'), _hit('3')))
        page.truncate(2)
        assert page.id == ['1', '2']
        assert {len(column) for column in _columns(page)} == {2}

    def test_hits_iteration(self):
        page = normalize_hits(_body(_hit('1', sort=[5])))
        (hit,) = list(page)
        assert hit == Hit('orders-1', '_doc', '1', 1.0, {'n': '1'}, (5,))

    def test_records(self):
        page = normalize_hits(_body(_hit('1', source={'a': 1})))
        assert page.records() == [{'xx_index': 'orders-1', 'xx_id': '1', 'xx_score': 1.0, 'a': 1}]

    def test_records_metadata_wins_over_stored_fields(self):
        page = normalize_hits(_body(_hit('1', source={'xx_id': 'fake', 'xx_index': 'other', 'a': 1})))
        (record,) = page.records()
        assert record['xx_id'] == '1'
        assert record['xx_index'] == 'orders-1'
        assert record['a'] == 1

    def test_partial_flag(self):
        result = ResultSet()
        assert not result.partial
        result.error = 'search_phase_execution_exception: boom'
        assert result.partial
        assert 'partial' in repr(result)
