"""Tests for elasticdata.bulk — NDJSON framing and acknowledgment decoding."""
from __future__ import annotations

import json
import logging

import pytest

from elasticdata.bulk import (
    BulkOutcome,
    BulkReport,
    IndexAction,
    UpdateAction,
    decode_bulk,
    decode_item,
    encode_bulk,
)
from elasticdata.exceptions import InvalidArgumentError, UnexpectedResponseError
from elasticdata.transport import ErrorBody, Success, TransportFailure


def _ack(action, status, error=None):
    result = {'_index': 'orders', 'status': status}
    if error is not None:
        result['error'] = error
    return {action: result}


# ── encode_bulk ────────────────────────────────────────────────────────

class TestEncodeBulk:
    def test_index_action_lines(self):
        body = encode_bulk([IndexAction('orders', {'status': 'new'})])
        assert body == '{"index":{"_index":"orders"}}\n{"status":"new"}\n'

    def test_update_action_lines(self):
        body = encode_bulk([UpdateAction('orders', '7', {'status': 'paid'})])
        lines = body.splitlines()
        assert json.loads(lines[0]) == {
            'update': {'_index': 'orders', '_id': '7', 'retry_on_conflict': 5},
        }
        assert json.loads(lines[1]) == {'doc': {'status': 'paid'}}

    def test_custom_retry_on_conflict(self):
        body = encode_bulk([UpdateAction('orders', '7', {}, retry_on_conflict=2)])
        assert json.loads(body.splitlines()[0])['update']['retry_on_conflict'] == 2

    def test_two_lines_per_action_in_order(self):
        actions = [
            IndexAction('orders', {'n': 1}),
            UpdateAction('orders', 'a', {'n': 2}),
            IndexAction('orders', {'n': 3}),
        ]
        body = encode_bulk(actions)
        assert body.endswith('\n')
        lines = body.splitlines()
        assert len(lines) == 6
        assert [json.loads(line) for line in lines[1::2]] == [
            {'n': 1}, {'doc': {'n': 2}}, {'n': 3},
        ]

    def test_escaped_document_fields(self):
        body = encode_bulk([IndexAction('orders', {'xx_routing_hint': 'a', 'n': 1})])
        assert json.loads(body.splitlines()[1]) == {'_routing_hint': 'a', 'n': 1}

    def test_newlines_in_values_stay_escaped(self):
        body = encode_bulk([IndexAction('orders', {'text': 'a\nb'})])
        assert len(body.splitlines()) == 2

    def test_empty(self):
        assert encode_bulk([]) == ''

    def test_non_mapping_document_raises(self):
        with pytest.raises(InvalidArgumentError, match="must be mappings"):
            encode_bulk([IndexAction('orders', ['not', 'a', 'doc'])])

    def test_unknown_action_raises(self):
        with pytest.raises(InvalidArgumentError):
            encode_bulk([{'index': {}}])


# ── decode_item ────────────────────────────────────────────────────────

class TestDecodeItem:
    def test_ok(self):
        assert decode_item(_ack('index', 201)) == BulkOutcome(ok=True, status_code=201)

    def test_updated(self):
        assert decode_item(_ack('update', 200)).ok

    def test_failure_with_error(self):
        outcome = decode_item(_ack('update', 404, {'type': 'document_missing_exception',
                                                   'reason': '[7]: document missing'}))
        assert not outcome.ok
        assert outcome.status_code == 404
        assert outcome.error == 'document_missing_exception: [7]: document missing'

    def test_failure_without_error(self):
        outcome = decode_item(_ack('index', 429))
        assert outcome.error == 'HTTP 429'

    def test_malformed_item(self):
        with pytest.raises(UnexpectedResponseError):
            decode_item({'index': {'status': 201}, 'update': {'status': 200}})

    def test_non_object_result(self):
        with pytest.raises(UnexpectedResponseError):
            decode_item({'index': 'oops'})

    def test_non_numeric_status(self):
        with pytest.raises(UnexpectedResponseError, match="non-numeric status"):
            decode_item({'index': {'status': 'created'}})


# ── decode_bulk ────────────────────────────────────────────────────────

class TestDecodeBulk:
    def setup_method(self):
        self.actions = [
            IndexAction('orders', {'n': 1}),
            IndexAction('orders', {'n': 2}),
            IndexAction('orders', {'n': 3}),
        ]

    def test_all_success(self):
        body = {'errors': False, 'items': [_ack('index', 201) for _ in self.actions]}
        report = decode_bulk(Success(200, body), self.actions)
        assert report.ok
        assert len(report) == 3
        assert all(outcome.ok for outcome in report.outcomes)
        assert report.succeeded
        assert not report.partial_failure

    def test_encode_then_decode_all_success(self):
        actions = [IndexAction('orders', {'n': i}) for i in range(4)]
        actions.append(UpdateAction('orders', 'x', {'n': 9}))
        lines = encode_bulk(actions).splitlines()
        items = [{next(iter(json.loads(line))): {'status': 200}} for line in lines[0::2]]
        report = decode_bulk(Success(200, {'items': items}), actions)
        assert len(report.outcomes) == len(actions)
        assert report.succeeded

    def test_partial_failure_scenario(self, caplog):
        body = {'errors': True, 'items': [
            _ack('index', 201),
            _ack('index', 400, {'type': 'mapper_parsing_exception', 'reason': 'bad'}),
            _ack('index', 201),
        ]}
        with caplog.at_level(logging.WARNING, logger='elasticdata'):
            report = decode_bulk(Success(200, body), self.actions)
        assert report.ok
        assert [outcome.ok for outcome in report.outcomes] == [True, False, True]
        assert report.outcomes[1].error is not None
        assert report.partial_failure
        assert not report.succeeded
        assert [position for position, _ in report.failures] == [1]
        assert any('Bulk item 1' in r.message for r in caplog.records)

    def test_wire_failure_with_error_body(self):
        response = ErrorBody(400, 'illegal_argument_exception: bad bulk', {'error': {}})
        report = decode_bulk(response, self.actions)
        assert not report.ok
        assert not report.partial_failure
        assert len(report.outcomes) == 3
        assert all(not o.ok and o.status_code == 400 for o in report.outcomes)
        assert report.error == 'illegal_argument_exception: bad bulk'

    def test_wire_failure_without_body(self):
        report = decode_bulk(TransportFailure(502, 'HTTP 502'), self.actions)
        assert not report.ok
        assert report.error == 'HTTP 502'
        assert len(report.outcomes) == 3

    def test_length_mismatch_raises(self):
        body = {'items': [_ack('index', 201)]}
        with pytest.raises(UnexpectedResponseError, match="1 items for 3 actions"):
            decode_bulk(Success(200, body), self.actions)

    def test_missing_items_raises(self):
        with pytest.raises(UnexpectedResponseError):
            decode_bulk(Success(200, {'took': 1}), self.actions)


class TestBulkReport:
    def test_empty_report(self):
        report = BulkReport(ok=True)
        assert report.succeeded
        assert report.failures == []
