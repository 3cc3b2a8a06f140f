# -*- coding: utf-8 -*-
#
# Copyright (C) 2015-2026 Dubalu LLC. All rights reserved.
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in
# all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN
# THE SOFTWARE.
#
"""Bulk write encoding and acknowledgment decoding.

A bulk body is NDJSON: for every action, one action-descriptor line
followed by one payload line, each newline-terminated::

    {"index":{"_index":"orders"}}
    {"status":"new"}
    {"update":{"_index":"orders","_id":"7","retry_on_conflict":5}}
    {"doc":{"status":"shipped"}}

The server answers with one acknowledgment item per action, in order.
``decode_bulk`` pairs them back up and reports a wire-level failure
(the call itself failed) separately from per-item failures.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from .exceptions import InvalidArgumentError, UnexpectedResponseError
from .transport import ErrorBody, Response, Success
from .utils import dumps, format_error


logger = logging.getLogger('elasticdata')

SUCCESS_STATUSES = frozenset((200, 201))
DEFAULT_RETRY_ON_CONFLICT = 5


@dataclass(frozen=True)
class IndexAction:
    """Create a new document with a server-assigned id."""

    index: str
    doc: Mapping[str, Any]

    def descriptor(self) -> dict:
        return {'index': {'xx_index': self.index}}

    def payload(self) -> Mapping[str, Any]:
        return self.doc


@dataclass(frozen=True)
class UpdateAction:
    """Partially update the document ``id`` with the fields of ``doc``."""

    index: str
    id: str
    doc: Mapping[str, Any]
    retry_on_conflict: int = DEFAULT_RETRY_ON_CONFLICT

    def descriptor(self) -> dict:
        return {'update': {
            'xx_index': self.index,
            'xx_id': self.id,
            'retry_on_conflict': self.retry_on_conflict,
        }}

    def payload(self) -> dict:
        return {'doc': self.doc}


type BulkAction = IndexAction | UpdateAction


@dataclass(frozen=True)
class BulkOutcome:
    ok: bool
    status_code: int
    error: str | None = None


@dataclass(frozen=True)
class BulkReport:
    """Result of one bulk call.

    Attributes:
        ok: The bulk request itself was accepted by the server.
        outcomes: One ``BulkOutcome`` per submitted action, same order.
        error: Request-level error message when ``ok`` is false.
    """

    ok: bool
    outcomes: tuple[BulkOutcome, ...] = field(default_factory=tuple)
    error: str | None = None

    def __len__(self) -> int:
        return len(self.outcomes)

    @property
    def failures(self) -> list[tuple[int, BulkOutcome]]:
        return [(i, outcome) for i, outcome in enumerate(self.outcomes) if not outcome.ok]

    @property
    def partial_failure(self) -> bool:
        """The call went through but at least one item was rejected."""
        return self.ok and any(not outcome.ok for outcome in self.outcomes)

    @property
    def succeeded(self) -> bool:
        return self.ok and all(outcome.ok for outcome in self.outcomes)


def encode_bulk(actions: Iterable[BulkAction]) -> str:
    """Frame ``actions`` as one NDJSON bulk body.

    Raises:
        InvalidArgumentError: If an action is of an unknown type or its
            document is not a mapping.
    """
    lines = []
    for action in actions:
        if not isinstance(action, (IndexAction, UpdateAction)):
            raise InvalidArgumentError(f"Unsupported bulk action: {type(action).__name__}")
        if not isinstance(action.doc, Mapping):
            raise InvalidArgumentError(
                f"Bulk documents must be mappings, got {type(action.doc).__name__}"
            )
        lines.append(dumps(action.descriptor()))
        lines.append(dumps(action.payload()))
    return ''.join(f'{line}\n' for line in lines)


def decode_item(item: Mapping[str, Any]) -> BulkOutcome:
    """Read the single ``{<action>: {status, error?}}`` acknowledgment."""
    if not isinstance(item, Mapping) or len(item) != 1:
        raise UnexpectedResponseError(f"Malformed bulk acknowledgment item: {item!r}")
    (result,) = item.values()
    if not isinstance(result, Mapping):
        raise UnexpectedResponseError(f"Malformed bulk acknowledgment item: {item!r}")
    try:
        status = int(result.get('status', 0))
    except (TypeError, ValueError):
        raise UnexpectedResponseError(f"Bulk item has a non-numeric status: {result.get('status')!r}") from None
    if status in SUCCESS_STATUSES:
        return BulkOutcome(ok=True, status_code=status)
    return BulkOutcome(
        ok=False,
        status_code=status,
        error=format_error(result.get('error'), status),
    )


def decode_bulk(response: Response, actions: Sequence[BulkAction]) -> BulkReport:
    """Reconcile a bulk response with the actions that produced it.

    Args:
        response: The transport's answer to the bulk request.
        actions: The submitted actions, in submission order.

    Returns:
        BulkReport: ``ok`` false with every outcome failed when the request
            was rejected as a whole; otherwise one outcome per item.

    Raises:
        UnexpectedResponseError: If the acknowledgment array is missing or
            does not line up with ``actions``.
    """
    if not isinstance(response, Success):
        if isinstance(response, ErrorBody):
            message = response.message
        else:
            message = response.reason
        outcome = BulkOutcome(ok=False, status_code=response.status_code, error=message)
        return BulkReport(ok=False, outcomes=(outcome,) * len(actions), error=message)

    items = response.body.get('items') if isinstance(response.body, Mapping) else None
    if not isinstance(items, list):
        raise UnexpectedResponseError("Bulk response has no items array", response.status_code)
    if len(items) != len(actions):
        raise UnexpectedResponseError(
            f"Bulk response has {len(items)} items for {len(actions)} actions",
            response.status_code,
        )

    outcomes = tuple(decode_item(item) for item in items)
    for position, outcome in enumerate(outcomes):
        if not outcome.ok:
            logger.warning(
                f"Bulk item {position} ({type(actions[position]).__name__} on "
                f"{actions[position].index}) failed with {outcome.status_code}: {outcome.error}"
            )
    return BulkReport(ok=True, outcomes=outcomes)
