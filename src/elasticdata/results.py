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
"""Search response normalization.

``normalize_hits`` turns one page of ``hits.hits`` into a columnar
``ResultSet``; the pagination engine folds pages together with
``ResultSet.extend``.
"""
from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from .exceptions import ShapeError, UnexpectedResponseError
from .utils import decode_field_names


COLUMNS = ('index', 'doc_type', 'id', 'score', 'data', 'sort')


@dataclass(frozen=True)
class Hit:
    """One retrieved document and its search metadata."""

    index: str
    doc_type: str | None
    id: str
    score: float | None
    payload: Mapping[str, Any]
    sort_cursor: tuple | None = None


class ResultSet:
    """Hits accumulated across pages, stored column by column.

    Every column is an append-only list and all of them always have the
    same length. ``data`` holds the document payloads and ``sort`` the
    per-hit sort cursor (``None`` when the server sent none).

    Attributes:
        error: Diagnostic message when the retrieval stopped early on a
            server error; the hits gathered before it are kept.
    """

    def __init__(self) -> None:
        self.index: list[str] = []
        self.doc_type: list[str | None] = []
        self.id: list[str] = []
        self.score: list[float | None] = []
        self.data: list[Mapping[str, Any]] = []
        self.sort: list[tuple | None] = []
        self.error: str | None = None

    def __len__(self) -> int:
        return len(self.id)

    def __bool__(self) -> bool:
        return bool(self.id)

    def __iter__(self) -> Iterator[Hit]:
        return self.hits()

    def __repr__(self) -> str:
        partial = ' partial' if self.partial else ''
        return f'<ResultSet {len(self)} hits{partial}>'

    @property
    def total_count(self) -> int:
        return len(self)

    @property
    def partial(self) -> bool:
        return self.error is not None

    @property
    def last_cursor(self) -> tuple | None:
        """Sort cursor of the last hit, the next page's ``search_after``."""
        return self.sort[-1] if self.sort else None

    def append(self, hit: Hit) -> None:
        self.index.append(hit.index)
        self.doc_type.append(hit.doc_type)
        self.id.append(hit.id)
        self.score.append(hit.score)
        self.data.append(hit.payload)
        self.sort.append(hit.sort_cursor)

    def extend(self, other: ResultSet) -> ResultSet:
        """Append every column of ``other`` after this set's rows."""
        for name in COLUMNS:
            getattr(self, name).extend(getattr(other, name))
        lengths = {len(getattr(self, name)) for name in COLUMNS}
        assert len(lengths) == 1, f"ResultSet columns out of step: {lengths}"
        return self

    def truncate(self, size: int) -> ResultSet:
        """Drop every row past ``size``."""
        for name in COLUMNS:
            del getattr(self, name)[size:]
        return self

    def hits(self) -> Iterator[Hit]:
        for row in zip(*(getattr(self, name) for name in COLUMNS)):
            yield Hit(*row)

    def records(self) -> list[dict]:
        """Payloads with the hit metadata folded in, one dict per hit.

        Metadata keys use the escaped ``xx_`` form and take precedence over
        a stored field of the same name.
        """
        return [
            {**hit.payload, 'xx_index': hit.index, 'xx_id': hit.id, 'xx_score': hit.score}
            for hit in self.hits()
        ]


def normalize_hits(body: Mapping[str, Any] | None) -> ResultSet:
    """Extract the hits of one search response into a ``ResultSet``.

    Args:
        body: Decoded search response, ``{'hits': {'hits': [...]}}``.

    Returns:
        ResultSet: One row per hit; empty when the response has no hits,
            which the pagination engine reads as "no more data".

    Raises:
        ShapeError: If a hit's ``_source`` is not a keyed object.
        UnexpectedResponseError: If the hits envelope or a hit is not the
            expected object/array.
    """
    page = ResultSet()
    if not body:
        return page
    envelope = body.get('hits') or {}
    if not isinstance(envelope, Mapping):
        raise UnexpectedResponseError(f"Search response hits is a {type(envelope).__name__}, not an object")
    hits = envelope.get('hits') or []
    if not isinstance(hits, list):
        raise UnexpectedResponseError(f"Search response hits.hits is a {type(hits).__name__}, not an array")
    for position, raw in enumerate(hits):
        if not isinstance(raw, Mapping):
            raise UnexpectedResponseError(f"Hit {position} is a {type(raw).__name__}, not an object")
        payload = raw.get('_source', {})
        if not isinstance(payload, Mapping):
            raise ShapeError(
                f"Hit {position} ({raw.get('_id')!r}) has a {type(payload).__name__} "
                f"payload; documents must be objects"
            )
        cursor = raw.get('sort')
        page.append(Hit(
            index=raw.get('_index'),
            doc_type=raw.get('_type'),
            id=raw.get('_id'),
            score=raw.get('_score'),
            payload=decode_field_names(payload),
            sort_cursor=tuple(cursor) if cursor is not None else None,
        ))
    return page
