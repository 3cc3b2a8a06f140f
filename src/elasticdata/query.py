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
"""Query DSL assembly.

A search is described by a ``SearchRequest`` (every option the caller may
pass, validated once) and compiled by ``build_query`` into an immutable
``Query``, whose ``to_body()`` is the JSON body posted to ``_search``.

Clauses combine under AND semantics: ``must`` clauses score and filter,
``filter`` clauses only filter.

Example:
    >>> request = SearchRequest('orders-*', search=['status', 'shipped'], size=3)
    >>> build_query(request, max_query_size=5000).to_body()
    {'query': {'bool': {'must': [{'term': {'status': 'shipped'}}]}}, 'from': 0, 'size': 3}
"""
from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from copy import deepcopy
from dataclasses import dataclass, replace
from typing import Any

from .exceptions import InvalidArgumentError, MalformedConditionError
from .utils import SearchPairs, field_condition


logger = logging.getLogger('elasticdata')

ASC = 'asc'
DESC = 'desc'
SORT_ORDERS = (ASC, DESC)
RANGE_OPERATORS = ('gt', 'gte', 'lt', 'lte')


# ── Clauses ────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Exists:
    """Matches documents where ``field`` has a non-null value."""

    field: str

    def to_dict(self) -> dict:
        return {'exists': {'field': self.field}}


@dataclass(frozen=True)
class Term:
    """Exact-value match against a nested field condition."""

    condition: Mapping[str, Any]

    @classmethod
    def from_pairs(cls, search: SearchPairs) -> Term:
        return cls(field_condition(search))

    def to_dict(self) -> dict:
        return {'term': deepcopy(dict(self.condition))}


@dataclass(frozen=True)
class Range:
    """Bound ``field`` with one of ``gt``, ``gte``, ``lt`` or ``lte``."""

    field: str
    op: str
    value: Any

    def __post_init__(self) -> None:
        if not isinstance(self.field, str) or not self.field:
            raise MalformedConditionError(f"Range field must be a non-empty string, got {self.field!r}")
        if self.op not in RANGE_OPERATORS:
            raise InvalidArgumentError(f"Range operator must be one of {RANGE_OPERATORS}, got {self.op!r}")

    def to_dict(self) -> dict:
        return {'range': {self.field: {self.op: self.value}}}


@dataclass(frozen=True)
class Raw:
    """A caller-supplied query fragment, passed through untouched."""

    fragment: Mapping[str, Any]

    def __post_init__(self) -> None:
        if not isinstance(self.fragment, Mapping) or not self.fragment:
            raise MalformedConditionError(f"Custom query must be a non-empty mapping, got {self.fragment!r}")

    def to_dict(self) -> dict:
        return deepcopy(dict(self.fragment))


type Clause = Exists | Term | Range | Raw


# ── Search request ─────────────────────────────────────────────────────

def _as_tuple(value: Any) -> tuple:
    if value is None:
        return ()
    if isinstance(value, (str, Mapping)) or not isinstance(value, Sequence):
        return (value,)
    return tuple(value)


@dataclass(frozen=True)
class SearchRequest:
    """Options of one retrieval.

    Attributes:
        index: Index name or pattern (wildcards allowed), e.g. ``'orders-*'``.
        fields: Fields the documents must carry, used with ``must_exist``.
            A single string is one field.
        must_exist: Only match documents where every ``fields`` entry
            exists, and return only those fields.
        search: Field/value pairs matched with a term clause; dotted
            field names address nested objects.
        id: Restrict the search to one document id.
        ranges: ``(field, op, value)`` triples, one range clause each.
        custom_query: Raw query fragments appended to the ``must`` list.
        sort: Field to sort by. Enables cursor pagination when
            ``offset`` is 0.
        order: ``'asc'`` or ``'desc'`` (default).
        offset: Offset of the first hit (``from`` on the wire).
        size: Number of hits wanted. ``None`` means the configured
            default query size.

    Raises:
        InvalidArgumentError: If ``order`` is not ``'asc'``/``'desc'`` or
            ``offset``/``size`` is negative.
        MalformedConditionError: If ``ranges`` entries are not triples.
    """

    index: str
    fields: tuple[str, ...] = ()
    must_exist: bool = False
    search: SearchPairs | None = None
    id: str | None = None
    ranges: tuple[tuple[str, str, Any], ...] = ()
    custom_query: tuple[Mapping[str, Any], ...] = ()
    sort: str | None = None
    order: str = DESC
    offset: int = 0
    size: int | None = None

    def __post_init__(self) -> None:
        if not self.index:
            raise InvalidArgumentError("index is required")
        object.__setattr__(self, 'fields', _as_tuple(self.fields))
        object.__setattr__(self, 'custom_query', _as_tuple(self.custom_query))
        ranges = self.ranges
        if ranges and isinstance(ranges, Sequence) and len(ranges) == 3 and isinstance(ranges[0], str):
            ranges = (ranges,)
        ranges = _as_tuple(ranges)
        for item in ranges:
            if not isinstance(item, Sequence) or isinstance(item, str) or len(item) != 3:
                raise MalformedConditionError(f"Range must be a (field, op, value) triple, got {item!r}")
        object.__setattr__(self, 'ranges', tuple(tuple(item) for item in ranges))
        if self.order not in SORT_ORDERS:
            raise InvalidArgumentError(f"Sort order must be one of {SORT_ORDERS}, got {self.order!r}")
        if self.offset is None:
            object.__setattr__(self, 'offset', 0)
        if int(self.offset) < 0:
            raise InvalidArgumentError(f"offset must be >= 0, got {self.offset}")
        object.__setattr__(self, 'offset', int(self.offset))
        if self.size is not None:
            if int(self.size) < 0:
                raise InvalidArgumentError(f"size must be >= 0, got {self.size}")
            object.__setattr__(self, 'size', int(self.size))

    @property
    def uses_cursor(self) -> bool:
        """Whether the retrieval pages with ``search_after``."""
        return bool(self.sort) and self.offset == 0


# ── Query ──────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Query:
    """An immutable search body.

    ``replace`` returns a modified copy; the pagination engine uses it to
    derive the next page's query (new ``size`` and ``search_after``)
    without touching the query already sent.
    """

    source_includes: tuple[str, ...] = ()
    must_clauses: tuple[Clause, ...] = ()
    filter_clauses: tuple[Clause, ...] = ()
    sort: tuple[str, str] | None = None
    offset: int = 0
    size: int = 10
    search_after: tuple | None = None

    def replace(self, **changes: Any) -> Query:
        return replace(self, **changes)

    def to_body(self) -> dict:
        body: dict[str, Any] = {}
        boolean: dict[str, Any] = {}
        if self.must_clauses:
            boolean['must'] = [clause.to_dict() for clause in self.must_clauses]
        if self.filter_clauses:
            filters = [clause.to_dict() for clause in self.filter_clauses]
            boolean['filter'] = filters[0] if len(filters) == 1 else filters
        if boolean:
            body['query'] = {'bool': boolean}
        if self.source_includes:
            body['_source'] = {'includes': list(self.source_includes)}
        if self.sort is not None:
            sort_field, direction = self.sort
            body['sort'] = {sort_field: {'order': direction}}
        body['from'] = self.offset
        body['size'] = self.size
        if self.search_after is not None:
            body['search_after'] = list(self.search_after)
        return body


def build_query(request: SearchRequest, max_query_size: int,
        default_query_size: int = 10) -> Query:
    """Compile a ``SearchRequest`` into the first page's ``Query``.

    Clause order in ``must``: one exists clause per field (only with
    ``must_exist``), the term clause built from ``search``, range
    clauses, then custom fragments in submission order. An ``id`` becomes
    a filter clause, ANDed with the rest. With ``must_exist`` the returned
    source is restricted to ``fields``; otherwise whole documents come back.

    The per-request ``size`` is clamped to ``max_query_size`` with a
    warning; the size the caller asked for stays on the request.

    Args:
        request: The validated search options.
        max_query_size: Cap on the size of a single request.
        default_query_size: Size used when ``request.size`` is ``None``.

    Returns:
        Query: The query for the first request.

    Raises:
        MalformedConditionError: If the search pairs or a custom fragment
            are malformed.
        InvalidArgumentError: If a range operator is unsupported.
    """
    must: list[Clause] = []
    filters: list[Clause] = []

    if request.must_exist and request.fields:
        must.extend(Exists(name) for name in request.fields)

    if request.search is not None:
        must.append(Term.from_pairs(request.search))

    must.extend(Range(*item) for item in request.ranges)

    if request.id is not None:
        filters.append(Term({'_id': request.id}))

    must.extend(Raw(fragment) for fragment in request.custom_query)

    size = default_query_size if request.size is None else request.size
    if size > max_query_size:
        logger.warning(
            f"Query size {size} on {request.index} exceeds the per-request "
            f"maximum, requesting {max_query_size}"
        )
        size = max_query_size

    return Query(
        source_includes=tuple(dict.fromkeys(request.fields)) if request.must_exist else (),
        must_clauses=tuple(must),
        filter_clauses=tuple(filters),
        sort=(request.sort, request.order) if request.sort else None,
        offset=request.offset,
        size=size,
    )
