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
"""Elasticsearch data client.

Provides the ``ElasticData`` client for retrieving and writing documents
on an Elasticsearch-compatible search server over HTTP: query building
from field/value pairs, deep pagination with ``search_after``, columnar
result sets and NDJSON bulk writes with per-item reconciliation.

Configuration is read from environment variables (``ELASTICSEARCH_HOST``,
``ELASTICSEARCH_PORT``, ``ELASTICSEARCH_MAX_QUERY_SIZE``, ...), with
optional overrides from Django settings. A module-level ``client``
singleton is created at import time using these defaults.

Example:
    >>> from elasticdata import client
    >>> result = client.get_data('orders-*', search=['status', 'shipped'],
    ...                          sort='date', order='asc', size=100)
    >>> result.id[:2]
    ['a1', 'a2']
"""
from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from .bulk import BulkAction, BulkOutcome, BulkReport, IndexAction, UpdateAction, decode_bulk, encode_bulk
from .collections import DictObject
from .config import (
    Config,
    ELASTICSEARCH_HOST,
    ELASTICSEARCH_PORT,
    ELASTICSEARCH_SCHEME,
)
from .exceptions import (
    ElasticDataError,
    InvalidArgumentError,
    MalformedConditionError,
    ShapeError,
    TransportError,
    UnexpectedResponseError,
)
from .pagination import Paginator, State
from .query import Exists, Query, Range, Raw, SearchRequest, Term, build_query
from .results import Hit, ResultSet, normalize_hits
from .transport import ErrorBody, Success, Transport, TransportFailure
from .utils import SearchPairs, field_condition


__version__ = '1.0.0'
__all__ = [
    'ElasticData',
    'Config',
    'client',
    'SearchRequest',
    'Query',
    'Exists',
    'Term',
    'Range',
    'Raw',
    'Hit',
    'ResultSet',
    'IndexAction',
    'UpdateAction',
    'BulkOutcome',
    'BulkReport',
    'Transport',
    'Success',
    'ErrorBody',
    'TransportFailure',
    'Paginator',
    'State',
    'field_condition',
    'build_query',
    'normalize_hits',
    'encode_bulk',
    'decode_bulk',
    'DictObject',
    'ElasticDataError',
    'MalformedConditionError',
    'InvalidArgumentError',
    'ShapeError',
    'TransportError',
    'UnexpectedResponseError',
    'ELASTICSEARCH_HOST',
    'ELASTICSEARCH_PORT',
    'ELASTICSEARCH_SCHEME',
]

logger = logging.getLogger('elasticdata')

MUTATION_STATUSES = frozenset((200, 201))
AUTO_ID = 'auto'


class ElasticData:
    """Client for one Elasticsearch-compatible server.

    Builds search bodies, pages through results and encodes bulk writes;
    every HTTP exchange goes through ``transport``. Mutating operations
    refresh the indices once they succeed.

    Attributes:
        config: The validated ``Config`` in use.
        transport: Object providing ``get_json``, ``post_json``,
            ``put_json`` and ``post_ndjson``.

    Example:
        >>> es = ElasticData(host='localhost', port=9200)
        >>> es.create_bulk('orders', [{'status': 'new'}, {'status': 'paid'}]).succeeded
        True
        >>> es.count_docs('orders')
        2
    """

    def __init__(self, host: str | None = None, port: str | int | None = None,
            scheme: str | None = None, config: Config | None = None,
            transport=None, **options: Any) -> None:
        """Initialize the client.

        Args:
            host: Server hostname, possibly ``host:port``. Defaults to
                ``ELASTICSEARCH_HOST`` or ``'127.0.0.1'``.
            port: Server port. Defaults to ``ELASTICSEARCH_PORT`` or 9200.
            scheme: ``'http'`` or ``'https'``.
            config: A ready ``Config``; ``host``, ``port``, ``scheme`` and
                ``options`` are applied on top of it.
            transport: Transport collaborator. Defaults to a ``Transport``
                built from the configuration.
            **options: Any other ``Config`` option, e.g.
                ``max_query_size=100``.

        Raises:
            InvalidArgumentError: On an unknown or invalid option.
        """
        overrides = dict(options, host=host, port=port, scheme=scheme)
        if config is None:
            config = Config.from_settings(**overrides)
        else:
            changes = {k: v for k, v in overrides.items() if v is not None}
            if changes:
                config = config.replace(**changes)
        self.config = config
        if transport is None:
            transport = Transport(config.host, config.port, config.scheme, config.timeout)
        self.transport = transport

    @property
    def host(self) -> str:
        return self.config.host

    @property
    def port(self) -> int:
        return self.config.port

    # ── Cluster ───────────────────────────────────────────────────────

    def is_alive(self) -> bool:
        """Whether the server answers its health endpoint with success."""
        try:
            response = self.transport.get_json('/_cat/health')
        except TransportError as exc:
            logger.warning(f"Health check failed: {exc}")
            return False
        return isinstance(response, Success)

    def _cat_column(self, uri: str, column: int) -> list[str]:
        response = self.transport.get_json(uri)
        if not isinstance(response, Success) or not response.body:
            return []
        names = []
        for line in str(response.body).splitlines():
            cells = line.split()
            if len(cells) > column:
                names.append(cells[column])
        return names

    def get_aliases(self) -> list[str]:
        """Names of the aliases defined on the server."""
        return self._cat_column('/_cat/aliases', 0)

    def get_indices(self) -> list[str]:
        """Names of the indices on the server."""
        return self._cat_column('/_cat/indices', 2)

    def refresh_indices(self) -> bool:
        """Refresh every index so recent writes become searchable."""
        try:
            response = self.transport.get_json('/_refresh')
        except TransportError as exc:
            logger.warning(f"Cannot refresh indices: {exc}")
            return False
        if not isinstance(response, Success):
            logger.warning(f"Cannot refresh indices: HTTP {response.status_code}")
            return False
        return True

    def _refresh_after(self, operation: str) -> None:
        if not self.refresh_indices():
            logger.warning(f"Indices not refreshed after {operation}")

    # ── Retrieval ─────────────────────────────────────────────────────

    def count_docs(self, index: str, condition: SearchPairs | None = None) -> int:
        """Count the documents of ``index``, optionally matching ``condition``.

        Args:
            index: Index name or pattern.
            condition: Field/value pairs the documents must match.

        Returns:
            int: The count, or 0 if the server refused the request.

        Raises:
            MalformedConditionError: If ``condition`` is malformed.
        """
        uri = f'/{index.strip("/")}/_count'
        if condition:
            body = {'query': {'bool': {'must': {'match': field_condition(condition)}}}}
            response = self.transport.post_json(uri, body)
        else:
            response = self.transport.get_json(uri)
        if isinstance(response, Success) and isinstance(response.body, Mapping):
            return int(response.body.get('count', 0))
        logger.warning(f"Count on {index} failed: HTTP {response.status_code}")
        return 0

    def get_data(self, index: str, fields: str | Sequence[str] | None = None,
            must_exist: bool = False, search: SearchPairs | None = None,
            id: str | None = None, ranges: Sequence[tuple[str, str, Any]] = (),
            custom_query: Mapping | Sequence[Mapping] = (),
            sort: str | None = None, order: str = 'desc',
            offset: int = 0, size: int | None = None) -> ResultSet:
        """Retrieve documents from ``index``.

        With ``sort`` set and ``offset`` 0, pages through the results with
        ``search_after`` up to ``size`` hits (capped at
        ``max_total_query_size``). Otherwise sends a single request of at
        most ``max_query_size`` hits.

        Args:
            index: Index name, may contain wildcards.
            fields: Fields to check with ``must_exist``.
            must_exist: Only match documents where every field exists and
                return just those fields; without it whole documents come
                back.
            search: Field/value pairs to match, e.g. ``['user.name', 'john']``.
            id: Only match this document id.
            ranges: ``(field, op, value)`` range conditions.
            custom_query: Raw query clauses appended to the conditions.
            sort: Field to sort by.
            order: ``'asc'`` or ``'desc'``.
            offset: Offset of the first hit; disables cursor pagination.
            size: Number of hits wanted; defaults to ``default_query_size``.

        Returns:
            ResultSet: The hits in columnar form. ``error`` is set when a
                server error stopped the pagination early.

        Raises:
            InvalidArgumentError: If ``order`` is invalid.
            MalformedConditionError: If ``search`` or ``custom_query`` is
                malformed.
            ShapeError: If a document is not an object.
            UnexpectedResponseError: If a request failed without a
                readable error.
            TransportError: On network failure.
        """
        request = SearchRequest(
            index=index,
            fields=fields,
            must_exist=must_exist,
            search=search,
            id=id,
            ranges=ranges,
            custom_query=custom_query,
            sort=sort,
            order=order,
            offset=offset,
            size=size,
        )
        paginator = Paginator(
            self.transport,
            request,
            max_query_size=self.config.max_query_size,
            max_total_query_size=self.config.max_total_query_size,
            default_query_size=self.config.default_query_size,
        )
        return paginator.run()

    # ── Single-document writes ────────────────────────────────────────

    def create_mapping(self, index: str, mapping: Mapping[str, Any]) -> bool:
        """Create ``index`` with the given settings/mappings body."""
        if not isinstance(index, str) or not index:
            raise InvalidArgumentError("index must be a non-empty string")
        response = self.transport.put_json(f'/{index.strip("/")}', dict(mapping))
        if isinstance(response, Success):
            return True
        logger.warning(f"Mapping failed for {index}: HTTP {response.status_code}")
        return False

    def create(self, index: str, doc: Mapping[str, Any], id: str = AUTO_ID) -> bool:
        """Index a new document.

        Args:
            index: Target index.
            doc: Document body.
            id: Document id, or ``'auto'`` for a server-assigned one.

        Returns:
            bool: True if the server stored the document.
        """
        if not isinstance(id, str):
            raise InvalidArgumentError("id must be a string")
        uri = f'/{index}/_doc' if id == AUTO_ID else f'/{index}/_doc/{id}'
        response = self.transport.post_json(uri, dict(doc))
        if not isinstance(response, Success) or response.status_code not in MUTATION_STATUSES:
            logger.warning(f"Create failed: {uri} (HTTP {response.status_code})")
            return False
        self._refresh_after('create')
        return True

    def update(self, index: str, id: str, doc: Mapping[str, Any]) -> bool:
        """Merge the fields of ``doc`` into document ``id``."""
        uri = f'/{index}/_update/{id}'
        response = self.transport.post_json(uri, {'doc': dict(doc)})
        if not isinstance(response, Success):
            logger.warning(f"Update failed: {uri} (HTTP {response.status_code})")
            return False
        self._refresh_after('update')
        return True

    def update_field(self, index: str, id: str, field: str, value: Any) -> bool:
        return self.update(index, id, {field: value})

    # ── Bulk writes ───────────────────────────────────────────────────

    def bulk(self, actions: Iterable[BulkAction]) -> BulkReport:
        """Submit ``actions`` in one ``_bulk`` request.

        Returns:
            BulkReport: ``ok`` tells whether the request went through;
                ``outcomes`` has one entry per action, so partial failures
                show up as ``partial_failure``.

        Raises:
            InvalidArgumentError: If an action or document is malformed.
            UnexpectedResponseError: If the acknowledgments do not match
                the actions.
            TransportError: On network failure.
        """
        actions = list(actions)
        if not actions:
            return BulkReport(ok=True)
        response = self.transport.post_ndjson('/_bulk', encode_bulk(actions))
        report = decode_bulk(response, actions)
        if not report.ok:
            logger.warning(f"Bulk request failed with {response.status_code}: {report.error}")
            return report
        self._refresh_after('bulk')
        return report

    def create_bulk(self, index: str, docs: Iterable[Mapping[str, Any]]) -> BulkReport:
        return self.bulk(IndexAction(index, doc) for doc in docs)

    def update_bulk(self, index: str, ids: Sequence[str],
            docs: Sequence[Mapping[str, Any]]) -> BulkReport:
        """Update documents ``ids[i]`` with ``docs[i]`` in one request."""
        if isinstance(ids, str) or not isinstance(ids, Sequence):
            raise InvalidArgumentError("ids must be a sequence of document ids")
        if len(ids) != len(docs):
            raise InvalidArgumentError(f"Got {len(ids)} ids for {len(docs)} documents")
        return self.bulk(
            UpdateAction(index, id, doc, self.config.retry_on_conflict)
            for id, doc in zip(ids, docs)
        )


client = ElasticData()
