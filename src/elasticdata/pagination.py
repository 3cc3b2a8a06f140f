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
"""Deep pagination over ``_search`` with ``search_after``.

One ``Paginator`` drives one retrieval through ``INIT -> PAGING -> DONE``
(``ERROR`` when the server rejects a page). With a sort field and no
offset, pages of at most ``max_query_size`` hits are chained by the sort
cursor of each page's last hit until the requested size, the absolute
ceiling ``max_total_query_size`` or the end of the data is reached.
Otherwise exactly one request is sent.

Pagination is best effort: a server error with a readable body ends the
loop and returns what was gathered, with ``ResultSet.error`` set.
"""
from __future__ import annotations

import enum
import logging
from collections.abc import Mapping

from .exceptions import UnexpectedResponseError
from .query import Query, SearchRequest, build_query
from .results import ResultSet, normalize_hits
from .transport import ErrorBody, Success


logger = logging.getLogger('elasticdata')


class State(enum.Enum):
    INIT = 'init'
    PAGING = 'paging'
    DONE = 'done'
    ERROR = 'error'


class Paginator:
    """Run one retrieval against a transport.

    Attributes:
        state: Current ``State``.
        requests: Number of search round trips issued so far.
        upper_bound: Most hits this retrieval may return.
        result: The accumulated ``ResultSet``.

    Example:
        >>> request = SearchRequest('logs-*', sort='date', order='asc', size=12)
        >>> result = Paginator(transport, request, max_query_size=5).run()
        >>> len(result)  # three requests: 5, 5 and 2 hits
        12
    """

    def __init__(self, transport, request: SearchRequest, max_query_size: int = 5000,
            max_total_query_size: int = 5000000, default_query_size: int = 10) -> None:
        self.transport = transport
        self.request = request
        self.max_query_size = max_query_size
        self.max_total_query_size = max_total_query_size
        self.default_query_size = default_query_size
        self.uri = f'/{request.index.strip("/")}/_search'
        self.state = State.INIT
        self.requests = 0
        self.upper_bound = 0
        self.result = ResultSet()

    @property
    def requested_size(self) -> int:
        if self.request.size is None:
            return self.default_query_size
        return self.request.size

    def _start(self) -> Query:
        query = build_query(self.request, self.max_query_size, self.default_query_size)
        requested = self.requested_size
        if self.request.uses_cursor:
            if requested > self.max_total_query_size:
                logger.warning(
                    f"Query size {requested} on {self.request.index} exceeds the total "
                    f"maximum, retrieving at most {self.max_total_query_size}"
                )
            self.upper_bound = min(requested, self.max_total_query_size)
        else:
            if requested > self.max_query_size:
                logger.warning(
                    f"Without sorting, the query size on {self.request.index} "
                    f"is limited to {query.size} (asked for {requested})"
                )
            self.upper_bound = query.size
        return query

    def _fetch(self, query: Query) -> ResultSet | None:
        self.requests += 1
        response = self.transport.post_json(self.uri, query.to_body())
        if isinstance(response, Success):
            if response.body is not None and not isinstance(response.body, Mapping):
                self.state = State.ERROR
                raise UnexpectedResponseError(
                    f"Search on {self.request.index} returned a non-object body",
                    response.status_code,
                )
            return normalize_hits(response.body)
        if isinstance(response, ErrorBody):
            logger.error(
                f"Search on {self.request.index} failed with {response.status_code}: "
                f"{response.message}; returning {len(self.result)} hits gathered so far"
            )
            self.result.error = response.message
            self.state = State.ERROR
            return None
        self.state = State.ERROR
        raise UnexpectedResponseError(
            f"Unexpected response during search on {self.request.index}: "
            f"{response.status_code} {response.reason}",
            response.status_code,
        )

    def run(self) -> ResultSet:
        """Issue the search request(s) and return the merged hits.

        Returns:
            ResultSet: At most ``upper_bound`` hits in server order. When a
                page failed with a readable server error, the hits gathered
                before it, with ``error`` set.

        Raises:
            MalformedConditionError: If the search options are malformed;
                nothing is sent.
            ShapeError: If a hit payload is not an object.
            UnexpectedResponseError: On a failed request with no readable
                error body.
            TransportError: On a network-level failure.
        """
        if self.state is not State.INIT:
            raise RuntimeError(f"Paginator already ran (state: {self.state.name})")
        query = self._start()
        self.state = State.PAGING

        if not self.request.uses_cursor:
            page = self._fetch(query)
            if page is not None:
                self.result.extend(page.truncate(self.upper_bound))
                self.state = State.DONE
            return self.result

        while len(self.result) < self.upper_bound:
            wanted = min(self.max_query_size, self.upper_bound - len(self.result))
            query = query.replace(size=wanted)
            page = self._fetch(query)
            if page is None:
                return self.result
            self.result.extend(page.truncate(wanted))
            cursor = self.result.last_cursor
            if not page or cursor is None or len(page) < wanted:
                break
            query = query.replace(search_after=cursor)

        self.state = State.DONE
        return self.result
