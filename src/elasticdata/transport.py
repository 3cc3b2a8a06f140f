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
"""HTTP transport for the search service.

``Transport`` exposes the four exchanges the client needs (``get_json``,
``post_json``, ``put_json`` and ``post_ndjson``). Every exchange answers
with one of three response kinds, decided here once:

* ``Success``: a 2xx status and its decoded body.
* ``ErrorBody``: a non-2xx status with a decodable JSON error body.
* ``TransportFailure``: a non-2xx status and nothing decodable, or any
  status with a JSON body that does not parse.

Network-level failures (connection refused, timeouts, ...) raise
``TransportError``.

Any object with the same four methods can stand in for ``Transport``.
"""
from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

try:
    import httpx
except ImportError:
    raise ImportError("elasticdata requires the installation of the httpx module.")

from .collections import DictObject
from .exceptions import TransportError
from .utils import dumps, format_error


logger = logging.getLogger('elasticdata')

JSON_CONTENT_TYPE = 'application/json'
NDJSON_CONTENT_TYPE = 'application/x-ndjson'

# Marks a JSON body that could not be parsed.
UNDECODABLE = object()


@dataclass(frozen=True)
class Success:
    status_code: int
    body: Any = None

    ok = True


@dataclass(frozen=True)
class ErrorBody:
    status_code: int
    message: str
    body: Any = None

    ok = False


@dataclass(frozen=True)
class TransportFailure:
    status_code: int
    reason: str = ''

    ok = False


type Response = Success | ErrorBody | TransportFailure


def classify(status_code: int, body: Any) -> Response:
    """Turn a status code and decoded body into a response kind.

    A body that claimed to be JSON but did not parse is a
    ``TransportFailure`` whatever the status.
    """
    if body is UNDECODABLE:
        if 200 <= status_code < 300:
            return TransportFailure(status_code, 'undecodable JSON body')
        return TransportFailure(status_code, f'HTTP {status_code}')
    if 200 <= status_code < 300:
        return Success(status_code, body)
    if isinstance(body, Mapping):
        return ErrorBody(status_code, format_error(body.get('error', body), status_code), body)
    reason = body.strip() if isinstance(body, str) else ''
    return TransportFailure(status_code, reason or f'HTTP {status_code}')


class Transport:
    """Synchronous HTTP exchanges with one search server.

    Attributes:
        host: Server hostname.
        port: Server port.
        scheme: URL scheme, ``'http'`` or ``'https'``.
        timeout: Per-request timeout in seconds.

    Example:
        >>> transport = Transport('localhost', 9200)
        >>> transport.get_json('/_cat/health')
        Success(status_code=200, body='1700000000 ... green ...')
    """

    session = httpx.Client(
        limits=httpx.Limits(max_connections=100, max_keepalive_connections=100),
        trust_env=False,
        follow_redirects=False,
    )

    def __init__(self, host: str = '127.0.0.1', port: str | int = 9200,
            scheme: str = 'http', timeout: float = 30) -> None:
        if host and ':' in host:
            host, _, port = host.partition(':')
        self.host = host
        self.port = port
        self.scheme = scheme
        self.timeout = timeout

    def _build_url(self, uri: str) -> str:
        if uri.startswith(('http://', 'https://')):
            return uri
        return f'{self.scheme}://{self.host}:{self.port}/{uri.lstrip("/")}'

    def _send_request(self, method: str, uri: str, body: Any = None,
            content_type: str = JSON_CONTENT_TYPE) -> Response:
        """Send one request and classify the answer.

        Args:
            method: HTTP method.
            uri: Path on the server (``'/orders/_search'``) or a full URL.
            body: A dict/list, serialized with ``utils.dumps``, or a
                pre-encoded string sent as-is.
            content_type: ``Content-Type`` of the request body.

        Returns:
            Response: ``Success``, ``ErrorBody`` or ``TransportFailure``.

        Raises:
            TransportError: If the request could not be completed.
        """
        url = self._build_url(uri)
        headers = {'accept': JSON_CONTENT_TYPE}
        kwargs: dict[str, Any] = {}

        if body is not None:
            if isinstance(body, (dict, list)):
                body = dumps(body)
            headers['content-type'] = content_type
            kwargs['content'] = body.encode('utf-8') if isinstance(body, str) else body
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug(f"@@@>> {method} URL: {url}  ::  BODY: {body[:1000]}")
        else:
            logger.debug(f"@@@>> {method} URL: {url}")

        try:
            res = self.session.request(method, url, headers=headers, timeout=self.timeout, **kwargs)
        except httpx.TransportError as exc:
            logger.debug(f"@@@RES>> {method} {url} :: {exc!r}")
            raise TransportError(f"{method} {url} failed: {exc}", url) from exc

        return classify(res.status_code, self._decode(res))

    def _decode(self, res: httpx.Response) -> Any:
        content = res.content
        if not content:
            return None
        content_type = res.headers.get('content-type', '')
        if JSON_CONTENT_TYPE in content_type:
            try:
                return json.loads(content, object_pairs_hook=DictObject)
            except ValueError:
                logger.debug(f"@@@RES>> undecodable JSON body ({len(content)} bytes)")
                return UNDECODABLE
        return content.decode('utf-8', 'replace')

    def get_json(self, uri: str) -> Response:
        return self._send_request('GET', uri)

    def post_json(self, uri: str, body: Any = None) -> Response:
        return self._send_request('POST', uri, body)

    def put_json(self, uri: str, body: Any = None) -> Response:
        return self._send_request('PUT', uri, body)

    def post_ndjson(self, uri: str, body: str) -> Response:
        return self._send_request('POST', uri, body, content_type=NDJSON_CONTENT_TYPE)
