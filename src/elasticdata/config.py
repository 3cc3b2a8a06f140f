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
"""Client configuration.

Defaults come from environment variables (``ELASTICSEARCH_HOST``,
``ELASTICSEARCH_PORT``, ...) and may be overridden by Django settings of
the same name when Django is installed and configured. ``Config`` gathers
every recognized option in one validated, immutable value.

Example:
    >>> config = Config.from_settings(max_query_size=100)
    >>> config.max_query_size
    100
"""
from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from typing import Any

from .exceptions import InvalidArgumentError


ELASTICSEARCH_HOST = os.environ.get('ELASTICSEARCH_HOST', '127.0.0.1')
ELASTICSEARCH_PORT = os.environ.get('ELASTICSEARCH_PORT', 9200)
ELASTICSEARCH_SCHEME = os.environ.get('ELASTICSEARCH_SCHEME', 'http')
ELASTICSEARCH_TIMEOUT = os.environ.get('ELASTICSEARCH_TIMEOUT', 30)
ELASTICSEARCH_DEFAULT_QUERY_SIZE = os.environ.get('ELASTICSEARCH_DEFAULT_QUERY_SIZE', 10)
ELASTICSEARCH_MAX_QUERY_SIZE = os.environ.get('ELASTICSEARCH_MAX_QUERY_SIZE', 5000)
ELASTICSEARCH_MAX_TOTAL_QUERY_SIZE = os.environ.get('ELASTICSEARCH_MAX_TOTAL_QUERY_SIZE', 5000000)
ELASTICSEARCH_RETRY_ON_CONFLICT = os.environ.get('ELASTICSEARCH_RETRY_ON_CONFLICT', 5)

try:
    from django.conf import settings
    ELASTICSEARCH_HOST = getattr(settings, 'ELASTICSEARCH_HOST', ELASTICSEARCH_HOST)
    ELASTICSEARCH_PORT = getattr(settings, 'ELASTICSEARCH_PORT', ELASTICSEARCH_PORT)
    ELASTICSEARCH_SCHEME = getattr(settings, 'ELASTICSEARCH_SCHEME', ELASTICSEARCH_SCHEME)
    ELASTICSEARCH_TIMEOUT = getattr(settings, 'ELASTICSEARCH_TIMEOUT', ELASTICSEARCH_TIMEOUT)
    ELASTICSEARCH_DEFAULT_QUERY_SIZE = getattr(settings, 'ELASTICSEARCH_DEFAULT_QUERY_SIZE', ELASTICSEARCH_DEFAULT_QUERY_SIZE)
    ELASTICSEARCH_MAX_QUERY_SIZE = getattr(settings, 'ELASTICSEARCH_MAX_QUERY_SIZE', ELASTICSEARCH_MAX_QUERY_SIZE)
    ELASTICSEARCH_MAX_TOTAL_QUERY_SIZE = getattr(settings, 'ELASTICSEARCH_MAX_TOTAL_QUERY_SIZE', ELASTICSEARCH_MAX_TOTAL_QUERY_SIZE)
    ELASTICSEARCH_RETRY_ON_CONFLICT = getattr(settings, 'ELASTICSEARCH_RETRY_ON_CONFLICT', ELASTICSEARCH_RETRY_ON_CONFLICT)
except Exception:
    settings = None


SCHEMES = ('http', 'https')


def _as_int(name: str, value: Any, minimum: int) -> int:
    try:
        value = int(value)
    except (TypeError, ValueError):
        raise InvalidArgumentError(f"{name} must be an integer, got {value!r}") from None
    if value < minimum:
        raise InvalidArgumentError(f"{name} must be >= {minimum}, got {value}")
    return value


@dataclass(frozen=True)
class Config:
    """Every option the client recognizes, with its default.

    Attributes:
        host: Server hostname. A ``host:port`` value splits into both.
        port: Server port.
        scheme: ``'http'`` or ``'https'``.
        timeout: Connection timeout in seconds, handed to the transport.
        default_query_size: Number of hits requested when the caller
            gives no size.
        max_query_size: Hard cap on the ``size`` of a single search
            request; also the page size of cursor pagination.
        max_total_query_size: Absolute cap on the number of hits one
            retrieval may accumulate across pages.
        retry_on_conflict: Value sent with every bulk update action.

    Raises:
        InvalidArgumentError: On construction, if any value is out of range.
    """

    host: str = '127.0.0.1'
    port: int = 9200
    scheme: str = 'http'
    timeout: float = 30
    default_query_size: int = 10
    max_query_size: int = 5000
    max_total_query_size: int = 5000000
    retry_on_conflict: int = 5

    def __post_init__(self) -> None:
        host, port = self.host, self.port
        if host and ':' in str(host):
            host, _, port = str(host).partition(':')
        if not host:
            raise InvalidArgumentError("host must not be empty")
        object.__setattr__(self, 'host', host)
        object.__setattr__(self, 'port', _as_int('port', port, 1))
        if self.scheme not in SCHEMES:
            raise InvalidArgumentError(f"scheme must be one of {SCHEMES}, got {self.scheme!r}")
        try:
            timeout = float(self.timeout)
        except (TypeError, ValueError):
            raise InvalidArgumentError(f"timeout must be a number, got {self.timeout!r}") from None
        if timeout <= 0:
            raise InvalidArgumentError(f"timeout must be positive, got {timeout}")
        object.__setattr__(self, 'timeout', timeout)
        for name in ('default_query_size', 'max_query_size', 'max_total_query_size'):
            object.__setattr__(self, name, _as_int(name, getattr(self, name), 1))
        object.__setattr__(self, 'retry_on_conflict', _as_int('retry_on_conflict', self.retry_on_conflict, 0))
        if self.max_query_size > self.max_total_query_size:
            raise InvalidArgumentError(
                f"max_query_size ({self.max_query_size}) cannot exceed "
                f"max_total_query_size ({self.max_total_query_size})"
            )

    @property
    def base_url(self) -> str:
        return f'{self.scheme}://{self.host}:{self.port}'

    @classmethod
    def from_settings(cls, **overrides: Any) -> Config:
        """Build a ``Config`` from the module-level defaults.

        Args:
            **overrides: Option values taking precedence over the
                environment/Django defaults. ``None`` values are ignored.

        Raises:
            InvalidArgumentError: On an unknown option name or a bad value.
        """
        known = {f.name for f in fields(cls)}
        unknown = set(overrides) - known
        if unknown:
            raise InvalidArgumentError(f"Unknown configuration option(s): {', '.join(sorted(unknown))}")
        values = dict(
            host=ELASTICSEARCH_HOST,
            port=ELASTICSEARCH_PORT,
            scheme=ELASTICSEARCH_SCHEME,
            timeout=ELASTICSEARCH_TIMEOUT,
            default_query_size=ELASTICSEARCH_DEFAULT_QUERY_SIZE,
            max_query_size=ELASTICSEARCH_MAX_QUERY_SIZE,
            max_total_query_size=ELASTICSEARCH_MAX_TOTAL_QUERY_SIZE,
            retry_on_conflict=ELASTICSEARCH_RETRY_ON_CONFLICT,
        )
        values.update((k, v) for k, v in overrides.items() if v is not None)
        if overrides.get('host') and ':' in str(overrides['host']):
            values.pop('port')
        return cls(**values)

    def replace(self, **changes: Any) -> Config:
        return replace(self, **changes)
