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
"""Exception hierarchy for the elasticdata client.

Only failures that leave the caller without a usable answer are raised.
Partial outcomes (some bulk items failed, pagination stopped early on a
server error) are reported through ``BulkReport`` and ``ResultSet.error``
instead.
"""
from __future__ import annotations


class ElasticDataError(Exception):
    """Base class for every error raised by this package."""


class MalformedConditionError(ElasticDataError, ValueError):
    """Caller input to clause or path building cannot be used.

    Raised before any request is sent, e.g. an odd-length list of
    field/value pairs or an empty field name.
    """


class InvalidArgumentError(ElasticDataError, ValueError):
    """An enum-like or configuration parameter has an unsupported value."""


class ShapeError(ElasticDataError):
    """A hit payload is not a keyed object and cannot be tabulated."""


class TransportError(ElasticDataError):
    """Network-level failure talking to the server.

    Wraps the underlying ``httpx.TransportError`` as ``__cause__``.
    """

    def __init__(self, message: str, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url


class UnexpectedResponseError(ElasticDataError):
    """The server answered with something the client cannot interpret."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
