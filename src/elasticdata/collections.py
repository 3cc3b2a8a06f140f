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
"""Attribute-access mapping used for decoded JSON.

``DictObject`` is the ``object_pairs_hook`` the transport hands to
``json.loads``, so every object in a server response can be read either
as ``hit['_source']`` or ``hit._source``.

Example:
    >>> hit = DictObject(_id='1', _source=DictObject(status='shipped'))
    >>> hit._source.status
    'shipped'
"""
from __future__ import annotations

from typing import Any


class DictObject(dict):
    """``dict`` whose keys double as attributes.

    The instance ``__dict__`` is the mapping itself, so attribute
    assignment and item assignment are the same operation. It still is a
    plain ``dict`` for ``isinstance`` checks and JSON encoding.
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        dict.__init__(self, *args, **kwargs)
        self.__dict__ = self

    def copy(self) -> DictObject:
        return DictObject(self)
