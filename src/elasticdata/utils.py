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
"""Field path and field name helpers for the search wire format.

Provides the path-struct builder that turns dotted field names into nested
condition objects, and the reserved-prefix escaping applied at the
serialization boundary.

The wire protocol reserves a leading underscore for its own metadata
(``_index``, ``_id``, ``_source``, ...). On the Python side such keys are
written with the ``xx_`` escape prefix: ``encode_field_names`` rewrites
``xx_name`` to ``_name`` on the way out, and ``decode_field_names``
rewrites ``_name`` to ``xx_name`` on the way in, so a document field can
never be confused with a protocol field.

Example:
    >>> field_condition(['user.name', 'john', 'price', 5])
    {'user': {'name': 'john'}, 'price': 5}
    >>> dumps({'xx_index': 'orders'})
    '{"_index":"orders"}'
"""
from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from typing import Any

from .collections import DictObject
from .exceptions import MalformedConditionError


PATH_SEPARATOR = '.'
RESERVED_PREFIX = '_'
ESCAPE_PREFIX = 'xx_'


type SearchPairs = Sequence[Any] | Mapping[str, Any]


def _is_pair(item: Any) -> bool:
    return isinstance(item, (tuple, list)) and len(item) == 2 and isinstance(item[0], str)


def iter_pairs(search: SearchPairs) -> list[tuple[str, Any]]:
    """Normalize search pairs into a list of ``(field_path, value)`` tuples.

    Accepts a mapping, a sequence of 2-item pairs, or a flat alternating
    ``[field, value, field, value, ...]`` sequence.

    Raises:
        MalformedConditionError: If the input is empty, a flat sequence
            has odd length, or a field name is not a non-empty string.
    """
    if isinstance(search, Mapping):
        pairs = list(search.items())
    elif isinstance(search, (str, bytes)) or not isinstance(search, Sequence):
        raise MalformedConditionError(f"Search pairs must be a sequence or a mapping, got {type(search).__name__}")
    elif search and all(_is_pair(item) for item in search):
        pairs = [tuple(item) for item in search]
    else:
        if len(search) % 2 != 0:
            raise MalformedConditionError(
                f"Field/value pairs must have even length, got {len(search)} items"
            )
        pairs = list(zip(search[0::2], search[1::2]))
    if not pairs:
        raise MalformedConditionError("At least one field/value pair is required")
    for field, _ in pairs:
        if not isinstance(field, str) or not field:
            raise MalformedConditionError(f"Field name must be a non-empty string, got {field!r}")
    return pairs


def split_path(field_path: str) -> list[str]:
    parts = field_path.split(PATH_SEPARATOR)
    if not all(parts):
        raise MalformedConditionError(f"Invalid field path: {field_path!r}")
    return parts


def field_condition(search: SearchPairs) -> dict:
    """Build a nested condition object from dotted field paths.

    Each segment of a dotted path becomes one nesting level, and the value
    is stored at the leaf. When two paths collide the later one wins.

    Args:
        search: Field/value pairs, in any form accepted by ``iter_pairs``.

    Returns:
        dict: The nested key tree, e.g. ``{'user': {'name': 'john'}}`` for
            ``['user.name', 'john']``.

    Raises:
        MalformedConditionError: If ``search`` is empty, odd-length or has
            an invalid field path.
    """
    tree: dict = {}
    for field_path, value in iter_pairs(search):
        *parents, leaf = split_path(field_path)
        node = tree
        for key in parents:
            child = node.get(key)
            if not isinstance(child, dict):
                child = node[key] = {}
            node = child
        node[leaf] = value
    return tree


def encode_field_name(name: str) -> str:
    if name.startswith(ESCAPE_PREFIX):
        return RESERVED_PREFIX + name[len(ESCAPE_PREFIX):]
    return name


def decode_field_name(name: str) -> str:
    if name.startswith(RESERVED_PREFIX):
        return ESCAPE_PREFIX + name[len(RESERVED_PREFIX):]
    return name


def _rename_keys(value: Any, rename) -> Any:
    if isinstance(value, Mapping):
        return DictObject(
            (rename(k) if isinstance(k, str) else k, _rename_keys(v, rename))
            for k, v in value.items()
        )
    if isinstance(value, list):
        return [_rename_keys(v, rename) for v in value]
    return value


def encode_field_names(value: Any) -> Any:
    """Return a copy of ``value`` with ``xx_`` keys turned into ``_`` keys."""
    return _rename_keys(value, encode_field_name)


def decode_field_names(value: Any) -> Any:
    """Return a copy of ``value`` with ``_`` keys turned into ``xx_`` keys."""
    return _rename_keys(value, decode_field_name)


def dumps(value: Any) -> str:
    """Serialize a request object as compact, single-line JSON.

    Escaped field names are encoded first. The output never contains a
    newline, which keeps it usable as one NDJSON line.
    """
    return json.dumps(encode_field_names(value), ensure_ascii=True, separators=(',', ':'))


def format_error(error: Any, status_code: int | None = None) -> str:
    """Render a server error object as a one-line message.

    Elasticsearch-style errors are ``{"type": ..., "reason": ...}``
    objects; anything else is rendered as JSON or text.
    """
    if isinstance(error, Mapping):
        reason = error.get('reason')
        kind = error.get('type')
        if reason and kind:
            return f'{kind}: {reason}'
        if reason:
            return str(reason)
        return json.dumps(error, ensure_ascii=True, default=str)
    if error:
        return str(error)
    return f'HTTP {status_code}'
