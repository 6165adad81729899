"""
Placeholder resolver: turns one template value into the SQL text it stands for.

Kinds, by leading sentinel or shape:

- ``{"users": ["id", "email"]}`` -> ``users (id, email)`` (INSERT column lists)
- ``@users`` / ``@users.*`` / ``@users.id`` -> ``users`` / ``users.*`` / ``users.id``
- ``@users.id-`` -> ``id`` (alias: table qualifier dropped)
- ``@users.metadata ->theme->>color`` -> ``users.metadata->'theme'->>'color'``
- ``@users.metadata $.theme.color`` -> ``'$.theme.color'``
- ``$key`` -> ``key`` (result key)
- ``§raw`` -> ``raw`` (raw fragment, see ``sql_raw`` / ``sql_cond``)
- ``:name`` -> ``:name`` (bound by the driver)

Nothing here raises: malformed references give malformed, but deterministic, SQL.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

REFERENCE = "@"
RESULT_KEY = "$"
RAW = "§"
PARAM = ":"

ALIAS_SUFFIX = "-"
DOT_PATH_PREFIX = "$."
ARROW = "->"
ARROW_TEXT = "->>"

_ARROW_SPLIT = re.compile(r"(?=->)")


def quote_json_arrow_path(path: str) -> str:
    """``->a->>b`` -> ``->'a'->>'b'``: quote each key, keep each operator."""
    out: list[str] = []
    for segment in _ARROW_SPLIT.split(path):
        if not segment:
            continue
        arrow = ARROW_TEXT if segment.startswith(ARROW_TEXT) else ARROW
        out.append(f"{arrow}'{segment[len(arrow):]}'")
    return "".join(out)


def _resolve_table_columns(value: Mapping[Any, Any], quote_identifiers: bool) -> str:
    # Only the first entry is used; {table: columns} is meant to have one key.
    if not value:
        return ""
    table, columns = next(iter(value.items()))
    if isinstance(columns, (list, tuple)):
        cols = ", ".join(str(c) for c in columns)
    else:
        cols = str(columns)
    name = f'"{table}"' if quote_identifiers else str(table)
    return f"{name} ({cols})"


def _resolve_reference(value: str) -> str:
    """
    Resolve an ``@`` reference. The body splits into three zones:
    identifier, optional JSON path (after the first space), optional alias
    marker (trailing ``-``).
    """
    body = value[len(REFERENCE):]

    if body.endswith(ALIAS_SUFFIX):
        _, dot, rest = body.partition(".")
        return rest[: -len(ALIAS_SUFFIX)] if dot else ""

    identifier, space, path = body.partition(" ")
    if space:
        if path.startswith(DOT_PATH_PREFIX):
            return f"'{path}'"
        if path.startswith(ARROW):
            return identifier + quote_json_arrow_path(path)
    return body


def resolve_placeholder(value: Any, *, quote_identifiers: bool = False) -> str:
    """Return the SQL fragment for a single placeholder value."""
    if isinstance(value, Mapping):
        return _resolve_table_columns(value, quote_identifiers)

    if isinstance(value, str):
        if value.startswith(REFERENCE):
            return _resolve_reference(value)
        if value.startswith((RESULT_KEY, RAW)):
            return value[1:]
        return value

    return str(value)
