"""
Adapters: query functions for concrete drivers.

``SqliteAdapter`` needs only the standard library; ``PsycopgAdapter`` and
``PyMySQLAdapter`` are imported from their own modules
(``schemql.adapters.postgres``, ``schemql.adapters.mysql``).
"""

from .dbapi import DbApiAdapter, convert_named_params, cursor_to_dicts, interpolate_sql
from .sqlite import SqliteAdapter

__all__ = [
    "DbApiAdapter",
    "SqliteAdapter",
    "convert_named_params",
    "cursor_to_dicts",
    "interpolate_sql",
]
