"""
sqlite3 adapter (stdlib). SQLite binds ``:name`` natively.
"""

from __future__ import annotations

import sqlite3
from typing import Any

from schemql.adapters.dbapi import DbApiAdapter
from schemql.core.errors import AdapterError, AdapterErrorCode

_ERRORNAME_CODES = {
    "SQLITE_CONSTRAINT_UNIQUE": AdapterErrorCode.UNIQUE_CONSTRAINT,
    "SQLITE_CONSTRAINT_FOREIGNKEY": AdapterErrorCode.FOREIGNKEY_CONSTRAINT,
    "SQLITE_CONSTRAINT_NOTNULL": AdapterErrorCode.NOTNULL_CONSTRAINT,
    "SQLITE_CONSTRAINT_CHECK": AdapterErrorCode.CHECK_CONSTRAINT,
    "SQLITE_CONSTRAINT_PRIMARYKEY": AdapterErrorCode.PRIMARYKEY_CONSTRAINT,
}

_MESSAGE_CODES = (
    ("UNIQUE constraint failed", AdapterErrorCode.UNIQUE_CONSTRAINT),
    ("FOREIGN KEY constraint failed", AdapterErrorCode.FOREIGNKEY_CONSTRAINT),
    ("NOT NULL constraint failed", AdapterErrorCode.NOTNULL_CONSTRAINT),
    ("CHECK constraint failed", AdapterErrorCode.CHECK_CONSTRAINT),
)


def sqlite_error_code(error: BaseException) -> AdapterErrorCode:
    """Classify a sqlite3 error by ``sqlite_errorname``, falling back to the message."""
    name = getattr(error, "sqlite_errorname", None)
    if name in _ERRORNAME_CODES:
        return _ERRORNAME_CODES[name]
    message = str(error)
    for prefix, code in _MESSAGE_CODES:
        if message.startswith(prefix):
            return code
    return AdapterErrorCode.GENERIC


class SqliteAdapter(DbApiAdapter):
    """
    Wraps a ``sqlite3.Connection`` or opens one from a filename.

    File databases are switched to WAL journal mode when opened here.
    """

    paramstyle = "named"
    driver_error = sqlite3.Error

    def __init__(self, database: str | sqlite3.Connection, *, verbosity: int | None = None, **connect_kwargs: Any) -> None:
        if isinstance(database, sqlite3.Connection):
            connection = database
        else:
            connection = sqlite3.connect(database, **connect_kwargs)
            if database != ":memory:":
                connection.execute("PRAGMA journal_mode = WAL")
        super().__init__(connection, verbosity=verbosity)

    def map_error(self, error: BaseException) -> AdapterError:
        return AdapterError(str(error), sqlite_error_code(error), error)
