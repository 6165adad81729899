"""
MySQL adapter (PyMySQL). ``:name`` is rewritten to ``%(name)s``.
"""

from __future__ import annotations

from typing import Any

import pymysql

from schemql.adapters.dbapi import DbApiAdapter
from schemql.core.errors import AdapterError, AdapterErrorCode

# https://dev.mysql.com/doc/mysql-errors/8.0/en/server-error-reference.html
_ERRNO_CODES = {
    1062: AdapterErrorCode.UNIQUE_CONSTRAINT,
    1216: AdapterErrorCode.FOREIGNKEY_CONSTRAINT,
    1217: AdapterErrorCode.FOREIGNKEY_CONSTRAINT,
    1451: AdapterErrorCode.FOREIGNKEY_CONSTRAINT,
    1452: AdapterErrorCode.FOREIGNKEY_CONSTRAINT,
    1048: AdapterErrorCode.NOTNULL_CONSTRAINT,
    1364: AdapterErrorCode.NOTNULL_CONSTRAINT,
    3819: AdapterErrorCode.CHECK_CONSTRAINT,
}


def pymysql_error_code(error: BaseException) -> AdapterErrorCode:
    """Classify a PyMySQL error by errno (``args[0]``); duplicate PRIMARY key is a primary key error."""
    args = getattr(error, "args", ())
    errno = args[0] if args and isinstance(args[0], int) else None
    code = _ERRNO_CODES.get(errno, AdapterErrorCode.GENERIC) if errno is not None else AdapterErrorCode.GENERIC
    if code == AdapterErrorCode.UNIQUE_CONSTRAINT and "PRIMARY" in str(error):
        return AdapterErrorCode.PRIMARYKEY_CONSTRAINT
    return code


class PyMySQLAdapter(DbApiAdapter):
    """Wraps a ``pymysql`` connection, or opens one from keyword arguments."""

    paramstyle = "pyformat"
    driver_error = pymysql.Error

    def __init__(self, connection: Any = None, *, verbosity: int | None = None, **connect_kwargs: Any) -> None:
        if connection is None:
            connection = pymysql.connect(**connect_kwargs)
        super().__init__(connection, verbosity=verbosity)

    def map_error(self, error: BaseException) -> AdapterError:
        return AdapterError(str(error), pymysql_error_code(error), error)
