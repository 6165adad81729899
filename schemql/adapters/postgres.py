"""
PostgreSQL adapter (psycopg 3). ``:name`` is rewritten to ``%(name)s``.
"""

from __future__ import annotations

from typing import Any

import psycopg

from schemql.adapters.dbapi import DbApiAdapter
from schemql.core.errors import AdapterError, AdapterErrorCode

# https://www.postgresql.org/docs/current/errcodes-appendix.html
_SQLSTATE_CODES = {
    "23505": AdapterErrorCode.UNIQUE_CONSTRAINT,
    "23503": AdapterErrorCode.FOREIGNKEY_CONSTRAINT,
    "23502": AdapterErrorCode.NOTNULL_CONSTRAINT,
    "23514": AdapterErrorCode.CHECK_CONSTRAINT,
}


def _constraint_name(error: BaseException) -> str | None:
    diag = getattr(error, "diag", None)
    return getattr(diag, "constraint_name", None) if diag is not None else None


def psycopg_error_code(error: BaseException) -> AdapterErrorCode:
    """Classify a psycopg error by SQLSTATE; a unique violation on ``*_pkey`` is a primary key error."""
    code = _SQLSTATE_CODES.get(getattr(error, "sqlstate", None) or "", AdapterErrorCode.GENERIC)
    if code == AdapterErrorCode.UNIQUE_CONSTRAINT:
        constraint = _constraint_name(error)
        if constraint and constraint.endswith("_pkey"):
            return AdapterErrorCode.PRIMARYKEY_CONSTRAINT
    return code


class PsycopgAdapter(DbApiAdapter):
    """Wraps a ``psycopg.Connection`` or opens one from a conninfo string."""

    paramstyle = "pyformat"
    driver_error = psycopg.Error

    def __init__(self, conninfo: str | Any, *, verbosity: int | None = None, **connect_kwargs: Any) -> None:
        if isinstance(conninfo, str):
            connection = psycopg.connect(conninfo, **connect_kwargs)
        else:
            connection = conninfo
        super().__init__(connection, verbosity=verbosity)

    def map_error(self, error: BaseException) -> AdapterError:
        return AdapterError(str(error), psycopg_error_code(error), error)
