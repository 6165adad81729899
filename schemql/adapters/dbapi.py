"""
Base adapter for DB-API 2.0 connections.

Implements the four query functions on top of ``connection.cursor()``:

- ``:name`` placeholders are converted to the driver's paramstyle once per
  prepared query (quoted literals and ``::`` casts are left alone);
- rows are turned into dicts from ``cursor.description``;
- driver exceptions are mapped to ``AdapterError`` by ``map_error``.

Transactions are the caller's business: nothing here commits or rolls back.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterator, Mapping
from typing import Any

from schemql.core.config import settings
from schemql.core.errors import AdapterError, AdapterErrorCode, NoResultError

_log = logging.getLogger(__name__)

# Quoted literal | quoted identifier | cast | :name | percent sign
_TOKEN = re.compile(
    r"(?P<literal>'(?:[^']|'')*')"
    r"|(?P<ident>\"(?:[^\"]|\"\")*\")"
    r"|(?P<cast>::)"
    r"|:(?P<name>[A-Za-z_][A-Za-z0-9_]*)"
    r"|(?P<percent>%)"
)


def convert_named_params(sql: str, paramstyle: str = "named") -> tuple[str, list[str]]:
    """
    Rewrite ``:name`` placeholders for *paramstyle* and return the names in order.

    - ``named``: SQL unchanged.
    - ``pyformat``: ``:name`` -> ``%(name)s`` and literal ``%`` -> ``%%``.
    """
    names: list[str] = []

    def repl(m: re.Match[str]) -> str:
        if m.group("name") is not None:
            names.append(m.group("name"))
            if paramstyle == "pyformat":
                return f"%({m.group('name')})s"
            return m.group(0)
        if paramstyle == "pyformat":
            return m.group(0).replace("%", "%%")
        return m.group(0)

    converted = _TOKEN.sub(repl, sql)
    return converted, names


def cursor_to_dicts(cursor: Any) -> list[dict[str, Any]]:
    """Convert cursor result to list of dicts. Works for sqlite3, psycopg and pymysql."""
    desc = cursor.description
    if not desc:
        return []
    names = [d[0] for d in desc]
    return [dict(zip(names, row, strict=True)) for row in cursor.fetchall()]


def _format_value(value: Any) -> str:
    if value is None:
        return "NULL"
    if isinstance(value, str):
        return "'" + value.replace("'", "''") + "'"
    return str(value)


def interpolate_sql(sql: str, params: Mapping[str, Any] | None) -> str:
    """``:name`` -> value, for logging only; never execute the output."""
    _params = params or {}

    def repl(m: re.Match[str]) -> str:
        name = m.group("name")
        if name is not None and name in _params:
            return _format_value(_params[name])
        return m.group(0)

    return _TOKEN.sub(repl, sql)


class DbApiAdapter:
    """Query functions over a DB-API connection."""

    paramstyle = "named"
    driver_error: type[BaseException] = Exception

    def __init__(self, connection: Any, *, verbosity: int | None = None) -> None:
        self.connection = connection
        self.verbosity = settings.LOG_SQL_VERBOSITY if verbosity is None else verbosity

    def prepare(self, sql: str) -> str:
        converted, _ = convert_named_params(sql, self.paramstyle)
        if self.verbosity > 1:
            _log.info("-- PREPARED --\n%s", converted)
        return converted

    def map_error(self, error: BaseException) -> AdapterError:
        return AdapterError(str(error), AdapterErrorCode.GENERIC, error)

    def _execute(self, prepared: str, sql: str, params: Mapping[str, Any] | None) -> Any:
        if self.verbosity > 0:
            _log.info("++ EXECUTED ++\n%s", interpolate_sql(sql, params))
        cur = self.connection.cursor()
        try:
            cur.execute(prepared, dict(params or {}))
        except self.driver_error as e:
            cur.close()
            raise self.map_error(e) from e
        return cur

    def query_all(self, sql: str) -> Callable[..., list[dict[str, Any]]]:
        prepared = self.prepare(sql)

        def run(params: Mapping[str, Any] | None = None) -> list[dict[str, Any]]:
            cur = self._execute(prepared, sql, params)
            try:
                return cursor_to_dicts(cur)
            except self.driver_error as e:
                raise self.map_error(e) from e
            finally:
                cur.close()

        return run

    def query_first(self, sql: str) -> Callable[..., dict[str, Any] | None]:
        prepared = self.prepare(sql)

        def run(params: Mapping[str, Any] | None = None) -> dict[str, Any] | None:
            cur = self._execute(prepared, sql, params)
            try:
                if not cur.description:
                    return None
                row = cur.fetchone()
                if row is None:
                    return None
                return dict(zip([d[0] for d in cur.description], row, strict=True))
            except self.driver_error as e:
                raise self.map_error(e) from e
            finally:
                cur.close()

        return run

    def query_first_or_throw(self, sql: str) -> Callable[..., dict[str, Any]]:
        first = self.query_first(sql)

        def run(params: Mapping[str, Any] | None = None) -> dict[str, Any]:
            result = first(params)
            if result is None:
                raise NoResultError()
            return result

        return run

    def query_iterate(self, sql: str) -> Callable[..., Iterator[dict[str, Any]]]:
        prepared = self.prepare(sql)

        def run(params: Mapping[str, Any] | None = None) -> Iterator[dict[str, Any]]:
            cur = self._execute(prepared, sql, params)
            try:
                if not cur.description:
                    return
                names = [d[0] for d in cur.description]
                while True:
                    try:
                        row = cur.fetchone()
                    except self.driver_error as e:
                        raise self.map_error(e) from e
                    if row is None:
                        return
                    yield dict(zip(names, row, strict=True))
            finally:
                cur.close()

        return run

    def close(self) -> None:
        self.connection.close()
