"""
SchemQl: the public entry points.

    db = SchemQl(SqliteAdapter(":memory:"))
    user = await db.first(
        lambda s: s.sql("SELECT {} FROM {} WHERE {} = {}", "@users.*", "@users", "@users.id", ":id"),
        params={"id": "u1"},
        result_schema=User,
    )

``first`` / ``first_or_throw`` / ``all`` return the (validated) result for a
single params mapping, or an async generator when ``params`` is a list, a
generator or an async generator. ``iterate`` always returns an async
generator over the rows produced by the adapter's ``query_iterate``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

from schemql.core.config import settings
from schemql.core.errors import ConfigurationError
from schemql.core.validator import as_validator
from schemql.engines.executor import QueryDispatcher, QueryFn
from schemql.engines.sql import SqlHelper

_log = logging.getLogger(__name__)

SqlOrBuilder = str | Callable[[SqlHelper], str]


@runtime_checkable
class QueryAdapter(Protocol):
    """
    Query functions take SQL and return a callable taking optional params.

    ``query_first``/``query_first_or_throw``/``query_all`` return the result
    (or an awaitable of it); ``query_iterate`` returns an iterable or async
    iterable of rows (or a zero-argument callable producing one).
    """

    def query_first(self, sql: str) -> Callable[..., Any]: ...

    def query_first_or_throw(self, sql: str) -> Callable[..., Any]: ...

    def query_all(self, sql: str) -> Callable[..., Any]: ...

    def query_iterate(self, sql: str) -> Callable[..., Any]: ...


class SchemQl:
    def __init__(
        self,
        adapter: QueryAdapter | None = None,
        *,
        stringify_object_params: bool | None = None,
        quote_sql_identifiers: bool | None = None,
    ) -> None:
        self.adapter = adapter
        self.stringify_object_params = (
            settings.STRINGIFY_OBJECT_PARAMS if stringify_object_params is None else stringify_object_params
        )
        self.quote_sql_identifiers = (
            settings.QUOTE_SQL_IDENTIFIERS if quote_sql_identifiers is None else quote_sql_identifiers
        )
        self._dispatcher = QueryDispatcher(stringify_object_params=self.stringify_object_params)

    async def first(
        self,
        sql: SqlOrBuilder,
        *,
        params: Any = None,
        params_schema: Any = None,
        result_schema: Any = None,
        query_fn: QueryFn | None = None,
    ) -> Any:
        """First row or None (validated when *result_schema* is given)."""
        return await self._execute("query_first", sql, params, params_schema, result_schema, query_fn)

    async def first_or_throw(
        self,
        sql: SqlOrBuilder,
        *,
        params: Any = None,
        params_schema: Any = None,
        result_schema: Any = None,
        query_fn: QueryFn | None = None,
    ) -> Any:
        """First row; raises NoResultError when there is none."""
        return await self._execute(
            "query_first_or_throw", sql, params, params_schema, result_schema, query_fn, require_result=True
        )

    async def all(
        self,
        sql: SqlOrBuilder,
        *,
        params: Any = None,
        params_schema: Any = None,
        result_schema: Any = None,
        query_fn: QueryFn | None = None,
    ) -> Any:
        """All rows. *result_schema* validates the whole list (e.g. ``list[User]``)."""
        return await self._execute("query_all", sql, params, params_schema, result_schema, query_fn)

    async def iterate(
        self,
        sql: SqlOrBuilder,
        *,
        params: Any = None,
        params_schema: Any = None,
        result_schema: Any = None,
        query_fn: QueryFn | None = None,
    ) -> Any:
        """Async generator over rows; *result_schema* validates each row."""
        fn = self._query_fn("query_iterate", query_fn)
        return await self._dispatcher.iterate(
            fn,
            self.build_sql(sql),
            params=params,
            params_validator=as_validator(params_schema),
            result_validator=as_validator(result_schema),
        )

    def build_sql(self, sql: SqlOrBuilder) -> str:
        """Return *sql* itself, or the output of a builder called with a SqlHelper."""
        if callable(sql):
            sql = sql(SqlHelper(quote_identifiers=self.quote_sql_identifiers))
        if not isinstance(sql, str):
            raise TypeError(f"SQL builder must return str, got {type(sql).__name__}")
        _log.debug("Lowered SQL: %s", sql)
        return sql

    async def _execute(
        self,
        capability: str,
        sql: SqlOrBuilder,
        params: Any,
        params_schema: Any,
        result_schema: Any,
        query_fn: QueryFn | None,
        *,
        require_result: bool = False,
    ) -> Any:
        fn = self._query_fn(capability, query_fn)
        return await self._dispatcher.execute(
            fn,
            self.build_sql(sql),
            params=params,
            params_validator=as_validator(params_schema),
            result_validator=as_validator(result_schema),
            require_result=require_result,
        )

    def _query_fn(self, capability: str, override: QueryFn | None) -> QueryFn:
        if override is not None:
            return override
        fn = getattr(self.adapter, capability, None) if self.adapter is not None else None
        if not callable(fn):
            raise ConfigurationError(f"No query function available for {capability}")
        return fn
