"""
Execution-shape dispatcher.

Chooses how to run a lowered SQL string from the shape of ``params``:

- None / mapping: one call, the (validated) result is returned directly.
- list / tuple: params validated as a whole up front, SQL prepared once, then
  an async generator runs one element per pull.
- generator function / iterator: SQL prepared once; each pulled element is
  validated, executed and its result yielded.
- async generator function / async iterator: same, awaiting each pull.

``iterate`` is separate: the query function returns rows lazily and every
row is passed through the result validator.

Iterative runs are strictly sequential: element i+1 is not pulled from the
source before element i has been executed, validated and yielded. Stopping
iteration (or ``aclose()``) closes the params source; nothing in flight is
interrupted.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import AsyncIterable, AsyncIterator, Callable, Iterable, Mapping
from enum import Enum
from typing import Any

from pydantic import BaseModel

from schemql.core.errors import NoResultError
from schemql.core.param_validate import normalize_params
from schemql.core.result_validate import validate_result
from schemql.core.validator import Validator

_log = logging.getLogger(__name__)

PreparedQuery = Callable[..., Any]
QueryFn = Callable[[str], PreparedQuery]


class ParamsShapeEnum(str, Enum):
    """Shape of the params supplied to one call."""

    SINGLE = "single"
    LIST = "list"
    GENERATOR = "generator"
    ASYNC_GENERATOR = "async_generator"


def detect_params_shape(params: Any) -> ParamsShapeEnum:
    if params is None or isinstance(params, (Mapping, BaseModel, str, bytes)):
        return ParamsShapeEnum.SINGLE
    if isinstance(params, (list, tuple)):
        return ParamsShapeEnum.LIST
    if inspect.isasyncgenfunction(params) or isinstance(params, AsyncIterable):
        return ParamsShapeEnum.ASYNC_GENERATOR
    if callable(params) or isinstance(params, Iterable):
        return ParamsShapeEnum.GENERATOR
    return ParamsShapeEnum.SINGLE


async def _resolve(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


def _call(prepared: PreparedQuery, params: Any) -> Any:
    return prepared() if params is None else prepared(params)


class QueryDispatcher:
    """
    execute(query_fn, sql, *, params, ...) -> result | AsyncIterator[result]
    iterate(query_fn, sql, *, params, ...) -> AsyncIterator[result]

    A list of params fails fast: a bad element raises ParamsValidationError
    at ``await`` before any row is produced. Generators fail per element, on
    the pull that reaches the bad one.
    """

    def __init__(self, *, stringify_object_params: bool = False) -> None:
        self.stringify_object_params = stringify_object_params

    async def execute(
        self,
        query_fn: QueryFn,
        sql: str,
        *,
        params: Any = None,
        params_validator: Validator | None = None,
        result_validator: Validator | None = None,
        require_result: bool = False,
    ) -> Any:
        shape = detect_params_shape(params)
        _log.debug("Executing with %s params", shape.value)

        if shape == ParamsShapeEnum.LIST:
            # Fail fast: the whole list is validated before anything runs.
            normalized = await self._normalize(list(params), params_validator)
            prepared = query_fn(sql)
            return self._run_list(prepared, normalized, result_validator, require_result)

        if shape == ParamsShapeEnum.GENERATOR:
            prepared = query_fn(sql)
            return self._run_generator(prepared, params, params_validator, result_validator, require_result)

        if shape == ParamsShapeEnum.ASYNC_GENERATOR:
            prepared = query_fn(sql)
            return self._run_async_generator(prepared, params, params_validator, result_validator, require_result)

        normalized = await self._normalize(params, params_validator)
        result = await _resolve(_call(query_fn(sql), normalized))
        return await self._finish(result, result_validator, require_result)

    async def iterate(
        self,
        query_fn: QueryFn,
        sql: str,
        *,
        params: Any = None,
        params_validator: Validator | None = None,
        result_validator: Validator | None = None,
    ) -> AsyncIterator[Any]:
        normalized = await self._normalize(params, params_validator)
        prepared = query_fn(sql)
        return self._run_rows(prepared, normalized, result_validator)

    async def _normalize(self, params: Any, validator: Validator | None) -> Any:
        return await normalize_params(params, validator, stringify_objects=self.stringify_object_params)

    async def _finish(self, result: Any, validator: Validator | None, require_result: bool) -> Any:
        if require_result and result is None:
            raise NoResultError()
        return await validate_result(validator, result)

    async def _execute_one(
        self,
        prepared: PreparedQuery,
        params: Any,
        params_validator: Validator | None,
        result_validator: Validator | None,
        require_result: bool,
    ) -> Any:
        normalized = await self._normalize(params, params_validator)
        result = await _resolve(_call(prepared, normalized))
        return await self._finish(result, result_validator, require_result)

    async def _run_list(
        self,
        prepared: PreparedQuery,
        normalized: list[Any],
        result_validator: Validator | None,
        require_result: bool,
    ) -> AsyncIterator[Any]:
        for params in normalized:
            result = await _resolve(prepared(params))
            yield await self._finish(result, result_validator, require_result)

    async def _run_generator(
        self,
        prepared: PreparedQuery,
        source: Any,
        params_validator: Validator | None,
        result_validator: Validator | None,
        require_result: bool,
    ) -> AsyncIterator[Any]:
        items = source() if callable(source) else source
        if isinstance(items, AsyncIterable):
            # A plain callable that turned out to return an async iterable.
            async for result in self._run_async_generator(
                prepared, items, params_validator, result_validator, require_result
            ):
                yield result
            return

        try:
            for params in items:
                yield await self._execute_one(prepared, params, params_validator, result_validator, require_result)
        finally:
            close = getattr(items, "close", None)
            if callable(close):
                close()

    async def _run_async_generator(
        self,
        prepared: PreparedQuery,
        source: Any,
        params_validator: Validator | None,
        result_validator: Validator | None,
        require_result: bool,
    ) -> AsyncIterator[Any]:
        items = source() if callable(source) and not isinstance(source, AsyncIterable) else source
        try:
            async for params in items:
                yield await self._execute_one(prepared, params, params_validator, result_validator, require_result)
        finally:
            aclose = getattr(items, "aclose", None)
            if callable(aclose):
                await aclose()

    async def _run_rows(
        self,
        prepared: PreparedQuery,
        params: Any,
        result_validator: Validator | None,
    ) -> AsyncIterator[Any]:
        rows = await _resolve(_call(prepared, params))
        if callable(rows) and not isinstance(rows, (Iterable, AsyncIterable)):
            rows = rows()

        if isinstance(rows, AsyncIterable):
            async for raw in rows:
                yield await validate_result(result_validator, raw)
        else:
            for raw in rows:
                yield await validate_result(result_validator, raw)
