"""
Params normalizer.

Runs the optional params validator and, when enabled, JSON-encodes object
valued fields so drivers that only bind scalars can store them.

- A single mapping is validated on its own.
- A list is validated as one unit (so an "array of rows" schema works), then
  every element is stringified independently.
- Generators are never passed here as a whole; the dispatcher normalizes one
  pulled element at a time.

The validator's *output* is what gets stringified and bound, so validators
may coerce or rename fields.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

from schemql.core.errors import ParamsValidationError
from schemql.core.validator import Validator, run_validator


def _is_object(value: Any) -> bool:
    return isinstance(value, (Mapping, list, tuple, BaseModel))


def _to_json(value: Any) -> str:
    if isinstance(value, BaseModel):
        value = value.model_dump(mode="json")
    return json.dumps(value, separators=(",", ":"), default=str)


def as_mapping(params: Any) -> Any:
    """Dump pydantic models to plain dicts; leave every other value alone."""
    if isinstance(params, BaseModel):
        return params.model_dump()
    return params


def stringify_object_params(params: Mapping[str, Any]) -> dict[str, Any]:
    """Replace every dict/list/model field with its JSON text; scalars and None pass through."""
    return {key: _to_json(value) if _is_object(value) else value for key, value in params.items()}


async def validate_params(validator: Validator | None, params: Any) -> Any:
    """Return the validator's output for *params*; raise ParamsValidationError on rejection."""
    if validator is None:
        return params
    result = await run_validator(validator, params)
    if result.issues:
        raise ParamsValidationError(result.issues, params)
    return result.value


async def normalize_params(
    params: Any,
    validator: Validator | None = None,
    *,
    stringify_objects: bool = False,
) -> Any:
    """
    Validate and (optionally) stringify a single params mapping or a list of them.

    - None -> None
    - mapping / model -> dict
    - list / tuple -> list of dicts, same length and order
    """
    if params is None:
        return None

    validated = await validate_params(validator, params)

    if isinstance(validated, (list, tuple)):
        rows = [as_mapping(row) for row in validated]
        if stringify_objects:
            return [stringify_object_params(row) for row in rows]
        return rows

    row = as_mapping(validated)
    if stringify_objects and isinstance(row, Mapping):
        return stringify_object_params(row)
    return row
