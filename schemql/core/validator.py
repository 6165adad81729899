"""
Validator abstraction used for both params and results.

A validator is any object with ``validate(value)`` returning a
``ValidationResult`` (or an awaitable of one). Pydantic models, ``TypeAdapter``
instances and plain type annotations are accepted wherever a validator is
expected and are wrapped in ``PydanticValidator`` by ``as_validator``.
"""

from __future__ import annotations

import inspect
import json
from dataclasses import dataclass, field
from typing import Any, Awaitable, Protocol, runtime_checkable

from pydantic import BaseModel, BeforeValidator, TypeAdapter, ValidationError


@dataclass(frozen=True)
class ValidationIssue:
    message: str
    path: tuple[Any, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message, "path": list(self.path)}


@dataclass(frozen=True)
class ValidationResult:
    """Either ``value`` (success) or a non-empty ``issues`` list (failure)."""

    value: Any = None
    issues: list[ValidationIssue] | None = field(default=None)

    @property
    def ok(self) -> bool:
        return not self.issues


@runtime_checkable
class Validator(Protocol):
    def validate(self, value: Any) -> ValidationResult | Awaitable[ValidationResult]: ...


class PydanticValidator:
    """Validate with pydantic; ``ValidationError`` details become issues."""

    def __init__(self, schema: Any) -> None:
        self.schema = schema
        self._adapter: TypeAdapter[Any] = schema if isinstance(schema, TypeAdapter) else TypeAdapter(schema)

    def validate(self, value: Any) -> ValidationResult:
        try:
            return ValidationResult(value=self._adapter.validate_python(value))
        except ValidationError as e:
            issues = [
                ValidationIssue(message=err["msg"], path=tuple(err["loc"]))
                for err in e.errors(include_url=False)
            ]
            return ValidationResult(issues=issues)

    def __repr__(self) -> str:
        return f"PydanticValidator({self.schema!r})"


def as_validator(schema: Any) -> Validator | None:
    """
    Coerce *schema* into a validator.

    - None -> None (no validation)
    - pydantic model class / TypeAdapter -> PydanticValidator
    - object with a callable ``validate`` -> returned as is
    - anything else (``list[User]``, ``dict[str, int]``, TypedDict, ...) -> PydanticValidator
    """
    if schema is None:
        return None
    if isinstance(schema, TypeAdapter):
        return PydanticValidator(schema)
    if isinstance(schema, type) and issubclass(schema, BaseModel):
        return PydanticValidator(schema)
    if not isinstance(schema, type) and callable(getattr(schema, "validate", None)):
        return schema
    return PydanticValidator(schema)


async def run_validator(validator: Validator, value: Any) -> ValidationResult:
    """Call ``validator.validate(value)``, awaiting the result when needed."""
    result = validator.validate(value)
    if inspect.isawaitable(result):
        result = await result
    return result


def parse_json(value: Any) -> Any:
    """
    Pydantic before-validator: decode JSON text, pass anything else through.

    Useful for JSON columns that drivers hand back as strings::

        metadata: Annotated[dict, BeforeValidator(parse_json)]

    A decode error is a ValueError, so pydantic reports it as an issue.
    """
    if isinstance(value, str):
        return json.loads(value)
    return value


JsonText = BeforeValidator(parse_json)
