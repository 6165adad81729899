"""
Result validator runner: hands each raw record to the result validator.
"""

from __future__ import annotations

from typing import Any

from schemql.core.errors import ResultValidationError
from schemql.core.validator import Validator, run_validator


async def validate_result(validator: Validator | None, raw: Any) -> Any:
    """
    Return the validated record, or *raw* unchanged when no validator is set.

    Raises ResultValidationError (with ``raw`` attached) on rejection.
    """
    if validator is None:
        return raw
    result = await run_validator(validator, raw)
    if result.issues:
        raise ResultValidationError(result.issues, raw)
    return result.value
