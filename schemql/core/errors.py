"""
Error taxonomy.

- ConfigurationError: no query function available for an entry point.
- ParamsValidationError / ResultValidationError: a validator rejected a value;
  ``issues`` holds the validator's structured issue list.
- AdapterError: raised by adapters, tagged with an ``AdapterErrorCode`` so
  callers can branch on constraint violations without knowing the driver.
- NoResultError: a "first or throw" call found nothing.

Anything else raised by a query function is propagated unchanged.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any


class SchemQlError(Exception):
    """Base class for every error raised by schemql itself."""

    pass


class ConfigurationError(SchemQlError, ValueError):
    """Raised when no query function is available for the requested entry point."""

    pass


class ValidationFailedError(SchemQlError, ValueError):
    """Raised when a validator rejects a value. Carries the issue list."""

    def __init__(self, issues: list[Any], value: Any = None, *, kind: str = "") -> None:
        self.issues = issues
        self.value = value
        prefix = f"{kind} validation failed" if kind else "Validation failed"
        super().__init__(f"{prefix}: {_format_issues(issues)}")


class ParamsValidationError(ValidationFailedError):
    """Raised when the params validator rejects the supplied params."""

    def __init__(self, issues: list[Any], value: Any = None) -> None:
        super().__init__(issues, value, kind="Params")


class ResultValidationError(ValidationFailedError):
    """Raised when the result validator rejects a raw record; ``raw`` is the record."""

    def __init__(self, issues: list[Any], value: Any = None) -> None:
        super().__init__(issues, value, kind="Result")

    @property
    def raw(self) -> Any:
        return self.value


class AdapterErrorCode(str, Enum):
    """Driver-independent classification of adapter failures."""

    INVALID_PARAMS = "INVALID_PARAMS"
    INVALID_RESULTS = "INVALID_RESULTS"
    UNIQUE_CONSTRAINT = "UNIQUE_CONSTRAINT"
    FOREIGNKEY_CONSTRAINT = "FOREIGNKEY_CONSTRAINT"
    NOTNULL_CONSTRAINT = "NOTNULL_CONSTRAINT"
    CHECK_CONSTRAINT = "CHECK_CONSTRAINT"
    PRIMARYKEY_CONSTRAINT = "PRIMARYKEY_CONSTRAINT"
    NO_RESULT = "NO_RESULT"
    GENERIC = "GENERIC"


class AdapterError(SchemQlError):
    """Raised by adapters. ``original_error`` is the driver exception, if any."""

    def __init__(
        self,
        message: str,
        code: AdapterErrorCode = AdapterErrorCode.GENERIC,
        original_error: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.original_error = original_error

    def is_no_result_error(self) -> bool:
        return self.code == AdapterErrorCode.NO_RESULT


class NoResultError(AdapterError, LookupError):
    """Raised when a "first or throw" query returns no row."""

    def __init__(self, message: str = "No result", original_error: BaseException | None = None) -> None:
        super().__init__(message, AdapterErrorCode.NO_RESULT, original_error)


def _format_issues(issues: list[Any]) -> str:
    plain = [issue.to_dict() if hasattr(issue, "to_dict") else issue for issue in issues]
    return json.dumps(plain, indent=2, default=str)
