"""
Validation, configuration and error types shared by the engines and adapters.
"""

from .errors import (
    AdapterError,
    AdapterErrorCode,
    ConfigurationError,
    NoResultError,
    ParamsValidationError,
    ResultValidationError,
    SchemQlError,
    ValidationFailedError,
)
from .param_validate import normalize_params, stringify_object_params
from .result_validate import validate_result
from .validator import (
    JsonText,
    PydanticValidator,
    ValidationIssue,
    ValidationResult,
    Validator,
    as_validator,
    parse_json,
)

__all__ = [
    "AdapterError",
    "AdapterErrorCode",
    "ConfigurationError",
    "NoResultError",
    "ParamsValidationError",
    "ResultValidationError",
    "SchemQlError",
    "ValidationFailedError",
    "normalize_params",
    "stringify_object_params",
    "validate_result",
    "JsonText",
    "PydanticValidator",
    "ValidationIssue",
    "ValidationResult",
    "Validator",
    "as_validator",
    "parse_json",
]
