"""
schemql: typed SQL templates over pluggable drivers.
"""

from schemql.core.errors import (
    AdapterError,
    AdapterErrorCode,
    ConfigurationError,
    NoResultError,
    ParamsValidationError,
    ResultValidationError,
    SchemQlError,
)
from schemql.core.validator import JsonText, ValidationIssue, ValidationResult, Validator, parse_json
from schemql.engines.sql import SqlHelper, lower, resolve_placeholder, sql_cond, sql_raw
from schemql.schemql import QueryAdapter, SchemQl

__all__ = [
    "SchemQl",
    "QueryAdapter",
    "SqlHelper",
    "lower",
    "resolve_placeholder",
    "sql_cond",
    "sql_raw",
    "Validator",
    "ValidationIssue",
    "ValidationResult",
    "JsonText",
    "parse_json",
    "AdapterError",
    "AdapterErrorCode",
    "ConfigurationError",
    "NoResultError",
    "ParamsValidationError",
    "ResultValidationError",
    "SchemQlError",
]
