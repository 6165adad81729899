"""
Placeholder resolution and template lowering.

Exports: resolve_placeholder, lower, split_template, sql_cond, sql_raw,
SqlHelper, SQLTemplateEngine, parse_parameters.
"""

from schemql.engines.sql.filters import sql_cond, sql_raw
from schemql.engines.sql.placeholders import quote_json_arrow_path, resolve_placeholder
from schemql.engines.sql.template_engine import (
    SqlHelper,
    SQLTemplateEngine,
    lower,
    parse_parameters,
    split_template,
)

__all__ = [
    "resolve_placeholder",
    "quote_json_arrow_path",
    "lower",
    "split_template",
    "sql_cond",
    "sql_raw",
    "SqlHelper",
    "SQLTemplateEngine",
    "parse_parameters",
]
