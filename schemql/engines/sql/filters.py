"""
Jinja2 filters and globals for placeholder templates.

Every ``{{ }}`` output goes through ``make_finalize`` which hands the value to
the placeholder resolver, so ``{{ "@users.id" }}`` renders ``users.id`` and an
undefined variable renders nothing. Filters only add the sentinel for a kind
so that plain names can be used in templates::

    SELECT {{ cols | raw }} FROM {{ table | ref }} WHERE id = {{ "id" | param }}
"""

from collections.abc import Callable
from typing import Any

from jinja2 import Undefined

from schemql.engines.sql.placeholders import PARAM, RAW, REFERENCE, RESULT_KEY, resolve_placeholder


def sql_raw(value: Any) -> str:
    """Mark *value* as a raw SQL fragment, emitted verbatim."""
    return f"{RAW}{value}"


def sql_cond(condition: Any, if_true: Any, if_false: Any = "") -> str:
    """Raw fragment chosen by *condition*: ``if_true`` or ``if_false`` (default empty)."""
    return f"{RAW}{if_true if condition else if_false}"


def ref(value: Any) -> str:
    """``users.id`` -> ``@users.id``. Values already carrying ``@`` are kept."""
    s = str(value)
    return s if s.startswith(REFERENCE) else f"{REFERENCE}{s}"


def alias(value: Any) -> str:
    """``users.id`` -> ``@users.id-`` (renders as the bare column name)."""
    return f"{ref(value)}-"


def result_key(value: Any) -> str:
    return f"{RESULT_KEY}{value}"


def param(value: Any) -> str:
    return f"{PARAM}{value}"


def make_finalize(*, quote_identifiers: bool = False) -> Callable[[Any], str]:
    """Build the Jinja2 ``finalize`` callback: undefined/None -> "", else resolve."""

    def finalize(value: Any) -> str:
        if value is None or isinstance(value, Undefined):
            return ""
        return resolve_placeholder(value, quote_identifiers=quote_identifiers)

    return finalize


SQL_FILTERS: dict[str, Any] = {
    "raw": sql_raw,
    "ref": ref,
    "alias": alias,
    "result_key": result_key,
    "param": param,
}

SQL_GLOBALS: dict[str, Any] = {
    "sql_raw": sql_raw,
    "sql_cond": sql_cond,
}
