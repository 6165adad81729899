"""
Template lowering: literal SQL segments + placeholder values -> one SQL string.

Two template syntaxes are supported, both resolving values with
``resolve_placeholder``:

- ``str.format`` markers, via ``SqlHelper.sql``::

      s.sql("SELECT {} FROM {} WHERE {} = {}", "@users.*", "@users", "@users.id", ":id")

  Literal braces (e.g. a ``'{}'`` JSON default) must be doubled: ``'{{}}'``.

- Jinja2, via ``SQLTemplateEngine.render`` / ``SqlHelper.render``; every
  ``{{ }}`` output is resolved by the Environment ``finalize`` hook. Optional
  clauses are written with the ``sql_cond`` global.

Compiled templates are not cached; each call parses its template again.
Whitespace is never normalized.
"""

from __future__ import annotations

import string
from collections.abc import Mapping, Sequence
from typing import Any

from jinja2 import Environment, TemplateError, TemplateSyntaxError, meta

from schemql.engines.sql.filters import SQL_FILTERS, SQL_GLOBALS, make_finalize, sql_cond, sql_raw
from schemql.engines.sql.placeholders import resolve_placeholder

_FORMATTER = string.Formatter()


def _preview(template: str) -> str:
    return template[:500] + "..." if len(template) > 500 else template


def lower(
    segments: Sequence[str],
    values: Sequence[Any],
    *,
    quote_identifiers: bool = False,
) -> str:
    """
    Concatenate segment0, value0, segment1, ..., segmentN.

    ``values`` must have exactly one element fewer than ``segments``; a None
    value contributes nothing.
    """
    if len(values) != len(segments) - 1:
        raise ValueError(
            f"SQL template has {len(segments)} segments but {len(values)} values; "
            f"expected {max(len(segments) - 1, 0)} values."
        )
    out: list[str] = []
    for i, segment in enumerate(segments):
        out.append(segment)
        if i < len(values) and values[i] is not None:
            out.append(resolve_placeholder(values[i], quote_identifiers=quote_identifiers))
    return "".join(out)


def split_template(template: str) -> tuple[list[str], list[str]]:
    """
    Split a ``str.format`` style template into literal segments and field names.

    ``"a {} b {name} c"`` -> ``(["a ", " b ", " c"], ["", "name"])``.
    ``{{`` / ``}}`` are literal braces. Format specs and conversions are rejected.
    """
    segments: list[str] = []
    fields: list[str] = []
    buf: list[str] = []
    try:
        parsed = list(_FORMATTER.parse(template))
    except ValueError as e:
        raise ValueError(f"SQL template syntax error: {e}. Template preview:\n{_preview(template)}") from e

    for literal, field_name, format_spec, conversion in parsed:
        buf.append(literal)
        if field_name is None:
            continue
        if format_spec or conversion:
            raise ValueError(
                f"SQL template field {{{field_name}}} may not use a format spec or conversion. "
                f"Template preview:\n{_preview(template)}"
            )
        segments.append("".join(buf))
        fields.append(field_name)
        buf = []
    segments.append("".join(buf))
    return segments, fields


def _pick_values(
    template: str,
    fields: list[str],
    values: Sequence[Any],
    named: Mapping[str, Any],
) -> list[Any]:
    picked: list[Any] = []
    auto = 0
    used: set[int] = set()
    for name in fields:
        if name == "":
            if auto >= len(values):
                raise ValueError(
                    f"SQL template has more {{}} fields than values ({len(values)}). "
                    f"Template preview:\n{_preview(template)}"
                )
            picked.append(values[auto])
            used.add(auto)
            auto += 1
        elif name.isdigit():
            index = int(name)
            if index >= len(values):
                raise ValueError(f"SQL template field {{{name}}} out of range: {len(values)} values given.")
            picked.append(values[index])
            used.add(index)
        else:
            if name not in named:
                raise ValueError(
                    f"SQL template variable not found: {name!r}. Available: {sorted(named)}."
                )
            picked.append(named[name])
    if len(used) != len(values):
        raise ValueError(
            f"SQL template has {len(values) - len(used)} unused values ({len(values)} given). "
            f"Template preview:\n{_preview(template)}"
        )
    return picked


class SQLTemplateEngine:
    """Renders Jinja2 placeholder templates and parses their variable names."""

    def __init__(self, *, quote_identifiers: bool = False) -> None:
        self.quote_identifiers = quote_identifiers
        self.env = Environment(
            autoescape=False,
            finalize=make_finalize(quote_identifiers=quote_identifiers),
        )
        self.env.filters.update(SQL_FILTERS)
        self.env.globals.update(SQL_GLOBALS)

    def render(self, template: str, values: Mapping[str, Any] | None = None) -> str:
        """Render *template* with *values* to a final SQL string."""
        _values = dict(values or {})
        try:
            return self.env.from_string(template).render(**_values)
        except TemplateSyntaxError as e:
            raise ValueError(
                f"SQL template syntax error: {e}. "
                f"Values: {list(_values.keys())}. Template preview:\n{_preview(template)}"
            ) from e
        except TemplateError as e:
            raise ValueError(
                f"SQL template render error: {e}. "
                f"Values: {list(_values.keys())}. Template preview:\n{_preview(template)}"
            ) from e

    def parse_parameters(self, template: str) -> list[str]:
        """Extract variable names used in ``{{ }}`` and ``{% %}`` (undeclared, globals excluded)."""
        ast = self.env.parse(template)
        names = meta.find_undeclared_variables(ast) - set(self.env.globals)
        return sorted(names)


class SqlHelper:
    """
    Helpers handed to SQL builder functions::

        await db.first(lambda s: s.sql("SELECT {} FROM {}", "@users.*", "@users"))
    """

    def __init__(self, *, quote_identifiers: bool = False) -> None:
        self.quote_identifiers = quote_identifiers
        self._engine: SQLTemplateEngine | None = None

    def sql(self, template: str | Sequence[str], *values: Any, **named: Any) -> str:
        """
        Lower a template. *template* is either a ``str.format`` style string or
        the already split literal segments (one more than *values*).
        """
        if isinstance(template, str):
            segments, fields = split_template(template)
            picked = _pick_values(template, fields, values, named)
        else:
            segments, picked = list(template), list(values)
        return lower(segments, picked, quote_identifiers=self.quote_identifiers)

    def render(self, template: str, **values: Any) -> str:
        """Render a Jinja2 template; ``{{ }}`` outputs are resolved as placeholders."""
        if self._engine is None:
            self._engine = SQLTemplateEngine(quote_identifiers=self.quote_identifiers)
        return self._engine.render(template, values)

    @staticmethod
    def sql_cond(condition: Any, if_true: Any, if_false: Any = "") -> str:
        return sql_cond(condition, if_true, if_false)

    @staticmethod
    def sql_raw(value: Any) -> str:
        return sql_raw(value)

    raw_fragment = sql_raw


def parse_parameters(template: str) -> list[str]:
    """
    Extract variable names used in a Jinja2 placeholder template.

    Returns the names that should be provided to ``SQLTemplateEngine.render``.
    """
    return SQLTemplateEngine().parse_parameters(template)
