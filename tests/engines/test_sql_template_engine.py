"""Unit tests for engines.sql.template_engine."""

import pytest

from schemql.engines.sql import (
    SqlHelper,
    SQLTemplateEngine,
    lower,
    parse_parameters,
    split_template,
    sql_cond,
    sql_raw,
)


class TestLower:
    def test_no_placeholders(self):
        assert lower(["SELECT 1"], []) == "SELECT 1"

    def test_interleaves_segments_and_values(self):
        out = lower(["SELECT ", " FROM ", " WHERE ", " = ", ""], ["@users.*", "@users", "@users.id", ":id"])
        assert out == "SELECT users.* FROM users WHERE users.id = :id"

    def test_none_contributes_nothing(self):
        assert lower(["SELECT 1", ""], [None]) == "SELECT 1"

    def test_value_count_mismatch(self):
        with pytest.raises(ValueError, match="expected 1 values"):
            lower(["SELECT ", ""], ["@users.*", "@users"])
        with pytest.raises(ValueError, match="expected 1 values"):
            lower(["SELECT ", ""], [])

    def test_whitespace_kept(self):
        assert lower(["\nSELECT\n  ", "\n"], ["@users.*"]) == "\nSELECT\n  users.*\n"

    def test_quote_identifiers(self):
        out = lower(["INSERT INTO ", " VALUES (:id)"], [{"users": ["id"]}], quote_identifiers=True)
        assert out == 'INSERT INTO "users" (id) VALUES (:id)'


class TestFragments:
    def test_cond_true(self):
        assert lower(["", ""], [sql_cond(True, "X", "Y")]) == "X"

    def test_cond_false(self):
        assert lower(["", ""], [sql_cond(False, "X", "Y")]) == "Y"

    def test_cond_default_else(self):
        assert sql_cond(False, "X") == "§"
        assert lower(["a", "b"], [sql_cond(False, "X")]) == "ab"

    def test_cond_number(self):
        assert lower(["LIMIT ", ""], [sql_cond(True, 10)]) == "LIMIT 10"

    def test_raw(self):
        assert sql_raw("ORDER BY 1") == "§ORDER BY 1"
        assert lower(["", ""], [sql_raw(5)]) == "5"


class TestSplitTemplate:
    def test_positional_and_named(self):
        assert split_template("a {} b {name} c") == (["a ", " b ", " c"], ["", "name"])

    def test_escaped_braces(self):
        segments, fields = split_template("DEFAULT '{{}}' {}")
        assert segments == ["DEFAULT '{}' ", ""]
        assert fields == [""]

    def test_format_spec_rejected(self):
        with pytest.raises(ValueError, match="format spec"):
            split_template("{:>10}")

    def test_unbalanced(self):
        with pytest.raises(ValueError, match="syntax error"):
            split_template("SELECT }")


class TestSqlHelper:
    def test_sql_positional(self):
        s = SqlHelper()
        out = s.sql("SELECT * FROM {} WHERE {} = {}", "@users", "@users.id", ":id")
        assert out == "SELECT * FROM users WHERE users.id = :id"

    def test_sql_indexed_and_named(self):
        s = SqlHelper()
        out = s.sql("SELECT {0}, {key} FROM {1}", "@users.id", "@users", key="$n")
        assert out == "SELECT users.id, n FROM users"

    def test_sql_segments(self):
        s = SqlHelper()
        assert s.sql(["SELECT * FROM ", ""], "@users") == "SELECT * FROM users"

    def test_sql_missing_value(self):
        with pytest.raises(ValueError, match="more"):
            SqlHelper().sql("{} {}", "@users")

    def test_sql_segments_extra_value(self):
        with pytest.raises(ValueError, match="2 segments but 2 values"):
            SqlHelper().sql(["SELECT ", ""], "@users.*", "@users")

    def test_sql_segments_missing_value(self):
        with pytest.raises(ValueError, match="3 segments but 1 values"):
            SqlHelper().sql(["SELECT ", " FROM ", ""], "@users.*")

    def test_sql_extra_positional_value(self):
        with pytest.raises(ValueError, match="1 unused values"):
            SqlHelper().sql("SELECT * FROM {}", "@users", "@users.id")

    def test_sql_indexed_reuse(self):
        assert SqlHelper().sql("{0} = {0}", "@users.id") == "users.id = users.id"

    def test_sql_missing_name(self):
        with pytest.raises(ValueError, match="not found"):
            SqlHelper().sql("{table}")

    def test_sql_cond_and_raw(self):
        s = SqlHelper()
        out = s.sql("SELECT * FROM {}{}{}", "@users", s.sql_cond(True, " WHERE 1 = 1"), s.raw_fragment(" LIMIT 1"))
        assert out == "SELECT * FROM users WHERE 1 = 1 LIMIT 1"

    def test_render(self):
        s = SqlHelper()
        out = s.render("SELECT * FROM {{ t }} WHERE {{ c }} = :id", t="@users", c="@users.id")
        assert out == "SELECT * FROM users WHERE users.id = :id"


class TestSQLTemplateEngineRender:
    def test_values_resolved(self):
        e = SQLTemplateEngine()
        assert e.render("SELECT {{ x }}", {"x": "@users.email-"}) == "SELECT email"

    def test_undefined_renders_empty(self):
        e = SQLTemplateEngine()
        assert e.render("SELECT 1{{ missing }}", {}) == "SELECT 1"

    def test_filters(self):
        e = SQLTemplateEngine()
        t = "SELECT {{ 'users.id' | ref }} AS {{ 'users.id' | alias }}, {{ 'n' | result_key }} WHERE id = {{ 'id' | param }}"
        assert e.render(t) == "SELECT users.id AS id, n WHERE id = :id"

    def test_sql_cond_global(self):
        e = SQLTemplateEngine()
        t = "SELECT * FROM users{{ sql_cond(active, ' WHERE disabled_at IS NULL') }}"
        assert e.render(t, {"active": True}) == "SELECT * FROM users WHERE disabled_at IS NULL"
        assert e.render(t, {"active": False}) == "SELECT * FROM users"

    def test_table_columns(self):
        e = SQLTemplateEngine(quote_identifiers=True)
        assert e.render("INSERT INTO {{ cols }}", {"cols": {"users": ["id"]}}) == 'INSERT INTO "users" (id)'

    def test_optional_clause_via_sql_cond(self):
        e = SQLTemplateEngine()
        t = "SELECT * FROM {{ 'users' | ref }}{{ sql_cond(id, ' WHERE id = :id') }}"
        assert e.render(t, {"id": "u1"}) == "SELECT * FROM users WHERE id = :id"
        assert e.render(t, {}) == "SELECT * FROM users"

    def test_where_tag_not_registered(self):
        with pytest.raises(ValueError, match="syntax error"):
            SQLTemplateEngine().render("SELECT 1 {% where %}{% endwhere %}")

    def test_syntax_error(self):
        with pytest.raises(ValueError, match="syntax error"):
            SQLTemplateEngine().render("SELECT {% if %}")


class TestParseParameters:
    def test_vars(self):
        assert parse_parameters("{{ a }} and {{ b }}") == ["a", "b"]

    def test_globals_excluded(self):
        assert parse_parameters("{{ sql_cond(flag, 'x') }}") == ["flag"]
