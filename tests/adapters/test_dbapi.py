"""Unit tests for adapters.dbapi: param conversion, row mapping, error mapping."""

from unittest.mock import MagicMock

import pytest

from schemql.adapters import DbApiAdapter, convert_named_params, cursor_to_dicts, interpolate_sql
from schemql.core import AdapterError, AdapterErrorCode, NoResultError


class TestConvertNamedParams:
    def test_named_unchanged(self):
        sql = "SELECT * FROM users WHERE id = :id AND email LIKE '%a%'"
        assert convert_named_params(sql) == (sql, ["id"])

    def test_pyformat(self):
        sql, names = convert_named_params("SELECT * FROM t WHERE a = :a AND b = :b", "pyformat")
        assert sql == "SELECT * FROM t WHERE a = %(a)s AND b = %(b)s"
        assert names == ["a", "b"]

    def test_pyformat_keeps_casts(self):
        sql, names = convert_named_params("SELECT :id::text, x::int", "pyformat")
        assert sql == "SELECT %(id)s::text, x::int"
        assert names == ["id"]

    def test_pyformat_skips_literals(self):
        sql, names = convert_named_params("SELECT ':not_a_param', \":nor_this\" WHERE a = :a", "pyformat")
        assert sql == "SELECT ':not_a_param', \":nor_this\" WHERE a = %(a)s"
        assert names == ["a"]

    def test_pyformat_escapes_percent(self):
        sql, _ = convert_named_params("SELECT * FROM t WHERE a LIKE 'x%' AND b = 5 % 2", "pyformat")
        assert sql == "SELECT * FROM t WHERE a LIKE 'x%%' AND b = 5 %% 2"

    def test_escaped_quote_in_literal(self):
        sql, names = convert_named_params("SELECT 'it''s :x' , :y", "pyformat")
        assert sql == "SELECT 'it''s :x' , %(y)s"
        assert names == ["y"]


def test_cursor_to_dicts() -> None:
    cur = MagicMock()
    cur.description = [("id",), ("email",)]
    cur.fetchall.return_value = [("u1", "a@b.c"), ("u2", "d@e.f")]
    assert cursor_to_dicts(cur) == [{"id": "u1", "email": "a@b.c"}, {"id": "u2", "email": "d@e.f"}]


def test_cursor_to_dicts_no_description() -> None:
    cur = MagicMock()
    cur.description = None
    assert cursor_to_dicts(cur) == []


def test_interpolate_sql() -> None:
    out = interpolate_sql("SELECT :a, :b, :c, :missing", {"a": "it's", "b": None, "c": 3})
    assert out == "SELECT 'it''s', NULL, 3, :missing"


class _PyformatAdapter(DbApiAdapter):
    paramstyle = "pyformat"
    driver_error = RuntimeError


def _connection(rows, description=(("id",),)):
    conn = MagicMock()
    cur = conn.cursor.return_value
    cur.description = list(description) if description else None
    cur.fetchall.return_value = rows
    cur.fetchone.side_effect = list(rows) + [None]
    return conn, cur


def test_query_all_converts_once_and_binds_dict() -> None:
    conn, cur = _connection([("u1",), ("u2",)])
    adapter = _PyformatAdapter(conn, verbosity=0)
    run = adapter.query_all("SELECT id FROM users WHERE id != :id")
    assert run({"id": "x"}) == [{"id": "u1"}, {"id": "u2"}]
    cur.execute.assert_called_once_with("SELECT id FROM users WHERE id != %(id)s", {"id": "x"})
    cur.close.assert_called_once()


def test_query_first_none_when_empty() -> None:
    conn, _ = _connection([])
    adapter = _PyformatAdapter(conn, verbosity=0)
    assert adapter.query_first("SELECT id FROM users")() is None


def test_query_first_or_throw() -> None:
    conn, _ = _connection([])
    adapter = _PyformatAdapter(conn, verbosity=0)
    with pytest.raises(NoResultError):
        adapter.query_first_or_throw("SELECT id FROM users")()


def test_query_iterate_is_lazy() -> None:
    conn, cur = _connection([("u1",), ("u2",)])
    adapter = _PyformatAdapter(conn, verbosity=0)
    rows = adapter.query_iterate("SELECT id FROM users")()
    cur.execute.assert_not_called()
    assert list(rows) == [{"id": "u1"}, {"id": "u2"}]
    cur.close.assert_called_once()


def test_driver_error_mapped() -> None:
    conn, cur = _connection([])
    cur.execute.side_effect = RuntimeError("bad")
    adapter = _PyformatAdapter(conn, verbosity=0)
    with pytest.raises(AdapterError) as exc_info:
        adapter.query_all("SELECT 1")()
    assert exc_info.value.code == AdapterErrorCode.GENERIC
    assert isinstance(exc_info.value.original_error, RuntimeError)
    assert not exc_info.value.is_no_result_error()


def test_verbose_logging(caplog) -> None:
    conn, _ = _connection([("u1",)])
    adapter = _PyformatAdapter(conn, verbosity=2)
    with caplog.at_level("INFO", logger="schemql.adapters.dbapi"):
        adapter.query_all("SELECT id FROM users WHERE id = :id")({"id": "u1"})
    assert "-- PREPARED --" in caplog.text
    assert "id = %(id)s" in caplog.text
    assert "id = 'u1'" in caplog.text
