from __future__ import annotations

from gym_attendance.database.bootstrap import (
    SCHEMA_PATH,
    SEED_PATH,
    _iter_sql_statements,
    _strip_create_db_and_use,
    _strip_line_comments,
)


def test_splitter_keeps_semicolons_inside_quotes():
    sql = "INSERT INTO t VALUES ('a;b'); INSERT INTO t VALUES (\"c;d\");"

    assert list(_iter_sql_statements(sql)) == ["INSERT INTO t VALUES ('a;b')", 'INSERT INTO t VALUES ("c;d")']


def test_create_database_and_use_are_stripped():
    sql = "CREATE DATABASE foo;\nUSE foo;\nCREATE TABLE t (id INT);"

    assert list(_iter_sql_statements(_strip_create_db_and_use(sql))) == ["CREATE TABLE t (id INT)"]


def test_schema_file_has_attendance_table_with_open_session_key():
    statements = list(_iter_sql_statements(_strip_line_comments(SCHEMA_PATH.read_text(encoding="utf-8"))))

    attendance = next(s for s in statements if "member_attendance" in s)
    assert len(statements) == 5
    assert "uq_attendance_open_per_day" in attendance
    assert "open_marker" in attendance


def test_seed_file_is_present():
    assert SEED_PATH.exists()
    assert list(_iter_sql_statements(_strip_line_comments(SEED_PATH.read_text(encoding="utf-8"))))
