"""
Tests for statement classification.
"""

import pytest

from multisql.dialects import (
    COCKROACHDB,
    DUCKDB,
    DYNAMODB,
    FLIGHTSQL,
    GENERIC,
    POSTGRES,
    REDIS,
    REDSHIFT,
    SQLITE,
    StatementKind,
)


class TestParseSql:
    """Tests for DDL/DML/query classification."""

    @pytest.mark.parametrize("sql", [
        "CREATE TABLE users (id INTEGER, name TEXT)",
        "DROP TABLE users",
        "ALTER TABLE users ADD COLUMN email TEXT",
        "CREATE INDEX idx_name ON users (name)",
        "CREATE VIEW v AS SELECT 1",
    ])
    def test_ddl(self, sql):
        assert SQLITE.parse_sql(sql) is StatementKind.DDL

    @pytest.mark.parametrize("sql", [
        "INSERT INTO users (id, name) VALUES (1, 'John Doe')",
        "UPDATE users SET name = 'x' WHERE id = 1",
        "DELETE FROM users WHERE id = 1",
    ])
    def test_dml(self, sql):
        assert POSTGRES.parse_sql(sql) is StatementKind.DML

    @pytest.mark.parametrize("sql", [
        "SELECT id, name FROM users ORDER BY id",
        "WITH t AS (SELECT 1 AS x) SELECT x FROM t",
        "SELECT 1 UNION SELECT 2",
    ])
    def test_query(self, sql):
        assert DUCKDB.parse_sql(sql) is StatementKind.QUERY

    def test_unparseable_select_is_query(self):
        assert GENERIC.parse_sql("select * from users where ((((") is StatementKind.QUERY

    def test_unparseable_other_is_unknown(self):
        assert GENERIC.parse_sql("frobnicate ((") is StatementKind.UNKNOWN


class TestDialectTags:
    """Tests for dialect naming."""

    def test_redshift_distinct_from_postgres(self):
        assert REDSHIFT != POSTGRES
        assert str(REDSHIFT) == "redshift"

    def test_shared_parser(self):
        assert COCKROACHDB.sqlglot_dialect == "postgres"
        assert GENERIC.sqlglot_dialect is None

    @pytest.mark.parametrize("dialect", [GENERIC, FLIGHTSQL, DYNAMODB, REDIS])
    def test_generic_dialects_have_no_parser_name(self, dialect):
        assert dialect.sqlglot_dialect is None
