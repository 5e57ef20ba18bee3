"""
Tests for the SQLite driver.
"""

import pytest
import pytest_asyncio

from multisql.dialects import SQLITE, StatementKind
from multisql.errors import ConnectionClosed, ConnectionFailed, QueryError
from multisql.values import Value, ValueType

from conftest import USERS_QUERY


@pytest_asyncio.fixture
async def connection(manager):
    connection = await manager.connect("sqlite::memory:")
    yield connection
    await connection.close()


class TestSQLiteQueries:
    """Tests for statements and queries."""

    @pytest.mark.asyncio
    async def test_select_literal(self, connection):
        result = await connection.query("SELECT 1")
        assert result.columns() == ["1"]
        assert await result.next() == [Value(ValueType.I64, 1)]
        assert await result.next() is None

    @pytest.mark.asyncio
    async def test_round_trip(self, connection):
        await connection.execute("CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT NOT NULL)")
        assert await connection.execute("INSERT INTO users (id, name) VALUES (?, ?)", [1, "John Doe"]) == 1
        assert await connection.execute("INSERT INTO users (id, name) VALUES (?, ?)", [2, "Jane Smith"]) == 1

        result = await connection.query(USERS_QUERY)
        rows = await result.fetch_all()
        assert result.columns() == ["id", "name"]
        assert rows == [
            [Value.i64(1), Value.string("John Doe")],
            [Value.i64(2), Value.string("Jane Smith")],
        ]

    @pytest.mark.asyncio
    async def test_storage_classes(self, connection):
        result = await connection.query("SELECT 1.5, x'0102', NULL, 'text'")
        row = await result.next()
        assert [value.type for value in row] == [ValueType.F64, ValueType.BYTES, ValueType.NULL, ValueType.STRING]
        await result.close()

    @pytest.mark.asyncio
    async def test_update_count(self, connection):
        await connection.execute("CREATE TABLE t (x INTEGER)")
        await connection.execute("INSERT INTO t VALUES (1), (2), (3)")
        assert await connection.execute("UPDATE t SET x = x + 1 WHERE x > 1") == 2

    @pytest.mark.asyncio
    async def test_syntax_error(self, connection):
        with pytest.raises(QueryError):
            await connection.query("SELEC nonsense")

    @pytest.mark.asyncio
    async def test_parse_sql(self, connection):
        assert connection.dialect() == SQLITE
        assert connection.parse_sql("CREATE TABLE x (id INT)") is StatementKind.DDL


class TestSQLiteLifecycle:
    """Tests for close semantics."""

    @pytest.mark.asyncio
    async def test_close_is_idempotent(self, manager):
        connection = await manager.connect("sqlite::memory:")
        await connection.close()
        await connection.close()
        assert connection.closed

    @pytest.mark.asyncio
    async def test_operations_after_close(self, manager):
        connection = await manager.connect("sqlite::memory:")
        await connection.close()
        with pytest.raises(ConnectionClosed):
            await connection.query("SELECT 1")
        with pytest.raises(ConnectionFailed):
            await connection.execute("SELECT 1")
        with pytest.raises(ConnectionClosed):
            await connection.metadata()

    @pytest.mark.asyncio
    async def test_missing_file_read_only(self, manager, tmp_path):
        with pytest.raises(ConnectionFailed):
            await manager.connect(f"sqlite://{tmp_path}/missing.db?mode=ro")


class TestSQLiteMetadata:
    """Tests for catalog introspection."""

    @pytest.mark.asyncio
    async def test_file_metadata(self, manager, users_file):
        path = users_file("sqlite3")
        connection = await manager.connect(f"sqlite://{path}")
        try:
            await connection.execute(
                "CREATE TABLE contacts (id INTEGER PRIMARY KEY, user_id INTEGER REFERENCES users (id), email TEXT)"
            )
            await connection.execute("CREATE INDEX idx_contacts_email ON contacts (email)")
            await connection.execute("CREATE VIEW user_names AS SELECT name FROM users")
            metadata = await connection.metadata()
        finally:
            await connection.close()

        catalog = metadata.current_catalog()
        assert catalog.name == "default"
        schema = metadata.current_schema()
        assert schema.name == "main"
        assert schema.table_names() == ["contacts", "users"]

        users = schema.get("USERS")
        assert users.column_names() == ["id", "name"]
        assert users.get_column("name").not_null
        assert users.primary_key().columns == ["id"]
        assert users.get_index("PRIMARY").unique

        contacts = schema.get("contacts")
        assert contacts.get_index("idx_contacts_email").columns == ["email"]
        assert contacts.get_index("PRIMARY").columns == ["id"]
        foreign_key = contacts.foreign_keys()[0]
        assert foreign_key.columns == ["user_id"]
        assert foreign_key.referenced_table == "users"
        assert foreign_key.referenced_columns == ["id"]

        assert [view.name for view in schema.views()] == ["user_names"]

    @pytest.mark.asyncio
    async def test_metadata_is_cached(self, connection):
        first = await connection.metadata()
        await connection.execute("CREATE TABLE late (id INTEGER)")
        assert await connection.metadata() is first
        connection.refresh()
        assert "late" in (await connection.metadata()).current_schema().table_names()
