"""
Pytest configuration and shared fixtures for multisql tests.

The ``users`` dataset (id, name) = (1, "John Doe"), (2, "Jane Smith") is
written on demand in every supported file format.
"""

import json
import sqlite3
from pathlib import Path
from typing import Callable

import pytest

from multisql.drivers.manager import DriverManager, register_builtin_drivers

USERS = [(1, "John Doe"), (2, "Jane Smith")]
USERS_QUERY = "SELECT id, name FROM users ORDER BY id"


def _write_csv(path: Path, separator: str = ",") -> None:
    lines = [f"id{separator}name"] + [f"{user_id}{separator}{name}" for user_id, name in USERS]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")


def _write_fwf(path: Path) -> None:
    path.write_text("".join(f"{user_id:<4}{name:<15}\n" for user_id, name in USERS), encoding="utf-8")


def _write_json(path: Path) -> None:
    path.write_text(json.dumps([{"id": user_id, "name": name} for user_id, name in USERS]), encoding="utf-8")


def _write_jsonl(path: Path) -> None:
    path.write_text(
        "".join(json.dumps({"id": user_id, "name": name}) + "\n" for user_id, name in USERS),
        encoding="utf-8",
    )


def _write_yaml(path: Path) -> None:
    import yaml

    path.write_text(yaml.safe_dump([{"id": user_id, "name": name} for user_id, name in USERS]), encoding="utf-8")


def _write_xml(path: Path) -> None:
    users = "".join(f"<user><id>{user_id}</id><name>{name}</name></user>" for user_id, name in USERS)
    path.write_text(f"<?xml version='1.0' encoding='utf-8'?>\n<users>{users}</users>\n", encoding="utf-8")


def _write_avro(path: Path) -> None:
    import fastavro

    schema = fastavro.parse_schema({
        "type": "record",
        "name": "User",
        "fields": [{"name": "id", "type": "long"}, {"name": "name", "type": "string"}],
    })
    with open(path, "wb") as f:
        fastavro.writer(f, schema, [{"id": user_id, "name": name} for user_id, name in USERS])


def _arrow_table():
    import pyarrow as pa

    return pa.table({
        "id": pa.array([user_id for user_id, _ in USERS], type=pa.int64()),
        "name": pa.array([name for _, name in USERS], type=pa.string()),
    })


def _write_parquet(path: Path) -> None:
    import pyarrow.parquet as pq

    pq.write_table(_arrow_table(), str(path))


def _write_arrow(path: Path) -> None:
    import pyarrow as pa
    import pyarrow.ipc as ipc

    table = _arrow_table()
    with pa.OSFile(str(path), "wb") as sink:
        with ipc.new_file(sink, table.schema) as writer:
            writer.write_table(table)


def _write_orc(path: Path) -> None:
    orc = pytest.importorskip("pyarrow.orc")
    orc.write_table(_arrow_table(), str(path))


def _frame():
    import pandas as pd

    return pd.DataFrame({"id": [user_id for user_id, _ in USERS], "name": [name for _, name in USERS]})


def _write_xlsx(path: Path) -> None:
    _frame().to_excel(path, index=False, engine="openpyxl")


def _write_ods(path: Path) -> None:
    _frame().to_excel(path, index=False, engine="odf")


def _write_sqlite(path: Path) -> None:
    connection = sqlite3.connect(path)
    try:
        connection.execute("CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT NOT NULL)")
        connection.executemany("INSERT INTO users (id, name) VALUES (?, ?)", USERS)
        connection.commit()
    finally:
        connection.close()


def _write_duckdb(path: Path) -> None:
    import duckdb

    connection = duckdb.connect(str(path))
    try:
        connection.execute("CREATE TABLE users (id BIGINT PRIMARY KEY, name VARCHAR)")
        connection.executemany("INSERT INTO users VALUES (?, ?)", USERS)
    finally:
        connection.close()


WRITERS = {
    "csv": _write_csv,
    "tsv": lambda path: _write_csv(path, "\t"),
    "fwf": _write_fwf,
    "json": _write_json,
    "jsonl": _write_jsonl,
    "yaml": _write_yaml,
    "xml": _write_xml,
    "avro": _write_avro,
    "parquet": _write_parquet,
    "arrow": _write_arrow,
    "orc": _write_orc,
    "xlsx": _write_xlsx,
    "ods": _write_ods,
    "sqlite3": _write_sqlite,
    "duckdb": _write_duckdb,
}


@pytest.fixture
def users_file(tmp_path) -> Callable[[str], Path]:
    """Return a factory writing ``users.<extension>`` into a temp directory."""

    def make(extension: str, name: str = "users") -> Path:
        path = tmp_path / f"{name}.{extension}"
        WRITERS[extension](path)
        return path

    return make


@pytest.fixture
def manager() -> DriverManager:
    """A private manager holding every built-in driver."""
    manager = DriverManager()
    register_builtin_drivers(manager)
    return manager


@pytest.fixture
def staging_root(tmp_path, monkeypatch):
    """Redirect staging directories into the test's temp directory."""
    root = tmp_path / "staging"
    root.mkdir()
    monkeypatch.setattr("tempfile.tempdir", str(root))
    return root
