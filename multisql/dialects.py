"""
SQL dialect tags and statement classification.

Each connection reports a Dialect. ``name`` is the tag shown to users
(``"redshift"`` is distinct from ``"postgres"``) and ``read`` is the sqlglot
dialect used to parse statements, which may be shared between tags
(``"cockroachdb"`` reads as ``"postgres"``).
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import sqlglot
from sqlglot import expressions as exp
from sqlglot.errors import SqlglotError

logger = logging.getLogger(__name__)


class StatementKind(str, Enum):
    DDL = "ddl"
    DML = "dml"
    QUERY = "query"
    UNKNOWN = "unknown"


_DDL_EXPRESSIONS = tuple(
    getattr(exp, name)
    for name in ("Create", "Drop", "Alter", "AlterTable")
    if hasattr(exp, name)
)
_DML_EXPRESSIONS = tuple(
    getattr(exp, name)
    for name in ("Insert", "Update", "Delete", "Merge")
    if hasattr(exp, name)
)
_QUERY_EXPRESSIONS = (exp.Select, exp.Union, exp.Intersect, exp.Except, exp.Subquery)


@dataclass(frozen=True)
class Dialect:
    """Opaque SQL variant tag."""

    name: str
    read: Optional[str] = None

    @property
    def sqlglot_dialect(self) -> Optional[str]:
        """The sqlglot dialect used for parsing; None means generic SQL."""
        return (self.read if self.read is not None else self.name) or None

    def parse_sql(self, sql: str) -> StatementKind:
        """
        Classify a statement as DDL, DML or a query.

        Text sqlglot cannot parse is UNKNOWN, except text longer than six
        characters starting with ``select``, which is treated as a query.
        """
        try:
            expressions = sqlglot.parse(sql, read=self.sqlglot_dialect)
        except SqlglotError as e:
            logger.debug(f"Could not parse statement for dialect {self.name}: {e}")
            expressions = []

        expression = next((item for item in expressions if item is not None), None)
        if expression is None:
            stripped = sql.strip()
            if len(stripped) > 6 and stripped.lower().startswith("select"):
                return StatementKind.QUERY
            return StatementKind.UNKNOWN

        if isinstance(expression, _DDL_EXPRESSIONS):
            return StatementKind.DDL
        if isinstance(expression, _DML_EXPRESSIONS):
            return StatementKind.DML
        if isinstance(expression, _QUERY_EXPRESSIONS):
            return StatementKind.QUERY
        return StatementKind.UNKNOWN

    def __str__(self) -> str:
        return self.name


# Dialects shared by several drivers
GENERIC = Dialect("generic", read="")
SQLITE = Dialect("sqlite")
DUCKDB = Dialect("duckdb")
POSTGRES = Dialect("postgres")
REDSHIFT = Dialect("redshift")
COCKROACHDB = Dialect("cockroachdb", read="postgres")
MYSQL = Dialect("mysql")
MARIADB = Dialect("mariadb", read="mysql")
CLICKHOUSE = Dialect("clickhouse")
SNOWFLAKE = Dialect("snowflake")
CRATEDB = Dialect("cratedb", read="postgres")
LIBSQL = Dialect("libsql", read="sqlite")
FLIGHTSQL = Dialect("flightsql", read="")
DYNAMODB = Dialect("dynamodb", read="")
REDIS = Dialect("redis", read="")
