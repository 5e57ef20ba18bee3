"""
multisql - Metadata Model

A snapshot tree describing a data source:

    Metadata
      └── Catalog (current?)
            └── Schema (current?)
                  ├── Table
                  │     ├── Column (ordinal order)
                  │     ├── Index
                  │     ├── PrimaryKey (at most one)
                  │     └── ForeignKey
                  └── View

Names are unique within their parent. Lookup is case-insensitive while the
original casing is kept for display. Listing methods return children sorted
case-insensitively by name; table columns keep their ordinal order.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Generic, Iterable, List, Optional, TypeVar

from multisql.dialects import Dialect

logger = logging.getLogger(__name__)

T = TypeVar("T")


class NamedItems(Generic[T]):
    """Case-insensitive name -> item map preserving insertion order."""

    def __init__(self, items: Iterable[T] = ()):
        self._items: Dict[str, T] = {}
        for item in items:
            self.add(item)

    def add(self, item: T) -> T:
        # Same name replaces the prior entry
        self._items[item.name.lower()] = item
        return item

    def get(self, name: str) -> Optional[T]:
        return self._items.get(name.lower())

    def remove(self, name: str) -> Optional[T]:
        return self._items.pop(name.lower(), None)

    def ordered(self) -> List[T]:
        return list(self._items.values())

    def sorted(self) -> List[T]:
        return sorted(self._items.values(), key=lambda item: item.name.lower())

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, name: str) -> bool:
        return name.lower() in self._items


# =============================================================================
# TABLE LEVEL
# =============================================================================

@dataclass
class Column:
    name: str
    data_type: str
    not_null: bool = False
    default: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "data_type": self.data_type,
            "not_null": self.not_null,
            "default": self.default,
        }


@dataclass
class Index:
    name: str
    columns: List[str] = field(default_factory=list)
    unique: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "columns": list(self.columns), "unique": self.unique}


@dataclass
class PrimaryKey:
    name: str
    columns: List[str] = field(default_factory=list)
    inferred: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "columns": list(self.columns), "inferred": self.inferred}


@dataclass
class ForeignKey:
    name: str
    columns: List[str] = field(default_factory=list)
    referenced_table: str = ""
    referenced_columns: List[str] = field(default_factory=list)
    inferred: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "columns": list(self.columns),
            "referenced_table": self.referenced_table,
            "referenced_columns": list(self.referenced_columns),
            "inferred": self.inferred,
        }


class Table:
    """A table with its columns, indexes and keys."""

    def __init__(self, name: str):
        self.name = name
        self._columns: NamedItems[Column] = NamedItems()
        self._indexes: NamedItems[Index] = NamedItems()
        self._foreign_keys: NamedItems[ForeignKey] = NamedItems()
        self._primary_key: Optional[PrimaryKey] = None

    def __repr__(self) -> str:
        return f"Table({self.name!r})"

    def add_column(self, column: Column) -> Column:
        return self._columns.add(column)

    def columns(self) -> List[Column]:
        return self._columns.ordered()

    def column_names(self) -> List[str]:
        return [column.name for column in self._columns.ordered()]

    def get_column(self, name: str) -> Optional[Column]:
        return self._columns.get(name)

    def add_index(self, index: Index) -> Index:
        return self._indexes.add(index)

    def indexes(self) -> List[Index]:
        return self._indexes.sorted()

    def get_index(self, name: str) -> Optional[Index]:
        return self._indexes.get(name)

    def set_primary_key(self, primary_key: Optional[PrimaryKey]) -> None:
        self._primary_key = primary_key

    def primary_key(self) -> Optional[PrimaryKey]:
        return self._primary_key

    def add_foreign_key(self, foreign_key: ForeignKey) -> ForeignKey:
        return self._foreign_keys.add(foreign_key)

    def foreign_keys(self) -> List[ForeignKey]:
        return self._foreign_keys.sorted()

    def get_foreign_key(self, name: str) -> Optional[ForeignKey]:
        return self._foreign_keys.get(name)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "columns": [column.to_dict() for column in self.columns()],
            "indexes": [index.to_dict() for index in self.indexes()],
            "primary_key": self._primary_key.to_dict() if self._primary_key else None,
            "foreign_keys": [key.to_dict() for key in self.foreign_keys()],
        }


class View:
    """A view and its columns."""

    def __init__(self, name: str):
        self.name = name
        self._columns: NamedItems[Column] = NamedItems()

    def __repr__(self) -> str:
        return f"View({self.name!r})"

    def add_column(self, column: Column) -> Column:
        return self._columns.add(column)

    def columns(self) -> List[Column]:
        return self._columns.ordered()

    def get_column(self, name: str) -> Optional[Column]:
        return self._columns.get(name)

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "columns": [column.to_dict() for column in self.columns()]}


# =============================================================================
# CATALOG LEVEL
# =============================================================================

class Schema:
    """A namespace of tables and views."""

    def __init__(self, name: str, current: bool = False):
        self.name = name
        self.current = current
        self._tables: NamedItems[Table] = NamedItems()
        self._views: NamedItems[View] = NamedItems()

    def __repr__(self) -> str:
        return f"Schema({self.name!r}, current={self.current})"

    def add(self, table: Table) -> Table:
        return self._tables.add(table)

    def get(self, name: str) -> Optional[Table]:
        return self._tables.get(name)

    def tables(self) -> List[Table]:
        return self._tables.sorted()

    def table_names(self) -> List[str]:
        return [table.name for table in self._tables.sorted()]

    def add_view(self, view: View) -> View:
        return self._views.add(view)

    def get_view(self, name: str) -> Optional[View]:
        return self._views.get(name)

    def views(self) -> List[View]:
        return self._views.sorted()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "current": self.current,
            "tables": [table.to_dict() for table in self.tables()],
            "views": [view.to_dict() for view in self.views()],
        }


class Catalog:
    """A database holding schemas."""

    def __init__(self, name: str, current: bool = False):
        self.name = name
        self.current = current
        self._schemas: NamedItems[Schema] = NamedItems()

    def __repr__(self) -> str:
        return f"Catalog({self.name!r}, current={self.current})"

    def add(self, schema: Schema) -> Schema:
        return self._schemas.add(schema)

    def get(self, name: str) -> Optional[Schema]:
        return self._schemas.get(name)

    def schemas(self) -> List[Schema]:
        return self._schemas.sorted()

    def current_schema(self) -> Optional[Schema]:
        """The schema flagged current, else the first one added."""
        schemas = self._schemas.ordered()
        for schema in schemas:
            if schema.current:
                return schema
        return schemas[0] if schemas else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "current": self.current,
            "schemas": [schema.to_dict() for schema in self.schemas()],
        }


class Metadata:
    """
    Snapshot of a connection's catalogs plus its dialect.

    Metadata is a value: drivers build a fresh one on every metadata() call
    and nothing updates it afterwards.
    """

    def __init__(self, dialect: Dialect):
        self.dialect = dialect
        self._catalogs: NamedItems[Catalog] = NamedItems()

    def __repr__(self) -> str:
        return f"Metadata(dialect={self.dialect.name!r}, catalogs={len(self._catalogs)})"

    def add(self, catalog: Catalog) -> Catalog:
        return self._catalogs.add(catalog)

    def get(self, name: str) -> Optional[Catalog]:
        return self._catalogs.get(name)

    def catalogs(self) -> List[Catalog]:
        return self._catalogs.sorted()

    def current_catalog(self) -> Optional[Catalog]:
        catalogs = self._catalogs.ordered()
        for catalog in catalogs:
            if catalog.current:
                return catalog
        return catalogs[0] if catalogs else None

    def current_schema(self) -> Optional[Schema]:
        catalog = self.current_catalog()
        return catalog.current_schema() if catalog else None

    def tables(self) -> List[Table]:
        """Every table in the current schema."""
        schema = self.current_schema()
        return schema.tables() if schema else []

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dialect": self.dialect.name,
            "catalogs": [catalog.to_dict() for catalog in self.catalogs()],
        }

    @classmethod
    def single_schema(cls, dialect: Dialect, schema_name: str, catalog_name: str = "default") -> "Metadata":
        """Metadata with one current catalog holding one current schema."""
        metadata = cls(dialect)
        catalog = metadata.add(Catalog(catalog_name, current=True))
        catalog.add(Schema(schema_name, current=True))
        return metadata
