"""
Metadata caching.

CachedMetadataConnection computes metadata once and serves the snapshot
until refresh() is called. While computing it also infers primary and
foreign keys that follow the usual naming conventions:

- ``id`` (or ``<singular table>_id``), NOT NULL, becomes the primary key of
  a table that declares none
- ``<x>_id`` references ``<plural x>.id`` when that table exists
"""

import logging
from typing import Optional

import inflection

from multisql.drivers.base import Connection, DelegatingConnection
from multisql.metadata import ForeignKey, Metadata, PrimaryKey, Schema, Table

logger = logging.getLogger(__name__)


class CachedMetadataConnection(DelegatingConnection):
    """Connection decorator that memoizes metadata()."""

    def __init__(self, inner: Connection):
        super().__init__(inner.url(), inner)
        self._cached: Optional[Metadata] = None

    def url(self) -> str:
        return self.inner.url()

    async def _metadata(self) -> Metadata:
        if self._cached is None:
            metadata = await self.inner.metadata()
            infer_keys(metadata)
            self._cached = metadata
        return self._cached

    def refresh(self) -> None:
        """Discard the cached snapshot; the next metadata() call rebuilds it."""
        self._cached = None

    async def _close(self) -> None:
        self._cached = None
        await self.inner.close()


# =============================================================================
# KEY INFERENCE
# =============================================================================

def infer_keys(metadata: Metadata) -> None:
    """Add inferred primary and foreign keys to every schema in ``metadata``."""
    for catalog in metadata.catalogs():
        for schema in catalog.schemas():
            for table in schema.tables():
                _infer_primary_key(table)
            for table in schema.tables():
                _infer_foreign_keys(schema, table)


def _infer_primary_key(table: Table) -> None:
    if table.primary_key() is not None:
        return

    singular = inflection.singularize(table.name)
    for candidate in ("id", f"{singular}_id"):
        column = table.get_column(candidate)
        if column is not None and column.not_null:
            table.set_primary_key(
                PrimaryKey(f"inferred_{table.name}_pk", [column.name], inferred=True)
            )
            logger.debug(f"Inferred primary key {table.name}.{column.name}")
            return


def _infer_foreign_keys(schema: Schema, table: Table) -> None:
    referenced = {
        column.lower()
        for foreign_key in table.foreign_keys()
        for column in foreign_key.columns
    }

    for column in table.columns():
        name = column.name.lower()
        if not name.endswith("_id") or name in referenced:
            continue

        target = schema.get(inflection.pluralize(column.name[:-3]))
        if target is None or target is table:
            continue
        target_id = target.get_column("id")
        if target_id is None:
            continue

        table.add_foreign_key(
            ForeignKey(
                f"inferred_{table.name}_{column.name}_fk",
                [column.name],
                referenced_table=target.name,
                referenced_columns=[target_id.name],
                inferred=True,
            )
        )
        logger.debug(f"Inferred foreign key {table.name}.{column.name} -> {target.name}.{target_id.name}")
