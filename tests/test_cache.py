"""
Tests for metadata caching and key inference.
"""

from multisql.dialects import GENERIC
from multisql.drivers.cache import infer_keys
from multisql.metadata import Column, ForeignKey, Metadata, PrimaryKey, Table


def _metadata() -> Metadata:
    metadata = Metadata.single_schema(GENERIC, "main")
    schema = metadata.current_schema()

    users = schema.add(Table("users"))
    users.add_column(Column("id", "INTEGER", not_null=True))
    users.add_column(Column("name", "TEXT"))

    contacts = schema.add(Table("contacts"))
    contacts.add_column(Column("contact_id", "INTEGER", not_null=True))
    contacts.add_column(Column("user_id", "INTEGER"))
    contacts.add_column(Column("company_id", "INTEGER"))

    notes = schema.add(Table("notes"))
    notes.add_column(Column("id", "INTEGER"))
    return metadata


class TestInferKeys:
    """Tests for naming-convention key inference."""

    def test_primary_key_from_id(self):
        metadata = _metadata()
        infer_keys(metadata)
        primary_key = metadata.current_schema().get("users").primary_key()
        assert primary_key.columns == ["id"]
        assert primary_key.inferred

    def test_primary_key_from_singular_table_id(self):
        metadata = _metadata()
        infer_keys(metadata)
        assert metadata.current_schema().get("contacts").primary_key().columns == ["contact_id"]

    def test_nullable_id_is_not_a_key(self):
        metadata = _metadata()
        infer_keys(metadata)
        assert metadata.current_schema().get("notes").primary_key() is None

    def test_declared_primary_key_kept(self):
        metadata = _metadata()
        users = metadata.current_schema().get("users")
        users.set_primary_key(PrimaryKey("PRIMARY", ["name"]))
        infer_keys(metadata)
        assert users.primary_key().columns == ["name"]
        assert not users.primary_key().inferred

    def test_foreign_key_to_plural_table(self):
        metadata = _metadata()
        infer_keys(metadata)
        contacts = metadata.current_schema().get("contacts")
        foreign_keys = contacts.foreign_keys()
        assert len(foreign_keys) == 1
        assert foreign_keys[0].columns == ["user_id"]
        assert foreign_keys[0].referenced_table == "users"
        assert foreign_keys[0].referenced_columns == ["id"]
        assert foreign_keys[0].inferred

    def test_declared_foreign_key_not_duplicated(self):
        metadata = _metadata()
        contacts = metadata.current_schema().get("contacts")
        contacts.add_foreign_key(ForeignKey("fk_user", ["user_id"], "users", ["id"]))
        infer_keys(metadata)
        assert [key.name for key in contacts.foreign_keys()] == ["fk_user"]
