"""Unit tests for schema models."""

import pytest

from tsight_agent.schema import (
    ColumnInfo,
    SimpleType,
    TableSchema,
    schemas_to_payload,
    simplify_type,
)


class TestSimplifyType:
    """Test cases for native type simplification."""

    @pytest.mark.parametrize("native, expected", [
        ("Int32", SimpleType.INT),
        ("UInt64", SimpleType.INT),
        ("Float32", SimpleType.FLOAT),
        ("Bool", SimpleType.BOOL),
        ("Boolean", SimpleType.BOOL),
        ("Date", SimpleType.DATE),
        ("DateTime", SimpleType.DATETIME),
        ("DateTime64(3)", SimpleType.DATETIME),
        ("Enum8('a' = 1)", SimpleType.STRING),
        ("String", SimpleType.STRING),
        ("Nullable(Int32)", SimpleType.STRING),
        ("Date32", SimpleType.STRING),
    ])
    def test_simplify_type(self, native, expected):
        """Test prefix and exact-match rules."""
        assert simplify_type(native) == expected


class TestSchemaModels:
    """Test cases for schema data models."""

    def test_column_defaults(self):
        """Test column info defaults to string with no cardinality."""
        info = ColumnInfo()

        assert info.type_name == SimpleType.STRING
        assert info.cardinality is None
        assert info.to_dict() == {"type_name": "string", "cardinality": None}

    def test_table_full_name(self):
        """Test fully qualified table name."""
        schema = TableSchema(database="sales", table="orders")

        assert schema.full_name == "sales.orders"

    def test_table_add_and_get_column(self):
        """Test adding and retrieving columns."""
        schema = TableSchema(database="sales", table="orders", row_count=10)
        schema.add_column("status", ColumnInfo(SimpleType.STRING, 3))

        assert schema.get_column("status").cardinality == 3
        assert schema.get_column("missing") is None

    def test_payload(self):
        """Test serialisation for server submission."""
        schema = TableSchema(database="sales", table="orders", row_count=10)
        schema.add_column("id", ColumnInfo(SimpleType.INT, 10))
        schema.add_column("note", ColumnInfo(SimpleType.STRING))

        assert schemas_to_payload([schema]) == [{
            "database": "sales",
            "table": "orders",
            "row_count": 10,
            "columns": {
                "id": {"type_name": "int", "cardinality": 10},
                "note": {"type_name": "string", "cardinality": None},
            },
        }]
