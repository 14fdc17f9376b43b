"""Data models for discovered table schemas."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional
from enum import Enum


class SimpleType(Enum):
    """Enumeration of simplified column types reported to the server."""
    INT = "int"
    FLOAT = "float"
    BOOL = "bool"
    DATE = "date"
    DATETIME = "datetime"
    STRING = "string"


def simplify_type(native_type: str) -> SimpleType:
    """Map a native store type to its simplified type.

    Args:
        native_type: Type name as reported by the store (e.g. 'UInt64')

    Returns:
        Simplified type; unmapped types become STRING
    """
    if native_type.startswith("Int") or native_type.startswith("UInt"):
        return SimpleType.INT
    if native_type.startswith("Float"):
        return SimpleType.FLOAT
    if native_type in ("Bool", "Boolean"):
        return SimpleType.BOOL
    if native_type == "Date":
        return SimpleType.DATE
    if native_type.startswith("DateTime"):
        return SimpleType.DATETIME
    return SimpleType.STRING


@dataclass
class ColumnInfo:
    """Simplified type and approximate cardinality of a column."""

    type_name: SimpleType = SimpleType.STRING
    cardinality: Optional[int] = None

    def to_dict(self) -> Dict:
        """Convert column info to dictionary representation."""
        return {
            "type_name": self.type_name.value,
            "cardinality": self.cardinality,
        }


@dataclass
class TableSchema:
    """Represents a discovered table with its row count and permitted columns."""

    database: str
    table: str
    row_count: int = 0
    columns: Dict[str, ColumnInfo] = field(default_factory=dict)

    @property
    def full_name(self) -> str:
        """Get fully qualified table name (database.table)."""
        return f"{self.database}.{self.table}"

    def add_column(self, name: str, info: ColumnInfo) -> None:
        """Add a column to the table."""
        self.columns[name] = info

    def get_column(self, name: str) -> Optional[ColumnInfo]:
        """Get a column by name."""
        return self.columns.get(name)

    def to_dict(self) -> Dict:
        """Convert table schema to dictionary representation."""
        return {
            "database": self.database,
            "table": self.table,
            "row_count": self.row_count,
            "columns": {name: info.to_dict() for name, info in self.columns.items()},
        }


def schemas_to_payload(schemas: List[TableSchema]) -> List[Dict]:
    """Serialise schemas for submission to the server."""
    return [schema.to_dict() for schema in schemas]
