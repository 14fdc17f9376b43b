"""Schema models and discovery."""

from .models import (
    ColumnInfo,
    SimpleType,
    TableSchema,
    schemas_to_payload,
    simplify_type,
)
from .discovery import CatalogSource, SchemaDiscoverer

__all__ = [
    "ColumnInfo",
    "SimpleType",
    "TableSchema",
    "schemas_to_payload",
    "simplify_type",
    "CatalogSource",
    "SchemaDiscoverer",
]
