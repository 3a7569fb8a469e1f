"""
StorySpark configuration schema package.
Provides schema-driven validation and CLI integration.
"""

from .config_schema import SECTION_NAMES, STORYSPARK_SCHEMA
from .core import ConfigField, ConfigSection, FieldType
from .validation import SchemaValidator, ValidationError

__all__ = [
    "SECTION_NAMES",
    "STORYSPARK_SCHEMA",
    "SchemaValidator",
    "ValidationError",
    "ConfigField",
    "ConfigSection",
    "FieldType",
]
