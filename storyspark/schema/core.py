"""
Core building blocks for the StorySpark configuration schema.
Each field carries enough metadata to validate values, build CLI options and
render the commented INI template.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

TRUE_STRINGS = ("true", "1", "yes", "on")
BOOLEAN_STRINGS = ("true", "false", "1", "0", "yes", "no", "on", "off")


class FieldType(Enum):
    """Supported configuration field types."""

    STRING = "string"
    INTEGER = "integer"
    BOOLEAN = "boolean"


@dataclass
class ConfigField:
    """Metadata for a single configuration field."""

    name: str
    field_type: FieldType
    default: Any
    description: str
    cli_help: str
    section: str = ""

    valid_values: list[str] | None = None
    validator: Callable[[Any], bool] | None = None

    cli_short: str | None = None
    cli_long: str | None = None

    ini_comment: str | None = None

    def __post_init__(self):
        if self.cli_long is None:
            self.cli_long = f"--{self.name.replace('_', '-')}"

        if self.ini_comment is None:
            comment_parts = [self.description] if self.description else []
            if self.valid_values:
                comment_parts.append(f"Options: {', '.join(self.valid_values)}")
            self.ini_comment = " | ".join(comment_parts)

    def ini_default(self) -> str:
        """Render the default the way it appears in an INI file."""
        if self.field_type == FieldType.BOOLEAN:
            return "true" if self.default else "false"
        return "" if self.default is None else str(self.default)

    def to_python(self, raw: str | None) -> Any:
        """Convert a raw INI string into the field's Python type."""
        if raw is None or raw == "":
            return self.default
        if self.field_type == FieldType.BOOLEAN:
            return raw.strip().lower() in TRUE_STRINGS
        if self.field_type == FieldType.INTEGER:
            return int(raw)
        return raw


@dataclass
class ConfigSection:
    """A named group of configuration fields."""

    name: str
    description: str
    fields: dict[str, ConfigField] = field(default_factory=dict)

    def get_field(self, name: str) -> ConfigField | None:
        return self.fields.get(name)

    def add_field(self, field_obj: ConfigField) -> None:
        field_obj.section = self.name
        self.fields[field_obj.name] = field_obj
