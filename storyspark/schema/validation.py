"""
Validation of configuration values against the schema.
"""

from typing import Any

from .core import BOOLEAN_STRINGS, ConfigField, FieldType


class ValidationError(Exception):
    """Configuration validation error with context."""

    def __init__(self, field_name: str, value: Any, message: str, section: str = ""):
        self.field_name = field_name
        self.value = value
        self.message = message
        self.section = section
        super().__init__(f"[{section}.{field_name}] {message}")


class SchemaValidator:
    """Validates configuration dictionaries and CLI arguments."""

    def __init__(self, schema):
        self.schema = schema

    def validate_field(self, field: ConfigField, value: Any) -> list[ValidationError]:
        """Validate a single field value against its schema definition."""
        if value is None or value == "":
            return []

        type_error = self._type_error(field, value)
        if type_error:
            return [ValidationError(field.name, value, type_error, field.section)]

        errors = []
        if field.valid_values and str(value) not in field.valid_values:
            errors.append(
                ValidationError(
                    field.name,
                    value,
                    f"Invalid value '{value}'. Valid options: {', '.join(field.valid_values)}",
                    field.section,
                )
            )

        if field.validator and not field.validator(value):
            errors.append(ValidationError(field.name, value, f"Value '{value}' is out of range", field.section))

        return errors

    def _type_error(self, field: ConfigField, value: Any) -> str | None:
        if field.field_type == FieldType.STRING:
            if not isinstance(value, str):
                return f"Expected string, got {type(value).__name__}"

        elif field.field_type == FieldType.INTEGER:
            try:
                int(value)
            except (ValueError, TypeError):
                return f"Expected integer, got '{value}'"

        elif field.field_type == FieldType.BOOLEAN:
            if not isinstance(value, bool) and str(value).lower() not in BOOLEAN_STRINGS:
                return f"Expected boolean, got '{value}'"

        return None

    def validate_config(self, config_dict: dict[str, dict[str, Any]]) -> list[ValidationError]:
        """Validate an entire configuration dictionary; unknown keys are ignored."""
        all_errors = []

        for section_name, section_config in config_dict.items():
            section = getattr(self.schema, section_name, None)
            if section is None:
                continue
            for field_name, value in section_config.items():
                field = section.get_field(field_name)
                if field is not None:
                    all_errors.extend(self.validate_field(field, value))

        return all_errors

    def validate_cli_argument(self, field_name: str, value: Any) -> list[ValidationError]:
        """Validate a single CLI argument by field name."""
        field = self.schema.find_field(field_name)
        if field is None:
            return [ValidationError(field_name, value, f"Unknown configuration field '{field_name}'")]
        return self.validate_field(field, value)
