"""
Build typer options from schema fields.
"""

import typer

from .config_schema import STORYSPARK_SCHEMA
from .validation import SchemaValidator


def generate_cli_option(field_name: str):
    """Generate a typer option for a schema field.

    The option defaults to ``None`` so that an omitted flag falls back to the
    configuration file.
    """
    field = STORYSPARK_SCHEMA.find_field(field_name)
    if not field:
        raise ValueError(f"Field '{field_name}' not found in schema")

    option_args = [field.cli_long]
    if field.cli_short:
        option_args.append(field.cli_short)

    help_text = field.cli_help
    if field.valid_values:
        help_text += f" [choices: {', '.join(field.valid_values)}]"
    return typer.Option(None, *option_args, help=help_text)


def validate_cli_arguments(**kwargs) -> list[str]:
    """Validate provided CLI arguments, returning readable error messages."""
    validator = SchemaValidator(STORYSPARK_SCHEMA)
    errors = []

    for field_name, value in kwargs.items():
        if value is not None:
            errors.extend(str(error) for error in validator.validate_cli_argument(field_name, value))

    return errors
