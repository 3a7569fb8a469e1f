"""
Configuration management for StorySpark.

Configuration is read from an INI file and overridden by command line
arguments. The file is looked up in this order:
1. STORYSPARK_CONFIG environment variable path
2. XDG config directory: ~/.config/storyspark/storyspark.ini
3. Home directory: ~/.storyspark.ini
4. Current directory: ./storyspark.ini
"""

import os
from configparser import ConfigParser
from configparser import Error as ConfigParserError
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir

from .console import console
from .retry import RetryPolicy
from .schema.config_schema import SECTION_NAMES, STORYSPARK_SCHEMA
from .schema.validation import SchemaValidator
from .shared.errors import ConfigError


def _generate_config_template_from_schema() -> str:
    """Render the default configuration file from the schema."""
    lines = [
        "# StorySpark Configuration File",
        "# Command line arguments override these settings",
        "",
    ]

    for section in STORYSPARK_SCHEMA.sections():
        lines.append(f"[{section.name}]")
        for field_name, field in section.fields.items():
            if field.ini_comment:
                lines.append(f"# {field.ini_comment}")
            lines.append(f"{field_name} = {field.ini_default()}")
            lines.append("")
        lines.append("")

    return "\n".join(lines).rstrip() + "\n"


class Config:
    """Configuration manager for StorySpark."""

    def __init__(self):
        self.config = ConfigParser()
        self.config_path: Path | None = None
        self.validator = SchemaValidator(STORYSPARK_SCHEMA)
        self.config.read_string(_generate_config_template_from_schema())

    def get_config_paths(self) -> list[Path]:
        """Return configuration file paths in priority order."""
        paths = []

        env_config = os.environ.get("STORYSPARK_CONFIG")
        if env_config:
            paths.append(Path(env_config))

        paths.append(self.get_default_config_path())
        paths.append(Path.home() / ".storyspark.ini")
        paths.append(Path("./storyspark.ini"))

        return paths

    def find_config_file(self) -> Path | None:
        for path in self.get_config_paths():
            if path.exists() and path.is_file():
                return path
        return None

    def load_config(self, verbose: bool = False) -> bool:
        """
        Load configuration from file.

        Returns:
            bool: True if a config file was found and loaded, False otherwise.
        """
        config_path = self.find_config_file()
        if not config_path:
            if verbose:
                console.print("[dim]No configuration file found, using defaults[/dim]")
            return False

        try:
            self.config.read(config_path, encoding="utf-8")
        except ConfigParserError as e:
            raise ConfigError(f"Error reading configuration file {config_path}: {e}") from e
        self.config_path = config_path
        if verbose:
            console.print(f"[dim]Loaded configuration from: {config_path}[/dim]")
        return True

    def validate_config(self) -> list[str]:
        """Return validation errors, empty if the configuration is valid."""
        return [str(error) for error in self.validator.validate_config(self.to_dict())]

    def get_default_config_path(self) -> Path:
        return Path(user_config_dir("storyspark", "storyspark")) / "storyspark.ini"

    def create_default_config(self, path: Path | None = None) -> Path:
        """
        Write a default configuration file.

        Args:
            path: Where to write the file. Defaults to the XDG config directory.

        Returns:
            Path: The path that was written.
        """
        if path is None:
            path = self.get_default_config_path()

        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(_generate_config_template_from_schema(), encoding="utf-8")
        return path

    def get_field_value(self, section_name: str, field_name: str) -> Any:
        """Get a typed configuration value, falling back to the schema default."""
        section = getattr(STORYSPARK_SCHEMA, section_name)
        field = section.get_field(field_name)
        if not field:
            raise ValueError(f"Unknown field: {section_name}.{field_name}")

        raw_value = self.config.get(section_name, field_name, fallback=None)
        try:
            return field.to_python(raw_value)
        except ValueError:
            return field.default

    def retry_policy(self) -> RetryPolicy:
        """Build the retry policy described by the [retry] section."""
        return RetryPolicy(
            retries=self.get_field_value("retry", "retries"),
            initial_delay=self.get_field_value("retry", "initial_delay_ms") / 1000.0,
        )

    def to_dict(self) -> dict[str, dict[str, Any]]:
        result: dict[str, dict[str, Any]] = {}
        for section_name in self.config.sections():
            result[section_name] = dict(self.config[section_name].items())
        return result


def load_config(verbose: bool = False) -> Config:
    """
    Load and validate configuration from the file system.

    Raises:
        ConfigError: If the configuration file is malformed or invalid.
    """
    config = Config()
    config.load_config(verbose=verbose)

    errors = config.validate_config()
    if errors:
        raise ConfigError(
            "Configuration validation failed:\n" + "\n".join(f"  - {error}" for error in errors),
            details={"errors": errors, "sections": list(SECTION_NAMES)},
        )

    return config
