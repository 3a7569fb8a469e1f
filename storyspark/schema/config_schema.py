"""
StorySpark configuration schema definition.
Centralizes every configuration option with its metadata.
"""

from .core import ConfigField, ConfigSection, FieldType

SECTION_NAMES = ("images", "audio", "models", "retry", "system")


def _create_images_section() -> ConfigSection:
    section = ConfigSection(name="images", description="Illustration parameters")

    section.add_field(
        ConfigField(
            name="image_size",
            field_type=FieldType.STRING,
            default="1K",
            description="Illustration quality; 2K and 4K use the higher-capability image model",
            cli_help="Picture quality (1K, 2K, 4K)",
            cli_short="-i",
            valid_values=["1K", "2K", "4K"],
            ini_comment="Picture quality: 1K (fast), 2K, 4K (looks amazing but takes longer to paint)",
        )
    )

    return section


def _create_audio_section() -> ConfigSection:
    section = ConfigSection(name="audio", description="Narration parameters")

    section.add_field(
        ConfigField(
            name="voice",
            field_type=FieldType.STRING,
            default="Kore",
            description="Prebuilt voice used for narration",
            cli_help="Narration voice name",
        )
    )

    section.add_field(
        ConfigField(
            name="sample_rate",
            field_type=FieldType.INTEGER,
            default=24000,
            description="Sample rate of the PCM returned by the speech model",
            cli_help="Narration sample rate in Hz",
            validator=lambda value: int(value) > 0,
        )
    )

    return section


def _create_models_section() -> ConfigSection:
    section = ConfigSection(name="models", description="Gemini model names")

    section.add_field(
        ConfigField(
            name="story_model",
            field_type=FieldType.STRING,
            default="gemini-3-flash-preview",
            description="Model that writes the story skeleton",
            cli_help="Story model",
        )
    )
    section.add_field(
        ConfigField(
            name="image_model",
            field_type=FieldType.STRING,
            default="gemini-2.5-flash-image",
            description="Image model used for 1K illustrations",
            cli_help="Standard image model",
        )
    )
    section.add_field(
        ConfigField(
            name="pro_image_model",
            field_type=FieldType.STRING,
            default="gemini-3-pro-image-preview",
            description="Image model used for 2K and 4K illustrations",
            cli_help="High quality image model",
        )
    )
    section.add_field(
        ConfigField(
            name="speech_model",
            field_type=FieldType.STRING,
            default="gemini-2.5-flash-preview-tts",
            description="Text-to-speech model used for narration",
            cli_help="Speech model",
        )
    )
    section.add_field(
        ConfigField(
            name="buddy_model",
            field_type=FieldType.STRING,
            default="gemini-3-pro-preview",
            description="Model behind the Sparky chat buddy",
            cli_help="Chat buddy model",
        )
    )

    return section


def _create_retry_section() -> ConfigSection:
    section = ConfigSection(name="retry", description="Backoff for provider calls")

    section.add_field(
        ConfigField(
            name="retries",
            field_type=FieldType.INTEGER,
            default=3,
            description="Retries after the first failed attempt",
            cli_help="Number of retries",
            validator=lambda value: int(value) >= 0,
        )
    )
    section.add_field(
        ConfigField(
            name="initial_delay_ms",
            field_type=FieldType.INTEGER,
            default=1000,
            description="Wait before the first retry in milliseconds; doubled for each further retry",
            cli_help="Initial retry delay in milliseconds",
            validator=lambda value: int(value) >= 0,
        )
    )

    return section


def _create_system_section() -> ConfigSection:
    section = ConfigSection(name="system", description="System-level options")

    section.add_field(
        ConfigField(
            name="verbose",
            field_type=FieldType.BOOLEAN,
            default=False,
            description="Show debug logging",
            cli_help="Enable verbose output",
            cli_short="-v",
            ini_comment="Enable verbose output by default: true, false",
        )
    )
    section.add_field(
        ConfigField(
            name="verify_key_after_select",
            field_type=FieldType.BOOLEAN,
            default=False,
            description="Ask the key host again after selecting a key instead of assuming it worked",
            cli_help="Re-check the API key after selection",
        )
    )
    section.add_field(
        ConfigField(
            name="buddy_memory",
            field_type=FieldType.BOOLEAN,
            default=False,
            description="Send earlier chat turns to Sparky so it remembers the conversation",
            cli_help="Let Sparky remember earlier messages",
        )
    )

    return section


class StorySparkSchema:
    """All configuration sections, addressable as attributes."""

    def __init__(self) -> None:
        self.images = _create_images_section()
        self.audio = _create_audio_section()
        self.models = _create_models_section()
        self.retry = _create_retry_section()
        self.system = _create_system_section()

    def sections(self) -> list[ConfigSection]:
        return [getattr(self, name) for name in SECTION_NAMES]

    def find_field(self, field_name: str) -> ConfigField | None:
        """Find a field by name in any section."""
        for section in self.sections():
            if field_name in section.fields:
                return section.fields[field_name]
        return None


STORYSPARK_SCHEMA = StorySparkSchema()
