"""Shared type definitions for StorySpark."""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Error codes for structured error reporting."""

    BACKEND_UNAVAILABLE = "BACKEND_UNAVAILABLE"
    PROVIDER_ERROR = "PROVIDER_ERROR"
    ENTITLEMENT = "ENTITLEMENT"
    MISSING_PAYLOAD = "MISSING_PAYLOAD"
    STORY_PARSE_ERROR = "STORY_PARSE_ERROR"
    CONFIG_ERROR = "CONFIG_ERROR"


class View(Enum):
    """Top-level screens of a storybook session."""

    LANDING = "landing"
    EDITING = "editing"
    READING = "reading"


class AssetKind(Enum):
    """Per-page generated assets."""

    IMAGE = "image"
    AUDIO = "audio"


class ReadAloudOutcome(Enum):
    """What a press of the read-aloud control ended up doing."""

    STOPPED = "stopped"
    PLAYING = "playing"
    BUSY = "busy"
    FAILED = "failed"


@dataclass
class ErrorResponse:
    """Structured error description for logging and display."""

    code: str  # ErrorCode enum value
    message: str
    details: dict[str, Any] | None = None
    recoverable: bool = True
    recovery_hint: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
                "recoverable": self.recoverable,
                "recovery_hint": self.recovery_hint,
            }
        }
