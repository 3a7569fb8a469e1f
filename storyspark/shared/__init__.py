"""Shared types and errors for StorySpark."""

from .errors import (
    BackendUnavailableError,
    ConfigError,
    EntitlementError,
    MissingPayloadError,
    ProviderError,
    StoryParseError,
    StorySparkError,
    classify_provider_error,
)
from .types import AssetKind, ErrorCode, ErrorResponse, ReadAloudOutcome, View

__all__ = [
    "AssetKind",
    "BackendUnavailableError",
    "ConfigError",
    "EntitlementError",
    "ErrorCode",
    "ErrorResponse",
    "MissingPayloadError",
    "ProviderError",
    "ReadAloudOutcome",
    "StoryParseError",
    "StorySparkError",
    "View",
    "classify_provider_error",
]
