"""StorySpark error handling."""

from typing import Any

from .types import ErrorCode, ErrorResponse

# Shown to children in place of any raw provider detail.
GENERIC_STORY_MESSAGE = "Oh no! The story magic failed. Let's try another idea!"
ENTITLEMENT_MESSAGE = "Your magic key needs checking! Please re-select a key with permission for image generation."

# Provider statuses and HTTP codes that mean the key cannot be used.
ENTITLEMENT_STATUSES = frozenset({"PERMISSION_DENIED", "UNAUTHENTICATED"})
ENTITLEMENT_HTTP_CODES = frozenset({401, 403})

# Fallback for errors that carry no structured status.
ENTITLEMENT_PHRASES = (
    "Requested entity was not found",
    "does not have permission",
    "API key not valid",
)


class StorySparkError(Exception):
    """Base exception for StorySpark errors."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: dict[str, Any] | None = None,
        recoverable: bool = True,
        recovery_hint: str | None = None,
        user_message: str = GENERIC_STORY_MESSAGE,
    ) -> None:
        """Initialize error."""
        super().__init__(message)
        self.code = code.value
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable
        self.recovery_hint = recovery_hint
        self.user_message = user_message

    def to_response(self) -> ErrorResponse:
        """Convert to ErrorResponse for logging."""
        return ErrorResponse(
            code=self.code,
            message=self.message,
            details=self.details,
            recoverable=self.recoverable,
            recovery_hint=self.recovery_hint,
        )


class BackendUnavailableError(StorySparkError):
    """Generation backend not available."""

    def __init__(self, backend: str, details: dict[str, Any] | None = None) -> None:
        """Initialize error."""
        super().__init__(
            code=ErrorCode.BACKEND_UNAVAILABLE,
            message=f"Backend '{backend}' is not available or not configured",
            details=details,
            recoverable=True,
            recovery_hint="Check API keys and backend configuration",
        )


class ProviderError(StorySparkError):
    """The AI provider call failed after all retries."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize error."""
        super().__init__(
            code=ErrorCode.PROVIDER_ERROR,
            message=f"Provider call failed: {message}",
            details=details,
            recoverable=True,
            recovery_hint="Retry the operation or check backend status",
        )


class EntitlementError(ProviderError):
    """The API key is missing, invalid or lacks permission."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize error."""
        StorySparkError.__init__(
            self,
            code=ErrorCode.ENTITLEMENT,
            message=f"Access denied: {message}",
            details=details,
            recoverable=True,
            recovery_hint="Select an API key from a project with billing enabled",
            user_message=ENTITLEMENT_MESSAGE,
        )


class MissingPayloadError(ProviderError):
    """The provider answered but returned no image or audio data."""

    def __init__(self, asset: str, model: str) -> None:
        """Initialize error."""
        StorySparkError.__init__(
            self,
            code=ErrorCode.MISSING_PAYLOAD,
            message=f"No {asset} data returned from model {model}",
            details={"asset": asset, "model": model},
            recoverable=True,
            recovery_hint="Retry the operation",
        )


class StoryParseError(StorySparkError):
    """Story skeleton response did not match the expected shape."""

    def __init__(self, reason: str, raw: str | None = None) -> None:
        """Initialize error."""
        super().__init__(
            code=ErrorCode.STORY_PARSE_ERROR,
            message=f"Failed to parse story data: {reason}",
            details={"raw": raw[:500] if raw else raw},
            recoverable=True,
            recovery_hint="Try again, possibly with a different topic",
        )


class ConfigError(StorySparkError):
    """Configuration error."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize error."""
        super().__init__(
            code=ErrorCode.CONFIG_ERROR,
            message=f"Configuration error: {message}",
            details=details,
            recoverable=True,
            recovery_hint="Check configuration file syntax and values",
        )


def is_entitlement_failure(exc: BaseException) -> bool:
    """Tell whether a provider exception means the key cannot be used.

    SDK errors carry a ``status`` string and an HTTP ``code``; those are
    checked first. Anything else falls back to matching known phrases in the
    error text.
    """
    status = getattr(exc, "status", None)
    if isinstance(status, str) and status.upper() in ENTITLEMENT_STATUSES:
        return True
    code = getattr(exc, "code", None)
    if isinstance(code, int) and code in ENTITLEMENT_HTTP_CODES:
        return True
    text = str(exc)
    return any(phrase in text for phrase in ENTITLEMENT_PHRASES)


def classify_provider_error(exc: BaseException) -> StorySparkError:
    """Translate an exception raised at the provider boundary."""
    if isinstance(exc, StorySparkError):
        return exc
    details: dict[str, Any] = {"type": type(exc).__name__}
    status = getattr(exc, "status", None)
    if status:
        details["status"] = status
    if is_entitlement_failure(exc):
        return EntitlementError(str(exc), details=details)
    return ProviderError(str(exc), details=details)
