"""
Generation backend interface and factory.

This module provides:
1. StoryBackend abstract base class defining the four generation calls
2. get_backend() factory function

Supported backends:
- Gemini (Google AI): requires GEMINI_API_KEY
"""

import os
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from .shared.errors import BackendUnavailableError

if TYPE_CHECKING:
    from .config import Config
    from .models import ChatMessage, ImageSize, Story


class StoryBackend(ABC):
    """
    Abstract base class for generation backends.

    Every method is a coroutine. Implementations raise
    :class:`~storyspark.shared.errors.StorySparkError` subclasses on failure.
    """

    name: str

    @abstractmethod
    async def generate_story_skeleton(self, topic: str) -> "Story":
        """
        Write a four page story about ``topic``.

        Returns:
            Story: Title and pages with text and illustration prompts, without assets.

        Raises:
            StoryParseError: If the model's answer is not a valid story.
            EntitlementError: If the API key is missing or lacks permission.
            ProviderError: For any other provider failure.
        """
        raise NotImplementedError("Subclass must implement generate_story_skeleton method")

    @abstractmethod
    async def generate_illustration(self, prompt: str, size: "ImageSize") -> str:
        """
        Paint an illustration for a page.

        Returns:
            str: The image as a base64 ``data:`` URI.
        """
        raise NotImplementedError("Subclass must implement generate_illustration method")

    @abstractmethod
    async def generate_speech(self, text: str) -> str:
        """
        Narrate a page.

        Returns:
            str: Base64 encoded 16-bit mono PCM.
        """
        raise NotImplementedError("Subclass must implement generate_speech method")

    @abstractmethod
    async def send_buddy_message(self, message: str, history: list["ChatMessage"]) -> str:
        """
        Ask the chat buddy for a reply to ``message``.

        ``history`` holds the earlier turns of the conversation; backends may
        ignore it.
        """
        raise NotImplementedError("Subclass must implement send_buddy_message method")


def get_backend(backend_name: str | None = None, config: "Config | None" = None) -> StoryBackend:
    """
    Factory function to get a generation backend instance.

    Args:
        backend_name: Backend to use. If None, read ``STORYSPARK_BACKEND``
            and default to "gemini".
        config: Loaded configuration; defaults are used when omitted.

    Raises:
        BackendUnavailableError: If the backend is unknown or its SDK is missing.
    """
    if backend_name is None:
        backend_name = os.environ.get("STORYSPARK_BACKEND", "").lower() or "gemini"

    if backend_name == "gemini":
        try:
            from .gemini_backend import GeminiBackend
        except ImportError as e:
            raise BackendUnavailableError(backend_name, details={"reason": str(e)}) from e
        return GeminiBackend(config)

    raise BackendUnavailableError(backend_name, details={"supported": ["gemini"]})
