"""Data model for a storybook session."""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal

from .shared.errors import StoryParseError


class ImageSize(Enum):
    """Illustration quality tier."""

    K1 = "1K"
    K2 = "2K"
    K4 = "4K"

    @property
    def uses_pro_model(self) -> bool:
        return self in (ImageSize.K2, ImageSize.K4)


@dataclass
class Page:
    """One page of a story.

    ``image_url`` and ``audio_data`` start empty and are filled at most once
    as the assets arrive. Use :meth:`set_image` and :meth:`set_audio` rather
    than assigning directly so that a filled field is never replaced.
    """

    text: str
    illustration_prompt: str
    image_url: str | None = None
    audio_data: str | None = None

    @property
    def is_ready(self) -> bool:
        return self.image_url is not None and self.audio_data is not None

    def set_image(self, image_url: str) -> bool:
        """Store the illustration unless one is already present."""
        if self.image_url is not None:
            return False
        self.image_url = image_url
        return True

    def set_audio(self, audio_data: str) -> bool:
        """Store the narration unless one is already present."""
        if self.audio_data is not None:
            return False
        self.audio_data = audio_data
        return True


@dataclass
class Story:
    title: str
    pages: list[Page] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "Story":
        """Build a story from a decoded skeleton payload.

        Raises:
            StoryParseError: If the payload does not have a title and a
                non-empty list of pages with text and illustration prompts.
        """
        if not isinstance(data, dict):
            raise StoryParseError(f"expected an object, got {type(data).__name__}")

        title = data.get("title")
        if not isinstance(title, str) or not title.strip():
            raise StoryParseError("missing title")

        raw_pages = data.get("pages")
        if not isinstance(raw_pages, list) or not raw_pages:
            raise StoryParseError("missing pages")

        pages = []
        for i, raw in enumerate(raw_pages):
            if not isinstance(raw, dict):
                raise StoryParseError(f"page {i} is not an object")
            text = raw.get("text")
            illustration_prompt = raw.get("illustrationPrompt")
            if not isinstance(text, str) or not text.strip():
                raise StoryParseError(f"page {i} has no text")
            if not isinstance(illustration_prompt, str) or not illustration_prompt.strip():
                raise StoryParseError(f"page {i} has no illustrationPrompt")
            pages.append(Page(text=text.strip(), illustration_prompt=illustration_prompt.strip()))

        return cls(title=title.strip(), pages=pages)

    @classmethod
    def from_json(cls, raw: str | None) -> "Story":
        """Parse the raw JSON text returned by the story model."""
        try:
            data = json.loads(raw or "{}")
        except json.JSONDecodeError as e:
            raise StoryParseError(str(e), raw=raw) from e
        return cls.from_dict(data)


ChatRole = Literal["user", "model"]


@dataclass(frozen=True)
class ChatMessage:
    role: ChatRole
    text: str
