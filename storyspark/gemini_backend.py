"""Gemini backend for StorySpark.

Each call builds a fresh client from ``GEMINI_API_KEY`` so that a key picked
during the session takes effect immediately. Story, illustration and speech
calls go through the configured :class:`~storyspark.retry.RetryPolicy`; chat
replies are sent once.
"""

import base64
import logging
import os
from collections.abc import Awaitable, Callable, Iterator
from typing import Any, TypeVar

from google import genai
from google.genai import types

from .config import Config
from .llm_backend import StoryBackend
from .models import ChatMessage, ImageSize, Story
from .prompt import BUDDY_PERSONA, STORY_PAGE_COUNT, illustration_prompt, speech_prompt, story_prompt
from .retry import RetryPolicy
from .shared.errors import EntitlementError, MissingPayloadError, StorySparkError, classify_provider_error

logger = logging.getLogger(__name__)

T = TypeVar("T")

ILLUSTRATION_ASPECT_RATIO = "1:1"

STORY_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "title": types.Schema(type=types.Type.STRING),
        "pages": types.Schema(
            type=types.Type.ARRAY,
            min_items=STORY_PAGE_COUNT,
            max_items=STORY_PAGE_COUNT,
            items=types.Schema(
                type=types.Type.OBJECT,
                properties={
                    "text": types.Schema(type=types.Type.STRING),
                    "illustrationPrompt": types.Schema(type=types.Type.STRING),
                },
                required=["text", "illustrationPrompt"],
            ),
        ),
    },
    required=["title", "pages"],
)


def _inline_parts(resp: Any) -> Iterator[Any]:
    """Yield inline data blobs from the first candidate of a response."""
    candidates = getattr(resp, "candidates", None)
    if not candidates:
        return
    content = getattr(candidates[0], "content", None)
    parts = getattr(content, "parts", None) or []
    for part in parts:
        inline = getattr(part, "inline_data", None)
        if inline is not None and getattr(inline, "data", None):
            yield inline


def _to_base64(data: bytes | str) -> str:
    if isinstance(data, str):
        return data
    return base64.b64encode(data).decode("ascii")


class GeminiBackend(StoryBackend):
    name = "gemini"

    def __init__(self, config: Config | None = None, retry_policy: RetryPolicy | None = None) -> None:
        self.config = config or Config()
        self.retry = retry_policy or self.config.retry_policy()

    def _get_client(self) -> genai.Client:
        api_key = os.environ.get("GEMINI_API_KEY")
        if not api_key:
            raise EntitlementError("GEMINI_API_KEY environment variable not set")
        return genai.Client(api_key=api_key)

    def _model(self, field_name: str) -> str:
        return self.config.get_field_value("models", field_name)

    async def _call(self, fn: Callable[[], Awaitable[T]], label: str) -> T:
        try:
            return await self.retry.run(fn, label=label)
        except StorySparkError:
            raise
        except Exception as e:
            raise classify_provider_error(e) from e

    async def generate_story_skeleton(self, topic: str) -> Story:
        client = self._get_client()
        model = self._model("story_model")
        config = types.GenerateContentConfig(
            response_mime_type="application/json",
            response_schema=STORY_SCHEMA,
        )

        async def attempt() -> Story:
            response = await client.aio.models.generate_content(
                model=model, contents=story_prompt(topic), config=config
            )
            return Story.from_json(response.text)

        story = await self._call(attempt, "story skeleton")
        logger.info("Generated story %r with %d pages", story.title, len(story.pages))
        return story

    async def generate_illustration(self, prompt: str, size: ImageSize) -> str:
        client = self._get_client()
        if size.uses_pro_model:
            model = self._model("pro_image_model")
            image_config = types.ImageConfig(aspect_ratio=ILLUSTRATION_ASPECT_RATIO, image_size=size.value)
        else:
            model = self._model("image_model")
            image_config = types.ImageConfig(aspect_ratio=ILLUSTRATION_ASPECT_RATIO)
        config = types.GenerateContentConfig(image_config=image_config)

        async def attempt() -> str:
            response = await client.aio.models.generate_content(
                model=model, contents=illustration_prompt(prompt), config=config
            )
            for inline in _inline_parts(response):
                mime_type = getattr(inline, "mime_type", None) or "image/png"
                return f"data:{mime_type};base64,{_to_base64(inline.data)}"
            raise MissingPayloadError("image", model)

        return await self._call(attempt, f"illustration ({size.value})")

    async def generate_speech(self, text: str) -> str:
        client = self._get_client()
        model = self._model("speech_model")
        config = types.GenerateContentConfig(
            response_modalities=["AUDIO"],
            speech_config=types.SpeechConfig(
                voice_config=types.VoiceConfig(
                    prebuilt_voice_config=types.PrebuiltVoiceConfig(
                        voice_name=self.config.get_field_value("audio", "voice")
                    )
                )
            ),
        )

        async def attempt() -> str:
            response = await client.aio.models.generate_content(model=model, contents=speech_prompt(text), config=config)
            for inline in _inline_parts(response):
                return _to_base64(inline.data)
            raise MissingPayloadError("audio", model)

        return await self._call(attempt, "speech")

    async def send_buddy_message(self, message: str, history: list[ChatMessage]) -> str:
        client = self._get_client()
        previous_turns = None
        if self.config.get_field_value("system", "buddy_memory") and history:
            previous_turns = [types.Content(role=m.role, parts=[types.Part(text=m.text)]) for m in history]

        chat = client.aio.chats.create(
            model=self._model("buddy_model"),
            config=types.GenerateContentConfig(system_instruction=BUDDY_PERSONA),
            history=previous_turns,
        )
        try:
            response = await chat.send_message(message)
        except Exception as e:
            raise classify_provider_error(e) from e
        return response.text or ""
