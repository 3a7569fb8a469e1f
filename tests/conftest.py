"""Pytest configuration and fakes for StorySpark tests."""

import asyncio
import base64

import pytest

from storyspark.audio import AudioBuffer, AudioOutput, PlaybackHandle, PlaybackSlot
from storyspark.keys import KeySelectionHost
from storyspark.llm_backend import StoryBackend
from storyspark.models import ImageSize, Page, Story


@pytest.fixture(scope="session")
def anyio_backend():
    """Configure anyio to use asyncio only."""
    return "asyncio"


def make_story(pages: int = 4) -> Story:
    return Story(
        title="Whiskers and the Moon",
        pages=[Page(text=f"Page {i} text.", illustration_prompt=f"Scene {i}") for i in range(pages)],
    )


class FakeBackend(StoryBackend):
    """Records calls; each call can be held open with an asyncio.Event."""

    name = "fake"

    def __init__(self) -> None:
        self.story = make_story()
        self.story_error: Exception | None = None
        self.image_error: Exception | None = None
        self.speech_error: Exception | None = None
        self.chat_error: Exception | None = None
        self.chat_reply = "Hello, friend!"
        self.gate: asyncio.Event | None = None
        self.story_calls: list[str] = []
        self.image_calls: list[tuple[str, ImageSize]] = []
        self.speech_calls: list[str] = []
        self.chat_calls: list[tuple[str, list]] = []

    async def _wait(self) -> None:
        if self.gate is not None:
            await self.gate.wait()

    async def generate_story_skeleton(self, topic: str) -> Story:
        self.story_calls.append(topic)
        await self._wait()
        if self.story_error:
            raise self.story_error
        return self.story

    async def generate_illustration(self, prompt: str, size: ImageSize) -> str:
        self.image_calls.append((prompt, size))
        await self._wait()
        if self.image_error:
            raise self.image_error
        return f"data:image/png;base64,{len(self.image_calls)}"

    async def generate_speech(self, text: str) -> str:
        self.speech_calls.append(text)
        await self._wait()
        if self.speech_error:
            raise self.speech_error
        # n silent PCM16 samples, so every clip is distinct and decodable
        return base64.b64encode(b"\x00\x00" * len(self.speech_calls)).decode("ascii")

    async def send_buddy_message(self, message: str, history: list) -> str:
        self.chat_calls.append((message, history))
        await self._wait()
        if self.chat_error:
            raise self.chat_error
        return self.chat_reply


class FakeHandle(PlaybackHandle):
    def __init__(self, buffer: AudioBuffer | None = None) -> None:
        super().__init__()
        self.buffer = buffer
        self.stopped = False

    def _halt(self) -> None:
        self.stopped = True

    def finish(self) -> None:
        """Pretend the clip played to the end."""
        self._finish()


class FakeOutput(AudioOutput):
    def __init__(self) -> None:
        self.handles: list[FakeHandle] = []

    def start(self, buffer: AudioBuffer) -> PlaybackHandle:
        handle = FakeHandle(buffer)
        self.handles.append(handle)
        return handle


class FakeKeyHost(KeySelectionHost):
    def __init__(self, has_key: bool = True, key_after_select: bool = True) -> None:
        self.has_key = has_key
        self.key_after_select = key_after_select
        self.queries = 0
        self.selections = 0

    async def has_selected_api_key(self) -> bool:
        self.queries += 1
        return self.has_key

    async def open_select_key(self) -> None:
        self.selections += 1
        self.has_key = self.key_after_select


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def output():
    return FakeOutput()


@pytest.fixture
def playback(output):
    return PlaybackSlot(output)


@pytest.fixture
def story():
    return make_story()


@pytest.fixture
def key_host():
    return FakeKeyHost()
