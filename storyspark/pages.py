"""Per-page illustration and narration for the reading view.

Entering a page starts generation of whichever assets the page is missing,
image and audio independently and concurrently. Each asset is requested at
most once at a time and written to the page at most once.

A result is always cached on the page it was requested for, even when the
reader has moved on by the time it arrives, so no asset is paid for twice. A
request still running when its page is entered again is reused instead of
being issued a second time.

Background failures are logged and leave the asset missing. The reader can
then ask for narration again with :meth:`PageAssetController.read_aloud`.
"""

import asyncio
import logging

from .audio import PlaybackSlot
from .llm_backend import StoryBackend
from .models import ImageSize, Page, Story
from .shared.types import AssetKind, ReadAloudOutcome

logger = logging.getLogger(__name__)

LABEL_WARMING_UP = "Warming up my voice..."
LABEL_STOP = "Stop Reading"
LABEL_TRY = "Try Reading Aloud"
LABEL_READ = "Read This Page Aloud"


class PageAssetController:
    """Fetches and caches assets for the pages of one story."""

    def __init__(self, story: Story, image_size: ImageSize, backend: StoryBackend, playback: PlaybackSlot) -> None:
        self.story = story
        self.image_size = image_size
        self.backend = backend
        self.playback = playback
        self.current_index = 0
        self._pending: dict[tuple[int, AssetKind], asyncio.Task] = {}

    @property
    def pages(self) -> list[Page]:
        return self.story.pages

    @property
    def current_page(self) -> Page:
        return self.pages[self.current_index]

    @property
    def is_last_page(self) -> bool:
        return self.current_index == len(self.pages) - 1

    def is_pending(self, index: int, kind: AssetKind) -> bool:
        return (index, kind) in self._pending

    @property
    def is_generating_image(self) -> bool:
        return self.is_pending(self.current_index, AssetKind.IMAGE)

    @property
    def is_generating_audio(self) -> bool:
        return self.is_pending(self.current_index, AssetKind.AUDIO)

    @property
    def read_aloud_label(self) -> str:
        if self.is_generating_audio:
            return LABEL_WARMING_UP
        if self.playback.is_playing:
            return LABEL_STOP
        if self.current_page.audio_data is None:
            return LABEL_TRY
        return LABEL_READ

    def enter_page(self, index: int) -> list[asyncio.Task]:
        """Show page ``index`` and start fetching its missing assets.

        Must be called from a running event loop. Returns the tasks working
        for the page, including ones already running; empty when the page is ready.
        """
        if not 0 <= index < len(self.pages):
            raise IndexError(f"page {index} out of range (story has {len(self.pages)} pages)")

        self.current_index = index
        page = self.pages[index]
        if page.is_ready:
            return []

        tasks = []
        if page.image_url is None:
            tasks.append(self._ensure(index, AssetKind.IMAGE))
        if page.audio_data is None:
            tasks.append(self._ensure(index, AssetKind.AUDIO))
        return tasks

    def next_page(self) -> list[asyncio.Task]:
        return self.enter_page(min(self.current_index + 1, len(self.pages) - 1))

    def previous_page(self) -> list[asyncio.Task]:
        return self.enter_page(max(0, self.current_index - 1))

    def _ensure(self, index: int, kind: AssetKind) -> asyncio.Task:
        key = (index, kind)
        task = self._pending.get(key)
        if task is None:
            task = asyncio.create_task(self._fetch(index, kind), name=f"page-{index}-{kind.value}")
            self._pending[key] = task
        return task

    async def _fetch(self, index: int, kind: AssetKind) -> bool:
        """Run one generation request and cache its result on the page."""
        key = (index, kind)
        page = self.pages[index]
        try:
            if kind is AssetKind.IMAGE:
                result = await self.backend.generate_illustration(page.illustration_prompt, self.image_size)
            else:
                result = await self.backend.generate_speech(page.text)
        except Exception:
            logger.error("%s generation failed for page %d", kind.value.capitalize(), index + 1, exc_info=True)
            return False
        finally:
            self._pending.pop(key, None)

        if index != self.current_index:
            logger.debug("Caching %s for page %d after the reader moved on", kind.value, index + 1)

        if kind is AssetKind.IMAGE:
            return page.set_image(result)
        return page.set_audio(result)

    async def read_aloud(self) -> ReadAloudOutcome:
        """Handle a press of the read-aloud control on the current page."""
        if self.playback.is_playing:
            self.playback.release()
            return ReadAloudOutcome.STOPPED

        page = self.current_page
        if page.audio_data is None:
            if self.is_generating_audio:
                return ReadAloudOutcome.BUSY
            index = self.current_index
            await self._ensure(index, AssetKind.AUDIO)
            if page.audio_data is None or index != self.current_index:
                return ReadAloudOutcome.FAILED

        try:
            self.playback.play(page.audio_data)
        except Exception:
            logger.error("Could not play narration for page %d", self.current_index + 1, exc_info=True)
            return ReadAloudOutcome.FAILED
        return ReadAloudOutcome.PLAYING

    async def wait_pending(self) -> None:
        """Wait for every request that is still running."""
        if self._pending:
            await asyncio.gather(*self._pending.values(), return_exceptions=True)

    def close(self) -> None:
        """Stop narration; running requests are left to finish."""
        self.playback.release()
