"""Top-level screen flow: landing, editing and reading, behind the key gate."""

import logging

from .audio import PlaybackSlot
from .keys import KeyGate
from .llm_backend import StoryBackend
from .models import ImageSize, Story
from .pages import PageAssetController
from .shared.errors import GENERIC_STORY_MESSAGE, EntitlementError, StorySparkError
from .shared.types import View

logger = logging.getLogger(__name__)


class ViewController:
    """Session state for the storybook screens.

    ``error`` holds the child-friendly message for the last failed story
    attempt. Raw error detail only goes to the log.
    """

    def __init__(
        self,
        backend: StoryBackend,
        key_gate: KeyGate,
        playback: PlaybackSlot,
        image_size: ImageSize = ImageSize.K1,
    ) -> None:
        self.backend = backend
        self.key_gate = key_gate
        self.playback = playback
        self.image_size = image_size
        self.view = View.LANDING
        self.story: Story | None = None
        self.reader: PageAssetController | None = None
        self.is_loading = False
        self.error: str | None = None

    @property
    def needs_key(self) -> bool:
        return not self.key_gate.has_key

    async def check_api_key(self) -> bool:
        return await self.key_gate.refresh()

    async def open_key_selector(self) -> bool:
        return await self.key_gate.select()

    def start_dreaming(self) -> None:
        if self.view is View.LANDING:
            self.view = View.EDITING

    async def start_story(self, topic: str, image_size: ImageSize) -> bool:
        """Generate a story skeleton and switch to reading.

        The image size is kept for every illustration of the session. On
        failure the view stays on editing and ``error`` is set; an
        entitlement failure also closes the key gate.
        """
        if not topic.strip() or self.is_loading:
            return False

        self.is_loading = True
        self.error = None
        self.image_size = image_size
        try:
            story = await self.backend.generate_story_skeleton(topic)
        except EntitlementError as e:
            logger.error("Story generation refused: %s", e.to_response().to_dict())
            self.key_gate.revoke()
            self.error = e.user_message
            return False
        except StorySparkError as e:
            logger.error("Story generation failed: %s", e.to_response().to_dict())
            self.error = GENERIC_STORY_MESSAGE
            return False
        except Exception:
            logger.exception("Story generation failed")
            self.error = GENERIC_STORY_MESSAGE
            return False
        finally:
            self.is_loading = False

        self.story = story
        self.reader = PageAssetController(story, image_size, self.backend, self.playback)
        self.view = View.READING
        self.reader.enter_page(0)
        return True

    def reset(self) -> None:
        """Drop the story and any error and go back to the landing screen."""
        if self.reader is not None:
            self.reader.close()
        self.reader = None
        self.story = None
        self.error = None
        self.view = View.LANDING
