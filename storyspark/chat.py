"""Conversation with Sparky, the storybook buddy."""

import logging

from .llm_backend import StoryBackend
from .models import ChatMessage

logger = logging.getLogger(__name__)

SPEECHLESS_REPLY = "I'm a bit speechless! Try again?"
FAILED_REPLY = "Oops! My magic wand is buzzing. Try again soon!"


class ChatSession:
    """Append-only transcript of one chat with the buddy.

    The user's message is added before the request goes out; the reply, or a
    friendly apology if the request fails, is added when it comes back.
    ``is_busy`` is set while a request is outstanding and further sends are
    refused.
    """

    def __init__(self, backend: StoryBackend) -> None:
        self.backend = backend
        self.messages: list[ChatMessage] = []
        self.is_busy = False

    async def send(self, text: str) -> ChatMessage | None:
        """Send a message; returns the buddy's reply, or None if nothing was sent."""
        if not text.strip() or self.is_busy:
            return None

        history = list(self.messages)
        self.messages.append(ChatMessage(role="user", text=text))
        self.is_busy = True
        try:
            reply_text = await self.backend.send_buddy_message(text, history) or SPEECHLESS_REPLY
        except Exception:
            logger.error("Buddy reply failed", exc_info=True)
            reply_text = FAILED_REPLY
        finally:
            self.is_busy = False

        reply = ChatMessage(role="model", text=reply_text)
        self.messages.append(reply)
        return reply
