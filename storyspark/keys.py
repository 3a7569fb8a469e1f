"""API key gating.

Generation needs a key from a paid project. The key-selection host answers
whether a key is available and lets the user pick one. :class:`KeyGate` is
the session's view of that answer.
"""

import logging
import os
from abc import ABC, abstractmethod
from collections.abc import Callable

from rich.prompt import Prompt

from .console import run_prompt

logger = logging.getLogger(__name__)

API_KEY_ENV = "GEMINI_API_KEY"


class KeySelectionHost(ABC):
    """Where API keys come from."""

    @abstractmethod
    async def has_selected_api_key(self) -> bool:
        raise NotImplementedError("Subclass must implement has_selected_api_key method")

    @abstractmethod
    async def open_select_key(self) -> None:
        """Let the user pick a key. Gives no indication of success."""
        raise NotImplementedError("Subclass must implement open_select_key method")


def _ask_for_key() -> str:
    return Prompt.ask("[bold]Paste your Gemini API key[/bold]", password=True)


class EnvironmentKeyHost(KeySelectionHost):
    """Keeps the key in the process environment, asking on the terminal."""

    def __init__(self, env_var: str = API_KEY_ENV, ask: Callable[[], str] = _ask_for_key) -> None:
        self.env_var = env_var
        self.ask = ask

    async def has_selected_api_key(self) -> bool:
        return bool(os.environ.get(self.env_var))

    async def open_select_key(self) -> None:
        key = (await run_prompt(self.ask)).strip()
        if key:
            os.environ[self.env_var] = key
        else:
            logger.info("No API key entered")


class KeyGate:
    """Whether the session may call paid generation endpoints.

    After :meth:`select` the gate opens optimistically, without asking the
    host again, unless ``verify_after_select`` is set.
    """

    def __init__(self, host: KeySelectionHost, verify_after_select: bool = False) -> None:
        self.host = host
        self.verify_after_select = verify_after_select
        self.has_key = False

    async def refresh(self) -> bool:
        self.has_key = await self.host.has_selected_api_key()
        return self.has_key

    async def select(self) -> bool:
        await self.host.open_select_key()
        if self.verify_after_select:
            return await self.refresh()
        self.has_key = True
        return self.has_key

    def revoke(self) -> None:
        self.has_key = False
