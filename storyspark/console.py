"""Shared Rich console instance for StorySpark.

All modules should import console from here instead of creating their own
Console() instances, ensuring consistent output behavior.
"""

import asyncio
import logging
import threading
from collections.abc import Callable
from typing import Any, TypeVar

from rich.console import Console
from rich.logging import RichHandler

logger = logging.getLogger(__name__)

T = TypeVar("T")

console = Console()


def configure_logging(verbose: bool = False) -> None:
    """Route log records through the shared console."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=verbose)],
        force=True,
    )
    # The SDK's HTTP client is chatty at DEBUG.
    logging.getLogger("httpx").setLevel(logging.WARNING)


async def run_prompt(fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """Run a blocking terminal prompt while the event loop keeps going.

    The prompt gets its own daemon thread. ``asyncio.run`` joins the default
    executor on exit, so a prompt left waiting on stdin there would keep
    Ctrl-C from ending the program.
    """
    loop = asyncio.get_running_loop()
    future: asyncio.Future = loop.create_future()

    def resolve(result: Any, error: BaseException | None) -> None:
        if future.done():
            return
        if error is not None:
            future.set_exception(error)
        else:
            future.set_result(result)

    def target() -> None:
        try:
            outcome = (fn(*args, **kwargs), None)
        except BaseException as e:
            outcome = (None, e)
        try:
            loop.call_soon_threadsafe(resolve, *outcome)
        except RuntimeError:
            logger.debug("Prompt answered after the event loop closed")

    threading.Thread(target=target, name="storyspark-prompt", daemon=True).start()
    return await future
