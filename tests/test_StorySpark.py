import asyncio
import sys
import threading
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from typer.testing import CliRunner

from storyspark import StorySpark
from storyspark.chat import ChatSession
from storyspark.config import Config
from storyspark.keys import KeyGate
from storyspark.models import ImageSize
from storyspark.shared.types import View
from storyspark.view import ViewController


@pytest.fixture
def session(backend, key_host, playback):
    return ViewController(backend, KeyGate(key_host), playback), ChatSession(backend)


@pytest.mark.anyio
async def test_full_session_from_landing(session, backend):
    controller, chat = session
    ask = AsyncMock(side_effect=["1", "1K", "n", "n", "r", "n", "n"])
    confirm = AsyncMock(side_effect=[True, False])

    with patch.object(StorySpark, "_ask", ask), patch.object(StorySpark, "_confirm", confirm):
        await StorySpark.run_session(controller, chat)

    assert backend.story_calls == ["A brave kitten in space"]
    assert controller.view is View.LANDING
    assert controller.story is None
    assert confirm.await_count == 2


@pytest.mark.anyio
async def test_topic_argument_skips_landing(session, backend):
    controller, chat = session
    ask = AsyncMock(side_effect=["q"])
    confirm = AsyncMock()

    with patch.object(StorySpark, "_ask", ask), patch.object(StorySpark, "_confirm", confirm):
        await StorySpark.run_session(controller, chat, topic="dragons", image_size=ImageSize.K2)
        for _ in range(3):
            await asyncio.sleep(0)

    assert backend.story_calls == ["dragons"]
    assert backend.image_calls[0] == ("Scene 0", ImageSize.K2)
    confirm.assert_not_awaited()


@pytest.mark.anyio
async def test_key_screen_comes_first(session, key_host):
    controller, chat = session
    key_host.has_key = False
    confirm = AsyncMock(side_effect=[True, False])

    with patch.object(StorySpark, "_ask", AsyncMock()), patch.object(StorySpark, "_confirm", confirm):
        await StorySpark.run_session(controller, chat)

    assert key_host.selections == 1
    assert not controller.needs_key
    assert controller.view is View.LANDING


@pytest.mark.anyio
async def test_failed_story_returns_to_editor(session, backend):
    controller, chat = session
    backend.story_error = RuntimeError("boom")
    # topic, size, then an empty topic goes home
    ask = AsyncMock(side_effect=["dragons", "1K", ""])
    confirm = AsyncMock(side_effect=[True, False])

    with patch.object(StorySpark, "_ask", ask), patch.object(StorySpark, "_confirm", confirm):
        await StorySpark.run_session(controller, chat)

    assert backend.story_calls == ["dragons"]
    assert controller.view is View.LANDING


@pytest.mark.anyio
async def test_chat_loop_until_blank_line(backend):
    chat = ChatSession(backend)

    with patch.object(StorySpark, "_ask", AsyncMock(side_effect=["hi", "tell me a joke", ""])):
        await StorySpark.chat_loop(chat)

    assert [m.text for m in chat.messages if m.role == "user"] == ["hi", "tell me a joke"]
    assert len(chat.messages) == 4


@pytest.mark.parametrize(
    "argv, expected",
    [
        (["storyspark"], ["storyspark", "main"]),
        (["storyspark", "A robot"], ["storyspark", "main", "A robot"]),
        (["storyspark", "chat"], ["storyspark", "chat"]),
        (["storyspark", "--help"], ["storyspark", "--help"]),
    ],
)
def test_cli_entry_routes_bare_topic(argv, expected):
    with patch.object(sys, "argv", list(argv)), patch.object(StorySpark, "app") as mock_app:
        StorySpark.cli_entry()
        assert sys.argv == expected
    mock_app.assert_called_once()


@pytest.mark.anyio
async def test_prompt_runs_on_daemon_thread():
    seen = []

    def ask(prompt, **kwargs):
        seen.append(threading.current_thread())
        return "dragons"

    with patch.object(StorySpark.Prompt, "ask", side_effect=ask):
        assert await StorySpark._ask("Topic?") == "dragons"

    assert seen[0] is not threading.main_thread()
    assert seen[0].daemon


@pytest.mark.anyio
async def test_prompt_end_of_input_propagates():
    with patch.object(StorySpark.Confirm, "ask", side_effect=EOFError):
        with pytest.raises(EOFError):
            await StorySpark._confirm("Ready?")


@pytest.mark.parametrize("interruption", [KeyboardInterrupt, EOFError])
def test_main_ends_quietly_when_input_stops(interruption):
    with (
        patch.object(StorySpark, "load_config", return_value=Config()),
        patch.object(StorySpark, "configure_logging"),
        patch.object(StorySpark, "build_session", return_value=(MagicMock(), MagicMock())),
        patch.object(StorySpark, "run_session", AsyncMock(side_effect=interruption)),
    ):
        result = CliRunner().invoke(StorySpark.app, ["main", "dragons"])

    assert result.exit_code == 0
    assert "The End" in result.stdout
