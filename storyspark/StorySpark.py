"""
StorySpark: terminal storybook generator.

Writes a four page story about any topic, paints an illustration and reads
each page aloud, with Sparky the chat buddy one key press away.
"""

import asyncio
import logging
from pathlib import Path

import typer
from rich.prompt import Confirm, Prompt

from .audio import PlaybackSlot, SoundDeviceOutput
from .chat import ChatSession
from .config import Config, load_config
from .console import configure_logging, console, run_prompt
from .formatters import (
    BUDDY_GREETING,
    PRESET_TOPICS,
    display_chat_message,
    display_editor,
    display_error,
    display_key_screen,
    display_landing,
    display_page,
    illustration_image,
)
from .keys import EnvironmentKeyHost, KeyGate
from .llm_backend import get_backend
from .models import ImageSize
from .schema.cli_integration import generate_cli_option, validate_cli_arguments
from .shared.errors import StorySparkError
from .shared.types import ReadAloudOutcome, View
from .view import ViewController

logger = logging.getLogger(__name__)

app = typer.Typer(
    help="StorySpark: Create your own illustrated, narrated tale.\n\n"
    "Configuration: Use 'storyspark config init' to create a config file with default values.\n"
    "Environment: Set GEMINI_API_KEY for generation and STORYSPARK_CONFIG to use a custom config file.",
    epilog="Examples:\n\n"
    "  # Start at the landing screen\n"
    "  storyspark main\n\n"
    "  # Jump straight into a story with sharper pictures\n"
    "  storyspark 'A brave kitten in space' --image-size 2K\n\n"
    "  # Just chat with Sparky\n"
    "  storyspark chat",
)
config_app = typer.Typer(help="Configuration management commands")
app.add_typer(config_app, name="config")

READER_COMMANDS = ["n", "p", "r", "s", "b", "h", "q"]


async def _ask(prompt: str, **kwargs) -> str:
    # Prompts block; run them off the loop so page assets keep arriving.
    return await run_prompt(Prompt.ask, prompt, **kwargs)


async def _confirm(prompt: str, default: bool = True) -> bool:
    return await run_prompt(Confirm.ask, prompt, default=default)


def _load_config_or_exit(verbose: bool) -> Config:
    try:
        return load_config(verbose=verbose)
    except StorySparkError as e:
        console.print(f"[red]Configuration Error:[/red] {e.message}", style="bold")
        raise typer.Exit(1) from None


def build_session(config: Config) -> tuple[ViewController, ChatSession]:
    """Wire the controllers for one interactive session."""
    backend = get_backend(config=config)
    key_gate = KeyGate(
        EnvironmentKeyHost(),
        verify_after_select=config.get_field_value("system", "verify_key_after_select"),
    )
    playback = PlaybackSlot(SoundDeviceOutput(), sample_rate=config.get_field_value("audio", "sample_rate"))
    image_size = ImageSize(config.get_field_value("images", "image_size"))
    return ViewController(backend, key_gate, playback, image_size=image_size), ChatSession(backend)


async def chat_loop(chat: ChatSession) -> None:
    """Talk to Sparky until the user sends an empty line."""
    console.print(f"\n[yellow]{BUDDY_GREETING}[/yellow] [dim](empty line to go back)[/dim]")
    for message in chat.messages:
        display_chat_message(message)
    while True:
        text = await _ask("[bold blue]You[/bold blue]", default="", show_default=False)
        if not text.strip():
            return
        with console.status("[yellow]Sparky is thinking...[/yellow]"):
            reply = await chat.send(text)
        if reply is not None:
            display_chat_message(reply)


async def _pick_topic() -> str | None:
    display_editor()
    answer = await _ask(
        "[bold]What should the story be about?[/bold] [dim](a number picks an idea, empty goes home)[/dim]",
        default="",
        show_default=False,
    )
    answer = answer.strip()
    if answer.isdigit() and 1 <= int(answer) <= len(PRESET_TOPICS):
        return PRESET_TOPICS[int(answer) - 1]
    return answer or None


async def _pick_size(default: ImageSize) -> ImageSize:
    console.print("[dim]4K looks amazing but takes a little longer to paint![/dim]")
    answer = await _ask(
        "[bold]How shiny should the pictures be?[/bold]",
        choices=[size.value for size in ImageSize],
        default=default.value,
    )
    return ImageSize(answer)


def _show_picture(controller: ViewController) -> None:
    page = controller.reader.current_page
    if not page.image_url:
        console.print("[dim]The picture isn't painted yet.[/dim]")
        return
    try:
        illustration_image(page.image_url).show()
    except (ValueError, OSError) as e:
        console.print("[yellow]Hmm, that picture won't open right now.[/yellow]")
        logger.debug("Could not open illustration: %s", e)


async def reading_loop(controller: ViewController, chat: ChatSession) -> bool:
    """Page through the story. Returns False when the user quits."""
    reader = controller.reader
    while controller.view is View.READING:
        display_page(reader)
        command = await _ask("[bold]What next?[/bold]", choices=READER_COMMANDS, default="n")

        if command == "n":
            if reader.is_last_page:
                controller.reset()
            else:
                reader.next_page()
        elif command == "p":
            reader.previous_page()
        elif command == "r":
            if reader.current_page.audio_data is None and not reader.playback.is_playing:
                with console.status(f"[green]{reader.read_aloud_label}[/green]"):
                    outcome = await reader.read_aloud()
            else:
                outcome = await reader.read_aloud()
            if outcome is ReadAloudOutcome.FAILED:
                console.print("[yellow]My voice is a bit sleepy. Try again in a moment![/yellow]")
            elif outcome is ReadAloudOutcome.BUSY:
                console.print(f"[dim]{reader.read_aloud_label}[/dim]")
        elif command == "s":
            _show_picture(controller)
        elif command == "b":
            await chat_loop(chat)
        elif command == "h":
            controller.reset()
        elif command == "q":
            controller.reset()
            return False
    return True


async def run_session(
    controller: ViewController,
    chat: ChatSession,
    topic: str | None = None,
    image_size: ImageSize | None = None,
) -> None:
    """Drive the key gate, landing, editing and reading screens until the user quits."""
    await controller.check_api_key()
    while True:
        if controller.needs_key:
            display_key_screen()
            if controller.error:
                display_error(controller.error)
            if not await _confirm("🔑 Unlock the magic?"):
                return
            await controller.open_key_selector()
            continue

        if controller.view is View.LANDING:
            display_landing()
            if topic is None and not await _confirm("[bold magenta]Start Dreaming! 🚀[/bold magenta]"):
                return
            controller.start_dreaming()

        elif controller.view is View.EDITING:
            if controller.error:
                display_error(controller.error)
            story_topic = topic or await _pick_topic()
            topic = None
            if story_topic is None:
                controller.reset()
                continue
            size = image_size or await _pick_size(controller.image_size)
            with console.status("[magenta]Magic in progress...[/magenta]"):
                await controller.start_story(story_topic, size)

        elif controller.view is View.READING:
            if not await reading_loop(controller, chat):
                return


@config_app.command(name="init", help="Create a default configuration file in the XDG config directory.")
def init_config(
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite existing config file"),
    config_path: str | None = typer.Option(None, "--path", "-p", help="Custom config file path"),
) -> None:
    config = Config()
    target_path = config.get_default_config_path() if config_path is None else Path(config_path)

    if target_path.exists() and not force:
        console.print(f"[yellow]Configuration file already exists:[/yellow] {target_path}")
        console.print("[dim]Use --force to overwrite the existing configuration file[/dim]")
        raise typer.Exit(0)

    try:
        created_path = config.create_default_config(target_path)
    except OSError as e:
        console.print(f"[red]Error creating configuration file:[/red] {e}", style="bold")
        raise typer.Exit(1) from None

    console.print(f"[bold green]✅ Configuration file created:[/bold green] {created_path}")
    console.print("[bold]Configuration file locations (in priority order):[/bold]")
    for i, search_path in enumerate(config.get_config_paths(), 1):
        marker = " [bold green](created here)[/bold green]" if search_path == created_path else ""
        console.print(f"  {i}. {search_path}{marker}")


@app.command(
    "main",
    context_settings={"help_option_names": ["-h", "--help"]},
    help="Create and read an illustrated story",
)
def main(
    topic: str | None = typer.Argument(None, help="What the story should be about (skips the landing screen)"),
    image_size: str | None = generate_cli_option("image_size"),
    verbose: bool | None = generate_cli_option("verbose"),
) -> None:
    validation_errors = validate_cli_arguments(image_size=image_size)
    if validation_errors:
        console.print("[red]CLI Argument Validation Errors:[/red]", style="bold")
        for error in validation_errors:
            console.print(f"  - {error}", style="red")
        raise typer.Exit(1)

    config = _load_config_or_exit(bool(verbose))
    verbose = verbose if verbose is not None else config.get_field_value("system", "verbose")
    configure_logging(verbose)

    try:
        controller, chat = build_session(config)
    except StorySparkError as e:
        display_error(e.message)
        raise typer.Exit(1) from None

    try:
        asyncio.run(
            run_session(
                controller,
                chat,
                topic=topic.strip() if topic and topic.strip() else None,
                image_size=ImageSize(image_size) if image_size else None,
            )
        )
    except (KeyboardInterrupt, EOFError):
        pass
    console.print("\n[bold magenta]The End! ✨[/bold magenta]")


@app.command("chat", help="Talk to Sparky, the storybook buddy")
def chat(verbose: bool | None = generate_cli_option("verbose")) -> None:
    config = _load_config_or_exit(bool(verbose))
    configure_logging(verbose if verbose is not None else config.get_field_value("system", "verbose"))

    try:
        controller, session = build_session(config)
    except StorySparkError as e:
        display_error(e.message)
        raise typer.Exit(1) from None

    async def _run() -> None:
        if not await controller.check_api_key():
            display_key_screen()
            if not await _confirm("🔑 Unlock the magic?"):
                return
            await controller.open_key_selector()
        await chat_loop(session)

    try:
        asyncio.run(_run())
    except (KeyboardInterrupt, EOFError):
        pass


def cli_entry() -> None:
    """Entry point that routes a bare topic to the main command."""
    import sys

    if len(sys.argv) == 1:
        sys.argv.append("main")
    elif not sys.argv[1].startswith("-") and sys.argv[1] not in ["main", "chat", "config"]:
        sys.argv.insert(1, "main")
    app()


if __name__ == "__main__":
    cli_entry()
