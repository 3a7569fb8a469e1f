"""Rich display helpers for the StorySpark terminal UI."""

import base64
import binascii
from io import BytesIO

from PIL import Image
from rich.panel import Panel
from rich.table import Table

from .console import console
from .models import ChatMessage
from .pages import PageAssetController

PRESET_TOPICS = [
    "A brave kitten in space",
    "The dragon who loved baking cakes",
    "A magical forest where toys come alive",
    "A robot that learned to dance",
]

BUDDY_GREETING = "Hi! I'm Sparky! Ask me anything about your stories or just say hello!"


def display_key_screen() -> None:
    console.print(
        Panel(
            "To create magic pictures (like 2K and 4K illustrations!), we need a special key.\n"
            "Ask an adult to help you select one from a paid project!\n\n"
            "[dim]Learn about API key billing: https://ai.google.dev/gemini-api/docs/billing[/dim]",
            title="[bold magenta]Hello Explorer![/bold magenta]",
            border_style="magenta",
        )
    )


def display_landing() -> None:
    console.print(
        Panel(
            "Imagine any world you want. We'll write the story, paint the pictures, "
            "and read it aloud just for you.\n\n🧚  🐉  🚀  🎨",
            title="[bold blue]Story[/bold blue][bold magenta]Spark[/bold magenta] ✨  Create Your Own Tale!",
            border_style="blue",
        )
    )


def display_editor() -> None:
    console.print("\n[bold blue]Create a New Adventure![/bold blue]")
    console.print("[dim]Pick some ideas:[/dim]")
    for i, topic in enumerate(PRESET_TOPICS, 1):
        console.print(f"  [cyan]{i}[/cyan]. {topic}")


def display_error(message: str) -> None:
    console.print(Panel(message, title="[bold red]Oops![/bold red]", border_style="red"))


def display_page(reader: PageAssetController) -> None:
    """Show the current page, its picture status and the available controls."""
    page = reader.current_page
    if reader.is_generating_image:
        picture = "[blue]🎨 Painting your picture...[/blue]"
    elif page.image_url:
        picture = "[green]🖼  Picture ready[/green] [dim](press s to look)[/dim]"
    else:
        picture = "[dim]🖼  No picture yet[/dim]"

    console.print()
    console.print(
        Panel(
            f'[italic]"{page.text}"[/italic]\n\n{picture}',
            title=f"[bold blue]{reader.story.title}[/bold blue]",
            subtitle=f"page {reader.current_index + 1} of {len(reader.pages)}",
            border_style="magenta",
        )
    )

    controls = Table.grid(padding=(0, 2))
    next_label = "Finish & Create New!" if reader.is_last_page else "Next Page →"
    controls.add_row(
        f"[cyan]n[/cyan] {next_label}",
        "[cyan]p[/cyan] ← Previous",
        f"[cyan]r[/cyan] 🔊 {reader.read_aloud_label}",
    )
    controls.add_row("[cyan]s[/cyan] Show picture", "[cyan]b[/cyan] Talk to Sparky", "[cyan]h[/cyan] Home  [cyan]q[/cyan] Quit")
    console.print(controls)


def display_chat_message(message: ChatMessage) -> None:
    if message.role == "user":
        console.print(f"[bold blue]You:[/bold blue] {message.text}")
    else:
        console.print(f"[bold yellow]✨ Sparky:[/bold yellow] {message.text}")


def illustration_image(data_uri: str) -> Image.Image:
    """Open a ``data:`` URI illustration as a Pillow image.

    Raises:
        ValueError: If the URI is not base64 image data.
    """
    header, _, payload = data_uri.partition(",")
    if not header.startswith("data:image/") or not header.endswith(";base64"):
        raise ValueError("not a base64 image data URI")
    try:
        data = base64.b64decode(payload, validate=True)
    except binascii.Error as e:
        raise ValueError(f"invalid base64 payload: {e}") from e
    return Image.open(BytesIO(data))
