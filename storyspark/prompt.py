"""
Prompt text sent to the story, illustration, speech and chat models.
"""

import re

STORY_PAGE_COUNT = 4

BUDDY_PERSONA = (
    "You are Sparky, a magical and helpful storybook buddy for kids. "
    "You love stories, imagination, and answering kids' questions in a fun, safe, "
    "and encouraging way. Keep responses short, simple, and exciting!"
)

# Quote marks make the speech model read out stray sounds.
_QUOTE_MARKS = re.compile("[\"'“”‘’«»]")


def story_prompt(topic: str) -> str:
    return (
        f'Generate a short, {STORY_PAGE_COUNT}-page story for kids about: "{topic}". '
        "Each page should be about 2-3 sentences long. "
        "Also provide a descriptive illustration prompt for each page."
    )


def illustration_prompt(description: str) -> str:
    return (
        f"Magical, vibrant, kid-friendly storybook illustration of: {description}. "
        "High quality, digital art style."
    )


def clean_narration_text(text: str) -> str:
    """Strip quotation marks and guillemets from text before narration."""
    return _QUOTE_MARKS.sub("", text).strip()


def speech_prompt(text: str) -> str:
    return f"Say warmly: {clean_narration_text(text)}"
