import pytest

from storyspark.prompt import (
    STORY_PAGE_COUNT,
    clean_narration_text,
    illustration_prompt,
    speech_prompt,
    story_prompt,
)


def test_story_prompt_mentions_topic_and_page_count():
    prompt = story_prompt("A robot that learned to dance")

    assert '"A robot that learned to dance"' in prompt
    assert f"{STORY_PAGE_COUNT}-page" in prompt
    assert "illustration prompt" in prompt


def test_illustration_prompt_wraps_description():
    prompt = illustration_prompt("a dragon icing a cake")

    assert "a dragon icing a cake" in prompt
    assert prompt.startswith("Magical, vibrant, kid-friendly storybook illustration")


@pytest.mark.parametrize(
    "text, expected",
    [
        ('"Hello," said Tom.', "Hello, said Tom."),
        ("It’s Mia’s “big” day", "Its Mias big day"),
        ("«Oui!» cried the frog.", "Oui! cried the frog."),
        ("  No quotes here.  ", "No quotes here."),
    ],
)
def test_clean_narration_text(text, expected):
    assert clean_narration_text(text) == expected


def test_speech_prompt():
    assert speech_prompt("'Wake up!' said Mum.") == "Say warmly: Wake up! said Mum."
