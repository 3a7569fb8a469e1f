import base64
from io import BytesIO

import pytest
from PIL import Image

from storyspark.formatters import display_chat_message, display_error, display_page, illustration_image
from storyspark.models import ChatMessage, ImageSize
from storyspark.pages import PageAssetController


def png_data_uri(size=(4, 4)):
    buffer = BytesIO()
    Image.new("RGB", size, color="purple").save(buffer, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buffer.getvalue()).decode()


class TestIllustrationImage:
    def test_opens_png(self):
        image = illustration_image(png_data_uri((8, 8)))

        assert image.size == (8, 8)
        assert image.format == "PNG"

    @pytest.mark.parametrize(
        "uri",
        [
            "https://example.com/cat.png",
            "data:audio/pcm;base64,AAAA",
            "data:image/png,rawbytes",
            "data:image/png;base64,@@@",
        ],
    )
    def test_rejects_non_image_uris(self, uri):
        with pytest.raises(ValueError):
            illustration_image(uri)


def test_display_page_shows_text_and_progress(story, backend, playback, capsys):
    reader = PageAssetController(story, ImageSize.K1, backend, playback)

    display_page(reader)

    out = capsys.readouterr().out
    assert "Page 0 text." in out
    assert "page 1 of 4" in out
    assert "No picture yet" in out


def test_display_page_on_last_page(story, backend, playback, capsys):
    for page in story.pages:
        page.set_image("data:image/png;base64,AAAA")
    reader = PageAssetController(story, ImageSize.K1, backend, playback)
    reader.current_index = 3

    display_page(reader)

    out = capsys.readouterr().out
    assert "Finish & Create New!" in out
    assert "Picture ready" in out


def test_display_error_and_chat(capsys):
    display_error("Oh no!")
    display_chat_message(ChatMessage(role="model", text="Boop!"))

    out = capsys.readouterr().out
    assert "Oops!" in out
    assert "Oh no!" in out
    assert "Sparky:" in out
    assert "Boop!" in out
