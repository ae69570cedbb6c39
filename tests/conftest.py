import sys
from pathlib import Path
from unittest.mock import Mock

import pytest
from PIL import Image

sys.path.insert(0, str(Path(__file__).parent.parent))

from shotcraft.core.objects import GlobalStyle, Screenshot, TranslationData
from shotcraft.canvas.fonts import FontsManager
from shotcraft.canvas.images import ImageManager


def make_screens(n: int, image_ref: str = "shot.png") -> list:
    return [Screenshot(id=f"s{i}", image_ref=image_ref, text=f"Headline {i}") for i in range(n)]


@pytest.fixture
def screens():
    return make_screens(3)


@pytest.fixture
def style():
    return GlobalStyle()


@pytest.fixture
def translation():
    return TranslationData(
        headlines={"de": ["Erste", "", "Dritte"]},
        per_language_styles={"de": {2: {"font_size": 60.0}}},
    )


@pytest.fixture
def fonts(tmp_path):
    # empty fonts dir: every family falls back to Pillow's default font
    return FontsManager(tmp_path / "fonts")


@pytest.fixture
def phone_image():
    img = Image.new("RGBA", (120, 260), (255, 0, 0, 255))
    img.paste((0, 0, 255, 255), (0, 0, 120, 130))
    return img


@pytest.fixture
def images(phone_image):
    manager = ImageManager(executor=lambda job: job())
    manager.get = Mock(return_value=phone_image)
    return manager


@pytest.fixture
def pointer():
    """Fake global pointer source recording subscribe/unsubscribe calls."""
    src = Mock()
    src.handlers = None
    src.unsubscribe = Mock()

    def _subscribe(on_move, on_up):
        src.handlers = (on_move, on_up)
        return src.unsubscribe

    src.subscribe = Mock(side_effect=_subscribe)
    return src
