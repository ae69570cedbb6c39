from __future__ import annotations

import base64
import logging
from io import BytesIO
from dataclasses import dataclass
from typing import Optional, Sequence

from PIL import Image, ImageDraw

from shotcraft.core.objects import (
    SOURCE_LANGUAGE,
    DeviceDimensions,
    GlobalStyle,
    MockupSettings,
    Screenshot,
    TranslationData,
    device_dimensions,
)
from shotcraft.core.state import PIXEL_RATIO, PREVIEW_HEIGHT
from shotcraft.canvas.background import PREVIEW_PATTERN_SCALE, BackgroundPainter
from shotcraft.canvas.flow import display_text, effective_settings, mockup_image_ref, text_offset
from shotcraft.canvas.fonts import FontsManager
from shotcraft.canvas.images import ImageManager
from shotcraft.canvas.mockup import PHONE_ASPECT_ANDROID, PHONE_ASPECT_IOS, MockupFramePainter
from shotcraft.canvas.planner import Pair, RenderItem, Single
from shotcraft.canvas.styles import effective_style_for
from shotcraft.canvas.text import TEXT_AREA_RATIO, MockupInfo, TextPainter
from shotcraft.utils import clamp, composite_at

logger = logging.getLogger(__name__)

MIN_MOCKUP_SCALE = 0.3
MAX_MOCKUP_SCALE = 2.0
MAX_MOCKUP_HEIGHT = 0.75  # of the preview height
MOCKUP_BOTTOM_MARGIN = 40.0  # full-resolution px below a bottom-aligned mockup
VISIBILITY = {"full": 1.0, "2/3": 2.0 / 3.0, "1/2": 0.5}

DIVIDER_COLOR = (255, 255, 255, 128)
DIVIDER_WIDTH = 2.0
DIVIDER_DASH = (8.0, 4.0)


@dataclass(frozen=True)
class MockupPlacement:
    """Mockup rect in logical preview px, centered on (center_x, center_y)."""

    center_x: float
    center_y: float
    width: float
    height: float
    rotation: float


class CompositionEngine:
    """Render screens and linked pairs to Pillow images.

    Geometry is computed in logical preview px (``preview_height`` tall,
    device-aspect wide) and drawn at ``pixel_ratio`` bitmap px per logical
    px. Each render starts from a fresh canvas, so redraws with the same
    inputs produce identical pixels.
    """

    def __init__(
        self,
        device_size: str = "6.9",
        preview_height: float = PREVIEW_HEIGHT,
        pixel_ratio: float = PIXEL_RATIO,
        fonts: Optional[FontsManager] = None,
        images: Optional[ImageManager] = None,
    ) -> None:
        self.device: DeviceDimensions = device_dimensions(device_size)
        self.preview_height = float(preview_height)
        self.pixel_ratio = float(pixel_ratio)
        self.images = images or ImageManager()
        self.background = BackgroundPainter(PREVIEW_PATTERN_SCALE * self.pixel_ratio)
        self.mockup = MockupFramePainter(self.pixel_ratio)
        self.text = TextPainter(fonts, self.pixel_ratio)

    # ---- Geometry ----
    @property
    def preview_width(self) -> float:
        return self.preview_height * self.device.aspect_ratio

    def canvas_size(self, screens: int = 1) -> tuple[int, int]:
        r = self.pixel_ratio
        return int(round(self.preview_width * r)) * screens, int(round(self.preview_height * r))

    def mockup_placement(self, style: GlobalStyle, settings: MockupSettings, pair: bool = False) -> MockupPlacement:
        H = self.preview_height
        W = self.preview_width
        raw_scale = style.mockup_scale if pair or settings.scale is None else settings.scale
        scale = clamp(raw_scale, MIN_MOCKUP_SCALE, MAX_MOCKUP_SCALE)
        visibility = VISIBILITY.get(style.mockup_visibility, 1.0)

        text_area = H * TEXT_AREA_RATIO
        bottom_margin = MOCKUP_BOTTOM_MARGIN * H / self.device.height
        available = H - text_area - bottom_margin
        height = min(available, H * MAX_MOCKUP_HEIGHT) * scale
        aspect = PHONE_ASPECT_ANDROID if self.device.platform == "android" else PHONE_ASPECT_IOS
        width = height * aspect
        visible = height * visibility
        hidden = height - visible

        if style.mockup_alignment == "top":
            top = text_area if style.text_position == "top" else 0.0
            center_y = top - hidden + height / 2.0
        elif style.mockup_alignment == "bottom":
            center_y = H - visible - bottom_margin + height / 2.0
        else:
            center_y = H / 2.0

        # Pair offsets are percent of one screen width measured from the left screen's center
        center_x = W / 2.0 + settings.offset_x / 100.0 * W
        center_y += settings.offset_y / 100.0 * H
        return MockupPlacement(center_x, center_y, width, height, settings.rotation)

    # ---- Painting ----
    def _new_canvas(self, screens: int) -> Image.Image:
        return Image.new("RGBA", self.canvas_size(screens), (0, 0, 0, 0))

    def _paint_mockup(
        self, canvas: Image.Image, style: GlobalStyle, placement: MockupPlacement, img: Optional[Image.Image]
    ) -> Optional[MockupInfo]:
        if img is None or not style.show_mockup:
            return None
        r = self.pixel_ratio
        self.mockup.paint(
            canvas,
            placement.center_x * r,
            placement.center_y * r,
            placement.width * r,
            placement.height * r,
            placement.rotation,
            style.mockup_style,
            style.mockup_color,
            img,
            android=self.device.platform == "android",
        )
        return MockupInfo(placement.center_y * r, placement.width * r, placement.height * r, placement.rotation)

    def _paint_divider(self, canvas: Image.Image, x: float) -> None:
        r = self.pixel_ratio
        lw = max(1, int(round(DIVIDER_WIDTH * r)))
        dash, gap = DIVIDER_DASH[0] * r, DIVIDER_DASH[1] * r
        layer = Image.new("RGBA", (lw, canvas.height), (0, 0, 0, 0))
        draw = ImageDraw.Draw(layer)
        y = 0.0
        while y < canvas.height:
            draw.rectangle((0, y, lw - 1, min(canvas.height, y + dash) - 1), fill=DIVIDER_COLOR)
            y += dash + gap
        composite_at(canvas, layer, x - lw / 2.0, 0)

    def _image_for(self, screenshots: Sequence[Screenshot], index: int, image, fetch_image: bool):
        if image is not None or not fetch_image:
            return image
        return self.images.get(mockup_image_ref(screenshots, index))

    def render_single(
        self,
        screenshots: Sequence[Screenshot],
        index: int,
        style: GlobalStyle,
        translation: Optional[TranslationData] = None,
        language: str = SOURCE_LANGUAGE,
        image: Optional[Image.Image] = None,
        settings: Optional[MockupSettings] = None,
        fetch_image: bool = True,
    ) -> Image.Image:
        """Render one unlinked screen: background, mockup, then headline.

        Args:
            image: Decoded mockup image; looked up through the image manager
                when omitted and ``fetch_image`` is set.
            settings: Uncommitted mockup settings to draw with (drag preview).
        """
        screenshot = screenshots[index]
        eff = effective_style_for(style, screenshots, translation, index, language)
        canvas = self._new_canvas(1)
        W, H = canvas.width, canvas.height

        self.background.paint(canvas, 0, 0, W, H, eff)
        current = settings or effective_settings(screenshot, eff)
        placement = self.mockup_placement(eff, current)
        img = self._image_for(screenshots, index, image, fetch_image)
        info = self._paint_mockup(canvas, eff, placement, img)
        self.text.draw(
            canvas, display_text(screenshot, index, translation, language),
            0, H, W, eff, info, text_offset(screenshot, eff),
        )
        return canvas

    def render_pair(
        self,
        screenshots: Sequence[Screenshot],
        primary: int,
        style: GlobalStyle,
        translation: Optional[TranslationData] = None,
        language: str = SOURCE_LANGUAGE,
        image: Optional[Image.Image] = None,
        settings: Optional[MockupSettings] = None,
        fetch_image: bool = True,
    ) -> Image.Image:
        """Render a linked pair on one double-width canvas.

        Both halves get their own background and headline; a single mockup
        spans them, positioned by the primary's settings and drawn with the
        primary's image.
        """
        secondary = primary + 1
        first, second = screenshots[primary], screenshots[secondary]
        eff1 = effective_style_for(style, screenshots, translation, primary, language)
        eff2 = effective_style_for(style, screenshots, translation, secondary, language)
        canvas = self._new_canvas(2)
        W, H = canvas.width // 2, canvas.height

        self.background.paint(canvas, 0, 0, W, H, eff1)
        self.background.paint(canvas, W, 0, W, H, eff2)
        self._paint_divider(canvas, W)

        current = settings or effective_settings(first, eff1)
        placement = self.mockup_placement(eff1, current, pair=True)
        img = self._image_for(screenshots, primary, image, fetch_image)
        info = self._paint_mockup(canvas, eff1, placement, img)

        self.text.draw(
            canvas, display_text(first, primary, translation, language),
            0, H, W, eff1, info, text_offset(first, eff1),
        )
        self.text.draw(
            canvas, display_text(second, secondary, translation, language),
            W, H, W, eff2, info, text_offset(second, eff2),
        )
        return canvas

    def render_item(
        self,
        item: RenderItem,
        screenshots: Sequence[Screenshot],
        style: GlobalStyle,
        translation: Optional[TranslationData] = None,
        language: str = SOURCE_LANGUAGE,
        **kwargs,
    ) -> Image.Image:
        if isinstance(item, Pair):
            return self.render_pair(screenshots, item.primary, style, translation, language, **kwargs)
        if isinstance(item, Single):
            return self.render_single(screenshots, item.index, style, translation, language, **kwargs)
        raise TypeError(f"Unknown render item: {item!r}")


def to_png_bytes(img: Image.Image) -> bytes:
    buf = BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def to_data_url(img: Image.Image) -> str:
    return "data:image/png;base64," + base64.b64encode(to_png_bytes(img)).decode("ascii")
