from __future__ import annotations

import re
import logging
from dataclasses import dataclass
from typing import Callable, Optional

import arabic_reshaper
from bidi.algorithm import get_display
from PIL import Image, ImageDraw

from shotcraft.core.objects import GlobalStyle
from shotcraft.canvas.fonts import FontsManager
from shotcraft.canvas.mockup import rotated_bounds
from shotcraft.utils import parse_color

logger = logging.getLogger(__name__)

MAX_WIDTH_RATIO = 0.85
LINE_HEIGHT = 1.3
TEXT_AREA_RATIO = 0.35  # of the canvas height, used when no mockup is drawn

# Preview layout constants in logical px (multiplied by the painter's unit)
PADDING_TOP = 6.0
GAP_FROM_MOCKUP = 2.0
BOTTOM_MARGIN = 8.0
MIN_TEXT_AREA = 30.0

# Full-size font px -> preview px
PREVIEW_FONT_SCALE = 0.25
ADAPTIVE_MIN = 0.4
ADAPTIVE_MAX = 1.3
FIT_MIN_SIZE = 8
FIT_MAX_SIZE = 24
FIT_FLOOR_SIZE = 10

_BREAK_RE = re.compile(r"\s*(?:\||\r?\n)\s*")


def strip_highlight_markers(text: str) -> str:
    """Remove the ``[``/``]`` highlight markers; the preview draws plain text."""
    return str(text or "").replace("[", "").replace("]", "")


def shape(line: str) -> str:
    """Reorder and join a logical line for display (Arabic, Hebrew, ...)."""
    return get_display(arabic_reshaper.reshape(line))


def word_wrap(text: str, max_width: float, measure: Callable[[str], float]) -> list[str]:
    """Greedy word wrap.

    A word is appended to the running line while the measured line stays
    within ``max_width``; otherwise it starts a new line. A single word wider
    than ``max_width`` is kept whole on its own line. ``|`` and newlines are
    hard breaks.
    """
    lines: list[str] = []
    for paragraph in _BREAK_RE.split(str(text or "")):
        current = ""
        for word in paragraph.split():
            candidate = f"{current} {word}" if current else word
            if current and measure(candidate) > max_width:
                lines.append(current)
                current = word
            else:
                current = candidate
        if current:
            lines.append(current)
    return lines


@dataclass(frozen=True)
class MockupInfo:
    """Where the mockup ended up, in canvas px; the text area avoids it."""

    center_y: float
    width: float
    height: float
    rotation: float = 0.0


@dataclass(frozen=True)
class TextLayout:
    lines: tuple
    font_size: float  # px
    line_height: float  # px
    first_baseline: float  # y of the first line's baseline, offset applied
    area_top: float
    area_height: float


class TextPainter:
    """Word-wrap and draw a headline inside one screen of the canvas.

    Args:
        fonts: Resolves ``style.font_family`` to Pillow fonts.
        unit: Pixels per logical preview px.
    """

    def __init__(self, fonts: Optional[FontsManager] = None, unit: float = 1.0) -> None:
        self.fonts = fonts or FontsManager()
        self.unit = float(unit)

    def _measure_with(self, family: str, size_px: float) -> Callable[[str], float]:
        font = self.fonts.font(family, size_px)
        return lambda s: float(font.getlength(shape(s)))

    def _text_area(
        self, canvas_height: float, style: GlobalStyle, mockup: Optional[MockupInfo]
    ) -> tuple[float, float]:
        u = self.unit
        if mockup is not None:
            mockup_top = rotated_bounds(0.0, mockup.center_y, mockup.width, mockup.height, mockup.rotation)[1]
            mockup_bottom = mockup.center_y + mockup.height / 2.0
            if style.text_position == "top":
                return PADDING_TOP * u, max(mockup_top - GAP_FROM_MOCKUP * u - PADDING_TOP * u, MIN_TEXT_AREA * u)
            available = max(canvas_height - mockup_bottom - GAP_FROM_MOCKUP * u - BOTTOM_MARGIN * u, MIN_TEXT_AREA * u)
            return mockup_bottom + GAP_FROM_MOCKUP * u, available
        available = canvas_height * TEXT_AREA_RATIO
        if style.text_position == "top":
            return PADDING_TOP * u, available
        return canvas_height - available - BOTTOM_MARGIN * u, available

    def _fit_size(self, text: str, family: str, max_width: float, max_height: float) -> float:
        """Largest logical size in [8, 24] whose wrapped block fits ``max_height``."""
        u = self.unit
        low, high = FIT_MIN_SIZE, FIT_MAX_SIZE
        best = FIT_MIN_SIZE
        while low <= high:
            mid = (low + high) // 2
            lines = word_wrap(text, max_width, self._measure_with(family, mid * u))
            if len(lines) * mid * u * LINE_HEIGHT <= max_height:
                best = mid
                low = mid + 1
            else:
                high = mid - 1
        return float(best)

    def layout(
        self,
        text: str,
        canvas_height: float,
        width: float,
        style: GlobalStyle,
        mockup: Optional[MockupInfo] = None,
        text_offset: tuple[float, float] = (0.0, 0.0),
    ) -> Optional[TextLayout]:
        text = strip_highlight_markers(text).strip()
        if not text:
            return None
        u = self.unit
        max_width = width * MAX_WIDTH_RATIO
        area_top, available = self._text_area(canvas_height, style, mockup)

        base = style.font_size * PREVIEW_FONT_SCALE
        space_ratio = available / (canvas_height * TEXT_AREA_RATIO) if canvas_height > 0 else 1.0
        adaptive = max(ADAPTIVE_MIN, min(ADAPTIVE_MAX, space_ratio))
        target = max(float(FIT_MIN_SIZE), min(base * adaptive, base * ADAPTIVE_MAX))

        lines = word_wrap(text, max_width, self._measure_with(style.font_family, target * u))
        if len(lines) * target * u * LINE_HEIGHT <= available:
            size = target
        else:
            size = max(float(FIT_FLOOR_SIZE), self._fit_size(text, style.font_family, max_width, available))
            lines = word_wrap(text, max_width, self._measure_with(style.font_family, size * u))

        font_px = size * u
        line_height = font_px * LINE_HEIGHT
        total = len(lines) * line_height
        offset_y = float(text_offset[1]) * canvas_height / 100.0
        if style.text_position == "top":
            first = area_top + font_px + (available - total) / 4.0 + offset_y
        else:
            first = area_top + (available - total) / 2.0 + font_px + offset_y
        return TextLayout(tuple(lines), font_px, line_height, first, area_top, available)

    def draw(
        self,
        canvas: Image.Image,
        text: str,
        x: float,
        canvas_height: float,
        width: float,
        style: GlobalStyle,
        mockup: Optional[MockupInfo] = None,
        text_offset: tuple[float, float] = (0.0, 0.0),
    ) -> Optional[TextLayout]:
        lay = self.layout(text, canvas_height, width, style, mockup, text_offset)
        if lay is None:
            return None
        font = self.fonts.font(style.font_family, lay.font_size)
        ascent = _ascent(font)
        draw = ImageDraw.Draw(canvas)
        fill = parse_color(style.text_color, (29, 29, 31, 255))
        side = (width - width * MAX_WIDTH_RATIO) / 2.0
        offset_x = float(text_offset[0]) * width / 100.0

        for i, line in enumerate(lay.lines):
            shown = shape(line)
            line_w = float(font.getlength(shown))
            if style.text_align == "left":
                lx = x + side
            elif style.text_align == "right":
                lx = x + width - side - line_w
            else:
                lx = x + (width - line_w) / 2.0
            baseline = lay.first_baseline + i * lay.line_height
            draw.text((lx + offset_x, baseline - ascent), shown, font=font, fill=fill)
        return lay


def _ascent(font) -> float:
    try:
        return float(font.getmetrics()[0])
    except AttributeError:
        # bitmap fonts have no metrics; use the cap height instead
        return float(font.getbbox("A")[3])
