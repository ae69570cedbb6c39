from __future__ import annotations

import math
import logging

import numpy as np
from PIL import Image, ImageDraw

from shotcraft.core.objects import GlobalStyle, Gradient, Pattern
from shotcraft.utils import parse_color

logger = logging.getLogger(__name__)

# Preview canvases draw patterns at a fraction of their export size
PREVIEW_PATTERN_SCALE = 0.15
MIN_PATTERN_SPACING_PX = 2.0


def _region(x: float, y: float, w: float, h: float) -> tuple[int, int, int, int]:
    x0 = int(round(x))
    y0 = int(round(y))
    x1 = int(round(x + w))
    y1 = int(round(y + h))
    return x0, y0, max(0, x1 - x0), max(0, y1 - y0)


def gradient_array(width: int, height: int, gradient: Gradient) -> np.ndarray:
    """Rasterize a two-stop linear gradient into an (h, w, 4) uint8 array.

    The gradient axis passes through the center of the region at
    ``gradient.angle`` degrees (0 = left to right, 90 = top to bottom) and
    spans the region's diagonal, so every pixel's color is the projection
    of its offset from the center onto that axis.
    """
    c1 = np.array(parse_color(gradient.color1), dtype=np.float32)
    c2 = np.array(parse_color(gradient.color2), dtype=np.float32)
    rad = math.radians(float(gradient.angle))
    dx, dy = math.cos(rad), math.sin(rad)
    length = max(1e-6, math.hypot(width, height))

    ys, xs = np.mgrid[0:height, 0:width].astype(np.float32)
    t = ((xs + 0.5 - width / 2.0) * dx + (ys + 0.5 - height / 2.0) * dy) / length + 0.5
    t = np.clip(t, 0.0, 1.0)[..., None]
    rgba = c1 + (c2 - c1) * t
    return np.clip(np.rint(rgba), 0, 255).astype(np.uint8)


class BackgroundPainter:
    """Fill a rectangular region with a solid color or gradient plus an optional pattern."""

    def __init__(self, pattern_scale: float = PREVIEW_PATTERN_SCALE) -> None:
        self.pattern_scale = pattern_scale

    def paint(self, canvas: Image.Image, x: float, y: float, w: float, h: float, style: GlobalStyle) -> None:
        x0, y0, iw, ih = _region(x, y, w, h)
        if iw <= 0 or ih <= 0:
            return
        if style.gradient.enabled:
            fill = Image.fromarray(gradient_array(iw, ih, style.gradient), "RGBA")
        else:
            fill = Image.new("RGBA", (iw, ih), parse_color(style.background_color, (245, 245, 247, 255)))
        canvas.alpha_composite(fill, (x0, y0))

        if style.pattern.type != "none":
            self.paint_pattern(canvas, x0, y0, iw, ih, style.pattern)

    def paint_pattern(self, canvas: Image.Image, x0: int, y0: int, w: int, h: int, pattern: Pattern) -> None:
        scale = self.pattern_scale
        size = pattern.size if scale == 1.0 else max(1.0, pattern.size * scale)
        spacing = pattern.spacing * scale
        if spacing < MIN_PATTERN_SPACING_PX or pattern.opacity <= 0:
            logger.debug("Skipping pattern %s: spacing=%.2f opacity=%.2f", pattern.type, spacing, pattern.opacity)
            return

        layer = Image.new("RGBA", (w, h), (0, 0, 0, 0))
        draw = ImageDraw.Draw(layer)
        color = parse_color(pattern.color, (255, 255, 255, 255))
        line_w = max(1, int(round(size)))

        if pattern.type == "dots":
            r = size / 2.0
            px = spacing / 2.0
            while px < w:
                py = spacing / 2.0
                while py < h:
                    draw.ellipse((px - r, py - r, px + r, py + r), fill=color)
                    py += spacing
                px += spacing
        elif pattern.type == "grid":
            px = 0.0
            while px <= w:
                draw.line((px, 0, px, h), fill=color, width=line_w)
                px += spacing
            py = 0.0
            while py <= h:
                draw.line((0, py, w, py), fill=color, width=line_w)
                py += spacing
        elif pattern.type == "diagonal-lines":
            i = float(-h)
            while i < w + h:
                draw.line((i, 0, i + h, h), fill=color, width=line_w)
                i += spacing
        elif pattern.type == "circles":
            r = spacing / 2.0
            px = spacing
            while px < w:
                py = spacing
                while py < h:
                    draw.ellipse((px - r, py - r, px + r, py + r), outline=color, width=line_w)
                    py += spacing * 2
                px += spacing * 2
        elif pattern.type == "squares":
            half = spacing * 0.6 / 2.0
            px = spacing / 2.0
            while px < w:
                py = spacing / 2.0
                while py < h:
                    draw.rectangle((px - half, py - half, px + half, py + half), outline=color, width=line_w)
                    py += spacing
                px += spacing
        else:
            logger.warning("Unknown pattern type %r", pattern.type)
            return

        opacity = min(1.0, float(pattern.opacity))
        alpha = layer.getchannel("A").point(lambda v: int(round(v * opacity)))
        layer.putalpha(alpha)
        canvas.alpha_composite(layer, (x0, y0))
