from __future__ import annotations

import math
import logging
from typing import Optional

from PIL import Image, ImageChops, ImageDraw, ImageFilter

from shotcraft.utils import composite_at, parse_color

logger = logging.getLogger(__name__)

FRAME_COLORS = {
    "black": "#1D1D1F",
    "white": "#F5F5F7",
    "natural": "#E3D5C8",
}
MOCKUP_STYLES = ("flat", "minimal", "outline", "realistic")

# Ratios relative to the phone width (or height where noted)
FRAME_THICKNESS = 0.035
CORNER_RADIUS = 0.12
INNER_RADIUS_FACTOR = 0.8
NOTCH_WIDTH = 0.30
NOTCH_HEIGHT = 0.022  # of height
NOTCH_Y_OFFSET = 0.008  # of height
BUTTON_WIDTH = 0.012
MINIMAL_BORDER = 0.02
MINIMAL_CORNER_RADIUS = 0.1
MINIMAL_NOTCH_Y_OFFSET = 0.01
OUTLINE_BORDER = 0.025
OUTLINE_CORNER_RADIUS = 0.11
OUTLINE_NOTCH_Y_OFFSET = 0.012
PIXEL_FRAME_THICKNESS = 0.025
PIXEL_CORNER_RADIUS = 0.08

# Phone width / height used by the preview
PHONE_ASPECT_IOS = 0.49
PHONE_ASPECT_ANDROID = 0.459


def frame_color(mockup_color: str) -> str:
    return FRAME_COLORS.get(mockup_color, FRAME_COLORS["black"])


def _button_color(frame: str) -> str:
    if frame == FRAME_COLORS["white"]:
        return "#D1D1D6"
    if frame == FRAME_COLORS["natural"]:
        return "#C4B5A8"
    return "#0D0D0D"


def cover_fit(
    img_w: float, img_h: float, x: float, y: float, w: float, h: float
) -> Optional[tuple[float, float, float, float]]:
    """Compute the draw rect that makes an image cover (x, y, w, h).

    The image keeps its aspect ratio: a relatively wider image fills the
    height and is centered horizontally (sides cropped), otherwise it fills
    the width and is centered vertically (top/bottom cropped).

    Returns:
        (draw_x, draw_y, draw_w, draw_h), or None when the image or the
        target rect is degenerate (zero or negative size).
    """
    if img_w <= 0 or img_h <= 0 or w <= 0 or h <= 0:
        return None
    img_aspect = float(img_w) / float(img_h)
    target_aspect = float(w) / float(h)
    if img_aspect > target_aspect:
        draw_h = float(h)
        draw_w = draw_h * img_aspect
        return x + (w - draw_w) / 2.0, float(y), draw_w, draw_h
    draw_w = float(w)
    draw_h = draw_w / img_aspect
    return float(x), y + (h - draw_h) / 2.0, draw_w, draw_h


class _Local:
    """Drawing helper for a layer whose origin (0, 0) is the mockup center."""

    def __init__(self, layer: Image.Image, cx: float, cy: float) -> None:
        self.layer = layer
        self.cx = cx
        self.cy = cy
        self.draw = ImageDraw.Draw(layer)

    def box(self, x: float, y: float, w: float, h: float) -> tuple[float, float, float, float]:
        return (self.cx + x, self.cy + y, self.cx + x + max(0.0, w), self.cy + y + max(0.0, h))

    def rounded(self, x, y, w, h, r, fill=None, outline=None, width: float = 0) -> None:
        r = max(0, int(round(min(r, w / 2.0, h / 2.0))))
        self.draw.rounded_rectangle(
            self.box(x, y, w, h), radius=r, fill=fill, outline=outline,
            width=max(1, int(round(width))) if outline else 0,
        )

    def circle(self, x: float, y: float, r: float, fill) -> None:
        self.draw.ellipse((self.cx + x - r, self.cy + y - r, self.cx + x + r, self.cy + y + r), fill=fill)

    def shadow(self, x, y, w, h, r, alpha: float, blur: float, offset_y: float) -> None:
        """Composite a blurred drop shadow of a rounded rect under what follows."""
        sh = Image.new("RGBA", self.layer.size, (0, 0, 0, 0))
        ImageDraw.Draw(sh).rounded_rectangle(
            self.box(x, y + offset_y, w, h),
            radius=max(0, int(round(min(r, w / 2.0, h / 2.0)))),
            fill=(0, 0, 0, int(round(255 * alpha))),
        )
        if blur > 0:
            sh = sh.filter(ImageFilter.GaussianBlur(blur / 2.0))
        self.layer.alpha_composite(sh)

    def screenshot(self, img: Optional[Image.Image], x, y, w, h, r) -> None:
        """Draw ``img`` cover-fit into the rect, clipped to rounded corners."""
        if img is None:
            return
        fit = cover_fit(img.width, img.height, x, y, w, h)
        if fit is None:
            return
        dx, dy, dw, dh = fit
        tx0, ty0, tx1, ty1 = (int(round(v)) for v in self.box(x, y, w, h))
        tw, th = tx1 - tx0, ty1 - ty0
        if tw <= 0 or th <= 0:
            return
        resized = img.convert("RGBA").resize(
            (max(1, int(round(dw))), max(1, int(round(dh)))), Image.Resampling.LANCZOS
        )
        sx = int(round(x - dx))
        sy = int(round(y - dy))
        piece = resized.crop((sx, sy, sx + tw, sy + th))
        mask = Image.new("L", (tw, th), 0)
        ImageDraw.Draw(mask).rounded_rectangle(
            (0, 0, tw - 1, th - 1), radius=max(0, int(round(min(r, tw / 2.0, th / 2.0)))), fill=255
        )
        piece.putalpha(ImageChops.multiply(piece.getchannel("A"), mask))
        self.layer.alpha_composite(piece, (tx0, ty0))


class MockupFramePainter:
    """Draw a device frame with the screenshot inside, centered and rotated.

    All frame geometry is computed in a local space whose origin is the
    mockup's center. The finished layer is rotated once and composited onto
    the canvas, so nothing leaks between redraws.

    Args:
        unit: Pixels per logical preview px (the canvas pixel ratio). Fixed
            pixel constants such as the realistic frame inflation and shadow
            blur are multiplied by it.
    """

    def __init__(self, unit: float = 1.0) -> None:
        self.unit = float(unit)

    def paint(
        self,
        canvas: Image.Image,
        center_x: float,
        center_y: float,
        width: float,
        height: float,
        rotation: float,
        mockup_style: str,
        color: str,
        img: Optional[Image.Image],
        android: bool = False,
    ) -> None:
        if width <= 0 or height <= 0:
            return
        layer = self.render_layer(mockup_style, width, height, color, img, android)
        if abs(float(rotation)) > 1e-6:
            # PIL rotates counter-clockwise; positive degrees turn clockwise on screen
            layer = layer.rotate(-float(rotation), resample=Image.Resampling.BICUBIC, expand=True)
        composite_at(canvas, layer, center_x - layer.width / 2.0, center_y - layer.height / 2.0)

    def render_layer(
        self,
        mockup_style: str,
        width: float,
        height: float,
        color: str,
        img: Optional[Image.Image],
        android: bool = False,
    ) -> Image.Image:
        """Return an RGBA layer with the frame drawn around its center."""
        u = self.unit
        margin = math.ceil(width * 0.03 + 40 * u)
        size = (int(math.ceil(width)) + 2 * margin, int(math.ceil(height)) + 2 * margin)
        layer = Image.new("RGBA", size, (0, 0, 0, 0))
        g = _Local(layer, size[0] / 2.0, size[1] / 2.0)
        frame = frame_color(color)

        if android:
            self._draw_pixel(g, width, height, frame, img)
        elif mockup_style == "flat":
            self._draw_flat(g, width, height, frame, img)
        elif mockup_style == "minimal":
            self._draw_minimal(g, width, height, frame, img)
        elif mockup_style == "outline":
            self._draw_outline(g, width, height, frame, img)
        else:
            if mockup_style not in MOCKUP_STYLES:
                logger.debug("Unknown mockup style %r, drawing realistic", mockup_style)
            self._draw_realistic(g, width, height, frame, img)
        return layer

    def _side_buttons(self, g: _Local, w: float, h: float, frame: str, outline: bool = False) -> None:
        bw = w * BUTTON_WIDTH
        br = bw / 2.0
        x = -w / 2.0
        y = -h / 2.0
        if outline:
            kw = {"outline": parse_color(frame), "width": bw * 0.6}
        else:
            kw = {"fill": parse_color(_button_color(frame))}

        action_h = h * 0.035
        g.rounded(x - bw, y + h * 0.15, bw, action_h, br, **kw)
        vol_h = h * 0.065
        vol_up_y = y + h * 0.22
        g.rounded(x - bw, vol_up_y, bw, vol_h, br, **kw)
        g.rounded(x - bw, vol_up_y + vol_h + h * 0.015, bw, vol_h, br, **kw)
        g.rounded(-x, y + h * 0.24, bw, h * 0.08, br, **kw)

    def _notch(self, g: _Local, w: float, h: float, y: float) -> None:
        nw = w * NOTCH_WIDTH
        nh = h * NOTCH_HEIGHT
        g.rounded(-nw / 2.0, y, nw, nh, nh / 2.0, fill=(0, 0, 0, 255))

    def _draw_flat(self, g: _Local, w: float, h: float, frame: str, img) -> None:
        u = self.unit
        thickness = w * FRAME_THICKNESS
        radius = w * CORNER_RADIUS
        inner = radius - thickness * INNER_RADIUS_FACTOR

        g.shadow(-w / 2, -h / 2, w, h, radius, alpha=0.3, blur=18 * u, offset_y=8 * u)
        g.rounded(-w / 2, -h / 2, w, h, radius, fill=parse_color(frame))
        self._side_buttons(g, w, h, frame)

        sw, sh = w - thickness * 2, h - thickness * 2
        g.rounded(-sw / 2, -sh / 2, sw, sh, inner, fill=(0, 0, 0, 255))
        g.screenshot(img, -sw / 2, -sh / 2, sw, sh, inner)
        self._notch(g, w, h, -h / 2 + thickness + h * NOTCH_Y_OFFSET)

    def _draw_minimal(self, g: _Local, w: float, h: float, frame: str, img) -> None:
        u = self.unit
        border = w * MINIMAL_BORDER
        radius = w * MINIMAL_CORNER_RADIUS
        inner = radius - border

        g.shadow(-w / 2, -h / 2, w, h, radius, alpha=0.25, blur=15 * u, offset_y=6 * u)
        g.rounded(-w / 2, -h / 2, w, h, radius, fill=parse_color(frame))
        self._side_buttons(g, w, h, frame)

        sw, sh = w - border * 2, h - border * 2
        g.rounded(-sw / 2, -sh / 2, sw, sh, inner, fill=(0, 0, 0, 255))
        g.screenshot(img, -sw / 2, -sh / 2, sw, sh, inner)
        self._notch(g, w, h, -h / 2 + border + h * MINIMAL_NOTCH_Y_OFFSET)

    def _draw_outline(self, g: _Local, w: float, h: float, frame: str, img) -> None:
        border = w * OUTLINE_BORDER
        radius = w * OUTLINE_CORNER_RADIUS
        inner = radius - border / 2

        sw, sh = w - border * 2, h - border * 2
        g.rounded(-sw / 2, -sh / 2, sw, sh, inner, fill=(0, 0, 0, 255))
        g.screenshot(img, -sw / 2, -sh / 2, sw, sh, inner)

        g.rounded(-w / 2 + border / 2, -h / 2 + border / 2, w - border, h - border, radius,
                  outline=parse_color(frame), width=border)
        self._side_buttons(g, w, h, frame, outline=True)
        self._notch(g, w, h, -h / 2 + border + h * OUTLINE_NOTCH_Y_OFFSET)

    def _draw_realistic(self, g: _Local, w: float, h: float, frame: str, img) -> None:
        u = self.unit
        radius = w * CORNER_RADIUS
        grow = 8 * u

        g.shadow(-w / 2 - grow, -h / 2 - grow, w + 2 * grow, h + 2 * grow, radius + 4 * u,
                 alpha=0.3, blur=20 * u, offset_y=10 * u)
        g.rounded(-w / 2 - grow, -h / 2 - grow, w + 2 * grow, h + 2 * grow, radius + 4 * u,
                  fill=parse_color(frame))
        g.screenshot(img, -w / 2, -h / 2, w, h, radius)

        nw = w * NOTCH_WIDTH
        g.rounded(-nw / 2, -h / 2 + grow, nw, h * 0.035, 10 * u, fill=(0, 0, 0, 255))

    def _draw_pixel(self, g: _Local, w: float, h: float, frame: str, img) -> None:
        u = self.unit
        thickness = w * PIXEL_FRAME_THICKNESS
        radius = w * PIXEL_CORNER_RADIUS
        inner = radius - thickness * 0.7

        g.shadow(-w / 2, -h / 2, w, h, radius, alpha=0.25, blur=15 * u, offset_y=6 * u)
        g.rounded(-w / 2, -h / 2, w, h, radius, fill=parse_color(frame))

        sw, sh = w - thickness * 2, h - thickness * 2
        g.rounded(-sw / 2, -sh / 2, sw, sh, inner, fill=(0, 0, 0, 255))
        g.screenshot(img, -sw / 2, -sh / 2, sw, sh, inner)

        # punch-hole camera
        g.circle(0, -h / 2 + thickness + h * 0.015, w * 0.025, fill=(0, 0, 0, 255))

        if frame == FRAME_COLORS["white"]:
            button = "#D2D2D7"
        elif frame == FRAME_COLORS["natural"]:
            button = "#C5B5A6"
        else:
            button = "#2D2D2F"
        pw = w * 0.015
        ph = h * 0.045
        power_y = -h / 2 + h * 0.18
        g.rounded(w / 2, power_y, pw, ph, 2 * u, fill=parse_color(button))
        g.rounded(w / 2, power_y + ph + h * 0.02, pw, h * 0.08, 2 * u, fill=parse_color(button))


def rotated_bounds(center_x: float, center_y: float, w: float, h: float, angle_deg: float) -> tuple[float, float, float, float]:
    """Axis-aligned (left, top, right, bottom) of a w×h rect rotated about its center."""
    a = math.radians(float(angle_deg))
    ca = abs(math.cos(a))
    sa = abs(math.sin(a))
    bw = w * ca + h * sa
    bh = w * sa + h * ca
    return center_x - bw / 2, center_y - bh / 2, center_x + bw / 2, center_y + bh / 2
