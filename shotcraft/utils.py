import re
import logging
from typing import Tuple

from PIL import ImageColor

logger = logging.getLogger(__name__)

RGBA = Tuple[int, int, int, int]

_RGBA_RE = re.compile(
    r"^rgba?\(\s*([\d.]+)\s*,\s*([\d.]+)\s*,\s*([\d.]+)\s*(?:,\s*([\d.]+)\s*)?\)$",
    re.IGNORECASE,
)


def parse_color(value: str, default: RGBA = (0, 0, 0, 255)) -> RGBA:
    """
    Convert a CSS-style color string into an RGBA tuple.

    Accepts hex forms (#rgb, #rrggbb, #rrggbbaa), named colors, and
    rgb()/rgba() with a fractional alpha in [0, 1] as browsers write it.
    Unparseable input logs a warning and returns ``default``.
    """
    s = str(value or "").strip()
    m = _RGBA_RE.match(s)
    if m:
        r, g, b = (max(0, min(255, int(round(float(c))))) for c in m.group(1, 2, 3))
        a = m.group(4)
        alpha = 255 if a is None else max(0, min(255, int(round(float(a) * 255))))
        return (r, g, b, alpha)
    try:
        rgb = ImageColor.getcolor(s, "RGBA")
    except (ValueError, AttributeError):
        logger.warning("Unparseable color %r, using %s", value, default)
        return default
    return tuple(rgb)  # type: ignore[return-value]


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def composite_at(canvas, layer, left: float, top: float) -> None:
    """Alpha-composite ``layer`` onto ``canvas`` at (left, top), clipping to the canvas.

    Unlike ``Image.alpha_composite`` the destination may lie partly (or
    entirely) outside the canvas.
    """
    x = int(round(left))
    y = int(round(top))
    sx0 = max(0, -x)
    sy0 = max(0, -y)
    sx1 = min(layer.width, canvas.width - x)
    sy1 = min(layer.height, canvas.height - y)
    if sx1 <= sx0 or sy1 <= sy0:
        return
    canvas.alpha_composite(layer, (x + sx0, y + sy0), (sx0, sy0, sx1, sy1))
