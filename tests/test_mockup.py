import pytest
from PIL import Image

from shotcraft.canvas.mockup import FRAME_COLORS, MockupFramePainter, cover_fit, frame_color, rotated_bounds


def test_cover_fit_wide_image_fills_height():
    x, y, w, h = cover_fit(400, 100, 0, 0, 100, 100)
    assert h == 100 and w == 400
    assert x == -150 and y == 0


def test_cover_fit_tall_image_fills_width():
    x, y, w, h = cover_fit(100, 400, 10, 20, 100, 100)
    assert w == 100 and h == 400
    assert x == 10 and y == 20 - 150


@pytest.mark.parametrize("iw,ih", [(120, 260), (300, 200), (50, 50), (1290, 2796)])
def test_cover_fit_keeps_aspect_and_covers(iw, ih):
    x, y, w, h = cover_fit(iw, ih, 5, 7, 80, 170)
    assert w / h == pytest.approx(iw / ih)
    assert x <= 5 and y <= 7
    assert x + w >= 85 - 1e-9 and y + h >= 177 - 1e-9


@pytest.mark.parametrize("args", [(0, 100, 0, 0, 10, 10), (100, 0, 0, 0, 10, 10), (10, 10, 0, 0, 0, 10)])
def test_cover_fit_degenerate_is_none(args):
    assert cover_fit(*args) is None


def test_frame_color_fallback():
    assert frame_color("white") == FRAME_COLORS["white"]
    assert frame_color("purple") == FRAME_COLORS["black"]


def test_rotated_bounds():
    assert rotated_bounds(0, 0, 10, 20, 0) == pytest.approx((-5, -10, 5, 10))
    assert rotated_bounds(0, 0, 10, 20, 90) == pytest.approx((-10, -5, 10, 5))


def _canvas():
    return Image.new("RGBA", (300, 400), (255, 255, 255, 255))


@pytest.mark.parametrize("mockup_style", ["flat", "minimal", "outline", "realistic", "unknown"])
def test_paint_draws_screenshot_at_center(mockup_style, phone_image):
    canvas = _canvas()
    MockupFramePainter().paint(canvas, 150, 200, 120, 245, 0, mockup_style, "black", phone_image)
    # top half of the test image is blue, bottom half red
    assert canvas.getpixel((150, 150))[:3] == (0, 0, 255)
    assert canvas.getpixel((150, 260))[:3] == (255, 0, 0)
    assert canvas.getpixel((5, 5)) == (255, 255, 255, 255)


def test_paint_pixel_frame(phone_image):
    canvas = _canvas()
    MockupFramePainter().paint(canvas, 150, 200, 110, 240, 0, "flat", "white", phone_image, android=True)
    assert canvas.getpixel((150, 260))[:3] == (255, 0, 0)


def test_rotation_is_applied_once_and_repeatable(phone_image):
    painter = MockupFramePainter(unit=1.0)
    a, b = _canvas(), _canvas()
    painter.paint(a, 150, 200, 120, 245, 15, "flat", "natural", phone_image)
    painter.paint(b, 150, 200, 120, 245, 15, "flat", "natural", phone_image)
    assert a.tobytes() == b.tobytes()


def test_mockup_partly_off_canvas(phone_image):
    canvas = _canvas()
    MockupFramePainter().paint(canvas, 290, 380, 120, 245, 0, "realistic", "black", phone_image)
    assert canvas.size == (300, 400)
    assert canvas.getpixel((295, 370))[:3] != (255, 255, 255)


def test_missing_image_still_draws_frame():
    canvas = _canvas()
    MockupFramePainter().paint(canvas, 150, 200, 120, 245, 0, "flat", "black", None)
    assert canvas.getpixel((150, 200))[:3] == (0, 0, 0)
