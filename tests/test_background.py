import numpy as np
import pytest
from PIL import Image

from shotcraft.core.objects import GlobalStyle, Gradient, Pattern
from shotcraft.canvas.background import BackgroundPainter, gradient_array


def test_solid_fill():
    canvas = Image.new("RGBA", (40, 30), (0, 0, 0, 0))
    BackgroundPainter().paint(canvas, 0, 0, 40, 30, GlobalStyle(background_color="#336699"))
    assert canvas.getpixel((5, 5)) == (0x33, 0x66, 0x99, 255)
    assert canvas.getpixel((39, 29)) == (0x33, 0x66, 0x99, 255)


def test_fill_only_touches_region():
    canvas = Image.new("RGBA", (40, 30), (0, 0, 0, 0))
    BackgroundPainter().paint(canvas, 20, 0, 20, 30, GlobalStyle(background_color="#ffffff"))
    assert canvas.getpixel((5, 5)) == (0, 0, 0, 0)
    assert canvas.getpixel((25, 5)) == (255, 255, 255, 255)


def test_horizontal_gradient_endpoints():
    arr = gradient_array(200, 10, Gradient(True, "#000000", "#ffffff", 0))
    assert arr.shape == (10, 200, 4)
    # axis length is the diagonal, so the edges sit just inside the stops
    assert arr[5, 0, 0] < 10
    assert arr[5, -1, 0] > 245
    assert np.all(np.diff(arr[5, :, 0].astype(int)) >= 0)


def test_vertical_gradient_runs_top_to_bottom():
    arr = gradient_array(10, 200, Gradient(True, "#ff0000", "#0000ff", 90))
    assert arr[0, 5, 0] > arr[-1, 5, 0]
    assert arr[0, 5, 2] < arr[-1, 5, 2]
    assert (arr[:, 0] == arr[:, -1]).all()


def test_diagonal_gradient_corners_take_stop_colors():
    arr = gradient_array(100, 100, Gradient(True, "#000000", "#ffffff", 45))
    assert arr[0, 0, 0] <= 2
    assert arr[-1, -1, 0] >= 253


def test_gradient_paint_is_deterministic():
    style = GlobalStyle(gradient=Gradient(True, "#667eea", "#764ba2", 135))
    a = Image.new("RGBA", (60, 90))
    b = Image.new("RGBA", (60, 90))
    BackgroundPainter().paint(a, 0, 0, 60, 90, style)
    BackgroundPainter().paint(b, 0, 0, 60, 90, style)
    assert a.tobytes() == b.tobytes()


@pytest.mark.parametrize("kind", ["dots", "grid", "diagonal-lines", "circles", "squares"])
def test_patterns_draw_something(kind):
    style = GlobalStyle(background_color="#000000", pattern=Pattern(kind, "#ffffff", 1.0, 4, 12))
    canvas = Image.new("RGBA", (80, 80))
    BackgroundPainter(pattern_scale=1.0).paint(canvas, 0, 0, 80, 80, style)
    assert canvas.convert("L").getextrema()[1] > 0


def test_pattern_opacity_scales_alpha():
    style = GlobalStyle(background_color="#000000", pattern=Pattern("grid", "#ffffff", 0.5, 2, 10))
    canvas = Image.new("RGBA", (40, 40))
    BackgroundPainter(pattern_scale=1.0).paint(canvas, 0, 0, 40, 40, style)
    brightest = canvas.convert("L").getextrema()[1]
    assert 100 < brightest < 160


def test_tiny_pattern_spacing_is_skipped():
    style = GlobalStyle(background_color="#000000", pattern=Pattern("dots", "#ffffff", 1.0, 4, 10))
    canvas = Image.new("RGBA", (40, 40))
    BackgroundPainter(pattern_scale=0.1).paint(canvas, 0, 0, 40, 40, style)
    assert canvas.convert("L").getextrema() == (0, 0)
