import base64
from dataclasses import replace
from io import BytesIO

import pytest
from PIL import Image

from shotcraft.core.objects import GlobalStyle, MockupSettings, TranslationData
from shotcraft.canvas.composer import CompositionEngine, to_data_url, to_png_bytes
from shotcraft.canvas.flow import link_screens
from shotcraft.canvas.planner import Pair, Single
from shotcraft.canvas.selection import InteractionController
from shotcraft.canvas.styles import write_style_override


@pytest.fixture
def engine(fonts, images):
    return CompositionEngine("6.9", preview_height=340, pixel_ratio=2, fonts=fonts, images=images)


def test_preview_width_for_6_9(engine):
    assert engine.preview_width == pytest.approx(156.9, abs=0.05)
    assert engine.canvas_size(1) == (314, 680)
    assert engine.canvas_size(2) == (628, 680)


def test_unknown_device_falls_back(fonts, images):
    e = CompositionEngine("nope", fonts=fonts, images=images)
    assert e.device.width == 1290


def test_single_render_size_and_background(engine, screens):
    style = GlobalStyle(background_color="#00ff00", show_mockup=False)
    img = engine.render_single(screens, 0, style)
    assert img.size == (314, 680)
    assert img.getpixel((2, 670)) == (0, 255, 0, 255)


def test_single_draws_mockup_with_image(engine, screens):
    style = GlobalStyle(background_color="#ffffff", mockup_alignment="center")
    img = engine.render_single(screens, 0, style)
    cx, cy = img.width // 2, img.height // 2
    assert img.getpixel((cx, cy - 30))[:3] == (0, 0, 255)
    assert img.getpixel((cx, cy + 30))[:3] == (255, 0, 0)


def test_decode_failure_omits_mockup(engine, screens):
    engine.images.get.return_value = None
    style = GlobalStyle(background_color="#ffffff", mockup_alignment="center")
    img = engine.render_single(screens, 0, style)
    assert img.getpixel((img.width // 2, img.height // 2)) == (255, 255, 255, 255)


def test_redraw_is_idempotent(engine, screens):
    style = GlobalStyle(mockup_rotation=10)
    screens[0] = replace(screens[0], mockup_settings=MockupSettings(offset_x=12, rotation=-15))
    a = engine.render_single(screens, 0, style)
    b = engine.render_single(screens, 0, style)
    assert a.tobytes() == b.tobytes()


def test_pair_render_width_and_divider(engine, screens):
    linked = link_screens(screens, 0)
    style = GlobalStyle(background_color="#000000", show_mockup=False)
    img = engine.render_pair(linked, 0, style)
    assert img.size == (628, 680)
    # dashed divider at the midline: first dash lit, gap dark
    assert img.getpixel((314, 4))[0] > 100
    assert img.getpixel((314, 19))[0] == 0
    assert img.getpixel((100, 4)) == (0, 0, 0, 255)


def test_pair_uses_primary_image(engine, screens):
    screens = [replace(s, image_ref=f"img{i}.png") for i, s in enumerate(screens)]
    linked = link_screens(screens, 0)
    engine.render_pair(linked, 0, GlobalStyle())
    engine.images.get.assert_called_once_with("img0.png")


def test_pair_mockup_centered_on_divider(engine):
    placement = engine.mockup_placement(GlobalStyle(), MockupSettings(offset_x=50), pair=True)
    assert placement.center_x == pytest.approx(engine.preview_width)


def test_pair_ignores_per_screen_scale(engine):
    style = GlobalStyle(mockup_scale=1.0)
    a = engine.mockup_placement(style, MockupSettings(scale=1.5), pair=True)
    b = engine.mockup_placement(style, MockupSettings(scale=1.5))
    assert b.height == pytest.approx(a.height * 1.5)


def test_mockup_scale_is_clamped(engine):
    big = engine.mockup_placement(GlobalStyle(mockup_scale=9), MockupSettings())
    two = engine.mockup_placement(GlobalStyle(mockup_scale=2.0), MockupSettings())
    assert big.height == pytest.approx(two.height)


def test_mockup_alignment_and_visibility(engine):
    H = engine.preview_height
    full = engine.mockup_placement(GlobalStyle(mockup_alignment="bottom"), MockupSettings())
    half = engine.mockup_placement(GlobalStyle(mockup_alignment="bottom", mockup_visibility="1/2"), MockupSettings())
    assert half.center_y - full.center_y == pytest.approx(full.height / 2)
    center = engine.mockup_placement(GlobalStyle(mockup_alignment="center"), MockupSettings(offset_y=10))
    assert center.center_y == pytest.approx(H / 2 + H * 0.1)
    assert full.width == pytest.approx(full.height * 0.49)


def test_android_uses_pixel_aspect(fonts, images):
    e = CompositionEngine("android-phone", fonts=fonts, images=images)
    p = e.mockup_placement(GlobalStyle(), MockupSettings())
    assert p.width == pytest.approx(p.height * 0.459)


def test_drag_settings_override_stored(engine, screens):
    style = GlobalStyle(background_color="#ffffff", mockup_alignment="center")
    moved = engine.render_single(screens, 0, style, settings=MockupSettings(offset_x=40))
    stored = engine.render_single(screens, 0, style)
    assert moved.tobytes() != stored.tobytes()


def test_translation_text_changes_pixels(engine, screens):
    style = GlobalStyle(show_mockup=False)
    tr = TranslationData(headlines={"de": ["Ganz anderer Text hier"]})
    src = engine.render_single(screens, 0, style, tr, "all")
    de = engine.render_single(screens, 0, style, tr, "de")
    assert src.tobytes() != de.tobytes()


def test_render_item_dispatch(engine, screens):
    linked = link_screens(screens, 0)
    style = GlobalStyle(show_mockup=False)
    assert engine.render_item(Pair(0, 1), linked, style).size == (628, 680)
    assert engine.render_item(Single(2), linked, style).size == (314, 680)
    with pytest.raises(TypeError):
        engine.render_item("bogus", linked, style)


def test_png_and_data_url(engine, screens):
    img = engine.render_single(screens, 0, GlobalStyle(show_mockup=False))
    data = to_png_bytes(img)
    assert data[:8] == b"\x89PNG\r\n\x1a\n"
    url = to_data_url(img)
    assert url.startswith("data:image/png;base64,")
    decoded = Image.open(BytesIO(base64.b64decode(url.split(",", 1)[1])))
    assert decoded.size == img.size


def test_committed_drag_matches_drawn_preview(engine, screens, pointer):
    style, items = write_style_override(GlobalStyle(), screens, 1, {"mockupRotation": 30, "mockupOffset": {"x": 20}})
    tr = TranslationData(per_language_styles={"de": {1: {"mockup_rotation": 15.0}}})

    drawn = engine.render_single(items, 1, style, tr, "de")
    explicit = engine.render_single(items, 1, style, tr, "de", settings=MockupSettings(offset_x=20, rotation=15))
    assert drawn.tobytes() == explicit.tobytes()

    committed = []
    c = InteractionController(
        Single(1),
        on_change=committed.append,
        subscribe=pointer.subscribe,
        container_size=lambda: (160, 340),
        screenshots=items,
        style=style,
        translation=tr,
        language="de",
    )
    c.pointer_down(0, 0)
    c.pointer_move(16, 0)
    preview = engine.render_single(items, 1, style, tr, "de", settings=c.current_settings())
    c.pointer_up()

    s = committed[-1][1].settings
    assert s.offset_x == pytest.approx(20 + 10)
    assert s.rotation == 15
    assert engine.render_single(committed[-1], 1, style, tr, "de").tobytes() == preview.tobytes()

    c.rotate_left()
    assert committed[-1][1].settings.rotation == 10
