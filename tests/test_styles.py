from dataclasses import replace

from shotcraft.core.objects import GlobalStyle, Gradient, Offset, TranslationData
from shotcraft.canvas.styles import (
    CANONICAL,
    CanonicalStyle,
    THEME_PRESETS,
    apply_theme_preset,
    effective_style_for,
    reset_language_style,
    reset_style_override,
    resolve_style,
    set_language_style,
    write_style_override,
)


def test_precedence_language_over_override_over_global():
    base = GlobalStyle(text_color="#000000", font_size=72)
    eff = resolve_style(base, {"textColor": "#111111", "fontSize": 50}, {"fontSize": 40}, "de")
    assert eff.text_color == "#111111"
    assert eff.font_size == 40
    assert eff.background_color == base.background_color


def test_language_override_ignored_for_source_language():
    base = GlobalStyle()
    eff = resolve_style(base, {"fontSize": 50}, {"fontSize": 40}, "all")
    assert eff.font_size == 50


def test_no_layers_returns_base():
    base = GlobalStyle()
    assert resolve_style(base) is base


def test_unknown_and_malformed_fields_are_skipped():
    base = GlobalStyle()
    eff = resolve_style(base, {"bogus": 1, "fontSize": "huge", "mockupScale": 1.2})
    assert eff.font_size == base.font_size
    assert eff.mockup_scale == 1.2


def test_nested_override_from_dict():
    eff = resolve_style(GlobalStyle(), {"gradient": {"enabled": True, "color1": "#000", "color2": "#fff", "angle": 90}})
    assert eff.gradient == Gradient(True, "#000", "#fff", 90)


def test_missing_language_entry_falls_through(screens):
    screens[1] = replace(screens[1], style_override={"text_color": "#ff0000"})
    tr = TranslationData(per_language_styles={"de": {2: {"font_size": 30.0}}})
    base = GlobalStyle()
    with_lang = effective_style_for(base, screens, tr, 1, "de")
    without = effective_style_for(base, screens, tr, 1, "all")
    assert with_lang == without
    assert with_lang.text_color == "#ff0000"


def test_effective_style_uses_language_entry(screens, translation):
    eff = effective_style_for(GlobalStyle(), screens, translation, 2, "de")
    assert eff.font_size == 60


def test_write_to_index_zero_updates_global(screens):
    base = GlobalStyle()
    new_base, new_screens = write_style_override(base, screens, 0, {"textColor": "#ffffff"})
    assert new_base.text_color == "#ffffff"
    assert new_screens[0].style_override is None


def test_write_to_other_index_stores_override(screens):
    base = GlobalStyle()
    new_base, new_screens = write_style_override(base, screens, 1, {"textColor": "#ffffff"})
    assert new_base is base
    assert new_screens[1].style_override == {"text_color": "#ffffff"}
    new_base, again = write_style_override(base, new_screens, 1, {"mockupOffset": {"x": 3, "y": 4}})
    assert again[1].style_override == {"text_color": "#ffffff", "mockup_offset": Offset(3, 4)}


def test_write_out_of_range_is_noop(screens):
    base = GlobalStyle()
    new_base, new_screens = write_style_override(base, screens, 9, {"textColor": "#fff"})
    assert new_base is base
    assert new_screens == screens


def test_reset_style_override(screens):
    _, stored = write_style_override(GlobalStyle(), screens, 2, {"textColor": "#fff"})
    assert reset_style_override(stored, 2)[2].style_override is None


def test_language_style_set_and_reset():
    tr = set_language_style(TranslationData(), "fr", 1, {"fontSize": 44})
    assert tr.language_style("fr", 1) == {"font_size": 44.0}
    tr2 = reset_language_style(tr, "fr", 1)
    assert tr2.language_style("fr", 1) is None
    assert "fr" not in tr2.per_language_styles
    assert set_language_style(tr, "all", 1, {"fontSize": 10}) is tr


def test_theme_presets_apply():
    for preset_id, values in THEME_PRESETS.items():
        s = apply_theme_preset(GlobalStyle(), preset_id)
        assert s.font_family == values["font_family"]
        assert s.pattern == values["pattern"]
    base = GlobalStyle()
    assert apply_theme_preset(base, "nope") is base


def test_canonical_style_rule():
    assert CANONICAL == CanonicalStyle(0)
    assert CANONICAL.owns(0)
    assert not CANONICAL.owns(1)
    assert CANONICAL.apply(GlobalStyle(), {"font_size": 50.0}).font_size == 50.0
