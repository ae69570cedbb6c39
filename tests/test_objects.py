import pytest

from shotcraft.core.objects import (
    DEVICE_SIZES,
    GlobalStyle,
    MockupSettings,
    Offset,
    Pattern,
    Project,
    Screenshot,
    TranslationData,
    device_dimensions,
)


def test_device_table():
    assert (DEVICE_SIZES["6.9"].width, DEVICE_SIZES["6.9"].height) == (1290, 2796)
    assert DEVICE_SIZES["android-phone"].platform == "android"
    assert device_dimensions("android-tablet-7").aspect_ratio == pytest.approx(1200 / 1920)


def test_unknown_device_falls_back_to_default():
    assert device_dimensions("watch") is DEVICE_SIZES["6.9"]


def test_style_from_camel_case():
    s = GlobalStyle.from_dict({
        "backgroundColor": "#000",
        "fontSize": "64",
        "showMockup": 0,
        "mockupOffset": {"x": 5, "y": -2},
        "pattern": {"type": "dots", "opacity": 0.2, "size": 4, "spacing": 20},
    })
    assert s.background_color == "#000"
    assert s.font_size == 64.0
    assert s.show_mockup is False
    assert s.mockup_offset == Offset(5, -2)
    assert s.pattern.type == "dots"
    assert s.to_dict()["mockupOffset"] == {"x": 5.0, "y": -2.0}


def test_unknown_pattern_type_becomes_none():
    assert Pattern.from_dict({"type": "stars"}).type == "none"


def test_mockup_settings_keys():
    ms = MockupSettings.from_dict({"offsetX": 12, "rotation": -5, "linkedToNext": True, "scale": None})
    assert ms == MockupSettings(offset_x=12, rotation=-5, linked_to_next=True)
    assert ms.to_dict() == {"offsetX": 12.0, "offsetY": 0.0, "rotation": -5.0, "linkedToNext": True}
    assert MockupSettings.from_dict(None) is None


def test_screenshot_defaults_and_serialization():
    s = Screenshot.from_dict({
        "id": "a",
        "preview": "data:image/png;base64,xx",
        "styleOverride": {"textColor": "#fff", "bogus": 1},
        "linkedMockupIndex": 2,
    })
    assert s.settings == MockupSettings()
    assert s.style_override == {"text_color": "#fff"}
    out = s.to_dict()
    assert out["preview"] == "data:image/png;base64,xx"
    assert out["styleOverride"] == {"textColor": "#fff"}
    assert out["linkedMockupIndex"] == 2
    assert "mockupSettings" not in out


def test_translation_lookup():
    tr = TranslationData.from_dict({
        "headlines": {"de": ["Hallo", ""]},
        "perLanguageStyles": {"de": {"1": {"fontSize": 40}}, "fr": {"x": {"fontSize": 1}}},
    })
    assert tr.headline("de", 0) == "Hallo"
    assert tr.headline("de", 1) is None
    assert tr.headline("fr", 0) is None
    assert tr.language_style("de", 1) == {"font_size": 40.0}
    assert "fr" not in tr.per_language_styles


def test_project_round_trip():
    data = {
        "name": "Demo",
        "styleConfig": {"textPosition": "bottom", "mockupScale": 1.2},
        "screenshots": [
            {"id": "a", "preview": "a.png", "text": "One", "mockupSettings": {"linkedToNext": True, "offsetX": 50}},
            {"id": "b", "preview": "b.png", "text": "Two", "linkedMockupIndex": 0},
            "garbage",
        ],
        "translationData": {"headlines": {"de": ["Eins", "Zwei"]}},
        "deviceSize": "6.5",
        "targetLanguages": ["de"],
    }
    project = Project.from_dict(data)
    assert len(project.screenshots) == 2
    assert project.style.text_position == "bottom"
    assert project.device_size == "6.5"
    again = Project.from_dict(project.to_dict())
    assert again == project


def test_project_from_nothing():
    assert Project.from_dict(None) == Project()
