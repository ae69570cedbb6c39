from __future__ import annotations

import re
import logging
from typing import Optional, Any
from dataclasses import dataclass, field, fields, asdict


logger = logging.getLogger(__name__)

SOURCE_LANGUAGE = "all"  # sentinel for "edit the source texts"


def _snake(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(p[:1].upper() + p[1:] for p in rest)


@dataclass(frozen=True)
class DeviceDimensions:
    width: int
    height: int
    name: str
    platform: str  # "ios" or "android"

    @property
    def aspect_ratio(self) -> float:
        return float(self.width) / float(self.height)


DEVICE_SIZES: dict[str, DeviceDimensions] = {
    "6.9": DeviceDimensions(1290, 2796, 'iPhone 6.9"', "ios"),
    "6.5": DeviceDimensions(1284, 2778, 'iPhone 6.5"', "ios"),
    "android-phone": DeviceDimensions(1080, 1920, "Android Phone", "android"),
    "android-tablet-7": DeviceDimensions(1200, 1920, 'Android Tablet 7"', "android"),
}
DEFAULT_DEVICE_SIZE = "6.9"


def device_dimensions(key: str) -> DeviceDimensions:
    """Return the pixel dimensions for a device size key.

    Unknown keys fall back to the default device so a stale project file
    still renders.
    """
    dims = DEVICE_SIZES.get(str(key))
    if dims is None:
        logger.warning("Unknown device size %r, using %s", key, DEFAULT_DEVICE_SIZE)
        dims = DEVICE_SIZES[DEFAULT_DEVICE_SIZE]
    return dims


@dataclass(frozen=True)
class Offset:
    x: float = 0.0
    y: float = 0.0

    @classmethod
    def from_dict(cls, data: Any) -> "Offset":
        if isinstance(data, Offset):
            return data
        if not isinstance(data, dict):
            return cls()
        return cls(x=float(data.get("x", 0.0) or 0.0), y=float(data.get("y", 0.0) or 0.0))

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y}


@dataclass(frozen=True)
class Gradient:
    enabled: bool = False
    color1: str = "#667eea"
    color2: str = "#764ba2"
    angle: float = 135.0

    @classmethod
    def from_dict(cls, data: Any) -> "Gradient":
        if isinstance(data, Gradient):
            return data
        if not isinstance(data, dict):
            return cls()
        return cls(
            enabled=bool(data.get("enabled", False)),
            color1=str(data.get("color1", cls.color1)),
            color2=str(data.get("color2", cls.color2)),
            angle=float(data.get("angle", cls.angle) or 0.0),
        )

    def to_dict(self) -> dict:
        return asdict(self)


PATTERN_TYPES = ("none", "dots", "grid", "diagonal-lines", "circles", "squares")


@dataclass(frozen=True)
class Pattern:
    type: str = "none"
    color: str = "#ffffff"
    opacity: float = 0.0
    size: float = 0.0
    spacing: float = 0.0

    @classmethod
    def from_dict(cls, data: Any) -> "Pattern":
        if isinstance(data, Pattern):
            return data
        if not isinstance(data, dict):
            return cls()
        kind = str(data.get("type", "none"))
        if kind not in PATTERN_TYPES:
            logger.warning("Unknown pattern type %r, ignoring pattern", kind)
            kind = "none"
        return cls(
            type=kind,
            color=str(data.get("color", "#ffffff")),
            opacity=float(data.get("opacity", 0.0) or 0.0),
            size=float(data.get("size", 0.0) or 0.0),
            spacing=float(data.get("spacing", 0.0) or 0.0),
        )

    def to_dict(self) -> dict:
        return asdict(self)


# Nested field types, used when partial overrides arrive as plain dicts
_NESTED = {
    "gradient": Gradient,
    "pattern": Pattern,
    "mockup_offset": Offset,
    "text_offset": Offset,
}


@dataclass(frozen=True)
class GlobalStyle:
    """Project-wide look of every screenshot.

    The same dataclass doubles as the *effective* style once the override
    layers have been folded in by the style resolver.
    """

    background_color: str = "#f5f5f7"
    gradient: Gradient = field(default_factory=Gradient)
    text_color: str = "#1d1d1f"
    font_family: str = "Inter"
    font_size: float = 72.0  # full resolution px
    text_position: str = "top"  # "top" | "bottom"
    text_align: str = "center"  # "left" | "center" | "right"
    padding_top: float = 80.0
    padding_bottom: float = 80.0
    show_mockup: bool = True
    mockup_color: str = "black"  # "black" | "white" | "natural"
    mockup_style: str = "realistic"  # "flat" | "minimal" | "outline" | "realistic"
    mockup_visibility: str = "full"  # "full" | "2/3" | "1/2"
    mockup_alignment: str = "bottom"  # "top" | "center" | "bottom"
    mockup_offset: Offset = field(default_factory=Offset)
    text_offset: Offset = field(default_factory=Offset)
    mockup_scale: float = 1.0
    mockup_rotation: float = 0.0
    highlight_color: str = "#FFE135"
    highlight_padding: float = 12.0
    highlight_border_radius: float = 8.0
    pattern: Pattern = field(default_factory=Pattern)

    @classmethod
    def field_names(cls) -> frozenset[str]:
        return frozenset(f.name for f in fields(cls))

    @classmethod
    def coerce_value(cls, name: str, value: Any) -> Any:
        """Convert a raw (JSON) value into the type stored for field ``name``."""
        nested = _NESTED.get(name)
        if nested is not None:
            return nested.from_dict(value)
        if name in ("font_size", "padding_top", "padding_bottom", "mockup_scale",
                    "mockup_rotation", "highlight_padding", "highlight_border_radius"):
            return float(value)
        if name == "show_mockup":
            return bool(value)
        return str(value)

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "GlobalStyle":
        if not isinstance(data, dict):
            return cls()
        return cls(**normalize_style_fields(data))

    def to_dict(self) -> dict:
        return style_fields_to_dict(asdict(self))


def normalize_style_fields(data: Optional[dict]) -> dict:
    """Convert a camelCase or snake_case partial style into typed snake_case fields.

    Unknown keys and values that fail to convert are dropped with a debug
    message; a partial override simply falls through for those fields.
    """
    out: dict = {}
    if not data:
        return out
    names = GlobalStyle.field_names()
    for raw_key, value in data.items():
        key = _snake(str(raw_key))
        if key not in names:
            logger.debug("Skipping unknown style field %r", raw_key)
            continue
        if value is None:
            continue
        try:
            out[key] = GlobalStyle.coerce_value(key, value)
        except (TypeError, ValueError):
            logger.debug("Skipping malformed style field %r=%r", raw_key, value)
    return out


def style_fields_to_dict(data: dict) -> dict:
    out = {}
    for key, value in data.items():
        if hasattr(value, "to_dict"):
            value = value.to_dict()
        out[_camel(key)] = value
    return out


@dataclass(frozen=True)
class MockupSettings:
    offset_x: float = 0.0
    offset_y: float = 0.0
    rotation: float = 0.0
    scale: Optional[float] = None  # None falls back to style.mockup_scale
    linked_to_next: bool = False
    text_offset_x: Optional[float] = None
    text_offset_y: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Any) -> Optional["MockupSettings"]:
        if isinstance(data, MockupSettings):
            return data
        if not isinstance(data, dict):
            return None

        def _opt(key: str) -> Optional[float]:
            v = data.get(key)
            return None if v is None else float(v)

        return cls(
            offset_x=float(data.get("offsetX", 0.0) or 0.0),
            offset_y=float(data.get("offsetY", 0.0) or 0.0),
            rotation=float(data.get("rotation", 0.0) or 0.0),
            scale=_opt("scale"),
            linked_to_next=bool(data.get("linkedToNext", False)),
            text_offset_x=_opt("textOffsetX"),
            text_offset_y=_opt("textOffsetY"),
        )

    def to_dict(self) -> dict:
        out = {_camel(k): v for k, v in asdict(self).items() if v is not None}
        return out


DEFAULT_MOCKUP_SETTINGS = MockupSettings()


@dataclass(frozen=True)
class Screenshot:
    """One slide of the project.

    ``linked_mockup_index`` means "draw the mockup with the image of that
    other screenshot"; it is set on the secondary screen of a linked pair.
    """

    id: str
    image_ref: str = ""  # data URI, http(s) URL or file path; "" for text-only slides
    text: str = ""
    decorations: tuple = ()
    style_override: Optional[dict] = None
    mockup_settings: Optional[MockupSettings] = None
    linked_mockup_index: Optional[int] = None

    @property
    def settings(self) -> MockupSettings:
        return self.mockup_settings or DEFAULT_MOCKUP_SETTINGS

    @classmethod
    def from_dict(cls, data: dict) -> "Screenshot":
        override = normalize_style_fields(data.get("styleOverride")) or None
        linked = data.get("linkedMockupIndex")
        return cls(
            id=str(data.get("id", "")),
            image_ref=str(data.get("preview") or data.get("imageRef") or ""),
            text=str(data.get("text") or ""),
            decorations=tuple(data.get("decorations") or ()),
            style_override=override,
            mockup_settings=MockupSettings.from_dict(data.get("mockupSettings")),
            linked_mockup_index=None if linked is None else int(linked),
        )

    def to_dict(self) -> dict:
        out: dict = {"id": self.id, "preview": self.image_ref, "text": self.text}
        if self.decorations:
            out["decorations"] = list(self.decorations)
        if self.style_override:
            out["styleOverride"] = style_fields_to_dict(self.style_override)
        if self.mockup_settings is not None:
            out["mockupSettings"] = self.mockup_settings.to_dict()
        if self.linked_mockup_index is not None:
            out["linkedMockupIndex"] = self.linked_mockup_index
        return out


@dataclass(frozen=True)
class TranslationData:
    headlines: dict = field(default_factory=dict)  # lang -> list[str]
    laurel_texts: dict = field(default_factory=dict)  # carried for the export layer
    per_language_styles: dict = field(default_factory=dict)  # lang -> {index: override}

    def headline(self, language: str, index: int) -> Optional[str]:
        lines = self.headlines.get(language) or []
        if 0 <= index < len(lines) and lines[index]:
            return lines[index]
        return None

    def language_style(self, language: str, index: int) -> Optional[dict]:
        return (self.per_language_styles.get(language) or {}).get(index)

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "TranslationData":
        if not isinstance(data, dict):
            return cls()
        per_lang: dict = {}
        for lang, by_index in (data.get("perLanguageStyles") or {}).items():
            entries = {}
            for idx, override in (by_index or {}).items():
                try:
                    entries[int(idx)] = normalize_style_fields(override)
                except (TypeError, ValueError):
                    logger.debug("Skipping per-language style with bad index %r", idx)
            if entries:
                per_lang[str(lang)] = entries
        return cls(
            headlines={str(k): list(v or []) for k, v in (data.get("headlines") or {}).items()},
            laurel_texts=dict(data.get("laurelTexts") or {}),
            per_language_styles=per_lang,
        )

    def to_dict(self) -> dict:
        return {
            "headlines": {k: list(v) for k, v in self.headlines.items()},
            "laurelTexts": dict(self.laurel_texts),
            "perLanguageStyles": {
                lang: {str(i): style_fields_to_dict(o) for i, o in by_index.items()}
                for lang, by_index in self.per_language_styles.items()
            },
        }


@dataclass(frozen=True)
class Project:
    """Everything the preview needs from a stored project record."""

    name: str = "Untitled"
    style: GlobalStyle = field(default_factory=GlobalStyle)
    screenshots: tuple = ()
    translation: TranslationData = field(default_factory=TranslationData)
    device_size: str = DEFAULT_DEVICE_SIZE
    source_language: str = "en"
    target_languages: tuple = ()

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "Project":
        if not isinstance(data, dict):
            return cls()
        shots = []
        for raw in data.get("screenshots") or []:
            if isinstance(raw, dict):
                shots.append(Screenshot.from_dict(raw))
            else:
                logger.debug("Skipping malformed screenshot entry %r", raw)
        return cls(
            name=str(data.get("name") or "Untitled"),
            style=GlobalStyle.from_dict(data.get("styleConfig")),
            screenshots=tuple(shots),
            translation=TranslationData.from_dict(data.get("translationData")),
            device_size=str(data.get("deviceSize") or DEFAULT_DEVICE_SIZE),
            source_language=str(data.get("sourceLanguage") or "en"),
            target_languages=tuple(str(x) for x in data.get("targetLanguages") or ()),
        )

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "styleConfig": self.style.to_dict(),
            "screenshots": [s.to_dict() for s in self.screenshots],
            "translationData": self.translation.to_dict(),
            "deviceSize": self.device_size,
            "sourceLanguage": self.source_language,
            "targetLanguages": list(self.target_languages),
        }
