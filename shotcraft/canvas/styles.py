from __future__ import annotations

import logging
from typing import Optional, Sequence
from dataclasses import dataclass, replace

from shotcraft.core.objects import (
    SOURCE_LANGUAGE,
    GlobalStyle,
    Gradient,
    Pattern,
    Screenshot,
    TranslationData,
    normalize_style_fields,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CanonicalStyle:
    """The screenshot that stands for the theme itself.

    Style edits made on it go to the global style and are never stored as a
    per-screenshot override.
    """

    index: int = 0

    def owns(self, index: int) -> bool:
        return index == self.index

    def apply(self, base: GlobalStyle, fields: dict) -> GlobalStyle:
        return replace(base, **fields)


CANONICAL = CanonicalStyle()
CANONICAL_INDEX = CANONICAL.index


def is_canonical(index: int) -> bool:
    return CANONICAL.owns(index)


def resolve_style(
    base: GlobalStyle,
    screenshot_override: Optional[dict] = None,
    language_override: Optional[dict] = None,
    active_language: str = SOURCE_LANGUAGE,
) -> GlobalStyle:
    """Fold the three style layers into one effective style.

    Precedence per field: per-language override (only when a translation is
    active) > screenshot override > global style. Each field resolves on its
    own; anything absent in a more specific layer falls through.
    """
    merged = dict(normalize_style_fields(screenshot_override))
    if active_language != SOURCE_LANGUAGE:
        merged.update(normalize_style_fields(language_override))
    if not merged:
        return base
    return replace(base, **merged)


def effective_style_for(
    base: GlobalStyle,
    screenshots: Sequence[Screenshot],
    translation: Optional[TranslationData],
    index: int,
    active_language: str = SOURCE_LANGUAGE,
) -> GlobalStyle:
    if not (0 <= index < len(screenshots)):
        return base
    override = screenshots[index].style_override
    lang_override = None
    if translation is not None and active_language != SOURCE_LANGUAGE:
        lang_override = translation.language_style(active_language, index)
    return resolve_style(base, override, lang_override, active_language)


def write_style_override(
    base: GlobalStyle,
    screenshots: Sequence[Screenshot],
    index: int,
    changes: dict,
) -> tuple[GlobalStyle, list[Screenshot]]:
    """Apply style ``changes`` for the screenshot at ``index``.

    Returns a new ``(global_style, screenshots)`` pair. Writes aimed at the
    canonical screenshot update the global style instead of storing an
    override. Out-of-range indices leave both untouched.
    """
    items = list(screenshots)
    if not (0 <= index < len(items)):
        logger.debug("Ignoring style override for out-of-range index %s", index)
        return base, items
    fields = normalize_style_fields(changes)
    if not fields:
        return base, items
    if is_canonical(index):
        return CANONICAL.apply(base, fields), items
    current = dict(items[index].style_override or {})
    current.update(fields)
    items[index] = replace(items[index], style_override=current)
    return base, items


def reset_style_override(screenshots: Sequence[Screenshot], index: int) -> list[Screenshot]:
    items = list(screenshots)
    if 0 <= index < len(items) and items[index].style_override is not None:
        items[index] = replace(items[index], style_override=None)
    return items


def set_language_style(
    translation: TranslationData,
    language: str,
    index: int,
    changes: dict,
) -> TranslationData:
    if language == SOURCE_LANGUAGE or index < 0:
        return translation
    fields = normalize_style_fields(changes)
    if not fields:
        return translation
    styles = {lang: dict(by_index) for lang, by_index in translation.per_language_styles.items()}
    by_index = styles.setdefault(language, {})
    current = dict(by_index.get(index) or {})
    current.update(fields)
    by_index[index] = current
    return replace(translation, per_language_styles=styles)


def reset_language_style(translation: TranslationData, language: str, index: int) -> TranslationData:
    """Drop the per-language style of one screenshot so it inherits again."""
    if index not in (translation.per_language_styles.get(language) or {}):
        return translation
    styles = {lang: dict(by_index) for lang, by_index in translation.per_language_styles.items()}
    del styles[language][index]
    if not styles[language]:
        del styles[language]
    return replace(translation, per_language_styles=styles)


THEME_PRESETS: dict[str, dict] = {
    "purple-bold": {
        "background_color": "#f5f5f7",
        "gradient": Gradient(False, "#667eea", "#764ba2", 135),
        "text_color": "#5B4FD9",
        "font_family": "Poppins",
        "font_size": 96,
        "text_align": "left",
        "highlight_color": "#5B4FD9",
        "mockup_color": "black",
        "mockup_scale": 0.85,
        "pattern": Pattern(),
    },
    "blue-pattern": {
        "background_color": "#2563EB",
        "gradient": Gradient(True, "#2563EB", "#1D4ED8", 180),
        "text_color": "#FFFFFF",
        "font_family": "Anton",
        "font_size": 88,
        "text_align": "center",
        "highlight_color": "#FFFFFF",
        "mockup_color": "black",
        "mockup_scale": 0.9,
        "pattern": Pattern("dots", "#FFFFFF", 0.15, 8, 24),
    },
    "finance-purple": {
        "background_color": "#7C3AED",
        "gradient": Gradient(True, "#7C3AED", "#5B21B6", 135),
        "text_color": "#FFFFFF",
        "font_family": "Poppins",
        "font_size": 80,
        "text_align": "left",
        "highlight_color": "#FFFFFF",
        "mockup_color": "white",
        "mockup_scale": 0.95,
        "pattern": Pattern(),
    },
    "midnight-grid": {
        "background_color": "#0F172A",
        "gradient": Gradient(True, "#0F172A", "#1E293B", 160),
        "text_color": "#F8FAFC",
        "font_family": "Inter",
        "font_size": 84,
        "text_align": "center",
        "highlight_color": "#38BDF8",
        "mockup_color": "black",
        "mockup_scale": 0.9,
        "pattern": Pattern("grid", "#FFFFFF", 0.08, 2, 40),
    },
}


def apply_theme_preset(base: GlobalStyle, preset_id: str) -> GlobalStyle:
    """Return ``base`` with the named theme preset's values applied."""
    preset = THEME_PRESETS.get(preset_id)
    if preset is None:
        logger.warning("Unknown theme preset %r", preset_id)
        return base
    return replace(base, **normalize_style_fields(preset))
