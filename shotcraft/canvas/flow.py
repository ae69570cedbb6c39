"""Whole-list edits of the screenshot sequence.

Every function takes the current list and returns a new one; inputs are
never modified in place so callers can diff and persist the result.
Out-of-range indices are no-ops.
"""
from __future__ import annotations

import uuid
import logging
from dataclasses import replace
from typing import Iterable, Optional, Sequence

from shotcraft.core.objects import (
    SOURCE_LANGUAGE,
    GlobalStyle,
    MockupSettings,
    Screenshot,
    TranslationData,
)

logger = logging.getLogger(__name__)

MAX_SCREENSHOTS = 10
LINK_PRIMARY_OFFSET_X = 50.0  # the divider, in percent of one screen width
LINK_SECONDARY_OFFSET_X = -50.0


def _in_range(screenshots: Sequence[Screenshot], index: int) -> bool:
    return 0 <= index < len(screenshots)


def pair_of(screenshots: Sequence[Screenshot], index: int) -> Optional[tuple[int, int]]:
    """Return ``(primary, secondary)`` if ``index`` belongs to a linked pair."""
    if not _in_range(screenshots, index):
        return None
    if screenshots[index].settings.linked_to_next and index + 1 < len(screenshots):
        return index, index + 1
    prev = index - 1
    if prev >= 0 and screenshots[prev].settings.linked_to_next:
        return prev, index
    return None


def add_screenshots(screenshots: Sequence[Screenshot], image_refs: Iterable[str]) -> list[Screenshot]:
    items = list(screenshots)
    for ref in image_refs:
        if len(items) >= MAX_SCREENSHOTS:
            logger.info("Screenshot limit of %d reached", MAX_SCREENSHOTS)
            break
        items.append(Screenshot(id=uuid.uuid4().hex, image_ref=str(ref)))
    return items


def add_text_slide(screenshots: Sequence[Screenshot], text: str = "Your text here") -> list[Screenshot]:
    items = list(screenshots)
    if len(items) >= MAX_SCREENSHOTS:
        logger.info("Screenshot limit of %d reached", MAX_SCREENSHOTS)
        return items
    items.append(Screenshot(id=f"{uuid.uuid4().hex}-text", text=text))
    return items


def link_screens(
    screenshots: Sequence[Screenshot],
    index: int,
    style: Optional[GlobalStyle] = None,
) -> list[Screenshot]:
    """Link ``index`` with its successor so both share one mockup.

    The primary's mockup moves to the divider and the secondary's mockup
    draws the primary's image with a matching rotation. Stored per-screen
    scales are dropped so the pair follows the style's mockup scale.
    With ``style`` (the primary's effective style) a primary without stored
    settings starts from the style's mockup offset and rotation, as drawn.
    Linking the last screen, or a screen that is already part of a pair
    (or whose successor is), does nothing.
    """
    items = list(screenshots)
    if index < 0 or index >= len(items) - 1:
        logger.debug("Cannot link screen %s of %d", index, len(items))
        return items
    first, second = items[index], items[index + 1]
    if pair_of(items, index) is not None or pair_of(items, index + 1) is not None:
        logger.debug("Screen %s or its neighbour is already linked", index)
        return items

    base = effective_settings(first, style) if style is not None else first.settings
    s1 = replace(base, scale=None, linked_to_next=True, offset_x=LINK_PRIMARY_OFFSET_X)
    s2 = replace(second.settings, scale=None, offset_x=LINK_SECONDARY_OFFSET_X, rotation=s1.rotation)
    items[index] = replace(first, mockup_settings=s1)
    items[index + 1] = replace(second, mockup_settings=s2, linked_mockup_index=index)
    return items


def unlink_screens(screenshots: Sequence[Screenshot], index: int) -> list[Screenshot]:
    """Split the pair whose primary is ``index``; both mockups return to offset 0."""
    items = list(screenshots)
    if not _in_range(items, index) or not items[index].settings.linked_to_next:
        logger.debug("Screen %s is not the primary of a pair", index)
        return items
    first = items[index]
    items[index] = replace(first, mockup_settings=replace(first.settings, linked_to_next=False, offset_x=0.0))
    if index + 1 < len(items):
        second = items[index + 1]
        items[index + 1] = replace(
            second,
            mockup_settings=replace(second.settings, offset_x=0.0),
            linked_mockup_index=None,
        )
    return items


def _normalize_links(items: list[Screenshot]) -> list[Screenshot]:
    """Repair link flags after a structural edit so every pair is exactly two adjacent screens."""
    n = len(items)
    i = 0
    while i < n:
        s = items[i]
        if s.settings.linked_to_next:
            if i + 1 < n and not items[i + 1].settings.linked_to_next:
                if items[i + 1].linked_mockup_index != i:
                    items[i + 1] = replace(items[i + 1], linked_mockup_index=i)
                i += 2
                continue
            items[i] = replace(s, mockup_settings=replace(s.settings, linked_to_next=False, offset_x=0.0))
            s = items[i]
        if s.linked_mockup_index is not None:
            items[i] = replace(s, linked_mockup_index=None)
        i += 1
    return items


def remove_screenshot(screenshots: Sequence[Screenshot], index: int) -> list[Screenshot]:
    """Remove one screen. A pair it belonged to is unlinked first."""
    items = list(screenshots)
    if not _in_range(items, index):
        logger.debug("Cannot remove screen %s of %d", index, len(items))
        return items
    pair = pair_of(items, index)
    if pair is not None:
        items = unlink_screens(items, pair[0])
    del items[index]
    return _normalize_links(items)


def remove_screenshot_by_id(screenshots: Sequence[Screenshot], screenshot_id: str) -> list[Screenshot]:
    for i, s in enumerate(screenshots):
        if s.id == screenshot_id:
            return remove_screenshot(screenshots, i)
    return list(screenshots)


def move_screenshot(screenshots: Sequence[Screenshot], index: int, direction: str) -> list[Screenshot]:
    """Swap a screen with its left or right neighbour.

    Pairs touching either position are unlinked before the swap.
    """
    items = list(screenshots)
    target = index - 1 if direction == "left" else index + 1
    if not _in_range(items, index) or not _in_range(items, target):
        logger.debug("Cannot move screen %s %s", index, direction)
        return items
    for pos in (index, target):
        pair = pair_of(items, pos)
        if pair is not None:
            items = unlink_screens(items, pair[0])
    items[index], items[target] = items[target], items[index]
    return _normalize_links(items)


def replace_image(screenshots: Sequence[Screenshot], index: int, image_ref: str) -> list[Screenshot]:
    items = list(screenshots)
    if _in_range(items, index):
        items[index] = replace(items[index], image_ref=str(image_ref))
    return items


def update_settings(screenshots: Sequence[Screenshot], index: int, settings: MockupSettings) -> list[Screenshot]:
    items = list(screenshots)
    if _in_range(items, index):
        items[index] = replace(items[index], mockup_settings=settings)
    return items


def update_both_settings(
    screenshots: Sequence[Screenshot],
    first: int,
    second: int,
    s1: MockupSettings,
    s2: MockupSettings,
) -> list[Screenshot]:
    items = list(screenshots)
    if _in_range(items, first) and _in_range(items, second):
        items[first] = replace(items[first], mockup_settings=s1)
        items[second] = replace(items[second], mockup_settings=s2)
    return items


def reset_settings(screenshots: Sequence[Screenshot], index: int) -> list[Screenshot]:
    """Drop stored mockup settings so the screen inherits the style again.

    Screens in a pair keep their settings; unlink first.
    """
    items = list(screenshots)
    if _in_range(items, index) and pair_of(items, index) is None:
        items[index] = replace(items[index], mockup_settings=None)
    return items


def set_text(screenshots: Sequence[Screenshot], index: int, text: str) -> list[Screenshot]:
    items = list(screenshots)
    if _in_range(items, index):
        items[index] = replace(items[index], text=str(text))
    return items


def set_translated_text(translation: TranslationData, language: str, index: int, text: str) -> TranslationData:
    if language == SOURCE_LANGUAGE or index < 0:
        return translation
    headlines = {lang: list(lines) for lang, lines in translation.headlines.items()}
    lines = headlines.setdefault(language, [])
    while len(lines) <= index:
        lines.append("")
    lines[index] = str(text)
    return replace(translation, headlines=headlines)


def effective_settings(screenshot: Screenshot, style: GlobalStyle) -> MockupSettings:
    """Stored mockup settings, or the style's mockup offset and rotation when none are stored."""
    if screenshot.mockup_settings is not None:
        return screenshot.mockup_settings
    return MockupSettings(
        offset_x=style.mockup_offset.x,
        offset_y=style.mockup_offset.y,
        rotation=style.mockup_rotation,
    )


def text_offset(screenshot: Screenshot, style: GlobalStyle) -> tuple[float, float]:
    s = screenshot.settings
    x = s.text_offset_x if s.text_offset_x is not None else style.text_offset.x
    y = s.text_offset_y if s.text_offset_y is not None else style.text_offset.y
    return float(x), float(y)


def display_text(
    screenshot: Screenshot,
    index: int,
    translation: Optional[TranslationData] = None,
    language: str = SOURCE_LANGUAGE,
) -> str:
    """Headline shown for a screen: the translation if there is one, else the source text."""
    if translation is not None and language != SOURCE_LANGUAGE:
        translated = translation.headline(language, index)
        if translated:
            return translated
    return screenshot.text or ""


def mockup_image_ref(screenshots: Sequence[Screenshot], index: int) -> str:
    """Image drawn inside the mockup of ``index``, following ``linked_mockup_index``."""
    if not _in_range(screenshots, index):
        return ""
    s = screenshots[index]
    linked = s.linked_mockup_index
    if linked is not None and _in_range(screenshots, linked):
        return screenshots[linked].image_ref or ""
    return s.image_ref or ""
