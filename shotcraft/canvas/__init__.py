from .styles import (
    CANONICAL,
    CanonicalStyle,
    CANONICAL_INDEX,
    THEME_PRESETS,
    apply_theme_preset,
    effective_style_for,
    reset_language_style,
    reset_style_override,
    resolve_style,
    set_language_style,
    write_style_override,
)
from .background import BackgroundPainter
from .mockup import MockupFramePainter, cover_fit
from .fonts import FontsManager
from .text import TextPainter, word_wrap
from .planner import Pair, Single, plan_render_items
from .flow import (
    add_screenshots,
    add_text_slide,
    display_text,
    link_screens,
    mockup_image_ref,
    move_screenshot,
    remove_screenshot,
    replace_image,
    set_text,
    set_translated_text,
    unlink_screens,
    update_both_settings,
    update_settings,
)
from .images import ImageManager, ImageSlot
from .composer import CompositionEngine, to_data_url, to_png_bytes
from .selection import InteractionController
