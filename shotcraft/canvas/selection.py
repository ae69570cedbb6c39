from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Callable, Optional, Sequence, Union

from shotcraft.core.objects import SOURCE_LANGUAGE, GlobalStyle, MockupSettings, Screenshot, TranslationData
from shotcraft.canvas.flow import (
    effective_settings,
    link_screens,
    unlink_screens,
    update_both_settings,
    update_settings,
)
from shotcraft.canvas.planner import Pair, RenderItem, Single
from shotcraft.canvas.styles import effective_style_for
from shotcraft.utils import clamp

logger = logging.getLogger(__name__)

PRIMARY_BUTTON = 1  # tk numbering
ROTATION_STEP = 5.0
PAIR_PARTNER_SHIFT = 100.0

SINGLE_X_BOUNDS = (-80.0, 80.0)
PAIR_X_BOUNDS = (-50.0, 150.0)
Y_BOUNDS = (-30.0, 30.0)

Unsubscribe = Callable[[], None]
Subscribe = Callable[[Callable[[float, float], None], Callable[[float, float], None]], Unsubscribe]


@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Dragging:
    last_x: float
    last_y: float
    offset_x: float
    offset_y: float


DragState = Union[Idle, Dragging]
IDLE = Idle()


class InteractionController:
    """Drag and rotate the mockup of one render item.

    While dragging, offsets live in a local copy that only the preview sees;
    the screenshot list is replaced through ``on_change`` on release.
    Global pointer listeners are acquired through ``subscribe`` when a drag
    starts and released when it ends or the controller is closed.

    Args:
        item: The ``Single`` or ``Pair`` this controller drives.
        on_change: Receives each new screenshot list.
        subscribe: ``subscribe(on_move, on_up)`` attaches pointer listeners
            and returns the function that detaches them.
        container_size: Returns the widget's current (width, height).
        on_preview: Called with the uncommitted settings after every move.
        translation, language: Select the per-language style layer, so the
            settings edited are the ones the renderer draws.
    """

    def __init__(
        self,
        item: RenderItem,
        on_change: Callable[[list[Screenshot]], None],
        subscribe: Subscribe,
        container_size: Callable[[], tuple[float, float]],
        screenshots: Sequence[Screenshot] = (),
        style: Optional[GlobalStyle] = None,
        on_preview: Optional[Callable[[MockupSettings], None]] = None,
        translation: Optional[TranslationData] = None,
        language: str = SOURCE_LANGUAGE,
    ) -> None:
        self.item = item
        self.on_change = on_change
        self._subscribe = subscribe
        self.container_size = container_size
        self.on_preview = on_preview
        self.screenshots: list[Screenshot] = list(screenshots)
        self.style = style or GlobalStyle()
        self.translation = translation
        self.language = language
        self.state: DragState = IDLE
        self._unsubscribe: Optional[Unsubscribe] = None
        self._closed = False

    # ---- Model ----
    @property
    def is_pair(self) -> bool:
        return isinstance(self.item, Pair)

    @property
    def primary_index(self) -> int:
        return self.item.primary if isinstance(self.item, Pair) else self.item.index

    @property
    def dragging(self) -> bool:
        return isinstance(self.state, Dragging)

    @property
    def subscribed(self) -> bool:
        return self._unsubscribe is not None

    def update(
        self,
        screenshots: Sequence[Screenshot],
        style: Optional[GlobalStyle] = None,
        translation: Optional[TranslationData] = None,
        language: Optional[str] = None,
    ) -> None:
        self.screenshots = list(screenshots)
        if style is not None:
            self.style = style
        if translation is not None:
            self.translation = translation
        if language is not None:
            self.language = language

    def effective_style(self) -> GlobalStyle:
        return effective_style_for(self.style, self.screenshots, self.translation, self.primary_index, self.language)

    def stored_settings(self) -> MockupSettings:
        return effective_settings(self.screenshots[self.primary_index], self.effective_style())

    def current_settings(self) -> MockupSettings:
        """Settings to draw with: the local drag copy while dragging, else the stored ones."""
        stored = self.stored_settings()
        if isinstance(self.state, Dragging):
            return replace(stored, offset_x=self.state.offset_x, offset_y=self.state.offset_y)
        return stored

    def _bounds_x(self) -> tuple[float, float]:
        return PAIR_X_BOUNDS if self.is_pair else SINGLE_X_BOUNDS

    # ---- Pointer ----
    def pointer_down(self, x: float, y: float, button: int = PRIMARY_BUTTON) -> bool:
        if self._closed or button != PRIMARY_BUTTON or self.dragging:
            return False
        if not (0 <= self.primary_index < len(self.screenshots)):
            return False
        stored = self.stored_settings()
        self.state = Dragging(float(x), float(y), stored.offset_x, stored.offset_y)
        self._unsubscribe = self._subscribe(self.pointer_move, self.pointer_up)
        return True

    def pointer_move(self, x: float, y: float) -> None:
        st = self.state
        if not isinstance(st, Dragging):
            return
        width, height = self.container_size()
        # a pair's container spans two screens; percentages refer to one
        span_x = width / 2.0 if self.is_pair else width
        if span_x <= 0 or height <= 0:
            return
        dx = (float(x) - st.last_x) / span_x * 100.0
        dy = (float(y) - st.last_y) / height * 100.0
        lo, hi = self._bounds_x()
        self.state = Dragging(
            float(x),
            float(y),
            clamp(st.offset_x + dx, lo, hi),
            clamp(st.offset_y + dy, *Y_BOUNDS),
        )
        if self.on_preview is not None:
            self.on_preview(self.current_settings())

    def pointer_up(self, x: Optional[float] = None, y: Optional[float] = None) -> None:
        st = self.state
        self._release()
        if not isinstance(st, Dragging):
            return
        self.state = IDLE
        self._commit_offsets(st.offset_x, st.offset_y)

    def _commit_offsets(self, offset_x: float, offset_y: float) -> None:
        stored = self.stored_settings()
        s1 = replace(stored, offset_x=offset_x, offset_y=offset_y)
        if isinstance(self.item, Pair):
            partner = self.screenshots[self.item.secondary].settings
            s2 = replace(partner, offset_x=offset_x - PAIR_PARTNER_SHIFT, offset_y=offset_y, rotation=s1.rotation)
            items = update_both_settings(self.screenshots, self.item.primary, self.item.secondary, s1, s2)
        else:
            items = update_settings(self.screenshots, self.item.index, s1)
        self._emit(items)

    # ---- Rotation / links ----
    def rotate(self, delta: float) -> None:
        if self._closed or not (0 <= self.primary_index < len(self.screenshots)):
            return
        stored = self.stored_settings()
        s1 = replace(stored, rotation=stored.rotation + float(delta))
        if isinstance(self.item, Pair):
            partner = self.screenshots[self.item.secondary].settings
            s2 = replace(partner, rotation=s1.rotation)
            items = update_both_settings(self.screenshots, self.item.primary, self.item.secondary, s1, s2)
        else:
            items = update_settings(self.screenshots, self.item.index, s1)
        self._emit(items)

    def rotate_left(self) -> None:
        self.rotate(-ROTATION_STEP)

    def rotate_right(self) -> None:
        self.rotate(ROTATION_STEP)

    def link_to_next(self) -> None:
        if isinstance(self.item, Single):
            self._emit(link_screens(self.screenshots, self.item.index, self.effective_style()))

    def unlink(self) -> None:
        if isinstance(self.item, Pair):
            self._emit(unlink_screens(self.screenshots, self.item.primary))

    def _emit(self, items: list[Screenshot]) -> None:
        self.screenshots = items
        self.on_change(items)

    # ---- Teardown ----
    def _release(self) -> None:
        unsubscribe, self._unsubscribe = self._unsubscribe, None
        if unsubscribe is not None:
            unsubscribe()

    def close(self) -> None:
        """Drop any drag in progress without committing and detach listeners."""
        self._closed = True
        self.state = IDLE
        self._release()
