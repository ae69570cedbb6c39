from __future__ import annotations

import base64
import logging
import threading
from io import BytesIO
from pathlib import Path
from typing import Callable, Optional
from urllib.parse import unquote_to_bytes

import requests
from PIL import Image

from shotcraft.core.state import FETCH_TIMEOUT

logger = logging.getLogger(__name__)

# Previews never need more than this many pixels on the long side
MAX_DECODE_SIDE = 1600

Dispatcher = Callable[[Callable[[], None]], None]
Executor = Callable[[Callable[[], None]], None]


def _short(ref: str) -> str:
    return ref if len(ref) <= 64 else ref[:48] + "..."


def _run_inline(fn: Callable[[], None]) -> None:
    fn()


def _run_in_thread(fn: Callable[[], None]) -> None:
    threading.Thread(target=fn, daemon=True).start()


class ImageManager:
    """Decode screenshot images by reference and cache the results.

    A reference is a ``data:`` URI, an ``http(s)`` URL or a filesystem path.
    Failures are cached too, so a broken reference is tried only once and
    the mockup for it is simply left out.

    Args:
        timeout: Seconds allowed for a remote fetch.
        max_side: Decoded images are shrunk to fit this size.
        dispatcher: Runs completion callbacks on the UI thread; in tk this is
            ``lambda fn: root.after(0, fn)``. Defaults to calling inline.
        executor: Runs a decode job off the UI thread. Defaults to a daemon
            thread per job.
    """

    def __init__(
        self,
        timeout: float = FETCH_TIMEOUT,
        max_side: int = MAX_DECODE_SIDE,
        dispatcher: Optional[Dispatcher] = None,
        executor: Optional[Executor] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.timeout = timeout
        self.max_side = max_side
        self.dispatcher = dispatcher or _run_inline
        self.executor = executor or _run_in_thread
        self.session = session or requests.Session()
        self._cache: dict[str, Optional[Image.Image]] = {}
        self._lock = threading.Lock()

    # ---- Decoding ----
    def read_bytes(self, ref: str) -> bytes:
        if ref.startswith("data:"):
            header, _, payload = ref.partition(",")
            if ";base64" in header:
                return base64.b64decode(payload, validate=False)
            return unquote_to_bytes(payload)
        if ref.startswith(("http://", "https://")):
            response = self.session.get(ref, timeout=self.timeout)
            response.raise_for_status()
            return response.content
        return Path(ref).read_bytes()

    def decode(self, ref: str) -> Optional[Image.Image]:
        """Decode ``ref`` into an RGBA image, or None when it cannot be used."""
        if not ref:
            return None
        try:
            img = Image.open(BytesIO(self.read_bytes(ref)))
            img.load()
        except Exception as e:
            logger.warning("Failed to decode image %s: %s", _short(ref), e)
            return None
        if img.width <= 0 or img.height <= 0:
            logger.warning("Ignoring degenerate image %s (%dx%d)", _short(ref), img.width, img.height)
            return None
        img = img.convert("RGBA")
        if max(img.size) > self.max_side:
            img.thumbnail((self.max_side, self.max_side), Image.Resampling.LANCZOS)
        return img

    # ---- Cache ----
    def is_cached(self, ref: str) -> bool:
        with self._lock:
            return ref in self._cache

    def peek(self, ref: str) -> Optional[Image.Image]:
        with self._lock:
            return self._cache.get(ref)

    def get(self, ref: str) -> Optional[Image.Image]:
        """Synchronous, cached decode."""
        if not ref:
            return None
        with self._lock:
            if ref in self._cache:
                return self._cache[ref]
        img = self.decode(ref)
        with self._lock:
            self._cache.setdefault(ref, img)
            return self._cache[ref]

    def forget(self, ref: str) -> None:
        with self._lock:
            self._cache.pop(ref, None)

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()

    def slot(self) -> "ImageSlot":
        return ImageSlot(self)


class ImageSlot:
    """The image currently shown by one preview canvas.

    Every ``request`` bumps a generation counter; a decode that finishes
    after the slot switched to another reference, or after ``close``, is
    dropped without calling back.
    """

    def __init__(self, manager: ImageManager) -> None:
        self.manager = manager
        self.ref = ""
        self._generation = 0
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def request(self, ref: str, on_ready: Callable[[Optional[Image.Image]], None]) -> Optional[Image.Image]:
        """Ask for ``ref``.

        Returns the image straight away when it is already cached (no
        callback). Otherwise starts a background decode and returns None;
        ``on_ready`` is then called exactly once on the dispatcher, unless
        the slot has moved on.
        """
        if self._closed:
            return None
        self._generation += 1
        self.ref = ref
        if not ref:
            return None
        if self.manager.is_cached(ref):
            return self.manager.peek(ref)

        generation = self._generation
        manager = self.manager

        def _deliver(img: Optional[Image.Image]) -> None:
            if self._closed or generation != self._generation:
                logger.debug("Dropping stale decode of %s", _short(ref))
                return
            on_ready(img)

        def _job() -> None:
            try:
                img = manager.get(ref)
            except Exception:
                logger.exception("Image decode worker failed for %s", _short(ref))
                img = None
            manager.dispatcher(lambda: _deliver(img))

        manager.executor(_job)
        return None

    def close(self) -> None:
        self._closed = True
        self._generation += 1
