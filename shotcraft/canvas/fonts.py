from __future__ import annotations

import json
import shutil
import logging
from pathlib import Path
from typing import Optional

from PIL import ImageFont

from shotcraft.core.state import FONTS_PATH


logger = logging.getLogger(__name__)

DEFAULT_FAMILY = "Inter"
DEFAULT_FONTS_MAP = {"Inter": "Inter-Regular"}


class FontsManager:
    """Resolves CSS-like font family names to Pillow fonts.

    A ``fonts.json`` file in the fonts directory maps display names to file
    stems (``{"Poppins": "Poppins-Regular"}``); the stem is looked up as
    ``.ttf`` first, then ``.otf``. Bold text prefers a ``<Family>-Bold``
    file when one is installed. Families that cannot be found render with
    Pillow's bundled default font.
    """

    def __init__(self, fonts_path: Path = FONTS_PATH) -> None:
        self.fonts_path = Path(fonts_path)
        self._fonts_map_path = self.fonts_path / "fonts.json"
        self._fonts_map = self._load_fonts_map()
        self._cache: dict[tuple[Optional[str], int], ImageFont.ImageFont] = {}

    @property
    def families(self) -> list[str]:
        return self._list_font_families(self._fonts_map)

    # ---- Public ----
    def find_font_path(self, family: str, bold: bool = False) -> Optional[str]:
        name = primary_family(family)
        file_stem = str(self._fonts_map.get(name) or name.replace(" ", ""))
        stems = [file_stem]
        if bold:
            base = file_stem.rsplit("-", 1)[0] if "-" in file_stem else file_stem
            stems.insert(0, f"{base}-Bold")
        for stem in stems:
            for ext in (".ttf", ".otf"):
                fp = self.fonts_path / f"{stem}{ext}"
                if fp.exists():
                    return str(fp)
        return None

    def font(self, family: str, size_px: float, bold: bool = True):
        size = max(1, int(round(size_px)))
        path = self.find_font_path(family, bold=bold)
        key = (path, size)
        cached = self._cache.get(key)
        if cached is not None:
            return cached
        if path is not None:
            try:
                font = ImageFont.truetype(path, size)
            except OSError:
                logger.exception("Failed to load font %s", path)
                font = _default_font(size)
        else:
            logger.debug("Font family %r not installed, using default", family)
            font = _default_font(size)
        self._cache[key] = font
        return font

    def import_font(self, src_path: str | Path, family: Optional[str] = None) -> str:
        """Copy a .ttf/.otf file into the fonts directory and register it.

        Returns:
            The display name the font was registered under.
        """
        src = Path(src_path)
        if src.suffix.lower() not in (".ttf", ".otf"):
            raise ValueError(f"Unsupported font file: {src.name}")
        self.fonts_path.mkdir(parents=True, exist_ok=True)
        shutil.copy(src, self.fonts_path / src.name)
        display = (family or src.stem).strip() or src.stem
        self._fonts_map[display] = src.stem
        self._save_fonts_map(self._fonts_map)
        self._cache.clear()
        return display

    def remove_font(self, family: str) -> bool:
        if family == DEFAULT_FAMILY or family not in self._fonts_map:
            return False
        file_stem = str(self._fonts_map.pop(family))
        for ext in (".ttf", ".otf"):
            fp = self.fonts_path / f"{file_stem}{ext}"
            try:
                if fp.exists():
                    fp.unlink()
            except OSError:
                logger.exception("Failed to delete font file %s", fp)
        self._save_fonts_map(self._fonts_map)
        self._cache.clear()
        return True

    # ---- Internals ----
    def _load_fonts_map(self) -> dict:
        try:
            if self._fonts_map_path.exists():
                with open(self._fonts_map_path, "r", encoding="utf-8") as f:
                    data = json.load(f)
                    if isinstance(data, dict):
                        return data
        except Exception:
            logger.exception("Failed to load fonts mapping")
        return dict(DEFAULT_FONTS_MAP)

    def _save_fonts_map(self, mp: dict) -> None:
        try:
            with open(self._fonts_map_path, "w", encoding="utf-8") as f:
                json.dump(mp, f, ensure_ascii=False, indent=2)
        except Exception:
            logger.exception("Failed to save fonts map")

    def _list_font_families(self, mp: dict) -> list[str]:
        names = sorted(str(k) for k in mp.keys())
        if DEFAULT_FAMILY in names:
            names.remove(DEFAULT_FAMILY)
            names.insert(0, DEFAULT_FAMILY)
        return names


def primary_family(family: str) -> str:
    """First family of a CSS font stack: ``"'Poppins', sans-serif"`` -> ``Poppins``."""
    first = str(family or "").split(",")[0].strip().strip("'\"")
    return first or DEFAULT_FAMILY


def _default_font(size: int):
    try:
        return ImageFont.load_default(size)
    except TypeError:
        # Pillow < 10.1 only ships the fixed-size bitmap font
        return ImageFont.load_default()
