import os
import json
import logging
from pathlib import Path
from typing import Optional
from dataclasses import dataclass, asdict

from dotenv import load_dotenv


APP_TITLE = "Shotcraft 1.0"

INTERNAL_PATH = Path.cwd() / "_internal"
FONTS_PATH    = INTERNAL_PATH / "fonts"
LOGS_PATH     = INTERNAL_PATH / "logs"
ENV_PATH      = INTERNAL_PATH / "env"
CACHE_PATH    = INTERNAL_PATH / "cache.json"

load_dotenv(ENV_PATH)

logger = logging.getLogger(__name__)


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring non-numeric %s=%r", name, raw)
        return default


# Preview geometry (CSS-like logical px) and device pixel ratio of the bitmap
PREVIEW_HEIGHT = _env_float("SHOTCRAFT_PREVIEW_HEIGHT", 340.0)
PIXEL_RATIO    = _env_float("SHOTCRAFT_PIXEL_RATIO", 2.0)
FETCH_TIMEOUT  = _env_float("SHOTCRAFT_FETCH_TIMEOUT", 15.0)
LOG_LEVEL      = os.getenv("SHOTCRAFT_LOG_LEVEL", "INFO").upper()


@dataclass
class AppState:
    project_path: str = ""
    device_size: str = "6.9"
    active_language: str = "all"
    preview_height: float = PREVIEW_HEIGHT
    pixel_ratio: float = PIXEL_RATIO

state = AppState()


def save_state(path: str | Path) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("w", encoding="utf-8") as f:
        json.dump(asdict(state), f, ensure_ascii=False, indent=2)


def load_state(path: str | Path) -> bool:
    p = Path(path)
    if not p.exists():
        return False
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except Exception:
        logger.exception("Failed to read session state from %s", p)
        return False
    for k, v in data.items():
        if hasattr(state, k):
            setattr(state, k, v)
    return True


def load_project(path: str | Path) -> Optional[dict]:
    """Read a project JSON file as exported by the project service."""
    p = Path(path)
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except Exception:
        logger.exception("Failed to read project file %s", p)
        return None
    if not isinstance(data, dict):
        logger.error("Project file %s does not contain an object", p)
        return None
    return data


def save_project(path: str | Path, data: dict) -> None:
    p = Path(path)
    with p.open("w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)
