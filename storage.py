from __future__ import annotations
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)

DATA_DIR_ENV = "STUDY_SCHEDULER_DATA_DIR"


def _platform_data_dir() -> Path:
    home = Path.home()
    if sys.platform == "darwin":
        return home / "Library" / "Application Support" / "StudyScheduler"
    if sys.platform.startswith("win"):
        roaming = os.environ.get("APPDATA")
        return (Path(roaming) if roaming else home / "AppData" / "Roaming") / "StudyScheduler"
    xdg = os.environ.get("XDG_DATA_HOME")
    return (Path(xdg) if xdg else home / ".local" / "share") / "study-scheduler"


def get_data_dir() -> Path:
    """STUDY_SCHEDULER_DATA_DIR when set, otherwise the per-OS user data directory."""
    override = os.environ.get(DATA_DIR_ENV)
    base = Path(override).expanduser() if override else _platform_data_dir()
    base.mkdir(parents=True, exist_ok=True)
    return base


def data_path(filename: str | Path, base_dir: Optional[Path] = None) -> Path:
    """
    Resolve a file path inside the data directory.
    """
    base = Path(base_dir) if base_dir is not None else get_data_dir()
    base.mkdir(parents=True, exist_ok=True)
    return base / Path(filename)


def _backup_file(path: Path, content: str) -> None:
    backup = path.with_suffix(path.suffix + ".bak")
    try:
        backup.write_text(content, encoding="utf-8")
    except OSError as exc:
        # the reset still goes ahead; the unreadable content is lost
        logger.warning("Could not write backup %s: %s", backup, exc)


def load_json(path: Path | str, default: Any = None) -> Any:
    """
    Load JSON from path with safety:
    - If missing: return default ({} when not given)
    - If empty or invalid: write .bak and reset to default
    """
    path = Path(path)
    fallback = {} if default is None else default

    if not path.exists():
        return fallback

    raw_text = path.read_text(encoding="utf-8")
    text = raw_text.strip()
    if not text:
        _backup_file(path, raw_text)
        save_json(path, fallback)
        return fallback

    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        logger.warning("Corrupt JSON in %s (%s); backed up and reset.", path, exc)
        _backup_file(path, raw_text)
        save_json(path, fallback)
        return fallback


def save_json(path: Path | str, payload: Any) -> None:
    """
    Atomic JSON write: write to temp file then replace target.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    temp = path.with_suffix(path.suffix + ".tmp")
    temp.write_text(
        json.dumps(payload, ensure_ascii=False, indent=2),
        encoding="utf-8",
    )
    temp.replace(path)
