# app_paths.py: local data directory for imports and exports
from pathlib import Path
import os

APP_NAME = "ttclub"

DATA_DIR = Path(
    os.getenv("TTCLUB_APPDATA") or
    (Path.home() / f".{APP_NAME}")
)


def data_dir() -> Path:
    """Return the data directory, re-reading ``TTCLUB_APPDATA`` and creating it."""
    base = Path(os.getenv("TTCLUB_APPDATA") or DATA_DIR)
    base.mkdir(parents=True, exist_ok=True)
    return base


def file_path(name: str) -> Path:
    return data_dir() / name
