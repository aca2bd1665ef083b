"""
Application configuration.

Timer intervals and file locations come from DEFAULT_CONFIG, optionally
overridden by config/omnitask.json. User-facing game preferences are not
here; they are persisted with the rest of the app state.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

ROOT_DIR = Path(__file__).resolve().parent.parent
CONFIG_PATH = ROOT_DIR / "config" / "omnitask.json"

DEFAULT_CONFIG = {
    "db_path": str(ROOT_DIR / "omnitask.db"),
    "log_file": "omnitask.log",
    "reminder_initial_delay_s": 3,
    "reminder_interval_min": 60,
    "game_tick_s": 30,
    "game_trigger_probability": 0.02,
}


def load_config(path: Optional[Path] = None) -> dict:
    """Return DEFAULT_CONFIG merged with the JSON file at `path`, if any."""
    path = path or CONFIG_PATH
    if path.exists():
        try:
            with open(path, encoding="utf-8") as f:
                cfg = json.load(f)
            if not isinstance(cfg, dict):
                raise ValueError("top-level JSON value must be an object")
            merged = DEFAULT_CONFIG.copy()
            merged.update({k: v for k, v in cfg.items() if k in DEFAULT_CONFIG})
            return merged
        except (json.JSONDecodeError, ValueError) as e:
            logger.warning("Bad config at %s (%s), using defaults.", path, e)
    return DEFAULT_CONFIG.copy()
