#!/usr/bin/env python3
"""
Configuration for the maze runner
Defaults live in CONFIG, MAZE_* environment variables override them
"""

import copy
import os
from typing import Any, Dict, Optional

# --- CONFIG ---
CONFIG = {
    "default_width": 10,        # half-width passed to the generator
    "generator_mode": "two_color",
    "seed": None,

    "window_title": "maze",
    "window_size": (800, 600),
    "fullscreen": True,
    "frame_delay_ms": 16,
    "banner_ratio": 0.2,        # top share of the frame used by the timer
    "thin_border_threshold": 4.0,

    "log_dir": "logs",
    "log_level": "INFO",

    "host": "127.0.0.1",
    "port": 8080,
    "session_ttl_seconds": 1800,
    "max_dimension": 200,       # largest half-dimension the web host accepts

    # BGR, as OpenCV expects
    "colors": {
        "wall": (0, 0, 0),
        "empty": (255, 255, 255),
        "visited": (0, 0, 255),
        "cursor": (128, 128, 128),
        "goal": (0, 128, 0),
        "timer_running": (255, 255, 255),
        "timer_done": (0, 255, 0),
        "background": (0, 0, 0),
    },
}

_INT_KEYS = ("default_width", "seed", "frame_delay_ms", "port", "session_ttl_seconds",
             "max_dimension")
_BOOL_KEYS = ("fullscreen",)


def _parse_value(key: str, raw: str) -> Any:
    if key in _INT_KEYS:
        return int(raw)
    if key in _BOOL_KEYS:
        return raw.strip().lower() in ("1", "true", "yes", "on")
    return raw


def load_config(overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Return a copy of CONFIG with environment and explicit overrides applied"""
    config = copy.deepcopy(CONFIG)

    for key in config:
        env_name = f"MAZE_{key.upper()}"
        if env_name in os.environ and key != "colors":
            config[key] = _parse_value(key, os.environ[env_name])

    for key, value in (overrides or {}).items():
        if key in config:
            config[key] = value

    return config
