"""Optional user configuration.

Looked up in ``./nflwatch_config.json`` then ``~/.config/nflwatch/config.json``.
Example::

    {"theme": "light", "plain": false, "replay_speed": 3}
"""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from nflwatch.client import DEFAULT_TIMEOUT_SECONDS, ESPN_BASE_URL
from nflwatch.replay import DEFAULT_SPEED, clamp_speed

logger = logging.getLogger(__name__)

THEMES = ("dark", "light")


@dataclass(frozen=True)
class Settings:
    theme: str = "dark"
    plain: bool = False
    replay_speed: int = DEFAULT_SPEED
    base_url: str = ESPN_BASE_URL
    timeout: float = DEFAULT_TIMEOUT_SECONDS


def config_paths() -> list[Path]:
    return [
        Path.cwd() / "nflwatch_config.json",
        Path(os.path.expanduser("~/.config/nflwatch/config.json")),
    ]


def load_config(paths: Optional[list[Path]] = None) -> dict:
    """Return the first readable JSON object among ``paths``, else {}."""
    for p in paths if paths is not None else config_paths():
        if not p.is_file():
            continue
        try:
            data = json.loads(p.read_text(encoding="utf-8")) or {}
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring config %s: %s", p, exc)
            continue
        if isinstance(data, dict):
            logger.debug("Loaded config from %s", p)
            return data
        logger.warning("Ignoring config %s: expected a JSON object", p)
    return {}


def load_settings(raw: Optional[dict] = None, environ: Optional[dict] = None) -> Settings:
    raw = load_config() if raw is None else raw
    environ = os.environ if environ is None else environ

    theme = str(raw.get("theme", "dark")).lower()
    if theme not in THEMES:
        logger.warning("Unknown theme %r, using dark", theme)
        theme = "dark"

    try:
        speed = clamp_speed(int(raw.get("replay_speed", DEFAULT_SPEED)))
    except (TypeError, ValueError):
        speed = DEFAULT_SPEED

    try:
        timeout = float(raw.get("timeout", DEFAULT_TIMEOUT_SECONDS))
    except (TypeError, ValueError):
        timeout = DEFAULT_TIMEOUT_SECONDS

    base_url = environ.get("NFLWATCH_BASE_URL") or raw.get("base_url") or ESPN_BASE_URL

    return Settings(
        theme=theme,
        plain=bool(raw.get("plain", False)),
        replay_speed=speed,
        base_url=str(base_url).rstrip("/"),
        timeout=timeout if timeout > 0 else DEFAULT_TIMEOUT_SECONDS,
    )
