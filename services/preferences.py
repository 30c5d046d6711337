# services/preferences.py

import json
import logging
from pathlib import Path

log = logging.getLogger(__name__)

LIGHT = "light"
DARK = "dark"


class ThemePreference:
    """The one durable setting: light or dark display, stored as {"theme": ...}."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> str:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return LIGHT
        except (OSError, ValueError) as e:
            log.warning("Ignoring unreadable preferences file %s: %s", self.path, e)
            return LIGHT
        return DARK if isinstance(data, dict) and data.get("theme") == DARK else LIGHT

    def save(self, theme: str) -> None:
        if theme not in (LIGHT, DARK):
            raise ValueError(f"Unknown theme: {theme!r}")
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps({"theme": theme}), encoding="utf-8")

    def toggle(self) -> str:
        theme = LIGHT if self.load() == DARK else DARK
        self.save(theme)
        return theme
