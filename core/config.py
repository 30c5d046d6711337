# core/config.py

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

load_dotenv()  # ← Must precede any os.getenv below

DEFAULT_MODEL = "gemini-2.5-flash-preview-05-20"
DEFAULT_API_BASE = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_PREFERENCES_FILE = Path.home() / ".wanderplan" / "preferences.json"


def _number(name: str, default, cast):
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw)
    except ValueError:
        raise RuntimeError(f"Environment variable {name} must be a number, got {raw!r}.")


@dataclass(frozen=True)
class Settings:
    api_key: str
    model: str = DEFAULT_MODEL
    api_base: str = DEFAULT_API_BASE
    timeout: float = 30.0
    max_retries: int = 3              # retries after the first try
    backoff_base: float = 1.0         # seconds; delay = 2**attempt * base
    chat_window: Optional[int] = 20   # None = send the whole transcript
    preferences_file: Path = DEFAULT_PREFERENCES_FILE
    log_level: str = "INFO"

    @property
    def endpoint(self) -> str:
        return f"{self.api_base.rstrip('/')}/models/{self.model}:generateContent"

    @classmethod
    def from_env(cls) -> "Settings":
        api_key = os.getenv("GEMINI_API_KEY")
        if not api_key:
            raise RuntimeError("Environment variable GEMINI_API_KEY is missing.")

        window = _number("CHAT_HISTORY_WINDOW", 20, int)
        return cls(
            api_key=api_key,
            model=os.getenv("GEMINI_MODEL") or DEFAULT_MODEL,
            api_base=os.getenv("GEMINI_API_BASE") or DEFAULT_API_BASE,
            timeout=_number("GEMINI_TIMEOUT", 30.0, float),
            max_retries=max(0, _number("PLANNER_MAX_RETRIES", 3, int)),
            backoff_base=_number("PLANNER_BACKOFF_BASE", 1.0, float),
            chat_window=window if window > 0 else None,
            preferences_file=Path(
                os.getenv("PREFERENCES_FILE") or DEFAULT_PREFERENCES_FILE
            ).expanduser(),
            log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        )
