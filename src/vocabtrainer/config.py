"""Runtime settings from environment variables, a `.env` file, and CLI flags."""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from dataclasses import dataclass, replace
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_DICTIONARY_PATH = Path("dictionary.csv")
DEFAULT_STATE_PATH = Path(".vocabtrainer") / "users.json"
DEFAULT_SAVE_INTERVAL = "60s"
DEFAULT_LOG_LEVEL = "INFO"

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(h|m|s)")
_UNIT_SECONDS = {"h": 3600.0, "m": 60.0, "s": 1.0}


@dataclass(frozen=True)
class Settings:
    """Locations and timing the bot needs to run."""

    dictionary_path: Path
    state_path: Path
    save_interval: float
    telegram_token: str | None
    log_level: str

    def with_overrides(
        self,
        *,
        dictionary_path: str | None = None,
        state_path: str | None = None,
        save_interval: str | None = None,
        log_level: str | None = None,
    ) -> Settings:
        """Return settings with any given CLI values applied."""
        settings = self
        if dictionary_path:
            settings = replace(settings, dictionary_path=Path(dictionary_path))
        if state_path:
            settings = replace(settings, state_path=Path(state_path))
        if save_interval:
            settings = replace(settings, save_interval=parse_duration(save_interval))
        if log_level:
            settings = replace(settings, log_level=log_level.upper())
        return settings


def load_settings(environ: Mapping[str, str] | None = None, dotenv_path: Path | str | None = None) -> Settings:
    """Build settings from the environment after loading a `.env` file."""
    if environ is None:
        load_dotenv(dotenv_path)
        environ = os.environ
    token = environ.get("TELEGRAM_TOKEN", "").strip()
    return Settings(
        dictionary_path=Path(environ.get("VOCABTRAINER_DICTIONARY", str(DEFAULT_DICTIONARY_PATH))),
        state_path=Path(environ.get("VOCABTRAINER_STATE_FILE", str(DEFAULT_STATE_PATH))),
        save_interval=parse_duration(environ.get("VOCABTRAINER_SAVE_INTERVAL", DEFAULT_SAVE_INTERVAL)),
        telegram_token=token or None,
        log_level=environ.get("VOCABTRAINER_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
    )


def parse_duration(text: str) -> float:
    """Parse `90`, `30s`, `5m`, `1h30m` and similar into seconds."""
    value = text.strip().lower()
    if not value:
        raise ValueError("Duration is empty.")
    try:
        seconds = float(value)
    except ValueError:
        position = 0
        seconds = 0.0
        for match in _DURATION_PART.finditer(value):
            if match.start() != position:
                break
            seconds += float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
            position = match.end()
        if position != len(value):
            raise ValueError(f"Invalid duration: {text!r}") from None
    if not 0 < seconds < float("inf"):
        raise ValueError(f"Duration must be positive: {text!r}")
    return seconds
