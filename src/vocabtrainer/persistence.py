"""JSON snapshots of the user store and the timer that writes them."""

from __future__ import annotations

import json
import logging
import math
import os
import tempfile
from datetime import UTC, datetime
from pathlib import Path
from typing import cast

from apscheduler.schedulers.background import BackgroundScheduler

from .models import DEFAULT_TASK_SIZE, StoreSnapshot, UserProfile
from .store import UserRecordStore

logger = logging.getLogger(__name__)

STATE_FORMAT_VERSION = 1


def dump_state(snapshot: StoreSnapshot) -> str:
    """Serialize a snapshot to the state file format."""
    payload = {
        "format_version": STATE_FORMAT_VERSION,
        "saved_at": datetime.now(UTC).isoformat(),
        "users": {
            str(user_id): {
                "name": profile.name,
                "task_size": profile.task_size,
                "history": list(profile.history),
            }
            for user_id, profile in snapshot.profiles.items()
        },
        "tasks": {str(user_id): list(answers) for user_id, answers in snapshot.tasks.items()},
    }
    return json.dumps(payload, ensure_ascii=False)


def parse_state(text: str) -> StoreSnapshot:
    """Parse state file content; malformed rows are skipped."""
    raw_obj: object = json.loads(text)
    if not isinstance(raw_obj, dict):
        raise ValueError("State file root must be a JSON object.")
    raw = cast(dict[str, object], raw_obj)

    format_version = _coerce_int(raw.get("format_version", 0))
    if format_version is None:
        raise ValueError("State file has invalid format_version.")
    if format_version > STATE_FORMAT_VERSION:
        raise ValueError(
            f"State file format version {format_version} is newer than supported {STATE_FORMAT_VERSION}."
        )
    profiles = _parse_profiles(raw.get("users"))
    tasks = {
        user_id: answers for user_id, answers in _parse_tasks(raw.get("tasks")).items() if user_id in profiles
    }
    return StoreSnapshot(profiles=profiles, tasks=tasks)


def load_state(path: Path | str) -> StoreSnapshot:
    """Read persisted state, falling back to an empty snapshot.

    A missing file is the normal first start. An unreadable or malformed file
    is logged and discarded so the bot can still start.
    """
    state_path = Path(path)
    try:
        text = state_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.info("No state file at %s; starting with an empty store", state_path)
        return StoreSnapshot()
    except (OSError, UnicodeDecodeError):
        logger.warning("Could not read state file %s; starting with an empty store", state_path, exc_info=True)
        return StoreSnapshot()

    try:
        snapshot = parse_state(text)
    except (ValueError, RecursionError) as exc:
        logger.warning("Ignoring malformed state file %s: %s", state_path, exc)
        return StoreSnapshot()
    logger.info("Restored %d users from %s", len(snapshot.profiles), state_path)
    return snapshot


def save_state(snapshot: StoreSnapshot, path: Path | str) -> None:
    """Write a snapshot through a temporary file renamed over the target."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    content = dump_state(snapshot)
    fd, temp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=target.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(content)
        os.replace(temp_name, target)
    except BaseException:
        Path(temp_name).unlink(missing_ok=True)
        raise


class PersistenceScheduler:
    """Saves the store every `interval` seconds on an APScheduler background job."""

    JOB_ID = "vocabtrainer-persistence"

    def __init__(self, store: UserRecordStore, path: Path | str, interval: float) -> None:
        if interval <= 0:
            raise ValueError(f"Save interval must be positive, got {interval}.")
        self.store = store
        self.path = Path(path)
        self.interval = interval
        self._scheduler: BackgroundScheduler | None = None

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    def start(self) -> None:
        """Start ticking; calling it twice is a no-op."""
        if self.running:
            return
        self._scheduler = BackgroundScheduler(daemon=True)
        self._scheduler.add_job(
            self.save_now,
            "interval",
            seconds=self.interval,
            id=self.JOB_ID,
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        self._scheduler.start()
        logger.info("Saving user state to %s every %ss", self.path, self.interval)

    def stop(self, flush: bool = True) -> None:
        """Stop ticking, wait for a running save, and optionally write one last snapshot."""
        if self._scheduler is not None:
            if self._scheduler.running:
                self._scheduler.shutdown(wait=True)
            self._scheduler = None
        if flush:
            self.save_now()

    def save_now(self) -> bool:
        """Write the current snapshot; failures are logged and reported as False."""
        snapshot = self.store.snapshot()
        try:
            save_state(snapshot, self.path)
        except (OSError, TypeError, ValueError):
            logger.exception("Failed to save user state to %s", self.path)
            return False
        logger.debug("Saved %d users to %s", len(snapshot.profiles), self.path)
        return True


def _parse_profiles(raw: object) -> dict[int, UserProfile]:
    """Normalize the `users` section."""
    if not isinstance(raw, dict):
        return {}
    rows = cast(dict[object, object], raw)
    profiles: dict[int, UserProfile] = {}
    for key, item in rows.items():
        user_id = _coerce_int(key)
        if user_id is None or not isinstance(item, dict):
            continue
        row = cast(dict[str, object], item)
        name = row.get("name", "")
        task_size = _coerce_int(row.get("task_size"), default=DEFAULT_TASK_SIZE) or DEFAULT_TASK_SIZE
        history_raw = row.get("history")
        history = (
            tuple(value for value in cast(list[object], history_raw) if isinstance(value, bool))
            if isinstance(history_raw, list)
            else ()
        )
        profiles[user_id] = UserProfile(
            name=name if isinstance(name, str) else str(name),
            task_size=task_size if task_size >= 1 else DEFAULT_TASK_SIZE,
            history=history,
        )
    return profiles


def _parse_tasks(raw: object) -> dict[int, tuple[str, ...]]:
    """Normalize the `tasks` section."""
    if not isinstance(raw, dict):
        return {}
    rows = cast(dict[object, object], raw)
    tasks: dict[int, tuple[str, ...]] = {}
    for key, item in rows.items():
        user_id = _coerce_int(key)
        if user_id is None or not isinstance(item, list):
            continue
        answers = cast(list[object], item)
        if not answers or not all(isinstance(answer, str) for answer in answers):
            continue
        tasks[user_id] = tuple(cast(list[str], answers))
    return tasks


def _coerce_int(value: object, default: int | None = None) -> int | None:
    """Coerce JSON values (including string keys) to int."""
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else default
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return default
    return default
