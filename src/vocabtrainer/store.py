"""In-memory user records and outstanding tasks behind one lock."""

from __future__ import annotations

import logging
import random
import threading
from collections.abc import Sequence
from dataclasses import replace

from .dictionary import DictionaryIndex
from .errors import InvalidTaskSizeError, NoOutstandingTaskError, TaskAlreadyOutstandingError, UnknownUserError
from .models import DEFAULT_TASK_SIZE, EvaluationResult, Mistake, StoreSnapshot, UserProfile
from .quiz import normalize_answer, select_positions

logger = logging.getLogger(__name__)


class UserRecordStore:
    """Owns every profile and outstanding task.

    Each public method holds the store lock for its whole duration, so a task
    is issued or consumed atomically with respect to every other call. Users
    are not partitioned: operations on different users also serialize. No
    method performs I/O; persistence works from `snapshot()`.
    """

    def __init__(self, index: DictionaryIndex) -> None:
        self.index = index
        self._lock = threading.Lock()
        self._profiles: dict[int, UserProfile] = {}
        self._tasks: dict[int, tuple[str, ...]] = {}

    def ensure_user(self, user_id: int, name: str) -> bool:
        """Create a default profile on first contact; return whether it was created."""
        with self._lock:
            if user_id in self._profiles:
                return False
            self._profiles[user_id] = UserProfile(name=name, task_size=DEFAULT_TASK_SIZE)
        logger.info("Created profile for user %s (%s)", user_id, name)
        return True

    def get_profile(self, user_id: int) -> UserProfile | None:
        with self._lock:
            return self._profiles.get(user_id)

    def set_task_size(self, user_id: int, size: int) -> None:
        """Overwrite a user's task size."""
        if size < 1:
            raise InvalidTaskSizeError(f"Task size must be at least 1, got {size}.")
        with self._lock:
            profile = self._require_profile(user_id)
            self._profiles[user_id] = replace(profile, task_size=size)

    def has_task(self, user_id: int) -> bool:
        with self._lock:
            return user_id in self._tasks

    def is_learning_mode(self, user_id: int) -> bool:
        with self._lock:
            profile = self._profiles.get(user_id)
            return profile is not None and profile.learning_mode

    def create_task(self, user_id: int, rng: random.Random, *, replace_existing: bool = True) -> list[str]:
        """Issue a new task and return its questions.

        An outstanding task is replaced unless `replace_existing` is false, in
        which case `TaskAlreadyOutstandingError` is raised under the same lock
        that would have installed the task. `questions[i]` always pairs with
        the i-th stored answer.
        """
        with self._lock:
            if not replace_existing and user_id in self._tasks:
                raise TaskAlreadyOutstandingError(f"User {user_id} already has an outstanding task.")
            profile = self._require_profile(user_id)
            size = profile.task_size
            if not 0 < size <= len(self.index):
                raise InvalidTaskSizeError(
                    f"Task size {size} does not fit a dictionary of {len(self.index)} words."
                )
            entries = [self.index.entry(position) for position in select_positions(size, len(self.index), rng)]
            self._tasks[user_id] = tuple(entry.source for entry in entries)
            return [entry.target for entry in entries]

    def check_task(self, user_id: int, answers: Sequence[str]) -> EvaluationResult:
        """Score submitted answers, extend history, and consume the task."""
        with self._lock:
            expected_answers = self._tasks.get(user_id)
            if expected_answers is None:
                raise NoOutstandingTaskError(f"User {user_id} has no outstanding task.")
            profile = self._require_profile(user_id)

            results: list[bool] = []
            mistakes: list[Mistake] = []
            for position, raw_expected in enumerate(expected_answers):
                expected = normalize_answer(raw_expected)
                correct = position < len(answers) and normalize_answer(answers[position]) == expected
                results.append(correct)
                if not correct:
                    mistakes.append(Mistake(question=self.index.question_for(raw_expected), expected=expected))

            self._profiles[user_id] = replace(profile, history=profile.history + tuple(results))
            del self._tasks[user_id]
        return EvaluationResult(results=tuple(results), mistakes=tuple(mistakes))

    def rate(self, user_id: int) -> int | None:
        """Return the truncated percentage of correct answers, or None without history."""
        with self._lock:
            profile = self._profiles.get(user_id)
            if profile is None or not profile.history:
                return None
            return sum(profile.history) * 100 // len(profile.history)

    def snapshot(self) -> StoreSnapshot:
        """Copy all state so it can be serialized without holding the lock."""
        with self._lock:
            return StoreSnapshot(profiles=dict(self._profiles), tasks=dict(self._tasks))

    def restore(self, snapshot: StoreSnapshot) -> None:
        """Replace all state; only used while starting up."""
        with self._lock:
            self._profiles = dict(snapshot.profiles)
            self._tasks = {user_id: tuple(answers) for user_id, answers in snapshot.tasks.items()}

    def __len__(self) -> int:
        with self._lock:
            return len(self._profiles)

    def _require_profile(self, user_id: int) -> UserProfile:
        """Return a profile; the caller must hold the lock."""
        profile = self._profiles.get(user_id)
        if profile is None:
            raise UnknownUserError(user_id)
        return profile
