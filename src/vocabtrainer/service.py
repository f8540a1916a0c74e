"""Application service for per-user quiz actions."""

from __future__ import annotations

import random
from collections.abc import Sequence

from .dictionary import DictionaryIndex
from .models import UserProfile
from .quiz import format_report
from .store import UserRecordStore


class QuizService:
    """Operation-level API that transports call once per user action.

    Protocol per user: `generate` only when `has_outstanding_task` is false,
    `evaluate` only when it is true. In learning mode the caller generates
    again right after each evaluation. Callers that may race pass
    `replace_existing=False` to `generate` instead of checking first.
    """

    def __init__(
        self,
        index: DictionaryIndex,
        store: UserRecordStore | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.index = index
        self.store = store if store is not None else UserRecordStore(index)
        self._rng = rng if rng is not None else random.Random()

    @property
    def dictionary_size(self) -> int:
        return len(self.index)

    def ensure_user(self, user_id: int, name: str) -> bool:
        """Create a default profile for a new user."""
        return self.store.ensure_user(user_id, name)

    def get_profile(self, user_id: int) -> UserProfile | None:
        return self.store.get_profile(user_id)

    def set_task_size(self, user_id: int, size: int) -> None:
        """Set how many words each task contains."""
        self.store.set_task_size(user_id, size)

    def has_outstanding_task(self, user_id: int) -> bool:
        return self.store.has_task(user_id)

    def is_learning_mode(self, user_id: int) -> bool:
        return self.store.is_learning_mode(user_id)

    def generate(self, user_id: int, *, replace_existing: bool = True) -> list[str]:
        """Issue a new task and return the question words."""
        return self.store.create_task(user_id, self._rng, replace_existing=replace_existing)

    def evaluate(self, user_id: int, answers: Sequence[str]) -> str:
        """Check answers to the outstanding task and return the report text."""
        return format_report(self.store.check_task(user_id, answers))

    def rate(self, user_id: int) -> int | None:
        """Return the percentage of correct answers, or None before any answer."""
        return self.store.rate(user_id)
