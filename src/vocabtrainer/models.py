"""Core domain models for vocabulary drilling."""

from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_TASK_SIZE = 10
LEARNING_TASK_SIZE = 1


@dataclass(frozen=True)
class DictionaryEntry:
    """One word pair at a stable position in the dictionary."""

    position: int
    source: str
    target: str


@dataclass(frozen=True)
class UserProfile:
    """Per-user settings and answer history."""

    name: str
    task_size: int = DEFAULT_TASK_SIZE
    history: tuple[bool, ...] = field(default_factory=tuple)

    @property
    def learning_mode(self) -> bool:
        """Whether tasks are chained one word at a time."""
        return self.task_size == LEARNING_TASK_SIZE


@dataclass(frozen=True)
class Mistake:
    """One wrongly answered (or unanswered) question."""

    question: str
    expected: str


@dataclass(frozen=True)
class EvaluationResult:
    """Outcome of checking one submitted task."""

    results: tuple[bool, ...]
    mistakes: tuple[Mistake, ...]

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def correct(self) -> int:
        return sum(self.results)


@dataclass(frozen=True)
class StoreSnapshot:
    """Value copy of all profiles and outstanding tasks."""

    profiles: dict[int, UserProfile] = field(default_factory=dict)
    tasks: dict[int, tuple[str, ...]] = field(default_factory=dict)
