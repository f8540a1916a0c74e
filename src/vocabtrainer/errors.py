"""Exceptions raised by the quiz store and service."""

from __future__ import annotations


class QuizError(Exception):
    """Base class for quiz protocol errors."""


class UnknownUserError(QuizError, KeyError):
    """Raised when an operation targets a user without a profile."""


class NoOutstandingTaskError(QuizError, LookupError):
    """Raised when answers are checked but no task was issued."""


class InvalidTaskSizeError(QuizError, ValueError):
    """Raised when a task size is below 1 or larger than the dictionary."""


class TaskAlreadyOutstandingError(QuizError):
    """Raised when a task is requested without replacing the one already issued."""
