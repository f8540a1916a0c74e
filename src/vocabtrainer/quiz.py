"""Task selection, answer normalization, and report rendering."""

from __future__ import annotations

import random
from collections.abc import Sequence

from .models import EvaluationResult

IGNORED_PUNCTUATION = "-,.;:!?(){}[]"
# Above this share of the dictionary, rejection sampling keeps hitting
# already-chosen positions, so selection switches to a partial shuffle.
REJECTION_SAMPLING_LIMIT = 0.5

_PUNCTUATION_TABLE = str.maketrans("", "", IGNORED_PUNCTUATION)


def normalize_answer(text: str) -> str:
    """Trim whitespace and drop punctuation; case and diacritics are kept."""
    return text.strip().translate(_PUNCTUATION_TABLE)


def select_positions(count: int, population: int, rng: random.Random) -> list[int]:
    """Pick `count` distinct positions from `range(population)`."""
    if not 0 < count <= population:
        raise ValueError(f"Cannot select {count} of {population} positions.")
    if count > population * REJECTION_SAMPLING_LIMIT:
        return rng.sample(range(population), count)
    chosen: dict[int, None] = {}
    while len(chosen) < count:
        chosen[rng.randrange(population)] = None
    return list(chosen)


def split_answers(text: str) -> list[str]:
    """Split a submitted message into one answer per line."""
    return text.split("\n")


def format_report(result: EvaluationResult) -> str:
    """Render the score line followed by one line per mistake."""
    lines = [f"Correct {result.correct}/{result.total}"]
    lines.extend(f"{mistake.question} - {mistake.expected}" for mistake in result.mistakes)
    return "\n".join(lines)


def format_task(questions: Sequence[str]) -> str:
    """Render a task prompt listing the questions one per line."""
    header = f"Translate {len(questions)} words from our dictionary, one per line, in the same order:"
    return header + "\n\n" + "\n".join(questions)
