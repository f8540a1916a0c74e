"""Immutable bidirectional word index."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from .models import DictionaryEntry


@dataclass(frozen=True)
class DictionaryIndex:
    """Read-only lookup between source and target words plus positions.

    Positions are dense ``0..N-1`` in input order. When a word appears in more
    than one pair, the lookup tables keep the last pair seen for it.
    """

    target_by_source: Mapping[str, str]
    source_by_target: Mapping[str, str]
    target_by_position: Mapping[int, str]

    @classmethod
    def build(cls, entries: Iterable[tuple[str, str]]) -> DictionaryIndex:
        """Index `(source, target)` pairs."""
        target_by_source: dict[str, str] = {}
        source_by_target: dict[str, str] = {}
        target_by_position: dict[int, str] = {}
        for position, (source, target) in enumerate(entries):
            target_by_position[position] = target
            target_by_source[source] = target
            source_by_target[target] = source
        if not target_by_position:
            raise ValueError("Dictionary has no entries.")
        return cls(
            target_by_source=MappingProxyType(target_by_source),
            source_by_target=MappingProxyType(source_by_target),
            target_by_position=MappingProxyType(target_by_position),
        )

    def __len__(self) -> int:
        return len(self.target_by_position)

    def entry(self, position: int) -> DictionaryEntry:
        """Resolve a sampled position to its question and expected answer."""
        target = self.target_by_position[position]
        return DictionaryEntry(position=position, source=self.source_by_target[target], target=target)

    def question_for(self, answer: str) -> str:
        """Return the target-language question for an expected answer."""
        return self.target_by_source.get(answer, "")
