from __future__ import annotations

import random
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from vocabtrainer.dictionary import DictionaryIndex  # noqa: E402
from vocabtrainer.service import QuizService  # noqa: E402
from vocabtrainer.store import UserRecordStore  # noqa: E402

WORDS = [
    ("soba", "room"),
    ("Sneško Belić", "snowman"),
    ("Srbija", "Serbia"),
    ("sređivati sređujem", "to tidy up"),
    ("sportski građen", "athletic build"),
    ("kuća", "house"),
    ("voda", "water"),
    ("hleb", "bread"),
    ("mleko", "milk"),
    ("grad", "city"),
    ("reka", "river"),
    ("more", "sea"),
]


@pytest.fixture
def index() -> DictionaryIndex:
    return DictionaryIndex.build(WORDS)


@pytest.fixture
def store(index: DictionaryIndex) -> UserRecordStore:
    return UserRecordStore(index)


@pytest.fixture
def service(index: DictionaryIndex, store: UserRecordStore) -> QuizService:
    return QuizService(index, store, rng=random.Random(7))
