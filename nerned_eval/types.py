from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import List


DEFAULT_KB_PREFIX = "Q"


class TagSymbol(str, Enum):
    """Five-state token classification (BIOES)."""

    BEGIN = "B"
    INSIDE = "I"
    OUTSIDE = "O"
    END = "E"
    SINGLE = "S"


class Verdict(IntEnum):
    """Entity-linking verdict for one sentence."""

    CORRECT = 0
    WRONG = 1
    MISMATCH = 2


@dataclass(frozen=True)
class Span:
    """Closed token interval carrying an entity identifier."""

    start: int
    end: int
    identifier: str

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError(f"Span start {self.start} is after end {self.end}.")

    def in_kb(self, prefix: str = DEFAULT_KB_PREFIX) -> bool:
        return self.identifier.startswith(prefix)

    def contains(self, other: "Span") -> bool:
        return self.start <= other.start and self.end >= other.end


@dataclass
class SentenceRecord:
    """One input line: gold and predicted token annotations."""

    line_index: int
    offset: int
    gold: List[str]
    predicted: List[str]

    @property
    def is_scorable(self) -> bool:
        return len(self.gold) == len(self.predicted)
