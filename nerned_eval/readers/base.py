from typing import Iterator, Protocol

from nerned_eval.types import SentenceRecord


class RecordReader(Protocol):
    """Reads sentence records from a path."""

    def read(self, path: str) -> Iterator[SentenceRecord]:
        ...
