"""
Span extraction from decoded BIOES sequences.
"""

from typing import Iterable, Iterator, List, Optional, Sequence, Tuple, overload

from nerned_eval.exceptions import SpanOrderError
from nerned_eval.types import Span, TagSymbol


class SpanList(Sequence[Span]):
    """
    Ordered, non-overlapping spans of one sentence.

    The alignment cursor relies on this ordering, so it is checked once
    on construction.
    """

    def __init__(self, spans: Iterable[Span] = ()) -> None:
        self._spans: Tuple[Span, ...] = tuple(spans)
        for prev, cur in zip(self._spans, self._spans[1:]):
            if cur.start <= prev.end:
                raise SpanOrderError(
                    f"Span {cur} starts before the end of preceding span {prev}."
                )

    @overload
    def __getitem__(self, index: int) -> Span:
        ...

    @overload
    def __getitem__(self, index: slice) -> "SpanList":
        ...

    def __getitem__(self, index):
        if isinstance(index, slice):
            return SpanList(self._spans[index])
        return self._spans[index]

    def __len__(self) -> int:
        return len(self._spans)

    def __iter__(self) -> Iterator[Span]:
        return iter(self._spans)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SpanList):
            return self._spans == other._spans
        if isinstance(other, (list, tuple)):
            return list(self._spans) == list(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"SpanList({list(self._spans)!r})"

    def in_kb(self, prefix: str) -> List[Span]:
        return [span for span in self._spans if span.in_kb(prefix)]


def extract_spans(symbols: Sequence[TagSymbol], identifiers: Sequence[str]) -> SpanList:
    """
    Build entity spans from a BIOES sequence.

    A span opens on BEGIN and closes on END; SINGLE emits a one-token span.
    An END with no open span closes a one-token span at its own position.
    The identifier is taken from the token that opened the span.

    Args:
        symbols: Decoded tag symbols, sentinel included
        identifiers: Marker of each token, aligned with symbols

    Returns:
        SpanList in start order
    """
    spans: List[Span] = []
    open_start: Optional[int] = None
    open_id = ""

    for i, (symbol, identifier) in enumerate(zip(symbols, identifiers)):
        if symbol in (TagSymbol.BEGIN, TagSymbol.SINGLE):
            open_start = i
            open_id = identifier

        if symbol in (TagSymbol.END, TagSymbol.SINGLE):
            if open_start is None:
                open_start = i
                open_id = identifier
            spans.append(Span(open_start, i, open_id))
            open_start = None

    return SpanList(spans)
