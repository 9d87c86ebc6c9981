"""
Alignment of predicted spans against gold spans.

Both span lists are sorted and non-overlapping, so each direction is a
single merge-join pass: a cursor walks the other list forward and never
moves back.
"""

import logging
from dataclasses import dataclass

from nerned_eval.metrics import f1_from_counts
from nerned_eval.spans import SpanList
from nerned_eval.types import DEFAULT_KB_PREFIX, Span

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AlignmentCounts:
    """Entity-level counts for one sentence."""

    tp: int = 0
    fp: int = 0
    fn: int = 0

    @property
    def f1(self) -> float:
        return f1_from_counts(self.tp, self.fp, self.fn)

    @property
    def is_perfect(self) -> bool:
        return self.fp == 0 and self.fn == 0


class SpanCursor:
    """Forward-only pointer into a SpanList."""

    def __init__(self, spans: SpanList) -> None:
        if not spans:
            raise ValueError("SpanCursor needs at least one span.")
        self._spans = spans
        self._position = 0

    @property
    def position(self) -> int:
        return self._position

    @property
    def current(self) -> Span:
        return self._spans[self._position]

    def seek(self, head: int) -> Span:
        """Advance past spans ending before ``head``, stopping at the last span."""
        last = len(self._spans) - 1
        while self._spans[self._position].end < head and self._position < last:
            self._position += 1
        return self.current


def _count_false_positives(predicted: SpanList, gold: SpanList, kb_prefix: str):
    tp = fp = 0
    cursor = SpanCursor(gold) if gold else None

    for span in predicted:
        if not span.in_kb(kb_prefix):
            continue

        if cursor is None:
            fp += 1
            continue

        candidate = cursor.seek(span.start)
        if candidate == span:
            tp += 1
        elif candidate.contains(span) and not candidate.in_kb(kb_prefix):
            # gold marks this mention as named but unlinkable
            logger.debug(f"Predicted {span} inside out-of-KB gold {candidate}")
        else:
            fp += 1

    return tp, fp


def _count_false_negatives(predicted: SpanList, gold: SpanList, kb_prefix: str) -> int:
    fn = 0
    cursor = SpanCursor(predicted) if predicted else None

    for span in gold:
        if not span.in_kb(kb_prefix):
            continue

        if cursor is None or cursor.seek(span.start) != span:
            fn += 1

    return fn


def align_spans(
    predicted: SpanList,
    gold: SpanList,
    kb_prefix: str = DEFAULT_KB_PREFIX,
) -> AlignmentCounts:
    """
    Count linking hits and misses for one sentence.

    Only in-KB spans drive each pass, but both lists keep their out-of-KB
    spans so the cursor can land on them. A predicted in-KB span that sits
    inside an out-of-KB gold span counts as neither hit nor miss. The gold
    pass has no such exception.

    Args:
        predicted: Spans extracted from the system output
        gold: Spans extracted from the gold annotation
        kb_prefix: Identifier prefix of knowledge-base links

    Returns:
        AlignmentCounts with tp, fp and fn
    """
    tp, fp = _count_false_positives(predicted, gold, kb_prefix)
    fn = _count_false_negatives(predicted, gold, kb_prefix)
    return AlignmentCounts(tp=tp, fp=fp, fn=fn)
