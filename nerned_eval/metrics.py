"""
Token- and entity-level statistics for NER+NED evaluation.

Provides:
- The F1-from-counts convention shared by every score
- Per-symbol token confusion counts and the error bitmask
- The corpus accumulator that turns sentence counts into micro/macro F1
"""

import logging
import math
from dataclasses import dataclass, field
from enum import IntFlag
from typing import Dict, Iterable

from nerned_eval.types import TagSymbol, Verdict

logger = logging.getLogger(__name__)


def f1_from_counts(tp: int, fp: int, fn: int) -> float:
    """
    F1 score from raw counts.

    Nothing expected and nothing produced scores 1.0; no true positive
    with any error scores 0.0.
    """
    if tp == 0 and fp == 0 and fn == 0:
        return 1.0

    if tp == 0:
        return 0.0

    precision = tp / (tp + fp)
    recall = tp / (tp + fn)
    return 2 * precision * recall / (precision + recall)


class ErrorFlag(IntFlag):
    """One bit per (symbol, direction) tagging error."""

    NONE = 0
    S_FP = 1 << 0
    B_FP = 1 << 1
    I_FP = 1 << 2
    E_FP = 1 << 3
    O_FP = 1 << 4
    S_FN = 1 << 5
    B_FN = 1 << 6
    I_FN = 1 << 7
    E_FN = 1 << 8
    O_FN = 1 << 9

    @classmethod
    def for_symbol(cls, symbol: TagSymbol, direction: str) -> "ErrorFlag":
        return cls[f"{symbol.value}_{direction.upper()}"]


SYMBOL_ORDER = (
    TagSymbol.BEGIN,
    TagSymbol.INSIDE,
    TagSymbol.OUTSIDE,
    TagSymbol.END,
    TagSymbol.SINGLE,
)


@dataclass
class SymbolCounts:
    tp: int = 0
    fp: int = 0
    fn: int = 0

    @property
    def f1(self) -> float:
        return f1_from_counts(self.tp, self.fp, self.fn)


@dataclass
class TokenConfusion:
    """Per-symbol token classification counts."""

    counts: Dict[TagSymbol, SymbolCounts] = field(
        default_factory=lambda: {symbol: SymbolCounts() for symbol in SYMBOL_ORDER}
    )
    flags: ErrorFlag = ErrorFlag.NONE

    def compare(self, predicted: TagSymbol, gold: TagSymbol) -> None:
        if predicted == gold:
            self.counts[predicted].tp += 1
            return

        self.counts[predicted].fp += 1
        self.counts[gold].fn += 1
        self.flags |= ErrorFlag.for_symbol(predicted, "fp")
        self.flags |= ErrorFlag.for_symbol(gold, "fn")

    def update(self, other: "TokenConfusion") -> None:
        for symbol, counts in other.counts.items():
            mine = self.counts[symbol]
            mine.tp += counts.tp
            mine.fp += counts.fp
            mine.fn += counts.fn

    def __getitem__(self, symbol: TagSymbol) -> SymbolCounts:
        return self.counts[symbol]


@dataclass
class EvaluationStats:
    """Finalized corpus statistics."""

    micro_f1: float
    macro_f1: float
    micro_tp: int
    micro_fp: int
    micro_fn: int
    num_total: int
    num_correct: int
    num_wrong: int
    num_mismatch: int
    token_confusion: TokenConfusion

    @property
    def num_scored(self) -> int:
        return self.num_total - self.num_mismatch


class MetricAccumulator:
    """Running totals over all sentences of one evaluation."""

    def __init__(self) -> None:
        self.token_confusion = TokenConfusion()
        self.micro_tp = 0
        self.micro_fp = 0
        self.micro_fn = 0
        self.macro_f1_sum = 0.0
        self.verdicts: Dict[Verdict, int] = {verdict: 0 for verdict in Verdict}

    @property
    def num_total(self) -> int:
        return sum(self.verdicts.values())

    def record_sentence(
        self,
        token_confusion: TokenConfusion,
        macro_tp: int,
        macro_fp: int,
        macro_fn: int,
        verdict: Verdict,
    ) -> None:
        if verdict == Verdict.MISMATCH:
            self.record_mismatch()
            return

        self.token_confusion.update(token_confusion)
        self.micro_tp += macro_tp
        self.micro_fp += macro_fp
        self.micro_fn += macro_fn
        self.macro_f1_sum += f1_from_counts(macro_tp, macro_fp, macro_fn)
        self.verdicts[verdict] += 1

    def record_mismatch(self) -> None:
        self.verdicts[Verdict.MISMATCH] += 1

    def merge(self, others: Iterable["MetricAccumulator"]) -> None:
        """Fold other accumulators into this one."""
        for other in others:
            self.token_confusion.update(other.token_confusion)
            self.micro_tp += other.micro_tp
            self.micro_fp += other.micro_fp
            self.micro_fn += other.micro_fn
            self.macro_f1_sum += other.macro_f1_sum
            for verdict, count in other.verdicts.items():
                self.verdicts[verdict] += count

    def finalize(self) -> EvaluationStats:
        num_scored = self.num_total - self.verdicts[Verdict.MISMATCH]
        if num_scored == 0:
            logger.warning("No scorable sentences, macro F1 is undefined")
            macro_f1 = math.nan
        else:
            macro_f1 = self.macro_f1_sum / num_scored

        return EvaluationStats(
            micro_f1=f1_from_counts(self.micro_tp, self.micro_fp, self.micro_fn),
            macro_f1=macro_f1,
            micro_tp=self.micro_tp,
            micro_fp=self.micro_fp,
            micro_fn=self.micro_fn,
            num_total=self.num_total,
            num_correct=self.verdicts[Verdict.CORRECT],
            num_wrong=self.verdicts[Verdict.WRONG],
            num_mismatch=self.verdicts[Verdict.MISMATCH],
            token_confusion=self.token_confusion,
        )
