import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional

# Ensure reader registration by importing modules with registry decorators.
from nerned_eval import readers as _readers_pkg  # noqa: F401

from .alignment import AlignmentCounts, align_spans
from .config import EvaluationConfig
from .metrics import ErrorFlag, EvaluationStats, MetricAccumulator, TokenConfusion
from .readers.base import RecordReader
from .registry import readers
from .report import ReportWriter, result_directory
from .spans import SpanList, extract_spans
from .tagging import decode_sequence, parse_marker, with_sentinel
from .types import DEFAULT_KB_PREFIX, SentenceRecord, Verdict

logger = logging.getLogger(__name__)


@dataclass
class SentenceResult:
    """Outcome of scoring one sentence record."""

    record: SentenceRecord
    verdict: Verdict
    counts: AlignmentCounts = field(default_factory=AlignmentCounts)
    confusion: Optional[TokenConfusion] = None
    predicted_spans: SpanList = field(default_factory=SpanList)
    gold_spans: SpanList = field(default_factory=SpanList)

    @property
    def flags(self) -> ErrorFlag:
        if self.confusion is None:
            return ErrorFlag.NONE
        return self.confusion.flags


def _identifiers(tokens: List[str]) -> List[str]:
    return [parse_marker(token) for token in with_sentinel(tokens)]


def score_sentence(record: SentenceRecord, kb_prefix: str = DEFAULT_KB_PREFIX) -> SentenceResult:
    """
    Score one sentence at token level and entity level.

    Sentences whose gold and predicted lengths differ are not scored and
    come back with the MISMATCH verdict.
    """
    if not record.is_scorable:
        return SentenceResult(record=record, verdict=Verdict.MISMATCH)

    predicted_symbols = decode_sequence(record.predicted)
    gold_symbols = decode_sequence(record.gold)

    confusion = TokenConfusion()
    # the sentinel position is not a real token
    for predicted, gold in zip(predicted_symbols[:-1], gold_symbols[:-1]):
        confusion.compare(predicted, gold)

    predicted_spans = extract_spans(predicted_symbols, _identifiers(record.predicted))
    gold_spans = extract_spans(gold_symbols, _identifiers(record.gold))
    counts = align_spans(predicted_spans, gold_spans, kb_prefix=kb_prefix)

    return SentenceResult(
        record=record,
        verdict=Verdict.CORRECT if counts.is_perfect else Verdict.WRONG,
        counts=counts,
        confusion=confusion,
        predicted_spans=predicted_spans,
        gold_spans=gold_spans,
    )


class Evaluator:
    """Scores a corpus of sentence records and reports the statistics."""

    def __init__(self, config: Optional[EvaluationConfig] = None) -> None:
        self.config = config or EvaluationConfig()
        reader_factory = readers.get(self.config.reader.name)
        self.reader: RecordReader = reader_factory(**self.config.reader.params)

    def score(self, record: SentenceRecord, accumulator: MetricAccumulator) -> SentenceResult:
        result = score_sentence(record, kb_prefix=self.config.kb_prefix)
        if result.verdict == Verdict.MISMATCH:
            logger.warning(
                f"Line {record.line_index}: {len(record.gold)} gold tokens vs "
                f"{len(record.predicted)} predicted tokens, skipped"
            )
            accumulator.record_mismatch()
            return result

        counts = result.counts
        accumulator.record_sentence(
            result.confusion, counts.tp, counts.fp, counts.fn, result.verdict
        )
        logger.debug(
            f"Line {record.line_index}: {result.verdict.name} "
            f"(tp={counts.tp}, fp={counts.fp}, fn={counts.fn})"
        )
        return result

    def evaluate(self, records: Iterable[SentenceRecord]) -> EvaluationStats:
        accumulator = MetricAccumulator()
        for record in records:
            self.score(record, accumulator)
        return accumulator.finalize()

    def run(self, input_path: str, output_dir: str) -> Path:
        """
        Evaluate one input file and write the reports.

        Args:
            input_path: Sentence records in the configured reader format
            output_dir: Parent directory of the per-run result directory

        Returns:
            Path of the result directory
        """
        if not Path(input_path).is_file():
            raise FileNotFoundError(f"Input file not found: {input_path}")

        target = result_directory(input_path, output_dir, self.config.benchmark_types)
        writer = ReportWriter(target, self.config)
        logger.info(f"Output path: {target}")

        accumulator = MetricAccumulator()
        started = time.monotonic()
        with writer:
            for record in self.reader.read(input_path):
                writer.write_sentence(self.score(record, accumulator))
            stats = accumulator.finalize()
            writer.write_stats(
                stats,
                input_path=input_path,
                duration=time.monotonic() - started,
            )

        logger.info(
            f"Evaluated {stats.num_total} sentences: micro F1 {stats.micro_f1:.4f}, "
            f"macro F1 {stats.macro_f1:.4f}, {stats.num_mismatch} mismatched"
        )
        return target
