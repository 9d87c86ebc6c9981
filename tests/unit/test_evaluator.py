"""Unit tests for sentence scoring and in-memory evaluation."""

import pytest

from nerned_eval.alignment import AlignmentCounts
from nerned_eval.config import ComponentConfig, EvaluationConfig
from nerned_eval.evaluator import Evaluator, score_sentence
from nerned_eval.metrics import ErrorFlag
from nerned_eval.tagging import format_token as tok
from nerned_eval.types import SentenceRecord, Span, TagSymbol, Verdict


def record(gold, predicted, line_index=0) -> SentenceRecord:
    return SentenceRecord(line_index=line_index, offset=0, gold=gold, predicted=predicted)


class TestScoreSentence:
    """Tests for score_sentence."""

    def test_identical_sentence_is_correct(self):
        """A prediction equal to the gold is CORRECT with one true positive."""
        gold = [tok("w1", "Q10"), tok("w2", "I"), tok("w3", "O")]
        result = score_sentence(record(gold, list(gold)))
        assert result.verdict == Verdict.CORRECT
        assert result.counts == AlignmentCounts(tp=1, fp=0, fn=0)
        assert result.flags == ErrorFlag.NONE
        assert result.gold_spans == [Span(0, 1, "Q10")]

    def test_missing_prediction_is_wrong(self):
        """A gold entity that is not predicted is a false negative."""
        gold = [tok("w1", "Q10"), tok("w2", "I"), tok("w3", "O")]
        predicted = [tok("w1", "O"), tok("w2", "O"), tok("w3", "O")]
        result = score_sentence(record(gold, predicted))
        assert result.verdict == Verdict.WRONG
        assert result.counts == AlignmentCounts(tp=0, fp=0, fn=1)
        assert result.counts.f1 == 0.0

    def test_missing_prediction_token_confusion(self):
        """Token confusion and flags are filled for a missed entity."""
        gold = [tok("w1", "Q10"), tok("w2", "I"), tok("w3", "O")]
        predicted = [tok("w1", "O"), tok("w2", "O"), tok("w3", "O")]
        result = score_sentence(record(gold, predicted))
        confusion = result.confusion
        assert confusion[TagSymbol.OUTSIDE].tp == 1
        assert confusion[TagSymbol.OUTSIDE].fp == 2
        assert confusion[TagSymbol.BEGIN].fn == 1
        assert confusion[TagSymbol.END].fn == 1
        assert int(result.flags) == 16 + 64 + 256

    def test_length_difference_is_mismatch(self):
        """Sentences of different lengths are not scored."""
        gold = [tok(w, "O") for w in ["a", "b", "c", "d"]]
        predicted = [tok(w, "O") for w in ["a", "b", "c"]]
        result = score_sentence(record(gold, predicted))
        assert result.verdict == Verdict.MISMATCH
        assert result.confusion is None
        assert result.counts == AlignmentCounts()
        assert result.flags == ErrorFlag.NONE

    def test_no_entities_is_correct(self):
        """A sentence without entities scores F1 1.0."""
        tokens = [tok("a", "O"), tok("b", "O")]
        result = score_sentence(record(tokens, list(tokens)))
        assert result.verdict == Verdict.CORRECT
        assert result.counts.f1 == 1.0

    def test_unlinked_prediction_inside_unlinkable_gold_stays_correct(self):
        """A linked prediction inside an unlinked gold entity is not counted."""
        gold = [tok("New", "B"), tok("York", "I"), tok("Times", "I")]
        predicted = [tok("New", "O"), tok("York", "Q60"), tok("Times", "O")]
        result = score_sentence(record(gold, predicted))
        assert result.counts == AlignmentCounts()
        assert result.verdict == Verdict.CORRECT

    def test_custom_kb_prefix(self):
        """The KB prefix decides which identifiers are in-KB."""
        gold = [tok("Obama", "m.02mjmr")]
        result = score_sentence(record(gold, list(gold)), kb_prefix="m.")
        assert result.counts == AlignmentCounts(tp=1)

    def test_empty_sentence(self):
        """An empty sentence is CORRECT."""
        result = score_sentence(record([], []))
        assert result.verdict == Verdict.CORRECT
        assert result.counts == AlignmentCounts()


class TestEvaluator:
    """Tests for Evaluator.evaluate."""

    def test_default_reader(self):
        """The default configuration reads TSV."""
        evaluator = Evaluator()
        assert type(evaluator.reader).__name__ == "TSVRecordReader"

    def test_configured_reader(self):
        """The reader named in the configuration is used."""
        evaluator = Evaluator(EvaluationConfig(reader=ComponentConfig(name="jsonl")))
        assert type(evaluator.reader).__name__ == "JSONLRecordReader"

    def test_unknown_reader(self):
        """An unknown reader name is rejected with the registered names."""
        with pytest.raises(KeyError, match="registered: jsonl, tsv"):
            Evaluator(EvaluationConfig(reader=ComponentConfig(name="xml")))

    def test_evaluate_sample_records(self, sample_records):
        """Micro and macro F1 over the sample corpus."""
        stats = Evaluator().evaluate(sample_records)
        assert stats.num_total == 3
        assert stats.num_correct == 1
        assert stats.num_wrong == 1
        assert stats.num_mismatch == 1
        assert (stats.micro_tp, stats.micro_fp, stats.micro_fn) == (3, 1, 1)
        assert stats.micro_f1 == pytest.approx(0.75)
        assert stats.macro_f1 == pytest.approx(0.75)

    def test_mismatch_has_no_token_counts(self, sample_records):
        """Mismatched sentences add nothing to the token confusion."""
        stats = Evaluator().evaluate(sample_records)
        confusion = stats.token_confusion
        assert confusion[TagSymbol.BEGIN].tp == 2
        assert confusion[TagSymbol.END].tp == 2
        assert confusion[TagSymbol.OUTSIDE].tp == 2
        assert confusion[TagSymbol.SINGLE].tp == 2
        assert sum(c.fp + c.fn for c in confusion.counts.values()) == 0

    def test_evaluation_is_repeatable(self, sample_records):
        """Evaluating the same records twice gives the same statistics."""
        first = Evaluator().evaluate(sample_records)
        second = Evaluator().evaluate(sample_records)
        assert first.micro_f1 == second.micro_f1
        assert first.macro_f1 == second.macro_f1
        assert first.num_total == second.num_total
