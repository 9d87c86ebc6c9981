"""Shared fixtures for evaluator tests."""

import json
import os
import tempfile
from pathlib import Path
from typing import Iterator, List

import pytest

from nerned_eval.tagging import format_token as tok
from nerned_eval.types import SentenceRecord


# ---------------------------------------------------------------------------
# Sample data fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def gold_tokens() -> List[str]:
    """Gold sentence: 'Barack Obama visited Paris' with two linked entities."""
    return [
        tok("Barack", "Q76"),
        tok("Obama", "I"),
        tok("visited", "O"),
        tok("Paris", "Q90"),
    ]


@pytest.fixture
def wrong_link_tokens() -> List[str]:
    """Same boundaries as gold_tokens, second entity linked to the wrong id."""
    return [
        tok("Barack", "Q76"),
        tok("Obama", "I"),
        tok("visited", "O"),
        tok("Paris", "Q167646"),
    ]


@pytest.fixture
def sample_records(gold_tokens: List[str], wrong_link_tokens: List[str]) -> List[SentenceRecord]:
    """One correct, one wrong and one mismatched sentence."""
    return [
        SentenceRecord(line_index=1, offset=0, gold=gold_tokens, predicted=list(gold_tokens)),
        SentenceRecord(line_index=2, offset=100, gold=gold_tokens, predicted=wrong_link_tokens),
        SentenceRecord(line_index=3, offset=200, gold=gold_tokens, predicted=gold_tokens[:3]),
    ]


def record_line(line_index: int, gold: List[str], predicted: List[str]) -> str:
    return f"{line_index}\t{' '.join(gold)}\t{' '.join(predicted)}\n"


# ---------------------------------------------------------------------------
# Temporary file fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def temp_output_dir() -> Iterator[str]:
    """Create a temporary output directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture
def temp_alg_file(gold_tokens: List[str], wrong_link_tokens: List[str]) -> Iterator[str]:
    """Temporary algorithm output file named like a real conll run."""
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "conll" / "alg-spacy.v2.tsv"
        path.parent.mkdir()
        lines = [
            record_line(1, gold_tokens, gold_tokens),
            record_line(2, gold_tokens, wrong_link_tokens),
            record_line(3, gold_tokens, gold_tokens[:3]),
        ]
        path.write_text("".join(lines), encoding="utf-8")
        yield str(path)


@pytest.fixture
def temp_jsonl_file(gold_tokens: List[str], wrong_link_tokens: List[str]) -> Iterator[str]:
    """Temporary JSONL records file."""
    with tempfile.NamedTemporaryFile(mode="w", suffix=".jsonl", delete=False) as f:
        f.write(json.dumps({"line_index": 7, "gold": gold_tokens, "predicted": gold_tokens}) + "\n")
        f.write(json.dumps({"gold": " ".join(gold_tokens), "predicted": " ".join(wrong_link_tokens)}) + "\n")
        path = f.name
    yield path
    os.unlink(path)
