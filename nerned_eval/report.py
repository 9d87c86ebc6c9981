"""
Report files written for one evaluation run.

Each run gets its own directory holding:
- ``stat``: JSON summary of the corpus statistics
- ``detail_ner_ned``: linking verdict per sentence
- ``detail_ner``: tagging error bitmask per scored sentence
"""

import json
import logging
import math
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from nerned_eval.config import DEFAULT_BENCHMARK_TYPES, EvaluationConfig
from nerned_eval.exceptions import OutputDirectoryError
from nerned_eval.metrics import SYMBOL_ORDER, EvaluationStats
from nerned_eval.types import Verdict

logger = logging.getLogger(__name__)

OTHER_BENCHMARK = "others"
ALGORITHM_MARKER = "alg"


def benchmark_type(input_path: str, benchmark_types: Sequence[str] = DEFAULT_BENCHMARK_TYPES) -> str:
    for name in benchmark_types:
        if name in input_path:
            return name
    return OTHER_BENCHMARK


def result_directory_name(
    input_path: str,
    benchmark_types: Sequence[str] = DEFAULT_BENCHMARK_TYPES,
) -> str:
    """
    Name of the result directory for an input file.

    ``.../conll/alg-spacy.v2.tsv`` gives ``conll-spacy-v2``: the benchmark
    type, then the file name from ``alg-`` on, split at dots, keeping
    the first two parts.
    """
    name = Path(input_path).name
    pos = name.find(ALGORITHM_MARKER)
    if pos != -1:
        fields = name[pos:].split(".")
        parts = [fields[0][len(ALGORITHM_MARKER) + 1:]] + fields[1:2]
    else:
        parts = name.split(".")[:2]
    return "-".join([benchmark_type(input_path, benchmark_types)] + parts)


def result_directory(
    input_path: str,
    output_dir: str,
    benchmark_types: Sequence[str] = DEFAULT_BENCHMARK_TYPES,
) -> Path:
    """Create (if needed) and return the result directory for an input file."""
    target = Path(output_dir) / result_directory_name(input_path, benchmark_types)
    try:
        target.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise OutputDirectoryError(f"Cannot create result folder {target}: {exc}") from exc
    return target


def format_duration(seconds: float) -> str:
    total = int(seconds)
    return f"{total // 3600}h {(total % 3600) // 60}m {total % 60}s"


def format_float(value: float) -> str:
    if math.isnan(value):
        return "nan"
    return f"{value:f}"


def stats_to_dict(
    stats: EvaluationStats,
    alg_filename: str = "",
    duration: float = 0.0,
    filesize_ner_ned: int = 0,
    filesize_ner: int = 0,
) -> Dict[str, str]:
    """Flatten statistics into the string-valued ``stat`` layout."""
    report: Dict[str, str] = {
        "duration": format_duration(duration),
        "alg_filename": alg_filename,
        "filesize_ner_ned": str(filesize_ner_ned),
        "filesize_ner": str(filesize_ner),
        "micro_F1_InKB": format_float(stats.micro_f1),
        "macro_F1_InKB": format_float(stats.macro_f1),
        "micro_Tp": str(stats.micro_tp),
        "micro_Fp": str(stats.micro_fp),
        "micro_Fn": str(stats.micro_fn),
        "num_total": str(stats.num_total),
        "num_correct": str(stats.num_correct),
        "num_wrong": str(stats.num_wrong),
        "num_mismatch": str(stats.num_mismatch),
    }
    for symbol in SYMBOL_ORDER:
        counts = stats.token_confusion[symbol]
        report[f"{symbol.value}_tp"] = str(counts.tp)
        report[f"{symbol.value}_fp"] = str(counts.fp)
        report[f"{symbol.value}_fn"] = str(counts.fn)
    return report


class ReportWriter:
    """Writes per-sentence detail logs and the final stat file."""

    def __init__(self, directory: Path, config: Optional[EvaluationConfig] = None) -> None:
        config = config or EvaluationConfig()
        self.directory = Path(directory)
        self.stat_path = self.directory / config.stat_filename
        self.ner_ned_path = self.directory / config.ner_ned_filename
        self.ner_path = self.directory / config.ner_filename
        self.benchmark_types: List[str] = list(config.benchmark_types)
        self._ner_ned = None
        self._ner = None

    def __enter__(self) -> "ReportWriter":
        self.open()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def open(self) -> None:
        logger.info(f"Writing {self.stat_path}, {self.ner_ned_path}, {self.ner_path}")
        self._ner_ned = self.ner_ned_path.open("w", encoding="utf-8")
        self._ner = self.ner_path.open("w", encoding="utf-8")

    def close(self) -> None:
        for handle in (self._ner_ned, self._ner):
            if handle is not None:
                handle.close()
        self._ner_ned = None
        self._ner = None

    def write_sentence(self, result) -> None:
        """Append one sentence to the detail logs."""
        if self._ner_ned is None or self._ner is None:
            raise RuntimeError("ReportWriter is not open.")

        record = result.record
        self._ner_ned.write(f"{record.line_index}\t{record.offset}\t{int(result.verdict)}\n")
        if result.verdict != Verdict.MISMATCH:
            self._ner.write(f"{record.line_index}\t{record.offset}\t{int(result.flags)}\n")

    def write_stats(self, stats: EvaluationStats, input_path: str, duration: float = 0.0) -> Dict[str, str]:
        for handle in (self._ner_ned, self._ner):
            if handle is not None:
                handle.flush()

        report = stats_to_dict(
            stats,
            alg_filename=f"{benchmark_type(input_path, self.benchmark_types)}/{Path(input_path).name}",
            duration=duration,
            filesize_ner_ned=self.ner_ned_path.stat().st_size if self.ner_ned_path.exists() else 0,
            filesize_ner=self.ner_path.stat().st_size if self.ner_path.exists() else 0,
        )
        with self.stat_path.open("w", encoding="utf-8") as f:
            json.dump(report, f, indent=2)
            f.write("\n")
        return report
