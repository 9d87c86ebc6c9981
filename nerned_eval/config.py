from dataclasses import dataclass, field
from typing import Any, Dict, List

from nerned_eval.types import DEFAULT_KB_PREFIX

DEFAULT_BENCHMARK_TYPES = ["clueweb", "manual", "conll"]


@dataclass
class ComponentConfig:
    """Generic component configuration."""

    name: str
    params: Dict[str, Any] = field(default_factory=dict)


@dataclass
class EvaluationConfig:
    """Top-level evaluation configuration."""

    reader: ComponentConfig = field(default_factory=lambda: ComponentConfig(name="tsv"))
    kb_prefix: str = DEFAULT_KB_PREFIX
    benchmark_types: List[str] = field(default_factory=lambda: list(DEFAULT_BENCHMARK_TYPES))
    stat_filename: str = "stat"
    ner_ned_filename: str = "detail_ner_ned"
    ner_filename: str = "detail_ner"

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "EvaluationConfig":
        reader = ComponentConfig(name="tsv")
        if data.get("reader") is not None:
            entry = data["reader"]
            reader = ComponentConfig(name=entry["name"], params=entry.get("params", {}))

        return EvaluationConfig(
            reader=reader,
            kb_prefix=data.get("kb_prefix", DEFAULT_KB_PREFIX),
            benchmark_types=list(data.get("benchmark_types", DEFAULT_BENCHMARK_TYPES)),
            stat_filename=data.get("stat_filename", "stat"),
            ner_ned_filename=data.get("ner_ned_filename", "detail_ner_ned"),
            ner_filename=data.get("ner_filename", "detail_ner"),
        )
