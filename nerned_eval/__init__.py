"""
NER+NED evaluation package.

Scores tagged token output of an entity recognition and linking system
against gold annotations: BIOES token confusion, in-KB linking micro/macro
F1 and per-sentence verdicts.
"""

__all__ = [
    "EvaluationConfig",
    "Evaluator",
    "score_sentence",
]

__version__ = "0.1.0"

from .config import EvaluationConfig  # noqa: E402
from .evaluator import Evaluator, score_sentence  # noqa: E402
