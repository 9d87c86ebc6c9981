import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from nerned_eval.config import EvaluationConfig
from nerned_eval.evaluator import Evaluator
from nerned_eval.exceptions import NerNedEvalError

logger = logging.getLogger("nerned_eval")


class _ArgumentParser(argparse.ArgumentParser):
    """Argument parser that exits with status 1 on usage errors."""

    def error(self, message: str) -> None:  # type: ignore[override]
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="nerned-eval",
        description="Evaluate NER+NED output against gold annotations.",
    )
    parser.add_argument(
        "input",
        type=str,
        help="Algorithm output file with gold and predicted tokens per line.",
    )
    parser.add_argument(
        "output_dir",
        type=str,
        help="Directory in which the result folder is created.",
    )
    parser.add_argument(
        "--config",
        type=str,
        help="Optional evaluation config JSON file.",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity.",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = EvaluationConfig()
        if args.config:
            config_data = json.loads(Path(args.config).read_text(encoding="utf-8"))
            config = EvaluationConfig.from_dict(config_data)

        evaluator = Evaluator(config)
        target = evaluator.run(args.input, args.output_dir)
    except (OSError, NerNedEvalError, KeyError, json.JSONDecodeError) as exc:
        logger.error(str(exc))
        return 1

    print(f"Results written to {target}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
