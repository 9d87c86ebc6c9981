import json
from pathlib import Path
from typing import Any, Dict, Iterator, List, Union

from nerned_eval.exceptions import RecordFormatError
from nerned_eval.registry import readers
from nerned_eval.types import SentenceRecord

TOKEN_SEPARATOR = " "


def split_tokens(raw: Union[None, str, List[str]]) -> List[str]:
    if raw is None:
        return []
    if isinstance(raw, list):
        return [str(token) for token in raw]
    return [token for token in raw.split(TOKEN_SEPARATOR) if token]


def parse_line_index(raw: object, path: str, offset: int) -> int:
    try:
        return int(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise RecordFormatError(
            f"{path}: invalid line index {raw!r} at byte offset {offset}."
        ) from exc


@readers.register("tsv")
class TSVRecordReader:
    """
    Reads ``line_index<TAB>gold_tokens<TAB>predicted_tokens`` lines.

    The byte offset of each line is kept so a verdict can be traced back
    to the input with a seek.
    """

    def __init__(self, encoding: str = "utf-8", errors: str = "replace") -> None:
        self.encoding = encoding
        self.errors = errors

    def read(self, path: str) -> Iterator[SentenceRecord]:
        with Path(path).open("rb") as f:
            offset = 0
            for raw_line in f:
                line_offset = offset
                offset += len(raw_line)
                line = raw_line.decode(self.encoding, errors=self.errors).rstrip("\r\n")
                if not line.strip():
                    continue

                fields = line.split("\t")
                fields += [""] * (3 - len(fields))
                yield SentenceRecord(
                    line_index=parse_line_index(fields[0], path, line_offset),
                    offset=line_offset,
                    gold=split_tokens(fields[1]),
                    predicted=split_tokens(fields[2]),
                )


@readers.register("jsonl")
class JSONLRecordReader:
    """Reads JSONL where each line has ``gold`` and ``predicted`` tokens."""

    def __init__(
        self,
        gold_field: str = "gold",
        predicted_field: str = "predicted",
        index_field: str = "line_index",
    ) -> None:
        self.gold_field = gold_field
        self.predicted_field = predicted_field
        self.index_field = index_field

    def read(self, path: str) -> Iterator[SentenceRecord]:
        with Path(path).open("rb") as f:
            offset = 0
            for i, raw_line in enumerate(f):
                line_offset = offset
                offset += len(raw_line)
                if not raw_line.strip():
                    continue

                try:
                    data = json.loads(raw_line)
                except ValueError as exc:
                    raise RecordFormatError(
                        f"{path}: invalid JSON at byte offset {line_offset}."
                    ) from exc

                if not isinstance(data, dict):
                    raise RecordFormatError(
                        f"{path}: expected a JSON object at byte offset {line_offset}, "
                        f"got {type(data).__name__}."
                    )

                yield SentenceRecord(
                    line_index=parse_line_index(
                        data.get(self.index_field, i), path, line_offset
                    ),
                    offset=line_offset,
                    gold=self._tokens(data, self.gold_field, path, line_offset),
                    predicted=self._tokens(data, self.predicted_field, path, line_offset),
                )

    @staticmethod
    def _tokens(data: Dict[str, Any], key: str, path: str, offset: int) -> List[str]:
        value = data.get(key)
        if value is not None and not isinstance(value, (str, list)):
            raise RecordFormatError(
                f"{path}: field {key!r} at byte offset {offset} must be a string "
                f"or a list of tokens, got {type(value).__name__}."
            )
        return split_tokens(value)
