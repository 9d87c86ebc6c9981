"""
Tag decoding for backslash-delimited token annotations.

A token reads ``word\\tag\\marker``. The marker is ``O``, ``I`` or the
entity start, where the start is ``B`` or replaced by an identifier. The
BIOES symbol of a token depends on its own marker and on the marker of the
next token.
"""

from typing import List, Sequence

from nerned_eval.types import TagSymbol

FIELD_DELIMITER = "\\"
OUTSIDE_MARKER = "O"
INSIDE_MARKER = "I"
SENTINEL_TOKEN = "du\\mm\\O"


def parse_marker(token: str) -> str:
    """Return the marker field of a token, ``O`` when it is missing."""
    fields = token.split(FIELD_DELIMITER)
    if len(fields) < 3:
        return OUTSIDE_MARKER
    return fields[2]


def decode_tag(marker: str, next_marker: str) -> TagSymbol:
    if marker == OUTSIDE_MARKER:
        return TagSymbol.OUTSIDE

    if marker == INSIDE_MARKER:
        return TagSymbol.INSIDE if next_marker == INSIDE_MARKER else TagSymbol.END

    return TagSymbol.BEGIN if next_marker == INSIDE_MARKER else TagSymbol.SINGLE


def format_token(word: str, marker: str, tag: str = "?") -> str:
    return FIELD_DELIMITER.join([word, tag, marker])


def with_sentinel(tokens: Sequence[str]) -> List[str]:
    return list(tokens) + [SENTINEL_TOKEN]


def decode_sequence(tokens: Sequence[str]) -> List[TagSymbol]:
    """
    Decode a token sequence into BIOES symbols.

    The sentinel token is appended so the last real token has a successor.
    The result holds one symbol per real token followed by the sentinel's
    own symbol (always OUTSIDE).

    Args:
        tokens: Raw token annotations of one sentence

    Returns:
        List of len(tokens) + 1 tag symbols
    """
    markers = [parse_marker(token) for token in with_sentinel(tokens)]
    symbols = [
        decode_tag(marker, next_marker)
        for marker, next_marker in zip(markers, markers[1:])
    ]
    symbols.append(decode_tag(markers[-1], OUTSIDE_MARKER))
    return symbols
