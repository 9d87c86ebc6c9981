"""
Render spaCy documents as tagged token annotations.

A spaCy pipeline with an NER component (and optionally an entity linker
filling ``ent.kb_id_``) can be scored by writing its output in the
``word\\tag\\marker`` token format read by the evaluator.
"""

from typing import List, Sequence

from spacy.tokens import Doc

from nerned_eval.tagging import FIELD_DELIMITER, INSIDE_MARKER, OUTSIDE_MARKER, format_token

BEGIN_MARKER = "B"
UNKNOWN_TAG = "?"


def _clean(text: str) -> str:
    return text.replace(FIELD_DELIMITER, "/").replace(" ", "_").replace("\t", "_")


def doc_to_tokens(doc: Doc, use_tags: bool = False) -> List[str]:
    """
    Convert a Doc into token annotations.

    The first token of an entity carries the entity's KB id, or ``B``
    when it is not linked; following tokens carry ``I``.

    Args:
        doc: Processed spaCy Doc
        use_tags: Put ``token.tag_`` in the tag field instead of ``?``

    Returns:
        One annotation string per token
    """
    tokens: List[str] = []
    for token in doc:
        if token.ent_iob_ == "B":
            marker = _clean(token.ent_kb_id_) or BEGIN_MARKER
        elif token.ent_iob_ == "I":
            marker = INSIDE_MARKER
        else:
            marker = OUTSIDE_MARKER

        tag = (token.tag_ or UNKNOWN_TAG) if use_tags else UNKNOWN_TAG
        tokens.append(format_token(_clean(token.text), marker, tag=_clean(tag)))
    return tokens


def to_record_line(line_index: int, gold: Sequence[str], predicted: Sequence[str]) -> str:
    """Format one line of the evaluator's TSV input."""
    return f"{line_index}\t{' '.join(gold)}\t{' '.join(predicted)}"
