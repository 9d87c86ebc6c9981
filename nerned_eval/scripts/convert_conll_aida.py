"""
Build the CoNLL-2003 gold corpus with Wikidata links.

Inputs, all in one dataset directory:
    AIDA-YAGO2-annotations.tsv   mention annotations (Wikipedia URL, Freebase id)
    eng.train, eng.testa, eng.testb   CoNLL-2003 token files

plus two mapping files exported from Wikidata:
    <https://en.wikipedia.org/wiki/xxx>,<http://www.wikidata.org/entity/Qxxx>
    <http://www.wikidata.org/entity/Qxxx>,"/m/xxx"

Output has one document per line:
    DOC_INDEX <TAB> WORD1\\?\\MARKER <SPACE> WORD2\\?\\MARKER ...

where the marker of an entity's first token is its Wikidata id (``B`` when
no mapping exists), ``I`` continues the entity and ``O`` is outside.
"""
import argparse
import logging
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Tuple

from nerned_eval.tagging import format_token

logger = logging.getLogger(__name__)

INPUT_AIDA = "AIDA-YAGO2-annotations.tsv"
DATASET_FILES = ["eng.train", "eng.testa", "eng.testb"]
OUTPUT_FILE_NAME = "conll-wikidata-iob-annotations"

DOCSTART = "-DOCSTART-"
WIKIDATA_ENTITY_PREFIX_LEN = len("<http://www.wikidata.org/entity/")


def parse_args():
    ap = argparse.ArgumentParser(
        description="Generate CoNLL-2003 gold tokens with Wikidata annotations."
    )
    ap.add_argument("dataset_dir", help=f"Directory with {INPUT_AIDA} and {', '.join(DATASET_FILES)}")
    ap.add_argument("wikipedia_map", help="Wikipedia URL to Wikidata id mapping CSV")
    ap.add_argument("freebase_map", help="Wikidata id to Freebase id mapping CSV")
    ap.add_argument("output_dir", help="Directory for the output file")
    return ap.parse_args()


def load_wikipedia_map(lines: Iterable[str]) -> Dict[str, str]:
    """Map ``http://en.wikipedia.org/wiki/xxx`` URLs to Wikidata ids."""
    mapping: Dict[str, str] = {}
    for line in lines:
        fields = line.rstrip("\n").split(",")
        if len(fields) != 2 or len(fields[0]) < 8 or len(fields[1]) < 34:
            continue
        url = "http" + fields[0][:-1][len("<https"):]
        mapping[url] = fields[1][:-1][WIKIDATA_ENTITY_PREFIX_LEN:]
    return mapping


def load_freebase_map(lines: Iterable[str]) -> Dict[str, str]:
    """Map Freebase mids (``/m/xxx``) to Wikidata ids."""
    mapping: Dict[str, str] = {}
    for line in lines:
        fields = line.rstrip("\n").split(",")
        if len(fields) != 2 or len(fields[0]) < 34 or len(fields[1]) < 4:
            continue
        wikidata_id = fields[0][:-1][WIKIDATA_ENTITY_PREFIX_LEN:]
        mapping[fields[1][:-1][1:]] = wikidata_id
    return mapping


def unescape_word(word: str) -> str:
    return word.replace("&amp;", "&", 1)


class ConllAidaConverter:
    """Walks CoNLL token files and AIDA annotations in lockstep."""

    def __init__(self, wikipedia_map: Dict[str, str], freebase_map: Dict[str, str]) -> None:
        self.wikipedia_map = wikipedia_map
        self.freebase_map = freebase_map

    def link(self, annotation: List[str]) -> str:
        if len(annotation) >= 5 and annotation[4] in self.freebase_map:
            return self.freebase_map[annotation[4]]
        if len(annotation) >= 3 and annotation[2] in self.wikipedia_map:
            return self.wikipedia_map[annotation[2]]
        return "B"

    def convert(
        self,
        annotations: Iterator[str],
        datasets: Iterable[Iterable[str]],
    ) -> Iterator[Tuple[int, List[str]]]:
        """
        Yield ``(doc_index, tokens)`` per document.

        Args:
            annotations: Lines of the AIDA annotation file
            datasets: Line iterables of the CoNLL files, in order

        Raises:
            ValueError: when the annotation file is out of step with the
                document boundaries of the CoNLL files
        """
        doc_index = 0
        words: List[str] = []
        annotation: List[str] = []

        for dataset in datasets:
            prev_type = "O"
            for line in dataset:
                if not line.strip():
                    continue
                fields = line.rstrip("\n").split(" ")

                if fields[0] == DOCSTART:
                    if doc_index > 0:
                        yield doc_index, words
                        words = []
                        prev_type = "O"
                        # blank line closing the previous document
                        next(annotations, None)
                    doc_index += 1

                    header = next(annotations, None)
                    if header is not None and not header.startswith(DOCSTART):
                        raise ValueError(
                            f"Document {doc_index}: expected {DOCSTART} line in "
                            f"annotations, got [{header.rstrip()}]"
                        )
                    continue

                if len(fields) != 4:
                    logger.warning(f"Unexpected format in document {doc_index}: {line.rstrip()}")
                    continue

                cur_type = fields[3]
                if cur_type == "O":
                    marker = "O"
                else:
                    if cur_type != prev_type:
                        annotation_line = next(annotations, None)
                        if annotation_line is not None:
                            annotation = annotation_line.rstrip("\n").split("\t")
                    marker = "I" if cur_type == prev_type else self.link(annotation)

                words.append(format_token(unescape_word(fields[0]), marker))
                prev_type = "I" + cur_type[1:] if cur_type.startswith("B") else cur_type

        yield doc_index, words


def write_corpus(documents: Iterable[Tuple[int, List[str]]], out: Path) -> int:
    count = 0
    with out.open("w", encoding="utf-8") as w:
        for doc_index, words in documents:
            w.write(f"{doc_index}\t{' '.join(words)}\n")
            count += 1
    return count


def _read_lines(path: Path) -> Iterator[str]:
    with path.open("r", encoding="utf-8", errors="ignore") as f:
        yield from f


def main():
    args = parse_args()
    dataset_dir = Path(args.dataset_dir)
    out = Path(args.output_dir) / OUTPUT_FILE_NAME
    print(f"Output path: {out}")

    print("Loading wikipedia url mapping file ...")
    wikipedia_map = load_wikipedia_map(_read_lines(Path(args.wikipedia_map)))
    print("Loading freebase id mapping file ...")
    freebase_map = load_freebase_map(_read_lines(Path(args.freebase_map)))

    converter = ConllAidaConverter(wikipedia_map, freebase_map)
    annotations = _read_lines(dataset_dir / INPUT_AIDA)
    datasets = (_read_lines(dataset_dir / name) for name in DATASET_FILES)
    count = write_corpus(converter.convert(annotations, datasets), out)
    print(f"Wrote {count} documents to {out}")


if __name__ == "__main__":
    main()
