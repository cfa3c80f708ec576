"""
File-system collaborators: reading documents, writing score tables, and
enumerating the corpus.

Documents and score tables are located through filename patterns with a
single "{}" placeholder for the document ID (default: doc{}.txt -> doc{}.csv).
Score tables have one "<term>,<score>" line per term, no header.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from pathlib import Path

from tfidf_ranking.errors import CorpusIOError
from tfidf_ranking.index import DocumentID
from tfidf_ranking.normalize import tokenize
from tfidf_ranking.tfidf import ScoreRow

logger = logging.getLogger(__name__)


def read_tokens(path: str | Path, doc_id: DocumentID | None = None) -> list[str]:
    """
    Read a text file and split it into whitespace-delimited tokens.

    Bytes that are not valid UTF-8 are kept as surrogate escapes; normalization
    later drops them like any other non-ASCII character.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8", errors="surrogateescape")
    except OSError as e:
        raise CorpusIOError(f"Cannot read document {path}: {e}", doc_id=doc_id, path=path) from e
    return tokenize(text)


def format_row(row: ScoreRow) -> str:
    return f"{row.term},{row.score:f}"


def write_scores(path: str | Path, rows: Iterable[ScoreRow], doc_id: DocumentID | None = None) -> int:
    """
    Write one "<term>,<score>" line per row.

    Returns:
        Number of rows written.
    """
    path = Path(path)
    count = 0
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8", newline="\n") as f:
            for row in rows:
                f.write(format_row(row) + "\n")
                count += 1
    except OSError as e:
        raise CorpusIOError(f"Cannot write scores to {path}: {e}", doc_id=doc_id, path=path) from e
    return count


def parse_doc_id(raw: str) -> DocumentID:
    """Plain decimal IDs become ints; anything else (including "07") stays a string."""
    return int(raw) if raw.isdecimal() and str(int(raw)) == raw else raw


def default_doc_ids(n: int) -> list[int]:
    """Document IDs 1..n."""
    return list(range(1, n + 1))


class DocumentStore:
    """
    Maps document IDs to input and output files.

    Args:
        input_dir: Directory holding the documents.
        output_dir: Directory receiving the score tables.
        input_pattern: Input filename pattern with one "{}" placeholder.
        output_pattern: Output filename pattern with one "{}" placeholder.
    """

    def __init__(
        self,
        input_dir: str | Path = ".",
        output_dir: str | Path = ".",
        input_pattern: str = "doc{}.txt",
        output_pattern: str = "doc{}.csv",
    ):
        for pattern in (input_pattern, output_pattern):
            if pattern.count("{}") != 1:
                raise ValueError(f"Filename pattern {pattern!r} must contain exactly one '{{}}' placeholder")
        self.input_dir = Path(input_dir)
        self.output_dir = Path(output_dir)
        self.input_pattern = input_pattern
        self.output_pattern = output_pattern

    def input_path(self, doc_id: DocumentID) -> Path:
        return self.input_dir / self.input_pattern.format(doc_id)

    def output_path(self, doc_id: DocumentID) -> Path:
        return self.output_dir / self.output_pattern.format(doc_id)

    def read(self, doc_id: DocumentID) -> list[str]:
        return read_tokens(self.input_path(doc_id), doc_id=doc_id)

    def write(self, doc_id: DocumentID, rows: Iterable[ScoreRow]) -> Path:
        path = self.output_path(doc_id)
        count = write_scores(path, rows, doc_id=doc_id)
        logger.debug("Wrote %d score rows for document %s to %s", count, doc_id, path)
        return path

    def discover(self) -> list[DocumentID]:
        """
        Document IDs of every input file matching the input pattern.

        Purely numeric IDs are returned as ints. IDs are sorted numerically
        first, then lexically.
        """
        prefix, suffix = self.input_pattern.split("{}")
        matcher = re.compile(re.escape(prefix) + r"(.+)" + re.escape(suffix) + r"\Z")
        found: list[DocumentID] = []
        if not self.input_dir.is_dir():
            raise CorpusIOError(f"Input directory {self.input_dir} does not exist", path=self.input_dir)
        for path in self.input_dir.iterdir():
            match = matcher.match(path.name)
            if match and path.is_file():
                found.append(parse_doc_id(match.group(1)))
        return sorted(found, key=lambda doc_id: (isinstance(doc_id, str), doc_id))
