"""Exception taxonomy for TF-IDF scoring runs."""

from __future__ import annotations

from pathlib import Path


class TFIDFError(Exception):
    """Base class for every error raised by tfidf_ranking."""


class PreconditionError(TFIDFError):
    """
    Raised when the indexing/scoring phases are used out of order.

    Examples: recording a document after document frequencies were built,
    scoring before they were built, or a document frequency table that does
    not cover the index it is scored against.
    """


class CorpusIOError(TFIDFError):
    """A document could not be read, or its scores could not be written."""

    def __init__(self, message: str, doc_id=None, path: str | Path | None = None):
        super().__init__(message)
        self.doc_id = doc_id
        self.path = Path(path) if path is not None else None
