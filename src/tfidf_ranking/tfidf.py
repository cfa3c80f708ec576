"""
TF-IDF scoring over a fixed corpus.

Formula (per term t and document d with tf > 0):
    score(t, d) = 1 + log10(tf(t, d)) * log10(N / df(t))

The additive 1 is a baseline: a term occurring once in a document, or a term
occurring in every document, always scores exactly 1.0.

Usage:
    from tfidf_ranking.tfidf import TFIDF

    run = TFIDF(["a", "b"])
    run.add_document("a", "cat cat dog".split())
    run.add_document("b", "dog dog dog".split())
    run.finalize()
    rows = run.score("a")
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np
from scipy.sparse import csr_matrix

from tfidf_ranking.errors import PreconditionError
from tfidf_ranking.index import DocumentID, InvertedIndex, build_document_frequencies
from tfidf_ranking.ranking_utils import select_top_k

if TYPE_CHECKING:
    from numpy.typing import NDArray

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScoreRow:
    term: str
    doc_id: DocumentID
    score: float


# -----------------------------------------------------------------------------
# Kernels
# -----------------------------------------------------------------------------


def _check_df(term: str, df: int | None, n: int) -> int:
    if df is None:
        raise PreconditionError(f"No document frequency for term {term!r}; was the table built before indexing finished?")
    if df < 1:
        raise PreconditionError(f"Document frequency of term {term!r} is {df}, expected >= 1")
    if df > n:
        raise PreconditionError(f"Document frequency of term {term!r} ({df}) exceeds corpus size {n}")
    return df


def score_kernel(tf: int, df: int, n: int) -> float:
    """Score one (term, document) pair with tf > 0."""
    return 1.0 + math.log10(tf) * math.log10(n / df)


def score(
    index: InvertedIndex,
    doc_freq: Mapping[str, int],
    corpus_size: int,
    doc_id: DocumentID,
) -> list[ScoreRow]:
    """
    Score every term occurring in `doc_id`.

    Args:
        index: Completed inverted index
        doc_freq: Document frequencies built from the completed index
        corpus_size: Number of documents N in the corpus
        doc_id: Document to score

    Returns:
        One ScoreRow per term with tf > 0, in no particular order.
    """
    if corpus_size < 1:
        raise PreconditionError(f"Corpus size must be positive, got {corpus_size}")
    rows = []
    for term, docs in index.postings.items():
        tf = docs.get(doc_id, 0)
        if tf == 0:
            continue
        df = _check_df(term, doc_freq.get(term), corpus_size)
        rows.append(ScoreRow(term, doc_id, score_kernel(tf, df, corpus_size)))
    return rows


def score_matrix(
    tf_matrix: csr_matrix,
    df_array: NDArray[np.int64],
    n: int,
) -> csr_matrix:
    """
    Vectorized scoring of a sparse term-document matrix.

    Args:
        tf_matrix: Raw counts, shape (vocab_size, N_docs)
        df_array: Document frequency per row (vocab_size,)
        n: Corpus size

    Returns:
        CSR matrix with the same sparsity pattern holding the scores.
    """
    df_array = np.asarray(df_array, dtype=np.float64)
    if df_array.size and (df_array.min() < 1 or df_array.max() > n):
        raise PreconditionError(f"Document frequencies must lie in [1, {n}]")
    idf = np.log10(n / df_array)

    scores = csr_matrix(tf_matrix, dtype=np.float64, copy=True)
    scores.eliminate_zeros()
    row_of_entry = np.repeat(np.arange(scores.shape[0]), np.diff(scores.indptr))
    scores.data = 1.0 + np.log10(scores.data) * idf[row_of_entry]
    return scores


def top_terms(rows: Sequence[ScoreRow], k: int | None = None) -> list[ScoreRow]:
    """Highest-scoring rows first; equal scores ordered by term."""
    if not rows:
        return []
    values = np.array([row.score for row in rows], dtype=np.float64)
    terms = np.array([row.term for row in rows])
    indices, _ = select_top_k(values, k, tie_breaker=terms)
    return [rows[i] for i in indices]


# -----------------------------------------------------------------------------
# Scoring run
# -----------------------------------------------------------------------------


class TFIDF:
    """
    One TF-IDF scoring run over a closed corpus.

    Documents are added while indexing; finalize() then builds the document
    frequency table exactly once, after which the run only answers scoring
    queries.

    Args:
        doc_ids (Sequence[DocumentID]): The complete, ordered corpus.
    """

    def __init__(self, doc_ids: Sequence[DocumentID]):
        self.doc_ids = list(doc_ids)
        if not self.doc_ids:
            raise PreconditionError("Corpus must contain at least one document.")
        if len(set(self.doc_ids)) != len(self.doc_ids):
            raise PreconditionError("Corpus document IDs must be unique.")
        self._members = set(self.doc_ids)
        self._indexed: set[DocumentID] = set()
        self.index = InvertedIndex()
        self._doc_freq: dict[str, int] | None = None

    def __len__(self) -> int:
        return len(self.doc_ids)

    @property
    def corpus_size(self) -> int:
        return len(self.doc_ids)

    @property
    def finalized(self) -> bool:
        return self._doc_freq is not None

    @property
    def document_frequency(self) -> dict[str, int]:
        self._require_finalized()
        return self._doc_freq

    @property
    def new_term_counts(self) -> dict[DocumentID, int]:
        return dict(self.index.new_term_counts)

    def add_document(self, doc_id: DocumentID, tokens: Iterable[str]) -> int:
        """Index all raw tokens of one document. Returns its new-term count."""
        if self.finalized:
            raise PreconditionError(f"Cannot index document {doc_id!r}: document frequencies are already built")
        if doc_id not in self._members:
            raise PreconditionError(f"Document {doc_id!r} is not part of the corpus")
        if doc_id in self._indexed:
            raise PreconditionError(f"Document {doc_id!r} was already indexed")
        self._indexed.add(doc_id)
        return self.index.add_document(doc_id, tokens)

    def finalize(self) -> dict[str, int]:
        """Build the document frequency table from the completed index."""
        if self.finalized:
            raise PreconditionError("Document frequencies were already built for this run")
        missing = [doc_id for doc_id in self.doc_ids if doc_id not in self._indexed]
        if missing:
            raise PreconditionError(f"Documents not indexed yet: {missing}")
        self._doc_freq = build_document_frequencies(self.index)
        logger.info("Indexed %d documents, vocabulary size %d", self.corpus_size, len(self.index))
        return self._doc_freq

    def score(self, doc_id: DocumentID) -> list[ScoreRow]:
        self._require_finalized()
        if doc_id not in self._members:
            raise PreconditionError(f"Document {doc_id!r} is not part of the corpus")
        return score(self.index, self._doc_freq, self.corpus_size, doc_id)

    def score_all(self) -> dict[DocumentID, list[ScoreRow]]:
        """Score every document at once using the sparse term-document matrix."""
        self._require_finalized()
        vocabulary, tf_matrix = self.index.term_document_matrix(self.doc_ids)
        df_array = np.array([self._doc_freq[term] for term in vocabulary], dtype=np.int64)
        scores = score_matrix(tf_matrix, df_array, self.corpus_size).tocsc()

        results: dict[DocumentID, list[ScoreRow]] = {}
        for j, doc_id in enumerate(self.doc_ids):
            start, end = scores.indptr[j], scores.indptr[j + 1]
            results[doc_id] = [
                ScoreRow(vocabulary[i], doc_id, float(value))
                for i, value in zip(scores.indices[start:end], scores.data[start:end])
            ]
        return results

    def keywords(self, doc_id: DocumentID, k: int | None = 10) -> list[ScoreRow]:
        """Top-k terms of a document by score."""
        return top_terms(self.score(doc_id), k)

    def _require_finalized(self) -> None:
        if not self.finalized:
            raise PreconditionError("Document frequencies have not been built; call finalize() after indexing")
