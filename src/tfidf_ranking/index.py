"""
Inverted index and document frequency table.

The index maps term -> {doc_id: raw count}. It only grows: counts are
incremented and no entry is ever removed. Document frequencies are derived
from a completed index in one pass by build_document_frequencies().
"""

from __future__ import annotations

import logging
from collections.abc import Hashable, Iterable, Iterator, Mapping, Sequence

import numpy as np
from scipy.sparse import csr_matrix

from tfidf_ranking.normalize import normalize

DocumentID = Hashable

logger = logging.getLogger(__name__)


class InvertedIndex:
    """
    Term -> document -> raw occurrence count.

    Attributes:
        postings (dict[str, dict[DocumentID, int]]): Inner mappings are never empty.
        new_term_counts (dict[DocumentID, int]): For each document, how many terms
            it introduced to the index for the first time. Diagnostic only.
    """

    def __init__(self):
        self.postings: dict[str, dict[DocumentID, int]] = {}
        self.new_term_counts: dict[DocumentID, int] = {}

    def __len__(self) -> int:
        return len(self.postings)

    def __contains__(self, term: object) -> bool:
        return term in self.postings

    def __iter__(self) -> Iterator[str]:
        return iter(self.postings)

    def record_occurrence(self, term: str, doc_id: DocumentID) -> bool:
        """
        Record one occurrence of `term` in `doc_id`.

        Returns:
            True if the term had never been seen in any document before.
        """
        docs = self.postings.get(term)
        if docs is None:
            self.postings[term] = {doc_id: 1}
            is_new = True
        else:
            docs[doc_id] = docs.get(doc_id, 0) + 1
            is_new = False
        self.new_term_counts[doc_id] = self.new_term_counts.get(doc_id, 0) + is_new
        return is_new

    def add_document(self, doc_id: DocumentID, tokens: Iterable[str]) -> int:
        """
        Normalize and record every raw token of a document, in order.

        Returns:
            Number of terms this document introduced to the index.
        """
        self.new_term_counts.setdefault(doc_id, 0)
        for token in tokens:
            self.record_occurrence(normalize(token), doc_id)
        new_terms = self.new_term_counts[doc_id]
        logger.debug("Indexed document %s: %d new terms, vocabulary %d", doc_id, new_terms, len(self))
        return new_terms

    def term_frequency(self, term: str, doc_id: DocumentID) -> int:
        """Raw count of `term` in `doc_id` (0 if absent)."""
        return self.postings.get(term, {}).get(doc_id, 0)

    def postings_for(self, term: str) -> Mapping[DocumentID, int]:
        return self.postings.get(term, {})

    def distinct_terms(self, doc_id: DocumentID) -> int:
        """Number of distinct terms occurring in `doc_id`."""
        return sum(1 for docs in self.postings.values() if doc_id in docs)

    def term_document_matrix(self, doc_ids: Sequence[DocumentID]) -> tuple[list[str], csr_matrix]:
        """
        Sparse term-document matrix of raw counts.

        Args:
            doc_ids: Column order. Documents absent from the index give empty columns.

        Returns:
            (vocabulary, matrix) where matrix has shape (len(vocabulary), len(doc_ids))
            and row i holds the counts of vocabulary[i].
        """
        column = {doc_id: j for j, doc_id in enumerate(doc_ids)}
        vocabulary = list(self.postings)
        rows: list[int] = []
        cols: list[int] = []
        counts: list[int] = []
        for i, term in enumerate(vocabulary):
            for doc_id, count in self.postings[term].items():
                j = column.get(doc_id)
                if j is None:
                    continue
                rows.append(i)
                cols.append(j)
                counts.append(count)
        matrix = csr_matrix(
            (np.array(counts, dtype=np.float64), (np.array(rows, dtype=np.int64), np.array(cols, dtype=np.int64))),
            shape=(len(vocabulary), len(doc_ids)),
        )
        return vocabulary, matrix


def build_document_frequencies(index: InvertedIndex) -> dict[str, int]:
    """
    Document frequency of each term: the number of distinct documents it occurs in.

    Must only be called once the whole corpus has been indexed.
    """
    return {term: len(docs) for term, docs in index.postings.items()}
