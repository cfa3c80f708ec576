"""Tests for TF-IDF scoring and the scoring run lifecycle."""

import math
from collections import Counter

import numpy as np
import pytest
from scipy.sparse import csr_matrix

from tfidf_ranking.errors import PreconditionError
from tfidf_ranking.index import InvertedIndex, build_document_frequencies
from tfidf_ranking.tfidf import TFIDF, ScoreRow, score, score_kernel, score_matrix, top_terms

CORPUS = {
    1: "the quick brown fox jumps over the lazy dog",
    2: "the lazy dog sleeps and the dog dreams of dogs",
    3: "a quick brown dog outpaces a quick red fox",
    4: "foxes and cats are not friends, the fox said",
}


def build_run(corpus: dict) -> TFIDF:
    run = TFIDF(list(corpus))
    for doc_id, text in corpus.items():
        run.add_document(doc_id, text.split())
    run.finalize()
    return run


def as_dict(rows: list[ScoreRow]) -> dict[str, float]:
    return {row.term: row.score for row in rows}


@pytest.fixture
def two_docs():
    """A = 'cat cat dog', B = 'dog dog dog'."""
    return build_run({"A": "cat cat dog", "B": "dog dog dog"})


class TestScoreKernel:
    @pytest.mark.parametrize("df,n", [(1, 1), (1, 2), (3, 7), (5, 1000), (1, 10**9)])
    def test_single_occurrence_scores_one(self, df, n):
        assert score_kernel(1, df, n) == 1.0

    @pytest.mark.parametrize("tf", [1, 2, 3, 100, 10**6])
    @pytest.mark.parametrize("n", [1, 2, 50])
    def test_term_in_every_document_scores_one(self, tf, n):
        assert score_kernel(tf, n, n) == 1.0

    def test_formula(self):
        assert score_kernel(10, 1, 100) == pytest.approx(1 + 1 * 2)
        assert score_kernel(4, 2, 8) == pytest.approx(1 + math.log10(4) * math.log10(4))

    def test_large_values_stay_finite(self):
        value = score_kernel(100, 1, 10**12)
        assert math.isfinite(value)
        assert value == pytest.approx(1 + 2 * 12)


class TestTwoDocumentScenario:
    def test_document_a(self, two_docs):
        scores = as_dict(two_docs.score("A"))
        assert scores.keys() == {"cat", "dog"}
        assert scores["cat"] == pytest.approx(1 + math.log10(2) * math.log10(2))
        assert scores["cat"] == pytest.approx(1.0906, abs=1e-4)
        assert scores["dog"] == 1.0

    def test_document_b(self, two_docs):
        """dog is in every document, cat is absent from B."""
        assert as_dict(two_docs.score("B")) == {"dog": 1.0}

    def test_document_frequency(self, two_docs):
        assert two_docs.document_frequency == {"cat": 1, "dog": 2}
        assert two_docs.corpus_size == 2

    def test_new_term_counts(self, two_docs):
        assert two_docs.new_term_counts == {"A": 2, "B": 0}


class TestScore:
    def test_rows_only_for_present_terms(self):
        run = build_run(CORPUS)
        for doc_id in CORPUS:
            rows = run.score(doc_id)
            assert {row.term for row in rows} == {t for t in run.index if run.index.term_frequency(t, doc_id) > 0}
            assert all(row.doc_id == doc_id for row in rows)
            assert all(row.score >= 1.0 for row in rows)

    def test_missing_document_frequency(self):
        index = InvertedIndex()
        index.add_document(1, ["cat"])
        doc_freq = build_document_frequencies(index)
        index.add_document(2, ["cat", "dog"])
        with pytest.raises(PreconditionError, match="dog"):
            score(index, doc_freq, 2, 2)

    def test_zero_document_frequency(self):
        index = InvertedIndex()
        index.add_document(1, ["cat"])
        with pytest.raises(PreconditionError):
            score(index, {"cat": 0}, 1, 1)

    def test_document_frequency_exceeds_corpus(self):
        index = InvertedIndex()
        index.add_document(1, ["cat"])
        with pytest.raises(PreconditionError, match="exceeds"):
            score(index, {"cat": 3}, 2, 1)

    def test_non_positive_corpus_size(self):
        with pytest.raises(PreconditionError):
            score(InvertedIndex(), {}, 0, 1)

    def test_empty_term_is_scored(self):
        run = build_run({1: "!! cat ?? ...", 2: "dog"})
        scores = as_dict(run.score(1))
        assert scores[""] == pytest.approx(1 + math.log10(3) * math.log10(2))


class TestScoreMatrix:
    def test_agrees_with_per_document_scores(self):
        run = build_run(CORPUS)
        all_rows = run.score_all()
        assert list(all_rows) == list(CORPUS)
        for doc_id in CORPUS:
            expected = as_dict(run.score(doc_id))
            actual = as_dict(all_rows[doc_id])
            assert actual.keys() == expected.keys()
            for term, value in expected.items():
                assert np.isclose(actual[term], value)

    def test_preserves_sparsity(self):
        tf = csr_matrix(np.array([[2, 0, 1], [0, 0, 5]], dtype=np.float64))
        scores = score_matrix(tf, np.array([2, 1]), 3)
        assert scores.nnz == 3
        dense = scores.toarray()
        assert dense[0, 1] == 0.0
        assert np.isclose(dense[0, 0], 1 + math.log10(2) * math.log10(1.5))
        assert dense[0, 2] == 1.0
        assert np.isclose(dense[1, 2], 1 + math.log10(5) * math.log10(3))

    @pytest.mark.parametrize("df", [[0, 1], [1, 4]])
    def test_rejects_invalid_document_frequencies(self, df):
        tf = csr_matrix(np.ones((2, 3)))
        with pytest.raises(PreconditionError):
            score_matrix(tf, np.array(df), 3)

    def test_empty_vocabulary(self):
        scores = score_matrix(csr_matrix((0, 4)), np.array([], dtype=np.int64), 4)
        assert scores.shape == (0, 4)
        assert scores.nnz == 0


class TestTopTerms:
    def test_orders_by_score_then_term(self):
        rows = [
            ScoreRow("b", 1, 1.0),
            ScoreRow("z", 1, 2.5),
            ScoreRow("a", 1, 1.0),
            ScoreRow("m", 1, 1.7),
        ]
        assert [row.term for row in top_terms(rows)] == ["z", "m", "a", "b"]
        assert [row.term for row in top_terms(rows, 2)] == ["z", "m"]

    def test_empty(self):
        assert top_terms([], 5) == []

    def test_keywords(self):
        run = build_run(CORPUS)
        keywords = run.keywords(2, 3)
        assert len(keywords) == 3
        assert keywords[0].term == "dog"
        assert keywords == sorted(keywords, key=lambda row: (-row.score, row.term))


class TestTFIDFLifecycle:
    def test_score_before_finalize(self):
        run = TFIDF([1, 2])
        run.add_document(1, ["cat"])
        run.add_document(2, ["dog"])
        with pytest.raises(PreconditionError, match="finalize"):
            run.score(1)
        with pytest.raises(PreconditionError):
            run.score_all()
        with pytest.raises(PreconditionError):
            run.document_frequency

    def test_add_after_finalize(self):
        run = TFIDF([1])
        run.add_document(1, ["cat"])
        run.finalize()
        with pytest.raises(PreconditionError, match="already built"):
            run.add_document(1, ["dog"])

    def test_finalize_twice(self):
        run = TFIDF([1])
        run.add_document(1, ["cat"])
        run.finalize()
        with pytest.raises(PreconditionError):
            run.finalize()

    def test_finalize_before_all_documents_indexed(self):
        run = TFIDF([1, 2])
        run.add_document(1, ["cat"])
        with pytest.raises(PreconditionError, match="not indexed"):
            run.finalize()
        assert not run.finalized

    def test_unknown_document(self):
        run = TFIDF([1])
        with pytest.raises(PreconditionError, match="not part of the corpus"):
            run.add_document(2, ["cat"])
        run.add_document(1, ["cat"])
        run.finalize()
        with pytest.raises(PreconditionError):
            run.score(2)

    def test_document_indexed_twice(self):
        run = TFIDF([1])
        run.add_document(1, ["cat"])
        with pytest.raises(PreconditionError, match="already indexed"):
            run.add_document(1, ["cat"])

    @pytest.mark.parametrize("doc_ids", [[], [1, 2, 1]])
    def test_invalid_corpus(self, doc_ids):
        with pytest.raises(PreconditionError):
            TFIDF(doc_ids)

    def test_empty_document_counts_toward_corpus_size(self):
        run = build_run({1: "cat dog", 2: "", 3: "cat"})
        assert run.corpus_size == 3
        assert run.score(2) == []
        assert as_dict(run.score(1))["dog"] == 1.0

    def test_independent_runs(self):
        first = build_run({"A": "cat cat dog", "B": "dog dog dog"})
        second = build_run({"A": "cat cat", "B": "cat"})
        assert as_dict(first.score("A"))["cat"] == pytest.approx(1.0906, abs=1e-4)
        assert as_dict(second.score("A")) == {"cat": 1.0}
        assert "dog" not in second.index


class TestIdempotence:
    def test_rerun_produces_identical_rows(self):
        first = build_run(CORPUS)
        second = build_run(CORPUS)
        for doc_id in CORPUS:
            assert Counter(first.score(doc_id)) == Counter(second.score(doc_id))
        assert {d: Counter(r) for d, r in first.score_all().items()} == {
            d: Counter(r) for d, r in second.score_all().items()
        }
