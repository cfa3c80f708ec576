"""
Top-k selection over score arrays.

Usage:
    from tfidf_ranking.ranking_utils import select_top_k

    indices, scores = select_top_k(scores, top_k=10)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from numpy.typing import NDArray


def select_top_k(
    scores: NDArray[np.float64],
    top_k: int | None,
    tie_breaker: NDArray | None = None,
) -> tuple[NDArray[np.int64], NDArray[np.float64]]:
    """
    Select the top-k entries of a score array.

    Uses np.argpartition for O(n) selection when k << n and no tie breaker is
    given, falling back to a full sort otherwise.

    Args:
        scores: Score array (N,)
        top_k: Number of top results (None for all)
        tie_breaker: Optional array (N,) ordering equal scores ascending

    Returns:
        (sorted_indices, sorted_scores) in descending score order
    """
    scores = np.asarray(scores, dtype=np.float64)
    n = len(scores)
    if top_k is not None and top_k <= 0:
        return np.array([], dtype=np.int64), np.array([], dtype=np.float64)

    if tie_breaker is not None:
        order = np.lexsort((np.asarray(tie_breaker), -scores))
        if top_k is not None:
            order = order[:top_k]
        return order.astype(np.int64), scores[order]

    if top_k is not None and top_k < n:
        top_k_indices = np.argpartition(-scores, top_k)[:top_k]
        sorted_top_k = top_k_indices[np.argsort(-scores[top_k_indices], kind="stable")]
        return sorted_top_k.astype(np.int64), scores[sorted_top_k]

    sorted_indices = np.argsort(-scores, kind="stable").astype(np.int64)
    return sorted_indices, scores[sorted_indices]
