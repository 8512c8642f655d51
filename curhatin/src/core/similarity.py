"""
Curhatin - Similarity Ranker
=============================
Pure scoring helpers used by the RAG engine.  No I/O.

``cosine_similarity`` returns exactly ``0.0`` for vectors of different
length (which covers empty stored embeddings) and for any vector whose
magnitude is exactly zero.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from typing import TypeVar

T = TypeVar("T")


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Return ``dot(a, b) / (|a| * |b|)``, or ``0.0`` on degenerate input."""
    if len(a) != len(b):
        return 0.0

    dot_product = sum(x * y for x, y in zip(a, b))
    magnitude_a = math.sqrt(sum(x * x for x in a))
    magnitude_b = math.sqrt(sum(y * y for y in b))

    if magnitude_a == 0.0 or magnitude_b == 0.0:
        return 0.0

    return dot_product / (magnitude_a * magnitude_b)


def rank(query: Sequence[float], candidates: Iterable[tuple[T, Sequence[float]]]) -> list[tuple[T, float]]:
    """
    Score every candidate against *query* and sort descending by score.

    Parameters
    ----------
    query
        The query embedding.
    candidates
        ``(item, embedding)`` pairs.

    Returns
    -------
    list[tuple[T, float]]
        ``(item, score)`` pairs, highest score first.  The relative order
        of equal scores is not part of the contract.
    """
    scored = [(item, cosine_similarity(query, vector)) for item, vector in candidates]
    scored.sort(key=lambda pair: pair[1], reverse=True)
    return scored
