"""Candidate ranking for presentation.

The selection score ranks candidates that are already scored. It is not
the safety score: its weights put voice first, then meaning, then scope.
"""

from typing import Sequence, Tuple, TypeVar

from ..models import VoiceScores

SELECTION_WEIGHTS = {
    "stylistic": 0.45,
    "semantic": 0.35,
    "scope": 0.20,
}

T = TypeVar("T")


def selection_score(scores: VoiceScores) -> float:
    return (
        scores.stylistic * SELECTION_WEIGHTS["stylistic"]
        + scores.semantic * SELECTION_WEIGHTS["semantic"]
        + scores.scope * SELECTION_WEIGHTS["scope"]
    )


def rank(candidates: Sequence[T]) -> list:
    """Candidates by descending selection score. Ties keep generation order."""
    return sorted(candidates, key=lambda c: -c.selection_score)


def select_best(candidates: Sequence[T]):
    """Highest-scoring passing candidate, or None."""
    passing = rank([c for c in candidates if c.passed])
    return passing[0] if passing else None


def select_final(candidates: Sequence[T]) -> Tuple[T, bool]:
    """Pick the winner of a candidate pool.

    Returns:
        (winner, fallback_used). When nothing passed, the winner is the
        best of the failures and fallback_used is True.

    Raises:
        ValueError: If the pool is empty.
    """
    if not candidates:
        raise ValueError("Cannot select from an empty candidate pool")
    best = select_best(candidates)
    if best is not None:
        return best, False
    return rank(candidates)[0], True
