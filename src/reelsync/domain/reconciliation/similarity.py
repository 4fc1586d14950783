"""Bounded title similarity scoring.

The score is a normalized Levenshtein similarity over the fuzzy comparison
forms, with two corrections the catalog data needs:

- containment: subtitle and suffix variations ("Cobra" vs "Cobra: The Movie")
  are floored at the policy's containment floor
- token overlap: reordered words are scored by their Jaccard overlap when it
  beats the character-level score

All corrections are symmetric, so ``similarity(a, b) == similarity(b, a)``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from rapidfuzz.distance import Levenshtein

from .normalize import normalize_for_fuzzy_match
from .policy import DEFAULT_POLICY

if TYPE_CHECKING:
    from .policy import MatchPolicy


def edit_distance(left: str, right: str) -> int:
    """Unit-cost Levenshtein distance (insert, delete, substitute)."""

    return Levenshtein.distance(left, right)


def levenshtein_similarity(left: str, right: str) -> float:
    """Return ``(max_len - distance) / max_len`` for two already-normalized strings."""

    if not left and not right:
        return 1.0
    if not left or not right:
        return 0.0
    return Levenshtein.normalized_similarity(left, right)


def token_overlap(left: str, right: str) -> float:
    """Jaccard overlap of the word sets of two already-normalized strings."""

    left_tokens = set(left.split())
    right_tokens = set(right.split())
    if not left_tokens and not right_tokens:
        return 1.0
    union = left_tokens | right_tokens
    return len(left_tokens & right_tokens) / len(union)


def similarity(
    left: str | None,
    right: str | None,
    *,
    policy: MatchPolicy = DEFAULT_POLICY,
) -> float:
    """Score how alike two titles are, in ``[0, 1]``."""

    norm_left = normalize_for_fuzzy_match(left)
    norm_right = normalize_for_fuzzy_match(right)

    if not norm_left and not norm_right:
        return 1.0
    if not norm_left or not norm_right:
        return 0.0
    if norm_left == norm_right:
        return 1.0

    score = max(
        levenshtein_similarity(norm_left, norm_right),
        token_overlap(norm_left, norm_right),
    )
    if norm_left in norm_right or norm_right in norm_left:
        score = max(score, policy.containment_floor)
    return min(score, 1.0)
