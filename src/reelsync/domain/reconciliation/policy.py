"""Matching thresholds for the reconciliation engine.

The defaults were chosen empirically on the experiment catalog: a title
similarity of 0.9 is treated as strong on its own, 0.8 only counts together
with a close year. They are product decisions and therefore parameters.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

DEFAULT_STRONG_SIMILARITY: Final[float] = 0.9
DEFAULT_WEAK_SIMILARITY: Final[float] = 0.8
DEFAULT_EXACT_YEAR_TOLERANCE: Final[int] = 1
DEFAULT_LIKELY_YEAR_TOLERANCE: Final[int] = 2
DEFAULT_CONTAINMENT_FLOOR: Final[float] = 0.9


@dataclass(frozen=True, slots=True, kw_only=True)
class MatchPolicy:
    """Thresholds used by the scorer, matcher and planner."""

    strong_similarity: float = DEFAULT_STRONG_SIMILARITY
    weak_similarity: float = DEFAULT_WEAK_SIMILARITY
    exact_year_tolerance: int = DEFAULT_EXACT_YEAR_TOLERANCE
    likely_year_tolerance: int = DEFAULT_LIKELY_YEAR_TOLERANCE
    containment_floor: float = DEFAULT_CONTAINMENT_FLOOR

    def __post_init__(self) -> None:
        for name in ("strong_similarity", "weak_similarity", "containment_floor"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be within [0, 1], got {value}")
        if self.weak_similarity > self.strong_similarity:
            raise ValueError(
                "weak_similarity must not exceed strong_similarity "
                f"({self.weak_similarity} > {self.strong_similarity})"
            )
        if self.exact_year_tolerance < 0 or self.likely_year_tolerance < 0:
            raise ValueError("Year tolerances must be non-negative")
        if self.exact_year_tolerance > self.likely_year_tolerance:
            raise ValueError("exact_year_tolerance must not exceed likely_year_tolerance")


DEFAULT_POLICY: Final[MatchPolicy] = MatchPolicy()
