"""Matching threshold configuration."""

from __future__ import annotations

from dataclasses import dataclass

from reelsync.domain.reconciliation.policy import (
    DEFAULT_CONTAINMENT_FLOOR,
    DEFAULT_EXACT_YEAR_TOLERANCE,
    DEFAULT_LIKELY_YEAR_TOLERANCE,
    DEFAULT_STRONG_SIMILARITY,
    DEFAULT_WEAK_SIMILARITY,
    MatchPolicy,
)

from .env import env_float, env_int
from .errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class MatchingConfig:
    strong_similarity: float = DEFAULT_STRONG_SIMILARITY
    weak_similarity: float = DEFAULT_WEAK_SIMILARITY
    exact_year_tolerance: int = DEFAULT_EXACT_YEAR_TOLERANCE
    likely_year_tolerance: int = DEFAULT_LIKELY_YEAR_TOLERANCE
    containment_floor: float = DEFAULT_CONTAINMENT_FLOOR

    def to_policy(self) -> MatchPolicy:
        try:
            return MatchPolicy(
                strong_similarity=self.strong_similarity,
                weak_similarity=self.weak_similarity,
                exact_year_tolerance=self.exact_year_tolerance,
                likely_year_tolerance=self.likely_year_tolerance,
                containment_floor=self.containment_floor,
            )
        except ValueError as exc:
            raise ConfigurationError(f"Invalid matching configuration: {exc}") from exc


def get_matching_config() -> MatchingConfig:
    return MatchingConfig(
        strong_similarity=env_float("REELSYNC_STRONG_SIMILARITY", DEFAULT_STRONG_SIMILARITY),
        weak_similarity=env_float("REELSYNC_WEAK_SIMILARITY", DEFAULT_WEAK_SIMILARITY),
        exact_year_tolerance=env_int(
            "REELSYNC_EXACT_YEAR_TOLERANCE", DEFAULT_EXACT_YEAR_TOLERANCE
        ),
        likely_year_tolerance=env_int(
            "REELSYNC_LIKELY_YEAR_TOLERANCE", DEFAULT_LIKELY_YEAR_TOLERANCE
        ),
        containment_floor=env_float("REELSYNC_CONTAINMENT_FLOOR", DEFAULT_CONTAINMENT_FLOOR),
    )


def get_match_policy() -> MatchPolicy:
    """Build the matching policy from the environment."""

    return get_matching_config().to_policy()
