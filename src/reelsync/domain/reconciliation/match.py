"""Tiered matching of one candidate movie against a reference pool.

Matching policy:
- exact: equal identity key, shared external ID, or equal normalized title
  with years within the exact tolerance
- admissible: title similarity >= strong threshold, or >= weak threshold with
  years within the likely tolerance
- likely: a single admissible record, or a strictly best one above the
  strong threshold
- ambiguous: everything else with admissible records (manual review only)
- unmatched: no admissible record

Ranking is deterministic: ``(-score, year_difference, source_index)``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Final

from .contracts import MatchResult, MatchTier, ScoredCandidate
from .identity import (
    has_conflicting_external_ids,
    resolve_key,
    same_entity,
    shares_external_id,
    year_difference,
)
from .policy import DEFAULT_POLICY
from .similarity import similarity

if TYPE_CHECKING:
    from collections.abc import Sequence

    from reelsync.domain.model import IdentityKey, MovieRecord

    from .policy import MatchPolicy

log = logging.getLogger(__name__)

UNKNOWN_YEAR_DIFFERENCE: Final[int] = 9999


class Matcher:
    """Match candidates against one reference pool with a fixed policy."""

    def __init__(
        self,
        pool: Sequence[MovieRecord],
        *,
        policy: MatchPolicy = DEFAULT_POLICY,
    ) -> None:
        self.pool: tuple[MovieRecord, ...] = tuple(pool)
        self.policy = policy
        self._pool_keys: tuple[IdentityKey, ...] = tuple(resolve_key(movie) for movie in self.pool)

    def match(self, candidate: MovieRecord) -> MatchResult:
        exact = self._exact_match(candidate)
        if exact is not None:
            log.debug("Exact match for %s -> %s", candidate.label(), exact.label())
            return MatchResult(
                candidate=candidate,
                tier=MatchTier.EXACT,
                best=exact,
                score=1.0,
                reason="exact_match",
            )

        ranked = self._admissible_candidates(candidate)
        result = self._classify(candidate, ranked)
        log.debug(
            "%s match for %s (score=%.3f, admissible=%d)",
            result.tier,
            candidate.label(),
            result.score,
            len(ranked),
        )
        return result

    def _exact_match(self, candidate: MovieRecord) -> MovieRecord | None:
        candidate_key = resolve_key(candidate)
        for movie, key in zip(self.pool, self._pool_keys, strict=True):
            if key == candidate_key or shares_external_id(candidate, movie):
                return movie
        for movie in self.pool:
            if same_entity(candidate, movie, policy=self.policy):
                return movie
        return None

    def _admissible_candidates(self, candidate: MovieRecord) -> list[ScoredCandidate]:
        admissible: list[ScoredCandidate] = []
        for index, movie in enumerate(self.pool):
            if has_conflicting_external_ids(candidate, movie):
                continue
            score = self._title_score(candidate, movie)
            difference = year_difference(candidate.year, movie.year)
            if not self._is_admissible(score, difference):
                continue
            admissible.append(
                ScoredCandidate(
                    movie=movie,
                    score=score,
                    year_difference=difference,
                    source_index=index,
                )
            )
        admissible.sort(key=ranking_key)
        return admissible

    def _title_score(self, candidate: MovieRecord, movie: MovieRecord) -> float:
        score = similarity(candidate.title, movie.title, policy=self.policy)
        if movie.original_title:
            score = max(
                score,
                similarity(candidate.title, movie.original_title, policy=self.policy),
            )
        return score

    def _is_admissible(self, score: float, difference: int | None) -> bool:
        if score >= self.policy.strong_similarity:
            return True
        return (
            score >= self.policy.weak_similarity
            and difference is not None
            and difference <= self.policy.likely_year_tolerance
        )

    def _classify(
        self,
        candidate: MovieRecord,
        ranked: list[ScoredCandidate],
    ) -> MatchResult:
        if not ranked:
            return MatchResult(
                candidate=candidate,
                tier=MatchTier.UNMATCHED,
                reason="no_admissible_candidate",
            )

        top = ranked[0]
        if len(ranked) == 1:
            return MatchResult(
                candidate=candidate,
                tier=MatchTier.LIKELY,
                best=top.movie,
                score=top.score,
                reason="single_admissible_candidate",
            )

        runner_up = ranked[1]
        if top.score > runner_up.score and top.score >= self.policy.strong_similarity:
            return MatchResult(
                candidate=candidate,
                tier=MatchTier.LIKELY,
                best=top.movie,
                score=top.score,
                reason="clear_best_candidate",
            )

        reason = (
            "tied_candidates" if top.score == runner_up.score else "below_strong_threshold"
        )
        return MatchResult(
            candidate=candidate,
            tier=MatchTier.AMBIGUOUS,
            best=top.movie,
            score=top.score,
            alternates=tuple(ranked),
            reason=reason,
        )


def ranking_key(scored: ScoredCandidate) -> tuple[float, int, int]:
    difference = (
        scored.year_difference if scored.year_difference is not None else UNKNOWN_YEAR_DIFFERENCE
    )
    return (-scored.score, difference, scored.source_index)


def match(
    candidate: MovieRecord,
    pool: Sequence[MovieRecord],
    *,
    policy: MatchPolicy = DEFAULT_POLICY,
) -> MatchResult:
    """Find the best correspondence for ``candidate`` within ``pool``."""

    return Matcher(pool, policy=policy).match(candidate)
