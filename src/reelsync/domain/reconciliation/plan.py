"""Reconciliation plan types shared by planner, proposal store and apply engine.

The plan is the contract between:
- matching and diffing (pure, read-only)
- human review of the serialized proposal
- the apply engine (the only stage touching storage)

A plan is assembled once through :class:`PlanBuilder` and never mutated
afterwards.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .contracts import (
    CreateLink,
    IntentKind,
    MatchResult,
    MatchTier,
    MutationIntent,
    ReviewItem,
    ReviewKind,
)

if TYPE_CHECKING:
    from reelsync.domain.model import IdentityKey


@dataclass(frozen=True, slots=True)
class PlanSummary:
    """Counts per intent kind, per match tier and per review kind."""

    intents: dict[IntentKind, int]
    tiers: dict[MatchTier, int]
    reviews: dict[ReviewKind, int]

    @property
    def total_intents(self) -> int:
        return sum(self.intents.values())


@dataclass(frozen=True, slots=True)
class Plan:
    """Immutable, reviewable list of intended mutations."""

    intents: tuple[MutationIntent, ...] = ()
    matches: tuple[MatchResult, ...] = ()
    reviews: tuple[ReviewItem, ...] = ()

    @property
    def summary(self) -> PlanSummary:
        intent_counts = Counter(intent.kind for intent in self.intents)
        tier_counts = Counter(result.tier for result in self.matches)
        review_counts = Counter(item.kind for item in self.reviews)
        return PlanSummary(
            intents={kind: intent_counts.get(kind, 0) for kind in IntentKind},
            tiers={tier: tier_counts.get(tier, 0) for tier in MatchTier},
            reviews={kind: review_counts.get(kind, 0) for kind in ReviewKind},
        )

    @property
    def is_empty(self) -> bool:
        return not self.intents

    def intents_of(self, kind: IntentKind) -> tuple[MutationIntent, ...]:
        return tuple(intent for intent in self.intents if intent.kind is kind)


@dataclass(slots=True)
class PlanBuilder:
    """Accumulate intents and findings, then freeze them into a :class:`Plan`."""

    intents: list[MutationIntent] = field(default_factory=list["MutationIntent"])
    matches: list[MatchResult] = field(default_factory=list["MatchResult"])
    reviews: list[ReviewItem] = field(default_factory=list["ReviewItem"])
    _planned_links: set[tuple[IdentityKey, str]] = field(
        default_factory=set["tuple[IdentityKey, str]"]
    )

    def add_intent(self, intent: MutationIntent) -> None:
        self.intents.append(intent)

    def add_link(self, movie_key: IdentityKey, experiment_number: str) -> bool:
        """Add a ``CreateLink`` once per pair; return whether it was added."""

        pair = (movie_key, experiment_number)
        if pair in self._planned_links:
            return False
        self._planned_links.add(pair)
        self.intents.append(CreateLink(movie_key=movie_key, experiment_number=experiment_number))
        return True

    def add_match(self, result: MatchResult) -> None:
        self.matches.append(result)

    def add_review(self, item: ReviewItem) -> None:
        self.reviews.append(item)

    def build(self) -> Plan:
        return Plan(
            intents=tuple(self.intents),
            matches=tuple(self.matches),
            reviews=tuple(self.reviews),
        )
