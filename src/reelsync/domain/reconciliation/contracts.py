"""Shared reconciliation contract components.

This module intentionally holds only plain value types passed between stages:
- match classification (tiers, scored candidates, match results)
- mutation intents (the tagged union consumed by the apply engine)
- review items surfaced for humans

Every field is a plain value so plans can be serialized for review.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from reelsync.domain.model import (
        EntityKey,
        ExperimentRecord,
        IdentityKey,
        MovieRecord,
    )


class MatchTier(StrEnum):
    """Confidence classification of a match."""

    EXACT = "exact"
    LIKELY = "likely"
    AMBIGUOUS = "ambiguous"
    UNMATCHED = "unmatched"


@dataclass(frozen=True, slots=True, kw_only=True)
class ScoredCandidate:
    """One admissible reference record with the evidence that admitted it."""

    movie: MovieRecord
    score: float
    year_difference: int | None
    source_index: int


@dataclass(frozen=True, slots=True, kw_only=True)
class MatchResult:
    """Outcome of matching one candidate record against a reference pool.

    For ``AMBIGUOUS`` results ``best`` is only the top-ranked suggestion; it is
    never acted upon automatically.
    """

    candidate: MovieRecord
    tier: MatchTier
    best: MovieRecord | None = None
    score: float = 0.0
    alternates: tuple[ScoredCandidate, ...] = ()
    reason: str | None = None

    def __post_init__(self) -> None:
        if not 0.0 <= self.score <= 1.0:
            raise ValueError(f"Match score must be within [0, 1], got {self.score}")
        if self.tier in (MatchTier.EXACT, MatchTier.LIKELY) and self.best is None:
            raise ValueError(f"{self.tier} match must name its best candidate")
        if self.tier is MatchTier.AMBIGUOUS and len(self.alternates) < 2:  # noqa: PLR2004
            raise ValueError("Ambiguous match must include at least two alternates")

    @property
    def is_actionable(self) -> bool:
        """Return whether the planner may act on this result automatically."""

        return self.tier is not MatchTier.AMBIGUOUS


class IntentKind(StrEnum):
    """Discriminator of :data:`MutationIntent` members."""

    CREATE_MOVIE = "create_movie"
    CREATE_EXPERIMENT = "create_experiment"
    CREATE_LINK = "create_link"
    REMOVE_LINK = "remove_link"
    UPDATE_FIELD = "update_field"


@dataclass(frozen=True, slots=True, kw_only=True)
class CreateMovie:
    """Insert a movie that has no counterpart in the store."""

    movie: MovieRecord
    kind: Literal[IntentKind.CREATE_MOVIE] = IntentKind.CREATE_MOVIE


@dataclass(frozen=True, slots=True, kw_only=True)
class CreateExperiment:
    """Insert an experiment whose number is absent from the store."""

    experiment: ExperimentRecord
    kind: Literal[IntentKind.CREATE_EXPERIMENT] = IntentKind.CREATE_EXPERIMENT


@dataclass(frozen=True, slots=True, kw_only=True)
class CreateLink:
    """Associate a movie with an experiment."""

    movie_key: IdentityKey
    experiment_number: str
    kind: Literal[IntentKind.CREATE_LINK] = IntentKind.CREATE_LINK


@dataclass(frozen=True, slots=True, kw_only=True)
class RemoveLink:
    """Dissociate a movie from an experiment (destructive, never planned automatically)."""

    movie_key: IdentityKey
    experiment_number: str
    kind: Literal[IntentKind.REMOVE_LINK] = IntentKind.REMOVE_LINK


@dataclass(frozen=True, slots=True, kw_only=True)
class UpdateField:
    """Fill one empty field of an existing entity."""

    entity: EntityKey
    field: str
    old_value: str | None
    new_value: str | None
    kind: Literal[IntentKind.UPDATE_FIELD] = IntentKind.UPDATE_FIELD


type MutationIntent = CreateMovie | CreateExperiment | CreateLink | RemoveLink | UpdateField

DESTRUCTIVE_INTENT_KINDS: frozenset[IntentKind] = frozenset({IntentKind.REMOVE_LINK})


class ReviewKind(StrEnum):
    """Why an item was set aside for a human."""

    AMBIGUOUS_MATCH = "ambiguous_match"
    FIELD_CONFLICT = "field_conflict"
    UNUSABLE_TITLE = "unusable_title"
    EXTRA_LINK = "extra_link"


@dataclass(frozen=True, slots=True, kw_only=True)
class ReviewItem:
    """Finding the planner refuses to act on automatically."""

    kind: ReviewKind
    subject: str
    detail: str
    match: MatchResult | None = None
    experiment_numbers: tuple[str, ...] = ()


def describe_intent(intent: MutationIntent) -> str:
    """One-line human readable rendering of an intent."""

    match intent:
        case CreateMovie(movie=movie):
            return f"create movie {movie.label()}"
        case CreateExperiment(experiment=experiment):
            return f"create experiment {experiment.experiment_number}"
        case CreateLink(movie_key=movie_key, experiment_number=number):
            return f"link {movie_key} -> experiment {number}"
        case RemoveLink(movie_key=movie_key, experiment_number=number):
            return f"unlink {movie_key} -> experiment {number}"
        case UpdateField(entity=entity, field=name, old_value=old, new_value=new):
            return f"set {entity} {name}: {old!r} -> {new!r}"
