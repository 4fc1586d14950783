"""Translate between plans and proposal documents."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

from reelsync.domain.model import (
    ExperimentKey,
    ExperimentRecord,
    IdentityKey,
    MovieRecord,
    coerce_field_value,
)
from reelsync.domain.reconciliation.contracts import (
    CreateExperiment,
    CreateLink,
    CreateMovie,
    MatchResult,
    RemoveLink,
    ReviewItem,
    ScoredCandidate,
    UpdateField,
)
from reelsync.domain.reconciliation.plan import Plan

from .schema import (
    CreateExperimentDocument,
    CreateLinkDocument,
    CreateMovieDocument,
    ExperimentDocument,
    MatchDocument,
    MovieDocument,
    ProposalDocument,
    RemoveLinkDocument,
    ReviewDocument,
    ScoredCandidateDocument,
    SummaryDocument,
    UpdateFieldDocument,
)

if TYPE_CHECKING:
    from datetime import datetime

    from reelsync.domain.model import EntityKey
    from reelsync.domain.reconciliation.contracts import MutationIntent

    from .schema import IntentDocument

_EXPERIMENT_TOKEN_PREFIX = "experiment:"


def plan_to_document(
    plan: Plan,
    *,
    source: str | None = None,
    generated_at: datetime | None = None,
) -> ProposalDocument:
    summary = plan.summary
    return ProposalDocument(
        generated_at=generated_at,
        source=source,
        summary=SummaryDocument(
            intents={str(kind): count for kind, count in summary.intents.items()},
            tiers={str(tier): count for tier, count in summary.tiers.items()},
            reviews={str(kind): count for kind, count in summary.reviews.items()},
        ),
        intents=[intent_to_document(intent) for intent in plan.intents],
        matches=[_match_to_document(result) for result in plan.matches],
        reviews=[_review_to_document(item) for item in plan.reviews],
    )


def document_to_plan(document: ProposalDocument) -> Plan:
    """Rebuild a plan; raises ``ValueError`` for malformed keys or values."""

    return Plan(
        intents=tuple(document_to_intent(item) for item in document.intents),
        matches=tuple(_document_to_match(item) for item in document.matches),
        reviews=tuple(_document_to_review(item) for item in document.reviews),
    )


def intent_to_document(intent: MutationIntent) -> IntentDocument:
    match intent:
        case CreateMovie(movie=movie):
            return CreateMovieDocument(movie=_movie_to_document(movie))
        case CreateExperiment(experiment=experiment):
            return CreateExperimentDocument(experiment=_experiment_to_document(experiment))
        case CreateLink(movie_key=movie_key, experiment_number=number):
            return CreateLinkDocument(movie_key=movie_key.token(), experiment_number=number)
        case RemoveLink(movie_key=movie_key, experiment_number=number):
            return RemoveLinkDocument(movie_key=movie_key.token(), experiment_number=number)
        case UpdateField():
            return UpdateFieldDocument(
                entity=intent.entity.token(),
                field=intent.field,
                old_value=intent.old_value,
                new_value=intent.new_value,
            )


def document_to_intent(document: IntentDocument) -> MutationIntent:
    match document:
        case CreateMovieDocument():
            return CreateMovie(movie=_document_to_movie(document.movie))
        case CreateExperimentDocument():
            return CreateExperiment(experiment=_document_to_experiment(document.experiment))
        case CreateLinkDocument():
            return CreateLink(
                movie_key=IdentityKey.parse(document.movie_key),
                experiment_number=document.experiment_number,
            )
        case RemoveLinkDocument():
            return RemoveLink(
                movie_key=IdentityKey.parse(document.movie_key),
                experiment_number=document.experiment_number,
            )
        case UpdateFieldDocument():
            try:
                coerce_field_value(document.field, document.new_value)
            except ValueError as exc:
                raise ValueError(
                    f"Invalid value for {document.field}: {document.new_value!r}"
                ) from exc
            return UpdateField(
                entity=parse_entity_key(document.entity),
                field=document.field,
                old_value=document.old_value,
                new_value=document.new_value,
            )


def parse_entity_key(token: str) -> EntityKey:
    if token.startswith(_EXPERIMENT_TOKEN_PREFIX):
        number = token.removeprefix(_EXPERIMENT_TOKEN_PREFIX).strip()
        if not number:
            raise ValueError(f"Invalid experiment key token: {token!r}")
        return ExperimentKey(number)
    return IdentityKey.parse(token)


def _movie_to_document(movie: MovieRecord) -> MovieDocument:
    return MovieDocument(
        title=movie.title,
        original_title=movie.original_title,
        year=movie.year,
        tmdb_id=movie.tmdb_id,
        imdb_id=movie.imdb_id,
        source=movie.source,
    )


def _document_to_movie(document: MovieDocument) -> MovieRecord:
    return MovieRecord(
        title=document.title,
        original_title=document.original_title,
        year=document.year,
        tmdb_id=document.tmdb_id,
        imdb_id=document.imdb_id,
        source=document.source,
    )


def _experiment_to_document(experiment: ExperimentRecord) -> ExperimentDocument:
    return ExperimentDocument(
        experiment_number=experiment.experiment_number,
        event_date=experiment.event_date.isoformat() if experiment.event_date else None,
        host=experiment.host,
        notes=experiment.notes,
        image_url=experiment.image_url,
    )


def _document_to_experiment(document: ExperimentDocument) -> ExperimentRecord:
    return ExperimentRecord(
        experiment_number=document.experiment_number,
        event_date=date.fromisoformat(document.event_date) if document.event_date else None,
        host=document.host,
        notes=document.notes,
        image_url=document.image_url,
    )


def _match_to_document(result: MatchResult) -> MatchDocument:
    return MatchDocument(
        candidate=_movie_to_document(result.candidate),
        tier=result.tier,
        best=_movie_to_document(result.best) if result.best else None,
        score=result.score,
        alternates=[
            ScoredCandidateDocument(
                movie=_movie_to_document(alternate.movie),
                score=alternate.score,
                year_difference=alternate.year_difference,
                source_index=alternate.source_index,
            )
            for alternate in result.alternates
        ],
        reason=result.reason,
    )


def _document_to_match(document: MatchDocument) -> MatchResult:
    return MatchResult(
        candidate=_document_to_movie(document.candidate),
        tier=document.tier,
        best=_document_to_movie(document.best) if document.best else None,
        score=document.score,
        alternates=tuple(
            ScoredCandidate(
                movie=_document_to_movie(alternate.movie),
                score=alternate.score,
                year_difference=alternate.year_difference,
                source_index=alternate.source_index,
            )
            for alternate in document.alternates
        ),
        reason=document.reason,
    )


def _review_to_document(item: ReviewItem) -> ReviewDocument:
    return ReviewDocument(
        kind=item.kind,
        subject=item.subject,
        detail=item.detail,
        match=_match_to_document(item.match) if item.match else None,
        experiment_numbers=list(item.experiment_numbers),
    )


def _document_to_review(document: ReviewDocument) -> ReviewItem:
    return ReviewItem(
        kind=document.kind,
        subject=document.subject,
        detail=document.detail,
        match=_document_to_match(document.match) if document.match else None,
        experiment_numbers=tuple(document.experiment_numbers),
    )
