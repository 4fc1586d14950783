"""Versioned JSON document describing a reconciliation plan."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003
from typing import Annotated, Final, Literal

from pydantic import BaseModel, ConfigDict, Field

from reelsync.domain.model import SourceTag
from reelsync.domain.reconciliation.contracts import MatchTier, ReviewKind

PROPOSAL_VERSION: Final[int] = 1


class ProposalBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class MovieDocument(ProposalBaseModel):
    title: str
    original_title: str | None = None
    year: str | None = None
    tmdb_id: str | None = None
    imdb_id: str | None = None
    source: SourceTag = SourceTag.MANUAL


class ExperimentDocument(ProposalBaseModel):
    experiment_number: str
    event_date: str | None = None
    host: str | None = None
    notes: str | None = None
    image_url: str | None = None


class CreateMovieDocument(ProposalBaseModel):
    kind: Literal["create_movie"] = "create_movie"
    movie: MovieDocument


class CreateExperimentDocument(ProposalBaseModel):
    kind: Literal["create_experiment"] = "create_experiment"
    experiment: ExperimentDocument


class CreateLinkDocument(ProposalBaseModel):
    kind: Literal["create_link"] = "create_link"
    movie_key: str
    experiment_number: str


class RemoveLinkDocument(ProposalBaseModel):
    kind: Literal["remove_link"] = "remove_link"
    movie_key: str
    experiment_number: str


class UpdateFieldDocument(ProposalBaseModel):
    kind: Literal["update_field"] = "update_field"
    entity: str
    field: str
    old_value: str | None = None
    new_value: str | None = None


IntentDocument = Annotated[
    CreateMovieDocument
    | CreateExperimentDocument
    | CreateLinkDocument
    | RemoveLinkDocument
    | UpdateFieldDocument,
    Field(discriminator="kind"),
]


class ScoredCandidateDocument(ProposalBaseModel):
    movie: MovieDocument
    score: float
    year_difference: int | None = None
    source_index: int


class MatchDocument(ProposalBaseModel):
    candidate: MovieDocument
    tier: MatchTier
    best: MovieDocument | None = None
    score: float = 0.0
    alternates: list[ScoredCandidateDocument] = Field(
        default_factory=list["ScoredCandidateDocument"]
    )
    reason: str | None = None


class ReviewDocument(ProposalBaseModel):
    kind: ReviewKind
    subject: str
    detail: str
    match: MatchDocument | None = None
    experiment_numbers: list[str] = Field(default_factory=list[str])


class SummaryDocument(ProposalBaseModel):
    intents: dict[str, int] = Field(default_factory=dict[str, int])
    tiers: dict[str, int] = Field(default_factory=dict[str, int])
    reviews: dict[str, int] = Field(default_factory=dict[str, int])


class ProposalDocument(ProposalBaseModel):
    version: int = PROPOSAL_VERSION
    generated_at: datetime | None = None
    source: str | None = None
    summary: SummaryDocument = Field(default_factory=SummaryDocument)
    intents: list[IntentDocument] = Field(default_factory=list["IntentDocument"])
    matches: list[MatchDocument] = Field(default_factory=list["MatchDocument"])
    reviews: list[ReviewDocument] = Field(default_factory=list["ReviewDocument"])
