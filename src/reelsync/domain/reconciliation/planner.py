"""Reconciliation planner: diff a source dataset against the reference store.

Responsibilities of this stage:
- match every source movie against the reference movies
- match experiments on their number (authoritative, no fuzziness)
- emit create/link/fill intents in an order the apply engine can follow
- set aside ambiguous matches and field conflicts for manual review
- report stored links a source experiment no longer lists

Out of scope for this stage:
- any storage access (the reference dataset and links are passed in)
- removing links or overwriting populated fields
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

from reelsync.domain.model import (
    ExperimentField,
    ExperimentKey,
    MovieField,
    is_blank,
)

from .contracts import (
    CreateExperiment,
    CreateMovie,
    MatchTier,
    ReviewItem,
    ReviewKind,
    UpdateField,
)
from .identity import resolve_key, same_entity
from .match import Matcher
from .normalize import normalize, normalize_experiment_number
from .plan import Plan, PlanBuilder
from .policy import DEFAULT_POLICY

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from reelsync.domain.model import (
        Dataset,
        EntityKey,
        ExperimentRecord,
        IdentityKey,
        LinkKey,
        MovieRecord,
    )

    from .contracts import MatchResult
    from .policy import MatchPolicy

log = logging.getLogger(__name__)


@dataclass(slots=True)
class SourceMovie:
    """A distinct source movie with the experiments it was screened in."""

    movie: MovieRecord
    experiment_numbers: list[str] = field(default_factory=list[str])

    def add_experiment(self, experiment_number: str) -> None:
        if experiment_number and experiment_number not in self.experiment_numbers:
            self.experiment_numbers.append(experiment_number)


def build_plan(
    source: Dataset,
    reference: Dataset,
    existing_links: Iterable[LinkKey] = (),
    *,
    policy: MatchPolicy = DEFAULT_POLICY,
) -> Plan:
    """Build the plan converging ``reference`` towards ``source``.

    Pure function: the same inputs always yield the same plan.
    """

    return ReconciliationPlanner(policy=policy).plan(source, reference, existing_links)


@dataclass(slots=True)
class ReconciliationPlanner:
    """Plan builder bound to one matching policy."""

    policy: MatchPolicy = DEFAULT_POLICY

    def plan(
        self,
        source: Dataset,
        reference: Dataset,
        existing_links: Iterable[LinkKey] = (),
    ) -> Plan:
        builder = PlanBuilder()
        links = {
            (movie_key, normalize_experiment_number(number)) for movie_key, number in existing_links
        }
        reference_experiments = {
            normalize_experiment_number(experiment.experiment_number): experiment
            for experiment in reference.experiments
        }

        self._plan_experiments(
            merge_source_experiments(source.experiments),
            reference_experiments,
            builder,
        )
        listed = self._plan_movies(collect_source_movies(source), reference, links, builder)
        self._review_extra_links(listed, links, builder)

        plan = builder.build()
        summary = plan.summary
        log.info(
            "Planned %d intents (%s); tiers: %s; %d items for review",
            summary.total_intents,
            _format_counts(summary.intents),
            _format_counts(summary.tiers),
            len(plan.reviews),
        )
        return plan

    def _plan_experiments(
        self,
        source_experiments: Iterable[ExperimentRecord],
        reference_experiments: Mapping[str, ExperimentRecord],
        builder: PlanBuilder,
    ) -> None:
        for experiment in source_experiments:
            number = experiment.experiment_number
            existing = reference_experiments.get(number)
            if existing is None:
                log.debug("Experiment %s missing from reference", number)
                builder.add_intent(CreateExperiment(experiment=replace(experiment, movies=())))
                continue
            self._plan_fill_ins(
                ExperimentKey(number),
                [
                    (str(name), existing.field_value(name), experiment.field_value(name))
                    for name in ExperimentField
                ],
                builder,
            )

    def _plan_movies(
        self,
        source_movies: Iterable[SourceMovie],
        reference: Dataset,
        links: set[LinkKey],
        builder: PlanBuilder,
    ) -> dict[str, set[IdentityKey]]:
        """Plan movie intents; return the movie keys each source experiment accounts for."""

        matcher = Matcher(reference.movies, policy=self.policy)
        planned_creations: list[MovieRecord] = []
        listed: dict[str, set[IdentityKey]] = {}

        for source_movie in source_movies:
            source_key = resolve_key(source_movie.movie)
            if not source_key.is_external and not source_key.value:
                builder.add_review(_unusable_title_review(source_movie))
                continue

            result = matcher.match(source_movie.movie)
            builder.add_match(result)

            if not result.is_actionable:
                builder.add_review(_ambiguous_review(result, source_movie))
                accounted = {resolve_key(alternate.movie) for alternate in result.alternates}
            else:
                target_key = self._target_key(result, source_movie, planned_creations, builder)
                accounted = {target_key}
                for number in source_movie.experiment_numbers:
                    if (target_key, number) in links:
                        continue
                    builder.add_link(target_key, number)

            for number in source_movie.experiment_numbers:
                listed.setdefault(number, set()).update(accounted)
        return listed

    def _review_extra_links(
        self,
        listed: Mapping[str, set[IdentityKey]],
        links: set[LinkKey],
        builder: PlanBuilder,
    ) -> None:
        """Surface stored links of source experiments that no source movie accounts for."""

        for movie_key, number in sorted(links, key=lambda link: (link[1], link[0])):
            accounted = listed.get(number)
            if accounted is None or movie_key in accounted:
                continue
            log.debug("Stored link %s -> %s not listed by the source", movie_key, number)
            builder.add_review(
                ReviewItem(
                    kind=ReviewKind.EXTRA_LINK,
                    subject=movie_key.token(),
                    detail=(
                        "linked in the store but not listed by the source; "
                        f"remove with: reelsync unlink --movie '{movie_key}' "
                        f"--experiment {number} --confirm"
                    ),
                    experiment_numbers=(number,),
                )
            )

    def _target_key(
        self,
        result: MatchResult,
        source_movie: SourceMovie,
        planned_creations: list[MovieRecord],
        builder: PlanBuilder,
    ) -> IdentityKey:
        if result.tier is MatchTier.UNMATCHED:
            for planned in planned_creations:
                if same_entity(source_movie.movie, planned, policy=self.policy):
                    return resolve_key(planned)
            planned_creations.append(source_movie.movie)
            builder.add_intent(CreateMovie(movie=source_movie.movie))
            return resolve_key(source_movie.movie)

        best = result.best
        if best is None:  # pragma: no cover - guarded by MatchResult
            raise ValueError(f"{result.tier} match without best candidate")
        target_key = resolve_key(best)
        self._plan_fill_ins(
            target_key,
            [
                (str(name), getattr(best, name), getattr(source_movie.movie, name))
                for name in MovieField
            ],
            builder,
        )
        return target_key

    def _plan_fill_ins(
        self,
        entity: EntityKey,
        values: Iterable[tuple[str, str | None, str | None]],
        builder: PlanBuilder,
    ) -> None:
        """Fill empty reference fields; never overwrite populated ones."""

        for name, current, proposed in values:
            if is_blank(proposed):
                continue
            if is_blank(current):
                builder.add_intent(
                    UpdateField(
                        entity=entity,
                        field=name,
                        old_value=current,
                        new_value=proposed,
                    )
                )
                continue
            if normalize(current) != normalize(proposed):
                builder.add_review(
                    ReviewItem(
                        kind=ReviewKind.FIELD_CONFLICT,
                        subject=entity.token(),
                        detail=f"{name}: stored {current!r}, source {proposed!r}",
                    )
                )


def collect_source_movies(source: Dataset) -> list[SourceMovie]:
    """Distinct source movies in first-seen order with their experiment numbers."""

    by_key: dict[IdentityKey, SourceMovie] = {}
    for movie in source.movies:
        by_key.setdefault(resolve_key(movie), SourceMovie(movie=movie))
    for experiment in source.experiments:
        number = normalize_experiment_number(experiment.experiment_number)
        for movie in experiment.movies:
            entry = by_key.setdefault(resolve_key(movie), SourceMovie(movie=movie))
            entry.add_experiment(number)
    return list(by_key.values())


def merge_source_experiments(
    experiments: Iterable[ExperimentRecord],
) -> list[ExperimentRecord]:
    """Collapse repeated experiment numbers, filling gaps from later rows."""

    merged: dict[str, ExperimentRecord] = {}
    for experiment in experiments:
        number = normalize_experiment_number(experiment.experiment_number)
        if not number:
            log.warning("Ignoring experiment without number: %r", experiment.experiment_number)
            continue
        current = merged.get(number)
        if current is None:
            merged[number] = replace(experiment, experiment_number=number)
            continue
        merged[number] = replace(
            current,
            event_date=current.event_date or experiment.event_date,
            host=current.host or experiment.host,
            notes=current.notes or experiment.notes,
            image_url=current.image_url or experiment.image_url,
            movies=current.movies + experiment.movies,
        )
    return list(merged.values())


def _ambiguous_review(result: MatchResult, source_movie: SourceMovie) -> ReviewItem:
    options = ", ".join(
        f"{alternate.movie.label()} {alternate.score:.0%}" for alternate in result.alternates
    )
    return ReviewItem(
        kind=ReviewKind.AMBIGUOUS_MATCH,
        subject=source_movie.movie.label(),
        detail=f"{len(result.alternates)} candidates: {options}",
        match=result,
        experiment_numbers=tuple(source_movie.experiment_numbers),
    )


def _unusable_title_review(source_movie: SourceMovie) -> ReviewItem:
    return ReviewItem(
        kind=ReviewKind.UNUSABLE_TITLE,
        subject=source_movie.movie.label(),
        detail="title is empty after normalization and the record has no external ID",
        experiment_numbers=tuple(source_movie.experiment_numbers),
    )


def _format_counts(counts: Mapping[object, int]) -> str:
    return ", ".join(f"{key}={value}" for key, value in counts.items() if value) or "none"
