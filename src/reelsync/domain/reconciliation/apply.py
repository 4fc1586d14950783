"""Apply engine: execute a plan against a storage port.

Responsibilities of this stage:
- execute intents sequentially, in plan order
- stay idempotent: every intent re-checks current state before writing
- contain storage failures per intent; one failure never aborts the batch
- honour cancellation and limits between intents only

Out of scope for this stage:
- transaction control (each storage write is expected to be durable)
- deciding *what* to change (that is the planner's job)
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from reelsync.domain.model import (
    EntityType,
    ExperimentField,
    ExperimentKey,
    MovieField,
    coerce_field_value,
    is_blank,
)
from reelsync.domain.ports import ConflictError, NotFoundError, StorageError

from .contracts import (
    DESTRUCTIVE_INTENT_KINDS,
    CreateExperiment,
    CreateLink,
    CreateMovie,
    RemoveLink,
    UpdateField,
    describe_intent,
)
from .identity import resolve_key
from .normalize import normalize, normalize_experiment_number

if TYPE_CHECKING:
    from collections.abc import Callable

    from reelsync.domain.model import IdentityKey
    from reelsync.domain.ports import EntityId, StoragePort

    from .contracts import MutationIntent
    from .plan import Plan

log = logging.getLogger(__name__)

type AbortSignal = Callable[[], bool]

_MOVIE_FIELDS = frozenset(str(name) for name in MovieField)
_EXPERIMENT_FIELDS = frozenset(str(name) for name in ExperimentField)


class ApplyOutcome(StrEnum):
    APPLIED = "applied"
    ALREADY_SATISFIED = "already_satisfied"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True, slots=True, kw_only=True)
class ApplyReport:
    """Outcome of one intent; ``reason`` explains skips and failures."""

    intent: MutationIntent
    outcome: ApplyOutcome
    reason: str | None = None


@dataclass(slots=True)
class ApplyResult:
    """Per-intent reports of one apply run."""

    reports: list[ApplyReport] = field(default_factory=list[ApplyReport])
    aborted: bool = False

    @property
    def counts(self) -> dict[ApplyOutcome, int]:
        counter = Counter(report.outcome for report in self.reports)
        return {outcome: counter.get(outcome, 0) for outcome in ApplyOutcome}

    def of(self, outcome: ApplyOutcome) -> list[ApplyReport]:
        return [report for report in self.reports if report.outcome is outcome]

    @property
    def applied(self) -> int:
        return self.counts[ApplyOutcome.APPLIED]

    @property
    def failed(self) -> int:
        return self.counts[ApplyOutcome.FAILED]


def apply_plan(
    plan: Plan,
    storage: StoragePort,
    *,
    limit: int | None = None,
    should_abort: AbortSignal | None = None,
    allow_destructive: bool = False,
) -> ApplyResult:
    """Execute ``plan`` against ``storage`` and report every intent.

    ``limit`` caps the number of intents processed; ``should_abort`` is polled
    before each intent. Intents left over are reported as skipped and the
    result is flagged as aborted. Running the same plan again is safe.
    """

    if limit is not None and limit < 0:
        raise ValueError(f"limit must be non-negative, got {limit}")

    applier = PlanApplier(storage, allow_destructive=allow_destructive)
    result = ApplyResult()
    intents = plan.intents

    for index, intent in enumerate(intents):
        stop_reason = _stop_reason(index, limit, should_abort)
        if stop_reason is not None:
            remaining = intents[index:]
            log.warning("Stopping apply (%s); %d intents left", stop_reason, len(remaining))
            result.aborted = True
            result.reports.extend(
                ApplyReport(intent=left, outcome=ApplyOutcome.SKIPPED, reason="aborted")
                for left in remaining
            )
            break
        result.reports.append(applier.apply(intent))

    counts = result.counts
    log.info(
        "Apply finished: %d applied, %d already satisfied, %d skipped, %d failed%s",
        counts[ApplyOutcome.APPLIED],
        counts[ApplyOutcome.ALREADY_SATISFIED],
        counts[ApplyOutcome.SKIPPED],
        counts[ApplyOutcome.FAILED],
        " (aborted)" if result.aborted else "",
    )
    return result


def _stop_reason(
    index: int,
    limit: int | None,
    should_abort: AbortSignal | None,
) -> str | None:
    if limit is not None and index >= limit:
        return f"limit of {limit} reached"
    if should_abort is not None and should_abort():
        return "abort requested"
    return None


class PlanApplier:
    """Apply single intents against one storage port."""

    def __init__(self, storage: StoragePort, *, allow_destructive: bool = False) -> None:
        self.storage = storage
        self.allow_destructive = allow_destructive

    def apply(self, intent: MutationIntent) -> ApplyReport:
        description = describe_intent(intent)
        try:
            outcome, reason = self._dispatch(intent)
        except NotFoundError as exc:
            outcome, reason = ApplyOutcome.SKIPPED, f"not_found: {exc}"
        except StorageError as exc:
            outcome, reason = ApplyOutcome.FAILED, f"{type(exc).__name__}: {exc}"

        if outcome in (ApplyOutcome.SKIPPED, ApplyOutcome.FAILED):
            log.warning("%s %s (%s)", outcome, description, reason)
        else:
            log.debug("%s %s", outcome, description)
        return ApplyReport(intent=intent, outcome=outcome, reason=reason)

    def _dispatch(self, intent: MutationIntent) -> tuple[ApplyOutcome, str | None]:
        if intent.kind in DESTRUCTIVE_INTENT_KINDS and not self.allow_destructive:
            return ApplyOutcome.SKIPPED, "destructive_not_allowed"
        match intent:
            case CreateMovie():
                return self._create_movie(intent)
            case CreateExperiment():
                return self._create_experiment(intent)
            case CreateLink():
                return self._create_link(intent)
            case RemoveLink():
                return self._remove_link(intent)
            case UpdateField():
                return self._update_field(intent)

    def _create_movie(self, intent: CreateMovie) -> tuple[ApplyOutcome, str | None]:
        if self.storage.find_movie(resolve_key(intent.movie)) is not None:
            return ApplyOutcome.ALREADY_SATISFIED, None
        try:
            self.storage.create_movie(intent.movie)
        except ConflictError:
            return ApplyOutcome.ALREADY_SATISFIED, "conflict"
        return ApplyOutcome.APPLIED, None

    def _create_experiment(self, intent: CreateExperiment) -> tuple[ApplyOutcome, str | None]:
        number = normalize_experiment_number(intent.experiment.experiment_number)
        if self.storage.find_experiment(number) is not None:
            return ApplyOutcome.ALREADY_SATISFIED, None
        try:
            self.storage.create_experiment(intent.experiment)
        except ConflictError:
            return ApplyOutcome.ALREADY_SATISFIED, "conflict"
        return ApplyOutcome.APPLIED, None

    def _create_link(self, intent: CreateLink) -> tuple[ApplyOutcome, str | None]:
        ids = self._resolve_link(intent.movie_key, intent.experiment_number)
        if isinstance(ids, str):
            return ApplyOutcome.SKIPPED, ids
        movie_id, experiment_id = ids
        if self.storage.link_exists(movie_id, experiment_id):
            return ApplyOutcome.ALREADY_SATISFIED, None
        try:
            self.storage.create_link(movie_id, experiment_id)
        except ConflictError:
            return ApplyOutcome.ALREADY_SATISFIED, "conflict"
        return ApplyOutcome.APPLIED, None

    def _remove_link(self, intent: RemoveLink) -> tuple[ApplyOutcome, str | None]:
        ids = self._resolve_link(intent.movie_key, intent.experiment_number)
        if isinstance(ids, str):
            return ApplyOutcome.SKIPPED, ids
        if self.storage.remove_link(*ids):
            return ApplyOutcome.APPLIED, None
        return ApplyOutcome.ALREADY_SATISFIED, None

    def _update_field(self, intent: UpdateField) -> tuple[ApplyOutcome, str | None]:
        if is_blank(intent.new_value):
            return ApplyOutcome.SKIPPED, "empty_value"

        entity = intent.entity
        if isinstance(entity, ExperimentKey):
            if intent.field not in _EXPERIMENT_FIELDS:
                return ApplyOutcome.SKIPPED, f"unsupported_field: {intent.field}"
            experiment = self.storage.find_experiment(
                normalize_experiment_number(entity.experiment_number)
            )
            if experiment is None:
                return ApplyOutcome.SKIPPED, "experiment_not_found"
            entity_type = EntityType.EXPERIMENT
            entity_id = experiment.id
            current = experiment.record.field_value(intent.field)
        else:
            if intent.field not in _MOVIE_FIELDS:
                return ApplyOutcome.SKIPPED, f"unsupported_field: {intent.field}"
            movie = self.storage.find_movie(entity)
            if movie is None:
                return ApplyOutcome.SKIPPED, "movie_not_found"
            entity_type = EntityType.MOVIE
            entity_id = movie.id
            current = getattr(movie.record, intent.field)

        if not is_blank(current):
            if normalize(current) == normalize(intent.new_value):
                return ApplyOutcome.ALREADY_SATISFIED, None
            return ApplyOutcome.SKIPPED, "field_populated"

        try:
            value = coerce_field_value(intent.field, intent.new_value)
        except ValueError as exc:
            return ApplyOutcome.FAILED, f"invalid_value: {exc}"
        self.storage.update_field(entity_type, entity_id, intent.field, value)
        return ApplyOutcome.APPLIED, None

    def _resolve_link(
        self,
        movie_key: IdentityKey,
        experiment_number: str,
    ) -> tuple[EntityId, EntityId] | str:
        movie = self.storage.find_movie(movie_key)
        if movie is None:
            return "movie_not_found"
        experiment = self.storage.find_experiment(normalize_experiment_number(experiment_number))
        if experiment is None:
            return "experiment_not_found"
        return movie.id, experiment.id
