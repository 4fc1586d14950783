"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from reelsync.adapters.csv_import import read_csv_dataset
from reelsync.adapters.memory import InMemoryStorage
from reelsync.adapters.proposal import read_proposal, write_proposal
from reelsync.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyCatalogUnitOfWork,
    is_started,
    startup,
)
from reelsync.adapters.wordpress import read_wordpress_dataset
from reelsync.config import get_match_policy
from reelsync.domain.model import IdentityKey, MovieRecord, SourceTag
from reelsync.domain.ports.unit_of_work import CatalogUnitOfWork
from reelsync.domain.reconciliation import (
    IntentKind,
    apply_plan,
    build_plan,
    build_removal_plan,
    extract_year,
    match,
    render_apply_report,
    render_plan_report,
)

if TYPE_CHECKING:
    from pathlib import Path

    from reelsync.domain.model import Dataset, LinkKey
    from reelsync.domain.ports import DatasetReader
    from reelsync.domain.reconciliation import (
        AbortSignal,
        ApplyResult,
        MatchPolicy,
        MatchResult,
        Plan,
    )

UnitOfWorkFactory = Callable[[], CatalogUnitOfWork]


log = getLogger(__name__)


def _default_unit_of_work() -> CatalogUnitOfWork:
    if not is_started():
        startup()
    return SqlAlchemyCatalogUnitOfWork()


def read_source(*, csv_path: Path | None = None, wordpress_path: Path | None = None) -> Dataset:
    """Read exactly one source file."""

    reader: DatasetReader
    if csv_path is not None and wordpress_path is None:
        reader, path = read_csv_dataset, csv_path
    elif wordpress_path is not None and csv_path is None:
        reader, path = read_wordpress_dataset, wordpress_path
    else:
        raise ValueError("Exactly one of csv_path or wordpress_path is required")
    return reader(path)


def load_reference(
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> tuple[Dataset, list[LinkKey]]:
    effective_uow = unit_of_work_factory or _default_unit_of_work
    with effective_uow() as uow:
        return uow.repositories.catalog.snapshot()


def plan_from_source(
    *,
    output: Path,
    csv_path: Path | None = None,
    wordpress_path: Path | None = None,
    report_path: Path | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    policy: MatchPolicy | None = None,
) -> Plan:
    """Diff a source file against the store and write a reviewable proposal."""

    source = read_source(csv_path=csv_path, wordpress_path=wordpress_path)
    reference, links = load_reference(unit_of_work_factory)
    plan = build_plan(source, reference, links, policy=policy or get_match_policy())
    source_path = csv_path or wordpress_path
    if plan.is_empty:
        log.info("Store already matches %s", source_path)

    write_proposal(plan, output, source=str(source_path) if source_path else None)
    if report_path is not None:
        _write_report(report_path, render_plan_report(plan))
    return plan


def apply_proposal(
    proposal_path: Path,
    *,
    execute: bool = False,
    limit: int | None = None,
    report_path: Path | None = None,
    should_abort: AbortSignal | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> ApplyResult:
    """Apply a reviewed proposal.

    Without ``execute`` the plan runs against an in-memory copy of the store,
    so the report shows what would happen without writing anything.
    """

    plan = read_proposal(proposal_path)
    effective_uow = unit_of_work_factory or _default_unit_of_work
    log.info(
        "Applying %d intents from %s (%s)",
        len(plan.intents),
        proposal_path,
        "execute" if execute else "dry run",
    )
    removals = plan.intents_of(IntentKind.REMOVE_LINK)
    if removals:
        log.warning(
            "Proposal contains %d link removals; they are skipped, use 'unlink' instead",
            len(removals),
        )

    with effective_uow() as uow:
        catalog = uow.repositories.catalog
        if execute:
            result = apply_plan(plan, catalog, limit=limit, should_abort=should_abort)
            uow.commit()
        else:
            dataset, links = catalog.snapshot()
            preview = InMemoryStorage.from_snapshot(dataset, links)
            result = apply_plan(plan, preview, limit=limit, should_abort=should_abort)

    if report_path is not None:
        _write_report(report_path, render_apply_report(result))
    return result


def unlink_movie(
    movie_key: str,
    experiment_number: str,
    *,
    confirm: bool = False,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> ApplyResult:
    """Remove one movie-experiment link; requires explicit confirmation."""

    plan = build_removal_plan(
        [(IdentityKey.parse(movie_key), experiment_number)],
        confirmed=confirm,
    )
    effective_uow = unit_of_work_factory or _default_unit_of_work
    with effective_uow() as uow:
        result = apply_plan(plan, uow.repositories.catalog, allow_destructive=True)
        uow.commit()
    return result


def match_title(
    title: str,
    *,
    year: str | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    policy: MatchPolicy | None = None,
) -> MatchResult:
    """Match a single title against the stored movies."""

    reference, _links = load_reference(unit_of_work_factory)
    candidate = MovieRecord(title=title, year=extract_year(year), source=SourceTag.MANUAL)
    return match(candidate, reference.movies, policy=policy or get_match_policy())


def _write_report(path: Path, report: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(report, encoding="utf-8")
    log.info("Wrote report to %s", path)
