from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pytest

from reelsync import app
from reelsync.adapters.memory import InMemoryCatalogUnitOfWork, InMemoryStorage
from reelsync.adapters.proposal import write_proposal
from reelsync.domain.model import Dataset, IdentityKey
from reelsync.domain.reconciliation import (
    ApplyOutcome,
    DestructiveActionError,
    MatchPolicy,
    MatchTier,
    Plan,
    RemoveLink,
)
from tests.helpers.records import make_experiment, make_movie

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

CSV = (
    "experiment_number,event_host,movie_title,movie_year\n"
    "36,Ann,The Laughing Dead,1989\n"
    "36,Ann,Miami Connection,1987\n"
)


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage.from_snapshot(
        Dataset.of(
            movies=[make_movie("Laughing Dead, The", year="1990"), make_movie()],
            experiments=[make_experiment("036"), make_experiment("001")],
        ),
        [(IdentityKey.title_year("the room", "2003"), "001")],
    )


@pytest.fixture
def uow_factory(storage: InMemoryStorage) -> Callable[[], InMemoryCatalogUnitOfWork]:
    def factory() -> InMemoryCatalogUnitOfWork:
        return InMemoryCatalogUnitOfWork(storage)

    return factory


@pytest.fixture
def csv_path(tmp_path: Path) -> Path:
    path = tmp_path / "export.csv"
    path.write_text(CSV, encoding="utf-8")
    return path


def test_plan_from_source_writes_proposal_and_report(
    tmp_path: Path,
    csv_path: Path,
    uow_factory: Callable[[], InMemoryCatalogUnitOfWork],
) -> None:
    output = tmp_path / "out" / "plan.json"
    report = tmp_path / "out" / "plan.txt"

    plan = app.plan_from_source(
        output=output,
        csv_path=csv_path,
        report_path=report,
        unit_of_work_factory=uow_factory,
    )

    assert output.exists()
    assert report.read_text(encoding="utf-8").startswith("Reconciliation plan")
    assert plan.summary.tiers[MatchTier.LIKELY] == 1
    assert plan.summary.tiers[MatchTier.UNMATCHED] == 1


def test_dry_run_leaves_the_store_untouched(
    tmp_path: Path,
    csv_path: Path,
    storage: InMemoryStorage,
    uow_factory: Callable[[], InMemoryCatalogUnitOfWork],
) -> None:
    output = tmp_path / "plan.json"
    app.plan_from_source(output=output, csv_path=csv_path, unit_of_work_factory=uow_factory)
    before = storage.snapshot()

    result = app.apply_proposal(output, unit_of_work_factory=uow_factory)

    assert result.applied == len(result.reports) > 0
    assert storage.snapshot() == before


def test_execute_applies_the_proposal(
    tmp_path: Path,
    csv_path: Path,
    storage: InMemoryStorage,
    uow_factory: Callable[[], InMemoryCatalogUnitOfWork],
) -> None:
    output = tmp_path / "plan.json"
    report = tmp_path / "apply.txt"
    app.plan_from_source(output=output, csv_path=csv_path, unit_of_work_factory=uow_factory)

    result = app.apply_proposal(
        output,
        execute=True,
        report_path=report,
        unit_of_work_factory=uow_factory,
    )

    assert result.counts[ApplyOutcome.FAILED] == 0
    assert report.read_text(encoding="utf-8").startswith("Apply run")
    reference, links = storage.snapshot()
    assert {movie.title for movie in reference.movies} >= {"Miami Connection"}
    assert (IdentityKey.title_year("laughing dead, the", "1990"), "036") in links


def test_unlink_requires_confirmation(
    storage: InMemoryStorage,
    uow_factory: Callable[[], InMemoryCatalogUnitOfWork],
) -> None:
    with pytest.raises(DestructiveActionError):
        app.unlink_movie("title:the room|2003", "1", unit_of_work_factory=uow_factory)

    result = app.unlink_movie(
        "title:the room|2003",
        "1",
        confirm=True,
        unit_of_work_factory=uow_factory,
    )

    assert result.applied == 1
    assert storage.snapshot()[1] == []


def test_match_title_uses_the_given_policy(
    uow_factory: Callable[[], InMemoryCatalogUnitOfWork],
) -> None:
    result = app.match_title("The Laughing Dead", year="1989", unit_of_work_factory=uow_factory)
    strict = app.match_title(
        "Laughing Dead",
        year="1989",
        unit_of_work_factory=uow_factory,
        policy=MatchPolicy(strong_similarity=1.0, weak_similarity=1.0, containment_floor=0.0),
    )

    assert result.tier is MatchTier.LIKELY
    assert strict.tier is MatchTier.UNMATCHED


def test_read_source_requires_exactly_one_path(csv_path: Path) -> None:
    with pytest.raises(ValueError, match="Exactly one"):
        app.read_source()
    with pytest.raises(ValueError, match="Exactly one"):
        app.read_source(csv_path=csv_path, wordpress_path=csv_path)


def test_replanning_after_execute_is_empty(
    tmp_path: Path,
    csv_path: Path,
    uow_factory: Callable[[], InMemoryCatalogUnitOfWork],
    caplog: pytest.LogCaptureFixture,
) -> None:
    output = tmp_path / "plan.json"
    app.plan_from_source(output=output, csv_path=csv_path, unit_of_work_factory=uow_factory)
    app.apply_proposal(output, execute=True, unit_of_work_factory=uow_factory)
    caplog.set_level(logging.INFO, logger="reelsync.app")

    replan = app.plan_from_source(
        output=tmp_path / "replan.json",
        csv_path=csv_path,
        unit_of_work_factory=uow_factory,
    )

    assert replan.is_empty
    assert replan.reviews == ()
    assert "Store already matches" in caplog.text


def test_apply_proposal_skips_link_removals(
    tmp_path: Path,
    storage: InMemoryStorage,
    uow_factory: Callable[[], InMemoryCatalogUnitOfWork],
    caplog: pytest.LogCaptureFixture,
) -> None:
    output = tmp_path / "plan.json"
    removal = RemoveLink(
        movie_key=IdentityKey.title_year("the room", "2003"),
        experiment_number="1",
    )
    write_proposal(Plan(intents=(removal,)), output)

    result = app.apply_proposal(output, execute=True, unit_of_work_factory=uow_factory)

    assert result.reports[0].outcome is ApplyOutcome.SKIPPED
    assert result.reports[0].reason == "destructive_not_allowed"
    assert storage.snapshot()[1] == [(IdentityKey.title_year("the room", "2003"), "001")]
    assert "1 link removals" in caplog.text
