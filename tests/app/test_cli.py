from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from reelsync.adapters.sqlalchemy.unit_of_work import shutdown
from reelsync.domain.reconciliation import (
    ApplyOutcome,
    ApplyReport,
    ApplyResult,
    CreateMovie,
    MatchTier,
    Plan,
)
from reelsync.ui import cli
from tests.helpers.records import make_movie

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path


@pytest.fixture(autouse=True)
def reset_cli_state() -> Iterator[None]:
    shutdown()
    yield
    shutdown()
    cli._ABORT.armed = False
    cli._ABORT.requested = False


def test_plan_command_forwards_arguments(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    tmp_path: Path,
) -> None:
    captured: dict[str, object] = {}

    def fake_plan(**kwargs: object) -> Plan:
        captured.update(kwargs)
        return Plan()

    monkeypatch.setattr(cli, "plan_from_source", fake_plan)

    cli.main(["plan", "--csv", str(tmp_path / "a.csv"), "--output", str(tmp_path / "p.json")])

    assert captured["csv_path"] == tmp_path / "a.csv"
    assert captured["wordpress_path"] is None
    assert captured["output"] == tmp_path / "p.json"
    assert captured["report_path"] is None
    assert capsys.readouterr().out.startswith("Reconciliation plan")


def test_plan_command_requires_one_source(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["plan", "--output", str(tmp_path / "p.json")])

    assert excinfo.value.code == 2


def test_negative_limit_is_a_validation_error(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["apply", str(tmp_path / "p.json"), "--limit", "-1"])

    assert excinfo.value.code == 2


def test_apply_command_exits_with_failure_status(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    captured: dict[str, object] = {}

    def fake_apply(path: Path, **kwargs: object) -> ApplyResult:
        captured.update(kwargs, path=path)
        assert cli._ABORT.armed
        return ApplyResult(
            reports=[
                ApplyReport(
                    intent=CreateMovie(movie=make_movie()),
                    outcome=ApplyOutcome.FAILED,
                    reason="UnavailableError: locked",
                )
            ]
        )

    monkeypatch.setattr(cli, "apply_proposal", fake_apply)

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["apply", str(tmp_path / "p.json"), "--execute", "--limit", "5"])

    assert excinfo.value.code == 1
    assert captured["execute"] is True
    assert captured["limit"] == 5
    assert captured["should_abort"] is cli._ABORT
    assert not cli._ABORT.armed


def test_unlink_without_confirmation_is_refused() -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["unlink", "--movie", "tmdb:17473", "--experiment", "7"])

    assert excinfo.value.code == 2


def test_fatal_errors_exit_with_one(monkeypatch: pytest.MonkeyPatch) -> None:
    def broken_match(*_: object, **__: object) -> None:
        raise RuntimeError("database is gone")

    monkeypatch.setattr(cli, "match_title", broken_match)

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["match", "Troll 2"])

    assert excinfo.value.code == 1


def test_first_interrupt_during_apply_requests_abort() -> None:
    cli._ABORT.armed = True

    cli.sigint_handler(2, None)

    assert cli._ABORT()
    with pytest.raises(SystemExit) as excinfo:
        cli.sigint_handler(2, None)
    assert excinfo.value.code == 0


def test_interrupt_outside_apply_exits() -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.sigint_handler(2, None)

    assert excinfo.value.code == 0


def test_end_to_end_against_sqlite(
    monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
    tmp_path: Path,
) -> None:
    monkeypatch.setenv("DATABASE_URI", f"sqlite+pysqlite:///{tmp_path / 'catalog.db'}")
    export = tmp_path / "export.csv"
    export.write_text(
        "experiment_number,event_host,movie_title,movie_year,movie_tmdb_url\n"
        "1,Ann,Troll 2,1990,https://www.themoviedb.org/movie/26914\n"
        "1,Ann,The Room,2003,\n"
        "2,Bob,Samurai Cop,1991,\n",
        encoding="utf-8",
    )
    proposal = tmp_path / "plan.json"

    cli.main(["plan", "--csv", str(export), "--output", str(proposal)])
    cli.main(["apply", str(proposal)])
    dry_run = capsys.readouterr().out
    cli.main(["match", "Troll 2", "--year", "1990"])
    before = capsys.readouterr().out
    cli.main(["apply", str(proposal), "--execute"])
    capsys.readouterr()
    cli.main(["match", "Troll 2", "--year", "1990"])
    after = capsys.readouterr().out
    cli.main(["plan", "--csv", str(export), "--output", str(proposal)])
    replanned = capsys.readouterr().out

    assert ["applied", "8"] in [line.split() for line in dry_run.splitlines()]
    assert before.startswith(f'"Troll 2" (1990): {MatchTier.UNMATCHED}')
    assert after.startswith(f'"Troll 2" (1990): {MatchTier.EXACT}')
    assert "Intents (0):" in replanned
