from __future__ import annotations

from pathlib import Path  # noqa: TC003

import pytest

from reelsync.config import (
    ConfigurationError,
    get_database_config,
    get_match_policy,
    get_matching_config,
    get_storage_config,
)
from reelsync.config.storage import DEFAULT_DB_FILENAME
from reelsync.domain.reconciliation import DEFAULT_POLICY


def test_matching_config_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "REELSYNC_STRONG_SIMILARITY",
        "REELSYNC_WEAK_SIMILARITY",
        "REELSYNC_EXACT_YEAR_TOLERANCE",
        "REELSYNC_LIKELY_YEAR_TOLERANCE",
        "REELSYNC_CONTAINMENT_FLOOR",
    ):
        monkeypatch.delenv(name, raising=False)

    assert get_match_policy() == DEFAULT_POLICY


def test_matching_config_reads_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("REELSYNC_STRONG_SIMILARITY", "0.95")
    monkeypatch.setenv("REELSYNC_LIKELY_YEAR_TOLERANCE", "3")

    config = get_matching_config()

    assert config.strong_similarity == 0.95
    assert config.likely_year_tolerance == 3
    assert get_match_policy().strong_similarity == 0.95


@pytest.mark.parametrize(
    ("name", "value", "message"),
    [
        ("REELSYNC_STRONG_SIMILARITY", "high", "must be a number"),
        ("REELSYNC_EXACT_YEAR_TOLERANCE", "1.5", "must be an integer"),
        ("REELSYNC_WEAK_SIMILARITY", "0.99", "Invalid matching configuration"),
    ],
)
def test_invalid_matching_config(
    monkeypatch: pytest.MonkeyPatch,
    name: str,
    value: str,
    message: str,
) -> None:
    monkeypatch.setenv(name, value)

    with pytest.raises(ConfigurationError, match=message):
        get_match_policy()


def test_data_dir_prefers_explicit_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    custom = tmp_path / "custom-data"
    monkeypatch.setenv("REELSYNC_DATA_DIR", str(custom))

    assert get_storage_config().data_dir == custom.resolve()


def test_database_uri_uses_env_override(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URI", "sqlite:///override.db")

    assert get_database_config().uri == "sqlite:///override.db"


def test_database_uri_creates_data_dir(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.delenv("DATABASE_URI", raising=False)
    monkeypatch.setenv("REELSYNC_DATA_DIR", str(tmp_path / "data-dir"))

    uri = get_database_config().uri

    expected_path = (tmp_path / "data-dir" / DEFAULT_DB_FILENAME).resolve()
    assert uri == f"sqlite+pysqlite:///{expected_path}"
    assert expected_path.parent.exists()



def test_data_dir_defaults_to_xdg_data_home(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.delenv("REELSYNC_DATA_DIR", raising=False)
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))

    config = get_storage_config()

    assert config.data_dir == (tmp_path / "reelsync").resolve()
    assert config.database_path == (tmp_path / "reelsync" / DEFAULT_DB_FILENAME).resolve()
