from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING

import pytest

from reelsync.adapters.csv_import import read_csv_dataset, translate_rows
from reelsync.adapters.csv_import.schema import CsvRow
from reelsync.domain.model import SourceTag
from reelsync.domain.ports import SourceFormatError

if TYPE_CHECKING:
    from pathlib import Path

HEADER = (
    "experiment_number,event_date,event_host,event_encore,event_image,event_notes,"
    "movie_title,movie_year,movie_tmdb_url,movie_imdb_id\n"
)


def _write(tmp_path: Path, body: str, header: str = HEADER) -> Path:
    path = tmp_path / "export.csv"
    path.write_text(header + body, encoding="utf-8")
    return path


def test_rows_are_grouped_by_experiment(tmp_path: Path) -> None:
    path = _write(
        tmp_path,
        "36,5/14/2023,Ann,,https://example.org/36.jpg,Encore night,"
        "The Laughing Dead,1989,https://www.themoviedb.org/movie/41035-the-laughing-dead,\n"
        "036,,,,,,Troll 2 aka Trolls,1990,,tt0105643\n"
        ",,,,,,Birdemic,2010,,\n",
    )

    dataset = read_csv_dataset(path)

    assert [movie.title for movie in dataset.movies] == ["Birdemic"]
    assert len(dataset.experiments) == 1
    experiment = dataset.experiments[0]
    assert experiment.experiment_number == "036"
    assert experiment.event_date == date(2023, 5, 14)
    assert experiment.host == "Ann"
    assert experiment.notes == "night"
    assert experiment.image_url == "https://example.org/36.jpg"
    laughing_dead, troll = experiment.movies
    assert laughing_dead.tmdb_id == "41035"
    assert laughing_dead.year == "1989"
    assert laughing_dead.source is SourceTag.CSV
    assert troll.title == "Troll 2"
    assert troll.imdb_id == "tt0105643"


def test_first_row_describes_the_experiment() -> None:
    rows = [
        CsvRow(experiment_number="7", event_host="Ann", movie_title="Samurai Cop"),
        CsvRow(experiment_number="7", event_host="Bob", movie_title="Miami Connection"),
    ]

    dataset = translate_rows(rows)

    assert dataset.experiments[0].host == "Ann"
    assert len(dataset.experiments[0].movies) == 2


def test_rows_without_title_only_describe_the_experiment() -> None:
    dataset = translate_rows([CsvRow(experiment_number="8", event_host="  Ann  ")])

    assert dataset.experiments[0].host == "Ann"
    assert dataset.experiments[0].movies == ()


def test_unparseable_date_is_dropped(caplog: pytest.LogCaptureFixture) -> None:
    dataset = translate_rows([CsvRow(experiment_number="9", event_date="next Tuesday")])

    assert dataset.experiments[0].event_date is None
    assert "unparseable event date" in caplog.text


def test_missing_required_columns(tmp_path: Path) -> None:
    path = _write(tmp_path, "Birdemic,2010\n", header="title,year\n")

    with pytest.raises(SourceFormatError, match="missing columns: experiment_number, movie_title"):
        read_csv_dataset(path)


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(SourceFormatError) as excinfo:
        read_csv_dataset(tmp_path / "absent.csv")

    assert excinfo.value.path == tmp_path / "absent.csv"
