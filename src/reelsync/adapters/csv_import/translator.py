"""Translate export rows into catalog records."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from reelsync.adapters.external_ids import extract_imdb_id, extract_tmdb_id
from reelsync.domain.model import Dataset, ExperimentRecord, MovieRecord, SourceTag
from reelsync.domain.reconciliation.normalize import (
    clean_experiment_notes,
    clean_movie_title,
    clean_optional_text,
    extract_year,
    normalize_experiment_number,
    parse_event_date,
)

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .schema import CsvRow

log = logging.getLogger(__name__)


@dataclass(slots=True)
class _ExperimentRows:
    first: CsvRow
    movies: list[MovieRecord] = field(default_factory=list[MovieRecord])


def translate_rows(rows: Iterable[CsvRow]) -> Dataset:
    """Group rows by experiment; rows without a number become loose movies."""

    experiments: dict[str, _ExperimentRows] = {}
    loose_movies: list[MovieRecord] = []

    for row in rows:
        movie = translate_movie(row)
        number = normalize_experiment_number(row.experiment_number)
        if not number:
            if movie is not None:
                loose_movies.append(movie)
            continue
        entry = experiments.setdefault(number, _ExperimentRows(first=row))
        if movie is not None:
            entry.movies.append(movie)

    log.debug("Translated %d experiments and %d loose movies", len(experiments), len(loose_movies))
    return Dataset.of(
        movies=loose_movies,
        experiments=(
            translate_experiment(number, entry.first, entry.movies)
            for number, entry in experiments.items()
        ),
    )


def translate_movie(row: CsvRow) -> MovieRecord | None:
    title = clean_movie_title(row.movie_title)
    if not title:
        return None
    return MovieRecord(
        title=title,
        year=extract_year(row.movie_year),
        tmdb_id=extract_tmdb_id(row.movie_tmdb_url),
        imdb_id=extract_imdb_id(row.movie_imdb_id) or extract_imdb_id(row.movie_imdb_url),
        source=SourceTag.CSV,
    )


def translate_experiment(
    number: str,
    row: CsvRow,
    movies: Iterable[MovieRecord],
) -> ExperimentRecord:
    event_date = parse_event_date(row.event_date)
    if row.event_date and event_date is None:
        log.warning("Experiment %s: unparseable event date %r", number, row.event_date)
    return ExperimentRecord(
        experiment_number=number,
        event_date=event_date,
        host=clean_optional_text(row.event_host),
        notes=clean_experiment_notes(row.event_notes),
        image_url=clean_optional_text(row.event_image),
        movies=tuple(movies),
    )
