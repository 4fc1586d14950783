"""Translate scraped posts into catalog records."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Final

from reelsync.adapters.external_ids import extract_imdb_id, extract_tmdb_id
from reelsync.domain.model import Dataset, ExperimentRecord, MovieRecord, SourceTag
from reelsync.domain.reconciliation.normalize import (
    clean_experiment_notes,
    clean_movie_title,
    clean_optional_text,
    extract_year,
    normalize,
    normalize_experiment_number,
    parse_event_date,
)

if TYPE_CHECKING:
    from .schema import WordPressDump, WordPressExperiment, WordPressMovie

log = logging.getLogger(__name__)

PLACEHOLDER_HOSTS: Final[frozenset[str]] = frozenset({"unknown", "tbd", "n/a"})

_LEADING_DASH_RE = re.compile(r"^\s*[-–—]\s*")


def translate_dump(dump: WordPressDump) -> Dataset:
    experiments: list[ExperimentRecord] = []
    for post in dump.experiments:
        experiment = translate_experiment(post)
        if experiment is None:
            log.warning("Skipping post without experiment number: %r", post.title)
            continue
        experiments.append(experiment)
    return Dataset.of(experiments=experiments)


def translate_experiment(post: WordPressExperiment) -> ExperimentRecord | None:
    number = normalize_experiment_number(post.experiment_number)
    if not number:
        return None
    event_date = parse_event_date(post.post_date)
    if post.post_date and event_date is None:
        log.warning("Experiment %s: unparseable post date %r", number, post.post_date)
    movies = [movie for movie in map(translate_movie, post.movies) if movie is not None]
    return ExperimentRecord(
        experiment_number=number,
        event_date=event_date,
        host=_clean_host(post.host),
        notes=clean_experiment_notes(post.notes),
        image_url=clean_optional_text(post.experiment_image),
        movies=tuple(movies),
    )


def translate_movie(movie: WordPressMovie) -> MovieRecord | None:
    title = clean_movie_title(_LEADING_DASH_RE.sub("", movie.title))
    if not title:
        return None
    return MovieRecord(
        title=title,
        year=extract_year(movie.year),
        tmdb_id=extract_tmdb_id(movie.url),
        imdb_id=extract_imdb_id(movie.url),
        source=SourceTag.WORDPRESS,
    )


def _clean_host(host: str | None) -> str | None:
    cleaned = clean_optional_text(host)
    if cleaned is None or normalize(cleaned) in PLACEHOLDER_HOSTS:
        return None
    return cleaned
