"""Row model of the flat-file catalog export."""

from __future__ import annotations

from typing import Final

from pydantic import BaseModel, ConfigDict

REQUIRED_COLUMNS: Final[frozenset[str]] = frozenset({"experiment_number", "movie_title"})


class CsvRow(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    experiment_number: str | None = None
    event_date: str | None = None
    event_host: str | None = None
    event_image: str | None = None
    event_notes: str | None = None
    movie_title: str | None = None
    movie_year: str | None = None
    movie_tmdb_url: str | None = None
    movie_imdb_id: str | None = None
    movie_imdb_url: str | None = None
