"""Immutable catalog records exchanged between collaborators and the engine.

Records are plain values: collaborators (CSV import, scrape dump, database
snapshot) build them, the reconciliation engine only reads them.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING

from .enums import ExperimentField, SourceTag

if TYPE_CHECKING:
    from collections.abc import Iterable


@dataclass(frozen=True, slots=True, kw_only=True)
class MovieRecord:
    """One movie as described by a single source."""

    title: str
    original_title: str | None = None
    year: str | None = None
    tmdb_id: str | None = None
    imdb_id: str | None = None
    source: SourceTag = SourceTag.MANUAL

    def label(self) -> str:
        return f'"{self.title}" ({self.year or "unknown year"})'


@dataclass(frozen=True, slots=True, kw_only=True)
class ExperimentRecord:
    """One screening event, keyed by its zero-padded experiment number."""

    experiment_number: str
    event_date: date | None = None
    host: str | None = None
    notes: str | None = None
    image_url: str | None = None
    movies: tuple[MovieRecord, ...] = ()

    def field_value(self, name: ExperimentField | str) -> str | None:
        """Return a reconcilable field as a plain value (dates as ISO strings)."""

        value = getattr(self, str(name))
        if isinstance(value, date):
            return value.isoformat()
        return value


@dataclass(frozen=True, slots=True)
class Dataset:
    """Movies and experiments delivered by one collaborator."""

    movies: tuple[MovieRecord, ...] = ()
    experiments: tuple[ExperimentRecord, ...] = ()

    @classmethod
    def of(
        cls,
        *,
        movies: Iterable[MovieRecord] = (),
        experiments: Iterable[ExperimentRecord] = (),
    ) -> Dataset:
        return cls(movies=tuple(movies), experiments=tuple(experiments))


def coerce_field_value(name: str, value: str | None) -> object:
    """Turn a plain intent value back into the typed attribute value."""

    if value is None:
        return None
    if name == ExperimentField.EVENT_DATE:
        return date.fromisoformat(value)
    return value


def is_blank(value: object) -> bool:
    """Return whether a stored value counts as empty for fill-only updates."""

    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False
