"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class SourceTag(StrEnum):
    """Collaborator that produced a record."""

    CSV = "csv"
    WORDPRESS = "wordpress"
    DATABASE = "database"
    MANUAL = "manual"


class EntityType(StrEnum):
    """Discriminator for entities addressed by mutation intents."""

    MOVIE = "movie"
    EXPERIMENT = "experiment"


class KeyKind(StrEnum):
    """Identity key flavours, strongest first."""

    TMDB = "tmdb"
    IMDB = "imdb"
    TITLE_YEAR = "title_year"


class MovieField(StrEnum):
    """Movie attributes the reconciliation engine may fill in."""

    TMDB_ID = "tmdb_id"
    IMDB_ID = "imdb_id"
    ORIGINAL_TITLE = "original_title"


class ExperimentField(StrEnum):
    """Experiment attributes the reconciliation engine may fill in."""

    EVENT_DATE = "event_date"
    HOST = "host"
    NOTES = "notes"
    IMAGE_URL = "image_url"
