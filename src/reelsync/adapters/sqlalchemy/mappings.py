"""SQLAlchemy table metadata for the movie catalog."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import (
    Column,
    Date,
    Enum,
    ForeignKey,
    Integer,
    MetaData,
    String,
    Table,
    Text,
    UniqueConstraint,
)

from reelsync.domain.model import SourceTag

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)

metadata = MetaData(
    naming_convention={
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_label)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }
)

movie_table = Table(
    "movie",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("title", String(512), nullable=False),
    Column("original_title", String(512), nullable=True),
    Column("year", String(4), nullable=True, index=True),
    Column("tmdb_id", String(32), nullable=True, unique=True),
    Column("imdb_id", String(32), nullable=True, unique=True),
    Column("source", Enum(SourceTag, native_enum=False), nullable=False),
)

experiment_table = Table(
    "experiment",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("experiment_number", String(16), nullable=False, unique=True),
    Column("event_date", Date, nullable=True),
    Column("host", String(255), nullable=True),
    Column("notes", Text, nullable=True),
    Column("image_url", String(1024), nullable=True),
)

movie_experiment_table = Table(
    "movie_experiment",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("movie_id", Integer, ForeignKey("movie.id", ondelete="CASCADE"), nullable=False),
    Column(
        "experiment_id",
        Integer,
        ForeignKey("experiment.id", ondelete="CASCADE"),
        nullable=False,
    ),
    UniqueConstraint("movie_id", "experiment_id"),
)


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the catalog metadata."""

    log.info("Creating all tables")
    metadata.create_all(engine)
