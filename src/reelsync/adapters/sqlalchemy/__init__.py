"""SQLAlchemy adapter package for reelsync."""

from __future__ import annotations

from .mappings import (
    create_all_tables,
    experiment_table,
    metadata,
    movie_experiment_table,
    movie_table,
)
from .storage import SqlAlchemyCatalogStorage
from .unit_of_work import (
    SqlAlchemyCatalogUnitOfWork,
    StartupError,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyCatalogStorage",
    "SqlAlchemyCatalogUnitOfWork",
    "StartupError",
    "create_all_tables",
    "experiment_table",
    "metadata",
    "movie_experiment_table",
    "movie_table",
    "shutdown",
    "startup",
]
