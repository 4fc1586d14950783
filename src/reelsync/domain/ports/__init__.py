"""Domain port definitions for adapters."""

from __future__ import annotations

from .sources import DatasetReader, SourceFormatError
from .storage import (
    CatalogStore,
    ConflictError,
    EntityId,
    NotFoundError,
    StorageError,
    StoragePort,
    StoredExperiment,
    StoredMovie,
    UnavailableError,
)
from .unit_of_work import (
    CatalogRepositories,
    CatalogUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "CatalogRepositories",
    "CatalogStore",
    "CatalogUnitOfWork",
    "ConflictError",
    "DatasetReader",
    "EntityId",
    "NotFoundError",
    "RepositoryCollection",
    "SourceFormatError",
    "StorageError",
    "StoragePort",
    "StoredExperiment",
    "StoredMovie",
    "UnavailableError",
    "UnitOfWork",
]
