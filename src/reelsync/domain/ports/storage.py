"""Storage port consumed by the apply engine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from reelsync.domain.model import (
        Dataset,
        EntityType,
        ExperimentRecord,
        IdentityKey,
        LinkKey,
        MovieRecord,
    )

type EntityId = int


class StorageError(RuntimeError):
    """Base class for failures reported by a storage implementation."""


class NotFoundError(StorageError):
    """Raised when an addressed entity does not exist."""


class ConflictError(StorageError):
    """Raised when a write violates a uniqueness constraint."""


class UnavailableError(StorageError):
    """Raised when the store cannot be reached or refuses work."""


@dataclass(frozen=True, slots=True)
class StoredMovie:
    id: EntityId
    record: MovieRecord


@dataclass(frozen=True, slots=True)
class StoredExperiment:
    id: EntityId
    record: ExperimentRecord


@runtime_checkable
class StoragePort(Protocol):
    """Minimal catalog store contract.

    ``find_movie`` must honour every key kind: external keys compare the
    identifier, title keys compare ``normalize(title)`` and the year.
    """

    def find_movie(self, key: IdentityKey) -> StoredMovie | None: ...

    def create_movie(self, record: MovieRecord) -> EntityId: ...

    def find_experiment(self, experiment_number: str) -> StoredExperiment | None: ...

    def create_experiment(self, record: ExperimentRecord) -> EntityId: ...

    def link_exists(self, movie_id: EntityId, experiment_id: EntityId) -> bool: ...

    def create_link(self, movie_id: EntityId, experiment_id: EntityId) -> None: ...

    def update_field(
        self,
        entity_type: EntityType,
        entity_id: EntityId,
        field: str,
        value: object,
    ) -> None: ...

    def remove_link(self, movie_id: EntityId, experiment_id: EntityId) -> bool: ...


@runtime_checkable
class CatalogStore(StoragePort, Protocol):
    """Storage port that can also export its contents as a reference snapshot."""

    def snapshot(self) -> tuple[Dataset, list[LinkKey]]: ...
