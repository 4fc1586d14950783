"""In-memory catalog store implementing the storage port.

Used to preview an apply run without touching the database and as the
storage double in tests.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from itertools import count
from typing import TYPE_CHECKING, Literal

from reelsync.domain.model import (
    Dataset,
    EntityType,
    ExperimentField,
    MovieField,
)
from reelsync.domain.ports import (
    CatalogRepositories,
    ConflictError,
    NotFoundError,
    StoredExperiment,
    StoredMovie,
)
from reelsync.domain.reconciliation.identity import matches_key, resolve_key
from reelsync.domain.reconciliation.normalize import normalize_experiment_number

if TYPE_CHECKING:
    from collections.abc import Iterable

    from reelsync.domain.model import (
        ExperimentRecord,
        IdentityKey,
        LinkKey,
        MovieRecord,
    )
    from reelsync.domain.ports import EntityId

log = logging.getLogger(__name__)


class InMemoryStorage:
    """Dictionary-backed catalog with the same uniqueness rules as the database."""

    def __init__(self) -> None:
        self.movies: dict[EntityId, MovieRecord] = {}
        self.experiments: dict[EntityId, ExperimentRecord] = {}
        self.links: set[tuple[EntityId, EntityId]] = set()
        self._ids = count(1)

    @classmethod
    def from_snapshot(
        cls,
        dataset: Dataset,
        links: Iterable[LinkKey] = (),
    ) -> InMemoryStorage:
        """Seed a store from a reference snapshot."""

        storage = cls()
        for movie in dataset.movies:
            storage.create_movie(movie)
        for experiment in dataset.experiments:
            storage.create_experiment(experiment)
        for movie_key, experiment_number in links:
            movie = storage.find_movie(movie_key)
            experiment = storage.find_experiment(experiment_number)
            if movie is None or experiment is None:
                log.warning("Dropping dangling link %s -> %s", movie_key, experiment_number)
                continue
            storage.links.add((movie.id, experiment.id))
        return storage

    def snapshot(self) -> tuple[Dataset, list[LinkKey]]:
        """Return the stored records and links as plain values."""

        links: list[LinkKey] = [
            (resolve_key(self.movies[movie_id]), self.experiments[experiment_id].experiment_number)
            for movie_id, experiment_id in sorted(self.links)
        ]
        dataset = Dataset.of(movies=self.movies.values(), experiments=self.experiments.values())
        return dataset, links

    def find_movie(self, key: IdentityKey) -> StoredMovie | None:
        for movie_id, record in self.movies.items():
            if matches_key(record, key):
                return StoredMovie(id=movie_id, record=record)
        return None

    def create_movie(self, record: MovieRecord) -> EntityId:
        for existing in self.movies.values():
            for name in (MovieField.TMDB_ID, MovieField.IMDB_ID):
                value = getattr(record, name)
                if value and getattr(existing, name) == value:
                    raise ConflictError(f"movie with {name}={value} already exists")
        movie_id = next(self._ids)
        self.movies[movie_id] = record
        return movie_id

    def find_experiment(self, experiment_number: str) -> StoredExperiment | None:
        number = normalize_experiment_number(experiment_number)
        for experiment_id, record in self.experiments.items():
            if record.experiment_number == number:
                return StoredExperiment(id=experiment_id, record=record)
        return None

    def create_experiment(self, record: ExperimentRecord) -> EntityId:
        number = normalize_experiment_number(record.experiment_number)
        if self.find_experiment(number) is not None:
            raise ConflictError(f"experiment {number} already exists")
        experiment_id = next(self._ids)
        self.experiments[experiment_id] = replace(record, experiment_number=number, movies=())
        return experiment_id

    def link_exists(self, movie_id: EntityId, experiment_id: EntityId) -> bool:
        return (movie_id, experiment_id) in self.links

    def create_link(self, movie_id: EntityId, experiment_id: EntityId) -> None:
        self._require(movie_id, experiment_id)
        if (movie_id, experiment_id) in self.links:
            raise ConflictError(f"link {movie_id} -> {experiment_id} already exists")
        self.links.add((movie_id, experiment_id))

    def update_field(
        self,
        entity_type: EntityType,
        entity_id: EntityId,
        field: str,
        value: object,
    ) -> None:
        if entity_type is EntityType.MOVIE:
            if entity_id not in self.movies:
                raise NotFoundError(f"movie {entity_id} does not exist")
            if field not in set(MovieField):
                raise ValueError(f"Unsupported movie field: {field}")
            self.movies[entity_id] = replace(self.movies[entity_id], **{field: value})
            return
        if entity_id not in self.experiments:
            raise NotFoundError(f"experiment {entity_id} does not exist")
        if field not in set(ExperimentField):
            raise ValueError(f"Unsupported experiment field: {field}")
        self.experiments[entity_id] = replace(self.experiments[entity_id], **{field: value})

    def remove_link(self, movie_id: EntityId, experiment_id: EntityId) -> bool:
        if (movie_id, experiment_id) not in self.links:
            return False
        self.links.remove((movie_id, experiment_id))
        return True

    def _require(self, movie_id: EntityId, experiment_id: EntityId) -> None:
        if movie_id not in self.movies:
            raise NotFoundError(f"movie {movie_id} does not exist")
        if experiment_id not in self.experiments:
            raise NotFoundError(f"experiment {experiment_id} does not exist")


class InMemoryCatalogUnitOfWork:
    """Unit of work around an :class:`InMemoryStorage`; commits are no-ops."""

    def __init__(self, storage: InMemoryStorage | None = None) -> None:
        self.storage = storage or InMemoryStorage()
        self.repositories = CatalogRepositories(catalog=self.storage)
        self.committed = False

    def __enter__(self) -> InMemoryCatalogUnitOfWork:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: object | None,
    ) -> Literal[False]:
        return False

    def commit(self) -> None:
        self.committed = True

    def rollback(self) -> None:
        self.committed = False


if TYPE_CHECKING:
    from reelsync.domain.ports import CatalogUnitOfWork, StoragePort

    _check_storage: StoragePort = InMemoryStorage()
    _check_uow: CatalogUnitOfWork = InMemoryCatalogUnitOfWork()
