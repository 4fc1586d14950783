"""Storage port implementation backed by a SQLAlchemy session.

Every successful write is committed immediately so an interrupted apply run
leaves a consistent store that a re-run can resume. A failing write rolls
back only itself.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from sqlalchemy import delete, insert, select, update
from sqlalchemy.exc import IntegrityError, OperationalError

from reelsync.domain.model import (
    UNKNOWN_YEAR,
    Dataset,
    EntityType,
    ExperimentField,
    ExperimentRecord,
    KeyKind,
    MovieField,
    MovieRecord,
)
from reelsync.domain.ports import (
    ConflictError,
    NotFoundError,
    StoredExperiment,
    StoredMovie,
    UnavailableError,
)
from reelsync.domain.reconciliation.identity import matches_key, resolve_key
from reelsync.domain.reconciliation.normalize import normalize_experiment_number

from .mappings import experiment_table, movie_experiment_table, movie_table

if TYPE_CHECKING:
    from collections.abc import Iterator

    from sqlalchemy import Row
    from sqlalchemy.orm import Session

    from reelsync.domain.model import IdentityKey, LinkKey
    from reelsync.domain.ports import EntityId

log = logging.getLogger(__name__)

_MOVIE_COLUMNS = frozenset(str(name) for name in MovieField)
_EXPERIMENT_COLUMNS = frozenset(str(name) for name in ExperimentField)


class SqlAlchemyCatalogStorage:
    """Catalog storage on the ``movie``/``experiment``/``movie_experiment`` tables."""

    def __init__(self, session: Session, *, autocommit: bool = True) -> None:
        self.session = session
        self.autocommit = autocommit

    def find_movie(self, key: IdentityKey) -> StoredMovie | None:
        stmt = select(movie_table).order_by(movie_table.c.id)
        match key.kind:
            case KeyKind.TMDB:
                stmt = stmt.where(movie_table.c.tmdb_id == key.value)
            case KeyKind.IMDB:
                stmt = stmt.where(movie_table.c.imdb_id == key.value)
            case KeyKind.TITLE_YEAR:
                if key.year and key.year != UNKNOWN_YEAR:
                    stmt = stmt.where(movie_table.c.year == key.year)
                else:
                    stmt = stmt.where(
                        movie_table.c.year.is_(None) | (movie_table.c.year == "")
                    )
        with self._translate_errors("find movie"):
            rows = self.session.execute(stmt).all()
        for row in rows:
            record = _row_to_movie(row)
            if matches_key(record, key):
                return StoredMovie(id=row.id, record=record)
        return None

    def create_movie(self, record: MovieRecord) -> EntityId:
        stmt = insert(movie_table).values(
            title=record.title,
            original_title=record.original_title,
            year=record.year,
            tmdb_id=record.tmdb_id or None,
            imdb_id=record.imdb_id or None,
            source=record.source,
        )
        with self._write(f"create movie {record.label()}"):
            result = self.session.execute(stmt)
        return _inserted_id(result.inserted_primary_key)

    def find_experiment(self, experiment_number: str) -> StoredExperiment | None:
        number = normalize_experiment_number(experiment_number)
        stmt = select(experiment_table).where(experiment_table.c.experiment_number == number)
        with self._translate_errors("find experiment"):
            row = self.session.execute(stmt).first()
        if row is None:
            return None
        return StoredExperiment(id=row.id, record=_row_to_experiment(row))

    def create_experiment(self, record: ExperimentRecord) -> EntityId:
        stmt = insert(experiment_table).values(
            experiment_number=normalize_experiment_number(record.experiment_number),
            event_date=record.event_date,
            host=record.host,
            notes=record.notes,
            image_url=record.image_url,
        )
        with self._write(f"create experiment {record.experiment_number}"):
            result = self.session.execute(stmt)
        return _inserted_id(result.inserted_primary_key)

    def link_exists(self, movie_id: EntityId, experiment_id: EntityId) -> bool:
        stmt = (
            select(movie_experiment_table.c.id)
            .where(movie_experiment_table.c.movie_id == movie_id)
            .where(movie_experiment_table.c.experiment_id == experiment_id)
        )
        with self._translate_errors("check link"):
            return self.session.execute(stmt).first() is not None

    def create_link(self, movie_id: EntityId, experiment_id: EntityId) -> None:
        self._require_row(movie_table, movie_id, "movie")
        self._require_row(experiment_table, experiment_id, "experiment")
        stmt = insert(movie_experiment_table).values(
            movie_id=movie_id,
            experiment_id=experiment_id,
        )
        with self._write(f"link movie {movie_id} -> experiment {experiment_id}"):
            self.session.execute(stmt)

    def update_field(
        self,
        entity_type: EntityType,
        entity_id: EntityId,
        field: str,
        value: object,
    ) -> None:
        if entity_type is EntityType.MOVIE:
            table, allowed = movie_table, _MOVIE_COLUMNS
        else:
            table, allowed = experiment_table, _EXPERIMENT_COLUMNS
        if field not in allowed:
            raise ValueError(f"Unsupported {entity_type} field: {field}")
        stmt = update(table).where(table.c.id == entity_id).values({field: value})
        with self._write(f"update {entity_type} {entity_id} {field}"):
            result = self.session.execute(stmt)
            if result.rowcount == 0:
                raise NotFoundError(f"{entity_type} {entity_id} does not exist")

    def remove_link(self, movie_id: EntityId, experiment_id: EntityId) -> bool:
        stmt = (
            delete(movie_experiment_table)
            .where(movie_experiment_table.c.movie_id == movie_id)
            .where(movie_experiment_table.c.experiment_id == experiment_id)
        )
        with self._write(f"unlink movie {movie_id} -> experiment {experiment_id}"):
            result = self.session.execute(stmt)
        return result.rowcount > 0

    def snapshot(self) -> tuple[Dataset, list[LinkKey]]:
        """Load every movie, experiment and link as plain values."""

        with self._translate_errors("load snapshot"):
            movie_rows = self.session.execute(
                select(movie_table).order_by(movie_table.c.id)
            ).all()
            experiment_rows = self.session.execute(
                select(experiment_table).order_by(experiment_table.c.experiment_number)
            ).all()
            link_rows = self.session.execute(
                select(
                    movie_experiment_table.c.movie_id,
                    experiment_table.c.experiment_number,
                )
                .join(
                    experiment_table,
                    experiment_table.c.id == movie_experiment_table.c.experiment_id,
                )
                .order_by(movie_experiment_table.c.id)
            ).all()

        movies_by_id = {row.id: _row_to_movie(row) for row in movie_rows}
        links: list[LinkKey] = [
            (resolve_key(movies_by_id[row.movie_id]), row.experiment_number)
            for row in link_rows
            if row.movie_id in movies_by_id
        ]
        dataset = Dataset.of(
            movies=movies_by_id.values(),
            experiments=(_row_to_experiment(row) for row in experiment_rows),
        )
        log.info(
            "Loaded reference snapshot: %d movies, %d experiments, %d links",
            len(dataset.movies),
            len(dataset.experiments),
            len(links),
        )
        return dataset, links

    def _require_row(self, table: Any, entity_id: EntityId, label: str) -> None:
        stmt = select(table.c.id).where(table.c.id == entity_id)
        with self._translate_errors(f"find {label}"):
            found = self.session.execute(stmt).first()
        if found is None:
            raise NotFoundError(f"{label} {entity_id} does not exist")

    @contextmanager
    def _write(self, description: str) -> Iterator[None]:
        with self._translate_errors(description):
            yield
            if self.autocommit:
                self.session.commit()

    @contextmanager
    def _translate_errors(self, description: str) -> Iterator[None]:
        try:
            yield
        except IntegrityError as exc:
            self.session.rollback()
            log.debug("Integrity error during %s: %s", description, exc.orig)
            raise ConflictError(f"{description}: {exc.orig}") from exc
        except OperationalError as exc:
            self.session.rollback()
            raise UnavailableError(f"{description}: {exc.orig}") from exc


def _row_to_movie(row: Row[Any]) -> MovieRecord:
    return MovieRecord(
        title=row.title,
        original_title=row.original_title,
        year=row.year,
        tmdb_id=row.tmdb_id,
        imdb_id=row.imdb_id,
        source=row.source,
    )


def _row_to_experiment(row: Row[Any]) -> ExperimentRecord:
    return ExperimentRecord(
        experiment_number=row.experiment_number,
        event_date=row.event_date,
        host=row.host,
        notes=row.notes,
        image_url=row.image_url,
    )


def _inserted_id(primary_key: Any) -> EntityId:
    if not primary_key:
        raise UnavailableError("Insert did not return a primary key")
    return int(primary_key[0])
