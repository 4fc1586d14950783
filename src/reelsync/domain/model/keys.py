"""Identity keys addressing movies and experiments across sources."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final, Literal

from .enums import EntityType, KeyKind

UNKNOWN_YEAR: Final[str] = "unknown"
_TITLE_TOKEN_PREFIX: Final[str] = "title"


@dataclass(frozen=True, slots=True, order=True)
class IdentityKey:
    """Strongest available identity of a movie.

    ``year`` is only meaningful for ``KeyKind.TITLE_YEAR`` keys, where it holds
    the 4-digit year or ``"unknown"``.
    """

    kind: KeyKind
    value: str
    year: str | None = None

    entity_type: Literal[EntityType.MOVIE] = EntityType.MOVIE

    @classmethod
    def tmdb(cls, tmdb_id: str) -> IdentityKey:
        return cls(kind=KeyKind.TMDB, value=tmdb_id)

    @classmethod
    def imdb(cls, imdb_id: str) -> IdentityKey:
        return cls(kind=KeyKind.IMDB, value=imdb_id)

    @classmethod
    def title_year(cls, normalized_title: str, year: str | None) -> IdentityKey:
        return cls(kind=KeyKind.TITLE_YEAR, value=normalized_title, year=year or UNKNOWN_YEAR)

    @property
    def is_external(self) -> bool:
        return self.kind is not KeyKind.TITLE_YEAR

    def token(self) -> str:
        """Render the key as a compact, parseable token."""

        if self.kind is KeyKind.TITLE_YEAR:
            return f"{_TITLE_TOKEN_PREFIX}:{self.value}|{self.year or UNKNOWN_YEAR}"
        return f"{self.kind}:{self.value}"

    @classmethod
    def parse(cls, token: str) -> IdentityKey:
        """Parse a token produced by :meth:`token`."""

        prefix, sep, rest = token.strip().partition(":")
        if not sep or not rest:
            raise ValueError(f"Invalid identity key token: {token!r}")
        if prefix == _TITLE_TOKEN_PREFIX:
            title, _, year = rest.rpartition("|")
            if not title:
                raise ValueError(f"Invalid title key token: {token!r}")
            return cls.title_year(title, year or None)
        try:
            kind = KeyKind(prefix)
        except ValueError as exc:
            raise ValueError(f"Unknown identity key kind: {prefix!r}") from exc
        if kind is KeyKind.TITLE_YEAR:
            raise ValueError(f"Title keys use the {_TITLE_TOKEN_PREFIX!r} prefix: {token!r}")
        return cls(kind=kind, value=rest)

    def __str__(self) -> str:
        return self.token()


@dataclass(frozen=True, slots=True, order=True)
class ExperimentKey:
    """Natural key of an experiment."""

    experiment_number: str

    entity_type: Literal[EntityType.EXPERIMENT] = EntityType.EXPERIMENT

    def token(self) -> str:
        return f"experiment:{self.experiment_number}"

    def __str__(self) -> str:
        return self.token()


type EntityKey = IdentityKey | ExperimentKey
type LinkKey = tuple[IdentityKey, str]
