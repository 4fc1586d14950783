"""Identity key resolution for movie records.

External identifiers are unambiguous and always outrank the fuzzy title key.
Two records with equal keys are the same entity with certainty.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from reelsync.domain.model import UNKNOWN_YEAR, IdentityKey, KeyKind

from .normalize import extract_year, normalize
from .policy import DEFAULT_POLICY

if TYPE_CHECKING:
    from reelsync.domain.model import MovieRecord

    from .policy import MatchPolicy


def resolve_key(movie: MovieRecord) -> IdentityKey:
    """Return the strongest identity key available for ``movie``."""

    tmdb_id = _clean_id(movie.tmdb_id)
    if tmdb_id:
        return IdentityKey.tmdb(tmdb_id)
    imdb_id = _clean_id(movie.imdb_id)
    if imdb_id:
        return IdentityKey.imdb(imdb_id)
    return IdentityKey.title_year(normalize(movie.title), extract_year(movie.year))


def year_difference(left: str | None, right: str | None) -> int | None:
    """Absolute distance between two years, ``None`` when either is unknown."""

    left_year = extract_year(left)
    right_year = extract_year(right)
    if left_year is None or right_year is None:
        return None
    return abs(int(left_year) - int(right_year))


def years_within(left: str | None, right: str | None, tolerance: int) -> bool:
    """Return whether both years are known and at most ``tolerance`` apart."""

    difference = year_difference(left, right)
    return difference is not None and difference <= tolerance


def shares_external_id(left: MovieRecord, right: MovieRecord) -> bool:
    left_tmdb, right_tmdb = _clean_id(left.tmdb_id), _clean_id(right.tmdb_id)
    if left_tmdb and left_tmdb == right_tmdb:
        return True
    left_imdb, right_imdb = _clean_id(left.imdb_id), _clean_id(right.imdb_id)
    return bool(left_imdb) and left_imdb == right_imdb


def has_conflicting_external_ids(left: MovieRecord, right: MovieRecord) -> bool:
    """Return whether both records carry different IDs in the same namespace."""

    for left_id, right_id in (
        (_clean_id(left.tmdb_id), _clean_id(right.tmdb_id)),
        (_clean_id(left.imdb_id), _clean_id(right.imdb_id)),
    ):
        if left_id and right_id and left_id != right_id:
            return True
    return False


def same_entity(
    left: MovieRecord,
    right: MovieRecord,
    *,
    policy: MatchPolicy = DEFAULT_POLICY,
) -> bool:
    """Decide whether two records describe the same movie with certainty."""

    if resolve_key(left) == resolve_key(right) or shares_external_id(left, right):
        return True
    if has_conflicting_external_ids(left, right):
        return False
    return normalize(left.title) == normalize(right.title) and years_within(
        left.year, right.year, policy.exact_year_tolerance
    )


def _clean_id(value: str | None) -> str:
    return value.strip() if value else ""


def matches_key(movie: MovieRecord, key: IdentityKey) -> bool:
    """Return whether ``movie`` is addressed by ``key``.

    Title keys ignore external IDs so a movie stays findable after an ID was
    filled in.
    """

    match key.kind:
        case KeyKind.TMDB:
            return _clean_id(movie.tmdb_id) == key.value
        case KeyKind.IMDB:
            return _clean_id(movie.imdb_id) == key.value
        case KeyKind.TITLE_YEAR:
            year = extract_year(movie.year) or UNKNOWN_YEAR
            return normalize(movie.title) == key.value and year == (key.year or UNKNOWN_YEAR)
