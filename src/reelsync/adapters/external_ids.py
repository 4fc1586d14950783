"""Extract movie database identifiers from links found in sources."""

from __future__ import annotations

import re

_TMDB_URL_RE = re.compile(r"themoviedb\.org/movie/(\d+)")
_IMDB_ID_RE = re.compile(r"\b(tt\d{5,})\b")


def extract_tmdb_id(url: str | None) -> str | None:
    if not url:
        return None
    match = _TMDB_URL_RE.search(url)
    return match.group(1) if match else None


def extract_imdb_id(value: str | None) -> str | None:
    """Accept a bare ``tt`` identifier or any text containing one."""

    if not value:
        return None
    match = _IMDB_ID_RE.search(value)
    return match.group(1) if match else None
