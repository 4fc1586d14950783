from __future__ import annotations

import pytest

from reelsync.adapters.external_ids import extract_imdb_id, extract_tmdb_id


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("https://www.themoviedb.org/movie/17473-the-room", "17473"),
        ("https://www.themoviedb.org/tv/1399", None),
        ("", None),
        (None, None),
    ],
)
def test_extract_tmdb_id(url: str | None, expected: str | None) -> None:
    assert extract_tmdb_id(url) == expected


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("tt0368226", "tt0368226"),
        ("https://www.imdb.com/title/tt0368226/?ref_=fn", "tt0368226"),
        ("tt12", None),
        (None, None),
    ],
)
def test_extract_imdb_id(value: str | None, expected: str | None) -> None:
    assert extract_imdb_id(value) == expected
