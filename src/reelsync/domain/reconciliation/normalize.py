"""Canonical comparison forms for free-text catalog values.

Responsibilities of this stage:
- turn titles, hosts and experiment numbers into deterministic comparison keys
- stay total: any input, including ``None``, yields a string
- avoid any knowledge of sources or storage
"""

from __future__ import annotations

import re
import unicodedata
from datetime import date, datetime
from typing import Final

QUOTE_CHARACTERS: Final[str] = "\"'`‘’‚‛“”„‟«»"
TRAILING_ARTICLES: Final[tuple[str, ...]] = ("the", "a", "an")
EXPERIMENT_NUMBER_WIDTH: Final[int] = 3

_WHITESPACE_RE = re.compile(r"\s+")
_TRAILING_ARTICLE_RE = re.compile(
    r"^(?P<body>.+?)\s*,\s*(?P<article>" + "|".join(TRAILING_ARTICLES) + r")$"
)
_AKA_SUFFIX_RE = re.compile(r"\s+aka\s+.+$", re.IGNORECASE)
_AKA_PARENTHETICAL_RE = re.compile(r"\s+\(.+aka.+\)", re.IGNORECASE)
_YEAR_RE = re.compile(r"(\d{4})")
_DIGITS_RE = re.compile(r"(\d+)")
_SCREENING_MARKER_RE = re.compile(r"\b(encore|matinee)\b", re.IGNORECASE)
_DATE_FORMATS: Final[tuple[str, ...]] = (
    "%m/%d/%Y",
    "%m/%d/%y",
    "%Y/%m/%d",
    "%B %d, %Y",
    "%b %d, %Y",
    "%d %B %Y",
    "%A, %B %d, %Y",
)


def normalize(value: str | None) -> str:
    """Return the base comparison form of ``value``.

    Trims, case-folds, collapses whitespace runs and strips surrounding quote
    characters. ``normalize(normalize(s)) == normalize(s)`` for every input.
    """

    if not value:
        return ""
    text = value.strip().casefold()
    text = _WHITESPACE_RE.sub(" ", text)
    return text.strip(QUOTE_CHARACTERS + " ")


def normalize_for_fuzzy_match(value: str | None) -> str:
    """Return the title comparison form used by the similarity scorer.

    Builds on :func:`normalize`, then moves a trailing article to the front
    ("laughing dead, the" -> "the laughing dead"), folds accents and removes
    punctuation and symbols.
    """

    text = normalize(value)
    if not text:
        return ""
    article_match = _TRAILING_ARTICLE_RE.match(text)
    if article_match is not None:
        text = f"{article_match.group('article')} {article_match.group('body')}"
    decomposed = unicodedata.normalize("NFKD", text)
    kept = "".join(ch for ch in decomposed if _keep_for_fuzzy_match(ch))
    return _WHITESPACE_RE.sub(" ", kept).strip()


def _keep_for_fuzzy_match(ch: str) -> bool:
    category = unicodedata.category(ch)
    return not (category == "Mn" or category.startswith(("P", "S")))


def normalize_experiment_number(value: str | int | None) -> str:
    """Zero-pad the first number found in ``value`` ("36" -> "036").

    Returns an empty string when ``value`` carries no digits.
    """

    if value is None:
        return ""
    match = _DIGITS_RE.search(str(value))
    if match is None:
        return ""
    return str(int(match.group(1))).zfill(EXPERIMENT_NUMBER_WIDTH)


def extract_year(value: str | int | None) -> str | None:
    """Return the first 4-digit run of ``value``."""

    if value is None:
        return None
    match = _YEAR_RE.search(str(value))
    return match.group(1) if match else None


def clean_movie_title(title: str | None) -> str:
    """Drop "aka ..." alternate-title fragments appended by curators."""

    if not title:
        return ""
    cleaned = _AKA_SUFFIX_RE.sub("", title)
    cleaned = _AKA_PARENTHETICAL_RE.sub("", cleaned)
    return cleaned.strip()


def clean_optional_text(value: str | None) -> str | None:
    """Collapse whitespace and map blank strings to ``None``."""

    if value is None:
        return None
    text = _WHITESPACE_RE.sub(" ", value).strip()
    return text or None


def clean_experiment_notes(notes: str | None) -> str | None:
    """Remove encore/matinee markers; blank results become ``None``."""

    if not notes:
        return None
    return clean_optional_text(_SCREENING_MARKER_RE.sub("", notes))


def parse_event_date(value: str | None) -> date | None:
    """Parse the date spellings found in exports and scraped posts."""

    text = clean_optional_text(value)
    if text is None:
        return None
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()  # noqa: DTZ007
        except ValueError:
            continue
    return None
