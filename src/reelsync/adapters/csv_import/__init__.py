"""Flat-file catalog export adapter."""

from __future__ import annotations

from .reader import iter_rows, read_csv_dataset
from .schema import CsvRow
from .translator import translate_movie, translate_rows

__all__ = [
    "CsvRow",
    "iter_rows",
    "read_csv_dataset",
    "translate_movie",
    "translate_rows",
]
