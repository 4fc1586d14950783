"""Read the flat-file catalog export."""

from __future__ import annotations

import csv
import logging
from typing import TYPE_CHECKING

from pydantic import ValidationError

from reelsync.domain.ports import SourceFormatError

from .schema import REQUIRED_COLUMNS, CsvRow
from .translator import translate_rows

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from reelsync.domain.model import Dataset

log = logging.getLogger(__name__)


def read_csv_dataset(path: Path) -> Dataset:
    """Read ``path`` and return its movies and experiments."""

    rows = list(iter_rows(path))
    dataset = translate_rows(rows)
    log.info(
        "Read %d rows from %s: %d experiments, %d loose movies",
        len(rows),
        path,
        len(dataset.experiments),
        len(dataset.movies),
    )
    return dataset


def iter_rows(path: Path) -> Iterator[CsvRow]:
    try:
        with path.open(newline="", encoding="utf-8-sig") as handle:
            reader = csv.DictReader(handle)
            columns = set(reader.fieldnames or ())
            missing = REQUIRED_COLUMNS - columns
            if missing:
                raise SourceFormatError(path, f"missing columns: {', '.join(sorted(missing))}")
            for line_number, raw in enumerate(reader, start=2):
                try:
                    yield CsvRow.model_validate(
                        {key: value for key, value in raw.items() if key is not None}
                    )
                except ValidationError as exc:
                    raise SourceFormatError(path, f"line {line_number}: {exc}") from exc
    except (OSError, UnicodeDecodeError, csv.Error) as exc:
        raise SourceFormatError(path, str(exc)) from exc
