"""Read the scraped website dump (JSON)."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from pydantic import ValidationError

from reelsync.domain.ports import SourceFormatError

from .schema import WordPressDump
from .translator import translate_dump

if TYPE_CHECKING:
    from pathlib import Path

    from reelsync.domain.model import Dataset

log = logging.getLogger(__name__)


def load_dump(path: Path) -> WordPressDump:
    """Parse ``path``; a bare JSON list is read as the list of experiments."""

    try:
        payload: object = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise SourceFormatError(path, str(exc)) from exc
    if isinstance(payload, list):
        payload = {"experiments": payload}
    try:
        return WordPressDump.model_validate(payload)
    except ValidationError as exc:
        raise SourceFormatError(path, str(exc)) from exc


def read_wordpress_dataset(path: Path) -> Dataset:
    dataset = translate_dump(load_dump(path))
    log.info(
        "Read %d experiments (%d movie mentions) from %s",
        len(dataset.experiments),
        sum(len(experiment.movies) for experiment in dataset.experiments),
        path,
    )
    return dataset
