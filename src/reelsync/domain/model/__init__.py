"""Public domain model surface."""

from __future__ import annotations

from reelsync.domain.model.enums import (
    EntityType,
    ExperimentField,
    KeyKind,
    MovieField,
    SourceTag,
)
from reelsync.domain.model.keys import (
    UNKNOWN_YEAR,
    EntityKey,
    ExperimentKey,
    IdentityKey,
    LinkKey,
)
from reelsync.domain.model.records import (
    Dataset,
    ExperimentRecord,
    MovieRecord,
    coerce_field_value,
    is_blank,
)

__all__ = [
    "UNKNOWN_YEAR",
    "Dataset",
    "EntityKey",
    "EntityType",
    "ExperimentField",
    "ExperimentKey",
    "ExperimentRecord",
    "IdentityKey",
    "KeyKind",
    "LinkKey",
    "MovieField",
    "MovieRecord",
    "SourceTag",
    "coerce_field_value",
    "is_blank",
]
