"""Ports for reading external catalog descriptions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from pathlib import Path

    from reelsync.domain.model import Dataset


class SourceFormatError(ValueError):
    """Raised when a source file cannot be read as a catalog description."""

    def __init__(self, path: Path | str, message: str) -> None:
        super().__init__(f"{path}: {message}")
        self.path = path


@runtime_checkable
class DatasetReader(Protocol):
    """Callable port turning a source file into a :class:`Dataset`."""

    def __call__(self, path: Path) -> Dataset: ...
