"""Storage abstraction consumed by the catalog engine and the importer."""

from __future__ import annotations

from pathlib import Path
from typing import BinaryIO, Optional, Protocol, runtime_checkable


@runtime_checkable
class FileStorage(Protocol):
    """Minimal file-storage contract keyed by root-relative POSIX paths."""

    def list_files(self) -> list[str]:
        """Return every file below the storage root."""

    def open_read_stream(self, path: str) -> BinaryIO:
        """Open ``path`` for sequential binary reading."""

    def size(self, path: str) -> int:
        ...

    def last_modified(self, path: str) -> float:
        ...

    def exists(self, path: str) -> bool:
        ...

    def absolute_path(self, path: str) -> Optional[Path]:
        """Return a local filesystem location, or ``None`` for remote backends."""

    def public_url(self, path: str) -> Optional[str]:
        """Return a best-effort public URL for ``path``."""

    def write_stream(self, path: str, stream: BinaryIO) -> int:
        """Copy ``stream`` into ``path`` and return the number of bytes written."""


__all__ = ["FileStorage"]
