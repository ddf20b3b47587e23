"""Filesystem-backed catalog of EPUB and PDF files."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import PurePosixPath
from typing import BinaryIO, Callable, Optional

from .. import logging_manager as log_mgr
from ..config_manager import MAX_PER_PAGE
from ..storage import FileStorage
from .catalog_models import (
    CatalogEntry,
    CatalogPage,
    CatalogStats,
    CoverStream,
    file_extension,
    guess_mime_type,
    is_supported_file,
)
from .errors import InvalidIdentifierError, StorageUnavailableError
from .identifiers import decode_identifier, encode_identifier
from .metadata_cache import MetadataCache
from .metadata_extractor import open_archive_member

logger = log_mgr.get_logger().getChild("catalog.service")


def _clamp_per_page(per_page: int) -> int:
    return max(1, min(MAX_PER_PAGE, int(per_page)))


def _clamp_page(page: int) -> int:
    return max(1, int(page))


class CatalogService:
    """Enumerate, describe, and stream the files below a storage root.

    The filesystem is the source of truth: every call re-reads the listing
    and file stats. Derived metadata is shared across calls through
    :class:`MetadataCache`.
    """

    def __init__(
        self,
        storage: FileStorage,
        metadata_cache: MetadataCache,
        *,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self._storage = storage
        self._metadata = metadata_cache
        self._clock = clock

    @property
    def storage(self) -> FileStorage:
        return self._storage

    def list_paths(self, query: Optional[str] = None) -> list[str]:
        """Return supported files, optionally filtered by base name, sorted by path."""

        files = [path for path in self._storage.list_files() if is_supported_file(path)]
        needle = (query or "").casefold()
        if needle:
            files = [
                path for path in files if needle in PurePosixPath(path).name.casefold()
            ]
        return sorted(files)

    def build_entry(self, path: str) -> CatalogEntry:
        """Combine filesystem stats with cached metadata for ``path``."""

        metadata = self._metadata.get_or_compute(path)
        return CatalogEntry(
            id=encode_identifier(path),
            path=path,
            file_name=PurePosixPath(path).name,
            extension=file_extension(path),
            file_size=self._storage.size(path),
            last_modified=self._storage.last_modified(path),
            mime_type=guess_mime_type(path),
            title=metadata.title,
            author=metadata.author,
            language=metadata.language,
            cover_path=metadata.cover_path,
        )

    def paginate(self, per_page: int, page: int, query: Optional[str] = None) -> CatalogPage:
        """Return one page of entries and the total number of matches."""

        per_page = _clamp_per_page(per_page)
        page = _clamp_page(page)
        with log_mgr.timed_event(
            "catalog.paginate", "Listed catalog page", logger_obj=logger, page=page, per_page=per_page
        ) as details:
            paths = self.list_paths(query)
            offset = (page - 1) * per_page
            items = [self.build_entry(path) for path in paths[offset : offset + per_page]]
            details["total"] = len(paths)
        return CatalogPage(total=len(paths), page=page, per_page=per_page, items=items)

    def find_by_id(self, identifier: str) -> Optional[CatalogEntry]:
        """Return the entry addressed by ``identifier``, or ``None``.

        Malformed identifiers and unknown paths are indistinguishable.
        """

        try:
            path = decode_identifier(identifier)
        except InvalidIdentifierError:
            logger.debug("Rejected malformed identifier", extra={"event": "catalog.lookup.invalid_id"})
            return None
        if not self._storage.exists(path):
            return None
        return self.build_entry(path)

    def stream(self, path: str) -> BinaryIO:
        """Open ``path`` for sequential reading.

        Raises :class:`StorageUnavailableError` when the file cannot be opened.
        """

        try:
            return self._storage.open_read_stream(path)
        except (OSError, ValueError) as exc:
            logger.warning(
                "Unable to open catalog file",
                extra={"event": "catalog.stream.unavailable", "path": path, "error": str(exc)},
            )
            raise StorageUnavailableError(f"Unable to open '{path}'") from exc

    def stream_cover(self, path: str) -> Optional[CoverStream]:
        """Open the cover image stored inside the archive at ``path``."""

        metadata = self._metadata.get_or_compute(path)
        cover_path = metadata.cover_path
        if not cover_path:
            return None
        absolute = self._storage.absolute_path(path)
        if absolute is None:
            return None
        handle = open_archive_member(absolute, cover_path)
        if handle is None:
            logger.debug(
                "Declared cover is missing from archive",
                extra={"event": "catalog.cover.missing", "path": path, "cover_path": cover_path},
            )
            return None
        return CoverStream(stream=handle, mime_type=guess_mime_type(cover_path), cover_path=cover_path)

    def stats(self) -> CatalogStats:
        """Aggregate size and modification time over the unfiltered catalog."""

        total_size = 0
        latest: Optional[float] = None
        with log_mgr.timed_event("catalog.stats", "Computed catalog stats", logger_obj=logger) as details:
            paths = self.list_paths()
            for path in paths:
                total_size += self._storage.size(path)
                modified = self._storage.last_modified(path)
                latest = modified if latest is None else max(latest, modified)
            details["count"] = len(paths)
        return CatalogStats(
            count=len(paths),
            total_size_bytes=total_size,
            most_recent_modification=latest,
            generated_at=self._clock(),
        )

    def resolve_public_url(self, path: str) -> Optional[str]:
        """Return a best-effort public URL for ``path``."""

        try:
            return self._storage.public_url(path)
        except ValueError:
            return None


__all__ = ["CatalogService"]
