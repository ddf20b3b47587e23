"""Copy PDF/EPUB files into library storage and register them in ``books``."""

from __future__ import annotations

import os
import re
import secrets
import shutil
import string
import subprocess
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from .. import logging_manager as log_mgr
from ..catalog.catalog_models import SUPPORTED_EXTENSIONS, guess_mime_type
from ..catalog.errors import ImportSourceError
from ..config_manager import DEFAULT_IMPORT_PREFIX
from ..database.models import BookRecord
from ..storage import FileStorage

logger = log_mgr.get_logger().getChild("importer")

_TITLE_SEPARATORS = re.compile(r"[_\-]+")
_PAGES_PATTERN = re.compile(r"^Pages:\s+(\d+)", re.IGNORECASE)
_TOKEN_ALPHABET = string.ascii_letters + string.digits

Reporter = Callable[[str], None]


def derive_title(file_name: str) -> str:
    """Return a readable title from a file name: separators become spaces."""

    stem = Path(file_name).stem
    return _TITLE_SEPARATORS.sub(" ", stem).strip()


def random_token(length: int = 8) -> str:
    return "".join(secrets.choice(_TOKEN_ALPHABET) for _ in range(length))


def pdf_page_count(path: Path) -> Optional[int]:
    """Return the page count reported by ``pdfinfo``, or ``None``."""

    executable = shutil.which("pdfinfo")
    if executable is None:
        return None
    try:
        completed = subprocess.run(
            [executable, str(path)],
            capture_output=True,
            text=True,
            timeout=30,
            check=False,
        )
    except (OSError, subprocess.SubprocessError):
        logger.debug("pdfinfo failed for %s", path, exc_info=True)
        return None
    if completed.returncode != 0:
        return None
    for line in completed.stdout.splitlines():
        match = _PAGES_PATTERN.match(line.strip())
        if match:
            return int(match.group(1))
    return None


@dataclass(frozen=True)
class ImportedFile:
    filename: str
    storage_path: str
    record_id: Optional[int] = None


@dataclass
class ImportSummary:
    imported: int = 0
    skipped: int = 0
    files: list[ImportedFile] = field(default_factory=list)


class BookImporter:
    """Scan a directory tree and import every supported e-book file found."""

    def __init__(
        self,
        storage: FileStorage,
        session_factory: Optional[sessionmaker[Session]] = None,
        *,
        copy: bool = True,
        prefix: str = DEFAULT_IMPORT_PREFIX,
        page_counter: Callable[[Path], Optional[int]] = pdf_page_count,
        clock: Callable[[], datetime] = datetime.now,
        token_factory: Callable[[], str] = random_token,
    ) -> None:
        self._storage = storage
        self._session_factory = session_factory
        self._copy = copy
        self._prefix = prefix.strip("/")
        self._page_counter = page_counter
        self._clock = clock
        self._token_factory = token_factory

    def _iter_candidates(self, source: Path) -> list[Path]:
        candidates = []
        for path in source.rglob("*"):
            if not path.is_file():
                continue
            if path.suffix[1:].lower() not in SUPPORTED_EXTENSIONS:
                continue
            candidates.append(path)
        return sorted(candidates)

    def _destination(self, filename: str) -> str:
        parts = [self._prefix] if self._prefix else []
        parts.append(self._clock().strftime("%Y%m%d"))
        parts.append(f"{self._token_factory()}_{filename}")
        return "/".join(parts)

    def _is_duplicate(self, filename: str, size: int) -> bool:
        if self._session_factory is None:
            return False
        try:
            with self._session_factory() as session:
                existing = session.scalars(
                    select(BookRecord.id).where(
                        BookRecord.filename == filename,
                        BookRecord.size == size,
                    )
                ).first()
        except SQLAlchemyError:
            logger.warning("Duplicate check failed for %s", filename, exc_info=True)
            return False
        return existing is not None

    def _persist(self, payload: dict) -> Optional[int]:
        if self._session_factory is None:
            return None
        try:
            with self._session_factory() as session, session.begin():
                record = BookRecord(**payload)
                session.add(record)
                session.flush()
                return record.id
        except SQLAlchemyError as exc:
            logger.warning(
                "Failed to persist DB record for %s: %s",
                payload.get("filename"),
                exc,
                extra={"event": "importer.persist_failed"},
            )
            return None

    def _copy_into_storage(self, source: Path, destination: str) -> bool:
        try:
            with source.open("rb") as stream:
                self._storage.write_stream(destination, stream)
        except OSError as exc:
            logger.warning(
                "Failed to write to library storage: %s (%s)",
                destination,
                exc,
                extra={"event": "importer.write_failed"},
            )
            return False
        return True

    def _public_url(self, storage_path: str) -> Optional[str]:
        try:
            return self._storage.public_url(storage_path)
        except ValueError:
            return None

    def import_directory(self, source: Path | str, reporter: Optional[Reporter] = None) -> ImportSummary:
        """Import every ``.pdf``/``.epub`` below ``source``.

        Raises :class:`ImportSourceError` when ``source`` is not a directory.
        Individual files that cannot be read, copied, or are already
        registered are counted as skipped.
        """

        root = Path(source).expanduser()
        if not root.is_dir():
            raise ImportSourceError(f"Path not found or not a directory: {source}")
        root = root.resolve()
        report = reporter or (lambda message: None)
        summary = ImportSummary()

        for path in self._iter_candidates(root):
            if not os.access(path, os.R_OK):
                report(f"Cannot read file: {path}")
                summary.skipped += 1
                continue

            filename = path.name
            size = path.stat().st_size
            if self._is_duplicate(filename, size):
                report(f"Skipping (already registered): {filename}")
                summary.skipped += 1
                continue

            if self._copy:
                storage_path = self._destination(filename)
                if not self._copy_into_storage(path, storage_path):
                    report(f"Failed to write to library storage: {storage_path}")
                    summary.skipped += 1
                    continue
                url = self._public_url(storage_path)
            else:
                storage_path = str(path)
                url = None

            pages = self._page_counter(path) if path.suffix.lower() == ".pdf" else None
            record_id = self._persist(
                {
                    "title": derive_title(filename),
                    "filename": filename,
                    "path": storage_path,
                    "url": url,
                    "mime_type": guess_mime_type(filename),
                    "size": size,
                    "pages": pages,
                }
            )
            summary.imported += 1
            summary.files.append(
                ImportedFile(filename=filename, storage_path=storage_path, record_id=record_id)
            )
            report(f"Imported: {filename}" + (f" (id: {record_id})" if record_id else ""))

        logger.info(
            "Import complete. Imported: %d. Skipped: %d.",
            summary.imported,
            summary.skipped,
            extra={"event": "importer.complete"},
        )
        return summary


__all__ = [
    "BookImporter",
    "ImportSummary",
    "ImportedFile",
    "derive_title",
    "pdf_page_count",
]
