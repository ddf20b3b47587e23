"""Recover bibliographic metadata from EPUB archives.

Every parse failure is absorbed here: callers receive ``None`` (the archive
could not be read at all) or a :class:`BookMetadata` whose missing fields are
``None``. Nothing in this module raises for a corrupt or foreign file.
"""

from __future__ import annotations

import zipfile
import zlib
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Optional
from urllib.parse import unquote

from lxml import etree

from .. import logging_manager as log_mgr
from .catalog_models import BookMetadata
from .cover_resolver import resolve_cover_path

logger = log_mgr.get_logger().getChild("catalog.metadata")

CONTAINER_PATH = "META-INF/container.xml"
NAMESPACES = {
    "dc": "http://purl.org/dc/elements/1.1/",
    "opf": "http://www.idpf.org/2007/opf",
}

# zipfile raises RuntimeError for encrypted members and zlib.error for damaged
# deflate data.
_ARCHIVE_ERRORS = (
    zipfile.BadZipFile,
    zipfile.LargeZipFile,
    OSError,
    ValueError,
    EOFError,
    RuntimeError,
    NotImplementedError,
    zlib.error,
)


@dataclass(frozen=True)
class PackageDocument:
    """Parsed OPF package document and its location inside the archive."""

    root: etree._Element
    path: str


def _xml_parser() -> etree.XMLParser:
    return etree.XMLParser(resolve_entities=False, no_network=True, load_dtd=False, recover=False)


def parse_xml(raw: bytes) -> Optional[etree._Element]:
    """Parse ``raw`` strictly, returning ``None`` for malformed documents."""

    try:
        return etree.fromstring(raw, parser=_xml_parser())
    except (etree.XMLSyntaxError, ValueError):
        return None


def _read_member(archive: zipfile.ZipFile, name: str) -> Optional[bytes]:
    try:
        return archive.read(name)
    except KeyError:
        return None


def _rootfile_path(container: etree._Element) -> Optional[str]:
    for rootfile in container.xpath("//*[local-name()='rootfile']"):
        full_path = (rootfile.get("full-path") or "").strip()
        return full_path or None
    return None


def load_package_document(archive: zipfile.ZipFile) -> Optional[PackageDocument]:
    """Follow ``META-INF/container.xml`` to the package document and parse it."""

    container_raw = _read_member(archive, CONTAINER_PATH)
    if container_raw is None:
        return None
    container = parse_xml(container_raw)
    if container is None:
        return None
    package_path = _rootfile_path(container)
    if not package_path:
        return None
    package_raw = _read_member(archive, package_path)
    if package_raw is None:
        return None
    package = parse_xml(package_raw)
    if package is None:
        return None
    return PackageDocument(root=package, path=package_path)


def first_dublin_core_value(package: etree._Element, element: str) -> Optional[str]:
    """Return the trimmed text of the first ``dc:<element>``; blank counts as absent."""

    nodes = package.xpath(f"//dc:{element}", namespaces=NAMESPACES)
    if not nodes:
        return None
    value = "".join(nodes[0].itertext()).strip()
    return value or None


def metadata_from_package(document: PackageDocument) -> BookMetadata:
    root = document.root
    return BookMetadata(
        title=first_dublin_core_value(root, "title"),
        author=first_dublin_core_value(root, "creator"),
        language=first_dublin_core_value(root, "language"),
        cover_path=resolve_cover_path(root, document.path),
    )


def extract_metadata(archive_path: Path | str) -> Optional[BookMetadata]:
    """Return metadata parsed from the EPUB at ``archive_path``, or ``None``."""

    try:
        with zipfile.ZipFile(archive_path) as archive:
            document = load_package_document(archive)
    except _ARCHIVE_ERRORS as exc:
        logger.debug(
            "Archive %s is unreadable: %s",
            archive_path,
            exc,
            extra={"event": "catalog.metadata.archive_unreadable"},
        )
        return None
    if document is None:
        logger.debug(
            "No package document found in %s",
            archive_path,
            extra={"event": "catalog.metadata.package_missing"},
        )
        return None
    return metadata_from_package(document)


def open_archive_member(archive_path: Path | str, member: str) -> Optional[IO[bytes]]:
    """Open ``member`` inside the archive for streaming, or return ``None``.

    The returned file object keeps the archive's handle alive; closing it
    releases the archive.
    """

    candidates = [member.lstrip("/")]
    decoded = unquote(candidates[0])
    if decoded != candidates[0]:
        candidates.append(decoded)
    try:
        with zipfile.ZipFile(archive_path) as archive:
            for candidate in candidates:
                try:
                    return archive.open(candidate)
                except KeyError:
                    continue
    except _ARCHIVE_ERRORS as exc:
        logger.debug(
            "Unable to open %s inside %s: %s",
            member,
            archive_path,
            exc,
            extra={"event": "catalog.cover.open_failed"},
        )
    return None


__all__ = [
    "CONTAINER_PATH",
    "NAMESPACES",
    "PackageDocument",
    "extract_metadata",
    "first_dublin_core_value",
    "load_package_document",
    "metadata_from_package",
    "open_archive_member",
    "parse_xml",
]
