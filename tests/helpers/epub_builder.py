"""Utility helpers for creating synthetic EPUB files for catalog tests."""

from __future__ import annotations

import struct
import zipfile
from pathlib import Path
from typing import Iterable, Mapping, Optional, Sequence
from xml.sax.saxutils import escape, quoteattr

_EPUB_MIMETYPE = "application/epub+zip"

# Smallest valid PNG: 1x1 transparent pixel.
PNG_BYTES = (
    b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01\x08\x06"
    b"\x00\x00\x00\x1f\x15\xc4\x89\x00\x00\x00\rIDATx\x9cc\xf8\x0f\x00\x00\x01\x01"
    b"\x00\x05\x18\xd8N\x00\x00\x00\x00IEND\xaeB`\x82"
)


def container_xml(package_path: str) -> str:
    return (
        "<?xml version='1.0' encoding='utf-8'?>\n"
        "<container version=\"1.0\" xmlns=\"urn:oasis:names:tc:opendocument:xmlns:container\">\n"
        "  <rootfiles>\n"
        f"    <rootfile full-path={quoteattr(package_path)} media-type=\"application/oebps-package+xml\"/>\n"
        "  </rootfiles>\n"
        "</container>\n"
    )


def _manifest_item(attributes: Mapping[str, str]) -> str:
    rendered = " ".join(f"{name}={quoteattr(value)}" for name, value in attributes.items())
    return f"    <item {rendered}/>"


def package_opf(
    *,
    title: Optional[str] = "Sample EPUB",
    creator: Optional[str] = None,
    language: Optional[str] = "en",
    metas: Sequence[Mapping[str, str]] = (),
    manifest: Sequence[Mapping[str, str]] = (),
) -> str:
    """Render an OPF package document with the given metadata and manifest."""

    metadata_lines = []
    if title is not None:
        metadata_lines.append(f"    <dc:title>{escape(title)}</dc:title>")
    if creator is not None:
        metadata_lines.append(f"    <dc:creator>{escape(creator)}</dc:creator>")
    if language is not None:
        metadata_lines.append(f"    <dc:language>{escape(language)}</dc:language>")
    for meta in metas:
        rendered = " ".join(f"{name}={quoteattr(value)}" for name, value in meta.items())
        metadata_lines.append(f"    <meta {rendered}/>")

    manifest_lines = [_manifest_item(item) for item in manifest] or [
        _manifest_item({"id": "chapter1", "href": "chapter1.xhtml", "media-type": "application/xhtml+xml"})
    ]

    return (
        "<?xml version='1.0' encoding='utf-8'?>\n"
        "<package xmlns=\"http://www.idpf.org/2007/opf\" version=\"3.0\" unique-identifier=\"bookid\">\n"
        "  <metadata xmlns:dc=\"http://purl.org/dc/elements/1.1/\">\n"
        + "\n".join(metadata_lines)
        + "\n  </metadata>\n"
        "  <manifest>\n"
        + "\n".join(manifest_lines)
        + "\n  </manifest>\n"
        "</package>\n"
    )


def write_epub(
    output_path: Path | str,
    *,
    package_path: str = "OEBPS/content.opf",
    package: Optional[str] = None,
    files: Optional[Mapping[str, bytes]] = None,
    container: Optional[str] = None,
    compression: int = zipfile.ZIP_STORED,
    **opf_kwargs,
) -> Path:
    """Write a minimal EPUB archive to ``output_path`` and return its path."""

    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    document = package if package is not None else package_opf(**opf_kwargs)
    with zipfile.ZipFile(path, "w", compression=compression) as archive:
        archive.writestr("mimetype", _EPUB_MIMETYPE, compress_type=zipfile.ZIP_STORED)
        archive.writestr(
            "META-INF/container.xml",
            container if container is not None else container_xml(package_path),
        )
        archive.writestr(package_path, document)
        for name, payload in (files or {}).items():
            archive.writestr(name, payload)
    return path


def write_epub_with_cover(
    output_path: Path | str,
    *,
    cover_href: str = "images/cover.png",
    package_path: str = "OEBPS/content.opf",
    cover_bytes: bytes = PNG_BYTES,
    **opf_kwargs,
) -> Path:
    """Write an EPUB whose cover is declared through ``<meta name="cover">``."""

    directory = package_path.rsplit("/", 1)[0] if "/" in package_path else ""
    member = f"{directory}/{cover_href}" if directory else cover_href
    return write_epub(
        output_path,
        package_path=package_path,
        metas=[{"name": "cover", "content": "cover-img"}],
        manifest=[
            {"id": "cover-img", "href": cover_href, "media-type": "image/png"},
            {"id": "chapter1", "href": "chapter1.xhtml", "media-type": "application/xhtml+xml"},
        ],
        files={member: cover_bytes},
        **opf_kwargs,
    )


def write_files(root: Path, names: Iterable[str], payload: bytes = b"%PDF-1.4\n") -> list[Path]:
    """Create plain files below ``root`` for listing tests."""

    created = []
    for name in names:
        target = root / name
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(payload)
        created.append(target)
    return created


_LOCAL_HEADER = b"PK\x03\x04"
_CENTRAL_HEADER = b"PK\x01\x02"


def _member_data_offset(data: bytes, info: zipfile.ZipInfo) -> int:
    name_length, extra_length = struct.unpack_from("<HH", data, info.header_offset + 26)
    return info.header_offset + 30 + name_length + extra_length


def mark_member_encrypted(archive_path: Path, member: str) -> None:
    """Set the "encrypted" flag on ``member`` without changing its bytes."""

    with zipfile.ZipFile(archive_path) as archive:
        info = archive.getinfo(member)
    data = bytearray(archive_path.read_bytes())
    data[info.header_offset + 6] |= 0x01
    encoded = member.encode("utf-8")
    position = data.find(_CENTRAL_HEADER)
    while position != -1:
        name_length = struct.unpack_from("<H", data, position + 28)[0]
        if bytes(data[position + 46 : position + 46 + name_length]) == encoded:
            data[position + 8] |= 0x01
        position = data.find(_CENTRAL_HEADER, position + 4)
    archive_path.write_bytes(bytes(data))


def corrupt_deflated_member(archive_path: Path, member: str) -> None:
    """Overwrite the first byte of a deflated ``member`` with an invalid block header."""

    with zipfile.ZipFile(archive_path) as archive:
        info = archive.getinfo(member)
    assert info.compress_type == zipfile.ZIP_DEFLATED
    data = bytearray(archive_path.read_bytes())
    assert bytes(data[info.header_offset : info.header_offset + 4]) == _LOCAL_HEADER
    data[_member_data_offset(bytes(data), info)] = 0xFF
    archive_path.write_bytes(bytes(data))


__all__ = [
    "PNG_BYTES",
    "container_xml",
    "corrupt_deflated_member",
    "mark_member_encrypted",
    "package_opf",
    "write_epub",
    "write_epub_with_cover",
    "write_files",
]
