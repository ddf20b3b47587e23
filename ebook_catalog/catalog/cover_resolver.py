"""Locate the cover image declared by an EPUB package document."""

from __future__ import annotations

import posixpath
from typing import Iterable, Optional

from lxml import etree

_META_XPATH = "//*[local-name()='metadata']/*[local-name()='meta']"
_ITEM_XPATH = "//*[local-name()='manifest']/*[local-name()='item']"


def _attr(node: etree._Element, name: str) -> str:
    return (node.get(name) or "").strip()


def _manifest_items(package: etree._Element) -> list[etree._Element]:
    return list(package.xpath(_ITEM_XPATH))


def _cover_id_from_meta(package: etree._Element) -> Optional[str]:
    for meta in package.xpath(_META_XPATH):
        if _attr(meta, "name").lower() != "cover":
            continue
        content = _attr(meta, "content")
        if content:
            return content
    return None


def _cover_id_from_properties(items: Iterable[etree._Element]) -> Optional[str]:
    for item in items:
        if "cover-image" not in _attr(item, "properties").lower():
            continue
        item_id = _attr(item, "id")
        if item_id:
            return item_id
    return None


def _href_for_id(items: Iterable[etree._Element], cover_id: str) -> Optional[str]:
    for item in items:
        if (item.get("id") or "") == cover_id:
            return _attr(item, "href") or None
    return None


def _first_image_href(items: Iterable[etree._Element]) -> Optional[str]:
    for item in items:
        if "image/" not in _attr(item, "media-type").lower():
            continue
        href = _attr(item, "href")
        if href:
            return href
    return None


def normalize_archive_href(href: str, package_path: str) -> str:
    """Turn ``href`` (relative to the package document) into an archive-root path."""

    directory = posixpath.dirname(package_path.replace("\\", "/")).strip("/")
    candidate = href.replace("\\", "/").lstrip("/")
    if directory and directory != ".":
        candidate = f"{directory}/{candidate}"
    normalized = posixpath.normpath(candidate)
    return "" if normalized == "." else normalized


def resolve_cover_path(package: etree._Element, package_path: str) -> Optional[str]:
    """Return the archive-relative path of the cover image, if one is declared.

    Priority: ``<meta name="cover">`` naming a manifest id, then a manifest
    item whose ``properties`` carry ``cover-image``, then the first manifest
    image. When an id was chosen but has no manifest item, the result is
    ``None`` rather than the first-image fallback.
    """

    items = _manifest_items(package)
    cover_id = _cover_id_from_meta(package) or _cover_id_from_properties(items)
    if cover_id is not None:
        href = _href_for_id(items, cover_id)
    else:
        href = _first_image_href(items)
    if not href:
        return None
    return normalize_archive_href(href, package_path) or None


__all__ = ["normalize_archive_href", "resolve_cover_path"]
