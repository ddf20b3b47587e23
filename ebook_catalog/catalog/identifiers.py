"""Reversible, URL-safe identifiers for library-relative paths."""

from __future__ import annotations

import base64
import binascii
import re

from .errors import InvalidIdentifierError

_IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")

# Paths come from ``os.fsdecode`` and may carry undecodable bytes as lone
# surrogates; surrogateescape keeps those round-tripping.
_PATH_ERRORS = "surrogateescape"


def _urlsafe(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def encode_identifier(path: str) -> str:
    """Return the padding-free URL-safe base64 form of ``path``."""

    return _urlsafe(path.encode("utf-8", errors=_PATH_ERRORS))


def decode_identifier(identifier: str) -> str:
    """Reverse :func:`encode_identifier`.

    Raises :class:`InvalidIdentifierError` for characters outside the URL-safe
    alphabet, impossible lengths, or non-canonical trailing bits.
    """

    if not isinstance(identifier, str) or not _IDENTIFIER_PATTERN.match(identifier):
        raise InvalidIdentifierError("identifier contains characters outside the URL-safe alphabet")
    remainder = len(identifier) % 4
    if remainder == 1:
        raise InvalidIdentifierError("identifier has an impossible length")
    padded = identifier + "=" * ((4 - remainder) % 4)
    try:
        raw = base64.b64decode(padded, altchars=b"-_", validate=True)
    except (binascii.Error, ValueError) as exc:
        raise InvalidIdentifierError("identifier is not valid base64") from exc
    # Two ids differing only in unused trailing bits would alias one path.
    if _urlsafe(raw) != identifier:
        raise InvalidIdentifierError("identifier is not in canonical form")
    return raw.decode("utf-8", errors=_PATH_ERRORS)


def display_text(value: str) -> str:
    """Return ``value`` with undecodable path bytes shown as U+FFFD.

    Identifiers stay the lossless handle; this form is only for output.
    """

    return value.encode("utf-8", errors=_PATH_ERRORS).decode("utf-8", errors="replace")


__all__ = ["decode_identifier", "display_text", "encode_identifier"]
