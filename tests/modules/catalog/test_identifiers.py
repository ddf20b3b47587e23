from __future__ import annotations

import pytest

from ebook_catalog.catalog import InvalidIdentifierError, decode_identifier, display_text, encode_identifier


@pytest.mark.parametrize(
    "path",
    [
        "a.pdf",
        "novels/Dune.epub",
        "Sci-Fi & Fantasy/Le Petit Prince (1943).epub",
        "日本語/本.pdf",
    ],
)
def test_identifier_round_trips_path(path: str) -> None:
    identifier = encode_identifier(path)

    assert decode_identifier(identifier) == path


def test_identifier_is_url_safe_without_padding() -> None:
    identifier = encode_identifier("??>>/a.pdf")

    assert "=" not in identifier
    assert "+" not in identifier
    assert "/" not in identifier


def test_identifier_for_known_value() -> None:
    assert encode_identifier("a.pdf") == "YS5wZGY"


def test_undecodable_bytes_round_trip() -> None:
    path = "broken-\udcff.pdf"

    assert decode_identifier(encode_identifier(path)) == path


@pytest.mark.parametrize("identifier", ["", "abc=", "ab+c", "a/b", "with space", "!!!!"])
def test_rejects_characters_outside_alphabet(identifier: str) -> None:
    with pytest.raises(InvalidIdentifierError):
        decode_identifier(identifier)


def test_rejects_impossible_length() -> None:
    with pytest.raises(InvalidIdentifierError):
        decode_identifier("abcde")


def test_rejects_non_canonical_trailing_bits() -> None:
    # "YR" decodes to the same byte as "YQ" but is not what encoding produces.
    assert decode_identifier("YQ") == "a"
    with pytest.raises(InvalidIdentifierError):
        decode_identifier("YR")


def test_invalid_identifier_is_a_value_error() -> None:
    with pytest.raises(ValueError):
        decode_identifier("@@")


def test_display_text_replaces_undecodable_bytes() -> None:
    path = b"shelf/bad-\xff.pdf".decode("utf-8", errors="surrogateescape")

    assert decode_identifier(encode_identifier(path)) == path
    assert display_text(path) == "shelf/bad-�.pdf"
    assert display_text("plain/ünïcode.epub") == "plain/ünïcode.epub"
