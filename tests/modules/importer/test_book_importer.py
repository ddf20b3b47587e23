from __future__ import annotations

import os
from datetime import datetime
from pathlib import Path

import pytest
from sqlalchemy import create_engine, select
from sqlalchemy.orm import sessionmaker

from ebook_catalog.catalog import ImportSourceError
from ebook_catalog.database import init_schema
from ebook_catalog.database.models import BookRecord
from ebook_catalog.importer import BookImporter, derive_title
from ebook_catalog.storage import LocalFileStorage
from tests.helpers.epub_builder import write_epub, write_files


@pytest.fixture
def session_factory(tmp_path: Path):
    engine = create_engine(f"sqlite:///{tmp_path / 'catalog.db'}")
    init_schema(engine)
    factory = sessionmaker(bind=engine, expire_on_commit=False)
    yield factory
    engine.dispose()


@pytest.fixture
def source(tmp_path: Path) -> Path:
    root = tmp_path / "incoming"
    write_files(root, ["My_Great-Book.pdf", "nested/Second.PDF", "ignore.txt"], payload=b"%PDF-1.4 data")
    write_epub(root / "nested" / "story.epub", title="Story")
    return root


def _importer(tmp_path: Path, session_factory=None, **kwargs) -> BookImporter:
    storage = LocalFileStorage(tmp_path / "library", base_url="https://files.example/library")
    return BookImporter(
        storage,
        session_factory,
        page_counter=lambda path: 42,
        clock=lambda: datetime(2024, 3, 9, 10, 0),
        token_factory=lambda: "AbCd1234",
        **kwargs,
    )


@pytest.mark.parametrize(
    ("file_name", "expected"),
    [("My_Great-Book.pdf", "My Great Book"), ("__odd--name__.epub", "odd name"), ("plain.pdf", "plain")],
)
def test_derive_title(file_name: str, expected: str) -> None:
    assert derive_title(file_name) == expected


def test_import_copies_files_and_records_rows(tmp_path: Path, source: Path, session_factory) -> None:
    messages: list[str] = []

    summary = _importer(tmp_path, session_factory).import_directory(source, reporter=messages.append)

    assert summary.imported == 3
    assert summary.skipped == 0
    copied = tmp_path / "library" / "books" / "20240309" / "AbCd1234_My_Great-Book.pdf"
    assert copied.read_bytes() == b"%PDF-1.4 data"

    with session_factory() as session:
        records = {record.filename: record for record in session.scalars(select(BookRecord))}
    assert set(records) == {"My_Great-Book.pdf", "Second.PDF", "story.epub"}
    pdf = records["My_Great-Book.pdf"]
    assert pdf.title == "My Great Book"
    assert pdf.path == "books/20240309/AbCd1234_My_Great-Book.pdf"
    assert pdf.url == "https://files.example/library/books/20240309/AbCd1234_My_Great-Book.pdf"
    assert pdf.mime_type == "application/pdf"
    assert pdf.size == len(b"%PDF-1.4 data")
    assert pdf.pages == 42
    assert records["Second.PDF"].pages == 42
    assert records["story.epub"].pages is None
    assert records["story.epub"].mime_type == "application/epub+zip"
    assert any(message.startswith("Imported: My_Great-Book.pdf (id: ") for message in messages)


def test_reimport_skips_duplicates(tmp_path: Path, source: Path, session_factory) -> None:
    _importer(tmp_path, session_factory).import_directory(source)

    messages: list[str] = []
    summary = _importer(tmp_path, session_factory).import_directory(source, reporter=messages.append)

    assert summary.imported == 0
    assert summary.skipped == 3
    assert "Skipping (already registered): story.epub" in messages


def test_no_copy_records_original_path(tmp_path: Path, source: Path, session_factory) -> None:
    summary = _importer(tmp_path, session_factory, copy=False).import_directory(source)

    assert summary.imported == 3
    assert not (tmp_path / "library").exists()
    with session_factory() as session:
        record = session.scalars(select(BookRecord).where(BookRecord.filename == "story.epub")).one()
    assert record.path == str((source / "nested" / "story.epub").resolve())
    assert record.url is None


def test_import_without_database_still_copies(tmp_path: Path, source: Path) -> None:
    summary = _importer(tmp_path).import_directory(source)

    assert summary.imported == 3
    assert all(item.record_id is None for item in summary.files)
    assert (tmp_path / "library" / "books" / "20240309" / "AbCd1234_story.epub").is_file()


def test_missing_source_raises(tmp_path: Path) -> None:
    with pytest.raises(ImportSourceError):
        _importer(tmp_path).import_directory(tmp_path / "does-not-exist")


@pytest.mark.skipif(os.name != "posix" or os.geteuid() == 0, reason="requires POSIX permissions as non-root")
def test_unreadable_file_is_skipped(tmp_path: Path) -> None:
    root = tmp_path / "incoming"
    (locked,) = write_files(root, ["locked.pdf"])
    locked.chmod(0)
    try:
        summary = _importer(tmp_path).import_directory(root)
    finally:
        locked.chmod(0o644)

    assert summary.imported == 0
    assert summary.skipped == 1


def test_write_failure_is_skipped(tmp_path: Path, source: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    def _fail(self, path, stream):
        raise OSError("disk full")

    monkeypatch.setattr(LocalFileStorage, "write_stream", _fail)

    summary = _importer(tmp_path).import_directory(source)

    assert summary.imported == 0
    assert summary.skipped == 3
