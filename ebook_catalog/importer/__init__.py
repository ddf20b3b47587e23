"""Bulk import of e-book files into library storage."""

from .book_importer import BookImporter, ImportedFile, ImportSummary, derive_title, pdf_page_count

__all__ = ["BookImporter", "ImportSummary", "ImportedFile", "derive_title", "pdf_page_count"]
