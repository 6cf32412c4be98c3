"""bookingest: EPUB ingestion pipeline for uploaded e-books."""

__version__ = "0.1.0"
