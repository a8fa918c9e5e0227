"""Tubely: video upload and media ingestion backend."""

__version__ = "1.0.0"
