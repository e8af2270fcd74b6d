"""Spreadsheet ingestion and normalization for IT incident / request data."""

__version__ = "0.1.0"
