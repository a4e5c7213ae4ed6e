"""Bookshelf: document catalog reconciliation, metadata derivation, search and sorting."""

__version__ = "0.1.0"
