"""Sync repository activity with Works work tracking."""

__version__ = "0.1.0"
