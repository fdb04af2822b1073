"""CIIT: guided concept interviews with file-backed catalog and session storage."""

__version__ = "1.0.0"
