"""Database models."""

from .record import StoredRecord

__all__ = ["StoredRecord"]
