"""Persistence gateway and its record store backends."""

from .base import Collection, RecordStore
from .gateway import PersistenceGateway, create_gateway
from .local_store import LocalRecordStore
from .sql_store import SqlRecordStore

__all__ = [
    "Collection", "RecordStore",
    "PersistenceGateway", "create_gateway",
    "LocalRecordStore", "SqlRecordStore",
]
