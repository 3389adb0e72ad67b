"""
Persistence for the compression service: record database and blob store.
"""
from app.storage.database import (
    Base,
    SessionLocal,
    engine,
    get_db,
    init_db,
    check_connection
)

from app.storage.records import (
    CompressionRecord,
    RecordStore
)

from app.storage.blobs import BlobStore

__all__ = [
    # Database
    'Base',
    'SessionLocal',
    'engine',
    'get_db',
    'init_db',
    'check_connection',

    # Records
    'CompressionRecord',
    'RecordStore',

    # Blobs
    'BlobStore'
]
