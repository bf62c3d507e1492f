"""Database and object storage connections package."""

from quill.db.base import ObjectStorage, Store, StoredObject
from quill.db.object_storage import S3ObjectStorage
from quill.db.postgres import SQLStore, engine, init_db

__all__ = [
    "Store",
    "ObjectStorage",
    "StoredObject",
    "SQLStore",
    "S3ObjectStorage",
    "init_db",
    "engine",
]
