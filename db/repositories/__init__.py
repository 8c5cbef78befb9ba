"""
Repository layer exports.
"""

from db.repositories.content_store import ContentStore, SQLAlchemyContentStore
from db.repositories.errors import RecordNotFoundError, StoreError, UnknownTableError

__all__ = [
    "ContentStore",
    "SQLAlchemyContentStore",
    "StoreError",
    "RecordNotFoundError",
    "UnknownTableError",
]
