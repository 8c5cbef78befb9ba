"""
app/services package marker.
"""

from app.services.aggregate_writer import AggregateWriter, DeleteResult, WriteState
from app.services.bulk_import_service import BulkImporter
from app.services.import_profiles import ImportProfile, get_import_profile
from app.services.translation_sync import LocaleSyncResult, TranslationSynchronizer

__all__ = [
    "AggregateWriter",
    "BulkImporter",
    "DeleteResult",
    "ImportProfile",
    "LocaleSyncResult",
    "TranslationSynchronizer",
    "WriteState",
    "get_import_profile",
]
