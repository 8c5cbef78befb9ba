"""
app/api/dependencies.py

Shared FastAPI dependencies for request validation and service wiring.
"""

from __future__ import annotations

from functools import lru_cache

from fastapi import Depends, File, HTTPException, UploadFile, status

from app.connectors.google_translate import get_translation_provider
from app.domain.content import EntityKind, get_entity_kind
from app.domain.locales import get_locale_registry
from app.services.aggregate_writer import AggregateWriter
from app.services.bulk_import_service import BulkImporter
from app.services.content_catalog import ContentCatalog
from app.services.import_profiles import ImportProfile, get_import_profile
from app.services.question_writer import QuestionWriter
from app.services.translation_sync import TranslationSynchronizer
from db.repositories.content_store import ContentStore, SQLAlchemyContentStore
from db.session import get_session_factory

CSV_CONTENT_TYPES = {
    "text/csv",
    "text/plain",
    "application/csv",
    "application/vnd.ms-excel",
}


def get_csv_upload(file: UploadFile = File(...)) -> UploadFile:
    """
    Validate that the uploaded file is a CSV by extension or MIME type.
    """

    filename = (file.filename or "").strip().lower()
    content_type = (file.content_type or "").strip().lower()

    is_csv_filename = filename.endswith(".csv")
    is_csv_content_type = content_type in CSV_CONTENT_TYPES

    if not is_csv_filename and not is_csv_content_type:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only CSV files are allowed.",
        )

    return file


def get_kind(kind: str) -> EntityKind:
    try:
        return get_entity_kind(kind)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


def get_profile(profile: str) -> ImportProfile:
    try:
        return get_import_profile(profile)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@lru_cache(maxsize=1)
def get_content_store() -> ContentStore:
    """
    Build and cache the store over the process-wide session factory.
    """

    return SQLAlchemyContentStore(get_session_factory())


def get_aggregate_writer(store: ContentStore = Depends(get_content_store)) -> AggregateWriter:
    return AggregateWriter(store, registry=get_locale_registry())


def get_bulk_importer(writer: AggregateWriter = Depends(get_aggregate_writer)) -> BulkImporter:
    return BulkImporter(writer)


def get_translation_synchronizer() -> TranslationSynchronizer:
    return TranslationSynchronizer(get_translation_provider(), registry=get_locale_registry())


def get_question_writer(store: ContentStore = Depends(get_content_store)) -> QuestionWriter:
    return QuestionWriter(store, registry=get_locale_registry())


def get_content_catalog(store: ContentStore = Depends(get_content_store)) -> ContentCatalog:
    return ContentCatalog(store, registry=get_locale_registry())
