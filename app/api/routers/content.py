"""
app/api/routers/content.py

Aggregate CRUD and translation-sync HTTP endpoints.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from pydantic import ValidationError as FieldsValidationError

from app.api.dependencies import get_aggregate_writer, get_kind, get_translation_synchronizer
from app.domain.content import Aggregate, EntityKind, ParentFields, TranslationFields
from app.domain.errors import AggregateNotFoundError, ValidationError, WriteError
from app.schemas.content import (
    PARENT_FIELD_MODELS,
    TRANSLATION_FIELD_MODELS,
    AggregateCreatedResponse,
    AggregateDeletedResponse,
    AggregateResponse,
    AggregateWriteRequest,
    LocaleSyncResultResponse,
    TranslationSyncRequest,
    TranslationSyncResponse,
)
from app.services.aggregate_writer import AggregateWriter
from app.services.translation_sync import TranslationSynchronizer
from db.repositories.errors import StoreError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/content", tags=["content"])


def _checked_fields(model: type[BaseModel], values: Mapping[str, Any]) -> dict[str, Any]:
    """
    Validate field types against ``model``, keeping only the fields actually sent.
    """

    return model.model_validate(dict(values)).model_dump(exclude_unset=True)


def _field_problems(exc: FieldsValidationError) -> list[str]:
    return [
        f"{'.'.join(str(part) for part in error['loc']) or 'body'}: {error['msg']}"
        for error in exc.errors()
    ]


def _parse_parent(kind: EntityKind, values: Mapping[str, Any]) -> ParentFields:
    try:
        return kind.parent_from_mapping(_checked_fields(PARENT_FIELD_MODELS[kind.name], values))
    except FieldsValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": f"Invalid parent fields for {kind.name}.", "problems": _field_problems(exc)},
        ) from exc
    except TypeError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": f"Invalid parent fields for {kind.name}.", "problems": [str(exc)]},
        ) from exc


def _parse_translations(
    kind: EntityKind,
    values: Mapping[str, Mapping[str, Any]],
) -> dict[str, TranslationFields]:
    model = TRANSLATION_FIELD_MODELS[kind.name]
    try:
        return {
            locale: kind.translation_from_mapping(_checked_fields(model, fields))
            for locale, fields in values.items()
        }
    except FieldsValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": f"Invalid translation fields for {kind.name}.", "problems": _field_problems(exc)},
        ) from exc
    except TypeError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": f"Invalid translation fields for {kind.name}.", "problems": [str(exc)]},
        ) from exc


def _write_error_response(exc: WriteError) -> HTTPException:
    if isinstance(exc, AggregateNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.to_dict())
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=exc.to_dict())


def aggregate_response(aggregate: Aggregate) -> AggregateResponse:
    return AggregateResponse(
        id=aggregate.parent_id or "",
        kind=aggregate.kind.name,
        parent=aggregate.parent.to_row(),
        translations={locale: translation.to_row() for locale, translation in aggregate.translations.items()},
    )


@router.post("/{kind}", response_model=AggregateCreatedResponse, status_code=status.HTTP_201_CREATED)
def create_aggregate(
    payload: AggregateWriteRequest,
    entity_kind: EntityKind = Depends(get_kind),
    writer: AggregateWriter = Depends(get_aggregate_writer),
) -> AggregateCreatedResponse:
    """
    Create a parent record together with its translations.
    """

    parent = _parse_parent(entity_kind, payload.parent)
    translations = _parse_translations(entity_kind, payload.translations)
    try:
        parent_id = writer.create(entity_kind, parent, translations)
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=exc.to_dict()) from exc
    except WriteError as exc:
        raise _write_error_response(exc) from exc
    return AggregateCreatedResponse(id=parent_id, kind=entity_kind.name)


@router.get("/{kind}/{parent_id}", response_model=AggregateResponse)
def get_aggregate(
    parent_id: str,
    entity_kind: EntityKind = Depends(get_kind),
    writer: AggregateWriter = Depends(get_aggregate_writer),
) -> AggregateResponse:
    try:
        aggregate = writer.get(entity_kind, parent_id)
    except StoreError as exc:
        logger.error("Aggregate read failed kind=%s id=%s error=%s", entity_kind.name, parent_id, exc)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Unable to read {entity_kind.name} {parent_id}.",
        ) from exc
    if aggregate is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{entity_kind.name} {parent_id} does not exist.",
        )
    return aggregate_response(aggregate)


@router.put("/{kind}/{parent_id}", response_model=AggregateResponse)
def update_aggregate(
    parent_id: str,
    payload: AggregateWriteRequest,
    entity_kind: EntityKind = Depends(get_kind),
    writer: AggregateWriter = Depends(get_aggregate_writer),
) -> AggregateResponse:
    """
    Replace the parent's fields and its whole translation set.
    """

    parent = _parse_parent(entity_kind, payload.parent)
    translations = _parse_translations(entity_kind, payload.translations)
    try:
        writer.update(entity_kind, parent_id, parent, translations)
    except ValidationError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=exc.to_dict()) from exc
    except WriteError as exc:
        raise _write_error_response(exc) from exc
    return aggregate_response(
        Aggregate(kind=entity_kind, parent=parent, translations=dict(translations), parent_id=parent_id)
    )


@router.delete("/{kind}/{parent_id}", response_model=AggregateDeletedResponse)
def delete_aggregate(
    parent_id: str,
    entity_kind: EntityKind = Depends(get_kind),
    writer: AggregateWriter = Depends(get_aggregate_writer),
) -> AggregateDeletedResponse:
    try:
        result = writer.delete(entity_kind, parent_id)
    except WriteError as exc:
        raise _write_error_response(exc) from exc
    return AggregateDeletedResponse(
        id=result.parent_id,
        kind=entity_kind.name,
        deleted_children=result.deleted_children,
    )


@router.post("/{kind}/translations/sync", response_model=TranslationSyncResponse)
def sync_translations(
    payload: TranslationSyncRequest,
    entity_kind: EntityKind = Depends(get_kind),
    synchronizer: TranslationSynchronizer = Depends(get_translation_synchronizer),
) -> TranslationSyncResponse:
    """
    Machine-translate a source translation and return the merged set; nothing is saved.
    """

    registry = synchronizer.registry
    source_locale = payload.source_locale or registry.default.code
    source = _parse_translations(entity_kind, {source_locale: payload.source})[source_locale]
    existing = _parse_translations(entity_kind, payload.existing)
    targets = payload.target_locales
    if targets is None:
        targets = [code for code in registry.active_codes if code != source_locale]

    results = synchronizer.synchronize(source, targets, source_locale=source_locale, batch=payload.batch)
    merged = synchronizer.merge({**existing, source_locale: source}, results, kind=entity_kind)
    return TranslationSyncResponse(
        results=[
            LocaleSyncResultResponse(
                locale=result.locale,
                ok=result.ok,
                values=result.values,
                error=result.error.message if result.error is not None else None,
            )
            for result in results.values()
        ],
        translations={locale: translation.to_row() for locale, translation in merged.items()},
    )
