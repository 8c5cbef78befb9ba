"""
app/api/routers/questions.py

Deep talk question endpoints. A question is addressed by its deep talk and
its ``sort_order``; the body carries the wording for each locale.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.dependencies import get_question_writer
from app.domain.errors import AggregateNotFoundError, ValidationError, WriteError
from app.domain.questions import DeepTalkQuestionText, QuestionSlot, QuestionSlotFields
from app.schemas.questions import (
    QuestionActiveRequest,
    QuestionCreatedResponse,
    QuestionCreateRequest,
    QuestionRowsChangedResponse,
    QuestionSlotResponse,
    QuestionUpdateRequest,
)
from app.services.question_writer import QuestionWriter
from db.repositories.errors import StoreError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/deep-talks/{deep_talk_id}/questions", tags=["questions"])


def _texts(payload: QuestionUpdateRequest) -> dict[str, DeepTalkQuestionText]:
    return {locale: DeepTalkQuestionText(question=text) for locale, text in payload.questions.items()}


def _slot_response(slot: QuestionSlot) -> QuestionSlotResponse:
    return QuestionSlotResponse(
        deep_talk_id=slot.fields.deep_talk_id,
        sort_order=slot.fields.sort_order,
        is_active=slot.fields.is_active,
        icon=slot.fields.icon,
        questions={locale: text.question for locale, text in slot.texts.items()},
        row_ids=dict(slot.row_ids),
    )


def _error_response(exc: ValidationError | WriteError) -> HTTPException:
    if isinstance(exc, ValidationError):
        return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=exc.to_dict())
    if isinstance(exc, AggregateNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=exc.to_dict())
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=exc.to_dict())


def _read_failed(deep_talk_id: str, exc: StoreError) -> HTTPException:
    logger.error("Question read failed deep_talk_id=%s error=%s", deep_talk_id, exc)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Unable to read questions of deep talk {deep_talk_id}.",
    )


@router.get("", response_model=list[QuestionSlotResponse])
def list_questions(
    deep_talk_id: str,
    writer: QuestionWriter = Depends(get_question_writer),
) -> list[QuestionSlotResponse]:
    try:
        slots = writer.list_slots(deep_talk_id)
    except StoreError as exc:
        raise _read_failed(deep_talk_id, exc) from exc
    return [_slot_response(slot) for slot in slots]


@router.post("", response_model=QuestionCreatedResponse, status_code=status.HTTP_201_CREATED)
def create_question(
    deep_talk_id: str,
    payload: QuestionCreateRequest,
    writer: QuestionWriter = Depends(get_question_writer),
) -> QuestionCreatedResponse:
    """
    Add a question at ``sort_order``, one row per locale in ``questions``.
    """

    fields = QuestionSlotFields(
        deep_talk_id=deep_talk_id,
        sort_order=payload.sort_order,
        is_active=payload.is_active,
        icon=payload.icon,
    )
    try:
        row_ids = writer.create(fields, _texts(payload), make_room=payload.make_room)
    except (ValidationError, WriteError) as exc:
        raise _error_response(exc) from exc
    return QuestionCreatedResponse(deep_talk_id=deep_talk_id, sort_order=payload.sort_order, row_ids=row_ids)


@router.get("/{sort_order}", response_model=QuestionSlotResponse)
def get_question(
    deep_talk_id: str,
    sort_order: int,
    writer: QuestionWriter = Depends(get_question_writer),
) -> QuestionSlotResponse:
    try:
        slot = writer.get_slot(deep_talk_id, sort_order)
    except StoreError as exc:
        raise _read_failed(deep_talk_id, exc) from exc
    if slot is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Deep talk {deep_talk_id} has no question at sort_order {sort_order}.",
        )
    return _slot_response(slot)


@router.put("/{sort_order}", response_model=QuestionSlotResponse)
def update_question(
    deep_talk_id: str,
    sort_order: int,
    payload: QuestionUpdateRequest,
    writer: QuestionWriter = Depends(get_question_writer),
) -> QuestionSlotResponse:
    """
    Upsert the wording of the listed locales; other locales keep theirs.
    """

    fields = QuestionSlotFields(
        deep_talk_id=deep_talk_id,
        sort_order=sort_order,
        is_active=payload.is_active,
        icon=payload.icon,
    )
    try:
        writer.update(fields, _texts(payload))
    except (ValidationError, WriteError) as exc:
        raise _error_response(exc) from exc
    return get_question(deep_talk_id, sort_order, writer)


@router.patch("/{sort_order}/active", response_model=QuestionRowsChangedResponse)
def set_question_active(
    deep_talk_id: str,
    sort_order: int,
    payload: QuestionActiveRequest,
    writer: QuestionWriter = Depends(get_question_writer),
) -> QuestionRowsChangedResponse:
    try:
        changed = writer.set_active(deep_talk_id, sort_order, payload.is_active)
    except WriteError as exc:
        raise _error_response(exc) from exc
    return QuestionRowsChangedResponse(deep_talk_id=deep_talk_id, sort_order=sort_order, rows=changed)


@router.delete("/{sort_order}", response_model=QuestionRowsChangedResponse)
def delete_question(
    deep_talk_id: str,
    sort_order: int,
    writer: QuestionWriter = Depends(get_question_writer),
) -> QuestionRowsChangedResponse:
    try:
        removed = writer.delete(deep_talk_id, sort_order)
    except WriteError as exc:
        raise _error_response(exc) from exc
    return QuestionRowsChangedResponse(deep_talk_id=deep_talk_id, sort_order=sort_order, rows=removed)
