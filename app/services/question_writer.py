"""
app/services/question_writer.py

Create, update, reorder, toggle, and delete deep talk questions.

A question is addressed by ``(deep_talk_id, sort_order)`` and stored as one
row per locale. Creating all locale rows is a single multi-row insert, so
there is nothing to compensate. Updates upsert locale by locale.
"""

from __future__ import annotations

import logging
from typing import Mapping

from app.domain.content import TranslationFields
from app.domain.errors import AggregateNotFoundError, ValidationError, WriteError, WritePhase
from app.domain.locales import LocaleRegistry, get_locale_registry
from app.domain.questions import (
    QUESTIONS_TABLE,
    QuestionSlot,
    QuestionSlotFields,
    question_rows,
    slot_problems,
    slots_from_rows,
)
from db.repositories.content_store import ContentStore
from db.repositories.errors import StoreError

logger = logging.getLogger(__name__)

DEEP_TALKS_TABLE = "deep_talks"


class QuestionWriter:
    def __init__(self, store: ContentStore, *, registry: LocaleRegistry | None = None) -> None:
        self._store = store
        self._registry = registry or get_locale_registry()

    @property
    def store(self) -> ContentStore:
        return self._store

    def validate(
        self,
        fields: QuestionSlotFields,
        texts: Mapping[str, TranslationFields],
        *,
        require_required_locale: bool = True,
    ) -> None:
        problems = slot_problems(fields, texts, self._registry, require_required_locale=require_required_locale)
        if problems:
            raise ValidationError(f"Invalid deep talk question: {problems[0]}", problems=problems)

    def create(
        self,
        fields: QuestionSlotFields,
        texts: Mapping[str, TranslationFields],
        *,
        make_room: bool = True,
    ) -> list[str]:
        """
        Insert one row per locale at ``fields.sort_order`` and return their ids.

        With ``make_room`` every question at or after that position moves down
        by one first. As with aggregates, the shift is not undone when the
        insert fails.
        """

        self.validate(fields, texts)
        self._require_deep_talk(fields.deep_talk_id)
        if make_room:
            self._make_room(fields.deep_talk_id, fields.sort_order)

        try:
            row_ids = self._store.insert_many(QUESTIONS_TABLE, question_rows(fields, texts))
        except StoreError as exc:
            raise WriteError(
                f"Could not insert question {fields.sort_order} of deep talk {fields.deep_talk_id}: {exc}",
                phase=WritePhase.INSERT_ROWS,
                parent_id=fields.deep_talk_id,
            ) from exc
        logger.info(
            "Question created deep_talk_id=%s sort_order=%s locales=%s",
            fields.deep_talk_id,
            fields.sort_order,
            ",".join(texts),
        )
        return row_ids

    def update(
        self,
        fields: QuestionSlotFields,
        texts: Mapping[str, TranslationFields],
    ) -> None:
        """
        Upsert the given locales of the question at ``fields.sort_order``.

        Locales left out keep their wording; icon and is_active are applied to
        every locale row of the question.
        """

        self.validate(fields, texts, require_required_locale=False)
        deep_talk_id, sort_order = fields.deep_talk_id, fields.sort_order
        position = {"deep_talk_id": deep_talk_id, "sort_order": sort_order}
        try:
            existing = self._store.select_where(QUESTIONS_TABLE, position)
        except StoreError as exc:
            raise WriteError(
                f"Could not read question {sort_order} of deep talk {deep_talk_id}: {exc}",
                phase=WritePhase.PREPARE,
                parent_id=deep_talk_id,
            ) from exc
        if not existing:
            self._require_deep_talk(deep_talk_id)
        by_locale = {row["language_code"]: row for row in existing}

        shared = {"icon": fields.icon, "is_active": fields.is_active}
        try:
            if existing:
                self._store.update_where(QUESTIONS_TABLE, position, shared)
            for locale, text in texts.items():
                row = by_locale.get(locale)
                if row is not None:
                    self._store.update(QUESTIONS_TABLE, row["id"], {"question": text.question})
                else:
                    self._store.insert(QUESTIONS_TABLE, question_rows(fields, {locale: text})[0])
        except StoreError as exc:
            raise WriteError(
                f"Could not update question {sort_order} of deep talk {deep_talk_id}: {exc}",
                phase=WritePhase.UPDATE_ROWS,
                parent_id=deep_talk_id,
            ) from exc
        logger.info(
            "Question updated deep_talk_id=%s sort_order=%s locales=%s inserted=%s",
            deep_talk_id,
            sort_order,
            ",".join(texts),
            ",".join(locale for locale in texts if locale not in by_locale) or "-",
        )

    def set_active(self, deep_talk_id: str, sort_order: int, is_active: bool) -> int:
        """
        Toggle every locale row of one question; returns the number of rows changed.
        """

        try:
            changed = self._store.update_where(
                QUESTIONS_TABLE,
                {"deep_talk_id": deep_talk_id, "sort_order": sort_order},
                {"is_active": is_active},
            )
        except StoreError as exc:
            raise WriteError(
                f"Could not toggle question {sort_order} of deep talk {deep_talk_id}: {exc}",
                phase=WritePhase.UPDATE_ROWS,
                parent_id=deep_talk_id,
            ) from exc
        if not changed:
            raise AggregateNotFoundError(
                f"Deep talk {deep_talk_id} has no question at sort_order {sort_order}.",
                phase=WritePhase.UPDATE_ROWS,
                parent_id=deep_talk_id,
            )
        logger.info(
            "Question toggled deep_talk_id=%s sort_order=%s is_active=%s rows=%s",
            deep_talk_id,
            sort_order,
            is_active,
            changed,
        )
        return changed

    def delete(self, deep_talk_id: str, sort_order: int) -> int:
        """
        Remove every locale row of one question; later positions are not renumbered.
        """

        try:
            removed = self._store.delete_where(
                QUESTIONS_TABLE,
                {"deep_talk_id": deep_talk_id, "sort_order": sort_order},
            )
        except StoreError as exc:
            raise WriteError(
                f"Could not delete question {sort_order} of deep talk {deep_talk_id}: {exc}",
                phase=WritePhase.DELETE_ROWS,
                parent_id=deep_talk_id,
            ) from exc
        if not removed:
            raise AggregateNotFoundError(
                f"Deep talk {deep_talk_id} has no question at sort_order {sort_order}.",
                phase=WritePhase.DELETE_ROWS,
                parent_id=deep_talk_id,
            )
        logger.info("Question deleted deep_talk_id=%s sort_order=%s rows=%s", deep_talk_id, sort_order, removed)
        return removed

    def list_slots(self, deep_talk_id: str) -> list[QuestionSlot]:
        rows = self._store.select_where(QUESTIONS_TABLE, {"deep_talk_id": deep_talk_id}, order_by="sort_order")
        return slots_from_rows(rows, self._registry)

    def get_slot(self, deep_talk_id: str, sort_order: int) -> QuestionSlot | None:
        rows = self._store.select_where(QUESTIONS_TABLE, {"deep_talk_id": deep_talk_id, "sort_order": sort_order})
        slots = slots_from_rows(rows, self._registry)
        return slots[0] if slots else None

    def _require_deep_talk(self, deep_talk_id: str) -> None:
        try:
            found = self._store.select_one(DEEP_TALKS_TABLE, deep_talk_id)
        except StoreError as exc:
            raise WriteError(
                f"Could not read deep talk {deep_talk_id}: {exc}",
                phase=WritePhase.PREPARE,
                parent_id=deep_talk_id,
            ) from exc
        if found is None:
            raise AggregateNotFoundError(
                f"deep_talk {deep_talk_id} does not exist.",
                phase=WritePhase.PREPARE,
                parent_id=deep_talk_id,
            )

    def _make_room(self, deep_talk_id: str, sort_order: int) -> None:
        """
        Move every question at or after ``sort_order`` down by one position.

        Positions are shifted from the last one backwards, one statement per
        position, so no two questions ever share a position.
        """

        try:
            rows = self._store.select_where(
                QUESTIONS_TABLE,
                {"deep_talk_id": deep_talk_id, "sort_order__gte": sort_order},
                order_by="sort_order",
                descending=True,
            )
            positions = sorted({row["sort_order"] for row in rows}, reverse=True)
            for position in positions:
                self._store.update_where(
                    QUESTIONS_TABLE,
                    {"deep_talk_id": deep_talk_id, "sort_order": position},
                    {"sort_order": position + 1},
                )
        except StoreError as exc:
            raise WriteError(
                f"Could not make room at sort_order {sort_order} in deep talk {deep_talk_id}: {exc}",
                phase=WritePhase.PREPARE,
                parent_id=deep_talk_id,
            ) from exc
        if positions:
            logger.debug(
                "Shifted questions deep_talk_id=%s from_sort_order=%s positions=%s",
                deep_talk_id,
                sort_order,
                len(positions),
            )
