"""
app/services/aggregate_writer.py

Create, update, and delete a parent record together with its translation set.

The store only offers independent single-table calls, so atomicity is
approximated with ordered writes and a compensating delete:

    create:  STARTED -> PARENT_WRITTEN -> CHILDREN_WRITTEN -> COMMITTED
             PARENT_WRITTEN -> COMPENSATING_DELETE -> FAILED   (rollback path)

    update:  parent fields in place, then delete-all / insert-all translations.
             A failure between the last two steps leaves the parent with no
             translations until the same update is retried.

    delete:  parent only; the store cascades to translations and children.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

from app.domain.content import (
    Aggregate,
    EntityKind,
    ParentFields,
    TranslationFields,
    aggregate_from_record,
    aggregate_problems,
    translation_rows,
)
from app.domain.errors import AggregateNotFoundError, ValidationError, WriteError, WritePhase
from app.domain.locales import LocaleRegistry, get_locale_registry
from db.repositories.content_store import ContentStore
from db.repositories.errors import RecordNotFoundError, StoreError

logger = logging.getLogger(__name__)


class WriteState(str, Enum):
    STARTED = "started"
    PARENT_WRITTEN = "parent_written"
    CHILDREN_WRITTEN = "children_written"
    COMMITTED = "committed"
    COMPENSATING_DELETE = "compensating_delete"
    FAILED = "failed"


@dataclass(frozen=True)
class DeleteResult:
    """
    Outcome of an aggregate delete.

    ``deleted_children`` counts dependent rows (e.g. challenges of a category)
    that the store's cascade removed; it is informational only.
    """

    parent_id: str
    deleted_children: int = 0


class AggregateWriter:
    """
    Writes aggregates through a per-table store.
    """

    def __init__(self, store: ContentStore, *, registry: LocaleRegistry | None = None) -> None:
        self._store = store
        self._registry = registry or get_locale_registry()

    @property
    def store(self) -> ContentStore:
        return self._store

    @property
    def registry(self) -> LocaleRegistry:
        return self._registry

    def validate(
        self,
        kind: EntityKind,
        parent: ParentFields,
        translations: Mapping[str, TranslationFields],
    ) -> None:
        """
        Raise ValidationError when the aggregate cannot be persisted.
        """

        problems = aggregate_problems(kind, parent, translations, self._registry)
        if problems:
            raise ValidationError(f"Invalid {kind.name}: {problems[0]}", problems=problems)

    def create(
        self,
        kind: EntityKind,
        parent: ParentFields,
        translations: Mapping[str, TranslationFields],
        *,
        make_room: bool = True,
    ) -> str:
        """
        Insert the parent, then its translations; undo the parent if the second step fails.

        When the kind has a sort scope and ``make_room`` is set, siblings at or
        after the requested sort_order are shifted down by one first.

        Known inconsistency windows:

        * If the compensating delete fails, the parent stays behind without
          translations; the WriteError reports ``compensated=False``.
        * Shifted siblings are never shifted back. A create that fails after
          making room, compensated or not, leaves a gap at the requested
          sort_order.
        """

        self.validate(kind, parent, translations)
        state = WriteState.STARTED
        parent_row = parent.to_row()

        if make_room and kind.sort_scope is not None:
            self._make_room(kind, parent_row)

        try:
            parent_id = self._store.insert(kind.parent_table, parent_row)
        except StoreError as exc:
            self._transition(kind, None, state, WriteState.FAILED)
            raise WriteError(
                f"Could not insert {kind.name}: {exc}",
                phase=WritePhase.INSERT_PARENT,
            ) from exc
        state = self._transition(kind, parent_id, state, WriteState.PARENT_WRITTEN)

        try:
            self._store.insert_many(
                kind.translation_table,
                translation_rows(kind, parent_id, translations),
            )
        except StoreError as exc:
            compensated = self._compensate(kind, parent_id, state)
            raise WriteError(
                f"Could not insert translations for {kind.name} {parent_id}: {exc}",
                phase=WritePhase.INSERT_TRANSLATIONS,
                parent_id=parent_id,
                compensated=compensated,
            ) from exc
        state = self._transition(kind, parent_id, state, WriteState.CHILDREN_WRITTEN)
        self._transition(kind, parent_id, state, WriteState.COMMITTED)

        logger.info(
            "Aggregate created kind=%s id=%s locales=%s",
            kind.name,
            parent_id,
            ",".join(translations),
        )
        return parent_id

    def update(
        self,
        kind: EntityKind,
        parent_id: str,
        parent: ParentFields,
        translations: Mapping[str, TranslationFields],
    ) -> None:
        """
        Replace the parent's fields and its whole translation set.

        Calling it again with the same arguments converges on the same state,
        so a failed update can simply be retried.
        """

        self.validate(kind, parent, translations)

        try:
            self._store.update(kind.parent_table, parent_id, parent.to_row())
        except RecordNotFoundError as exc:
            raise AggregateNotFoundError(
                f"{kind.name} {parent_id} does not exist.",
                phase=WritePhase.UPDATE_PARENT,
                parent_id=parent_id,
            ) from exc
        except StoreError as exc:
            raise WriteError(
                f"Could not update {kind.name} {parent_id}: {exc}",
                phase=WritePhase.UPDATE_PARENT,
                parent_id=parent_id,
            ) from exc

        try:
            removed = self._store.delete_where(kind.translation_table, {kind.translation_fk: parent_id})
        except StoreError as exc:
            logger.warning(
                "Aggregate update left stale translations kind=%s id=%s error=%s",
                kind.name,
                parent_id,
                exc,
            )
            raise WriteError(
                f"Updated {kind.name} {parent_id} but could not clear its old translations: {exc}",
                phase=WritePhase.DELETE_TRANSLATIONS,
                parent_id=parent_id,
            ) from exc

        try:
            self._store.insert_many(
                kind.translation_table,
                translation_rows(kind, parent_id, translations),
            )
        except StoreError as exc:
            logger.error(
                "Aggregate update left parent without translations kind=%s id=%s error=%s",
                kind.name,
                parent_id,
                exc,
            )
            raise WriteError(
                f"Updated {kind.name} {parent_id} but could not insert its translations: {exc}",
                phase=WritePhase.INSERT_TRANSLATIONS,
                parent_id=parent_id,
            ) from exc

        logger.info(
            "Aggregate updated kind=%s id=%s replaced_translations=%s locales=%s",
            kind.name,
            parent_id,
            removed,
            ",".join(translations),
        )

    def delete(self, kind: EntityKind, parent_id: str) -> DeleteResult:
        """
        Delete the parent and let the store cascade to everything it owns.
        """

        deleted_children = 0
        for relation in kind.dependents:
            try:
                deleted_children += self._store.count_where(
                    relation.table,
                    {relation.foreign_key: parent_id},
                )
            except StoreError as exc:
                logger.warning(
                    "Could not count dependents kind=%s id=%s table=%s error=%s",
                    kind.name,
                    parent_id,
                    relation.table,
                    exc,
                )

        try:
            self._store.delete(kind.parent_table, parent_id)
        except RecordNotFoundError as exc:
            raise AggregateNotFoundError(
                f"{kind.name} {parent_id} does not exist.",
                phase=WritePhase.DELETE_PARENT,
                parent_id=parent_id,
            ) from exc
        except StoreError as exc:
            raise WriteError(
                f"Could not delete {kind.name} {parent_id}: {exc}",
                phase=WritePhase.DELETE_PARENT,
                parent_id=parent_id,
            ) from exc

        logger.info(
            "Aggregate deleted kind=%s id=%s deleted_children=%s",
            kind.name,
            parent_id,
            deleted_children,
        )
        return DeleteResult(parent_id=parent_id, deleted_children=deleted_children)

    def get(self, kind: EntityKind, parent_id: str) -> Aggregate | None:
        record = self._store.select_one(
            kind.parent_table,
            parent_id,
            children=[(kind.translation_table, kind.translation_fk)],
        )
        if record is None:
            return None
        return aggregate_from_record(kind, record, self._registry)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _make_room(self, kind: EntityKind, parent_row: Mapping[str, Any]) -> None:
        scope_value = parent_row.get(kind.sort_scope)
        sort_order = parent_row.get("sort_order")
        if scope_value is None or sort_order is None:
            return
        try:
            siblings = self._store.select_where(
                kind.parent_table,
                {kind.sort_scope: scope_value, "sort_order__gte": sort_order},
                order_by="sort_order",
                descending=True,
            )
            for sibling in siblings:
                self._store.update(
                    kind.parent_table,
                    sibling["id"],
                    {"sort_order": sibling["sort_order"] + 1},
                )
        except StoreError as exc:
            raise WriteError(
                f"Could not make room at sort_order {sort_order} for {kind.name}: {exc}",
                phase=WritePhase.PREPARE,
            ) from exc
        if siblings:
            logger.debug(
                "Shifted siblings kind=%s scope=%s from_sort_order=%s count=%s",
                kind.name,
                scope_value,
                sort_order,
                len(siblings),
            )

    def _compensate(self, kind: EntityKind, parent_id: str, state: WriteState) -> bool:
        state = self._transition(kind, parent_id, state, WriteState.COMPENSATING_DELETE)
        try:
            self._store.delete(kind.parent_table, parent_id)
        except RecordNotFoundError:
            return True
        except StoreError as exc:
            logger.error(
                "Compensating delete failed; orphan parent left kind=%s id=%s error=%s",
                kind.name,
                parent_id,
                exc,
            )
            return False
        finally:
            self._transition(kind, parent_id, state, WriteState.FAILED)
        return True

    @staticmethod
    def _transition(
        kind: EntityKind,
        parent_id: str | None,
        current: WriteState,
        target: WriteState,
    ) -> WriteState:
        logger.debug(
            "Aggregate write kind=%s id=%s %s -> %s",
            kind.name,
            parent_id,
            current.value,
            target.value,
        )
        return target
