"""
app/services/content_catalog.py

Listing reads for the admin screens: whole kinds, challenge categories with
their challenge counts, and the challenges of one category.

Reads go straight to the store and raise StoreError on failure.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

from app.domain.content import CHALLENGE, CHALLENGE_CATEGORY, Aggregate, EntityKind, aggregate_from_record
from app.domain.locales import LocaleRegistry, get_locale_registry
from db.repositories.content_store import ContentStore, Row

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CategoryListing:
    category: Aggregate
    challenge_count: int = 0


@dataclass(frozen=True)
class CategoryChallenges:
    category: Aggregate
    challenges: list[Aggregate] = field(default_factory=list)


def _listing_key(row: Row) -> tuple[Any, ...]:
    # sort_order ascending with missing values last, then id
    sort_order = row.get("sort_order")
    return (sort_order is None, sort_order or 0, row["id"])


class ContentCatalog:
    def __init__(self, store: ContentStore, *, registry: LocaleRegistry | None = None) -> None:
        self._store = store
        self._registry = registry or get_locale_registry()

    def list_aggregates(self, kind: EntityKind, filters: Mapping[str, Any] | None = None) -> list[Aggregate]:
        """
        Every parent of ``kind`` matching ``filters`` with its translations.

        Ordered by sort_order when the kind has one, then by id.
        """

        parents = sorted(self._store.select_where(kind.parent_table, filters or {}), key=_listing_key)
        if not parents:
            return []

        translations: dict[str, list[Row]] = {}
        rows = self._store.select_where(
            kind.translation_table,
            {f"{kind.translation_fk}__in": [parent["id"] for parent in parents]},
        )
        for row in rows:
            translations.setdefault(row[kind.translation_fk], []).append(row)

        return [
            aggregate_from_record(
                kind,
                {**parent, kind.translation_table: translations.get(parent["id"], [])},
                self._registry,
            )
            for parent in parents
        ]

    def list_challenge_categories(self) -> list[CategoryListing]:
        """
        All challenge categories, each with the number of challenges it holds.
        """

        listings = [
            CategoryListing(
                category=category,
                challenge_count=self._store.count_where(
                    CHALLENGE.parent_table,
                    {"challenge_category_id": category.parent_id},
                ),
            )
            for category in self.list_aggregates(CHALLENGE_CATEGORY)
        ]
        logger.debug("Listed challenge categories count=%s", len(listings))
        return listings

    def challenges_by_category(self, category_id: str) -> CategoryChallenges | None:
        """
        One category and its challenges ordered by id; None when the category is missing.
        """

        record = self._store.select_one(
            CHALLENGE_CATEGORY.parent_table,
            category_id,
            children=[(CHALLENGE_CATEGORY.translation_table, CHALLENGE_CATEGORY.translation_fk)],
        )
        if record is None:
            return None
        return CategoryChallenges(
            category=aggregate_from_record(CHALLENGE_CATEGORY, record, self._registry),
            challenges=self.list_aggregates(CHALLENGE, {"challenge_category_id": category_id}),
        )
