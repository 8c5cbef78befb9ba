"""
tests/test_content_catalog.py

Listing reads over the SQLite store.
"""

from __future__ import annotations

import pytest

from app.domain.content import (
    CHALLENGE,
    CHALLENGE_CATEGORY,
    DAILY_TIP,
    ChallengeCategoryFields,
    ChallengeCategoryText,
    ChallengeFields,
    ChallengeText,
)
from app.services.content_catalog import ContentCatalog


@pytest.fixture()
def catalog(store, registry) -> ContentCatalog:
    return ContentCatalog(store, registry=registry)


def _category(writer, title: str, sort_order: int) -> str:
    return writer.create(
        CHALLENGE_CATEGORY,
        ChallengeCategoryFields(game_mode_id="gm-party", sort_order=sort_order),
        {"es": ChallengeCategoryText(title=title), "en": ChallengeCategoryText(title=title.upper())},
        make_room=False,
    )


def _challenge(writer, category_id: str, content: str) -> str:
    return writer.create(
        CHALLENGE,
        ChallengeFields(challenge_category_id=category_id),
        {"es": ChallengeText(content=content)},
    )


class TestChallengeCategories:
    def test_categories_come_with_their_challenge_counts(self, catalog, writer) -> None:
        busy = _category(writer, "llena", 0)
        empty = _category(writer, "vacia", 1)
        for content in ("uno", "dos", "tres"):
            _challenge(writer, busy, content)

        listings = catalog.list_challenge_categories()

        counts = [(listing.category.parent_id, listing.challenge_count) for listing in listings]
        assert counts == [(busy, 3), (empty, 0)]
        assert listings[0].category.translations["en"].title == "LLENA"

    def test_categories_are_ordered_by_sort_order(self, catalog, writer) -> None:
        third = _category(writer, "c", 5)
        first = _category(writer, "a", 0)
        second = _category(writer, "b", 2)

        listings = catalog.list_challenge_categories()

        assert [listing.category.parent_id for listing in listings] == [first, second, third]

    def test_no_categories(self, catalog) -> None:
        assert catalog.list_challenge_categories() == []


class TestChallengesByCategory:
    def test_only_that_categorys_challenges_are_returned(self, catalog, writer) -> None:
        mine, other = _category(writer, "mia", 0), _category(writer, "otra", 1)
        kept = {_challenge(writer, mine, "uno"), _challenge(writer, mine, "dos")}
        _challenge(writer, other, "tres")

        found = catalog.challenges_by_category(mine)

        assert found.category.parent_id == mine
        assert {challenge.parent_id for challenge in found.challenges} == kept
        assert all(challenge.kind is CHALLENGE for challenge in found.challenges)

    def test_missing_category(self, catalog) -> None:
        assert catalog.challenges_by_category("missing") is None


class TestListAggregates:
    def test_kind_without_rows(self, catalog) -> None:
        assert catalog.list_aggregates(DAILY_TIP) == []

    def test_filters_narrow_the_listing(self, catalog, writer) -> None:
        category_id = _category(writer, "a", 0)
        _category(writer, "b", 1)

        listed = catalog.list_aggregates(CHALLENGE_CATEGORY, {"id": category_id})

        assert [aggregate.parent_id for aggregate in listed] == [category_id]
        assert set(listed[0].translations) == {"es", "en"}
