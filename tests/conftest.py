"""
tests/conftest.py

Shared fixtures: an in-memory SQLite content store, a fault-injecting store
wrapper, and a fake translation provider.
"""

from __future__ import annotations

import os
import threading
from typing import Any, Callable, Mapping, Sequence

import pytest

os.environ.setdefault("DATABASE_URL", "sqlite://")

from app.config import BulkImportSettings, TranslationSyncSettings  # noqa: E402
from app.domain.errors import TranslationError  # noqa: E402
from app.domain.locales import LocaleRegistry  # noqa: E402
from app.services.aggregate_writer import AggregateWriter  # noqa: E402
from app.services.question_writer import QuestionWriter  # noqa: E402
from db.base import Base  # noqa: E402
from db.repositories.content_store import SQLAlchemyContentStore  # noqa: E402
from db.repositories.errors import StoreError  # noqa: E402
from db.session import build_session_factory, create_db_engine  # noqa: E402


class FaultyStore:
    """
    Delegates to a real store, failing chosen ``(method, table)`` calls.
    """

    def __init__(self, inner: SQLAlchemyContentStore) -> None:
        self.inner = inner
        self.calls: list[tuple[str, str]] = []
        self._failures: dict[tuple[str, str], Exception | None] = {}

    def fail(self, method: str, table: str, *, error: Exception | None = None) -> None:
        self._failures[(method, table)] = error

    def heal(self) -> None:
        self._failures.clear()

    def _check(self, method: str, table: str) -> None:
        self.calls.append((method, table))
        if (method, table) in self._failures:
            error = self._failures[(method, table)]
            if error is not None:
                raise error
            raise StoreError(f"simulated {method} fault on {table}", table=table)

    def insert(self, table: str, values: Mapping[str, Any]) -> str:
        self._check("insert", table)
        return self.inner.insert(table, values)

    def insert_many(self, table: str, rows: Sequence[Mapping[str, Any]]) -> list[str]:
        self._check("insert_many", table)
        return self.inner.insert_many(table, rows)

    def update(self, table: str, record_id: str, values: Mapping[str, Any]) -> None:
        self._check("update", table)
        self.inner.update(table, record_id, values)

    def update_where(self, table: str, filters: Mapping[str, Any], values: Mapping[str, Any]) -> int:
        self._check("update_where", table)
        return self.inner.update_where(table, filters, values)

    def delete(self, table: str, record_id: str) -> None:
        self._check("delete", table)
        self.inner.delete(table, record_id)

    def delete_where(self, table: str, filters: Mapping[str, Any]) -> int:
        self._check("delete_where", table)
        return self.inner.delete_where(table, filters)

    def select_one(self, table: str, record_id: str, *, children: Sequence[tuple[str, str]] = ()):
        self._check("select_one", table)
        return self.inner.select_one(table, record_id, children=children)

    def select_where(
        self,
        table: str,
        filters: Mapping[str, Any],
        *,
        order_by: str | None = None,
        descending: bool = False,
    ):
        self._check("select_where", table)
        return self.inner.select_where(table, filters, order_by=order_by, descending=descending)

    def count_where(self, table: str, filters: Mapping[str, Any]) -> int:
        self._check("count_where", table)
        return self.inner.count_where(table, filters)


class FakeTranslationProvider:
    """
    Prefixes text with the target locale; chosen locales raise TranslationError.
    """

    def __init__(
        self,
        *,
        failing_locales: Sequence[str] = (),
        transform: Callable[[str, str], str] | None = None,
    ) -> None:
        self.failing_locales = set(failing_locales)
        self.transform = transform
        self.calls: list[tuple[str, str, str]] = []
        self._lock = threading.Lock()

    @property
    def call_count(self) -> int:
        return len(self.calls)

    def translate(self, text: str, source_locale: str, target_locale: str) -> str:
        with self._lock:
            self.calls.append((text, source_locale, target_locale))
        if target_locale in self.failing_locales:
            raise TranslationError(f"provider unavailable for {target_locale}", locale=target_locale)
        if self.transform is not None:
            return self.transform(text, target_locale)
        return f"[{target_locale}] {text}"


class FakeBatchTranslationProvider(FakeTranslationProvider):
    """
    Adds ``translate_many``; ``drop_last`` loses one result per call.
    """

    def __init__(self, *, drop_last: bool = False, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.drop_last = drop_last
        self.batch_calls: list[tuple[tuple[str, ...], str, str]] = []

    def translate_many(self, texts: Sequence[str], source_locale: str, target_locale: str) -> list[str]:
        with self._lock:
            self.batch_calls.append((tuple(texts), source_locale, target_locale))
        if target_locale in self.failing_locales:
            raise TranslationError(f"provider unavailable for {target_locale}", locale=target_locale)
        translated = [f"[{target_locale}] {text}" for text in texts]
        return translated[:-1] if self.drop_last else translated


@pytest.fixture()
def engine():
    engine = create_db_engine("sqlite://")
    Base.metadata.create_all(engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(engine)
        engine.dispose()


@pytest.fixture()
def store(engine) -> SQLAlchemyContentStore:
    return SQLAlchemyContentStore(build_session_factory(engine))


@pytest.fixture()
def faulty_store(store: SQLAlchemyContentStore) -> FaultyStore:
    return FaultyStore(store)


@pytest.fixture()
def registry() -> LocaleRegistry:
    return LocaleRegistry(default_locale="es", required_locales=("es", "en"))


@pytest.fixture()
def writer(store: SQLAlchemyContentStore, registry: LocaleRegistry) -> AggregateWriter:
    return AggregateWriter(store, registry=registry)


@pytest.fixture()
def faulty_writer(faulty_store: FaultyStore, registry: LocaleRegistry) -> AggregateWriter:
    return AggregateWriter(faulty_store, registry=registry)


@pytest.fixture()
def import_settings() -> BulkImportSettings:
    return BulkImportSettings(delimiter=",", log_row_failures=True, deep_talks_game_mode_id="gm-deep-talks")


@pytest.fixture()
def sync_settings() -> TranslationSyncSettings:
    return TranslationSyncSettings(max_workers=4, batch_delimiter="\n---\n")


@pytest.fixture()
def provider() -> FakeTranslationProvider:
    return FakeTranslationProvider()


@pytest.fixture()
def seed_category(store: SQLAlchemyContentStore) -> Callable[..., str]:
    """Insert a bare challenge category row and return its id."""

    def _seed(record_id: str | None = None, **values: Any) -> str:
        row = {"game_mode_id": "gm-party", **values}
        if record_id is not None:
            row["id"] = record_id
        return store.insert("challenge_categories", row)

    return _seed


@pytest.fixture()
def provider_factory() -> Callable[..., FakeTranslationProvider]:
    return FakeTranslationProvider


@pytest.fixture()
def batch_provider() -> FakeBatchTranslationProvider:
    return FakeBatchTranslationProvider()


@pytest.fixture()
def batch_provider_factory() -> Callable[..., FakeBatchTranslationProvider]:
    return FakeBatchTranslationProvider


@pytest.fixture()
def question_writer(store: SQLAlchemyContentStore, registry: LocaleRegistry) -> QuestionWriter:
    return QuestionWriter(store, registry=registry)


@pytest.fixture()
def seed_deep_talk(store: SQLAlchemyContentStore) -> Callable[..., str]:
    """Insert a deep talk, with its category, and an ``es`` title; return the deep talk id."""

    def _seed(title: str = "Amor y Pareja", **values: Any) -> str:
        category_id = store.insert("deep_talk_categories", {"game_mode_id": "gm-deep-talks"})
        deep_talk_id = store.insert("deep_talks", {"deep_talk_category_id": category_id, **values})
        store.insert("deep_talk_translations", {"deep_talk_id": deep_talk_id, "language_code": "es", "title": title})
        return deep_talk_id

    return _seed
