"""
tests/test_translation_sync.py

Translation synchronizer behaviour against a fake provider.
"""

from __future__ import annotations

from app.domain.content import CHALLENGE_CATEGORY, DEEP_TALK, ChallengeCategoryText, DeepTalkText
from app.domain.errors import PreconditionError, TranslationFormatError
from app.services.translation_sync import TranslationSynchronizer


def _synchronizer(provider, registry, sync_settings) -> TranslationSynchronizer:
    return TranslationSynchronizer(provider, registry=registry, settings=sync_settings)


# ---------------------------------------------------------------------------
# Preconditions
# ---------------------------------------------------------------------------


class TestPreconditions:
    def test_blank_mandatory_source_field_fails_every_locale_without_calls(
        self, provider, registry, sync_settings
    ) -> None:
        synchronizer = _synchronizer(provider, registry, sync_settings)

        results = synchronizer.synchronize(DeepTalkText(title="  ", subtitle="Sub"), ["en", "fr"])

        assert list(results) == ["en", "fr"]
        assert all(isinstance(result.error, PreconditionError) for result in results.values())
        assert provider.call_count == 0

    def test_source_locale_and_duplicates_are_skipped(self, provider, registry, sync_settings) -> None:
        synchronizer = _synchronizer(provider, registry, sync_settings)

        results = synchronizer.synchronize(DeepTalkText(title="Amor"), ["es", "en", "en"], source_locale="es")

        assert list(results) == ["en"]
        assert provider.calls == [("Amor", "es", "en")]

    def test_unsupported_locale_fails_alone(self, provider, registry, sync_settings) -> None:
        synchronizer = _synchronizer(provider, registry, sync_settings)

        results = synchronizer.synchronize(DeepTalkText(title="Amor"), ["de", "en"])

        assert not results["de"].ok
        assert "Unsupported locale" in str(results["de"].error)
        assert results["en"].ok
        assert all(call[2] != "de" for call in provider.calls)


# ---------------------------------------------------------------------------
# Per-locale translation
# ---------------------------------------------------------------------------


class TestSynchronize:
    def test_every_non_blank_translatable_field_is_translated(self, provider, registry, sync_settings) -> None:
        synchronizer = _synchronizer(provider, registry, sync_settings)
        source = DeepTalkText(title="Amor", subtitle="", description="Hablemos", intensity=None)

        results = synchronizer.synchronize(source, ["en", "fr", "pt"])

        assert list(results) == ["en", "fr", "pt"]
        assert results["fr"].values == {"title": "[fr] Amor", "description": "[fr] Hablemos"}
        assert provider.call_count == 6

    def test_one_failing_locale_does_not_affect_the_others(self, provider_factory, registry, sync_settings) -> None:
        provider = provider_factory(failing_locales=["fr"])
        synchronizer = _synchronizer(provider, registry, sync_settings)

        results = synchronizer.synchronize(DeepTalkText(title="Amor"), ["en", "fr", "it"])

        assert results["en"].ok and results["it"].ok
        assert not results["fr"].ok
        assert results["fr"].error.locale == "fr"
        assert results["en"].values == {"title": "[en] Amor"}

    def test_unexpected_provider_exception_becomes_a_locale_error(
        self, provider_factory, registry, sync_settings
    ) -> None:
        def explode(text: str, target: str) -> str:
            if target == "pt":
                raise RuntimeError("socket closed")
            return text.upper()

        provider = provider_factory(transform=explode)
        synchronizer = _synchronizer(provider, registry, sync_settings)

        results = synchronizer.synchronize(DeepTalkText(title="Amor"), ["en", "pt"])

        assert results["en"].values == {"title": "AMOR"}
        assert "socket closed" in str(results["pt"].error)


# ---------------------------------------------------------------------------
# Batch mode
# ---------------------------------------------------------------------------


class TestBatchMode:
    def test_one_call_per_locale(self, provider, registry, sync_settings) -> None:
        synchronizer = _synchronizer(provider, registry, sync_settings)
        source = DeepTalkText(title="Amor", subtitle="Profundo", description="Hablemos")

        results = synchronizer.synchronize(source, ["en", "fr"], batch=True)

        assert provider.call_count == 2
        assert results["en"].values == {
            "title": "[en] Amor",
            "subtitle": "Profundo",
            "description": "Hablemos",
        }

    def test_lost_delimiter_is_a_format_error(self, provider_factory, registry, sync_settings) -> None:
        provider = provider_factory(transform=lambda text, target: text.replace(sync_settings.batch_delimiter, " "))
        synchronizer = _synchronizer(provider, registry, sync_settings)

        results = synchronizer.synchronize(DeepTalkText(title="Amor", subtitle="Profundo"), ["en"], batch=True)

        assert isinstance(results["en"].error, TranslationFormatError)
        assert results["en"].values is None

    def test_translate_many_is_used_when_offered(self, batch_provider, registry, sync_settings) -> None:
        synchronizer = _synchronizer(batch_provider, registry, sync_settings)
        source = DeepTalkText(title="Amor", subtitle="Profundo")

        results = synchronizer.synchronize(source, ["en", "fr"], batch=True)

        assert batch_provider.call_count == 0
        assert sorted(call[2] for call in batch_provider.batch_calls) == ["en", "fr"]
        assert batch_provider.batch_calls[0][0] == ("Amor", "Profundo")
        assert results["fr"].values == {"title": "[fr] Amor", "subtitle": "[fr] Profundo"}

    def test_translate_many_count_mismatch_is_a_format_error(
        self, batch_provider_factory, registry, sync_settings
    ) -> None:
        provider = batch_provider_factory(drop_last=True)
        synchronizer = _synchronizer(provider, registry, sync_settings)

        results = synchronizer.synchronize(DeepTalkText(title="Amor", subtitle="Profundo"), ["en"], batch=True)

        assert isinstance(results["en"].error, TranslationFormatError)

    def test_single_field_skips_translate_many(self, batch_provider, registry, sync_settings) -> None:
        synchronizer = _synchronizer(batch_provider, registry, sync_settings)

        synchronizer.synchronize(DeepTalkText(title="Amor"), ["en"], batch=True)

        assert batch_provider.batch_calls == []
        assert batch_provider.call_count == 1


# ---------------------------------------------------------------------------
# Merge
# ---------------------------------------------------------------------------


class TestMerge:
    def test_creates_missing_locales_and_overwrites_translated_fields(
        self, provider_factory, registry, sync_settings
    ) -> None:
        provider = provider_factory(failing_locales=["it"])
        synchronizer = _synchronizer(provider, registry, sync_settings)
        source = ChallengeCategoryText(title="Fiesta", tags=("uno", "dos"))
        existing = {
            "es": source,
            "en": ChallengeCategoryText(title="Old", instructions="Keep me"),
            "it": ChallengeCategoryText(title="Festa"),
        }

        results = synchronizer.synchronize(source, ["en", "fr", "it"])
        merged = synchronizer.merge(existing, results, kind=CHALLENGE_CATEGORY)

        assert merged["es"] is source
        assert merged["en"] == ChallengeCategoryText(
            title="[en] Fiesta",
            instructions="Keep me",
            tags=("[en] uno", "dos"),
        )
        assert merged["fr"].title == "[fr] Fiesta"
        assert merged["it"] == ChallengeCategoryText(title="Festa")

    def test_merge_with_no_successes_is_unchanged(self, provider, registry, sync_settings) -> None:
        synchronizer = _synchronizer(provider, registry, sync_settings)
        existing = {"es": DeepTalkText(title="")}

        results = synchronizer.synchronize(existing["es"], ["en"])

        assert synchronizer.merge(existing, results, kind=DEEP_TALK) == existing
