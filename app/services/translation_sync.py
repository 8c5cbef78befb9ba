"""
app/services/translation_sync.py

Fill missing or stale locales of a translation set from one source locale.

The synchronizer never persists anything: callers fold the results into an
aggregate with ``merge`` and hand it to the AggregateWriter themselves.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Iterable, Mapping

from app.config import TranslationSyncSettings, get_translation_sync_settings
from app.connectors.google_translate import BatchTranslationProvider, TranslationProvider
from app.domain.content import EntityKind, TranslationFields
from app.domain.errors import PreconditionError, TranslationError, TranslationFormatError
from app.domain.locales import LocaleRegistry, get_locale_registry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LocaleSyncResult:
    """
    Translated field values for one target locale, or the reason there are none.
    """

    locale: str
    values: dict[str, str] | None = None
    error: TranslationError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.values is not None


class TranslationSynchronizer:
    def __init__(
        self,
        provider: TranslationProvider,
        *,
        registry: LocaleRegistry | None = None,
        settings: TranslationSyncSettings | None = None,
    ) -> None:
        self._provider = provider
        self._registry = registry or get_locale_registry()
        self._settings = settings or get_translation_sync_settings()

    @property
    def registry(self) -> LocaleRegistry:
        return self._registry

    def synchronize(
        self,
        source_translation: TranslationFields,
        target_locales: Iterable[str],
        *,
        source_locale: str | None = None,
        batch: bool = False,
    ) -> dict[str, LocaleSyncResult]:
        """
        Translate every non-blank translatable field of ``source_translation``
        into each target locale.

        Locales are translated concurrently and fail independently. The
        source locale itself is skipped. In batch mode each locale costs a
        single provider call: ``translate_many`` when the provider has it,
        otherwise one ``translate`` over the fields joined by the batch
        delimiter.
        """

        source = source_locale or self._registry.default.code
        targets = _unique(locale for locale in target_locales if locale != source)

        missing = source_translation.missing_mandatory()
        if missing:
            message = f"Source translation '{source}' is missing mandatory field(s): {', '.join(missing)}."
            logger.info("Translation sync skipped source=%s missing=%s", source, ",".join(missing))
            return {
                locale: LocaleSyncResult(locale=locale, error=PreconditionError(message, locale=locale))
                for locale in targets
            }

        texts = source_translation.text_values()
        results: dict[str, LocaleSyncResult] = {}
        runnable: list[str] = []
        for locale in targets:
            if self._registry.is_supported(locale):
                runnable.append(locale)
            else:
                results[locale] = LocaleSyncResult(
                    locale=locale,
                    error=TranslationError(f"Unsupported locale '{locale}'.", locale=locale),
                )

        if runnable:
            max_workers = max(1, min(self._settings.max_workers, len(runnable)))
            with ThreadPoolExecutor(max_workers=max_workers) as executor:
                future_to_locale = {
                    executor.submit(self._translate_locale, texts, source, locale, batch): locale
                    for locale in runnable
                }
                for future in as_completed(future_to_locale):
                    locale = future_to_locale[future]
                    results[locale] = self._collect(future, locale)

        failed = [locale for locale, result in results.items() if not result.ok]
        logger.info(
            "Translation sync finished source=%s targets=%s failed=%s batch=%s",
            source,
            len(targets),
            ",".join(failed) or "-",
            batch,
        )
        return {locale: results[locale] for locale in targets}

    def merge(
        self,
        existing: Mapping[str, TranslationFields],
        results: Mapping[str, LocaleSyncResult],
        *,
        kind: EntityKind,
    ) -> dict[str, TranslationFields]:
        """
        Fold successful results into a translation set.

        Missing locales are created, translated fields overwrite existing
        values, and every other field and locale is left as it was.
        """

        merged = dict(existing)
        for locale, result in results.items():
            if not result.ok:
                continue
            current = merged.get(locale)
            if current is None:
                merged[locale] = kind.translation_type.from_text_values(result.values)
            else:
                merged[locale] = current.with_text_values(result.values)
        return merged

    def _translate_locale(
        self,
        texts: Mapping[str, str],
        source: str,
        target: str,
        batch: bool,
    ) -> dict[str, str]:
        if not batch or len(texts) == 1:
            return {name: self._provider.translate(value, source, target) for name, value in texts.items()}

        if isinstance(self._provider, BatchTranslationProvider):
            parts = self._provider.translate_many(list(texts.values()), source, target)
        else:
            delimiter = self._settings.batch_delimiter
            joined = delimiter.join(texts.values())
            parts = self._provider.translate(joined, source, target).split(delimiter)
        if len(parts) != len(texts):
            raise TranslationFormatError(
                f"Batched translation to '{target}' returned {len(parts)} part(s) for {len(texts)} field(s).",
                locale=target,
            )
        return {name: part.strip() for name, part in zip(texts, parts)}

    @staticmethod
    def _collect(future, locale: str) -> LocaleSyncResult:
        try:
            return LocaleSyncResult(locale=locale, values=future.result())
        except TranslationError as exc:
            error = exc
        except Exception as exc:
            error = TranslationError(f"Translation to '{locale}' failed: {exc}", locale=locale)
            error.__cause__ = exc
        logger.warning("Translation failed locale=%s error=%s", locale, error)
        return LocaleSyncResult(locale=locale, error=error)


def _unique(locales: Iterable[str]) -> list[str]:
    seen: list[str] = []
    for locale in locales:
        if locale not in seen:
            seen.append(locale)
    return seen
