"""
app/connectors/google_translate.py

Google Cloud Translation (v2) connector used by the translation synchronizer.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Protocol, Sequence, runtime_checkable

import requests

from app.config import TranslationProviderSettings, get_translation_provider_settings
from app.connectors.base import BaseConnector, ConnectorRequestError
from app.domain.errors import TranslationError

logger = logging.getLogger(__name__)

# Locale codes whose provider code differs from ours.
PROVIDER_LANGUAGE_CODES: dict[str, str] = {
    "zh": "zh-CN",
}


class TranslationProvider(Protocol):
    def translate(self, text: str, source_locale: str, target_locale: str) -> str:
        ...


@runtime_checkable
class BatchTranslationProvider(TranslationProvider, Protocol):
    """
    A provider that can translate several strings in one call.
    """

    def translate_many(self, texts: Sequence[str], source_locale: str, target_locale: str) -> list[str]:
        ...


def to_provider_code(locale: str) -> str:
    return PROVIDER_LANGUAGE_CODES.get(locale, locale)


class GoogleTranslateConnector(BaseConnector):
    """
    Thin client over the v2 ``translate`` endpoint.

    The API key travels as the ``key`` query parameter and is never logged.
    """

    def __init__(
        self,
        *,
        settings: TranslationProviderSettings,
        session: requests.Session | None = None,
    ) -> None:
        super().__init__(source="google_translate", http_settings=settings, session=session)
        self._settings = settings

    def translate(self, text: str, source_locale: str, target_locale: str) -> str:
        if not text.strip():
            return ""
        if source_locale == target_locale:
            return text
        translated = self._post_translation(text, source_locale, target_locale)
        return translated[0]

    def translate_many(self, texts: Sequence[str], source_locale: str, target_locale: str) -> list[str]:
        """
        Translate several strings in one request; the result keeps input order.
        """

        if not texts:
            return []
        if source_locale == target_locale:
            return list(texts)
        translated = self._post_translation(list(texts), source_locale, target_locale)
        if len(translated) != len(texts):
            raise TranslationError(
                f"Provider returned {len(translated)} translations for {len(texts)} texts.",
                locale=target_locale,
            )
        return translated

    def _post_translation(
        self,
        query: str | list[str],
        source_locale: str,
        target_locale: str,
    ) -> list[str]:
        if not self._settings.api_key:
            raise TranslationError("GOOGLE_TRANSLATE_API_KEY is not configured.", locale=target_locale)

        try:
            payload = self._request_json(
                method="POST",
                url=self._settings.api_url,
                params={"key": self._settings.api_key},
                json_body={
                    "q": query,
                    "source": to_provider_code(source_locale),
                    "target": to_provider_code(target_locale),
                    "format": "text",
                },
            )
        except ConnectorRequestError as exc:
            raise TranslationError(
                f"Translation to '{target_locale}' failed: {exc}",
                locale=target_locale,
            ) from exc

        translations = _extract_translations(payload)
        if translations is None:
            logger.warning(
                "Invalid translation response source=%s target=%s",
                source_locale,
                target_locale,
            )
            raise TranslationError(
                f"Invalid translation response for '{target_locale}'.",
                locale=target_locale,
            )
        return translations


def _extract_translations(payload: Any) -> list[str] | None:
    if not isinstance(payload, dict):
        return None
    data = payload.get("data")
    if not isinstance(data, dict):
        return None
    items = data.get("translations")
    if not isinstance(items, list) or not items:
        return None

    texts: list[str] = []
    for item in items:
        if not isinstance(item, dict) or not isinstance(item.get("translatedText"), str):
            return None
        texts.append(item["translatedText"])
    return texts


@lru_cache(maxsize=1)
def get_translation_provider() -> GoogleTranslateConnector:
    """
    Return the process-wide provider built from environment settings.
    """

    return GoogleTranslateConnector(settings=get_translation_provider_settings())
