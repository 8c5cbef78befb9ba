"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from db.config import load_env_files

DEFAULT_GOOGLE_TRANSLATE_URL = "https://translation.googleapis.com/language/translate/v2"
DEFAULT_DEEP_TALKS_GAME_MODE_ID = "33333333-3333-3333-3333-333333333333"


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_bool_env(name: str, default: bool) -> bool:
    """
    Read a boolean from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    return raw_value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    """
    Read a float from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _get_optional_str_env(name: str) -> str | None:
    """
    Read an optional string value from environment variables.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None


def _get_csv_env(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    """
    Read a comma-separated list, dropping blanks and duplicates but keeping order.
    """

    raw_value = _get_optional_str_env(name)
    if raw_value is None:
        return default
    items: list[str] = []
    for item in raw_value.split(","):
        normalized = item.strip().lower()
        if normalized and normalized not in items:
            items.append(normalized)
    return tuple(items) or default


@dataclass(frozen=True)
class LocaleSettings:
    """
    Which locale is the translation source and which locales every aggregate needs.
    """

    default_locale: str = "es"
    required_locales: tuple[str, ...] = ("es", "en")


@dataclass(frozen=True)
class TranslationProviderSettings:
    """
    HTTP behaviour for the machine-translation provider.
    """

    api_key: str | None = None
    api_url: str = DEFAULT_GOOGLE_TRANSLATE_URL
    timeout_seconds: float = 15.0
    max_retries: int = 3
    backoff_initial_seconds: float = 0.5
    backoff_multiplier: float = 2.0
    rate_limit_per_second: float = 5.0


@dataclass(frozen=True)
class TranslationSyncSettings:
    """
    Fan-out settings for the translation synchronizer.
    """

    max_workers: int = 4
    batch_delimiter: str = "\n---\n"


@dataclass(frozen=True)
class BulkImportSettings:
    """
    Runtime settings for bulk content imports.
    """

    delimiter: str = ","
    log_row_failures: bool = True
    deep_talks_game_mode_id: str = DEFAULT_DEEP_TALKS_GAME_MODE_ID


@lru_cache(maxsize=1)
def get_locale_settings() -> LocaleSettings:
    """
    Return cached locale settings from environment variables.
    """

    default_locale = _get_str_env("CONTENT_DEFAULT_LOCALE", "es").lower()
    required = _get_csv_env("CONTENT_REQUIRED_LOCALES", ("es", "en"))
    if default_locale not in required:
        required = (default_locale, *required)
    return LocaleSettings(default_locale=default_locale, required_locales=required)


@lru_cache(maxsize=1)
def get_translation_provider_settings() -> TranslationProviderSettings:
    """
    Return translation provider settings from environment variables.
    """

    return TranslationProviderSettings(
        api_key=_get_optional_str_env("GOOGLE_TRANSLATE_API_KEY"),
        api_url=_get_str_env("GOOGLE_TRANSLATE_API_URL", DEFAULT_GOOGLE_TRANSLATE_URL),
        timeout_seconds=max(1.0, _get_float_env("TRANSLATE_HTTP_TIMEOUT_SECONDS", 15.0)),
        max_retries=max(0, _get_int_env("TRANSLATE_HTTP_MAX_RETRIES", 3)),
        backoff_initial_seconds=max(0.1, _get_float_env("TRANSLATE_HTTP_BACKOFF_INITIAL_SECONDS", 0.5)),
        backoff_multiplier=max(1.0, _get_float_env("TRANSLATE_HTTP_BACKOFF_MULTIPLIER", 2.0)),
        rate_limit_per_second=max(0.1, _get_float_env("TRANSLATE_HTTP_RATE_LIMIT_PER_SECOND", 5.0)),
    )


@lru_cache(maxsize=1)
def get_translation_sync_settings() -> TranslationSyncSettings:
    """
    Return synchronizer fan-out settings.
    """

    return TranslationSyncSettings(
        max_workers=max(1, _get_int_env("TRANSLATE_MAX_WORKERS", 4)),
    )


@lru_cache(maxsize=1)
def get_bulk_import_settings() -> BulkImportSettings:
    """
    Return cached bulk import settings from environment variables.
    """

    delimiter = _get_str_env("BULK_IMPORT_DELIMITER", ",")
    return BulkImportSettings(
        delimiter=delimiter[0],
        log_row_failures=_get_bool_env("BULK_IMPORT_LOG_ROW_FAILURES", True),
        deep_talks_game_mode_id=_get_str_env("DEEP_TALKS_GAME_MODE_ID", DEFAULT_DEEP_TALKS_GAME_MODE_ID),
    )
