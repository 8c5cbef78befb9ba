"""
app/domain/locales.py

Static catalogue of the languages content can be authored in.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Sequence

from app.config import LocaleSettings, get_locale_settings


@dataclass(frozen=True)
class Locale:
    code: str
    name: str
    native_name: str
    flag: str
    is_active: bool = True
    is_default: bool = False
    is_required: bool = False
    sort_order: int = 0


SUPPORTED_LOCALES: tuple[Locale, ...] = (
    Locale(code="es", name="Spanish", native_name="Español", flag="🇪🇸", sort_order=0),
    Locale(code="en", name="English", native_name="English", flag="🇺🇸", sort_order=1),
    Locale(code="fr", name="French", native_name="Français", flag="🇫🇷", sort_order=2),
    Locale(code="pt", name="Portuguese", native_name="Português", flag="🇧🇷", sort_order=3),
    Locale(code="it", name="Italian", native_name="Italiano", flag="🇮🇹", sort_order=4),
)


class LocaleRegistry:
    """
    Supported locales with their default/required flags resolved.

    Only the default locale is required unconditionally; the rest of the
    required subset comes from configuration.
    """

    def __init__(
        self,
        locales: Sequence[Locale] = SUPPORTED_LOCALES,
        *,
        default_locale: str = "es",
        required_locales: Sequence[str] = ("es", "en"),
    ) -> None:
        known = {locale.code for locale in locales}
        if default_locale not in known:
            raise ValueError(f"Default locale '{default_locale}' is not a supported locale.")
        unknown = [code for code in required_locales if code not in known]
        if unknown:
            raise ValueError(f"Required locales are not supported: {unknown}.")

        required = {default_locale, *required_locales}
        ordered = sorted(locales, key=lambda locale: (locale.sort_order, locale.code))
        self._locales: tuple[Locale, ...] = tuple(
            Locale(
                code=locale.code,
                name=locale.name,
                native_name=locale.native_name,
                flag=locale.flag,
                is_active=locale.is_active,
                is_default=locale.code == default_locale,
                is_required=locale.code in required,
                sort_order=locale.sort_order,
            )
            for locale in ordered
        )
        self._by_code = {locale.code: locale for locale in self._locales}
        self._default_code = default_locale

    @classmethod
    def from_settings(cls, settings: LocaleSettings) -> "LocaleRegistry":
        return cls(
            default_locale=settings.default_locale,
            required_locales=settings.required_locales,
        )

    def list_supported(self) -> tuple[Locale, ...]:
        return self._locales

    def get(self, code: str) -> Locale | None:
        return self._by_code.get(code)

    def is_supported(self, code: str) -> bool:
        return code in self._by_code

    @property
    def default(self) -> Locale:
        return self._by_code[self._default_code]

    @property
    def required_codes(self) -> tuple[str, ...]:
        return tuple(locale.code for locale in self._locales if locale.is_required)

    @property
    def active_codes(self) -> tuple[str, ...]:
        return tuple(locale.code for locale in self._locales if locale.is_active)


@lru_cache(maxsize=1)
def get_locale_registry() -> LocaleRegistry:
    """
    Build and cache the registry from env-driven locale settings.
    """

    return LocaleRegistry.from_settings(get_locale_settings())
