"""
app/domain package marker.
"""

from app.domain.bulk_import import ImportFailure, ImportOutcome, ImportRow, ImportState, RowOutcome
from app.domain.content import Aggregate, EntityKind, get_entity_kind
from app.domain.locales import Locale, LocaleRegistry, get_locale_registry

__all__ = [
    "Aggregate",
    "EntityKind",
    "ImportFailure",
    "ImportOutcome",
    "ImportRow",
    "ImportState",
    "Locale",
    "LocaleRegistry",
    "RowOutcome",
    "get_entity_kind",
    "get_locale_registry",
]
