"""
app/services/import_profiles.py

Per-kind column layouts for bulk content imports.

Translation columns are named ``<field>_<locale>`` (``content_es``,
``title_en`` ...). A profile knows which columns are mandatory, how a row
turns into parent fields and translations, and how to write an example file
that imports cleanly.
"""

from __future__ import annotations

import logging
import re
import unicodedata
from abc import ABC, abstractmethod
from itertools import cycle
from typing import Any, ClassVar, Sequence

from app.config import BulkImportSettings, get_bulk_import_settings
from app.domain.bulk_import import ImportRow
from app.domain.content import (
    CHALLENGE,
    DEEP_TALK,
    DEEP_TALK_CATEGORY,
    ChallengeFields,
    DeepTalkCategoryFields,
    DeepTalkFields,
    EntityKind,
    ParentFields,
    TranslationFields,
    is_blank,
)
from app.domain.errors import ReferenceNotFoundError
from app.domain.locales import LocaleRegistry, get_locale_registry
from app.domain.questions import DeepTalkQuestionText, QuestionSlotFields
from app.services.aggregate_writer import AggregateWriter
from app.services.question_writer import QuestionWriter
from db.repositories.content_store import ContentStore

logger = logging.getLogger(__name__)

TRUE_VALUES = ("true", "1")

_LEADING_INT_PATTERN = re.compile(r"^\s*([+-]?\d+)")

ExampleRow = tuple[dict[str, str], dict[str, dict[str, str]]]


def parse_flag(value: str) -> bool:
    return value.strip() in TRUE_VALUES


def parse_leading_int(value: str) -> int | None:
    """
    Parse the integer prefix of ``value`` ("15 min" -> 15); None when there is none.
    """

    match = _LEADING_INT_PATTERN.match(value or "")
    if match is None:
        return None
    return int(match.group(1))


def split_colors(value: str) -> tuple[str, ...] | None:
    colors = tuple(color.strip() for color in value.split("|") if color.strip())
    return colors or None


def slugify_label(value: str) -> str:
    """
    Lowercase ASCII slug with accents dropped and spaces turned into ``_``.
    """

    decomposed = unicodedata.normalize("NFD", value.lower())
    without_marks = "".join(char for char in decomposed if not unicodedata.combining(char))
    cleaned = re.sub(r"[^a-z0-9\s]", "", without_marks).strip()
    return re.sub(r"\s+", "_", cleaned)


def _optional(value: str) -> str | None:
    return value if value.strip() else None


class ImportProfile(ABC):
    """
    Column layout and row mapping for one importable entity kind.
    """

    name: ClassVar[str]
    kind: ClassVar[EntityKind]
    reference_column: ClassVar[str | None] = None
    reference_aliases: ClassVar[tuple[str, ...]] = ()
    content_noun: ClassVar[str] = "contenido"
    missing_reference_message: ClassVar[str] = "Falta el identificador de referencia"
    parent_columns: ClassVar[tuple[str, ...]] = ()

    def __init__(
        self,
        *,
        registry: LocaleRegistry | None = None,
        settings: BulkImportSettings | None = None,
    ) -> None:
        self._registry = registry or get_locale_registry()
        self._settings = settings or get_bulk_import_settings()

    @property
    def registry(self) -> LocaleRegistry:
        return self._registry

    @property
    def translation_type(self) -> type[TranslationFields]:
        return self.kind.translation_type

    @staticmethod
    def translation_column(field_name: str, locale: str) -> str:
        return f"{field_name}_{locale}"

    def canonical_column(self, header: str) -> str:
        if self.reference_column is not None and header in self.reference_aliases:
            return self.reference_column
        return header

    def required_content_columns(self) -> list[str]:
        return [
            self.translation_column(field_name, locale)
            for locale in self._registry.required_codes
            for field_name in self.translation_type.mandatory_fields
        ]

    def mandatory_columns(self) -> list[str]:
        columns = [self.reference_column] if self.reference_column else []
        return columns + self.required_content_columns()

    def row_problem(self, row: ImportRow) -> str | None:
        """
        First reason the row cannot be imported, or None.
        """

        if self.reference_column is not None and is_blank(row.get(self.reference_column)):
            return self.missing_reference_message

        blank = [column for column in self.required_content_columns() if is_blank(row.get(column))]
        if blank:
            return f"Falta {self.content_noun} obligatorio: {', '.join(blank)}"
        return None

    def build_translations(self, row: ImportRow) -> dict[str, TranslationFields]:
        """
        One translation per locale whose mandatory columns are filled.

        Blank optional locales are left out rather than stored empty.
        """

        translation_type = self.translation_type
        translations: dict[str, TranslationFields] = {}
        for locale in self._registry.list_supported():
            if not locale.is_active:
                continue
            values: dict[str, Any] = {}
            for field_name in translation_type.field_names():
                raw = row.get(self.translation_column(field_name, locale.code))
                values[field_name] = raw if field_name in translation_type.mandatory_fields else _optional(raw)
            if any(is_blank(values[name]) for name in translation_type.mandatory_fields):
                continue
            translations[locale.code] = translation_type.from_mapping(values)
        return translations

    def resolve_reference(self, store: ContentStore, raw_reference: str) -> str:
        """
        Map the reference column value to a parent id; by default it already is one.
        """

        return raw_reference

    def write(self, writer: AggregateWriter, row: ImportRow, reference_id: str | None) -> str:
        """
        Persist one validated row and return the id of what was created.
        """

        return writer.create(self.kind, self.build_parent(row, reference_id), self.build_translations(row))

    @abstractmethod
    def build_parent(self, row: ImportRow, reference_id: str | None) -> ParentFields:
        """
        Build the parent fields for a validated row.
        """

    # ------------------------------------------------------------------
    # Example file
    # ------------------------------------------------------------------

    @abstractmethod
    def example_rows(self) -> list[ExampleRow]:
        """
        Sample parent values and per-locale translations for the example file.
        """

    def example_file(self, reference_ids: Sequence[str] | None = None) -> str:
        """
        Render a delimited example file.

        ``reference_ids`` replaces the sample reference values (cycled), so
        the file can point at records that exist in the target store.
        """

        delimiter = self._settings.delimiter
        rows = self.example_rows()
        locales = [
            locale.code
            for locale in self._registry.list_supported()
            if locale.is_active and any(locale.code in translations for _, translations in rows)
        ]
        translation_columns = [
            (locale, field_name, self.translation_column(field_name, locale))
            for locale in locales
            for field_name in self.translation_type.translatable_fields
        ]
        header = list(self.parent_columns) + [column for _, _, column in translation_columns]

        references = cycle(reference_ids) if reference_ids else None
        lines = [delimiter.join(header)]
        for parent_values, translations in rows:
            values = dict(parent_values)
            if references is not None and self.reference_column is not None:
                values[self.reference_column] = next(references)
            line = [values.get(column, "") for column in self.parent_columns]
            line.extend(
                translations.get(locale, {}).get(field_name, "")
                for locale, field_name, _ in translation_columns
            )
            lines.append(delimiter.join(line))
        return "\n".join(lines) + "\n"


class ChallengeImportProfile(ImportProfile):
    name = "challenges"
    kind = CHALLENGE
    reference_column = "challenge_category_id"
    reference_aliases = ("id", "category_id")
    missing_reference_message = "Falta el ID de la categoría"
    parent_columns = ("challenge_category_id", "icon", "is_premium", "is_active")

    def build_parent(self, row: ImportRow, reference_id: str | None) -> ParentFields:
        return ChallengeFields(
            challenge_category_id=reference_id or row.get(self.reference_column),
            icon=_optional(row.get("icon")),
            is_premium=parse_flag(row.get("is_premium")),
            is_active=parse_flag(row.get("is_active")),
            author=_optional(row.get("author")),
        )

    def example_rows(self) -> list[ExampleRow]:
        category_a = "b07421cb-248c-4099-8b29-e91a782939b3"
        category_b = "56f6d22e-0db5-4ce3-acd7-e6460e604936"
        return [
            (
                {"challenge_category_id": category_a, "icon": "🎯", "is_premium": "false", "is_active": "true"},
                {
                    "es": {"content": "Cuenta un chiste"},
                    "en": {"content": "Tell a joke"},
                    "fr": {"content": "Raconte une blague"},
                    "it": {"content": "Racconta una barzelletta"},
                    "pt": {"content": "Conte uma piada"},
                },
            ),
            (
                {"challenge_category_id": category_a, "icon": "🎭", "is_premium": "false", "is_active": "true"},
                {
                    "es": {"content": "Imita a un famoso"},
                    "en": {"content": "Imitate a celebrity"},
                    "fr": {"content": "Imite une celebrite"},
                    "it": {"content": "Imita una celebrita"},
                    "pt": {"content": "Imite uma celebridade"},
                },
            ),
            (
                {"challenge_category_id": category_b, "icon": "🎵", "is_premium": "true", "is_active": "true"},
                {
                    "es": {"content": "Canta una cancion"},
                    "en": {"content": "Sing a song"},
                    "fr": {"content": "Chante une chanson"},
                    "it": {"content": "Canta una canzone"},
                    "pt": {"content": "Cante uma musica"},
                },
            ),
        ]


class DeepTalkCategoryImportProfile(ImportProfile):
    name = "deep_talk_categories"
    kind = DEEP_TALK_CATEGORY
    content_noun = "nombre"
    parent_columns = ("label", "icon", "color", "route", "sort_order", "is_premium", "is_active")

    def build_parent(self, row: ImportRow, reference_id: str | None) -> ParentFields:
        label = row.get("label").strip()
        if not label:
            default_name = row.get(self.translation_column("name", self._registry.default.code))
            label = slugify_label(default_name)
        return DeepTalkCategoryFields(
            game_mode_id=row.get("game_mode_id").strip() or self._settings.deep_talks_game_mode_id,
            label=label or None,
            icon=_optional(row.get("icon")),
            color=_optional(row.get("color")),
            route=_optional(row.get("route")),
            sort_order=parse_leading_int(row.get("sort_order")) or 0,
            is_premium=parse_flag(row.get("is_premium")),
            is_active=parse_flag(row.get("is_active")),
        )

    def example_rows(self) -> list[ExampleRow]:
        return [
            (
                {
                    "label": "relaciones",
                    "icon": "heart",
                    "color": "#EC4899",
                    "route": "/deep-talks/relaciones",
                    "sort_order": "1",
                    "is_premium": "false",
                    "is_active": "true",
                },
                {
                    "es": {"name": "Relaciones"},
                    "en": {"name": "Relationships"},
                    "pt": {"name": "Relacionamentos"},
                    "fr": {"name": "Relations"},
                    "it": {"name": "Relazioni"},
                },
            ),
            (
                {
                    "label": "crecimiento-personal",
                    "icon": "rocket",
                    "color": "#8B5CF6",
                    "route": "/deep-talks/crecimiento",
                    "sort_order": "2",
                    "is_premium": "false",
                    "is_active": "true",
                },
                {
                    "es": {"name": "Crecimiento Personal"},
                    "en": {"name": "Personal Growth"},
                    "pt": {"name": "Crescimento Pessoal"},
                    "fr": {"name": "Croissance Personnelle"},
                    "it": {"name": "Crescita Personale"},
                },
            ),
        ]


class DeepTalkImportProfile(ImportProfile):
    name = "deep_talks"
    kind = DEEP_TALK
    reference_column = "filter_label"
    content_noun = "título"
    missing_reference_message = "Falta el filter_label"
    parent_columns = ("filter_label", "icon", "gradient_colors", "estimated_time", "sort_order", "is_active")

    def resolve_reference(self, store: ContentStore, raw_reference: str) -> str:
        matches = store.select_where(
            DEEP_TALK_CATEGORY.parent_table,
            {"label": raw_reference},
            order_by="sort_order",
        )
        if not matches:
            raise ReferenceNotFoundError(
                f'No se encontró filtro con label "{raw_reference}"',
                reference=raw_reference,
            )
        if len(matches) > 1:
            logger.warning(
                "Ambiguous deep talk category label label=%s matches=%s using=%s",
                raw_reference,
                len(matches),
                matches[0]["id"],
            )
        return matches[0]["id"]

    def build_parent(self, row: ImportRow, reference_id: str | None) -> ParentFields:
        return DeepTalkFields(
            deep_talk_category_id=reference_id or "",
            icon=_optional(row.get("icon")),
            gradient_colors=split_colors(row.get("gradient_colors")),
            estimated_time=parse_leading_int(row.get("estimated_time")),
            sort_order=parse_leading_int(row.get("sort_order")) or 0,
            is_active=parse_flag(row.get("is_active")),
        )

    def example_rows(self) -> list[ExampleRow]:
        return [
            (
                {
                    "filter_label": "relaciones",
                    "icon": "heart",
                    "gradient_colors": "#FF6B9D|#FF8FAB",
                    "estimated_time": "15 min",
                    "sort_order": "1",
                    "is_active": "true",
                },
                {
                    "es": {
                        "title": "Amor y Pareja",
                        "subtitle": "Conversaciones sobre el amor",
                        "description": "Explora temas profundos sobre relaciones románticas",
                        "intensity": "MEDIUM",
                    },
                    "en": {
                        "title": "Love and Partnership",
                        "subtitle": "Conversations about love",
                        "description": "Explore deep topics about romantic relationships",
                        "intensity": "MEDIUM",
                    },
                    "pt": {
                        "title": "Amor e Parceria",
                        "subtitle": "Conversas sobre amor",
                        "description": "Explore tópicos profundos sobre relacionamentos românticos",
                        "intensity": "MEDIUM",
                    },
                },
            ),
            (
                {
                    "filter_label": "crecimiento-personal",
                    "icon": "rocket",
                    "gradient_colors": "#4CAF50|#66BB6A",
                    "estimated_time": "25 min",
                    "sort_order": "1",
                    "is_active": "true",
                },
                {
                    "es": {
                        "title": "Metas y Sueños",
                        "subtitle": "Conversaciones sobre aspiraciones",
                        "description": "Descubre qué motiva a las personas",
                        "intensity": "HIGH",
                    },
                    "en": {
                        "title": "Goals and Dreams",
                        "subtitle": "Conversations about aspirations",
                        "description": "Discover what motivates people",
                        "intensity": "HIGH",
                    },
                    "fr": {
                        "title": "Objectifs et Rêves",
                        "subtitle": "Conversations sur les aspirations",
                        "description": "Découvrez ce qui motive les gens",
                        "intensity": "HIGH",
                    },
                },
            ),
        ]

class DeepTalkQuestionImportProfile(ImportProfile):
    """
    Questions reference their deep talk by its title in ``title_locale``.

    Every row is inserted at its sort_order, pushing existing questions of
    that deep talk down by one.
    """

    name = "deep_talk_questions"
    title_locale: ClassVar[str] = "es"
    reference_column = "category_title_es"
    content_noun = "pregunta"
    missing_reference_message = "Falta el category_title_es"
    parent_columns = ("category_title_es", "icon", "sort_order", "is_active")

    @property
    def translation_type(self) -> type[TranslationFields]:
        return DeepTalkQuestionText

    def resolve_reference(self, store: ContentStore, raw_reference: str) -> str:
        matches = store.select_where(
            DEEP_TALK.translation_table,
            {"language_code": self.title_locale, "title": raw_reference},
            order_by="deep_talk_id",
        )
        if not matches:
            raise ReferenceNotFoundError(
                f'No se encontró categoría con título "{raw_reference}"',
                reference=raw_reference,
            )
        if len(matches) > 1:
            logger.warning(
                "Ambiguous deep talk title title=%s matches=%s using=%s",
                raw_reference,
                len(matches),
                matches[0]["deep_talk_id"],
            )
        return matches[0]["deep_talk_id"]

    def build_parent(self, row: ImportRow, reference_id: str | None) -> ParentFields:
        return QuestionSlotFields(
            deep_talk_id=reference_id or "",
            sort_order=parse_leading_int(row.get("sort_order")) or 0,
            is_active=parse_flag(row.get("is_active")),
            icon=_optional(row.get("icon")),
        )

    def write(self, writer: AggregateWriter, row: ImportRow, reference_id: str | None) -> str:
        questions = QuestionWriter(writer.store, registry=self._registry)
        row_ids = questions.create(self.build_parent(row, reference_id), self.build_translations(row))
        return row_ids[0]

    def example_rows(self) -> list[ExampleRow]:
        return [
            (
                {"category_title_es": "Amor y Pareja", "icon": "💭", "sort_order": "1", "is_active": "true"},
                {
                    "es": {"question": "¿Qué es lo que más valoras en una relación?"},
                    "en": {"question": "What do you value most in a relationship?"},
                    "pt": {"question": "O que você mais valoriza em um relacionamento?"},
                },
            ),
            (
                {"category_title_es": "Amor y Pareja", "icon": "💞", "sort_order": "2", "is_active": "true"},
                {
                    "es": {"question": "¿Cómo imaginas tu vida en pareja dentro de diez años?"},
                    "en": {"question": "How do you picture your life as a couple in ten years?"},
                },
            ),
            (
                {"category_title_es": "Metas y Sueños", "icon": "🚀", "sort_order": "1", "is_active": "true"},
                {
                    "es": {"question": "¿Qué sueño te gustaría cumplir este año?"},
                    "en": {"question": "Which dream would you like to fulfil this year?"},
                    "fr": {"question": "Quel rêve aimerais-tu réaliser cette année ?"},
                },
            ),
        ]


IMPORT_PROFILES: dict[str, type[ImportProfile]] = {
    profile.name: profile
    for profile in (
        ChallengeImportProfile,
        DeepTalkCategoryImportProfile,
        DeepTalkImportProfile,
        DeepTalkQuestionImportProfile,
    )
}


def get_import_profile(
    name: str,
    *,
    registry: LocaleRegistry | None = None,
    settings: BulkImportSettings | None = None,
) -> ImportProfile:
    try:
        profile_type = IMPORT_PROFILES[name]
    except KeyError:
        raise ValueError(f"Unknown import profile '{name}'. Allowed: {sorted(IMPORT_PROFILES)}.") from None
    return profile_type(registry=registry, settings=settings)
