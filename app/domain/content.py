"""
app/domain/content.py

Aggregate model: one language-neutral parent plus its per-locale translations.

Every entity kind is a closed pair of frozen dataclasses (parent fields and
translation fields) described by an EntityKind. Translation dataclasses
declare which of their fields are mandatory and which are machine
translatable.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import Any, ClassVar, Mapping, TypeVar

from app.domain.locales import LocaleRegistry

AGE_RATINGS = ("ALL", "TEEN", "ADULT")

TAG_SEPARATOR = ", "

# Every integer column is a 4-byte INTEGER.
MAX_INTEGER = 2**31 - 1

_T = TypeVar("_T", bound="TranslationFields")
_P = TypeVar("_P", bound="ParentFields")


def is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple)):
        return not any(not is_blank(item) for item in value)
    return False


def split_tags(value: str | None) -> tuple[str, ...] | None:
    """
    Parse a comma-separated tag string; blank input yields None.
    """

    if value is None:
        return None
    tags = tuple(tag.strip() for tag in value.split(",") if tag.strip())
    return tags or None


def _to_storable(value: Any) -> Any:
    if isinstance(value, tuple):
        return list(value)
    return value


def _from_storable(value: Any) -> Any:
    if isinstance(value, list):
        return tuple(value)
    return value


class _RowMixin:
    @classmethod
    def field_names(cls) -> tuple[str, ...]:
        return tuple(f.name for f in dataclasses.fields(cls))  # type: ignore[arg-type]

    def to_row(self) -> dict[str, Any]:
        return {name: _to_storable(getattr(self, name)) for name in self.field_names()}

    @classmethod
    def from_row(cls, row: Mapping[str, Any]):
        return cls(**{name: _from_storable(row[name]) for name in cls.field_names() if name in row})


# ---------------------------------------------------------------------------
# Translation variants
# ---------------------------------------------------------------------------


class TranslationFields(_RowMixin):
    """
    Shared behaviour of the per-kind translation dataclasses.
    """

    mandatory_fields: ClassVar[tuple[str, ...]] = ()
    translatable_fields: ClassVar[tuple[str, ...]] = ()
    list_fields: ClassVar[tuple[str, ...]] = ()

    def missing_mandatory(self) -> list[str]:
        return [name for name in self.mandatory_fields if is_blank(getattr(self, name))]

    def text_values(self) -> dict[str, str]:
        """
        Non-blank translatable fields as plain strings, in declaration order.

        List fields are flattened with TAG_SEPARATOR.
        """

        values: dict[str, str] = {}
        for name in self.translatable_fields:
            value = getattr(self, name)
            if is_blank(value):
                continue
            if name in self.list_fields:
                values[name] = TAG_SEPARATOR.join(value)
            else:
                values[name] = value
        return values

    def with_text_values(self: _T, values: Mapping[str, str]) -> _T:
        """
        Return a copy with the given translatable fields overwritten.
        """

        return dataclasses.replace(self, **self._coerce_text_values(values))  # type: ignore[type-var]

    @classmethod
    def from_text_values(cls: type[_T], values: Mapping[str, str]) -> _T:
        return cls(**cls._coerce_text_values(values))

    @classmethod
    def from_mapping(cls: type[_T], values: Mapping[str, Any]) -> _T:
        """
        Build from loose field values; comma-separated strings are accepted for list fields.
        """

        coerced = dict(values)
        for name in cls.list_fields:
            if isinstance(coerced.get(name), str):
                coerced[name] = split_tags(coerced[name])
        return cls(**{key: _from_storable(value) for key, value in coerced.items()})

    @classmethod
    def _coerce_text_values(cls, values: Mapping[str, str]) -> dict[str, Any]:
        coerced: dict[str, Any] = {}
        for name, value in values.items():
            if name not in cls.translatable_fields:
                continue
            coerced[name] = split_tags(value) if name in cls.list_fields else value
        return coerced


@dataclass(frozen=True)
class ChallengeCategoryText(TranslationFields):
    title: str
    description: str | None = None
    instructions: str | None = None
    tags: tuple[str, ...] | None = None

    mandatory_fields: ClassVar[tuple[str, ...]] = ("title",)
    translatable_fields: ClassVar[tuple[str, ...]] = ("title", "description", "instructions", "tags")
    list_fields: ClassVar[tuple[str, ...]] = ("tags",)


@dataclass(frozen=True)
class ChallengeText(TranslationFields):
    content: str

    mandatory_fields: ClassVar[tuple[str, ...]] = ("content",)
    translatable_fields: ClassVar[tuple[str, ...]] = ("content",)


@dataclass(frozen=True)
class DailyTipText(TranslationFields):
    text: str

    mandatory_fields: ClassVar[tuple[str, ...]] = ("text",)
    translatable_fields: ClassVar[tuple[str, ...]] = ("text",)


@dataclass(frozen=True)
class DeepTalkCategoryText(TranslationFields):
    name: str

    mandatory_fields: ClassVar[tuple[str, ...]] = ("name",)
    translatable_fields: ClassVar[tuple[str, ...]] = ("name",)


@dataclass(frozen=True)
class DeepTalkText(TranslationFields):
    title: str
    subtitle: str | None = None
    description: str | None = None
    intensity: str | None = None

    mandatory_fields: ClassVar[tuple[str, ...]] = ("title",)
    translatable_fields: ClassVar[tuple[str, ...]] = ("title", "subtitle", "description", "intensity")


# ---------------------------------------------------------------------------
# Parent variants
# ---------------------------------------------------------------------------


class ParentFields(_RowMixin):
    """
    Shared behaviour of the per-kind parent dataclasses.

    Fields whose dataclass default is None may be None; every other field
    listed in integer_fields or flag_fields must hold a value of that type.
    """

    integer_fields: ClassVar[tuple[str, ...]] = ()
    flag_fields: ClassVar[tuple[str, ...]] = ()

    def problems(self) -> list[str]:
        return self.type_problems()

    def type_problems(self) -> list[str]:
        nullable = {f.name for f in dataclasses.fields(self) if f.default is None}  # type: ignore[arg-type]
        found: list[str] = []
        for name in self.integer_fields:
            value = getattr(self, name)
            if value is None and name in nullable:
                continue
            if isinstance(value, bool) or not isinstance(value, int):
                found.append(f"{name} must be an integer.")
            elif not -MAX_INTEGER - 1 <= value <= MAX_INTEGER:
                found.append(f"{name} is out of range.")
        for name in self.flag_fields:
            if not isinstance(getattr(self, name), bool):
                found.append(f"{name} must be true or false.")
        return found


@dataclass(frozen=True)
class ChallengeCategoryFields(ParentFields):
    game_mode_id: str
    text_color: str = "#FFFFFF"
    min_players: int = 2
    max_players: int = 10
    gradient_colors: tuple[str, ...] | None = None
    age_rating: str = "ALL"
    icon: str | None = None
    is_premium: bool = False
    is_active: bool = True
    sort_order: int = 0
    route: str | None = None
    author: str | None = None

    integer_fields: ClassVar[tuple[str, ...]] = ("min_players", "max_players", "sort_order")
    flag_fields: ClassVar[tuple[str, ...]] = ("is_premium", "is_active")

    def problems(self) -> list[str]:
        found = self.type_problems()
        if found:
            return found
        if is_blank(self.game_mode_id):
            found.append("game_mode_id is required.")
        if self.age_rating not in AGE_RATINGS:
            found.append(f"age_rating must be one of {list(AGE_RATINGS)}.")
        if self.min_players < 1:
            found.append("min_players must be at least 1.")
        if self.max_players < self.min_players:
            found.append("max_players must be greater than or equal to min_players.")
        return found


@dataclass(frozen=True)
class ChallengeFields(ParentFields):
    challenge_category_id: str
    icon: str | None = None
    is_active: bool = True
    is_premium: bool = False
    author: str | None = None

    flag_fields: ClassVar[tuple[str, ...]] = ("is_active", "is_premium")

    def problems(self) -> list[str]:
        found = self.type_problems()
        if is_blank(self.challenge_category_id):
            found.append("challenge_category_id is required.")
        return found


@dataclass(frozen=True)
class DailyTipFields(ParentFields):
    is_active: bool = True

    flag_fields: ClassVar[tuple[str, ...]] = ("is_active",)


@dataclass(frozen=True)
class DeepTalkCategoryFields(ParentFields):
    game_mode_id: str
    label: str | None = None
    icon: str | None = None
    color: str | None = None
    route: str | None = None
    sort_order: int = 0
    is_premium: bool = False
    is_active: bool = True

    integer_fields: ClassVar[tuple[str, ...]] = ("sort_order",)
    flag_fields: ClassVar[tuple[str, ...]] = ("is_premium", "is_active")

    def problems(self) -> list[str]:
        found = self.type_problems()
        if is_blank(self.game_mode_id):
            found.append("game_mode_id is required.")
        return found


@dataclass(frozen=True)
class DeepTalkFields(ParentFields):
    deep_talk_category_id: str
    icon: str | None = None
    gradient_colors: tuple[str, ...] | None = None
    estimated_time: int | None = None
    is_active: bool = True
    sort_order: int = 0

    integer_fields: ClassVar[tuple[str, ...]] = ("estimated_time", "sort_order")
    flag_fields: ClassVar[tuple[str, ...]] = ("is_active",)

    def problems(self) -> list[str]:
        found = self.type_problems()
        if found:
            return found
        if is_blank(self.deep_talk_category_id):
            found.append("deep_talk_category_id is required.")
        if self.estimated_time is not None and self.estimated_time < 0:
            found.append("estimated_time cannot be negative.")
        return found


# ---------------------------------------------------------------------------
# Kinds
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ChildRelation:
    """
    A dependent table removed by the store's cascade when the parent goes.
    """

    table: str
    foreign_key: str


@dataclass(frozen=True)
class EntityKind:
    name: str
    parent_table: str
    translation_table: str
    translation_fk: str
    parent_type: type[ParentFields]
    translation_type: type[TranslationFields]
    dependents: tuple[ChildRelation, ...] = ()
    sort_scope: str | None = None

    def parent_from_mapping(self, values: Mapping[str, Any]) -> ParentFields:
        return self.parent_type(**{key: _from_storable(value) for key, value in values.items()})

    def translation_from_mapping(self, values: Mapping[str, Any]) -> TranslationFields:
        return self.translation_type.from_mapping(values)


CHALLENGE_CATEGORY = EntityKind(
    name="challenge_category",
    parent_table="challenge_categories",
    translation_table="challenge_category_translations",
    translation_fk="challenge_category_id",
    parent_type=ChallengeCategoryFields,
    translation_type=ChallengeCategoryText,
    dependents=(ChildRelation(table="challenges", foreign_key="challenge_category_id"),),
)

CHALLENGE = EntityKind(
    name="challenge",
    parent_table="challenges",
    translation_table="challenge_translations",
    translation_fk="challenge_id",
    parent_type=ChallengeFields,
    translation_type=ChallengeText,
)

DAILY_TIP = EntityKind(
    name="daily_tip",
    parent_table="daily_tips",
    translation_table="daily_tip_translations",
    translation_fk="tip_id",
    parent_type=DailyTipFields,
    translation_type=DailyTipText,
)

DEEP_TALK_CATEGORY = EntityKind(
    name="deep_talk_category",
    parent_table="deep_talk_categories",
    translation_table="deep_talk_categories_translations",
    translation_fk="deep_talk_category_id",
    parent_type=DeepTalkCategoryFields,
    translation_type=DeepTalkCategoryText,
    dependents=(ChildRelation(table="deep_talks", foreign_key="deep_talk_category_id"),),
    sort_scope="game_mode_id",
)

DEEP_TALK = EntityKind(
    name="deep_talk",
    parent_table="deep_talks",
    translation_table="deep_talk_translations",
    translation_fk="deep_talk_id",
    parent_type=DeepTalkFields,
    translation_type=DeepTalkText,
    dependents=(ChildRelation(table="deep_talk_questions", foreign_key="deep_talk_id"),),
    sort_scope="deep_talk_category_id",
)

ENTITY_KINDS: dict[str, EntityKind] = {
    kind.name: kind
    for kind in (CHALLENGE_CATEGORY, CHALLENGE, DAILY_TIP, DEEP_TALK_CATEGORY, DEEP_TALK)
}


def get_entity_kind(name: str) -> EntityKind:
    try:
        return ENTITY_KINDS[name]
    except KeyError:
        raise ValueError(f"Unknown entity kind '{name}'. Allowed: {sorted(ENTITY_KINDS)}.") from None


# ---------------------------------------------------------------------------
# Aggregate
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Aggregate:
    """
    A parent and its complete translation set, keyed by locale code.
    """

    kind: EntityKind
    parent: ParentFields
    translations: dict[str, TranslationFields] = field(default_factory=dict)
    parent_id: str | None = None


def aggregate_problems(
    kind: EntityKind,
    parent: ParentFields,
    translations: Mapping[str, TranslationFields],
    registry: LocaleRegistry,
) -> list[str]:
    """
    Collect every reason the aggregate cannot be persisted; empty means valid.
    """

    problems: list[str] = []
    if not isinstance(parent, kind.parent_type):
        problems.append(f"Parent fields must be {kind.parent_type.__name__} for kind '{kind.name}'.")
    else:
        problems.extend(parent.problems())

    if not translations:
        problems.append("At least one translation is required.")
        return problems

    for locale, translation in translations.items():
        if not registry.is_supported(locale):
            problems.append(f"Unsupported locale '{locale}'.")
            continue
        if not isinstance(translation, kind.translation_type):
            problems.append(
                f"Translation '{locale}' must be {kind.translation_type.__name__} for kind '{kind.name}'."
            )
            continue
        missing = translation.missing_mandatory()
        if missing:
            problems.append(f"Translation '{locale}' is missing mandatory field(s): {', '.join(missing)}.")

    required = registry.required_codes
    if not any(locale in required for locale in translations):
        problems.append(f"At least one required locale must be present: {', '.join(required)}.")

    return problems


def translation_rows(
    kind: EntityKind,
    parent_id: str,
    translations: Mapping[str, TranslationFields],
) -> list[dict[str, Any]]:
    rows: list[dict[str, Any]] = []
    for locale, translation in translations.items():
        row = translation.to_row()
        row[kind.translation_fk] = parent_id
        row["language_code"] = locale
        rows.append(row)
    return rows


def aggregate_from_record(kind: EntityKind, record: Mapping[str, Any], registry: LocaleRegistry) -> Aggregate:
    """
    Rebuild an aggregate from a store record that embeds its translation rows.

    Translations are ordered the way the registry lists locales.
    """

    parent = kind.parent_type.from_row(record)
    by_locale = {
        row["language_code"]: kind.translation_type.from_row(row)
        for row in record.get(kind.translation_table, [])
    }
    order = {locale.code: index for index, locale in enumerate(registry.list_supported())}
    translations = dict(sorted(by_locale.items(), key=lambda item: order.get(item[0], len(order))))
    return Aggregate(kind=kind, parent=parent, translations=translations, parent_id=record["id"])
