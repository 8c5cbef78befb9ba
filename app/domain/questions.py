"""
app/domain/questions.py

Deep talk questions.

Questions have no separate translation table: each locale's wording is its
own ``deep_talk_questions`` row, and the rows of one question are tied
together by ``(deep_talk_id, sort_order)``. That pair is the question's
identity; a "slot" below is one such position with every locale's text.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, ClassVar, Mapping, Sequence

from app.domain.content import ParentFields, TranslationFields, is_blank
from app.domain.locales import LocaleRegistry

QUESTIONS_TABLE = "deep_talk_questions"


@dataclass(frozen=True)
class DeepTalkQuestionText(TranslationFields):
    question: str

    mandatory_fields: ClassVar[tuple[str, ...]] = ("question",)
    translatable_fields: ClassVar[tuple[str, ...]] = ("question",)


@dataclass(frozen=True)
class QuestionSlotFields(ParentFields):
    """
    Values shared by every locale row of one question.
    """

    deep_talk_id: str
    sort_order: int = 0
    is_active: bool = True
    icon: str | None = None

    integer_fields: ClassVar[tuple[str, ...]] = ("sort_order",)
    flag_fields: ClassVar[tuple[str, ...]] = ("is_active",)

    def problems(self) -> list[str]:
        found = self.type_problems()
        if found:
            return found
        if is_blank(self.deep_talk_id):
            found.append("deep_talk_id is required.")
        if self.sort_order < 0:
            found.append("sort_order cannot be negative.")
        return found


@dataclass(frozen=True)
class QuestionSlot:
    """
    One question position of a deep talk, with its wording per locale.

    ``row_ids`` maps each locale to the id of the row holding its text.
    """

    fields: QuestionSlotFields
    texts: dict[str, DeepTalkQuestionText] = field(default_factory=dict)
    row_ids: dict[str, str] = field(default_factory=dict)


def slot_problems(
    fields: QuestionSlotFields,
    texts: Mapping[str, TranslationFields],
    registry: LocaleRegistry,
    *,
    require_required_locale: bool = True,
) -> list[str]:
    """
    Collect every reason the question cannot be written; empty means valid.

    Updates upsert single locales, so they may skip the required-locale rule.
    """

    problems = fields.problems()
    if not texts:
        problems.append("At least one question text is required.")
        return problems

    for locale, text in texts.items():
        if not registry.is_supported(locale):
            problems.append(f"Unsupported locale '{locale}'.")
            continue
        if not isinstance(text, DeepTalkQuestionText):
            problems.append(f"Question text '{locale}' must be DeepTalkQuestionText.")
            continue
        if text.missing_mandatory():
            problems.append(f"Question text '{locale}' is blank.")

    required = registry.required_codes
    if require_required_locale and not any(locale in required for locale in texts):
        problems.append(f"At least one required locale must be present: {', '.join(required)}.")
    return problems


def question_rows(fields: QuestionSlotFields, texts: Mapping[str, DeepTalkQuestionText]) -> list[dict[str, Any]]:
    return [
        {
            "deep_talk_id": fields.deep_talk_id,
            "language_code": locale,
            "question": text.question,
            "icon": fields.icon,
            "sort_order": fields.sort_order,
            "is_active": fields.is_active,
        }
        for locale, text in texts.items()
    ]


def slots_from_rows(rows: Sequence[Mapping[str, Any]], registry: LocaleRegistry) -> list[QuestionSlot]:
    """
    Group question rows by sort_order, in ascending position.

    Shared values come from the default locale's row when there is one.
    Locales are ordered the way the registry lists them.
    """

    grouped: dict[int, list[Mapping[str, Any]]] = {}
    for row in rows:
        grouped.setdefault(row["sort_order"], []).append(row)

    order = {locale.code: index for index, locale in enumerate(registry.list_supported())}
    default_code = registry.default.code
    slots: list[QuestionSlot] = []
    for sort_order in sorted(grouped):
        group = sorted(grouped[sort_order], key=lambda row: order.get(row["language_code"], len(order)))
        lead = next((row for row in group if row["language_code"] == default_code), group[0])
        slots.append(
            QuestionSlot(
                fields=QuestionSlotFields(
                    deep_talk_id=lead["deep_talk_id"],
                    sort_order=sort_order,
                    is_active=lead["is_active"],
                    icon=lead["icon"],
                ),
                texts={row["language_code"]: DeepTalkQuestionText(question=row["question"]) for row in group},
                row_ids={row["language_code"]: row["id"] for row in group},
            )
        )
    return slots
