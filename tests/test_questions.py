"""
tests/test_questions.py

Deep talk question writes against an in-memory SQLite store.
"""

from __future__ import annotations

import pytest

from app.domain.content import DEEP_TALK
from app.domain.errors import AggregateNotFoundError, ValidationError, WriteError, WritePhase
from app.domain.questions import DeepTalkQuestionText, QuestionSlotFields, slots_from_rows
from app.services.aggregate_writer import AggregateWriter
from app.services.question_writer import QuestionWriter


def _texts(**questions: str) -> dict[str, DeepTalkQuestionText]:
    return {locale: DeepTalkQuestionText(question=text) for locale, text in questions.items()}


def _positions(store, deep_talk_id: str) -> dict[str, int]:
    rows = store.select_where("deep_talk_questions", {"deep_talk_id": deep_talk_id, "language_code": "es"})
    return {row["question"]: row["sort_order"] for row in rows}


# ---------------------------------------------------------------------------
# create
# ---------------------------------------------------------------------------


class TestCreate:
    def test_one_row_per_locale_shares_position_and_flags(self, question_writer, store, seed_deep_talk) -> None:
        deep_talk_id = seed_deep_talk()

        row_ids = question_writer.create(
            QuestionSlotFields(deep_talk_id=deep_talk_id, sort_order=1, icon="💭"),
            _texts(es="¿Qué valoras?", en="What do you value?"),
        )

        assert len(row_ids) == 2
        rows = store.select_where("deep_talk_questions", {"deep_talk_id": deep_talk_id})
        assert {row["language_code"]: row["question"] for row in rows} == {
            "es": "¿Qué valoras?",
            "en": "What do you value?",
        }
        assert {(row["sort_order"], row["icon"], row["is_active"]) for row in rows} == {(1, "💭", True)}

    def test_inserting_at_an_occupied_position_shifts_later_questions(
        self, question_writer, store, seed_deep_talk
    ) -> None:
        deep_talk_id = seed_deep_talk()
        for sort_order, text in enumerate(["uno", "dos", "tres"]):
            question_writer.create(
                QuestionSlotFields(deep_talk_id=deep_talk_id, sort_order=sort_order),
                _texts(es=text, en=text),
            )

        question_writer.create(
            QuestionSlotFields(deep_talk_id=deep_talk_id, sort_order=1),
            _texts(es="nueva", en="new"),
        )

        assert _positions(store, deep_talk_id) == {"uno": 0, "nueva": 1, "dos": 2, "tres": 3}

    def test_other_deep_talks_are_not_shifted(self, question_writer, store, seed_deep_talk) -> None:
        first, second = seed_deep_talk("A"), seed_deep_talk("B")
        question_writer.create(QuestionSlotFields(deep_talk_id=second, sort_order=0), _texts(es="otra", en="other"))

        question_writer.create(QuestionSlotFields(deep_talk_id=first, sort_order=0), _texts(es="una", en="one"))

        assert _positions(store, second) == {"otra": 0}

    def test_make_room_can_be_disabled(self, question_writer, store, seed_deep_talk) -> None:
        deep_talk_id = seed_deep_talk()
        question_writer.create(QuestionSlotFields(deep_talk_id=deep_talk_id, sort_order=0), _texts(es="uno"))

        question_writer.create(
            QuestionSlotFields(deep_talk_id=deep_talk_id, sort_order=1),
            _texts(es="dos"),
            make_room=False,
        )

        assert _positions(store, deep_talk_id) == {"uno": 0, "dos": 1}

    def test_missing_required_locale_is_rejected(self, question_writer, store, seed_deep_talk) -> None:
        deep_talk_id = seed_deep_talk()

        with pytest.raises(ValidationError) as excinfo:
            question_writer.create(QuestionSlotFields(deep_talk_id=deep_talk_id), _texts(fr="Quoi ?"))

        assert excinfo.value.problems == ["At least one required locale must be present: es, en."]
        assert store.count_where("deep_talk_questions", {}) == 0

    @pytest.mark.parametrize(
        ("fields", "texts", "problem"),
        [
            (QuestionSlotFields(deep_talk_id="dt", sort_order=-1), _texts(es="x"), "sort_order cannot be negative."),
            (QuestionSlotFields(deep_talk_id="dt"), _texts(es="   "), "Question text 'es' is blank."),
            (QuestionSlotFields(deep_talk_id="dt"), _texts(es="x", xx="y"), "Unsupported locale 'xx'."),
            (QuestionSlotFields(deep_talk_id="dt"), {}, "At least one question text is required."),
            (QuestionSlotFields(deep_talk_id="dt", sort_order="2"), _texts(es="x"), "sort_order must be an integer."),
        ],
    )
    def test_invalid_questions_are_rejected(self, question_writer, fields, texts, problem) -> None:
        with pytest.raises(ValidationError) as excinfo:
            question_writer.create(fields, texts)

        assert problem in excinfo.value.problems

    def test_unknown_deep_talk_is_not_found(self, question_writer, store) -> None:
        with pytest.raises(AggregateNotFoundError) as excinfo:
            question_writer.create(QuestionSlotFields(deep_talk_id="missing"), _texts(es="x"))

        assert excinfo.value.phase is WritePhase.PREPARE
        assert store.count_where("deep_talk_questions", {}) == 0

    def test_insert_failure_is_a_write_error(self, faulty_store, registry, seed_deep_talk) -> None:
        deep_talk_id = seed_deep_talk()
        faulty_store.fail("insert_many", "deep_talk_questions")

        with pytest.raises(WriteError) as excinfo:
            QuestionWriter(faulty_store, registry=registry).create(
                QuestionSlotFields(deep_talk_id=deep_talk_id),
                _texts(es="x"),
            )

        assert excinfo.value.phase is WritePhase.INSERT_ROWS
        assert excinfo.value.parent_id == deep_talk_id


# ---------------------------------------------------------------------------
# update / toggle / delete
# ---------------------------------------------------------------------------


class TestUpdate:
    def test_existing_locale_is_updated_and_new_locale_inserted(self, question_writer, seed_deep_talk) -> None:
        deep_talk_id = seed_deep_talk()
        question_writer.create(QuestionSlotFields(deep_talk_id=deep_talk_id, sort_order=2), _texts(es="Hola", en="Hi"))

        question_writer.update(
            QuestionSlotFields(deep_talk_id=deep_talk_id, sort_order=2, icon="🔥"),
            _texts(es="Buenas", fr="Salut"),
        )

        slot = question_writer.get_slot(deep_talk_id, 2)
        assert {locale: text.question for locale, text in slot.texts.items()} == {
            "es": "Buenas",
            "en": "Hi",
            "fr": "Salut",
        }
        assert slot.fields.icon == "🔥"

    def test_shared_values_reach_locales_left_out(self, question_writer, store, seed_deep_talk) -> None:
        deep_talk_id = seed_deep_talk()
        question_writer.create(QuestionSlotFields(deep_talk_id=deep_talk_id), _texts(es="Hola", en="Hi"))

        question_writer.update(QuestionSlotFields(deep_talk_id=deep_talk_id, is_active=False), _texts(es="Hola"))

        rows = store.select_where("deep_talk_questions", {"deep_talk_id": deep_talk_id})
        assert [row["is_active"] for row in rows] == [False, False]

    def test_update_of_an_empty_position_creates_it(self, question_writer, seed_deep_talk) -> None:
        deep_talk_id = seed_deep_talk()

        question_writer.update(QuestionSlotFields(deep_talk_id=deep_talk_id, sort_order=4), _texts(en="Hi"))

        assert question_writer.get_slot(deep_talk_id, 4).row_ids.keys() == {"en"}

    def test_update_for_unknown_deep_talk_is_not_found(self, question_writer) -> None:
        with pytest.raises(AggregateNotFoundError):
            question_writer.update(QuestionSlotFields(deep_talk_id="missing"), _texts(es="x"))


class TestToggleAndDelete:
    def test_set_active_touches_every_locale_row(self, question_writer, store, seed_deep_talk) -> None:
        deep_talk_id = seed_deep_talk()
        question_writer.create(QuestionSlotFields(deep_talk_id=deep_talk_id), _texts(es="Hola", en="Hi", pt="Olá"))

        changed = question_writer.set_active(deep_talk_id, 0, False)

        assert changed == 3
        assert store.count_where("deep_talk_questions", {"is_active": False}) == 3

    def test_delete_removes_only_that_position(self, question_writer, store, seed_deep_talk) -> None:
        deep_talk_id = seed_deep_talk()
        for sort_order in (0, 1, 2):
            question_writer.create(
                QuestionSlotFields(deep_talk_id=deep_talk_id, sort_order=sort_order),
                _texts(es=f"p{sort_order}", en=f"q{sort_order}"),
            )

        removed = question_writer.delete(deep_talk_id, 1)

        assert removed == 2
        assert _positions(store, deep_talk_id) == {"p0": 0, "p2": 2}

    @pytest.mark.parametrize("operation", ["set_active", "delete"])
    def test_empty_position_is_not_found(self, question_writer, seed_deep_talk, operation) -> None:
        deep_talk_id = seed_deep_talk()

        with pytest.raises(AggregateNotFoundError):
            if operation == "set_active":
                question_writer.set_active(deep_talk_id, 7, True)
            else:
                question_writer.delete(deep_talk_id, 7)

    def test_deleting_the_deep_talk_counts_and_removes_its_questions(
        self, question_writer, store, registry, seed_deep_talk
    ) -> None:
        deep_talk_id = seed_deep_talk()
        question_writer.create(QuestionSlotFields(deep_talk_id=deep_talk_id), _texts(es="Hola", en="Hi"))

        result = AggregateWriter(store, registry=registry).delete(DEEP_TALK, deep_talk_id)

        assert result.deleted_children == 2
        assert store.count_where("deep_talk_questions", {}) == 0


# ---------------------------------------------------------------------------
# reads
# ---------------------------------------------------------------------------


class TestSlots:
    def test_list_slots_groups_rows_by_position(self, question_writer, seed_deep_talk) -> None:
        deep_talk_id = seed_deep_talk()
        question_writer.create(QuestionSlotFields(deep_talk_id=deep_talk_id, sort_order=1), _texts(es="dos", en="two"))
        question_writer.create(QuestionSlotFields(deep_talk_id=deep_talk_id, sort_order=0), _texts(es="uno"))

        slots = question_writer.list_slots(deep_talk_id)

        assert [slot.fields.sort_order for slot in slots] == [0, 2]
        assert slots[1].texts == _texts(es="dos", en="two")

    def test_shared_values_come_from_the_default_locale_row(self, registry) -> None:
        shared = {"deep_talk_id": "dt", "sort_order": 0}
        rows = [
            {**shared, "id": "r1", "language_code": "en", "question": "Hi", "icon": "x", "is_active": False},
            {**shared, "id": "r2", "language_code": "es", "question": "Hola", "icon": "y", "is_active": True},
        ]

        [slot] = slots_from_rows(rows, registry)

        assert (slot.fields.icon, slot.fields.is_active) == ("y", True)
        assert list(slot.texts) == ["es", "en"]
        assert slot.row_ids == {"es": "r2", "en": "r1"}

    def test_get_slot_of_empty_position(self, question_writer, seed_deep_talk) -> None:
        assert question_writer.get_slot(seed_deep_talk(), 3) is None
