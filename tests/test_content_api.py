"""
tests/test_content_api.py

HTTP contract of the content and import routers, wired to an in-memory store.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from app.api.dependencies import get_content_store, get_translation_synchronizer
from app.main import create_app
from app.services.translation_sync import TranslationSynchronizer


@pytest.fixture()
def client(store, registry, sync_settings, provider_factory):
    application = create_app(validate_env=False, lifespan_checks=False)
    application.dependency_overrides[get_content_store] = lambda: store
    application.dependency_overrides[get_translation_synchronizer] = lambda: TranslationSynchronizer(
        provider_factory(failing_locales=["it"]),
        registry=registry,
        settings=sync_settings,
    )
    with TestClient(application) as test_client:
        yield test_client


def _category_payload(**parent) -> dict:
    return {
        "parent": {"game_mode_id": "gm-party", **parent},
        "translations": {
            "es": {"title": "Fiesta", "tags": "uno, dos"},
            "en": {"title": "Party", "tags": ["one", "two"]},
        },
    }


# ---------------------------------------------------------------------------
# Aggregate CRUD
# ---------------------------------------------------------------------------


class TestAggregateEndpoints:
    def test_health(self, client) -> None:
        assert client.get("/health").json() == {"status": "ok"}

    def test_create_read_update_delete(self, client) -> None:
        created = client.post("/content/challenge_category", json=_category_payload(min_players=3))
        assert created.status_code == 201
        category_id = created.json()["id"]

        fetched = client.get(f"/content/challenge_category/{category_id}")
        assert fetched.status_code == 200
        body = fetched.json()
        assert body["parent"]["min_players"] == 3
        assert body["translations"]["es"]["tags"] == ["uno", "dos"]
        assert list(body["translations"]) == ["es", "en"]

        updated = client.put(
            f"/content/challenge_category/{category_id}",
            json={"parent": {"game_mode_id": "gm-party"}, "translations": {"es": {"title": "Juerga"}}},
        )
        assert updated.status_code == 200
        assert list(client.get(f"/content/challenge_category/{category_id}").json()["translations"]) == ["es"]

        challenge = client.post(
            "/content/challenge",
            json={"parent": {"challenge_category_id": category_id}, "translations": {"es": {"content": "Baila"}}},
        )
        assert challenge.status_code == 201

        deleted = client.delete(f"/content/challenge_category/{category_id}")
        assert deleted.status_code == 200
        assert deleted.json() == {"id": category_id, "kind": "challenge_category", "deleted_children": 1}
        assert client.get(f"/content/challenge/{challenge.json()['id']}").status_code == 404

    def test_invalid_aggregate_is_422(self, client, store) -> None:
        response = client.post("/content/challenge_category", json={"parent": {"game_mode_id": "gm"}, "translations": {}})

        assert response.status_code == 422
        assert response.json()["detail"]["problems"] == ["At least one translation is required."]
        assert store.count_where("challenge_categories", {}) == 0

    def test_unknown_field_is_422(self, client) -> None:
        response = client.post("/content/challenge_category", json=_category_payload(colour="red"))

        assert response.status_code == 422

    @pytest.mark.parametrize(
        "parent",
        [{"min_players": "3"}, {"min_players": "many"}, {"is_premium": "yes"}, {"gradient_colors": "#fff"}],
    )
    def test_mistyped_parent_field_is_422(self, client, store, parent) -> None:
        response = client.post("/content/challenge_category", json=_category_payload(**parent))

        assert response.status_code == 422
        field_name = next(iter(parent))
        assert any(problem.startswith(field_name) for problem in response.json()["detail"]["problems"])
        assert store.count_where("challenge_categories", {}) == 0

    def test_mistyped_translation_field_is_422(self, client) -> None:
        payload = _category_payload()
        payload["translations"]["es"]["title"] = 42

        response = client.post("/content/challenge_category", json=payload)

        assert response.status_code == 422
        assert response.json()["detail"]["message"] == "Invalid translation fields for challenge_category."

    def test_out_of_range_integer_is_422(self, client) -> None:
        response = client.post("/content/challenge_category", json=_category_payload(max_players=2**40))

        assert response.status_code == 422
        assert response.json()["detail"]["problems"] == ["max_players is out of range."]

    def test_unknown_kind_is_404(self, client) -> None:
        assert client.get("/content/quiz/abc").status_code == 404

    def test_missing_parent_is_404(self, client) -> None:
        assert client.put("/content/challenge_category/missing", json=_category_payload()).status_code == 404
        assert client.delete("/content/challenge_category/missing").status_code == 404

    def test_write_failure_is_500_with_phase(self, client) -> None:
        response = client.post(
            "/content/challenge",
            json={"parent": {"challenge_category_id": "ghost"}, "translations": {"es": {"content": "Hola"}}},
        )

        assert response.status_code == 500
        assert response.json()["detail"]["phase"] == "insert_parent"


# ---------------------------------------------------------------------------
# Translation sync
# ---------------------------------------------------------------------------


class TestTranslationSyncEndpoint:
    def test_sync_returns_merged_translations_without_saving(self, client, store) -> None:
        response = client.post(
            "/content/deep_talk/translations/sync",
            json={
                "source": {"title": "Amor", "subtitle": "Profundo"},
                "target_locales": ["en", "it"],
                "existing": {"en": {"title": "Old", "intensity": "HIGH"}},
            },
        )

        assert response.status_code == 200
        body = response.json()
        results = {result["locale"]: result for result in body["results"]}
        assert results["en"]["ok"] is True
        assert results["it"]["ok"] is False
        assert body["translations"]["en"] == {
            "title": "[en] Amor",
            "subtitle": "[en] Profundo",
            "description": None,
            "intensity": "HIGH",
        }
        assert body["translations"]["es"]["title"] == "Amor"
        assert "it" not in body["translations"]
        assert store.count_where("deep_talks", {}) == 0


# ---------------------------------------------------------------------------
# Imports
# ---------------------------------------------------------------------------


class TestImportEndpoints:
    def test_upload_reports_rows(self, client, seed_category) -> None:
        seed_category("A1")
        content = "id,icon,is_premium,is_active,content_es,content_en\nA1,🎯,false,true,Hola,Hello\nA2,,false,true,,\n"

        response = client.post(
            "/imports/challenges",
            files={"file": ("retos.csv", content.encode("utf-8-sig"), "text/csv")},
        )

        assert response.status_code == 200
        body = response.json()
        assert (body["attempted"], body["succeeded"], body["success"]) == (2, 1, True)
        assert body["failures"][0]["line_number"] == 3

    def test_structural_error_is_400(self, client) -> None:
        response = client.post(
            "/imports/challenges",
            files={"file": ("retos.csv", b"icon\n\xf0\x9f\x8e\xaf\n", "text/csv")},
        )

        assert response.status_code == 400
        assert "challenge_category_id" in response.json()["detail"]["missing_columns"]

    def test_non_csv_upload_is_400(self, client) -> None:
        response = client.post(
            "/imports/challenges",
            files={"file": ("retos.json", b"{}", "application/json")},
        )

        assert response.status_code == 400

    def test_unknown_profile_is_404(self, client) -> None:
        assert client.get("/imports/quizzes/example").status_code == 404

    def test_example_download_uses_given_references(self, client) -> None:
        response = client.get("/imports/challenges/example", params={"reference_id": ["cat-1", "cat-2"]})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        rows = response.text.splitlines()[1:]
        assert [row.split(",")[0] for row in rows] == ["cat-1", "cat-2", "cat-1"]

    def test_question_upload_resolves_titles(self, client, store, seed_deep_talk) -> None:
        seed_deep_talk("Amor y Pareja")
        content = "category_title_es,sort_order,question_es,question_en\nAmor y Pareja,1,Hola,Hi\nOtro,1,Hola,Hi\n"

        response = client.post(
            "/imports/deep_talk_questions",
            files={"file": ("preguntas.csv", content.encode("utf-8"), "text/csv")},
        )

        body = response.json()
        assert (body["attempted"], body["succeeded"]) == (2, 1)
        assert body["failures"][0]["message"] == 'No se encontró categoría con título "Otro"'
        assert store.count_where("deep_talk_questions", {}) == 2


# ---------------------------------------------------------------------------
# Deep talk questions
# ---------------------------------------------------------------------------


class TestQuestionEndpoints:
    def test_create_list_update_toggle_delete(self, client, seed_deep_talk) -> None:
        deep_talk_id = seed_deep_talk()
        base = f"/deep-talks/{deep_talk_id}/questions"

        created = client.post(base, json={"sort_order": 0, "icon": "💭", "questions": {"es": "Hola", "en": "Hi"}})
        assert created.status_code == 201
        assert len(created.json()["row_ids"]) == 2

        updated = client.put(f"{base}/0", json={"questions": {"fr": "Salut"}, "icon": "🔥"})
        assert updated.status_code == 200
        assert updated.json()["questions"] == {"es": "Hola", "en": "Hi", "fr": "Salut"}
        assert updated.json()["icon"] == "🔥"

        toggled = client.patch(f"{base}/0/active", json={"is_active": False})
        assert toggled.json() == {"deep_talk_id": deep_talk_id, "sort_order": 0, "rows": 3}

        listed = client.get(base).json()
        assert [(slot["sort_order"], slot["is_active"]) for slot in listed] == [(0, False)]

        deleted = client.delete(f"{base}/0")
        assert deleted.json()["rows"] == 3
        assert client.get(f"{base}/0").status_code == 404

    def test_create_shifts_later_questions(self, client, seed_deep_talk) -> None:
        deep_talk_id = seed_deep_talk()
        base = f"/deep-talks/{deep_talk_id}/questions"
        client.post(base, json={"sort_order": 0, "questions": {"es": "uno"}})

        client.post(base, json={"sort_order": 0, "questions": {"es": "cero"}})

        listed = client.get(base).json()
        assert [(slot["sort_order"], slot["questions"]["es"]) for slot in listed] == [(0, "cero"), (1, "uno")]

    def test_question_for_unknown_deep_talk_is_404(self, client) -> None:
        response = client.post("/deep-talks/missing/questions", json={"questions": {"es": "Hola"}})

        assert response.status_code == 404
        assert response.json()["detail"]["phase"] == "prepare"

    def test_missing_required_locale_is_422(self, client, seed_deep_talk) -> None:
        response = client.post(f"/deep-talks/{seed_deep_talk()}/questions", json={"questions": {"it": "Ciao"}})

        assert response.status_code == 422
        assert response.json()["detail"]["problems"] == ["At least one required locale must be present: es, en."]

    @pytest.mark.parametrize(
        "body",
        [{"questions": {"es": 3}}, {"questions": {"es": "x"}, "sort_order": -1}, {"color": "red"}],
    )
    def test_malformed_body_is_422(self, client, store, seed_deep_talk, body) -> None:
        response = client.post(f"/deep-talks/{seed_deep_talk()}/questions", json=body)

        assert response.status_code == 422
        assert store.count_where("deep_talk_questions", {}) == 0

    @pytest.mark.parametrize(
        ("method", "suffix", "body"),
        [("patch", "/4/active", {"is_active": True}), ("delete", "/4", None)],
    )
    def test_empty_position_is_404(self, client, seed_deep_talk, method, suffix, body) -> None:
        url = f"/deep-talks/{seed_deep_talk()}/questions{suffix}"

        response = client.request(method.upper(), url, json=body)

        assert response.status_code == 404


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


class TestCatalogEndpoints:
    def test_challenge_categories_carry_counts(self, client) -> None:
        category_id = client.post("/content/challenge_category", json=_category_payload()).json()["id"]
        for content in ("uno", "dos"):
            client.post(
                "/content/challenge",
                json={"parent": {"challenge_category_id": category_id}, "translations": {"es": {"content": content}}},
            )

        listed = client.get("/catalog/challenge-categories")

        assert listed.status_code == 200
        [category] = listed.json()
        assert (category["id"], category["challenge_count"]) == (category_id, 2)
        assert category["translations"]["es"]["title"] == "Fiesta"

    def test_challenges_of_a_category(self, client) -> None:
        category_id = client.post("/content/challenge_category", json=_category_payload()).json()["id"]
        client.post(
            "/content/challenge",
            json={"parent": {"challenge_category_id": category_id}, "translations": {"es": {"content": "uno"}}},
        )

        body = client.get(f"/catalog/challenge-categories/{category_id}/challenges").json()

        assert body["category"]["id"] == category_id
        assert [challenge["translations"]["es"]["content"] for challenge in body["challenges"]] == ["uno"]

    def test_challenges_of_missing_category_is_404(self, client) -> None:
        assert client.get("/catalog/challenge-categories/missing/challenges").status_code == 404

    def test_any_kind_can_be_listed(self, client) -> None:
        client.post("/content/challenge_category", json=_category_payload())

        assert len(client.get("/catalog/challenge_category").json()) == 1
        assert client.get("/catalog/daily_tip").json() == []
        assert client.get("/catalog/quizzes").status_code == 404
