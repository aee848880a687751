from datetime import timedelta
from uuid import uuid4

import pytest

from conftest import build_survey
from survey_api.db.types import utcnow


def test_health(client):
    assert client.get("/api/v1/healthz").json() == {"status": "ok"}
    assert client.get("/api/v1/health/db").json() == {"db": "ok"}


def test_public_list_only_shows_open_surveys(client, store, survey):
    build_survey(store, title="Borrador", is_published=False)
    build_survey(store, title="Cerrada", end_date=utcnow() - timedelta(days=2))
    build_survey(store, title="Inactiva", is_active=False)

    res = client.get("/api/v1/surveys")
    assert res.status_code == 200
    assert [s["title"] for s in res.json()] == ["Clima laboral 2024"]

    # el parámetro ya no existe: los borradores solo se listan en /admin/surveys
    res = client.get("/api/v1/surveys", params={"active_only": "false"})
    assert [s["title"] for s in res.json()] == ["Clima laboral 2024"]


@pytest.mark.parametrize("overrides", [
    {"is_published": False},
    {"is_active": False},
    {"end_date": utcnow() - timedelta(days=2)},
])
def test_public_detail_hides_unavailable_surveys(client, store, admin_headers, overrides):
    hidden = build_survey(store, title="Oculta", **overrides)
    res = client.get(f"/api/v1/surveys/{hidden.id}")
    assert res.status_code == 404
    assert res.json()["kind"] == "not_found"
    # el administrador sí la ve
    assert client.get(f"/api/v1/admin/surveys/{hidden.id}", headers=admin_headers).status_code == 200


def test_survey_detail_is_ordered(client, survey):
    res = client.get(f"/api/v1/surveys/{survey.id}")
    assert res.status_code == 200
    body = res.json()

    assert [s["title"] for s in body["sections"]] == ["General", "Liderazgo"]
    general = body["sections"][0]
    assert [q["question_type"] for q in general["questions"]] == ["rating", "yes_no", "text", "checkbox"]
    checkbox = general["questions"][3]
    assert [o["option_text"] for o in checkbox["options"]] == ["Gimnasio", "Seguro", "Comedor"]
    assert checkbox["has_other_option"] is True


def test_unknown_survey_returns_not_found(client, db):
    res = client.get(f"/api/v1/surveys/{uuid4()}")
    assert res.status_code == 404
    assert res.json()["kind"] == "not_found"


def test_bad_uuid_is_a_validation_error(client, db):
    res = client.get("/api/v1/surveys/not-a-uuid")
    assert res.status_code == 400
    assert res.json()["kind"] == "validation_error"


def test_departments_catalog(client, admin_headers):
    client.post("/api/v1/admin/departments", json={"name": "TI"}, headers=admin_headers)
    created = client.post("/api/v1/admin/departments", json={"name": "Archivo"}, headers=admin_headers).json()
    client.put(f"/api/v1/admin/departments/{created['id']}", json={"is_active": False}, headers=admin_headers)

    res = client.get("/api/v1/departments")
    assert [d["name"] for d in res.json()] == ["TI"]
