from uuid import uuid4

import pytest

from conftest import EMPLOYEE_INFO, auth_headers, build_survey
from survey_api.core.errors import ValidationError
from survey_api.services import surveys as survey_service
from survey_api.services.tenancy import CompanyScope

ADMIN = "/api/v1/admin"


@pytest.fixture
def acme(make_company):
    return make_company("Acme", domain="acme.com")


@pytest.fixture
def globex(make_company):
    return make_company("Globex", max_surveys=1)


@pytest.fixture
def acme_admin(make_user, acme):
    return make_user("jefa@acme.com", role="admin", company_id=acme.id)


@pytest.fixture
def globex_admin(make_user, globex):
    return make_user("jefe@globex.com", role="admin", company_id=globex.id)


@pytest.fixture
def acme_survey(store, acme):
    return build_survey(store, title="Clima Acme", company_id=acme.id)


@pytest.fixture
def globex_survey(store, globex):
    return build_survey(store, title="Clima Globex", company_id=globex.id)


# -------------------- CompanyScope -------------------- #

def test_scope_for_roles(acme_admin, super_admin, acme):
    scope = CompanyScope.for_user(acme_admin)
    assert scope.allows(acme.id) and not scope.allows(None)
    # X-Company-Id no cambia el alcance de un admin de empresa
    assert CompanyScope.for_user(acme_admin, selected_company=uuid4()) == scope

    root = CompanyScope.for_user(super_admin)
    assert root.unrestricted and root.allows(acme.id) and root.allows(None)
    narrowed = CompanyScope.for_user(super_admin, selected_company=acme.id)
    assert not narrowed.unrestricted and narrowed.owner_for(None) == acme.id


# -------------------- aislamiento entre empresas -------------------- #

def test_admin_lists_only_own_company_surveys(client, acme_admin, acme_survey, globex_survey):
    res = client.get(f"{ADMIN}/surveys", headers=auth_headers(acme_admin))
    assert [s["title"] for s in res.json()] == ["Clima Acme"]


@pytest.mark.parametrize("path", [
    "/surveys/{id}",
    "/surveys/{id}/responses",
    "/surveys/{id}/sections",
    "/surveys/{id}/audit-questions",
    "/analytics/{id}",
    "/analytics/{id}/export.csv",
])
def test_other_company_survey_is_not_found(client, acme_admin, globex_survey, path):
    res = client.get(ADMIN + path.format(id=globex_survey.id), headers=auth_headers(acme_admin))
    assert res.status_code == 404
    assert res.json()["kind"] == "not_found"


def test_admin_cannot_edit_other_company_tree(client, acme_admin, globex_survey):
    headers = auth_headers(acme_admin)
    assert client.put(f"{ADMIN}/surveys/{globex_survey.id}", json={"title": "x"},
                      headers=headers).status_code == 404
    assert client.put(f"{ADMIN}/sections/{globex_survey.general_id}", json={"title": "x"},
                      headers=headers).status_code == 404
    assert client.delete(f"{ADMIN}/questions/{globex_survey.rating_id}", headers=headers).status_code == 404


def test_created_survey_belongs_to_admin_company(client, acme, globex, acme_admin):
    res = client.post(
        f"{ADMIN}/surveys",
        json={"title": "Pulso", "company_id": str(globex.id)},
        headers=auth_headers(acme_admin),
    )
    assert res.status_code == 201
    assert res.json()["company_id"] == str(acme.id)


def test_super_admin_sees_all_or_selected_company(client, super_admin_headers, acme, acme_survey, globex_survey):
    res = client.get(f"{ADMIN}/surveys", headers=super_admin_headers)
    assert {s["title"] for s in res.json()} == {"Clima Acme", "Clima Globex"}

    res = client.get(f"{ADMIN}/surveys", headers={**super_admin_headers, "X-Company-Id": str(acme.id)})
    assert [s["title"] for s in res.json()] == ["Clima Acme"]


def test_company_survey_limit(store, globex, globex_survey):
    with pytest.raises(ValidationError, match="límite de encuestas"):
        with store.transaction():
            survey_service.create_survey(store, {"title": "Segunda", "company_id": globex.id})


def test_departments_are_per_company(client, acme_admin, globex_admin, make_user, acme):
    acme_headers = auth_headers(acme_admin)
    assert client.post(f"{ADMIN}/departments", json={"name": "TI"}, headers=acme_headers).status_code == 201
    # mismo nombre en otra empresa: permitido
    res = client.post(f"{ADMIN}/departments", json={"name": "TI"}, headers=auth_headers(globex_admin))
    assert res.status_code == 201
    dept_id = res.json()["id"]
    assert client.post(f"{ADMIN}/departments", json={"name": "TI"}, headers=acme_headers).status_code == 400

    assert [d["name"] for d in client.get(f"{ADMIN}/departments", headers=acme_headers).json()] == ["TI"]
    assert client.put(f"{ADMIN}/departments/{dept_id}", json={"name": "x"}, headers=acme_headers).status_code == 404

    worker = make_user("obrero@acme.com", company_id=acme.id)
    catalog = client.get("/api/v1/departments", headers=auth_headers(worker)).json()
    assert [d["company_id"] for d in catalog] == [str(acme.id)]


def test_logged_in_employee_sees_own_company_surveys(client, make_user, acme, acme_survey, globex_survey):
    worker = make_user("obrero@acme.com", company_id=acme.id)
    headers = auth_headers(worker)

    res = client.get("/api/v1/surveys", headers=headers)
    assert [s["title"] for s in res.json()] == ["Clima Acme"]
    assert client.get(f"/api/v1/surveys/{globex_survey.id}", headers=headers).status_code == 404
    # sin sesión se ven todas las abiertas
    assert len(client.get("/api/v1/surveys").json()) == 2


def test_admin_cannot_read_other_company_response(client, acme_admin, make_user, globex, globex_survey):
    worker = make_user("obrero@globex.com", company_id=globex.id)
    body = {"employee_info": EMPLOYEE_INFO, "answers": {str(globex_survey.rating_id): 5}}
    response_id = client.post(
        f"/api/v1/surveys/{globex_survey.id}/responses", json=body, headers=auth_headers(worker),
    ).json()["response_id"]

    url = f"/api/v1/surveys/{globex_survey.id}/responses/{response_id}"
    assert client.get(url, headers=auth_headers(acme_admin)).status_code == 404
    assert client.get(url, headers=auth_headers(worker)).status_code == 200
