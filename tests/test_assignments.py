from datetime import timedelta

import pytest

from conftest import EMPLOYEE_INFO, auth_headers, build_survey
from survey_api.core.errors import NotFound, ValidationError
from survey_api.db.types import utcnow
from survey_api.services import assignments as assignment_service
from survey_api.services.tenancy import CompanyScope

ADMIN = "/api/v1/admin"


@pytest.fixture
def acme(make_company):
    return make_company("Acme")


@pytest.fixture
def boss(make_user, acme):
    return make_user("jefa@acme.com", role="admin", company_id=acme.id)


@pytest.fixture
def worker(make_user, acme):
    return make_user("obrero@acme.com", company_id=acme.id)


@pytest.fixture
def pulse(store, acme):
    return build_survey(store, title="Pulso", company_id=acme.id, allows_refill=True)


def _assign(client, boss, pulse, *users, **extra):
    body = {"survey_id": str(pulse.id), "user_ids": [str(u.id) for u in users], **extra}
    return client.post(f"{ADMIN}/assignments", json=body, headers=auth_headers(boss))


def _submit(client, pulse, user, rating=4):
    body = {"employee_info": EMPLOYEE_INFO, "answers": {str(pulse.rating_id): rating}}
    res = client.post(f"/api/v1/surveys/{pulse.id}/responses", json=body, headers=auth_headers(user))
    assert res.status_code == 201
    return res.json()["response_id"]


# -------------------- creación -------------------- #

def test_assign_and_list(client, boss, worker, pulse):
    res = _assign(client, boss, pulse, worker, notes="Antes del viernes")
    assert res.status_code == 201
    [assignment] = res.json()
    assert assignment["status"] == "pending"
    assert assignment["assigned_by"] == str(boss.id)
    assert assignment["refill_count"] == 0

    mine = client.get("/api/v1/assignments", headers=auth_headers(worker)).json()
    assert [a["id"] for a in mine] == [assignment["id"]]
    listed = client.get(f"{ADMIN}/assignments", params={"status": "pending"}, headers=auth_headers(boss)).json()
    assert len(listed) == 1


def test_assign_rejects_users_outside_company(client, boss, employee, pulse):
    res = _assign(client, boss, pulse, employee)
    assert res.status_code == 400
    assert str(employee.id) in res.json()["detail"]


def test_assign_rejects_open_duplicate(client, boss, worker, pulse):
    assert _assign(client, boss, pulse, worker).status_code == 201
    assert _assign(client, boss, pulse, worker).status_code == 400


def test_assign_due_date_rules(store, boss, worker, pulse):
    scope = CompanyScope.for_user(boss)
    with pytest.raises(ValidationError, match="futura"):
        assignment_service.create_assignments(
            store, pulse.id, [worker.id], scope=scope, due_date=utcnow() - timedelta(hours=1),
        )
    with pytest.raises(ValidationError, match="cierre"):
        assignment_service.create_assignments(
            store, pulse.id, [worker.id], scope=scope, due_date=utcnow() + timedelta(days=60),
        )


def test_assign_survey_of_other_company(store, worker, survey, boss):
    with pytest.raises(NotFound):
        assignment_service.create_assignments(store, survey.id, [worker.id], scope=CompanyScope.for_user(boss))


# -------------------- ciclo de vida -------------------- #

def test_submission_completes_assignment(client, store, boss, worker, pulse):
    [assignment] = _assign(client, boss, pulse, worker).json()
    response_id = _submit(client, pulse, worker)

    detail = client.get(f"{ADMIN}/assignments/{assignment['id']}", headers=auth_headers(boss)).json()
    assert detail["status"] == "completed"
    assert detail["completed_at"] is not None
    res = client.get(f"/api/v1/surveys/{pulse.id}/responses/{response_id}", headers=auth_headers(worker))
    assert res.json()["assignment_id"] == assignment["id"]

    # con un envío asociado ya no se puede borrar
    res = client.delete(f"{ADMIN}/assignments/{assignment['id']}", headers=auth_headers(boss))
    assert res.status_code == 400


def test_status_transitions(client, boss, worker, pulse):
    [assignment] = _assign(client, boss, pulse, worker).json()
    url = f"{ADMIN}/assignments/{assignment['id']}"
    headers = auth_headers(boss)

    assert client.put(url, json={"status": "refill_requested"}, headers=headers).status_code == 400
    assert client.put(url, json={"status": "in_progress"}, headers=headers).json()["status"] == "in_progress"
    done = client.put(url, json={"status": "completed"}, headers=headers).json()
    assert done["completed_at"] is not None
    back = client.put(url, json={"status": "refill_requested"}, headers=headers).json()
    assert back["completed_at"] is None

    assert client.delete(url, headers=headers).status_code == 204
    assert client.get(url, headers=headers).status_code == 404


def test_employee_requests_refill(client, store, boss, worker, pulse):
    [assignment] = _assign(client, boss, pulse, worker).json()
    url = f"/api/v1/assignments/{assignment['id']}/refill"
    # todavía no está completada
    assert client.patch(url, json={}, headers=auth_headers(worker)).status_code == 400

    _submit(client, pulse, worker)
    res = client.patch(url, json={"reason": "Me equivoqué de área"}, headers=auth_headers(worker))
    assert res.status_code == 200
    body = res.json()
    assert body["status"] == "refill_requested"
    assert body["refill_count"] == 1
    assert body["notes"] == "Refill requested: Me equivoqué de área"

    store.db.expire_all()
    [comment] = store.comments_for_survey(pulse.id)
    assert comment.comment_type == "refill_request"
    assert comment.recipient_id == boss.id
    assert comment.comment_text == "Me equivoqué de área"


def test_refill_request_on_someone_else_assignment(client, boss, worker, make_user, acme, pulse):
    [assignment] = _assign(client, boss, pulse, worker).json()
    intruder = make_user("otro@acme.com", company_id=acme.id)
    res = client.patch(f"/api/v1/assignments/{assignment['id']}/refill", json={}, headers=auth_headers(intruder))
    assert res.status_code == 404


def test_new_submission_after_refill_request_completes_again(client, store, boss, worker, pulse):
    [assignment] = _assign(client, boss, pulse, worker).json()
    _submit(client, pulse, worker)
    client.patch(f"/api/v1/assignments/{assignment['id']}/refill", json={}, headers=auth_headers(worker))

    _submit(client, pulse, worker, rating=2)
    detail = client.get(f"{ADMIN}/assignments/{assignment['id']}", headers=auth_headers(boss)).json()
    assert detail["status"] == "completed"
    assert detail["refill_count"] == 1
