from datetime import timedelta
from uuid import uuid4

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from conftest import EMPLOYEE_INFO, build_survey
from survey_api.core.errors import NotFound, PersistenceError, RateLimited, ValidationError
from survey_api.db.types import utcnow
from survey_api.models.response import QuestionResponse, SurveyResponse
from survey_api.services.submissions import refill_submission, submit_response


def _count(db, model) -> int:
    return db.scalar(select(func.count()).select_from(model))


def _answers(survey, **values):
    ids = {
        "rating": survey.rating_id,
        "yes_no": survey.yes_no_id,
        "text": survey.text_id,
        "multi": survey.multi_id,
        "lead": survey.lead_rating_id,
    }
    return {str(ids[k]): v for k, v in values.items()}


def test_submit_stores_one_row_per_answer(db, store, survey):
    answers = _answers(survey, rating=5, yes_no="yes", text="Todo bien", multi=["Seguro", "Gimnasio"])
    response_id = submit_response(store, survey.id, EMPLOYEE_INFO, answers, 7.5)

    response = store.get_response(response_id)
    assert response.employee_name == "Ana Pérez"
    assert response.employee_department == "Finanzas"
    assert response.employee_reports_to == "Dirección Financiera"
    assert response.completion_time_minutes == 7.5
    assert response.response_attempt == 1
    assert response.is_refill is False

    rows = {r.question_id: r for r in store.answers_for_response(response_id)}
    assert len(rows) == 4
    assert rows[survey.rating_id].response_type == "number"
    assert rows[survey.rating_id].number_response == 5
    assert rows[survey.yes_no_id].text_response == "yes"
    # el orden de la lista se conserva
    assert rows[survey.multi_id].array_response == ["Seguro", "Gimnasio"]
    assert rows[survey.multi_id].text_response is None


def test_blank_answers_are_not_stored(db, store, survey):
    answers = _answers(survey, rating=4, text="", yes_no=None)
    response_id = submit_response(store, survey.id, EMPLOYEE_INFO, answers)

    assert len(store.answers_for_response(response_id)) == 1


def test_composite_and_boolean_answers(store, survey):
    answers = _answers(survey, rating={"main": 4, "other": "casi siempre"}, yes_no=True)
    response_id = submit_response(store, survey.id, EMPLOYEE_INFO, answers)

    rows = {r.question_id: r for r in store.answers_for_response(response_id)}
    assert rows[survey.rating_id].response_type == "object"
    assert rows[survey.rating_id].object_response == {"main": 4, "other": "casi siempre"}
    assert rows[survey.yes_no_id].response_type == "text"
    assert rows[survey.yes_no_id].text_response == "true"


def test_submission_without_employee_info_is_rejected(db, store, survey):
    with pytest.raises(ValidationError):
        submit_response(store, survey.id, None, _answers(survey, rating=3))
    assert _count(db, SurveyResponse) == 0


def test_answers_must_be_a_mapping(db, store, survey):
    with pytest.raises(ValidationError):
        submit_response(store, survey.id, EMPLOYEE_INFO, [5, "yes"])
    assert _count(db, SurveyResponse) == 0


def test_unknown_survey(store):
    with pytest.raises(NotFound):
        submit_response(store, uuid4(), EMPLOYEE_INFO, {})


@pytest.mark.parametrize("overrides", [
    {"is_active": False},
    {"is_published": False},
    {"end_date": utcnow() - timedelta(days=1)},
    {"start_date": utcnow() + timedelta(days=1)},
])
def test_closed_survey_rejects_without_writing(db, store, overrides):
    closed = build_survey(store, **overrides)
    with pytest.raises(ValidationError):
        submit_response(store, closed.id, EMPLOYEE_INFO, _answers(closed, rating=5))
    assert _count(db, SurveyResponse) == 0
    assert _count(db, QuestionResponse) == 0


def test_question_from_another_survey_is_rejected(db, store, survey):
    other = build_survey(store, title="Onboarding")
    answers = _answers(survey, rating=5)
    answers[str(other.rating_id)] = 3

    with pytest.raises(ValidationError):
        submit_response(store, survey.id, EMPLOYEE_INFO, answers)
    assert _count(db, SurveyResponse) == 0


def test_invalid_question_id_is_rejected(db, store, survey):
    with pytest.raises(ValidationError):
        submit_response(store, survey.id, EMPLOYEE_INFO, {"no-es-un-uuid": 5})
    assert _count(db, SurveyResponse) == 0


def test_required_questions_only_enforced_when_enabled(db, store, survey):
    # falta la pregunta de texto obligatoria
    answers = _answers(survey, rating=5)

    submit_response(store, survey.id, EMPLOYEE_INFO, answers, enforce_required=False)
    assert _count(db, SurveyResponse) == 1

    with pytest.raises(ValidationError):
        submit_response(store, survey.id, EMPLOYEE_INFO, answers, enforce_required=True)
    assert _count(db, SurveyResponse) == 1


def test_database_failure_rolls_back_everything(db, store, survey, monkeypatch):
    def broken_add_all(objs):
        raise SQLAlchemyError("disk full")

    monkeypatch.setattr(store, "add_all", broken_add_all)
    with pytest.raises(PersistenceError):
        submit_response(store, survey.id, EMPLOYEE_INFO, _answers(survey, rating=5))

    assert _count(db, SurveyResponse) == 0
    assert _count(db, QuestionResponse) == 0


# -------------------- refill -------------------- #

def test_refill_requires_survey_permission(store, survey):
    response_id = submit_response(store, survey.id, EMPLOYEE_INFO, _answers(survey, rating=2))
    with pytest.raises(ValidationError):
        refill_submission(store, survey.id, response_id, _answers(survey, rating=5))


def test_refill_replaces_answers(db, store):
    refillable = build_survey(store, allows_refill=True)
    response_id = submit_response(
        store, refillable.id, EMPLOYEE_INFO, _answers(refillable, rating=2, yes_no="no"), 4,
    )

    response = refill_submission(store, refillable.id, response_id, _answers(refillable, rating=5), 3)

    assert response.response_attempt == 2
    assert response.is_refill is True
    assert response.completion_time_minutes == 3
    rows = store.answers_for_response(response_id)
    assert [(r.question_id, r.number_response) for r in rows] == [(refillable.rating_id, 5)]
    assert _count(db, SurveyResponse) == 1


def test_refill_of_response_from_another_survey(store, survey):
    refillable = build_survey(store, allows_refill=True)
    response_id = submit_response(store, survey.id, EMPLOYEE_INFO, _answers(survey, rating=2))
    with pytest.raises(NotFound):
        refill_submission(store, refillable.id, response_id, {})


def test_second_refill_within_cooldown_is_rate_limited(store, employee):
    refillable = build_survey(store, allows_refill=True)
    response_id = submit_response(
        store, refillable.id, EMPLOYEE_INFO, _answers(refillable, rating=2), user_id=employee.id,
    )
    first = utcnow()
    refill_submission(store, refillable.id, response_id, _answers(refillable, rating=3), now=first)

    with pytest.raises(RateLimited):
        refill_submission(
            store, refillable.id, response_id, _answers(refillable, rating=4), now=first + timedelta(hours=23),
        )
    response = refill_submission(
        store, refillable.id, response_id, _answers(refillable, rating=5), now=first + timedelta(hours=25),
    )
    assert response.response_attempt == 3


def test_refill_leaves_refill_request_comment(store, employee):
    refillable = build_survey(store, allows_refill=True)
    response_id = submit_response(
        store, refillable.id, EMPLOYEE_INFO, _answers(refillable, rating=2), user_id=employee.id,
    )
    refill_submission(
        store, refillable.id, response_id, _answers(refillable, rating=5), reason="Cambié de equipo",
    )

    [comment] = store.comments_for_survey(refillable.id)
    assert comment.comment_type == "refill_request"
    assert comment.user_id == employee.id
    assert comment.comment_text == "Cambié de equipo"
