from datetime import datetime, timezone
from uuid import uuid4

import pytest

from conftest import EMPLOYEE_INFO
from survey_api.core.errors import NotFound
from survey_api.services import audit_questions as audit_service
from survey_api.services.analytics import (
    department_breakdown,
    get_audit_analytics,
    get_section_analytics,
    get_survey_analytics,
    population_variance,
    rating_values,
    summarize_question,
    yes_no_counts,
)
from survey_api.services.answers import AnswerValue
from survey_api.services.submissions import submit_response

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def _values(*raw):
    return [AnswerValue.classify(v) for v in raw]


# -------------------- cálculo puro -------------------- #

def test_rating_summary():
    out = summarize_question(uuid4(), "Satisfacción", "rating", _values(5, 4, 3, 5, 5))
    assert out.response_count == 5
    assert out.avg_rating == pytest.approx(4.4)
    assert out.distribution == [0, 0, 1, 1, 3]
    assert out.yes_count is None


def test_rating_values_use_composite_main_and_skip_text():
    answers = _values({"main": 4, "other": "x"}, "muy bien", ["a"], 2, {"main": "3"})
    assert rating_values(answers) == [4, 2, 3.0]


def test_zero_rating_counts_in_average_but_not_in_distribution():
    out = summarize_question(uuid4(), "q", "rating", _values(0, 4))
    assert out.avg_rating == 2
    assert out.distribution == [0, 0, 0, 1, 0]


def test_rating_without_numeric_values_has_no_average():
    out = summarize_question(uuid4(), "q", "rating", _values("n/a"))
    assert out.response_count == 1
    assert out.avg_rating is None
    assert out.distribution is None


def test_yes_no_counts_are_case_sensitive():
    answers = _values("yes", "yes", "no", "Yes", {"main": "yes"}, "maybe")
    assert yes_no_counts(answers) == (3, 1)


def test_department_breakdown_keeps_first_seen_order():
    out = department_breakdown(["Finanzas", "TI", "finanzas", "Finanzas", None])
    assert [(d.name, d.count) for d in out] == [("Finanzas", 2), ("TI", 1), ("finanzas", 1), (None, 1)]


def test_population_variance():
    assert population_variance([5, 3]) == 1
    assert population_variance([]) is None


# -------------------- sobre la BD -------------------- #

def _submit(store, survey, department, completion, **answers):
    info = dict(EMPLOYEE_INFO, department=department)
    ids = {"rating": survey.rating_id, "yes_no": survey.yes_no_id, "lead": survey.lead_rating_id,
           "text": survey.text_id, "multi": survey.multi_id}
    payload = {str(ids[k]): v for k, v in answers.items()}
    return submit_response(store, survey.id, info, payload, completion)


def test_survey_analytics(store, survey):
    _submit(store, survey, "Finanzas", 10, rating=5, yes_no="yes", lead=5)
    _submit(store, survey, "TI", 20, rating=3, yes_no="no", lead=3)
    _submit(store, survey, "Finanzas", None, rating=4, yes_no="yes", text="ok")

    out = get_survey_analytics(store, survey.id, now=NOW)

    assert out.total_responses == 3
    assert out.average_completion_time == 15
    assert out.generated_at == NOW
    assert [(d.name, d.count) for d in out.department_breakdown] == [("Finanzas", 2), ("TI", 1)]

    by_id = {q.question_id: q for q in out.question_analytics}
    # mismo orden que el formulario: sección y luego pregunta
    assert [q.question_id for q in out.question_analytics] == [
        survey.rating_id, survey.yes_no_id, survey.text_id, survey.multi_id, survey.lead_rating_id,
    ]
    assert by_id[survey.rating_id].avg_rating == 4
    assert by_id[survey.rating_id].distribution == [0, 0, 1, 1, 1]
    assert (by_id[survey.yes_no_id].yes_count, by_id[survey.yes_no_id].no_count) == (2, 1)
    assert by_id[survey.text_id].response_count == 1
    assert by_id[survey.multi_id].response_count == 0


def test_survey_analytics_without_responses(store, survey):
    out = get_survey_analytics(store, survey.id)
    assert out.total_responses == 0
    assert out.average_completion_time is None
    assert out.department_breakdown == []
    assert all(q.response_count == 0 for q in out.question_analytics)
    assert all(q.avg_rating is None for q in out.question_analytics)


def test_unknown_survey_analytics(store):
    with pytest.raises(NotFound):
        get_survey_analytics(store, uuid4())


def test_section_analytics(store, survey):
    _submit(store, survey, "Finanzas", 5, rating=5, yes_no="yes", lead=4, multi=["Seguro"])
    _submit(store, survey, "TI", 5, rating=3, text="bien")

    out = get_section_analytics(store, survey.id, now=NOW)
    general, leadership = out.sections

    assert general.section_title == "General"
    assert general.total_questions == 4
    assert general.total_responses == 5
    assert general.rating_average == 4
    assert general.rating_count == 2
    assert general.rating_variance == 1
    assert general.rating_std_deviation == 1
    assert general.other_question_counts == {"text": 1, "yes_no": 1, "radio": 0, "checkbox": 1, "select": 0}

    assert leadership.section_order == 1
    assert leadership.rating_average == 4
    assert leadership.rating_variance == 0


def test_audit_analytics(store, survey):
    with store.transaction():
        score = audit_service.create_audit_question(store, survey.id, {
            "question_text": "Nivel de cumplimiento", "question_type": "rating",
        })
        ok = audit_service.create_audit_question(store, survey.id, {
            "question_text": "¿Documentación completa?", "question_type": "yes_no", "section_id": survey.general_id,
        })
        audit_service.save_audit_responses(store, survey.id, {str(score.id): 3, str(ok.id): "yes"})

    out = get_audit_analytics(store, survey.id, now=NOW)
    by_id = {q.question_id: q for q in out.question_analytics}
    assert out.total_responses == 2
    assert by_id[score.id].avg_rating == 3
    assert by_id[ok.id].yes_count == 1


def test_camel_case_serialization(store, survey):
    out = get_survey_analytics(store, survey.id, now=NOW)
    data = out.model_dump(by_alias=True, exclude_none=True)
    assert {"surveyId", "totalResponses", "departmentBreakdown", "questionAnalytics", "generatedAt"} <= set(data)
    assert "responseCount" in data["questionAnalytics"][0]
