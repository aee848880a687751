import os

# Antes de importar survey_api: BD SQLite en memoria compartida por el engine
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["ENFORCE_REQUIRED_QUESTIONS"] = "false"

from datetime import timedelta
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from survey_api.core.security import create_access_token, hash_password
from survey_api.db.base import Base
from survey_api.db.session import SessionLocal, engine
from survey_api.db.types import utcnow
from survey_api.main import app
from survey_api.models.company import Company
from survey_api.models.user import User
from survey_api.services import surveys as survey_service
from survey_api.services.store import SurveyStore

PASSWORD = "s3cret-pass"


@pytest.fixture
def db():
    Base.metadata.create_all(engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(engine)


@pytest.fixture
def store(db):
    return SurveyStore(db)


@pytest.fixture
def client(db):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_user(store):
    def _make(email: str, role: str = "employee", **extra) -> User:
        with store.transaction():
            user = User(email=email, password_hash=hash_password(PASSWORD), role=role, **extra)
            store.add(user)
        return user
    return _make


@pytest.fixture
def make_company(store):
    def _make(name: str, **extra) -> Company:
        with store.transaction():
            company = Company(name=name, **extra)
            store.add(company)
        return company
    return _make


def auth_headers(user: User, **token_kwargs) -> dict:
    token = create_access_token({"sub": str(user.id), "email": user.email, "role": user.role}, **token_kwargs)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def employee(make_user):
    return make_user("ana.perez@acme.com")


@pytest.fixture
def admin(make_user):
    return make_user("hr.admin@acme.com", role="admin")


@pytest.fixture
def super_admin(make_user):
    return make_user("root@acme.com", role="super_admin")


@pytest.fixture
def employee_headers(employee):
    return auth_headers(employee)


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture
def super_admin_headers(super_admin):
    return auth_headers(super_admin)


def build_survey(store: SurveyStore, **overrides) -> SimpleNamespace:
    """
    Encuesta publicada con dos secciones:
      General: rating, yes_no, text (obligatoria), checkbox con opciones
      Liderazgo: rating
    """
    fields = {
        "title": "Clima laboral 2024",
        "is_active": True,
        "is_published": True,
        "start_date": utcnow() - timedelta(days=1),
        "end_date": utcnow() + timedelta(days=30),
    }
    fields.update(overrides)
    with store.transaction():
        survey = survey_service.create_survey(store, fields)
        general = survey_service.create_section(store, survey.id, {"title": "General", "order_index": 0})
        leadership = survey_service.create_section(store, survey.id, {"title": "Liderazgo", "order_index": 1})
        rating = survey_service.create_question(store, general.id, {
            "question_text": "¿Qué tan satisfecho estás?", "question_type": "rating", "order_index": 0,
        })
        yes_no = survey_service.create_question(store, general.id, {
            "question_text": "¿Recomendarías la empresa?", "question_type": "yes_no", "order_index": 1,
        })
        text = survey_service.create_question(store, general.id, {
            "question_text": "Comentarios", "question_type": "text", "is_required": True, "order_index": 2,
        })
        multi = survey_service.create_question(store, general.id, {
            "question_text": "Beneficios que usas",
            "question_type": "checkbox",
            "has_other_option": True,
            "order_index": 3,
            "options": [{"option_text": "Gimnasio"}, {"option_text": "Seguro"}, {"option_text": "Comedor"}],
        })
        lead_rating = survey_service.create_question(store, leadership.id, {
            "question_text": "Calificación de tu supervisor", "question_type": "rating", "order_index": 0,
        })
    return SimpleNamespace(
        id=survey.id,
        survey=survey,
        general_id=general.id,
        leadership_id=leadership.id,
        rating_id=rating.id,
        yes_no_id=yes_no.id,
        text_id=text.id,
        multi_id=multi.id,
        lead_rating_id=lead_rating.id,
    )


@pytest.fixture
def survey(store):
    return build_survey(store)


EMPLOYEE_INFO = {
    "name": "Ana Pérez",
    "designation": "Analista",
    "department": "Finanzas",
    "supervisor": "Luis Gómez",
    "reportsTo": "Dirección Financiera",
}
