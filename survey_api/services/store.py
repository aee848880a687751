# survey_api/services/store.py
"""
Acceso a datos de encuestas y respuestas.

SurveyStore envuelve una Session de SQLAlchemy creada por request (get_db).
Los servicios reciben el store explícitamente; en tests se construye sobre
un engine SQLite en memoria.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Iterable, Iterator, Optional
from uuid import UUID

from fastapi import Depends
from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from survey_api.core.errors import PersistenceError
from survey_api.db.session import get_db
from survey_api.models.assignment import SurveyAssignment
from survey_api.models.audit_question import AuditQuestion, AuditResponse
from survey_api.models.comment import SurveyComment
from survey_api.models.company import Company
from survey_api.models.response import QuestionResponse, SurveyResponse
from survey_api.models.survey import Question, QuestionOption, Survey, SurveySection
from survey_api.models.user import Department, User
from survey_api.services.tenancy import CompanyScope

logger = logging.getLogger(__name__)


class SurveyStore:
    def __init__(self, db: Session):
        self.db = db

    # -------------------- transacciones -------------------- #

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        """Commit al salir; rollback y PersistenceError si la BD falla."""
        try:
            yield self.db
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.exception("Database write failed")
            raise PersistenceError("No se pudo guardar en la base de datos") from exc
        except Exception:
            self.db.rollback()
            raise

    def add(self, obj) -> None:
        self.db.add(obj)

    def add_all(self, objs) -> None:
        self.db.add_all(objs)

    def delete(self, obj) -> None:
        self.db.delete(obj)

    def flush(self) -> None:
        self.db.flush()

    def refresh(self, obj) -> None:
        self.db.refresh(obj)

    # -------------------- encuestas -------------------- #

    def get_survey(self, survey_id: UUID, *, with_tree: bool = False) -> Optional[Survey]:
        stmt = select(Survey).where(Survey.id == survey_id)
        if with_tree:
            stmt = stmt.options(
                selectinload(Survey.sections)
                .selectinload(SurveySection.questions)
                .selectinload(Question.options)
            )
        return self.db.scalars(stmt).first()

    def list_surveys(self, *, active_only: bool = False, scope: Optional[CompanyScope] = None) -> list[Survey]:
        stmt = select(Survey).order_by(Survey.created_at.desc())
        if scope is not None:
            stmt = scope.apply(stmt, Survey.company_id)
        if active_only:
            stmt = stmt.where(Survey.is_active.is_(True), Survey.is_published.is_(True))
        return list(self.db.scalars(stmt))

    def get_section(self, section_id: UUID) -> Optional[SurveySection]:
        return self.db.get(SurveySection, section_id)

    def get_question(self, question_id: UUID) -> Optional[Question]:
        return self.db.get(Question, question_id)

    def get_option(self, option_id: UUID) -> Optional[QuestionOption]:
        return self.db.get(QuestionOption, option_id)

    def sections_for_survey(self, survey_id: UUID) -> list[SurveySection]:
        stmt = (
            select(SurveySection)
            .where(SurveySection.survey_id == survey_id)
            .order_by(SurveySection.order_index)
        )
        return list(self.db.scalars(stmt))

    def questions_for_survey(self, survey_id: UUID) -> list[Question]:
        """Preguntas ordenadas por sección y luego por pregunta."""
        stmt = (
            select(Question)
            .join(SurveySection, SurveySection.id == Question.section_id)
            .where(SurveySection.survey_id == survey_id)
            .order_by(SurveySection.order_index, Question.order_index)
        )
        return list(self.db.scalars(stmt))

    # -------------------- respuestas -------------------- #

    def get_response(self, response_id: UUID) -> Optional[SurveyResponse]:
        return self.db.get(SurveyResponse, response_id)

    def responses_for_survey(self, survey_id: UUID) -> list[SurveyResponse]:
        stmt = (
            select(SurveyResponse)
            .where(SurveyResponse.survey_id == survey_id)
            .order_by(SurveyResponse.submitted_at, SurveyResponse.id)
        )
        return list(self.db.scalars(stmt))

    def answers_for_survey(self, survey_id: UUID) -> list[QuestionResponse]:
        stmt = (
            select(QuestionResponse)
            .join(SurveyResponse, SurveyResponse.id == QuestionResponse.survey_response_id)
            .where(SurveyResponse.survey_id == survey_id)
        )
        return list(self.db.scalars(stmt))

    def answers_for_response(self, response_id: UUID) -> list[QuestionResponse]:
        stmt = select(QuestionResponse).where(QuestionResponse.survey_response_id == response_id)
        return list(self.db.scalars(stmt))

    def delete_answers(self, response_id: UUID) -> int:
        rows = self.answers_for_response(response_id)
        for row in rows:
            self.db.delete(row)
        return len(rows)

    # -------------------- auditoría -------------------- #

    def get_audit_question(self, question_id: UUID) -> Optional[AuditQuestion]:
        return self.db.get(AuditQuestion, question_id)

    def audit_questions_for_survey(self, survey_id: UUID) -> list[AuditQuestion]:
        stmt = (
            select(AuditQuestion)
            .where(AuditQuestion.survey_id == survey_id)
            .options(selectinload(AuditQuestion.options), selectinload(AuditQuestion.section))
            .order_by(AuditQuestion.order_index, AuditQuestion.created_at)
        )
        return list(self.db.scalars(stmt))

    def audit_responses_for_survey(self, survey_id: UUID) -> list[AuditResponse]:
        stmt = select(AuditResponse).where(AuditResponse.survey_id == survey_id)
        return list(self.db.scalars(stmt))

    # -------------------- catálogos -------------------- #

    def get_department(self, department_id: UUID) -> Optional[Department]:
        return self.db.get(Department, department_id)

    def list_departments(
        self, *, active_only: bool = True, scope: Optional[CompanyScope] = None
    ) -> list[Department]:
        stmt = select(Department).order_by(Department.name)
        if scope is not None:
            stmt = scope.apply(stmt, Department.company_id)
        if active_only:
            stmt = stmt.where(Department.is_active.is_(True))
        return list(self.db.scalars(stmt))

    # -------------------- usuarios -------------------- #

    def get_user(self, user_id: UUID) -> Optional[User]:
        return self.db.get(User, user_id)

    def get_user_by_email(self, email: str) -> Optional[User]:
        return self.db.scalars(select(User).where(User.email == email)).first()

    def list_users(self, *, scope: Optional[CompanyScope] = None) -> list[User]:
        stmt = select(User).order_by(User.email)
        if scope is not None:
            stmt = scope.apply(stmt, User.company_id)
        return list(self.db.scalars(stmt))

    def users_by_ids(self, user_ids: Iterable[UUID]) -> list[User]:
        return list(self.db.scalars(select(User).where(User.id.in_(list(user_ids)))))

    # -------------------- empresas -------------------- #

    def get_company(self, company_id: UUID) -> Optional[Company]:
        return self.db.get(Company, company_id)

    def get_company_by(self, **filters) -> Optional[Company]:
        return self.db.scalars(select(Company).filter_by(**filters)).first()

    def list_companies(self, *, is_active: Optional[bool] = None) -> list[Company]:
        stmt = select(Company).order_by(Company.created_at.desc())
        if is_active is not None:
            stmt = stmt.where(Company.is_active.is_(is_active))
        return list(self.db.scalars(stmt))

    def count(self, model, *criteria) -> int:
        stmt = select(func.count()).select_from(model)
        if criteria:
            stmt = stmt.where(*criteria)
        return self.db.scalar(stmt) or 0

    def recent(self, model, since: datetime, limit: int = 5) -> list:
        stmt = (
            select(model)
            .where(model.created_at >= since)
            .order_by(model.created_at.desc())
            .limit(limit)
        )
        return list(self.db.scalars(stmt))

    # -------------------- asignaciones -------------------- #

    def get_assignment(self, assignment_id: UUID) -> Optional[SurveyAssignment]:
        return self.db.get(SurveyAssignment, assignment_id)

    def list_assignments(
        self,
        *,
        scope: Optional[CompanyScope] = None,
        survey_id: Optional[UUID] = None,
        user_id: Optional[UUID] = None,
        status: Optional[str] = None,
    ) -> list[SurveyAssignment]:
        stmt = (
            select(SurveyAssignment)
            .join(Survey, Survey.id == SurveyAssignment.survey_id)
            .options(selectinload(SurveyAssignment.survey), selectinload(SurveyAssignment.user))
            .order_by(SurveyAssignment.assigned_at.desc())
        )
        if scope is not None:
            stmt = scope.apply(stmt, Survey.company_id)
        if survey_id is not None:
            stmt = stmt.where(SurveyAssignment.survey_id == survey_id)
        if user_id is not None:
            stmt = stmt.where(SurveyAssignment.user_id == user_id)
        if status is not None:
            stmt = stmt.where(SurveyAssignment.status == status)
        return list(self.db.scalars(stmt))

    def assignments_in_status(
        self, survey_id: UUID, user_ids: Iterable[UUID], statuses: Iterable[str]
    ) -> list[SurveyAssignment]:
        stmt = select(SurveyAssignment).where(
            SurveyAssignment.survey_id == survey_id,
            SurveyAssignment.user_id.in_(list(user_ids)),
            SurveyAssignment.status.in_(list(statuses)),
        )
        return list(self.db.scalars(stmt))

    def count_assignment_responses(self, assignment_id: UUID) -> int:
        return self.count(SurveyResponse, SurveyResponse.assignment_id == assignment_id)

    # -------------------- comentarios -------------------- #

    def get_comment(self, comment_id: UUID) -> Optional[SurveyComment]:
        return self.db.get(SurveyComment, comment_id)

    def comments_for_survey(
        self, survey_id: UUID, *, assignment_id: Optional[UUID] = None, involving: Optional[UUID] = None
    ) -> list[SurveyComment]:
        stmt = (
            select(SurveyComment)
            .where(SurveyComment.survey_id == survey_id)
            .order_by(SurveyComment.created_at, SurveyComment.id)
        )
        if assignment_id is not None:
            stmt = stmt.where(SurveyComment.assignment_id == assignment_id)
        if involving is not None:
            stmt = stmt.where(or_(SurveyComment.user_id == involving, SurveyComment.recipient_id == involving))
        return list(self.db.scalars(stmt))

    def count_replies(self, comment_id: UUID) -> int:
        return self.count(SurveyComment, SurveyComment.parent_comment_id == comment_id)


def get_store(db: Session = Depends(get_db)) -> SurveyStore:
    """Dependency para FastAPI: un store por request, cerrado junto con la sesión."""
    return SurveyStore(db)
