# Registra todos los mapeos para que las relaciones por nombre se resuelvan
from survey_api.models import (  # noqa: F401
    company, survey, response, audit_question, user, audit, assignment, comment
)
