# survey_api/api/v1/endpoints/catalogs.py
from typing import List

from fastapi import APIRouter, Depends

from survey_api.api.deps.tenant import public_scope
from survey_api.schemas.admin import DepartmentOut
from survey_api.services.store import SurveyStore, get_store
from survey_api.services.tenancy import CompanyScope

router = APIRouter(tags=["catalogs"])


@router.get("/departments", response_model=List[DepartmentOut])
def list_departments(store: SurveyStore = Depends(get_store), scope: CompanyScope = Depends(public_scope)):
    """Departamentos activos, por nombre (para el formulario del empleado)."""
    return store.list_departments(active_only=True, scope=scope)
