# survey_api/api/v1/endpoints/admin_users.py
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Request

from survey_api.api.deps.auth import require_super_admin
from survey_api.api.deps.tenant import current_scope
from survey_api.models.user import User
from survey_api.schemas.admin import UserCreateIn, UserOut, UserUpdateIn
from survey_api.services import users as user_service
from survey_api.services.audit import audit_log
from survey_api.services.store import SurveyStore, get_store
from survey_api.services.tenancy import CompanyScope

router = APIRouter(prefix="/users", tags=["admin-users"], dependencies=[Depends(require_super_admin)])


@router.get("", response_model=List[UserOut])
def list_users(store: SurveyStore = Depends(get_store), scope: CompanyScope = Depends(current_scope)):
    return store.list_users(scope=scope)


@router.get("/{user_id}", response_model=UserOut)
def get_user(user_id: UUID, store: SurveyStore = Depends(get_store)):
    return user_service.get_user(store, user_id)


@router.post("", response_model=UserOut, status_code=201)
def create_user(
    payload: UserCreateIn,
    request: Request,
    store: SurveyStore = Depends(get_store),
    admin: User = Depends(require_super_admin),
):
    with store.transaction():
        user = user_service.create_user(store, payload.model_dump())
        # nunca registrar la contraseña
        audit_log(store, user_id=admin.id, action="user.create",
                  payload={"user_id": user.id, "email": user.email, "role": user.role}, request=request)
    store.refresh(user)
    return user


@router.put("/{user_id}", response_model=UserOut)
def update_user(
    user_id: UUID,
    payload: UserUpdateIn,
    request: Request,
    store: SurveyStore = Depends(get_store),
    admin: User = Depends(require_super_admin),
):
    changes = payload.model_dump(exclude_unset=True)
    with store.transaction():
        user = user_service.update_user(store, user_id, changes, acting_user=admin)
        logged = {k: v for k, v in changes.items() if k != "password"}
        audit_log(store, user_id=admin.id, action="user.update",
                  payload={"user_id": user_id, "changes": logged}, request=request)
    store.refresh(user)
    return user


@router.delete("/{user_id}", response_model=UserOut)
def delete_user(
    user_id: UUID,
    request: Request,
    store: SurveyStore = Depends(get_store),
    admin: User = Depends(require_super_admin),
):
    """Baja lógica: el usuario queda inactivo."""
    with store.transaction():
        user = user_service.deactivate_user(store, user_id, acting_user=admin)
        audit_log(store, user_id=admin.id, action="user.delete",
                  payload={"user_id": user_id}, request=request)
    store.refresh(user)
    return user
