# survey_api/services/users.py
"""Usuarios, login y departamentos."""
from __future__ import annotations

import logging
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import select

from survey_api.core.errors import NotFound, ValidationError
from survey_api.core.security import hash_password, verify_password
from survey_api.db.types import utcnow
from survey_api.models.user import ROLES, Department, User
from survey_api.services.store import SurveyStore

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def authenticate(store: SurveyStore, email: str, password: str) -> User | None:
    """Devuelve el usuario activo si las credenciales son válidas."""
    user = store.get_user_by_email(normalize_email(email))
    if not user or not user.is_active:
        logger.info("Login rejected: unknown or inactive user")
        return None
    if not verify_password(password, user.password_hash):
        logger.info("Login rejected: bad password for user=%s", user.id)
        return None
    user.last_login = utcnow()
    return user


def _check_company(store: SurveyStore, company_id: Optional[UUID], *, adding_user: bool = False) -> None:
    if company_id is None:
        return
    company = store.get_company(company_id)
    if not company or not company.is_active:
        raise ValidationError("Empresa no encontrada o inactiva")
    if adding_user:
        active = store.count(User, User.company_id == company_id, User.is_active.is_(True))
        if active >= company.max_users:
            raise ValidationError(f"La empresa alcanzó su límite de usuarios ({company.max_users})")


def _check_department(store: SurveyStore, department_id: Optional[UUID], company_id: Optional[UUID]) -> None:
    if department_id is None:
        return
    dept = store.get_department(department_id)
    if not dept or dept.company_id != company_id:
        raise ValidationError("Departamento no encontrado")


def _is_last_super_admin(store: SurveyStore, user: User) -> bool:
    if user.role != "super_admin" or not user.is_active:
        return False
    others = store.count(
        User, User.role == "super_admin", User.is_active.is_(True), User.id != user.id
    )
    return others == 0


def create_user(store: SurveyStore, data: dict[str, Any]) -> User:
    data = dict(data)
    email = normalize_email(data.pop("email", ""))
    password = data.pop("password", None)
    if not email or not password:
        raise ValidationError("Email y contraseña son obligatorios")
    role = data.get("role") or "employee"
    if role not in ROLES:
        raise ValidationError(f"Rol inválido: {role}")
    if store.get_user_by_email(email):
        raise ValidationError("Ya existe un usuario con ese email")
    company_id = data.get("company_id")
    _check_company(store, company_id, adding_user=True)
    _check_department(store, data.get("department_id"), company_id)

    user = User(email=email, password_hash=hash_password(password), **data)
    store.add(user)
    store.flush()
    return user


def get_user(store: SurveyStore, user_id: UUID) -> User:
    user = store.get_user(user_id)
    if not user:
        raise NotFound("Usuario no encontrado")
    return user


def update_user(store: SurveyStore, user_id: UUID, changes: dict[str, Any], *, acting_user: User) -> User:
    """
    Actualización parcial. Un usuario no puede cambiar su propio rol y el
    último super_admin activo no puede perder el rol ni desactivarse.
    """
    user = get_user(store, user_id)
    changes = {k: v for k, v in changes.items() if v is not None or k == "department_id"}

    if "email" in changes:
        email = normalize_email(changes["email"])
        if not email:
            raise ValidationError("El email no puede quedar vacío")
        clash = store.get_user_by_email(email)
        if clash and clash.id != user.id:
            raise ValidationError("Ya existe un usuario con ese email")
        user.email = email

    role = changes.get("role")
    if role is not None and role != user.role:
        if role not in ROLES:
            raise ValidationError(f"Rol inválido: {role}")
        if user.id == acting_user.id:
            raise ValidationError("No puedes cambiar tu propio rol")
        if _is_last_super_admin(store, user):
            raise ValidationError("No se puede quitar el rol al último super_admin")
        user.role = role

    if changes.get("is_active") is False and user.is_active:
        if user.id == acting_user.id:
            raise ValidationError("No puedes desactivar tu propia cuenta")
        if _is_last_super_admin(store, user):
            raise ValidationError("No se puede desactivar al último super_admin")
        user.is_active = False
    elif changes.get("is_active") is True and not user.is_active:
        _check_company(store, user.company_id, adding_user=True)
        user.is_active = True

    if "company_id" in changes and changes["company_id"] != user.company_id:
        _check_company(store, changes["company_id"], adding_user=user.is_active)
        user.company_id = changes["company_id"]
        # el departamento pertenecía a la empresa anterior
        user.department_id = None

    if "department_id" in changes:
        _check_department(store, changes["department_id"], user.company_id)
        user.department_id = changes["department_id"]

    if "name" in changes:
        user.name = changes["name"]

    if "password" in changes:
        if len(changes["password"]) < 8:
            raise ValidationError("La contraseña debe tener al menos 8 caracteres")
        user.password_hash = hash_password(changes["password"])

    store.flush()
    return user


def deactivate_user(store: SurveyStore, user_id: UUID, *, acting_user: User) -> User:
    """Baja lógica: el usuario queda inactivo y sin acceso."""
    user = get_user(store, user_id)
    if user.id == acting_user.id:
        raise ValidationError("No puedes eliminar tu propia cuenta")
    if _is_last_super_admin(store, user):
        raise ValidationError("No se puede eliminar al último super_admin")
    user.is_active = False
    store.flush()
    return user


# -------------------- departamentos -------------------- #

def _department_clash(store: SurveyStore, company_id: Optional[UUID], name: str) -> Optional[Department]:
    stmt = select(Department).where(Department.name == name)
    if company_id is None:
        stmt = stmt.where(Department.company_id.is_(None))
    else:
        stmt = stmt.where(Department.company_id == company_id)
    return store.db.scalars(stmt).first()


def create_department(store: SurveyStore, data: dict[str, Any]) -> Department:
    name = (data.get("name") or "").strip()
    if not name:
        raise ValidationError("El campo 'name' es obligatorio")
    company_id = data.get("company_id")
    _check_company(store, company_id)
    if _department_clash(store, company_id, name):
        raise ValidationError("Ya existe un departamento con ese nombre")
    dept = Department(name=name, description=data.get("description"), company_id=company_id)
    store.add(dept)
    store.flush()
    return dept


def update_department(store: SurveyStore, department_id: UUID, changes: dict[str, Any]) -> Department:
    dept = store.get_department(department_id)
    if not dept:
        raise NotFound("Departamento no encontrado")
    if changes.get("name") is not None:
        name = changes["name"].strip()
        if not name:
            raise ValidationError("El campo 'name' es obligatorio")
        clash = _department_clash(store, dept.company_id, name)
        if clash and clash.id != dept.id:
            raise ValidationError("Ya existe un departamento con ese nombre")
        dept.name = name
    if "description" in changes:
        dept.description = changes["description"]
    if changes.get("is_active") is not None:
        dept.is_active = changes["is_active"]
    store.flush()
    return dept


def delete_department(store: SurveyStore, department_id: UUID) -> None:
    dept = store.get_department(department_id)
    if not dept:
        raise NotFound("Departamento no encontrado")
    store.delete(dept)
    store.flush()
