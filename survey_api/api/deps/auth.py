# survey_api/api/deps/auth.py
from fastapi import Depends, HTTPException

from survey_api.core.security import get_current_user
from survey_api.models.user import ROLES, User

# employee < admin < super_admin
ROLE_RANK = {name: rank for rank, name in enumerate(ROLES)}


def has_role(user: User, role: str) -> bool:
    return ROLE_RANK.get(user.role, -1) >= ROLE_RANK[role]


def require_role(role: str):
    """
    Dependency que exige al menos `role`. Se aplica a nivel de router para
    que todas las rutas de un mismo grupo compartan la misma regla.
    """
    if role not in ROLE_RANK:
        raise ValueError(f"Rol desconocido: {role}")

    def _dep(user: User = Depends(get_current_user)) -> User:
        if not has_role(user, role):
            raise HTTPException(status_code=403, detail="Permisos insuficientes")
        return user

    return _dep


require_employee = require_role("employee")
require_admin = require_role("admin")
require_super_admin = require_role("super_admin")
