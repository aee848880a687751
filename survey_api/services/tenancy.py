# survey_api/services/tenancy.py
"""
Alcance por empresa. Cada consulta de administración pasa por un
CompanyScope: el super_admin ve todas las empresas (o una, si la elige con la
cabecera X-Company-Id); el resto solo ve la suya.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional
from uuid import UUID


@dataclass(frozen=True)
class CompanyScope:
    company_id: Optional[UUID] = None
    unrestricted: bool = False

    @classmethod
    def for_user(cls, user: Any, selected_company: Optional[UUID] = None) -> "CompanyScope":
        if user.role == "super_admin":
            if selected_company is not None:
                return cls(company_id=selected_company)
            return cls(company_id=user.company_id, unrestricted=True)
        return cls(company_id=user.company_id)

    def allows(self, company_id: Optional[UUID]) -> bool:
        return self.unrestricted or company_id == self.company_id

    def apply(self, stmt, column):
        """Filtra un select() por la columna company_id indicada."""
        if self.unrestricted:
            return stmt
        if self.company_id is None:
            return stmt.where(column.is_(None))
        return stmt.where(column == self.company_id)

    def owner_for(self, requested: Optional[UUID]) -> Optional[UUID]:
        """Empresa dueña de un registro nuevo: la pedida solo si el alcance es global."""
        if self.unrestricted:
            return requested if requested is not None else self.company_id
        return self.company_id


# sin restricción: scripts y llamadas internas del servicio
GLOBAL_SCOPE = CompanyScope(unrestricted=True)
