# survey_api/models/user.py
import uuid

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from survey_api.db.base_class import Base
from survey_api.db.types import utcnow

# De menor a mayor privilegio. "admin" administra su propia empresa.
ROLES = ("employee", "admin", "super_admin")


class Department(Base):
    __tablename__ = "departments"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    company_id = Column(Uuid(as_uuid=True), ForeignKey("companies.id", ondelete="CASCADE"), nullable=True, index=True)
    name = Column(String(200), nullable=False)
    description = Column(Text)
    is_active = Column(Boolean, nullable=False, default=True)

    # el nombre se repite entre empresas, no dentro de una
    __table_args__ = (UniqueConstraint("company_id", "name", name="uq_department_company_name"),)

    company = relationship("Company", back_populates="departments")
    users = relationship("User", back_populates="department")


class User(Base):
    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    company_id = Column(Uuid(as_uuid=True), ForeignKey("companies.id", ondelete="SET NULL"), nullable=True, index=True)
    email = Column(String(320), unique=True, nullable=False)  # siempre en minúsculas
    name = Column(String(200))
    password_hash = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default="employee")
    department_id = Column(Uuid(as_uuid=True), ForeignKey("departments.id", ondelete="SET NULL"), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    last_login = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    company = relationship("Company", back_populates="users")
    department = relationship("Department", back_populates="users")
