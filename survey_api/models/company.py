# survey_api/models/company.py
import uuid

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Uuid
from sqlalchemy.orm import relationship

from survey_api.db.base_class import Base
from survey_api.db.types import utcnow

SUBSCRIPTION_PLANS = ("basic", "professional", "premium", "enterprise")


class Company(Base):
    """Organización cliente; usuarios, encuestas y departamentos cuelgan de ella."""
    __tablename__ = "companies"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(200), unique=True, nullable=False)
    domain = Column(String(255), unique=True, nullable=True)  # en minúsculas
    subscription_plan = Column(String(20), nullable=False, default="basic")
    max_users = Column(Integer, nullable=False, default=50)
    max_surveys = Column(Integer, nullable=False, default=10)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    users = relationship("User", back_populates="company")
    surveys = relationship("Survey", back_populates="company")
    departments = relationship("Department", back_populates="company")
