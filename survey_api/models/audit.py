# survey_api/models/audit.py
import uuid

from sqlalchemy import Column, DateTime, String, Text, Uuid

from survey_api.db.base_class import Base
from survey_api.db.types import JSONType, utcnow


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id         = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id    = Column(Uuid(as_uuid=True), index=True, nullable=True)  # actor
    action     = Column(String(100), nullable=False)
    payload    = Column(JSONType, nullable=True)
    ip         = Column(String(64), nullable=True)
    user_agent = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
