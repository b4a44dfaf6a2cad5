import uuid

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.sql import func
from pacebeats_admin.db import Base


class SessionAlert(Base):
    __tablename__ = "session_alerts"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    session_id = Column(String(36), ForeignKey("running_sessions.id"), nullable=False, index=True)

    alert_type = Column(String, nullable=False)  # HIGH_HR_WARNING, CRITICAL_HR_ALERT
    alert_message = Column(String, nullable=True)
    severity = Column(String(20), nullable=False)  # HIGH, CRITICAL
    heart_rate = Column(Integer, nullable=True)

    triggered_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    # Resolved upstream; this backend only reads the flag
    resolved = Column(Boolean, nullable=False, default=False, server_default="false")
    resolved_at = Column(DateTime(timezone=True), nullable=True)
