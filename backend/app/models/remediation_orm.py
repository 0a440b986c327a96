"""
ORM Model for remediation actions.

Rows are edited in place: an update overwrites the action text,
effectiveness and notes and moves `taken_at` to the update time.
"""
from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey

from backend.app.core.database import Base


class BreachRemediationORM(Base):
    __tablename__ = "breach_remediations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    incident_id = Column(Integer, ForeignKey("breach_incidents.id"), nullable=False, index=True)

    action_taken = Column(Text, nullable=False)
    taken_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    taken_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    effectiveness = Column(String(50), nullable=True)
    notes = Column(Text, nullable=True)

    def __repr__(self):
        return f"<BreachRemediation #{self.id} for incident {self.incident_id}>"
