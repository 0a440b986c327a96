"""
ORM Model for Breach Incidents.

Only `status` and `updated_at` change after creation; incidents are never deleted.
"""
from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, Text, DateTime, JSON, ForeignKey

from backend.app.core.database import Base


class BreachIncidentORM(Base):
    __tablename__ = "breach_incidents"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Core fields
    incident_type = Column(String(100), nullable=False)
    severity = Column(String(20), nullable=False, index=True)  # low | medium | high | critical
    description = Column(Text, nullable=False)
    status = Column(String(30), nullable=False, default="draft", index=True)  # IncidentStatus values

    # Ordered lists, stored as JSON for SQLite compatibility
    affected_users = Column(JSON, nullable=False, default=list)
    affected_data_types = Column(JSON, nullable=False, default=list)

    detected_at = Column(DateTime(timezone=True), nullable=False, index=True,
                         default=lambda: datetime.now(timezone.utc))
    reported_by = Column(Integer, ForeignKey("users.id"), nullable=True)

    # Automated detection source (no FK, anomaly store lives elsewhere)
    anomaly_id = Column(Integer, nullable=True)

    # Standard timestamps
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    def __repr__(self):
        return f"<BreachIncident #{self.id} {self.incident_type} ({self.severity}, {self.status})>"
