"""
ORM Model for breach notifications.

Each row is one addressed, templated message with its own delivery state.
"""
from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey

from backend.app.core.database import Base


class BreachNotificationORM(Base):
    __tablename__ = "breach_notifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    incident_id = Column(Integer, ForeignKey("breach_incidents.id"), nullable=False, index=True)

    notification_type = Column(String(50), nullable=False)  # NotificationType values
    recipient_type = Column(String(50), nullable=False)     # RecipientType values
    recipient_email = Column(String(255), nullable=False)
    recipient_name = Column(String(255), nullable=True)
    sent_by = Column(Integer, ForeignKey("users.id"), nullable=True)

    # Delivery state
    status = Column(String(20), nullable=False, default="pending", index=True)  # pending | sent | failed
    sent_at = Column(DateTime(timezone=True), nullable=True)
    template_used = Column(String(50), nullable=True)
    error_message = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    def __repr__(self):
        return f"<BreachNotification #{self.id} {self.notification_type} -> {self.recipient_email} ({self.status})>"
