"""Services package."""

from backend.app.services.incident_service import BreachIncidentService
from backend.app.services.notification_service import BreachNotificationService
from backend.app.services.remediation_service import RemediationService

__all__ = [
    "BreachIncidentService",
    "BreachNotificationService",
    "RemediationService",
]
