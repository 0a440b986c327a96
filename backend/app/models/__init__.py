"""Models package."""

from backend.app.models.user_orm import UserORM
from backend.app.models.incident_orm import BreachIncidentORM
from backend.app.models.notification_orm import BreachNotificationORM
from backend.app.models.remediation_orm import BreachRemediationORM
from backend.app.models.security_contact_orm import SecurityTeamMemberORM, DPOContactORM

__all__ = [
    "UserORM",
    "BreachIncidentORM",
    "BreachNotificationORM",
    "BreachRemediationORM",
    "SecurityTeamMemberORM",
    "DPOContactORM",
]
