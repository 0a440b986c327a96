"""
Shared router dependencies: service providers and domain error translation.
"""
from fastapi import Depends, HTTPException, status

from backend.app.core.config import get_settings
from backend.app.core.exceptions import (
    BreachWorkflowError, ConflictError, FieldValidationError, NotFoundError, UnknownNotificationTypeError,
)
from backend.app.services.incident_service import BreachIncidentService
from backend.app.services.mail_transport import MailTransport, get_mail_transport
from backend.app.services.notification_service import BreachNotificationService
from backend.app.services.remediation_service import RemediationService


def get_incident_service(transport: MailTransport = Depends(get_mail_transport)) -> BreachIncidentService:
    settings = get_settings()
    return BreachIncidentService(
        alert_email_enabled=settings.alert_email_enabled,
        transport=transport,
        dashboard_url=settings.frontend_url,
    )


def get_notification_service(transport: MailTransport = Depends(get_mail_transport)) -> BreachNotificationService:
    return BreachNotificationService(transport)


def get_remediation_service() -> RemediationService:
    return RemediationService()


_STATUS_CODES = [
    (FieldValidationError, status.HTTP_400_BAD_REQUEST),
    (UnknownNotificationTypeError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
]


def to_http_exception(error: BreachWorkflowError) -> HTTPException:
    """Map a domain error onto the HTTP status the API reports for it."""
    for error_type, status_code in _STATUS_CODES:
        if isinstance(error, error_type):
            return HTTPException(status_code=status_code, detail=str(error))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(error))
