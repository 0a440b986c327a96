"""Breach notification send endpoint."""
from fastapi import APIRouter, Depends, Security
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.api.deps import get_notification_service, to_http_exception
from backend.app.core.database import get_db
from backend.app.core.exceptions import BreachWorkflowError
from backend.app.core.security import BREACH_NOTIFY, User, get_current_user
from backend.app.schemas.notifications import NotificationResponse
from backend.app.services.notification_service import BreachNotificationService

router = APIRouter()


@router.post("/{notification_id}/send", response_model=NotificationResponse)
async def send_notification(
    notification_id: int,
    db: AsyncSession = Depends(get_db),
    service: BreachNotificationService = Depends(get_notification_service),
    current_user: User = Security(get_current_user, scopes=[BREACH_NOTIFY]),
):
    """
    Render and send a notification.
    A delivery failure is not an HTTP error: the response carries status `failed`
    and the error message.
    """
    try:
        return await service.send_notification(db, notification_id)
    except BreachWorkflowError as e:
        raise to_http_exception(e)
