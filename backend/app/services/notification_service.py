"""
Breach Notification Dispatcher.

Creates regulator and patient notifications for an incident and performs
the send as a separate, explicit step. Every send attempt resolves the
notification to `sent` or `failed`; transport errors are recorded on the
row and never re-raised to the caller.
"""
import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.exceptions import FieldValidationError, NotFoundError, UnknownNotificationTypeError
from backend.app.models.incident_orm import BreachIncidentORM
from backend.app.models.notification_orm import BreachNotificationORM
from backend.app.models.user_orm import UserORM
from backend.app.schemas.notifications import (
    DPOContactInfo, NotificationCreate, NotificationResponse, NotificationStatus,
    NotificationType, Recipient, RecipientType, RenderedEmail,
)
from backend.app.services import breach_templates
from backend.app.services.mail_transport import MailTransport
from backend.app.services.security_contacts import get_dpo_contact

logger = logging.getLogger(__name__)

_DEFAULT_RECIPIENT_TYPES = {
    NotificationType.GDPR_SUPERVISORY.value: RecipientType.SUPERVISORY_AUTHORITY.value,
    NotificationType.HIPAA_HHS.value: RecipientType.HHS.value,
}

_SUPPORTED_TYPES = {t.value for t in NotificationType}


def default_recipient_type(notification_type: Optional[str]) -> str:
    """Recipient type implied by a notification type when the caller gives none."""
    return _DEFAULT_RECIPIENT_TYPES.get(notification_type, RecipientType.INDIVIDUAL.value)


def _to_response(notification: BreachNotificationORM, sender: Optional[UserORM] = None) -> NotificationResponse:
    response = NotificationResponse.model_validate(notification)
    if sender is not None:
        response.sent_by_email = sender.email
        response.sent_by_name = sender.full_name
    return response


class BreachNotificationService:
    """
    Notification Dispatcher.

    `transport` is the outbound mail collaborator. The dispatcher sends one
    message per call and keeps no retry queue; a failed notification is
    re-sent by calling send_notification again.
    """

    def __init__(self, transport: MailTransport):
        self.transport = transport

    async def create_notification(
        self,
        session: AsyncSession,
        incident_id: Optional[int],
        payload: NotificationCreate,
        sent_by: Optional[int] = None,
    ) -> NotificationResponse:
        missing = [
            name for name, value in (
                ("incident_id", incident_id),
                ("notification_type", payload.notification_type),
                ("recipient_email", payload.recipient_email),
            )
            if value is None or (isinstance(value, str) and not value.strip())
        ]
        if missing:
            raise FieldValidationError(f"Missing required fields: {', '.join(missing)}")

        incident = await session.get(BreachIncidentORM, incident_id)
        if incident is None:
            raise NotFoundError(f"Breach incident {incident_id} not found")

        notification = BreachNotificationORM(
            incident_id=incident_id,
            notification_type=payload.notification_type,
            recipient_type=payload.recipient_type or default_recipient_type(payload.notification_type),
            recipient_email=payload.recipient_email.strip(),
            recipient_name=payload.recipient_name,
            sent_by=sent_by,
            status=NotificationStatus.PENDING.value,
            created_at=datetime.now(timezone.utc),
        )
        session.add(notification)
        await session.flush()
        await session.refresh(notification)
        logger.info(
            f"Breach notification #{notification.id} ({notification.notification_type}) "
            f"created for incident #{incident_id}"
        )

        return _to_response(notification, await self._load_user(session, sent_by))

    async def send_notification(self, session: AsyncSession, notification_id: int) -> NotificationResponse:
        """
        Render and send one notification.

        Raises NotFoundError for an unknown id and UnknownNotificationTypeError
        for an unsupported type; neither writes to the row. Delivery failures
        are captured as status `failed` and returned normally.
        """
        result = await session.execute(
            select(BreachNotificationORM, BreachIncidentORM)
            .join(BreachIncidentORM, BreachIncidentORM.id == BreachNotificationORM.incident_id)
            .where(BreachNotificationORM.id == notification_id)
        )
        row = result.first()
        if row is None:
            raise NotFoundError(f"Breach notification {notification_id} not found")
        notification, incident = row

        if notification.notification_type not in _SUPPORTED_TYPES:
            raise UnknownNotificationTypeError(notification.notification_type)

        email = await self._render(session, notification, incident)
        template_used = notification.notification_type

        try:
            outcome = await self.transport.send(
                notification.recipient_email, email.subject, email.html, is_html=True
            )
        except Exception as e:
            logger.error(f"Breach notification #{notification.id} send failed: {e}", exc_info=True)
            error_message = str(e) or "Email sending failed"
        else:
            if outcome.success:
                error_message = None
            else:
                error_message = outcome.message or "Email sending failed"
                logger.warning(f"Breach notification #{notification.id} not delivered: {error_message}")

        notification.template_used = template_used
        if error_message is None:
            notification.status = NotificationStatus.SENT.value
            notification.sent_at = datetime.now(timezone.utc)
            notification.error_message = None
            logger.info(f"Breach notification #{notification.id} sent to {notification.recipient_email}")
        else:
            notification.status = NotificationStatus.FAILED.value
            notification.error_message = error_message

        await session.flush()
        await session.refresh(notification)
        return _to_response(notification, await self._load_user(session, notification.sent_by))

    async def get_notifications(self, session: AsyncSession, incident_id: int) -> List[NotificationResponse]:
        """All notifications of an incident, newest first. Unknown incidents yield an empty list."""
        result = await session.execute(
            select(BreachNotificationORM, UserORM)
            .outerjoin(UserORM, UserORM.id == BreachNotificationORM.sent_by)
            .where(BreachNotificationORM.incident_id == incident_id)
            .order_by(BreachNotificationORM.created_at.desc(), BreachNotificationORM.id.desc())
        )
        return [_to_response(notification, sender) for notification, sender in result.all()]

    async def _render(
        self,
        session: AsyncSession,
        notification: BreachNotificationORM,
        incident: BreachIncidentORM,
    ) -> RenderedEmail:
        recipient = Recipient(email=notification.recipient_email, name=notification.recipient_name)

        if notification.notification_type == NotificationType.GDPR_SUPERVISORY.value:
            dpo_info = await self._fetch_dpo_info(session)
            return breach_templates.render_gdpr_supervisory_template(incident, recipient, dpo_info)
        if notification.notification_type == NotificationType.HIPAA_HHS.value:
            return breach_templates.render_hipaa_hhs_template(incident, recipient)
        return breach_templates.render_individual_patient_template(incident, recipient)

    async def _fetch_dpo_info(self, session: AsyncSession) -> Optional[DPOContactInfo]:
        # A missing or unreadable DPO record falls back to the generic contact paragraph.
        # The savepoint keeps a failed lookup from aborting the send transaction.
        try:
            async with session.begin_nested():
                dpo = await get_dpo_contact(session)
        except SQLAlchemyError as e:
            logger.warning(f"Could not fetch DPO contact info: {e}")
            return None
        if dpo is None:
            return None
        return DPOContactInfo.model_validate(dpo)

    @staticmethod
    async def _load_user(session: AsyncSession, user_id: Optional[int]) -> Optional[UserORM]:
        if user_id is None:
            return None
        return await session.get(UserORM, user_id)
