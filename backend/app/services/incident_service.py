"""
Breach Incident Lifecycle.

Records incidents, moves them through their status lifecycle and fires the
internal alert broadcast once a new incident is committed.
"""
import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.exceptions import FieldValidationError, InvalidArgumentError, NotFoundError
from backend.app.models.incident_orm import BreachIncidentORM
from backend.app.models.user_orm import UserORM
from backend.app.schemas.incidents import (
    IncidentCreate, IncidentFilters, IncidentListResponse, IncidentResponse, IncidentStatus,
)
from backend.app.services.breach_templates import render_breach_alert
from backend.app.services.mail_transport import MailTransport, get_mail_transport
from backend.app.services.recipient_resolver import resolve_breach_recipients

logger = logging.getLogger(__name__)

_REQUIRED_FIELDS = ("incident_type", "severity", "description")
_VALID_STATUSES = [s.value for s in IncidentStatus]


def _to_response(incident: BreachIncidentORM, reporter: Optional[UserORM] = None) -> IncidentResponse:
    response = IncidentResponse.model_validate(incident)
    if reporter is not None:
        response.reported_by_email = reporter.email
        response.reported_by_name = reporter.full_name
    return response


def _with_reporter():
    return select(BreachIncidentORM, UserORM).outerjoin(UserORM, UserORM.id == BreachIncidentORM.reported_by)


class BreachIncidentService:
    """
    Incident Lifecycle Manager.

    alert_email_enabled: whether create_incident broadcasts the internal alert.
    transport: mail collaborator for the broadcast (SMTP from settings if omitted).
    dashboard_url: frontend base URL linked from the alert.
    """

    def __init__(
        self,
        alert_email_enabled: bool = False,
        transport: Optional[MailTransport] = None,
        dashboard_url: str = "http://localhost:5173",
    ):
        self.alert_email_enabled = alert_email_enabled
        self.transport = transport
        self.dashboard_url = dashboard_url

    async def create_incident(
        self,
        session: AsyncSession,
        payload: IncidentCreate,
        reported_by: Optional[int] = None,
    ) -> IncidentResponse:
        """
        Persist a new incident in `draft` and commit it, then broadcast the alert.

        The broadcast runs after the commit and cannot affect the stored
        incident; its failures are logged only.
        """
        missing = [
            name for name in _REQUIRED_FIELDS
            if not (getattr(payload, name) or "").strip()
        ]
        if missing:
            raise FieldValidationError(f"Missing required fields: {', '.join(missing)}")

        now = datetime.now(timezone.utc)
        incident = BreachIncidentORM(
            incident_type=payload.incident_type,
            severity=payload.severity,
            description=payload.description,
            affected_users=list(payload.affected_users or []),
            affected_data_types=list(payload.affected_data_types or []),
            detected_at=payload.detected_at or now,
            reported_by=reported_by,
            status=IncidentStatus.DRAFT.value,
            anomaly_id=payload.anomaly_id,
            created_at=now,
            updated_at=now,
        )
        session.add(incident)
        await session.commit()
        await session.refresh(incident)
        logger.info(f"Breach incident created: #{incident.id} ({incident.incident_type}, severity={incident.severity})")

        await self.broadcast_alert(session, incident)

        reporter = await session.get(UserORM, reported_by) if reported_by is not None else None
        return _to_response(incident, reporter)

    async def broadcast_alert(self, session: AsyncSession, incident: BreachIncidentORM) -> int:
        """
        Best-effort alert to every resolved recipient, one message each.

        Returns the number of successful sends. Never raises.
        """
        if not self.alert_email_enabled:
            logger.info(f"Breach alert e-mails disabled; no alert sent for incident #{incident.id}")
            return 0

        try:
            recipients = await resolve_breach_recipients(session)
            if not recipients:
                logger.warning(f"No breach alert recipients configured; no alert sent for incident #{incident.id}")
                return 0

            transport = self.transport or get_mail_transport()
            email = render_breach_alert(incident, self.dashboard_url)

            sent = 0
            for address in recipients:
                try:
                    outcome = await transport.send(address, email.subject, email.html, is_html=True)
                except Exception as e:
                    logger.warning(f"Breach alert to {address} failed: {e}")
                    continue
                if outcome.success:
                    sent += 1
                else:
                    logger.warning(f"Breach alert to {address} not delivered: {outcome.message}")

            logger.info(f"Breach alert for incident #{incident.id} sent to {sent}/{len(recipients)} recipients")
            return sent
        except Exception as e:
            logger.error(f"Breach alert broadcast failed for incident #{incident.id}: {e}", exc_info=True)
            return 0

    async def list_incidents(self, session: AsyncSession, filters: IncidentFilters) -> IncidentListResponse:
        """Filtered page of incidents, newest detection first, with the unpaginated total."""
        conditions = []
        if filters.status:
            conditions.append(BreachIncidentORM.status == filters.status)
        if filters.severity:
            conditions.append(BreachIncidentORM.severity == filters.severity)
        if filters.start_date:
            conditions.append(BreachIncidentORM.detected_at >= filters.start_date)
        if filters.end_date:
            conditions.append(BreachIncidentORM.detected_at <= filters.end_date)

        total_result = await session.execute(
            select(func.count()).select_from(BreachIncidentORM).where(*conditions)
        )
        total = total_result.scalar_one()

        result = await session.execute(
            _with_reporter()
            .where(*conditions)
            .order_by(BreachIncidentORM.detected_at.desc(), BreachIncidentORM.id.desc())
            .limit(filters.limit)
            .offset(filters.offset)
        )
        incidents = [_to_response(incident, reporter) for incident, reporter in result.all()]

        return IncidentListResponse(
            incidents=incidents,
            total=total,
            limit=filters.limit,
            offset=filters.offset,
        )

    async def get_incident(self, session: AsyncSession, incident_id: int) -> IncidentResponse:
        result = await session.execute(_with_reporter().where(BreachIncidentORM.id == incident_id))
        row = result.first()
        if row is None:
            raise NotFoundError(f"Breach incident {incident_id} not found")
        incident, reporter = row
        return _to_response(incident, reporter)

    async def update_incident_status(
        self,
        session: AsyncSession,
        incident_id: int,
        status: Optional[str],
    ) -> IncidentResponse:
        """Set a new status. Any lifecycle status may follow any other."""
        if status not in _VALID_STATUSES:
            raise InvalidArgumentError(f"Invalid status. Must be one of: {', '.join(_VALID_STATUSES)}")

        incident = await session.get(BreachIncidentORM, incident_id)
        if incident is None:
            raise NotFoundError(f"Breach incident {incident_id} not found")

        previous = incident.status
        incident.status = status
        incident.updated_at = datetime.now(timezone.utc)
        await session.flush()
        logger.info(f"Breach incident #{incident_id} status: {previous} -> {status}")

        return await self.get_incident(session, incident_id)
