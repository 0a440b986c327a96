"""
Remediation Tracker.

Records corrective actions against a breach incident. Entries are edited
in place: an update overwrites the action and moves `taken_at` to the
time of the update.
"""
import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.exceptions import FieldValidationError, NotFoundError
from backend.app.models.incident_orm import BreachIncidentORM
from backend.app.models.remediation_orm import BreachRemediationORM
from backend.app.models.user_orm import UserORM
from backend.app.schemas.remediations import RemediationCreate, RemediationResponse, RemediationUpdate

logger = logging.getLogger(__name__)


def _require_action(action_taken: Optional[str]) -> str:
    if action_taken is None or not action_taken.strip():
        raise FieldValidationError("Action taken is required")
    return action_taken


def _to_response(remediation: BreachRemediationORM, actor: Optional[UserORM] = None) -> RemediationResponse:
    response = RemediationResponse.model_validate(remediation)
    if actor is not None:
        response.taken_by_email = actor.email
        response.taken_by_name = actor.full_name
    return response


class RemediationService:

    async def add_remediation(
        self,
        session: AsyncSession,
        incident_id: int,
        payload: RemediationCreate,
        taken_by: Optional[int] = None,
    ) -> RemediationResponse:
        action_taken = _require_action(payload.action_taken)

        incident = await session.get(BreachIncidentORM, incident_id)
        if incident is None:
            raise NotFoundError(f"Breach incident {incident_id} not found")

        remediation = BreachRemediationORM(
            incident_id=incident_id,
            action_taken=action_taken,
            taken_by=taken_by,
            taken_at=datetime.now(timezone.utc),
            effectiveness=payload.effectiveness,
            notes=payload.notes,
        )
        session.add(remediation)
        await session.flush()
        await session.refresh(remediation)
        logger.info(f"Remediation #{remediation.id} recorded for incident #{incident_id}")

        actor = await session.get(UserORM, taken_by) if taken_by is not None else None
        return _to_response(remediation, actor)

    async def get_remediations(self, session: AsyncSession, incident_id: int) -> List[RemediationResponse]:
        """Remediations of an incident, most recent first."""
        result = await session.execute(
            select(BreachRemediationORM, UserORM)
            .outerjoin(UserORM, UserORM.id == BreachRemediationORM.taken_by)
            .where(BreachRemediationORM.incident_id == incident_id)
            .order_by(BreachRemediationORM.taken_at.desc(), BreachRemediationORM.id.desc())
        )
        return [_to_response(remediation, actor) for remediation, actor in result.all()]

    async def update_remediation(
        self,
        session: AsyncSession,
        remediation_id: int,
        payload: RemediationUpdate,
    ) -> RemediationResponse:
        action_taken = _require_action(payload.action_taken)

        remediation = await session.get(BreachRemediationORM, remediation_id)
        if remediation is None:
            raise NotFoundError(f"Remediation {remediation_id} not found")

        remediation.action_taken = action_taken
        remediation.effectiveness = payload.effectiveness
        remediation.notes = payload.notes
        remediation.taken_at = datetime.now(timezone.utc)
        await session.flush()
        await session.refresh(remediation)
        logger.info(f"Remediation #{remediation_id} updated")

        actor = await session.get(UserORM, remediation.taken_by) if remediation.taken_by is not None else None
        return _to_response(remediation, actor)
