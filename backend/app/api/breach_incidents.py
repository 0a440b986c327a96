"""
Breach Incident API Router.

Incident lifecycle plus the notifications and remediations recorded
against an incident.
"""
import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Security
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.api.deps import (
    get_incident_service, get_notification_service, get_remediation_service, to_http_exception,
)
from backend.app.core.database import get_db
from backend.app.core.exceptions import BreachWorkflowError
from backend.app.core.security import BREACH_NOTIFY, BREACH_READ, BREACH_WRITE, User, get_current_user
from backend.app.schemas.incidents import (
    IncidentCreate, IncidentFilters, IncidentListResponse, IncidentResponse, IncidentStatusUpdate,
)
from backend.app.schemas.notifications import NotificationCreate, NotificationResponse
from backend.app.schemas.remediations import RemediationCreate, RemediationResponse
from backend.app.services.incident_service import BreachIncidentService
from backend.app.services.notification_service import BreachNotificationService
from backend.app.services.remediation_service import RemediationService

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/", response_model=IncidentResponse, status_code=201)
async def create_incident(
    payload: IncidentCreate,
    db: AsyncSession = Depends(get_db),
    service: BreachIncidentService = Depends(get_incident_service),
    current_user: User = Security(get_current_user, scopes=[BREACH_WRITE]),
):
    """
    Record a breach incident in `draft`.
    Stakeholders are alerted by e-mail when ALERT_EMAIL_ENABLED is set.
    """
    try:
        return await service.create_incident(db, payload, reported_by=current_user.id)
    except BreachWorkflowError as e:
        raise to_http_exception(e)


@router.get("/", response_model=IncidentListResponse)
async def list_incidents(
    status: Optional[str] = Query(None),
    severity: Optional[str] = Query(None),
    start_date: Optional[datetime] = Query(None, alias="startDate"),
    end_date: Optional[datetime] = Query(None, alias="endDate"),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    service: BreachIncidentService = Depends(get_incident_service),
    current_user: User = Security(get_current_user, scopes=[BREACH_READ]),
):
    """List incidents with optional filters, newest detection first."""
    filters = IncidentFilters(
        status=status,
        severity=severity,
        start_date=start_date,
        end_date=end_date,
        limit=limit,
        offset=offset,
    )
    return await service.list_incidents(db, filters)


@router.get("/{incident_id}", response_model=IncidentResponse)
async def get_incident(
    incident_id: int,
    db: AsyncSession = Depends(get_db),
    service: BreachIncidentService = Depends(get_incident_service),
    current_user: User = Security(get_current_user, scopes=[BREACH_READ]),
):
    try:
        return await service.get_incident(db, incident_id)
    except BreachWorkflowError as e:
        raise to_http_exception(e)


@router.put("/{incident_id}/status", response_model=IncidentResponse)
async def update_incident_status(
    incident_id: int,
    payload: IncidentStatusUpdate,
    db: AsyncSession = Depends(get_db),
    service: BreachIncidentService = Depends(get_incident_service),
    current_user: User = Security(get_current_user, scopes=[BREACH_WRITE]),
):
    """Move an incident to another lifecycle status. Any status may follow any other."""
    try:
        return await service.update_incident_status(db, incident_id, payload.status)
    except BreachWorkflowError as e:
        raise to_http_exception(e)


# ==========================================
# Notifications of an incident
# ==========================================

@router.post("/{incident_id}/notifications", response_model=NotificationResponse, status_code=201)
async def create_notification(
    incident_id: int,
    payload: NotificationCreate,
    db: AsyncSession = Depends(get_db),
    service: BreachNotificationService = Depends(get_notification_service),
    current_user: User = Security(get_current_user, scopes=[BREACH_NOTIFY]),
):
    """Create a pending notification. Sending is a separate call."""
    try:
        return await service.create_notification(db, incident_id, payload, sent_by=current_user.id)
    except BreachWorkflowError as e:
        raise to_http_exception(e)


@router.get("/{incident_id}/notifications", response_model=List[NotificationResponse])
async def get_notifications(
    incident_id: int,
    db: AsyncSession = Depends(get_db),
    service: BreachNotificationService = Depends(get_notification_service),
    current_user: User = Security(get_current_user, scopes=[BREACH_READ]),
):
    return await service.get_notifications(db, incident_id)


# ==========================================
# Remediations of an incident
# ==========================================

@router.post("/{incident_id}/remediations", response_model=RemediationResponse, status_code=201)
async def add_remediation(
    incident_id: int,
    payload: RemediationCreate,
    db: AsyncSession = Depends(get_db),
    service: RemediationService = Depends(get_remediation_service),
    current_user: User = Security(get_current_user, scopes=[BREACH_WRITE]),
):
    try:
        return await service.add_remediation(db, incident_id, payload, taken_by=current_user.id)
    except BreachWorkflowError as e:
        raise to_http_exception(e)


@router.get("/{incident_id}/remediations", response_model=List[RemediationResponse])
async def get_remediations(
    incident_id: int,
    db: AsyncSession = Depends(get_db),
    service: RemediationService = Depends(get_remediation_service),
    current_user: User = Security(get_current_user, scopes=[BREACH_READ]),
):
    return await service.get_remediations(db, incident_id)
