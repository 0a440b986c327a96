"""Remediation update endpoint."""
from fastapi import APIRouter, Depends, Security
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.api.deps import get_remediation_service, to_http_exception
from backend.app.core.database import get_db
from backend.app.core.exceptions import BreachWorkflowError
from backend.app.core.security import BREACH_WRITE, User, get_current_user
from backend.app.schemas.remediations import RemediationResponse, RemediationUpdate
from backend.app.services.remediation_service import RemediationService

router = APIRouter()


@router.put("/{remediation_id}", response_model=RemediationResponse)
async def update_remediation(
    remediation_id: int,
    payload: RemediationUpdate,
    db: AsyncSession = Depends(get_db),
    service: RemediationService = Depends(get_remediation_service),
    current_user: User = Security(get_current_user, scopes=[BREACH_WRITE]),
):
    """Overwrite a remediation in place; `taken_at` moves to now."""
    try:
        return await service.update_remediation(db, remediation_id, payload)
    except BreachWorkflowError as e:
        raise to_http_exception(e)
