"""
Security Contacts API Router.

Maintains the Data Protection Officer contact and the security team
roster that receive breach alerts.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Security
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.api.deps import to_http_exception
from backend.app.core.database import get_db
from backend.app.core.exceptions import BreachWorkflowError
from backend.app.core.security import BREACH_READ, SECURITY_CONTACTS_WRITE, User, get_current_user
from backend.app.schemas.security_contacts import (
    DPOContactResponse, DPOContactUpdate, SecurityTeamMemberCreate, SecurityTeamMemberResponse,
)
from backend.app.services import security_contacts

router = APIRouter()


@router.get("/dpo", response_model=Optional[DPOContactResponse])
async def get_dpo_contact(
    db: AsyncSession = Depends(get_db),
    current_user: User = Security(get_current_user, scopes=[BREACH_READ]),
):
    """Current DPO contact, or null when none is configured."""
    return await security_contacts.get_dpo_contact(db)


@router.put("/dpo", response_model=DPOContactResponse)
async def set_dpo_contact(
    payload: DPOContactUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Security(get_current_user, scopes=[SECURITY_CONTACTS_WRITE]),
):
    try:
        return await security_contacts.set_dpo_contact(db, payload, user_id=current_user.id)
    except BreachWorkflowError as e:
        raise to_http_exception(e)


@router.get("/team", response_model=List[SecurityTeamMemberResponse])
async def list_security_team(
    db: AsyncSession = Depends(get_db),
    current_user: User = Security(get_current_user, scopes=[BREACH_READ]),
):
    return await security_contacts.list_security_team(db)


@router.post("/team", response_model=SecurityTeamMemberResponse, status_code=201)
async def add_security_team_member(
    payload: SecurityTeamMemberCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Security(get_current_user, scopes=[SECURITY_CONTACTS_WRITE]),
):
    try:
        return await security_contacts.add_security_team_member(db, payload, user_id=current_user.id)
    except BreachWorkflowError as e:
        raise to_http_exception(e)


@router.delete("/team/{member_id}", status_code=204)
async def remove_security_team_member(
    member_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Security(get_current_user, scopes=[SECURITY_CONTACTS_WRITE]),
):
    try:
        await security_contacts.remove_security_team_member(db, member_id)
    except BreachWorkflowError as e:
        raise to_http_exception(e)
