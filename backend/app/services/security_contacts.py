"""
Security contacts: the Data Protection Officer and the security team roster.

Both feed the internal breach alert; the DPO is also quoted in GDPR
supervisory notifications.
"""
import logging
import re
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.exceptions import ConflictError, FieldValidationError, NotFoundError
from backend.app.models.security_contact_orm import DPOContactORM, SecurityTeamMemberORM
from backend.app.schemas.security_contacts import DPOContactUpdate, SecurityTeamMemberCreate

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
CONTACT_NUMBER_PATTERN = re.compile(r"^[\d\s\-+()]+$")
MIN_CONTACT_NUMBER_LENGTH = 5


def _clean(value: Optional[str]) -> str:
    return (value or "").strip()


def _validate_email(email: str) -> None:
    if not EMAIL_PATTERN.match(email):
        raise FieldValidationError("Invalid email format")


async def get_dpo_contact(session: AsyncSession) -> Optional[DPOContactORM]:
    """Most recently updated DPO record, or None when none is configured."""
    result = await session.execute(
        select(DPOContactORM)
        .order_by(DPOContactORM.updated_at.desc(), DPOContactORM.id.desc())
        .limit(1)
    )
    return result.scalar_one_or_none()


async def set_dpo_contact(
    session: AsyncSession,
    payload: DPOContactUpdate,
    user_id: Optional[int] = None,
) -> DPOContactORM:
    """Create or overwrite the single DPO record."""
    name = _clean(payload.name)
    email = _clean(payload.email)
    contact_number = _clean(payload.contact_number)

    if not name or not email or not contact_number:
        raise FieldValidationError("Name, email, and contact number are required")
    _validate_email(email)
    if not CONTACT_NUMBER_PATTERN.match(contact_number) or len(contact_number) < MIN_CONTACT_NUMBER_LENGTH:
        raise FieldValidationError("Invalid contact number format")

    now = datetime.now(timezone.utc)
    dpo = await get_dpo_contact(session)
    if dpo is None:
        dpo = DPOContactORM(
            name=name,
            email=email,
            contact_number=contact_number,
            created_by=user_id,
            created_at=now,
            updated_at=now,
        )
        session.add(dpo)
    else:
        dpo.name = name
        dpo.email = email
        dpo.contact_number = contact_number
        dpo.updated_at = now

    await session.flush()
    await session.refresh(dpo)
    logger.info(f"DPO contact updated by user {user_id}")
    return dpo


async def list_security_team(session: AsyncSession) -> List[SecurityTeamMemberORM]:
    result = await session.execute(
        select(SecurityTeamMemberORM).order_by(SecurityTeamMemberORM.created_at.desc(), SecurityTeamMemberORM.id.desc())
    )
    return list(result.scalars().all())


async def add_security_team_member(
    session: AsyncSession,
    payload: SecurityTeamMemberCreate,
    user_id: Optional[int] = None,
) -> SecurityTeamMemberORM:
    name = _clean(payload.name)
    email = _clean(payload.email)

    if not name or not email:
        raise FieldValidationError("Name and email are required")
    _validate_email(email)

    existing = await session.execute(
        select(SecurityTeamMemberORM.id).where(SecurityTeamMemberORM.email == email)
    )
    if existing.scalar_one_or_none() is not None:
        raise ConflictError("A team member with this email already exists")

    member = SecurityTeamMemberORM(
        name=name,
        email=email,
        created_by=user_id,
        created_at=datetime.now(timezone.utc),
    )
    session.add(member)
    await session.flush()
    await session.refresh(member)
    logger.info(f"Security team member #{member.id} added by user {user_id}")
    return member


async def remove_security_team_member(session: AsyncSession, member_id: int) -> None:
    member = await session.get(SecurityTeamMemberORM, member_id)
    if member is None:
        raise NotFoundError(f"Security team member {member_id} not found")
    await session.delete(member)
    await session.flush()
    logger.info(f"Security team member #{member_id} removed")
