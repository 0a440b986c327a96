"""
Breach alert recipient resolution.

Recipients are the union of superadmin users, the security team roster
and the current Data Protection Officer, recomputed on every call.
"""
import logging
from typing import List

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.security import Role
from backend.app.models.security_contact_orm import DPOContactORM, SecurityTeamMemberORM
from backend.app.models.user_orm import UserORM

logger = logging.getLogger(__name__)


async def resolve_breach_recipients(session: AsyncSession) -> List[str]:
    """
    Return the unique e-mail addresses that receive internal breach alerts.

    Duplicates across the three sources collapse to one entry (exact match).
    The result is sorted. On a datastore error the failure is logged and
    an empty list is returned.
    """
    recipients = set()
    try:
        # Savepoint: a failed lookup must not abort the caller's transaction
        async with session.begin_nested():
            result = await session.execute(
                select(UserORM.email).where(
                    UserORM.role == Role.SUPERADMIN,
                    UserORM.email.is_not(None),
                )
            )
            recipients.update(result.scalars().all())

            result = await session.execute(select(SecurityTeamMemberORM.email))
            recipients.update(result.scalars().all())

            result = await session.execute(
                select(DPOContactORM.email)
                .order_by(DPOContactORM.updated_at.desc(), DPOContactORM.id.desc())
                .limit(1)
            )
            dpo_email = result.scalar_one_or_none()
            if dpo_email:
                recipients.add(dpo_email)
    except SQLAlchemyError as e:
        logger.error(f"Failed to resolve breach alert recipients: {e}", exc_info=True)
        return []

    recipients.discard("")
    return sorted(recipients)
