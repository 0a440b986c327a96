import logging, os
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
import bcrypt
from backend.app.models.user_orm import UserORM

logger = logging.getLogger(__name__)

def hash_password(plain: str) -> str:
    """Hash a password with bcrypt."""
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(plain.encode('utf-8'), salt)
    return hashed.decode('utf-8')

def verify_password(plain: str, hashed: str) -> bool:
    """Verify a password against a bcrypt hash."""
    try:
        return bcrypt.checkpw(plain.encode('utf-8'), hashed.encode('utf-8'))
    except ValueError as e:
        logger.error(f"Password verification error: {e}")
        return False


async def get_user_by_email(db: AsyncSession, email: str) -> Optional[UserORM]:
    result = await db.execute(select(UserORM).where(UserORM.email == email))
    return result.scalar_one_or_none()

async def authenticate_user(db: AsyncSession, email: str, password: str) -> Optional[UserORM]:
    user = await get_user_by_email(db, email)
    if not user or not user.is_active:
        return None
    if not verify_password(password, user.hashed_password):
        return None
    return user

async def seed_default_users(db: AsyncSession) -> None:
    """Seed a superadmin on first startup when SUPERADMIN_EMAIL is set. Password from env vars."""
    from backend.app.core.security import Role
    email = os.getenv("SUPERADMIN_EMAIL")
    if not email:
        return
    existing = await db.execute(select(UserORM).limit(1))
    if existing.scalar_one_or_none():
        return
    db.add(UserORM(
        email=email,
        first_name="Security",
        last_name="Administrator",
        hashed_password=hash_password(os.getenv("SUPERADMIN_PASSWORD", "CHANGE_ME")),
        role=Role.SUPERADMIN,
    ))
    await db.commit()
    logger.info("Seeded default superadmin user")
