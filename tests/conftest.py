"""
Pytest configuration and fixtures.
"""

import os
from typing import AsyncGenerator, List, Optional, Set

# Settings require a secret key; set one before the app is imported
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from backend.app.main import app
from backend.app.core.database import Base, get_db
from backend.app.core.security import Role, User, ROLE_SCOPES, get_current_user, oauth2_scheme
from backend.app.services.mail_transport import MailResult, MailTransport, get_mail_transport
from backend.app.services.auth_service import hash_password

# Import all models to register them with Base.metadata
from backend.app.models import (  # noqa: F401
    UserORM, BreachIncidentORM, BreachNotificationORM, BreachRemediationORM,
    SecurityTeamMemberORM, DPOContactORM,
)

# Use in-memory SQLite for testing
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class FakeMailTransport(MailTransport):
    """Records every message instead of sending it."""

    def __init__(self):
        self.sent: List[dict] = []
        self.fail_message: Optional[str] = None
        self.error: Optional[Exception] = None
        self.failing_recipients: Set[str] = set()

    async def send(self, to_email: str, subject: str, body: str, is_html: bool = True) -> MailResult:
        self.sent.append({"to": to_email, "subject": subject, "body": body, "is_html": is_html})
        if self.error is not None:
            raise self.error
        if self.fail_message is not None or to_email in self.failing_recipients:
            return MailResult(success=False, message=self.fail_message)
        return MailResult(success=True, message_id=f"<test-{len(self.sent)}@localhost>")


@pytest.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Creates a fresh in-memory database and session for a test.
    """
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()


@pytest.fixture
def mail_transport() -> FakeMailTransport:
    return FakeMailTransport()


@pytest.fixture
async def security_officer(db_session: AsyncSession) -> UserORM:
    user = UserORM(
        email="officer@hospital.example",
        first_name="Dana",
        last_name="Reyes",
        hashed_password=hash_password("officer-password"),
        role=Role.SECURITY_OFFICER,
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture(scope="function")
async def client(
    db_session: AsyncSession,
    security_officer: UserORM,
    mail_transport: FakeMailTransport,
) -> AsyncGenerator[AsyncClient, None]:
    """
    Test client with database, current user and mail transport overridden.
    Requests are made as the security officer with superadmin scopes.
    """
    async def override_get_db():
        try:
            yield db_session
            await db_session.commit()
        except Exception:
            await db_session.rollback()
            raise

    # Read once: a rollback expires the ORM row and lazy loads need a greenlet
    officer_id = security_officer.id
    officer_email = security_officer.email

    async def override_get_current_user():
        return User(
            username=officer_email,
            role=Role.SUPERADMIN,
            scopes=ROLE_SCOPES[Role.SUPERADMIN],
            id=officer_id,
        )

    async def override_oauth2_scheme():
        return "mock-token"

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user] = override_get_current_user
    app.dependency_overrides[oauth2_scheme] = override_oauth2_scheme
    app.dependency_overrides[get_mail_transport] = lambda: mail_transport

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
async def auth_client(db_session: AsyncSession, mail_transport: FakeMailTransport) -> AsyncGenerator[AsyncClient, None]:
    """
    Test client with real JWT validation (only the database and mail are overridden).
    """
    async def override_get_db():
        try:
            yield db_session
            await db_session.commit()
        except Exception:
            await db_session.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_mail_transport] = lambda: mail_transport

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as c:
        yield c

    app.dependency_overrides.clear()
