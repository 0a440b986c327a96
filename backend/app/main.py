"""
Breach Response - incident notification and remediation workflow

FastAPI application entry point.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from backend.app.core.config import get_settings
from backend.app.core.logging import setup_logging, get_logger
from backend.app.api import auth, breach_incidents, breach_notifications, breach_remediations, health, security_contacts
from backend.app.middleware.trace import TracingMiddleware

settings = get_settings()

# Initialize logging
setup_logging(level=settings.log_level)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    logger.info(f"Starting {settings.app_name} v{settings.app_version}")

    if settings.create_tables_on_startup:
        from backend.app.core.init_db import init_database
        await init_database()

        from backend.app.core.database import get_db_context
        from backend.app.services.auth_service import seed_default_users
        async with get_db_context() as session:
            await seed_default_users(session)

    if settings.alert_email_enabled:
        logger.info("Breach alert e-mails enabled")
    else:
        logger.info("Breach alert e-mails disabled (ALERT_EMAIL_ENABLED=false)")

    yield
    # Shutdown
    logger.info(f"Shutting down {settings.app_name}")

    from backend.app.core.database import engine
    await engine.dispose()


app = FastAPI(
    title=settings.app_name,
    description="Breach incident tracking, regulatory notification and remediation",
    version=settings.app_version,
    lifespan=lifespan,
)

# Add Middleware
app.add_middleware(TracingMiddleware)

# CORS middleware for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Correlation-ID"],
)

# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(
    auth.router,
    prefix=f"{settings.api_prefix}/auth",
    tags=["Authentication"]
)
app.include_router(
    breach_incidents.router,
    prefix=f"{settings.api_prefix}/breach-incidents",
    tags=["Breach Incidents"],
)
app.include_router(
    breach_notifications.router,
    prefix=f"{settings.api_prefix}/breach-notifications",
    tags=["Breach Notifications"],
)
app.include_router(
    breach_remediations.router,
    prefix=f"{settings.api_prefix}/breach-remediations",
    tags=["Breach Remediations"],
)
app.include_router(
    security_contacts.router,
    prefix=f"{settings.api_prefix}/security",
    tags=["Security Contacts"],
)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "description": "Breach incident notification and remediation workflow",
        "docs": "/docs",
    }
