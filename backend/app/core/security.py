"""
Security and Authentication for the Breach Response API.

Implements OAuth2 with password flow and JWT tokens.
Scopes are granted per role; endpoints declare the scope they need.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, List

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer, SecurityScopes
from jose import JWTError, jwt
from pydantic import BaseModel

from backend.app.core.config import get_settings

settings = get_settings()

# Breach workflow scopes
BREACH_READ = "breach:read"
BREACH_WRITE = "breach:write"
BREACH_NOTIFY = "breach:notify"

# Security contact scopes (DPO, security team roster)
SECURITY_CONTACTS_WRITE = "security:contacts:write"

oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl="api/v1/auth/token",
    scopes={
        BREACH_READ: "Read breach incidents, notifications and remediations",
        BREACH_WRITE: "Record breach incidents, status changes and remediations",
        BREACH_NOTIFY: "Create and send regulatory and patient notifications",
        SECURITY_CONTACTS_WRITE: "Maintain the DPO contact and security team roster",
    },
)

def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    """
    Generate a signed JWT token.
    """
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=15)

    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)
    return encoded_jwt


# Role definitions
class Role:
    SUPERADMIN = "superadmin"              # Receives breach alerts
    SECURITY_OFFICER = "security_officer"  # Runs the breach workflow
    AUDITOR = "auditor"                    # Read only

ROLE_SCOPES = {
    Role.SUPERADMIN: [BREACH_READ, BREACH_WRITE, BREACH_NOTIFY, SECURITY_CONTACTS_WRITE],
    Role.SECURITY_OFFICER: [BREACH_READ, BREACH_WRITE, BREACH_NOTIFY],
    Role.AUDITOR: [BREACH_READ],
}

class User(BaseModel):
    username: str
    role: str
    scopes: List[str] = []
    id: Optional[int] = None


class TokenData(BaseModel):
    username: Optional[str] = None
    role: Optional[str] = None
    scopes: List[str] = []
    user_id: Optional[int] = None


async def get_current_user(
    security_scopes: SecurityScopes,
    token: str = Depends(oauth2_scheme)
) -> User:
    """
    Validate JWT token and check required scopes based on Role-Based Access Control.
    """
    if security_scopes.scopes:
        authenticate_value = f'Bearer scope="{security_scopes.scope_str}"'
    else:
        authenticate_value = "Bearer"

    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": authenticate_value},
    )

    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.algorithm]
        )
        username: str = payload.get("sub")
        if username is None:
            raise credentials_exception

        role: str = payload.get("role", Role.AUDITOR)
        user_id: Optional[int] = payload.get("uid")
        # Assign scopes based on role if not present in token
        token_scopes = payload.get("scopes", ROLE_SCOPES.get(role, []))

        token_data = TokenData(username=username, role=role, scopes=token_scopes, user_id=user_id)
    except (JWTError, ValueError):
        raise credentials_exception

    for scope in security_scopes.scopes:
        if scope not in token_data.scopes:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Not enough permissions. Required scope: {scope}",
                headers={"WWW-Authenticate": authenticate_value},
            )

    return User(username=username, role=role, scopes=token_data.scopes, id=token_data.user_id)
