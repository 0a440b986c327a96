"""Schemas for the DPO contact and the security team roster."""
from typing import Optional
from datetime import datetime
from pydantic import BaseModel


class DPOContactUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    contact_number: Optional[str] = None


class DPOContactResponse(BaseModel):
    id: int
    name: str
    email: str
    contact_number: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class SecurityTeamMemberCreate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None


class SecurityTeamMemberResponse(BaseModel):
    id: int
    name: str
    email: str
    created_by: Optional[int] = None
    created_at: datetime

    class Config:
        from_attributes = True
