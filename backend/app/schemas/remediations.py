from typing import Optional
from datetime import datetime
from pydantic import BaseModel


class RemediationCreate(BaseModel):
    action_taken: Optional[str] = None
    effectiveness: Optional[str] = None
    notes: Optional[str] = None


class RemediationUpdate(BaseModel):
    action_taken: Optional[str] = None
    effectiveness: Optional[str] = None
    notes: Optional[str] = None


class RemediationResponse(BaseModel):
    id: int
    incident_id: int
    action_taken: str
    taken_by: Optional[int] = None
    taken_at: datetime
    effectiveness: Optional[str] = None
    notes: Optional[str] = None
    taken_by_email: Optional[str] = None
    taken_by_name: Optional[str] = None

    class Config:
        from_attributes = True
