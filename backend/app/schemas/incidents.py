"""
Breach Incident Schemas and Enums.

Severity is carried as a plain string: it is interpreted by consumers
(template colours, dashboards) and is not enum-validated on write.
"""
from enum import Enum
from typing import Optional, List, Union
from datetime import datetime
from pydantic import BaseModel, Field


class IncidentStatus(str, Enum):
    """Incident lifecycle stages. Any stage may follow any other."""
    DRAFT = "draft"
    CONFIRMED = "confirmed"
    UNDER_INVESTIGATION = "under_investigation"
    CONTAINED = "contained"
    RESOLVED = "resolved"


class IncidentSeverity(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class IncidentCreate(BaseModel):
    # Required fields are checked by the service so that a missing field
    # is reported the same way for API and in-process callers.
    incident_type: Optional[str] = None
    severity: Optional[str] = None
    description: Optional[str] = None
    affected_users: Optional[List[Union[int, str]]] = None
    affected_data_types: Optional[List[str]] = None
    detected_at: Optional[datetime] = None
    anomaly_id: Optional[int] = None


class IncidentStatusUpdate(BaseModel):
    status: Optional[str] = None


class IncidentFilters(BaseModel):
    status: Optional[str] = None
    severity: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    limit: int = Field(50, ge=1, le=500)
    offset: int = Field(0, ge=0)


class IncidentResponse(BaseModel):
    id: int
    incident_type: str
    severity: str
    description: str
    affected_users: List[Union[int, str]] = []
    affected_data_types: List[str] = []
    detected_at: datetime
    reported_by: Optional[int] = None
    status: IncidentStatus
    anomaly_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime
    # Reporter details (absent when reported_by is null or unresolved)
    reported_by_email: Optional[str] = None
    reported_by_name: Optional[str] = None

    class Config:
        from_attributes = True


class IncidentListResponse(BaseModel):
    incidents: List[IncidentResponse]
    total: int
    limit: int
    offset: int
