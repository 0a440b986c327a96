"""Breach notification schemas, enums and template I/O models."""
from enum import Enum
from typing import Optional
from datetime import datetime
from pydantic import BaseModel


class NotificationType(str, Enum):
    GDPR_SUPERVISORY = "gdpr_supervisory"
    HIPAA_HHS = "hipaa_hhs"
    INDIVIDUAL_PATIENT = "individual_patient"


class RecipientType(str, Enum):
    SUPERVISORY_AUTHORITY = "supervisory_authority"
    HHS = "hhs"
    INDIVIDUAL = "individual"


class NotificationStatus(str, Enum):
    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"


class NotificationCreate(BaseModel):
    # notification_type is not checked against NotificationType here;
    # an unsupported value is rejected when the notification is sent.
    notification_type: Optional[str] = None
    recipient_type: Optional[str] = None
    recipient_email: Optional[str] = None
    recipient_name: Optional[str] = None


class NotificationResponse(BaseModel):
    id: int
    incident_id: int
    notification_type: str
    recipient_type: str
    recipient_email: str
    recipient_name: Optional[str] = None
    sent_by: Optional[int] = None
    status: NotificationStatus
    sent_at: Optional[datetime] = None
    template_used: Optional[str] = None
    error_message: Optional[str] = None
    created_at: datetime
    # Sender details (absent when sent_by is null or unresolved)
    sent_by_email: Optional[str] = None
    sent_by_name: Optional[str] = None

    class Config:
        from_attributes = True


class Recipient(BaseModel):
    """Addressee of a rendered notification."""
    email: Optional[str] = None
    name: Optional[str] = None


class DPOContactInfo(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    contact_number: Optional[str] = None

    class Config:
        from_attributes = True


class RenderedEmail(BaseModel):
    subject: str
    html: str
