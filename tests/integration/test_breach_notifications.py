"""
Notification dispatch: pending creation, send outcomes and type handling.
"""
import pytest
from httpx import AsyncClient
from sqlalchemy import event, text
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.core.exceptions import MailTransportError, NotFoundError, UnknownNotificationTypeError
from backend.app.models.notification_orm import BreachNotificationORM
from backend.app.models.security_contact_orm import DPOContactORM
from backend.app.schemas.incidents import IncidentCreate
from backend.app.schemas.notifications import NotificationCreate
from backend.app.services import notification_service
from backend.app.services.incident_service import BreachIncidentService
from backend.app.services.notification_service import BreachNotificationService, default_recipient_type

INCIDENTS_URL = "/api/v1/breach-incidents/"


async def create_incident(client: AsyncClient, **overrides) -> int:
    payload = {
        "incident_type": "unauthorized_access",
        "severity": "critical",
        "description": "Export of lab results to a personal mailbox",
        "affected_users": [11, 12, 13],
        "affected_data_types": ["SSN", "diagnosis"],
    }
    payload.update(overrides)
    response = await client.post(INCIDENTS_URL, json=payload)
    assert response.status_code == 201, response.text
    return response.json()["id"]


async def create_notification(client: AsyncClient, incident_id: int, **overrides) -> dict:
    payload = {
        "notification_type": "gdpr_supervisory",
        "recipient_email": "breach@dpa.example",
        "recipient_name": "Data Protection Authority",
    }
    payload.update(overrides)
    response = await client.post(f"{INCIDENTS_URL}{incident_id}/notifications", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.parametrize("notification_type,recipient_type", [
    ("gdpr_supervisory", "supervisory_authority"),
    ("hipaa_hhs", "hhs"),
    ("individual_patient", "individual"),
    ("anything_else", "individual"),
])
def test_default_recipient_type(notification_type, recipient_type):
    assert default_recipient_type(notification_type) == recipient_type


@pytest.mark.asyncio
async def test_create_then_list_shows_pending(client: AsyncClient):
    incident_id = await create_incident(client)
    created = await create_notification(client, incident_id)

    assert created["status"] == "pending"
    assert created["recipient_type"] == "supervisory_authority"

    response = await client.get(f"{INCIDENTS_URL}{incident_id}/notifications")
    assert response.status_code == 200
    notifications = response.json()
    assert len(notifications) == 1
    assert notifications[0]["status"] == "pending"
    assert notifications[0]["sent_at"] is None
    assert notifications[0]["sent_by_email"] == "officer@hospital.example"
    assert notifications[0]["sent_by_name"] == "Dana Reyes"


@pytest.mark.asyncio
async def test_caller_recipient_type_wins(client: AsyncClient):
    incident_id = await create_incident(client)
    created = await create_notification(client, incident_id, notification_type="hipaa_hhs", recipient_type="individual")
    assert created["recipient_type"] == "individual"


@pytest.mark.asyncio
async def test_create_notification_validation(client: AsyncClient):
    incident_id = await create_incident(client)

    response = await client.post(
        f"{INCIDENTS_URL}{incident_id}/notifications",
        json={"notification_type": "hipaa_hhs"},
    )
    assert response.status_code == 400
    assert "recipient_email" in response.json()["detail"]

    response = await client.post(
        f"{INCIDENTS_URL}9999/notifications",
        json={"notification_type": "hipaa_hhs", "recipient_email": "ocr@hhs.example"},
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_send_gdpr_notification(client: AsyncClient, db_session: AsyncSession, mail_transport):
    db_session.add(DPOContactORM(name="Jane Doe", email="dpo@hospital.example", contact_number="+44 20 7946 0000"))
    await db_session.commit()

    incident_id = await create_incident(client)
    notification = await create_notification(client, incident_id)

    response = await client.post(f"/api/v1/breach-notifications/{notification['id']}/send")
    assert response.status_code == 200, response.text
    data = response.json()
    assert data["status"] == "sent"
    assert data["sent_at"] is not None
    assert data["template_used"] == "gdpr_supervisory"
    assert data["error_message"] is None

    assert len(mail_transport.sent) == 1
    message = mail_transport.sent[0]
    assert message["to"] == "breach@dpa.example"
    assert message["subject"] == f"GDPR Data Breach Notification - Incident #{incident_id}"
    assert message["is_html"] is True
    assert "3 individual(s)" in message["body"]
    assert "SSN, diagnosis" in message["body"]
    assert "Jane Doe" in message["body"]


@pytest.mark.asyncio
async def test_failed_then_successful_send(client: AsyncClient, mail_transport):
    incident_id = await create_incident(client)
    notification = await create_notification(client, incident_id, notification_type="hipaa_hhs",
                                             recipient_email="ocr@hhs.example")
    send_url = f"/api/v1/breach-notifications/{notification['id']}/send"

    mail_transport.fail_message = "Mailbox unavailable"
    failed = await client.post(send_url)
    assert failed.status_code == 200
    assert failed.json()["status"] == "failed"
    assert failed.json()["error_message"] == "Mailbox unavailable"
    assert failed.json()["template_used"] == "hipaa_hhs"
    assert failed.json()["sent_at"] is None

    mail_transport.fail_message = None
    sent = await client.post(send_url)
    assert sent.status_code == 200
    assert sent.json()["status"] == "sent"
    assert sent.json()["error_message"] is None
    assert sent.json()["sent_at"] is not None


@pytest.mark.asyncio
async def test_transport_error_recorded_as_failure(client: AsyncClient, mail_transport):
    incident_id = await create_incident(client)
    notification = await create_notification(client, incident_id, notification_type="individual_patient",
                                             recipient_email="patient@example.com")

    mail_transport.error = MailTransportError("Connection refused")
    response = await client.post(f"/api/v1/breach-notifications/{notification['id']}/send")

    assert response.status_code == 200
    assert response.json()["status"] == "failed"
    assert response.json()["error_message"] == "Connection refused"


@pytest.mark.asyncio
async def test_failure_without_message_gets_generic_error(client: AsyncClient, mail_transport):
    incident_id = await create_incident(client)
    notification = await create_notification(client, incident_id)

    mail_transport.failing_recipients.add("breach@dpa.example")
    response = await client.post(f"/api/v1/breach-notifications/{notification['id']}/send")
    assert response.json()["error_message"] == "Email sending failed"


@pytest.mark.asyncio
async def test_unknown_type_rejected_at_send(client: AsyncClient, mail_transport):
    incident_id = await create_incident(client)
    notification = await create_notification(client, incident_id, notification_type="carrier_pigeon")

    response = await client.post(f"/api/v1/breach-notifications/{notification['id']}/send")
    assert response.status_code == 400
    assert response.json()["detail"] == "Unknown notification type: carrier_pigeon"
    assert mail_transport.sent == []

    listed = (await client.get(f"{INCIDENTS_URL}{incident_id}/notifications")).json()
    assert listed[0]["status"] == "pending"
    assert listed[0]["template_used"] is None


@pytest.mark.asyncio
async def test_send_unknown_notification(client: AsyncClient):
    response = await client.post("/api/v1/breach-notifications/31337/send")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_notifications_of_unknown_incident_is_empty(client: AsyncClient):
    response = await client.get(f"{INCIDENTS_URL}555/notifications")
    assert response.status_code == 200
    assert response.json() == []


@pytest.mark.asyncio
async def test_notifications_newest_first(db_session: AsyncSession, mail_transport):
    incident = await BreachIncidentService().create_incident(db_session, IncidentCreate(
        incident_type="misdirected_fax", severity="medium", description="Discharge summary faxed to wrong clinic",
    ))
    service = BreachNotificationService(mail_transport)
    first = await service.create_notification(db_session, incident.id, NotificationCreate(
        notification_type="hipaa_hhs", recipient_email="ocr@hhs.example",
    ))
    second = await service.create_notification(db_session, incident.id, NotificationCreate(
        notification_type="individual_patient", recipient_email="patient@example.com",
    ))

    listed = await service.get_notifications(db_session, incident.id)
    assert [n.id for n in listed] == [second.id, first.id]


@pytest.mark.asyncio
async def test_service_errors(db_session: AsyncSession, mail_transport):
    service = BreachNotificationService(mail_transport)
    with pytest.raises(NotFoundError):
        await service.send_notification(db_session, 1)

    incident = await BreachIncidentService().create_incident(db_session, IncidentCreate(
        incident_type="ransomware", severity="critical", description="File server encrypted",
    ))
    created = await service.create_notification(db_session, incident.id, NotificationCreate(
        notification_type="sms", recipient_email="someone@example.com",
    ))
    with pytest.raises(UnknownNotificationTypeError):
        await service.send_notification(db_session, created.id)


@pytest.mark.asyncio
async def test_dpo_lookup_failure_falls_back_to_generic_contact(db_session: AsyncSession, mail_transport, monkeypatch):
    async def broken_dpo_lookup(session):
        raise OperationalError("SELECT", {}, Exception("dpo_contact_info unavailable"))

    monkeypatch.setattr(notification_service, "get_dpo_contact", broken_dpo_lookup)

    incident = await BreachIncidentService().create_incident(db_session, IncidentCreate(
        incident_type="unauthorized_access", severity="high", description="Shared credentials used",
    ))
    service = BreachNotificationService(mail_transport)
    created = await service.create_notification(db_session, incident.id, NotificationCreate(
        notification_type="gdpr_supervisory", recipient_email="breach@dpa.example",
    ))

    result = await service.send_notification(db_session, created.id)
    assert result.status == "sent"
    assert "mailto:" not in mail_transport.sent[0]["body"]


@pytest.mark.asyncio
async def test_failed_dpo_query_is_rolled_back_to_savepoint(db_session: AsyncSession, mail_transport, monkeypatch):
    rolled_back = []
    event.listen(db_session.bind.sync_engine, "rollback_savepoint",
                 lambda conn, name, context: rolled_back.append(name))

    async def dpo_lookup_on_missing_table(session):
        await session.execute(text("SELECT name FROM retired_dpo_contacts"))

    monkeypatch.setattr(notification_service, "get_dpo_contact", dpo_lookup_on_missing_table)

    incident = await BreachIncidentService().create_incident(db_session, IncidentCreate(
        incident_type="unauthorized_access", severity="high", description="Shared credentials used",
    ))
    service = BreachNotificationService(mail_transport)
    created = await service.create_notification(db_session, incident.id, NotificationCreate(
        notification_type="gdpr_supervisory", recipient_email="breach@dpa.example",
    ))

    result = await service.send_notification(db_session, created.id)
    await db_session.commit()

    assert len(rolled_back) == 1
    assert result.status == "sent"
    assert "contact details provided in our privacy policy" in mail_transport.sent[0]["body"]
    stored = await db_session.get(BreachNotificationORM, created.id)
    assert stored.status == "sent"
