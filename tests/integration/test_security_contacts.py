"""
DPO contact and security team roster endpoints.
"""
import pytest
from httpx import AsyncClient

DPO_URL = "/api/v1/security/dpo"
TEAM_URL = "/api/v1/security/team"


@pytest.mark.asyncio
async def test_dpo_contact_upsert(client: AsyncClient):
    empty = await client.get(DPO_URL)
    assert empty.status_code == 200
    assert empty.json() is None

    created = await client.put(DPO_URL, json={
        "name": "Jane Doe", "email": "dpo@hospital.example", "contact_number": "+44 (20) 7946-0000",
    })
    assert created.status_code == 200, created.text

    updated = await client.put(DPO_URL, json={
        "name": "John Roe", "email": "john.roe@hospital.example", "contact_number": "020 7946 0001",
    })
    assert updated.status_code == 200
    assert updated.json()["id"] == created.json()["id"]

    current = (await client.get(DPO_URL)).json()
    assert current["name"] == "John Roe"
    assert current["email"] == "john.roe@hospital.example"


@pytest.mark.asyncio
@pytest.mark.parametrize("payload,detail", [
    ({"name": "Jane Doe", "email": "dpo@hospital.example"}, "Name, email, and contact number are required"),
    ({"name": "Jane Doe", "email": "not-an-email", "contact_number": "02079460000"}, "Invalid email format"),
    ({"name": "Jane Doe", "email": "dpo@hospital.example", "contact_number": "123"}, "Invalid contact number format"),
    ({"name": "Jane Doe", "email": "dpo@hospital.example", "contact_number": "call me"}, "Invalid contact number format"),
])
async def test_dpo_contact_validation(client: AsyncClient, payload, detail):
    response = await client.put(DPO_URL, json=payload)
    assert response.status_code == 400
    assert response.json()["detail"] == detail


@pytest.mark.asyncio
async def test_security_team_roster(client: AsyncClient):
    added = await client.post(TEAM_URL, json={"name": "Alex Kim", "email": "alex.kim@hospital.example"})
    assert added.status_code == 201, added.text
    member_id = added.json()["id"]

    duplicate = await client.post(TEAM_URL, json={"name": "A. Kim", "email": "alex.kim@hospital.example"})
    assert duplicate.status_code == 409

    bad_email = await client.post(TEAM_URL, json={"name": "Pat", "email": "pat@"})
    assert bad_email.status_code == 400

    roster = (await client.get(TEAM_URL)).json()
    assert [m["email"] for m in roster] == ["alex.kim@hospital.example"]

    removed = await client.delete(f"{TEAM_URL}/{member_id}")
    assert removed.status_code == 204

    again = await client.delete(f"{TEAM_URL}/{member_id}")
    assert again.status_code == 404
    assert (await client.get(TEAM_URL)).json() == []


@pytest.mark.asyncio
async def test_requests_after_rejected_write_still_authenticate(client: AsyncClient):
    rejected = await client.put(DPO_URL, json={"name": "Jane Doe", "email": "bad", "contact_number": "02079460000"})
    assert rejected.status_code == 400

    accepted = await client.put(DPO_URL, json={
        "name": "Jane Doe", "email": "dpo@hospital.example", "contact_number": "02079460000",
    })
    assert accepted.status_code == 200, accepted.text

    incident = await client.post("/api/v1/breach-incidents/", json={
        "incident_type": "lost_device", "severity": "low", "description": "Laptop left on train",
    })
    assert incident.status_code == 201, incident.text
    assert incident.json()["reported_by_email"] == "officer@hospital.example"
