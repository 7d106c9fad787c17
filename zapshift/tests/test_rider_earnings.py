"""
Integration tests for the rider workspace: completed parcels, earnings
summary, cashout and cashout history.
"""

from datetime import datetime, timedelta, timezone

import pytest

from zapshift.app.core.config import settings
from zapshift.app.models.enums import DeliveryStatus, UserRole
from zapshift.app.services.cashout_lock import cashout_lock_key
from zapshift.tests.factories import RIDER_EMAIL, auth_headers, create_parcel, create_user


@pytest.fixture
async def delivered_parcels(db_session, approved_rider):
    """One cross-district (150) and one same-district (80) delivery, plus one in transit."""
    rider, _ = approved_rider
    now = datetime.now(timezone.utc)
    cross = await create_parcel(
        db_session, "Dhaka", "Khulna", DeliveryStatus.DELIVERED, rider=rider, delivered_time=now
    )
    same = await create_parcel(
        db_session, "Dhaka", "Dhaka", DeliveryStatus.SERVICE_CENTER_DELIVERED, rider=rider,
        delivered_time=now - timedelta(seconds=1),
    )
    await create_parcel(db_session, "Dhaka", "Khulna", DeliveryStatus.IN_TRANSIT, rider=rider)
    return cross, same


@pytest.mark.asyncio
async def test_completed_parcels_carry_earning(client, approved_rider, delivered_parcels):
    _, headers = approved_rider
    cross, same = delivered_parcels

    response = await client.get("/v1/rider/completed-parcels", headers=headers)

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 2
    assert [(p["id"], p["earning"]) for p in body["parcels"]] == [(cross.id, 150), (same.id, 80)]


@pytest.mark.asyncio
async def test_earnings_summary(client, approved_rider, delivered_parcels):
    _, headers = approved_rider

    response = await client.get("/v1/rider/earnings", headers=headers)

    assert response.status_code == 200
    assert response.json() == {
        "totalEarning": 230,
        "totalCashedOut": 0,
        "pendingAmount": 230,
        "todayEarning": 230,
        "weeklyEarning": 230,
        "monthlyEarning": 230,
        "completedCount": 2,
    }


@pytest.mark.asyncio
async def test_earnings_of_rider_without_record(client, db_session):
    await create_user(db_session, "role.only@zapshift.test", UserRole.RIDER)

    response = await client.get("/v1/rider/earnings", headers=auth_headers("role.only@zapshift.test"))

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_cashout_flow(client, approved_rider, delivered_parcels):
    _, headers = approved_rider
    cross, _ = delivered_parcels

    response = await client.post(
        "/v1/rider/cashout", json={"amount": 150, "parcelId": cross.id}, headers=headers
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["parcelId"] == cross.id
    assert body["amount"] == 150
    assert body["totalCashedOut"] == 150
    assert body["pendingAmount"] == 80
    assert body["cashedOutAt"] is not None

    summary = (await client.get("/v1/rider/earnings", headers=headers)).json()
    assert summary["totalEarning"] == 230
    assert summary["totalCashedOut"] == 150
    assert summary["pendingAmount"] == 80

    parcel = (await client.get(f"/v1/parcels/{cross.id}", headers=headers)).json()
    assert parcel["isCashedOut"] is True

    history = (await client.get("/v1/rider/cashouts", headers=headers)).json()
    assert history["totalCashedOut"] == 150
    assert [(c["parcelId"], c["amount"]) for c in history["cashouts"]] == [(cross.id, 150)]


@pytest.mark.asyncio
async def test_repeated_cashout_conflicts(client, approved_rider, delivered_parcels):
    _, headers = approved_rider
    cross, _ = delivered_parcels
    payload = {"amount": 150, "parcelId": cross.id}

    assert (await client.post("/v1/rider/cashout", json=payload, headers=headers)).status_code == 200
    response = await client.post("/v1/rider/cashout", json=payload, headers=headers)

    assert response.status_code == 409
    assert response.json()["error_code"] == "ERR_CASHOUT_001"
    assert response.json()["message"] == "Already cashed out"


@pytest.mark.asyncio
async def test_cashout_wrong_amount(client, approved_rider, delivered_parcels):
    _, headers = approved_rider
    _, same = delivered_parcels

    response = await client.post(
        "/v1/rider/cashout", json={"amount": 100, "parcelId": same.id}, headers=headers
    )

    assert response.status_code == 400
    assert response.json()["error_code"] == "ERR_CASHOUT_002"
    assert response.json()["details"]["expected"] == 80


@pytest.mark.asyncio
async def test_cashout_request_validation(client, approved_rider, delivered_parcels):
    _, headers = approved_rider
    cross, _ = delivered_parcels

    for payload in ({"amount": 0, "parcelId": cross.id}, {"amount": 150}, {"parcelId": cross.id}):
        response = await client.post("/v1/rider/cashout", json=payload, headers=headers)
        assert response.status_code == 400
        assert response.json()["error_code"] == "ERR_VALIDATION"


@pytest.mark.asyncio
async def test_cashout_unknown_parcel(client, approved_rider):
    _, headers = approved_rider

    response = await client.post(
        "/v1/rider/cashout", json={"amount": 80, "parcelId": 4242}, headers=headers
    )

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_cashout_requires_rider_role(client, sender, delivered_parcels):
    cross, _ = delivered_parcels

    response = await client.post(
        "/v1/rider/cashout", json={"amount": 150, "parcelId": cross.id}, headers=sender
    )

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_cashout_while_lock_held(client, approved_rider, delivered_parcels, redis_client, monkeypatch):
    _, headers = approved_rider
    cross, _ = delivered_parcels
    monkeypatch.setattr(settings, "cashout_lock_wait_seconds", 0.05)

    held = redis_client.lock(cashout_lock_key(RIDER_EMAIL))
    assert await held.acquire()

    response = await client.post(
        "/v1/rider/cashout", json={"amount": 150, "parcelId": cross.id}, headers=headers
    )

    assert response.status_code == 409
    assert response.json()["error_code"] == "ERR_CASHOUT_004"

    await held.release()
    response = await client.post(
        "/v1/rider/cashout", json={"amount": 150, "parcelId": cross.id}, headers=headers
    )
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_empty_history(client, approved_rider):
    _, headers = approved_rider

    response = await client.get("/v1/rider/cashouts", headers=headers)

    assert response.status_code == 200
    assert response.json() == {"cashouts": [], "totalCashedOut": 0}
