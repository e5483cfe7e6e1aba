"""Tests for picklist metadata endpoints."""

import pytest

from portal.db.enums import BrokerStatus, QuoteStatus, Role


@pytest.mark.asyncio
async def test_metadata_requires_session(client):
    response = await client.get("/metadata/statuses")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_quote_statuses(client_as, make_principal):
    shipper = client_as(make_principal(Role.SHIPPER))
    response = await shipper.get("/metadata/statuses")
    assert response.status_code == 200
    data = response.json()

    assert data["default"] == "pending"
    assert [s["value"] for s in data["statuses"]] == [s.value for s in QuoteStatus]

    by_value = {s["value"]: s for s in data["statuses"]}
    assert by_value["pending"]["next"] == ["quoted", "cancelled", "rejected"]
    assert by_value["in_transit"]["label"] == "In Transit"
    assert by_value["archived"]["terminal"] is True
    assert by_value["archived"]["next"] == []
    assert by_value["delivered"]["terminal"] is False
    assert all(s["style_class"] for s in data["statuses"])


@pytest.mark.asyncio
async def test_broker_statuses(client_as, make_principal):
    sales = client_as(make_principal(Role.SALES_REP))
    data = (await sales.get("/metadata/broker-statuses")).json()

    assert data["default"] == "in_progress"
    assert [s["value"] for s in data["statuses"]] == [s.value for s in BrokerStatus]
    terminal = {s["value"] for s in data["statuses"] if s["terminal"]}
    assert terminal == {"delivered", "cancelled"}


@pytest.mark.asyncio
async def test_roles(client_as, make_principal):
    support = client_as(make_principal(Role.SUPPORT))
    data = (await support.get("/metadata/roles")).json()
    assert [r["value"] for r in data["roles"]] == [r.value for r in Role]
    assert {"value": "super_admin", "label": "Super Administrator"} in data["roles"]
