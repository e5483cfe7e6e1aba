"""HTTP tests for quote status routes."""

import pytest

from portal.core.config import settings
from portal.db.enums import QuoteStatus, Role
from portal.schemas.quote import QuoteRecord


# =============================================================================
# Authentication & CSRF
# =============================================================================

@pytest.mark.asyncio
async def test_requires_session(client_as, pending_quote):
    anon = client_as(None)
    response = await anon.get(f"/quotes/{pending_quote.id}")
    assert response.status_code == 401

    response = await anon.patch(f"/quotes/{pending_quote.id}/status", json={"status": "quoted"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_tampered_session_is_rejected(client_as, pending_quote):
    anon = client_as(None)
    anon.cookies.set("portal_session", "not-a-jwt")
    response = await anon.get(f"/quotes/{pending_quote.id}")
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid session"


@pytest.mark.asyncio
async def test_patch_requires_csrf_header(client_as, make_principal, pending_quote, repo):
    admin = client_as(make_principal(Role.ADMIN), csrf=False)
    response = await admin.patch(f"/quotes/{pending_quote.id}/status", json={"status": "quoted"})
    assert response.status_code == 403
    assert "CSRF" in response.json()["detail"]
    assert repo.get(pending_quote.id).status is QuoteStatus.PENDING


# =============================================================================
# Reads
# =============================================================================

@pytest.mark.asyncio
async def test_get_quote(client_as, make_principal, company_a, pending_quote):
    shipper = client_as(make_principal(Role.SHIPPER, company_id=company_a))
    response = await shipper.get(f"/quotes/{pending_quote.id}")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "pending"
    assert data["status_label"] == "Pending"
    assert data["broker_status"] == "in_progress"
    assert data["broker_status_label"] == "In Progress"
    assert data["progress"] == 0.0
    assert data["version"] == 1


@pytest.mark.asyncio
async def test_get_quote_out_of_scope(client_as, make_principal, company_b, pending_quote):
    sales = client_as(make_principal(Role.SALES_REP, assigned={company_b}))
    response = await sales.get(f"/quotes/{pending_quote.id}")
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_get_missing_quote(client_as, make_principal):
    admin = client_as(make_principal(Role.ADMIN))
    response = await admin.get("/quotes/does-not-exist")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_unknown_role_cannot_read(client_as, make_principal, pending_quote):
    legacy = client_as(make_principal("dispatcher", assigned={pending_quote.company_id}))
    response = await legacy.get(f"/quotes/{pending_quote.id}")
    assert response.status_code == 403
    assert response.json()["detail"] == "Missing permission: view_quotes"


@pytest.mark.asyncio
async def test_transitions_for_editor(client_as, make_principal, company_a, pending_quote):
    sales = client_as(make_principal(Role.SALES_REP, assigned={company_a}))
    response = await sales.get(f"/quotes/{pending_quote.id}/transitions")
    assert response.status_code == 200
    data = response.json()
    assert data["can_edit"] is True
    assert [o["value"] for o in data["next_statuses"]] == ["quoted", "cancelled", "rejected"]
    assert [o["value"] for o in data["next_broker_statuses"]] == [
        "need_more_info",
        "priced",
        "cancelled",
    ]
    assert data["next_statuses"][0] == {
        "value": "quoted",
        "label": "Quoted",
        "style_class": data["next_statuses"][0]["style_class"],
    }


@pytest.mark.asyncio
async def test_transitions_for_terminal_quote(client_as, make_principal, repo, company_a):
    quote = repo.add(QuoteRecord(id="archived-1", company_id=company_a, status=QuoteStatus.ARCHIVED))
    admin = client_as(make_principal(Role.ADMIN))
    response = await admin.get(f"/quotes/{quote.id}/transitions")
    assert response.status_code == 200
    assert response.json()["next_statuses"] == []


# =============================================================================
# Listing
# =============================================================================

@pytest.mark.asyncio
async def test_list_is_scoped_to_assigned_companies(
    client_as, make_principal, repo, company_a, company_b
):
    repo.add(QuoteRecord(id="a-1", company_id=company_a))
    repo.add(QuoteRecord(id="a-2", company_id=company_a, status=QuoteStatus.IN_TRANSIT))
    repo.add(QuoteRecord(id="b-1", company_id=company_b))

    sales = client_as(make_principal(Role.SALES_REP, assigned={company_a}))
    response = await sales.get("/quotes")
    assert response.status_code == 200
    assert [q["id"] for q in response.json()] == ["a-1", "a-2"]

    admin = client_as(make_principal(Role.ADMIN))
    assert [q["id"] for q in (await admin.get("/quotes")).json()] == ["a-1", "a-2", "b-1"]


@pytest.mark.asyncio
async def test_list_filters_by_status(client_as, make_principal, repo, company_a):
    repo.add(QuoteRecord(id="a-1", company_id=company_a))
    repo.add(QuoteRecord(id="a-2", company_id=company_a, status=QuoteStatus.IN_TRANSIT))
    repo.add(QuoteRecord(id="a-3", company_id=company_a, status=QuoteStatus.DELIVERED))

    shipper = client_as(make_principal(Role.SHIPPER, company_id=company_a))
    response = await shipper.get(
        "/quotes", params=[("status", "In Transit"), ("status", "DELIVERED")]
    )
    assert response.status_code == 200
    assert [q["id"] for q in response.json()] == ["a-2", "a-3"]


@pytest.mark.asyncio
async def test_list_requires_view_permission(client_as, make_principal, company_a):
    assert (await client_as(None).get("/quotes")).status_code == 401

    legacy = client_as(make_principal("dispatcher", assigned={company_a}))
    response = await legacy.get("/quotes")
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_list_for_staff_without_scope_is_empty(client_as, make_principal, pending_quote):
    sales = client_as(make_principal(Role.SALES_REP))
    response = await sales.get("/quotes")
    assert response.status_code == 200
    assert response.json() == []


# =============================================================================
# CORS
# =============================================================================

@pytest.mark.asyncio
async def test_cors_preflight_allows_only_served_methods(client):
    origin = settings.cors_origins_list[0]

    async def preflight(method: str):
        return await client.options(
            "/quotes/q1/status",
            headers={"Origin": origin, "Access-Control-Request-Method": method},
        )

    assert (await preflight("PATCH")).status_code == 200
    assert (await preflight("POST")).status_code == 400
    assert (await preflight("DELETE")).status_code == 400


# =============================================================================
# Status changes
# =============================================================================

@pytest.mark.asyncio
async def test_change_status(client_as, make_principal, company_a, pending_quote, sink):
    shipper_principal = make_principal(Role.SHIPPER, company_id=company_a)
    shipper = client_as(shipper_principal)

    response = await shipper.patch(
        f"/quotes/{pending_quote.id}/status",
        json={"status": "quoted", "reason": "priced by phone"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["quote_id"] == pending_quote.id
    assert data["previous"] == "pending"
    assert data["current"] == "quoted"
    assert data["version"] == 2

    [entry] = sink.list_for_resource(pending_quote.id)
    assert str(entry.id) == data["audit_id"]
    assert entry.actor_id == shipper_principal.id


@pytest.mark.asyncio
async def test_illegal_transition_returns_422(client_as, make_principal, company_a, pending_quote):
    shipper = client_as(make_principal(Role.SHIPPER, company_id=company_a))
    response = await shipper.patch(
        f"/quotes/{pending_quote.id}/status", json={"status": "delivered"}
    )
    assert response.status_code == 422
    detail = response.json()["detail"]
    assert detail["error"] == "illegal_transition"
    assert detail["field"] == "status"
    assert detail["from"] == "pending"
    assert detail["to"] == "delivered"
    assert detail["message"]


@pytest.mark.asyncio
async def test_unknown_status_returns_422(client_as, make_principal, pending_quote):
    admin = client_as(make_principal(Role.ADMIN))
    response = await admin.patch(f"/quotes/{pending_quote.id}/status", json={"status": "Quote"})
    assert response.status_code == 422
    detail = response.json()["detail"]
    assert detail["error"] == "invalid_status"
    assert detail["from"] == "pending"
    assert detail["to"] == "Quote"


@pytest.mark.asyncio
async def test_empty_status_fails_validation(client_as, make_principal, pending_quote):
    admin = client_as(make_principal(Role.ADMIN))
    response = await admin.patch(f"/quotes/{pending_quote.id}/status", json={"status": ""})
    assert response.status_code == 422
    assert isinstance(response.json()["detail"], list)


@pytest.mark.asyncio
async def test_out_of_scope_change_is_forbidden_and_audited(
    client_as, make_principal, company_b, pending_quote, repo, sink
):
    sales = client_as(make_principal(Role.SALES_REP, assigned={company_b}))
    response = await sales.patch(
        f"/quotes/{pending_quote.id}/status", json={"status": "delivered"}
    )
    # Scope is checked before the edge, so the caller learns nothing about legality.
    assert response.status_code == 403
    assert response.json()["detail"] == {"error": "company_scope_violation"}
    assert repo.get(pending_quote.id).status is QuoteStatus.PENDING
    [entry] = sink.list_for_resource(pending_quote.id)
    assert entry.error_kind == "company_scope_violation"


@pytest.mark.asyncio
async def test_support_cannot_change_status(client_as, make_principal, pending_quote):
    support = client_as(make_principal(Role.SUPPORT))
    response = await support.patch(f"/quotes/{pending_quote.id}/status", json={"status": "quoted"})
    assert response.status_code == 403
    assert response.json()["detail"] == {"error": "forbidden"}


@pytest.mark.asyncio
async def test_change_missing_quote(client_as, make_principal):
    admin = client_as(make_principal(Role.ADMIN))
    response = await admin.patch("/quotes/nope/status", json={"status": "quoted"})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_stale_write_returns_409(client_as, make_principal, pending_quote, repo, monkeypatch):
    stale = repo.get(pending_quote.id)
    repo.compare_and_set_status(pending_quote.id, QuoteStatus.PENDING, QuoteStatus.QUOTED)
    monkeypatch.setattr(repo, "get", lambda quote_id: stale)

    admin = client_as(make_principal(Role.ADMIN))
    response = await admin.patch(f"/quotes/{pending_quote.id}/status", json={"status": "cancelled"})

    assert response.status_code == 409
    assert response.json()["detail"] == {
        "error": "stale_status",
        "field": "status",
        "expected": "pending",
    }


@pytest.mark.asyncio
async def test_change_broker_status(client_as, make_principal, company_a, pending_quote, repo):
    manager = client_as(make_principal(Role.MANAGER, assigned={company_a}))
    response = await manager.patch(
        f"/quotes/{pending_quote.id}/broker-status", json={"broker_status": "priced"}
    )
    assert response.status_code == 200
    assert response.json()["current"] == "priced"
    stored = repo.get(pending_quote.id)
    assert stored.broker_status.value == "priced"
    assert stored.status is QuoteStatus.PENDING


@pytest.mark.asyncio
async def test_broker_illegal_transition(client_as, make_principal, pending_quote):
    admin = client_as(make_principal(Role.ADMIN))
    response = await admin.patch(
        f"/quotes/{pending_quote.id}/broker-status", json={"broker_status": "picked_up"}
    )
    assert response.status_code == 422
    assert response.json()["detail"]["field"] == "broker_status"


# =============================================================================
# Audit history
# =============================================================================

@pytest.mark.asyncio
async def test_audit_history(client_as, make_principal, company_a, pending_quote):
    sales = client_as(make_principal(Role.SALES_REP, assigned={company_a}))
    await sales.patch(f"/quotes/{pending_quote.id}/status", json={"status": "quoted"})
    await sales.patch(f"/quotes/{pending_quote.id}/status", json={"status": "archived"})
    await sales.patch(f"/quotes/{pending_quote.id}/broker-status", json={"broker_status": "priced"})

    response = await sales.get(f"/quotes/{pending_quote.id}/audit")

    assert response.status_code == 200
    history = response.json()
    assert [h["event_type"] for h in history] == [
        "quote_status_changed",
        "quote_status_change_rejected",
        "quote_broker_status_changed",
    ]
    assert history[0]["new_status"] == "quoted"
    assert history[1]["outcome"] == "rejected"
    assert history[2]["new_broker_status"] == "priced"


@pytest.mark.asyncio
async def test_audit_history_out_of_scope(client_as, make_principal, company_b, pending_quote):
    sales = client_as(make_principal(Role.SALES_REP, assigned={company_b}))
    response = await sales.get(f"/quotes/{pending_quote.id}/audit")
    assert response.status_code == 403
