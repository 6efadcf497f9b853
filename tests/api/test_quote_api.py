"""
HTTP tests for the quote endpoints
"""

import pytest

from app.models.enums.quote_status import QuoteStatus
from tests.factories import actor_headers, quote_payload


@pytest.mark.api
@pytest.mark.asyncio
async def test_health_check(client):
    response = await client.get("/")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


@pytest.mark.api
class TestIdentity:

    @pytest.mark.asyncio
    async def test_missing_identity_is_401(self, client):
        response = await client.get("/quotes/")

        assert response.status_code == 401
        body = response.json()
        assert body["success"] is False
        assert body["error_code"] == "UNAUTHORIZED"

    @pytest.mark.asyncio
    async def test_supplier_cannot_create_quotes(self, client):
        response = await client.post("/quotes", json=quote_payload(), headers=actor_headers("supplier"))

        assert response.status_code == 403
        assert response.json()["error_code"] == "PERMISSION_DENIED"

    @pytest.mark.asyncio
    async def test_manager_cannot_register_proposals(self, client, make_quote):
        q = await make_quote(QuoteStatus.receiving, suppliers_sent_count=1)

        response = await client.post(f"/quotes/{q.id}/proposals", headers=actor_headers("manager"))

        assert response.status_code == 403


@pytest.mark.api
class TestQuoteEndpoints:

    @pytest.mark.asyncio
    async def test_create_and_fetch(self, client):
        headers = actor_headers()

        created = await client.post("/quotes", json=quote_payload(), headers=headers)
        assert created.status_code == 200
        data = created.json()["data"]
        assert data["status"] == "draft"
        assert data["status_label"] == "Rascunho"
        assert data["available_transitions"] == ["sent", "awaiting_visit", "cancelled"]

        fetched = await client.get(f"/quotes/{data['id']}", headers=headers)
        assert fetched.json()["data"]["quote_number"] == data["quote_number"]

    @pytest.mark.asyncio
    async def test_invalid_payload_is_422(self, client):
        response = await client.post("/quotes", json={"title": ""}, headers=actor_headers())

        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_list_with_unknown_status_is_400(self, client):
        response = await client.get("/quotes/", params={"status": "paid"}, headers=actor_headers())

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_missing_quote_is_404(self, client):
        response = await client.get("/quotes/999", headers=actor_headers())

        assert response.status_code == 404
        assert response.json()["error_code"] == "QUOTE_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_status_catalog(self, client):
        response = await client.get("/quotes/statuses", headers=actor_headers("client"))

        assert response.status_code == 200
        catalog = {item["value"]: item for item in response.json()["data"]}
        assert len(catalog) == len(QuoteStatus)
        assert catalog["under_review"]["label"] == "Em Análise"
        assert catalog["cancelled"]["terminal"] is True
        assert catalog["received"]["locked"] is False


@pytest.mark.api
class TestLifecycleEndpoints:

    @pytest.mark.asyncio
    async def test_valid_status_change(self, client, make_quote):
        q = await make_quote()

        response = await client.post(
            f"/quotes/{q.id}/status",
            json={"to_status": "sent", "version": 1},
            headers=actor_headers(),
        )

        assert response.status_code == 200
        assert response.json()["data"]["status"] == "sent"
        assert response.json()["data"]["version"] == 2

    @pytest.mark.asyncio
    async def test_invalid_status_change_is_409(self, client, make_quote):
        q = await make_quote()

        response = await client.post(
            f"/quotes/{q.id}/status",
            json={"to_status": "approved", "version": 1},
            headers=actor_headers(),
        )

        assert response.status_code == 409
        body = response.json()
        assert body["error_code"] == "QUOTE_INVALID_TRANSITION"
        assert body["message"] == "This action is not permitted on a quote in its current status"
        assert body["details"] == {"from_status": "draft", "to_status": "approved"}

    @pytest.mark.asyncio
    async def test_unknown_target_status_is_422(self, client, make_quote):
        q = await make_quote()

        response = await client.post(
            f"/quotes/{q.id}/status",
            json={"to_status": "paid", "version": 1},
            headers=actor_headers(),
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_stale_version_is_409(self, client, make_quote):
        q = await make_quote()

        response = await client.post(
            f"/quotes/{q.id}/status",
            json={"to_status": "sent", "version": 3},
            headers=actor_headers(),
        )

        assert response.status_code == 409
        assert response.json()["error_code"] == "QUOTE_VERSION_CONFLICT"

    @pytest.mark.asyncio
    async def test_transitions_and_history(self, client, make_quote):
        q = await make_quote(QuoteStatus.received)
        headers = actor_headers()

        transitions = await client.get(f"/quotes/{q.id}/transitions", headers=headers)
        assert transitions.json()["data"]["available_transitions"] == [
            "ai_analyzing",
            "pending_approval",
            "under_review",
            "approved",
            "rejected",
        ]

        approved = await client.post(f"/quotes/{q.id}/approve", json={"version": 1}, headers=headers)
        assert approved.status_code == 200
        assert approved.json()["data"]["locked"] is True

        history = await client.get(f"/quotes/{q.id}/history", headers=headers)
        entries = history.json()["data"]
        assert [(e["from_status"], e["to_status"]) for e in entries] == [("received", "approved")]

    @pytest.mark.asyncio
    async def test_supplier_proposals_close_collection(self, client, make_quote):
        q = await make_quote(QuoteStatus.receiving, suppliers_sent_count=1)

        response = await client.post(
            f"/quotes/{q.id}/proposals",
            headers=actor_headers("supplier", user_id="sup-9", name="fornecedor@empresa.test"),
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "received"
        assert data["responses_count"] == 1
