"""Tests for the payment webhook and ticket listing endpoints."""

from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import AsyncClient

from tourney.config import get_settings

WEBHOOK_URL = "/api/v1/webhooks/payment"


@pytest.fixture
def webhook_headers() -> dict[str, str]:
    return {"X-Webhook-Secret": get_settings().payment_webhook_secret}


@pytest_asyncio.fixture
async def pending_ticket(create_event, create_ticket):
    event = await create_event(organizer_checkout_url="https://pay.example.com/cup")
    return await create_ticket(
        event,
        "player-1",
        amount=Decimal("25.00"),
        external_payment_ref="pi_3Nabc123",
    )


class TestPaymentWebhook:
    """Tests for POST /api/v1/webhooks/payment"""

    @pytest.mark.asyncio
    async def test_completed_payment_marks_ticket_paid(
        self,
        test_client: AsyncClient,
        webhook_headers: dict,
        player_headers: dict,
        pending_ticket,
    ):
        response = await test_client.post(
            WEBHOOK_URL,
            json={"external_payment_ref": "pi_3Nabc123", "status": "completed"},
            headers=webhook_headers,
        )

        assert response.status_code == 200
        result = response.json()
        assert result["success"] is True
        assert result["message"] == "Payment processed successfully"
        assert result["ticket_id"] == pending_ticket.id
        assert result["status"] == "paid"
        assert result["processed_at"] is not None

        response = await test_client.get("/api/v1/tickets", headers=player_headers)
        ticket = response.json()["tickets"][0]
        assert ticket["status"] == "paid"
        assert ticket["paid_at"] is not None

    @pytest.mark.asyncio
    async def test_replayed_payment_is_idempotent(
        self, test_client: AsyncClient, webhook_headers: dict, pending_ticket
    ):
        payload = {"external_payment_ref": "pi_3Nabc123", "status": "completed"}
        first = await test_client.post(WEBHOOK_URL, json=payload, headers=webhook_headers)

        second = await test_client.post(WEBHOOK_URL, json=payload, headers=webhook_headers)

        assert second.status_code == 200
        result = second.json()
        assert result["message"] == "Payment already processed"
        assert result["status"] == "paid"
        assert result["processed_at"] is not None
        assert first.json()["ticket_id"] == result["ticket_id"]

    @pytest.mark.asyncio
    async def test_non_completed_status_is_acknowledged(
        self,
        test_client: AsyncClient,
        webhook_headers: dict,
        player_headers: dict,
        pending_ticket,
    ):
        response = await test_client.post(
            WEBHOOK_URL,
            json={"external_payment_ref": "pi_3Nabc123", "status": "failed"},
            headers=webhook_headers,
        )

        assert response.status_code == 200
        result = response.json()
        assert result["message"] == "Payment status received"
        assert result["status"] == "failed"

        response = await test_client.get("/api/v1/tickets", headers=player_headers)
        assert response.json()["tickets"][0]["status"] == "pending"

    @pytest.mark.asyncio
    async def test_missing_secret(self, test_client: AsyncClient, pending_ticket):
        response = await test_client.post(
            WEBHOOK_URL,
            json={"external_payment_ref": "pi_3Nabc123", "status": "completed"},
        )

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "UNAUTHORIZED"

    @pytest.mark.asyncio
    async def test_wrong_secret(
        self, test_client: AsyncClient, player_headers: dict, pending_ticket
    ):
        response = await test_client.post(
            WEBHOOK_URL,
            json={"external_payment_ref": "pi_3Nabc123", "status": "completed"},
            headers={"X-Webhook-Secret": "definitely-not-the-secret"},
        )

        assert response.status_code == 401

        response = await test_client.get("/api/v1/tickets", headers=player_headers)
        assert response.json()["tickets"][0]["status"] == "pending"

    @pytest.mark.asyncio
    async def test_wrong_secret_with_invalid_body(self, test_client: AsyncClient):
        response = await test_client.post(
            WEBHOOK_URL,
            json={"external_payment_ref": ["x"], "status": 5},
            headers={"X-Webhook-Secret": "definitely-not-the-secret"},
        )

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "UNAUTHORIZED"

    @pytest.mark.asyncio
    async def test_valid_secret_with_invalid_body(
        self, test_client: AsyncClient, webhook_headers: dict
    ):
        response = await test_client.post(
            WEBHOOK_URL,
            json={"external_payment_ref": ["x"], "status": 5},
            headers=webhook_headers,
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_missing_reference(self, test_client: AsyncClient, webhook_headers: dict):
        response = await test_client.post(
            WEBHOOK_URL,
            json={"status": "completed"},
            headers=webhook_headers,
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "BAD_REQUEST"

    @pytest.mark.asyncio
    async def test_unknown_reference(self, test_client: AsyncClient, webhook_headers: dict):
        response = await test_client.post(
            WEBHOOK_URL,
            json={"external_payment_ref": "pi_unknown", "status": "completed"},
            headers=webhook_headers,
        )

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "NOT_FOUND"

    @pytest.mark.asyncio
    async def test_extra_provider_fields_are_accepted(
        self, test_client: AsyncClient, webhook_headers: dict, pending_ticket
    ):
        response = await test_client.post(
            WEBHOOK_URL,
            json={
                "external_payment_ref": "pi_3Nabc123",
                "status": "completed",
                "amount": 2500,
                "currency": "usd",
                "livemode": False,
            },
            headers=webhook_headers,
        )

        assert response.status_code == 200


class TestListTickets:
    """Tests for GET /api/v1/tickets"""

    @pytest.mark.asyncio
    async def test_list_own_tickets(
        self, test_client: AsyncClient, player_headers: dict, create_event, create_ticket
    ):
        event = await create_event(title="Spring Open", game="Tekken 8")
        await create_ticket(event, "player-1")
        await create_ticket(event, "player-2")

        response = await test_client.get("/api/v1/tickets", headers=player_headers)

        assert response.status_code == 200
        tickets = response.json()["tickets"]
        assert len(tickets) == 1
        assert tickets[0]["participant_id"] == "player-1"
        assert tickets[0]["event_title"] == "Spring Open"
        assert tickets[0]["event_game"] == "Tekken 8"

    @pytest.mark.asyncio
    async def test_list_other_users_tickets_forbidden(
        self, test_client: AsyncClient, player_headers: dict
    ):
        response = await test_client.get(
            "/api/v1/tickets",
            params={"user_id": "player-2"},
            headers=player_headers,
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_admin_lists_other_users_tickets(
        self, test_client: AsyncClient, admin_headers: dict, create_event, create_ticket
    ):
        event = await create_event()
        await create_ticket(event, "player-2")

        response = await test_client.get(
            "/api/v1/tickets",
            params={"user_id": "player-2"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert [t["participant_id"] for t in response.json()["tickets"]] == ["player-2"]

    @pytest.mark.asyncio
    async def test_list_tickets_requires_auth(self, test_client: AsyncClient):
        response = await test_client.get("/api/v1/tickets")

        assert response.status_code == 401
