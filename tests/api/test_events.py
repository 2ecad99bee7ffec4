"""Tests for event API endpoints."""

import pytest
from httpx import AsyncClient

from tourney.models import Event, EventStatus
from tests.conftest import make_event_data


class TestListEvents:
    """Tests for GET /api/v1/events"""

    @pytest.mark.asyncio
    async def test_list_events_empty(self, test_client: AsyncClient):
        response = await test_client.get("/api/v1/events")

        assert response.status_code == 200
        assert response.json() == {"events": []}

    @pytest.mark.asyncio
    async def test_list_events_hides_drafts(self, test_client: AsyncClient, create_event):
        """Draft events are not publicly listed."""
        published = await create_event(title="Published Cup")
        await create_event(title="Secret Draft", status=EventStatus.DRAFT.value)

        response = await test_client.get("/api/v1/events")

        assert response.status_code == 200
        ids = [e["id"] for e in response.json()["events"]]
        assert ids == [published.id]


class TestGetEvent:
    """Tests for GET /api/v1/events/{id}"""

    @pytest.mark.asyncio
    async def test_get_event(self, test_client: AsyncClient, create_event):
        event = await create_event(max_teams=16)

        response = await test_client.get(f"/api/v1/events/{event.id}")

        assert response.status_code == 200
        result = response.json()
        assert result["id"] == event.id
        assert result["max_teams"] == 16
        assert result["current_teams"] == 0
        assert result["status"] == "published"

    @pytest.mark.asyncio
    async def test_get_event_not_found(self, test_client: AsyncClient):
        response = await test_client.get("/api/v1/events/does-not-exist")

        assert response.status_code == 404
        result = response.json()
        assert result["error"]["code"] == "NOT_FOUND"
        assert "traceId" in result

    @pytest.mark.asyncio
    async def test_draft_hidden_from_outsiders(
        self,
        test_client: AsyncClient,
        create_event,
        player_headers: dict,
        other_organizer_headers: dict,
    ):
        event = await create_event(status=EventStatus.DRAFT.value)

        for headers in ({}, player_headers, other_organizer_headers):
            response = await test_client.get(f"/api/v1/events/{event.id}", headers=headers)
            assert response.status_code == 404

        response = await test_client.get(f"/api/v1/events/{event.id}/bracket")
        assert response.status_code == 404

        response = await test_client.get(f"/api/v1/events/{event.id}/participants")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_draft_visible_to_owner_and_admin(
        self,
        test_client: AsyncClient,
        create_event,
        organizer_headers: dict,
        admin_headers: dict,
    ):
        event = await create_event(status=EventStatus.DRAFT.value)

        for headers in (organizer_headers, admin_headers):
            response = await test_client.get(f"/api/v1/events/{event.id}", headers=headers)
            assert response.status_code == 200
            assert response.json()["status"] == "draft"

        response = await test_client.get(
            f"/api/v1/events/{event.id}/bracket", headers=organizer_headers
        )
        assert response.status_code == 200
        assert response.json()["rounds"] == 0

        assert "traceId" in result


class TestCreateEvent:
    """Tests for POST /api/v1/events"""

    @pytest.mark.asyncio
    async def test_create_event_success(
        self, test_client: AsyncClient, organizer_headers: dict
    ):
        response = await test_client.post(
            "/api/v1/events",
            json=make_event_data(),
            headers=organizer_headers,
        )

        assert response.status_code == 201
        result = response.json()
        assert result["message"] == "Event created successfully"
        event = result["event"]
        assert event["organizer_id"] == "org-1"
        assert event["status"] == "published"
        assert event["current_teams"] == 0
        assert event["bracket_type"] == "single_elimination"

    @pytest.mark.asyncio
    async def test_create_event_requires_auth(self, test_client: AsyncClient):
        response = await test_client.post("/api/v1/events", json=make_event_data())

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "AUTH_REQUIRED"

    @pytest.mark.asyncio
    async def test_create_event_invalid_token(
        self, test_client: AsyncClient, invalid_auth_headers: dict
    ):
        response = await test_client.post(
            "/api/v1/events",
            json=make_event_data(),
            headers=invalid_auth_headers,
        )

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "AUTH_INVALID_TOKEN"

    @pytest.mark.asyncio
    async def test_create_event_player_forbidden(
        self, test_client: AsyncClient, player_headers: dict
    ):
        response = await test_client.post(
            "/api/v1/events",
            json=make_event_data(),
            headers=player_headers,
        )

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "FORBIDDEN"

    @pytest.mark.asyncio
    async def test_create_event_end_before_start(
        self, test_client: AsyncClient, organizer_headers: dict
    ):
        data = make_event_data()
        data["end_time"], data["start_time"] = data["start_time"], data["end_time"]

        response = await test_client.post("/api/v1/events", json=data, headers=organizer_headers)

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_create_event_past_start(
        self, test_client: AsyncClient, organizer_headers: dict
    ):
        data = make_event_data(
            start_time="2020-01-01T10:00:00Z",
            end_time="2020-01-01T12:00:00Z",
        )

        response = await test_client.post("/api/v1/events", json=data, headers=organizer_headers)

        assert response.status_code == 400
        result = response.json()
        assert result["error"]["code"] == "VALIDATION_ERROR"
        assert "start_time" in result["error"]["details"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("max_teams", [1, 129, "8"])
    async def test_create_event_bad_capacity(
        self, test_client: AsyncClient, organizer_headers: dict, max_teams
    ):
        response = await test_client.post(
            "/api/v1/events",
            json=make_event_data(max_teams=max_teams),
            headers=organizer_headers,
        )

        assert response.status_code == 400
        assert "max_teams" in response.json()["error"]["details"]

    @pytest.mark.asyncio
    async def test_create_event_short_title(
        self, test_client: AsyncClient, organizer_headers: dict
    ):
        response = await test_client.post(
            "/api/v1/events",
            json=make_event_data(title="Cup"),
            headers=organizer_headers,
        )

        assert response.status_code == 400
        assert "title" in response.json()["error"]["details"]

    @pytest.mark.asyncio
    async def test_create_event_bad_checkout_url(
        self, test_client: AsyncClient, organizer_headers: dict
    ):
        response = await test_client.post(
            "/api/v1/events",
            json=make_event_data(organizer_checkout_url="not a url"),
            headers=organizer_headers,
        )

        assert response.status_code == 400
        assert "organizer_checkout_url" in response.json()["error"]["details"]


class TestUpdateEvent:
    """Tests for PATCH /api/v1/events/{id}"""

    @pytest.mark.asyncio
    async def test_update_event_by_owner(
        self, test_client: AsyncClient, organizer_headers: dict, create_event
    ):
        event = await create_event()

        response = await test_client.patch(
            f"/api/v1/events/{event.id}",
            json={"title": "Renamed Championship", "max_teams": 16},
            headers=organizer_headers,
        )

        assert response.status_code == 200
        result = response.json()
        assert result["message"] == "Event updated successfully"
        assert result["event"]["title"] == "Renamed Championship"
        assert result["event"]["max_teams"] == 16
        assert result["event"]["game"] == "Chess"

    @pytest.mark.asyncio
    async def test_update_event_by_other_organizer(
        self, test_client: AsyncClient, other_organizer_headers: dict, create_event
    ):
        event = await create_event()

        response = await test_client.patch(
            f"/api/v1/events/{event.id}",
            json={"title": "Hijacked Event"},
            headers=other_organizer_headers,
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_update_event_by_admin(
        self, test_client: AsyncClient, admin_headers: dict, create_event
    ):
        event = await create_event()

        response = await test_client.patch(
            f"/api/v1/events/{event.id}",
            json={"status": "live"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["event"]["status"] == "live"

    @pytest.mark.asyncio
    async def test_update_event_unknown_field(
        self, test_client: AsyncClient, organizer_headers: dict, create_event
    ):
        event = await create_event()

        response = await test_client.patch(
            f"/api/v1/events/{event.id}",
            json={"current_teams": 100},
            headers=organizer_headers,
        )

        assert response.status_code == 400


class TestDeleteEvent:
    """Tests for DELETE /api/v1/events/{id}"""

    @pytest.mark.asyncio
    async def test_delete_event(
        self, test_client: AsyncClient, organizer_headers: dict, create_event, create_ticket
    ):
        event = await create_event()
        await create_ticket(event, "player-1")

        response = await test_client.delete(
            f"/api/v1/events/{event.id}", headers=organizer_headers
        )

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Event deleted successfully"}

        response = await test_client.get(f"/api/v1/events/{event.id}")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_delete_event_forbidden(
        self, test_client: AsyncClient, player_headers: dict, create_event
    ):
        event = await create_event()

        response = await test_client.delete(
            f"/api/v1/events/{event.id}", headers=player_headers
        )

        assert response.status_code == 403


class TestJoinEvent:
    """Tests for POST /api/v1/events/{id}/join"""

    @pytest.mark.asyncio
    async def test_join_free_event(
        self, test_client: AsyncClient, player_headers: dict, create_event
    ):
        event = await create_event()

        response = await test_client.post(
            f"/api/v1/events/{event.id}/join", headers=player_headers
        )

        assert response.status_code == 201
        result = response.json()
        assert result["message"] == "Successfully registered for event"
        assert result["ticket"]["participant_id"] == "player-1"
        assert result["ticket"]["status"] == "pending"
        assert result["ticket"]["amount"] is None
        assert result["ticket"]["external_payment_ref"].startswith("pending_")
        assert result["checkout_url"] is None

        response = await test_client.get(f"/api/v1/events/{event.id}")
        assert response.json()["current_teams"] == 1

    @pytest.mark.asyncio
    async def test_join_paid_event_returns_checkout(
        self, test_client: AsyncClient, player_headers: dict, create_event
    ):
        event = await create_event(organizer_checkout_url="https://pay.example.com/cup")

        response = await test_client.post(
            f"/api/v1/events/{event.id}/join", headers=player_headers
        )

        assert response.status_code == 201
        result = response.json()
        assert result["checkout_url"] == "https://pay.example.com/cup"
        assert result["ticket"]["amount"] == "25.00"

    @pytest.mark.asyncio
    async def test_join_twice(
        self, test_client: AsyncClient, player_headers: dict, create_event
    ):
        event = await create_event()
        await test_client.post(f"/api/v1/events/{event.id}/join", headers=player_headers)

        response = await test_client.post(
            f"/api/v1/events/{event.id}/join", headers=player_headers
        )

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "ALREADY_REGISTERED"

        # The rejected attempt must not hold a seat
        response = await test_client.get(f"/api/v1/events/{event.id}")
        assert response.json()["current_teams"] == 1

    @pytest.mark.asyncio
    async def test_join_full_event(
        self, test_client: AsyncClient, player_headers: dict, create_event
    ):
        event = await create_event(max_teams=2, current_teams=2)

        response = await test_client.post(
            f"/api/v1/events/{event.id}/join", headers=player_headers
        )

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "EVENT_FULL"

    @pytest.mark.asyncio
    async def test_join_draft_event(
        self, test_client: AsyncClient, player_headers: dict, create_event
    ):
        event = await create_event(status=EventStatus.DRAFT.value)

        response = await test_client.post(
            f"/api/v1/events/{event.id}/join", headers=player_headers
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_STATE"

    @pytest.mark.asyncio
    async def test_join_unknown_event(self, test_client: AsyncClient, player_headers: dict):
        response = await test_client.post(
            "/api/v1/events/missing/join", headers=player_headers
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_join_requires_auth(self, test_client: AsyncClient, create_event):
        event = await create_event()

        response = await test_client.post(f"/api/v1/events/{event.id}/join")

        assert response.status_code == 401


class TestParticipants:
    """Tests for GET /api/v1/events/{id}/participants"""

    @pytest.mark.asyncio
    async def test_list_participants(
        self,
        test_client: AsyncClient,
        player_headers: dict,
        player2_headers: dict,
        create_event,
    ):
        event: Event = await create_event()
        await test_client.post(f"/api/v1/events/{event.id}/join", headers=player_headers)
        await test_client.post(f"/api/v1/events/{event.id}/join", headers=player2_headers)

        response = await test_client.get(f"/api/v1/events/{event.id}/participants")

        assert response.status_code == 200
        result = response.json()
        assert result["event_id"] == event.id
        assert {p["participant_id"] for p in result["participants"]} == {
            "player-1",
            "player-2",
        }
        assert "external_payment_ref" not in result["participants"][0]
