"""Tests for API routes."""

from uuid import uuid4

from fastapi.testclient import TestClient
from sqlmodel import Session

from planner.models import Event, Room, User
from planner.services import content, participants


class TestHealthEndpoint:
    """Tests for the health check endpoint."""

    def test_health_check(self, client: TestClient):
        """Test the health endpoint returns OK."""
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"


class TestAuthentication:
    """Tests for identity resolution on every route."""

    def test_missing_header(self, client: TestClient):
        response = client.get("/events")
        assert response.status_code == 401
        assert response.json() == {
            "error": "unauthorized",
            "message": "Unauthorized: No authenticated user",
        }

    def test_malformed_id(self, client: TestClient):
        response = client.get("/events", headers={"X-User-Id": "not-a-uuid"})
        assert response.status_code == 401

    def test_unknown_user(self, client: TestClient):
        response = client.get("/events", headers={"X-User-Id": str(uuid4())})
        assert response.status_code == 401
        assert response.json()["message"] == "Unauthorized: Unknown user"

    def test_inactive_user(self, client: TestClient, make_user, auth):
        inactive = make_user("Ina", is_active=False)
        response = client.get("/events", headers=auth(inactive))
        assert response.status_code == 401
        assert response.json()["message"] == "Account is inactive"


class TestEventRoutes:
    """Tests for event routes."""

    def test_create_event(self, client: TestClient, coordinator: User, auth):
        """Test creating an event makes the caller coordinator and opens a main room."""
        response = client.post(
            "/events",
            json={"name": "Launch Party", "type": "corporate", "expected_guests": 80},
            headers=auth(coordinator),
        )
        assert response.status_code == 201
        data = response.json()
        assert data["coordinator_id"] == str(coordinator.id)
        assert data["status"] == "planning"

        rooms = client.get(f"/events/{data['id']}/rooms", headers=auth(coordinator)).json()
        assert [r["type"] for r in rooms] == ["main"]
        assert rooms[0]["name"] == "Launch Party - Main Chat"

    def test_list_events(self, client: TestClient, event: Event, coordinator: User, auth):
        response = client.get("/events", headers=auth(coordinator))
        assert response.status_code == 200
        assert [e["id"] for e in response.json()] == [str(event.id)]

    def test_stranger_forbidden(self, client: TestClient, event: Event, stranger: User, auth):
        response = client.get(f"/events/{event.id}", headers=auth(stranger))
        assert response.status_code == 403
        assert response.json()["error"] == "forbidden"

    def test_missing_event(self, client: TestClient, coordinator: User, auth):
        response = client.get(f"/events/{uuid4()}", headers=auth(coordinator))
        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    def test_update_event(self, client: TestClient, event: Event, coordinator: User, auth):
        response = client.patch(
            f"/events/{event.id}", json={"budget_total": 15000}, headers=auth(coordinator)
        )
        assert response.status_code == 200
        assert response.json()["budget_total"] == 15000

    def test_archive_event(self, client: TestClient, event: Event, coordinator: User, auth):
        response = client.post(f"/events/{event.id}/archive", headers=auth(coordinator))
        assert response.status_code == 200
        assert response.json()["status"] == "archived"

    def test_delete_event_cascades(
        self,
        client: TestClient,
        session: Session,
        event: Event,
        topic_room: Room,
        coordinator: User,
        auth,
    ):
        """Test deleting an event hides it and everything it owns."""
        content.create_task(session, event.id, coordinator.id, "Book venue")
        content.create_poll(session, event.id, coordinator.id, "Date?", ["Friday", "Saturday"])

        response = client.delete(f"/events/{event.id}", headers=auth(coordinator))
        assert response.status_code == 200
        deleted = response.json()["deleted"]
        assert deleted["event"] == 1
        assert deleted["room"] == 2
        assert deleted["task"] == 1
        assert deleted["poll"] == 1

        assert client.get(f"/events/{event.id}", headers=auth(coordinator)).status_code == 404
        assert client.get(f"/rooms/{topic_room.id}", headers=auth(coordinator)).status_code == 404
        assert client.get(f"/events/{event.id}/tasks", headers=auth(coordinator)).status_code == 404
        assert client.get(f"/events/{event.id}/polls", headers=auth(coordinator)).status_code == 404
        assert client.get("/events", headers=auth(coordinator)).json() == []

    def test_delete_event_twice(self, client: TestClient, event: Event, coordinator: User, auth):
        client.delete(f"/events/{event.id}", headers=auth(coordinator))

        response = client.delete(f"/events/{event.id}", headers=auth(coordinator))
        assert response.status_code == 409
        assert response.json()["error"] == "conflict"

    def test_co_coordinator_cannot_delete(
        self, client: TestClient, event: Event, coordinator: User, co_coordinator: User, auth
    ):
        client.post(
            f"/events/{event.id}/co-coordinators",
            json={"user_id": str(co_coordinator.id)},
            headers=auth(coordinator),
        )

        response = client.delete(f"/events/{event.id}", headers=auth(co_coordinator))
        assert response.status_code == 403

    def test_stats(self, client: TestClient, event: Event, coordinator: User, auth):
        response = client.get(f"/events/{event.id}/stats", headers=auth(coordinator))
        assert response.status_code == 200
        assert response.json()["rooms"] == 1


class TestRoomRoutes:
    """Tests for room routes."""

    def test_vendor_room_requires_vendor(
        self, client: TestClient, event: Event, coordinator: User, auth
    ):
        response = client.post(
            f"/events/{event.id}/rooms",
            json={"name": "Florist", "type": "vendor"},
            headers=auth(coordinator),
        )
        assert response.status_code == 422
        assert response.json()["error"] == "validation"

    def test_main_room_cannot_be_deleted(
        self, client: TestClient, main_room: Room, coordinator: User, auth
    ):
        response = client.delete(f"/rooms/{main_room.id}", headers=auth(coordinator))
        assert response.status_code == 409
        assert response.json()["message"] == "Cannot delete the main room"

    def test_delete_room(self, client: TestClient, topic_room: Room, coordinator: User, auth):
        response = client.delete(f"/rooms/{topic_room.id}", headers=auth(coordinator))
        assert response.status_code == 200
        assert response.json()["deleted"]["room"] == 1

    def test_participant_sees_own_permissions(
        self,
        client: TestClient,
        session: Session,
        topic_room: Room,
        coordinator: User,
        guest: User,
        auth,
    ):
        participants.add_participant(session, topic_room.id, coordinator.id, guest.id)

        response = client.get(f"/rooms/{topic_room.id}/participants/me", headers=auth(guest))
        assert response.status_code == 200
        assert response.json() == {
            "can_post": True,
            "can_edit": True,
            "can_delete": False,
            "can_manage": False,
        }


class TestParticipantRoutes:
    """Tests for participant routes."""

    def test_add_and_list(
        self, client: TestClient, topic_room: Room, coordinator: User, guest: User, auth
    ):
        response = client.post(
            f"/rooms/{topic_room.id}/participants",
            json={"user_id": str(guest.id), "can_delete": True},
            headers=auth(coordinator),
        )
        assert response.status_code == 201
        assert response.json()["can_delete"] is True
        assert response.json()["can_post"] is True

        listed = client.get(f"/rooms/{topic_room.id}/participants", headers=auth(guest)).json()
        assert {p["user_id"] for p in listed} == {str(coordinator.id), str(guest.id)}

    def test_last_manager_cannot_leave(
        self,
        client: TestClient,
        session: Session,
        event: Event,
        coordinator: User,
        co_coordinator: User,
        guest: User,
        auth,
    ):
        """Test the only explicit manager of a room is kept."""
        client.post(
            f"/events/{event.id}/co-coordinators",
            json={"user_id": str(co_coordinator.id)},
            headers=auth(coordinator),
        )
        room = client.post(
            f"/events/{event.id}/rooms", json={"name": "Music"}, headers=auth(co_coordinator)
        ).json()

        response = client.post(
            f"/rooms/{room['id']}/participants/leave", headers=auth(co_coordinator)
        )
        assert response.status_code == 409
        assert response.json() == {
            "error": "conflict",
            "message": "Cannot remove the last manager from the room",
        }

    def test_non_manager_cannot_add(
        self,
        client: TestClient,
        session: Session,
        topic_room: Room,
        coordinator: User,
        guest: User,
        stranger: User,
        auth,
    ):
        participants.add_participant(session, topic_room.id, coordinator.id, guest.id)

        response = client.post(
            f"/rooms/{topic_room.id}/participants",
            json={"user_id": str(stranger.id)},
            headers=auth(guest),
        )
        assert response.status_code == 403

    def test_bulk_add(
        self, client: TestClient, topic_room: Room, coordinator: User, guest: User, auth
    ):
        response = client.post(
            f"/rooms/{topic_room.id}/participants/bulk",
            json={"user_ids": [str(guest.id), str(coordinator.id)]},
            headers=auth(coordinator),
        )
        assert response.status_code == 200
        assert response.json()["added"] == 1
        assert response.json()["skipped"] == 1


class TestMessageRoutes:
    """Tests for message routes."""

    def test_post_and_read(self, client: TestClient, main_room: Room, coordinator: User, auth):
        response = client.post(
            f"/rooms/{main_room.id}/messages", json={"text": "Hello all"}, headers=auth(coordinator)
        )
        assert response.status_code == 201
        message_id = response.json()["id"]

        listed = client.get(f"/rooms/{main_room.id}/messages", headers=auth(coordinator)).json()
        assert [m["id"] for m in listed] == [message_id]

    def test_delete_redacts(self, client: TestClient, main_room: Room, coordinator: User, auth):
        message_id = client.post(
            f"/rooms/{main_room.id}/messages", json={"text": "Oops"}, headers=auth(coordinator)
        ).json()["id"]

        response = client.delete(f"/messages/{message_id}", headers=auth(coordinator))
        assert response.status_code == 200
        assert response.json()["text"] == "[Message deleted]"
        assert response.json()["is_deleted"] is True

    def test_stranger_cannot_read(
        self, client: TestClient, main_room: Room, stranger: User, auth
    ):
        response = client.get(f"/rooms/{main_room.id}/messages", headers=auth(stranger))
        assert response.status_code == 403


class TestInvitationRoutes:
    """Tests for the invitation flow."""

    def test_invite_and_accept(
        self, client: TestClient, event: Event, main_room: Room, coordinator: User, make_user, auth
    ):
        invitee = make_user("Nora", email="nora@example.com")
        response = client.post(
            f"/events/{event.id}/invitations",
            json={"invited_email": "nora@example.com", "role": "guest"},
            headers=auth(coordinator),
        )
        assert response.status_code == 201
        token = response.json()["token"]

        mine = client.get("/invitations/mine", headers=auth(invitee)).json()
        assert [i["token"] for i in mine] == [token]

        accepted = client.post(f"/invitations/{token}/accept", headers=auth(invitee))
        assert accepted.status_code == 200
        assert accepted.json()["status"] == "accepted"

        assert client.get(f"/events/{event.id}", headers=auth(invitee)).status_code == 200
        assert client.get(f"/rooms/{main_room.id}", headers=auth(invitee)).status_code == 200

    def test_wrong_user_cannot_accept(
        self, client: TestClient, event: Event, coordinator: User, stranger: User, auth
    ):
        token = client.post(
            f"/events/{event.id}/invitations",
            json={"invited_email": "other@example.com"},
            headers=auth(coordinator),
        ).json()["token"]

        response = client.post(f"/invitations/{token}/accept", headers=auth(stranger))
        assert response.status_code == 403

    def test_unknown_token(self, client: TestClient, stranger: User, auth):
        response = client.post("/invitations/nope/accept", headers=auth(stranger))
        assert response.status_code == 404

    def test_duplicate_pending(self, client: TestClient, event: Event, coordinator: User, auth):
        body = {"invited_email": "twice@example.com"}
        client.post(f"/events/{event.id}/invitations", json=body, headers=auth(coordinator))

        response = client.post(
            f"/events/{event.id}/invitations", json=body, headers=auth(coordinator)
        )
        assert response.status_code == 409
