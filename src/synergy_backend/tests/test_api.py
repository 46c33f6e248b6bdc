"""Tests for the REST API: auth, users, projects, join requests, history and health."""

import asyncio
import time

import httpx
import pytest

from synergy_backend.tests.conftest import TEST_PASSWORD, auth_headers


def _register(client, email="dana@example.com", **overrides):
    payload = {
        "name": "Dana",
        "email": email,
        "password": "dana-password-1",
        "college": "MIT",
        "skills": ["ml", "python"],
    }
    payload.update(overrides)
    return client.post("/api/auth/register", json=payload)


@pytest.mark.integration
class TestAuth:

    def test_register_creates_user(self, client):
        response = _register(client)

        assert response.status_code == 201
        data = response.json()
        assert data["email"] == "dana@example.com"
        assert data["skills"] == ["ml", "python"]
        assert "_id" in data
        assert "password" not in data

    def test_register_duplicate_email(self, client):
        _register(client)
        response = _register(client)

        assert response.status_code == 409
        assert response.json()["error_code"] == "CONFLICT_001"
        assert response.json()["message"] == "User already exists"

    def test_register_validation_error(self, client):
        response = _register(client, email="not-an-email", password="short")

        assert response.status_code == 400
        body = response.json()
        assert body["error_code"] == "VAL_001"
        fields = {error["field"] for error in body["details"]["validation_errors"]}
        assert {"email", "password"} <= fields

    def test_login_returns_token(self, client, token_service, seeded):
        response = client.post("/api/auth/login", json={"email": "bob@example.com", "password": TEST_PASSWORD})

        assert response.status_code == 200
        data = response.json()
        assert data["tokenType"] == "Bearer"
        assert data["expiresIn"] == 3600
        assert data["user"]["_id"] == seeded.bob
        assert token_service.decode_subject(data["token"]) == seeded.bob

    def test_registered_user_can_log_in(self, client):
        _register(client)
        response = client.post("/api/auth/login", json={"email": "dana@example.com", "password": "dana-password-1"})
        assert response.status_code == 200

    @pytest.mark.parametrize("email,password", [
        ("bob@example.com", "wrong-password"),
        ("nobody@example.com", TEST_PASSWORD),
    ])
    def test_login_rejects_bad_credentials(self, client, email, password):
        response = client.post("/api/auth/login", json={"email": email, "password": password})

        assert response.status_code == 401
        assert response.json()["error_code"] == "AUTH_003"

    @pytest.mark.asyncio
    async def test_login_does_not_block_event_loop(self, app, seeded):
        gaps = []
        running = True

        async def ticker():
            last = time.perf_counter()
            while running:
                await asyncio.sleep(0.005)
                now = time.perf_counter()
                gaps.append(now - last)
                last = now

        tick_task = asyncio.create_task(ticker())
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as http:
            responses = [
                await http.post("/api/auth/login", json={"email": "bob@example.com", "password": TEST_PASSWORD})
                for _ in range(3)
            ]
        running = False
        await tick_task

        assert [r.status_code for r in responses] == [200, 200, 200]
        assert gaps
        assert max(gaps) < 0.05


@pytest.mark.integration
class TestCurrentUser:

    def test_me_with_bearer_token(self, client, tokens, seeded):
        response = client.get("/api/users/me", headers=auth_headers(tokens.carol))

        assert response.status_code == 200
        assert response.json()["_id"] == seeded.carol
        assert response.json()["college"] == "TU Wien"

    def test_me_with_legacy_header(self, client, tokens, seeded):
        response = client.get("/api/users/me", headers={"x-auth-token": tokens.alice})

        assert response.status_code == 200
        assert response.json()["_id"] == seeded.alice

    def test_me_without_token(self, client):
        response = client.get("/api/users/me")

        assert response.status_code == 401
        assert response.json()["error_code"] == "AUTH_001"
        assert response.headers["www-authenticate"] == "Bearer"

    def test_me_with_invalid_token(self, client):
        response = client.get("/api/users/me", headers=auth_headers("garbage"))

        assert response.status_code == 401
        assert response.json()["error_code"] == "AUTH_002"

    def test_me_for_deleted_user(self, client, token_service):
        response = client.get("/api/users/me", headers=auth_headers(token_service.issue("u-ghost")))

        assert response.status_code == 404
        assert response.json()["error_code"] == "NF_002"


@pytest.mark.integration
class TestProjects:

    def test_list_projects(self, client, seeded):
        response = client.get("/api/projects")

        assert response.status_code == 200
        assert {p["_id"] for p in response.json()} == {seeded.project, seeded.other_project}

    def test_create_project(self, client, tokens, seeded):
        response = client.post("/api/projects", headers=auth_headers(tokens.alice), json={
            "title": "Robot",
            "description": "Line follower",
            "category": "hardware",
            "skills": ["c"],
        })

        assert response.status_code == 201
        data = response.json()
        assert data["creator"] == "Alice"
        assert data["creatorEmail"] == "alice@example.com"
        assert data["members"] == []
        assert data["maxMembers"] == 5
        assert data["status"] == "active"

        listed = client.get("/api/projects").json()
        assert listed[0]["_id"] == data["_id"]

    def test_create_project_requires_auth(self, client):
        response = client.post("/api/projects", json={"title": "x", "description": "y", "category": "z"})
        assert response.status_code == 401

    def test_get_project(self, client, seeded):
        response = client.get(f"/api/projects/{seeded.project}")

        assert response.status_code == 200
        assert response.json()["members"] == ["alice@example.com"]
        assert response.json()["creatorEmail"] == "bob@example.com"

    def test_get_unknown_project(self, client):
        response = client.get("/api/projects/p-missing")

        assert response.status_code == 404
        assert response.json()["error_code"] == "NF_003"
        assert response.json()["message"] == "Project not found"

    def test_my_projects(self, client, tokens, seeded):
        bob = client.get("/api/projects/mine", headers=auth_headers(tokens.bob)).json()
        alice = client.get("/api/projects/mine", headers=auth_headers(tokens.alice)).json()

        assert [p["_id"] for p in bob["created"]] == [seeded.project]
        assert bob["joined"] == []
        assert alice["created"] == []
        assert [p["_id"] for p in alice["joined"]] == [seeded.project]


@pytest.mark.integration
class TestJoinRequests:

    def _request(self, client, token, project_id, message=None):
        kwargs = {"headers": auth_headers(token)}
        if message is not None:
            kwargs["json"] = {"message": message}
        return client.post(f"/api/joinRequests/request/{project_id}", **kwargs)

    def test_create_request_snapshots_requester(self, client, tokens, seeded):
        response = self._request(client, tokens.carol, seeded.project, "I can design")

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Join request sent successfully"
        request = body["request"]
        assert request["status"] == "pending"
        assert request["requesterEmail"] == "carol@example.com"
        assert request["requesterSkills"] == ["design"]
        assert request["requesterCollege"] == "TU Wien"
        assert request["ownerId"] == seeded.bob
        assert request["projectTitle"] == "Chat App"
        assert request["message"] == "I can design"

    def test_duplicate_pending_request(self, client, tokens, seeded):
        self._request(client, tokens.carol, seeded.project)
        response = self._request(client, tokens.carol, seeded.project)

        assert response.status_code == 409

    def test_member_cannot_request(self, client, tokens, seeded):
        response = self._request(client, tokens.alice, seeded.project)
        assert response.status_code == 400

    def test_owner_cannot_request(self, client, tokens, seeded):
        response = self._request(client, tokens.bob, seeded.project)
        assert response.status_code == 400

    def test_full_project(self, client, tokens, seeded):
        first = self._request(client, tokens.bob, seeded.other_project)
        client.put(f"/api/joinRequests/respond/{first.json()['request']['_id']}",
                   json={"status": "accepted"}, headers=auth_headers(tokens.carol))

        response = self._request(client, tokens.alice, seeded.other_project)

        assert response.status_code == 400
        assert response.json()["error_code"] == "VAL_002"
        assert response.json()["message"] == "Project is full"

    def test_unknown_project(self, client, tokens):
        response = self._request(client, tokens.carol, "p-missing")
        assert response.status_code == 404

    def test_owner_and_requester_listings(self, client, tokens, seeded):
        self._request(client, tokens.carol, seeded.project)

        owner = client.get("/api/joinRequests/owner", headers=auth_headers(tokens.bob)).json()
        requester = client.get("/api/joinRequests/requester", headers=auth_headers(tokens.carol)).json()
        pending = client.get("/api/joinRequests/requester?status=pending", headers=auth_headers(tokens.carol)).json()
        accepted = client.get("/api/joinRequests/requester?status=accepted", headers=auth_headers(tokens.carol)).json()

        assert [r["requesterId"] for r in owner] == [seeded.carol]
        assert len(requester) == 1
        assert len(pending) == 1
        assert accepted == []

    def test_project_listing_is_owner_only(self, client, tokens, seeded):
        self._request(client, tokens.carol, seeded.project)

        as_owner = client.get(f"/api/joinRequests/project/{seeded.project}", headers=auth_headers(tokens.bob))
        as_member = client.get(f"/api/joinRequests/project/{seeded.project}", headers=auth_headers(tokens.alice))

        assert as_owner.status_code == 200
        assert len(as_owner.json()) == 1
        assert as_member.status_code == 403

    def test_accept_adds_member(self, client, tokens, seeded):
        request_id = self._request(client, tokens.carol, seeded.project).json()["request"]["_id"]

        response = client.put(f"/api/joinRequests/respond/{request_id}", json={"status": "accepted"},
                              headers=auth_headers(tokens.bob))

        assert response.status_code == 200
        assert response.json()["request"]["status"] == "accepted"
        assert response.json()["request"]["respondedAt"] is not None
        members = client.get(f"/api/projects/{seeded.project}").json()["members"]
        assert members == ["alice@example.com", "carol@example.com"]

    def test_reject_keeps_members(self, client, tokens, seeded):
        request_id = self._request(client, tokens.carol, seeded.project).json()["request"]["_id"]

        response = client.put(f"/api/joinRequests/respond/{request_id}", json={"status": "rejected"},
                              headers=auth_headers(tokens.bob))

        assert response.json()["request"]["status"] == "rejected"
        assert client.get(f"/api/projects/{seeded.project}").json()["members"] == ["alice@example.com"]

    def test_only_owner_can_respond(self, client, tokens, seeded):
        request_id = self._request(client, tokens.carol, seeded.project).json()["request"]["_id"]

        response = client.put(f"/api/joinRequests/respond/{request_id}", json={"status": "accepted"},
                              headers=auth_headers(tokens.alice))

        assert response.status_code == 403

    def test_respond_twice(self, client, tokens, seeded):
        request_id = self._request(client, tokens.carol, seeded.project).json()["request"]["_id"]
        client.put(f"/api/joinRequests/respond/{request_id}", json={"status": "rejected"},
                   headers=auth_headers(tokens.bob))

        response = client.put(f"/api/joinRequests/respond/{request_id}", json={"status": "accepted"},
                              headers=auth_headers(tokens.bob))

        assert response.status_code == 400
        assert response.json()["message"] == "Join request has already been processed"

    def test_invalid_response_status(self, client, tokens, seeded):
        request_id = self._request(client, tokens.carol, seeded.project).json()["request"]["_id"]

        response = client.put(f"/api/joinRequests/respond/{request_id}", json={"status": "maybe"},
                              headers=auth_headers(tokens.bob))

        assert response.status_code == 400

    def test_delete_request(self, client, tokens, seeded):
        request_id = self._request(client, tokens.carol, seeded.project).json()["request"]["_id"]

        forbidden = client.delete(f"/api/joinRequests/{request_id}", headers=auth_headers(tokens.alice))
        deleted = client.delete(f"/api/joinRequests/{request_id}", headers=auth_headers(tokens.carol))
        missing = client.delete(f"/api/joinRequests/{request_id}", headers=auth_headers(tokens.carol))

        assert forbidden.status_code == 403
        assert deleted.status_code == 200
        assert deleted.json() == {"message": "Join request deleted successfully"}
        assert missing.status_code == 404
        assert missing.json()["error_code"] == "NF_004"


@pytest.mark.integration
class TestMessageHistory:

    def test_empty_history(self, client, tokens, seeded):
        response = client.get(f"/api/messages/projects/{seeded.project}/messages", headers=auth_headers(tokens.alice))

        assert response.status_code == 200
        assert response.json() == []

    def test_outsider_is_denied(self, client, tokens, seeded):
        response = client.get(f"/api/messages/projects/{seeded.project}/messages", headers=auth_headers(tokens.carol))

        assert response.status_code == 403
        assert response.json()["error_code"] == "AUTHZ_002"
        assert response.json()["message"] == "Not authorized to view messages for this project"

    def test_unknown_project(self, client, tokens):
        response = client.get("/api/messages/projects/p-missing/messages", headers=auth_headers(tokens.bob))

        assert response.status_code == 404
        assert response.json()["error_code"] == "NF_003"

    def test_requires_auth(self, client, seeded):
        response = client.get(f"/api/messages/projects/{seeded.project}/messages")
        assert response.status_code == 401


@pytest.mark.integration
class TestSystem:

    def test_health(self, client):
        response = client.get("/api/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["timestamp"].endswith("Z")
        assert data["websocket"]["current_connections"] == 0

    def test_unknown_route(self, client):
        response = client.get("/api/does-not-exist")

        assert response.status_code == 404
        assert response.json()["error_code"] == "NF_001"
