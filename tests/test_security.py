"""Security tests.

Tests:
- Security headers are present on responses
- Unauthenticated API access is refused with JSON
- Cross-board isolation (explicit attempts to reach another board's data)
- Rate limit key selection and 429 responses
- CSRF token enforcement through the X-CSRFToken header
"""

import pytest
from flask_login import login_user

from kanban import create_app
from kanban.config import TestConfig, config_by_name
from kanban.extensions import db, limiter, rate_limit_key
from kanban.models.kanban import Card
from kanban.models.user import User
from kanban.services import board_service, card_service, user_service


def _login(client, email):
    return client.post("/api/auth/login", json={"email": email, "password": "password123"})


class TestSecurityHeaders:
    """Verify security headers are present on responses."""

    def test_x_content_type_options(self, client):
        response = client.get("/api/health")
        assert response.headers.get("X-Content-Type-Options") == "nosniff"

    def test_x_frame_options(self, client):
        response = client.get("/api/health")
        assert response.headers.get("X-Frame-Options") == "DENY"

    def test_referrer_policy(self, client):
        response = client.get("/api/health")
        assert response.headers.get("Referrer-Policy") == "strict-origin-when-cross-origin"

    def test_csp_header(self, client):
        response = client.get("/api/health")
        csp = response.headers.get("Content-Security-Policy")
        assert "default-src 'none'" in csp
        assert "frame-ancestors 'none'" in csp

    def test_json_is_not_cached(self, client):
        response = client.get("/api/health")
        assert response.headers.get("Cache-Control") == "no-store"

    def test_no_hsts_in_debug(self, client):
        """HSTS should NOT be set in debug/test mode."""
        response = client.get("/api/health")
        assert response.headers.get("Strict-Transport-Security") is None

    def test_headers_on_error_pages(self, client):
        response = client.get("/api/nonexistent")
        assert response.status_code == 404
        assert response.get_json() == {"error": "Not Found", "success": False}
        assert response.headers.get("X-Content-Type-Options") == "nosniff"


class TestHealth:

    def test_health(self, client):
        body = client.get("/api/health").get_json()
        assert body["success"] is True
        assert body["data"]["status"] == "ok"


class TestAuthenticationRequired:

    @pytest.mark.parametrize("method,path", [
        ("get", "/api/boards"),
        ("post", "/api/boards"),
        ("get", "/api/user/me"),
        ("post", "/api/cards/reorder"),
        ("post", "/api/columns/reorder"),
    ])
    def test_anonymous_is_401(self, client, method, path):
        response = getattr(client, method)(path, json={})
        assert response.status_code == 401
        assert response.get_json()["code"] == "UNAUTHORIZED"


class TestCrossBoardIsolation:
    """An outsider cannot reach any part of a board they do not belong to.

    Every attempt answers 404, so board ids cannot be probed.
    """

    @pytest.fixture
    def card_id(self, seed_data):
        card = card_service.create_card(seed_data["todo_id"], seed_data["owner_id"], {"title": "Private"})
        db.session.commit()
        return card["id"]

    def test_board_detail(self, client, seed_data):
        _login(client, "outsider@kanban.local")
        resp = client.get(f"/api/boards/{seed_data['board_id']}")

        assert resp.status_code == 404
        assert resp.get_json()["code"] == "BOARD_NOT_FOUND"

    def test_board_update_and_delete(self, client, seed_data):
        _login(client, "outsider@kanban.local")
        url = f"/api/boards/{seed_data['board_id']}"

        assert client.patch(url, json={"title": "Mine now"}).status_code == 404
        assert client.delete(url).status_code == 404

    def test_members(self, client, seed_data):
        _login(client, "outsider@kanban.local")
        url = f"/api/boards/{seed_data['board_id']}/members"

        assert client.get(url).status_code == 404
        resp = client.post(url, json={"user_id": seed_data["outsider_id"], "role": "owner"})
        assert resp.status_code == 404

    def test_column_rename(self, client, seed_data):
        _login(client, "outsider@kanban.local")
        resp = client.patch(f"/api/columns/{seed_data['todo_id']}", json={"name": "Pwned"})

        assert resp.status_code == 404
        assert resp.get_json()["code"] == "BOARD_NOT_FOUND"

    def test_cards(self, client, seed_data, card_id):
        _login(client, "outsider@kanban.local")

        assert client.get(f"/api/columns/{seed_data['todo_id']}/cards").status_code == 404
        assert client.get(f"/api/cards/{card_id}").status_code == 404
        assert client.patch(f"/api/cards/{card_id}", json={"title": "X"}).status_code == 404
        assert client.delete(f"/api/cards/{card_id}").status_code == 404
        resp = client.post(f"/api/cards/{card_id}/move", json={
            "to_column_id": seed_data["doing_id"], "index": 0,
        })
        assert resp.status_code == 404

        card = db.session.get(Card, card_id)
        assert card.title == "Private"
        assert card.column_id == seed_data["todo_id"]

    def test_move_into_own_board_does_not_reveal_card(self, client, seed_data, card_id):
        """Moving a foreign card answers like a missing board, not a cross-board move."""
        own = board_service.create_board("Mine", seed_data["outsider_id"])
        db.session.commit()
        _login(client, "outsider@kanban.local")

        resp = client.post(f"/api/cards/{card_id}/move", json={
            "to_column_id": own["columns"][0]["id"], "index": 0,
        })

        assert resp.status_code == 404
        assert resp.get_json()["code"] == "BOARD_NOT_FOUND"
        assert db.session.get(Card, card_id).column_id == seed_data["todo_id"]


class TestRateLimitKey:

    def test_forwarded_for_first_hop(self, app):
        with app.test_request_context(headers={"X-Forwarded-For": "203.0.113.7, 10.0.0.1"}):
            assert rate_limit_key() == "ip:203.0.113.7"

    def test_real_ip(self, app):
        with app.test_request_context(headers={"X-Real-IP": "198.51.100.2"}):
            assert rate_limit_key() == "ip:198.51.100.2"

    def test_logged_in_user(self, app, seed_data):
        with app.test_request_context(headers={"X-Forwarded-For": "203.0.113.7"}):
            login_user(db.session.get(User, seed_data["member_id"]))
            assert rate_limit_key() == f"user:{seed_data['member_id']}"


class RateLimitedConfig(TestConfig):
    RATELIMIT_ENABLED = True
    API_RATE_LIMIT = "2 per minute"


class TestRateLimiting:
    """The shared test app runs without limits, so these use their own app."""

    @pytest.fixture
    def limited_app(self, monkeypatch):
        # init_app flips the shared limiter on; put it back afterwards.
        monkeypatch.setattr(limiter, "enabled", limiter.enabled)
        monkeypatch.setitem(config_by_name, "rate-limited", RateLimitedConfig)

        limited = create_app("rate-limited")
        with limited.app_context():
            db.create_all()
            user_service.register_user("limited@kanban.local", "password123")
            db.session.commit()
            yield limited
            db.session.remove()
            db.drop_all()
        limiter.reset()

    def test_third_request_in_window_is_429(self, limited_app):
        client = limited_app.test_client()
        _login(client, "limited@kanban.local")

        first = client.get("/api/boards")
        second = client.get("/api/boards")
        third = client.get("/api/boards")

        assert [first.status_code, second.status_code, third.status_code] == [200, 200, 429]
        assert first.headers.get("X-RateLimit-Limit") == "2"
        assert third.get_json() == {"error": "Too Many Requests", "code": "RATE_LIMITED", "success": False}


class TestCsrf:

    @pytest.fixture
    def csrf_on(self, app, monkeypatch):
        monkeypatch.setitem(app.config, "WTF_CSRF_ENABLED", True)

    def test_post_without_token_is_rejected(self, client, seed_data, csrf_on):
        resp = client.post("/api/auth/login", json={
            "email": "owner@kanban.local", "password": "password123",
        })

        assert resp.status_code == 400
        assert resp.get_json()["code"] == "CSRF_FAILED"

    def test_post_with_header_token_succeeds(self, client, seed_data, csrf_on):
        token = client.get("/api/auth/csrf").get_json()["data"]["csrf_token"]
        headers = {"X-CSRFToken": token}

        resp = client.post("/api/auth/login", headers=headers, json={
            "email": "owner@kanban.local", "password": "password123",
        })
        assert resp.status_code == 200

        resp = client.post("/api/boards", json={"title": "No token"})
        assert resp.status_code == 400
        assert resp.get_json()["code"] == "CSRF_FAILED"

        resp = client.post("/api/boards", headers=headers, json={"title": "With token"})
        assert resp.status_code == 201
