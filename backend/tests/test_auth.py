"""Tests for the auth module: token creation, validation and the session dependency."""

from teamsync.core.token_factory import create_token, decode_token
from teamsync.core.config import settings


class TestTokenFactory:

    def test_create_and_decode(self):
        token = create_token("alice", "Admin", "test-secret")
        payload = decode_token(token, "test-secret")
        assert payload is not None
        assert payload.sub == "alice"
        assert payload.role == "Admin"

    def test_wrong_secret_returns_none(self):
        token = create_token("alice", "Member", "correct-secret")
        assert decode_token(token, "wrong-secret") is None

    def test_expired_token_returns_none(self):
        token = create_token("alice", "Member", "secret", expires_hours=-1)
        assert decode_token(token, "secret") is None

    def test_malformed_token_returns_none(self):
        assert decode_token("not.a.token", "secret") is None
        assert decode_token("", "secret") is None

    def test_unsupported_algorithm(self):
        token = create_token("alice", "Member", "secret")
        assert decode_token(token, "secret", algorithm="RS256") is None


class TestSessionDependency:

    def test_missing_token_is_401(self, client):
        resp = client.get("/api/auth/me")
        assert resp.status_code == 401
        assert resp.json()["error"] == "UNAUTHORIZED"

    def test_valid_token_without_session_is_401(self, client):
        token = create_token("ghost", "Member", settings.jwt_secret_key)
        resp = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401

    def test_logout_invalidates_session(self, client, auth_headers):
        headers = auth_headers
        assert client.post("/api/auth/logout", headers=headers).status_code == 204
        assert client.get("/api/auth/me", headers=headers).status_code == 401

    def test_wrong_password_is_401(self, client, auth_headers):
        resp = client.post("/api/auth/login", json={"id": "alice", "password": "wrong-password"})
        assert resp.status_code == 401
