# FILE: tests/test_auth_middleware.py
"""
Tests for app/auth/middleware.py
API key bearer authentication.
"""

import sys
from pathlib import Path

_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials

from app.auth import config
from app.auth.middleware import AuthResult, optional_auth, require_auth


def _bearer(token):
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


class TestApiKeyConfig:

    def test_keys_parsed_from_env(self, monkeypatch):
        monkeypatch.setenv("ROADMAP_API_KEYS", " one ,two,, ")
        assert config.load_api_keys() == ["one", "two"]
        assert config.is_auth_configured()

    def test_unset(self, monkeypatch):
        monkeypatch.delenv("ROADMAP_API_KEYS", raising=False)
        assert config.load_api_keys() == []
        assert not config.is_auth_configured()
        assert not config.validate_api_key("anything")

    def test_validate(self, monkeypatch):
        monkeypatch.setenv("ROADMAP_API_KEYS", "one,two")
        assert config.validate_api_key("two")
        assert not config.validate_api_key("three")
        assert not config.validate_api_key("")


class TestRequireAuth:

    @pytest.mark.asyncio
    async def test_disabled_without_keys(self, monkeypatch):
        monkeypatch.delenv("ROADMAP_API_KEYS", raising=False)
        result = await require_auth(None)
        assert isinstance(result, AuthResult)
        assert not result.authenticated

    @pytest.mark.asyncio
    async def test_missing_credentials(self, monkeypatch):
        monkeypatch.setenv("ROADMAP_API_KEYS", "secret")
        with pytest.raises(HTTPException) as exc_info:
            await require_auth(None)
        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_wrong_key(self, monkeypatch):
        monkeypatch.setenv("ROADMAP_API_KEYS", "secret")
        with pytest.raises(HTTPException) as exc_info:
            await require_auth(_bearer("guess"))
        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_valid_key(self, monkeypatch):
        monkeypatch.setenv("ROADMAP_API_KEYS", "secret")
        result = await require_auth(_bearer("secret"))
        assert result.authenticated


class TestOptionalAuth:

    @pytest.mark.asyncio
    async def test_no_credentials(self):
        result = await optional_auth(None)
        assert not result.authenticated
        assert result.error == "No credentials provided"

    @pytest.mark.asyncio
    async def test_valid_key(self, monkeypatch):
        monkeypatch.setenv("ROADMAP_API_KEYS", "secret")
        assert (await optional_auth(_bearer("secret"))).authenticated


class TestPing:

    def test_ping_is_public(self, monkeypatch):
        from fastapi.testclient import TestClient
        import main

        monkeypatch.setenv("ROADMAP_API_KEYS", "secret")
        response = TestClient(main.app).get("/ping")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "auth_configured": True, "authenticated": False}

    def test_ping_reports_accepted_key(self, monkeypatch):
        from fastapi.testclient import TestClient
        import main

        monkeypatch.setenv("ROADMAP_API_KEYS", "secret")
        client = TestClient(main.app)
        assert client.get("/ping", headers={"Authorization": "Bearer secret"}).json()["authenticated"]
        assert not client.get("/ping", headers={"Authorization": "Bearer guess"}).json()["authenticated"]
