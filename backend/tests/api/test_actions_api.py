"""Integration tests for the server action endpoints.

Verifies:
- Storage names are mapped; unknown names never reach the gateway
- Missing or invalid sessions are reported inside the result, with HTTP 200
- Values are isolated per principal
- The completion evaluator endpoint
"""

from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from statesync.core.auth import Principal, get_optional_principal, issue_session_token
from statesync.db.temp_collections import get_temp_collection_gateway

pytestmark = pytest.mark.integration


def override_auth(principal_id: str, display_name: str | None = None):
    """Create auth override for a specific user."""

    async def mock_get_principal():
        return Principal(principal_id=principal_id, display_name=display_name, claims={"sub": principal_id})

    return mock_get_principal


def _post(client, action: str, body: dict, cookies: dict | None = None):
    client.cookies.clear()
    for name, value in (cookies or {}).items():
        client.cookies.set(name, value)
    return client.post(f"/api/actions/{action}", json=body)


def test_set_get_remove_round_trip(api_client, app):
    app.dependency_overrides[get_optional_principal] = override_auth("user_a")

    set_response = _post(api_client, "temp-collections/set", {"collection": "onboarding-storage", "value": "blob"})
    assert set_response.status_code == 200
    assert set_response.json() == {"success": True, "data": None}

    get_response = _post(api_client, "temp-collections/get", {"collection": "onboarding-storage"})
    assert get_response.json() == {"success": True, "data": "blob"}

    remove_response = _post(api_client, "temp-collections/remove", {"collection": "onboarding-storage"})
    assert remove_response.json()["success"] is True

    get_response = _post(api_client, "temp-collections/get", {"collection": "onboarding-storage"})
    assert get_response.json() == {"success": True, "data": None}


def test_session_cookie_authenticates(api_client, session_token):
    cookies = {"__session": session_token}

    _post(api_client, "temp-collections/set", {"collection": "onboarding-storage", "value": "v"}, cookies)
    response = _post(api_client, "temp-collections/get", {"collection": "onboarding-storage"}, cookies)

    assert response.json() == {"success": True, "data": "v"}


def test_bearer_token_authenticates(api_client, session_token):
    api_client.cookies.clear()
    response = api_client.post(
        "/api/actions/temp-collections/get",
        json={"collection": "onboarding-storage"},
        headers={"Authorization": f"Bearer {session_token}"},
    )

    assert response.json()["success"] is True


def test_no_session_is_user_not_found(api_client):
    response = _post(api_client, "temp-collections/get", {"collection": "onboarding-storage"})

    assert response.status_code == 200
    assert response.json() == {"success": False, "error": "User not found"}


def test_expired_session_is_user_not_found(api_client):
    token = issue_session_token("user_a", expires_in=timedelta(seconds=-10))

    response = _post(
        api_client,
        "temp-collections/set",
        {"collection": "onboarding-storage", "value": "v"},
        {"__session": token},
    )

    assert response.json() == {"success": False, "error": "User not found"}


def test_tampered_session_is_user_not_found(api_client, session_token):
    response = _post(
        api_client,
        "temp-collections/get",
        {"collection": "onboarding-storage"},
        {"__session": session_token[:-2] + "xx"},
    )

    assert response.json()["error"] == "User not found"


@pytest.mark.parametrize("action", ["temp-collections/get", "temp-collections/set", "temp-collections/remove"])
@pytest.mark.parametrize("collection", ["temp-onboarding", "users", ""])
def test_unmapped_collection_never_reaches_gateway(api_client, app, action, collection):
    gateway = MagicMock()
    gateway.get = AsyncMock()
    gateway.set = AsyncMock()
    gateway.remove = AsyncMock()
    app.dependency_overrides[get_temp_collection_gateway] = lambda: gateway
    app.dependency_overrides[get_optional_principal] = override_auth("user_a")

    response = _post(api_client, action, {"collection": collection, "value": "v"})

    assert response.status_code == 200
    assert response.json() == {"success": False, "error": "Invalid collection"}
    gateway.get.assert_not_called()
    gateway.set.assert_not_called()
    gateway.remove.assert_not_called()


def test_gateway_failure_is_generic(api_client, app):
    gateway = MagicMock()
    gateway.set = AsyncMock(side_effect=RuntimeError("redis exploded with secret details"))
    app.dependency_overrides[get_temp_collection_gateway] = lambda: gateway
    app.dependency_overrides[get_optional_principal] = override_auth("user_a")

    response = _post(api_client, "temp-collections/set", {"collection": "onboarding-storage", "value": "v"})

    assert response.json() == {"success": False, "error": "Failed to set temp collection"}
    assert "secret" not in response.text


def test_user_isolation(api_client, app):
    app.dependency_overrides[get_optional_principal] = override_auth("user_a")
    _post(api_client, "temp-collections/set", {"collection": "onboarding-storage", "value": "from-a"})

    app.dependency_overrides[get_optional_principal] = override_auth("user_b")
    response = _post(api_client, "temp-collections/get", {"collection": "onboarding-storage"})

    assert response.json() == {"success": True, "data": None}


def test_missing_body_field_is_422(api_client):
    response = _post(api_client, "temp-collections/set", {"collection": "onboarding-storage"})

    assert response.status_code == 422


class TestIsComplete:
    def test_complete(self, api_client):
        response = api_client.post(
            "/api/actions/onboarding/is-complete",
            json={"name": "John", "hobby": "Art", "age": 28, "description": "hi"},
        )

        assert response.status_code == 200
        assert response.json() == {"success": True, "data": True}

    def test_incomplete(self, api_client):
        response = api_client.post(
            "/api/actions/onboarding/is-complete",
            json={"name": "John", "hobby": "Art", "age": 0, "description": None},
        )

        assert response.json() == {"success": True, "data": False}

    @pytest.mark.parametrize("age", ["", 2.5, "abc", None])
    def test_form_values_are_never_rejected(self, api_client, age):
        response = api_client.post(
            "/api/actions/onboarding/is-complete",
            json={"name": "John", "hobby": "Art", "age": age, "description": "hi"},
        )

        assert response.status_code == 200
        assert response.json() == {"success": True, "data": bool(age)}

    def test_cleared_name_is_incomplete(self, api_client):
        response = api_client.post(
            "/api/actions/onboarding/is-complete",
            json={"name": "", "hobby": "Art", "age": 28, "description": "hi"},
        )

        assert response.json() == {"success": True, "data": False}

    def test_needs_no_session(self, api_client):
        api_client.cookies.clear()
        response = api_client.post("/api/actions/onboarding/is-complete", json={})

        assert response.json() == {"success": True, "data": False}
