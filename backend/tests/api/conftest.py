"""API-specific test fixtures."""

from contextlib import asynccontextmanager

import httpx
import pytest
from fakeredis import FakeAsyncRedis
from fastapi import FastAPI
from fastapi.testclient import TestClient

from statesync.core.auth import issue_session_token
from statesync.db.redis import bind_redis
from statesync.main import create_app


@asynccontextmanager
async def test_lifespan(app: FastAPI):
    """Test lifespan - bind fakeredis in the TestClient's own event loop."""
    app.state.shutting_down = False
    client = FakeAsyncRedis(decode_responses=True)
    await client.flushall()
    bind_redis(client)
    yield
    bind_redis(None)
    await client.aclose()


@pytest.fixture
def app() -> FastAPI:
    return create_app(lifespan_handler=test_lifespan)


@pytest.fixture
def api_client(app):
    """FastAPI test client backed by fakeredis.

    Authenticate requests with the ``session_cookie`` fixture or override
    ``get_optional_principal`` in ``app.dependency_overrides``.
    """
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def session_token() -> str:
    return issue_session_token("user_a", display_name="Ada")


@pytest.fixture
async def asgi_client(app, redis):
    """httpx client calling the app in-process, on the test's event loop.

    ASGITransport does not run the lifespan, so fakeredis is bound here.
    """
    bind_redis(redis)
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://testserver") as client:
        yield client
    bind_redis(None)
    app.dependency_overrides.clear()
