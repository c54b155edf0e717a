"""Shared test fixtures for all test groups."""

import pytest
import structlog
from fakeredis import FakeAsyncRedis

from statesync.core.auth import Principal
from statesync.db.temp_collections import TempCollectionGateway
from statesync.schemas.action_result import ActionResult, success_result
from statesync.schemas.onboarding import OnboardingInfo
from statesync.services.onboarding_service import is_onboarding_complete_action


class RecordingActions:
    """In-memory ActionTransport that records every call.

    Stores values by storage name, evaluates completion with the real
    evaluator, and can be told to fail per operation.
    """

    def __init__(self):
        self.values: dict[str, str] = {}
        self.calls: list[tuple] = []
        self.get_error: Exception | None = None
        self.set_error: Exception | None = None
        self.set_result: ActionResult | None = None
        self.remove_error: Exception | None = None
        self.evaluator_error: Exception | None = None
        self.evaluator_result: ActionResult | None = None

    @property
    def set_calls(self) -> list[tuple]:
        return [c for c in self.calls if c[0] == "set"]

    @property
    def get_calls(self) -> list[tuple]:
        return [c for c in self.calls if c[0] == "get"]

    @property
    def evaluator_calls(self) -> list[tuple]:
        return [c for c in self.calls if c[0] == "is_complete"]

    async def get_temp_collection(self, collection: str):
        self.calls.append(("get", collection))
        if self.get_error:
            raise self.get_error
        return success_result(self.values.get(collection))

    async def set_temp_collection(self, collection: str, value: str):
        self.calls.append(("set", collection, value))
        if self.set_error:
            raise self.set_error
        if self.set_result is not None:
            return self.set_result
        self.values[collection] = value
        return success_result()

    async def remove_temp_collection(self, collection: str):
        self.calls.append(("remove", collection))
        if self.remove_error:
            raise self.remove_error
        self.values.pop(collection, None)
        return success_result()

    async def is_onboarding_complete(self, onboarding_info: OnboardingInfo):
        self.calls.append(("is_complete", onboarding_info))
        if self.evaluator_error:
            raise self.evaluator_error
        if self.evaluator_result is not None:
            return self.evaluator_result
        return await is_onboarding_complete_action(onboarding_info)


@pytest.fixture
def fake_actions():
    """Fresh RecordingActions with nothing stored."""
    return RecordingActions()


@pytest.fixture
async def redis():
    """Provide fakeredis async client."""
    client = FakeAsyncRedis(decode_responses=True)
    await client.flushall()
    yield client
    await client.aclose()


@pytest.fixture
def gateway(redis):
    return TempCollectionGateway(redis)


@pytest.fixture
def principal():
    """Test user A."""
    return Principal(principal_id="user_a", display_name="Ada", claims={"sub": "user_a"})


@pytest.fixture
def other_principal():
    """Test user B."""
    return Principal(principal_id="user_b", claims={"sub": "user_b"})


@pytest.fixture
def complete_info():
    return OnboardingInfo(name="John", hobby="Art", age=28, description="hi")


@pytest.fixture(autouse=True, scope="session")
def uncached_loggers():
    """Keep loggers uncached so structlog.testing.capture_logs sees every event.

    Importing statesync.main turns caching on for the running app.
    """
    structlog.configure(cache_logger_on_first_use=False)
