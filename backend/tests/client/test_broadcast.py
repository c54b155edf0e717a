"""Tests for the message buses used for cross-context sync."""

import asyncio

import pytest
from structlog.testing import capture_logs

from statesync.client.broadcast import InProcessBus, NullBus, RedisBus
from statesync.client.store import create_onboarding_store

pytestmark = pytest.mark.unit


class TestInProcessBus:
    def test_delivers_to_topic_subscribers_in_order(self):
        bus = InProcessBus()
        received = []
        bus.subscribe("t", lambda payload: received.append(("first", payload["n"])))
        bus.subscribe("t", lambda payload: received.append(("second", payload["n"])))
        bus.subscribe("other", lambda payload: received.append(("other", payload["n"])))

        bus.publish("t", {"n": 1})
        bus.publish("t", {"n": 2})

        assert received == [("first", 1), ("second", 1), ("first", 2), ("second", 2)]

    def test_unsubscribe(self):
        bus = InProcessBus()
        received = []
        unsubscribe = bus.subscribe("t", received.append)

        unsubscribe()
        unsubscribe()
        bus.publish("t", {"n": 1})

        assert received == []

    def test_failing_handler_does_not_block_others(self):
        bus = InProcessBus()
        received = []

        def broken(payload):
            raise RuntimeError("boom")

        bus.subscribe("t", broken)
        bus.subscribe("t", received.append)

        with capture_logs() as logs:
            bus.publish("t", {"n": 1})

        assert received == [{"n": 1}]
        assert logs[0]["event"] == "broadcast_handler_failed"
        assert logs[0]["error_type"] == "RuntimeError"


def test_null_bus_drops_everything():
    bus = NullBus()
    received = []
    unsubscribe = bus.subscribe("t", received.append)

    bus.publish("t", {"n": 1})
    unsubscribe()

    assert received == []


async def _wait_for(predicate, timeout: float = 2.0) -> None:
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.01)


class TestRedisBus:
    async def test_publish_reaches_subscriber(self, redis):
        bus = RedisBus(redis)
        await bus.start()
        received = []
        bus.subscribe("onboarding-storage", received.append)

        bus.publish("onboarding-storage", {"origin": "x", "state": {}})
        await _wait_for(lambda: received)

        assert received == [{"origin": "x", "state": {}}]
        await bus.close()

    async def test_unreadable_message_is_skipped(self, redis):
        bus = RedisBus(redis)
        await bus.start()
        received = []
        bus.subscribe("t", received.append)

        with capture_logs() as logs:
            await redis.publish("broadcast:t", "not json")
            bus.publish("t", {"n": 1})
            await _wait_for(lambda: received)

        assert received == [{"n": 1}]
        assert any(e["event"] == "broadcast_message_unreadable" for e in logs)
        await bus.close()

    async def test_stores_in_separate_processes_stay_in_sync(self, redis, fake_actions):
        bus_a = RedisBus(redis)
        bus_b = RedisBus(redis)
        await bus_a.start()
        await bus_b.start()
        tab_a = create_onboarding_store(fake_actions, bus=bus_a, debounce=0)
        tab_b = create_onboarding_store(fake_actions, bus=bus_b, debounce=0)

        tab_a.set_onboarding_info("name", "John")
        await _wait_for(lambda: tab_b.onboarding_info.name == "John")

        await tab_a.wait_for_background_tasks()
        await tab_b.wait_for_background_tasks()
        await tab_a._persist.storage.storage.flush()
        assert len(fake_actions.set_calls) == 1

        tab_a.close()
        tab_b.close()
        await bus_a.close()
        await bus_b.close()

    async def test_close_is_idempotent(self, redis):
        bus = RedisBus(redis)
        await bus.start()

        await bus.close()
        await bus.close()
