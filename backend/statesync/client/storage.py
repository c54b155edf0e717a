"""Server-backed storage adapter for client stores.

``ServerStorage`` implements the three-method ``StateStorage`` contract on top
of the temp collection actions:

- get_item / remove_item run immediately and never raise for remote failures;
  a failed read returns None, exactly like "nothing stored yet"
- set_item is debounced: each accepted call cancels the pending write and
  schedules a new one ``debounce`` ms later, so only the last value in a burst
  reaches the server. ``debounce=0`` writes on the next loop tick.
- set_item is gated by ``write_validator``; when it returns False the call is
  a silent no-op and an earlier pending write is left alone

The pending write is a single ``asyncio`` handle owned by the instance. All
scheduling happens on the event loop thread, so cancel-and-reschedule needs
no lock. A write dropped by a failed action is logged once and not retried.
"""

import asyncio
from collections.abc import Callable
from typing import Protocol

import structlog

from statesync.client.actions import ActionTransport

logger = structlog.get_logger(__name__)

DEFAULT_DEBOUNCE = 5000  # ms

WriteValidator = Callable[[], bool]


class StateStorage(Protocol):
    async def get_item(self, name: str) -> str | None: ...

    async def set_item(self, name: str, value: str) -> None: ...

    async def remove_item(self, name: str) -> None: ...


def _always_allow() -> bool:
    return True


class ServerStorage:
    """StateStorage persisted through the temp collection actions.

    Args:
        actions: Transport used to reach the server actions
        write_validator: Called on every set_item; False skips the write
        alt_collection_name: Storage name sent to the server instead of the
            store's own name
        debounce: Quiet period in milliseconds before a write is sent
    """

    def __init__(
        self,
        actions: ActionTransport,
        write_validator: WriteValidator = _always_allow,
        alt_collection_name: str | None = None,
        debounce: int = DEFAULT_DEBOUNCE,
    ) -> None:
        if debounce < 0:
            raise ValueError("debounce must be >= 0")
        self.actions = actions
        self.write_validator = write_validator
        self.alt_collection_name = alt_collection_name
        self.debounce = debounce
        self._pending: asyncio.Handle | None = None
        self._pending_write: tuple[str, str] | None = None
        self._in_flight: set[asyncio.Task] = set()

    def _collection(self, name: str) -> str:
        return self.alt_collection_name or name

    @property
    def has_pending_write(self) -> bool:
        return self._pending is not None

    # -----------------------------------------------------------------------
    # Debounced write
    # -----------------------------------------------------------------------

    def _schedule_write(self, name: str, value: str) -> None:
        loop = asyncio.get_running_loop()
        if self._pending is not None:
            self._pending.cancel()

        self._pending_write = (name, value)
        if self.debounce:
            self._pending = loop.call_later(self.debounce / 1000, self._fire)
        else:
            self._pending = loop.call_soon(self._fire)

    def _fire(self) -> None:
        name, value = self._pending_write
        self._pending = None
        self._pending_write = None

        task = asyncio.get_running_loop().create_task(self._write(name, value))
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)

    async def _write(self, name: str, value: str) -> None:
        """Send one write. Never raises; failures are logged and dropped."""
        try:
            result = await self.actions.set_temp_collection(name, value)
        except Exception as exc:
            logger.error(
                "temp_collection_write_failed",
                storage=name,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return

        if not result.success:
            logger.error("temp_collection_write_failed", storage=name, error=result.error)

    def cancel(self) -> None:
        """Drop the pending write, if any. In-flight writes keep running."""
        if self._pending is not None:
            self._pending.cancel()
        self._pending = None
        self._pending_write = None

    async def flush(self) -> None:
        """Send the pending write now and wait for every in-flight write."""
        if self._pending is not None:
            self._pending.cancel()
            self._fire()
        if self._in_flight:
            await asyncio.gather(*self._in_flight)

    # -----------------------------------------------------------------------
    # StateStorage
    # -----------------------------------------------------------------------

    async def get_item(self, name: str) -> str | None:
        """Read the stored value. Absent and failed reads both return None."""
        collection = self._collection(name)
        try:
            result = await self.actions.get_temp_collection(collection)
        except Exception as exc:
            logger.error(
                "temp_collection_read_failed",
                storage=collection,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return None

        if not result.success:
            logger.error("temp_collection_read_failed", storage=collection, error=result.error)
            return None
        return result.data or None

    async def set_item(self, name: str, value: str) -> None:
        if self.write_validator():
            self._schedule_write(self._collection(name), value)

    async def remove_item(self, name: str) -> None:
        collection = self._collection(name)
        try:
            result = await self.actions.remove_temp_collection(collection)
        except Exception as exc:
            logger.error(
                "temp_collection_remove_failed",
                storage=collection,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return

        if not result.success:
            logger.error("temp_collection_remove_failed", storage=collection, error=result.error)


def create_server_storage(
    actions: ActionTransport,
    write_validator: WriteValidator | None = None,
    *,
    alt_collection_name: str | None = None,
    debounce: int = DEFAULT_DEBOUNCE,
) -> ServerStorage:
    """Build a ServerStorage with the default always-allow validator."""
    return ServerStorage(
        actions,
        write_validator or _always_allow,
        alt_collection_name=alt_collection_name,
        debounce=debounce,
    )
