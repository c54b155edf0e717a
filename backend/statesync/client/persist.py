"""JSON persistence layer between a store and its string storage."""

from collections.abc import Callable
from dataclasses import dataclass

import structlog
from pydantic import ValidationError

from statesync.client.storage import StateStorage
from statesync.schemas.persisted import PersistedEnvelope

logger = structlog.get_logger(__name__)


class JSONStorage:
    """Serializes ``PersistedEnvelope`` objects to and from a ``StateStorage``.

    The underlying storage is built on first use, so a store that never
    persists never creates one.
    """

    def __init__(self, get_storage: Callable[[], StateStorage]) -> None:
        self._get_storage = get_storage
        self._storage: StateStorage | None = None

    @property
    def storage(self) -> StateStorage:
        if self._storage is None:
            self._storage = self._get_storage()
        return self._storage

    async def get_item(self, name: str) -> PersistedEnvelope | None:
        raw = await self.storage.get_item(name)
        if raw is None:
            return None

        try:
            return PersistedEnvelope.model_validate_json(raw)
        except ValidationError as exc:
            logger.warning("persisted_state_unreadable", storage=name, error_count=exc.error_count())
            return None

    async def set_item(self, name: str, envelope: PersistedEnvelope) -> None:
        await self.storage.set_item(name, envelope.model_dump_json())

    async def remove_item(self, name: str) -> None:
        await self.storage.remove_item(name)


@dataclass
class PersistOptions:
    """Where and how a store persists itself.

    ``skip_hydration`` defaults to True: stores seeded with server-rendered
    state must not re-read it; call ``rehydrate()`` explicitly otherwise.
    """

    name: str
    storage: JSONStorage
    version: int = 0
    skip_hydration: bool = True
