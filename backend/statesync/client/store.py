"""OnboardingStore: reactive onboarding state persisted through server actions.

One store instance is the source of truth for ``OnboardingState`` within one
client context. Every committed change is, in this order:

1. applied synchronously (readers see it immediately)
2. delivered to subscribed listeners
3. handed to the persistence layer, which debounces the actual server write
4. published on the message bus for other contexts using the same storage name

State received from the bus goes through steps 1 and 2 only. Re-persisting or
re-publishing it would echo writes between contexts.

``set_onboarding_info`` also fires ``calculate_is_complete`` in the
background, so ``is_complete`` can briefly lag ``onboarding_info``. A failed
evaluation leaves the previous flag in place.

All mutating methods must run on the event loop thread.
"""

import asyncio
import operator
import uuid
from collections.abc import Callable, Coroutine
from typing import Any

import structlog
from pydantic import ValidationError

from statesync.client.actions import ActionTransport
from statesync.client.broadcast import MessageBus, NullBus
from statesync.client.persist import JSONStorage, PersistOptions
from statesync.client.storage import create_server_storage
from statesync.core.config import get_settings
from statesync.domain.storages import STORAGES
from statesync.schemas.onboarding import (
    INITIAL_STATE,
    ONBOARDING_FIELDS,
    FieldValue,
    OnboardingInfo,
    OnboardingState,
)
from statesync.schemas.persisted import PersistedEnvelope

logger = structlog.get_logger(__name__)

Listener = Callable[[Any, Any], None]
Unsubscribe = Callable[[], None]


class OnboardingStore:
    """Onboarding state container with persistence and cross-context sync.

    Args:
        actions: Transport for the completion evaluator
        init_state: Starting state (server pre-hydrated data, or INITIAL_STATE)
        persist: Persistence options; None keeps the store memory-only
        bus: Message bus shared with other contexts; defaults to NullBus
    """

    def __init__(
        self,
        actions: ActionTransport,
        *,
        init_state: OnboardingState | None = None,
        persist: PersistOptions | None = None,
        bus: MessageBus | None = None,
    ) -> None:
        self._actions = actions
        self._state = init_state or INITIAL_STATE
        self._persist = persist
        self._bus = bus or NullBus()
        self._origin = uuid.uuid4().hex
        self._listeners: list[Listener] = []
        self._tasks: set[asyncio.Task] = set()
        self._handoffs: set[asyncio.Task] = set()
        self._closed = False
        self.has_hydrated = False

        self._unsubscribe_bus = self._bus.subscribe(self.name, self._on_broadcast)

        if persist is not None and not persist.skip_hydration:
            self._spawn(self.rehydrate())

    @property
    def name(self) -> str:
        return self._persist.name if self._persist else STORAGES["onboarding"]

    # -----------------------------------------------------------------------
    # Reading
    # -----------------------------------------------------------------------

    @property
    def state(self) -> OnboardingState:
        return self._state

    @property
    def onboarding_info(self):
        return self._state.onboarding_info

    @property
    def is_complete(self) -> bool:
        return self._state.is_complete

    def subscribe(
        self,
        listener: Listener,
        selector: Callable[[OnboardingState], Any] | None = None,
        equality_fn: Callable[[Any, Any], bool] = operator.eq,
    ) -> Unsubscribe:
        """Call ``listener(current, previous)`` after every committed change.

        With a ``selector`` the listener receives the selected slices and only
        fires when ``equality_fn`` says the slice changed.
        """
        if selector is None:
            wrapped = listener
        else:

            def wrapped(state: OnboardingState, previous: OnboardingState) -> None:
                current_slice = selector(state)
                previous_slice = selector(previous)
                if not equality_fn(current_slice, previous_slice):
                    listener(current_slice, previous_slice)

        self._listeners.append(wrapped)

        def unsubscribe() -> None:
            if wrapped in self._listeners:
                self._listeners.remove(wrapped)

        return unsubscribe

    # -----------------------------------------------------------------------
    # Actions
    # -----------------------------------------------------------------------

    def set_onboarding_info(self, field: str, value: FieldValue) -> None:
        """Replace one onboarding field, then re-evaluate completion in the background.

        Invalid form input ("", a negative age) is stored as-is.

        Raises:
            ValueError: If field is not an onboarding field, or value is not a
                scalar form value (pydantic.ValidationError)
        """
        if field not in ONBOARDING_FIELDS:
            raise ValueError(f"Unknown onboarding field: {field}")

        info = OnboardingInfo.model_validate({**self._state.onboarding_info.model_dump(), field: value})
        self._commit(self._state.model_copy(update={"onboarding_info": info}))
        self._spawn(self.calculate_is_complete())

    def set_is_complete(self, is_complete: bool) -> None:
        self._commit(self._state.model_copy(update={"is_complete": is_complete}))

    def reset_onboarding_info(self) -> None:
        """Return the whole state, completion flag included, to INITIAL_STATE."""
        self._commit(INITIAL_STATE)

    async def calculate_is_complete(self) -> None:
        """Ask the server evaluator whether the current record is complete.

        On success ``is_complete`` is overwritten with the answer. On an error
        result or a transport failure the error is logged and ``is_complete``
        keeps its previous value.
        """
        onboarding_info = self._state.onboarding_info
        try:
            result = await self._actions.is_onboarding_complete(onboarding_info)
        except Exception as exc:
            logger.error(
                "onboarding_completion_check_failed",
                store=self.name,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return

        if not result.success:
            logger.error("onboarding_completion_check_failed", store=self.name, error=result.error)
            return

        if not self._closed:
            self.set_is_complete(bool(result.data))

    # -----------------------------------------------------------------------
    # Persistence
    # -----------------------------------------------------------------------

    async def rehydrate(self) -> None:
        """Load persisted state through the storage adapter.

        Nothing stored (or an unreadable read) keeps the current state. The
        loaded state is not written back and not broadcast.
        """
        if self._persist is None:
            return

        envelope = await self._persist.storage.get_item(self.name)
        if envelope is None:
            self.has_hydrated = True
            return

        if envelope.version != self._persist.version:
            logger.warning(
                "persisted_state_version_mismatch",
                store=self.name,
                stored_version=envelope.version,
                expected_version=self._persist.version,
            )
            self.has_hydrated = True
            return

        merged = {**self._state.model_dump(by_alias=True), **envelope.state}
        try:
            state = OnboardingState.model_validate(merged)
        except ValidationError as exc:
            logger.warning("persisted_state_invalid", store=self.name, error_count=exc.error_count())
        else:
            self._commit(state, persist=False, broadcast=False)

        self.has_hydrated = True

    async def clear_storage(self) -> None:
        """Delete the persisted state on the server. In-memory state is kept."""
        if self._persist is not None:
            await self._persist.storage.remove_item(self.name)

    def _persist_state(self) -> None:
        if self._persist is None:
            return
        envelope = PersistedEnvelope(
            state=self._state.model_dump(mode="json", by_alias=True),
            version=self._persist.version,
        )
        task = self._spawn(self._persist.storage.set_item(self.name, envelope))
        self._handoffs.add(task)
        task.add_done_callback(self._handoffs.discard)

    # -----------------------------------------------------------------------
    # Broadcast
    # -----------------------------------------------------------------------

    def _on_broadcast(self, payload: dict[str, Any]) -> None:
        if self._closed or payload.get("origin") == self._origin:
            return

        try:
            state = OnboardingState.model_validate(payload.get("state"))
        except ValidationError as exc:
            logger.warning("broadcast_state_invalid", store=self.name, error_count=exc.error_count())
            return

        self._commit(state, persist=False, broadcast=False)

    # -----------------------------------------------------------------------
    # Internals
    # -----------------------------------------------------------------------

    def _commit(self, state: OnboardingState, *, persist: bool = True, broadcast: bool = True) -> None:
        previous = self._state
        if state == previous:
            return

        self._state = state
        for listener in list(self._listeners):
            listener(state, previous)

        if persist:
            self._persist_state()
        if broadcast:
            self._bus.publish(
                self.name,
                {"origin": self._origin, "state": state.model_dump(mode="json", by_alias=True)},
            )

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> asyncio.Task:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def wait_for_background_tasks(self) -> None:
        """Wait until every evaluation and persistence hand-off started so far finished."""
        while self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    def close(self) -> None:
        """Detach from the bus and cancel background evaluations and hydration.

        Persistence hand-offs keep running, so the last committed state still
        reaches the storage adapter, and a debounced write already scheduled
        there is not cancelled.
        """
        self._closed = True
        self._unsubscribe_bus()
        for task in list(self._tasks):
            if task not in self._handoffs:
                task.cancel()


def create_onboarding_store(
    actions: ActionTransport,
    init_state: OnboardingState | None = None,
    *,
    bus: MessageBus | None = None,
    debounce: int | None = None,
    skip_hydration: bool = True,
) -> OnboardingStore:
    """Build the onboarding store persisted to the "onboarding-storage" slot.

    ``debounce`` defaults to ``settings.onboarding_persist_debounce_ms``.
    """
    if debounce is None:
        debounce = get_settings().onboarding_persist_debounce_ms

    storage = JSONStorage(lambda: create_server_storage(actions, debounce=debounce))
    persist = PersistOptions(
        name=STORAGES["onboarding"],
        storage=storage,
        skip_hydration=skip_hydration,
    )
    return OnboardingStore(actions, init_state=init_state, persist=persist, bus=bus)
