"""Explicit ownership of the onboarding store.

There is no module-level store. A provider owns exactly one store for its
lifetime and binds it to the current context while entered; consumers look
it up with ``get_onboarding_store`` / ``use_onboarding_store`` and fail loudly
when no provider is active.

    provider = OnboardingStoreProvider(actions, initial_data=state)
    with provider:
        name = use_onboarding_store(lambda s: s.onboarding_info.name)
"""

from collections.abc import Callable
from contextvars import ContextVar, Token
from typing import TypeVar

from statesync.client.actions import ActionTransport
from statesync.client.broadcast import MessageBus
from statesync.client.store import OnboardingStore, create_onboarding_store
from statesync.core.exceptions import StoreNotInitializedError
from statesync.schemas.onboarding import OnboardingState

T = TypeVar("T")

_current_store: ContextVar[OnboardingStore | None] = ContextVar("onboarding_store", default=None)


class OnboardingStoreProvider:
    """Creates the store once, on first use, and binds it while entered.

    Entering the provider again (nested or in another task) binds the same
    store; leaving restores whatever was bound before.
    """

    def __init__(
        self,
        actions: ActionTransport,
        initial_data: OnboardingState | None = None,
        *,
        bus: MessageBus | None = None,
        debounce: int | None = None,
    ) -> None:
        self._actions = actions
        self._initial_data = initial_data
        self._bus = bus
        self._debounce = debounce
        self._store: OnboardingStore | None = None
        self._tokens: list[Token] = []

    @property
    def store(self) -> OnboardingStore:
        if self._store is None:
            self._store = create_onboarding_store(
                self._actions,
                self._initial_data,
                bus=self._bus,
                debounce=self._debounce,
            )
        return self._store

    def __enter__(self) -> OnboardingStore:
        store = self.store
        self._tokens.append(_current_store.set(store))
        return store

    def __exit__(self, exc_type, exc, tb) -> None:
        _current_store.reset(self._tokens.pop())

    async def __aenter__(self) -> OnboardingStore:
        return self.__enter__()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.__exit__(exc_type, exc, tb)

    def close(self) -> None:
        if self._store is not None:
            self._store.close()


def get_onboarding_store() -> OnboardingStore:
    """Return the store bound by the active provider.

    Raises:
        StoreNotInitializedError: If called outside an OnboardingStoreProvider
    """
    store = _current_store.get()
    if store is None:
        raise StoreNotInitializedError("use_onboarding_store must be used within OnboardingStoreProvider")
    return store


def use_onboarding_store(selector: Callable[[OnboardingStore], T]) -> T:
    """Select a value (state slice or bound action) from the active store."""
    return selector(get_onboarding_store())
