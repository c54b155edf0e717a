"""Client-side state store package.

Nothing in here may import ``statesync.domain.temp_collections``: the client
only ever sees storage names.
"""

from statesync.client.actions import ActionTransport, HttpActions
from statesync.client.broadcast import InProcessBus, MessageBus, NullBus, RedisBus
from statesync.client.form import OnboardingForm
from statesync.client.provider import OnboardingStoreProvider, get_onboarding_store, use_onboarding_store
from statesync.client.storage import DEFAULT_DEBOUNCE, ServerStorage, StateStorage, create_server_storage
from statesync.client.store import OnboardingStore, create_onboarding_store

__all__ = [
    "DEFAULT_DEBOUNCE",
    "ActionTransport",
    "HttpActions",
    "InProcessBus",
    "MessageBus",
    "NullBus",
    "OnboardingForm",
    "OnboardingStore",
    "OnboardingStoreProvider",
    "RedisBus",
    "ServerStorage",
    "StateStorage",
    "create_onboarding_store",
    "create_server_storage",
    "get_onboarding_store",
    "use_onboarding_store",
]
