"""Client-visible storage names.

These identify a store's persisted slot from the client side. They are safe
to expose: the server translates them to physical collection names, which
never leave the server (see ``statesync.domain.temp_collections``).
"""

from typing import Literal

STORAGES: dict[str, str] = {
    "onboarding": "onboarding-storage",
}

StorageKey = Literal["onboarding"]
