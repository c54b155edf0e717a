"""Server-only temp collection names and the storage -> collection mapping.

Nothing under ``statesync.client`` may import this module. Clients only know
storage names; the actions translate them here, and anything that is not in
the map is rejected before the document store is touched.
"""

from statesync.domain.storages import STORAGES

TEMP_COLLECTIONS: dict[str, str] = {
    "onboarding": "temp-onboarding",
}

TEMP_COLLECTION_NAMES: frozenset[str] = frozenset(TEMP_COLLECTIONS.values())


def _build_collections_map(storages: dict[str, str], collections: dict[str, str]) -> dict[str, str]:
    """Pair each storage name with the collection registered under the same key.

    Raises:
        ValueError: If the two tables disagree on keys or the pairing is not one-to-one
    """
    if storages.keys() != collections.keys():
        missing = sorted(storages.keys() ^ collections.keys())
        raise ValueError(f"Storage and temp collection tables disagree on keys: {missing}")

    mapping = {storages[key]: collections[key] for key in storages}
    if len(set(mapping.values())) != len(mapping):
        raise ValueError("Temp collection mapping is not one-to-one")
    return mapping


TEMP_COLLECTIONS_MAP: dict[str, str] = _build_collections_map(STORAGES, TEMP_COLLECTIONS)


def get_collection_from_storage(storage_name: str) -> str | None:
    """Map a client storage name to its server collection, or None if unmapped."""
    return TEMP_COLLECTIONS_MAP.get(storage_name)
