"""Remote Collection Gateway: per-principal temp documents in Redis.

Each (principal, collection) pair owns exactly one document at
``principals/{principal_id}/temp/{collection}``, stored as a Redis hash with a
single ``value`` field. The gateway never looks inside ``value``.

Three outcomes are kept apart in logs and in what callers see:
- rejected   -> InvalidCollectionError, raised before any Redis call
- not found  -> get() returns None, logged at debug
- failure    -> get() logs temp_collection_read_failed and returns None;
                set()/remove() raise RemoteStoreError
"""

import redis.asyncio as redis
import structlog
from redis.exceptions import RedisError

from statesync.core.exceptions import InvalidCollectionError, InvalidPrincipalError, RemoteStoreError
from statesync.db.redis import get_redis
from statesync.domain.temp_collections import TEMP_COLLECTION_NAMES

logger = structlog.get_logger(__name__)

DOC_PATH_TEMPLATE = "principals/{principal_id}/temp/{collection}"
VALUE_FIELD = "value"


def validate_collection_name(name: str) -> None:
    """Reject any collection that is not on the server allow-list.

    Raises:
        InvalidCollectionError: If name is not a known temp collection
    """
    if name not in TEMP_COLLECTION_NAMES:
        logger.error("temp_collection_rejected", collection=name)
        raise InvalidCollectionError(name)


def doc_path(principal_id: str, collection: str) -> str:
    """Build the document path for a principal's temp collection.

    Raises:
        InvalidPrincipalError: If principal_id is empty or contains a path separator
    """
    if not principal_id or "/" in principal_id:
        raise InvalidPrincipalError(principal_id)
    return DOC_PATH_TEMPLATE.format(principal_id=principal_id, collection=collection)


class TempCollectionGateway:
    """get/set/remove of one string value per principal and temp collection."""

    def __init__(self, redis_client: redis.Redis):
        self.redis = redis_client

    async def get(self, principal_id: str, collection: str) -> str | None:
        """Read the stored value.

        Returns:
            The stored string, or None when the document is absent or the read failed

        Raises:
            InvalidCollectionError: If collection is not allowed
        """
        validate_collection_name(collection)
        path = doc_path(principal_id, collection)

        try:
            value = await self.redis.hget(path, VALUE_FIELD)
        except RedisError as exc:
            logger.error(
                "temp_collection_read_failed",
                collection=collection,
                principal_id=principal_id,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return None

        if value is None:
            logger.debug("temp_collection_not_found", collection=collection, principal_id=principal_id)
        return value

    async def set(self, principal_id: str, collection: str, value: str) -> None:
        """Overwrite the stored value (the whole document is replaced).

        Raises:
            InvalidCollectionError: If collection is not allowed
            RemoteStoreError: If Redis rejects the write
        """
        validate_collection_name(collection)
        path = doc_path(principal_id, collection)

        try:
            async with self.redis.pipeline(transaction=True) as pipe:
                pipe.delete(path)
                pipe.hset(path, VALUE_FIELD, value)
                await pipe.execute()
        except RedisError as exc:
            raise RemoteStoreError("set", path) from exc

    async def remove(self, principal_id: str, collection: str) -> None:
        """Delete the document. Deleting an absent document is not an error.

        Raises:
            InvalidCollectionError: If collection is not allowed
            RemoteStoreError: If Redis rejects the delete
        """
        validate_collection_name(collection)
        path = doc_path(principal_id, collection)

        try:
            await self.redis.delete(path)
        except RedisError as exc:
            raise RemoteStoreError("remove", path) from exc


def get_temp_collection_gateway() -> TempCollectionGateway:
    """FastAPI dependency bound to the shared Redis client.

    Override in tests via app.dependency_overrides.
    """
    return TempCollectionGateway(get_redis())
