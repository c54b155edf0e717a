"""Temp collection actions: the server side of the debounced storage adapter.

Each action:
1. maps the client storage name to its server collection; unmapped names get
   "Invalid collection" and Redis is never touched
2. requires an authenticated principal ("User not found" otherwise)
3. runs the gateway call; anything unexpected is logged here with its cause
   and reported to the client as "Failed to <verb> temp collection"

Actions never raise. Results are safe to hand to the client as-is.
"""

import structlog

from statesync.core.auth import Principal
from statesync.db.temp_collections import TempCollectionGateway
from statesync.domain.temp_collections import get_collection_from_storage
from statesync.schemas.action_result import ActionResult, error_result, success_result

logger = structlog.get_logger(__name__)

INVALID_COLLECTION = "Invalid collection"
USER_NOT_FOUND = "User not found"


def _resolve(collection: str, principal: Principal | None, action: str) -> tuple[str | None, ActionResult | None]:
    """Return (server_collection, None) or (None, rejection result)."""
    server_collection = get_collection_from_storage(collection)
    if server_collection is None:
        logger.warning("temp_collection_action_rejected", action=action, reason="invalid_collection")
        return None, error_result(INVALID_COLLECTION)

    if principal is None:
        logger.warning("temp_collection_action_rejected", action=action, reason="user_not_found")
        return None, error_result(USER_NOT_FOUND)

    return server_collection, None


async def get_temp_collection_action(
    collection: str,
    principal: Principal | None,
    gateway: TempCollectionGateway,
) -> ActionResult[str | None]:
    """Get the current principal's value for a client storage name."""
    try:
        server_collection, rejected = _resolve(collection, principal, "get")
        if rejected is not None:
            return rejected

        value = await gateway.get(principal.principal_id, server_collection)
        return success_result(value)
    except Exception as exc:
        logger.error(
            "temp_collection_get_failed",
            storage=collection,
            error=str(exc),
            error_type=type(exc).__name__,
            exc_info=True,
        )
        return error_result("Failed to get temp collection")


async def set_temp_collection_action(
    collection: str,
    value: str,
    principal: Principal | None,
    gateway: TempCollectionGateway,
) -> ActionResult[None]:
    """Store ``value`` for the current principal under a client storage name."""
    try:
        server_collection, rejected = _resolve(collection, principal, "set")
        if rejected is not None:
            return rejected

        await gateway.set(principal.principal_id, server_collection, value)
        return success_result()
    except Exception as exc:
        logger.error(
            "temp_collection_set_failed",
            storage=collection,
            error=str(exc),
            error_type=type(exc).__name__,
            exc_info=True,
        )
        return error_result("Failed to set temp collection")


async def remove_temp_collection_action(
    collection: str,
    principal: Principal | None,
    gateway: TempCollectionGateway,
) -> ActionResult[None]:
    """Remove the current principal's value for a client storage name."""
    try:
        server_collection, rejected = _resolve(collection, principal, "remove")
        if rejected is not None:
            return rejected

        await gateway.remove(principal.principal_id, server_collection)
        return success_result()
    except Exception as exc:
        logger.error(
            "temp_collection_remove_failed",
            storage=collection,
            error=str(exc),
            error_type=type(exc).__name__,
            exc_info=True,
        )
        return error_result("Failed to remove temp collection")
