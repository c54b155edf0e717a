"""In-process ActionTransport bound to one principal.

Used where the caller already runs server-side (page pre-hydration, scripts,
tests) and an HTTP round trip to itself would be pointless.
"""

from statesync.core.auth import Principal
from statesync.db.temp_collections import TempCollectionGateway
from statesync.schemas.action_result import ActionResult
from statesync.schemas.onboarding import OnboardingInfo
from statesync.services.onboarding_service import is_onboarding_complete_action
from statesync.services.temp_collection_service import (
    get_temp_collection_action,
    remove_temp_collection_action,
    set_temp_collection_action,
)


class LocalActions:
    def __init__(self, gateway: TempCollectionGateway, principal: Principal | None) -> None:
        self.gateway = gateway
        self.principal = principal

    async def get_temp_collection(self, collection: str) -> ActionResult[str | None]:
        return await get_temp_collection_action(collection, self.principal, self.gateway)

    async def set_temp_collection(self, collection: str, value: str) -> ActionResult[None]:
        return await set_temp_collection_action(collection, value, self.principal, self.gateway)

    async def remove_temp_collection(self, collection: str) -> ActionResult[None]:
        return await remove_temp_collection_action(collection, self.principal, self.gateway)

    async def is_onboarding_complete(self, onboarding_info: OnboardingInfo) -> ActionResult[bool]:
        return await is_onboarding_complete_action(onboarding_info)
