"""Server action endpoints (RPC style).

Every endpoint answers 200 with an ``ActionResult`` body. Rejections
("Invalid collection", "User not found") and internal failures travel inside
the result so the client store can log them and carry on.
"""

from fastapi import APIRouter, Depends

from statesync.core.auth import Principal, get_optional_principal
from statesync.db.temp_collections import TempCollectionGateway, get_temp_collection_gateway
from statesync.schemas.action_result import ActionResult
from statesync.schemas.onboarding import OnboardingInfo
from statesync.schemas.temp_collections import CollectionRequest, SetCollectionRequest
from statesync.services.onboarding_service import is_onboarding_complete_action
from statesync.services.temp_collection_service import (
    get_temp_collection_action,
    remove_temp_collection_action,
    set_temp_collection_action,
)

router = APIRouter()


@router.post(
    "/temp-collections/get",
    response_model=ActionResult[str | None],
    response_model_exclude_unset=True,
)
async def get_temp_collection(
    request: CollectionRequest,
    principal: Principal | None = Depends(get_optional_principal),
    gateway: TempCollectionGateway = Depends(get_temp_collection_gateway),
):
    """Read the caller's stored value for a client storage name."""
    return await get_temp_collection_action(request.collection, principal, gateway)


@router.post(
    "/temp-collections/set",
    response_model=ActionResult[None],
    response_model_exclude_unset=True,
)
async def set_temp_collection(
    request: SetCollectionRequest,
    principal: Principal | None = Depends(get_optional_principal),
    gateway: TempCollectionGateway = Depends(get_temp_collection_gateway),
):
    """Overwrite the caller's stored value for a client storage name."""
    return await set_temp_collection_action(request.collection, request.value, principal, gateway)


@router.post(
    "/temp-collections/remove",
    response_model=ActionResult[None],
    response_model_exclude_unset=True,
)
async def remove_temp_collection(
    request: CollectionRequest,
    principal: Principal | None = Depends(get_optional_principal),
    gateway: TempCollectionGateway = Depends(get_temp_collection_gateway),
):
    """Delete the caller's stored value for a client storage name."""
    return await remove_temp_collection_action(request.collection, principal, gateway)


@router.post(
    "/onboarding/is-complete",
    response_model=ActionResult[bool],
    response_model_exclude_unset=True,
)
async def is_onboarding_complete(onboarding_info: OnboardingInfo):
    """Evaluate whether the submitted onboarding record is complete.

    Fields are taken as the form left them and judged by truthiness only: a
    cleared input ("") answers ``data=false``, not a 422.
    """
    return await is_onboarding_complete_action(onboarding_info)
