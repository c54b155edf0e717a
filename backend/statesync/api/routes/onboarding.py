"""Onboarding page routes."""

from fastapi import APIRouter, Depends

from statesync.core.auth import Principal, require_principal
from statesync.db.temp_collections import TempCollectionGateway, get_temp_collection_gateway
from statesync.schemas.onboarding import OnboardingState
from statesync.services.onboarding_service import load_initial_onboarding_state

router = APIRouter()


@router.get("/initial-state", response_model=OnboardingState, response_model_by_alias=True)
async def get_initial_state(
    principal: Principal = Depends(require_principal),
    gateway: TempCollectionGateway = Depends(get_temp_collection_gateway),
):
    """State the onboarding page seeds its store with.

    Returns the persisted state when there is one, otherwise defaults with
    the name prefilled from the session profile.

    Raises:
        HTTPException(401): If there is no valid session
    """
    return await load_initial_onboarding_state(principal, gateway)
