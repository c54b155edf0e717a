"""Onboarding actions: completion evaluator and server-side pre-hydration."""

import structlog
from pydantic import ValidationError

from statesync.core.auth import Principal
from statesync.db.temp_collections import TempCollectionGateway
from statesync.domain.storages import STORAGES
from statesync.schemas.action_result import ActionResult, success_result
from statesync.schemas.onboarding import INITIAL_STATE, OnboardingInfo, OnboardingState
from statesync.schemas.persisted import PersistedEnvelope
from statesync.services.temp_collection_service import get_temp_collection_action

logger = structlog.get_logger(__name__)

ANONYMOUS_NAME = "Anonymous"


async def is_onboarding_complete_action(onboarding_info: OnboardingInfo) -> ActionResult[bool]:
    """Decide whether every onboarding field has been filled in.

    An empty string, 0 or None in any of name, hobby, age or description
    means incomplete. Never returns an error result: errors are reserved for
    the transport, so callers can tell "incomplete" from "unknown".
    """
    is_complete = bool(
        onboarding_info.name
        and onboarding_info.hobby
        and onboarding_info.age
        and onboarding_info.description
    )
    return success_result(is_complete)


def default_onboarding_state(principal: Principal) -> OnboardingState:
    """Initial state with the name prefilled from the principal's profile."""
    info = INITIAL_STATE.onboarding_info.model_copy(
        update={"name": principal.display_name or ANONYMOUS_NAME},
    )
    return INITIAL_STATE.model_copy(update={"onboarding_info": info})


async def load_initial_onboarding_state(
    principal: Principal,
    gateway: TempCollectionGateway,
) -> OnboardingState:
    """Read the persisted onboarding state so the page can render it pre-hydrated.

    The client store built from this state skips its own hydration read.
    Falls back to ``default_onboarding_state`` when nothing usable is stored.
    """
    result = await get_temp_collection_action(STORAGES["onboarding"], principal, gateway)

    if not result.success or not result.data:
        return default_onboarding_state(principal)

    try:
        envelope = PersistedEnvelope.model_validate_json(result.data)
        return OnboardingState.model_validate(envelope.state)
    except ValidationError as exc:
        logger.warning(
            "onboarding_state_unreadable",
            principal_id=principal.principal_id,
            error_count=exc.error_count(),
        )
        return default_onboarding_state(principal)
