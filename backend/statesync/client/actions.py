"""How client code reaches the server actions.

``ActionTransport`` is the only server surface the store and the storage
adapter see. ``HttpActions`` posts to the ``/api/actions`` endpoints with
httpx and sends the session token as the session cookie. The in-process
variant used for server-side pre-hydration lives server-side, in
``statesync.services.local_actions``.

Transport failures (connection errors, 5xx) raise ``httpx.HTTPError``; the
callers log and degrade.
"""

from typing import Protocol

import httpx

from statesync.core.config import get_settings
from statesync.schemas.action_result import ActionResult
from statesync.schemas.onboarding import OnboardingInfo

ACTIONS_PREFIX = "/api/actions"
DEFAULT_TIMEOUT_SECONDS = 10.0


class ActionTransport(Protocol):
    async def get_temp_collection(self, collection: str) -> ActionResult[str | None]: ...

    async def set_temp_collection(self, collection: str, value: str) -> ActionResult[None]: ...

    async def remove_temp_collection(self, collection: str) -> ActionResult[None]: ...

    async def is_onboarding_complete(self, onboarding_info: OnboardingInfo) -> ActionResult[bool]: ...


class HttpActions:
    """ActionTransport over HTTP.

    Pass ``client`` to reuse an existing ``httpx.AsyncClient`` (for example
    one built on ``httpx.ASGITransport`` in tests); otherwise one is created
    and owned by this instance.
    """

    def __init__(
        self,
        base_url: str | None = None,
        session_token: str | None = None,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        settings = get_settings()
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url or settings.backend_url,
            timeout=timeout,
        )
        self._headers = {"Cookie": f"{settings.session_cookie_name}={session_token}"} if session_token else {}

    async def _post(self, path: str, payload: dict, result_type: type[ActionResult]) -> ActionResult:
        response = await self._client.post(f"{ACTIONS_PREFIX}{path}", json=payload, headers=self._headers)
        response.raise_for_status()
        return result_type.model_validate(response.json())

    async def get_temp_collection(self, collection: str) -> ActionResult[str | None]:
        return await self._post("/temp-collections/get", {"collection": collection}, ActionResult[str | None])

    async def set_temp_collection(self, collection: str, value: str) -> ActionResult[None]:
        return await self._post(
            "/temp-collections/set",
            {"collection": collection, "value": value},
            ActionResult[None],
        )

    async def remove_temp_collection(self, collection: str) -> ActionResult[None]:
        return await self._post("/temp-collections/remove", {"collection": collection}, ActionResult[None])

    async def is_onboarding_complete(self, onboarding_info: OnboardingInfo) -> ActionResult[bool]:
        return await self._post(
            "/onboarding/is-complete",
            onboarding_info.model_dump(mode="json"),
            ActionResult[bool],
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
