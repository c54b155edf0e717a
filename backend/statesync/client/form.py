"""Form helper for one onboarding step."""

from typing import Any

from statesync.client.provider import get_onboarding_store
from statesync.client.store import OnboardingStore
from statesync.domain.onboarding import STEPS, next_step, validate_step

SUMMARY_PATH = "onboarding/summary"


class OnboardingForm:
    """Binds one onboarding step to the store.

    Values are always written to the store, valid or not, so the user's input
    survives; ``error`` tells the UI what to show.
    """

    def __init__(self, step: str, store: OnboardingStore | None = None) -> None:
        if step not in STEPS:
            raise ValueError(f"Unknown onboarding step: {step}")
        self.step = step
        self.store = store or get_onboarding_store()
        self.error: str | None = None

    @property
    def current_value(self) -> Any:
        return getattr(self.store.onboarding_info, self.step)

    def update_value(self, value: Any) -> None:
        self.error = validate_step(self.step, value)
        self.store.set_onboarding_info(self.step, value)

    def continue_path(self) -> str | None:
        """Path of the next page, or None (with ``error`` set) if the step is invalid."""
        self.error = validate_step(self.step, self.current_value)
        if self.error:
            return None

        following = next_step(self.step)
        return f"onboarding?type={following}" if following else SUMMARY_PATH
