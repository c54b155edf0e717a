"""Onboarding state schemas shared by the store and the server actions."""

from pydantic import BaseModel, ConfigDict, Field

# Whatever a form input can produce. "" for a cleared number input, a float
# for a fractional age; the step rules decide what is valid.
FieldValue = str | int | float | None


class OnboardingInfo(BaseModel):
    """The onboarding form record.

    Fields hold whatever the form last wrote, valid or not, so the record
    survives persistence, broadcast and the evaluator round trip unchanged.
    Per-step rules live in ``statesync.domain.onboarding``.
    """

    model_config = ConfigDict(frozen=True)

    name: FieldValue = ""
    hobby: FieldValue = "Art"
    age: FieldValue = 0
    description: FieldValue = None


class OnboardingState(BaseModel):
    """Store state: the form record plus the cached completion flag.

    ``is_complete`` caches the last evaluator answer and may lag
    ``onboarding_info`` until the evaluator responds. Serialized with the
    camelCase aliases used by the persisted envelope.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    onboarding_info: OnboardingInfo = Field(default_factory=OnboardingInfo, alias="onboardingInfo")
    is_complete: bool = Field(default=False, alias="isComplete")


INITIAL_STATE = OnboardingState(
    onboarding_info=OnboardingInfo(name="", hobby="Art", age=0),
    is_complete=False,
)

ONBOARDING_FIELDS: tuple[str, ...] = tuple(OnboardingInfo.model_fields)
