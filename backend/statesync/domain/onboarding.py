"""Onboarding step flow and per-step field rules.

The store accepts any value the form writes; these rules only decide which
error message the form shows and whether it may move to the next step.
"""

from typing import Any, Literal, get_args

Hobby = Literal["Sports", "Food", "Games", "Travel", "Music", "Art", "Technology"]
HOBBIES: tuple[str, ...] = get_args(Hobby)

OnboardingStep = Literal["name", "hobby", "age", "description"]

DESCRIPTION_MAX_LENGTH = 100

# step -> next step (None on the last one)
STEPS: dict[str, str | None] = {
    "name": "hobby",
    "hobby": "age",
    "age": "description",
    "description": None,
}


def _validate_name(value: Any) -> str | None:
    if value is None or value == "":
        return "Name is required"
    if not isinstance(value, str):
        return "Name is invalid"
    return None


def _validate_hobby(value: Any) -> str | None:
    if value is None:
        return "Hobby is required"
    if value not in HOBBIES:
        return "Hobby is invalid"
    return None


def _validate_age(value: Any) -> str | None:
    # bool is an int subclass; a checkbox value is not an age
    if isinstance(value, bool) or not isinstance(value, int):
        return "Age must be a whole number"
    if value < 0:
        return "Age must be positive"
    return None


def _validate_description(value: Any) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        return "Description is invalid"
    if len(value) > DESCRIPTION_MAX_LENGTH:
        return "Description is too long"
    return None


_VALIDATORS = {
    "name": _validate_name,
    "hobby": _validate_hobby,
    "age": _validate_age,
    "description": _validate_description,
}


def validate_step(step: str, value: Any) -> str | None:
    """Validate one step's value.

    Returns:
        None when valid, otherwise the first error message for the step

    Raises:
        ValueError: If step is not an onboarding step
    """
    try:
        validator = _VALIDATORS[step]
    except KeyError:
        raise ValueError(f"Unknown onboarding step: {step}") from None
    return validator(value)


def next_step(step: str) -> str | None:
    """Return the step that follows ``step``, or None after the last one."""
    if step not in STEPS:
        raise ValueError(f"Unknown onboarding step: {step}")
    return STEPS[step]
