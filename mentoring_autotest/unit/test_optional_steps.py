import pytest

from mentoring_autotest.ui_testing.framework.errors import (
    ElementNotAvailableError,
    NavigationTimeoutError,
    VerificationMismatchError,
)
from mentoring_autotest.ui_testing.framework.optional_steps import StepOutcome, attempt_optional_step


async def _returns(value):
    return value


async def _raises(error):
    raise error


async def test_performed_step_carries_value():
    outcome = await attempt_optional_step("Count mentors", _returns, 7)

    assert outcome == StepOutcome("Count mentors", performed=True, value=7)
    assert outcome


async def test_missing_element_is_a_skip():
    error = ElementNotAvailableError("Search input not available on the page", target="search_input")

    outcome = await attempt_optional_step("Search", _raises, error)

    assert not outcome
    assert outcome.value is None
    assert outcome.skipped_reason == "Search input not available on the page"


@pytest.mark.parametrize(
    "error",
    [
        NavigationTimeoutError("Navigation timed out", target="/mentoring"),
        VerificationMismatchError('Text verification failed. Expected: "a", Actual: "b"'),
        ValueError("Search keyword cannot be empty"),
    ],
)
async def test_other_failures_propagate(error):
    with pytest.raises(type(error)):
        await attempt_optional_step("Search", _raises, error)
