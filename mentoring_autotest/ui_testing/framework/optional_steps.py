"""
Optional page affordances in scenarios.

Some builds of the mentoring page ship without a search box, category
filters or login buttons. Scenarios exercise those through
`attempt_optional_step`, which turns exactly one failure kind
(ELEMENT_NOT_AVAILABLE) into a logged skip. Every other error propagates
and fails the scenario.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

import allure
from loguru import logger

from .errors import ElementNotAvailableError


@dataclass(frozen=True)
class StepOutcome:
    """Result of an optional step: `performed` or skipped with a reason."""

    description: str
    performed: bool
    value: Any = None
    skipped_reason: Optional[str] = None

    def __bool__(self) -> bool:
        return self.performed


async def attempt_optional_step(
    description: str,
    action: Callable[..., Awaitable[Any]],
    *args: Any,
    **kwargs: Any,
) -> StepOutcome:
    """
    Run `action(*args, **kwargs)`; absent affordances become a skip.

    Only ElementNotAvailableError is caught. Navigation, readiness,
    verification and interaction failures are re-raised unchanged.
    """
    try:
        value = await action(*args, **kwargs)
    except ElementNotAvailableError as e:
        logger.info(f"⏭️ {description}: not available on this build ({e.message})")
        allure.attach(
            str(e),
            name=f"Skipped: {description}",
            attachment_type=allure.attachment_type.TEXT,
        )
        return StepOutcome(description, performed=False, skipped_reason=e.message)
    return StepOutcome(description, performed=True, value=value)


__all__ = [
    "StepOutcome",
    "attempt_optional_step",
]
