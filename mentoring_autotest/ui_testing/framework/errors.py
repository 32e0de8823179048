"""
================================================================================
UI Automation Errors
================================================================================

Closed error taxonomy for the UI framework.

Every error raised by the page layer is a `UIAutomationError` subclass with
an `ErrorKind` tag, so scenarios can branch on the kind (e.g. treat a missing
optional affordance as a skip) without matching message strings.

Each error carries the context needed to diagnose a failure without a rerun:
    - target: description of the element or URL being acted on
    - elapsed: seconds spent before the failure
    - url: page URL at the time of the failure

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Kinds of UI automation failures."""

    ELEMENT_NOT_AVAILABLE = "element_not_available"
    NAVIGATION_TIMEOUT = "navigation_timeout"
    NAVIGATION_ERROR = "navigation_error"
    INSUFFICIENT_CONTENT = "insufficient_content"
    VERIFICATION_MISMATCH = "verification_mismatch"
    READINESS_TIMEOUT = "readiness_timeout"
    PAGE_MISMATCH = "page_mismatch"
    INTERACTION_FAILED = "interaction_failed"


class UIAutomationError(Exception):
    """
    Base class for all page-layer failures.

    Attributes:
        kind: ErrorKind tag for this failure
        message: Human-readable description (without context suffix)
        target: Element or URL description
        elapsed: Seconds spent before failing
        url: Current page URL when the failure happened
    """

    kind: ErrorKind = ErrorKind.INTERACTION_FAILED

    def __init__(
        self,
        message: str,
        *,
        target: Optional[str] = None,
        elapsed: Optional[float] = None,
        url: Optional[str] = None,
    ):
        self.message = message
        self.target = target
        self.elapsed = elapsed
        self.url = url
        super().__init__(self._format())

    def _format(self) -> str:
        context = []
        if self.target:
            context.append(f"target={self.target}")
        if self.elapsed is not None:
            context.append(f"elapsed={self.elapsed:.2f}s")
        if self.url:
            context.append(f"url={self.url}")
        if not context:
            return self.message
        return f"{self.message} [{', '.join(context)}]"


class ElementNotAvailableError(UIAutomationError):
    """No candidate locator matched a visible element within the probe timeout."""

    kind = ErrorKind.ELEMENT_NOT_AVAILABLE


class NavigationTimeoutError(UIAutomationError):
    """Navigation or the navigation load state did not settle in time."""

    kind = ErrorKind.NAVIGATION_TIMEOUT


class NavigationError(UIAutomationError):
    """The driver reported a navigation-level failure."""

    kind = ErrorKind.NAVIGATION_ERROR


class InsufficientContentError(UIAutomationError):
    """Page rendered below the minimum content threshold (likely blank)."""

    kind = ErrorKind.INSUFFICIENT_CONTENT


class VerificationMismatchError(UIAutomationError):
    """Read-back after a write did not match the intended value."""

    kind = ErrorKind.VERIFICATION_MISMATCH


class ReadinessTimeoutError(UIAutomationError):
    """The readiness gate did not close in time."""

    kind = ErrorKind.READINESS_TIMEOUT


class PageMismatchError(UIAutomationError):
    """The loaded page does not identify as the expected page (title or URL)."""

    kind = ErrorKind.PAGE_MISMATCH


class InteractionError(UIAutomationError):
    """The driver failed while performing an action on a resolved element."""

    kind = ErrorKind.INTERACTION_FAILED


ERROR_TYPES = {
    cls.kind: cls
    for cls in (
        ElementNotAvailableError,
        NavigationTimeoutError,
        NavigationError,
        InsufficientContentError,
        VerificationMismatchError,
        ReadinessTimeoutError,
        PageMismatchError,
        InteractionError,
    )
}


def error_for_kind(kind: ErrorKind) -> type:
    """Return the exception class registered for an ErrorKind."""
    return ERROR_TYPES[kind]


__all__ = [
    "ErrorKind",
    "UIAutomationError",
    "ElementNotAvailableError",
    "NavigationTimeoutError",
    "NavigationError",
    "InsufficientContentError",
    "VerificationMismatchError",
    "ReadinessTimeoutError",
    "PageMismatchError",
    "InteractionError",
    "error_for_kind",
]
