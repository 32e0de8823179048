"""
================================================================================
UI Testing Framework
================================================================================

Playwright-based page layer for the mentoring UI suite.

Components:
    - errors: Closed error taxonomy (ErrorKind + UIAutomationError subclasses)
    - smart_locator: Ordered-fallback element resolution
    - readiness: Phased readiness detection (load, indicators, content, stability)
    - page_base: Base page object (the interaction facade)
    - browser_manager: Browser lifecycle management
    - suite_config: Profile-based suite configuration

Author: Automation Team
License: MIT
================================================================================
"""

from .errors import ErrorKind, UIAutomationError, ElementNotAvailableError
from .smart_locator import SmartLocator, CandidateList, ProbeResult
from .readiness import ReadinessDetector, ReadinessResult
from .page_base import BasePage
from .browser_manager import BrowserManager
from .suite_config import SuiteConfig, get_suite_config
from .optional_steps import attempt_optional_step

__all__ = [
    "ErrorKind",
    "UIAutomationError",
    "ElementNotAvailableError",
    "SmartLocator",
    "CandidateList",
    "ProbeResult",
    "ReadinessDetector",
    "ReadinessResult",
    "BasePage",
    "BrowserManager",
    "SuiteConfig",
    "get_suite_config",
    "attempt_optional_step",
]
