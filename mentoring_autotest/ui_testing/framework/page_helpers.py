# ================================================================================
# Page Helpers Module
# ================================================================================
#
# Page-level utilities shared by the scenario suites that do not belong to a
# single page object.
#
# Key Features:
#   - Console error capture with known-noise filtering
#   - Navigation timing metrics
#   - Network condition simulation (slow / offline / restore)
#   - Element accessibility attribute checks
#   - Image load checks
#   - Random scenario data generation
#
# Usage:
#   errors = capture_console_errors(page)
#   metrics = await get_performance_metrics(page)
#   await simulate_network_condition(page, NetworkCondition.SLOW)
#
# ================================================================================

import asyncio
import random
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Iterable, List, Optional

import allure
from loguru import logger
from playwright.async_api import Page, Route


# Console errors from third-party noise that should not fail a scenario
NON_CRITICAL_CONSOLE_PATTERNS = ("favicon", "analytics", "tracking")

SEARCH_TERM_POOL = ("Engineer", "Developer", "Manager", "Designer", "Analyst")

FOCUSABLE_TAGS = ("input", "button", "select", "textarea", "a")


class NetworkCondition(str, Enum):
    SLOW = "slow"
    FAST = "fast"
    OFFLINE = "offline"


@dataclass
class PerformanceMetrics:
    """Navigation timing in milliseconds."""
    load_time: float
    dom_content_loaded: float
    load_event_duration: float


@dataclass
class AccessibilityReport:
    has_aria_label: bool
    has_role: bool
    is_focusable: bool
    has_alt_text: bool


@dataclass
class ImageLoadReport:
    total: int
    loaded: int
    failed: int


# ================================================================================
# Console and performance
# ================================================================================

def capture_console_errors(page: Page) -> List[str]:
    """
    Start collecting console errors.

    Returns the list that is filled as errors arrive; read it after the
    interaction under test.
    """
    errors: List[str] = []

    def _on_console(message) -> None:
        if message.type == "error":
            errors.append(message.text)

    page.on("console", _on_console)
    return errors


def filter_critical_errors(
    errors: Iterable[str],
    ignored_patterns: Iterable[str] = NON_CRITICAL_CONSOLE_PATTERNS,
) -> List[str]:
    """Drop console errors matching known non-critical patterns."""
    patterns = tuple(p.lower() for p in ignored_patterns)
    return [error for error in errors if not any(p in error.lower() for p in patterns)]


async def get_performance_metrics(page: Page) -> PerformanceMetrics:
    """Read navigation timing from the browser."""
    timing = await page.evaluate(
        """() => {
            const timing = performance.timing;
            const navigation = performance.getEntriesByType('navigation')[0];
            return {
                loadTime: timing.loadEventEnd - timing.navigationStart,
                domContentLoaded: timing.domContentLoadedEventEnd - timing.navigationStart,
                loadEventDuration: navigation ? navigation.loadEventEnd - navigation.loadEventStart : 0,
            };
        }"""
    )
    metrics = PerformanceMetrics(
        load_time=timing["loadTime"],
        dom_content_loaded=timing["domContentLoaded"],
        load_event_duration=timing["loadEventDuration"],
    )
    logger.debug(f"Performance metrics: {metrics}")
    return metrics


# ================================================================================
# Network conditions
# ================================================================================

@allure.step("Simulate network condition: {condition}")
async def simulate_network_condition(
    page: Page,
    condition: NetworkCondition,
    delay_ms: int = 200,
) -> None:
    """
    Route every request through a delay, abort them all, or restore routing.

    Args:
        page: Playwright page
        condition: SLOW delays each request, OFFLINE aborts, FAST removes routes
        delay_ms: Per-request delay for SLOW
    """
    condition = NetworkCondition(condition)

    if condition is NetworkCondition.SLOW:
        async def _delayed(route: Route) -> None:
            await asyncio.sleep(delay_ms / 1000)
            await route.continue_()

        await page.route("**/*", _delayed)
    elif condition is NetworkCondition.OFFLINE:
        async def _abort(route: Route) -> None:
            await route.abort()

        await page.route("**/*", _abort)
    else:
        await page.unroute("**/*")

    logger.info(f"🌐 Network condition set to: {condition.value}")


# ================================================================================
# Element inspection
# ================================================================================

async def validate_element_accessibility(page: Page, selector: str) -> AccessibilityReport:
    """Inspect basic accessibility attributes of the first match of `selector`."""
    attributes = await page.locator(selector).first.evaluate(
        """(el, focusableTags) => ({
            hasAriaLabel: el.hasAttribute('aria-label') || el.hasAttribute('aria-labelledby'),
            hasRole: el.hasAttribute('role'),
            isFocusable: el.tabIndex >= 0 || focusableTags.includes(el.tagName.toLowerCase()),
            hasAltText: el.tagName.toLowerCase() === 'img' ? el.hasAttribute('alt') : true,
        })""",
        list(FOCUSABLE_TAGS),
    )
    return AccessibilityReport(
        has_aria_label=attributes["hasAriaLabel"],
        has_role=attributes["hasRole"],
        is_focusable=attributes["isFocusable"],
        has_alt_text=attributes["hasAltText"],
    )


async def verify_images_loaded(page: Page) -> ImageLoadReport:
    """Count images that finished loading vs. completed with no pixels."""
    counts = await page.evaluate(
        """() => {
            const images = Array.from(document.querySelectorAll('img'));
            let loaded = 0;
            let failed = 0;
            images.forEach(img => {
                if (img.complete) {
                    if (img.naturalHeight !== 0) { loaded++; } else { failed++; }
                }
            });
            return { total: images.length, loaded, failed };
        }"""
    )
    return ImageLoadReport(total=counts["total"], loaded=counts["loaded"], failed=counts["failed"])


# ================================================================================
# Scenario data
# ================================================================================

def generate_test_data(kind: str, rng: Optional[random.Random] = None) -> str:
    """
    Generate throwaway input values.

    Args:
        kind: "email", "name" or "search-term"; anything else gets a tagged token
        rng: Random source (seeded in unit tests)
    """
    rng = rng or random.Random()
    timestamp = int(datetime.now().timestamp() * 1000)

    if kind == "email":
        return f"test.user.{timestamp}@example.com"
    if kind == "name":
        return f"Test User {timestamp}"
    if kind == "search-term":
        return rng.choice(SEARCH_TERM_POOL)
    return f"test-data-{timestamp}"


__all__ = [
    "NetworkCondition",
    "PerformanceMetrics",
    "AccessibilityReport",
    "ImageLoadReport",
    "capture_console_errors",
    "filter_critical_errors",
    "get_performance_metrics",
    "simulate_network_condition",
    "validate_element_accessibility",
    "verify_images_loaded",
    "generate_test_data",
]
