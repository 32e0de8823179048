"""
================================================================================
Base Page Object
================================================================================

Foundation class for Page Object Model implementation.

Provides:
    - Navigation gated on readiness (load states + loading indicators)
    - Smart element interaction through ordered candidate locators
    - Verified typing (read-back must equal the input)
    - Non-throwing visibility probes
    - Screenshot and failure capture utilities

Every throwing operation raises a UIAutomationError subclass that carries
the target, elapsed time and current URL, chained to the driver error.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import asyncio
import re
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Sequence

import allure
from loguru import logger
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Locator, Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from .errors import (
    InteractionError,
    NavigationError,
    NavigationTimeoutError,
    PageMismatchError,
    UIAutomationError,
    VerificationMismatchError,
)
from .readiness import (
    NAVIGATION_PHASES,
    ReadinessDetector,
    ReadinessOptions,
    ReadinessPhase,
    ReadinessResult,
    SleepFn,
    CountFn,
)
from .smart_locator import CandidateList, ProbeResult, SmartLocator, Target
from .suite_config import SuiteConfig, get_suite_config


SCREENSHOT_TIMESTAMP_FORMAT = "%Y%m%d-%H%M%S-%f"

ElementTarget = Any  # registry key, CandidateList, strategy sequence, or a bound Locator


def _is_candidate_target(target: ElementTarget) -> bool:
    return isinstance(target, (str, CandidateList, list, tuple))


class BasePage:
    """
    Base class for all page objects.

    Usage:
        class MentoringPage(BasePage):
            URL_PATH = "/mentoring"

            async def search(self, keyword: str):
                await self.type_text("search_input", keyword)
                await self.click("search_button")
    """

    # Override in subclasses
    URL_PATH: str = "/"
    PAGE_TITLE: str = ""

    def __init__(
        self,
        page: Page,
        base_url: str = "",
        config: Optional[SuiteConfig] = None,
        locators: Optional[Dict[str, CandidateList]] = None,
        sleep: SleepFn = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize page object.

        Args:
            page: Playwright Page object
            base_url: Origin to resolve relative paths against (config when empty)
            config: Suite configuration (process-wide config when None)
            locators: Named candidate lists for this page
            sleep: Async sleep used for fixed waits
            clock: Monotonic clock used for elapsed time
        """
        self.page = page
        self.config = config or get_suite_config()
        self.base_url = (base_url or self.config.urls.base).rstrip("/")
        self._sleep = sleep
        self._clock = clock

        self.timeouts = self.config.timeouts
        self.smart = SmartLocator(
            page,
            locators=locators,
            probe_timeout=self.config.readiness.probe_timeout,
            clock=clock,
        )
        self.readiness = ReadinessDetector(
            page,
            ReadinessOptions(
                page_load_timeout=self.timeouts.page_load,
                indicator_timeout=self.config.readiness.indicator_timeout,
                loading_selectors=self.config.readiness.loading_selectors,
                min_words=self.config.readiness.min_words,
                settle_delay=self.config.readiness.settle_delay,
            ),
            sleep=sleep,
            clock=clock,
        )

    @property
    def url(self) -> str:
        """Full URL of this page."""
        return self.resolve_url(self.URL_PATH)

    def resolve_url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        if path and not path.startswith("/"):
            path = f"/{path}"
        return f"{self.base_url}{path}"

    def current_url(self) -> str:
        return self.page.url

    # =========================================================================
    # Navigation
    # =========================================================================

    async def navigate(self, path: Optional[str] = None, wait_until: str = "domcontentloaded") -> None:
        """
        Navigate to `path` (this page's URL_PATH by default) and wait until
        the page has settled and loading indicators are gone.

        Raises:
            NavigationTimeoutError: Navigation did not settle in time
            NavigationError: Driver reported a navigation failure
            ReadinessTimeoutError: A loading indicator did not disappear
        """
        target_url = self.resolve_url(self.URL_PATH if path is None else path)
        started = self._clock()

        with allure.step(f"Navigate to {target_url}"):
            try:
                await self.page.goto(target_url, wait_until=wait_until, timeout=self.timeouts.page_load)
            except PlaywrightTimeoutError as e:
                raise NavigationTimeoutError(
                    f"Navigation to {target_url} timed out after {self.timeouts.page_load}ms",
                    target=target_url,
                    elapsed=self._clock() - started,
                    url=self.page.url,
                ) from e
            except PlaywrightError as e:
                raise NavigationError(
                    f"Failed to navigate to {target_url}: {e}",
                    target=target_url,
                    elapsed=self._clock() - started,
                    url=self.page.url,
                ) from e

            try:
                await self.readiness.await_ready(NAVIGATION_PHASES)
            except UIAutomationError as e:
                raise type(e)(
                    e.message,
                    target=target_url,
                    elapsed=self._clock() - started,
                    url=e.url,
                ) from e
            logger.debug(f"Navigated to: {target_url} ({self._clock() - started:.2f}s)")

    async def navigate_to(self, path: str) -> None:
        """Navigate to a specific path on the configured origin."""
        await self.navigate(path)

    async def wait_for_page_load(self, phases: Sequence[ReadinessPhase] = NAVIGATION_PHASES) -> ReadinessResult:
        """Block until the requested readiness phases pass."""
        return await self.readiness.await_ready(phases)

    async def await_ready(
        self,
        phases: Sequence[ReadinessPhase],
        count_fn: Optional[CountFn] = None,
    ) -> ReadinessResult:
        return await self.readiness.await_ready(phases, count_fn)

    async def refresh_page(self) -> None:
        """Reload the current page and wait for it to settle."""
        started = self._clock()
        with allure.step("Refresh page"):
            try:
                await self.page.reload(wait_until="domcontentloaded", timeout=self.timeouts.page_load)
            except PlaywrightTimeoutError as e:
                raise NavigationTimeoutError(
                    "Page reload timed out",
                    target=self.page.url,
                    elapsed=self._clock() - started,
                    url=self.page.url,
                ) from e
            except PlaywrightError as e:
                raise NavigationError(
                    f"Failed to refresh page: {e}",
                    target=self.page.url,
                    elapsed=self._clock() - started,
                    url=self.page.url,
                ) from e
            await self.readiness.await_ready(NAVIGATION_PHASES)

    # =========================================================================
    # Element resolution
    # =========================================================================

    async def resolve(self, target: Target, timeout: Optional[int] = None) -> ProbeResult:
        """Non-throwing resolution of a candidate list."""
        return await self.smart.resolve(target, timeout)

    async def _element(self, target: ElementTarget, timeout: Optional[int] = None) -> Locator:
        if not _is_candidate_target(target):
            return target
        return await self.smart.locate(target, timeout)

    def describe(self, target: ElementTarget) -> str:
        if isinstance(target, str):
            return target
        if isinstance(target, CandidateList):
            return target.element_name
        return str(target)

    def _interaction_error(self, action: str, target: ElementTarget, started: float, cause: Exception) -> InteractionError:
        return InteractionError(
            f"Failed to {action} {self.describe(target)}: {str(cause).splitlines()[0]}",
            target=self.describe(target),
            elapsed=self._clock() - started,
            url=self.page.url,
        )

    # =========================================================================
    # Smart Element Interactions
    # =========================================================================

    async def click(
        self,
        target: ElementTarget,
        timeout: Optional[int] = None,
        **kwargs: Any,
    ) -> None:
        """
        Resolve a visible element and click it.

        Raises:
            ElementNotAvailableError: No candidate was visible
            InteractionError: The click itself failed
        """
        started = self._clock()
        with allure.step(f"Click: {self.describe(target)}"):
            element = await self._element(target, timeout)
            try:
                await element.click(timeout=self.timeouts.medium, **kwargs)
            except PlaywrightError as e:
                raise self._interaction_error("click", target, started, e) from e

    async def type_text(
        self,
        target: ElementTarget,
        text: str,
        clear: bool = True,
        timeout: Optional[int] = None,
    ) -> None:
        """
        Fill an input and verify the value reads back unchanged.

        Raises:
            ElementNotAvailableError: No candidate was visible
            InteractionError: Clearing or filling failed
            VerificationMismatchError: The field value differs from `text`
        """
        started = self._clock()
        with allure.step(f"Type into {self.describe(target)}: {text[:50]}"):
            element = await self._element(target, timeout)
            try:
                if clear:
                    await element.clear()
                await element.fill(text, timeout=self.timeouts.medium)
                actual = await element.input_value()
            except PlaywrightError as e:
                raise self._interaction_error("type into", target, started, e) from e

            if actual != text:
                raise VerificationMismatchError(
                    f'Text verification failed. Expected: "{text}", Actual: "{actual}"',
                    target=self.describe(target),
                    elapsed=self._clock() - started,
                    url=self.page.url,
                )

    async def read_text(self, target: ElementTarget, timeout: Optional[int] = None) -> str:
        """
        Trimmed text content of an element, or "" when it has none.

        Raises:
            ElementNotAvailableError: Only when the element itself is missing
        """
        started = self._clock()
        element = await self._element(target, timeout)
        try:
            content = await element.text_content()
        except PlaywrightError as e:
            raise self._interaction_error("read text from", target, started, e) from e
        return (content or "").strip()

    async def is_visible(self, target: ElementTarget, timeout: Optional[int] = None) -> bool:
        """Visibility probe. Never raises; any failure reads as not visible."""
        try:
            if not _is_candidate_target(target):
                await target.wait_for(
                    state="visible",
                    timeout=self.config.readiness.probe_timeout if timeout is None else timeout,
                )
                return True
            return await self.smart.is_visible(target, timeout)
        except (UIAutomationError, PlaywrightError, KeyError) as e:
            logger.debug(f"Visibility probe for {self.describe(target)} failed: {e}")
            return False

    async def is_enabled(self, target: ElementTarget) -> bool:
        """Non-throwing enabled check."""
        try:
            element = await self._element(target)
            return await element.is_enabled()
        except (UIAutomationError, PlaywrightError):
            return False

    async def scroll_into_view(self, target: ElementTarget) -> None:
        started = self._clock()
        element = await self._element(target)
        try:
            await element.scroll_into_view_if_needed()
        except PlaywrightError as e:
            raise self._interaction_error("scroll to", target, started, e) from e

    async def press_key(self, key: str) -> None:
        """Press a key on the page keyboard (focus stays wherever it is)."""
        started = self._clock()
        try:
            await self.page.keyboard.press(key)
        except PlaywrightError as e:
            raise self._interaction_error("press", key, started, e) from e

    # =========================================================================
    # Page state
    # =========================================================================

    async def get_page_title(self) -> str:
        started = self._clock()
        try:
            return await self.page.title()
        except PlaywrightError as e:
            raise self._interaction_error("read", "page title", started, e) from e

    async def verify_page_title(self, expected: str) -> None:
        title = await self.get_page_title()
        if expected.lower() not in title.lower():
            raise PageMismatchError(
                f'Page title "{title}" does not contain "{expected}"',
                target="page title",
                url=self.page.url,
            )

    def verify_current_url(self, expected_path: str) -> None:
        current = self.page.url
        if expected_path not in current:
            raise PageMismatchError(
                f'Current URL does not contain "{expected_path}"',
                target="page url",
                url=current,
            )

    async def focused_element_tag(self) -> Optional[str]:
        """Tag name of document.activeElement, if any."""
        return await self._evaluate(
            "read focus of",
            "active element",
            "() => document.activeElement ? document.activeElement.tagName : null",
        )

    async def has_horizontal_scroll(self) -> bool:
        return bool(await self._evaluate(
            "measure scroll width of",
            "document",
            "() => document.documentElement.scrollWidth > document.documentElement.clientWidth",
        ))

    async def _evaluate(self, action: str, target: str, expression: str) -> Any:
        started = self._clock()
        try:
            return await self.page.evaluate(expression)
        except PlaywrightError as e:
            raise self._interaction_error(action, target, started, e) from e

    async def set_viewport(self, width: int, height: int, settle: int = 1000) -> None:
        """Resize the viewport and give the layout time to adjust."""
        started = self._clock()
        with allure.step(f"Set viewport {width}x{height}"):
            try:
                await self.page.set_viewport_size({"width": width, "height": height})
            except PlaywrightError as e:
                raise self._interaction_error("resize", f"viewport {width}x{height}", started, e) from e
            await self.wait(settle)

    async def wait(self, milliseconds: int) -> None:
        """Fixed wait."""
        await self._sleep(milliseconds / 1000)

    # =========================================================================
    # Screenshot and Debug Utilities
    # =========================================================================

    async def screenshot(self, label: str, full_page: Optional[bool] = None, attach_to_allure: bool = True) -> str:
        """
        Capture the viewport to `{screenshot_dir}/{label}-{timestamp}.png`.

        Returns:
            Path of the saved screenshot, as a string
        """
        started = self._clock()
        screenshot_dir = Path(self.config.artifacts.screenshot_dir)
        screenshot_dir.mkdir(parents=True, exist_ok=True)

        safe_label = re.sub(r"[^\w.-]+", "_", label)
        timestamp = datetime.now().strftime(SCREENSHOT_TIMESTAMP_FORMAT)
        filepath = screenshot_dir / f"{safe_label}-{timestamp}.png"

        if full_page is None:
            full_page = self.config.screenshots.full_page
        try:
            image = await self.page.screenshot(path=str(filepath), full_page=full_page)
        except PlaywrightError as e:
            raise self._interaction_error("capture screenshot", label, started, e) from e

        if attach_to_allure:
            allure.attach(image, name=label, attachment_type=allure.attachment_type.PNG)

        logger.debug(f"Screenshot saved: {filepath}")
        return str(filepath)

    async def capture_failure(self, test_name: str) -> None:
        """
        Capture debugging information on test failure.

        Saves:
            - Screenshot
            - Current URL
            - Locator health report
        """
        with allure.step("Capture failure details"):
            try:
                await self.screenshot(f"failure_{test_name}")
            except InteractionError as e:
                logger.warning(f"Failure screenshot not captured: {e}")

            allure.attach(
                self.page.url,
                name="Current URL",
                attachment_type=allure.attachment_type.TEXT,
            )
            allure.attach(
                self.get_locator_health_report(),
                name="Locator Health",
                attachment_type=allure.attachment_type.TEXT,
            )

    def get_locator_health_report(self) -> str:
        """Get smart locator health report."""
        return self.smart.get_health_report()


__all__ = [
    "BasePage",
    "SCREENSHOT_TIMESTAMP_FORMAT",
]
