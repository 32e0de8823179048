"""
================================================================================
UI Testing Pytest Configuration
================================================================================

Fixtures for the mentoring scenarios: one browser per session, and a fresh
context + page per scenario so no scenario inherits another's state.

Key Features:
- Browser and context lifecycle management
- Page Object fixtures
- Screenshot, trace and video kept on failure, discarded on success

================================================================================
"""

import re
from pathlib import Path
from typing import AsyncGenerator, Optional

import allure
import pytest
from loguru import logger
from playwright.async_api import BrowserContext, Page
from playwright.async_api import Error as PlaywrightError

from mentoring_autotest.ui_testing.framework.browser_manager import BrowserManager
from mentoring_autotest.ui_testing.framework.suite_config import SuiteConfig, get_suite_config
from mentoring_autotest.ui_testing.pages.mentoring_page import MentoringPage
from mentoring_tools.report_tools.allure_utils import attach_file, attach_text


def _artifact_name(nodeid: str) -> str:
    return re.sub(r"[^\w.-]+", "_", nodeid.split("::", 1)[-1])


def _scenario_failed(node) -> bool:
    for phase in ("rep_setup", "rep_call"):
        report = getattr(node, phase, None)
        if report is not None and report.failed:
            return True
    return False


# ================================================================================
# Test Lifecycle Hooks
# ================================================================================

@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """Expose each phase's report to fixtures as item.rep_setup / rep_call."""
    outcome = yield
    report = outcome.get_result()
    setattr(item, f"rep_{report.when}", report)


# ================================================================================
# Configuration Fixtures
# ================================================================================

@pytest.fixture(scope="session")
def suite_config(pytestconfig) -> SuiteConfig:
    """Profile configuration, with --scenario-timeout applied to actions and navigation."""
    config = get_suite_config()
    timeout = pytestconfig.getoption("--scenario-timeout")
    return config.with_action_timeout(timeout) if timeout else config


# ================================================================================
# Browser Fixtures
# ================================================================================

@pytest.fixture(scope="session")
async def browser_manager(pytestconfig, suite_config: SuiteConfig) -> AsyncGenerator[BrowserManager, None]:
    """
    Session-scoped browser manager fixture.

    Launches a single browser for the session, reducing launch overhead.
    """
    manager = BrowserManager(
        headless=not pytestconfig.getoption("--headed"),
        browser_type=pytestconfig.getoption("--browser"),
        config=suite_config,
    )
    await manager.start()
    yield manager
    await manager.close()


@pytest.fixture(scope="function")
async def context(
    request,
    pytestconfig,
    browser_manager: BrowserManager,
    suite_config: SuiteConfig,
) -> AsyncGenerator[BrowserContext, None]:
    """
    Function-scoped browser context fixture.

    Trace and video are recorded for every scenario and only kept when it fails.
    """
    context = await browser_manager.new_context(
        viewport=pytestconfig.getoption("--viewport"),
        record_video=True,
        trace=suite_config.trace_on_failure,
    )
    yield context

    failed = _scenario_failed(request.node)
    name = _artifact_name(request.node.nodeid)

    if suite_config.trace_on_failure:
        trace_path = await browser_manager.stop_trace(context, save_as=name if failed else None)
        if trace_path:
            attach_file(trace_path, name="Playwright trace")

    await browser_manager.close_context(context)

    video_path: Optional[str] = getattr(request.node, "video_path", None)
    if video_path:
        if failed:
            attach_file(video_path, name="Scenario video")
        else:
            Path(video_path).unlink(missing_ok=True)


@pytest.fixture(scope="function")
async def page(request, context: BrowserContext) -> AsyncGenerator[Page, None]:
    """
    Function-scoped page fixture.

    On failure, captures a screenshot and the current URL before the page closes.
    """
    page = await context.new_page()
    if page.video:
        request.node.video_path = await page.video.path()

    yield page

    if _scenario_failed(request.node) and not page.is_closed():
        mentoring = request.node.funcargs.get("mentoring_page")
        if isinstance(mentoring, MentoringPage):
            await mentoring.capture_failure(_artifact_name(request.node.nodeid))
        else:
            try:
                image = await page.screenshot(full_page=True)
                allure.attach(image, name="failure_screenshot", attachment_type=allure.attachment_type.PNG)
            except PlaywrightError as e:
                logger.warning(f"Failed to capture screenshot on failure: {e}")
            attach_text(page.url, name="Current URL")

    try:
        await page.close()
    except PlaywrightError as e:
        logger.debug(f"Page already closed: {e}")


# ================================================================================
# Page Object Fixtures
# ================================================================================

@pytest.fixture
def mentoring_page(page: Page, suite_config: SuiteConfig) -> MentoringPage:
    """
    Provides a MentoringPage instance on a fresh page.

    Scenarios navigate themselves; nothing is loaded before the test body runs.
    """
    return MentoringPage(page, config=suite_config)
