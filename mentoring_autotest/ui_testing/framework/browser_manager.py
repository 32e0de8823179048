"""
================================================================================
Browser Manager
================================================================================

One Playwright browser per pytest session, one context per scenario.

Features:
    - One browser instance per session
    - Context isolation per scenario
    - Viewport and user-agent presets from suite configuration
    - Video recording and tracing for failure diagnosis

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

from loguru import logger
from playwright.async_api import (
    async_playwright,
    Browser,
    BrowserContext,
    Playwright,
)
from playwright.async_api import Error as PlaywrightError

from .suite_config import SuiteConfig, get_suite_config


SUPPORTED_BROWSERS = ("chromium", "firefox", "webkit")


class BrowserManager:
    """
    Launches the session browser and hands out isolated contexts.

    Usage:
        manager = BrowserManager(browser_type="firefox")
        await manager.start()
        context = await manager.new_context(viewport="mobile", trace=True)
        page = await context.new_page()
        ...
        await manager.stop_trace(context, save_as="test_search")
        await manager.close()
    """

    CHROMIUM_ARGS: List[str] = [
        "--ignore-certificate-errors",
        "--disable-dev-shm-usage",
    ]

    BASE_CONTEXT_OPTIONS: Dict[str, Any] = {
        "ignore_https_errors": True,
    }

    def __init__(
        self,
        headless: bool = True,
        browser_type: str = "chromium",
        config: Optional[SuiteConfig] = None,
        slow_mo: int = 0,
    ):
        """
        Args:
            headless: Launch without a window
            browser_type: One of SUPPORTED_BROWSERS
            config: Suite configuration (process-wide config when None)
            slow_mo: Delay between driver operations (ms), useful when headed
        """
        if browser_type not in SUPPORTED_BROWSERS:
            raise ValueError(
                f"Unsupported browser '{browser_type}', expected one of {', '.join(SUPPORTED_BROWSERS)}"
            )
        self.headless = headless
        self.browser_type = browser_type
        self.config = config or get_suite_config()
        self.slow_mo = slow_mo

        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._contexts: List[BrowserContext] = []

    async def start(self) -> None:
        """Launch the configured engine (chromium gets CI-friendly flags)."""
        self._playwright = await async_playwright().start()
        launcher = getattr(self._playwright, self.browser_type)

        launch_options: Dict[str, Any] = {
            "headless": self.headless,
            "slow_mo": self.slow_mo,
        }
        if self.browser_type == "chromium":
            launch_options["args"] = list(self.CHROMIUM_ARGS)

        self._browser = await launcher.launch(**launch_options)
        logger.info(f"🌐 {self.browser_type} launched (headless={self.headless}, slow_mo={self.slow_mo}ms)")

    async def close(self) -> None:
        """Close contexts still open, then the browser and the driver."""
        for context in self._contexts:
            try:
                await context.close()
            except PlaywrightError as e:
                logger.debug(f"Context already closed: {e}")
        self._contexts.clear()

        if self._browser:
            await self._browser.close()
            self._browser = None

        if self._playwright:
            await self._playwright.stop()
            self._playwright = None

        logger.debug(f"{self.browser_type} closed")

    def context_options(
        self,
        viewport: Optional[str] = None,
        device: Optional[str] = None,
        record_video: bool = False,
        **options: Any,
    ) -> Dict[str, Any]:
        """
        Build context options from presets.

        Args:
            viewport: Viewport preset name (desktop, tablet, mobile, ...)
            device: User-agent preset name (desktop, mobile, tablet)
            record_video: Record a video into the configured video directory
            **options: Raw Playwright context options, applied last
        """
        context_options = dict(self.BASE_CONTEXT_OPTIONS)
        context_options["viewport"] = self.config.viewport(viewport or "desktop").as_size()

        if device:
            user_agent = self.config.scenario_data.user_agents.get(device)
            if user_agent:
                context_options["user_agent"] = user_agent
            else:
                logger.warning(f"No user agent preset for device '{device}'")

        if record_video and self.config.videos.enabled:
            video_dir = Path(self.config.artifacts.video_dir)
            video_dir.mkdir(parents=True, exist_ok=True)
            context_options["record_video_dir"] = str(video_dir)
            context_options["record_video_size"] = context_options["viewport"]

        context_options.update(options)
        return context_options

    async def new_context(
        self,
        viewport: Optional[str] = None,
        device: Optional[str] = None,
        record_video: bool = False,
        trace: bool = False,
        **options: Any,
    ) -> BrowserContext:
        """
        Open a context with the suite defaults (timeouts, viewport preset).

        Contexts share nothing: cookies and storage start empty.

        Args:
            viewport: Viewport preset name
            device: User-agent preset name
            record_video: Record a video of every page in the context
            trace: Start Playwright tracing (screenshots + snapshots)
            **options: Raw Playwright context options
        """
        if not self._browser:
            raise RuntimeError("BrowserManager.start() must be awaited before new_context()")

        context = await self._browser.new_context(
            **self.context_options(viewport, device, record_video, **options)
        )
        context.set_default_timeout(self.config.timeouts.medium)
        context.set_default_navigation_timeout(self.config.timeouts.page_load)

        if trace:
            await context.tracing.start(screenshots=True, snapshots=True, sources=False)

        self._contexts.append(context)
        return context

    async def stop_trace(self, context: BrowserContext, save_as: Optional[str] = None) -> Optional[str]:
        """
        Stop tracing on a context, keeping the archive only when `save_as` is given.

        Returns:
            Path of the saved trace archive, if any
        """
        if not save_as:
            await context.tracing.stop()
            return None

        trace_path = Path(self.config.artifacts.trace_dir) / f"{save_as}.zip"
        trace_path.parent.mkdir(parents=True, exist_ok=True)
        await context.tracing.stop(path=str(trace_path))
        logger.info(f"Trace saved: {trace_path}")
        return str(trace_path)

    async def close_context(self, context: BrowserContext) -> None:
        """Close one context (flushes its videos to disk)."""
        if context in self._contexts:
            self._contexts.remove(context)
        await context.close()


__all__ = [
    "BrowserManager",
    "SUPPORTED_BROWSERS",
]
