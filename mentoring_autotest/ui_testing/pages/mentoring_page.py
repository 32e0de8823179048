"""
================================================================================
Mentoring Page Object (Async / Playwright)
================================================================================

Page object for the mentoring feature (`/mentoring`): mentor listing,
keyword search, category filters, mentor profiles and the login/signup
entry points.

Target markup is not under our control, so every element goes through an
ordered candidate list (see `framework/locators.py`). Operations on optional
affordances (search box, category filters, auth buttons) raise
ElementNotAvailableError when the build does not ship them; scenarios treat
that kind as a skip.

================================================================================
"""

from __future__ import annotations

from typing import List, Optional, Tuple

import allure
from loguru import logger
from playwright.async_api import Error as PlaywrightError

from mentoring_autotest.ui_testing.framework.errors import (
    ElementNotAvailableError,
    PageMismatchError,
    VerificationMismatchError,
)
from mentoring_autotest.ui_testing.framework.locators import (
    CARD_COUNT_SELECTORS,
    CONTENT_SELECTORS,
    MENTORING_LOCATORS,
    NAME_SELECTORS,
    category_candidates,
)
from mentoring_autotest.ui_testing.framework.page_base import BasePage
from mentoring_autotest.ui_testing.framework.readiness import (
    PAGE_LOAD_PHASES,
    SEARCH_RESULT_PHASES,
)
from mentoring_autotest.ui_testing.framework.suite_config import Viewport


SEARCH_BUTTON_PROBE_TIMEOUT = 1000
BOOKING_BUTTON_PROBE_TIMEOUT = 5000
COMPANY_PROBE_TIMEOUT = 2000
CARD_CLICK_SETTLE = 2000
BOOKING_SETTLE = 3000
FOCUS_SETTLE = 500

# Viewports at or below this width are checked for horizontal scrolling
MOBILE_MAX_WIDTH = 768


class MentoringPage(BasePage):
    """Mentoring listing page object (async)."""

    URL_PATH = "/mentoring"
    PAGE_TITLE = "Mentoring"

    def __init__(self, page, base_url: str = "", config=None, **kwargs):
        super().__init__(page, base_url=base_url, config=config, locators=MENTORING_LOCATORS, **kwargs)
        self.URL_PATH = self.config.urls.mentoring

    # =========================================================================
    # Navigation and page verification
    # =========================================================================

    @allure.step("Open mentoring page")
    async def navigate_to_mentoring(self) -> "MentoringPage":
        await self.navigate()
        await self.verify_page_loaded()
        return self

    @allure.step("Verify mentoring page loaded")
    async def verify_page_loaded(self) -> int:
        """
        Verify this is the mentoring page and that it rendered.

        Checks, in order: heading visible, title names the feature, URL
        contains the mentoring path, then load state, loading indicators and
        minimum content.

        Returns:
            Body word count

        Raises:
            ElementNotAvailableError: No page heading
            PageMismatchError: Title or URL does not identify the mentoring page
            InsufficientContentError: Page rendered too little text
        """
        logger.info("🔍 Verifying mentoring page load...")
        await self.smart.locate("page_title", budget=self.config.readiness.heading_timeout)

        title = await self.get_page_title()
        logger.info(f"📄 Page title: \"{title}\"")
        if not any(keyword in title.lower() for keyword in self.config.mentoring.title_keywords):
            raise PageMismatchError(
                f'Page title does not indicate mentoring page. Actual title: "{title}"',
                target="page title",
                url=self.page.url,
            )

        self.verify_current_url(self.config.urls.mentoring)

        result = await self.await_ready(PAGE_LOAD_PHASES)
        logger.info(f"✅ Page verified - {result.word_count} words loaded")

        content = await self._detect_content_area()
        if content:
            selector, count = content
            logger.info(f"📦 Found content: {selector} ({count} elements)")
        else:
            logger.warning("⚠️ No specific mentor content detected, but page loaded successfully")

        return result.word_count or 0

    async def _detect_content_area(self) -> Optional[Tuple[str, int]]:
        for selector in CONTENT_SELECTORS:
            count = await self._count(selector)
            if count > 0:
                return selector, count
        return None

    # =========================================================================
    # Search and filters
    # =========================================================================

    @allure.step("Search mentors: {keyword}")
    async def search_mentors(self, keyword: str) -> int:
        """
        Search mentors by keyword and wait for the results to settle.

        Returns:
            Stabilized result count

        Raises:
            ValueError: Empty or blank keyword (before touching the page)
            ElementNotAvailableError: The build has no search input
        """
        if not keyword or not keyword.strip():
            raise ValueError("Search keyword cannot be empty")

        logger.info(f"🔍 Searching for: \"{keyword}\"")
        await self.wait_for_page_load()

        search_input = await self.resolve("search_input")
        if not search_input.found:
            raise ElementNotAvailableError(
                "Search input not available on the page",
                target="search_input",
                elapsed=search_input.elapsed,
                url=self.page.url,
            )
        logger.debug(f"📝 Using search input: {search_input.strategy_used.describe()}")
        await self.type_text(search_input.locator, keyword)

        search_button = await self.resolve("search_button", SEARCH_BUTTON_PROBE_TIMEOUT)
        if search_button.found:
            await self.click(search_button.locator)
            logger.debug(f"🎯 Clicked search button: {search_button.strategy_used.describe()}")
        else:
            logger.debug("🔍 No search button found, using Enter key")
            started = self._clock()
            try:
                await search_input.locator.press("Enter")
            except PlaywrightError as e:
                raise self._interaction_error("submit search from", "search_input", started, e) from e

        return await self.wait_for_search_results()

    @allure.step("Filter by category: {category}")
    async def filter_by_category(self, category: str) -> int:
        """
        Click a category filter and wait for the results to settle.

        Raises:
            ValueError: Empty or blank category
            ElementNotAvailableError: No such category control on the page
        """
        if not category or not category.strip():
            raise ValueError("Category cannot be empty")

        candidates = category_candidates(category)
        control = await self.resolve(candidates)
        if not control.found:
            raise ElementNotAvailableError(
                f'Category filter "{category}" not found on the page',
                target=candidates.element_name,
                elapsed=control.elapsed,
                url=self.page.url,
            )

        await self.click(control.locator)
        return await self.wait_for_search_results()

    async def wait_for_search_results(self) -> int:
        """Wait for loading indicators, then for the card count to stop changing."""
        logger.info("⏳ Waiting for search results...")
        result = await self.await_ready(SEARCH_RESULT_PHASES, count_fn=self.count_mentor_cards)
        count = result.stable_count or 0
        logger.info(f"✅ Search results settled: {count} results")
        return count

    # =========================================================================
    # Mentor listing
    # =========================================================================

    async def _count(self, selector: str) -> int:
        try:
            return await self.page.locator(selector).count()
        except PlaywrightError as e:
            logger.debug(f"Count failed for {selector}: {e}")
            return 0

    async def count_mentor_cards(self) -> int:
        """Largest match count across the card selectors. No waiting."""
        best = 0
        for selector in CARD_COUNT_SELECTORS:
            best = max(best, await self._count(selector))
        return best

    async def get_mentor_count(self) -> int:
        """
        Count mentor cards after a short settle.

        Never raises. Returns 0 when nothing matches, whether or not a
        "no results" indicator is shown.
        """
        logger.info("🔍 Counting mentor cards...")
        await self.wait(self.config.readiness.settle_delay)

        count = await self.count_mentor_cards()
        if count > 0:
            logger.info(f"👥 Found {count} mentor elements")
            return count

        logger.warning("⚠️ No mentor cards found with standard selectors")
        if await self.is_visible("no_results"):
            logger.info("📝 Found no results message")
        return 0

    async def get_mentor_names(self, max_count: int = 10) -> List[str]:
        """Text of heading-like elements that look like person names, deduplicated."""
        heuristic = self.config.mentoring.name_heuristic
        names: List[str] = []

        for selector in NAME_SELECTORS:
            try:
                texts = await self.page.locator(selector).all_text_contents()
            except PlaywrightError as e:
                logger.debug(f"Name lookup failed for {selector}: {e}")
                continue

            for text in texts[:max_count]:
                if heuristic.matches(text):
                    names.append(text.strip())
                    if len(names) >= max_count:
                        break
            if len(names) >= max_count:
                break

        unique = list(dict.fromkeys(names))
        logger.info(f"📝 Found {len(unique)} unique mentor names")
        return unique[:max_count]

    async def get_mentor_companies(self, max_count: int = 5) -> List[str]:
        mentor_count = await self.get_mentor_count()
        if mentor_count == 0:
            return []

        probe = await self.resolve("mentor_companies")
        if not probe.found:
            return []

        companies_locator = probe.strategy_used.build(self.page)
        companies: List[str] = []
        for index in range(min(mentor_count, max_count)):
            company = companies_locator.nth(index)
            if await self.is_visible(company, COMPANY_PROBE_TIMEOUT):
                text = await self.read_text(company)
                if text:
                    companies.append(text)
        return companies

    @allure.step("Click mentor card #{index}")
    async def click_mentor_card(self, index: int = 0) -> None:
        """
        Raises:
            ValueError: Negative or out-of-range index
            ElementNotAvailableError: No mentor cards on the page
        """
        if index < 0:
            raise ValueError(f"Mentor card index must be non-negative, got {index}")

        mentor_count = await self.get_mentor_count()
        if mentor_count == 0:
            raise ElementNotAvailableError(
                "No mentor cards available to click",
                target="mentor_cards",
                url=self.page.url,
            )
        if index >= mentor_count:
            raise ValueError(
                f"Mentor card index {index} is out of range. Only {mentor_count} cards available."
            )

        probe = await self.resolve("mentor_cards")
        if not probe.found:
            raise ElementNotAvailableError(
                "No mentor cards available to click",
                target="mentor_cards",
                elapsed=probe.elapsed,
                url=self.page.url,
            )

        cards = probe.strategy_used.build(self.page)
        clickable = await cards.count()
        if index >= clickable:
            raise ValueError(
                f"Mentor card index {index} is out of range. Only {clickable} cards available."
            )

        card = cards.nth(index)
        await self.scroll_into_view(card)
        await self.click(card)
        await self.wait(CARD_CLICK_SETTLE)

    @allure.step("Book session with first mentor")
    async def book_session_with_first_mentor(self) -> bool:
        """
        Open the first mentor and start booking.

        Returns:
            True when a booking button was found and clicked
        """
        if await self.get_mentor_count() == 0:
            raise ElementNotAvailableError(
                "No mentors available to book session with",
                target="mentor_cards",
                url=self.page.url,
            )

        await self.click_mentor_card(0)

        booking = await self.resolve("booking_buttons", BOOKING_BUTTON_PROBE_TIMEOUT)
        if not booking.found:
            logger.warning("No booking button found after clicking mentor card")
            return False

        await self.click(booking.locator)
        await self.wait(BOOKING_SETTLE)
        return True

    # =========================================================================
    # Auth entry points
    # =========================================================================

    @allure.step("Open login")
    async def attempt_login(self) -> None:
        await self.click("login_button")
        await self.wait_for_page_load()

    @allure.step("Open signup")
    async def attempt_signup(self) -> None:
        await self.click("signup_button")
        await self.wait_for_page_load()

    # =========================================================================
    # Layout and accessibility
    # =========================================================================

    @allure.step("Verify responsive design")
    async def verify_responsive_design(self, viewports: Optional[Tuple[Viewport, ...]] = None) -> List[str]:
        """
        Resize through the responsive matrix, checking the heading at each size.

        Returns:
            Names of mobile-sized viewports that scroll horizontally

        Raises:
            ElementNotAvailableError: Heading hidden at some viewport
        """
        overflowing: List[str] = []
        for viewport in viewports or self.config.responsive_matrix:
            await self.set_viewport(viewport.width, viewport.height)

            if not await self.is_visible("page_title"):
                raise ElementNotAvailableError(
                    f"Page heading not visible at {viewport.name} ({viewport.width}x{viewport.height})",
                    target="page_title",
                    url=self.page.url,
                )

            await self.screenshot(f"responsive-{viewport.name}")

            if viewport.width <= MOBILE_MAX_WIDTH and await self.has_horizontal_scroll():
                logger.warning(f"Horizontal scroll detected on {viewport.name} viewport")
                overflowing.append(viewport.name)
        return overflowing

    @allure.step("Verify accessibility basics")
    async def verify_accessibility(self) -> str:
        """
        Title present, heading visible, Tab moves focus to an element.

        Returns:
            Tag name of the focused element
        """
        title = await self.get_page_title()
        if not title.strip():
            raise PageMismatchError("Page has no title", target="page title", url=self.page.url)

        if not await self.is_visible("page_title"):
            raise ElementNotAvailableError("Page heading not visible", target="page_title", url=self.page.url)

        await self.press_key("Tab")
        await self.wait(FOCUS_SETTLE)

        focused = await self.focused_element_tag()
        if not focused:
            raise VerificationMismatchError(
                "No element received keyboard focus after Tab",
                target="document.activeElement",
                url=self.page.url,
            )
        return focused

    # =========================================================================
    # Error messages
    # =========================================================================

    async def has_error_messages(self) -> bool:
        return await self.is_visible("error_message")

    async def get_error_message(self) -> str:
        if await self.has_error_messages():
            return await self.read_text("error_message")
        return ""


__all__ = [
    "MentoringPage",
]
