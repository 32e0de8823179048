"""
Candidate locator lists for the mentoring feature.

Order in every list is priority. The target markup is not under our
control, so lists mix stable hooks (data-testid) with generic CSS and
visible-text fallbacks (English and Indonesian labels).
"""

from __future__ import annotations

from typing import Dict, Tuple

from .smart_locator import CandidateList, data_testid, role


MENTORING_LOCATORS: Dict[str, CandidateList] = {
    "page_title": CandidateList.of(
        "page_title",
        "h1",
        "[data-testid='page-title']",
        ".page-title",
        ".hero-title",
    ),
    "search_input": CandidateList.of(
        "search_input",
        "input[type='search']",
        "input[placeholder*='search' i]",
        "input[placeholder*='cari' i]",
        "input[placeholder*='mentor' i]",
        ".search-input",
        "[data-testid*='search']",
        "input[name*='search']",
    ),
    "search_button": CandidateList.of(
        "search_button",
        "button[type='submit']",
        "button:has-text('Search')",
        "button:has-text('Cari')",
        ".search-button",
        "[data-testid*='search-button']",
    ),
    "mentor_cards": CandidateList.of(
        "mentor_cards",
        ".mentor-card",
        ".mentor-item",
        data_testid("mentor-card"),
        ".card:has(.mentor)",
        ".profile-card",
    ),
    "mentor_companies": CandidateList.of(
        "mentor_companies",
        ".mentor-company",
        ".company",
        ".organization",
        data_testid("mentor-company"),
    ),
    "login_button": CandidateList.of(
        "login_button",
        "button:has-text('Masuk')",
        "a:has-text('Masuk')",
        "button:has-text('Login')",
        "a:has-text('Login')",
        data_testid("login"),
        role("link", name="Login"),
    ),
    "signup_button": CandidateList.of(
        "signup_button",
        "button:has-text('Daftar')",
        "a:has-text('Daftar')",
        "button:has-text('Sign Up')",
        "a:has-text('Sign Up')",
        data_testid("signup"),
    ),
    "booking_buttons": CandidateList.of(
        "booking_buttons",
        ".book-btn",
        ".schedule-btn",
        "button:has-text('Book')",
        "button:has-text('Schedule')",
        data_testid("book-session"),
    ),
    "error_message": CandidateList.of(
        "error_message",
        ".error-message",
        ".alert-error",
        ".error",
        data_testid("error-message"),
    ),
    "no_results": CandidateList.of(
        "no_results",
        ".no-results",
        ".empty-state",
        data_testid("no-results"),
        ".empty",
        ".not-found",
        "[class*='empty']",
    ),
}


# Counting enumerates every match of each selector; the largest count wins.
CARD_COUNT_SELECTORS: Tuple[str, ...] = (
    ".mentor-card",
    ".mentor-item",
    ".card",
    ".profile-card",
    "[data-testid*='mentor']",
    ".mentor",
    "[class*='mentor']",
    ".grid > div",
    ".flex > div",
    "[class*='grid'] > div",
    ".container > div",
    ".content > div",
)

CONTENT_SELECTORS: Tuple[str, ...] = (
    ".mentor-card",
    ".mentor-item",
    ".card",
    ".profile-card",
    "[data-testid*='mentor']",
    ".mentor",
    "[class*='mentor']",
    ".grid",
    ".flex",
    "[class*='grid']",
    "[class*='flex']",
    "main",
    ".main",
    ".content",
    ".container",
)

NAME_SELECTORS: Tuple[str, ...] = (
    "h1, h2, h3, h4, h5, h6",
    ".name, .mentor-name, .profile-name",
    "[class*='name'], [class*='title']",
    "strong, b, .font-bold",
)

DEFAULT_LOADING_SELECTORS: Tuple[str, ...] = (
    ".loading",
    ".spinner",
    ".loader",
    "[data-loading]",
    ".skeleton",
    ".shimmer",
    "[class*='loading']",
)


def category_candidates(category: str) -> CandidateList:
    """Candidate list for one category filter control."""
    quoted = category.replace('"', '\\"')
    return CandidateList.of(
        f"category_filter[{category}]",
        f'button:has-text("{quoted}")',
        f'[data-category="{quoted}"]',
        f'.category:has-text("{quoted}")',
        f'.filter:has-text("{quoted}")',
    )


__all__ = [
    "MENTORING_LOCATORS",
    "CARD_COUNT_SELECTORS",
    "CONTENT_SELECTORS",
    "NAME_SELECTORS",
    "DEFAULT_LOADING_SELECTORS",
    "category_candidates",
]
