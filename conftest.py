"""
Repository-level pytest configuration.

Provides:
  - Command line options for the browser scenarios (browser, headed, viewport)
  - Opt-in switch for end-to-end scenarios (`--run-e2e` or RUN_E2E=1)
  - Environment defaults and logger setup

Unit tests of the page layer run offline and are always collected; scenarios
that need a live browser and network only run when explicitly enabled.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Generator

import pytest

from mentoring_autotest.ui_testing.framework.browser_manager import SUPPORTED_BROWSERS
from mentoring_autotest.ui_testing.framework.suite_config import DEFAULT_PROFILE, PROFILE_ENV_VAR, ConfigLoader
from mentoring_tools.common import init_logger


def pytest_addoption(parser):
    group = parser.getgroup("mentoring", "Mentoring UI scenarios")
    group.addoption(
        "--run-e2e",
        action="store_true",
        default=False,
        help="Run end-to-end browser scenarios (also enabled by RUN_E2E=1)",
    )
    group.addoption(
        "--browser",
        action="store",
        default=os.environ.get("BROWSER", "chromium"),
        choices=SUPPORTED_BROWSERS,
        help="Browser engine for scenarios",
    )
    group.addoption(
        "--headed",
        action="store_true",
        default=False,
        help="Run the browser with a visible window",
    )
    group.addoption(
        "--viewport",
        action="store",
        default="desktop",
        help="Viewport preset for scenario contexts (desktop, tablet, mobile)",
    )
    group.addoption(
        "--scenario-timeout",
        action="store",
        type=int,
        default=None,
        help="Default per-action timeout in milliseconds",
    )


def pytest_configure(config):
    os.environ.setdefault(PROFILE_ENV_VAR, DEFAULT_PROFILE)
    settings = ConfigLoader()
    init_logger(
        level=os.environ.get("LOG_LEVEL") or settings.get("logging.level"),
        log_file=settings.get("logging.file"),
        rotation=settings.get("logging.rotation", "10 MB"),
        retention=settings.get("logging.retention", "7 days"),
    )


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return repo root path."""
    return Path(__file__).parent


@pytest.fixture(scope="session", autouse=True)
def _env_defaults() -> Generator[None, None, None]:
    """
    Set environment defaults if not already provided by the user/CI.

    The target origin is deliberately not defaulted here; it comes from the
    selected profile unless UI_BASE_URL is exported.
    """
    defaults = {
        PROFILE_ENV_VAR: DEFAULT_PROFILE,
        "LOG_LEVEL": "INFO",
    }

    for k, v in defaults.items():
        os.environ.setdefault(k, v)

    yield
