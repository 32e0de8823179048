import copy

import pytest

from mentoring_autotest.ui_testing.framework.suite_config import _DEFAULTS, ConfigLoader, SuiteConfig
from mentoring_autotest.unit.fakes import FakeClock, FakeSleep


@pytest.fixture
def suite_config(tmp_path) -> SuiteConfig:
    """Built-in defaults with artifacts redirected to a temp directory."""
    data = copy.deepcopy(_DEFAULTS)
    data["urls"]["base"] = "https://mentoring.example.test"
    data["artifacts"] = {
        "screenshot_dir": str(tmp_path / "screenshots"),
        "reports_dir": str(tmp_path / "reports"),
        "video_dir": str(tmp_path / "reports" / "videos"),
        "trace_dir": str(tmp_path / "reports" / "traces"),
    }
    return SuiteConfig.from_dict("development", data)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sleep(clock) -> FakeSleep:
    return FakeSleep(clock)


@pytest.fixture
def clean_config_env(monkeypatch):
    """Isolate ConfigLoader from the caller's environment."""
    for key in ("TEST_ENV", "UI_BASE_URL", "PLAYWRIGHT_BASE_URL", "URLS_BASE", "TIMEOUTS_PAGE_LOAD"):
        monkeypatch.delenv(key, raising=False)
    ConfigLoader.reset()
    yield
    ConfigLoader.reset()
