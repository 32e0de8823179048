"""
================================================================================
Suite Pytest Configuration
================================================================================

Registers the suite markers, tags collected items by directory and keeps
end-to-end scenarios out of default runs.

================================================================================
"""

import os

import pytest


def pytest_configure(config):
    """Configure pytest with project-wide custom markers."""

    # Priority markers
    config.addinivalue_line(
        "markers", "P0: Critical priority tests - must pass for deployment"
    )
    config.addinivalue_line(
        "markers", "P1: High priority tests - important functionality"
    )
    config.addinivalue_line(
        "markers", "P2: Medium priority tests - edge cases and minor features"
    )
    config.addinivalue_line(
        "markers", "P3: Low priority tests - extensive validation"
    )

    # Test type markers
    config.addinivalue_line(
        "markers", "smoke: Quick verification tests"
    )
    config.addinivalue_line(
        "markers", "regression: Full regression test suite"
    )
    config.addinivalue_line(
        "markers", "e2e: End-to-end scenarios against a live origin (opt-in)"
    )
    config.addinivalue_line(
        "markers", "unit: Offline tests of the page layer"
    )

    # Domain markers
    config.addinivalue_line(
        "markers", "ui: UI-specific tests"
    )
    config.addinivalue_line(
        "markers", "responsive: Viewport and layout scenarios"
    )
    config.addinivalue_line(
        "markers", "accessibility: Accessibility scenarios"
    )
    config.addinivalue_line(
        "markers", "performance: Load time and resource scenarios"
    )


def pytest_collection_modifyitems(config, items):
    """
    Tag items by directory and skip e2e scenarios unless enabled.
    """
    skip_e2e = pytest.mark.skip(reason="end-to-end scenarios disabled (use --run-e2e or RUN_E2E=1)")
    run_e2e = config.getoption("--run-e2e") or os.environ.get("RUN_E2E", "").lower() in ("1", "true", "yes")

    for item in items:
        path = str(item.fspath)
        if "ui_testing" in path:
            item.add_marker(pytest.mark.ui)
        if f"{os.sep}unit{os.sep}" in path:
            item.add_marker(pytest.mark.unit)

        if "e2e" in item.keywords and not run_e2e:
            item.add_marker(skip_e2e)
