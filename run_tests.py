#!/usr/bin/env python3
# ================================================================================
# Test Runner Script
# ================================================================================
#
# Main entry point for the mentoring UI suite. Builds the pytest command
# line from a small set of options and post-processes the results.
#
# Features:
#   - Offline unit tests of the page layer (always)
#   - End-to-end browser scenarios (opt-in with --run-e2e)
#   - Profile selection (--env -> TEST_ENV)
#   - Retries and parallel workers (pytest-rerunfailures, pytest-xdist)
#   - Allure results, JUnit XML, Allure HTML report and a markdown summary
#
# Usage:
#   python run_tests.py --unit-only
#   python run_tests.py --run-e2e --browser firefox --viewport mobile
#   python run_tests.py --run-e2e --env staging --parallel 4 --tags P0 smoke
#   python run_tests.py --run-e2e -k search --headed --retries 0
#
# ================================================================================

import argparse
import os
import subprocess
import sys
from pathlib import Path
from typing import List, Optional

from loguru import logger

from mentoring_autotest.ui_testing.framework.browser_manager import SUPPORTED_BROWSERS
from mentoring_autotest.ui_testing.framework.suite_config import (
    DEFAULT_PROFILE,
    PROFILE_ENV_VAR,
    ConfigLoader,
    get_suite_config,
)
from mentoring_tools.report_tools.allure_utils import AllureReportProcessor


# Configure logging
logger.remove()
logger.add(
    sys.stdout,
    format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | {message}",
    level="INFO"
)


VIEWPORT_PRESETS = ("desktop", "tablet", "mobile")


class TestRunner:
    """
    Orchestrates one pytest run of the mentoring suite.

    This class handles:
    - Profile selection and retry defaults
    - pytest command construction
    - Report generation and run summary
    """

    __test__ = False

    def __init__(
        self,
        grep: Optional[str] = None,
        tags: Optional[List[str]] = None,
        browser: str = "chromium",
        viewport: str = "desktop",
        headless: bool = True,
        timeout: Optional[int] = None,
        retries: Optional[int] = None,
        parallel: int = 1,
        env: Optional[str] = None,
        unit_only: bool = False,
        run_e2e: bool = False,
        allure_report: bool = True,
        verbose: bool = False
    ):
        """
        Initialize test runner.

        Args:
            grep: pytest -k expression
            tags: Markers to select (joined with "or")
            browser: Browser engine for scenarios
            viewport: Viewport preset for scenario contexts
            headless: Run browser in headless mode
            timeout: Default per-action timeout (ms)
            retries: Reruns per failed test (config default: CI vs local)
            parallel: Number of xdist workers
            env: Configuration profile (sets TEST_ENV)
            unit_only: Only run the offline unit tests
            run_e2e: Enable end-to-end browser scenarios
            allure_report: Render the Allure HTML report after the run
            verbose: Enable verbose output
        """
        if env:
            os.environ[PROFILE_ENV_VAR] = env
            ConfigLoader.reset()
        os.environ.setdefault(PROFILE_ENV_VAR, DEFAULT_PROFILE)

        self.config = get_suite_config()
        self.is_ci = bool(os.environ.get("CI"))

        self.grep = grep
        self.tags = tags or []
        self.browser = browser
        self.viewport = viewport
        self.headless = headless
        self.timeout = timeout
        self.retries = self.config.retries.for_environment(self.is_ci) if retries is None else retries
        self.parallel = parallel
        self.unit_only = unit_only
        self.run_e2e = run_e2e
        self.allure_report = allure_report
        self.verbose = verbose

        # Paths
        self.root_dir = Path(__file__).parent
        self.reports_dir = self.root_dir / self.config.artifacts.reports_dir
        self.allure_results = self.reports_dir / "allure-results"
        self.allure_report_dir = self.reports_dir / "allure-report"
        self.junit_xml = self.reports_dir / "test-results.xml"
        self.summary_file = self.reports_dir / "summary.md"

    def run(self) -> int:
        """
        Execute the test run.

        Returns:
            pytest's exit code
        """
        logger.info("=" * 60)
        logger.info("Starting Mentoring Suite")
        logger.info("=" * 60)
        logger.info(f"Profile: {self.config.profile} ({self.config.urls.base})")
        logger.info(f"Scope: {'unit' if self.unit_only else 'unit + e2e' if self.run_e2e else 'unit (e2e disabled)'}")
        logger.info(f"Filter: {self.grep or '-'} | Tags: {self.tags or 'All'}")
        logger.info(f"Parallel Workers: {self.parallel} | Retries: {self.retries}")
        if self.run_e2e and not self.unit_only:
            logger.info(f"Browser: {self.browser} ({self.viewport})")
            logger.info(f"Headless: {self.headless}")
        logger.info("=" * 60)

        self._prepare_environment()

        cmd = self._build_pytest_command()
        logger.info(f"Executing: {' '.join(cmd)}")

        try:
            result = subprocess.run(cmd, cwd=str(self.root_dir))
            exit_code = result.returncode
        except OSError as e:
            logger.error(f"Test execution failed to start: {e}")
            exit_code = 1

        self._process_results()
        self._print_summary(exit_code)

        return exit_code

    def _prepare_environment(self) -> None:
        """Create report directories."""
        self.reports_dir.mkdir(parents=True, exist_ok=True)
        self.allure_results.mkdir(parents=True, exist_ok=True)
        logger.debug("Environment prepared")

    def _build_pytest_command(self) -> List[str]:
        """Build the pytest command with all options."""
        cmd = [sys.executable, "-m", "pytest"]

        if self.unit_only:
            cmd.append("mentoring_autotest/unit")
        else:
            cmd.append("mentoring_autotest/")

        if self.grep:
            cmd.extend(["-k", self.grep])

        if self.tags:
            cmd.extend(["-m", " or ".join(self.tags)])

        if self.parallel > 1:
            cmd.extend(["-n", str(self.parallel)])

        if self.retries > 0:
            cmd.extend(["--reruns", str(self.retries)])

        # Machine-readable results are always written; --no-allure only skips the HTML report
        cmd.extend(["--alluredir", str(self.allure_results), "--clean-alluredir"])
        cmd.extend(["--junitxml", str(self.junit_xml)])

        cmd.append("-v" if self.verbose else "-q")

        if not self.unit_only:
            cmd.extend([f"--browser={self.browser}", f"--viewport={self.viewport}"])
            if not self.headless:
                cmd.append("--headed")
            if self.timeout is not None:
                cmd.append(f"--scenario-timeout={self.timeout}")
            if self.run_e2e:
                cmd.append("--run-e2e")

        return cmd

    def _process_results(self) -> None:
        """Write the markdown summary and, if enabled, the Allure HTML report."""
        processor = AllureReportProcessor(self.allure_results, self.allure_report_dir)

        summary = processor.write_markdown_summary(self.summary_file)
        processor.print_summary(summary)

        if self.allure_report:
            logger.info("Generating Allure report...")
            if processor.generate_report():
                processor.save_history()

    def _print_summary(self, exit_code: int) -> None:
        """Print test execution summary."""
        logger.info("=" * 60)
        if exit_code == 0:
            logger.info("✅ TEST EXECUTION COMPLETED SUCCESSFULLY")
        else:
            logger.error(f"❌ TEST EXECUTION FAILED (exit code: {exit_code})")

        logger.info(f"📝 Summary: {self.summary_file}")
        logger.info(f"🧾 JUnit XML: {self.junit_xml}")
        if self.allure_report:
            logger.info(f"📊 Report available at: {self.allure_report_dir}")

        logger.info("=" * 60)


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Mentoring UI Automation Test Runner",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Offline unit tests of the page layer
  python run_tests.py --unit-only

  # P0 smoke scenarios against staging, 4 workers
  python run_tests.py --run-e2e --env staging --tags P0 smoke --parallel 4

  # Search scenarios with a visible Firefox window, no retries
  python run_tests.py --run-e2e -k search --browser firefox --headed --retries 0
        """
    )

    parser.add_argument(
        "--grep", "-k",
        default=None,
        help="Only run tests matching this pytest -k expression"
    )

    parser.add_argument(
        "--tags",
        nargs="+",
        default=[],
        help="Pytest markers to filter tests (e.g., P0 smoke responsive)"
    )

    parser.add_argument(
        "--browser",
        choices=SUPPORTED_BROWSERS,
        default="chromium",
        help="Browser for scenarios (default: chromium)"
    )

    parser.add_argument(
        "--viewport",
        choices=VIEWPORT_PRESETS,
        default="desktop",
        help="Viewport preset for scenarios (default: desktop)"
    )

    parser.add_argument(
        "--headed",
        action="store_true",
        help="Run browser in headed mode (visible)"
    )

    parser.add_argument(
        "--timeout",
        type=int,
        default=None,
        help="Default per-action timeout in milliseconds"
    )

    parser.add_argument(
        "--retries",
        type=int,
        default=None,
        help="Reruns per failed test (default from config: ci when CI is set, else local)"
    )

    parser.add_argument(
        "--parallel", "-n",
        type=int,
        default=1,
        help="Number of parallel workers (default: 1)"
    )

    parser.add_argument(
        "--env",
        default=None,
        help="Configuration profile: development, staging, production (sets TEST_ENV)"
    )

    parser.add_argument(
        "--unit-only",
        action="store_true",
        help="Only run the offline unit tests"
    )

    parser.add_argument(
        "--run-e2e",
        action="store_true",
        help="Run end-to-end browser scenarios against the profile's origin"
    )

    parser.add_argument(
        "--no-allure",
        action="store_true",
        help="Skip Allure HTML report generation"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose output"
    )

    args = parser.parse_args()

    runner = TestRunner(
        grep=args.grep,
        tags=args.tags,
        browser=args.browser,
        viewport=args.viewport,
        headless=not args.headed,
        timeout=args.timeout,
        retries=args.retries,
        parallel=args.parallel,
        env=args.env,
        unit_only=args.unit_only,
        run_e2e=args.run_e2e,
        allure_report=not args.no_allure,
        verbose=args.verbose
    )

    exit_code = runner.run()
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
