"""
================================================================================
Mentoring Tools
================================================================================

Infrastructure utilities for the mentoring UI suite.

Modules:
    - common: Logging setup and filesystem helpers
    - report_tools: Allure attachments, result parsing and run summaries

Example:
    from mentoring_tools.common import init_logger
    from mentoring_tools.report_tools.allure_utils import AllureReportProcessor

    init_logger()
    processor = AllureReportProcessor("reports/allure-results")
    processor.print_summary()

================================================================================
"""

__version__ = "1.0.0"

__all__ = [
    "common",
    "report_tools",
]
