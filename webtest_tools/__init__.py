"""
================================================================================
Webtest Tools
================================================================================

Supporting utilities for the UI test framework.

Modules:
    - common: Loguru logging setup (console + rotated file sinks)
    - report_tools: Allure attachment helpers and report generation

Example:
    from webtest_tools.common import init_logger
    from webtest_tools.report_tools import generate_allure_report

    init_logger()
    generate_allure_report(Path("reports/allure-results"))

================================================================================
"""

__version__ = "1.0.0"

__all__ = [
    "common",
    "report_tools",
]
