"""Allure reporting helpers."""

from .allure_utils import (
    AllureReportProcessor,
    ResultSummary,
    attach_png,
    generate_allure_report,
)

__all__ = [
    "AllureReportProcessor",
    "ResultSummary",
    "attach_png",
    "generate_allure_report",
]
