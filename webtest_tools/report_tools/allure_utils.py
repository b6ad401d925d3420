"""
================================================================================
Allure Report Utilities
================================================================================

This module provides helpers for attaching artifacts to Allure test reports
and for turning Allure results into a run summary / HTML report.

Features:
- PNG attachment helper
- Result parsing and summary generation
- HTML report generation via the Allure CLI

================================================================================
"""

import json
import subprocess
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import allure
from loguru import logger


# ================================================================================
# Attachment Helpers
# ================================================================================

def attach_png(png: bytes, name: str = "Screenshot"):
    """
    Attach PNG bytes to the current Allure test or fixture.

    Args:
        png: Raw PNG image bytes
        name: Attachment name (the test id for failure screenshots)
    """
    allure.attach(
        png,
        name=name,
        attachment_type=allure.attachment_type.PNG
    )


# ================================================================================
# Report Processing
# ================================================================================

@dataclass
class ResultSummary:
    """Summary of test execution results."""
    total: int = 0
    passed: int = 0
    failed: int = 0
    broken: int = 0
    skipped: int = 0
    unknown: int = 0
    duration_ms: int = 0
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    @property
    def pass_rate(self) -> float:
        """Pass rate percentage over all results."""
        if self.total == 0:
            return 0.0
        return (self.passed / self.total) * 100

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "passed": self.passed,
            "failed": self.failed,
            "broken": self.broken,
            "skipped": self.skipped,
            "unknown": self.unknown,
            "pass_rate": f"{self.pass_rate:.2f}%",
            "duration_ms": self.duration_ms,
            "timestamp": self.timestamp,
        }


class AllureReportProcessor:
    """
    Reads Allure result files and renders the HTML report.

    Args:
        results_dir: Allure results directory (--alluredir)
        report_dir: Output report directory
    """

    def __init__(self, results_dir: Path, report_dir: Optional[Path] = None):
        self.results_dir = Path(results_dir)
        self.report_dir = Path(report_dir or self.results_dir.parent / "allure-report")

    def parse_results(self) -> List[Dict[str, Any]]:
        """
        Parse Allure result files.

        Returns:
            List of test result dictionaries
        """
        results = []

        for result_file in sorted(self.results_dir.glob("*-result.json")):
            try:
                with open(result_file, encoding="utf-8") as f:
                    results.append(json.load(f))
            except (OSError, json.JSONDecodeError) as e:
                logger.warning(f"Failed to parse {result_file}: {e}")

        return results

    def generate_summary(self) -> ResultSummary:
        results = self.parse_results()
        summary = ResultSummary(total=len(results))

        for result in results:
            status = result.get("status", "unknown")
            if status in ("passed", "failed", "broken", "skipped"):
                setattr(summary, status, getattr(summary, status) + 1)
            else:
                summary.unknown += 1

            summary.duration_ms += result.get("stop", 0) - result.get("start", 0)

        return summary

    def generate_report(self) -> bool:
        """
        Generate Allure HTML report.

        Returns:
            True if successful
        """
        cmd = [
            "allure", "generate",
            str(self.results_dir),
            "-o", str(self.report_dir),
            "--clean"
        ]

        try:
            result = subprocess.run(cmd, capture_output=True, text=True)
        except FileNotFoundError:
            logger.warning("Allure CLI not found. Install allure-commandline to render reports.")
            return False

        if result.returncode != 0:
            logger.error(f"Report generation failed: {result.stderr}")
            return False

        logger.info(f"Report generated at {self.report_dir}")
        return True

    def log_summary(self) -> ResultSummary:
        """Log the run summary and return it."""
        summary = self.generate_summary()

        logger.info("=" * 60)
        logger.info("TEST EXECUTION SUMMARY")
        logger.info("=" * 60)
        logger.info(f"Total Tests:    {summary.total}")
        logger.info(f"Passed:         {summary.passed}")
        logger.info(f"Failed:         {summary.failed}")
        logger.info(f"Broken:         {summary.broken}")
        logger.info(f"Skipped:        {summary.skipped}")
        logger.info(f"Pass Rate:      {summary.pass_rate:.2f}%")
        logger.info(f"Duration:       {summary.duration_ms / 1000:.2f}s")
        logger.info("=" * 60)
        return summary


def generate_allure_report(
    results_dir: Path,
    output_dir: Optional[Path] = None,
) -> bool:
    """
    Generate Allure report from results and log the summary.

    Args:
        results_dir: Path to allure-results directory
        output_dir: Optional output directory

    Returns:
        True if the HTML report was generated
    """
    processor = AllureReportProcessor(results_dir, output_dir)
    processor.log_summary()
    return processor.generate_report()


__all__ = [
    "attach_png",
    "ResultSummary",
    "AllureReportProcessor",
    "generate_allure_report",
]
