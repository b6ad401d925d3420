"""
================================================================================
Logging Setup
================================================================================

Centralized Loguru configuration shared by the framework, the pytest plugin
and the runner script.

Sinks:
    - console: colorized, leveled, human-readable
    - file: logs/webtests.log, rotated by loguru at 10 MB or at midnight, keeping the
      newest 30 generations and at most 100 MB of log files

Levels:
    - framework packages (webtests, webtest_tools): DEBUG
    - everything else, including stdlib logging from libraries: INFO

Environment:
    LOG_LEVEL  raises the minimum level of both sinks (default DEBUG, so the
               per-module filter decides)
    LOG_DIR    log directory (default: ./logs)

Author: Automation Team
License: MIT
================================================================================
"""

import logging
import os
import sys
from pathlib import Path
from typing import Dict, List, Optional

from loguru import logger


CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level} | {process} | {name}:{function}:{line} | {message}"

FRAMEWORK_PACKAGES = ("webtests", "webtest_tools")

# 10 MB or midnight; the day is counted from the file creation time
ROTATION = ["10 MB", "00:00"]
RETENTION_COUNT = 30
RETENTION_TOTAL_BYTES = 100 * 1024 * 1024

_logger_initialized = False


# ============================================================
# Retention policy
# ============================================================

class GenerationRetention:
    """
    Loguru retention callable: keep the newest `max_files` log files while
    their combined size stays within `max_total_bytes`.

    The newest file is always kept.
    """

    def __init__(
        self,
        max_files: int = RETENTION_COUNT,
        max_total_bytes: int = RETENTION_TOTAL_BYTES,
    ):
        self.max_files = max_files
        self.max_total_bytes = max_total_bytes

    def __call__(self, files: List[str]) -> None:
        existing = [Path(f) for f in files if os.path.exists(f)]
        existing.sort(key=lambda p: p.stat().st_mtime, reverse=True)

        total = 0
        for index, path in enumerate(existing):
            total += path.stat().st_size
            if index == 0:
                continue
            if index >= self.max_files or total > self.max_total_bytes:
                try:
                    path.unlink()
                except FileNotFoundError:
                    pass


# ============================================================
# Stdlib logging bridge
# ============================================================

class InterceptHandler(logging.Handler):
    """Route standard library logging records into Loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


# ============================================================
# Logger initialization
# ============================================================

def build_level_filter(default_level: str = "INFO") -> Dict[str, str]:
    """Per-module minimum levels for Loguru's dict filter."""
    level_filter = {"": default_level}
    for package in FRAMEWORK_PACKAGES:
        level_filter[package] = "DEBUG"
    return level_filter


def log_file_path(log_dir: Optional[str] = None) -> Path:
    """
    Log file location; xdist workers get their own file.
    """
    directory = Path(log_dir or os.getenv("LOG_DIR", "logs"))
    worker = os.getenv("PYTEST_XDIST_WORKER")
    name = f"webtests-{worker}.log" if worker else "webtests.log"
    return directory / name


def init_logger(
    level: Optional[str] = None,
    log_dir: Optional[str] = None,
    force: bool = False,
) -> None:
    """
    Initializes the Loguru logger with the standard sinks.

    Args:
        level: Minimum level for both sinks. Defaults to LOG_LEVEL or DEBUG.
        log_dir: Directory for the rotated log file.
        force: Re-initialize even if already done in this process.
    """
    global _logger_initialized

    if _logger_initialized and not force:
        return

    level = (level or os.getenv("LOG_LEVEL", "DEBUG")).upper()
    level_filter = build_level_filter()

    logger.remove()
    logger.add(
        sys.stderr,
        format=CONSOLE_FORMAT,
        level=level,
        filter=level_filter,
        colorize=True,
        backtrace=True,
        diagnose=False,
    )

    log_file = log_file_path(log_dir)
    log_file.parent.mkdir(parents=True, exist_ok=True)
    logger.add(
        str(log_file),
        format=FILE_FORMAT,
        level=level,
        filter=level_filter,
        rotation=ROTATION,
        retention=GenerationRetention(),
        compression="zip",
        enqueue=True,
        encoding="utf-8",
    )

    logging.basicConfig(handlers=[InterceptHandler()], level=logging.INFO, force=True)

    _logger_initialized = True
    logger.debug(f"Logger initialized (level={level}, file={log_file})")


__all__ = [
    "GenerationRetention",
    "InterceptHandler",
    "ROTATION",
    "build_level_filter",
    "init_logger",
    "log_file_path",
]
