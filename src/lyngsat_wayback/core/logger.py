"""
Logging and Error Handling System

Configures the application logger once per run and keeps a record of every
base URL or region that had to be skipped.
"""

import logging
import logging.handlers
import sys
from collections import Counter
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional


APP_NAME = "lyngsat_wayback"

DETAILED_FORMAT = '%(asctime)s | %(name)s | %(levelname)s | %(funcName)s:%(lineno)d | %(message)s'
CONSOLE_FORMAT = '%(asctime)s | %(levelname)s | %(message)s'


def initialize_logging(log_dir: str = "logs", level: int = logging.INFO) -> logging.Logger:
    """
    Attach the run's handlers to the application logger.

    Everything goes to a rotating debug log, errors also to a separate
    rotating file, and *level* and above to stdout next to the printed rows.
    Calling it again leaves the existing handlers in place.

    Args:
        log_dir: Directory for log files
        level: Console logging level

    Returns:
        The application logger
    """
    logger = logging.getLogger(APP_NAME)
    logger.setLevel(logging.DEBUG)
    if logger.handlers:
        return logger

    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)
    detailed = logging.Formatter(DETAILED_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')

    run_log = logging.handlers.RotatingFileHandler(
        log_path / f"{APP_NAME}.log",
        maxBytes=10*1024*1024,  # 10MB
        backupCount=5,
        encoding='utf-8'
    )
    run_log.setLevel(logging.DEBUG)
    run_log.setFormatter(detailed)

    error_log = logging.handlers.RotatingFileHandler(
        log_path / f"{APP_NAME}_errors.log",
        maxBytes=5*1024*1024,  # 5MB
        backupCount=3,
        encoding='utf-8'
    )
    error_log.setLevel(logging.ERROR)
    error_log.setFormatter(detailed)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt='%H:%M:%S'))

    for handler in (run_log, error_log, console):
        logger.addHandler(handler)

    logger.debug(f"Python {sys.version.split()[0]} on {sys.platform}, logs in {log_path.absolute()}")
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Child of the application logger, or the application logger itself."""
    return logging.getLogger(f"{APP_NAME}.{name}" if name else APP_NAME)


@dataclass
class SkippedUnit:
    message: str
    context: Optional[str] = None
    url: Optional[str] = None
    error_type: Optional[str] = None  # None for warnings


class ErrorTracker:
    """
    Logs and records the units of work a run skipped: failed fetches,
    missing Free TV links, region pages without a usable table.
    """

    def __init__(self, logger: logging.Logger):
        self.logger = logger
        self.errors: List[SkippedUnit] = []
        self.warnings: List[SkippedUnit] = []

    @staticmethod
    def _describe(message: str, context: Optional[str], url: Optional[str]) -> str:
        if context:
            message += f" (Context: {context})"
        if url:
            message += f" (URL: {url})"
        return message

    def log_error(self, error: Exception, context: str = None, url: str = None) -> SkippedUnit:
        """
        Record an exception that made a unit of work fail.

        Args:
            error: The exception that was caught
            context: What was being processed (e.g. "region Europe")
            url: URL being processed
        """
        unit = SkippedUnit(message=str(error), context=context, url=url, error_type=type(error).__name__)
        self.errors.append(unit)
        self.logger.error(self._describe(f"{unit.error_type}: {unit.message}", context, url))
        self.logger.debug("Traceback of the error above", exc_info=error)
        return unit

    def log_warning(self, message: str, context: str = None, url: str = None) -> SkippedUnit:
        """Record a unit that was skipped without an exception."""
        unit = SkippedUnit(message=message, context=context, url=url)
        self.warnings.append(unit)
        self.logger.warning(self._describe(message, context, url))
        return unit

    def summary(self) -> Dict[str, Any]:
        """Totals plus a count of errors per exception type."""
        return {
            'total_errors': len(self.errors),
            'total_warnings': len(self.warnings),
            'error_types': dict(Counter(unit.error_type for unit in self.errors)),
        }
