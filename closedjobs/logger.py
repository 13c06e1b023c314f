"""
Structured logging system for closedjobs.

Provides centralized logging with console and file outputs,
log levels, and metrics tracking for the record store calls
made on behalf of each controller operation.
"""

import copy
import logging
import sys
from pathlib import Path
from typing import Optional
from datetime import datetime
import json


class StructuredLogger:
    """
    Centralized logger with support for console and file outputs.
    Tracks metrics for store calls and controller operations.
    """

    def __init__(
        self,
        name: str = "closedjobs",
        level: str = "INFO",
        log_dir: Optional[Path] = None,
        enable_file: bool = True,
        enable_console: bool = True,
    ):
        """
        Initialize the structured logger.

        Args:
            name: Logger name
            level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_dir: Directory for log files (default: logs/)
            enable_file: Write logs to file
            enable_console: Output logs to console
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(getattr(logging, level.upper()))
        self.logger.handlers.clear()
        self.logger.propagate = False

        self.metrics = {
            "store_calls": 0,
            "operations_attempted": 0,
            "operations_successful": 0,
            "operations_failed": 0,
            "errors_by_kind": {},
            "operation_success_rate": {},
        }

        # stderr; stdout carries command output
        if enable_console:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(getattr(logging, level.upper()))
            console_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            console_handler.setFormatter(console_formatter)
            self.logger.addHandler(console_handler)

        if enable_file:
            if log_dir is None:
                log_dir = Path("logs")
            log_dir.mkdir(parents=True, exist_ok=True)

            log_file = log_dir / f"closedjobs_{datetime.now().strftime('%Y%m%d')}.log"
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)  # Always log everything to file
            file_formatter = logging.Formatter(
                fmt='%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            file_handler.setFormatter(file_formatter)
            self.logger.addHandler(file_handler)

    def set_level(self, level: str):
        """Change the logger and console handler level."""
        numeric = getattr(logging, level.upper())
        self.logger.setLevel(numeric)
        for handler in self.logger.handlers:
            if not isinstance(handler, logging.FileHandler):
                handler.setLevel(numeric)

    def debug(self, message: str, **kwargs):
        """Log debug message with optional context."""
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs):
        """Log info message with optional context."""
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs):
        """Log warning message with optional context."""
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs):
        """Log error message with optional context."""
        self._log(logging.ERROR, message, kwargs)

    def critical(self, message: str, **kwargs):
        """Log critical message with optional context."""
        self._log(logging.CRITICAL, message, kwargs)

    def _log(self, level: int, message: str, context: dict):
        """Internal logging method with context."""
        if context:
            message = f"{message} | Context: {json.dumps(context, default=str)}"
        self.logger.log(level, message)

    # Metric tracking methods

    def record_store_call(self):
        """Increment record store call counter."""
        self.metrics["store_calls"] += 1

    def record_operation_attempt(self, operation: str):
        """Record a controller operation attempt."""
        self.metrics["operations_attempted"] += 1
        if operation not in self.metrics["operation_success_rate"]:
            self.metrics["operation_success_rate"][operation] = {
                "attempts": 0,
                "successes": 0
            }
        self.metrics["operation_success_rate"][operation]["attempts"] += 1

    def record_operation_success(self, operation: str):
        """Record a successful operation."""
        self.metrics["operations_successful"] += 1
        if operation in self.metrics["operation_success_rate"]:
            self.metrics["operation_success_rate"][operation]["successes"] += 1

    def record_operation_failure(self, operation: str, error_kind: str):
        """Record a failed operation."""
        self.metrics["operations_failed"] += 1

        if error_kind not in self.metrics["errors_by_kind"]:
            self.metrics["errors_by_kind"][error_kind] = 0
        self.metrics["errors_by_kind"][error_kind] += 1

    def get_metrics(self) -> dict:
        """Return current metrics."""
        metrics_copy = copy.deepcopy(self.metrics)
        for operation, stats in metrics_copy["operation_success_rate"].items():
            if stats["attempts"] > 0:
                stats["success_rate"] = round(
                    stats["successes"] / stats["attempts"], 3
                )

        return metrics_copy

    def log_metrics_summary(self):
        """Log a summary of current metrics."""
        metrics = self.get_metrics()

        total_attempts = metrics["operations_attempted"]
        total_successes = metrics["operations_successful"]
        overall_rate = 0
        if total_attempts > 0:
            overall_rate = round(total_successes / total_attempts * 100, 1)

        self.debug("=== Session Metrics ===")
        self.debug(f"Store calls: {metrics['store_calls']}")
        self.debug(f"Operations: {total_successes}/{total_attempts} ({overall_rate}% success)")

        if metrics["errors_by_kind"]:
            self.debug("Error kinds:")
            for error_kind, count in metrics["errors_by_kind"].items():
                self.debug(f"  {error_kind}: {count}")


_global_logger: Optional[StructuredLogger] = None


def get_logger(
    name: str = "closedjobs",
    level: str = "INFO",
    **kwargs
) -> StructuredLogger:
    """
    Get or create the global logger instance.

    Args:
        name: Logger name
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        **kwargs: Additional arguments passed to StructuredLogger

    Returns:
        StructuredLogger instance
    """
    global _global_logger

    if _global_logger is None:
        _global_logger = StructuredLogger(name=name, level=level, **kwargs)

    return _global_logger


def reset_logger():
    """Reset the global logger (useful for testing)."""
    global _global_logger
    _global_logger = None
