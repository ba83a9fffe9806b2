"""
Structured logging for the job board client.

Writes to the console and a daily log file, and keeps simple counters of
backend requests so a session can report how healthy the API was.
"""

import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional


class StructuredLogger:
    """
    Logger wrapper that appends keyword context as JSON and tracks request metrics.
    """

    def __init__(
        self,
        name: str = "jobboard",
        level: str = "INFO",
        log_dir: Optional[Path] = None,
        enable_file: bool = True,
        enable_console: bool = True,
    ):
        """
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
            "api_calls": 0,
            "requests_failed": 0,
            "errors_by_type": {},
            "endpoint_success_rate": {},
        }

        if enable_console:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(getattr(logging, level.upper()))
            console_handler.setFormatter(
                logging.Formatter(
                    fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
                    datefmt="%Y-%m-%d %H:%M:%S",
                )
            )
            self.logger.addHandler(console_handler)

        if enable_file:
            log_dir = Path(log_dir) if log_dir is not None else Path("logs")
            log_dir.mkdir(parents=True, exist_ok=True)
            log_file = log_dir / f"jobboard_{datetime.now().strftime('%Y%m%d')}.log"
            file_handler = logging.FileHandler(log_file, encoding="utf-8")
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(
                logging.Formatter(
                    fmt="%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s",
                    datefmt="%Y-%m-%d %H:%M:%S",
                )
            )
            self.logger.addHandler(file_handler)

    def debug(self, message: str, **context):
        self._log(logging.DEBUG, message, context)

    def info(self, message: str, /, **context):
        self._log(logging.INFO, message, context)

    def warning(self, message: str, /, **context):
        self._log(logging.WARNING, message, context)

    def error(self, message: str, /, **context):
        self._log(logging.ERROR, message, context)

    def _log(self, level: int, message: str, context: dict):
        if context:
            message = f"{message} | Context: {json.dumps(context, default=str)}"
        self.logger.log(level, message)

    # Request metrics

    def record_request(self, endpoint: str):
        """Count one backend call against an endpoint name (e.g. 'list_jobs')."""
        self.metrics["api_calls"] += 1
        stats = self.metrics["endpoint_success_rate"].setdefault(
            endpoint, {"attempts": 0, "successes": 0}
        )
        stats["attempts"] += 1

    def record_success(self, endpoint: str):
        stats = self.metrics["endpoint_success_rate"].get(endpoint)
        if stats is not None:
            stats["successes"] += 1

    def record_failure(self, endpoint: str, error_type: str):
        self.metrics["requests_failed"] += 1
        errors = self.metrics["errors_by_type"]
        errors[error_type] = errors.get(error_type, 0) + 1

    def get_metrics(self) -> dict:
        """Current metrics with per-endpoint success rates filled in."""
        metrics = json.loads(json.dumps(self.metrics))
        for stats in metrics["endpoint_success_rate"].values():
            if stats["attempts"] > 0:
                stats["success_rate"] = round(stats["successes"] / stats["attempts"], 3)
        return metrics

    def log_metrics_summary(self):
        metrics = self.get_metrics()
        self.info("=== API Session Metrics ===")
        self.info(f"API Calls: {metrics['api_calls']} (failed: {metrics['requests_failed']})")
        for endpoint, stats in metrics["endpoint_success_rate"].items():
            rate = stats.get("success_rate", 0) * 100
            self.info(f"  {endpoint}: {stats['successes']}/{stats['attempts']} ({rate:.1f}%)")
        for error_type, count in metrics["errors_by_type"].items():
            self.info(f"  {error_type}: {count}")


_global_logger: Optional[StructuredLogger] = None


def get_logger(name: str = "jobboard", level: str = "INFO", **kwargs) -> StructuredLogger:
    """Get or create the process-wide logger. Arguments only apply on first call."""
    global _global_logger

    if _global_logger is None:
        _global_logger = StructuredLogger(name=name, level=level, **kwargs)

    return _global_logger


def reset_logger():
    """Drop the process-wide logger (tests)."""
    global _global_logger
    _global_logger = None
