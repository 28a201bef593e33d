"""
Performance monitoring utilities for Game Night
Times leaderboard builds and keeps per-request metrics on flask.g
"""

import time

from flask import current_app, g

from gamenight.utils.logging_config import get_logger

logger = get_logger(__name__)


class PerformanceMonitor:
    """Context manager for monitoring performance of code blocks"""

    def __init__(self, operation_name, log_threshold=0.1):
        self.operation_name = operation_name
        self.log_threshold = log_threshold
        self.start_time = None
        self.duration = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.duration = time.perf_counter() - self.start_time

        if self.duration > self.log_threshold:
            if exc_type:
                logger.error(
                    f"Operation '{self.operation_name}' failed after {self.duration:.3f}s: {exc_val}"
                )
            elif self.duration > current_app.config.get("SLOW_FUNCTION_THRESHOLD", 1.0):
                logger.warning(
                    f"Slow operation '{self.operation_name}' took {self.duration:.3f}s"
                )
            else:
                logger.info(
                    f"Operation '{self.operation_name}' completed in {self.duration:.3f}s"
                )

        # Request-level aggregation
        metrics = g.setdefault("performance_metrics", [])
        metrics.append(
            {
                "operation": self.operation_name,
                "duration": self.duration,
                "success": exc_type is None,
            }
        )

        return False
