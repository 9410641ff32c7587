"""
Structured logging for store loads, index builds, retrieval and pipeline stages.
Log lines are informational only; failures are always raised to the caller.
"""

import logging
from typing import Any, Dict, Optional


def _truncate(text: str, limit: int = 50) -> str:
    return text[:limit] + "..." if len(text) > limit else text


class StructuredLogger:
    """Structured logger for retrieval and generation operations."""

    def __init__(self, name: str = "docrag", level: int = logging.INFO):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(level)

        # Create handler if not already set
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)

    def set_level(self, level) -> None:
        self.logger.setLevel(level)

    def log_operation(self, operation: str, status: str, details: Optional[Dict[str, Any]] = None,
                      level: int = logging.INFO):
        """Log a structured operation."""
        message = f"Operation: {operation}, Status: {status}"
        if details:
            message += f", Details: {details}"

        self.logger.log(level, message)

    def log_store_load(self, count: int, dim: Optional[int], status: str = "success",
                       details: Optional[Dict[str, Any]] = None):
        """Log a bulk document store load."""
        log_details = {"documents": count, "dim": dim}
        if details:
            log_details.update(details)

        self.log_operation("store.load", status, log_details)

    def log_index_build(self, rows: int, dim: int, duration_ms: float, status: str = "success"):
        """Log a flat index build."""
        self.log_operation("index.build", status, {
            "rows": rows,
            "dim": dim,
            "duration_ms": round(duration_ms, 2)
        })

    def log_retrieval(self, k: int, candidates: int, returned: int, deduplicate: bool,
                      skipped: int = 0):
        """Log a retrieval call at debug level; queries are frequent."""
        log_details = {
            "k": k,
            "candidates": candidates,
            "returned": returned,
            "deduplicate": deduplicate
        }
        if skipped:
            log_details["skipped_out_of_range"] = skipped

        self.log_operation("retrieval.retrieve", "success", log_details, level=logging.DEBUG)

    def log_pipeline_stage(self, stage: str, query: str, status: str = "success",
                           details: Optional[Dict[str, Any]] = None):
        """Log one stage of the embed -> retrieve -> augment -> generate pipeline."""
        log_details = {"query": _truncate(query)}
        if details:
            log_details.update(details)

        level = logging.INFO if status == "success" else logging.WARNING
        self.log_operation(f"pipeline.{stage}", status, log_details, level=level)


# Global logger instance
logger = StructuredLogger()
