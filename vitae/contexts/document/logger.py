"""
Document context logger.

Provides logging interface for the document context with automatic [document] prefix.
All document modules should import from this module, not from loguru directly.
"""

from pathlib import Path

from loguru import logger

CONTEXT_PREFIX = "[document]"


def _log_info(message: str) -> None:
    """Log info message with [document] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [document] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [document] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [document] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


def log_snapshot_repairs(repairs: list) -> None:
    """Log the fields that were defaulted while merging a persisted snapshot."""
    if not repairs:
        return
    _log_warning(f"Persisted snapshot had {len(repairs)} malformed field(s); defaults used")
    for repair in repairs:
        _log_debug(f"  {repair}")


def log_save(path: Path, elapsed_time: float) -> None:
    """Log a completed snapshot write."""
    _log_debug(f"Snapshot saved to {path} ({elapsed_time * 1000:.1f}ms)")
