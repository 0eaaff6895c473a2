"""
Editing context logger.

Provides logging interface for the editing session with automatic [editor] prefix.
All editing modules should import from this module, not from loguru directly.
"""

from pathlib import Path
from typing import Optional

from loguru import logger

from vitae.utils.logger import setup_logger as _setup_logger

CONTEXT_PREFIX = "[editor]"


def setup_editor_logger(log_dir: Path, data_path: Optional[Path] = None, console_level: str = "INFO") -> Path:
    """
    Setup logger for an editing session.

    Args:
        log_dir: Directory for this session's logs
        data_path: Persisted snapshot file, recorded in the provenance header
        console_level: Minimum level echoed to the console

    Returns:
        Path to log file

    Example:
        from vitae.contexts.editing.logger import setup_editor_logger

        log_file = setup_editor_logger(log_dir, data_path=Path("~/.vitae/resume.json"))
    """
    return _setup_logger(
        context_name="editor",
        log_dir=log_dir,
        extra_provenance={"Data file": str(data_path) if data_path else "(in memory)"},
        console_level=console_level,
    )


def _log_info(message: str) -> None:
    """Log info message with [editor] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [editor] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [editor] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [editor] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")
