"""
Rewrite context logger.

Provides logging interface for the rewrite context with automatic [rewrite] prefix.
All rewrite modules should import from this module, not from loguru directly.
"""

from loguru import logger

CONTEXT_PREFIX = "[rewrite]"


def _log_info(message: str) -> None:
    """Log info message with [rewrite] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [rewrite] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [rewrite] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [rewrite] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


def log_rewrite_result(provider_name: str, response, elapsed_time: float) -> None:
    """
    Log a completed rewrite call.

    Args:
        provider_name: Provider identifier (e.g., 'openai/glm-4-flash')
        response: LLMResponse returned by the provider
        elapsed_time: Seconds spent waiting for the provider
    """
    _log_success(f"Rewrite received from {provider_name} ({elapsed_time:.2f}s)")
    if response.input_tokens is not None or response.output_tokens is not None:
        _log_debug(f"  Tokens: {response.input_tokens} in / {response.output_tokens} out")
