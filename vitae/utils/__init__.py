"""
Shared utilities for VITAE.

Common functionality used across contexts:
- Logger setup (loguru sinks and provenance header)
- Configuration loading (OmegaConf + .env)
- LLM provider abstraction
"""

from vitae.utils.config import load_config
from vitae.utils.logger import setup_logger

__all__ = ["load_config", "setup_logger"]
