"""
Configuration loading for VITAE.

Configuration is layered, later layers overriding earlier ones:
    1. Packaged defaults (vitae/config/defaults.yaml)
    2. Optional user YAML (explicit path, else VITAE_CONFIG environment variable)
    3. Dotlist overrides (e.g., ["llm.temperature=0.2"]) from CLI flags

Environment variables (including those in a local .env file) are pulled in through
${oc.env:...} interpolations in the defaults and resolved at load time.

Examples:
    >>> config = load_config()
    >>> config.llm.model
    'glm-4-flash'

    >>> config = load_config(overrides=["persistence.debounce_s=1.0"])
"""

import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from omegaconf import DictConfig, OmegaConf

load_dotenv()
DEFAULTS_PATH = Path(__file__).resolve().parent.parent / "config" / "defaults.yaml"


def load_config(
    config_path: Optional[Path] = None, overrides: Optional[List[str]] = None
) -> DictConfig:
    """
    Load the merged VITAE configuration.

    Args:
        config_path: Optional user YAML (defaults to VITAE_CONFIG env variable, if set)
        overrides: Optional dotlist overrides applied last

    Returns:
        Resolved DictConfig

    Raises:
        FileNotFoundError: If an explicit or VITAE_CONFIG config file does not exist
    """
    config = OmegaConf.load(DEFAULTS_PATH)

    if config_path is None and os.getenv("VITAE_CONFIG"):
        config_path = Path(os.getenv("VITAE_CONFIG"))

    if config_path is not None:
        config_path = Path(config_path).expanduser()
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        config = OmegaConf.merge(config, OmegaConf.load(config_path))

    if overrides:
        config = OmegaConf.merge(config, OmegaConf.from_dotlist(overrides))

    OmegaConf.resolve(config)
    return config


def resolve_path(value: str) -> Path:
    """Expand ~ and environment references in a configured path."""
    return Path(os.path.expandvars(str(value))).expanduser()
