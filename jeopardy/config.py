"""
Configuration loader
"""
import logging
import os
from pathlib import Path

import yaml

from jeopardy.models import GameSettings


logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config/game.yaml"


def resolve_config_path() -> str:
    """JEOPARDY_CONFIG overrides the default config location"""
    return os.environ.get("JEOPARDY_CONFIG", DEFAULT_CONFIG_PATH)


def load_config(config_path: str = None) -> GameSettings:
    """
    Load settings from a YAML file

    Args:
        config_path: Path to config file (JEOPARDY_CONFIG or config/game.yaml)

    Returns:
        GameSettings; defaults when the file does not exist
    """
    path = Path(config_path or resolve_config_path())

    if not path.exists():
        logger.warning(f"⚠️ Config file not found: {path}, using defaults")
        return GameSettings()

    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f) or {}

    return GameSettings(**data)
