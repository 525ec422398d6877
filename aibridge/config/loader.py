"""
Configuration loader for AI Bridge.

Loads a YAML file, validates it against the Pydantic schema and returns
an AIServiceOptions instance. The file may hold the tree at the top level
or nested under an `ai_bridge:` section (so it can live inside a larger
application config).
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from aibridge.config.schema import AIServiceOptions

SECTION_NAME = "ai_bridge"


def options_from_dict(raw: dict[str, Any]) -> AIServiceOptions:
    """Validate an already-parsed config tree."""
    if SECTION_NAME in raw:
        raw = raw[SECTION_NAME] or {}

    try:
        return AIServiceOptions(**raw)
    except ValidationError as e:
        raise ValueError(f"Invalid AI Bridge config:\n{e}") from e


def load_options(config_path: str | Path) -> AIServiceOptions:
    """
    Load and validate AI Bridge configuration from YAML.

    Raises:
        FileNotFoundError: If the config file doesn't exist.
        ValueError: If the file is empty or invalid.
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config not found: {config_path}")

    with open(config_path, "r") as f:
        raw = yaml.safe_load(f)

    if raw is None:
        raise ValueError(f"Config file is empty: {config_path}")
    if not isinstance(raw, dict):
        raise ValueError(f"Config root must be a mapping: {config_path}")

    return options_from_dict(raw)
