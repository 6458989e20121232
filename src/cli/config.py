"""Configuration loading and management."""

import os
from pathlib import Path
from typing import Optional

import yaml

from .config_models import AppConfig

CRON_SECRET_ENV = "CRON_SECRET"


def find_config() -> Optional[Path]:
    """Find config file in standard locations."""
    locations = [
        Path.cwd() / "config.yaml",
        Path.home() / ".versionwatch" / "config.yaml",
        Path.home() / "versionwatch" / "config.yaml",
    ]
    for loc in locations:
        if loc.exists():
            return loc
    return None


def load_config_model(config_path: Optional[Path] = None) -> AppConfig:
    """Load configuration as Pydantic model with validation."""
    base_config = {}

    path = config_path or find_config()
    if path and path.exists():
        try:
            with open(path) as f:
                base_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in config file: {e}")

    try:
        return AppConfig.from_dict(base_config)
    except Exception as e:
        raise ValueError(f"Config validation failed: {e}")


def get_cron_secret() -> Optional[str]:
    """Shared secret guarding the HTTP trigger, from the environment."""
    return os.getenv(CRON_SECRET_ENV) or None


def write_default_config(path: Path) -> Path:
    """Write the default config to ``path``, creating parent dirs."""
    path = path.expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    data = AppConfig().model_dump(mode="json")
    data["llm"]["api_key"] = "${ANTHROPIC_API_KEY}"
    with open(path, "w") as f:
        yaml.safe_dump(data, f, sort_keys=False)
    return path
