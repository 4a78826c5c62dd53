"""YAML configuration loader with environment variable overrides.

Configuration is layered, later layers winning:

  1. ``config/config.yaml`` -- static defaults checked into the repo
  2. ``.env`` file          -- local developer overrides (not committed)
  3. Environment variables  -- set at deploy time

``load_config`` reads the YAML file, then deep-merges the values resolved by
:class:`Settings` on top.
"""

from pathlib import Path

import yaml

from festival_scout.config.settings import Settings


def load_config(path: str = "config/config.yaml", settings: Settings | None = None) -> dict:
    """Load YAML config and merge with environment-based Settings.

    Args:
        path: Path to the YAML configuration file.  A missing file yields
              an empty base.
        settings: Pre-built settings; a fresh ``Settings()`` is read when
                  omitted.

    Returns:
        Fully resolved configuration dictionary.
    """
    config_path = Path(path)
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            yaml_config = yaml.safe_load(f) or {}
    else:
        yaml_config = {}

    settings = settings or Settings()
    env_overrides = {
        "app": {
            "env": settings.app_env,
        },
        "llm": {
            "available_providers": settings.get_available_llm_providers(),
        },
        "catalog": {
            "spotify_configured": settings.has_catalog_credentials(),
        },
        "cache": {
            "backend": settings.cache_backend,
            "sweep_interval": settings.cache_sweep_interval,
        },
        "renderer": {
            "timeout_ms": settings.render_timeout_ms,
            "max_attempts": settings.render_max_attempts,
            "retry_delay": settings.render_retry_delay,
        },
        "storage": {
            "db_path": settings.db_path,
        },
        "logging": {
            "level": settings.log_level,
        },
    }

    _deep_merge(yaml_config, env_overrides)
    return yaml_config


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
