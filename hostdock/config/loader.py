"""YAML config file loading."""

import logging
import os

import yaml

from hostdock.errors import ConfigError

logger = logging.getLogger(__name__)

SECRET_KEYS = {"access_token", "token", "git_token"}


def expand_path(path: str) -> str:
    """Expand user home directory and environment variables in path."""
    return os.path.expanduser(os.path.expandvars(path))


def load_config_file(config_path: str | None) -> dict:
    """Load deploy settings from a YAML mapping; ``None`` yields an empty dict."""
    if not config_path:
        return {}
    path = expand_path(config_path)
    try:
        with open(path) as f:
            config = yaml.safe_load(f)
    except FileNotFoundError:
        raise ConfigError(f"Config file '{config_path}' not found")
    except yaml.YAMLError as e:
        raise ConfigError(f"Error parsing YAML config '{config_path}'", context=str(e))

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise ConfigError(f"Config file '{config_path}' must contain a mapping")

    leaked = SECRET_KEYS & set(config)
    if leaked:
        raise ConfigError(
            f"Config file '{config_path}' must not contain secrets ({', '.join(sorted(leaked))}). "
            "Use the HOSTDOCK_GIT_TOKEN environment variable instead."
        )
    return config
