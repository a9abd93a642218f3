"""
User settings for gvmkit.

Settings are resolved with the following precedence (highest first):
    1. Explicit overrides (CLI flags)
    2. Environment variables (G_HOME, G_MIRROR, G_SKIP_CHECKSUM, G_ACTIVATION_LOCK)
    3. <home>/config.yaml
    4. Built-in defaults

Example config.yaml:
    mirrors:
      - https://go.dev/dl/
      - https://golang.google.cn/dl/
    skip_checksum: false
    activation_lock: true
    download_timeout: 60
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from gvmkit.core.directory import HOME_ENV, HomeLayout, get_default_home_dir

logger = logging.getLogger(__name__)

MIRROR_ENV = "G_MIRROR"
MIRROR_SEP = ","
SKIP_CHECKSUM_ENV = "G_SKIP_CHECKSUM"
ACTIVATION_LOCK_ENV = "G_ACTIVATION_LOCK"

DEFAULT_MIRROR = "https://go.dev/dl/"

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass
class Settings:
    """Resolved gvmkit configuration."""

    home: Path
    mirrors: List[str] = field(default_factory=lambda: [DEFAULT_MIRROR])
    skip_checksum: bool = False
    activation_lock: bool = True
    download_timeout: int = 30

    @property
    def layout(self) -> HomeLayout:
        return HomeLayout(self.home)


def load_yaml_config(config_file: Path, required: bool = False) -> Dict[str, Any]:
    """
    Load and parse a YAML configuration file.

    Args:
        config_file: Path to YAML configuration file
        required: If True, raise error if file doesn't exist

    Returns:
        Configuration dictionary (empty dict if file doesn't exist and not required)

    Raises:
        FileNotFoundError: If required=True and file doesn't exist
        ValueError: If YAML parsing fails or the top level is not a mapping
    """
    if not config_file.exists():
        if required:
            raise FileNotFoundError(f"Configuration file not found: {config_file}")
        logger.debug(f"Config file not found (optional): {config_file}")
        return {}

    logger.debug(f"Loading configuration from {config_file}")

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.error(f"Failed to parse YAML: {e}")
        raise ValueError(f"Invalid YAML in {config_file}: {e}")

    config = config or {}
    if not isinstance(config, dict):
        raise ValueError(f"Configuration in {config_file} must be a mapping")
    return config


def parse_mirrors(value: str) -> List[str]:
    """
    Split a delimiter-separated mirror list, dropping blanks.

    Example:
        >>> parse_mirrors("https://a/dl/, https://b/dl/")
        ['https://a/dl/', 'https://b/dl/']
    """
    return [item.strip() for item in value.split(MIRROR_SEP) if item.strip()]


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUE_VALUES


def load_settings(
    home: Optional[Path] = None,
    environ: Optional[Dict[str, str]] = None,
) -> Settings:
    """
    Resolve settings from overrides, environment and config file.

    Args:
        home: Explicit home directory (e.g. from --home)
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Resolved Settings

    Raises:
        ValueError: If config.yaml is malformed
    """
    env = os.environ if environ is None else environ

    if home is None:
        home = Path(env[HOME_ENV]).expanduser() if env.get(HOME_ENV) else None
    if home is None:
        home = get_default_home_dir()

    settings = Settings(home=Path(home))
    config = load_yaml_config(settings.layout.config_file)

    mirrors = config.get("mirrors")
    if isinstance(mirrors, str):
        settings.mirrors = parse_mirrors(mirrors)
    elif isinstance(mirrors, list):
        settings.mirrors = [str(m).strip() for m in mirrors if str(m).strip()]
    if "skip_checksum" in config:
        settings.skip_checksum = _parse_bool(config["skip_checksum"])
    if "activation_lock" in config:
        settings.activation_lock = _parse_bool(config["activation_lock"])
    if "download_timeout" in config:
        settings.download_timeout = int(config["download_timeout"])

    if env.get(MIRROR_ENV):
        settings.mirrors = parse_mirrors(env[MIRROR_ENV])
    if env.get(SKIP_CHECKSUM_ENV):
        settings.skip_checksum = _parse_bool(env[SKIP_CHECKSUM_ENV])
    if env.get(ACTIVATION_LOCK_ENV):
        settings.activation_lock = _parse_bool(env[ACTIVATION_LOCK_ENV])

    if not settings.mirrors:
        settings.mirrors = [DEFAULT_MIRROR]

    logger.debug(f"Settings: {settings}")
    return settings
