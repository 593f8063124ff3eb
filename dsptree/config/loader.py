# dsptree/config/loader.py
import json
import os
from pathlib import Path
from typing import Optional

from pydantic import ValidationError
from loguru import logger

from ..core.encoding import FileEncoding
from .schema import AppConfig
from .paths import get_user_config_file

ENCODING_ENV_VAR = "DSPTREE_FILE_ENCODING"

_cached_config: Optional[AppConfig] = None

def _apply_env_overrides(config: AppConfig) -> AppConfig:
    encoding = os.environ.get(ENCODING_ENV_VAR)
    if not encoding:
        return config
    try:
        override = FileEncoding(encoding.strip().lower())
    except ValueError:
        valid = ", ".join(e.value for e in FileEncoding)
        logger.warning(f"Ignoring {ENCODING_ENV_VAR}={encoding!r}: expected one of {valid}")
        return config
    logger.info(f"File encoding overridden by {ENCODING_ENV_VAR}: {override}")
    return config.model_copy(update={"file_encoding": override})

def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """
    Loads the application configuration, falling back to defaults on any problem.

    Only the user config is cached; a file given explicitly is read every time and
    leaves the cache untouched.
    """
    global _cached_config
    if _cached_config is not None and config_path is None:
        return _cached_config

    explicit = config_path is not None
    config_path = config_path or get_user_config_file()
    loaded_data = {}

    if config_path.exists():
        logger.info(f"Loading configuration from: {config_path}")
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                loaded_data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.error(f"Failed to load config file {config_path}: {e}")
            loaded_data = {} # Fallback to defaults
        if not isinstance(loaded_data, dict):
            logger.error(f"Config file {config_path} must contain a JSON object, got {type(loaded_data).__name__}")
            loaded_data = {}
    else:
        logger.info("Config file not found. Using default settings.")

    try:
        config = AppConfig(**loaded_data)
        logger.debug("Configuration loaded successfully.")
    except ValidationError as e:
        logger.error(f"Configuration validation failed: {e}")
        logger.warning("Falling back to default configuration.")
        config = AppConfig()

    config = _apply_env_overrides(config)
    if not explicit:
        _cached_config = config
    return config

def get_config() -> AppConfig:
    """Returns the cached configuration object, loading if necessary."""
    if _cached_config is None:
        return load_config()
    return _cached_config

def reset_config_cache() -> None:
    global _cached_config
    _cached_config = None
