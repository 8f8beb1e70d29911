"""Handles loading configuration from YAML files."""

import yaml
import os
import logging
from typing import Optional

from .exceptions import ConfigurationError
from .models import parse_interval
from .recognizer import ENGINES

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = {
    'interval_seconds': 1.0,
    'language': None,
    'ocr_engine': 'auto',
    'ffmpeg_path': None,
    'ffprobe_path': None,
    'log_dir': 'logs',
    'log_file': 'ocrsub.log',
}

class ConfigLoader:
    """Loads configuration settings from a YAML file."""

    def load_config(self, config_path: Optional[str] = None) -> dict:
        """
        Loads configuration from the specified YAML file path on top of the defaults.

        Args:
            config_path: The path to the YAML configuration file, or None to
                         use the defaults only.

        Returns:
            A dictionary containing the loaded configuration settings.

        Raises:
            FileNotFoundError: If the configuration file does not exist.
            ConfigurationError: If the file cannot be parsed as YAML or
                              if there are other reading errors.
        """
        config = dict(DEFAULT_CONFIG)
        if config_path is None:
            logger.debug("No configuration file given, using defaults.")
            return config

        logger.info(f"Attempting to load configuration from: {config_path}")
        if not os.path.exists(config_path):
            logger.error(f"Configuration file not found at path: {config_path}")
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
        if not os.path.isfile(config_path):
             logger.error(f"Configuration path is not a file: {config_path}")
             raise ConfigurationError(f"Configuration path is not a file: {config_path}")

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.error(f"Error parsing YAML configuration file {config_path}: {e}", exc_info=True)
            raise ConfigurationError(f"Invalid YAML format in {config_path}: {e}") from e
        except IOError as e:
            logger.error(f"Error reading configuration file {config_path}: {e}", exc_info=True)
            raise ConfigurationError(f"Could not read configuration file {config_path}: {e}") from e

        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            # Handle cases where YAML loads something other than a dictionary (e.g., just a string)
            logger.error(f"Configuration file {config_path} did not load as a dictionary (root object).")
            raise ConfigurationError(f"Invalid YAML structure in {config_path}. Root must be a mapping (dictionary).")

        unknown = sorted(set(loaded) - set(DEFAULT_CONFIG))
        if unknown:
            logger.warning(f"Ignoring unknown configuration keys in {config_path}: {', '.join(unknown)}")
        config.update({k: v for k, v in loaded.items() if k in DEFAULT_CONFIG})
        logger.info(f"Configuration loaded successfully from {config_path}")
        return config


def validate_config(config: dict) -> None:
    """
    Checks the settings the extraction depends on.

    Raises:
        ConfigurationError: For an unusable interval or an unknown OCR engine.
    """
    try:
        parse_interval(config.get('interval_seconds'))
    except ConfigurationError as e:
        raise ConfigurationError(f"interval_seconds: {e}") from e

    engine = config.get('ocr_engine')
    if engine not in ENGINES:
        raise ConfigurationError(f"Unknown ocr_engine '{engine}'. Choose one of: {', '.join(ENGINES)}")
