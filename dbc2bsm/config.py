"""
Configuration management for the DBC to beSTORM converter.

This module provides centralized configuration management, supporting:
- Loading from JSON config files
- Environment variable overrides
- Validation of all settings
- The single place where logging is configured
"""

import os
import json
import logging
from dataclasses import dataclass, asdict
from typing import Optional, List
from pathlib import Path

from dbc2bsm.constants import (
    CAN_IP_ADDRESS_DEFAULT, CAN_PORT_DEFAULT, CAN_PORTS,
    CAN_BAUDRATE_DEFAULT, CAN_BAUDRATES, CAN_LIBRARY_DEFAULT,
    MAX_BYTES_TO_GENERATE_DEFAULT,
    OVERSIZE_POLICY_REJECT, OVERSIZE_POLICIES,
)
from dbc2bsm.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
VALID_LOG_LEVELS = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}
USER_CONFIG_DIR = '.dbc2bsm'
USER_CONFIG_FILE = 'config.json'

_TRUE_VALUES = {'1', 'true', 'yes', 'on'}


def configure_logging(level: Optional[str] = None) -> None:
    """Configure the root logger.

    Args:
        level: Logging level name. Falls back to the LOG_LEVEL environment
               variable, then INFO.
    """
    level_name = (level or os.environ.get('LOG_LEVEL') or 'INFO').upper()
    if level_name not in VALID_LOG_LEVELS:
        level_name = 'INFO'
    logging.basicConfig(level=getattr(logging, level_name), format=LOG_FORMAT)
    logging.getLogger().setLevel(getattr(logging, level_name))


@dataclass
class BsmSettings:
    """beSTORM document settings.

    Attributes:
        ip_address: Value of the CAN Open IPAddress parameter
        port: CAN port of the device (0-3)
        baudrate: CAN baudrate written to SetGlobals
        library: beSTORM CAN interface library name
        max_bytes_to_generate: GeneratorOptSettings MaxBytesToGenerate
        include_timestamp: Whether to add a generation time comment
        oversize_policy: 'reject' or 'clamp' for frames over 32 bits
    """
    ip_address: str = CAN_IP_ADDRESS_DEFAULT
    port: int = CAN_PORT_DEFAULT
    baudrate: int = CAN_BAUDRATE_DEFAULT
    library: str = CAN_LIBRARY_DEFAULT
    max_bytes_to_generate: int = MAX_BYTES_TO_GENERATE_DEFAULT
    include_timestamp: bool = False
    oversize_policy: str = OVERSIZE_POLICY_REJECT

    def validate(self) -> List[str]:
        """Validate settings and return list of error messages (empty if valid)."""
        errors = []
        if not self.ip_address or not isinstance(self.ip_address, str):
            errors.append("IP address must be a non-empty string")
        if self.port not in CAN_PORTS:
            errors.append(f"CAN port {self.port} must be one of {CAN_PORTS}")
        if self.baudrate not in CAN_BAUDRATES:
            errors.append(f"Baudrate {self.baudrate} must be one of {CAN_BAUDRATES}")
        if not self.library or not isinstance(self.library, str):
            errors.append("Library must be a non-empty string")
        if not isinstance(self.max_bytes_to_generate, int) or self.max_bytes_to_generate < 1:
            errors.append("Max bytes to generate must be an integer >= 1")
        if self.oversize_policy not in OVERSIZE_POLICIES:
            errors.append(f"Oversize policy {self.oversize_policy!r} must be one of {OVERSIZE_POLICIES}")
        return errors


@dataclass
class AppSettings:
    """Application-level configuration settings.

    Attributes:
        log_level: Logging level ('DEBUG', 'INFO', 'WARNING', 'ERROR')
    """
    log_level: str = 'INFO'

    def validate(self) -> List[str]:
        errors = []
        if self.log_level.upper() not in VALID_LOG_LEVELS:
            errors.append(f"Log level must be one of {sorted(VALID_LOG_LEVELS)}")
        return errors


class ConfigManager:
    """Centralized configuration manager.

    Settings are loaded with priority:
    1. JSON config file (highest priority)
    2. Environment variables
    3. Default values (lowest priority)

    Attributes:
        bsm_settings: beSTORM document settings
        app_settings: Application-level configuration
        _config_file: Path to JSON config file (if loaded)
    """

    def __init__(self, config_file: Optional[str] = None):
        """Initialize ConfigManager.

        Args:
            config_file: Optional path to JSON config file. If None, will try
                         ~/.dbc2bsm/config.json
        """
        self.bsm_settings = BsmSettings()
        self.app_settings = AppSettings()
        self._config_file: Optional[str] = None

        self._load_from_environment()
        if config_file:
            self._load_from_file(config_file)
        else:
            self._load_from_default_locations()

        errors = self.validate()
        if errors:
            logger.warning(f"Configuration validation errors: {errors}")

    @property
    def config_file(self) -> Optional[str]:
        return self._config_file

    def _load_from_environment(self) -> None:
        """Load configuration from environment variables."""
        ip_address = os.environ.get('DBC2BSM_IP_ADDRESS')
        if ip_address:
            self.bsm_settings.ip_address = ip_address

        for env_name, attr in (('DBC2BSM_PORT', 'port'), ('DBC2BSM_BAUDRATE', 'baudrate')):
            value = os.environ.get(env_name)
            if value:
                try:
                    setattr(self.bsm_settings, attr, int(value))
                except (ValueError, TypeError):
                    logger.warning(f"Invalid {env_name} environment variable: {value}")

        library = os.environ.get('DBC2BSM_LIBRARY')
        if library:
            self.bsm_settings.library = library

        timestamps = os.environ.get('DBC2BSM_TIMESTAMPS')
        if timestamps:
            self.bsm_settings.include_timestamp = timestamps.strip().lower() in _TRUE_VALUES

        policy = os.environ.get('DBC2BSM_OVERSIZE_POLICY')
        if policy:
            self.bsm_settings.oversize_policy = policy.strip().lower()

        log_level = os.environ.get('LOG_LEVEL')
        if log_level:
            self.app_settings.log_level = log_level.upper()

    def _load_from_file(self, file_path: str) -> bool:
        """Load configuration from JSON file.

        Args:
            file_path: Path to JSON config file

        Returns:
            True if loaded successfully, False otherwise
        """
        if not os.path.exists(file_path):
            logger.debug(f"Config file not found: {file_path}")
            return False

        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse config file {file_path}: {e}")
            return False
        except OSError as e:
            logger.error(f"Failed to read config file {file_path}: {e}", exc_info=True)
            return False

        bsm_data = data.get('bsm_settings', {})
        for key in ('ip_address', 'library', 'oversize_policy'):
            if key in bsm_data:
                setattr(self.bsm_settings, key, str(bsm_data[key]))
        for key in ('port', 'baudrate', 'max_bytes_to_generate'):
            if key in bsm_data:
                try:
                    setattr(self.bsm_settings, key, int(bsm_data[key]))
                except (ValueError, TypeError):
                    logger.warning(f"Invalid {key} in config: {bsm_data[key]}")
        if 'include_timestamp' in bsm_data:
            value = bsm_data['include_timestamp']
            if isinstance(value, str):
                value = value.strip().lower() in _TRUE_VALUES
            self.bsm_settings.include_timestamp = bool(value)

        app_data = data.get('app_settings', {})
        if 'log_level' in app_data:
            self.app_settings.log_level = str(app_data['log_level']).upper()

        self._config_file = file_path
        logger.info(f"Loaded configuration from {file_path}")
        return True

    def _load_from_default_locations(self) -> None:
        """Try loading from the user config file."""
        user_config_file = Path.home() / USER_CONFIG_DIR / USER_CONFIG_FILE
        if user_config_file.exists():
            self._load_from_file(str(user_config_file))

    def save_to_file(self, file_path: Optional[str] = None) -> bool:
        """Save current configuration to JSON file.

        Args:
            file_path: Optional path to save to. If None, uses the loaded file
                       or the user config file.

        Returns:
            True if saved successfully, False otherwise
        """
        save_path = file_path or self._config_file
        if not save_path:
            save_path = str(Path.home() / USER_CONFIG_DIR / USER_CONFIG_FILE)

        data = {
            'bsm_settings': asdict(self.bsm_settings),
            'app_settings': asdict(self.app_settings),
        }
        try:
            Path(save_path).parent.mkdir(parents=True, exist_ok=True)
            with open(save_path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2)
        except OSError as e:
            logger.error(f"Failed to save config file {save_path}: {e}", exc_info=True)
            return False

        self._config_file = save_path
        logger.info(f"Saved configuration to {save_path}")
        return True

    def validate(self) -> List[str]:
        """Validate all configuration settings.

        Returns:
            List of error messages (empty if all valid)
        """
        errors = []
        errors.extend(self.bsm_settings.validate())
        errors.extend(self.app_settings.validate())
        return errors

    def require_valid(self) -> None:
        """Raise ConfigurationError if any setting is invalid."""
        errors = self.validate()
        if errors:
            raise ConfigurationError("Invalid configuration: " + "; ".join(errors))
