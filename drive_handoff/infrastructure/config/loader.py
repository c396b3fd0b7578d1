"""
Configuration loading and saving utilities.

This module loads configuration from YAML or JSON files and applies
environment variable overrides, including the GOOGLE_* variables that carry
the provider credentials and root folder id. A `.env` file in the working
directory is read into the process environment first.
"""

import json
import os
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple

import yaml
from dotenv import find_dotenv, load_dotenv

from .models import ApplicationConfig


class ConfigLoader:
    """Configuration loader supporting multiple formats and sources."""

    def __init__(
        self,
        environ: Optional[Dict[str, str]] = None,
        dotenv_path: Optional[str] = None
    ) -> None:
        self._env_prefix = "DRIVE_HANDOFF_"
        self._environ = environ
        self._dotenv_path = dotenv_path

    def load_config(self, config_file: Optional[str] = None) -> ApplicationConfig:
        """
        Load configuration from file and environment variables.

        Args:
            config_file: Path to configuration file (optional)

        Returns:
            Loaded and validated configuration
        """
        config_data: Dict[str, Any] = {}

        if config_file:
            config_data = self._load_from_file(config_file)

        env_overrides = self._load_from_environment()
        config_data = self._merge_configs(config_data, env_overrides)

        config = ApplicationConfig.from_dict(config_data)
        config.config_file_path = config_file

        return config

    def save_config(self, config: ApplicationConfig, file_path: str, format: str = "yaml") -> None:
        """
        Save configuration to file.

        Args:
            config: Configuration to save
            file_path: Output file path
            format: File format (yaml or json)
        """
        config_data = config.to_dict()
        config_data.pop("config_file_path", None)

        if format.lower() == "yaml":
            self._save_yaml(config_data, file_path)
        elif format.lower() == "json":
            self._save_json(config_data, file_path)
        else:
            raise ValueError(f"Unsupported format: {format}")

    def _load_from_file(self, file_path: str) -> Dict[str, Any]:
        path = Path(file_path)

        if not path.exists():
            raise FileNotFoundError(
                f"Configuration file not found: {file_path}")

        if path.suffix.lower() in ['.yaml', '.yml']:
            return self._load_yaml(file_path)
        elif path.suffix.lower() == '.json':
            return self._load_json(file_path)
        else:
            raise ValueError(
                f"Unsupported configuration file format: {path.suffix}")

    def _load_yaml(self, file_path: str) -> Dict[str, Any]:
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                return yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {file_path}: {e}")

    def _load_json(self, file_path: str) -> Dict[str, Any]:
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                return json.load(f)  # type: ignore[no-any-return]
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {file_path}: {e}")

    def _save_yaml(self, data: Dict[str, Any], file_path: str) -> None:
        with open(file_path, 'w', encoding='utf-8') as f:
            yaml.safe_dump(data, f, default_flow_style=False, indent=2, sort_keys=False)

    def _save_json(self, data: Dict[str, Any], file_path: str) -> None:
        with open(file_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2)

    def _env_mappings(self) -> Dict[str, Tuple[str, Callable[[str], Any]]]:
        prefix = self._env_prefix
        return {
            "GOOGLE_CLIENT_ID": ("drive.client_id", str),
            "GOOGLE_CLIENT_SECRET": ("drive.client_secret", str),
            "GOOGLE_REFRESH_TOKEN": ("drive.refresh_token", str),
            "GOOGLE_FOLDER_ID": ("drive.root_folder_id", str),
            "GOOGLE_CREDENTIALS": ("drive.service_account_json", str),
            f"{prefix}AUTH_MODE": ("drive.auth_mode", str),
            f"{prefix}VALIDATE_DESTINATION": ("drive.validate_destination", self._parse_bool),
            f"{prefix}DEBUG": ("debug", self._parse_bool),
            f"{prefix}ENVIRONMENT": ("environment", str),
            f"{prefix}HOST": ("server.host", str),
            f"{prefix}PORT": ("server.port", int),
            f"{prefix}SERVER_URL": ("client.server_url", str),
            f"{prefix}LOG_LEVEL": ("logging.level", str),
            f"{prefix}LOG_DIR": ("logging.log_directory", str),
        }

    def _load_from_environment(self) -> Dict[str, Any]:
        """Load configuration overrides from environment variables."""
        if self._environ is None:
            load_dotenv(self._dotenv_path or find_dotenv(usecwd=True))
        environ = os.environ if self._environ is None else self._environ
        config: Dict[str, Any] = {}

        for env_var, (config_path, converter) in self._env_mappings().items():
            value = environ.get(env_var)
            if value is None or value == "":
                continue
            try:
                self._set_nested_value(config, config_path, converter(value))
            except (ValueError, TypeError) as e:
                raise ValueError(
                    f"Invalid value for {env_var}: {value} ({e})")

        return config

    def _parse_bool(self, value: str) -> bool:
        return value.lower() in ('true', '1', 'yes', 'on', 'enabled')

    def _set_nested_value(self, config: Dict[str, Any], path: str, value: Any) -> None:
        """Set a nested configuration value using dot notation."""
        keys = path.split('.')
        current = config

        for key in keys[:-1]:
            current = current.setdefault(key, {})

        current[keys[-1]] = value

    def _merge_configs(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge two configuration dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_configs(result[key], value)
            else:
                result[key] = value

        return result
