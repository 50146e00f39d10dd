"""
Manages loading and creation of the INI configuration file.
"""

import configparser
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from hlsfetch.exceptions import ConfigurationError
from hlsfetch.models.config import DownloadConfig, TransportConfig

log = logging.getLogger(__name__)

TRANSPORT_PREFIX = "transport_"


class ConfigManager:
    """
    Handles all operations related to the application's INI config file.

    The file is optional: when it does not exist, model defaults are used
    and only CLI overrides apply. Transport settings live in the same
    `[DEFAULT]` section under a `transport_` prefix.
    """

    def __init__(self, config_file_path: Path):
        self.config_file_path = config_file_path
        self._parser = configparser.ConfigParser()

    def load_config(self, cli_options: dict[str, Any] | None = None) -> DownloadConfig:
        """
        Loads configuration from the INI file, applies CLI overrides, and validates it.

        Args:
            cli_options: A dictionary of options provided via the command line.

        Returns:
            A validated DownloadConfig object.

        Raises:
            ConfigurationError: If the config file is unreadable or validation fails.
        """
        config_from_file: dict[str, Any] = {}
        if self.config_file_path.is_file():
            try:
                self._parser.read(self.config_file_path, encoding="utf-8")
            except configparser.Error as e:
                raise ConfigurationError(
                    f"Error parsing configuration file: {e}"
                ) from e
            config_from_file = self._get_config_as_dict()
        else:
            log.debug(
                f"No configuration file at '{self.config_file_path}', using defaults."
            )

        if cli_options:
            transport_overrides = cli_options.pop("transport", None) or {}
            config_from_file.update(cli_options)
            if transport_overrides:
                config_from_file.setdefault("transport", {}).update(transport_overrides)

        try:
            return DownloadConfig(**config_from_file)
        except ValidationError as e:
            raise ConfigurationError(f"Configuration validation failed:\n{e}") from e

    def save_new_config(self, settings: dict[str, Any] | None = None) -> None:
        """
        Creates and saves a new configuration file filled with defaults.

        Args:
            settings: Values that should replace the defaults.
        """
        settings = settings or {}
        defaults = DownloadConfig()
        config = configparser.ConfigParser()
        config["DEFAULT"] = {}

        for key in sorted(DownloadConfig.get_ini_keys()):
            if key.startswith(TRANSPORT_PREFIX):
                field = key.removeprefix(TRANSPORT_PREFIX)
                value = settings.get(key, getattr(defaults.transport, field))
            else:
                value = settings.get(key, getattr(defaults, key))

            if value is None:
                config["DEFAULT"][key] = ""
            elif isinstance(value, bool):
                config["DEFAULT"][key] = "true" if value else "false"
            else:
                # configparser uses % for interpolation, so we must escape it
                config["DEFAULT"][key] = str(value).replace("%", "%%")

        try:
            self.config_file_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_file_path, "w", encoding="utf-8") as configfile:
                config.write(configfile)
        except OSError as e:
            raise ConfigurationError(f"Failed to save configuration file: {e}") from e

    def _get_config_as_dict(self) -> dict[str, Any]:
        """Reads the 'DEFAULT' section of the INI file into a dictionary."""
        section = self._parser["DEFAULT"]
        result: dict[str, Any] = {}
        transport: dict[str, Any] = {}

        for key, value in section.items():
            if value == "":
                continue
            if key.startswith(TRANSPORT_PREFIX):
                field = key.removeprefix(TRANSPORT_PREFIX)
                if field in TransportConfig.model_fields:
                    transport[field] = value
                    continue
            elif key in DownloadConfig.model_fields:
                result[key] = value
                continue
            log.warning(f"[yellow]Ignoring unknown config key '{key}'.[/yellow]")

        if transport:
            result["transport"] = transport
        return result
