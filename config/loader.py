"""Configuration file loader and validator.

Reads the INI file into the ``Config`` dataclasses, converting each value to the type of
the corresponding field, then validates ranges. Structural problems with the file raise;
questionable values are corrected with a warning so the game keeps running.
"""

from __future__ import annotations

import ast
import configparser
import os
from configparser import ConfigParser
from dataclasses import fields
from pathlib import Path
from typing import TYPE_CHECKING, Any, Final

from models.config_models import Config
from utils.file_utils import FileUtils
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Callable
    from dataclasses import Field as DataclassField

__all__: list[str] = [
    "ALLOWED_PROVIDERS",
    "ConfigError",
    "ConfigFileNotFoundError",
    "ConfigFormatError",
    "ConfigLoader",
    "ConfigTypeError",
    "ConfigValueError",
]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

ALLOWED_PROVIDERS: Final[list[str]] = ["siliconflow", "openai", "claude", "moonshot", "custom"]

TEMPERATURE_RANGE: Final[tuple[float, float]] = (0.0, 1.0)
MAX_TOKENS_RANGE: Final[tuple[int, int]] = (1, 4096)
CONTEXT_WINDOW_RANGE: Final[tuple[int, int]] = (0, 50)

_STRING_LITERAL_PREFIXES: Final[tuple[str, ...]] = ('"', "'", 'r"', "r'", 'R"', "R'")


class ConfigError(Exception):
    """An error occurred while processing the configuration file."""


class ConfigFileNotFoundError(ConfigError):
    """The specified configuration file does not exist."""


class ConfigFormatError(ConfigError):
    """The configuration file is not formatted correctly."""


class ConfigValueError(ConfigFormatError):
    """The configuration file contains an invalid value."""


class ConfigTypeError(ConfigFormatError):
    """The configuration file contains an invalid type."""


class ConfigLoader:
    """Handles loading and validation of configuration settings.

    Args:
        config_filename (str): INI file name to load.
        script_name (str): Executing script name, used in error messages.
        **args: Optional overrides: ``provider``, ``api_key``, ``target_language``, ``debug``.

    Raises:
        ConfigFileNotFoundError: If the configuration file does not exist.
        ConfigFormatError: If the file cannot be parsed or contains values of the wrong type.
    """

    def __init__(self, *, config_filename: str, script_name: str, **args) -> None:
        config_path = Path(config_filename)
        msg: str
        if not config_path.exists():
            msg = (
                f"Configuration file '{config_filename}' not found. "
                f"Please create '{config_filename}' in the same directory as '{script_name}'."
            )
            raise ConfigFileNotFoundError(msg)

        parser: ConfigParser = ConfigParser(interpolation=None)
        # Keep option names as written; the dataclass fields are upper case.
        parser.optionxform = str  # type: ignore[assignment]

        try:
            parser.read(config_filename, encoding="utf-8")
        except configparser.Error as err:
            msg = f"Failed to parse configuration file '{config_filename}': {err}"
            raise ConfigFormatError(msg) from None

        self.config = Config()
        self._convert_settings(parser)
        self._apply_overrides(args)
        self._validate_settings()
        self._resolve_paths()

    def _convert_settings(self, parser: ConfigParser) -> None:
        formatter = _ConfigFormatter(self.config, parser)
        for section in fields(self.config):
            if not parser.has_section(section.name):
                logger.debug("Section '%s' not defined; using defaults.", section.name)
                continue
            self._convert_section_field(parser, formatter, section)

    def _convert_section_field(
        self, parser: ConfigParser, formatter: _ConfigFormatter, section: DataclassField[Any]
    ) -> None:
        for key in fields(getattr(self.config, section.name)):
            if not parser.has_option(section.name, key.name):
                logger.debug("Skipping undefined setting: '%s.%s'", section.name, key.name)
                continue

            formatted_value: Any = formatter.apply_format(section, key)
            setattr(getattr(self.config, section.name), key.name, formatted_value)

    def _apply_overrides(self, args: dict[str, Any]) -> None:
        """Apply command-line overrides on top of the file values."""
        if args.get("provider") is not None:
            self.config.API.PROVIDER = args["provider"]
        if args.get("api_key") is not None:
            self.config.API.API_KEY = args["api_key"]
        if args.get("target_language") is not None:
            self.config.TRANSLATION.TARGET_LANGUAGE = args["target_language"]
        if args.get("debug", False):
            self.config.GENERAL.DEBUG = True

    def _validate_settings(self) -> None:
        """Normalize the provider, fill in the API key and bring numbers into range."""
        api = self.config.API
        api.PROVIDER = api.PROVIDER.strip().lower()
        if api.PROVIDER not in ALLOWED_PROVIDERS:
            logger.warning("Unknown value '%s' is set for 'API.PROVIDER'", api.PROVIDER)
        if api.PROVIDER == "custom" and not api.API_URL.strip():
            msg = "'API.API_URL' must be set when 'API.PROVIDER' is 'custom'."
            raise ConfigValueError(msg)

        if not api.API_KEY.strip():
            env_name: str = f"{api.PROVIDER.upper()}_API_KEY"
            api.API_KEY = os.getenv(env_name, "")
            if api.API_KEY:
                logger.info("API key read from environment variable '%s'", env_name)
            else:
                # Not an error: the service reports itself as not ready.
                logger.warning("'API.API_KEY' is empty and '%s' is not set.", env_name)

        api.TEMPERATURE = self._clamp("API.TEMPERATURE", api.TEMPERATURE, *TEMPERATURE_RANGE)
        api.MAX_TOKENS = self._clamp("API.MAX_TOKENS", api.MAX_TOKENS, *MAX_TOKENS_RANGE)

        trans = self.config.TRANSLATION
        trans.CONTEXT_WINDOW = self._clamp("TRANSLATION.CONTEXT_WINDOW", trans.CONTEXT_WINDOW, *CONTEXT_WINDOW_RANGE)
        if trans.MAX_CACHE_SIZE < 0:
            logger.warning("'TRANSLATION.MAX_CACHE_SIZE' is negative; the cache is unbounded.")
            trans.MAX_CACHE_SIZE = 0
        if not trans.TARGET_LANGUAGE.strip():
            msg = "'TRANSLATION.TARGET_LANGUAGE' must not be empty."
            raise ConfigValueError(msg)

    @staticmethod
    def _clamp[N: (int, float)](field_name: str, value: N, lower: N, upper: N) -> N:
        if value < lower or value > upper:
            clamped: N = min(max(value, lower), upper)
            logger.warning("'%s' = %s is out of range [%s, %s]; using %s.", field_name, value, lower, upper, clamped)
            return clamped
        return value

    def _resolve_paths(self) -> None:
        general = self.config.GENERAL
        general.CACHE_DIR = str(FileUtils.resolve_path(general.CACHE_DIR))
        if general.PROMPT_FILE:
            general.PROMPT_FILE = str(FileUtils.resolve_path(general.PROMPT_FILE))
        if general.LOG_FILE:
            general.LOG_FILE = str(FileUtils.resolve_path(general.LOG_FILE))


class _ConfigFormatter:
    """Converts INI string values to typed Python objects (bool, int, float, str)."""

    def __init__(self, config: Config, parser: ConfigParser) -> None:
        self.config: Config = config
        self.parser: ConfigParser = parser

    def apply_format(self, section: DataclassField[Any], key: DataclassField[Any]) -> Any:
        """Convert an INI value to the type of the matching Config field.

        Raises:
            ConfigValueError: If a value cannot be converted.
            ConfigFormatError: If a quoted string literal is malformed.
            ConfigTypeError: If the value has a different type than the field.
        """
        formatters: dict[type, Callable[[DataclassField[Any], DataclassField[Any]], Any]] = {
            bool: self.parse_as_boolean,
            int: self.parse_as_integer,
            float: self.parse_as_float,
            str: self.parse_as_string,
        }

        expected: type = type(getattr(getattr(self.config, section.name), key.name))
        formatter: Callable[[DataclassField[Any], DataclassField[Any]], Any] | None = formatters.get(expected)
        if formatter is None:
            msg = f"Unsupported setting type for {section.name}.{key.name}: {expected.__name__}"
            raise ConfigTypeError(msg)
        try:
            return formatter(section, key)
        except ValueError as err:
            msg = f"Invalid value for {section.name}.{key.name}: {err}"
            raise ConfigValueError(msg) from err
        except SyntaxError as err:
            msg = f"Invalid literal for {section.name}.{key.name}: {err}"
            raise ConfigFormatError(msg) from err
        except TypeError as err:
            msg = f"Invalid value for {section.name}.{key.name}: {err}"
            raise ConfigTypeError(msg) from err

    def parse_as_float(self, section: DataclassField[Any], key: DataclassField[Any]) -> float:
        value: str = self.parser.get(section.name, key.name)
        for char in ("'", '"'):
            value = value.removeprefix(char).removesuffix(char)
        return float(value)

    def parse_as_integer(self, section: DataclassField[Any], key: DataclassField[Any]) -> int:
        value: str = self.parser.get(section.name, key.name)
        for char in ("'", '"'):
            value = value.removeprefix(char).removesuffix(char)
        return int(float(value))

    def parse_as_boolean(self, section: DataclassField[Any], key: DataclassField[Any]) -> bool:
        return self.parser.getboolean(section.name, key.name)

    def parse_as_string(self, section: DataclassField[Any], key: DataclassField[Any]) -> str:
        """Read a string; quoted values are Python literals (so r"..." keeps backslashes)."""
        value: str = self.parser.get(section.name, key.name).strip()
        if not value.startswith(_STRING_LITERAL_PREFIXES):
            return value
        parsed: Any = ast.literal_eval(value)
        if not isinstance(parsed, str):
            msg = f"expected a string, got {type(parsed).__name__}"
            raise TypeError(msg)
        return parsed
