"""Configuration loading and validation.

This package reads the translator INI file into the ``Config`` dataclasses and checks the
values before the translation service is built.
"""

from config.loader import (
    ALLOWED_PROVIDERS,
    ConfigError,
    ConfigFileNotFoundError,
    ConfigFormatError,
    ConfigLoader,
    ConfigTypeError,
    ConfigValueError,
)

__all__: list[str] = [
    "ALLOWED_PROVIDERS",
    "ConfigError",
    "ConfigFileNotFoundError",
    "ConfigFormatError",
    "ConfigLoader",
    "ConfigTypeError",
    "ConfigValueError",
]
