"""Abstract translation backend and its exceptions.

A backend performs exactly one network exchange per ``translate`` call. Concrete backends
register themselves under their provider name when their class is defined.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, ClassVar

from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Sequence

    from models.config_models import Config
    from models.translation_models import BackendRequestConfig, ContextEntry

__all__: list[str] = [
    "BackendError",
    "BackendHTTPError",
    "BackendResponseError",
    "BackendTimeoutError",
    "TranslationBackend",
]

logger: logging.Logger = LoggerUtils.get_logger(__name__)


class BackendError(Exception):
    """A translation call failed (transport, HTTP status, or response parsing)."""


class BackendHTTPError(BackendError):
    """The API answered with an error status, or could not be reached."""


class BackendTimeoutError(BackendError):
    """The API did not answer in time."""


class BackendResponseError(BackendError):
    """The API answer did not contain a usable translation."""


class TranslationBackend(ABC):
    """Base class for translation backends.

    Attributes:
        registered (ClassVar[dict[str, type[TranslationBackend]]]): Backend classes keyed by
            provider name. Classes with an empty name are abstract helpers and are not registered.
    """

    registered: ClassVar[dict[str, type[TranslationBackend]]] = {}

    def __init_subclass__(cls, **kwargs) -> None:
        """Register the subclass under its provider name."""
        super().__init_subclass__(**kwargs)
        name: str = cls.fetch_backend_name()
        if not isinstance(name, str) or name == "":
            return

        if name in cls.registered:
            msg: str = f"A translation backend with the name '{name}' is already registered."
            raise ValueError(msg)

        cls.registered[name] = cls
        logger.debug("Registered translation backend: '%s'", name)

    @staticmethod
    def fetch_backend_name() -> str:
        """Return the provider name the class registers under.

        Returns:
            str: Provider name, or an empty string for classes that must not be registered.
        """
        return ""

    @property
    def backend_name(self) -> str:
        return self.fetch_backend_name()

    @abstractmethod
    def initialize(self, config: Config) -> None:
        """Prepare the backend (endpoint, credentials, prompt) from the configuration.

        Args:
            config (Config): Application configuration.
        """
        raise NotImplementedError

    @abstractmethod
    async def translate(self, text: str, context: Sequence[ContextEntry], config: BackendRequestConfig) -> str:
        """Translate ``text`` with one API call.

        Args:
            text (str): Source text.
            context (Sequence[ContextEntry]): Recent translations, oldest first.
            config (BackendRequestConfig): Model and generation settings.

        Returns:
            str: The translated text.

        Raises:
            BackendError: If the call fails or the answer cannot be used.
        """
        raise NotImplementedError

    @abstractmethod
    async def close(self) -> None:
        """Release network resources."""
        raise NotImplementedError

