from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any, ClassVar

from core.trans.engines.prompts import PromptBuilder
from core.trans.interface import (
    BackendHTTPError,
    BackendResponseError,
    BackendTimeoutError,
    TranslationBackend,
)
from handlers.async_comm import AsyncCommError, AsyncCommInvalidContentTypeError, AsyncCommTimeoutError, AsyncHttp
from utils.logger_utils import LoggerUtils
from utils.string_utils import StringUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Sequence

    from models.config_models import Config
    from models.translation_models import BackendRequestConfig, ContextEntry

__all__: list[str] = ["LLMBackendBase"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)


class LLMBackendBase(TranslationBackend):
    """Common HTTP flow for chat-style LLM APIs.

    Subclasses provide the endpoint, the request body, the authentication headers and the
    location of the reply text in the response document.

    Attributes:
        DEFAULT_ENDPOINT (ClassVar[str]): Endpoint used when the provider has a fixed URL.
    """

    DEFAULT_ENDPOINT: ClassVar[str] = ""

    def __init__(self, http: AsyncHttp | None = None) -> None:
        self._http: AsyncHttp = http if http is not None else AsyncHttp()
        self._api_key: str = ""
        self._endpoint: str = self.DEFAULT_ENDPOINT
        self._timeout: float = 30.0
        self._prompts: PromptBuilder = PromptBuilder()

    @property
    def endpoint(self) -> str:
        return self._endpoint

    def initialize(self, config: Config) -> None:
        self._api_key = config.API.API_KEY.strip()
        self._endpoint = self.DEFAULT_ENDPOINT or config.API.API_URL
        self._timeout = config.API.TIMEOUT
        self._prompts = PromptBuilder(config.GENERAL.PROMPT_FILE or None)
        logger.info("Translation backend '%s' uses endpoint '%s'", self.backend_name, self._endpoint)

    async def translate(self, text: str, context: Sequence[ContextEntry], config: BackendRequestConfig) -> str:
        system_prompt: str = self._prompts.system_prompt(config.target_language)
        user_prompt: str = self._prompts.user_prompt(text, context)
        body: dict[str, Any] = self._build_body(system_prompt, user_prompt, config)

        logger.debug("API call (%s, context=%d): '%s'", self.backend_name, len(context), StringUtils.shorten(text))
        try:
            data: Any = await self._http.post(
                url=self._endpoint, data=body, headers=self._build_headers(), total_timeout=self._timeout
            )
        except AsyncCommTimeoutError as err:
            raise BackendTimeoutError(str(err)) from err
        except AsyncCommInvalidContentTypeError as err:
            raise BackendResponseError(str(err)) from err
        except AsyncCommError as err:
            raise BackendHTTPError(str(err)) from err

        translated: str = self._extract_text(data).strip()
        if not translated:
            msg = f"Empty translation in response from '{self.backend_name}'"
            raise BackendResponseError(msg)
        return translated

    async def close(self) -> None:
        await self._http.close()

    @abstractmethod
    def _build_body(self, system_prompt: str, user_prompt: str, config: BackendRequestConfig) -> dict[str, Any]:
        raise NotImplementedError

    @abstractmethod
    def _build_headers(self) -> dict[str, str]:
        raise NotImplementedError

    @abstractmethod
    def _extract_text(self, data: Any) -> str:
        """Return the reply text from a decoded response.

        Raises:
            BackendResponseError: If the document does not have the expected shape.
        """
        raise NotImplementedError
