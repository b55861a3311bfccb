"""Asynchronous HTTP client used by the translation backends.

Wraps an aiohttp session with content-type based response decoding and maps transport
failures onto a small exception hierarchy.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, ClassVar, Final, Literal, Self

import aiohttp
from aiohttp.client import ClientSession

from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging
    from collections.abc import Callable

    from aiohttp.client import ClientResponse


__all__: list[str] = ["AsyncCommError", "AsyncCommInvalidContentTypeError", "AsyncCommTimeoutError", "AsyncHttp"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

HTTPMethod = Literal["GET", "POST"]

CONNECT_TIMEOUT: Final[float] = 5.0
ERROR_BODY_LOG_LIMIT: Final[int] = 500


class AsyncHttp:
    """Asynchronous HTTP client decoding responses by content type.

    The session is created lazily on first use, because aiohttp sessions must be created
    inside a running event loop.

    Attributes:
        CONTENT_DECODERS (ClassVar[dict[str, Callable[[bytes], Any]]]): Response decoders by
            media type.
    """

    CONTENT_DECODERS: ClassVar[dict[str, Callable[[bytes], Any]]] = {
        "application/json": lambda x: json.loads(x.decode("utf-8")),
    }

    def __init__(self) -> None:
        logger.debug("%s initializing", self.__class__.__name__)
        self.__session: ClientSession | None = None

    async def __aenter__(self) -> Self:
        self.initialize_session()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        _ = exc_type, exc_val, exc_tb
        await self.close()

    def initialize_session(self) -> None:
        """Create the aiohttp session if there is none or it has been closed."""
        if self.__session is None or self.__session.closed:
            self.__session = ClientSession()
            logger.debug("%s session initialized", self.__class__.__name__)

    @property
    def session(self) -> ClientSession:
        self.initialize_session()
        if self.__session is None:
            msg = "Session is not initialized"
            raise RuntimeError(msg)
        return self.__session

    async def close(self) -> None:
        """Close the aiohttp session if it is open."""
        if self.__session is not None and not self.__session.closed:
            await self.__session.close()
            logger.debug("%s session closed", self.__class__.__name__)
        self.__session = None

    async def post(
        self,
        *,
        url: str,
        data: Any | None = None,
        headers: dict[str, str] | None = None,
        total_timeout: float = 30.0,
    ) -> Any:
        """Send ``data`` as a JSON body and return the decoded response.

        Args:
            url (str): Request URL.
            data (Any | None): JSON-serializable request body.
            headers (dict[str, str] | None): Extra request headers.
            total_timeout (float): Total timeout in seconds. 0 or negative disables it.

        Returns:
            Any: Decoded response body (parsed JSON for application/json).

        Raises:
            AsyncCommTimeoutError: If the request timed out.
            AsyncCommError: If the connection failed or the server answered with an error status.
            AsyncCommInvalidContentTypeError: If the response type has no decoder.
        """
        return await self._request("POST", url=url, json=data, headers=headers, total_timeout=total_timeout)

    async def decode_response(self, resp: ClientResponse) -> Any:
        """Decode a response body according to its Content-Type.

        Raises:
            AsyncCommInvalidContentTypeError: If there is no decoder for the content type.
        """
        content_type: str = resp.headers.get("Content-Type", "").split(";")[0].strip()
        raw: bytes = await resp.read()
        if not raw:
            logger.debug("Received empty response")
            return None

        handler: Callable[[bytes], Any] | None = self.CONTENT_DECODERS.get(content_type)
        if handler is None:
            msg: str = f"Unknown Content-Type '{content_type}'"
            raise AsyncCommInvalidContentTypeError(msg)
        try:
            return handler(raw)
        except (UnicodeDecodeError, json.JSONDecodeError) as err:
            msg = f"Malformed '{content_type}' response: {err}"
            raise AsyncCommInvalidContentTypeError(msg) from err

    @staticmethod
    def _build_timeout(total_timeout: float) -> aiohttp.ClientTimeout:
        if total_timeout <= 0:
            return aiohttp.ClientTimeout(total=None)
        if total_timeout < CONNECT_TIMEOUT:
            return aiohttp.ClientTimeout(total=total_timeout)
        return aiohttp.ClientTimeout(connect=CONNECT_TIMEOUT, total=total_timeout)

    async def _request(self, method: HTTPMethod, *, url: str, total_timeout: float, **kwargs: Any) -> Any:
        logger.debug("[%s] url=%s timeout=%s", method, url, total_timeout)
        try:
            async with self.session.request(
                method=method, url=url, timeout=self._build_timeout(total_timeout), **kwargs
            ) as resp:
                if resp.status >= 400:
                    body: str = await resp.text(errors="replace")
                    msg: str = f"HTTP {resp.status}: {body[:ERROR_BODY_LOG_LIMIT]}"
                    raise AsyncCommError(msg, status=resp.status)
                return await self.decode_response(resp)

        except TimeoutError as err:
            logger.debug(err)
            msg = "Timeout due to a lack of response from the server."
            raise AsyncCommTimeoutError(msg) from err
        except aiohttp.ClientConnectorError as err:
            logger.debug(err)
            msg = f"Cannot connect to '{url}'."
            raise AsyncCommError(msg) from err
        except aiohttp.ClientError as err:
            logger.debug(err)
            msg = f"Communication with the server failed: {err}"
            raise AsyncCommError(msg) from err


class AsyncCommError(Exception):
    """An HTTP request failed.

    Attributes:
        status (int | None): HTTP status code when the server answered with an error.
    """

    def __init__(self, msg: str | BaseException, *, status: int | None = None) -> None:
        self.msg: str = str(msg)
        self.status: int | None = status
        super().__init__(self.msg)


class AsyncCommTimeoutError(AsyncCommError):
    """An HTTP request did not complete within its timeout."""


class AsyncCommInvalidContentTypeError(AsyncCommError):
    """A response could not be decoded."""
