from __future__ import annotations

from typing import Final

__all__: list[str] = ["StringUtils"]

LOG_TEXT_LENGTH_LIMIT: Final[int] = 40


class StringUtils:
    """Small string helpers shared by the translator modules."""

    @staticmethod
    def ensure_str(value: object) -> str:
        """Return ``value`` as a string, mapping None to an empty string.

        Note: Does not strip; leading and trailing whitespace of game text is significant.

        Args:
            value (object): The value to convert.

        Returns:
            str: The value as a string.
        """
        if isinstance(value, str):
            return value
        return str(value) if value is not None else ""

    @staticmethod
    def shorten(value: str | None, limit: int = LOG_TEXT_LENGTH_LIMIT) -> str:
        """Truncate text for log output.

        Args:
            value (str | None): Text to truncate.
            limit (int): Maximum number of characters kept.

        Returns:
            str: The first ``limit`` characters, with an ellipsis when truncated.
        """
        value = StringUtils.ensure_str(value)
        if len(value) <= limit:
            return value
        return value[:limit] + "..."
