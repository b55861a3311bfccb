"""Cache key derivation.

A key is ``{prefix}|{hash}|{target_language}``: the first 50 characters of the trimmed text
keep the key readable in the cache file, the 32-bit rolling hash over the whole text tells
apart strings that share a prefix.

The hash is the classic ``h * 31 + c`` string hash over UTF-16 code units, kept signed and
printed the way ``Number.prototype.toString(16)`` prints it, so that keys match cache files
written by the original game plugin. Two different texts with the same prefix and the same
32-bit hash collide and share one cache entry.
"""

from __future__ import annotations

from typing import Final

__all__: list[str] = ["KEY_SEPARATOR", "KeyDeriver"]

KEY_SEPARATOR: Final[str] = "|"
KEY_PREFIX_LENGTH: Final[int] = 50

_UINT32_MASK: Final[int] = 0xFFFFFFFF
_INT32_SIGN_BIT: Final[int] = 0x80000000


class KeyDeriver:
    """Deterministic cache key computation."""

    @staticmethod
    def derive_key(text: str, target_language: str) -> str:
        """Derive the cache key for ``text`` translated into ``target_language``.

        Args:
            text (str): Source text, untrimmed.
            target_language (str): Target language code.

        Returns:
            str: The cache key.
        """
        prefix: str = text.strip()[:KEY_PREFIX_LENGTH]
        return KEY_SEPARATOR.join((prefix, KeyDeriver.hash_hex(text), target_language))

    @staticmethod
    def rolling_hash(text: str) -> int:
        """Return the signed 32-bit ``h * 31 + c`` hash of ``text``."""
        value: int = 0
        encoded: bytes = text.encode("utf-16-le", errors="surrogatepass")
        for i in range(0, len(encoded), 2):
            code_unit: int = encoded[i] | (encoded[i + 1] << 8)
            value = (value * 31 + code_unit) & _UINT32_MASK
        if value & _INT32_SIGN_BIT:
            value -= 1 << 32
        return value

    @staticmethod
    def hash_hex(text: str) -> str:
        """Return the rolling hash as signed hexadecimal (e.g. '5e918d2' or '-1a2b')."""
        value: int = KeyDeriver.rolling_hash(text)
        if value < 0:
            return f"-{-value:x}"
        return f"{value:x}"

    @staticmethod
    def prefix_of(cache_key: str) -> str:
        """Return the readable text prefix of ``cache_key``.

        The prefix itself may contain the separator, so the last two segments are split off.
        """
        parts: list[str] = cache_key.rsplit(KEY_SEPARATOR, 2)
        return parts[0] if len(parts) == 3 else cache_key
