"""Blacklist filter deciding which strings are never translated.

Patterns are configured as one string of regular expressions joined by ``|``. Splitting on
the bar means a single pattern cannot contain an alternation of its own; each fragment is
compiled separately. A fragment that is not a valid regular expression is used as a plain
substring instead, so a bad configuration never stops the game.
"""

from __future__ import annotations

import re
from re import Pattern
from typing import TYPE_CHECKING, Final, NamedTuple

from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

__all__: list[str] = ["BLACKLIST_SEPARATOR", "BlacklistFilter"]

logger: logging.Logger = LoggerUtils.get_logger(__name__)

BLACKLIST_SEPARATOR: Final[str] = "|"


class _Rule(NamedTuple):
    """A compiled pattern, or the raw text when compilation failed."""

    source: str
    regex: Pattern[str] | None


class BlacklistFilter:
    """Pattern-based gate evaluated before any cache or network work."""

    def __init__(self, patterns: str | list[str]) -> None:
        """Compile the blacklist.

        Args:
            patterns (str | list[str]): Either the ``|``-delimited configuration string or
                an already split list. Empty fragments are dropped.
        """
        fragments: list[str] = patterns.split(BLACKLIST_SEPARATOR) if isinstance(patterns, str) else list(patterns)
        self._rules: list[_Rule] = [self._compile(fragment) for fragment in fragments if fragment]
        logger.debug("Blacklist patterns: %s", self.patterns)

    @property
    def patterns(self) -> list[str]:
        return [rule.source for rule in self._rules]

    @staticmethod
    def _compile(fragment: str) -> _Rule:
        try:
            return _Rule(source=fragment, regex=re.compile(fragment))
        except re.error as err:
            logger.warning("Invalid blacklist pattern '%s' (%s); using literal match.", fragment, err)
            return _Rule(source=fragment, regex=None)

    def is_blocked(self, text: object) -> bool:
        """Check whether ``text`` must be left untranslated.

        Non-strings, empty and whitespace-only strings are always blocked.

        Args:
            text (object): Candidate text.

        Returns:
            bool: True if the text must not be translated.
        """
        if not isinstance(text, str) or not text.strip():
            return True

        for rule in self._rules:
            if rule.regex is not None:
                if rule.regex.search(text):
                    return True
            elif rule.source in text:
                return True
        return False
