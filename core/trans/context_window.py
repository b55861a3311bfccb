from __future__ import annotations

from collections import deque

from models.translation_models import ContextEntry

__all__: list[str] = ["ContextWindow"]


class ContextWindow:
    """Bounded history of recent translations, oldest first.

    Pushing beyond ``max_size`` drops the oldest pair. A ``max_size`` of 0 keeps nothing,
    which disables context for backend requests.
    """

    def __init__(self, max_size: int) -> None:
        self.max_size: int = max(0, max_size)
        self._entries: deque[ContextEntry] = deque(maxlen=self.max_size)

    def __len__(self) -> int:
        return len(self._entries)

    def push(self, original: str, translated: str) -> None:
        if self.max_size == 0:
            return
        self._entries.append(ContextEntry(original=original, translated=translated))

    def recent(self) -> list[ContextEntry]:
        """Return the retained pairs, most recent last."""
        return list(self._entries)

    def clear(self) -> None:
        self._entries.clear()
