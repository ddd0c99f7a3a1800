"""
Change notification channel for the test catalog.

The catalog fires a zero-payload signal after each mutating call; subscribers
re-read the catalog state themselves.
"""

from typing import Callable, List

from loguru import logger


class ChangeSignal:
    """
    Synchronous observer list.

    Subscribers are invoked in connection order. A subscriber that raises is
    logged and does not prevent the remaining subscribers from running.
    """

    def __init__(self, name: str = "ChangeSignal"):
        self.name = name
        self._subscribers: List[Callable[[], None]] = []

    def connect(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Connect a callback; returns a function that disconnects it again."""
        if callback not in self._subscribers:
            self._subscribers.append(callback)
        return lambda: self.disconnect(callback)

    def disconnect(self, callback: Callable[[], None]) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def clear(self) -> None:
        self._subscribers.clear()

    def emit(self) -> None:
        """Notify every subscriber once."""
        for sub in list(self._subscribers):
            try:
                sub()
            except Exception as e:
                logger.error(f"Signal '{self.name}' error in subscriber '{sub}': {e}")

    def __len__(self) -> int:
        return len(self._subscribers)
