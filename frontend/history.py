"""
Navigation history for the dashboard.

Mirrors the browser's history stack closely enough for route gating: push a
path, listen for location changes, and force a full reload when the session
must be torn down.
"""

from collections.abc import Callable
from urllib.parse import parse_qs, urlsplit

LocationListener = Callable[[str], None]


class History:
    def __init__(self, initial_path: str = "/"):
        self.entries: list[str] = [initial_path]
        self.reload_count = 0
        self._listeners: list[LocationListener] = []
        self._reload_listeners: list[Callable[[], None]] = []

    @property
    def location(self) -> str:
        """Current URL (path plus query string)."""
        return self.entries[-1]

    @property
    def pathname(self) -> str:
        return urlsplit(self.location).path

    @property
    def query(self) -> dict[str, str]:
        return {key: values[0] for key, values in parse_qs(urlsplit(self.location).query).items()}

    def listen(self, listener: LocationListener) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def on_reload(self, listener: Callable[[], None]) -> Callable[[], None]:
        self._reload_listeners.append(listener)
        return lambda: self._reload_listeners.remove(listener)

    def push(self, url: str) -> None:
        self.entries.append(url)
        for listener in list(self._listeners):
            listener(url)

    def assign(self, url: str, reload: bool = False) -> None:
        """Navigate to a URL; with ``reload`` every in-memory view is discarded."""
        self.push(url)
        if reload:
            self.reload_count += 1
            for listener in list(self._reload_listeners):
                listener()
