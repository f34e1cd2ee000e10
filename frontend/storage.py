"""
Durable key/value storage for the dashboard session.

Values are strings, persisted as one JSON object on disk so they survive
process restarts. Reads are served from memory after the first load.
"""

import json
import os
import tempfile
from pathlib import Path

from core.logging import client_logger as logger


def storage_key(namespace: str, suffix: str) -> str:
    """Namespace a storage key, e.g. ("@dashgate", "auth-token") -> "@dashgate/auth-token"."""
    return f"{namespace}/{suffix}"


class LocalStorage:
    """
    String key/value store backed by a JSON file.

    Not locked: the session client only touches it from its own event loop.
    """

    def __init__(self, path: str | os.PathLike):
        self.path = Path(path)
        self._items: dict[str, str] | None = None

    def _load(self) -> dict[str, str]:
        if self._items is None:
            try:
                data = json.loads(self.path.read_text(encoding="utf-8"))
            except FileNotFoundError:
                data = {}
            except json.JSONDecodeError:
                logger.warning("storage_corrupt", path=str(self.path))
                data = {}
            self._items = {str(k): str(v) for k, v in data.items()} if isinstance(data, dict) else {}
        return self._items

    def _flush(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".storage-")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(self._load(), fh)
            os.replace(tmp_path, self.path)
        except Exception:
            Path(tmp_path).unlink(missing_ok=True)
            raise

    def get_item(self, key: str) -> str | None:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        self._load()[key] = str(value)
        self._flush()

    def remove_item(self, key: str) -> None:
        if self._load().pop(key, None) is not None:
            self._flush()

    def clear(self) -> None:
        self._items = {}
        self._flush()

    def __contains__(self, key: str) -> bool:
        return key in self._load()
