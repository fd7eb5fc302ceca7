from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Optional

from scrambletower.core.config import data_dir

logger = logging.getLogger(__name__)


class KeyValueStore:
    """Durable JSON blobs, one file per logical key (``settings``, ``stats``).

    Files live in ~/.scrambletower/ unless a directory is passed in. Read
    failures are treated as "no data"; write failures are logged and reported
    through the return value so a round in progress is never interrupted.
    """

    def __init__(self, directory: Optional[Path] = None) -> None:
        self._dir = Path(directory) if directory is not None else data_dir()

    @property
    def directory(self) -> Path:
        return self._dir

    def path_for(self, key: str) -> Path:
        return self._dir / f"{key}.json"

    def exists(self, key: str) -> bool:
        return self.path_for(key).exists()

    def load(self, key: str) -> Optional[Any]:
        """Return the decoded value for ``key``, or None if absent or unreadable."""
        path = self.path_for(key)
        if not path.exists():
            return None
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Could not load %s from %s: %s", key, path, e)
            return None

    def save(self, key: str, value: Any) -> bool:
        path = self.path_for(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(value, indent=2), encoding="utf-8")
        except OSError as e:
            logger.error("Could not save %s to %s: %s", key, path, e)
            return False
        return True
