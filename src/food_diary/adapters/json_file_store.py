"""JSON-file key-value store in the local data directory."""

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path

_logger = logging.getLogger(__name__)


@dataclass
class JsonFileKeyValueStore:
    """Stores each key as a JSON document named after the key."""

    directory: Path

    def get(self, key: str) -> object | None:
        """Return the decoded value for a key, or None when missing or unreadable."""
        path = self._path(key)
        if not path.exists():
            return None
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except ValueError:
            _logger.warning("Ignoring unreadable record: key=%s path=%s", key, path)
            return None

    def set(self, key: str, value: object) -> None:
        """Atomically write the JSON value for a key."""
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp_path = path.with_suffix(".json.tmp")
        tmp_path.write_text(
            json.dumps(value, ensure_ascii=False, indent=2), encoding="utf-8"
        )
        os.replace(tmp_path, path)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"
