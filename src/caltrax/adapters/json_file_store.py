"""Key-value store persisted as JSON files on local disk."""

import json
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import quote

from caltrax.errors import StorageUnavailableError
from caltrax.services.storage import KeyValueStore


@dataclass
class JsonFileStore(KeyValueStore):
    """Stores each key as one JSON file inside a directory.

    Writes go to a temporary file that replaces the target atomically, so a
    crash mid-write never leaves a truncated value behind.
    """

    directory: Path

    @classmethod
    def create(cls, directory: str) -> "JsonFileStore":
        """Create a store rooted at ``directory``, creating it if needed."""
        path = Path(directory)
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageUnavailableError(f"Cannot create {path}: {exc}") from exc
        return cls(directory=path)

    def get(self, key: str) -> object | None:
        """Return the decoded value, or None when absent or unreadable JSON."""
        path = self._path(key)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise StorageUnavailableError(f"Cannot read {path}: {exc}") from exc
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            return None

    def set(self, key: str, value: object) -> None:
        """Write the value atomically."""
        path = self._path(key)
        try:
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    json.dump(value, handle)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise StorageUnavailableError(f"Cannot write {path}: {exc}") from exc

    def remove(self, key: str) -> None:
        """Delete the key's file if present."""
        path = self._path(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise StorageUnavailableError(f"Cannot remove {path}: {exc}") from exc

    def _path(self, key: str) -> Path:
        # Percent-encoding keeps distinct keys in distinct files.
        return self.directory / f"{quote(key, safe='')}.json"
