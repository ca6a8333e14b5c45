"""
A small file-backed key-value store holding one JSON document per key.
"""

import hashlib
import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Optional

from otakutrack.exceptions import StorageError

log = logging.getLogger(__name__)


class JSONFileStorage:
    """
    Persists string values under string keys, one file per key.

    Writes go to a temporary file in the same directory and are moved into
    place with `os.replace`, so a reader never sees a half-written value and a
    successful `set_item` has reached the disk.
    """

    def __init__(self, data_dir_path: Path):
        self.data_dir = Path(data_dir_path)
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def _get_item_path(self, key: str) -> Path:
        """Maps a key to a filename, hashing keys that are not filesystem-safe."""
        if re.fullmatch(r"[A-Za-z0-9_.-]+", key):
            return self.data_dir / f"{key}.json"
        hashed_key = hashlib.md5(key.encode("utf-8")).hexdigest()  # noqa: S324
        return self.data_dir / f"{hashed_key}.json"

    def get_item(self, key: str) -> Optional[str]:
        """Returns the stored value, or None when the key has never been written."""
        path = self._get_item_path(key)
        if not path.is_file():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Failed to read '{key}' from {path}: {e}") from e

    def set_item(self, key: str, value: str) -> None:
        """Durably writes `value` under `key`, replacing any previous value."""
        path = self._get_item_path(key)
        tmp_name = None
        try:
            fd, tmp_name = tempfile.mkstemp(
                dir=self.data_dir, prefix=f".{path.stem}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageError(f"Failed to write '{key}' to {path}: {e}") from e
        log.debug(f"Wrote {len(value)} bytes to storage key '{key}'.")

    def remove_item(self, key: str) -> bool:
        """Deletes the value stored under `key`. Returns False if there was none."""
        path = self._get_item_path(key)
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError as e:
            raise StorageError(f"Failed to remove '{key}': {e}") from e
