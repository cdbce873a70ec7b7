"""
Key/value storage for the client session.

Mirrors browser localStorage: string keys map to string values, and the
session client owns only a handful of well-known keys while other data may
live in the same store.
"""

import json
import shutil
import tempfile
from pathlib import Path
from typing import Dict, List, Optional

from ..utils.exceptions import StorageError
from ..utils.logger import get_logger

logger = get_logger(__name__)


class MemoryStorage:
    """In-process storage, lost when the process exits"""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        if not isinstance(value, str):
            raise TypeError(f"Storage values must be strings, got {type(value).__name__}")
        items = dict(self._items)
        items[key] = value
        self._persist(items)
        self._items = items

    def remove_item(self, key: str) -> None:
        """Remove a key (idempotent)"""
        if key not in self._items:
            return
        items = {k: v for k, v in self._items.items() if k != key}
        self._persist(items)
        self._items = items

    def keys(self) -> List[str]:
        return list(self._items)

    def __contains__(self, key: object) -> bool:
        return key in self._items

    def _persist(self, items: Dict[str, str]) -> None:
        """Save the next state; on failure the current state is kept"""
        pass


class JsonFileStorage(MemoryStorage):
    """Storage persisted to a single JSON object file"""

    def __init__(self, path: str):
        self.path = Path(path)
        super().__init__(self._load())

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Storage file unreadable, starting empty", path=str(self.path), error=str(e))
            return {}
        if not isinstance(raw, dict):
            logger.warning("Storage file is not an object, starting empty", path=str(self.path))
            return {}
        return {k: v for k, v in raw.items() if isinstance(v, str)}

    def _persist(self, items: Dict[str, str]) -> None:
        self._atomic_write(self.path, items)

    def _atomic_write(self, path: Path, data: Dict[str, str]) -> None:
        """Write JSON file atomically"""
        temp_path: Optional[Path] = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                mode="w", dir=str(path.parent), delete=False, encoding="utf-8"
            ) as tf:
                temp_path = Path(tf.name)
                json.dump(data, tf, indent=2, ensure_ascii=False)
            shutil.move(str(temp_path), str(path))
            temp_path = None
        except OSError as e:
            raise StorageError(f"Failed to save storage to {path}: {str(e)}")
        finally:
            if temp_path is not None and temp_path.exists():
                temp_path.unlink()
