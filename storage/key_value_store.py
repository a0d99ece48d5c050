"""
Key-value stores for destination records
"""

import json
import os
import threading
import logging
from typing import Dict, Optional

from navigation.core.interfaces import KeyValueStore

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when the backing file exists but cannot be read"""
    pass


class InMemoryKeyValueStore(KeyValueStore):
    """Process-local store, used for tests and ephemeral sessions"""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})
        self._lock = threading.Lock()

    def get_string(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def set_string(self, key: str, value: Optional[str]):
        with self._lock:
            if not value:
                self._data.pop(key, None)
            else:
                self._data[key] = value

    def remove(self, key: str):
        with self._lock:
            self._data.pop(key, None)

    def to_dict(self) -> Dict[str, str]:
        with self._lock:
            return dict(self._data)


class JsonFileKeyValueStore(KeyValueStore):
    """Store persisted as a single JSON object, rewritten atomically on change"""

    def __init__(self, path: str):
        self.path = path
        self._lock = threading.Lock()
        self._data: Dict[str, str] = self._load()

    def _load(self) -> Dict[str, str]:
        if not os.path.exists(self.path):
            logger.info(f"Destination store not found, starting empty: {self.path}")
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise StorageError(f"Cannot read destination store {self.path}: {e}") from e

        if not isinstance(data, dict):
            raise StorageError(f"Destination store {self.path} does not contain a JSON object")

        logger.info(f"Loaded {len(data)} stored value(s) from {self.path}")
        return {str(k): str(v) for k, v in data.items()}

    def _save(self, data: Dict[str, str]):
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        tmp_path = f"{self.path}.tmp"
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        os.replace(tmp_path, self.path)

    def get_string(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def set_string(self, key: str, value: Optional[str]):
        with self._lock:
            updated = dict(self._data)
            if not value:
                if updated.pop(key, None) is None:
                    return
            else:
                if updated.get(key) == value:
                    return
                updated[key] = value
            # memory only changes once the file is written
            self._save(updated)
            self._data = updated

    def remove(self, key: str):
        self.set_string(key, None)
