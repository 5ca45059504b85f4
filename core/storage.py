"""Key-value persistence behind the services.

Stores never raise: a failed read returns the caller's default and a failed
write returns False.
"""

import copy
import json
import logging
import os
from pathlib import Path
from typing import Any, Protocol

logger = logging.getLogger(__name__)

USERS_KEY = "users"
CATEGORIES_KEY = "categories"
TRANSACTIONS_KEY = "transactions"
AUTH_KEY = "auth"


class KeyValueStore(Protocol):
    def read(self, key: str, default: Any = None) -> Any: ...

    def write(self, key: str, value: Any) -> bool: ...

    def remove(self, key: str) -> bool: ...


class MemoryStore:
    """Dict-backed store for tests and throwaway sessions."""

    def __init__(self, initial: dict | None = None):
        self._data: dict = copy.deepcopy(initial or {})

    def read(self, key: str, default: Any = None) -> Any:
        if key not in self._data:
            return default
        return copy.deepcopy(self._data[key])

    def write(self, key: str, value: Any) -> bool:
        self._data[key] = copy.deepcopy(value)
        return True

    def remove(self, key: str) -> bool:
        self._data.pop(key, None)
        return True


class JsonFileStore:
    """All keys live in one JSON document, rewritten atomically on each write."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _load(self) -> dict:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            logger.warning("Could not read store %s: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Store %s does not hold a JSON object, ignoring it", self.path)
            return {}
        return data

    def _dump(self, data: dict) -> bool:
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp, self.path)
            return True
        except (OSError, TypeError, ValueError) as e:
            logger.error("Could not write store %s: %s", self.path, e)
            try:
                tmp.unlink(missing_ok=True)
            except OSError:
                pass
            return False

    def read(self, key: str, default: Any = None) -> Any:
        return self._load().get(key, default)

    def write(self, key: str, value: Any) -> bool:
        data = self._load()
        data[key] = value
        return self._dump(data)

    def remove(self, key: str) -> bool:
        data = self._load()
        if key not in data:
            return True
        del data[key]
        return self._dump(data)
