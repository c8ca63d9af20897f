from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from .repository import KeyValueStore

logger = logging.getLogger(__name__)


class JsonFileStore(KeyValueStore):
    """Key-value store kept in one JSON object on disk.

    Every write rewrites the file through a temp file + ``os.replace`` before
    returning, so a restart right after a call observes the new value.
    """

    def __init__(self, path: str | Path):
        self._path = Path(path)
        self._data: dict[str, str] = self._read()

    @property
    def path(self) -> Path:
        return self._path

    def _read(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Store file %s unreadable, starting empty: %s", self._path, e)
            return {}
        if not isinstance(raw, dict):
            logger.warning("Store file %s is not a JSON object, starting empty", self._path)
            return {}
        return {str(k): str(v) for k, v in raw.items() if v is not None}

    def _flush(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self._path.parent, prefix=".store-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(self._data, f, ensure_ascii=False, indent=2)
            os.replace(tmp, self._path)
        except Exception:
            Path(tmp).unlink(missing_ok=True)
            raise

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value
        self._flush()

    def remove(self, key: str) -> None:
        if self._data.pop(key, None) is not None:
            self._flush()

    def clear(self) -> None:
        self._data = {}
        self._flush()
