"""Versioned JSON key/value storage on the local filesystem."""
from __future__ import annotations

import json
import logging
import os
import time
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

CURRENT_VERSION = 1

PROJECTS_KEY = "local-brands-projects"
LANGUAGE_KEY = "local-brands-language"
THEME_KEY = "theme"


class JsonStore:
    """Stores one JSON document per key under ``root``.

    Structured values are wrapped as ``{"version", "data", "updatedAt"}``.
    Documents written before the wrapper existed are read back as-is.
    """

    def __init__(self, root: Path) -> None:
        self._root = Path(root)

    def path_for(self, key: str) -> Path:
        return self._root / f"{Path(key).name}.json"

    def _read(self, key: str) -> Any:
        path = self.path_for(key)
        if not path.exists():
            return None
        return json.loads(path.read_text(encoding="utf-8"))

    def _write(self, key: str, value: Any) -> None:
        self._root.mkdir(parents=True, exist_ok=True)
        path = self.path_for(key)
        tmp = path.with_suffix(".tmp")
        tmp.write_text(json.dumps(value, ensure_ascii=False), encoding="utf-8")
        os.replace(tmp, path)

    def get(self, key: str, default: Any) -> Any:
        try:
            parsed = self._read(key)
        except (OSError, json.JSONDecodeError) as exc:
            logger.error("error reading stored key %r: %s", key, exc)
            return default
        if parsed is None:
            return default
        if isinstance(parsed, dict) and "version" in parsed:
            return parsed.get("data", default)
        if not isinstance(parsed, (dict, list)):
            return default
        return parsed

    def set(self, key: str, data: Any) -> bool:
        wrapped = {
            "version": CURRENT_VERSION,
            "data": data,
            "updatedAt": int(time.time() * 1000),
        }
        try:
            self._write(key, wrapped)
        except OSError as exc:
            logger.error("error writing stored key %r: %s", key, exc)
            return False
        return True

    def get_value(self, key: str) -> str | None:
        """Read an unwrapped scalar preference."""

        try:
            value = self._read(key)
        except (OSError, json.JSONDecodeError):
            return None
        return value if isinstance(value, str) else None

    def set_value(self, key: str, value: str) -> None:
        self._write(key, value)

    def remove(self, key: str) -> None:
        self.path_for(key).unlink(missing_ok=True)


__all__ = ["CURRENT_VERSION", "JsonStore", "LANGUAGE_KEY", "PROJECTS_KEY", "THEME_KEY"]
