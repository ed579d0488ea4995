# =============================================================================
# lib/local_store.py - Local Durable Key-Value Store
# =============================================================================
# A small synchronous key-value store scoped to one shopper profile, used for
# data that never goes to Supabase:
# - saved curations (drafts)
# - the in-progress selection, so a restart does not lose it
#
# Each namespace (usually the user id) is one JSON file under
# settings.LOCAL_STORE_DIR. Values must be JSON-serializable.
#
# Usage:
#   store = LocalStore.for_namespace(user_id)
#   store.set("curations", [...])
#   drafts = store.get("curations", default=[])
# =============================================================================

from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Any

from app.config import settings
from app.exceptions import LocalStoreError

logger = logging.getLogger(__name__)

_SAFE_NAME = re.compile(r"[^A-Za-z0-9_.-]")


class LocalStore:
    """
    JSON-file backed key-value store for one namespace.

    Reads go to disk every time so two store objects for the same namespace
    always agree.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    @classmethod
    def for_namespace(cls, namespace: str, base_dir: str | Path | None = None) -> LocalStore:
        """Store for one namespace under LOCAL_STORE_DIR (or base_dir)."""
        directory = Path(base_dir or settings.LOCAL_STORE_DIR)
        filename = _SAFE_NAME.sub("_", str(namespace)) or "default"
        return cls(directory / f"{filename}.json")

    # -------------------------------------------------------------------------
    # File access
    # -------------------------------------------------------------------------

    def _read_all(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to read local store {self.path}: {e}")
            raise LocalStoreError(str(self.path), str(e))

        if not isinstance(data, dict):
            raise LocalStoreError(str(self.path), "store file is not a JSON object")
        return data

    def _write_all(self, data: dict[str, Any]) -> None:
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tmp_path.open("w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to write local store {self.path}: {e}")
            raise LocalStoreError(str(self.path), str(e))

    # -------------------------------------------------------------------------
    # Key-value API
    # -------------------------------------------------------------------------

    def get(self, key: str, default: Any = None) -> Any:
        return self._read_all().get(key, default)

    def set(self, key: str, value: Any) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)
        logger.debug(f"Stored key '{key}' in {self.path.name}")

    def delete(self, key: str) -> bool:
        data = self._read_all()
        if key not in data:
            return False
        del data[key]
        self._write_all(data)
        return True

    def keys(self) -> list[str]:
        return list(self._read_all().keys())
