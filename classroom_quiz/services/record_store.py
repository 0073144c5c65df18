"""
services/record_store.py

JSON-file record store. One file per collection under the data directory.

Public API:
  - read(name) -> dict                  : snapshot of a collection document
  - update(name, mutate) -> result      : atomic read-modify-write of one collection

Each collection has its own lock; update() holds it for the whole
read -> mutate -> write cycle, so writers of one collection are serialized.
Files are replaced atomically (temp file + os.replace).

A missing file means "not initialized yet" and reads as an empty document.
A file that exists but cannot be parsed raises StoreError; it is never
treated as empty.
"""

import copy
import json
import logging
import os
import tempfile
import threading
from typing import Any, Callable, Dict, TypeVar

from classroom_quiz.errors import StoreError

logger = logging.getLogger(__name__)

T = TypeVar("T")

TEACHERS = "teachers"
QUESTIONS = "questions"
USERS = "users"
SESSIONS = "sessions"
SUBMISSIONS = "submissions"


class JsonRecordStore:
    """Collections stored as <data_dir>/<name>.json documents."""

    def __init__(self, data_dir: str):
        self.data_dir = data_dir
        self._locks: Dict[str, threading.RLock] = {}
        self._locks_guard = threading.Lock()

    def path_for(self, name: str) -> str:
        return os.path.join(self.data_dir, f"{name}.json")

    def _lock_for(self, name: str) -> threading.RLock:
        with self._locks_guard:
            lock = self._locks.get(name)
            if lock is None:
                lock = self._locks[name] = threading.RLock()
            return lock

    # ── read / write ────────────────────────────────────────────────────────

    def _load(self, name: str) -> Dict[str, Any]:
        path = self.path_for(name)
        try:
            with open(path, "r", encoding="utf-8") as f:
                raw = f.read()
        except FileNotFoundError:
            logger.debug(f"Collection '{name}' not initialized yet ({path})")
            return {}
        except OSError as e:
            logger.warning(f"Collection '{name}' unreadable: {e}")
            raise StoreError(f"Could not read collection '{name}'.") from e

        if not raw.strip():
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Collection '{name}' is not valid JSON: {e}")
            raise StoreError(f"Collection '{name}' is corrupt.") from e
        if not isinstance(data, dict):
            logger.warning(f"Collection '{name}' holds {type(data).__name__}, expected an object")
            raise StoreError(f"Collection '{name}' is corrupt.")
        return data

    def _write(self, name: str, data: Dict[str, Any]) -> None:
        os.makedirs(self.data_dir, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix=f".{name}.", suffix=".tmp", dir=self.data_dir)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self.path_for(name))
        except OSError as e:
            logger.error(f"Collection '{name}' write failed: {e}")
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise StoreError(f"Could not write collection '{name}'.") from e

    def read(self, name: str) -> Dict[str, Any]:
        """Snapshot of a collection. Mutating it does not touch the store."""
        with self._lock_for(name):
            return self._load(name)

    def update(self, name: str, mutate: Callable[[Dict[str, Any]], T]) -> T:
        """
        Atomic read-modify-write of one collection.

        Args:
            name:   Collection name.
            mutate: Called with the current document; changes it in place and
                    returns the caller's result. An exception leaves the file untouched.

        Returns:
            Whatever mutate returned.
        """
        with self._lock_for(name):
            data = self._load(name)
            before = copy.deepcopy(data)
            result = mutate(data)
            if data != before:
                self._write(name, data)
            return result
