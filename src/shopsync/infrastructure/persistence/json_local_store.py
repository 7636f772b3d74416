"""JSON-file-backed implementation of LocalStore.

One file per collection under the data directory::

    {"next_id": 4, "records": [{"id": 1, ...}, {"id": 3, ...}]}

Every write goes to a temporary file that is fsynced and atomically
renamed over the old one before the call returns, so a crash leaves
either the old or the new collection on disk, never half of one.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from shopsync.domain.exceptions import (
    DuplicateKeyError,
    StoreUnavailableError,
    ValidationError,
)
from shopsync.domain.repository.local_store import KEY_PATHS, LocalStore, Record

logger = logging.getLogger(__name__)


class JsonLocalStore(LocalStore):

    def __init__(self, data_dir: Path) -> None:
        self._data_dir = Path(data_dir)
        self._locks: dict[str, asyncio.Lock] = {}
        self._is_open = False

    @property
    def is_open(self) -> bool:
        return self._is_open

    # --- Lifecycle ------------------------------------------------------------

    async def open(self) -> None:
        if self._is_open:
            return
        try:
            await asyncio.to_thread(self._prepare_files)
        except (OSError, ValueError) as exc:
            raise StoreUnavailableError(
                f"Cannot open local store at {self._data_dir}: {exc}"
            ) from exc
        self._locks = {name: asyncio.Lock() for name in KEY_PATHS}
        self._is_open = True
        logger.debug("Local store opened at %s", self._data_dir)

    async def close(self) -> None:
        self._is_open = False
        self._locks = {}

    # --- LocalStore interface -------------------------------------------------

    async def get_all(self, collection: str) -> list[Record]:
        self._check(collection)
        data = await asyncio.to_thread(self._load_raw, collection)
        return self._sorted(collection, data["records"])

    async def get(self, collection: str, key: Any) -> Record | None:
        key_path = self._check(collection)
        data = await asyncio.to_thread(self._load_raw, collection)
        for record in data["records"]:
            if record.get(key_path) == key:
                return record
        return None

    async def add(self, collection: str, record: Record) -> Any:
        self._check(collection)
        async with self._locks[collection]:
            data = await asyncio.to_thread(self._load_raw, collection)
            key = self._insert(collection, data, record)
            await asyncio.to_thread(self._persist_raw, collection, data)
        return key

    async def replace_all(self, collection: str, records: list[Record]) -> list[Any]:
        self._check(collection)
        async with self._locks[collection]:
            current = await asyncio.to_thread(self._load_raw, collection)
            data = {"next_id": current["next_id"], "records": []}
            keys = [self._insert(collection, data, record) for record in records]
            await asyncio.to_thread(self._persist_raw, collection, data)
        return keys

    async def put(self, collection: str, record: Record) -> Any:
        key_path = self._check(collection)
        async with self._locks[collection]:
            data = await asyncio.to_thread(self._load_raw, collection)
            record = dict(record)
            key = record.get(key_path)
            if key is None:
                key = self._assign_id(collection, data, record)
                data["records"].append(record)
            else:
                self._bump_next_id(data, key)
                # Upsert: replace if exists, otherwise append
                for i, raw in enumerate(data["records"]):
                    if raw.get(key_path) == key:
                        data["records"][i] = record
                        break
                else:
                    data["records"].append(record)
            await asyncio.to_thread(self._persist_raw, collection, data)
        return key

    async def delete(self, collection: str, key: Any) -> None:
        key_path = self._check(collection)
        async with self._locks[collection]:
            data = await asyncio.to_thread(self._load_raw, collection)
            remaining = [r for r in data["records"] if r.get(key_path) != key]
            if len(remaining) == len(data["records"]):
                return
            data["records"] = remaining
            await asyncio.to_thread(self._persist_raw, collection, data)

    async def clear(self, collection: str) -> None:
        self._check(collection)
        async with self._locks[collection]:
            data = await asyncio.to_thread(self._load_raw, collection)
            data["records"] = []
            await asyncio.to_thread(self._persist_raw, collection, data)

    # --- Key helpers ----------------------------------------------------------

    def _check(self, collection: str) -> str:
        if not self._is_open:
            raise StoreUnavailableError("Local store is not open")
        try:
            return KEY_PATHS[collection]
        except KeyError:
            raise ValidationError(f"Unknown collection '{collection}'") from None

    @classmethod
    def _insert(cls, collection: str, data: dict, record: Record) -> Any:
        key_path = KEY_PATHS[collection]
        record = dict(record)
        key = record.get(key_path)
        if key is None:
            key = cls._assign_id(collection, data, record)
        elif any(r.get(key_path) == key for r in data["records"]):
            raise DuplicateKeyError(f"Key {key!r} already exists in '{collection}'")
        else:
            cls._bump_next_id(data, key)
        data["records"].append(record)
        return key

    @staticmethod
    def _assign_id(collection: str, data: dict, record: Record) -> int:
        if KEY_PATHS[collection] != "id":
            raise ValidationError(
                f"Records in '{collection}' need an explicit '{KEY_PATHS[collection]}'"
            )
        key = data["next_id"]
        data["next_id"] = key + 1
        record["id"] = key
        return key

    @staticmethod
    def _bump_next_id(data: dict, key: Any) -> None:
        # Explicit integer ids must never be handed out again by _assign_id.
        if isinstance(key, int) and not isinstance(key, bool) and key >= data["next_id"]:
            data["next_id"] = key + 1

    @staticmethod
    def _sorted(collection: str, records: list[Record]) -> list[Record]:
        key_path = KEY_PATHS[collection]
        return sorted(records, key=lambda r: r[key_path])

    # --- File helpers ---------------------------------------------------------

    def _path(self, collection: str) -> Path:
        return self._data_dir / f"{collection}.json"

    def _load_raw(self, collection: str) -> dict:
        data = json.loads(self._path(collection).read_text(encoding="utf-8"))
        data.setdefault("next_id", 1)
        return data

    def _persist_raw(self, collection: str, data: dict) -> None:
        path = self._path(collection)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{collection}.", suffix=".tmp", dir=self._data_dir
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(json.dumps(data, indent=2) + "\n")
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def _prepare_files(self) -> None:
        self._data_dir.mkdir(parents=True, exist_ok=True)
        for collection in KEY_PATHS:
            path = self._path(collection)
            if not path.exists():
                self._persist_raw(collection, {"next_id": 1, "records": []})
                continue
            data = json.loads(path.read_text(encoding="utf-8"))
            if not isinstance(data, dict) or not isinstance(data.get("records"), list):
                raise ValueError(f"{path.name} is not a valid collection file")
