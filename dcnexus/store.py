"""Flat-file persistence for registered users."""
from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Iterable, List, Optional, Protocol

from .models import UserRecord

logger = logging.getLogger("dcnexus.store")


class StorageUnavailable(RuntimeError):
    """Raised when the users file cannot be read, created or written."""


class RecordStore(Protocol):
    """Read-all / write-all access to the user collection."""

    def load(self) -> List[UserRecord]:
        ...

    def save(self, records: Iterable[UserRecord]) -> None:
        ...


def resolve_store_path(env_value: Optional[str]) -> Path:
    """Resolve the on-disk path for the users file."""

    if env_value:
        return Path(env_value).expanduser().resolve(strict=False)
    base_dir = Path(__file__).resolve().parent.parent / "database"
    return (base_dir / "users.json").resolve(strict=False)


class JSONRecordStore:
    """Keeps the whole user collection in a single JSON document.

    There is no locking between concurrent writers: two overlapping
    load/save cycles will lose the first writer's changes.
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def initialize(self) -> None:
        """Create the users file as an empty list if it does not exist yet."""

        if self._path.exists():
            return
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text("[]", encoding="utf-8")
        except OSError as exc:
            raise StorageUnavailable(f"Unable to create users file at {self._path}") from exc
        logger.info("Created empty users file at %s", self._path)

    def load(self) -> List[UserRecord]:
        self.initialize()
        try:
            with self._path.open("r", encoding="utf-8") as handle:
                raw = json.load(handle)
        except OSError as exc:
            raise StorageUnavailable(f"Unable to read users file at {self._path}") from exc
        except ValueError as exc:
            raise StorageUnavailable(f"Users file at {self._path} is not valid JSON") from exc

        if not isinstance(raw, list):
            raise StorageUnavailable(f"Users file at {self._path} must contain a JSON array")

        try:
            return [UserRecord.from_dict(item) for item in raw]
        except (TypeError, ValueError, AttributeError) as exc:
            raise StorageUnavailable(f"Users file at {self._path} contains a malformed record") from exc

    def save(self, records: Iterable[UserRecord]) -> None:
        payload = [record.to_dict() for record in records]
        temp_path: Optional[Path] = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                dir=self._path.parent,
                prefix=f".{self._path.name}.",
                suffix=".tmp",
                delete=False,
                encoding="utf-8",
            ) as handle:
                temp_path = Path(handle.name)
                # Default escaping keeps lone surrogates representable in UTF-8.
                json.dump(payload, handle, indent=2)
            os.replace(temp_path, self._path)
        except OSError as exc:
            self._discard(temp_path)
            raise StorageUnavailable(f"Unable to write users file at {self._path}") from exc
        except BaseException:
            self._discard(temp_path)
            raise

    @staticmethod
    def _discard(temp_path: Optional[Path]) -> None:
        if temp_path is not None and temp_path.exists():
            temp_path.unlink()


class MemoryRecordStore:
    """In-process store used by tests and embedding callers."""

    def __init__(self, records: Iterable[UserRecord] = ()) -> None:
        self._records: List[UserRecord] = list(records)
        self._lock = threading.Lock()

    def load(self) -> List[UserRecord]:
        with self._lock:
            return list(self._records)

    def save(self, records: Iterable[UserRecord]) -> None:
        with self._lock:
            self._records = list(records)


__all__ = [
    "JSONRecordStore",
    "MemoryRecordStore",
    "RecordStore",
    "StorageUnavailable",
    "resolve_store_path",
]
