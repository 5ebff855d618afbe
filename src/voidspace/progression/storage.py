"""Namespaced key-value persistence for progression blobs.

Every backend stores one opaque string per namespace and replaces it whole on
write. Backend failures surface as StorageError; callers never see a
redis or SQLAlchemy exception directly. Stored bytes that are not valid
UTF-8 surface as HydrationError, the same as any other corrupted blob.
"""

from __future__ import annotations

import os
import tempfile
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from urllib.parse import quote

import redis
import structlog
from sqlalchemy import delete, select, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from voidspace.config import Settings
from voidspace.database import get_session_factory, init_db
from voidspace.db.models import ProgressBlob
from voidspace.exceptions import HydrationError, StorageError

logger = structlog.get_logger()


def achievements_namespace(prefix: str, account_id: str) -> str:
    return f"{prefix}:{account_id}:achievements"


def track_namespace(prefix: str, account_id: str, track: str) -> str:
    return f"{prefix}:{account_id}:modules:{track}"


class KeyValueStore(ABC):
    """Durable string storage keyed by namespace."""

    @abstractmethod
    def get(self, namespace: str) -> str | None:
        """Return the stored blob, or None when the namespace is empty."""

    @abstractmethod
    def set(self, namespace: str, blob: str) -> None:
        """Replace the blob stored under ``namespace``."""

    @abstractmethod
    def delete(self, namespace: str) -> None:
        """Remove a namespace. Deleting a missing namespace is not an error."""

    def ping(self) -> bool:
        return True

    def close(self) -> None:  # noqa: B027
        pass


class MemoryStore(KeyValueStore):
    """Process-local store, used by tests and the ``memory`` backend."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def get(self, namespace: str) -> str | None:
        return self._data.get(namespace)

    def set(self, namespace: str, blob: str) -> None:
        self._data[namespace] = blob

    def delete(self, namespace: str) -> None:
        self._data.pop(namespace, None)

    def __len__(self) -> int:
        return len(self._data)


class JsonFileStore(KeyValueStore):
    """One file per namespace under ``root``.

    Writes go to a temporary file in the same directory and are moved into
    place with ``os.replace``, so a reader sees either the old blob or the new
    one, never a partial write.
    """

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def _path(self, namespace: str) -> Path:
        return self.root / f"{quote(namespace, safe='')}.json"

    def get(self, namespace: str) -> str | None:
        path = self._path(namespace)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except UnicodeDecodeError as exc:
            raise HydrationError(f"{namespace}: blob is not valid UTF-8 ({exc.reason})") from exc
        except OSError as exc:
            raise StorageError(namespace, f"read failed: {exc}") from exc

    def set(self, namespace: str, blob: str) -> None:
        path = self._path(namespace)
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self.root, prefix=".tmp-", suffix=".json")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    fh.write(blob)
                os.replace(tmp, path)
            except BaseException:
                Path(tmp).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise StorageError(namespace, f"write failed: {exc}") from exc

    def delete(self, namespace: str) -> None:
        try:
            self._path(namespace).unlink(missing_ok=True)
        except OSError as exc:
            raise StorageError(namespace, f"delete failed: {exc}") from exc

    def ping(self) -> bool:
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError:
            return False
        return os.access(self.root, os.W_OK)


class RedisStore(KeyValueStore):
    """Redis strings, one key per namespace."""

    def __init__(self, client: redis.Redis) -> None:
        self.client = client

    @classmethod
    def from_url(cls, url: str) -> RedisStore:
        """Connect with a pooled client. Responses stay as bytes and are decoded per read."""
        return cls(redis.Redis.from_url(url, max_connections=50))

    def get(self, namespace: str) -> str | None:
        try:
            value = self.client.get(namespace)
        except redis.RedisError as exc:
            raise StorageError(namespace, f"redis get failed: {exc}") from exc
        if isinstance(value, bytes):
            try:
                return value.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise HydrationError(f"{namespace}: blob is not valid UTF-8 ({exc.reason})") from exc
        return value

    def set(self, namespace: str, blob: str) -> None:
        try:
            self.client.set(namespace, blob)
        except redis.RedisError as exc:
            raise StorageError(namespace, f"redis set failed: {exc}") from exc

    def delete(self, namespace: str) -> None:
        try:
            self.client.delete(namespace)
        except redis.RedisError as exc:
            raise StorageError(namespace, f"redis delete failed: {exc}") from exc

    def ping(self) -> bool:
        try:
            return bool(self.client.ping())
        except redis.RedisError:
            logger.warning("redis_ping_failed", exc_info=True)
            return False

    def close(self) -> None:
        self.client.close()


class DatabaseStore(KeyValueStore):
    """SQL table with one row per namespace."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self.session_factory = session_factory

    def get(self, namespace: str) -> str | None:
        try:
            with self.session_factory() as session:
                row = session.execute(
                    select(ProgressBlob.payload).where(ProgressBlob.namespace == namespace)
                ).scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise StorageError(namespace, f"database read failed: {exc}") from exc
        return row

    def set(self, namespace: str, blob: str) -> None:
        now = datetime.now(timezone.utc)
        try:
            with self.session_factory() as session:
                row = session.get(ProgressBlob, namespace)
                if row is None:
                    session.add(ProgressBlob(namespace=namespace, payload=blob, updated_at=now))
                else:
                    row.payload = blob
                    row.updated_at = now
                session.commit()
        except SQLAlchemyError as exc:
            raise StorageError(namespace, f"database write failed: {exc}") from exc

    def delete(self, namespace: str) -> None:
        try:
            with self.session_factory() as session:
                session.execute(delete(ProgressBlob).where(ProgressBlob.namespace == namespace))
                session.commit()
        except SQLAlchemyError as exc:
            raise StorageError(namespace, f"database delete failed: {exc}") from exc

    def ping(self) -> bool:
        try:
            with self.session_factory() as session:
                session.execute(text("SELECT 1")).scalar()
        except SQLAlchemyError:
            logger.warning("database_ping_failed", exc_info=True)
            return False
        return True


def build_store(settings: Settings) -> KeyValueStore:
    """Create the backend selected by ``settings.storage_backend``."""
    backend = settings.storage_backend
    if backend == "memory":
        store: KeyValueStore = MemoryStore()
    elif backend == "file":
        store = JsonFileStore(settings.storage_dir)
    elif backend == "redis":
        store = RedisStore.from_url(settings.redis_url)
    elif backend == "database":
        init_db(settings.database_url)
        store = DatabaseStore(get_session_factory())
    else:
        msg = f"Unknown storage backend: {backend!r}"
        raise ValueError(msg)

    logger.info("storage_backend_ready", backend=backend)
    return store
