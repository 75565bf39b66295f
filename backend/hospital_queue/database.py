"""
Snapshot storage for the queue engine.
Provides JSON file, MongoDB (Motor) and in-memory stores.
"""

import asyncio
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Protocol

from motor.motor_asyncio import AsyncIOMotorClient
from pydantic import ValidationError as PydanticValidationError

from .config import Settings
from .exceptions import PersistenceError
from .models.queue import QueueSnapshot

logger = logging.getLogger(__name__)


class SnapshotStore(Protocol):
    """Storage collaborator contract."""

    async def load(self) -> Optional[QueueSnapshot]:
        ...

    async def save(self, snapshot: QueueSnapshot) -> None:
        ...

    async def close(self) -> None:
        ...


class MemorySnapshotStore:
    """Keeps the last saved snapshot in process."""

    def __init__(self, snapshot: Optional[QueueSnapshot] = None):
        self._snapshot = snapshot.model_copy(deep=True) if snapshot else None
        self.save_count = 0

    async def load(self) -> Optional[QueueSnapshot]:
        if self._snapshot is None:
            return None
        return self._snapshot.model_copy(deep=True)

    async def save(self, snapshot: QueueSnapshot) -> None:
        self._snapshot = snapshot.model_copy(deep=True)
        self.save_count += 1

    async def close(self) -> None:
        pass


class JsonFileSnapshotStore:
    """
    Stores the snapshot as a JSON document on disk.

    Timestamps are written as ISO-8601 with microseconds. The file is
    replaced atomically so a crash mid-write leaves the previous snapshot.
    """

    def __init__(self, path):
        self.path = Path(path)

    async def load(self) -> Optional[QueueSnapshot]:
        return await asyncio.to_thread(self._read)

    async def save(self, snapshot: QueueSnapshot) -> None:
        data = snapshot.model_dump_json(indent=2)
        await asyncio.to_thread(self._write, data)

    async def close(self) -> None:
        pass

    def _read(self) -> Optional[QueueSnapshot]:
        if not self.path.exists():
            return None
        try:
            return QueueSnapshot.model_validate_json(self.path.read_bytes())
        except (OSError, ValueError) as e:
            raise PersistenceError(f"Could not read snapshot {self.path}: {e}") from e

    def _write(self, data: str) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(data)
                os.replace(tmp_path, self.path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except OSError as e:
            raise PersistenceError(f"Could not write snapshot {self.path}: {e}") from e


class MongoSnapshotStore:
    """
    MongoDB snapshot store, one document per engine.

    Timestamps are stored as ISO-8601 strings; BSON datetimes would drop
    the microseconds.
    """

    SNAPSHOT_ID = "queue_snapshot"

    def __init__(
        self,
        url: str,
        database: str,
        collection: str = "snapshots",
        client: Optional[AsyncIOMotorClient] = None
    ):
        self.url = url
        self.database_name = database
        self.collection_name = collection
        self.client: Optional[AsyncIOMotorClient] = client

    async def connect(self):
        """Connect to MongoDB."""
        try:
            self.client = AsyncIOMotorClient(self.url)
            # Verify connection
            await self.client.admin.command("ping")
        except Exception as e:
            raise PersistenceError(f"Could not connect to MongoDB: {e}") from e
        logger.info(f"Connected to MongoDB: {self.database_name}")

    def _collection(self):
        if self.client is None:
            raise PersistenceError("Database not connected")
        return self.client[self.database_name][self.collection_name]

    async def load(self) -> Optional[QueueSnapshot]:
        if self.client is None:
            await self.connect()
        try:
            doc = await self._collection().find_one({"_id": self.SNAPSHOT_ID})
        except PersistenceError:
            raise
        except Exception as e:
            raise PersistenceError(f"Could not load snapshot: {e}") from e

        if not doc:
            return None
        doc.pop("_id", None)
        try:
            return QueueSnapshot.model_validate(doc)
        except PydanticValidationError as e:
            raise PersistenceError(f"Stored snapshot is malformed: {e}") from e

    async def save(self, snapshot: QueueSnapshot) -> None:
        doc = snapshot.model_dump(mode="json")
        try:
            await self._collection().replace_one(
                {"_id": self.SNAPSHOT_ID},
                {"_id": self.SNAPSHOT_ID, **doc},
                upsert=True
            )
        except PersistenceError:
            raise
        except Exception as e:
            raise PersistenceError(f"Could not save snapshot: {e}") from e

    async def close(self) -> None:
        """Disconnect from MongoDB."""
        if self.client:
            self.client.close()
            self.client = None
            logger.info("Disconnected from MongoDB")


def create_store(settings: Settings) -> SnapshotStore:
    """Build the snapshot store selected by STORAGE_BACKEND."""
    backend = settings.STORAGE_BACKEND.lower()
    if backend == "json":
        return JsonFileSnapshotStore(settings.SNAPSHOT_PATH)
    if backend == "mongo":
        return MongoSnapshotStore(
            settings.MONGODB_URL,
            settings.DATABASE_NAME,
            settings.SNAPSHOT_COLLECTION
        )
    if backend == "memory":
        return MemorySnapshotStore()
    raise ValueError(f"Unknown STORAGE_BACKEND: {settings.STORAGE_BACKEND}")
