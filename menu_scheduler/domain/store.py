"""JSON snapshot store: one independently locked collection per entity kind."""

from __future__ import annotations

import logging
import os
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Dict, Generic, Iterable, Iterator, List, Optional, Type, TypeVar
from uuid import UUID

import pydantic
from pydantic import BaseModel, TypeAdapter
from pydantic_core import PydanticSerializationError

from .errors import (
    LockCorruptedError,
    NotFoundError,
    SerializationError,
    StorageIOError,
    StoreError,
)
from .models import AdminUser, MenuItem, MenuPreset, MenuSchedule, Notice

_logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


class JsonCollection(Generic[T]):
    """
    In-memory collection mirrored to a single JSON array file.

    Every mutation holds the collection lock through both the memory
    update and the full-file rewrite, so mutations are totally ordered.
    Readers always receive copies.
    """

    def __init__(self, name: str, model: Type[T], path: str | Path):
        self.name = name
        self.model = model
        self.path = Path(path)
        self._adapter = TypeAdapter(List[model])
        self._entities: List[T] = []
        self._lock = threading.Lock()
        self._corrupted = False

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def load(self) -> None:
        """Read the backing file, creating it with an empty array if absent."""
        with self._locked():
            if not self.path.exists():
                _logger.debug("Creating empty %s file: %s", self.name, self.path)
                self._write([])
            try:
                raw = self.path.read_bytes()
            except OSError as exc:
                raise StorageIOError(f"Cannot read {self.name} from {self.path}: {exc}") from exc
            try:
                entities = self._adapter.validate_json(raw)
            except pydantic.ValidationError as exc:
                raise SerializationError(f"Malformed {self.name} data in {self.path}: {exc}") from exc
            self._entities = entities
            _logger.debug("Loaded %d %s from %s", len(entities), self.name, self.path)

    def reload(self) -> int:
        """Discard in-memory state and re-read the file. Returns the entity count."""
        self.load()
        return len(self.list())

    def _write(self, entities: List[T]) -> None:
        try:
            payload = self._adapter.dump_json(entities, indent=2)
        except PydanticSerializationError as exc:
            raise SerializationError(f"Cannot serialize {self.name}: {exc}") from exc

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", dir=self.path.parent)
            try:
                with os.fdopen(fd, "wb") as fh:
                    fh.write(payload)
                os.replace(tmp_name, self.path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        except OSError as exc:
            raise StorageIOError(f"Cannot write {self.name} to {self.path}: {exc}") from exc

    # ------------------------------------------------------------------
    # Locking
    # ------------------------------------------------------------------

    @contextmanager
    def _locked(self) -> Iterator[None]:
        """Hold the collection lock; mark the collection corrupted on unexpected failures."""
        with self._lock:
            if self._corrupted:
                raise LockCorruptedError(f"{self.name} store is corrupted; restart required")
            try:
                yield
            except StoreError:
                raise
            except Exception as exc:
                self._corrupted = True
                _logger.error("%s store corrupted by %r", self.name, exc)
                raise LockCorruptedError(f"{self.name} store corrupted: {exc}") from exc

    @property
    def is_corrupted(self) -> bool:
        return self._corrupted

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list(self) -> List[T]:
        with self._locked():
            return [entity.model_copy(deep=True) for entity in self._entities]

    def get(self, entity_id: UUID) -> T:
        with self._locked():
            index = self._index_of(entity_id)
            return self._entities[index].model_copy(deep=True)

    def find_by(self, predicate: Callable[[T], bool]) -> List[T]:
        """Entities matching ``predicate``, evaluated over a snapshot copy."""
        return [entity for entity in self.list() if predicate(entity)]

    def find_one(self, predicate: Callable[[T], bool]) -> Optional[T]:
        for entity in self.list():
            if predicate(entity):
                return entity
        return None

    def __len__(self) -> int:
        with self._locked():
            return len(self._entities)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def insert(self, entity: T) -> T:
        with self._locked():
            self._entities.append(entity.model_copy(deep=True))
            _logger.debug("Inserted %s %s", self.name, entity.id)
            self._write(self._entities)
        return entity

    def insert_many(self, entities: Iterable[T]) -> int:
        """Append a batch with a single rewrite. Returns the number inserted."""
        batch = [entity.model_copy(deep=True) for entity in entities]
        if not batch:
            return 0
        with self._locked():
            self._entities.extend(batch)
            _logger.debug("Inserted %d %s", len(batch), self.name)
            self._write(self._entities)
        return len(batch)

    def update(self, entity_id: UUID, entity: T) -> T:
        with self._locked():
            index = self._index_of(entity_id)
            self._entities[index] = entity.model_copy(deep=True)
            _logger.debug("Updated %s %s in memory", self.name, entity_id)
            self._write(self._entities)
        return entity

    def delete(self, entity_id: UUID) -> None:
        with self._locked():
            index = self._index_of(entity_id)
            del self._entities[index]
            _logger.debug("Deleted %s %s from memory", self.name, entity_id)
            self._write(self._entities)

    def replace_many(self, entities: Iterable[T]) -> int:
        """Replace every entity whose id is present; unknown ids are skipped.

        One memory update and one rewrite for the whole batch. Returns the
        number of entities replaced.
        """
        replacements: Dict[UUID, T] = {entity.id: entity for entity in entities}
        with self._locked():
            replaced = 0
            for index, current in enumerate(self._entities):
                if current.id in replacements:
                    self._entities[index] = replacements[current.id].model_copy(deep=True)
                    replaced += 1
            if replaced:
                self._write(self._entities)
            _logger.debug("Replaced %d/%d %s", replaced, len(replacements), self.name)
        return replaced

    def _index_of(self, entity_id: UUID) -> int:
        for index, entity in enumerate(self._entities):
            if entity.id == entity_id:
                return index
        raise NotFoundError(f"{self.model.__name__} with id {entity_id} not found")


DEFAULT_FILENAMES = {
    "menu_items": "menu_items.json",
    "notices": "notices.json",
    "admin_users": "admin_users.json",
    "menu_presets": "menu_presets.json",
    "menu_schedules": "menu_schedules.json",
}


class EntityStore:
    """The five collections of the menu system, loaded from one data directory."""

    def __init__(self, data_dir: str | Path = "data", filenames: Optional[Dict[str, str]] = None):
        """
        Initialize and load every collection.

        Args:
            data_dir: Directory holding the snapshot files (created if missing)
            filenames: Optional override of the per-collection file names

        Raises:
            StorageError: If an existing snapshot file cannot be read or parsed
        """
        self.data_dir = Path(data_dir)
        names = dict(DEFAULT_FILENAMES)
        names.update(filenames or {})

        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageIOError(f"Cannot create data directory {self.data_dir}: {exc}") from exc

        self.menu_items: JsonCollection[MenuItem] = JsonCollection(
            "menu_items", MenuItem, self.data_dir / names["menu_items"]
        )
        self.notices: JsonCollection[Notice] = JsonCollection(
            "notices", Notice, self.data_dir / names["notices"]
        )
        self.admin_users: JsonCollection[AdminUser] = JsonCollection(
            "admin_users", AdminUser, self.data_dir / names["admin_users"]
        )
        self.menu_presets: JsonCollection[MenuPreset] = JsonCollection(
            "menu_presets", MenuPreset, self.data_dir / names["menu_presets"]
        )
        self.menu_schedules: JsonCollection[MenuSchedule] = JsonCollection(
            "menu_schedules", MenuSchedule, self.data_dir / names["menu_schedules"]
        )

        for collection in self.collections():
            _logger.debug("Loading %s...", collection.name)
            collection.load()
        _logger.info("Entity store loaded from %s", self.data_dir)

    def collections(self) -> List[JsonCollection]:
        return [self.menu_items, self.notices, self.admin_users, self.menu_presets, self.menu_schedules]

    def collection(self, name: str) -> JsonCollection:
        for collection in self.collections():
            if collection.name == name:
                return collection
        raise KeyError(f"Unknown collection: {name}")

    def reload(self, name: Optional[str] = None) -> Dict[str, int]:
        """Re-read one collection (or all) from disk. Returns counts by collection name."""
        targets = [self.collection(name)] if name else self.collections()
        return {collection.name: collection.reload() for collection in targets}
