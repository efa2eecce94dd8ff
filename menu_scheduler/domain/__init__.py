"""Domain models and data access layer."""

from .errors import (
    LockCorruptedError,
    NotFoundError,
    SerializationError,
    StorageError,
    StorageIOError,
    StoreError,
    ValidationError,
)
from .models import (
    AdminUser,
    MenuCategory,
    MenuItem,
    MenuPreset,
    MenuSchedule,
    Notice,
    ScheduleRecurrence,
    ScheduleStatus,
)
from .store import EntityStore, JsonCollection
from .repositories import (
    AdminUserRepository,
    MenuItemRepository,
    NoticeRepository,
    PresetRepository,
    ScheduleRepository,
)

__all__ = [
    "LockCorruptedError",
    "NotFoundError",
    "SerializationError",
    "StorageError",
    "StorageIOError",
    "StoreError",
    "ValidationError",
    "AdminUser",
    "MenuCategory",
    "MenuItem",
    "MenuPreset",
    "MenuSchedule",
    "Notice",
    "ScheduleRecurrence",
    "ScheduleStatus",
    "EntityStore",
    "JsonCollection",
    "AdminUserRepository",
    "MenuItemRepository",
    "NoticeRepository",
    "PresetRepository",
    "ScheduleRepository",
]
