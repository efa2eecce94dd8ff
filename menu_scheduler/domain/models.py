"""Pydantic models for the menu scheduling system.

Each model maps to one snapshot collection on disk:
- MenuItem -> menu_items.json
- Notice -> notices.json
- AdminUser -> admin_users.json
- MenuPreset -> menu_presets.json
- MenuSchedule -> menu_schedules.json
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, field_validator, model_validator


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class MenuCategory(str, Enum):
    MAINS = "Mains"
    SIDES = "Sides"
    DESSERTS = "Desserts"
    BEVERAGES = "Beverages"

    @classmethod
    def parse(cls, value: str) -> "MenuCategory":
        """Case-insensitive lookup by name ("mains", "Mains", "MAINS")."""
        for category in cls:
            if category.value.lower() == str(value).strip().lower():
                return category
        raise ValueError(f"Invalid category: {value!r}")


class ScheduleRecurrence(str, Enum):
    DAILY = "Daily"
    WEEKLY = "Weekly"
    MONTHLY = "Monthly"
    CUSTOM = "Custom"

    @property
    def is_recurring(self) -> bool:
        return self is not ScheduleRecurrence.CUSTOM


class ScheduleStatus(str, Enum):
    PENDING = "Pending"
    ACTIVE = "Active"
    ENDED = "Ended"
    CONFLICTED = "Conflicted"
    FAILED = "Failed"

    @property
    def is_terminal(self) -> bool:
        return self in (ScheduleStatus.ENDED, ScheduleStatus.CONFLICTED, ScheduleStatus.FAILED)


class MenuItem(BaseModel):
    """
    Menu catalog entry.
    Collection file: "menu_items.json"
    """
    id: UUID = Field(default_factory=uuid4)
    name: str = Field(..., description="Dish name")
    category: MenuCategory = Field(..., description="Mains|Sides|Desserts|Beverages")
    description: str = Field("", description="Short description")
    allergens: List[str] = Field(default_factory=list, description="Allergen labels")
    is_available: bool = Field(False, description="Shown as available on the menu")


class Notice(BaseModel):
    """
    Notice board entry.
    Collection file: "notices.json"
    """
    id: UUID = Field(default_factory=uuid4)
    title: str
    content: str
    is_active: bool = True
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator("created_at", "updated_at")
    @classmethod
    def normalize_times(cls, value: datetime) -> datetime:
        return as_utc(value)


class AdminUser(BaseModel):
    """
    Admin account.
    Collection file: "admin_users.json"
    """
    id: UUID = Field(default_factory=uuid4)
    username: str = Field(..., min_length=1)
    password_hash: str = Field(..., description="Salted password hash 'salt:hash'")


class MenuPreset(BaseModel):
    """
    Named subset of menu items that should be the only ones available.
    Collection file: "menu_presets.json"
    """
    id: UUID = Field(default_factory=uuid4)
    name: str
    description: str = ""
    menu_item_ids: List[UUID] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator("created_at", "updated_at")
    @classmethod
    def normalize_times(cls, value: datetime) -> datetime:
        return as_utc(value)

    @field_validator("menu_item_ids")
    @classmethod
    def dedupe_ids(cls, value: List[UUID]) -> List[UUID]:
        # Set semantics; keep first-seen order so files stay stable
        return list(dict.fromkeys(value))

    def selects(self, item_id: UUID) -> bool:
        return item_id in set(self.menu_item_ids)


class MenuSchedule(BaseModel):
    """
    Time-bounded, optionally recurring activation of one preset.
    Collection file: "menu_schedules.json"
    """
    id: UUID = Field(default_factory=uuid4)
    preset_id: UUID
    name: str
    description: str = ""
    start_time: datetime
    end_time: datetime
    recurrence: ScheduleRecurrence = ScheduleRecurrence.CUSTOM
    status: ScheduleStatus = ScheduleStatus.PENDING
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    error_message: Optional[str] = None

    @field_validator("start_time", "end_time", "created_at", "updated_at")
    @classmethod
    def normalize_times(cls, value: datetime) -> datetime:
        return as_utc(value)

    @model_validator(mode="after")
    def check_window(self) -> "MenuSchedule":
        if self.end_time <= self.start_time:
            raise ValueError(
                f"end_time ({self.end_time.isoformat()}) must be after "
                f"start_time ({self.start_time.isoformat()})"
            )
        return self

    def is_due(self, now: datetime) -> bool:
        return self.status is ScheduleStatus.PENDING and self.start_time <= now

    def has_ended(self, now: datetime) -> bool:
        return self.end_time <= now

    def transition(self, status: ScheduleStatus, now: datetime, error_message: Optional[str] = None, **changes) -> "MenuSchedule":
        """Copy of this schedule moved to ``status`` with updated_at set to ``now``."""
        return self.model_copy(
            update={"status": status, "updated_at": now, "error_message": error_message, **changes}
        )

    def __str__(self) -> str:
        return f"'{self.name}' ({self.id})"
