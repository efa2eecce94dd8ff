"""Repository classes for data access."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from uuid import UUID

import pydantic

from .errors import ValidationError
from .models import (
    AdminUser,
    MenuCategory,
    MenuItem,
    MenuPreset,
    MenuSchedule,
    Notice,
    ScheduleStatus,
    utc_now,
)
from .store import EntityStore
from menu_scheduler.services.validation import (
    upcoming_schedules,
    validate_preset_exists,
    validate_preset_items,
    validate_window,
)


def _build(model, **fields):
    """Construct a model, turning pydantic errors into our ValidationError."""
    try:
        return model(**fields)
    except pydantic.ValidationError as exc:
        raise ValidationError(str(exc)) from exc


class MenuItemRepository:
    """Repository for menu item data access."""

    @staticmethod
    def get_all(store: EntityStore) -> List[MenuItem]:
        """Get all menu items."""
        return store.menu_items.list()

    @staticmethod
    def get_by_id(store: EntityStore, item_id: UUID) -> MenuItem:
        """Get menu item by ID. Raises NotFoundError."""
        return store.menu_items.get(item_id)

    @staticmethod
    def get_available(store: EntityStore) -> List[MenuItem]:
        """Get items currently marked available."""
        return store.menu_items.find_by(lambda item: item.is_available)

    @staticmethod
    def get_by_category(store: EntityStore, category: MenuCategory | str) -> List[MenuItem]:
        """Get all items in a category."""
        if not isinstance(category, MenuCategory):
            try:
                category = MenuCategory.parse(category)
            except ValueError as exc:
                raise ValidationError(str(exc)) from exc
        return store.menu_items.find_by(lambda item: item.category is category)

    @staticmethod
    def create(
        store: EntityStore,
        name: str,
        category: MenuCategory | str,
        description: str = "",
        allergens: Optional[List[str]] = None,
        is_available: bool = False,
    ) -> MenuItem:
        """Create a new menu item."""
        if not isinstance(category, MenuCategory):
            try:
                category = MenuCategory.parse(category)
            except ValueError as exc:
                raise ValidationError(str(exc)) from exc
        item = _build(
            MenuItem,
            name=name,
            category=category,
            description=description,
            allergens=list(allergens or []),
            is_available=is_available,
        )
        return store.menu_items.insert(item)

    @staticmethod
    def update(store: EntityStore, item: MenuItem) -> MenuItem:
        """Update an existing menu item."""
        return store.menu_items.update(item.id, item)

    @staticmethod
    def delete(store: EntityStore, item_id: UUID) -> None:
        """Delete a menu item."""
        store.menu_items.delete(item_id)

    @staticmethod
    def bulk_create(store: EntityStore, items: List[MenuItem]) -> int:
        """Create multiple menu items with one snapshot rewrite."""
        return store.menu_items.insert_many(items)


class NoticeRepository:
    """Repository for notice data access."""

    @staticmethod
    def get_all(store: EntityStore) -> List[Notice]:
        return store.notices.list()

    @staticmethod
    def get_active(store: EntityStore) -> List[Notice]:
        return store.notices.find_by(lambda notice: notice.is_active)

    @staticmethod
    def get_by_id(store: EntityStore, notice_id: UUID) -> Notice:
        return store.notices.get(notice_id)

    @staticmethod
    def create(store: EntityStore, title: str, content: str, is_active: bool = True) -> Notice:
        notice = _build(Notice, title=title, content=content, is_active=is_active)
        return store.notices.insert(notice)

    @staticmethod
    def update(store: EntityStore, notice: Notice) -> Notice:
        """Update a notice, refreshing updated_at."""
        notice = notice.model_copy(update={"updated_at": utc_now()})
        return store.notices.update(notice.id, notice)

    @staticmethod
    def delete(store: EntityStore, notice_id: UUID) -> None:
        store.notices.delete(notice_id)


class AdminUserRepository:
    """Repository for admin account data access."""

    @staticmethod
    def get_all(store: EntityStore) -> List[AdminUser]:
        return store.admin_users.list()

    @staticmethod
    def get_by_username(store: EntityStore, username: str) -> Optional[AdminUser]:
        """Get admin user by username, or None."""
        return store.admin_users.find_one(lambda user: user.username == username)

    @staticmethod
    def create(store: EntityStore, username: str, password_hash: str) -> AdminUser:
        """Create a new admin user. Usernames are unique."""
        if AdminUserRepository.get_by_username(store, username) is not None:
            raise ValidationError(f"Admin user '{username}' already exists")
        user = _build(AdminUser, username=username, password_hash=password_hash)
        return store.admin_users.insert(user)

    @staticmethod
    def delete(store: EntityStore, user_id: UUID) -> None:
        store.admin_users.delete(user_id)


class PresetRepository:
    """Repository for menu preset data access."""

    @staticmethod
    def get_all(store: EntityStore) -> List[MenuPreset]:
        return store.menu_presets.list()

    @staticmethod
    def get_by_id(store: EntityStore, preset_id: UUID) -> MenuPreset:
        return store.menu_presets.get(preset_id)

    @staticmethod
    def create(
        store: EntityStore,
        name: str,
        menu_item_ids: List[UUID],
        description: str = "",
    ) -> MenuPreset:
        """Create a preset after checking every referenced item exists."""
        preset = _build(MenuPreset, name=name, description=description, menu_item_ids=menu_item_ids)
        validate_preset_items(store, preset.menu_item_ids)
        return store.menu_presets.insert(preset)

    @staticmethod
    def update(store: EntityStore, preset: MenuPreset) -> MenuPreset:
        """Update a preset after re-validating its item references."""
        validate_preset_items(store, preset.menu_item_ids)
        preset = preset.model_copy(update={"updated_at": utc_now()})
        return store.menu_presets.update(preset.id, preset)

    @staticmethod
    def delete(store: EntityStore, preset_id: UUID) -> None:
        store.menu_presets.delete(preset_id)


class ScheduleRepository:
    """Repository for menu schedule data access."""

    @staticmethod
    def get_all(store: EntityStore) -> List[MenuSchedule]:
        return store.menu_schedules.list()

    @staticmethod
    def get_by_id(store: EntityStore, schedule_id: UUID) -> MenuSchedule:
        return store.menu_schedules.get(schedule_id)

    @staticmethod
    def get_by_status(store: EntityStore, status: ScheduleStatus) -> List[MenuSchedule]:
        return store.menu_schedules.find_by(lambda schedule: schedule.status is status)

    @staticmethod
    def get_upcoming(store: EntityStore, now: Optional[datetime] = None, limit: Optional[int] = None) -> List[MenuSchedule]:
        """Pending schedules starting after ``now``, soonest first."""
        return upcoming_schedules(store, now or utc_now(), limit)

    @staticmethod
    def create(
        store: EntityStore,
        preset_id: UUID,
        name: str,
        start_time: datetime,
        end_time: datetime,
        recurrence: str = "Custom",
        description: str = "",
    ) -> MenuSchedule:
        """Create a schedule; new schedules always start Pending."""
        validate_window(start_time, end_time)
        validate_preset_exists(store, preset_id)
        schedule = _build(
            MenuSchedule,
            preset_id=preset_id,
            name=name,
            description=description,
            start_time=start_time,
            end_time=end_time,
            recurrence=recurrence,
            status=ScheduleStatus.PENDING,
        )
        return store.menu_schedules.insert(schedule)

    @staticmethod
    def update(store: EntityStore, schedule: MenuSchedule) -> MenuSchedule:
        """Update a schedule after re-validating its window and preset."""
        validate_window(schedule.start_time, schedule.end_time)
        validate_preset_exists(store, schedule.preset_id)
        schedule = schedule.model_copy(update={"updated_at": utc_now()})
        return store.menu_schedules.update(schedule.id, schedule)

    @staticmethod
    def delete(store: EntityStore, schedule_id: UUID) -> None:
        store.menu_schedules.delete(schedule_id)
