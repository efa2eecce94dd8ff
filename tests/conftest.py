"""Pytest configuration and shared fixtures."""

from datetime import datetime, timezone

import pytest

from menu_scheduler.domain.models import MenuCategory, MenuItem, MenuPreset, MenuSchedule
from menu_scheduler.domain.store import EntityStore


def pytest_configure(config):
    """Configure pytest."""
    # Add custom markers
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (deselect with '-m \"not integration\"')"
    )
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


@pytest.fixture
def store(tmp_path):
    """Empty store backed by a temporary data directory."""
    return EntityStore(tmp_path / "data")


@pytest.fixture
def base_time():
    return datetime(2025, 9, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def menu(store):
    """Three unavailable items A, B, C."""
    items = {
        "A": MenuItem(name="Burger", category=MenuCategory.MAINS),
        "B": MenuItem(name="Fries", category=MenuCategory.SIDES, allergens=["gluten"]),
        "C": MenuItem(name="Latte", category=MenuCategory.BEVERAGES, allergens=["milk"]),
    }
    for item in items.values():
        store.menu_items.insert(item)
    return items


@pytest.fixture
def make_preset(store):
    """Factory inserting a preset that selects the given items."""
    def _make(name, items):
        preset = MenuPreset(name=name, menu_item_ids=[item.id for item in items])
        return store.menu_presets.insert(preset)
    return _make


@pytest.fixture
def make_schedule(store):
    """Factory inserting a Pending schedule for a preset."""
    def _make(preset, start, end, recurrence="Custom", name=None):
        schedule = MenuSchedule(
            preset_id=preset.id,
            name=name or f"{preset.name} schedule",
            start_time=start,
            end_time=end,
            recurrence=recurrence,
        )
        return store.menu_schedules.insert(schedule)
    return _make
