"""CSV export utilities for menu items and schedules."""

from __future__ import annotations

from pathlib import Path

import pandas as pd

from menu_scheduler.domain.store import EntityStore

ITEM_COLUMNS = ["id", "name", "category", "description", "allergens", "is_available"]
SCHEDULE_COLUMNS = [
    "id",
    "name",
    "preset_id",
    "preset_name",
    "start_time",
    "end_time",
    "recurrence",
    "status",
    "error_message",
]


def menu_items_frame(store: EntityStore) -> pd.DataFrame:
    rows = [
        {
            "id": str(item.id),
            "name": item.name,
            "category": item.category.value,
            "description": item.description,
            "allergens": ";".join(item.allergens),
            "is_available": item.is_available,
        }
        for item in store.menu_items.list()
    ]
    return pd.DataFrame(rows, columns=ITEM_COLUMNS)


def schedules_frame(store: EntityStore) -> pd.DataFrame:
    """Schedules joined with their preset name, ordered by start time."""
    preset_names = {preset.id: preset.name for preset in store.menu_presets.list()}
    rows = [
        {
            "id": str(schedule.id),
            "name": schedule.name,
            "preset_id": str(schedule.preset_id),
            "preset_name": preset_names.get(schedule.preset_id),
            "start_time": schedule.start_time.isoformat(),
            "end_time": schedule.end_time.isoformat(),
            "recurrence": schedule.recurrence.value,
            "status": schedule.status.value,
            "error_message": schedule.error_message,
        }
        for schedule in store.menu_schedules.list()
    ]
    df = pd.DataFrame(rows, columns=SCHEDULE_COLUMNS)
    if not df.empty:
        df.sort_values("start_time", inplace=True)
    return df


def export_menu_items_csv(store: EntityStore, csv_path: str | Path) -> int:
    """Export all menu items to CSV. Returns number of rows written."""
    df = menu_items_frame(store)
    df.to_csv(csv_path, index=False)
    print(f"[INFO] Exported {len(df)} menu items to {csv_path}")
    return len(df)


def export_schedules_csv(store: EntityStore, csv_path: str | Path) -> int:
    """Export all schedules to CSV. Returns number of rows written."""
    df = schedules_frame(store)
    df.to_csv(csv_path, index=False)
    print(f"[INFO] Exported {len(df)} schedules to {csv_path}")
    return len(df)
