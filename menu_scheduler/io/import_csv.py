"""CSV import utilities to load menu items into the store."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List

import pandas as pd

from menu_scheduler.domain.errors import ValidationError
from menu_scheduler.domain.models import MenuCategory, MenuItem
from menu_scheduler.domain.store import EntityStore

_logger = logging.getLogger(__name__)

TRUE_VALUES = {"TRUE", "T", "1", "YES", "Y"}


def _text(value) -> str:
    return "" if pd.isna(value) else str(value).strip()


def _split_allergens(value) -> List[str]:
    if pd.isna(value):
        return []
    return [part.strip() for part in str(value).split(";") if part.strip()]


def read_menu_items_csv(csv_path: str | Path) -> List[MenuItem]:
    """
    Parse menu items from CSV.

    Expected columns: name, category, description, allergens, is_available.
    Allergens are semicolon-separated; category is case-insensitive.

    Raises:
        ValidationError: If a required column is missing or a row is invalid
            (unknown category, empty name)
    """
    # Read every cell as text so blank cells do not turn numeric columns into floats
    df = pd.read_csv(csv_path, dtype=str)

    # Normalize column names
    df.columns = df.columns.str.lower().str.strip()

    missing = {"name", "category"} - set(df.columns)
    if missing:
        raise ValidationError(f"Menu item CSV is missing columns: {sorted(missing)}")

    items = []
    for line_no, (_, row) in enumerate(df.iterrows(), start=2):
        name = _text(row["name"])
        if not name:
            raise ValidationError(f"{csv_path}:{line_no}: menu item name is empty")
        try:
            category = MenuCategory.parse(row["category"])
        except ValueError as exc:
            raise ValidationError(f"{csv_path}:{line_no}: {exc}") from exc
        item = MenuItem(
            name=name,
            category=category,
            description=_text(row.get("description")),
            allergens=_split_allergens(row.get("allergens")),
            is_available=_text(row.get("is_available")).upper() in TRUE_VALUES,
        )
        items.append(item)
    return items


def import_menu_items_csv(store: EntityStore, csv_path: str | Path) -> int:
    """
    Import menu items from CSV into the store.

    Args:
        store: Entity store
        csv_path: Path to menu items CSV

    Returns:
        Number of menu items imported
    """
    items = read_menu_items_csv(csv_path)
    count = store.menu_items.insert_many(items)

    _logger.info("Imported %d menu items from %s", count, csv_path)
    return count
