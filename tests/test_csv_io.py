"""Tests for CSV import/export functionality."""

from datetime import timedelta

import pandas as pd
import pytest

from menu_scheduler.domain.errors import ValidationError
from menu_scheduler.domain.models import MenuCategory
from menu_scheduler.domain.repositories import MenuItemRepository
from menu_scheduler.io.export_csv import export_menu_items_csv, export_schedules_csv
from menu_scheduler.io.import_csv import import_menu_items_csv, read_menu_items_csv


def test_import_menu_items_csv(store, tmp_path):
    """Test importing menu items from CSV."""
    csv_content = """Name,Category,Description,Allergens,Is_Available
Burger,Mains,Beef patty,gluten;milk,TRUE
Fries,sides,,,
Latte,BEVERAGES,Hot coffee,milk,no
"""
    csv_file = tmp_path / "items.csv"
    csv_file.write_text(csv_content)

    count = import_menu_items_csv(store, csv_file)
    assert count == 3

    items = {item.name: item for item in MenuItemRepository.get_all(store)}
    assert set(items) == {"Burger", "Fries", "Latte"}

    burger = items["Burger"]
    assert burger.category is MenuCategory.MAINS
    assert burger.allergens == ["gluten", "milk"]
    assert burger.is_available is True
    assert burger.description == "Beef patty"

    fries = items["Fries"]
    assert fries.category is MenuCategory.SIDES
    assert fries.allergens == []
    assert fries.description == ""
    assert fries.is_available is False

    assert items["Latte"].is_available is False


def test_import_missing_columns(tmp_path):
    csv_file = tmp_path / "items.csv"
    csv_file.write_text("name,description\nSoup,Hot\n")

    with pytest.raises(ValidationError) as excinfo:
        read_menu_items_csv(csv_file)
    assert "category" in str(excinfo.value)


def test_import_bad_category_reports_line(store, tmp_path):
    csv_file = tmp_path / "items.csv"
    csv_file.write_text("name,category\nSoup,Starters\n")

    with pytest.raises(ValidationError) as excinfo:
        import_menu_items_csv(store, csv_file)
    assert ":2:" in str(excinfo.value)
    assert MenuItemRepository.get_all(store) == []


def test_export_menu_items_csv(store, menu, tmp_path):
    """Test exporting menu items to CSV."""
    csv_file = tmp_path / "items_export.csv"

    count = export_menu_items_csv(store, csv_file)
    assert count == 3

    df = pd.read_csv(csv_file)
    assert list(df.columns) == ["id", "name", "category", "description", "allergens", "is_available"]
    assert set(df["name"]) == {"Burger", "Fries", "Latte"}
    latte = df[df["name"] == "Latte"].iloc[0]
    assert latte["allergens"] == "milk"
    assert not latte["is_available"]


def test_export_import_items_preserves_fields(store, menu, tmp_path):
    csv_file = tmp_path / "items_export.csv"
    export_menu_items_csv(store, csv_file)

    items = {item.name: item for item in read_menu_items_csv(csv_file)}

    assert items["Fries"].allergens == ["gluten"]
    assert items["Burger"].category is MenuCategory.MAINS


def test_export_schedules_csv(store, menu, make_preset, make_schedule, base_time, tmp_path):
    preset = make_preset("Lunch", [menu["A"]])
    later = make_schedule(preset, base_time + timedelta(days=1), base_time + timedelta(days=2), name="Later")
    sooner = make_schedule(preset, base_time, base_time + timedelta(hours=2), name="Sooner")
    csv_file = tmp_path / "schedules.csv"

    count = export_schedules_csv(store, csv_file)
    assert count == 2

    df = pd.read_csv(csv_file)
    assert list(df["id"]) == [str(sooner.id), str(later.id)]
    assert set(df["preset_name"]) == {"Lunch"}
    assert set(df["status"]) == {"Pending"}


def test_export_empty_schedules(store, tmp_path):
    csv_file = tmp_path / "schedules.csv"

    assert export_schedules_csv(store, csv_file) == 0
    assert pd.read_csv(csv_file).empty


def test_import_numeric_flags_with_blank_cells(store, tmp_path):
    """A blank is_available cell must not turn the other flags into floats."""
    csv_file = tmp_path / "items.csv"
    csv_file.write_text("name,category,is_available\nSoup,Mains,1\nCake,Desserts,\nTea,Beverages,0\n")

    import_menu_items_csv(store, csv_file)

    availability = {item.name: item.is_available for item in MenuItemRepository.get_all(store)}
    assert availability == {"Soup": True, "Cake": False, "Tea": False}


def test_import_rejects_blank_name(store, tmp_path):
    csv_file = tmp_path / "items.csv"
    csv_file.write_text("name,category\nSoup,Mains\n,Desserts\n")

    with pytest.raises(ValidationError) as excinfo:
        import_menu_items_csv(store, csv_file)
    assert ":3:" in str(excinfo.value)
    assert "name" in str(excinfo.value)
    assert MenuItemRepository.get_all(store) == []


def test_import_writes_snapshot_once(store, tmp_path, monkeypatch):
    csv_file = tmp_path / "items.csv"
    csv_file.write_text("name,category\n" + "".join(f"Dish {n},Mains\n" for n in range(50)))
    writes = []
    original = store.menu_items._write

    def counting_write(entities):
        writes.append(len(entities))
        original(entities)

    monkeypatch.setattr(store.menu_items, "_write", counting_write)

    assert import_menu_items_csv(store, csv_file) == 50
    assert writes == [50]
