"""I/O utilities for CSV import/export."""

from .export_csv import export_menu_items_csv, export_schedules_csv
from .import_csv import import_menu_items_csv, read_menu_items_csv

__all__ = [
    "import_menu_items_csv",
    "read_menu_items_csv",
    "export_menu_items_csv",
    "export_schedules_csv",
]
