"""Menu-item availability derived from a preset."""

from __future__ import annotations

from typing import Iterable, List

from menu_scheduler.domain.models import MenuItem, MenuPreset


def apply_preset(items: Iterable[MenuItem], preset: MenuPreset) -> List[MenuItem]:
    """
    Full replace: items selected by the preset become available, every other
    item becomes unavailable. Returns new copies; the inputs are untouched.
    """
    selected = set(preset.menu_item_ids)
    return [item.model_copy(update={"is_available": item.id in selected}) for item in items]


def changed_items(before: Iterable[MenuItem], after: Iterable[MenuItem]) -> List[MenuItem]:
    """Items from ``after`` whose availability differs from ``before``."""
    previous = {item.id: item.is_available for item in before}
    return [item for item in after if previous.get(item.id) != item.is_available]
