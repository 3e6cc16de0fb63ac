# file: shopflow/core/inspection_items.py
"""
State updates on inspection items and sections.

Updates never mutate their input: a new item / new section list is
returned. Photos are dropped whenever the resulting status is not
fail/recommend.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Union

from shopflow.server.schemas.inspection import InspectionItem, InspectionSection

_UNSET: Any = object()


def apply_item_update(
    item: InspectionItem,
    *,
    status: Optional[str] = None,
    notes: Any = _UNSET,
    value: Any = _UNSET,
    unit: Any = _UNSET,
    photo_urls: Optional[List[str]] = None,
) -> InspectionItem:
    """
    Returns a new item with the given fields changed.

    Passing notes=None clears the notes; leaving it out keeps them.
    The new item goes through model validation again, which is where
    photos are cleared for ok / na / unmarked.
    """
    data: Dict[str, Any] = item.model_dump()
    if status is not None:
        data["status"] = status
    if notes is not _UNSET:
        data["notes"] = notes
    if value is not _UNSET:
        data["value"] = value
    if unit is not _UNSET:
        data["unit"] = unit
    if photo_urls is not None:
        data["photo_urls"] = list(photo_urls)
    return InspectionItem.model_validate(data)


def _clamp(index: int, length: int) -> int:
    if length <= 0:
        return 0
    return max(0, min(index, length - 1))


def apply_session_update(
    sections: Sequence[Union[InspectionSection, Dict[str, Any]]],
    section_index: int,
    item_index: int,
    **updates: Any,
) -> List[InspectionSection]:
    """
    Applies apply_item_update() to one item of a section list.

    Out-of-range indices are clamped to the nearest valid one. Empty
    sections / empty item lists are returned unchanged.
    """
    out = [
        s if isinstance(s, InspectionSection) else InspectionSection.model_validate(s)
        for s in sections
    ]
    if not out:
        return out

    sec_idx = _clamp(section_index, len(out))
    section = out[sec_idx]
    if not section.items:
        return out

    it_idx = _clamp(item_index, len(section.items))
    items = list(section.items)
    items[it_idx] = apply_item_update(items[it_idx], **updates)
    out[sec_idx] = InspectionSection(title=section.title, items=items)
    return out
