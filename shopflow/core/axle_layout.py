# file: shopflow/core/axle_layout.py
"""
Axle layouts and the inspection sections built from them.

Cars get a hydraulic corner grid (LF/RF/LR/RR). Heavy vehicles get one
AxleInspection per axle and an air-brake corner grid built from those.
Both get a tire grid: front/steer single, rear/drive/tag/trailer dual.

The item labels start with the axle label ("Drive 2 Left Push Rod Travel"),
which is what core/labor.py counts when billing per axle.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

from shopflow.core.job_classifier import load_job_rules
from shopflow.server.schemas.inspection import InspectionItem, InspectionSection

AXLE_LAYOUTS: Dict[str, Tuple[str, ...]] = {
    "truck": ("Steer 1", "Drive 1", "Drive 2"),
    "bus": ("Steer 1", "Drive 1", "Tag"),
    "trailer": ("Trailer 1", "Trailer 2"),
}
DEFAULT_HEAVY_LAYOUT = "truck"

SIDES = ("Left", "Right")
CAR_CORNERS = ("LF", "RF", "LR", "RR")

HYDRAULIC_METRICS: Tuple[Tuple[str, Optional[str]], ...] = (
    ("Brake Pad", "mm"),
    ("Rotor", "mm"),
    ("Rotor Condition", None),
    ("Rotor Thickness", "mm"),
    ("Wheel Torque", "ft·lb"),
)

AIR_METRICS: Tuple[Tuple[str, Optional[str]], ...] = (
    ("Lining/Shoe", "mm"),
    ("Drum/Rotor", "mm"),
    ("Push Rod Travel", "in"),
    ("Wheel Torque Outer", "ft·lb"),
    ("Wheel Torque Inner", "ft·lb"),
)


@dataclass(frozen=True)
class AxleInspection:
    """
    Brake/tire measurement fields for one axle. Measurements start empty and
    are filled in on the inspection items, never on this object.
    """

    axle_label: str
    vehicle_type: str
    brake_type: str = "air"
    dual_tires: bool = True

    left_lining_mm: Optional[float] = None
    right_lining_mm: Optional[float] = None
    left_drum_rotor_mm: Optional[float] = None
    right_drum_rotor_mm: Optional[float] = None
    left_push_rod_travel_in: Optional[float] = None
    right_push_rod_travel_in: Optional[float] = None
    left_tire_pressure_psi: Optional[float] = None
    right_tire_pressure_psi: Optional[float] = None
    left_tread_depth_mm: Optional[float] = None
    right_tread_depth_mm: Optional[float] = None

    @property
    def is_steer(self) -> bool:
        return self.axle_label.lower().startswith("steer")


def _normalize_vehicle_type(vehicle_type: Optional[str]) -> str:
    return (vehicle_type or "").strip().lower()


def generate_axle_layout(vehicle_type: Optional[str]) -> List[AxleInspection]:
    """
    car -> [] (hydraulic corners, no axle groups)
    truck/bus/trailer -> their fixed layout
    anything else -> truck layout
    """
    vt = _normalize_vehicle_type(vehicle_type)
    if vt == "car":
        return []

    layout_key = vt if vt in AXLE_LAYOUTS else DEFAULT_HEAVY_LAYOUT
    return [
        AxleInspection(
            axle_label=label,
            vehicle_type=layout_key,
            brake_type="air",
            dual_tires=not label.lower().startswith("steer"),
        )
        for label in AXLE_LAYOUTS[layout_key]
    ]


def _mk_item(label: str, unit: Optional[str] = None) -> InspectionItem:
    return InspectionItem(item=label, unit=unit, status="unmarked", notes="", value=None)


def _tire_items(prefix: str, dual: bool) -> List[InspectionItem]:
    if not dual:
        return [
            _mk_item(f"{prefix} Tire Pressure", "psi"),
            _mk_item(f"{prefix} Tread Depth", "mm"),
        ]
    return [
        _mk_item(f"{prefix} Tire Pressure (Outer)", "psi"),
        _mk_item(f"{prefix} Tire Pressure (Inner)", "psi"),
        _mk_item(f"{prefix} Tread Depth (Outer)", "mm"),
        _mk_item(f"{prefix} Tread Depth (Inner)", "mm"),
    ]


def build_tire_grid(vehicle_type: Optional[str]) -> InspectionSection:
    items: List[InspectionItem] = []

    if _normalize_vehicle_type(vehicle_type) == "car":
        for corner in ("LF", "RF"):
            items.append(_mk_item(f"{corner} Tire Pressure", "psi"))
            items.append(_mk_item(f"{corner} Tread Depth (Outer)", "mm"))
        for corner in ("LR", "RR"):
            items.extend(_tire_items(corner, dual=True))
    else:
        for axle in generate_axle_layout(vehicle_type):
            for side in SIDES:
                items.extend(_tire_items(f"{axle.axle_label} {side}", dual=axle.dual_tires))

    return InspectionSection(title="Tire Grid", items=items)


def build_axle_sections(vehicle_type: Optional[str]) -> List[InspectionSection]:
    """
    Corner grid (brakes/torque only) followed by the tire grid (tires only).
    """
    if _normalize_vehicle_type(vehicle_type) == "car":
        corner_items = [
            _mk_item(f"{corner} {label}", unit)
            for corner in CAR_CORNERS
            for label, unit in HYDRAULIC_METRICS
        ]
        corner = InspectionSection(title="Corner Grid (Hydraulic)", items=corner_items)
    else:
        corner_items = [
            _mk_item(f"{axle.axle_label} {side} {label}", unit)
            for axle in generate_axle_layout(vehicle_type)
            for side in SIDES
            for label, unit in AIR_METRICS
        ]
        corner = InspectionSection(title="Corner Grid (Air)", items=corner_items)

    return [corner, build_tire_grid(vehicle_type)]


def master_inspection_list(rules: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
    rules = rules if rules is not None else load_job_rules()
    raw = rules.get("master_inspection_list") or []
    return [s for s in raw if isinstance(s, dict) and s.get("title")]


def build_inspection_from_selections(
    selections: Dict[str, List[str]],
    vehicle_type: Optional[str] = None,
    extra_service_items: Iterable[str] = (),
    rules: Optional[Dict[str, Any]] = None,
) -> List[InspectionSection]:
    """
    1) axle block (corner grid + tire grid) when a vehicle type is given
    2) the picked items of each master-list section, in master-list order
    3) a "Services" section for extra service items
    """
    sections: List[InspectionSection] = []

    if vehicle_type:
        sections.extend(build_axle_sections(vehicle_type))

    for master in master_inspection_list(rules):
        picked = selections.get(master["title"]) or []
        if not picked:
            continue
        items = [
            _mk_item(entry["item"], entry.get("unit"))
            for entry in master.get("items") or []
            if isinstance(entry, dict) and entry.get("item") in picked
        ]
        if items:
            sections.append(InspectionSection(title=master["title"], items=items))

    services = [name.strip() for name in extra_service_items if name and name.strip()]
    if services:
        sections.append(InspectionSection(title="Services", items=[_mk_item(n) for n in services]))

    return sections
