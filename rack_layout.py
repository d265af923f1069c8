"""
Rack Layout Module
Places equipment on a fixed-height rack and reports out-of-bounds and overlapping items

Coordinates: units are numbered 1 (bottom) to total_units (top). Pixel offsets are
top-down, so the top edge of an item sits at (total_units - top_unit) * unit_height.
"""

from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from diagnostics import Diagnostic, DiagnosticKind, layout_conflict, out_of_bounds
from rack_model import EquipmentItem, RackSpec


@dataclass(frozen=True)
class PlacedItem:
    """An equipment item with its resolved vertical span"""
    item: EquipmentItem
    top_unit: int
    top_y: float          # Top-down pixel offset of the item's top edge
    pixel_height: float
    conflicts_with: Tuple[str, ...] = ()

    @property
    def id(self) -> str:
        return self.item.id

    @property
    def has_conflict(self) -> bool:
        return bool(self.conflicts_with)

    def bottom_up_y(self, spec: RackSpec) -> float:
        """Pixel offset of the item's bottom edge measured up from the rack floor"""
        return (self.item.position - 1) * spec.unit_height


@dataclass(frozen=True)
class LayoutResult:
    spec: RackSpec
    placed: Tuple[PlacedItem, ...] = ()
    diagnostics: Tuple[Diagnostic, ...] = ()

    @property
    def is_valid(self) -> bool:
        return not self.diagnostics

    @property
    def conflicts(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.kind == DiagnosticKind.LAYOUT_CONFLICT]

    @property
    def used_units(self) -> int:
        occupied = set()
        for placed in self.placed:
            occupied.update(placed.item.occupied_units)
        return len(occupied)

    @property
    def free_units(self) -> int:
        return self.spec.total_units - self.used_units

    @property
    def fill_percent(self) -> float:
        return self.used_units / self.spec.total_units * 100

    @property
    def total_power_w(self) -> float:
        return sum(max(0.0, p.item.power_draw_w) for p in self.placed)


def _bounds_problem(spec: RackSpec, item: EquipmentItem):
    """Return a description of why the item does not fit, or None if it does"""
    if item.height_units < 1:
        return f"'{item.id}' has invalid height {item.height_units}U"
    if item.position < 1:
        return f"'{item.id}' starts at U{item.position}, below U1"
    if item.top_unit > spec.total_units:
        return (f"'{item.id}' occupies U{item.position}-U{item.top_unit}, "
                f"above the top of the {spec.total_units}U rack")
    return None


def find_conflicts(items: Sequence[EquipmentItem]) -> List[Tuple[EquipmentItem, EquipmentItem, int, int]]:
    """
    Find every pair of items whose unit ranges intersect.

    Sorts by (position, id) and sweeps upward; each pair is reported once,
    lower item first, with the shared (first U, last U) range.
    """
    ordered = sorted(items, key=lambda x: (x.position, x.id))
    pairs = []
    for i, lower in enumerate(ordered):
        for upper in ordered[i + 1:]:
            if upper.position > lower.top_unit:
                break
            pairs.append((lower, upper, upper.position, min(lower.top_unit, upper.top_unit)))
    return pairs


def compute_layout(spec: RackSpec, items: Sequence[EquipmentItem]) -> LayoutResult:
    """
    Resolve the vertical placement of every item in the rack.

    Items outside the rack are reported as OutOfBounds and left out of the
    placed list. Overlapping items are reported once per pair as LayoutConflict
    but are still placed, flagged with the ids they collide with.

    Args:
        spec: Rack envelope
        items: Equipment with supplied positions

    Returns:
        LayoutResult with placed items sorted by (position, id) and diagnostics
    """
    diagnostics: List[Diagnostic] = []
    in_bounds = []

    for item in items:
        problem = _bounds_problem(spec, item)
        if problem:
            diagnostics.append(out_of_bounds(item.id, problem))
        else:
            in_bounds.append(item)

    id_counts: Dict[str, int] = defaultdict(int)
    for item in items:
        id_counts[item.id] += 1
    for item_id, count in id_counts.items():
        if count > 1:
            diagnostics.append(Diagnostic(
                DiagnosticKind.DUPLICATE_IDENTIFIER,
                f"Equipment id '{item_id}' is used by {count} items",
                subject_ids=(item_id,),
            ))

    conflicts_by_item: Dict[int, List[str]] = defaultdict(list)
    for lower, upper, first_u, last_u in find_conflicts(in_bounds):
        diagnostics.append(layout_conflict(lower.id, upper.id, first_u, last_u))
        conflicts_by_item[id(lower)].append(upper.id)
        conflicts_by_item[id(upper)].append(lower.id)

    placed = []
    for item in sorted(in_bounds, key=lambda x: (x.position, x.id)):
        placed.append(PlacedItem(
            item=item,
            top_unit=item.top_unit,
            top_y=(spec.total_units - item.top_unit) * spec.unit_height,
            pixel_height=item.height_units * spec.unit_height,
            conflicts_with=tuple(conflicts_by_item.get(id(item), ())),
        ))

    return LayoutResult(spec=spec, placed=tuple(placed), diagnostics=tuple(diagnostics))
