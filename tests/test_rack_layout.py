import pytest

from conftest import make_item
from diagnostics import DiagnosticKind
from rack_layout import compute_layout, find_conflicts
from rack_model import EquipmentItem, RackSpec


def test_clean_layout_has_no_diagnostics_and_is_sorted():
    items = [make_item("c", 9, height=2), make_item("a", 1, height=2), make_item("b", 3, height=4)]
    result = compute_layout(RackSpec(12), items)
    assert result.diagnostics == ()
    assert result.is_valid
    assert [p.id for p in result.placed] == ["a", "b", "c"]
    assert all(not p.has_conflict for p in result.placed)


def test_overlap_scenario_reports_single_conflict():
    items = [
        make_item("A", 1, height=2),
        make_item("B", 3, height=4),
        make_item("C", 6, height=1),
    ]
    result = compute_layout(RackSpec(12), items)

    assert [p.id for p in result.placed] == ["A", "B", "C"]
    assert len(result.diagnostics) == 1
    conflict = result.diagnostics[0]
    assert conflict.kind == DiagnosticKind.LAYOUT_CONFLICT
    assert conflict.subject_ids == ("B", "C")
    assert conflict.unit_range == (6, 6)

    placed = {p.id: p for p in result.placed}
    assert placed["A"].conflicts_with == ()
    assert placed["B"].conflicts_with == ("C",)
    assert placed["C"].conflicts_with == ("B",)


def test_each_overlapping_pair_reported_once():
    items = [make_item("x", 2, height=3), make_item("y", 3, height=3), make_item("z", 4, height=1)]
    result = compute_layout(RackSpec(10), items)
    pairs = {d.subject_ids for d in result.conflicts}
    assert pairs == {("x", "y"), ("x", "z"), ("y", "z")}
    assert len(result.conflicts) == 3


def test_conflict_range_spans_shared_units():
    result = compute_layout(RackSpec(20), [make_item("low", 2, height=5), make_item("high", 4, height=6)])
    assert result.conflicts[0].unit_range == (4, 6)


@pytest.mark.parametrize("position,height", [(0, 1), (11, 2), (-3, 2), (5, 0)])
def test_out_of_bounds_items_are_reported_and_not_placed(position, height):
    items = [make_item("ok", 1), make_item("bad", position, height=height)]
    result = compute_layout(RackSpec(11), items)
    assert [p.id for p in result.placed] == ["ok"]
    assert len(result.diagnostics) == 1
    assert result.diagnostics[0].kind == DiagnosticKind.OUT_OF_BOUNDS
    assert result.diagnostics[0].subject_ids == ("bad",)


def test_item_filling_top_unit_is_in_bounds():
    result = compute_layout(RackSpec(12), [make_item("top", 11, height=2)])
    assert result.diagnostics == ()
    assert result.placed[0].top_unit == 12


def test_ties_on_position_break_on_id():
    items = [make_item("zeta", 4), make_item("alpha", 4), make_item("mid", 1)]
    result = compute_layout(RackSpec(12), items)
    assert [p.id for p in result.placed] == ["mid", "alpha", "zeta"]
    assert compute_layout(RackSpec(12), list(reversed(items))) == result


def test_top_down_pixel_coordinates():
    spec = RackSpec(12, unit_height=30)
    result = compute_layout(spec, [make_item("ups", 1, height=2), make_item("sw", 12)])
    ups, sw = result.placed
    assert ups.top_unit == 2
    assert ups.top_y == 300
    assert ups.pixel_height == 60
    assert ups.bottom_up_y(spec) == 0
    assert sw.top_y == 0
    assert sw.pixel_height == 30


def test_duplicate_ids_are_flagged():
    result = compute_layout(RackSpec(12), [make_item("sw", 1), make_item("sw", 5)])
    kinds = [d.kind for d in result.diagnostics]
    assert kinds == [DiagnosticKind.DUPLICATE_IDENTIFIER]
    assert len(result.placed) == 2


def test_occupancy_counts_overlaps_once():
    result = compute_layout(RackSpec(10), [make_item("a", 1, height=3), make_item("b", 3, height=2)])
    assert result.used_units == 4
    assert result.free_units == 6
    assert result.fill_percent == pytest.approx(40.0)


def test_find_conflicts_on_empty_list():
    assert find_conflicts([]) == []


def test_input_items_are_not_modified():
    item = make_item("a", 1, height=2)
    compute_layout(RackSpec(4), [item])
    assert item == EquipmentItem(item.id, item.name, item.category, 2, 1, 0.0)
