from conftest import make_cable
from cabling import aggregate_cabling, group_by_type
from diagnostics import DiagnosticKind
from rack_model import CableType, ConduitRun, DEFAULT_COLOR


def test_groups_keep_input_order():
    cables = [
        make_cable("3", CableType.CAT6),
        make_cable("1", CableType.FIBER),
        make_cable("2", CableType.CAT6),
        make_cable("0", CableType.CAT6),
    ]
    report = aggregate_cabling(cables, [])
    assert [g.cable_type for g in report.groups] == [CableType.CAT6, CableType.FIBER]
    assert [r.id for r in report.groups[0].runs] == ["3", "2", "0"]
    assert report.total_runs == 4


def test_single_type_permutation_preserved():
    cables = [make_cable(str(i)) for i in (5, 2, 9, 1)]
    groups = group_by_type(cables)
    assert len(groups) == 1
    assert [r.id for r in groups[0].runs] == ["5", "2", "9", "1"]


def test_group_totals_and_colors():
    report = aggregate_cabling([make_cable("a", length=10), make_cable("b", length=15.5)], [])
    group = report.group_for(CableType.CAT6)
    assert group.total_length == 25.5
    assert group.count == 2
    assert group.color == "#3B82F6"
    assert report.group_for(CableType.COAX) is None


def test_conduit_count_matches_routes():
    cables = [
        make_cable("1", route=("MDF", "Attic", "Office")),
        make_cable("2", route=("MDF", "Attic")),
        make_cable("3", route=("MDF", "Garage")),
    ]
    conduit = ConduitRun("C1", ("MDF", "Attic"), declared_cable_count=2)
    report = aggregate_cabling(cables, [conduit])
    assert report.diagnostics == ()
    assert report.conduit_checks[0].matched_run_ids == ("1", "2")
    assert report.conduit_checks[0].is_consistent


def test_conduit_mismatch_is_a_warning():
    cables = [make_cable("1", route=("MDF", "Attic"))]
    conduit = ConduitRun("C9", ("MDF", "Attic"), declared_cable_count=4, size="1in")
    report = aggregate_cabling(cables, [conduit])
    assert len(report.diagnostics) == 1
    warning = report.diagnostics[0]
    assert warning.kind == DiagnosticKind.CONDUIT_COUNT_MISMATCH
    assert warning.subject_ids == ("C9",)
    assert "declares 4" in warning.message and "1 run(s)" in warning.message
    assert report.conduit_checks[0].observed_count == 1


def test_empty_conduit_path_matches_every_run():
    cables = [make_cable("1"), make_cable("2", route=("X",))]
    report = aggregate_cabling(cables, [ConduitRun("C0", (), declared_cable_count=2)])
    assert report.conduit_checks[0].observed_count == 2
    assert report.diagnostics == ()


def test_cable_type_parsing():
    assert CableType.parse("Cat6") == CableType.CAT6
    assert CableType.parse("twisted-pair-cat6a") == CableType.CAT6A
    assert CableType.parse("Cat 6A") == CableType.CAT6A
    assert CableType.parse("Fibre") == CableType.FIBER
    assert CableType.parse("speaker wire") == CableType.OTHER
    assert CableType.parse(None) == CableType.OTHER
    assert CableType.OTHER.color == DEFAULT_COLOR
