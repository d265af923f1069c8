"""
Installation Document Module
Assembles layout, power and cabling results into a renderer-independent block sequence

Block order is fixed:
    Title, Diagnostics (only when there is something to report), Equipment List,
    Power Summary, Power Breakdown, Cabling, Installation Steps, Notes (only when
    notes exist).
Renderers (PDF, text, web) iterate the blocks; they need no rack knowledge.
"""

import json
from dataclasses import dataclass, fields, is_dataclass
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from cabling import CablingReport, aggregate_cabling
from diagnostics import Diagnostic, InvalidInputError
from power_budget import POWER_WARNING_THRESHOLD_PCT, PowerReport, analyze_power
from rack_layout import LayoutResult, compute_layout
from rack_model import RackSnapshot, RackSpec

DOCUMENT_TITLE = "Equipment Rack Installation Guide"

INSTALLATION_STEPS = (
    "Install rack in designated location with proper ventilation",
    "Mount UPS in bottom rack positions for stability",
    "Install patch panels and switches in designated positions",
    "Route power cables and connect to UPS",
    "Run network cables through designated conduits",
    "Terminate cables at patch panels",
    "Connect equipment and test all connections",
    "Configure network settings and test connectivity",
    "Document all connections and cable runs",
    "Perform final system testing and certification",
)


# ---------------------------------------------------------------------------
# Block vocabulary
# ---------------------------------------------------------------------------

class SectionKind(Enum):
    DIAGNOSTICS = "diagnostics"
    EQUIPMENT_LIST = "equipment_list"
    POWER_SUMMARY = "power_summary"
    POWER_BREAKDOWN = "power_breakdown"
    CABLING = "cabling"
    INSTALLATION_STEPS = "installation_steps"
    NOTES = "notes"


class View(Enum):
    """The four independently selectable projections of a document"""
    RACK = "rack"
    WIRING = "wiring"
    POWER = "power"
    INSTALLATION = "installation"


VIEW_SECTIONS = {
    View.RACK: (SectionKind.EQUIPMENT_LIST,),
    View.WIRING: (SectionKind.CABLING,),
    View.POWER: (SectionKind.POWER_SUMMARY, SectionKind.POWER_BREAKDOWN),
    View.INSTALLATION: (SectionKind.INSTALLATION_STEPS, SectionKind.NOTES),
}


@dataclass(frozen=True)
class Paragraph:
    text: str
    warning: bool = False


@dataclass(frozen=True)
class KeyValueList:
    entries: Tuple[Tuple[str, str], ...]


@dataclass(frozen=True)
class Table:
    columns: Tuple[str, ...]
    rows: Tuple[Tuple[str, ...], ...]
    row_keys: Tuple[str, ...] = ()   # Optional presentation key (colour) per row
    title: str = ""


@dataclass(frozen=True)
class OrderedList:
    items: Tuple[str, ...]


@dataclass(frozen=True)
class ElevationSlot:
    label: str
    position: int
    top_unit: int
    height_units: int
    top_y: float
    pixel_height: float
    color: str
    conflict: bool = False


@dataclass(frozen=True)
class RackElevation:
    """Rack front view: one slot per placed item, top-down pixel coordinates"""
    total_units: int
    unit_height: float
    slots: Tuple[ElevationSlot, ...] = ()


Content = Union[Paragraph, KeyValueList, Table, OrderedList, RackElevation]


@dataclass(frozen=True)
class TitleBlock:
    title: str
    subtitle: str = ""


@dataclass(frozen=True)
class Section:
    kind: SectionKind
    heading: str
    content: Tuple[Content, ...] = ()


Block = Union[TitleBlock, Section]


@dataclass(frozen=True)
class Document:
    rack_name: str
    blocks: Tuple[Block, ...]

    @property
    def sections(self) -> List[Section]:
        return [block for block in self.blocks if isinstance(block, Section)]

    def section(self, kind: SectionKind) -> Optional[Section]:
        for block in self.sections:
            if block.kind == kind:
                return block
        return None

    @property
    def diagnostic_count(self) -> int:
        section = self.section(SectionKind.DIAGNOSTICS)
        if section is None:
            return 0
        return sum(len(c.rows) for c in section.content if isinstance(c, Table))

    @property
    def block_kinds(self) -> List[str]:
        return ["title" if isinstance(b, TitleBlock) else b.kind.value for b in self.blocks]


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------

def format_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.1f}"


def format_watts(value: float) -> str:
    return f"{format_number(value)}W"


def format_percent(value: float) -> str:
    return f"{value:.1f}%"


def installation_guide_filename(rack_name: str, extension: str = "pdf") -> str:
    """File name for an exported guide: '<rackName>-installation-guide.<ext>'"""
    safe_name = (rack_name or "").strip().replace("/", "-").replace("\\", "-") or "rack"
    return f"{safe_name}-installation-guide.{extension}"


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------

def _diagnostics_section(diagnostics: Sequence[Diagnostic]) -> Section:
    rows = tuple((d.severity.value.upper(), d.label, d.message) for d in diagnostics)
    return Section(
        SectionKind.DIAGNOSTICS,
        "Diagnostics",
        (
            Paragraph(f"{len(diagnostics)} issue(s) found. Review before installation.", warning=True),
            Table(("Severity", "Kind", "Message"), rows),
        ),
    )


def _equipment_section(spec: RackSpec, layout: Optional[LayoutResult]) -> Section:
    if layout is None:
        return Section(SectionKind.EQUIPMENT_LIST, "Equipment List",
                       (Paragraph("Rack layout unavailable.", warning=True),))

    slots = []
    rows = []
    for placed in layout.placed:
        item = placed.item
        slots.append(ElevationSlot(
            label=item.name,
            position=item.position,
            top_unit=placed.top_unit,
            height_units=item.height_units,
            top_y=placed.top_y,
            pixel_height=placed.pixel_height,
            color=item.category.color,
            conflict=placed.has_conflict,
        ))
        rows.append((
            item.name,
            item.category.label,
            item.unit_label,
            f"{item.height_units}U",
            format_watts(item.power_draw_w),
            str(item.ports) if item.ports else "-",
        ))

    content: List[Content] = [
        RackElevation(spec.total_units, spec.unit_height, tuple(slots)),
        Table(
            ("Name", "Category", "Position", "Height", "Power", "Ports"),
            tuple(rows),
            row_keys=tuple(slot.color for slot in slots),
        ),
        KeyValueList((
            ("Rack Units", f"{spec.total_units}U"),
            ("Occupied", f"{layout.used_units}U"),
            ("Free", f"{layout.free_units}U"),
            ("Fill", format_percent(layout.fill_percent)),
        )),
    ]
    if not layout.placed:
        content.insert(1, Paragraph("No equipment could be placed in the rack."))
    return Section(SectionKind.EQUIPMENT_LIST, "Equipment List", tuple(content))


def _power_unavailable(kind: SectionKind, heading: str) -> Section:
    return Section(kind, heading, (
        Paragraph("Power analysis could not be completed. See Diagnostics.", warning=True),
    ))


def _power_summary_section(power: Optional[PowerReport]) -> Section:
    if power is None:
        return _power_unavailable(SectionKind.POWER_SUMMARY, "Power Summary")

    content: List[Content] = [KeyValueList((
        ("Total Consumption", format_watts(power.total_w)),
        ("Available Power", format_watts(power.available_w)),
        ("Utilization", format_percent(power.utilization_pct)),
        ("Risk", power.risk.value),
        ("Headroom", format_watts(power.headroom_w)),
        ("Power Redundancy", "Yes" if power.redundancy else "No"),
        ("Heat Load", f"{power.heat_load_btu_hr:.0f} BTU/hr"),
        ("Cooling Airflow", f"{power.cooling_cfm} CFM"),
        ("Circuit", power.circuit_recommendation),
        ("UPS Recommended", "Yes" if power.ups_recommended else "No"),
    ))]
    if power.is_over_capacity:
        content.append(Paragraph(
            f"Power utilization exceeds {format_number(POWER_WARNING_THRESHOLD_PCT)}%. "
            "Consider upgrading UPS capacity or reducing equipment load.",
            warning=True,
        ))
    return Section(SectionKind.POWER_SUMMARY, "Power Summary", tuple(content))


def _power_breakdown_section(power: Optional[PowerReport]) -> Section:
    if power is None:
        return _power_unavailable(SectionKind.POWER_BREAKDOWN, "Power Breakdown")
    rows = tuple(
        (share.name, share.category.label, format_watts(share.power_w), format_percent(share.share_pct))
        for share in power.breakdown
    )
    keys = tuple(share.category.color for share in power.breakdown)
    return Section(SectionKind.POWER_BREAKDOWN, "Equipment Power Breakdown", (
        Table(("Equipment", "Category", "Power", "Share"), rows, row_keys=keys),
    ))


def _cabling_section(cabling: Optional[CablingReport], layout: Optional[LayoutResult]) -> Section:
    if cabling is None:
        return Section(SectionKind.CABLING, "Cabling", (Paragraph("Cabling data unavailable.", warning=True),))

    content: List[Content] = []
    if cabling.groups:
        summary = tuple(
            (group.cable_type.label, f"{group.count} run(s), {format_number(group.total_length)} ft")
            for group in cabling.groups
        )
        content.append(KeyValueList(summary))

        rows = []
        keys = []
        for group in cabling.groups:
            for run in group.runs:
                rows.append((
                    run.id,
                    group.cable_type.label,
                    str(run.source),
                    str(run.destination),
                    f"{format_number(run.length)} ft",
                    " -> ".join(run.route) or "-",
                ))
                keys.append(group.color)
        content.append(Table(("Run", "Type", "From", "To", "Length", "Route"),
                             tuple(rows), row_keys=tuple(keys), title="Cable Runs"))
    else:
        content.append(Paragraph("No cable runs recorded."))

    if cabling.conduit_checks:
        rows = tuple(
            (
                check.conduit.id,
                check.conduit.size or "-",
                " -> ".join(check.conduit.path) or "-",
                str(check.conduit.declared_cable_count),
                str(check.observed_count),
                "OK" if check.is_consistent else "Mismatch",
            )
            for check in cabling.conduit_checks
        )
        content.append(Table(("Conduit", "Size", "Route", "Declared", "Observed", "Status"),
                             rows, title="Conduit Runs"))

    if layout is not None:
        connection_rows = []
        for placed in layout.placed:
            for conn in placed.item.connections:
                port = str(conn.port_number) if conn.port_number is not None else "-"
                connection_rows.append((placed.item.name, conn.device_name, conn.cable_type.label, port))
        if connection_rows:
            content.append(Table(("Equipment", "Connects To", "Cable", "Port"),
                                 tuple(connection_rows), title="Equipment Connections"))

    return Section(SectionKind.CABLING, "Cabling", tuple(content))


# ---------------------------------------------------------------------------
# Assembly
# ---------------------------------------------------------------------------

def assemble_installation_document(
    rack_name: str,
    spec: RackSpec,
    layout: Optional[LayoutResult],
    power: Optional[PowerReport],
    cabling: Optional[CablingReport],
    notes: Iterable[str] = (),
    extra_diagnostics: Sequence[Diagnostic] = ()
) -> Document:
    """
    Turn analysis results into an ordered block sequence.

    Never raises for missing data: a None result is rendered as an
    "unavailable" paragraph in its section, and extra_diagnostics (for example
    a failed power analysis) are listed with everything else.

    Args:
        rack_name: Name shown in the title and used for export
        spec: Rack envelope
        layout: Result of compute_layout
        power: Result of analyze_power, or None when it failed
        cabling: Result of aggregate_cabling
        notes: Installation notes, rendered verbatim in order
        extra_diagnostics: Findings produced outside the three analyses

    Returns:
        Document
    """
    diagnostics: List[Diagnostic] = []
    if layout is not None:
        diagnostics.extend(layout.diagnostics)
    if power is not None:
        diagnostics.extend(power.diagnostics)
    diagnostics.extend(extra_diagnostics)
    if cabling is not None:
        diagnostics.extend(cabling.diagnostics)

    blocks: List[Block] = [
        TitleBlock(DOCUMENT_TITLE, f"Rack: {rack_name}  |  Rack Units: {spec.total_units}U"),
    ]
    if diagnostics:
        blocks.append(_diagnostics_section(diagnostics))

    blocks.append(_equipment_section(spec, layout))
    blocks.append(_power_summary_section(power))
    blocks.append(_power_breakdown_section(power))
    blocks.append(_cabling_section(cabling, layout))
    blocks.append(Section(SectionKind.INSTALLATION_STEPS, "Installation Sequence",
                          (OrderedList(INSTALLATION_STEPS),)))

    notes = tuple(notes)
    if notes:
        blocks.append(Section(SectionKind.NOTES, "Installation Notes", (OrderedList(notes),)))

    return Document(rack_name=rack_name, blocks=tuple(blocks))


def build_installation_document(snapshot: RackSnapshot, tolerance_w: float = 0.0) -> Document:
    """Run layout, power and cabling analysis on a snapshot and assemble the guide"""
    layout = compute_layout(snapshot.spec, snapshot.equipment)
    cabling = aggregate_cabling(snapshot.cables, snapshot.conduits)

    extra = []
    try:
        power = analyze_power(snapshot.equipment, snapshot.power, tolerance_w=tolerance_w)
    except InvalidInputError as e:
        power = None
        extra.append(e.diagnostic)

    return assemble_installation_document(
        snapshot.rack_name,
        snapshot.spec,
        layout,
        power,
        cabling,
        snapshot.notes,
        extra_diagnostics=extra,
    )


def project_view(document: Document, view: View) -> Document:
    """Keep the title, diagnostics and the sections belonging to one view"""
    wanted = (SectionKind.DIAGNOSTICS,) + VIEW_SECTIONS[view]
    blocks = tuple(
        block for block in document.blocks
        if isinstance(block, TitleBlock) or block.kind in wanted
    )
    return Document(rack_name=document.rack_name, blocks=blocks)


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------

def _to_jsonable(value):
    if is_dataclass(value):
        data = {"type": type(value).__name__}
        for f in fields(value):
            data[f.name] = _to_jsonable(getattr(value, f.name))
        return data
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [_to_jsonable(v) for v in value]
    return value


def document_to_json(document: Document, indent: Optional[int] = 2) -> str:
    """Serialize a document to JSON; the same document always gives the same text"""
    return json.dumps(_to_jsonable(document), indent=indent, sort_keys=True, ensure_ascii=False)
