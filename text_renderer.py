"""
Text Renderer Module
Plain-text rendering of an installation document for console preview
"""

from typing import List

from installation_document import (
    Document, KeyValueList, OrderedList, Paragraph, RackElevation, Section, Table, TitleBlock,
)

RULE_WIDTH = 60


def render_elevation(elevation: RackElevation) -> List[str]:
    """Rack front view, top unit first; overlapping items are marked with !!"""
    lines = []
    next_u = elevation.total_units
    for slot in sorted(elevation.slots, key=lambda s: (-s.top_unit, s.position, s.label)):
        while next_u > slot.top_unit:
            lines.append(f"  U{next_u:02d}       │  {'':35} │")
            next_u -= 1
        if slot.height_units > 1:
            u_range = f"U{slot.position:02d}-{slot.top_unit:02d}"
        else:
            u_range = f"U{slot.position:02d}"
        marker = "!!" if slot.conflict else "  "
        lines.append(f"  {u_range:10} │{marker}{slot.label:35} │ {slot.height_units}U")
        next_u = min(next_u, slot.position - 1)
    while next_u >= 1:
        lines.append(f"  U{next_u:02d}       │  {'':35} │")
        next_u -= 1
    return lines


def _render_table(table: Table) -> List[str]:
    lines = []
    if table.title:
        lines.append(table.title)
    widths = [len(c) for c in table.columns]
    for row in table.rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(cell))
    lines.append("  " + " | ".join(c.ljust(widths[i]) for i, c in enumerate(table.columns)))
    lines.append("  " + "-+-".join("-" * w for w in widths))
    for row in table.rows:
        lines.append("  " + " | ".join(cell.ljust(widths[i]) for i, cell in enumerate(row)))
    return lines


def _render_section(section: Section) -> List[str]:
    lines = [section.heading.upper(), "-" * RULE_WIDTH]
    for content in section.content:
        if isinstance(content, Paragraph):
            prefix = "⚠️  " if content.warning else ""
            lines.append(f"{prefix}{content.text}")
        elif isinstance(content, KeyValueList):
            for key, value in content.entries:
                lines.append(f"  {key + ':':22} {value}")
        elif isinstance(content, Table):
            lines.extend(_render_table(content))
        elif isinstance(content, OrderedList):
            for i, item in enumerate(content.items, start=1):
                lines.append(f"  {i:2d}. {item}")
        elif isinstance(content, RackElevation):
            lines.extend(render_elevation(content))
        lines.append("")
    return lines


def render_text(document: Document) -> str:
    """Render every block of a document as plain text"""
    lines = []
    for block in document.blocks:
        if isinstance(block, TitleBlock):
            lines.append("=" * RULE_WIDTH)
            lines.append(block.title.upper())
            if block.subtitle:
                lines.append(block.subtitle)
            lines.append("=" * RULE_WIDTH)
            lines.append("")
        else:
            lines.extend(_render_section(block))
    return "\n".join(lines).rstrip() + "\n"


def print_document(document: Document) -> None:
    print(render_text(document))
