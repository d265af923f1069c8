#!/usr/bin/env python3
"""
Rack Installation Guide Generator

This script:
1. Reads a rack snapshot JSON (optionally replacing its equipment with a CSV list)
2. Lays out the rack, checks the power budget and the cabling
3. Prints a text preview of the installation guide
4. Exports the guide as '<rack name>-installation-guide.pdf'

Usage:
    python generate_install_guide.py <snapshot.json> [options]

Example:
    python generate_install_guide.py network_closet.json --output ./output --view power
"""

import argparse
import sys
from dataclasses import replace
from pathlib import Path

from diagnostics import SnapshotError
from installation_document import View, build_installation_document, document_to_json, project_view
from pdf_generator import export_installation_guide
from rack_config import PAGE_SIZES, get_settings
from snapshot_parser import load_snapshot, parse_equipment_csv
from text_renderer import print_document

EXIT_INPUT_ERROR = 1
EXIT_EXPORT_ERROR = 2


def _print_notification(level: str, message: str) -> None:
    icon = "✅" if level == "success" else "❌"
    print(f"{icon} {message}")


def main(argv=None):
    settings = get_settings()

    parser = argparse.ArgumentParser(
        description="Generate an equipment rack installation guide from a rack snapshot",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python generate_install_guide.py closet.json
  python generate_install_guide.py closet.json --equipment-csv equipment.csv --company "BlueDog Group"
  python generate_install_guide.py closet.json --view wiring --no-pdf
        """
    )

    parser.add_argument(
        "snapshot",
        help="Path to rack snapshot JSON file"
    )

    parser.add_argument(
        "--equipment-csv",
        default=None,
        help="Equipment list CSV that replaces the snapshot's equipment"
    )

    parser.add_argument(
        "--output", "-o",
        default=settings.output_dir,
        help=f"Output directory for the PDF (default: {settings.output_dir})"
    )

    parser.add_argument(
        "--company", "-c",
        default=settings.company_name,
        help=f"Company name for title block (default: '{settings.company_name}')"
    )

    parser.add_argument(
        "--page-size",
        default=settings.page_size,
        choices=list(PAGE_SIZES),
        help=f"PDF page size (default: {settings.page_size})"
    )

    parser.add_argument(
        "--view",
        default=None,
        choices=[v.value for v in View],
        help="Only preview one view: rack, wiring, power or installation"
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the document blocks as JSON instead of the text preview"
    )

    parser.add_argument(
        "--no-pdf",
        action="store_true",
        help="Skip PDF export"
    )

    args = parser.parse_args(argv)

    snapshot_path = Path(args.snapshot)
    if not snapshot_path.exists():
        print(f"❌ Error: snapshot file not found: {snapshot_path}")
        return EXIT_INPUT_ERROR

    print(f"📄 Reading snapshot: {snapshot_path}")
    try:
        snapshot = load_snapshot(str(snapshot_path), unit_height=settings.unit_height)
        if args.equipment_csv:
            equipment = parse_equipment_csv(args.equipment_csv)
            snapshot = replace(snapshot, equipment=tuple(equipment))
    except (SnapshotError, OSError) as e:
        print(f"❌ Error: {e}")
        return EXIT_INPUT_ERROR

    print(f"🗄️  {snapshot.rack_name}: {len(snapshot.equipment)} item(s) in a {snapshot.spec.total_units}U rack")

    document = build_installation_document(snapshot, tolerance_w=settings.power_tolerance_w)
    issues = document.diagnostic_count
    if issues:
        print(f"⚠️  {issues} issue(s) found, see DIAGNOSTICS")

    preview = project_view(document, View(args.view)) if args.view else document
    if args.json:
        print(document_to_json(preview))
    else:
        print_document(preview)

    if args.no_pdf:
        return 0

    print(f"📑 Generating PDF ({args.page_size.upper()}) in {args.output}")
    result = export_installation_guide(
        document,
        output_dir=args.output,
        page_size=args.page_size,
        company_name=args.company,
        notify=_print_notification,
    )
    if not result.success:
        return EXIT_EXPORT_ERROR

    print(f"   📄 {result.path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
