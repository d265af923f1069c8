"""
Snapshot Parser Module
Reads a rack snapshot (rack, equipment, wiring, power, notes) from JSON,
and equipment lists from CSV exports
Accepts both snake_case keys and the camelCase keys used by the web app's project data
"""

import csv
import json
import math
from pathlib import Path
from typing import IO, Any, Dict, List, Optional, Sequence

from diagnostics import InvalidInputError, SnapshotError
from rack_model import (
    DEFAULT_UNIT_HEIGHT, CableEndpoint, CableRun, CableType, Connection, ConduitRun,
    EquipmentCategory, EquipmentItem, PowerRequirements, RackSnapshot, RackSpec,
)

_MISSING = object()


def _get(record: Dict[str, Any], *names: str, default: Any = _MISSING) -> Any:
    """Return the first key present in record, trying each alias in turn"""
    if not isinstance(record, dict):
        raise SnapshotError(f"Expected an object with '{names[0]}', got {record!r}")
    for name in names:
        if name in record and record[name] is not None:
            return record[name]
    if default is _MISSING:
        raise SnapshotError(f"Missing '{names[0]}' in record: {record!r}")
    return default


def _to_int(value: Any, what: str) -> int:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise SnapshotError(f"{what} must be a number, got {value!r}")
    if not number.is_integer():
        raise SnapshotError(f"{what} must be a whole number, got {value!r}")
    return int(number)


def _to_float(value: Any, what: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise SnapshotError(f"{what} must be a number, got {value!r}")
    if not math.isfinite(number):
        raise SnapshotError(f"{what} must be a finite number, got {value!r}")
    return number


def _to_strings(value: Any, what: str) -> tuple:
    if value is None:
        return ()
    if isinstance(value, str):
        return tuple(part.strip() for part in value.split(';') if part.strip())
    if not isinstance(value, (list, tuple)):
        raise SnapshotError(f"{what} must be a list or a ';'-separated string, got {value!r}")
    return tuple(str(v) for v in value)


def _to_records(value: Any, what: str) -> list:
    if not isinstance(value, (list, tuple)):
        raise SnapshotError(f"{what} must be a list, got {value!r}")
    return list(value)


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ('1', 'true', 'yes', 'y')
    return bool(value)


def parse_connection(record: Dict[str, Any]) -> Connection:
    port = _get(record, 'port_number', 'portNumber', 'port', default=None)
    return Connection(
        device_id=str(_get(record, 'device_id', 'deviceId', default='')),
        device_name=str(_get(record, 'device_name', 'deviceName', 'device_id', 'deviceId')),
        cable_type=CableType.parse(_get(record, 'cable_type', 'cableType', default='')),
        port_number=_to_int(port, "Connection port") if port not in (None, '') else None,
    )


def parse_equipment(record: Dict[str, Any], index: int = 0) -> EquipmentItem:
    item_id = str(_get(record, 'id', default=f"EQ-{index + 1}"))
    ports = _get(record, 'ports', default=None)
    return EquipmentItem(
        id=item_id,
        name=str(_get(record, 'name', default=item_id)),
        category=EquipmentCategory.parse(_get(record, 'category', 'type', default='')),
        height_units=_to_int(_get(record, 'height_units', 'rack_units', 'rackUnits', 'height'),
                             f"Height of '{item_id}'"),
        position=_to_int(_get(record, 'position', 'position_u'), f"Position of '{item_id}'"),
        power_draw_w=_to_float(_get(record, 'power_draw_w', 'power', 'powerConsumption', 'watts', default=0),
                               f"Power of '{item_id}'"),
        ports=_to_int(ports, f"Ports of '{item_id}'") if ports not in (None, '') else None,
        specifications=_to_strings(_get(record, 'specifications', default=None), f"Specifications of '{item_id}'"),
        connections=tuple(parse_connection(c) for c in _to_records(_get(record, 'connections', default=[]),
                                                                       f"Connections of '{item_id}'")),
    )


def _parse_endpoint(value: Any) -> CableEndpoint:
    if isinstance(value, str):
        return CableEndpoint(device=value)
    port = _get(value, 'port', default=None)
    return CableEndpoint(device=str(_get(value, 'device')), port=str(port) if port not in (None, '') else None)


def parse_cable_run(record: Dict[str, Any], index: int = 0) -> CableRun:
    run_id = str(_get(record, 'id', default=f"CR-{index + 1}"))
    return CableRun(
        id=run_id,
        source=_parse_endpoint(_get(record, 'source', 'from')),
        destination=_parse_endpoint(_get(record, 'destination', 'to')),
        cable_type=CableType.parse(_get(record, 'cable_type', 'cableType', 'type', default='')),
        length=_to_float(_get(record, 'length', default=0), f"Length of '{run_id}'"),
        route=_to_strings(_get(record, 'route', default=None), f"Route of '{run_id}'"),
    )


def parse_conduit_run(record: Dict[str, Any], index: int = 0) -> ConduitRun:
    conduit_id = str(_get(record, 'id', default=f"C-{index + 1}"))
    return ConduitRun(
        id=conduit_id,
        path=_to_strings(_get(record, 'path', default=None), f"Path of '{conduit_id}'"),
        declared_cable_count=_to_int(
            _get(record, 'declared_cable_count', 'cable_count', 'cableCount', default=0),
            f"Cable count of '{conduit_id}'",
        ),
        size=str(_get(record, 'size', 'conduit_size', 'conduitSize', default='')),
    )


def parse_power_requirements(record: Optional[Dict[str, Any]], equipment: Sequence[EquipmentItem]) -> PowerRequirements:
    """Missing totals default to the equipment sum; missing supply defaults to 0 (reported later)"""
    record = record or {}
    default_total = sum(item.power_draw_w for item in equipment)
    return PowerRequirements(
        total_power_w=_to_float(_get(record, 'total_power_w', 'total_power', 'totalPower', default=default_total),
                                "Total power"),
        available_power_w=_to_float(
            _get(record, 'available_power_w', 'available_power', 'availablePower', default=0),
            "Available power",
        ),
        redundancy=_to_bool(_get(record, 'redundancy', default=False)),
    )


def snapshot_from_dict(data: Dict[str, Any], unit_height: float = DEFAULT_UNIT_HEIGHT) -> RackSnapshot:
    """
    Build a RackSnapshot from decoded JSON.

    Args:
        data: Decoded snapshot document
        unit_height: Pixel height per rack unit when the document has none

    Returns:
        RackSnapshot

    Raises:
        SnapshotError: a required field is missing or malformed
    """
    if not isinstance(data, dict):
        raise SnapshotError("Snapshot must be a JSON object")

    wiring = _get(data, 'wiring_diagram', 'wiringDiagram', default={})
    equipment = tuple(
        parse_equipment(record, i)
        for i, record in enumerate(_to_records(_get(data, 'equipment', default=[]), "Equipment"))
    )
    cable_records = (_get(data, 'cable_runs', 'cableRuns', default=None)
                     or _get(wiring, 'cable_runs', 'cableRuns', default=[]))
    cables = tuple(
        parse_cable_run(record, i) for i, record in enumerate(_to_records(cable_records, "Cable runs"))
    )
    conduit_records = (_get(data, 'conduit_runs', 'conduitRuns', default=None)
                       or _get(wiring, 'conduit_runs', 'conduitRuns', default=[]))
    conduits = tuple(
        parse_conduit_run(record, i) for i, record in enumerate(_to_records(conduit_records, "Conduit runs"))
    )

    try:
        spec = RackSpec(
            total_units=_to_int(_get(data, 'rack_units', 'rackUnits', 'total_units'), "Rack units"),
            unit_height=_to_float(_get(data, 'unit_height', default=unit_height), "Unit height"),
        )
    except InvalidInputError as e:
        raise SnapshotError(str(e)) from e

    return RackSnapshot(
        rack_name=str(_get(data, 'rack_name', 'rackName', default='Rack')),
        spec=spec,
        equipment=equipment,
        cables=cables,
        conduits=conduits,
        power=parse_power_requirements(_get(data, 'power_requirements', 'powerRequirements', default=None),
                                       equipment),
        notes=tuple(str(n) for n in _to_records(
            _get(data, 'installation_notes', 'installationNotes', 'notes', default=[]), "Installation notes")),
    )


def read_snapshot(stream: IO, unit_height: float = DEFAULT_UNIT_HEIGHT, source: str = "Snapshot") -> RackSnapshot:
    """Read a snapshot from an open text or binary stream, such as an uploaded file"""
    try:
        data = json.load(stream)
    except ValueError as e:
        # Also covers undecodable bytes (UnicodeDecodeError)
        raise SnapshotError(f"{source} is not valid JSON: {e}") from e
    return snapshot_from_dict(data, unit_height=unit_height)


def load_snapshot(path: str, unit_height: float = DEFAULT_UNIT_HEIGHT) -> RackSnapshot:
    """Read a snapshot JSON file"""
    with open(path, 'r', encoding='utf-8-sig') as f:
        return read_snapshot(f, unit_height=unit_height, source=path)


# Header aliases for equipment CSV exports (lower-cased)
CSV_COLUMNS = {
    'id': ('id', 'equipment id', 'tag'),
    'name': ('name', 'equipment', 'description'),
    'category': ('category', 'type'),
    'height_units': ('height', 'rack units', 'rack_units', 'height (u)', 'u'),
    'position': ('position', 'start u', 'position (u)'),
    'power_draw_w': ('power', 'watts', 'power (w)', 'power_draw_w'),
    'ports': ('ports', 'port count'),
    'specifications': ('specifications', 'specs'),
}


def _map_headers(headers: List[str]) -> Dict[str, str]:
    mapping = {}
    lowered = {h.lower().strip(): h for h in headers}
    for field_name, aliases in CSV_COLUMNS.items():
        for alias in aliases:
            if alias in lowered:
                mapping[field_name] = lowered[alias]
                break
    return mapping


def parse_equipment_csv(csv_path: str) -> List[EquipmentItem]:
    """
    Parse an equipment list CSV.

    Needs at least height and position columns; other columns are optional.
    Specifications may be separated with ';'.
    """
    try:
        with open(csv_path, 'r', encoding='utf-8-sig', newline='') as f:
            items = _read_equipment_rows(csv.DictReader(f), csv_path)
    except (UnicodeDecodeError, csv.Error) as e:
        raise SnapshotError(f"{csv_path} is not a readable CSV file: {e}") from e

    print(f"📋 Read {len(items)} equipment item(s) from {Path(csv_path).name}")
    return items


def _read_equipment_rows(reader: csv.DictReader, csv_path: str) -> List[EquipmentItem]:
    mapping = _map_headers(reader.fieldnames or [])
    missing = [c for c in ('height_units', 'position') if c not in mapping]
    if missing:
        raise SnapshotError(f"{csv_path}: missing column(s) {', '.join(missing)}")

    items = []
    for index, row in enumerate(reader):
        # Cells beyond the header row land in a list under the None key
        if not any(isinstance(value, str) and value.strip() for value in row.values()):
            continue
        record = {
            field_name: row[header].strip()
            for field_name, header in mapping.items()
            if row.get(header) not in (None, '')
        }
        items.append(parse_equipment(record, index))
    return items
