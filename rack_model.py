"""
Rack Model Module
Value types for rack-mounted equipment, cable runs, conduits and power supply
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from diagnostics import InvalidInputError

RACK_UNIT_INCHES = 1.75
DEFAULT_UNIT_HEIGHT = 30.0  # Diagram pixels per rack unit
DEFAULT_COLOR = "#6B7280"    # Gray - used for anything we don't recognize


def _normalize_key(text: str) -> str:
    return re.sub(r'[^a-z0-9]+', '', (text or '').lower())


class EquipmentCategory(Enum):
    SWITCH = "switch"
    ROUTER = "router"
    PATCH_PANEL = "patch_panel"
    UPS = "ups"
    SERVER = "server"
    MODEM = "modem"
    POE_INJECTOR = "poe_injector"
    OTHER = "other"

    @classmethod
    def parse(cls, text: Optional[str]) -> 'EquipmentCategory':
        """Map a free-form category string to a category (OTHER if unknown)"""
        return _CATEGORY_ALIASES.get(_normalize_key(text), cls.OTHER)

    @property
    def color(self) -> str:
        return _CATEGORY_COLORS.get(self, DEFAULT_COLOR)

    @property
    def label(self) -> str:
        return _CATEGORY_LABELS[self]


_CATEGORY_ALIASES = {
    'switch': EquipmentCategory.SWITCH,
    'networkswitch': EquipmentCategory.SWITCH,
    'router': EquipmentCategory.ROUTER,
    'gateway': EquipmentCategory.ROUTER,
    'panel': EquipmentCategory.PATCH_PANEL,
    'patchpanel': EquipmentCategory.PATCH_PANEL,
    'ups': EquipmentCategory.UPS,
    'server': EquipmentCategory.SERVER,
    'modem': EquipmentCategory.MODEM,
    'poe': EquipmentCategory.POE_INJECTOR,
    'poeinjector': EquipmentCategory.POE_INJECTOR,
}

_CATEGORY_COLORS = {
    EquipmentCategory.SWITCH: '#3B82F6',        # Blue
    EquipmentCategory.ROUTER: '#10B981',        # Green
    EquipmentCategory.PATCH_PANEL: '#F59E0B',   # Amber
    EquipmentCategory.UPS: '#EF4444',           # Red
    EquipmentCategory.SERVER: '#8B5CF6',        # Purple
    EquipmentCategory.MODEM: '#06B6D4',         # Cyan
    EquipmentCategory.POE_INJECTOR: '#84CC16',  # Lime
}

_CATEGORY_LABELS = {
    EquipmentCategory.SWITCH: 'Switch',
    EquipmentCategory.ROUTER: 'Router',
    EquipmentCategory.PATCH_PANEL: 'Patch Panel',
    EquipmentCategory.UPS: 'UPS',
    EquipmentCategory.SERVER: 'Server',
    EquipmentCategory.MODEM: 'Modem',
    EquipmentCategory.POE_INJECTOR: 'PoE Injector',
    EquipmentCategory.OTHER: 'Other',
}


class CableType(Enum):
    CAT6 = "cat6"
    CAT6A = "cat6a"
    FIBER = "fiber"
    COAX = "coax"
    POWER = "power"
    OTHER = "other"

    @classmethod
    def parse(cls, text: Optional[str]) -> 'CableType':
        """Map 'Cat6', 'twisted-pair-cat6a', 'Fibre' etc. to a cable type (OTHER if unknown)"""
        key = _normalize_key(text)
        if key.startswith('twistedpair'):
            key = key[len('twistedpair'):]
        return _CABLE_ALIASES.get(key, cls.OTHER)

    @property
    def color(self) -> str:
        return _CABLE_COLORS.get(self, DEFAULT_COLOR)

    @property
    def label(self) -> str:
        return _CABLE_LABELS[self]


_CABLE_ALIASES = {
    'cat6': CableType.CAT6,
    'cat6a': CableType.CAT6A,
    'fiber': CableType.FIBER,
    'fibre': CableType.FIBER,
    'coax': CableType.COAX,
    'rg6': CableType.COAX,
    'power': CableType.POWER,
}

_CABLE_COLORS = {
    CableType.CAT6: '#3B82F6',
    CableType.CAT6A: '#1D4ED8',
    CableType.FIBER: '#F59E0B',
    CableType.COAX: '#6B7280',
    CableType.POWER: '#EF4444',
}

_CABLE_LABELS = {
    CableType.CAT6: 'Cat6',
    CableType.CAT6A: 'Cat6A',
    CableType.FIBER: 'Fiber',
    CableType.COAX: 'Coax',
    CableType.POWER: 'Power',
    CableType.OTHER: 'Other',
}


class RiskLevel(Enum):
    NOMINAL = "Nominal"
    WARNING = "Warning"


@dataclass(frozen=True)
class RackSpec:
    """Physical envelope of the rack"""
    total_units: int
    unit_height: float = DEFAULT_UNIT_HEIGHT

    def __post_init__(self):
        if isinstance(self.total_units, bool) or not isinstance(self.total_units, int) or self.total_units < 1:
            raise InvalidInputError(f"Rack must have a positive whole number of units, got {self.total_units!r}")
        if self.unit_height <= 0:
            raise InvalidInputError(f"Rack unit height must be positive, got {self.unit_height!r}")

    @property
    def pixel_height(self) -> float:
        return self.total_units * self.unit_height

    @property
    def height_inches(self) -> float:
        return self.total_units * RACK_UNIT_INCHES


@dataclass(frozen=True)
class Connection:
    """A patch from one rack item to a peer device"""
    device_id: str
    device_name: str
    cable_type: CableType = CableType.OTHER
    port_number: Optional[int] = None


@dataclass(frozen=True)
class EquipmentItem:
    """A rack-mounted piece of equipment (position is 1-based from the bottom)"""
    id: str
    name: str
    category: EquipmentCategory
    height_units: int
    position: int
    power_draw_w: float = 0.0
    ports: Optional[int] = None
    specifications: Tuple[str, ...] = ()
    connections: Tuple[Connection, ...] = ()

    @property
    def top_unit(self) -> int:
        return self.position + self.height_units - 1

    @property
    def occupied_units(self) -> range:
        return range(self.position, self.top_unit + 1)

    @property
    def unit_label(self) -> str:
        if self.height_units > 1:
            return f"U{self.position}-U{self.top_unit}"
        return f"U{self.position}"


@dataclass(frozen=True)
class CableEndpoint:
    device: str
    port: Optional[str] = None

    def __str__(self) -> str:
        if self.port:
            return f"{self.device} (port {self.port})"
        return self.device


@dataclass(frozen=True)
class CableRun:
    """A cable between two endpoints, with the path segments it passes through"""
    id: str
    source: CableEndpoint
    destination: CableEndpoint
    cable_type: CableType
    length: float
    route: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ConduitRun:
    id: str
    path: Tuple[str, ...]
    declared_cable_count: int
    size: str = ""


@dataclass(frozen=True)
class PowerRequirements:
    """Caller-supplied power figures; total_power_w is checked, never trusted"""
    total_power_w: float
    available_power_w: float
    redundancy: bool = False


@dataclass(frozen=True)
class RackSnapshot:
    """Everything needed to produce one rack installation guide"""
    rack_name: str
    spec: RackSpec
    equipment: Tuple[EquipmentItem, ...] = ()
    cables: Tuple[CableRun, ...] = ()
    conduits: Tuple[ConduitRun, ...] = ()
    power: PowerRequirements = field(default_factory=lambda: PowerRequirements(0.0, 0.0))
    notes: Tuple[str, ...] = ()
