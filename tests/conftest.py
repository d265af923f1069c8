import sys
from pathlib import Path


def _add_repo_root_to_path() -> None:
    repo_root = Path(__file__).resolve().parent.parent
    if str(repo_root) not in sys.path:
        sys.path.insert(0, str(repo_root))


_add_repo_root_to_path()

import pytest

from rack_model import (
    CableEndpoint, CableRun, CableType, Connection, ConduitRun, EquipmentCategory,
    EquipmentItem, PowerRequirements, RackSnapshot, RackSpec,
)


def make_item(item_id, position, height=1, power=0.0, category=EquipmentCategory.SWITCH, **kwargs):
    return EquipmentItem(
        id=item_id,
        name=kwargs.pop("name", f"Device {item_id}"),
        category=category,
        height_units=height,
        position=position,
        power_draw_w=power,
        **kwargs,
    )


def make_cable(run_id, cable_type=CableType.CAT6, route=(), length=25.0):
    return CableRun(
        id=run_id,
        source=CableEndpoint("Patch Panel", port="1"),
        destination=CableEndpoint(f"Room {run_id}"),
        cable_type=cable_type,
        length=length,
        route=tuple(route),
    )


@pytest.fixture
def closet_snapshot():
    """A clean 12U network closet: no overlaps, 80% power, consistent conduit"""
    equipment = (
        make_item("ups", 1, height=2, power=0.0, category=EquipmentCategory.UPS, name="1500VA UPS"),
        make_item("router", 3, power=50.0, category=EquipmentCategory.ROUTER, name="Main Router",
                  connections=(Connection("switch", "24-Port Switch", CableType.CAT6, 1),)),
        make_item("switch", 4, power=150.0, ports=24, name="24-Port Switch"),
        make_item("panel", 5, category=EquipmentCategory.PATCH_PANEL, ports=24, name="Patch Panel"),
        make_item("nvr", 6, height=2, power=200.0, category=EquipmentCategory.SERVER, name="NVR"),
    )
    cables = (
        make_cable("CR-1", route=("Closet", "Attic", "Office")),
        make_cable("CR-2", route=("Closet", "Attic", "Bedroom")),
        make_cable("CR-3", cable_type=CableType.FIBER, route=("Closet", "Garage")),
    )
    conduits = (ConduitRun("C-1", ("Closet", "Attic"), declared_cable_count=2, size="1in"),)
    return RackSnapshot(
        rack_name="Network Closet",
        spec=RackSpec(12),
        equipment=equipment,
        cables=cables,
        conduits=conduits,
        power=PowerRequirements(total_power_w=400.0, available_power_w=500.0, redundancy=True),
        notes=("Leave 6 inches of clearance behind the rack",),
    )
