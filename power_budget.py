"""
Power Budget Module
Totals equipment power draw, compares it against the available supply and flags capacity risk
"""

import math
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from diagnostics import Diagnostic, DiagnosticKind, InvalidInputError
from rack_model import EquipmentCategory, EquipmentItem, PowerRequirements, RiskLevel

# Utilization above this percentage is a capacity warning (80.0 itself is nominal)
POWER_WARNING_THRESHOLD_PCT = 80.0

WATTS_TO_BTU_HR = 3.412
WATTS_PER_CFM = 3.41               # Rough airflow estimate used for rack cooling
UPS_RECOMMENDED_ABOVE_W = 500
DEDICATED_CIRCUIT_ABOVE_W = 1800   # ~80% of a 15A/120V branch circuit


@dataclass(frozen=True)
class PowerShare:
    """One item's slice of the total consumption"""
    item_id: str
    name: str
    category: EquipmentCategory
    power_w: float
    share_pct: float


@dataclass(frozen=True)
class PowerReport:
    total_w: float
    supplied_total_w: float
    available_w: float
    utilization_pct: float
    risk: RiskLevel
    redundancy: bool
    breakdown: Tuple[PowerShare, ...] = ()
    diagnostics: Tuple[Diagnostic, ...] = ()

    @property
    def headroom_w(self) -> float:
        return self.available_w - self.total_w

    @property
    def is_over_capacity(self) -> bool:
        return self.risk == RiskLevel.WARNING

    @property
    def heat_load_btu_hr(self) -> float:
        return self.total_w * WATTS_TO_BTU_HR

    @property
    def cooling_cfm(self) -> int:
        return math.ceil(self.total_w / WATTS_PER_CFM)

    @property
    def ups_recommended(self) -> bool:
        return self.total_w > UPS_RECOMMENDED_ABOVE_W

    @property
    def circuit_recommendation(self) -> str:
        if self.total_w > DEDICATED_CIRCUIT_ABOVE_W:
            return "20A dedicated circuit"
        return "15A circuit sufficient"


def classify_risk(utilization_pct: float) -> RiskLevel:
    if utilization_pct > POWER_WARNING_THRESHOLD_PCT:
        return RiskLevel.WARNING
    return RiskLevel.NOMINAL


def analyze_power(
    items: Sequence[EquipmentItem],
    requirements: PowerRequirements,
    tolerance_w: float = 0.0
) -> PowerReport:
    """
    Build the power budget for a rack.

    The total is always recomputed from the items; a caller-supplied total that
    differs by more than tolerance_w is reported as a DataIntegrityWarning.

    Args:
        items: Equipment in the rack
        requirements: Supplied total, available supply and redundancy flag
        tolerance_w: Allowed difference between supplied and recomputed totals

    Returns:
        PowerReport with utilization, risk and per-item breakdown

    Raises:
        InvalidInputError: available power is zero, negative or not a finite number
    """
    if not math.isfinite(requirements.available_power_w) or requirements.available_power_w <= 0:
        raise InvalidInputError(
            f"Available power must be a positive number, got {requirements.available_power_w}W"
        )

    diagnostics: List[Diagnostic] = []
    draws = []
    for item in items:
        draw = item.power_draw_w
        if draw < 0:
            diagnostics.append(Diagnostic(
                DiagnosticKind.DATA_INTEGRITY_WARNING,
                f"'{item.id}' reports negative draw ({draw}W); counted as 0W",
                subject_ids=(item.id,),
            ))
            draw = 0.0
        draws.append((item, draw))

    total_w = sum(draw for _, draw in draws)

    mismatch = abs(total_w - requirements.total_power_w)
    if mismatch > tolerance_w and not math.isclose(total_w, requirements.total_power_w):
        diagnostics.append(Diagnostic(
            DiagnosticKind.DATA_INTEGRITY_WARNING,
            f"Supplied total power {requirements.total_power_w:g}W does not match "
            f"equipment sum {total_w:g}W",
        ))

    breakdown = []
    for item, draw in draws:
        share = draw * 100 / total_w if total_w > 0 else 0.0
        breakdown.append(PowerShare(item.id, item.name, item.category, draw, share))

    utilization = total_w * 100 / requirements.available_power_w

    return PowerReport(
        total_w=total_w,
        supplied_total_w=requirements.total_power_w,
        available_w=requirements.available_power_w,
        utilization_pct=utilization,
        risk=classify_risk(utilization),
        redundancy=requirements.redundancy,
        breakdown=tuple(breakdown),
        diagnostics=tuple(diagnostics),
    )
