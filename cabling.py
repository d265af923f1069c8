"""
Cabling Module
Groups cable runs by type and cross-checks conduit cable counts against the runs routed through them
"""

from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from diagnostics import Diagnostic, DiagnosticKind
from rack_model import CableRun, CableType, ConduitRun


@dataclass(frozen=True)
class CableGroup:
    cable_type: CableType
    runs: Tuple[CableRun, ...]

    @property
    def color(self) -> str:
        return self.cable_type.color

    @property
    def count(self) -> int:
        return len(self.runs)

    @property
    def total_length(self) -> float:
        return sum(run.length for run in self.runs)


@dataclass(frozen=True)
class ConduitCheck:
    """Declared vs. observed cable count for one conduit"""
    conduit: ConduitRun
    observed_count: int
    matched_run_ids: Tuple[str, ...] = ()

    @property
    def is_consistent(self) -> bool:
        return self.observed_count == self.conduit.declared_cable_count


@dataclass(frozen=True)
class CablingReport:
    groups: Tuple[CableGroup, ...] = ()
    conduit_checks: Tuple[ConduitCheck, ...] = ()
    diagnostics: Tuple[Diagnostic, ...] = ()

    @property
    def total_runs(self) -> int:
        return sum(group.count for group in self.groups)

    @property
    def total_length(self) -> float:
        return sum(group.total_length for group in self.groups)

    def group_for(self, cable_type: CableType):
        for group in self.groups:
            if group.cable_type == cable_type:
                return group
        return None


def group_by_type(cables: Sequence[CableRun]) -> List[CableGroup]:
    """Group runs by cable type, keeping input order within and across groups"""
    grouped: Dict[CableType, List[CableRun]] = {}
    for run in cables:
        grouped.setdefault(run.cable_type, []).append(run)
    return [CableGroup(cable_type, tuple(runs)) for cable_type, runs in grouped.items()]


def runs_through(conduit: ConduitRun, cables: Sequence[CableRun]) -> List[CableRun]:
    """Runs whose route covers every waypoint on the conduit's path"""
    path = set(conduit.path)
    return [run for run in cables if path.issubset(run.route)]


def aggregate_cabling(cables: Sequence[CableRun], conduits: Sequence[ConduitRun]) -> CablingReport:
    """
    Summarize cable runs and check conduit fill.

    Matching is by waypoint names only, so a mismatch is advisory: it is
    reported as a ConduitCountMismatch warning, never as an error.

    Args:
        cables: Cable runs in presentation order
        conduits: Conduit runs with declared cable counts

    Returns:
        CablingReport with type groups, per-conduit checks and warnings
    """
    checks = []
    diagnostics = []

    for conduit in conduits:
        matched = runs_through(conduit, cables)
        check = ConduitCheck(conduit, len(matched), tuple(run.id for run in matched))
        checks.append(check)
        if not check.is_consistent:
            diagnostics.append(Diagnostic(
                DiagnosticKind.CONDUIT_COUNT_MISMATCH,
                f"Conduit '{conduit.id}' declares {conduit.declared_cable_count} cable(s) "
                f"but {check.observed_count} run(s) are routed through it",
                subject_ids=(conduit.id,),
            ))

    return CablingReport(
        groups=tuple(group_by_type(cables)),
        conduit_checks=tuple(checks),
        diagnostics=tuple(diagnostics),
    )
