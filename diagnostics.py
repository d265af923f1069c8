"""
Diagnostics Module
Warnings and errors collected while analyzing a rack snapshot
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"


class DiagnosticKind(Enum):
    OUT_OF_BOUNDS = "OutOfBounds"
    LAYOUT_CONFLICT = "LayoutConflict"
    DUPLICATE_IDENTIFIER = "DuplicateIdentifier"
    INVALID_INPUT = "InvalidInput"
    CONDUIT_COUNT_MISMATCH = "ConduitCountMismatch"
    DATA_INTEGRITY_WARNING = "DataIntegrityWarning"

    @property
    def default_severity(self) -> Severity:
        if self in (DiagnosticKind.OUT_OF_BOUNDS, DiagnosticKind.LAYOUT_CONFLICT,
                    DiagnosticKind.INVALID_INPUT):
            return Severity.ERROR
        return Severity.WARNING


@dataclass(frozen=True)
class Diagnostic:
    """A single non-fatal finding, surfaced next to a best-effort result"""
    kind: DiagnosticKind
    message: str
    subject_ids: Tuple[str, ...] = ()
    unit_range: Optional[Tuple[int, int]] = None  # (first U, last U) inclusive

    @property
    def severity(self) -> Severity:
        return self.kind.default_severity

    @property
    def label(self) -> str:
        return self.kind.value


def out_of_bounds(item_id: str, message: str) -> Diagnostic:
    return Diagnostic(DiagnosticKind.OUT_OF_BOUNDS, message, subject_ids=(item_id,))


def layout_conflict(first_id: str, second_id: str, first_u: int, last_u: int) -> Diagnostic:
    if first_u == last_u:
        span = f"U{first_u}"
    else:
        span = f"U{first_u}-U{last_u}"
    return Diagnostic(
        DiagnosticKind.LAYOUT_CONFLICT,
        f"'{first_id}' and '{second_id}' overlap at {span}",
        subject_ids=(first_id, second_id),
        unit_range=(first_u, last_u),
    )


class RackEngineError(Exception):
    """Base class for errors raised by the rack engine"""


class InvalidInputError(RackEngineError, ValueError):
    """
    Raised when an input makes a computation undefined (e.g. zero available power).
    Carries the equivalent Diagnostic so callers can list it instead of failing.
    """

    def __init__(self, message: str, subject_ids: Tuple[str, ...] = ()):
        super().__init__(message)
        self.diagnostic = Diagnostic(DiagnosticKind.INVALID_INPUT, message, subject_ids=subject_ids)


class SnapshotError(RackEngineError, ValueError):
    """Raised when a snapshot file or record cannot be read"""
