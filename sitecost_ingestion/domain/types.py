"""
sitecost_ingestion.domain.types -- Pure frozen dataclasses for record ingestion.

ZERO I/O. Imports only from sitecost_kernel.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from sitecost_kernel.domain.activities import LaborEntry, MaterialActivity
from sitecost_kernel.exceptions import SiteCostError


# =============================================================================
# Policies
# =============================================================================


class ValidationPolicy(str, Enum):
    """What to do with a raw record that cannot become a domain entity."""

    ABORT = "abort"  # First invalid record raises; no report
    BEST_EFFORT = "best_effort"  # Skip invalid records, report them


class CostPairPolicy(str, Enum):
    """What to do when per_unit_cost x quantity misses total_cost."""

    WARN = "warn"  # Keep the line, record a CostWarning
    REJECT = "reject"  # Treat the line as invalid


class RecordType(str, Enum):
    ACTIVITY = "activity"
    LABOR = "labor"


# =============================================================================
# Findings
# =============================================================================


@dataclass(frozen=True)
class SkippedItem:
    """A record dropped under the best-effort policy, and why."""

    record_type: RecordType
    record_id: str | None
    field: str | None
    code: str
    message: str

    @classmethod
    def from_error(
        cls,
        record_type: RecordType,
        record_id: str | None,
        error: SiteCostError,
    ) -> SkippedItem:
        return cls(
            record_type=record_type,
            record_id=record_id,
            field=getattr(error, "field", None),
            code=error.code,
            message=str(error),
        )


@dataclass(frozen=True)
class CostWarning:
    """A record that was kept but looks suspicious."""

    record_type: RecordType
    record_id: str | None
    field: str | None
    code: str
    message: str


# =============================================================================
# Result
# =============================================================================


@dataclass(frozen=True)
class IngestionResult:
    """Typed entities built from one batch of raw records."""

    activities: tuple[MaterialActivity, ...] = ()
    labor: tuple[LaborEntry, ...] = ()
    skipped: tuple[SkippedItem, ...] = ()
    warnings: tuple[CostWarning, ...] = ()

    @property
    def has_skipped(self) -> bool:
        return bool(self.skipped)
