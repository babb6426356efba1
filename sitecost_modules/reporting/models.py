"""
Site Cost Reporting Domain Models (``sitecost_modules.reporting.models``).

Responsibility
--------------
Frozen dataclass value objects for a site cost report: the caller-supplied
context, the request (period and activity filter), the header, and the
assembled ``ReportDocument``.

Architecture position
---------------------
**Modules layer** -- pure data definitions with ZERO I/O.  Consumed by
``CostReportService`` and returned to callers.

Invariants enforced
-------------------
* All models are ``frozen=True`` (immutable after construction).
* All monetary fields use ``Money`` -- NEVER ``float``.
* ``ReportRequest`` rejects a period whose start is after its end.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum

from sitecost_kernel.domain.activities import ActivityKind, ProjectRef
from sitecost_kernel.exceptions import InvalidReportPeriodError
from sitecost_engines.aggregation import CostSummary, DailyBucket, LaborSummary
from sitecost_ingestion.domain.types import CostWarning, SkippedItem, ValidationPolicy
from sitecost_modules.reporting.config import CompanyInfo


# =========================================================================
# Enums
# =========================================================================


class ActivityFilter(str, Enum):
    """Which activity kinds a report includes."""

    ALL = "all"
    IMPORTED = "imported"
    USED = "used"
    TRANSFERRED = "transferred"

    def admits(self, kind: ActivityKind) -> bool:
        return self is ActivityFilter.ALL or self.value == kind.value


# =========================================================================
# Inputs
# =========================================================================


@dataclass(frozen=True)
class ReportContext:
    """Header metadata supplied by the caller; never read from globals."""

    project: ProjectRef | None = None
    company: CompanyInfo | None = None
    prepared_by: str | None = None
    generated_at: datetime | None = None  # None: use the service clock


@dataclass(frozen=True)
class ReportRequest:
    """Date range, activity filter and validation policy for one report."""

    period_start: date | None = None
    period_end: date | None = None
    activity_filter: ActivityFilter = ActivityFilter.ALL
    policy: ValidationPolicy | None = None  # None: config default

    def __post_init__(self):
        if (
            self.period_start is not None
            and self.period_end is not None
            and self.period_start > self.period_end
        ):
            raise InvalidReportPeriodError(
                self.period_start.isoformat(), self.period_end.isoformat(),
            )
        object.__setattr__(self, "activity_filter", ActivityFilter(self.activity_filter))
        if self.policy is not None:
            object.__setattr__(self, "policy", ValidationPolicy(self.policy))


# =========================================================================
# Output
# =========================================================================


@dataclass(frozen=True)
class ReportPeriod:
    """Requested bounds and the days actually covered by activities."""

    requested_start: date | None = None
    requested_end: date | None = None
    first_activity_date: date | None = None
    last_activity_date: date | None = None


@dataclass(frozen=True)
class ReportHeader:
    """Metadata printed at the top of every site cost report."""

    company: CompanyInfo
    project_id: str | None
    project_name: str | None
    prepared_by: str | None
    generated_at: str  # ISO format timestamp
    currency: str
    timezone: str
    period: ReportPeriod
    activity_filter: ActivityFilter
    validation_policy: ValidationPolicy


@dataclass(frozen=True)
class ReportDocument:
    """
    Complete site cost report.

    ``days`` are newest first; each activity inside carries its display
    total and whether it counted toward spend.
    """

    header: ReportHeader
    summary: CostSummary
    days: tuple[DailyBucket, ...]
    labor: LaborSummary
    skipped: tuple[SkippedItem, ...] = ()
    warnings: tuple[CostWarning, ...] = ()

    @property
    def is_complete(self) -> bool:
        """True when no input record was skipped."""
        return not self.skipped
