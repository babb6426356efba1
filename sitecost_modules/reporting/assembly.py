"""
Pure report assembly (``sitecost_modules.reporting.assembly``).

Combines aggregation output with caller-supplied context into a
``ReportDocument``. No I/O, no clock access, no rendering, no file names.
"""

from __future__ import annotations

from collections.abc import Sequence

from sitecost_kernel.exceptions import ReportError
from sitecost_kernel.logging_config import get_logger
from sitecost_engines.aggregation import AggregationResult
from sitecost_engines.grouping import DateGrouper, GroupedActivities
from sitecost_ingestion.domain.types import CostWarning, SkippedItem, ValidationPolicy
from sitecost_modules.reporting.config import CompanyInfo
from sitecost_modules.reporting.models import (
    ActivityFilter,
    ReportContext,
    ReportDocument,
    ReportHeader,
    ReportPeriod,
    ReportRequest,
)

logger = get_logger("modules.reporting.assembly")


def build_report_period(
    grouped: GroupedActivities,
    request: ReportRequest | None = None,
) -> ReportPeriod:
    """Requested bounds plus the earliest and latest day present."""
    covered = DateGrouper.period_of(grouped)
    return ReportPeriod(
        requested_start=request.period_start if request else None,
        requested_end=request.period_end if request else None,
        first_activity_date=covered[0] if covered else None,
        last_activity_date=covered[1] if covered else None,
    )


def build_report_document(
    context: ReportContext,
    period: ReportPeriod,
    grouped: GroupedActivities,
    aggregation: AggregationResult,
    *,
    generated_at: str,
    timezone: str,
    default_company: CompanyInfo | None = None,
    activity_filter: ActivityFilter = ActivityFilter.ALL,
    validation_policy: ValidationPolicy = ValidationPolicy.ABORT,
    skipped: Sequence[SkippedItem] = (),
    warnings: Sequence[CostWarning] = (),
) -> ReportDocument:
    """
    Assemble header, summary, day sections and labor into a document.

    Raises:
        ReportError: ``aggregation`` was not computed from ``grouped``.
    """
    day_keys = tuple(bucket.date for bucket in aggregation.buckets)
    if day_keys != grouped.ordered_dates:
        raise ReportError("Aggregation buckets do not match grouped activity dates")

    project = context.project
    header = ReportHeader(
        company=context.company or default_company or CompanyInfo(),
        project_id=project.id if project else None,
        project_name=project.name if project else None,
        prepared_by=context.prepared_by,
        generated_at=generated_at,
        currency=aggregation.summary.total_project_cost.currency.code,
        timezone=timezone,
        period=period,
        activity_filter=activity_filter,
        validation_policy=validation_policy,
    )

    logger.debug(
        "report_document_assembled",
        extra={
            "day_count": len(aggregation.buckets),
            "skipped_count": len(skipped),
            "warning_count": len(warnings),
        },
    )
    return ReportDocument(
        header=header,
        summary=aggregation.summary,
        days=aggregation.buckets,
        labor=aggregation.labor,
        skipped=tuple(skipped),
        warnings=tuple(warnings),
    )
