"""
Site Cost Reporting Service (``sitecost_modules.reporting.service``).

Responsibility
--------------
Orchestrates report generation: raw records -> ingestion (under the
validation policy) -> period and activity filter -> day grouping ->
aggregation -> assembly.  This is a **read-only** service; it holds no
state between calls and never mutates its inputs.

Architecture position
---------------------
**Modules layer** -- thin glue.  ``CostReportService`` is the sole public
entry point for site cost reports and stats.  Constructor: ``clock`` +
``config``.

Invariants enforced
-------------------
* All monetary amounts use ``Money`` -- NEVER ``float``.
* Generation time comes from the injected clock (or the caller's context);
  nothing here calls ``datetime.now()``.
* Spend inclusion is decided only by the aggregation engine's classifier.

Failure modes
-------------
* Invalid record under the ABORT policy -> the IngestionError propagates
  and no report is produced.
* Period start after end -> ``InvalidReportPeriodError``.

Audit relevance
---------------
Structured log events carry a per-report ``report_id`` (via LogContext)
together with counts and totals.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any
from uuid import uuid4

from sitecost_kernel.domain.clock import Clock, SystemClock
from sitecost_kernel.domain.values import Currency
from sitecost_kernel.logging_config import LogContext, get_logger
from sitecost_engines.aggregation import AggregationEngine, AggregationResult, CostSummary
from sitecost_engines.grouping import DateGrouper, GroupedActivities
from sitecost_ingestion.domain.types import IngestionResult, ValidationPolicy
from sitecost_ingestion.services.ingestion_service import IngestionService
from sitecost_modules.reporting.assembly import build_report_document, build_report_period
from sitecost_modules.reporting.config import ReportingConfig
from sitecost_modules.reporting.models import ReportContext, ReportDocument, ReportRequest

logger = get_logger("modules.reporting.service")


@dataclass(frozen=True)
class _PipelineResult:
    ingestion: IngestionResult
    grouped: GroupedActivities
    aggregation: AggregationResult
    policy: ValidationPolicy


class CostReportService:
    """
    Site cost report generation service.

    Contract
    --------
    * ``generate_report`` returns a ``ReportDocument``; ``stats`` returns
      only its ``CostSummary``.
    * Both accept raw backend records (dicts in the backend's camelCase
      shape) and apply the same pipeline.

    Guarantees
    ----------
    * Clock is injectable for deterministic testing.
    * Identical inputs and clock give identical documents.

    Non-goals
    ---------
    * Does NOT fetch records, render PDFs or write files.
    """

    def __init__(
        self,
        clock: Clock | None = None,
        config: ReportingConfig | None = None,
    ):
        self._clock = clock or SystemClock()
        self._config = config or ReportingConfig.with_defaults()
        self._currency = Currency(self._config.currency)
        self._grouper = DateGrouper(self._config.timezone)
        self._engine = AggregationEngine()
        self._ingestion = IngestionService(
            currency=self._currency,
            timezone=self._config.timezone,
            validation_policy=self._config.validation_policy,
            cost_pair_policy=self._config.cost_pair_policy,
            tolerance=self._config.cost_pair_tolerance,
        )

        logger.info(
            "cost_report_service_initialized",
            extra={
                "currency": self._currency.code,
                "timezone": self._config.timezone,
                "validation_policy": self._config.validation_policy.value,
                "cost_pair_policy": self._config.cost_pair_policy.value,
            },
        )

    @property
    def config(self) -> ReportingConfig:
        return self._config

    # =========================================================================
    # Internal helpers
    # =========================================================================

    def _run(
        self,
        activities: Iterable[Any],
        labor: Iterable[Any],
        request: ReportRequest,
    ) -> _PipelineResult:
        policy = request.policy or self._config.validation_policy
        ingestion = self._ingestion.ingest(activities, labor, policy)

        selected = self._grouper.filter_period(
            ingestion.activities, request.period_start, request.period_end,
        )
        selected = tuple(a for a in selected if request.activity_filter.admits(a.kind))

        grouped = self._grouper.group(selected)
        aggregation = self._engine.aggregate(grouped, ingestion.labor, self._currency)
        return _PipelineResult(
            ingestion=ingestion,
            grouped=grouped,
            aggregation=aggregation,
            policy=policy,
        )

    # =========================================================================
    # Public API
    # =========================================================================

    def generate_report(
        self,
        activities: Iterable[Any],
        labor: Iterable[Any] = (),
        context: ReportContext | None = None,
        request: ReportRequest | None = None,
    ) -> ReportDocument:
        """
        Build a complete site cost report from raw records.

        Raises:
            IngestionError: an invalid record under the ABORT policy.
        """
        context = context or ReportContext()
        request = request or ReportRequest()
        report_id = str(uuid4())
        project_id = context.project.id if context.project else None

        with LogContext.bind(report_id=report_id, project_id=project_id):
            logger.info(
                "cost_report_started",
                extra={
                    "activity_filter": request.activity_filter.value,
                    "period_start": request.period_start,
                    "period_end": request.period_end,
                },
            )
            result = self._run(activities, labor, request)

            generated_at = context.generated_at or self._clock.now()
            document = build_report_document(
                context,
                build_report_period(result.grouped, request),
                result.grouped,
                result.aggregation,
                generated_at=generated_at.isoformat(),
                timezone=self._config.timezone,
                default_company=self._config.company,
                activity_filter=request.activity_filter,
                validation_policy=result.policy,
                skipped=result.ingestion.skipped,
                warnings=result.ingestion.warnings,
            )

            summary = document.summary
            logger.info(
                "cost_report_generated",
                extra={
                    "day_count": len(document.days),
                    "activity_count": summary.total_activities,
                    "total_material_cost": str(summary.total_material_cost.amount),
                    "total_labor_cost": str(summary.total_labor_cost.amount),
                    "total_project_cost": str(summary.total_project_cost.amount),
                    "skipped_count": len(document.skipped),
                    "warning_count": len(document.warnings),
                },
            )
        return document

    def stats(
        self,
        activities: Iterable[Any],
        labor: Iterable[Any] = (),
        request: ReportRequest | None = None,
    ) -> CostSummary:
        """Totals and counts only, for a lightweight stats endpoint."""
        request = request or ReportRequest()
        with LogContext.bind(report_id=str(uuid4())):
            result = self._run(activities, labor, request)
            logger.info(
                "cost_stats_computed",
                extra={
                    "activity_count": result.aggregation.summary.total_activities,
                    "total_project_cost": str(
                        result.aggregation.summary.total_project_cost.amount
                    ),
                },
            )
        return result.aggregation.summary
