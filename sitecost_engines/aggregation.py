"""
Module: sitecost_engines.aggregation
Responsibility:
    Sum normalized, classified, day-grouped material activities and labor
    entries into per-day and overall cost totals.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Spend inclusion is decided by ActivityClassifier, consulted exactly
      once per activity; the result is carried on ActivityCost and every
      total reads that flag.
    - day_material_total = sum of line totals of spend-counting activities.
    - total_material_cost = sum of day_material_total over all buckets.
    - total_project_cost = total_material_cost + total_labor_cost.
    - Sum of labor category subtotals = total_labor_cost.
    - Full Decimal precision; no rounding until display.
    - Inputs are never mutated; identical inputs give identical results.

Failure modes:
    - CurrencyMismatchError when amounts in different currencies meet.

Usage:
    engine = AggregationEngine()
    result = engine.aggregate(grouped, labor_entries, Currency("INR"))
    result.summary.total_project_cost
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date

from sitecost_kernel.domain.activities import (
    ActivityKind,
    LaborEntry,
    MaterialActivity,
)
from sitecost_kernel.domain.values import Currency, Money
from sitecost_kernel.logging_config import get_logger
from sitecost_engines.classifier import ActivityClassifier, SpendCategory
from sitecost_engines.grouping import GroupedActivities
from sitecost_engines.tracer import traced_engine

logger = get_logger("engines.aggregation")


@dataclass(frozen=True)
class KindCounts:
    """Number of activities (not line items) per activity kind."""

    imported: int = 0
    used: int = 0
    transferred: int = 0

    @property
    def total(self) -> int:
        return self.imported + self.used + self.transferred

    def for_kind(self, kind: ActivityKind) -> int:
        return getattr(self, kind.value)

    def as_dict(self) -> dict[str, int]:
        return {k.value: self.for_kind(k) for k in ActivityKind}


@dataclass(frozen=True)
class ActivityCost:
    """An activity with its display total and spend classification."""

    activity: MaterialActivity
    activity_total: Money  # sum of all line totals, spend or not
    spend_category: SpendCategory
    counts_toward_spend: bool

    @property
    def spend_contribution(self) -> Money:
        if self.counts_toward_spend:
            return self.activity_total
        return Money.zero(self.activity_total.currency)


@dataclass(frozen=True)
class DailyBucket:
    """One calendar day of activities and its material spend."""

    date: date
    entries: tuple[ActivityCost, ...]
    day_material_total: Money

    @property
    def activities(self) -> tuple[MaterialActivity, ...]:
        return tuple(e.activity for e in self.entries)

    @property
    def date_key(self) -> str:
        return self.date.isoformat()


@dataclass(frozen=True)
class CostSummary:
    """Report-wide totals; also served as-is by a stats endpoint."""

    total_activities: int
    counts_by_kind: KindCounts
    total_material_cost: Money
    total_labor_cost: Money
    total_project_cost: Money


@dataclass(frozen=True)
class LaborCategoryTotal:
    """Labor subtotal for one category, in first-seen order."""

    category: str
    entry_count: int
    worker_count: int
    total_cost: Money


@dataclass(frozen=True)
class LaborSummary:
    """Labor entries with category subtotals and the labor grand total."""

    entries: tuple[LaborEntry, ...]
    by_category: tuple[LaborCategoryTotal, ...]
    total_cost: Money

    @property
    def worker_count(self) -> int:
        return sum(e.count for e in self.entries)


@dataclass(frozen=True)
class AggregationResult:
    """Everything the report model needs from aggregation."""

    buckets: tuple[DailyBucket, ...]
    labor: LaborSummary
    summary: CostSummary


class AggregationEngine:
    """
    Pure summation over normalized, classified, grouped data.

    Contract:
        No I/O, fully deterministic, associative summation.
    Guarantees:
        - Material total equals the sum of day totals; project total
          equals material plus labor.
        - ``aggregate`` called twice on the same input returns equal results.
    Non-goals:
        - Does not normalize costs (done at ingestion) or round amounts.
    """

    def __init__(self, classifier: ActivityClassifier | None = None):
        self._classifier = classifier or ActivityClassifier()

    # ------------------------------------------------------------------
    # Per-activity
    # ------------------------------------------------------------------

    def activity_total(self, activity: MaterialActivity, currency: Currency) -> Money:
        """Sum of an activity's line totals, regardless of classification."""
        return Money.total((line.total_cost for line in activity.materials), currency)

    def cost_activity(self, activity: MaterialActivity, currency: Currency) -> ActivityCost:
        """Attach the display total and the single spend decision."""
        category = self._classifier.classify(activity.kind)
        return ActivityCost(
            activity=activity,
            activity_total=self.activity_total(activity, currency),
            spend_category=category,
            counts_toward_spend=category is SpendCategory.NEW_SPEND,
        )

    # ------------------------------------------------------------------
    # Per-day
    # ------------------------------------------------------------------

    @staticmethod
    def _spend_total(entries: Iterable[ActivityCost], currency: Currency) -> Money:
        return Money.total((e.spend_contribution for e in entries), currency)

    def day_material_total(
        self,
        activities: Sequence[MaterialActivity],
        currency: Currency,
    ) -> Money:
        """Material spend of one day's activities."""
        entries = [self.cost_activity(a, currency) for a in activities]
        return self._spend_total(entries, currency)

    def build_bucket(
        self,
        day: date,
        activities: Sequence[MaterialActivity],
        currency: Currency,
    ) -> DailyBucket:
        entries = tuple(self.cost_activity(a, currency) for a in activities)
        return DailyBucket(
            date=day,
            entries=entries,
            day_material_total=self._spend_total(entries, currency),
        )

    # ------------------------------------------------------------------
    # Counts and labor
    # ------------------------------------------------------------------

    @staticmethod
    def count_by_kind(activities: Iterable[MaterialActivity]) -> KindCounts:
        counts = {kind: 0 for kind in ActivityKind}
        for activity in activities:
            counts[activity.kind] += 1
        return KindCounts(
            imported=counts[ActivityKind.IMPORTED],
            used=counts[ActivityKind.USED],
            transferred=counts[ActivityKind.TRANSFERRED],
        )

    @staticmethod
    def labor_total(entries: Iterable[LaborEntry], currency: Currency) -> Money:
        return Money.total((e.total_cost for e in entries), currency)

    @staticmethod
    def labor_by_category(
        entries: Sequence[LaborEntry],
        currency: Currency,
    ) -> tuple[LaborCategoryTotal, ...]:
        """Per-category subtotals, categories in first-seen order."""
        order: list[str] = []
        grouped: dict[str, list[LaborEntry]] = {}
        for entry in entries:
            if entry.category not in grouped:
                order.append(entry.category)
                grouped[entry.category] = []
            grouped[entry.category].append(entry)

        return tuple(
            LaborCategoryTotal(
                category=category,
                entry_count=len(grouped[category]),
                worker_count=sum(e.count for e in grouped[category]),
                total_cost=Money.total((e.total_cost for e in grouped[category]), currency),
            )
            for category in order
        )

    def summarize_labor(
        self,
        entries: Sequence[LaborEntry],
        currency: Currency,
    ) -> LaborSummary:
        return LaborSummary(
            entries=tuple(entries),
            by_category=self.labor_by_category(entries, currency),
            total_cost=self.labor_total(entries, currency),
        )

    # ------------------------------------------------------------------
    # Whole report
    # ------------------------------------------------------------------

    @traced_engine("aggregation", "1.0", fingerprint_fields=("grouped", "labor", "currency"))
    def aggregate(
        self,
        grouped: GroupedActivities,
        labor: Sequence[LaborEntry],
        currency: Currency,
    ) -> AggregationResult:
        """
        Compute day buckets, labor summary and report-wide totals.

        Postconditions:
            - summary.total_material_cost == sum of bucket day totals
            - summary.total_project_cost == material + labor
            - buckets follow grouped.ordered_dates (newest first)
        """
        buckets = tuple(
            self.build_bucket(day, grouped.activities_on(day), currency)
            for day in grouped.ordered_dates
        )
        labor_summary = self.summarize_labor(labor, currency)

        all_activities = [a for bucket in buckets for a in bucket.activities]
        material = Money.total((b.day_material_total for b in buckets), currency)
        summary = CostSummary(
            total_activities=len(all_activities),
            counts_by_kind=self.count_by_kind(all_activities),
            total_material_cost=material,
            total_labor_cost=labor_summary.total_cost,
            total_project_cost=material + labor_summary.total_cost,
        )

        logger.info(
            "cost_aggregation_completed",
            extra={
                "day_count": len(buckets),
                "activity_count": summary.total_activities,
                "labor_entry_count": len(labor_summary.entries),
                "total_material_cost": str(summary.total_material_cost.amount),
                "total_labor_cost": str(summary.total_labor_cost.amount),
                "total_project_cost": str(summary.total_project_cost.amount),
                "currency": currency.code,
            },
        )
        return AggregationResult(buckets=buckets, labor=labor_summary, summary=summary)
