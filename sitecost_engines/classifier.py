"""
Module: sitecost_engines.classifier
Responsibility:
    The single decision of whether an activity's materials count toward
    total project spend.

    Only imports are new expenditure. Usage consumes stock that was already
    paid for when it was imported, so counting it again would double count.
    A transfer relocates stock between projects and adds no spend at either
    end; it is never re-priced at the destination.

Architecture position:
    Engines -- pure calculation layer, zero I/O. Consulted by the
    aggregation engine; no other module re-derives spend inclusion.
"""

from __future__ import annotations

from enum import Enum

from sitecost_kernel.domain.activities import ActivityKind, MaterialActivity


class SpendCategory(str, Enum):
    """How an activity's material value relates to project spend."""

    NEW_SPEND = "new_spend"
    INVENTORY_CONSUMPTION = "inventory_consumption"
    INVENTORY_RELOCATION = "inventory_relocation"


_CATEGORY_BY_KIND: dict[ActivityKind, SpendCategory] = {
    ActivityKind.IMPORTED: SpendCategory.NEW_SPEND,
    ActivityKind.USED: SpendCategory.INVENTORY_CONSUMPTION,
    ActivityKind.TRANSFERRED: SpendCategory.INVENTORY_RELOCATION,
}


class ActivityClassifier:
    """
    Classifies activity kinds by their effect on project spend.

    Guarantees:
        - ``counts_toward_spend(kind)`` is True iff kind is IMPORTED.
        - ``classify`` is total over ActivityKind.
    """

    def classify(self, kind: ActivityKind) -> SpendCategory:
        return _CATEGORY_BY_KIND[kind]

    def counts_toward_spend(self, kind: ActivityKind) -> bool:
        return self.classify(kind) is SpendCategory.NEW_SPEND

    def activity_counts_toward_spend(self, activity: MaterialActivity) -> bool:
        """Convenience wrapper taking the whole activity."""
        return self.counts_toward_spend(activity.kind)
