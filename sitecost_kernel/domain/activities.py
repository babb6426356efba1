"""
Activities -- Domain entities for material activities and labor entries.

Responsibility:
    Frozen dataclasses for the records a cost report is built from:
    material line items (with their canonical, already-normalized cost
    pair), material activities and labor entries.

Architecture position:
    Kernel > Domain -- pure data definitions, zero I/O. Constructed by
    ``sitecost_ingestion`` from raw backend records, or directly by callers
    that already hold typed data.

Invariants enforced:
    - MaterialLineItem.quantity > 0; per_unit_cost and total_cost >= 0 and
      in the same currency.
    - MaterialActivity.materials is non-empty.
    - transfer_details is present iff kind is TRANSFERRED.
    - LaborEntry.count is a positive integer and
      total_cost == per_labor_cost * count.

Failure modes:
    - InvalidQuantityError, InvalidCostValueError, MissingRequiredFieldError
      from ``__post_init__``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from sitecost_kernel.domain.values import Currency, Money
from sitecost_kernel.exceptions import (
    CurrencyMismatchError,
    InvalidCostValueError,
    InvalidQuantityError,
    MissingRequiredFieldError,
)


class ActivityKind(str, Enum):
    """What happened to the materials of an activity."""

    IMPORTED = "imported"  # New stock brought onto site
    USED = "used"  # Consumed from existing stock
    TRANSFERRED = "transferred"  # Moved to another project's stock


class CostSource(str, Enum):
    """Which resolution rule produced a line's canonical cost pair."""

    EXPLICIT_PAIR = "explicit_pair"
    PER_UNIT_DERIVED = "per_unit_derived"
    TOTAL_DERIVED = "total_derived"
    LEGACY_PER_UNIT = "legacy_per_unit"
    LEGACY_TOTAL = "legacy_total"
    ABSENT = "absent"


@dataclass(frozen=True)
class ActivityUser:
    """Staff member who recorded an activity."""

    id: str
    full_name: str


@dataclass(frozen=True)
class ProjectRef:
    """Reference to a project by id and display name."""

    id: str
    name: str


@dataclass(frozen=True)
class TransferDetails:
    """Source and destination of a material transfer."""

    from_project: ProjectRef
    to_project: ProjectRef


@dataclass(frozen=True)
class MaterialLineItem:
    """
    One material on an activity, with its canonical cost pair.

    ``cost_source`` records where the pair came from; nothing downstream of
    ingestion branches on it.
    """

    name: str
    unit: str
    quantity: Decimal
    per_unit_cost: Money
    total_cost: Money
    cost_source: CostSource = CostSource.EXPLICIT_PAIR
    specs: tuple[tuple[str, Any], ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.quantity, Decimal) or not self.quantity.is_finite():
            raise InvalidQuantityError(self.quantity, field="qnt")
        if self.quantity <= 0:
            raise InvalidQuantityError(self.quantity, field="qnt")
        if self.per_unit_cost.is_negative:
            raise InvalidCostValueError(self.per_unit_cost.amount, field="perUnitCost")
        if self.total_cost.is_negative:
            raise InvalidCostValueError(self.total_cost.amount, field="totalCost")
        if self.per_unit_cost.currency != self.total_cost.currency:
            raise CurrencyMismatchError(
                self.per_unit_cost.currency.code, self.total_cost.currency.code,
            )


@dataclass(frozen=True)
class MaterialActivity:
    """A material import, usage or transfer recorded on a project."""

    id: str
    user: ActivityUser
    project_id: str
    kind: ActivityKind
    timestamp: datetime
    materials: tuple[MaterialLineItem, ...]
    project_name: str | None = None
    section_name: str | None = None
    mini_section_name: str | None = None
    message: str | None = None
    transfer_details: TransferDetails | None = None

    def __post_init__(self) -> None:
        if not self.materials:
            raise MissingRequiredFieldError("materials", activity_id=self.id)
        if self.kind is ActivityKind.TRANSFERRED and self.transfer_details is None:
            raise MissingRequiredFieldError("transferDetails", activity_id=self.id)

    @property
    def currency(self) -> Currency:
        return self.materials[0].total_cost.currency


@dataclass(frozen=True)
class LaborEntry:
    """A labor ledger line: ``count`` workers of one type at a per-head cost."""

    category: str
    type: str
    count: int
    per_labor_cost: Money
    entry_id: str | None = None
    section_id: str | None = None
    mini_section_id: str | None = None
    total_cost: Money = field(init=False)

    def __post_init__(self) -> None:
        if isinstance(self.count, bool) or not isinstance(self.count, int) or self.count <= 0:
            raise InvalidQuantityError(self.count, activity_id=self.entry_id, field="count")
        if self.per_labor_cost.is_negative:
            raise InvalidCostValueError(
                self.per_labor_cost.amount, activity_id=self.entry_id, field="perLaborCost",
            )
        object.__setattr__(self, "total_cost", self.per_labor_cost * self.count)
