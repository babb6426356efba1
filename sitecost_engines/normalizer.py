"""
Module: sitecost_engines.normalizer
Responsibility:
    Resolve every material-line cost representation the backend has ever
    produced into one canonical ``(per_unit_cost, total_cost)`` pair.

    Records arrive in three shapes:
      * an explicit ``perUnitCost`` / ``totalCost`` pair (or one half of it);
      * a legacy single ``cost`` whose meaning depends on the activity kind
        (per unit for imports, a line total for usage and transfers);
      * no cost at all.

    Normalization happens exactly once, at ingestion. The result carries a
    ``CostSource`` tag; nothing downstream branches on which fields were
    originally present.

Architecture position:
    Engines -- pure calculation layer, zero I/O.

Invariants enforced:
    - Decimal-only arithmetic; float inputs are converted through ``str``.
    - quantity > 0 before any division: a zero or negative quantity raises
      InvalidQuantityError, never producing Infinity or NaN.
    - Negative, boolean or non-finite cost values raise
      InvalidCostValueError; only the "all fields absent" case yields zero.

Failure modes:
    - InvalidQuantityError, InvalidCostValueError, MissingRequiredFieldError.

Usage:
    normalizer = CostNormalizer(Currency("INR"))
    cost = normalizer.normalize(
        RawCostFields(cost=Decimal("65")),
        quantity=Decimal("10"),
        kind=ActivityKind.IMPORTED,
    )
    cost.total_cost  # Money(650, INR)
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, DecimalException, InvalidOperation
from typing import Any

from sitecost_kernel.domain.activities import ActivityKind, CostSource
from sitecost_kernel.domain.values import Currency, Money
from sitecost_kernel.exceptions import (
    InvalidCostValueError,
    InvalidQuantityError,
    MissingRequiredFieldError,
)
from sitecost_kernel.logging_config import get_logger

logger = get_logger("engines.normalizer")

# Exclusive upper bound for any parsed cost or quantity
MAX_MAGNITUDE = Decimal("1e12")

_FALLBACK_SOURCES = frozenset({
    CostSource.LEGACY_PER_UNIT,
    CostSource.LEGACY_TOTAL,
    CostSource.ABSENT,
})


def _to_decimal(value: Any) -> Decimal | None:
    """Convert a JSON scalar to Decimal, or None when it is not numeric."""
    if isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        return value
    if isinstance(value, (int, float)):
        return Decimal(str(value))
    if isinstance(value, str):
        try:
            return Decimal(value.strip())
        except InvalidOperation:
            return None
    return None


def parse_cost_value(
    value: Any,
    field: str,
    activity_id: str | None = None,
) -> Decimal | None:
    """
    Parse one raw cost field.

    Postconditions:
        Returns None when the field is absent (None or empty string),
        otherwise a finite Decimal with 0 <= value < MAX_MAGNITUDE.

    Raises:
        InvalidCostValueError: value is negative, non-numeric, non-finite
            or too large.
    """
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    amount = _to_decimal(value)
    if amount is None or not amount.is_finite() or not 0 <= amount < MAX_MAGNITUDE:
        raise InvalidCostValueError(value, activity_id=activity_id, field=field)
    return amount


def parse_quantity(
    value: Any,
    activity_id: str | None = None,
    field: str = "qnt",
) -> Decimal:
    """
    Parse a line quantity.

    Raises:
        MissingRequiredFieldError: quantity is absent.
        InvalidQuantityError: quantity is non-numeric, non-finite, <= 0 or
            not below MAX_MAGNITUDE.
    """
    if value is None:
        raise MissingRequiredFieldError(field, activity_id=activity_id)
    quantity = _to_decimal(value)
    if quantity is None or not quantity.is_finite() or not 0 < quantity < MAX_MAGNITUDE:
        raise InvalidQuantityError(value, activity_id=activity_id, field=field)
    return quantity


@dataclass(frozen=True)
class RawCostFields:
    """The optional cost fields found on a raw material line."""

    cost: Decimal | None = None
    per_unit_cost: Decimal | None = None
    total_cost: Decimal | None = None

    @classmethod
    def from_record(
        cls,
        record: dict[str, Any],
        activity_id: str | None = None,
    ) -> RawCostFields:
        """Read ``cost`` / ``perUnitCost`` / ``totalCost`` from a raw line."""
        return cls(
            cost=parse_cost_value(record.get("cost"), "cost", activity_id),
            per_unit_cost=parse_cost_value(
                record.get("perUnitCost"), "perUnitCost", activity_id,
            ),
            total_cost=parse_cost_value(
                record.get("totalCost"), "totalCost", activity_id,
            ),
        )


@dataclass(frozen=True)
class NormalizedCost:
    """Canonical cost pair for one material line."""

    per_unit_cost: Money
    total_cost: Money
    source: CostSource


@dataclass(frozen=True)
class CostPairDiscrepancy:
    """
    A normalized pair whose per-unit cost x quantity misses the total.

    Upstream rounding of per-unit prices is legitimate, so this is a
    warning; the caller's cost-pair policy decides whether it rejects.
    """

    per_unit_cost: Money
    quantity: Decimal
    total_cost: Money
    expected_total: Money
    tolerance: Decimal

    @property
    def difference(self) -> Money:
        return abs(self.expected_total - self.total_cost)


class CostNormalizer:
    """
    Pure resolver of raw cost fields into a canonical cost pair.

    Contract:
        No I/O, fully deterministic.
    Guarantees:
        Resolution order:
          1. per-unit and total both present -> trusted as-is;
          2. only per-unit -> total = per-unit x quantity;
          3. only total -> per-unit = total / quantity;
          4. legacy ``cost`` -> per unit for IMPORTED, line total for
             USED and TRANSFERRED;
          5. nothing present -> both zero.
    Non-goals:
        Does not round; amounts keep full Decimal precision.
    """

    def __init__(
        self,
        currency: Currency | str,
        tolerance: Decimal | None = None,
    ):
        self._currency = Currency(currency) if isinstance(currency, str) else currency
        # Allowed |per_unit x qty - total| per unit of quantity
        self._tolerance = (
            tolerance if tolerance is not None else self._currency.rounding_tolerance
        )

    @property
    def currency(self) -> Currency:
        return self._currency

    def _money(self, amount: Decimal) -> Money:
        return Money(amount=amount, currency=self._currency)

    def normalize(
        self,
        raw: RawCostFields,
        quantity: Decimal,
        kind: ActivityKind,
        activity_id: str | None = None,
    ) -> NormalizedCost:
        """
        Resolve ``raw`` into a canonical pair.

        Raises:
            InvalidQuantityError: quantity <= 0 (checked before any rule, so
                no division by zero is ever attempted).
            InvalidCostValueError: a derived amount is not below
                MAX_MAGNITUDE or overflows the decimal context.
        """
        if not quantity.is_finite() or quantity <= 0:
            raise InvalidQuantityError(quantity, activity_id=activity_id)

        field, value = None, None
        try:
            if raw.per_unit_cost is not None and raw.total_cost is not None:
                per_unit, total = raw.per_unit_cost, raw.total_cost
                source = CostSource.EXPLICIT_PAIR
            elif raw.per_unit_cost is not None:
                field, value = "perUnitCost", raw.per_unit_cost
                per_unit = raw.per_unit_cost
                total = per_unit * quantity
                source = CostSource.PER_UNIT_DERIVED
            elif raw.total_cost is not None:
                field, value = "totalCost", raw.total_cost
                total = raw.total_cost
                per_unit = total / quantity
                source = CostSource.TOTAL_DERIVED
            elif raw.cost is not None:
                field, value = "cost", raw.cost
                if kind is ActivityKind.IMPORTED:
                    per_unit = raw.cost
                    total = raw.cost * quantity
                    source = CostSource.LEGACY_PER_UNIT
                else:
                    total = raw.cost
                    per_unit = raw.cost / quantity
                    source = CostSource.LEGACY_TOTAL
            else:
                per_unit = total = Decimal("0")
                source = CostSource.ABSENT
        except DecimalException as e:
            raise InvalidCostValueError(value, activity_id=activity_id, field=field) from e
        if per_unit >= MAX_MAGNITUDE:
            raise InvalidCostValueError(per_unit, activity_id=activity_id, field="perUnitCost")
        if total >= MAX_MAGNITUDE:
            raise InvalidCostValueError(total, activity_id=activity_id, field="totalCost")

        if source in _FALLBACK_SOURCES:
            logger.debug(
                "cost_normalized_from_fallback",
                extra={
                    "activity_id": activity_id,
                    "cost_source": source.value,
                    "activity_kind": kind.value,
                },
            )

        return NormalizedCost(
            per_unit_cost=self._money(per_unit),
            total_cost=self._money(total),
            source=source,
        )

    def check_consistency(
        self,
        normalized: NormalizedCost,
        quantity: Decimal,
    ) -> CostPairDiscrepancy | None:
        """
        Compare per-unit x quantity against total.

        Returns a CostPairDiscrepancy when the gap exceeds
        ``tolerance x max(1, quantity)``, else None.
        """
        expected = normalized.per_unit_cost * quantity
        allowed = self._tolerance * max(Decimal("1"), quantity)
        if abs(expected.amount - normalized.total_cost.amount) <= allowed:
            return None
        return CostPairDiscrepancy(
            per_unit_cost=normalized.per_unit_cost,
            quantity=quantity,
            total_cost=normalized.total_cost,
            expected_total=expected,
            tolerance=allowed,
        )
