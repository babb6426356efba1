"""
Tests for the cost normalizer.

Covers the five resolution rules, quantity and cost value validation, and
the per-unit x quantity consistency check.
"""

from decimal import Decimal

import pytest

from sitecost_kernel.domain.activities import ActivityKind, CostSource
from sitecost_kernel.domain.values import Currency, Money
from sitecost_kernel.exceptions import (
    InvalidCostValueError,
    InvalidQuantityError,
    MissingRequiredFieldError,
)
from sitecost_engines.normalizer import (
    CostNormalizer,
    RawCostFields,
    parse_cost_value,
    parse_quantity,
)


def inr(amount) -> Money:
    return Money.of(str(amount), "INR")


class TestResolutionRules:
    """Each rule of the resolution order."""

    def setup_method(self):
        self.normalizer = CostNormalizer(Currency("INR"))

    def test_explicit_pair_trusted(self):
        result = self.normalizer.normalize(
            RawCostFields(per_unit_cost=Decimal("65"), total_cost=Decimal("6500")),
            Decimal("100"),
            ActivityKind.IMPORTED,
        )
        assert result.per_unit_cost == inr(65)
        assert result.total_cost == inr(6500)
        assert result.source is CostSource.EXPLICIT_PAIR

    def test_explicit_pair_wins_over_legacy_cost(self):
        result = self.normalizer.normalize(
            RawCostFields(cost=Decimal("1"), per_unit_cost=Decimal("65"), total_cost=Decimal("650")),
            Decimal("10"),
            ActivityKind.USED,
        )
        assert result.total_cost == inr(650)
        assert result.source is CostSource.EXPLICIT_PAIR

    def test_per_unit_only(self):
        result = self.normalizer.normalize(
            RawCostFields(per_unit_cost=Decimal("65")),
            Decimal("10"),
            ActivityKind.USED,
        )
        assert result.total_cost == inr(650)
        assert result.source is CostSource.PER_UNIT_DERIVED

    def test_total_only(self):
        result = self.normalizer.normalize(
            RawCostFields(total_cost=Decimal("650")),
            Decimal("10"),
            ActivityKind.IMPORTED,
        )
        assert result.per_unit_cost == inr(65)
        assert result.source is CostSource.TOTAL_DERIVED

    def test_legacy_cost_is_per_unit_for_imports(self):
        """cost=65, qnt=10, imported -> perUnitCost=65, totalCost=650."""
        result = self.normalizer.normalize(
            RawCostFields(cost=Decimal("65")),
            Decimal("10"),
            ActivityKind.IMPORTED,
        )
        assert result.per_unit_cost == inr(65)
        assert result.total_cost == inr(650)
        assert result.source is CostSource.LEGACY_PER_UNIT

    def test_legacy_cost_is_total_for_usage(self):
        """cost=650, qnt=10, used -> totalCost=650, perUnitCost=65."""
        result = self.normalizer.normalize(
            RawCostFields(cost=Decimal("650")),
            Decimal("10"),
            ActivityKind.USED,
        )
        assert result.total_cost == inr(650)
        assert result.per_unit_cost == inr(65)
        assert result.source is CostSource.LEGACY_TOTAL

    def test_legacy_cost_is_total_for_transfers(self):
        result = self.normalizer.normalize(
            RawCostFields(cost=Decimal("300")),
            Decimal("4"),
            ActivityKind.TRANSFERRED,
        )
        assert result.total_cost == inr(300)
        assert result.per_unit_cost == inr(75)

    def test_nothing_present_is_zero(self):
        result = self.normalizer.normalize(
            RawCostFields(), Decimal("3"), ActivityKind.IMPORTED,
        )
        assert result.per_unit_cost.is_zero
        assert result.total_cost.is_zero
        assert result.source is CostSource.ABSENT

    def test_full_precision_kept(self):
        result = self.normalizer.normalize(
            RawCostFields(total_cost=Decimal("100")),
            Decimal("3"),
            ActivityKind.IMPORTED,
        )
        assert result.per_unit_cost.amount == Decimal("100") / Decimal("3")
        assert result.total_cost == inr(100)

    def test_string_currency_accepted(self):
        assert CostNormalizer("inr").currency == Currency("INR")


class TestQuantityGuard:
    """Quantity is validated before any division and derived amounts stay in range."""

    def setup_method(self):
        self.normalizer = CostNormalizer(Currency("INR"))

    def test_zero_quantity_with_total_only_raises(self):
        with pytest.raises(InvalidQuantityError):
            self.normalizer.normalize(
                RawCostFields(total_cost=Decimal("650")),
                Decimal("0"),
                ActivityKind.IMPORTED,
                activity_id="a1",
            )

    def test_negative_quantity_raises(self):
        with pytest.raises(InvalidQuantityError):
            self.normalizer.normalize(
                RawCostFields(cost=Decimal("650")), Decimal("-1"), ActivityKind.USED,
            )

    def test_zero_quantity_raises_even_without_costs(self):
        with pytest.raises(InvalidQuantityError):
            self.normalizer.normalize(RawCostFields(), Decimal("0"), ActivityKind.USED)

    def test_overflowing_division_is_a_cost_error(self):
        with pytest.raises(InvalidCostValueError) as exc_info:
            self.normalizer.normalize(
                RawCostFields(total_cost=Decimal("100")),
                Decimal("1e-999999"),
                ActivityKind.IMPORTED,
                activity_id="a1",
            )
        assert exc_info.value.field == "totalCost"
        assert exc_info.value.activity_id == "a1"

    def test_derived_total_out_of_range(self):
        with pytest.raises(InvalidCostValueError) as exc_info:
            self.normalizer.normalize(
                RawCostFields(per_unit_cost=Decimal("999999999999")),
                Decimal("10"),
                ActivityKind.IMPORTED,
            )
        assert exc_info.value.field == "totalCost"


class TestParseCostValue:

    @pytest.mark.parametrize("value", [None, "", "  "])
    def test_absent(self, value):
        assert parse_cost_value(value, "cost") is None

    @pytest.mark.parametrize(
        "value,expected",
        [(65, Decimal("65")), (0.1, Decimal("0.1")), ("650.50", Decimal("650.50")), (0, Decimal("0"))],
    )
    def test_numeric(self, value, expected):
        assert parse_cost_value(value, "cost") == expected

    @pytest.mark.parametrize(
        "value", [-1, "abc", True, float("nan"), "Infinity", [1], "1e999999", Decimal("1e12")],
    )
    def test_invalid(self, value):
        with pytest.raises(InvalidCostValueError) as exc_info:
            parse_cost_value(value, "perUnitCost", "a1")
        assert exc_info.value.field == "perUnitCost"
        assert exc_info.value.activity_id == "a1"


class TestParseQuantity:

    def test_valid(self):
        assert parse_quantity(10) == Decimal("10")
        assert parse_quantity("2.5") == Decimal("2.5")

    def test_missing(self):
        with pytest.raises(MissingRequiredFieldError):
            parse_quantity(None, "a1")

    @pytest.mark.parametrize("value", [0, -3, "x", False, float("inf"), "1e12"])
    def test_invalid(self, value):
        with pytest.raises(InvalidQuantityError):
            parse_quantity(value, "a1")


class TestRawCostFields:

    def test_from_record(self):
        raw = RawCostFields.from_record({"qnt": 10, "perUnitCost": 65, "totalCost": None})
        assert raw.per_unit_cost == Decimal("65")
        assert raw.total_cost is None
        assert raw.cost is None

    def test_from_record_rejects_negative(self):
        with pytest.raises(InvalidCostValueError):
            RawCostFields.from_record({"cost": -5}, "a1")


class TestConsistencyCheck:

    def setup_method(self):
        self.normalizer = CostNormalizer(Currency("INR"))

    def _pair(self, per_unit, total):
        return self.normalizer.normalize(
            RawCostFields(per_unit_cost=Decimal(per_unit), total_cost=Decimal(total)),
            Decimal("10"),
            ActivityKind.IMPORTED,
        )

    def test_consistent_pair(self):
        assert self.normalizer.check_consistency(self._pair("65", "650"), Decimal("10")) is None

    def test_rounding_within_tolerance(self):
        """A per-unit price rounded to paise is not a discrepancy."""
        pair = self._pair("33.33", "333.33")
        assert self.normalizer.check_consistency(pair, Decimal("10")) is None

    def test_divergent_pair(self):
        discrepancy = self.normalizer.check_consistency(self._pair("65", "700"), Decimal("10"))
        assert discrepancy is not None
        assert discrepancy.expected_total == inr(650)
        assert discrepancy.difference == inr(50)
        assert discrepancy.tolerance == Decimal("0.10")

    def test_custom_tolerance(self):
        normalizer = CostNormalizer(Currency("INR"), tolerance=Decimal("5"))
        pair = normalizer.normalize(
            RawCostFields(per_unit_cost=Decimal("65"), total_cost=Decimal("700")),
            Decimal("10"),
            ActivityKind.IMPORTED,
        )
        assert normalizer.check_consistency(pair, Decimal("10")) is None

    def test_derived_pairs_always_consistent(self):
        pair = self.normalizer.normalize(
            RawCostFields(total_cost=Decimal("100")), Decimal("3"), ActivityKind.IMPORTED,
        )
        assert self.normalizer.check_consistency(pair, Decimal("3")) is None
