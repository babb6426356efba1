"""
Record mapping: raw backend dicts -> typed domain entities.

Each material line is normalized exactly once, here. Everything downstream
works on MaterialLineItem's canonical cost pair and never looks at the raw
``cost`` / ``perUnitCost`` / ``totalCost`` fields again.

Architecture: sitecost_ingestion/mapping. ZERO I/O. Imports sitecost_kernel
and sitecost_engines only.
"""

from __future__ import annotations

from collections.abc import Mapping
from decimal import Decimal
from typing import Any

from sitecost_kernel.domain.activities import (
    ActivityKind,
    ActivityUser,
    LaborEntry,
    MaterialActivity,
    MaterialLineItem,
    ProjectRef,
    TransferDetails,
)
from sitecost_kernel.domain.values import Currency, Money
from sitecost_kernel.exceptions import (
    InconsistentCostPairError,
    IngestionError,
    InvalidCostValueError,
    InvalidQuantityError,
    MissingRequiredFieldError,
    UnknownActivityKindError,
)
from sitecost_kernel.logging_config import get_logger
from sitecost_engines.grouping import DateGrouper
from sitecost_engines.normalizer import (
    MAX_MAGNITUDE,
    CostNormalizer,
    RawCostFields,
    parse_cost_value,
    parse_quantity,
)

from sitecost_ingestion.domain.types import CostPairPolicy, CostWarning, RecordType

logger = get_logger("ingestion.mapping")


def record_id_of(record: Any) -> str | None:
    """Best-effort id of a raw record, for error reporting."""
    if isinstance(record, Mapping):
        value = record.get("_id", record.get("id"))
        if value is not None:
            return str(value)
    return None


def _text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _required_text(record: Mapping[str, Any], key: str, record_id: str | None) -> str:
    text = _text(record.get(key))
    if text is None:
        raise MissingRequiredFieldError(key, activity_id=record_id)
    return text


def _required_mapping(
    record: Mapping[str, Any],
    key: str,
    record_id: str | None,
) -> Mapping[str, Any]:
    value = record.get(key)
    if not isinstance(value, Mapping):
        raise MissingRequiredFieldError(key, activity_id=record_id)
    return value


def _parse_count(value: Any, record_id: str | None) -> int:
    """Labor head count: a positive whole number."""
    if value is None:
        raise MissingRequiredFieldError("count", activity_id=record_id)
    if isinstance(value, bool):
        raise InvalidQuantityError(value, activity_id=record_id, field="count")
    if isinstance(value, int):
        count = value
    else:
        number = parse_quantity(value, activity_id=record_id, field="count")
        if number != number.to_integral_value():
            raise InvalidQuantityError(value, activity_id=record_id, field="count")
        count = int(number)
    if not 0 < count < MAX_MAGNITUDE:
        raise InvalidQuantityError(value, activity_id=record_id, field="count")
    return count


class RecordMapper:
    """
    Maps raw material-activity and labor records to domain entities.

    Contract:
        ``map_activity`` / ``map_labor`` either return an entity plus any
        warnings about it, or raise an IngestionError naming the record and
        field. They never coerce invalid input to zero.
    """

    def __init__(
        self,
        currency: Currency | str,
        grouper: DateGrouper | None = None,
        cost_pair_policy: CostPairPolicy = CostPairPolicy.WARN,
        tolerance: Decimal | None = None,
    ):
        self._normalizer = CostNormalizer(currency, tolerance)
        self._grouper = grouper or DateGrouper()
        self._cost_pair_policy = CostPairPolicy(cost_pair_policy)

    @property
    def currency(self) -> Currency:
        return self._normalizer.currency

    # ------------------------------------------------------------------
    # Material activities
    # ------------------------------------------------------------------

    def map_activity(
        self,
        record: Any,
    ) -> tuple[MaterialActivity, list[CostWarning]]:
        """Build a MaterialActivity from one backend material-activity record."""
        if not isinstance(record, Mapping):
            raise IngestionError(f"Activity record must be an object, got {type(record).__name__}")

        activity_id = record_id_of(record)
        if activity_id is None:
            raise MissingRequiredFieldError("_id")

        kind = self._parse_kind(record.get("activity"), activity_id)

        user_raw = _required_mapping(record, "user", activity_id)
        user = ActivityUser(
            id=_required_text(user_raw, "userId", activity_id),
            full_name=_text(user_raw.get("fullName")) or "",
        )

        timestamp = self._grouper.parse(record.get("date"), activity_id)

        materials_raw = record.get("materials")
        if not isinstance(materials_raw, list) or not materials_raw:
            raise MissingRequiredFieldError("materials", activity_id=activity_id)

        warnings: list[CostWarning] = []
        materials = []
        for index, line in enumerate(materials_raw):
            item, warning = self._map_line(line, index, kind, activity_id)
            materials.append(item)
            if warning is not None:
                warnings.append(warning)

        transfer = None
        if kind is ActivityKind.TRANSFERRED:
            transfer = self._parse_transfer(record, activity_id)

        activity = MaterialActivity(
            id=activity_id,
            user=user,
            project_id=_required_text(record, "projectId", activity_id),
            kind=kind,
            timestamp=timestamp,
            materials=tuple(materials),
            project_name=_text(record.get("projectName")),
            section_name=_text(record.get("sectionName")),
            mini_section_name=_text(record.get("miniSectionName")),
            message=_text(record.get("message")),
            transfer_details=transfer,
        )
        return activity, warnings

    @staticmethod
    def _parse_kind(value: Any, activity_id: str) -> ActivityKind:
        if value is None:
            raise MissingRequiredFieldError("activity", activity_id=activity_id)
        try:
            return ActivityKind(str(value).strip().lower())
        except ValueError as e:
            raise UnknownActivityKindError(value, activity_id=activity_id) from e

    @staticmethod
    def _parse_transfer(record: Mapping[str, Any], activity_id: str) -> TransferDetails:
        details = _required_mapping(record, "transferDetails", activity_id)
        refs = []
        for key in ("fromProject", "toProject"):
            project = details.get(key)
            if not isinstance(project, Mapping) or _text(project.get("id")) is None:
                raise MissingRequiredFieldError(
                    f"transferDetails.{key}", activity_id=activity_id,
                )
            refs.append(ProjectRef(id=_text(project["id"]), name=_text(project.get("name")) or ""))
        return TransferDetails(from_project=refs[0], to_project=refs[1])

    def _map_line(
        self,
        line: Any,
        index: int,
        kind: ActivityKind,
        activity_id: str,
    ) -> tuple[MaterialLineItem, CostWarning | None]:
        field = f"materials[{index}]"
        if not isinstance(line, Mapping):
            raise MissingRequiredFieldError(field, activity_id=activity_id)

        quantity = parse_quantity(line.get("qnt"), activity_id, field=f"{field}.qnt")
        raw = RawCostFields.from_record(line, activity_id)
        normalized = self._normalizer.normalize(raw, quantity, kind, activity_id)

        warning = None
        discrepancy = self._normalizer.check_consistency(normalized, quantity)
        if discrepancy is not None:
            if self._cost_pair_policy is CostPairPolicy.REJECT:
                raise InconsistentCostPairError(
                    str(discrepancy.per_unit_cost.amount),
                    str(quantity),
                    str(discrepancy.total_cost.amount),
                    str(discrepancy.tolerance),
                    activity_id=activity_id,
                    field=field,
                )
            warning = CostWarning(
                record_type=RecordType.ACTIVITY,
                record_id=activity_id,
                field=field,
                code=InconsistentCostPairError.code,
                message=(
                    f"perUnitCost {discrepancy.per_unit_cost.amount} x {quantity} = "
                    f"{discrepancy.expected_total.amount}, totalCost is "
                    f"{discrepancy.total_cost.amount}"
                ),
            )
            logger.warning(
                "cost_pair_inconsistent",
                extra={
                    "activity_id": activity_id,
                    "field": field,
                    "per_unit_cost": str(discrepancy.per_unit_cost.amount),
                    "quantity": str(quantity),
                    "total_cost": str(discrepancy.total_cost.amount),
                    "difference": str(discrepancy.difference.amount),
                },
            )

        specs = line.get("specs")
        item = MaterialLineItem(
            name=_text(line.get("name")) or "",
            unit=_text(line.get("unit")) or "",
            quantity=quantity,
            per_unit_cost=normalized.per_unit_cost,
            total_cost=normalized.total_cost,
            cost_source=normalized.source,
            specs=tuple(specs.items()) if isinstance(specs, Mapping) else (),
        )
        return item, warning

    # ------------------------------------------------------------------
    # Labor
    # ------------------------------------------------------------------

    def map_labor(self, record: Any) -> tuple[LaborEntry, list[CostWarning]]:
        """Build a LaborEntry; ``totalCost`` is always re-derived from count."""
        if not isinstance(record, Mapping):
            raise IngestionError(f"Labor record must be an object, got {type(record).__name__}")

        entry_id = record_id_of(record)
        count = _parse_count(record.get("count"), entry_id)
        per_labor = parse_cost_value(record.get("perLaborCost"), "perLaborCost", entry_id)
        if per_labor is None:
            raise MissingRequiredFieldError("perLaborCost", activity_id=entry_id)

        entry = LaborEntry(
            category=_required_text(record, "category", entry_id),
            type=_required_text(record, "type", entry_id),
            count=count,
            per_labor_cost=Money(amount=per_labor, currency=self.currency),
            entry_id=entry_id,
            section_id=_text(record.get("sectionId")),
            mini_section_id=_text(record.get("miniSectionId")),
        )
        if entry.total_cost.amount >= MAX_MAGNITUDE:
            raise InvalidCostValueError(
                entry.total_cost.amount, activity_id=entry_id, field="totalCost",
            )

        warnings: list[CostWarning] = []
        supplied = parse_cost_value(record.get("totalCost"), "totalCost", entry_id)
        if supplied is not None:
            tolerance = self.currency.rounding_tolerance * max(Decimal("1"), Decimal(count))
            if abs(supplied - entry.total_cost.amount) > tolerance:
                if self._cost_pair_policy is CostPairPolicy.REJECT:
                    raise InconsistentCostPairError(
                        str(per_labor),
                        str(count),
                        str(supplied),
                        str(tolerance),
                        activity_id=entry_id,
                        field="totalCost",
                    )
                warnings.append(
                    CostWarning(
                        record_type=RecordType.LABOR,
                        record_id=entry_id,
                        field="totalCost",
                        code=InconsistentCostPairError.code,
                        message=(
                            f"Supplied totalCost {supplied} ignored; "
                            f"{count} x {per_labor} = {entry.total_cost.amount}"
                        ),
                    )
                )
                logger.warning(
                    "labor_total_inconsistent",
                    extra={
                        "entry_id": entry_id,
                        "supplied_total": str(supplied),
                        "derived_total": str(entry.total_cost.amount),
                    },
                )
        return entry, warnings
