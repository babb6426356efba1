"""
Ingestion service: raw records -> IngestionResult under a validation policy.

Uses structured logging (LogContext, get_logger("ingestion.*")).
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal
from typing import Any

from sitecost_kernel.domain.values import Currency
from sitecost_kernel.exceptions import IngestionError
from sitecost_kernel.logging_config import get_logger
from sitecost_engines.grouping import DateGrouper

from sitecost_ingestion.domain.types import (
    CostPairPolicy,
    CostWarning,
    IngestionResult,
    RecordType,
    SkippedItem,
    ValidationPolicy,
)
from sitecost_ingestion.mapping.records import RecordMapper, record_id_of

logger = get_logger("ingestion.service")


class IngestionService:
    """
    Turn raw material-activity and labor records into domain entities.

    Under ABORT the first IngestionError propagates to the caller. Under
    BEST_EFFORT each invalid record is dropped whole and reported as a
    SkippedItem, so a partially valid activity never contributes spend.
    """

    def __init__(
        self,
        currency: Currency | str = "INR",
        timezone: str | None = None,
        validation_policy: ValidationPolicy = ValidationPolicy.ABORT,
        cost_pair_policy: CostPairPolicy = CostPairPolicy.WARN,
        tolerance: Decimal | None = None,
    ):
        self._validation_policy = ValidationPolicy(validation_policy)
        self._mapper = RecordMapper(
            currency,
            grouper=DateGrouper(timezone),
            cost_pair_policy=cost_pair_policy,
            tolerance=tolerance,
        )

    @property
    def currency(self) -> Currency:
        return self._mapper.currency

    @property
    def validation_policy(self) -> ValidationPolicy:
        return self._validation_policy

    def ingest(
        self,
        activities: Iterable[Any],
        labor: Iterable[Any] = (),
        policy: ValidationPolicy | None = None,
    ) -> IngestionResult:
        """
        Map every record, applying ``policy`` (or the service default).

        Raises:
            IngestionError: under ABORT, for the first invalid record.
        """
        policy = ValidationPolicy(policy) if policy is not None else self._validation_policy

        mapped_activities = []
        mapped_labor = []
        skipped: list[SkippedItem] = []
        warnings: list[CostWarning] = []

        for record in activities:
            result = self._map_one(
                record, RecordType.ACTIVITY, self._mapper.map_activity, policy, skipped,
            )
            if result is not None:
                mapped_activities.append(result[0])
                warnings.extend(result[1])

        for record in labor:
            result = self._map_one(
                record, RecordType.LABOR, self._mapper.map_labor, policy, skipped,
            )
            if result is not None:
                mapped_labor.append(result[0])
                warnings.extend(result[1])

        logger.info(
            "records_ingested",
            extra={
                "validation_policy": policy.value,
                "activity_count": len(mapped_activities),
                "labor_count": len(mapped_labor),
                "skipped_count": len(skipped),
                "warning_count": len(warnings),
            },
        )
        return IngestionResult(
            activities=tuple(mapped_activities),
            labor=tuple(mapped_labor),
            skipped=tuple(skipped),
            warnings=tuple(warnings),
        )

    @staticmethod
    def _map_one(record, record_type, mapper, policy, skipped):
        try:
            return mapper(record)
        except IngestionError as e:
            if policy is ValidationPolicy.ABORT:
                logger.error(
                    "record_rejected",
                    extra={
                        "record_type": record_type.value,
                        "record_id": record_id_of(record),
                        "error_code": e.code,
                        "field": e.field,
                    },
                )
                raise
            item = SkippedItem.from_error(record_type, record_id_of(record), e)
            skipped.append(item)
            logger.warning(
                "record_skipped",
                extra={
                    "record_type": record_type.value,
                    "record_id": item.record_id,
                    "error_code": item.code,
                    "field": item.field,
                },
            )
            return None
