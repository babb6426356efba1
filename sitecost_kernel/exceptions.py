"""
Typed Exception Hierarchy for the Site Cost Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Cost reports feed money decisions. Callers must be able to tell an invalid
quantity from an unparseable timestamp without parsing message strings:

  1. Every error has a TYPED exception class (catch by type, not message)
  2. Every exception has a CODE attribute (machine-readable, API-safe)
  3. Exceptions carry structured DATA (activity id, field, offending value)

Example - WRONG way:
    try:
        service.generate_report(activities, labor, context)
    except Exception as e:
        if "quantity" in str(e):  # FRAGILE
            ...

Example - RIGHT way:
    try:
        service.generate_report(activities, labor, context)
    except InvalidQuantityError as e:
        api_response(code=e.code, activity=e.activity_id, field=e.field)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    SiteCostError (base)
    |
    +-- IngestionError
    |   +-- InvalidQuantityError
    |   +-- InvalidCostValueError
    |   +-- UnparseableTimestampError
    |   +-- MissingRequiredFieldError
    |   +-- UnknownActivityKindError
    |   +-- InconsistentCostPairError
    |
    +-- ReportError
    |   +-- InvalidReportPeriodError
    |   +-- CurrencyMismatchError
    |
    +-- ConfigurationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Ingestion       | INVALID_QUANTITY            | Material or labor quantity <= 0
                | INVALID_COST_VALUE          | Negative / non-numeric / NaN cost
                | UNPARSEABLE_TIMESTAMP       | Activity date cannot be parsed
                | MISSING_REQUIRED_FIELD      | e.g. transferDetails on a transfer
                | UNKNOWN_ACTIVITY_KIND       | activity not imported/used/transferred
                | INCONSISTENT_COST_PAIR      | per-unit x qty != total (reject policy)
----------------|-----------------------------|-----------------------------------------
Report          | INVALID_REPORT_PERIOD       | period start after period end
                | CURRENCY_MISMATCH           | Mixed currencies in one aggregation
----------------|-----------------------------|-----------------------------------------
Config          | CONFIGURATION_ERROR         | Invalid or unreadable configuration

===============================================================================
HANDLING PATTERNS
===============================================================================

1. ABORT POLICY - let the first IngestionError propagate to the caller.

2. BEST-EFFORT POLICY - the ingestion layer catches IngestionError per
   record and turns it into a SkippedItem using ``code``, ``activity_id``
   and ``field``. Nothing else is caught.

3. Inheriting from Exception (not ValueError) keeps domain errors apart from
   programming errors: ``except ValueError`` never swallows an
   InvalidQuantityError by accident.

===============================================================================
"""

from __future__ import annotations

from typing import Any


class SiteCostError(Exception):
    """
    Base exception for all site cost errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "SITECOST_ERROR"


# Ingestion-related exceptions


class IngestionError(SiteCostError):
    """Base exception for a raw record that cannot become a domain entity."""

    code: str = "INGESTION_ERROR"

    def __init__(
        self,
        message: str,
        activity_id: str | None = None,
        field: str | None = None,
    ):
        self.activity_id = activity_id
        self.field = field
        super().__init__(message)

    @staticmethod
    def _where(activity_id: str | None, field: str | None) -> str:
        parts = []
        if activity_id is not None:
            parts.append(f"record {activity_id}")
        if field is not None:
            parts.append(f"field {field}")
        return f" ({', '.join(parts)})" if parts else ""


class InvalidQuantityError(IngestionError):
    """Quantity (or labor count) is zero, negative, out of range or not a number."""

    code: str = "INVALID_QUANTITY"

    def __init__(
        self,
        quantity: Any,
        activity_id: str | None = None,
        field: str | None = "qnt",
    ):
        self.quantity = str(quantity)
        super().__init__(
            f"Quantity must be a positive number in range, got {quantity!r}"
            f"{self._where(activity_id, field)}",
            activity_id=activity_id,
            field=field,
        )


class InvalidCostValueError(IngestionError):
    """A cost field holds a negative, non-numeric, non-finite or out-of-range value."""

    code: str = "INVALID_COST_VALUE"

    def __init__(
        self,
        value: Any,
        activity_id: str | None = None,
        field: str | None = None,
    ):
        self.value = str(value)
        super().__init__(
            f"Invalid cost value {value!r}{self._where(activity_id, field)}",
            activity_id=activity_id,
            field=field,
        )


class UnparseableTimestampError(IngestionError):
    """Activity timestamp is missing or not an ISO-8601 datetime."""

    code: str = "UNPARSEABLE_TIMESTAMP"

    def __init__(
        self,
        value: Any,
        activity_id: str | None = None,
        field: str | None = "date",
    ):
        self.value = str(value)
        super().__init__(
            f"Cannot parse timestamp {value!r}{self._where(activity_id, field)}",
            activity_id=activity_id,
            field=field,
        )


class MissingRequiredFieldError(IngestionError):
    """A field required for this record shape is absent or empty."""

    code: str = "MISSING_REQUIRED_FIELD"

    def __init__(self, field: str, activity_id: str | None = None):
        super().__init__(
            f"Missing required field {field}{self._where(activity_id, None)}",
            activity_id=activity_id,
            field=field,
        )


class UnknownActivityKindError(IngestionError):
    """Activity kind is not one of imported, used, transferred."""

    code: str = "UNKNOWN_ACTIVITY_KIND"

    def __init__(self, kind: Any, activity_id: str | None = None):
        self.kind = str(kind)
        super().__init__(
            f"Unknown activity kind {kind!r}{self._where(activity_id, 'activity')}",
            activity_id=activity_id,
            field="activity",
        )


class InconsistentCostPairError(IngestionError):
    """Normalized per-unit cost x quantity diverges from total cost."""

    code: str = "INCONSISTENT_COST_PAIR"

    def __init__(
        self,
        per_unit_cost: str,
        quantity: str,
        total_cost: str,
        tolerance: str,
        activity_id: str | None = None,
        field: str | None = None,
    ):
        self.per_unit_cost = per_unit_cost
        self.quantity = quantity
        self.total_cost = total_cost
        self.tolerance = tolerance
        super().__init__(
            f"perUnitCost {per_unit_cost} x quantity {quantity} diverges from "
            f"totalCost {total_cost} beyond {tolerance}"
            f"{self._where(activity_id, field)}",
            activity_id=activity_id,
            field=field,
        )


# Report-related exceptions


class ReportError(SiteCostError):
    """Base exception for report assembly errors."""

    code: str = "REPORT_ERROR"


class InvalidReportPeriodError(ReportError):
    """Reporting period start is after its end."""

    code: str = "INVALID_REPORT_PERIOD"

    def __init__(self, start: str, end: str):
        self.start = start
        self.end = end
        super().__init__(f"Report period start {start} is after end {end}")


class CurrencyMismatchError(ReportError):
    """Amounts in different currencies were combined."""

    code: str = "CURRENCY_MISMATCH"

    def __init__(self, expected: str, actual: str):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Currency mismatch: expected {expected}, got {actual}")


# Configuration exceptions


class ConfigurationError(SiteCostError):
    """Configuration is invalid or cannot be read."""

    code: str = "CONFIGURATION_ERROR"

    def __init__(self, message: str, source: str | None = None):
        self.source = source
        super().__init__(message if source is None else f"{source}: {message}")
