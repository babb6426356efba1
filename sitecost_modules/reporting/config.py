"""
Reporting Configuration Schema.

Defines currency, timezone, validation policies and display options for
site cost reports.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from decimal import Decimal, InvalidOperation
from typing import Any, Self

from sitecost_kernel.domain.currency import CurrencyRegistry
from sitecost_kernel.exceptions import ConfigurationError
from sitecost_kernel.logging_config import get_logger
from sitecost_engines.grouping import resolve_timezone
from sitecost_ingestion.domain.types import CostPairPolicy, ValidationPolicy

logger = get_logger("modules.reporting.config")

DIGIT_GROUPINGS = ("indian", "international")


@dataclass
class CompanyInfo:
    """Company block printed in the report header."""

    name: str = "Company"
    address: str | None = None
    phone: str | None = None
    email: str | None = None


@dataclass
class ReportingConfig:
    """
    Configuration schema for the reporting module.

    Controls money handling, day bucketing, validation and formatting.
    """

    # ISO 4217 code all amounts are expressed in
    currency: str = "INR"

    # IANA timezone for calendar-day bucketing
    timezone: str = "UTC"

    # abort | best_effort
    validation_policy: ValidationPolicy = ValidationPolicy.ABORT

    # warn | reject
    cost_pair_policy: CostPairPolicy = CostPairPolicy.WARN

    # Allowed per-unit gap between perUnitCost x qnt and totalCost;
    # None means one minor unit of the currency
    cost_pair_tolerance: Decimal | None = None

    # Rounding precision for display
    display_precision: int = 2

    # indian (1,23,456) | international (123,456)
    digit_grouping: str = "indian"

    # Header defaults when a request carries no company
    company: CompanyInfo = field(default_factory=CompanyInfo)

    def __post_init__(self):
        if not CurrencyRegistry.is_valid(str(self.currency).upper()):
            raise ConfigurationError(f"Unknown currency code {self.currency!r}")
        self.currency = str(self.currency).upper()

        resolve_timezone(self.timezone)

        try:
            self.validation_policy = ValidationPolicy(self.validation_policy)
            self.cost_pair_policy = CostPairPolicy(self.cost_pair_policy)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

        if self.cost_pair_tolerance is not None:
            try:
                tolerance = Decimal(str(self.cost_pair_tolerance))
            except InvalidOperation as e:
                raise ConfigurationError(
                    f"cost_pair_tolerance is not a number: {self.cost_pair_tolerance!r}"
                ) from e
            if not tolerance.is_finite() or tolerance < 0:
                raise ConfigurationError("cost_pair_tolerance cannot be negative")
            self.cost_pair_tolerance = tolerance

        if isinstance(self.display_precision, bool) or not isinstance(self.display_precision, int):
            raise ConfigurationError("display_precision must be an integer")
        if self.display_precision < 0:
            raise ConfigurationError("display_precision cannot be negative")
        if self.digit_grouping not in DIGIT_GROUPINGS:
            raise ConfigurationError(
                f"digit_grouping must be one of {DIGIT_GROUPINGS}, got {self.digit_grouping!r}"
            )

    @classmethod
    def with_defaults(cls) -> Self:
        """Create config with standard defaults."""
        logger.info("reporting_config_created_with_defaults")
        return cls()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Create config from dictionary."""
        data = dict(data)
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(f"Unknown reporting settings: {', '.join(unknown)}")
        if "company" in data:
            company = data["company"]
            if isinstance(company, str):
                data["company"] = CompanyInfo(name=company)
            elif isinstance(company, dict):
                try:
                    data["company"] = CompanyInfo(**company)
                except TypeError as e:
                    raise ConfigurationError(f"Invalid company block: {e}") from e
            else:
                raise ConfigurationError("company must be a name or a mapping")
        logger.info(
            "reporting_config_loading_from_dict",
            extra={"keys": sorted(data.keys())},
        )
        return cls(**data)
