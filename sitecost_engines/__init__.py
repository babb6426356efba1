"""
Module: sitecost_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure cost
    engines. This is the canonical import surface for higher layers
    (sitecost_ingestion, sitecost_modules).

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import sitecost_kernel (and sibling engine modules).
    MUST NOT import sitecost_ingestion or sitecost_modules.

Invariants enforced:
    - Purity: engines NEVER call ``datetime.now()`` or ``date.today()``.
    - Decimal-only arithmetic: all monetary amounts use ``Decimal``.
    - Determinism: identical inputs always produce identical outputs.

Audit relevance:
    Engine entry points are traced via ``@traced_engine`` (see
    ``sitecost_engines.tracer``), emitting SITECOST_ENGINE_TRACE records.

Usage:
    from sitecost_engines.normalizer import CostNormalizer
    from sitecost_engines.classifier import ActivityClassifier
    from sitecost_engines.grouping import DateGrouper
    from sitecost_engines.aggregation import AggregationEngine
"""

from sitecost_kernel.logging_config import get_logger

logger = get_logger("engines")

from sitecost_engines.aggregation import (
    ActivityCost,
    AggregationEngine,
    AggregationResult,
    CostSummary,
    DailyBucket,
    KindCounts,
    LaborCategoryTotal,
    LaborSummary,
)
from sitecost_engines.classifier import ActivityClassifier, SpendCategory
from sitecost_engines.grouping import (
    DateGrouper,
    GroupedActivities,
    parse_timestamp,
    resolve_timezone,
)
from sitecost_engines.normalizer import (
    CostNormalizer,
    CostPairDiscrepancy,
    NormalizedCost,
    RawCostFields,
    parse_cost_value,
    parse_quantity,
)
from sitecost_engines.tracer import compute_input_fingerprint, traced_engine

__all__ = [
    # Aggregation
    "ActivityCost",
    "AggregationEngine",
    "AggregationResult",
    "CostSummary",
    "DailyBucket",
    "KindCounts",
    "LaborCategoryTotal",
    "LaborSummary",
    # Classification
    "ActivityClassifier",
    "SpendCategory",
    # Grouping
    "DateGrouper",
    "GroupedActivities",
    "parse_timestamp",
    "resolve_timezone",
    # Normalization
    "CostNormalizer",
    "CostPairDiscrepancy",
    "NormalizedCost",
    "RawCostFields",
    "parse_cost_value",
    "parse_quantity",
    # Tracing
    "compute_input_fingerprint",
    "traced_engine",
]
