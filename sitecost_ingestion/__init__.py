"""
sitecost_ingestion -- Raw backend records to typed cost entities.

Maps material-activity and labor records (camelCase backend shape) into
sitecost_kernel domain entities, normalizing every material line's cost
exactly once, under an explicit validation policy.

Architecture:
    sitecost_ingestion/ is a top-level package. It may import
    sitecost_kernel and sitecost_engines; nothing in kernel/ or engines/
    imports from ingestion.
"""

from sitecost_ingestion.adapters.json_adapter import JsonExportAdapter, SiteExport
from sitecost_ingestion.domain.types import (
    CostPairPolicy,
    CostWarning,
    IngestionResult,
    RecordType,
    SkippedItem,
    ValidationPolicy,
)
from sitecost_ingestion.mapping.records import RecordMapper
from sitecost_ingestion.services.ingestion_service import IngestionService

__all__ = [
    "CostPairPolicy",
    "CostWarning",
    "IngestionResult",
    "IngestionService",
    "JsonExportAdapter",
    "RecordMapper",
    "RecordType",
    "SiteExport",
    "SkippedItem",
    "ValidationPolicy",
]
