"""
Site Cost Reporting Module (``sitecost_modules.reporting``).

Responsibility
--------------
Read-only module that turns material activities and labor entries into a
site cost report: header, summary (activity counts, material, labor and
project cost), day sections newest first, labor subtotals, and the records
skipped or flagged during ingestion.

Architecture position
---------------------
**Modules layer** -- all computation is delegated to sitecost_engines;
assembly is a pure function; the service is thin glue with an injected
clock and config.

Invariants enforced
-------------------
* Only imported materials count toward project cost.
* Total project cost = material cost + labor cost.
* Amounts are rounded only when rendered.
"""

from sitecost_modules.reporting.assembly import build_report_document, build_report_period
from sitecost_modules.reporting.config import CompanyInfo, ReportingConfig
from sitecost_modules.reporting.models import (
    ActivityFilter,
    ReportContext,
    ReportDocument,
    ReportHeader,
    ReportPeriod,
    ReportRequest,
)
from sitecost_modules.reporting.rendering import (
    format_money,
    render_text_summary,
    render_to_dict,
)
from sitecost_modules.reporting.service import CostReportService

__all__ = [
    "ActivityFilter",
    "CompanyInfo",
    "CostReportService",
    "ReportContext",
    "ReportDocument",
    "ReportHeader",
    "ReportPeriod",
    "ReportRequest",
    "ReportingConfig",
    "build_report_document",
    "build_report_period",
    "format_money",
    "render_text_summary",
    "render_to_dict",
]
