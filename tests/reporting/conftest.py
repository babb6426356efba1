"""
Reporting-specific test fixtures.

Provides:
- ReportingConfig and CostReportService instances on a deterministic clock
- A report context for the reference project
"""

import pytest

from sitecost_kernel.domain.activities import ProjectRef
from sitecost_modules.reporting.config import CompanyInfo, ReportingConfig
from sitecost_modules.reporting.models import ReportContext
from sitecost_modules.reporting.service import CostReportService


@pytest.fixture
def reporting_config() -> ReportingConfig:
    """Standard reporting configuration for tests."""
    return ReportingConfig.with_defaults()


@pytest.fixture
def report_service(deterministic_clock, reporting_config) -> CostReportService:
    """CostReportService on the deterministic clock."""
    return CostReportService(clock=deterministic_clock, config=reporting_config)


@pytest.fixture
def report_context() -> ReportContext:
    return ReportContext(
        project=ProjectRef("proj-1", "Tower A"),
        company=CompanyInfo(name="Shree Builders", phone="+91 98450 00000"),
        prepared_by="Site Engineer",
    )
