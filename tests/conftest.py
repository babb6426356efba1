"""
Pytest fixtures for the site cost test suite.

Provides:
- Structured logging setup and log capture
- A deterministic clock
- Builders for raw backend records (camelCase, as the API returns them)
- The reference day scenario (imports, a usage and a mason crew)

NO database required.
"""

import json
import logging
from datetime import datetime, timezone
from io import StringIO

import pytest

from sitecost_kernel.domain.clock import DeterministicClock
from sitecost_kernel.domain.values import Currency
from sitecost_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture sitecost logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            service.generate_report(...)
            logs = captured_logs()
            assert any(r["message"] == "cost_report_generated" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("sitecost")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Clock and currency
# =============================================================================


@pytest.fixture
def deterministic_clock():
    """Provide a deterministic clock for testing."""
    return DeterministicClock(datetime(2023, 6, 20, 10, 30, tzinfo=timezone.utc))


@pytest.fixture
def inr():
    return Currency("INR")


# =============================================================================
# Raw record builders
# =============================================================================


def _raw_material(name="Steel", unit="kg", qnt=10, **costs):
    line = {"name": name, "unit": unit, "qnt": qnt, "specs": {}}
    line.update(costs)
    return line


def _raw_activity(
    activity_id="act-1",
    activity="imported",
    date="2023-06-15T09:00:00Z",
    materials=None,
    project_id="proj-1",
    **extra,
):
    record = {
        "_id": activity_id,
        "user": {"userId": "user-1", "fullName": "Ravi Kumar"},
        "projectId": project_id,
        "projectName": "Tower A",
        "sectionName": "Block 1",
        "miniSectionName": "Ground Floor",
        "materials": materials if materials is not None else [_raw_material(cost=65)],
        "activity": activity,
        "message": "",
        "date": date,
    }
    record.update(extra)
    return record


def _raw_labor(
    entry_id="lab-1",
    category="Civil",
    type="Mason",
    count=5,
    per_labor_cost=800,
    **extra,
):
    record = {
        "_id": entry_id,
        "category": category,
        "type": type,
        "count": count,
        "perLaborCost": per_labor_cost,
    }
    record.update(extra)
    return record


def _raw_transfer_details(from_id="proj-1", to_id="proj-2"):
    return {
        "fromProject": {"id": from_id, "name": "Tower A"},
        "toProject": {"id": to_id, "name": "Tower B"},
    }


@pytest.fixture
def raw_material():
    """Builder for one raw material line: raw_material(name, unit, qnt, **costs)."""
    return _raw_material


@pytest.fixture
def raw_activity():
    """Builder for one raw material-activity record."""
    return _raw_activity


@pytest.fixture
def raw_labor():
    """Builder for one raw labor record."""
    return _raw_labor


@pytest.fixture
def raw_transfer_details():
    return _raw_transfer_details


# =============================================================================
# Reference scenario
# =============================================================================


@pytest.fixture
def scenario_records():
    """
    One site day:

    - imported Steel 100 kg @ 65 per kg (explicit pair) -> 6500
    - imported Cement 20 bags, legacy cost 400 per bag -> 8000
    - used Steel 30 kg, legacy cost 1950 total -> not spend
    - labor: Mason 5 x 800 -> 4000

    Expected: day material 14500, labor 4000, project 18500.
    """
    activities = [
        _raw_activity(
            "act-steel-in",
            "imported",
            "2023-06-15T08:00:00Z",
            [_raw_material("Steel", "kg", 100, perUnitCost=65, totalCost=6500)],
        ),
        _raw_activity(
            "act-cement-in",
            "imported",
            "2023-06-15T09:30:00Z",
            [_raw_material("Cement", "bags", 20, cost=400)],
        ),
        _raw_activity(
            "act-steel-used",
            "used",
            "2023-06-15T15:00:00Z",
            [_raw_material("Steel", "kg", 30, cost=1950)],
        ),
    ]
    labor = [_raw_labor("lab-mason", "Civil", "Mason", 5, 800)]
    return {"activities": activities, "labor": labor}
