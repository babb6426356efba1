"""
Tests for raw record mapping.

Raw records use the backend's camelCase shape. Each material line is
normalized once here; invalid records raise an IngestionError naming the
record and field.
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from sitecost_kernel.domain.activities import ActivityKind, CostSource
from sitecost_kernel.domain.values import Money
from sitecost_kernel.exceptions import (
    InconsistentCostPairError,
    IngestionError,
    InvalidCostValueError,
    InvalidQuantityError,
    MissingRequiredFieldError,
    UnknownActivityKindError,
    UnparseableTimestampError,
)
from sitecost_engines.grouping import DateGrouper
from sitecost_ingestion.domain.types import CostPairPolicy, RecordType
from sitecost_ingestion.mapping.records import RecordMapper, record_id_of


def inr(amount) -> Money:
    return Money.of(str(amount), "INR")


class TestMapActivity:

    def setup_method(self):
        self.mapper = RecordMapper("INR")

    def test_full_record(self, raw_activity, raw_material):
        record = raw_activity(
            "act-1",
            "imported",
            "2023-06-15T09:00:00.000Z",
            [raw_material("Steel", "kg", 100, perUnitCost=65, totalCost=6500)],
        )
        activity, warnings = self.mapper.map_activity(record)

        assert warnings == []
        assert activity.id == "act-1"
        assert activity.kind is ActivityKind.IMPORTED
        assert activity.user.id == "user-1"
        assert activity.user.full_name == "Ravi Kumar"
        assert activity.project_id == "proj-1"
        assert activity.project_name == "Tower A"
        assert activity.section_name == "Block 1"
        assert activity.mini_section_name == "Ground Floor"
        assert activity.message is None
        assert activity.timestamp == datetime(2023, 6, 15, 9, 0, tzinfo=timezone.utc)
        line = activity.materials[0]
        assert line.quantity == Decimal("100")
        assert line.total_cost == inr(6500)
        assert line.cost_source is CostSource.EXPLICIT_PAIR

    def test_legacy_cost_resolved_once(self, raw_activity, raw_material):
        record = raw_activity(materials=[raw_material("Cement", "bags", 20, cost=400)])
        activity, _ = self.mapper.map_activity(record)
        line = activity.materials[0]
        assert line.per_unit_cost == inr(400)
        assert line.total_cost == inr(8000)
        assert line.cost_source is CostSource.LEGACY_PER_UNIT

    def test_legacy_cost_for_usage(self, raw_activity, raw_material):
        record = raw_activity(activity="used", materials=[raw_material("Steel", "kg", 30, cost=1950)])
        activity, _ = self.mapper.map_activity(record)
        assert activity.materials[0].per_unit_cost == inr(65)
        assert activity.materials[0].total_cost == inr(1950)

    def test_kind_is_case_insensitive(self, raw_activity):
        activity, _ = self.mapper.map_activity(raw_activity(activity=" Imported "))
        assert activity.kind is ActivityKind.IMPORTED

    def test_specs_kept_in_order(self, raw_activity, raw_material):
        line = raw_material(cost=10)
        line["specs"] = {"grade": "Fe500", "diameter": 12}
        activity, _ = self.mapper.map_activity(raw_activity(materials=[line]))
        assert activity.materials[0].specs == (("grade", "Fe500"), ("diameter", 12))

    def test_transfer_details(self, raw_activity, raw_transfer_details):
        record = raw_activity(activity="transferred", transferDetails=raw_transfer_details())
        activity, _ = self.mapper.map_activity(record)
        assert activity.transfer_details.from_project.id == "proj-1"
        assert activity.transfer_details.to_project.name == "Tower B"

    def test_transfer_details_ignored_for_imports(self, raw_activity, raw_transfer_details):
        record = raw_activity(activity="imported", transferDetails=raw_transfer_details())
        activity, _ = self.mapper.map_activity(record)
        assert activity.transfer_details is None

    def test_record_id_fallback(self):
        assert record_id_of({"id": 7}) == "7"
        assert record_id_of({"_id": "a", "id": "b"}) == "a"
        assert record_id_of("not a record") is None


class TestMapActivityErrors:

    def setup_method(self):
        self.mapper = RecordMapper("INR")

    def test_zero_quantity(self, raw_activity, raw_material):
        record = raw_activity("bad", materials=[raw_material(qnt=0, totalCost=650)])
        with pytest.raises(InvalidQuantityError) as exc_info:
            self.mapper.map_activity(record)
        assert exc_info.value.activity_id == "bad"
        assert exc_info.value.field == "materials[0].qnt"

    def test_missing_quantity(self, raw_activity, raw_material):
        line = raw_material(cost=5)
        del line["qnt"]
        with pytest.raises(MissingRequiredFieldError):
            self.mapper.map_activity(raw_activity(materials=[line]))

    def test_negative_cost(self, raw_activity, raw_material):
        with pytest.raises(InvalidCostValueError):
            self.mapper.map_activity(raw_activity(materials=[raw_material(cost=-65)]))

    def test_unknown_kind(self, raw_activity):
        with pytest.raises(UnknownActivityKindError) as exc_info:
            self.mapper.map_activity(raw_activity("x1", activity="returned"))
        assert exc_info.value.kind == "returned"

    def test_missing_kind(self, raw_activity):
        record = raw_activity()
        del record["activity"]
        with pytest.raises(MissingRequiredFieldError) as exc_info:
            self.mapper.map_activity(record)
        assert exc_info.value.field == "activity"

    def test_bad_timestamp(self, raw_activity):
        with pytest.raises(UnparseableTimestampError):
            self.mapper.map_activity(raw_activity(date="15/06/2023"))

    def test_empty_materials(self, raw_activity):
        with pytest.raises(MissingRequiredFieldError) as exc_info:
            self.mapper.map_activity(raw_activity(materials=[]))
        assert exc_info.value.field == "materials"

    def test_missing_user(self, raw_activity):
        record = raw_activity()
        del record["user"]
        with pytest.raises(MissingRequiredFieldError) as exc_info:
            self.mapper.map_activity(record)
        assert exc_info.value.field == "user"

    def test_missing_project_id(self, raw_activity):
        with pytest.raises(MissingRequiredFieldError) as exc_info:
            self.mapper.map_activity(raw_activity(project_id=None))
        assert exc_info.value.field == "projectId"

    def test_missing_id(self, raw_activity):
        record = raw_activity()
        del record["_id"]
        with pytest.raises(MissingRequiredFieldError):
            self.mapper.map_activity(record)

    def test_transfer_without_details(self, raw_activity):
        with pytest.raises(MissingRequiredFieldError) as exc_info:
            self.mapper.map_activity(raw_activity(activity="transferred"))
        assert exc_info.value.field == "transferDetails"

    def test_transfer_without_destination(self, raw_activity, raw_transfer_details):
        details = raw_transfer_details()
        del details["toProject"]
        with pytest.raises(MissingRequiredFieldError) as exc_info:
            self.mapper.map_activity(raw_activity(activity="transferred", transferDetails=details))
        assert exc_info.value.field == "transferDetails.toProject"

    def test_non_object_record(self):
        with pytest.raises(IngestionError):
            self.mapper.map_activity(["not", "a", "record"])


class TestCostPairPolicy:

    def test_warn_keeps_line(self, raw_activity, raw_material):
        mapper = RecordMapper("INR", cost_pair_policy=CostPairPolicy.WARN)
        record = raw_activity("odd", materials=[raw_material(qnt=10, perUnitCost=65, totalCost=700)])
        activity, warnings = mapper.map_activity(record)

        assert activity.materials[0].total_cost == inr(700)
        assert len(warnings) == 1
        assert warnings[0].record_type is RecordType.ACTIVITY
        assert warnings[0].record_id == "odd"
        assert warnings[0].field == "materials[0]"
        assert warnings[0].code == "INCONSISTENT_COST_PAIR"

    def test_warn_is_logged(self, raw_activity, raw_material, captured_logs):
        mapper = RecordMapper("INR")
        mapper.map_activity(raw_activity(materials=[raw_material(qnt=10, perUnitCost=65, totalCost=700)]))
        records = [r for r in captured_logs() if r["message"] == "cost_pair_inconsistent"]
        assert len(records) == 1
        assert records[0]["level"] == "WARNING"
        assert records[0]["difference"] == "50"

    def test_reject_raises(self, raw_activity, raw_material):
        mapper = RecordMapper("INR", cost_pair_policy=CostPairPolicy.REJECT)
        record = raw_activity("odd", materials=[raw_material(qnt=10, perUnitCost=65, totalCost=700)])
        with pytest.raises(InconsistentCostPairError) as exc_info:
            mapper.map_activity(record)
        assert exc_info.value.activity_id == "odd"

    def test_tolerance_override(self, raw_activity, raw_material):
        mapper = RecordMapper(
            "INR", cost_pair_policy=CostPairPolicy.REJECT, tolerance=Decimal("10"),
        )
        record = raw_activity(materials=[raw_material(qnt=10, perUnitCost=65, totalCost=700)])
        _, warnings = mapper.map_activity(record)
        assert warnings == []


class TestTimezone:

    def test_naive_timestamp_in_reporting_timezone(self, raw_activity):
        mapper = RecordMapper("INR", grouper=DateGrouper("Asia/Kolkata"))
        activity, _ = mapper.map_activity(raw_activity(date="2023-06-15T09:00:00"))
        assert activity.timestamp.utcoffset().total_seconds() == 5.5 * 3600


class TestMapLabor:

    def setup_method(self):
        self.mapper = RecordMapper("INR")

    def test_full_record(self, raw_labor):
        record = raw_labor(sectionId="sec-1", miniSectionId="mini-1")
        entry, warnings = self.mapper.map_labor(record)
        assert warnings == []
        assert entry.category == "Civil"
        assert entry.type == "Mason"
        assert entry.count == 5
        assert entry.total_cost == inr(4000)
        assert entry.entry_id == "lab-1"
        assert entry.section_id == "sec-1"
        assert entry.mini_section_id == "mini-1"

    def test_supplied_total_matching(self, raw_labor):
        _, warnings = self.mapper.map_labor(raw_labor(totalCost=4000))
        assert warnings == []

    def test_supplied_total_diverging_is_ignored_with_warning(self, raw_labor):
        entry, warnings = self.mapper.map_labor(raw_labor(totalCost=5000))
        assert entry.total_cost == inr(4000)
        assert len(warnings) == 1
        assert warnings[0].record_type is RecordType.LABOR
        assert warnings[0].field == "totalCost"

    def test_supplied_total_diverging_rejected(self, raw_labor):
        mapper = RecordMapper("INR", cost_pair_policy=CostPairPolicy.REJECT)
        with pytest.raises(InconsistentCostPairError):
            mapper.map_labor(raw_labor(totalCost=5000))

    def test_integral_string_count(self, raw_labor):
        entry, _ = self.mapper.map_labor(raw_labor(count="3"))
        assert entry.count == 3

    @pytest.mark.parametrize("count", [0, -1, 2.5, "two", True])
    def test_invalid_count(self, raw_labor, count):
        with pytest.raises(InvalidQuantityError) as exc_info:
            self.mapper.map_labor(raw_labor(count=count))
        assert exc_info.value.field == "count"

    def test_missing_rate(self, raw_labor):
        with pytest.raises(MissingRequiredFieldError) as exc_info:
            self.mapper.map_labor(raw_labor(per_labor_cost=None))
        assert exc_info.value.field == "perLaborCost"

    def test_missing_category(self, raw_labor):
        with pytest.raises(MissingRequiredFieldError):
            self.mapper.map_labor(raw_labor(category=""))
