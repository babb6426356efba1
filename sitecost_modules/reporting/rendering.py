"""
Report rendering helpers (``sitecost_modules.reporting.rendering``).

Display-side code only: JSON-ready dicts, money formatting, and a plain
text summary for terminals. Rounding happens here and nowhere upstream.
"""

from __future__ import annotations

import dataclasses
from datetime import date
from decimal import Decimal
from enum import Enum

from sitecost_kernel.domain.values import Money
from sitecost_engines.classifier import SpendCategory
from sitecost_modules.reporting.models import ReportDocument

_SPEND_LABELS = {
    SpendCategory.NEW_SPEND: "Added to Project Cost",
    SpendCategory.INVENTORY_CONSUMPTION: "Inventory Value Only",
    SpendCategory.INVENTORY_RELOCATION: "Inventory Value Only",
}


def render_to_dict(obj: object) -> dict | list | str | int | float | bool | None:
    """
    Convert any report dataclass to a plain dict for JSON serialization.

    Handles:
    - Money -> {"amount": str, "currency": code}
    - Decimal -> str (preserving precision)
    - date / datetime -> ISO format string
    - Enum -> .value
    - Nested frozen dataclasses -> nested dicts
    - Tuples -> lists
    - None preserved
    """
    if obj is None:
        return None
    if isinstance(obj, Money):
        return {"amount": str(obj.amount), "currency": obj.currency.code}
    if isinstance(obj, Decimal):
        return str(obj)
    if isinstance(obj, date):
        return obj.isoformat()
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (list, tuple)):
        return [render_to_dict(item) for item in obj]
    if isinstance(obj, dict):
        return {str(k): render_to_dict(v) for k, v in obj.items()}
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return {
            f.name: render_to_dict(getattr(obj, f.name))
            for f in dataclasses.fields(obj)
        }
    if isinstance(obj, (str, int, float, bool)):
        return obj
    return str(obj)


def _group_digits(digits: str, grouping: str) -> str:
    if len(digits) <= 3:
        return digits
    if grouping == "international":
        return f"{int(digits):,}"
    # Indian: last three digits, then groups of two
    head, tail = digits[:-3], digits[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return ",".join(pairs + [tail])


def format_money(
    money: Money,
    grouping: str = "indian",
    places: int | None = None,
) -> str:
    """
    Round half-up and format with symbol and digit grouping.

    ``places`` defaults to the currency's minor unit (2 for INR, 0 for JPY).

    >>> format_money(Money.of("123456", "INR"))
    '₹1,23,456.00'
    """
    if grouping not in ("indian", "international"):
        raise ValueError(f"Unknown digit grouping: {grouping}")
    rounded = money.round(places).amount
    sign = "-" if rounded < 0 else ""
    text = f"{abs(rounded):f}"
    integer, _, fraction = text.partition(".")
    body = _group_digits(integer, grouping)
    if fraction:
        body = f"{body}.{fraction}"
    symbol = money.currency.symbol or f"{money.currency.code} "
    return f"{sign}{symbol}{body}"


def spend_label(category: SpendCategory) -> str:
    return _SPEND_LABELS[category]


def render_text_summary(
    document: ReportDocument,
    grouping: str = "indian",
    places: int | None = None,
) -> str:
    """Plain-text report: header, summary, days newest first, labor."""

    def fmt(money: Money) -> str:
        return format_money(money, grouping, places)

    header = document.header
    summary = document.summary
    period = header.period
    lines = [
        "MATERIAL & LABOR COST REPORT",
        "=" * 60,
        f"Company:      {header.company.name}",
    ]
    if header.project_name or header.project_id:
        lines.append(f"Project:      {header.project_name or header.project_id}")
    if header.prepared_by:
        lines.append(f"Prepared by:  {header.prepared_by}")
    lines.append(f"Generated:    {header.generated_at}")
    if period.first_activity_date is not None:
        lines.append(
            f"Report Period: {period.first_activity_date.isoformat()} to "
            f"{period.last_activity_date.isoformat()}"
        )
    lines.append(f"Activities:   {header.activity_filter.value}")
    lines += [
        "",
        "SUMMARY",
        "-" * 60,
        f"Total activities:     {summary.total_activities}",
        f"  Imported:           {summary.counts_by_kind.imported}",
        f"  Used:               {summary.counts_by_kind.used}",
        f"  Transferred:        {summary.counts_by_kind.transferred}",
        f"Material cost:        {fmt(summary.total_material_cost)}",
        f"Labor cost:           {fmt(summary.total_labor_cost)}",
        f"Total project cost:   {fmt(summary.total_project_cost)}",
    ]

    for bucket in document.days:
        lines += ["", f"{bucket.date_key}  (day material cost {fmt(bucket.day_material_total)})"]
        for entry in bucket.entries:
            activity = entry.activity
            lines.append(
                f"  [{activity.kind.value}] {activity.user.full_name or activity.user.id}"
                f" - {fmt(entry.activity_total)} ({spend_label(entry.spend_category)})"
            )
            for item in activity.materials:
                lines.append(
                    f"      {item.name}: {item.quantity} {item.unit} x "
                    f"{fmt(item.per_unit_cost)} = {fmt(item.total_cost)}"
                )
            if activity.transfer_details is not None:
                details = activity.transfer_details
                lines.append(
                    f"      from {details.from_project.name or details.from_project.id}"
                    f" to {details.to_project.name or details.to_project.id}"
                )

    labor = document.labor
    if labor.entries:
        lines += ["", "LABOR", "-" * 60]
        for category in labor.by_category:
            lines.append(
                f"  {category.category}: {category.worker_count} workers"
                f" = {fmt(category.total_cost)}"
            )
            for entry in labor.entries:
                if entry.category == category.category:
                    lines.append(
                        f"      {entry.type}: {entry.count} x "
                        f"{fmt(entry.per_labor_cost)} = {fmt(entry.total_cost)}"
                    )
        lines.append(f"  Total labor: {fmt(labor.total_cost)}")

    if document.skipped:
        lines += ["", f"SKIPPED RECORDS ({len(document.skipped)})", "-" * 60]
        for item in document.skipped:
            lines.append(f"  {item.record_type.value} {item.record_id}: {item.code} {item.message}")

    if document.warnings:
        lines += ["", f"WARNINGS ({len(document.warnings)})", "-" * 60]
        for warning in document.warnings:
            lines.append(f"  {warning.record_type.value} {warning.record_id}: {warning.message}")

    return "\n".join(lines) + "\n"
