"""
Read-side views over daily reports: lookup, filtering, search, grouping, and
the flat rows handed to the spreadsheet exporter.

Foreign keys are never enforced.  A report that points at a deleted master
record resolves to :data:`UNSPECIFIED_LABEL` instead of failing.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from sampro.core.constants import UNSPECIFIED_LABEL
from sampro.core.exceptions import ConstraintError
from sampro.core.models import (
    MASTER_PREFIXES,
    REPORT_FOREIGN_KEYS,
    AppData,
    Collection,
    DailyReport,
)

GROUP_BY_DATE = "reportDate"
GROUP_BY_MATERIAL = "materialTypeId"

# Grouping key (on-disk field name) → column label
GROUP_LABELS: dict[str, str] = {
    "modelId": "الموديل",
    "materialTypeId": "نوع المادة",
    "colorId": "اللون",
    "barcodeId": "الباركود",
    "itemId": "الصنف",
    "sizeId": "المقاس",
    "categoryId": "الفئة",
    "seasonId": "الموسم",
    "reportDate": "تاريخ التقرير",
}

_GROUP_FIELDS: dict[str, str] = {
    "modelId": "model_id",
    "colorId": "color_id",
    "barcodeId": "barcode_id",
    "itemId": "item_id",
    "sizeId": "size_id",
    "categoryId": "category_id",
    "seasonId": "season_id",
    "reportDate": "report_date",
}

MASTER_FIELD_LABELS: dict[str, str] = {
    "id": "الكود",
    "name": "الاسم",
    "description": "الوصف",
    "model_id": "الموديل المرتبط",
    "type": "النوع",
    "notes": "ملاحظات",
}

MASTER_FIELDS: dict[Collection, tuple[str, ...]] = {
    Collection.COLORS: ("id", "name"),
    Collection.MODELS: ("id", "name", "description"),
    Collection.MATERIAL_TYPES: ("id", "name"),
    Collection.BARCODES: ("id", "name", "model_id"),
    Collection.ITEMS: ("id", "name", "type", "notes"),
    Collection.SIZES: ("id", "name"),
    Collection.CATEGORIES: ("id", "name"),
    Collection.SEASONS: ("id", "name"),
}


@dataclass
class GroupTotals:
    """Summed quantities for one group of reports."""

    key: str
    name: str
    quantity_used: float = 0
    quantity_manufactured: float = 0
    quantity_sold: float = 0

    @property
    def balance(self) -> float:
        return self.quantity_manufactured - self.quantity_sold


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------


def lookup_name(data: AppData, collection: Collection, record_id: str) -> str:
    """Name of the master record *record_id*, or the unspecified label."""
    for record in data.records(collection):
        if record.id == record_id:
            return record.name
    return UNSPECIFIED_LABEL


def balance(report: DailyReport) -> float:
    return report.balance


def describe_materials(data: AppData, report: DailyReport) -> str:
    """``قطن: 5 متر | ...`` — one entry per material usage."""
    return " | ".join(
        f"{lookup_name(data, Collection.MATERIAL_TYPES, m.material_type_id)}: "
        f"{_plain_number(m.quantity_used)} متر"
        for m in report.materials_used
    )


def validate_report(report: DailyReport) -> None:
    """Reject a report with no material usage; the entry form always keeps one row."""
    if not report.materials_used:
        raise ConstraintError("A daily report needs at least one material usage")


# ---------------------------------------------------------------------------
# Filtering and search
# ---------------------------------------------------------------------------


def filter_reports(
    reports: Iterable[DailyReport],
    date_from: str = "",
    date_to: str = "",
    material_type_id: str = "",
    **foreign_keys: str,
) -> list[DailyReport]:
    """Reports within the inclusive ISO date range that match every given filter.

    *foreign_keys* take report field names (``model_id="M001"``); empty values
    are ignored.
    """
    unknown = set(foreign_keys) - set(REPORT_FOREIGN_KEYS)
    if unknown:
        raise ValueError(f"Unknown report filters: {sorted(unknown)}")
    wanted = {k: v for k, v in foreign_keys.items() if v}

    result: list[DailyReport] = []
    for report in reports:
        if date_from or date_to:
            if not report.report_date:
                continue
            if date_from and report.report_date < date_from:
                continue
            if date_to and report.report_date > date_to:
                continue
        if any(getattr(report, field) != value for field, value in wanted.items()):
            continue
        if material_type_id and not any(
            m.material_type_id == material_type_id for m in report.materials_used
        ):
            continue
        result.append(report)
    return result


def search_reports(data: AppData, term: str) -> list[DailyReport]:
    """Case-insensitive search over resolved names, date, notes and materials."""
    if not term:
        return list(data.daily_reports)
    needle = term.lower()

    def matches(report: DailyReport) -> bool:
        names = [
            lookup_name(data, collection, getattr(report, field))
            for field, collection in REPORT_FOREIGN_KEYS.items()
        ]
        names.extend(
            lookup_name(data, Collection.MATERIAL_TYPES, m.material_type_id)
            for m in report.materials_used
        )
        names.append(report.report_date)
        names.append(report.notes or "")
        return any(needle in n.lower() for n in names)

    return [r for r in data.daily_reports if matches(r)]


# ---------------------------------------------------------------------------
# Grouping
# ---------------------------------------------------------------------------


def group_reports(data: AppData, reports: Iterable[DailyReport], group_by: str) -> list[GroupTotals]:
    """Totals per group, in first-seen order.

    Grouping by ``materialTypeId`` splits each report into its material usages
    and only sums the used quantity.
    """
    groups: dict[str, GroupTotals] = {}

    if group_by == GROUP_BY_MATERIAL:
        for report in reports:
            for usage in report.materials_used:
                key = usage.material_type_id
                if key not in groups:
                    groups[key] = GroupTotals(
                        key, lookup_name(data, Collection.MATERIAL_TYPES, key)
                    )
                groups[key].quantity_used += usage.quantity_used
        return list(groups.values())

    field = _GROUP_FIELDS.get(group_by)
    if field is None:
        raise ValueError(f"Cannot group reports by {group_by!r}")

    for report in reports:
        key = getattr(report, field)
        if key not in groups:
            if group_by == GROUP_BY_DATE:
                name = key
            else:
                name = lookup_name(data, REPORT_FOREIGN_KEYS[field], key)
            groups[key] = GroupTotals(key, name)
        totals = groups[key]
        totals.quantity_used += report.total_material_used
        totals.quantity_manufactured += report.quantity_manufactured
        totals.quantity_sold += report.quantity_sold
    return list(groups.values())


# ---------------------------------------------------------------------------
# Export rows
# ---------------------------------------------------------------------------


def report_rows(data: AppData, reports: Iterable[DailyReport]) -> list[dict[str, Any]]:
    """Detail rows (inventory view) with resolved names and balance."""
    rows = []
    for r in reports:
        rows.append(
            {
                "تاريخ التقرير": r.report_date,
                "بدء التشغيل": r.start_date,
                "انتهاء التشغيل": r.end_date,
                "الباركود": lookup_name(data, Collection.BARCODES, r.barcode_id),
                "الموديل": lookup_name(data, Collection.MODELS, r.model_id),
                "الصنف": lookup_name(data, Collection.ITEMS, r.item_id),
                "اللون": lookup_name(data, Collection.COLORS, r.color_id),
                "المقاس": lookup_name(data, Collection.SIZES, r.size_id),
                "الفئة": lookup_name(data, Collection.CATEGORIES, r.category_id),
                "الموسم": lookup_name(data, Collection.SEASONS, r.season_id),
                "المواد المستخدمة": describe_materials(data, r),
                "الكمية المصنّعة": r.quantity_manufactured,
                "الكمية المباعة": r.quantity_sold,
                "الرصيد": balance(r),
                "ملاحظات": r.notes or "",
            }
        )
    return rows


def group_rows(groups: Iterable[GroupTotals], group_by: str) -> list[dict[str, Any]]:
    rows = []
    for g in groups:
        row: dict[str, Any] = {GROUP_LABELS[group_by]: g.name, "إجمالي المستخدم": g.quantity_used}
        if group_by != GROUP_BY_MATERIAL:
            row["إجمالي المصنّع"] = g.quantity_manufactured
            row["إجمالي المباع"] = g.quantity_sold
        rows.append(row)
    return rows


def master_rows(data: AppData, collection: Collection) -> list[dict[str, Any]]:
    if collection not in MASTER_PREFIXES:
        raise ValueError(f"{collection.value} is not a master collection")
    fields = MASTER_FIELDS[collection]
    return [
        {MASTER_FIELD_LABELS[f]: getattr(record, f, None) for f in fields}
        for record in data.records(collection)
    ]


def _plain_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return str(value)
