"""Saved reports and the report builder draft.

A ``ReportDraft`` accumulates the builder selections (table, columns,
filters, drill-down columns, chart type, target dashboards); ``ReportStore``
keeps the saved reports in memory. Exports are acknowledged only, nothing
is rendered.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, List, Optional

from core.data import SEED_REPORTS, new_id
from core.filters import FilterRule, normalize_filter_rule


logger = logging.getLogger(__name__)

AVAILABLE_TABLES = {
    "sales": "Sales Data",
    "customers": "Customers",
    "products": "Products",
    "orders": "Orders",
}

CHART_TYPES = {
    "bar": "Bar Chart",
    "line": "Line Chart",
    "pie": "Pie Chart",
    "area": "Area Chart",
}

EXPORT_FORMATS = ("pdf", "excel", "csv")


@dataclass(frozen=True)
class ColumnRef:
    id: str
    name: str
    type: str
    table: str = ""


@dataclass(frozen=True)
class DrillDownColumn:
    id: str
    column: str


AVAILABLE_COLUMNS: Dict[str, List[ColumnRef]] = {
    "sales": [
        ColumnRef("s1", "Product Name", "string", "sales"),
        ColumnRef("s2", "Revenue", "number", "sales"),
        ColumnRef("s3", "Quantity", "number", "sales"),
        ColumnRef("s4", "Region", "string", "sales"),
        ColumnRef("s5", "Date", "date", "sales"),
        ColumnRef("s6", "Category", "string", "sales"),
    ],
    "customers": [
        ColumnRef("c1", "Customer Name", "string", "customers"),
        ColumnRef("c2", "Email", "string", "customers"),
        ColumnRef("c3", "Total Spent", "number", "customers"),
    ],
}


@dataclass(frozen=True)
class SavedReport:
    id: str
    name: str
    table: str
    description: str = ""
    columns: List[ColumnRef] = field(default_factory=list)
    filters: List[FilterRule] = field(default_factory=list)
    drill_down_levels: List[DrillDownColumn] = field(default_factory=list)
    chart_type: str = "bar"
    dashboards: List[str] = field(default_factory=list)
    created_at: datetime = field(default_factory=datetime.now)
    last_modified: datetime = field(default_factory=datetime.now)


class ReportDraft:
    def __init__(self) -> None:
        self.table = "sales"
        self.columns: List[ColumnRef] = [
            ColumnRef("1", "Product Name", "string", "sales"),
            ColumnRef("2", "Revenue", "number", "sales"),
        ]
        self.filters: List[FilterRule] = []
        self.drill_down_levels: List[DrillDownColumn] = [DrillDownColumn("1", "Region")]
        self.chart_type = "bar"
        self.dashboards: List[str] = []

    def available_columns(self) -> List[ColumnRef]:
        return list(AVAILABLE_COLUMNS.get(self.table, []))

    def select_table(self, table: str) -> None:
        if table not in AVAILABLE_TABLES:
            raise ValueError(f"Unknown table: {table}")
        self.table = table

    def add_column(self, column: ColumnRef) -> None:
        if any(c.id == column.id for c in self.columns):
            return
        self.columns.append(column)

    def remove_column(self, column_id: str) -> None:
        self.columns = [c for c in self.columns if c.id != column_id]

    def add_drill_down(self, column: str) -> DrillDownColumn:
        level = DrillDownColumn(id=new_id(), column=column)
        self.drill_down_levels.append(level)
        return level

    def add_filter(self, raw: Optional[dict] = None) -> FilterRule:
        default_column = self.columns[0].name if self.columns else ""
        rule = normalize_filter_rule(dict(raw or {}), default_column=default_column)
        if not rule.id:
            rule = replace(rule, id=new_id())
        self.filters.append(rule)
        return rule

    def remove_filter(self, filter_id: str) -> None:
        self.filters = [f for f in self.filters if f.id != filter_id]

    def set_chart_type(self, chart_type: str) -> None:
        if chart_type not in CHART_TYPES:
            raise ValueError(f"Unknown chart type: {chart_type}")
        self.chart_type = chart_type

    def toggle_dashboard(self, dashboard_id: str) -> None:
        if dashboard_id in self.dashboards:
            self.dashboards = [d for d in self.dashboards if d != dashboard_id]
        else:
            self.dashboards = self.dashboards + [dashboard_id]


def _report_from_seed(raw: Dict[str, Any]) -> SavedReport:
    table = raw["table"]
    return SavedReport(
        id=raw["id"],
        name=raw["name"],
        description=raw.get("description", ""),
        table=table,
        columns=[ColumnRef(table=table, **c) for c in raw.get("columns", [])],
        filters=[normalize_filter_rule(f) for f in raw.get("filters", [])],
        drill_down_levels=[DrillDownColumn(**d) for d in raw.get("drill_down_levels", [])],
        chart_type=raw.get("chart_type", "bar"),
        dashboards=list(raw.get("dashboards", [])),
        created_at=raw["created_at"],
        last_modified=raw["last_modified"],
    )


class ReportStore:
    UPDATABLE = {"name", "description", "table", "columns", "filters", "drill_down_levels", "chart_type", "dashboards"}

    def __init__(self, reports: Optional[List[SavedReport]] = None) -> None:
        if reports is None:
            reports = [_report_from_seed(r) for r in SEED_REPORTS]
        self._reports: Dict[str, SavedReport] = {r.id: r for r in reports}

    def list(self) -> List[SavedReport]:
        return list(self._reports.values())

    def get(self, report_id: str) -> SavedReport:
        try:
            return self._reports[report_id]
        except KeyError:
            raise KeyError(f"Unknown report: {report_id}") from None

    def __contains__(self, report_id: object) -> bool:
        return report_id in self._reports

    def add(self, draft: ReportDraft, name: str, description: str = "") -> SavedReport:
        name = (name or "").strip()
        if not name:
            raise ValueError("Report name is required")
        now = datetime.now()
        report = SavedReport(
            id=new_id("r"),
            name=name,
            description=(description or "").strip(),
            table=draft.table,
            columns=list(draft.columns),
            filters=list(draft.filters),
            drill_down_levels=list(draft.drill_down_levels),
            chart_type=draft.chart_type,
            dashboards=list(draft.dashboards),
            created_at=now,
            last_modified=now,
        )
        self._reports[report.id] = report
        logger.info("report saved: %s (%s)", report.name, report.id)
        return report

    def update(self, report_id: str, **changes: Any) -> SavedReport:
        report = self.get(report_id)
        unknown = set(changes) - self.UPDATABLE
        if unknown:
            raise ValueError(f"Cannot update report fields: {', '.join(sorted(unknown))}")
        updated = replace(report, **changes, last_modified=datetime.now())
        self._reports[report_id] = updated
        return updated

    def delete(self, report_id: str) -> None:
        self.get(report_id)
        del self._reports[report_id]
        logger.info("report deleted: %s", report_id)

    def by_dashboard(self, dashboard_id: str) -> List[SavedReport]:
        return [r for r in self._reports.values() if dashboard_id in r.dashboards]


def request_export(report: SavedReport, export_format: str) -> Dict[str, str]:
    export_format = (export_format or "").strip().lower()
    if export_format not in EXPORT_FORMATS:
        raise ValueError(f"Unsupported export format: {export_format}")
    logger.info("export requested: report=%s format=%s", report.id, export_format)
    return {
        "report_id": report.id,
        "format": export_format,
        "message": f"Exporting report as {export_format.upper()}...",
    }
