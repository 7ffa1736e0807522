from __future__ import annotations

import uuid
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from functools import lru_cache
from typing import Any, Dict, List, Optional

import pandas as pd

from core.config import DRILL_PALETTE, GRID_SIZE
from core.drilldown import ChildRecord, Dimension, DimensionDataset, DisplayRecord
from core.layout import WidgetPosition


SALES_TREND = [
    {"month": "Jan", "revenue": 45000, "orders": 234, "customers": 189},
    {"month": "Feb", "revenue": 52000, "orders": 267, "customers": 215},
    {"month": "Mar", "revenue": 48000, "orders": 245, "customers": 198},
    {"month": "Apr", "revenue": 61000, "orders": 312, "customers": 251},
    {"month": "May", "revenue": 55000, "orders": 289, "customers": 234},
    {"month": "Jun", "revenue": 67000, "orders": 342, "customers": 278},
]

CATEGORY_TOP_LEVEL = [
    ("Electronics", 35),
    ("Clothing", 28),
    ("Home & Garden", 22),
    ("Sports", 15),
]

CATEGORY_CHILDREN = {
    "Electronics": [("Laptops", 45), ("Phones", 30), ("Tablets", 25)],
    "Clothing": [("Shirts", 40), ("Pants", 35), ("Shoes", 25)],
    "Home & Garden": [("Furniture", 50), ("Decor", 30), ("Tools", 20)],
    "Sports": [("Equipment", 60), ("Apparel", 40)],
}

REGION_TOP_LEVEL = [
    ("North", 125000),
    ("South", 98000),
    ("East", 142000),
    ("West", 118000),
]

REGION_CHILDREN = {
    "North": [("NY", 65000), ("MA", 38000), ("PA", 22000)],
    "South": [("TX", 48000), ("FL", 35000), ("GA", 15000)],
    "East": [("NJ", 72000), ("VA", 45000), ("NC", 25000)],
    "West": [("CA", 78000), ("WA", 28000), ("OR", 12000)],
}

# (id, column, row) on the dashboard's 2x2 chart grid
DEFAULT_WIDGETS = [
    ("revenue", 0, 0),
    ("category", 1, 0),
    ("orders", 0, 1),
    ("regional", 1, 1),
]

SEED_DASHBOARDS = [
    {"id": "1", "name": "Executive Overview", "team": "Leadership", "description": "High-level KPIs and trends", "favorite": True},
    {"id": "2", "name": "Sales Performance", "team": "Sales", "description": "Revenue, orders, and customer metrics", "favorite": False},
    {"id": "3", "name": "Marketing Analytics", "team": "Marketing", "description": "Campaign performance and ROI", "favorite": False},
    {"id": "4", "name": "Operations Dashboard", "team": "Operations", "description": "Inventory and fulfillment metrics", "favorite": False},
]

SEED_REPORTS = [
    {
        "id": "r1",
        "name": "Revenue Trend Analysis",
        "description": "Monthly revenue tracking",
        "table": "sales",
        "columns": [{"id": "1", "name": "Month", "type": "date"}, {"id": "2", "name": "Revenue", "type": "number"}],
        "drill_down_levels": [{"id": "1", "column": "Region"}],
        "chart_type": "area",
        "dashboards": ["1", "2"],
        "created_at": datetime(2025, 1, 15),
        "last_modified": datetime(2025, 2, 1),
    },
    {
        "id": "r2",
        "name": "Sales by Category",
        "description": "Product category breakdown",
        "table": "sales",
        "columns": [{"id": "1", "name": "Category", "type": "string"}, {"id": "2", "name": "Sales", "type": "number"}],
        "drill_down_levels": [{"id": "1", "column": "Product"}],
        "chart_type": "pie",
        "dashboards": ["1", "2"],
        "created_at": datetime(2025, 1, 20),
        "last_modified": datetime(2025, 1, 28),
    },
    {
        "id": "r3",
        "name": "Regional Performance",
        "description": "Sales by region with state drill-down",
        "table": "sales",
        "columns": [{"id": "1", "name": "Region", "type": "string"}, {"id": "2", "name": "Sales", "type": "number"}],
        "drill_down_levels": [{"id": "1", "column": "State"}],
        "chart_type": "bar",
        "dashboards": ["1", "2"],
        "created_at": datetime(2025, 1, 18),
        "last_modified": datetime(2025, 2, 2),
    },
]

SEED_SCHEDULES = [
    {
        "id": "1",
        "content_type": "dashboard",
        "content_id": "2",
        "content_name": "Sales Performance",
        "name": "Weekly Sales Summary",
        "frequency": "weekly",
        "format": "pdf",
        "recipients": ["sales@company.com", "manager@company.com"],
        "time": "09:00",
        "enabled": True,
        "last_run": datetime(2025, 1, 27),
        "next_run": datetime(2025, 2, 10),
        "include_insights": True,
        "include_raw_data": False,
        "include_charts": True,
    },
    {
        "id": "2",
        "content_type": "report",
        "content_id": "r1",
        "content_name": "Revenue Trend Analysis",
        "name": "Monthly Revenue Report",
        "frequency": "monthly",
        "format": "excel",
        "recipients": ["finance@company.com"],
        "time": "08:00",
        "enabled": True,
        "last_run": datetime(2025, 1, 1),
        "next_run": datetime(2025, 3, 1),
        "include_insights": True,
        "include_raw_data": True,
        "include_charts": True,
    },
]

SEED_DATA_SOURCES = [
    {"id": "1", "name": "Production DB", "type": "PostgreSQL", "status": "connected", "last_sync": "2 minutes ago"},
    {"id": "2", "name": "Analytics Warehouse", "type": "Snowflake", "status": "connected", "last_sync": "5 minutes ago"},
]

RECENT_ACTIVITY = [
    {"action": "New order received", "detail": "Order #4521 - $1,234.00", "time": "2 min ago"},
    {"action": "Report generated", "detail": "Q1 Sales Report", "time": "15 min ago"},
    {"action": "Data source synced", "detail": "PostgreSQL - Production DB", "time": "1 hour ago"},
    {"action": "New customer registered", "detail": "john.doe@example.com", "time": "2 hours ago"},
]


def round_half_up(value: object, ndigits: int = 0) -> Optional[float]:
    if value is None or pd.isna(value):
        return None
    q = Decimal(10) ** -ndigits
    return float(Decimal(str(value)).quantize(q, rounding=ROUND_HALF_UP))


def new_id(prefix: str = "") -> str:
    return f"{prefix}{uuid.uuid4().hex[:12]}"


def format_currency_0(value: object) -> str:
    if value is None or pd.isna(value):
        return "N/A"
    return f"${float(value):,.0f}"


def build_category_dataset() -> DimensionDataset:
    top = [
        DisplayRecord(label=name, value=value, color=DRILL_PALETTE[i % len(DRILL_PALETTE)])
        for i, (name, value) in enumerate(CATEGORY_TOP_LEVEL)
    ]
    children = {k: [ChildRecord(label=label, value=v) for label, v in rows] for k, rows in CATEGORY_CHILDREN.items()}
    return DimensionDataset.build(top, children)


def build_region_dataset() -> DimensionDataset:
    top = [DisplayRecord(label=name, value=value) for name, value in REGION_TOP_LEVEL]
    children = {k: [ChildRecord(label=label, value=v) for label, v in rows] for k, rows in REGION_CHILDREN.items()}
    return DimensionDataset.build(top, children)


def build_dimension_datasets() -> Dict[Dimension, DimensionDataset]:
    return {
        Dimension.CATEGORY: build_category_dataset(),
        Dimension.REGION: build_region_dataset(),
    }


def default_widget_positions(grid_size: int = GRID_SIZE) -> List[WidgetPosition]:
    return [WidgetPosition(id=wid, x=col * grid_size, y=row * grid_size, w=1, h=1) for wid, col, row in DEFAULT_WIDGETS]


def load_sales_trend() -> pd.DataFrame:
    return pd.DataFrame(SALES_TREND)


@lru_cache(maxsize=1)
def _load_dashboard_data_cached() -> Dict[str, Any]:
    return {
        "sales_trend": load_sales_trend(),
        "datasets": build_dimension_datasets(),
        "recent_activity": pd.DataFrame(RECENT_ACTIVITY),
    }


def load_dashboard_data() -> Dict[str, Any]:
    """Static fixture context shared by every dashboard session."""
    return _load_dashboard_data_cached()
