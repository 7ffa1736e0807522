from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, Optional

import pandas as pd

from core.charts import (
    category_pie_chart,
    orders_customers_chart,
    region_bar_chart,
    revenue_trend_chart,
    to_vega_spec,
)
from core.dashboards import DashboardConfig, DashboardSession
from core.data import format_currency_0, round_half_up
from core.drilldown import Dimension


def _total(df: pd.DataFrame, col: str) -> Optional[int]:
    if df.empty or col not in df.columns:
        return None
    return int(df[col].sum())


def compute_kpis(sales_df: pd.DataFrame) -> Dict[str, Any]:
    revenue = _total(sales_df, "revenue")
    orders = _total(sales_df, "orders")
    customers = _total(sales_df, "customers")
    avg_order_value = round_half_up(revenue / orders) if revenue is not None and orders else None
    return {
        "total_revenue": revenue,
        "total_orders": orders,
        "total_customers": customers,
        "avg_order_value": avg_order_value,
        "display": {
            "total_revenue": format_currency_0(revenue),
            "total_orders": f"{orders:,}" if orders is not None else "N/A",
            "total_customers": f"{customers:,}" if customers is not None else "N/A",
            "avg_order_value": format_currency_0(avg_order_value),
        },
    }


def compute_dashboard_view(dashboard: DashboardConfig, session: DashboardSession, ctx: Dict[str, Any]) -> Dict[str, Any]:
    sales_df: pd.DataFrame = ctx.get("sales_trend", pd.DataFrame())
    activity: pd.DataFrame = ctx.get("recent_activity", pd.DataFrame())
    navigator = session.navigator
    layout = session.layout

    category = navigator.resolve_display_data(Dimension.CATEGORY)
    region = navigator.resolve_display_data(Dimension.REGION)
    region_drilled = navigator.path.for_dimension(Dimension.REGION) is not None
    at_overview = len(navigator.path) == 0

    charts: Dict[str, Any] = {}
    if not sales_df.empty:
        charts["revenue"] = to_vega_spec(revenue_trend_chart(sales_df))
        charts["orders"] = to_vega_spec(orders_customers_chart(sales_df))
    charts["category"] = to_vega_spec(category_pie_chart(category))
    charts["regional"] = to_vega_spec(region_bar_chart(region, drilled=region_drilled))

    return {
        "dashboard": asdict(dashboard),
        "kpis": compute_kpis(sales_df),
        "drill_path": navigator.path.to_records(),
        "breadcrumbs": navigator.breadcrumbs(),
        "drill_hints": {
            "category": "Click to drill down" if at_overview else None,
            "regional": "Click bars to drill down" if at_overview else None,
        },
        "data": {
            "category": [asdict(r) for r in category],
            "region": [asdict(r) for r in region],
        },
        "edit_mode": layout.edit_mode,
        "grid_size": layout.grid_size,
        "widgets": layout.state.to_records(),
        "recent_activity": activity.to_dict(orient="records") if not activity.empty else [],
        "charts": charts,
    }
