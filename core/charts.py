from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List

import altair as alt
import pandas as pd

from core.drilldown import DisplayRecord

alt.data_transformers.disable_max_rows()

AXIS_COLOR = "#64748b"
GRID_COLOR = "#e2e8f0"


def to_vega_spec(chart: alt.Chart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def _records_frame(records: List[DisplayRecord]) -> pd.DataFrame:
    return pd.DataFrame([asdict(r) for r in records], columns=["label", "value", "color"])


def revenue_trend_chart(sales_df: pd.DataFrame) -> alt.Chart:
    months = sales_df["month"].tolist()
    return (
        alt.Chart(sales_df)
        .mark_area(line={"color": "#8b5cf6", "strokeWidth": 3}, color="#8b5cf6", opacity=0.3)
        .encode(
            x=alt.X("month:N", title=None, sort=months, axis=alt.Axis(labelColor=AXIS_COLOR)),
            y=alt.Y("revenue:Q", title=None, axis=alt.Axis(gridColor=GRID_COLOR, gridDash=[3, 3])),
            tooltip=[alt.Tooltip("month:N", title="Month"), alt.Tooltip("revenue:Q", title="Revenue", format="$,.0f")],
        )
        .properties(title="Revenue Trend", height=300)
    )


def orders_customers_chart(sales_df: pd.DataFrame) -> alt.Chart:
    months = sales_df["month"].tolist()
    long_df = sales_df.melt(id_vars="month", value_vars=["orders", "customers"], var_name="metric", value_name="count")
    return (
        alt.Chart(long_df)
        .mark_line(point={"filled": True}, strokeWidth=3)
        .encode(
            x=alt.X("month:N", title=None, sort=months),
            y=alt.Y("count:Q", title=None, axis=alt.Axis(gridColor=GRID_COLOR, gridDash=[3, 3])),
            color=alt.Color(
                "metric:N",
                title=None,
                scale=alt.Scale(domain=["orders", "customers"], range=["#3b82f6", "#10b981"]),
            ),
            tooltip=[
                alt.Tooltip("month:N", title="Month"),
                alt.Tooltip("metric:N", title="Metric"),
                alt.Tooltip("count:Q", title="Count", format=","),
            ],
        )
        .properties(title="Orders & Customers", height=300)
    )


def category_pie_chart(records: List[DisplayRecord]) -> alt.Chart:
    df = _records_frame(records)
    labels = df["label"].tolist()
    colors = df["color"].fillna("#8884d8").tolist()
    return (
        alt.Chart(df)
        .mark_arc(outerRadius=100)
        .encode(
            theta=alt.Theta("value:Q"),
            color=alt.Color("label:N", title=None, scale=alt.Scale(domain=labels, range=colors)),
            tooltip=[alt.Tooltip("label:N", title="Name"), alt.Tooltip("value:Q", title="Share", format=".0f")],
        )
        .properties(title="Sales by Category", height=300)
    )


def region_bar_chart(records: List[DisplayRecord], *, drilled: bool = False) -> alt.Chart:
    df = _records_frame(records)
    axis_title = "State" if drilled else "Region"
    return (
        alt.Chart(df)
        .mark_bar(color="#8b5cf6", cornerRadiusTopLeft=8, cornerRadiusTopRight=8)
        .encode(
            x=alt.X("label:N", title=axis_title, sort=None),
            y=alt.Y("value:Q", title="Sales", axis=alt.Axis(gridColor=GRID_COLOR, gridDash=[3, 3])),
            tooltip=[alt.Tooltip("label:N", title=axis_title), alt.Tooltip("value:Q", title="Sales", format="$,.0f")],
        )
        .properties(title="Regional Performance", height=300)
    )
