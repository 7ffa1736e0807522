import pandas as pd

from core.dashboards import DashboardRegistry
from core.data import load_dashboard_data
from core.drilldown import Dimension
from core.metrics_overview import compute_dashboard_view, compute_kpis


def test_kpis_from_seed_sales():
    kpis = compute_kpis(load_dashboard_data()["sales_trend"])
    assert kpis["total_revenue"] == 328000
    assert kpis["total_orders"] == 1689
    assert kpis["total_customers"] == 1365
    assert kpis["avg_order_value"] == 194
    assert kpis["display"]["total_revenue"] == "$328,000"
    assert kpis["display"]["total_orders"] == "1,689"
    assert kpis["display"]["avg_order_value"] == "$194"


def test_kpis_on_empty_frame():
    kpis = compute_kpis(pd.DataFrame())
    assert kpis["total_revenue"] is None
    assert kpis["avg_order_value"] is None
    assert kpis["display"]["total_orders"] == "N/A"


def _view(registry, dashboard_id="1"):
    return compute_dashboard_view(registry.get(dashboard_id), registry.session(dashboard_id), load_dashboard_data())


def test_overview_payload():
    registry = DashboardRegistry()
    view = _view(registry)
    assert view["dashboard"]["name"] == "Executive Overview"
    assert view["drill_path"] == []
    assert view["breadcrumbs"] == [{"index": 0, "label": "Overview", "dimension": None}]
    assert view["drill_hints"] == {"category": "Click to drill down", "regional": "Click bars to drill down"}
    assert [r["label"] for r in view["data"]["category"]] == ["Electronics", "Clothing", "Home & Garden", "Sports"]
    assert view["edit_mode"] is False
    assert {w["id"] for w in view["widgets"]} == {"revenue", "category", "orders", "regional"}
    assert set(view["charts"]) == {"revenue", "orders", "category", "regional"}
    assert len(view["recent_activity"]) == 4


def test_drilled_payload_hides_hints_and_relabels_region_axis():
    registry = DashboardRegistry()
    registry.session("1").navigator.drill_into(Dimension.REGION, "North")
    view = _view(registry)
    assert view["drill_hints"] == {"category": None, "regional": None}
    assert view["data"]["region"] == [
        {"label": "NY", "value": 65000, "color": "#8b5cf6"},
        {"label": "MA", "value": 38000, "color": "#3b82f6"},
        {"label": "PA", "value": 22000, "color": "#06b6d4"},
    ]
    assert view["charts"]["regional"]["encoding"]["x"]["title"] == "State"


def test_unknown_drill_renders_empty_chart_data():
    registry = DashboardRegistry()
    registry.session("1").navigator.drill_into(Dimension.CATEGORY, "Toys")
    view = _view(registry)
    assert view["data"]["category"] == []
    assert view["breadcrumbs"][-1]["label"] == "Toys"
    assert "category" in view["charts"]
