from datetime import datetime, timedelta

import pytest

from core.dashboards import DashboardRegistry
from core.data import load_dashboard_data
from core.data_sources import DataSourceRegistry
from core.drilldown import Dimension
from core.reports import ColumnRef, ReportDraft, ReportStore, request_export
from core.schedules import ScheduleStore, parse_recipients


# ---------- dashboards ----------
def test_registry_seeds_four_dashboards():
    registry = DashboardRegistry()
    assert [d.name for d in registry.list()] == [
        "Executive Overview",
        "Sales Performance",
        "Marketing Analytics",
        "Operations Dashboard",
    ]
    assert registry.active.id == "1"
    assert registry.active.favorite is True


def test_create_requires_name_and_team():
    registry = DashboardRegistry()
    with pytest.raises(ValueError):
        registry.create("", "Sales")
    with pytest.raises(ValueError):
        registry.create("Pipeline", "  ")
    assert len(registry.list()) == 4


def test_create_activates_new_dashboard():
    registry = DashboardRegistry()
    dashboard = registry.create("Pipeline", "Sales", "Deals by stage")
    assert registry.active == dashboard
    assert dashboard.favorite is False


def test_delete_active_falls_back_to_first():
    registry = DashboardRegistry()
    registry.activate("3")
    registry.delete("3")
    assert "3" not in registry
    assert registry.active.id == "1"


def test_last_dashboard_cannot_be_deleted():
    registry = DashboardRegistry()
    for dashboard_id in ("2", "3", "4"):
        registry.delete(dashboard_id)
    with pytest.raises(ValueError):
        registry.delete("1")


def test_unknown_dashboard_raises_key_error():
    registry = DashboardRegistry()
    with pytest.raises(KeyError):
        registry.get("nope")
    with pytest.raises(KeyError):
        registry.session("nope")


def test_toggle_favorite():
    registry = DashboardRegistry()
    assert registry.toggle_favorite("2").favorite is True
    assert registry.toggle_favorite("2").favorite is False


def test_sessions_are_per_dashboard_and_dropped_on_delete():
    registry = DashboardRegistry()
    first = registry.session("2")
    first.navigator.drill_into(Dimension.CATEGORY, "Sports")
    assert registry.session("2") is first
    assert len(registry.session("3").navigator.path) == 0
    registry.delete("2")
    with pytest.raises(KeyError):
        registry.session("2")


def test_sessions_read_the_cached_datasets():
    registry = DashboardRegistry()
    cached = load_dashboard_data()["datasets"][Dimension.REGION].top_level
    for dashboard_id in ("1", "2"):
        records = registry.session(dashboard_id).navigator.resolve_display_data(Dimension.REGION)
        assert all(a is b for a, b in zip(records, cached))
        assert len(records) == len(cached)


# ---------- reports ----------
def test_draft_defaults_and_columns():
    draft = ReportDraft()
    assert [c.name for c in draft.columns] == ["Product Name", "Revenue"]
    assert [d.column for d in draft.drill_down_levels] == ["Region"]
    quantity = ColumnRef("s3", "Quantity", "number", "sales")
    draft.add_column(quantity)
    draft.add_column(quantity)
    assert [c.id for c in draft.columns] == ["1", "2", "s3"]
    draft.remove_column("1")
    assert [c.id for c in draft.columns] == ["2", "s3"]


def test_draft_filters_default_to_first_column():
    draft = ReportDraft()
    rule = draft.add_filter()
    assert (rule.column, rule.operator, rule.value) == ("Product Name", "equals", "")
    assert rule.id
    other = draft.add_filter({"column": "Revenue", "operator": "bogus", "value": 10})
    assert other.operator == "equals" and other.value == "10"
    draft.remove_filter(rule.id)
    assert draft.filters == [other]


def test_draft_rejects_unknown_table_and_chart():
    draft = ReportDraft()
    with pytest.raises(ValueError):
        draft.select_table("invoices")
    with pytest.raises(ValueError):
        draft.set_chart_type("radar")


def test_draft_toggle_dashboard():
    draft = ReportDraft()
    draft.toggle_dashboard("1")
    draft.toggle_dashboard("3")
    draft.toggle_dashboard("1")
    assert draft.dashboards == ["3"]


def test_store_add_update_delete():
    store = ReportStore()
    draft = ReportDraft()
    draft.set_chart_type("line")
    draft.toggle_dashboard("4")
    report = store.add(draft, "Top Products", "Best sellers")
    assert report.id.startswith("r")
    assert report.chart_type == "line"
    assert store.by_dashboard("4") == [report]

    updated = store.update(report.id, name="Top Products v2")
    assert updated.name == "Top Products v2"
    assert updated.created_at == report.created_at
    assert updated.last_modified >= report.last_modified

    store.delete(report.id)
    assert report.id not in store
    with pytest.raises(KeyError):
        store.delete(report.id)


def test_store_rejects_unknown_update_fields():
    store = ReportStore()
    with pytest.raises(ValueError):
        store.update("r1", id="x")


def test_store_requires_name():
    with pytest.raises(ValueError):
        ReportStore().add(ReportDraft(), "  ")


def test_seed_reports_by_dashboard():
    store = ReportStore()
    assert [r.id for r in store.by_dashboard("1")] == ["r1", "r2", "r3"]
    assert store.by_dashboard("3") == []


def test_request_export():
    report = ReportStore().get("r1")
    ack = request_export(report, "PDF")
    assert ack == {"report_id": "r1", "format": "pdf", "message": "Exporting report as PDF..."}
    with pytest.raises(ValueError):
        request_export(report, "docx")


# ---------- schedules ----------
@pytest.fixture
def schedules():
    return ScheduleStore(DashboardRegistry(), ReportStore())


def test_parse_recipients():
    assert parse_recipients(" a@x.com, b@y.com ,, ") == ["a@x.com", "b@y.com"]
    assert parse_recipients("") == []


def test_seed_schedules(schedules):
    assert [s.name for s in schedules.list()] == ["Weekly Sales Summary", "Monthly Revenue Report"]


def test_create_schedule_resolves_content_name(schedules):
    now = datetime(2026, 2, 3, 9, 0)
    schedule = schedules.create(
        name="Daily Revenue",
        content_type="report",
        content_id="r1",
        recipients="finance@company.com, cfo@company.com",
        frequency="daily",
        now=now,
    )
    assert schedule.content_name == "Revenue Trend Analysis"
    assert schedule.recipients == ["finance@company.com", "cfo@company.com"]
    assert schedule.enabled is True
    assert schedule.last_run is None
    assert schedule.next_run == now + timedelta(days=1)


def test_create_schedule_validation(schedules):
    with pytest.raises(ValueError):
        schedules.create(name="x", content_type="dashboard", content_id="1", recipients=" , ")
    with pytest.raises(ValueError):
        schedules.create(name="x", content_type="dashboard", content_id="1", recipients="a@b.c", frequency="hourly")
    with pytest.raises(KeyError):
        schedules.create(name="x", content_type="dashboard", content_id="99", recipients="a@b.c")


def test_toggle_and_delete_schedule(schedules):
    assert schedules.toggle("1").enabled is False
    assert schedules.toggle("1").enabled is True
    schedules.delete("2")
    assert [s.id for s in schedules.list()] == ["1"]


# ---------- data sources ----------
def test_data_sources_add_and_delete():
    registry = DataSourceRegistry()
    assert [s.name for s in registry.list()] == ["Production DB", "Analytics Warehouse"]
    source = registry.add("Events", "BigQuery")
    assert (source.status, source.last_sync) == ("connected", "Just now")
    registry.delete(source.id)
    assert len(registry.list()) == 2
    with pytest.raises(KeyError):
        registry.delete(source.id)


def test_data_sources_validation():
    registry = DataSourceRegistry()
    with pytest.raises(ValueError):
        registry.add("", "MySQL")
    with pytest.raises(ValueError):
        registry.add("Legacy", "Oracle")
