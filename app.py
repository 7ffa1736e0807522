import altair as alt
import pandas as pd
import streamlit as st
from contextlib import contextmanager
from dataclasses import asdict
from typing import List, Optional

from core.app_state import AppState, build_app_state
from core.charts import category_pie_chart, orders_customers_chart, region_bar_chart, revenue_trend_chart
from core.dashboards import TEAMS
from core.data import load_dashboard_data
from core.data_sources import INTEGRATIONS
from core.drilldown import Dimension
from core.metrics_overview import compute_kpis
from core.reports import AVAILABLE_COLUMNS, AVAILABLE_TABLES, CHART_TYPES, EXPORT_FORMATS, ReportDraft, request_export
from core.schedules import FREQUENCIES, INSIGHTS

alt.data_transformers.disable_max_rows()


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .app-top-bar {padding: 6px 0 4px;border-bottom: 1px solid #e5e7eb;margin-bottom: 10px;}
        .app-top-bar .breadcrumb {color: #6b7280;font-size: 0.9rem;margin-bottom: 2px;}
        .app-top-bar .page-title {font-size: 1.4rem;font-weight: 700;color: #111827;}
        .card {border: 1px solid #e5e7eb;border-radius: 12px;padding: 16px;background: #ffffff;
               box-shadow: 0 1px 2px rgba(0,0,0,0.04); margin-bottom: 12px;}
        .card-header {display: flex;justify-content: space-between;align-items: center;margin-bottom: 8px;}
        .card-title {font-weight: 600;font-size: 1.0rem;color: #111827;}
        .card-actions {font-size: 0.8rem;color: #64748b;}
        .edit-banner {background: #fffbeb;border: 1px solid #fde68a;border-radius: 8px;padding: 8px 14px;color: #92400e;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: str, actions: Optional[str] = None):
    container = st.container()
    container.markdown(
        f"""
        <div class="card">
          <div class="card-header">
            <div class="card-title">{title}</div>
            <div class="card-actions">{actions or ""}</div>
          </div>
        """,
        unsafe_allow_html=True,
    )
    body = container.container()
    with body:
        yield body
    container.markdown("</div>", unsafe_allow_html=True)


def render_page_header(title: str, breadcrumb: str):
    inject_base_styles()
    st.markdown(
        f"<div class='app-top-bar'><div class='breadcrumb'>{breadcrumb}</div><div class='page-title'>{title}</div></div>",
        unsafe_allow_html=True,
    )


def get_state() -> AppState:
    if "abacus_state" not in st.session_state:
        st.session_state["abacus_state"] = build_app_state()
    return st.session_state["abacus_state"]


def get_report_draft() -> ReportDraft:
    if "report_draft" not in st.session_state:
        st.session_state["report_draft"] = ReportDraft()
    return st.session_state["report_draft"]


def drill_buttons(state: AppState, dashboard_id: str, dimension: Dimension, labels: List[str]):
    navigator = state.dashboards.session(dashboard_id).navigator
    if navigator.path.for_dimension(dimension) is not None:
        return
    cols = st.columns(max(1, len(labels)))
    for col, label in zip(cols, labels):
        if col.button(label, key=f"drill-{dimension.value}-{label}"):
            navigator.drill_into(dimension, label)
            st.rerun()


# ---------- pages ----------
def render_dashboard(state: AppState):
    registry = state.dashboards
    dashboards = registry.list()
    active = registry.active or dashboards[0]

    with st.sidebar:
        st.markdown("### Dashboards")
        names = [f"{'★ ' if d.favorite else ''}{d.name} ({d.team})" for d in dashboards]
        idx = st.selectbox("Active dashboard", range(len(dashboards)), index=dashboards.index(active), format_func=lambda i: names[i])
        if dashboards[idx].id != active.id:
            registry.activate(dashboards[idx].id)
            st.rerun()
        c1, c2 = st.columns(2)
        if c1.button("Toggle favorite"):
            registry.toggle_favorite(active.id)
            st.rerun()
        if len(dashboards) > 1 and c2.button("Delete"):
            registry.delete(active.id)
            st.rerun()
        with st.expander("New dashboard"):
            name = st.text_input("Dashboard Name *", placeholder="e.g., Sales Performance")
            team = st.selectbox("Team/Department *", [""] + list(TEAMS))
            description = st.text_area("Description", placeholder="Brief description of this dashboard's purpose")
            if st.button("Create Dashboard", disabled=not name or not team):
                registry.create(name, team, description)
                st.rerun()

    session = registry.session(active.id)
    navigator = session.navigator
    layout = session.layout
    ctx = load_dashboard_data()

    render_page_header(active.name, active.team)
    st.caption(active.description)

    if len(navigator.path) > 0:
        crumbs = navigator.breadcrumbs()
        cols = st.columns(len(crumbs) + 1)
        if cols[0].button("← Back to Overview"):
            navigator.reset_to_overview()
            st.rerun()
        for col, crumb in zip(cols[1:], crumbs):
            if col.button(crumb["label"], key=f"crumb-{crumb['index']}"):
                navigator.truncate_at(crumb["index"])
                st.rerun()

    edit_label = "Save Layout" if layout.edit_mode else "Edit Layout"
    if st.button(edit_label):
        layout.set_edit_mode(not layout.edit_mode)
        st.rerun()
    if layout.edit_mode:
        st.markdown(
            "<div class='edit-banner'><strong>Edit Mode:</strong> Move widgets to reposition them. "
            f"Changes snap to a {layout.grid_size}px grid.</div>",
            unsafe_allow_html=True,
        )

    kpis = compute_kpis(ctx["sales_trend"])
    cols = st.columns(4)
    cols[0].metric("Total Revenue", kpis["display"]["total_revenue"], delta="+12.5%")
    cols[1].metric("Total Orders", kpis["display"]["total_orders"], delta="+8.2%")
    cols[2].metric("Total Customers", kpis["display"]["total_customers"], delta="+15.3%")
    cols[3].metric("Avg Order Value", kpis["display"]["avg_order_value"], delta="-2.4%")

    category = navigator.resolve_display_data(Dimension.CATEGORY)
    region = navigator.resolve_display_data(Dimension.REGION)
    at_overview = len(navigator.path) == 0

    widgets = {
        "revenue": ("Revenue Trend", None, lambda: st.altair_chart(revenue_trend_chart(ctx["sales_trend"]), use_container_width=True)),
        "category": ("Sales by Category", "Click to drill down" if at_overview else None, lambda: (
            st.altair_chart(category_pie_chart(category), use_container_width=True),
            drill_buttons(state, active.id, Dimension.CATEGORY, [r.label for r in category]),
        )),
        "orders": ("Orders & Customers", None, lambda: st.altair_chart(orders_customers_chart(ctx["sales_trend"]), use_container_width=True)),
        "regional": ("Regional Performance", "Click bars to drill down" if at_overview else None, lambda: (
            st.altair_chart(
                region_bar_chart(region, drilled=navigator.path.for_dimension(Dimension.REGION) is not None),
                use_container_width=True,
            ),
            drill_buttons(state, active.id, Dimension.REGION, [r.label for r in region]),
        )),
    }

    # Render in grid order: rows by y, then columns by x.
    ordered = sorted(layout.state.values(), key=lambda p: (p.y, p.x))
    for row_start in range(0, len(ordered), 2):
        cols = st.columns(2)
        for col, pos in zip(cols, ordered[row_start:row_start + 2]):
            title, hint, render = widgets[pos.id]
            with col:
                with card(title, hint):
                    render()
                    if layout.edit_mode:
                        mx, my, mb = st.columns([2, 2, 1])
                        x = mx.number_input("x", value=pos.x, step=layout.grid_size, key=f"x-{pos.id}")
                        y = my.number_input("y", value=pos.y, step=layout.grid_size, key=f"y-{pos.id}")
                        if mb.button("Move", key=f"move-{pos.id}"):
                            layout.move_widget(pos.id, x, y)
                            st.rerun()

    with card("Recent Activity"):
        st.dataframe(ctx["recent_activity"], use_container_width=True, hide_index=True)


def render_data_sources(state: AppState):
    render_page_header("Data Sources", "Connect and manage your data sources for reporting and analytics")
    registry = state.data_sources
    with card("Connected Sources"):
        for source in registry.list():
            c1, c2 = st.columns([5, 1])
            status = "🟢 Connected" if source.status == "connected" else "🔴 Disconnected"
            c1.markdown(f"**{source.name}** · {source.type} · {status} · Last sync: {source.last_sync or 'never'}")
            if c2.button("Remove", key=f"ds-{source.id}"):
                registry.delete(source.id)
                st.rerun()
    with card("Add Data Source"):
        source_type = st.selectbox("Integration", INTEGRATIONS)
        name = st.text_input("Connection name")
        if st.button("Connect", disabled=not name):
            registry.add(name, source_type)
            st.rerun()


def render_report_builder(state: AppState):
    render_page_header("Report Builder", "Build, save and export reports")
    draft = get_report_draft()
    left, right = st.columns([1, 2])
    with left:
        table = st.selectbox(
            "Data Source",
            list(AVAILABLE_TABLES),
            index=list(AVAILABLE_TABLES).index(draft.table),
            format_func=lambda t: AVAILABLE_TABLES[t],
        )
        if table != draft.table:
            draft.select_table(table)
        st.markdown("**Available Columns**")
        for column in AVAILABLE_COLUMNS.get(draft.table, []):
            if st.button(f"+ {column.name} ({column.type})", key=f"col-{column.id}"):
                draft.add_column(column)
        drill_col = st.selectbox("Add drill-down level", [c.name for c in draft.columns] or [""])
        if st.button("Add drill-down") and drill_col:
            draft.add_drill_down(drill_col)
        if st.button("Add filter"):
            draft.add_filter()
    with right:
        chart_type = st.radio("Chart type", list(CHART_TYPES), format_func=lambda t: CHART_TYPES[t], horizontal=True)
        draft.set_chart_type(chart_type)
        st.markdown("**Columns**: " + ", ".join(c.name for c in draft.columns))
        st.markdown("**Drill-down**: " + " → ".join(d.column for d in draft.drill_down_levels))
        if draft.filters:
            st.dataframe(pd.DataFrame([asdict(f) for f in draft.filters]), hide_index=True)
        with card("Save Report"):
            name = st.text_input("Report name")
            description = st.text_input("Report description")
            for dashboard in state.dashboards.list():
                checked = st.checkbox(dashboard.name, value=dashboard.id in draft.dashboards, key=f"rd-{dashboard.id}")
                if checked != (dashboard.id in draft.dashboards):
                    draft.toggle_dashboard(dashboard.id)
            if st.button("Save Report", disabled=not name):
                report = state.reports.add(draft, name, description)
                st.session_state.pop("report_draft", None)
                st.success(f'Report "{report.name}" saved successfully!')

    with card("Saved Reports"):
        for report in state.reports.list():
            c1, c2 = st.columns([4, 2])
            c1.markdown(f"**{report.name}** · {CHART_TYPES.get(report.chart_type, report.chart_type)} · {report.description}")
            fmt = c2.selectbox("Export", EXPORT_FORMATS, key=f"fmt-{report.id}", label_visibility="collapsed")
            if c2.button("Export", key=f"exp-{report.id}"):
                st.info(request_export(report, fmt)["message"])


def render_scheduling(state: AppState):
    render_page_header("Scheduling & Exports", "Automate your reports and get insights delivered on schedule")
    left, right = st.columns([2, 1])
    with left:
        with card("Active Schedules"):
            for schedule in state.schedules.list():
                c1, c2, c3 = st.columns([5, 1, 1])
                c1.markdown(
                    f"**{schedule.name}** · {schedule.content_name} · {schedule.frequency} at {schedule.time} · "
                    f"{schedule.format.upper()} → {', '.join(schedule.recipients)}"
                )
                if c2.button("Pause" if schedule.enabled else "Resume", key=f"tog-{schedule.id}"):
                    state.schedules.toggle(schedule.id)
                    st.rerun()
                if c3.button("Delete", key=f"del-{schedule.id}"):
                    state.schedules.delete(schedule.id)
                    st.rerun()
        with card("Schedule a New Export"):
            content_type = st.radio("Content", ["dashboard", "report"], horizontal=True)
            options = state.dashboards.list() if content_type == "dashboard" else state.reports.list()
            content = st.selectbox("Select content", options, format_func=lambda o: o.name)
            name = st.text_input("Schedule name")
            frequency = st.selectbox("Frequency", FREQUENCIES, index=1)
            fmt = st.selectbox("Format", EXPORT_FORMATS)
            recipients = st.text_input("Recipients (comma separated)")
            send_time = st.text_input("Time", "09:00")
            if st.button("Create Schedule", disabled=not (name and content and recipients)):
                state.schedules.create(
                    name=name,
                    content_type=content_type,
                    content_id=content.id,
                    recipients=recipients,
                    frequency=frequency,
                    format=fmt,
                    time=send_time,
                )
                st.rerun()
    with right:
        with card("Insights"):
            for insight in INSIGHTS:
                st.markdown(f"**{insight['title']}**  \n{insight['description']}  \n_{insight['timestamp']}_")


# ---------- UI setup ----------
st.set_page_config(page_title="Abacus BI", layout="wide")
inject_base_styles()
st.title("Abacus BI")

app_state = get_state()
with st.sidebar:
    st.markdown("### Navigate")
    nav_choice = st.radio("Navigate", ["Dashboard", "Data Sources", "Report Builder", "Scheduling"], index=0)
    st.markdown("---")

if nav_choice == "Dashboard":
    render_dashboard(app_state)
elif nav_choice == "Data Sources":
    render_data_sources(app_state)
elif nav_choice == "Report Builder":
    render_report_builder(app_state)
else:
    render_scheduling(app_state)
