from __future__ import annotations

from dataclasses import asdict
from functools import lru_cache
import logging
import math
from typing import Any, Callable

import numpy as np
import pandas as pd
from fastapi import FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder

from api.schemas import (
    DashboardCreateModel,
    DataSourceCreateModel,
    DrillModel,
    EditModeModel,
    ExportModel,
    MoveModel,
    ReportCreateModel,
    ReportUpdateModel,
    ScheduleCreateModel,
)
from core.app_state import AppState, build_app_state
from core.config import load_settings
from core.dashboards import TEAMS
from core.data import load_dashboard_data
from core.data_sources import INTEGRATIONS
from core.drilldown import Dimension
from core.filters import normalize_move
from core.metrics_overview import compute_dashboard_view
from core.reports import AVAILABLE_COLUMNS, AVAILABLE_TABLES, CHART_TYPES, ColumnRef, ReportDraft, request_export
from core.schedules import INSIGHTS


settings = load_settings()
app = FastAPI(title="Abacus Dashboard API", version="0.1.0")
logger = logging.getLogger(__name__)
logging.getLogger("core").setLevel(settings.log_level)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@lru_cache(maxsize=1)
def get_app_state() -> AppState:
    return build_app_state(settings)


def _json(data: object, status_code: int = 200) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except Exception:
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
                pd.Timestamp: lambda ts: ts.isoformat(),
            },
        ),
    )


def _error(status_code: int, exc: Exception) -> JSONResponse:
    message = exc.args[0] if isinstance(exc, KeyError) and exc.args else str(exc)
    return JSONResponse(status_code=status_code, content={"error": message, "type": type(exc).__name__})


def _handle(name: str, fn: Callable[[], Any], status_code: int = 200) -> JSONResponse:
    try:
        return _json(fn(), status_code=status_code)
    except KeyError as exc:
        return _error(404, exc)
    except ValueError as exc:
        return _error(400, exc)
    except Exception as exc:
        logger.exception("%s failed", name)
        return _error(500, exc)


def _drill_payload(state: AppState, dashboard_id: str) -> dict:
    navigator = state.dashboards.session(dashboard_id).navigator
    return {
        "drill_path": navigator.path.to_records(),
        "breadcrumbs": navigator.breadcrumbs(),
        "data": {
            "category": navigator.display_records(Dimension.CATEGORY),
            "region": navigator.display_records(Dimension.REGION),
        },
    }


def _layout_payload(state: AppState, dashboard_id: str) -> dict:
    layout = state.dashboards.session(dashboard_id).layout
    return {"edit_mode": layout.edit_mode, "grid_size": layout.grid_size, "widgets": layout.state.to_records()}


# ---------- meta ----------
@app.get("/meta/teams")
def meta_teams():
    return _json({"teams": list(TEAMS)})


@app.get("/meta/integrations")
def meta_integrations():
    return _json({"integrations": list(INTEGRATIONS)})


@app.get("/meta/tables")
def meta_tables():
    return _json({"tables": [{"name": k, "label": v} for k, v in AVAILABLE_TABLES.items()], "chart_types": CHART_TYPES})


@app.get("/meta/columns")
def meta_columns(table: str = Query(default="sales")):
    return _json({"columns": [asdict(c) for c in AVAILABLE_COLUMNS.get(table, [])]})


# ---------- dashboards ----------
@app.get("/dashboards")
def list_dashboards():
    def _run():
        state = get_app_state()
        active = state.dashboards.active
        return {
            "dashboards": [asdict(d) for d in state.dashboards.list()],
            "active_id": active.id if active else None,
        }

    return _handle("list_dashboards", _run)


@app.post("/dashboards")
def create_dashboard(body: DashboardCreateModel):
    def _run():
        dashboard = get_app_state().dashboards.create(body.name, body.team, body.description)
        return asdict(dashboard)

    return _handle("create_dashboard", _run, status_code=201)


@app.delete("/dashboards/{dashboard_id}")
def delete_dashboard(dashboard_id: str):
    def _run():
        state = get_app_state()
        state.dashboards.delete(dashboard_id)
        active = state.dashboards.active
        return {"deleted": dashboard_id, "active_id": active.id if active else None}

    return _handle("delete_dashboard", _run)


@app.post("/dashboards/{dashboard_id}/favorite")
def toggle_favorite(dashboard_id: str):
    return _handle("toggle_favorite", lambda: asdict(get_app_state().dashboards.toggle_favorite(dashboard_id)))


@app.post("/dashboards/{dashboard_id}/activate")
def activate_dashboard(dashboard_id: str):
    return _handle("activate_dashboard", lambda: asdict(get_app_state().dashboards.activate(dashboard_id)))


@app.get("/dashboards/{dashboard_id}/view")
def dashboard_view(dashboard_id: str):
    def _run():
        state = get_app_state()
        dashboard = state.dashboards.get(dashboard_id)
        return compute_dashboard_view(dashboard, state.dashboards.session(dashboard_id), load_dashboard_data())

    return _handle("dashboard_view", _run)


@app.get("/dashboards/{dashboard_id}/reports")
def dashboard_reports(dashboard_id: str):
    def _run():
        state = get_app_state()
        state.dashboards.get(dashboard_id)
        return {"reports": [asdict(r) for r in state.reports.by_dashboard(dashboard_id)]}

    return _handle("dashboard_reports", _run)


# ---------- drill-down ----------
@app.post("/dashboards/{dashboard_id}/drill")
def drill_into(dashboard_id: str, body: DrillModel):
    def _run():
        state = get_app_state()
        state.dashboards.session(dashboard_id).navigator.drill_into(Dimension(body.dimension), body.value)
        return _drill_payload(state, dashboard_id)

    return _handle("drill_into", _run)


@app.post("/dashboards/{dashboard_id}/breadcrumbs/{index}")
def breadcrumb_click(dashboard_id: str, index: int):
    def _run():
        state = get_app_state()
        state.dashboards.session(dashboard_id).navigator.truncate_at(index)
        return _drill_payload(state, dashboard_id)

    return _handle("breadcrumb_click", _run)


@app.post("/dashboards/{dashboard_id}/overview")
def back_to_overview(dashboard_id: str):
    def _run():
        state = get_app_state()
        state.dashboards.session(dashboard_id).navigator.reset_to_overview()
        return _drill_payload(state, dashboard_id)

    return _handle("back_to_overview", _run)


# ---------- layout ----------
@app.post("/dashboards/{dashboard_id}/edit-mode")
def set_edit_mode(dashboard_id: str, body: EditModeModel):
    def _run():
        state = get_app_state()
        state.dashboards.session(dashboard_id).layout.set_edit_mode(body.enabled)
        return _layout_payload(state, dashboard_id)

    return _handle("set_edit_mode", _run)


@app.post("/dashboards/{dashboard_id}/widgets/{widget_id}/move")
def move_widget(dashboard_id: str, widget_id: str, body: MoveModel):
    def _run():
        state = get_app_state()
        move = normalize_move(body.model_dump())
        state.dashboards.session(dashboard_id).layout.move_widget(widget_id, move.x, move.y)
        return _layout_payload(state, dashboard_id)

    return _handle("move_widget", _run)


# ---------- reports ----------
def _draft_from_model(body: ReportCreateModel) -> ReportDraft:
    draft = ReportDraft()
    draft.select_table(body.table)
    draft.set_chart_type(body.chart_type)
    if body.columns:
        draft.columns = []
        for c in body.columns:
            draft.add_column(ColumnRef(id=c.id, name=c.name, type=c.type, table=c.table or body.table))
    if body.drill_down_levels:
        draft.drill_down_levels = []
        for level in body.drill_down_levels:
            draft.add_drill_down(level.column)
    for f in body.filters:
        draft.add_filter(f.model_dump())
    for dashboard_id in body.dashboards:
        draft.toggle_dashboard(dashboard_id)
    return draft


@app.get("/reports")
def list_reports():
    return _handle("list_reports", lambda: {"reports": [asdict(r) for r in get_app_state().reports.list()]})


@app.post("/reports")
def create_report(body: ReportCreateModel):
    def _run():
        report = get_app_state().reports.add(_draft_from_model(body), body.name, body.description)
        return {"report": asdict(report), "message": f'Report "{report.name}" saved successfully!'}

    return _handle("create_report", _run, status_code=201)


@app.patch("/reports/{report_id}")
def update_report(report_id: str, body: ReportUpdateModel):
    def _run():
        changes = body.model_dump(exclude_none=True)
        if "chart_type" in changes and changes["chart_type"] not in CHART_TYPES:
            raise ValueError(f"Unknown chart type: {changes['chart_type']}")
        return asdict(get_app_state().reports.update(report_id, **changes))

    return _handle("update_report", _run)


@app.delete("/reports/{report_id}")
def delete_report(report_id: str):
    def _run():
        get_app_state().reports.delete(report_id)
        return {"deleted": report_id}

    return _handle("delete_report", _run)


@app.post("/reports/{report_id}/export")
def export_report(report_id: str, body: ExportModel):
    return _handle("export_report", lambda: request_export(get_app_state().reports.get(report_id), body.format))


# ---------- schedules ----------
@app.get("/schedules")
def list_schedules():
    return _handle(
        "list_schedules",
        lambda: {"schedules": [asdict(s) for s in get_app_state().schedules.list()], "insights": INSIGHTS},
    )


@app.post("/schedules")
def create_schedule(body: ScheduleCreateModel):
    return _handle("create_schedule", lambda: asdict(get_app_state().schedules.create(**body.model_dump())), status_code=201)


@app.delete("/schedules/{schedule_id}")
def delete_schedule(schedule_id: str):
    def _run():
        get_app_state().schedules.delete(schedule_id)
        return {"deleted": schedule_id}

    return _handle("delete_schedule", _run)


@app.post("/schedules/{schedule_id}/toggle")
def toggle_schedule(schedule_id: str):
    return _handle("toggle_schedule", lambda: asdict(get_app_state().schedules.toggle(schedule_id)))


# ---------- data sources ----------
@app.get("/data-sources")
def list_data_sources():
    return _handle("list_data_sources", lambda: {"data_sources": [asdict(s) for s in get_app_state().data_sources.list()]})


@app.post("/data-sources")
def add_data_source(body: DataSourceCreateModel):
    return _handle("add_data_source", lambda: asdict(get_app_state().data_sources.add(body.name, body.type)), status_code=201)


@app.delete("/data-sources/{source_id}")
def delete_data_source(source_id: str):
    def _run():
        get_app_state().data_sources.delete(source_id)
        return {"deleted": source_id}

    return _handle("delete_data_source", _run)
