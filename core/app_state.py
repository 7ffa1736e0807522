from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from core.config import Settings, load_settings
from core.dashboards import DashboardRegistry
from core.data_sources import DataSourceRegistry
from core.reports import ReportStore
from core.schedules import ScheduleStore


@dataclass
class AppState:
    settings: Settings
    dashboards: DashboardRegistry
    reports: ReportStore
    schedules: ScheduleStore
    data_sources: DataSourceRegistry


def build_app_state(settings: Optional[Settings] = None) -> AppState:
    settings = settings or load_settings()
    dashboards = DashboardRegistry()
    reports = ReportStore()
    return AppState(
        settings=settings,
        dashboards=dashboards,
        reports=reports,
        schedules=ScheduleStore(dashboards, reports),
        data_sources=DataSourceRegistry(),
    )
