from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Dict, List, Mapping, Optional

from core.data import SEED_DASHBOARDS, default_widget_positions, load_dashboard_data, new_id
from core.drilldown import Dimension, DimensionDataset, DrillDownNavigator
from core.layout import WidgetLayoutManager


logger = logging.getLogger(__name__)

TEAMS = (
    "Leadership",
    "Sales",
    "Marketing",
    "Operations",
    "Finance",
    "Product",
    "Engineering",
    "Customer Success",
)


@dataclass(frozen=True)
class DashboardConfig:
    id: str
    name: str
    team: str
    description: str = ""
    favorite: bool = False


class DashboardSession:
    """Drill path and widget layout for one open dashboard."""

    def __init__(
        self,
        dashboard_id: str,
        *,
        datasets: Optional[Mapping[Dimension, DimensionDataset]] = None,
    ) -> None:
        self.dashboard_id = dashboard_id
        if datasets is None:
            datasets = load_dashboard_data()["datasets"]
        self.navigator = DrillDownNavigator(datasets)
        self.layout = WidgetLayoutManager(default_widget_positions())


class DashboardRegistry:
    def __init__(self, dashboards: Optional[List[DashboardConfig]] = None) -> None:
        if dashboards is None:
            dashboards = [DashboardConfig(**d) for d in SEED_DASHBOARDS]
        self._dashboards: Dict[str, DashboardConfig] = {d.id: d for d in dashboards}
        self._sessions: Dict[str, DashboardSession] = {}
        self._active_id = next(iter(self._dashboards), "")

    def list(self) -> List[DashboardConfig]:
        return list(self._dashboards.values())

    def get(self, dashboard_id: str) -> DashboardConfig:
        try:
            return self._dashboards[dashboard_id]
        except KeyError:
            raise KeyError(f"Unknown dashboard: {dashboard_id}") from None

    def __contains__(self, dashboard_id: object) -> bool:
        return dashboard_id in self._dashboards

    @property
    def active(self) -> Optional[DashboardConfig]:
        return self._dashboards.get(self._active_id)

    def activate(self, dashboard_id: str) -> DashboardConfig:
        dashboard = self.get(dashboard_id)
        self._active_id = dashboard.id
        return dashboard

    def create(self, name: str, team: str, description: str = "") -> DashboardConfig:
        name = (name or "").strip()
        team = (team or "").strip()
        if not name or not team:
            raise ValueError("Dashboard name and team are required")
        dashboard = DashboardConfig(id=new_id(), name=name, team=team, description=(description or "").strip())
        self._dashboards[dashboard.id] = dashboard
        self._active_id = dashboard.id
        logger.info("dashboard created: %s (%s)", dashboard.name, dashboard.id)
        return dashboard

    def delete(self, dashboard_id: str) -> None:
        self.get(dashboard_id)
        if len(self._dashboards) <= 1:
            raise ValueError("The last dashboard cannot be deleted")
        del self._dashboards[dashboard_id]
        self._sessions.pop(dashboard_id, None)
        if self._active_id == dashboard_id:
            self._active_id = next(iter(self._dashboards))
        logger.info("dashboard deleted: %s", dashboard_id)

    def toggle_favorite(self, dashboard_id: str) -> DashboardConfig:
        dashboard = self.get(dashboard_id)
        updated = replace(dashboard, favorite=not dashboard.favorite)
        self._dashboards[dashboard_id] = updated
        return updated

    def session(self, dashboard_id: str) -> DashboardSession:
        self.get(dashboard_id)
        if dashboard_id not in self._sessions:
            self._sessions[dashboard_id] = DashboardSession(dashboard_id)
        return self._sessions[dashboard_id]
