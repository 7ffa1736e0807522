from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from core.dashboards import DashboardRegistry
from core.data import SEED_SCHEDULES, new_id
from core.reports import EXPORT_FORMATS, ReportStore


logger = logging.getLogger(__name__)

CONTENT_TYPES = ("report", "dashboard")
FREQUENCIES = ("daily", "weekly", "monthly")

INSIGHTS = [
    {
        "type": "increase",
        "title": "Revenue increased by 22%",
        "description": "Compared to last week, your revenue has grown significantly driven by the Electronics category.",
        "timestamp": "Based on data from Feb 3, 2026",
    },
    {
        "type": "alert",
        "title": "Customer churn rate rising",
        "description": "There's a 5% increase in customer churn. Consider reviewing your retention strategies.",
        "timestamp": "Based on data from Feb 3, 2026",
    },
    {
        "type": "success",
        "title": "Regional performance balanced",
        "description": "All regions are performing within expected ranges with East region leading.",
        "timestamp": "Based on data from Feb 3, 2026",
    },
]


@dataclass(frozen=True)
class Schedule:
    id: str
    content_type: str
    content_id: str
    content_name: str
    name: str
    frequency: str
    format: str
    recipients: List[str] = field(default_factory=list)
    time: str = "09:00"
    enabled: bool = True
    last_run: Optional[datetime] = None
    next_run: Optional[datetime] = None
    include_insights: bool = True
    include_raw_data: bool = False
    include_charts: bool = True


def parse_recipients(raw: str) -> List[str]:
    return [r.strip() for r in (raw or "").split(",") if r.strip()]


class ScheduleStore:
    def __init__(
        self,
        dashboards: DashboardRegistry,
        reports: ReportStore,
        schedules: Optional[List[Schedule]] = None,
    ) -> None:
        self._dashboards = dashboards
        self._reports = reports
        if schedules is None:
            schedules = [Schedule(**s) for s in SEED_SCHEDULES]
        self._schedules: Dict[str, Schedule] = {s.id: s for s in schedules}

    def list(self) -> List[Schedule]:
        return list(self._schedules.values())

    def get(self, schedule_id: str) -> Schedule:
        try:
            return self._schedules[schedule_id]
        except KeyError:
            raise KeyError(f"Unknown schedule: {schedule_id}") from None

    def _content_name(self, content_type: str, content_id: str) -> str:
        if content_type == "dashboard":
            return self._dashboards.get(content_id).name
        return self._reports.get(content_id).name

    def create(
        self,
        *,
        name: str,
        content_type: str,
        content_id: str,
        recipients: str,
        frequency: str = "weekly",
        format: str = "pdf",
        time: str = "09:00",
        include_insights: bool = True,
        include_raw_data: bool = False,
        include_charts: bool = True,
        now: Optional[datetime] = None,
    ) -> Schedule:
        name = (name or "").strip()
        recipient_list = parse_recipients(recipients)
        if not name or not content_id or not recipient_list:
            raise ValueError("Schedule name, content and recipients are required")
        if content_type not in CONTENT_TYPES:
            raise ValueError(f"Unknown content type: {content_type}")
        if frequency not in FREQUENCIES:
            raise ValueError(f"Unknown frequency: {frequency}")
        if format not in EXPORT_FORMATS:
            raise ValueError(f"Unknown format: {format}")

        now = now or datetime.now()
        schedule = Schedule(
            id=new_id(),
            content_type=content_type,
            content_id=content_id,
            content_name=self._content_name(content_type, content_id),
            name=name,
            frequency=frequency,
            format=format,
            recipients=recipient_list,
            time=time,
            enabled=True,
            next_run=now + timedelta(days=1),
            include_insights=include_insights,
            include_raw_data=include_raw_data,
            include_charts=include_charts,
        )
        self._schedules[schedule.id] = schedule
        logger.info("schedule created: %s -> %s", schedule.name, ", ".join(recipient_list))
        return schedule

    def delete(self, schedule_id: str) -> None:
        self.get(schedule_id)
        del self._schedules[schedule_id]

    def toggle(self, schedule_id: str) -> Schedule:
        schedule = self.get(schedule_id)
        updated = replace(schedule, enabled=not schedule.enabled)
        self._schedules[schedule_id] = updated
        logger.debug("schedule %s enabled=%s", schedule_id, updated.enabled)
        return updated
