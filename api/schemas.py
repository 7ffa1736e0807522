from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field


class DashboardCreateModel(BaseModel):
    name: str
    team: str
    description: str = ""


class DrillModel(BaseModel):
    dimension: Literal["category", "region"]
    value: str


class EditModeModel(BaseModel):
    enabled: bool


class MoveModel(BaseModel):
    x: float = 0.0
    y: float = 0.0


class ColumnModel(BaseModel):
    id: str
    name: str
    type: Literal["string", "number", "date"]
    table: str = ""


class FilterRuleModel(BaseModel):
    id: str = ""
    column: str = ""
    operator: str = "equals"
    value: str = ""


class DrillDownColumnModel(BaseModel):
    id: str = ""
    column: str


class ReportCreateModel(BaseModel):
    name: str
    description: str = ""
    table: str = "sales"
    columns: List[ColumnModel] = Field(default_factory=list)
    filters: List[FilterRuleModel] = Field(default_factory=list)
    drill_down_levels: List[DrillDownColumnModel] = Field(default_factory=list)
    chart_type: str = "bar"
    dashboards: List[str] = Field(default_factory=list)


class ReportUpdateModel(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    chart_type: Optional[str] = None
    dashboards: Optional[List[str]] = None


class ExportModel(BaseModel):
    format: str


class ScheduleCreateModel(BaseModel):
    name: str
    content_type: Literal["report", "dashboard"] = "dashboard"
    content_id: str
    recipients: str
    frequency: Literal["daily", "weekly", "monthly"] = "weekly"
    format: Literal["pdf", "excel", "csv"] = "pdf"
    time: str = "09:00"
    include_insights: bool = True
    include_raw_data: bool = False
    include_charts: bool = True


class DataSourceCreateModel(BaseModel):
    name: str
    type: str
