"""Pydantic models for request / response validation."""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict


StageBucket = Literal["1", "2", "3", "4", "unstageable", "none"]

STAGE_FILTERS: tuple[str, ...] = ("all", "staged", "none", "1", "2", "3", "4", "unstageable")


class UserRole(str, Enum):
    ADMIN = "ADMIN"
    NURSE = "NURSE"
    VIEWER = "VIEWER"


class AppTab(str, Enum):
    DASHBOARD = "DASHBOARD"
    NEW_REPORT = "NEW_REPORT"
    HISTORY = "HISTORY"
    AI_ASSISTANT = "AI_ASSISTANT"


class User(BaseModel):
    id: str
    name: str
    username: str
    role: UserRole


# ---------------------------------------------------------------------------
# Wound reports
# ---------------------------------------------------------------------------

class WoundReportCreate(BaseModel):
    """Entry-form payload: a full report without identity fields."""

    patient_name: str = ""
    room_no: str = ""
    date_of_discovery: str = ""
    fac_hosp: str = ""
    type_stage: str = ""
    is_no_stage: bool = False
    site: str = ""
    color_drainage: str = ""
    undermining: str = ""
    week1: str = ""
    week2: str = ""
    week3: str = ""
    week4: str = ""
    current_treatment: str = ""
    comment: str = ""


class WoundReport(WoundReportCreate):
    """One timestamped snapshot of a wound."""

    model_config = ConfigDict(frozen=True)

    id: str
    created_at: int  # epoch milliseconds

    @property
    def weeks(self) -> list[str]:
        return [self.week1, self.week2, self.week3, self.week4]


class ResolvedReport(WoundReport):
    """A report as shown in the history table, with its display stage bucket."""

    stage: StageBucket
    status_label: str


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------

class TabInfo(BaseModel):
    id: AppTab
    label: str


class SessionResponse(BaseModel):
    user: User
    can_modify: bool
    can_delete: bool
    can_access_ai: bool
    tabs: list[TabInfo]
    active_tab: AppTab
    search_query: str = ""
    stage_filter: str = "all"
    editing_report_id: str | None = None
    report_to_delete_id: str | None = None
    chart_patient_id: str = "all"


SessionActionType = Literal[
    "select_tab",
    "set_search",
    "set_stage_filter",
    "reset_filters",
    "start_edit",
    "report_saved",
    "request_delete",
    "cancel_delete",
    "delete_confirmed",
    "select_chart_patient",
]


class SessionAction(BaseModel):
    type: SessionActionType
    value: str | None = None


# ---------------------------------------------------------------------------
# Dashboard / charts
# ---------------------------------------------------------------------------

class StageTile(BaseModel):
    id: str
    label: str
    count: int


class DashboardSummary(BaseModel):
    active_records: int
    active_facilities: int
    stage_tiles: list[StageTile]
    non_staged: int


class TrendPoint(BaseModel):
    week: str
    volume: float | None = None


class StageCount(BaseModel):
    stage: StageBucket
    label: str
    count: int


# ---------------------------------------------------------------------------
# AI assistant
# ---------------------------------------------------------------------------

class ChatTurn(BaseModel):
    role: Literal["user", "model"]
    text: str


class ChatRequest(BaseModel):
    message: str
    history: list[ChatTurn] = []


class ChatResponse(BaseModel):
    reply: str
    record_count: int
