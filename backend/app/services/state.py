"""Explicit application state and the actions that transition it.

The resolver inputs (search text, stage filter) and the editing/deletion
targets live in one immutable ``AppState``; every UI event is an action passed
to ``reduce``, which returns a new state.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Union

from app.schemas.report import STAGE_FILTERS, AppTab, TabInfo, User, UserRole


def can_modify(user: User) -> bool:
    return user.role in (UserRole.ADMIN, UserRole.NURSE)


def can_delete(user: User) -> bool:
    return user.role == UserRole.ADMIN


def can_access_ai(user: User) -> bool:
    return user.role in (UserRole.ADMIN, UserRole.NURSE)


@dataclass(frozen=True)
class AppState:
    user: User
    active_tab: AppTab = AppTab.DASHBOARD
    search_query: str = ""
    stage_filter: str = "all"
    editing_report_id: str | None = None
    report_to_delete_id: str | None = None
    chart_patient_id: str = "all"


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SelectTab:
    tab: AppTab


@dataclass(frozen=True)
class SetSearch:
    query: str


@dataclass(frozen=True)
class SetStageFilter:
    stage: str

    def __post_init__(self) -> None:
        if self.stage not in STAGE_FILTERS:
            raise ValueError(f"Unknown stage filter: {self.stage!r}")


@dataclass(frozen=True)
class ResetFilters:
    pass


@dataclass(frozen=True)
class StartEdit:
    report_id: str


@dataclass(frozen=True)
class ReportSaved:
    pass


@dataclass(frozen=True)
class RequestDelete:
    report_id: str


@dataclass(frozen=True)
class CancelDelete:
    pass


@dataclass(frozen=True)
class DeleteConfirmed:
    pass


@dataclass(frozen=True)
class SelectChartPatient:
    patient_id: str


Action = Union[
    SelectTab, SetSearch, SetStageFilter, ResetFilters, StartEdit, ReportSaved,
    RequestDelete, CancelDelete, DeleteConfirmed, SelectChartPatient,
]


_VALUE_ACTIONS = {
    "set_search": SetSearch,
    "set_stage_filter": SetStageFilter,
    "start_edit": StartEdit,
    "request_delete": RequestDelete,
    "select_chart_patient": SelectChartPatient,
}

_BARE_ACTIONS = {
    "reset_filters": ResetFilters,
    "report_saved": ReportSaved,
    "cancel_delete": CancelDelete,
    "delete_confirmed": DeleteConfirmed,
}


def build_action(kind: str, value: str | None = None) -> Action:
    """Build an action from its wire name. Raises ValueError on bad input."""
    if kind == "select_tab":
        try:
            return SelectTab(AppTab(value))
        except ValueError:
            raise ValueError(f"Unknown tab: {value!r}") from None
    if kind in _VALUE_ACTIONS:
        if value is None:
            raise ValueError(f"Action {kind!r} requires a value.")
        return _VALUE_ACTIONS[kind](value)
    if kind in _BARE_ACTIONS:
        return _BARE_ACTIONS[kind]()
    raise ValueError(f"Unknown action: {kind!r}")


# ---------------------------------------------------------------------------
# Derived views
# ---------------------------------------------------------------------------

def available_tabs(state: AppState) -> list[TabInfo]:
    """Tabs visible to the session user, in display order."""
    tabs = [TabInfo(id=AppTab.DASHBOARD, label="Dashboard")]
    if can_modify(state.user):
        label = "Update Record" if state.editing_report_id else "New Entry"
        tabs.append(TabInfo(id=AppTab.NEW_REPORT, label=label))
    tabs.append(TabInfo(id=AppTab.HISTORY, label="Records History"))
    if can_access_ai(state.user):
        tabs.append(TabInfo(id=AppTab.AI_ASSISTANT, label="AI Analyst"))
    return tabs


# ---------------------------------------------------------------------------
# Reducer
# ---------------------------------------------------------------------------

def reduce(state: AppState, action: Action) -> AppState:
    """Return the state that follows *action*. Disallowed actions are no-ops."""
    if isinstance(action, SelectTab):
        if action.tab not in {t.id for t in available_tabs(state)}:
            return state
        editing = state.editing_report_id if action.tab == AppTab.NEW_REPORT else None
        return replace(state, active_tab=action.tab, editing_report_id=editing)

    if isinstance(action, SetSearch):
        return replace(state, search_query=action.query)

    if isinstance(action, SetStageFilter):
        return replace(state, stage_filter=action.stage)

    if isinstance(action, ResetFilters):
        return replace(state, search_query="", stage_filter="all")

    if isinstance(action, StartEdit):
        if state.user.role == UserRole.VIEWER:
            return state
        return replace(state, editing_report_id=action.report_id, active_tab=AppTab.NEW_REPORT)

    if isinstance(action, ReportSaved):
        return replace(state, editing_report_id=None, active_tab=AppTab.HISTORY)

    if isinstance(action, RequestDelete):
        if not can_delete(state.user):
            return state
        return replace(state, report_to_delete_id=action.report_id)

    if isinstance(action, (CancelDelete, DeleteConfirmed)):
        return replace(state, report_to_delete_id=None)

    if isinstance(action, SelectChartPatient):
        return replace(state, chart_patient_id=action.patient_id)

    raise TypeError(f"Unsupported action: {action!r}")
