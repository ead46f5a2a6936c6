import pytest

from app.schemas.report import AppTab, User, UserRole
from app.services.state import (
    AppState,
    CancelDelete,
    DeleteConfirmed,
    ReportSaved,
    RequestDelete,
    ResetFilters,
    SelectChartPatient,
    SelectTab,
    SetSearch,
    SetStageFilter,
    StartEdit,
    available_tabs,
    build_action,
    reduce,
)


def _state(role: UserRole = UserRole.ADMIN) -> AppState:
    return AppState(user=User(id="u1", name="Test", username="test", role=role))


def test_reduce_returns_new_state_and_leaves_old_untouched():
    before = _state()
    after = reduce(before, SetSearch("4b"))
    assert after.search_query == "4b"
    assert before.search_query == ""


def test_filters_and_reset():
    s = reduce(_state(), SetStageFilter("staged"))
    s = reduce(s, SetSearch("jane"))
    assert (s.search_query, s.stage_filter) == ("jane", "staged")
    s = reduce(s, ResetFilters())
    assert (s.search_query, s.stage_filter) == ("", "all")


def test_unknown_stage_filter_rejected():
    with pytest.raises(ValueError):
        SetStageFilter("stage 5")


def test_edit_flow():
    """Editing switches to the entry tab; saving lands on history."""
    s = reduce(_state(UserRole.NURSE), StartEdit("r1"))
    assert s.active_tab == AppTab.NEW_REPORT
    assert s.editing_report_id == "r1"
    assert available_tabs(s)[1].label == "Update Record"

    s = reduce(s, ReportSaved())
    assert s.active_tab == AppTab.HISTORY
    assert s.editing_report_id is None


def test_leaving_entry_tab_clears_editing_target():
    s = reduce(_state(), StartEdit("r1"))
    s = reduce(s, SelectTab(AppTab.DASHBOARD))
    assert s.editing_report_id is None
    assert s.active_tab == AppTab.DASHBOARD


def test_viewer_cannot_edit_or_delete():
    viewer = _state(UserRole.VIEWER)
    assert reduce(viewer, StartEdit("r1")) == viewer
    assert reduce(viewer, RequestDelete("r1")) == viewer


def test_viewer_cannot_open_hidden_tabs():
    viewer = _state(UserRole.VIEWER)
    assert reduce(viewer, SelectTab(AppTab.AI_ASSISTANT)) == viewer
    assert reduce(viewer, SelectTab(AppTab.HISTORY)).active_tab == AppTab.HISTORY


def test_nurse_cannot_delete():
    nurse = _state(UserRole.NURSE)
    assert reduce(nurse, RequestDelete("r1")).report_to_delete_id is None


def test_admin_delete_confirmation():
    s = reduce(_state(), RequestDelete("r1"))
    assert s.report_to_delete_id == "r1"
    assert reduce(s, CancelDelete()).report_to_delete_id is None
    assert reduce(s, DeleteConfirmed()).report_to_delete_id is None


def test_chart_patient_selection():
    s = reduce(_state(), SelectChartPatient("r9"))
    assert s.chart_patient_id == "r9"


@pytest.mark.parametrize(
    "role, tabs",
    [
        (UserRole.ADMIN, [AppTab.DASHBOARD, AppTab.NEW_REPORT, AppTab.HISTORY, AppTab.AI_ASSISTANT]),
        (UserRole.NURSE, [AppTab.DASHBOARD, AppTab.NEW_REPORT, AppTab.HISTORY, AppTab.AI_ASSISTANT]),
        (UserRole.VIEWER, [AppTab.DASHBOARD, AppTab.HISTORY]),
    ],
)
def test_available_tabs_by_role(role, tabs):
    assert [t.id for t in available_tabs(_state(role))] == tabs


def test_build_action_from_wire_names():
    assert build_action("select_tab", "HISTORY") == SelectTab(AppTab.HISTORY)
    assert build_action("set_search", "") == SetSearch("")
    assert build_action("cancel_delete") == CancelDelete()


@pytest.mark.parametrize(
    "kind, value",
    [("select_tab", "SETTINGS"), ("set_search", None), ("explode", None), ("set_stage_filter", "5")],
)
def test_build_action_rejects_bad_input(kind, value):
    with pytest.raises(ValueError):
        build_action(kind, value)
