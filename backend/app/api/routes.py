"""API routes — all REST endpoints for the Weekly Wound Report backend."""

from __future__ import annotations

import logging
import re
from urllib.parse import quote

from fastapi import APIRouter, HTTPException, Query, Response

from app import db
from app.agents.chat_assistant import AssistantError, ChatAssistant
from app.config import settings
from app.schemas.report import (
    STAGE_FILTERS,
    ChatRequest,
    ChatResponse,
    DashboardSummary,
    ResolvedReport,
    SessionAction,
    SessionResponse,
    StageCount,
    TrendPoint,
    User,
    UserRole,
    WoundReport,
    WoundReportCreate,
)
from app.services import dashboard, export, resolver
from app.services import state as app_state
from app.services.state import AppState, can_access_ai, can_delete, can_modify

logger = logging.getLogger(__name__)
router = APIRouter()

PDF_MEDIA_TYPE = "application/pdf"
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# ---------------------------------------------------------------------------
# Global assistant reference — set from main.py at startup
# ---------------------------------------------------------------------------
_assistant: ChatAssistant | None = None


def set_assistant(assistant: ChatAssistant | None) -> None:
    global _assistant
    _assistant = assistant


def get_assistant() -> ChatAssistant | None:
    return _assistant


# ---------------------------------------------------------------------------
# Session state: one user, one view state
# ---------------------------------------------------------------------------
_state: AppState | None = None


def session_user() -> User:
    try:
        role = UserRole(settings.USER_ROLE.upper())
    except ValueError:
        logger.warning("Unknown USER_ROLE %r, falling back to VIEWER.", settings.USER_ROLE)
        role = UserRole.VIEWER
    return User(
        id=f"{settings.USER_USERNAME}-default",
        name=settings.USER_NAME,
        username=settings.USER_USERNAME,
        role=role,
    )


def get_state() -> AppState:
    """Current view state; rebuilt when the configured user changes."""
    global _state
    user = session_user()
    if _state is None or _state.user != user:
        _state = AppState(user=user)
    return _state


def dispatch(action: app_state.Action) -> AppState:
    global _state
    _state = app_state.reduce(get_state(), action)
    return _state


def reset_state() -> None:
    global _state
    _state = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _load_reports() -> list[WoundReport]:
    return [WoundReport(**r) for r in db.get_all_reports()]


def _check_stage(stage: str) -> str:
    if stage not in STAGE_FILTERS:
        raise HTTPException(
            status_code=422,
            detail=f"Unknown stage filter {stage!r}. Expected one of: {', '.join(STAGE_FILTERS)}.",
        )
    return stage


def _view(q: str | None, stage: str | None) -> tuple[str, str]:
    """Explicit query params win; otherwise the session's search/filter apply."""
    state = get_state()
    return (
        state.search_query if q is None else q,
        _check_stage(state.stage_filter if stage is None else stage),
    )


def _resolved(q: str | None = None, stage: str | None = None) -> list[WoundReport]:
    query, stage_filter = _view(q, stage)
    return resolver.resolve(_load_reports(), query, stage_filter)


def _to_resolved_response(r: WoundReport) -> ResolvedReport:
    return ResolvedReport(
        **r.model_dump(),
        stage=resolver.classify_stage(r),
        status_label=export.stage_label_text(r),
    )


def _require(allowed: bool, action: str) -> None:
    if not allowed:
        raise HTTPException(status_code=403, detail=f"Role not permitted to {action}.")


def content_disposition(filename: str) -> str:
    """Attachment header with an ASCII fallback and the UTF-8 name (RFC 5987)."""
    fallback = re.sub(r"[^A-Za-z0-9._-]", "_", filename)
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"


def _file_response(content: bytes, media_type: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": content_disposition(filename)},
    )


def _get_or_404(report_id: str) -> WoundReport:
    row = db.get_report(report_id)
    if row is None:
        raise HTTPException(status_code=404, detail="Report not found.")
    return WoundReport(**row)


def _session_response(state: AppState) -> SessionResponse:
    user = state.user
    return SessionResponse(
        user=user,
        can_modify=can_modify(user),
        can_delete=can_delete(user),
        can_access_ai=can_access_ai(user),
        tabs=app_state.available_tabs(state),
        active_tab=state.active_tab,
        search_query=state.search_query,
        stage_filter=state.stage_filter,
        editing_report_id=state.editing_report_id,
        report_to_delete_id=state.report_to_delete_id,
        chart_patient_id=state.chart_patient_id,
    )


# ---------------------------------------------------------------------------
# Session endpoints
# ---------------------------------------------------------------------------

@router.get("/session", response_model=SessionResponse)
def get_session() -> SessionResponse:
    return _session_response(get_state())


@router.post("/session/actions", response_model=SessionResponse)
def post_session_action(body: SessionAction) -> SessionResponse:
    try:
        action = app_state.build_action(body.type, body.value)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    if isinstance(action, (app_state.StartEdit, app_state.RequestDelete)):
        _get_or_404(action.report_id)
    return _session_response(dispatch(action))


# ---------------------------------------------------------------------------
# Report endpoints
# ---------------------------------------------------------------------------

@router.get("/reports", response_model=list[ResolvedReport])
def list_reports(q: str | None = None, stage: str | None = None) -> list[ResolvedReport]:
    return [_to_resolved_response(r) for r in _resolved(q, stage)]


@router.get("/reports/raw", response_model=list[WoundReport])
def list_raw_reports() -> list[WoundReport]:
    return _load_reports()


@router.post("/reports", response_model=WoundReport, status_code=201)
def create_report(body: WoundReportCreate) -> WoundReport:
    _require(can_modify(get_state().user), "create reports")
    row = db.create_report(body.model_dump())
    dispatch(app_state.ReportSaved())
    logger.info("Created report %s for %s.", row["id"], body.patient_name)
    return WoundReport(**row)


@router.get("/reports/{report_id}", response_model=WoundReport)
def get_report(report_id: str) -> WoundReport:
    return _get_or_404(report_id)


@router.put("/reports/{report_id}", response_model=WoundReport)
def update_report(report_id: str, body: WoundReportCreate) -> WoundReport:
    _require(can_modify(get_state().user), "modify reports")
    row = db.update_report(report_id, body.model_dump())
    if row is None:
        raise HTTPException(status_code=404, detail="Report not found.")
    dispatch(app_state.ReportSaved())
    logger.info("Updated report %s.", report_id)
    return WoundReport(**row)


@router.delete("/reports/{report_id}", status_code=204)
def delete_report(report_id: str) -> Response:
    _require(can_delete(get_state().user), "delete reports")
    if not db.delete_report(report_id):
        raise HTTPException(status_code=404, detail="Report not found.")
    dispatch(app_state.DeleteConfirmed())
    logger.info("Deleted report %s.", report_id)
    return Response(status_code=204)


@router.get("/reports/{report_id}/history", response_model=list[WoundReport])
def get_report_history(report_id: str) -> list[WoundReport]:
    report = _get_or_404(report_id)
    return resolver.superseded_snapshots(_load_reports(), report)


@router.get("/reports/{report_id}/pdf")
def export_report_pdf(report_id: str) -> Response:
    report = _get_or_404(report_id)
    content = export.export_single_pdf(report)
    stem = f"Wound_Record_{report.patient_name or report.id}"
    return _file_response(content, PDF_MEDIA_TYPE, export.export_filename(stem, "pdf"))


# ---------------------------------------------------------------------------
# Dashboard / charts
# ---------------------------------------------------------------------------

@router.get("/dashboard", response_model=DashboardSummary)
def get_dashboard(q: str | None = None, stage: str | None = None) -> DashboardSummary:
    return dashboard.summary(_resolved(q, stage))


@router.get("/charts/healing", response_model=list[TrendPoint])
def get_healing_trend(
    patient_id: str | None = None,
    q: str | None = None,
    stage: str | None = None,
) -> list[TrendPoint]:
    selected = patient_id if patient_id is not None else get_state().chart_patient_id
    return dashboard.healing_trend(_resolved(q, stage), selected)


@router.get("/charts/stages", response_model=list[StageCount])
def get_stage_distribution(q: str | None = None, stage: str | None = None) -> list[StageCount]:
    return dashboard.stage_distribution(_resolved(q, stage))


# ---------------------------------------------------------------------------
# Export endpoints
# ---------------------------------------------------------------------------

def _filtered_title(q: str, stage: str) -> str:
    label = dashboard.filter_label(stage)
    return f"FILTERED AUDIT: {q} ({label})" if q else f"FILTERED AUDIT: {label}"


@router.get("/export/pdf")
def export_filtered_pdf(
    q: str | None = None,
    stage: str | None = None,
    title: str | None = Query(None),
) -> Response:
    query, stage_filter = _view(q, stage)
    reports = resolver.resolve(_load_reports(), query, stage_filter)
    filtered = bool(query) or stage_filter != "all"
    heading = title or (_filtered_title(query, stage_filter) if filtered else export.DEFAULT_TITLE)
    stem = "Filtered_Wound_Audit" if filtered else "Wound_Report"
    try:
        content = export.export_pdf(reports, heading)
    except export.NothingToExportError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return _file_response(content, PDF_MEDIA_TYPE, export.export_filename(stem, "pdf"))


@router.get("/export/excel")
def export_filtered_excel(q: str | None = None, stage: str | None = None) -> Response:
    reports = _resolved(q, stage)
    try:
        content = export.export_excel(reports)
    except export.NothingToExportError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return _file_response(content, XLSX_MEDIA_TYPE, export.export_filename("Wound_Report", "xlsx"))


@router.get("/export/stage/{stage}")
def export_stage_pdf(stage: str) -> Response:
    if stage not in dashboard.STAGE_LABELS:
        raise HTTPException(status_code=422, detail=f"Unknown stage {stage!r}.")
    label = dashboard.STAGE_LABELS[stage]
    reports = resolver.stage_reports(_resolved(), stage)
    if not reports:
        raise HTTPException(status_code=404, detail=f"No clinical records found for {label}.")
    content = export.export_pdf(reports, f"AUDIT: {label.upper()}")
    stem = f"Stage_Report_{label.replace(' ', '_')}"
    return _file_response(content, PDF_MEDIA_TYPE, export.export_filename(stem, "pdf"))


# ---------------------------------------------------------------------------
# AI assistant
# ---------------------------------------------------------------------------

@router.post("/assistant/chat", response_model=ChatResponse)
def chat(body: ChatRequest) -> ChatResponse:
    _require(can_access_ai(get_state().user), "use the AI assistant")
    assistant = get_assistant()
    if assistant is None or not assistant.ready:
        raise HTTPException(
            status_code=503,
            detail="AI assistant not available. Set WOUNDREPORT_GEMINI_API_KEY or WOUNDREPORT_MOCK_ASSISTANT=true.",
        )

    reports = _resolved()
    try:
        reply = assistant.ask(body.message, reports, body.history)
    except AssistantError as exc:
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return ChatResponse(reply=reply, record_count=len(reports))
