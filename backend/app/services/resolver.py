"""Wound record resolver: canonical, de-duplicated view of stored reports.

A physical wound is identified by patient name + room number + anatomical
site. Every save of the entry form stores a new snapshot; only the most recent
snapshot per wound is shown, filtered by free-text search and stage bucket.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from app.schemas.report import StageBucket, WoundReport

# Substrings that make a label count as a pressure-ulcer stage at all.
_ANY_STAGE_MARKERS = (
    "stage 1", "stage i",
    "stage 2", "stage ii",
    "stage 3", "stage iii",
    "stage 4", "stage iv",
    "unstageable",
)

# Most specific first: "stage iv" also satisfies the stage-1 predicate.
_DISPLAY_ORDER: tuple[StageBucket, ...] = ("unstageable", "4", "3", "2", "1")


def _norm(value: str | None) -> str:
    return (value or "").strip().lower()


def wound_key(report: WoundReport) -> tuple[str, str, str]:
    """Logical wound identity: (patient, room, site), trimmed and lower-cased."""
    return (_norm(report.patient_name), _norm(report.room_no), _norm(report.site))


def _is_any_stage(label: str) -> bool:
    return any(marker in label for marker in _ANY_STAGE_MARKERS)


def matches_stage(report: WoundReport, stage: str) -> bool:
    """Return True if *report* belongs to the stage filter *stage*.

    ``"1"`` only guards against ``"ii"``, so ``"stage iv"`` matches both
    ``"1"`` and ``"4"`` and ``"stage iii"`` matches both ``"2"`` and ``"3"``.
    """
    if stage == "all":
        return True

    s = (report.type_stage or "").lower()
    if stage == "staged":
        return _is_any_stage(s) and not report.is_no_stage
    if stage == "none":
        return report.is_no_stage or not _is_any_stage(s)

    if stage == "1":
        return "stage 1" in s or ("stage i" in s and "ii" not in s)
    if stage == "2":
        return "stage 2" in s or "stage ii" in s
    if stage == "3":
        return "stage 3" in s or "stage iii" in s
    if stage == "4":
        return "stage 4" in s or "stage iv" in s
    if stage == "unstageable":
        return "unstageable" in s
    return False


def classify_stage(report: WoundReport) -> StageBucket:
    """Pick the single display bucket for *report*."""
    if report.is_no_stage:
        return "none"
    for bucket in _DISPLAY_ORDER:
        if matches_stage(report, bucket):
            return bucket
    return "none"


def matches_query(report: WoundReport, query: str) -> bool:
    """Case-insensitive substring search over patient, room, facility and site."""
    if not query:
        return True
    q = query.lower()
    return any(
        q in (field or "").lower()
        for field in (report.patient_name, report.room_no, report.fac_hosp, report.site)
    )


def _recency(report: WoundReport) -> tuple[int, str]:
    return (report.created_at, report.id)


def latest_snapshots(all_reports: Iterable[WoundReport]) -> list[WoundReport]:
    """Collapse snapshots of the same wound to the newest one.

    Equal timestamps fall back to the greater record id.
    """
    latest: dict[tuple[str, str, str], WoundReport] = {}
    for report in all_reports:
        key = wound_key(report)
        current = latest.get(key)
        if current is None or _recency(report) > _recency(current):
            latest[key] = report
    return list(latest.values())


def resolve(
    all_reports: Iterable[WoundReport],
    search_query: str = "",
    stage_filter: str = "all",
) -> list[WoundReport]:
    """De-duplicate, filter and order reports for display and export."""
    unique = latest_snapshots(all_reports)
    kept = [
        r for r in unique
        if matches_query(r, search_query) and matches_stage(r, stage_filter)
    ]
    return sorted(kept, key=_recency, reverse=True)


def stage_reports(resolved: Sequence[WoundReport], stage: str) -> list[WoundReport]:
    """Subset of an already-resolved list belonging to *stage*."""
    return [r for r in resolved if matches_stage(r, stage)]


def count_by_stage(resolved: Sequence[WoundReport], stage: str) -> int:
    return len(stage_reports(resolved, stage))


def superseded_snapshots(
    all_reports: Iterable[WoundReport], report: WoundReport,
) -> list[WoundReport]:
    """Every stored snapshot of the same wound as *report*, newest first."""
    key = wound_key(report)
    same = [r for r in all_reports if wound_key(r) == key]
    return sorted(same, key=_recency, reverse=True)
