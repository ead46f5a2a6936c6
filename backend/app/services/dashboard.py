"""Dashboard tiles and chart series computed from the resolved report list.

All counts are taken from the de-duplicated list so superseded snapshots of a
wound are never counted twice.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from app.schemas.report import (
    DashboardSummary,
    StageBucket,
    StageCount,
    StageTile,
    TrendPoint,
    WoundReport,
)
from app.services.resolver import classify_stage, count_by_stage

STAGE_LABELS: dict[str, str] = {
    "1": "Stage 1",
    "2": "Stage 2",
    "3": "Stage 3",
    "4": "Stage 4",
    "unstageable": "Unstageable",
    "none": "Non-Staged Wounds",
}

FILTER_LABELS: dict[str, str] = {
    "all": "All Records",
    "staged": "Pressure Ulcers",
    "none": "Non-Staged",
}

PRESSURE_ULCER_STAGES: tuple[str, ...] = ("1", "2", "3", "4", "unstageable")

_NUMBER = r"(\d+(?:[.,]\d+)?)"
_SEP = r"\s*(?:cm)?\s*[x×*]\s*"
_MEASUREMENT_RE = re.compile(
    rf"{_NUMBER}{_SEP}{_NUMBER}(?:{_SEP}{_NUMBER})?", re.IGNORECASE,
)


def filter_label(stage: str) -> str:
    """Human label for a stage filter, as used in export titles."""
    return FILTER_LABELS.get(stage) or STAGE_LABELS.get(stage, stage)


def summary(resolved: Sequence[WoundReport]) -> DashboardSummary:
    facilities = {r.fac_hosp for r in resolved if r.fac_hosp}
    tiles = [
        StageTile(id=stage, label=STAGE_LABELS[stage], count=count_by_stage(resolved, stage))
        for stage in PRESSURE_ULCER_STAGES
    ]
    return DashboardSummary(
        active_records=len(resolved),
        active_facilities=len(facilities),
        stage_tiles=tiles,
        non_staged=count_by_stage(resolved, "none"),
    )


def parse_volume(measurement: str | None) -> float | None:
    """Turn ``"L x W x D"`` (cm) into a volume; a missing depth counts as 1.

    Returns None when no measurement can be read.
    """
    if not measurement:
        return None
    match = _MEASUREMENT_RE.search(measurement)
    if match is None:
        return None
    dims = [float(g.replace(",", ".")) for g in match.groups() if g is not None]
    volume = 1.0
    for d in dims:
        volume *= d
    return round(volume, 2)


def healing_trend(resolved: Sequence[WoundReport], patient_id: str = "all") -> list[TrendPoint]:
    """Weekly wound volume for one record, or the mean across all records."""
    if patient_id != "all":
        selected = [r for r in resolved if r.id == patient_id]
        if not selected:
            return [TrendPoint(week=f"W{i + 1}") for i in range(4)]
        weeks = selected[0].weeks
        return [TrendPoint(week=f"W{i + 1}", volume=parse_volume(w)) for i, w in enumerate(weeks)]

    points: list[TrendPoint] = []
    for i in range(4):
        volumes = [v for v in (parse_volume(r.weeks[i]) for r in resolved) if v is not None]
        avg = round(sum(volumes) / len(volumes), 2) if volumes else None
        points.append(TrendPoint(week=f"W{i + 1}", volume=avg))
    return points


def stage_distribution(resolved: Sequence[WoundReport]) -> list[StageCount]:
    """Count of resolved wounds per display stage bucket."""
    counts: dict[StageBucket, int] = {
        "1": 0, "2": 0, "3": 0, "4": 0, "unstageable": 0, "none": 0,
    }
    for report in resolved:
        counts[classify_stage(report)] += 1
    return [
        StageCount(stage=stage, label=STAGE_LABELS[stage], count=n)
        for stage, n in counts.items()
    ]
