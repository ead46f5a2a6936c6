import pytest

from app.services.resolver import (
    classify_stage,
    count_by_stage,
    latest_snapshots,
    matches_query,
    matches_stage,
    resolve,
    stage_reports,
    superseded_snapshots,
    wound_key,
)
from factories import make_report


def test_wound_key_is_trimmed_and_case_insensitive():
    a = make_report(patient_name="  Jane Doe ", room_no="4B", site="Heel")
    b = make_report(patient_name="jane doe", room_no=" 4b", site="HEEL ")
    assert wound_key(a) == wound_key(b) == ("jane doe", "4b", "heel")


def test_resolve_keeps_latest_snapshot_per_wound():
    """Two snapshots of the same wound collapse to the newer one."""
    a = make_report(patient_name="Jane Doe", room_no="4B", site="Heel", created_at=100, type_stage="Stage 2")
    b = make_report(patient_name="jane doe", room_no="4b", site="heel", created_at=200, type_stage="Stage 3")

    result = resolve([a, b], "", "all")

    assert result == [b]
    assert classify_stage(result[0]) == "3"


def test_resolve_input_order_does_not_matter():
    old = make_report(created_at=100)
    new = make_report(created_at=300)
    mid = make_report(created_at=200)
    assert resolve([new, old, mid]) == [new]
    assert resolve([old, mid, new]) == [new]


def test_equal_timestamps_break_ties_on_record_id():
    first = make_report(id="aaa", created_at=500)
    second = make_report(id="bbb", created_at=500)
    assert resolve([first, second]) == [second]
    assert resolve([second, first]) == [second]


def test_resolve_sorted_most_recent_first():
    reports = [
        make_report(patient_name="A", created_at=10),
        make_report(patient_name="B", created_at=30),
        make_report(patient_name="C", created_at=20),
    ]
    result = resolve(reports)
    assert [r.patient_name for r in result] == ["B", "C", "A"]


def test_resolve_all_returns_deduplicated_set_unfiltered():
    reports = [
        make_report(patient_name="A", site="Heel", created_at=1),
        make_report(patient_name="A", site="Heel", created_at=2),
        make_report(patient_name="A", site="Sacrum", created_at=3, type_stage="", is_no_stage=True),
        make_report(patient_name="B", site="Heel", created_at=4, type_stage="Skin tear"),
    ]
    result = resolve(reports, "", "all")
    assert len(result) == 3
    assert {r.id for r in result} == {r.id for r in latest_snapshots(reports)}


def test_resolve_does_not_mutate_input():
    reports = [make_report(created_at=2), make_report(created_at=1)]
    snapshot = list(reports)
    resolve(reports, "jane", "staged")
    assert reports == snapshot


def test_resolve_empty_input():
    assert resolve([], "anything", "4") == []


def test_search_matches_room_case_insensitively():
    """Query '4b' finds the room number 4B."""
    r = make_report(room_no="4B", patient_name="Someone", fac_hosp="X", site="Y")
    assert matches_query(r, "4b")
    assert resolve([r], "4b") == [r]


@pytest.mark.parametrize("query", ["jane", "GENERAL", "hee", ""])
def test_search_fields(query):
    r = make_report(patient_name="Jane Doe", fac_hosp="General", site="Heel")
    assert matches_query(r, query)


def test_search_does_not_look_at_treatment_or_stage():
    r = make_report(current_treatment="Alginate", type_stage="Stage 2")
    assert not matches_query(r, "alginate")
    assert not matches_query(r, "stage")


def test_search_runs_after_dedup():
    """A superseded snapshot never resurfaces through search."""
    old = make_report(fac_hosp="Old Clinic", created_at=1)
    new = make_report(fac_hosp="New Clinic", created_at=2)
    assert resolve([old, new], "old clinic") == []


def test_stage_2_label():
    r = make_report(type_stage="Stage 2", is_no_stage=False)
    assert classify_stage(r) == "2"
    assert matches_stage(r, "2")
    assert matches_stage(r, "staged")
    assert not matches_stage(r, "none")


def test_no_stage_flag_wins_over_label():
    r = make_report(type_stage="Stage 3", is_no_stage=True)
    assert classify_stage(r) == "none"
    assert matches_stage(r, "none")
    assert not matches_stage(r, "staged")


def test_roman_numeral_stage_iii():
    r = make_report(type_stage="Stage III")
    assert classify_stage(r) == "3"
    assert matches_stage(r, "3")


@pytest.mark.parametrize(
    "label, bucket",
    [
        ("Stage 1", "1"),
        ("stage i", "1"),
        ("Stage II - partial thickness", "2"),
        ("STAGE 4", "4"),
        ("Stage IV", "4"),
        ("Unstageable (eschar)", "unstageable"),
        ("Skin tear", "none"),
        ("", "none"),
    ],
)
def test_classify_stage(label, bucket):
    assert classify_stage(make_report(type_stage=label)) == bucket


def test_stage_one_guard_against_stage_ii():
    assert not matches_stage(make_report(type_stage="Stage II"), "1")


def test_roman_numeral_overlaps_are_kept():
    """'stage iv' still satisfies the stage-1 predicate and 'stage iii' the stage-2 one."""
    iv = make_report(type_stage="Stage IV")
    iii = make_report(type_stage="Stage III")
    assert matches_stage(iv, "1") and matches_stage(iv, "4")
    assert matches_stage(iii, "2") and matches_stage(iii, "3")


def test_unlabelled_wound_is_non_staged():
    r = make_report(type_stage="Venous ulcer", is_no_stage=False)
    assert matches_stage(r, "none")
    assert not matches_stage(r, "staged")


def test_unknown_filter_matches_nothing():
    assert not matches_stage(make_report(), "stage 9")


def test_count_by_stage_uses_resolved_list():
    """Superseded snapshots are not double counted."""
    reports = [
        make_report(patient_name="A", type_stage="Stage 2", created_at=1),
        make_report(patient_name="A", type_stage="Stage 2", created_at=2),
        make_report(patient_name="B", type_stage="Stage 2", created_at=3),
        make_report(patient_name="C", type_stage="Unstageable", created_at=4),
    ]
    resolved = resolve(reports)
    assert count_by_stage(resolved, "2") == 2
    assert count_by_stage(resolved, "unstageable") == 1
    assert count_by_stage(resolved, "staged") == 3
    assert [r.patient_name for r in stage_reports(resolved, "2")] == ["B", "A"]


def test_superseded_snapshots_lists_history_newest_first():
    a1 = make_report(created_at=1)
    a2 = make_report(created_at=2)
    other = make_report(patient_name="Other", created_at=3)
    history = superseded_snapshots([a1, other, a2], a1)
    assert history == [a2, a1]
