"""Seed script — populates the database with demo wound reports.

Some wounds get several weekly snapshots so the de-duplicated history and the
per-wound audit trail have something to show.
Run from the backend directory:
    python seed_demo.py
"""

from __future__ import annotations

import os
import sys
import time

# Ensure app is importable
sys.path.insert(0, os.path.dirname(__file__))

from app.db import create_report, init_db

WEEK_MS = 7 * 24 * 60 * 60 * 1000

# Each entry is one physical wound; "snapshots" are successive saves of the form.
DEMO_WOUNDS = [
    {
        "patient_name": "Maria G.",
        "room_no": "4B",
        "fac_hosp": "St. Mary's Medical Center",
        "site": "Sacrum",
        "date_of_discovery": "2026-01-06",
        "color_drainage": "Red, moderate serous",
        "undermining": "None",
        "current_treatment": "Hydrocolloid, turn q2h",
        "snapshots": [
            {"type_stage": "Stage 2", "week1": "4 x 3 x 0.5"},
            {"type_stage": "Stage 2", "week1": "4 x 3 x 0.5", "week2": "3.5 x 2.5 x 0.4"},
            {"type_stage": "Stage 2", "week1": "4 x 3 x 0.5", "week2": "3.5 x 2.5 x 0.4",
             "week3": "3 x 2 x 0.3"},
        ],
    },
    {
        "patient_name": "Carlos R.",
        "room_no": "12",
        "fac_hosp": "St. Mary's Medical Center",
        "site": "Left heel",
        "date_of_discovery": "2026-01-08",
        "color_drainage": "Black eschar",
        "undermining": "Unable to assess",
        "current_treatment": "Offloading boot, betadine paint",
        "snapshots": [
            {"type_stage": "Unstageable", "week1": "2 x 2"},
            {"type_stage": "Unstageable", "week1": "2 x 2", "week2": "2 x 1.8"},
        ],
    },
    {
        "patient_name": "Rosa T.",
        "room_no": "7A",
        "fac_hosp": "Riverside Care Home",
        "site": "Right hip",
        "date_of_discovery": "2026-01-10",
        "color_drainage": "Yellow slough, heavy",
        "undermining": "1 cm at 3 o'clock",
        "current_treatment": "Alginate, foam border",
        "snapshots": [
            {"type_stage": "Stage III", "week1": "5 x 4 x 1.2", "week2": "5 x 4 x 1.1"},
            {"type_stage": "Stage IV", "week1": "5 x 4 x 1.2", "week2": "5 x 4 x 1.1",
             "week3": "5.5 x 4 x 1.5", "comment": "Bone palpable, wound care consult"},
        ],
    },
    {
        "patient_name": "Ahmed K.",
        "room_no": "3",
        "fac_hosp": "Riverside Care Home",
        "site": "Left shin",
        "date_of_discovery": "2026-01-12",
        "color_drainage": "Pink, scant",
        "undermining": "None",
        "current_treatment": "Non-adherent dressing",
        "snapshots": [
            {"type_stage": "Skin tear", "is_no_stage": True, "week1": "3 x 1"},
        ],
    },
    {
        "patient_name": "Helen W.",
        "room_no": "9",
        "fac_hosp": "St. Mary's Medical Center",
        "site": "Coccyx",
        "date_of_discovery": "2026-01-14",
        "color_drainage": "Intact, non-blanchable erythema",
        "undermining": "None",
        "current_treatment": "Barrier cream, pressure mattress",
        "snapshots": [
            {"type_stage": "Stage 1", "week1": "2 x 2 x 0"},
        ],
    },
]


def main() -> None:
    init_db()
    base = int(time.time() * 1000) - 6 * WEEK_MS

    count = 0
    for w_idx, wound in enumerate(DEMO_WOUNDS):
        fields = {k: v for k, v in wound.items() if k != "snapshots"}
        print(f"Seeding wound: {wound['patient_name']} / {wound['site']}")
        for s_idx, snapshot in enumerate(wound["snapshots"]):
            created_at = base + s_idx * WEEK_MS + w_idx * 60_000
            report = create_report({**fields, **snapshot}, created_at=created_at)
            print(f"  Snapshot {s_idx + 1}: {snapshot.get('type_stage')} -> {report['id'][:8]}...")
            count += 1

    print(f"\nDone. {count} snapshots for {len(DEMO_WOUNDS)} wounds seeded.")


if __name__ == "__main__":
    main()
