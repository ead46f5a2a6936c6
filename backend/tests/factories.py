from itertools import count

from app.schemas.report import WoundReport

_ids = count(1)


def make_report(**overrides) -> WoundReport:
    """Build a WoundReport with sensible defaults; any field can be overridden."""
    n = next(_ids)
    data = {
        "id": f"r{n:04d}",
        "created_at": n * 100,
        "patient_name": "Jane Doe",
        "room_no": "4B",
        "fac_hosp": "General",
        "site": "Heel",
        "type_stage": "Stage 2",
        "is_no_stage": False,
    }
    data.update(overrides)
    return WoundReport(**data)
