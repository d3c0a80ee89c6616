from __future__ import annotations

from dataclasses import dataclass

VIOLATION_TYPES = [
    "Stopping in Bicycle Lane",
    "Using Phone Whilst Driving",
    "Running Red Light",
    "Blocking Crosswalk",
    "Improper Parking",
    "Dangerous Driving",
    "Other",
]

DC_JURISDICTION = "District of Columbia"


@dataclass(frozen=True, slots=True)
class Citation:
    jurisdiction: str
    code: str
    description: str
    fine: str | None = None


# (code, description, fine)
DC_CITATIONS: dict[str, tuple[str, str, str]] = {
    "Stopping in Bicycle Lane": ("18-2405.1(g)", "Stopping, standing, or parking in a bicycle lane", "$150"),
    "Blocking Crosswalk": ("18-2405.1(e)", "Stopping, standing, or parking in a crosswalk", "$100"),
    "Improper Parking": ("18-2400", "Improper parking violation", "$50"),
    "Using Phone Whilst Driving": ("50-1731.04", "Distracted Driving (Cell Phone)", "$100"),
    "Running Red Light": ("18-2103.7", "Passing a red light or steady red arrow", "$150"),
    "Dangerous Driving": ("50-2201.04", "Reckless driving", "Court Appearance"),
}


def is_dc(state: str, city: str) -> bool:
    return state in (DC_JURISDICTION, "DC") or city == "Washington"


def _match_keywords(violation: str) -> str | None:
    v = violation.lower()
    if "bike lane" in v or "bicycle lane" in v:
        return "Stopping in Bicycle Lane"
    if "crosswalk" in v:
        return "Blocking Crosswalk"
    if "red light" in v:
        return "Running Red Light"
    if any(k in v for k in ("phone", "texting", "distracted")):
        return "Using Phone Whilst Driving"
    if ("park" in v or "standing" in v) and any(k in v for k in ("illegal", "improper", "double", "no stopping")):
        return "Improper Parking"
    if any(k in v for k in ("reckless", "dangerous", "speeding")):
        return "Dangerous Driving"
    return None


def lookup_citation(state: str, city: str, violation: str) -> Citation | None:
    """Map a free-text violation to an official code.

    Exact violation names win; otherwise keyword matching catches wording
    such as "car parked in bike lane". Only DC codes are known.
    """
    if not violation or not is_dc(state, city):
        return None
    key = violation if violation in DC_CITATIONS else _match_keywords(violation)
    if key is None:
        return None
    code, description, fine = DC_CITATIONS[key]
    return Citation(jurisdiction=DC_JURISDICTION, code=code, description=description, fine=fine)
