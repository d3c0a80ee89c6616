import pytest

from trafficwatch.citations import DC_CITATIONS, VIOLATION_TYPES, lookup_citation


def test_exact_match_in_dc() -> None:
    c = lookup_citation("District of Columbia", "Washington", "Stopping in Bicycle Lane")
    assert c is not None
    assert c.code == "18-2405.1(g)"
    assert c.fine == "$150"
    assert c.jurisdiction == "District of Columbia"


@pytest.mark.parametrize(
    "text,code",
    [
        ("Car parked in bike lane", "18-2405.1(g)"),
        ("Truck blocking the crosswalk", "18-2405.1(e)"),
        ("Ran the red light at 14th St", "18-2103.7"),
        ("Driver texting at the wheel", "50-1731.04"),
        ("Double parked van", "18-2400"),
        ("Illegal standing zone", "18-2400"),
        ("Speeding through a school zone", "50-2201.04"),
    ],
)
def test_keyword_matching(text: str, code: str) -> None:
    c = lookup_citation("DC", "", text)
    assert c is not None
    assert c.code == code


def test_city_alone_identifies_dc() -> None:
    assert lookup_citation("", "Washington", "Blocking Crosswalk") is not None


def test_no_citation_outside_dc_or_without_violation() -> None:
    assert lookup_citation("California", "San Francisco", "Running Red Light") is None
    assert lookup_citation("District of Columbia", "Washington", "") is None
    assert lookup_citation("DC", "", "Parked near a hydrant") is None


def test_every_standard_violation_has_a_dc_code() -> None:
    standard = [v for v in VIOLATION_TYPES if v != "Other"]
    assert set(standard) == set(DC_CITATIONS)
