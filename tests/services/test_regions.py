import pytest

from phindex.services.regions import check_answer, region_contains, region_for, region_from_slug


@pytest.mark.parametrize(
    "subregion, region",
    [
        ("Eastern Europe", "Europe"),
        ("levant", "Middle East"),
        ("  Polynesia ", "Oceania"),
        ("Sub-Saharan Africa", "Africa"),
    ],
)
def test_region_for(subregion, region):
    assert region_for(subregion) == region


def test_region_for_unknown():
    assert region_for("Atlantis") is None
    assert region_for(None) is None


def test_region_contains():
    assert region_contains("Asia", "Southern Asia")
    assert not region_contains("Asia", "Levant")
    assert not region_contains("Nowhere", "Levant")


def test_region_from_slug():
    assert region_from_slug("middle-east") == "Middle East"
    assert region_from_slug("MIDDLE-EAST") == "Middle East"
    assert region_from_slug("antarctica") is None


def test_check_answer_correct():
    assert check_answer("Europe", "Northern Europe") == (True, None)


def test_check_answer_wrong_reports_region():
    assert check_answer("Asia", "Northern Europe") == (False, "Europe")


def test_check_answer_without_votes_accepts_anything():
    assert check_answer("Oceania", None) == (True, None)
