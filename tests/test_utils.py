import pytest

from app.utils.utils import clp_to_uf, is_valid_periodo, iso_date, split_periodo


@pytest.mark.parametrize("periodo", ["2026-01", "1999-12", "2026-13"])
def test_is_valid_periodo_accepts_yyyy_mm(periodo):
    assert is_valid_periodo(periodo)


@pytest.mark.parametrize("periodo", [None, "", "2026-01\n", "\u0662\u0660\u0662\u0666-\u0660\u0661", "2026-1", "26-01", "2026/01", "2026-01-01", " 2026-01", 202601])
def test_is_valid_periodo_rejects_other_shapes(periodo):
    assert not is_valid_periodo(periodo)


def test_split_periodo_returns_year_then_month():
    assert split_periodo("2026-01") == ("2026", "01")


def test_iso_date_truncates_timestamp():
    assert iso_date("2026-01-15T10:30:00") == "2026-01-15"
    assert iso_date("2026-01-15") == "2026-01-15"


def test_iso_date_missing_timestamp():
    assert iso_date(None) is None
    assert iso_date("") is None


def test_clp_to_uf_rounds_to_two_decimals():
    assert clp_to_uf(3_800_000, 38000) == 100.0
    assert clp_to_uf(1_000_000, 37_500.55) == 26.67


def test_clp_to_uf_rounds_half_up():
    # 1.005 exactly; binary floats would round this down
    assert clp_to_uf(201, 200) == 1.01
