# tests/test_tolerance.py

import pytest

from stackup_workbench.engine.tolerance import (
    AsymmetricTolerance,
    EmptyTolerance,
    NumericTolerance,
    RawTolerance,
    is_unparseable,
    normalize,
    parse_tolerance,
)


@pytest.mark.parametrize("tol", [0.1, -0.25, 3, 1e-4, -7.5])
def test_numeric_tolerance_is_absolute_half_width(tol):
    norm = normalize(tol, 12.5)
    assert norm.tol_adj == abs(tol)
    assert norm.nominal_adj == 12.5


@pytest.mark.parametrize("tol", [None, "", "   ", 0, 0.0, False])
def test_falsy_tolerance_is_zero(tol):
    norm = normalize(tol, 4.0)
    assert norm.tol_adj == 0
    assert norm.nominal_adj == 4.0
    assert isinstance(parse_tolerance(tol), EmptyTolerance)


def test_asymmetric_string_recentres_nominal():
    norm = normalize("10+0.3/-0.1", 0)
    assert norm.nominal_adj == pytest.approx(10.1)
    assert norm.tol_adj == pytest.approx(0.4)


def test_asymmetric_string_tolerates_whitespace_and_ignores_row_nominal():
    norm = normalize("  0 +0.2/-0.1 ", 99.0)
    assert norm.nominal_adj == pytest.approx(0.05)
    assert norm.tol_adj == pytest.approx(0.3)


def test_asymmetric_band_keeps_full_width():
    """Both deviations on the same side still add their magnitudes."""
    norm = normalize("5 +0.3/+0.1", 0)
    assert norm.nominal_adj == pytest.approx(5.2)
    assert norm.tol_adj == pytest.approx(0.4)


def test_parse_classifies_once():
    assert isinstance(parse_tolerance(0.2), NumericTolerance)
    assert isinstance(parse_tolerance("12.4+0.3/-0.1"), AsymmetricTolerance)
    assert isinstance(parse_tolerance("0.2mm"), RawTolerance)

    tol = parse_tolerance("12.4+0.3/-0.1")
    assert parse_tolerance(tol) is tol
    assert (tol.base, tol.plus, tol.minus) == (12.4, 0.3, -0.1)


def test_raw_text_uses_leading_number():
    norm = normalize("-0.2mm", 7.0)
    assert norm.tol_adj == pytest.approx(0.2)
    assert norm.nominal_adj == 7.0


def test_unreadable_text_degrades_to_zero():
    norm = normalize("abc", 3.3)
    assert norm.tol_adj == 0
    assert norm.nominal_adj == 3.3
    assert is_unparseable("abc")
    assert not is_unparseable("0.2")
    assert not is_unparseable("")


def test_non_finite_number_is_empty():
    assert normalize(float("nan"), 1.0).tol_adj == 0
    assert normalize(float("inf"), 1.0).tol_adj == 0


def test_raw_value_is_kept_for_saving():
    assert parse_tolerance(" 1 +0.1/-0.2").raw == " 1 +0.1/-0.2"
    assert parse_tolerance("0.2mm").raw == "0.2mm"
    assert parse_tolerance(0.15).raw == 0.15
    assert parse_tolerance(0).raw == 0
