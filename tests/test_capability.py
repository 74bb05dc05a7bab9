# tests/test_capability.py

import math

import numpy as np
import pytest
from scipy import special, stats

from stackup_workbench.engine.capability import (
    drift_shifted_mean,
    erf_approx,
    evaluate,
    normal_cdf,
    sigma_level_from_dpmo,
)

# =========================
# Normal CDF approximation
# =========================

def test_erf_approximation_error_is_below_2e_7():
    x = np.linspace(-5, 5, 2001)
    approx = np.array([erf_approx(v) for v in x])
    assert np.max(np.abs(approx - special.erf(x))) < 2e-7


def test_normal_cdf_is_symmetric_and_centred():
    assert normal_cdf(0.0) == pytest.approx(0.5, abs=1e-7)
    for z in (0.5, 1.0, 2.5, 4.0):
        assert normal_cdf(z) + normal_cdf(-z) == pytest.approx(1.0, abs=1e-12)
        assert normal_cdf(z) == pytest.approx(stats.norm.cdf(z), abs=2e-7)


# =========================
# Capability indices
# =========================

def test_centred_process_cp_equals_cpk():
    cap = evaluate(10.0, 0.1, lsl=9.4, usl=10.6)
    assert cap.cp == pytest.approx(2.0)
    assert cap.achieved_cpk == pytest.approx(2.0)
    assert cap.z_usl == pytest.approx(6.0)
    assert cap.z_lsl == pytest.approx(6.0)
    assert cap.z_min == pytest.approx(6.0)


def test_off_centre_cpk_uses_nearer_limit():
    cap = evaluate(10.2, 0.1, lsl=9.4, usl=10.6)
    assert cap.cpu == pytest.approx(4 / 3)
    assert cap.cpl == pytest.approx(8 / 3)
    assert cap.achieved_cpk == pytest.approx(4 / 3)
    assert cap.cp == pytest.approx(2.0)


def test_single_sided_limits():
    upper = evaluate(10.0, 0.5, usl=12.0)
    assert upper.cp is None
    assert upper.achieved_cpk == pytest.approx(2 / 1.5)

    lower = evaluate(10.0, 0.5, lsl=9.0)
    assert lower.cp is None
    assert lower.achieved_cpk == pytest.approx(1 / 1.5)


def test_missing_inputs_give_none_without_raising():
    assert evaluate(10.0, 0.5) == evaluate(10.0, 0.5, None, None)
    assert evaluate(10.0, 0.5).achieved_cpk is None
    assert evaluate(10.0, 0.0, lsl=9, usl=11).achieved_cpk is None
    assert evaluate(10.0, 0.0, lsl=9, usl=11).dpmo is None


@pytest.mark.parametrize("usl", [10.5, 11.0, 12.0, 15.0, 30.0])
def test_cpk_never_decreases_as_usl_grows(usl):
    base = evaluate(10.0, 0.2, lsl=9.0, usl=usl).achieved_cpk
    wider = evaluate(10.0, 0.2, lsl=9.0, usl=usl + 0.5).achieved_cpk
    assert wider >= base


# =========================
# Out of spec and DPMO
# =========================

def test_percent_out_of_spec_matches_normal_tails():
    cap = evaluate(0.0, 1.0, lsl=-3.0, usl=3.0)
    expected = 100 * (stats.norm.cdf(-3.0) + stats.norm.sf(3.0))
    assert cap.percent_out_of_spec == pytest.approx(expected, abs=1e-4)


def test_dpmo_shifts_toward_nearer_limit():
    # USL is closer, so the mean drifts up by 1.5 sigma.
    assert drift_shifted_mean(10.0, 0.1, lsl=9.0, usl=10.5) == pytest.approx(10.15)
    # LSL is closer.
    assert drift_shifted_mean(10.0, 0.1, lsl=9.8, usl=11.0) == pytest.approx(9.85)
    # Single limit.
    assert drift_shifted_mean(10.0, 0.1, lsl=9.0, usl=None) == pytest.approx(9.85)


def test_six_sigma_process_gives_3_4_dpmo():
    cap = evaluate(0.0, 1.0, lsl=-6.0, usl=6.0)
    assert cap.dpmo == pytest.approx(3.4, abs=0.2)
    assert cap.sigma_level == pytest.approx(6.0, abs=0.05)


def test_dpmo_is_worse_than_unshifted_rate():
    cap = evaluate(0.0, 1.0, lsl=-3.0, usl=3.0)
    assert cap.dpmo > cap.percent_out_of_spec * 1e4


def test_sigma_level_needs_a_real_tail():
    assert sigma_level_from_dpmo(None) is None
    assert sigma_level_from_dpmo(0.0) is None
    assert sigma_level_from_dpmo(1e6) is None
    assert sigma_level_from_dpmo(66807.0) == pytest.approx(3.0, abs=0.01)
    assert math.isfinite(sigma_level_from_dpmo(500000.0))
