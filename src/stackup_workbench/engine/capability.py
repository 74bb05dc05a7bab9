# capability.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
import math

from scipy import stats

DRIFT_SHIFT_SIGMA = 1.5
DPMO_SCALE = 1_000_000.0

# Abramowitz & Stegun 7.1.26, |error| <= 1.5e-7
_A1 = 0.254829592
_A2 = -0.284496736
_A3 = 1.421413741
_A4 = -1.453152027
_A5 = 1.061405429
_P = 0.3275911


@dataclass(frozen=True)
class CapabilityResult:
    cp: Optional[float] = None
    cpu: Optional[float] = None
    cpl: Optional[float] = None
    achieved_cpk: Optional[float] = None
    z_usl: Optional[float] = None
    z_lsl: Optional[float] = None
    z_min: Optional[float] = None
    percent_out_of_spec: Optional[float] = None
    dpmo: Optional[float] = None
    sigma_level: Optional[float] = None


def erf_approx(x: float) -> float:
    sign = -1.0 if x < 0 else 1.0
    x = abs(x)
    t = 1.0 / (1.0 + _P * x)
    poly = ((((_A5 * t + _A4) * t + _A3) * t + _A2) * t + _A1) * t
    return sign * (1.0 - poly * math.exp(-x * x))


def normal_cdf(z: float) -> float:
    return 0.5 * (1.0 + erf_approx(z / math.sqrt(2.0)))


def out_of_spec_probability(mean: float, sigma: float, lsl: Optional[float], usl: Optional[float]) -> float:
    """Probability mass beyond the given limits; a missing limit has no tail."""
    p = 0.0
    if lsl is not None:
        p += normal_cdf((lsl - mean) / sigma)
    if usl is not None:
        p += 1.0 - normal_cdf((usl - mean) / sigma)
    return p


def drift_shifted_mean(mean: float, sigma: float, lsl: Optional[float], usl: Optional[float]) -> float:
    """Move the mean 1.5 sigma toward the nearer limit (USL on a tie)."""
    shift = DRIFT_SHIFT_SIGMA * sigma
    if lsl is not None and usl is not None:
        toward_usl = (usl - mean) <= (mean - lsl)
    else:
        toward_usl = usl is not None
    return mean + shift if toward_usl else mean - shift


def sigma_level_from_dpmo(dpmo: Optional[float]) -> Optional[float]:
    """Short-term process sigma, adding back the 1.5 sigma long-term drift."""
    if dpmo is None:
        return None
    tail = dpmo / DPMO_SCALE
    if not 0.0 < tail < 1.0:
        return None
    return float(stats.norm.isf(tail) + DRIFT_SHIFT_SIGMA)


def evaluate(
    stack_mean: float,
    stack_sigma: float,
    lsl: Optional[float] = None,
    usl: Optional[float] = None,
) -> CapabilityResult:
    """
    Capability of the stack against its spec limits.

    Each output needs its own inputs and is ``None`` when they are missing;
    nothing here raises.
    """
    if stack_sigma is None or not stack_sigma > 0 or (lsl is None and usl is None):
        return CapabilityResult()

    sigma = float(stack_sigma)
    mean = float(stack_mean)

    cp = (usl - lsl) / (6.0 * sigma) if lsl is not None and usl is not None else None
    cpu = (usl - mean) / (3.0 * sigma) if usl is not None else None
    cpl = (mean - lsl) / (3.0 * sigma) if lsl is not None else None
    z_usl = (usl - mean) / sigma if usl is not None else None
    z_lsl = (mean - lsl) / sigma if lsl is not None else None

    achieved_cpk = min(v for v in (cpu, cpl) if v is not None)
    z_min = min(v for v in (z_usl, z_lsl) if v is not None)

    percent = 100.0 * out_of_spec_probability(mean, sigma, lsl, usl)

    shifted = drift_shifted_mean(mean, sigma, lsl, usl)
    dpmo = DPMO_SCALE * out_of_spec_probability(shifted, sigma, lsl, usl)

    return CapabilityResult(
        cp=cp,
        cpu=cpu,
        cpl=cpl,
        achieved_cpk=achieved_cpk,
        z_usl=z_usl,
        z_lsl=z_lsl,
        z_min=z_min,
        percent_out_of_spec=percent,
        dpmo=dpmo,
        sigma_level=sigma_level_from_dpmo(dpmo),
    )
