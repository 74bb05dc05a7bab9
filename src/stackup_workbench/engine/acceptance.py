# acceptance.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

WORST_CASE = "worst-case"
RSS = "rss"

BASIC_CRITERIA = (WORST_CASE, RSS)
ADVANCED_CRITERIA = ("cpk-1", "cpk-1.33", "cpk-1.67", "cpk-2")

DEFAULT_BASIC_CRITERION = WORST_CASE
DEFAULT_ADVANCED_CRITERION = "cpk-1.33"

CPK_THRESHOLDS: Dict[str, float] = {
    "cpk-1": 1.0,
    "cpk-1.33": 1.33,
    "cpk-1.67": 1.67,
    "cpk-2": 2.0,
}

PASS = "PASS"
FAIL = "FAIL"
INDETERMINATE = "INDETERMINATE"


@dataclass(frozen=True)
class AcceptanceResult:
    criterion: str
    requested_criterion: Optional[str]
    passed: Optional[bool]
    achieved: Optional[float]
    threshold: Optional[float]

    @property
    def corrected(self) -> bool:
        return self.criterion != self.requested_criterion

    @property
    def verdict(self) -> str:
        if self.passed is None:
            return INDETERMINATE
        return PASS if self.passed else FAIL

    @property
    def label(self) -> str:
        return criterion_label(self.criterion)


def criteria_for_mode(advanced_mode: bool):
    return ADVANCED_CRITERIA if advanced_mode else BASIC_CRITERIA


def reconcile_criterion(advanced_mode: bool, criterion: Optional[str]) -> str:
    """Reset a criterion that does not belong to the active mode to that mode's default."""
    if criterion in criteria_for_mode(advanced_mode):
        return criterion
    return DEFAULT_ADVANCED_CRITERION if advanced_mode else DEFAULT_BASIC_CRITERION


def criterion_label(criterion: Optional[str]) -> str:
    if not criterion:
        return "-"
    if criterion.startswith("cpk-"):
        return f"Must have a Cpk of at least {criterion[len('cpk-'):]}"
    if criterion == WORST_CASE:
        return "Worst Case tolerance must be within spec limits"
    if criterion == RSS:
        return "RSS tolerance must be within spec limits"
    return criterion


def _within_limits(mean: float, bound: float, lsl: Optional[float], usl: Optional[float]) -> Optional[bool]:
    if lsl is None or usl is None:
        return None
    return (mean + bound <= usl) and (mean - bound >= lsl)


def judge(
    advanced_mode: bool,
    criterion: Optional[str],
    stack_mean: float,
    worst_case: float,
    rss: float,
    achieved_cpk: Optional[float],
    lsl: Optional[float],
    usl: Optional[float],
) -> Optional[bool]:
    """PASS (True), FAIL (False) or not evaluable (None) for the reconciled criterion."""
    criterion = reconcile_criterion(advanced_mode, criterion)

    if criterion == WORST_CASE:
        return _within_limits(stack_mean, worst_case, lsl, usl)
    if criterion == RSS:
        return _within_limits(stack_mean, rss, lsl, usl)

    if achieved_cpk is None:
        return None
    return achieved_cpk >= CPK_THRESHOLDS[criterion]


def evaluate_acceptance(
    advanced_mode: bool,
    criterion: Optional[str],
    stack_mean: float,
    worst_case: float,
    rss: float,
    achieved_cpk: Optional[float],
    lsl: Optional[float],
    usl: Optional[float],
) -> AcceptanceResult:
    used = reconcile_criterion(advanced_mode, criterion)
    passed = judge(advanced_mode, used, stack_mean, worst_case, rss, achieved_cpk, lsl, usl)

    if used == WORST_CASE:
        achieved, threshold = worst_case, None
    elif used == RSS:
        achieved, threshold = rss, None
    else:
        achieved, threshold = achieved_cpk, CPK_THRESHOLDS[used]

    return AcceptanceResult(
        criterion=used,
        requested_criterion=criterion,
        passed=passed,
        achieved=achieved,
        threshold=threshold,
    )
