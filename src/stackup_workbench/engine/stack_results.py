# stack_results.py
from __future__ import annotations

from typing import Any, List, Sequence

from .acceptance import ADVANCED_CRITERIA, AcceptanceResult
from .stack_utils import row_value
from .tolerance import is_unparseable


def interpret_cpk(val) -> str:
    if val is None:
        return "N/A"
    if val >= 1.67:
        return "Excellent"
    if val >= 1.33:
        return "Capable"
    if val >= 1.0:
        return "Marginal"
    return "Not capable"


def collect_warnings(contributors: Sequence[Any], config, acceptance: AcceptanceResult) -> List[str]:
    warnings: List[str] = []
    limits = config.spec_limits

    for i, row in enumerate(contributors, start=1):
        tol = row_value(row, "tol")
        if is_unparseable(tol):
            raw = getattr(tol, "raw", tol)
            warnings.append(f"Row {i}: tolerance '{raw}' could not be read and was treated as zero.")

    if limits.is_inverted:
        warnings.append(
            f"WARNING: LSL ({limits.lsl:g}) is greater than USL ({limits.usl:g}). "
            "Capability and pass/fail results will be inverted."
        )

    if config.acceptance_criteria and acceptance.corrected:
        mode = "advanced" if config.advanced_mode else "basic"
        warnings.append(
            f"Acceptance criterion '{config.acceptance_criteria}' is not available in {mode} mode; "
            f"using '{acceptance.criterion}'."
        )

    if acceptance.passed is None:
        if acceptance.criterion in ADVANCED_CRITERIA:
            warnings.append("Acceptance not evaluable: Cpk needs at least one spec limit and a non-zero stack sigma.")
        else:
            warnings.append("Acceptance not evaluable: both LSL and USL are required.")

    return warnings


def build_result_object(
    contributors,
    config,
    stack,
    capability,
    acceptance,
    pareto,
    warnings: List[str],
    StackAnalysisResult,
):
    return StackAnalysisResult(
        config=config,
        contributors=tuple(contributors),
        stack=stack,
        capability=capability,
        acceptance=acceptance,
        pareto=pareto,
        warnings=list(warnings),
    )
