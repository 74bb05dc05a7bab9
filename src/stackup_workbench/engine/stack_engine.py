# stack_engine.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, List, Mapping, Optional, Tuple
import logging

from .acceptance import AcceptanceResult, evaluate_acceptance
from .aggregation import StackResult, aggregate
from .capability import CapabilityResult, evaluate
from .pareto import ParetoRanking, rank
from .stack_models import AnalysisSetup, Contributor, Settings, SpecLimits
from .stack_results import build_result_object, collect_warnings

logger = logging.getLogger(__name__)


# =========================
# Dataclasses / result types
# =========================

@dataclass
class StackConfig:
    spec_limits: SpecLimits = field(default_factory=SpecLimits)
    acceptance_criteria: Optional[str] = None
    advanced_mode: bool = False

    def __post_init__(self):
        if isinstance(self.spec_limits, Mapping):
            self.spec_limits = SpecLimits(**self.spec_limits)
        if not isinstance(self.spec_limits, SpecLimits):
            raise ValueError("spec_limits must be a SpecLimits or a mapping of its fields.")

        self.advanced_mode = bool(self.advanced_mode)
        if self.acceptance_criteria is not None:
            self.acceptance_criteria = str(self.acceptance_criteria).strip() or None

    @classmethod
    def from_setup(cls, setup: AnalysisSetup, settings: Optional[Settings] = None) -> "StackConfig":
        settings = settings or Settings()
        req = setup.critical_requirement
        return cls(
            spec_limits=req.spec_limits,
            acceptance_criteria=req.acceptance_criteria,
            advanced_mode=settings.advanced_statistical_mode,
        )

    @property
    def lsl(self) -> Optional[float]:
        return self.spec_limits.lsl

    @property
    def usl(self) -> Optional[float]:
        return self.spec_limits.usl


@dataclass
class StackAnalysisResult:
    config: StackConfig
    contributors: Tuple[Any, ...]
    stack: StackResult
    capability: CapabilityResult
    acceptance: AcceptanceResult
    pareto: ParetoRanking
    warnings: List[str]


# =========================
# Public API
# =========================

def run_stack_analysis(contributors: Iterable[Any], config: Optional[StackConfig] = None) -> StackAnalysisResult:
    """
    One full pass over a snapshot of the stack: aggregate, evaluate capability,
    judge acceptance and rank contributions.

    Nothing is cached between calls and the caller's rows are never modified.
    """
    config = config or StackConfig()
    snapshot = tuple(contributors)
    limits = config.spec_limits

    stack = aggregate(snapshot)
    capability = evaluate(stack.stack_mean, stack.stack_sigma, limits.lsl, limits.usl)
    acceptance = evaluate_acceptance(
        config.advanced_mode,
        config.acceptance_criteria,
        stack.stack_mean,
        stack.worst_case,
        stack.rss,
        capability.achieved_cpk,
        limits.lsl,
        limits.usl,
    )
    pareto = rank(snapshot, stack.total_variance)

    warnings = collect_warnings(snapshot, config, acceptance)
    for w in warnings:
        logger.warning(w)

    return build_result_object(snapshot, config, stack, capability, acceptance, pareto, warnings, StackAnalysisResult)


def run_stack_document(contributors: Iterable[Contributor], setup: AnalysisSetup, settings: Optional[Settings] = None) -> StackAnalysisResult:
    return run_stack_analysis(contributors, StackConfig.from_setup(setup, settings))
