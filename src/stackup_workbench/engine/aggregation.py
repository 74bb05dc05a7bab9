# aggregation.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Tuple
import logging

import numpy as np

from .stack_utils import coerce_float, contributor_variance, direction_sign, row_value
from .tolerance import normalize

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StackResult:
    stack_mean: float = 0.0
    worst_case: float = 0.0
    rss: float = 0.0
    stack_sigma: float = 0.0
    total_variance: float = 0.0
    n_contributors: int = 0

    def sigma_range(self, k: float) -> Tuple[float, float]:
        return (self.stack_mean - k * self.stack_sigma, self.stack_mean + k * self.stack_sigma)

    @property
    def worst_case_limits(self) -> Tuple[float, float]:
        return (self.stack_mean - self.worst_case, self.stack_mean + self.worst_case)

    @property
    def rss_limits(self) -> Tuple[float, float]:
        return (self.stack_mean - self.rss, self.stack_mean + self.rss)


def aggregate(contributors: Iterable[Any]) -> StackResult:
    """
    Sum a stack of contributors into its mean, worst-case, RSS and sigma.

    Contributors may be ``Contributor`` objects or saved-row mappings. All
    accumulations are plain sums, so the result does not depend on row order.
    """
    stack_mean = 0.0
    worst_case = 0.0
    rss_accum = 0.0
    variance_accum = 0.0
    n = 0

    for row in contributors:
        nominal = coerce_float(row_value(row, "nominal"), 0.0)
        norm = normalize(row_value(row, "tol"), nominal)

        stack_mean += norm.nominal_adj * direction_sign(row_value(row, "direction", "+"))
        worst_case += norm.tol_adj
        rss_accum += norm.tol_adj ** 2
        variance_accum += contributor_variance(norm.tol_adj, row_value(row, "cpk"))
        n += 1

    result = StackResult(
        stack_mean=float(stack_mean),
        worst_case=float(worst_case),
        rss=float(np.sqrt(rss_accum)),
        stack_sigma=float(np.sqrt(variance_accum)),
        total_variance=float(variance_accum),
        n_contributors=n,
    )
    logger.debug(
        "Aggregated %d contributors: mean=%.6g wc=%.6g rss=%.6g sigma=%.6g",
        n, result.stack_mean, result.worst_case, result.rss, result.stack_sigma,
    )
    return result
