# pareto.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, List, Tuple

from .stack_utils import coerce_float, contributor_variance, row_value
from .tolerance import normalize

VITAL_FEW_THRESHOLD = 80.0
VITAL_FEW = "vital few"
TRIVIAL_MANY = "trivial many"
NO_DATA_MESSAGE = "Add stack data to view Pareto contributions."

_CUMULATIVE_SLACK = 1e-9


@dataclass(frozen=True)
class ParetoEntry:
    description: str
    percent: float
    original_index: int
    cumulative_percent: float
    category: str

    @property
    def item_number(self) -> int:
        return self.original_index + 1

    @property
    def is_vital(self) -> bool:
        return self.category == VITAL_FEW


@dataclass(frozen=True)
class ParetoRanking:
    entries: Tuple[ParetoEntry, ...] = field(default_factory=tuple)
    message: str = ""

    @property
    def has_data(self) -> bool:
        return len(self.entries) > 0

    def vital_few(self) -> List[ParetoEntry]:
        return [e for e in self.entries if e.is_vital]

    def __iter__(self):
        return iter(self.entries)

    def __len__(self):
        return len(self.entries)


def row_variances(contributors: Iterable[Any]) -> List[float]:
    out = []
    for row in contributors:
        nominal = coerce_float(row_value(row, "nominal"), 0.0)
        tol_adj = normalize(row_value(row, "tol"), nominal).tol_adj
        out.append(contributor_variance(tol_adj, row_value(row, "cpk")))
    return out


def rank(contributors: Iterable[Any], total_variance: float) -> ParetoRanking:
    """
    Rank contributors by their share of the stack variance.

    Equal shares keep their input order, so ``item_number`` still points at
    the row the user entered.
    """
    if not total_variance or total_variance <= 0:
        return ParetoRanking(message=NO_DATA_MESSAGE)

    rows = list(contributors)
    shares = [
        (i, (row_value(row, "description") or "Unnamed"), var / total_variance * 100.0)
        for i, (row, var) in enumerate(zip(rows, row_variances(rows)))
    ]
    shares.sort(key=lambda s: -s[2])

    entries = []
    cumulative = 0.0
    for i, desc, pct in shares:
        cumulative += pct
        category = VITAL_FEW if cumulative <= VITAL_FEW_THRESHOLD + _CUMULATIVE_SLACK else TRIVIAL_MANY
        entries.append(ParetoEntry(str(desc), pct, i, cumulative, category))

    return ParetoRanking(entries=tuple(entries))
