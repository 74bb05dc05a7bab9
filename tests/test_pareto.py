# tests/test_pareto.py

import pytest

from stackup_workbench.engine.aggregation import aggregate
from stackup_workbench.engine.pareto import NO_DATA_MESSAGE, TRIVIAL_MANY, VITAL_FEW, rank
from stackup_workbench.engine.stack_models import Contributor


def _rank(rows):
    return rank(rows, aggregate(rows).total_variance)


def test_percentages_sum_to_100():
    rows = [
        Contributor(description="Base Plate", nominal=12.5, tol=0.15, cpk=1.33),
        Contributor(description="Spacer", nominal=8.3, tol=0.08, cpk=1.67),
        Contributor(description="Housing", nominal=25.0, tol="25 +0.1/-0.15", cpk=1.33),
        Contributor(description="Shaft", nominal=18.9, direction="-", tol=0.18),
    ]
    ranking = _rank(rows)

    assert sum(e.percent for e in ranking) == pytest.approx(100.0)
    assert ranking.entries[-1].cumulative_percent == pytest.approx(100.0)


def test_sorted_descending_with_original_positions():
    rows = [
        Contributor(description="small", tol=0.1),
        Contributor(description="big", tol=0.4),
        Contributor(description="mid", tol=0.2),
    ]
    ranking = _rank(rows)

    assert [e.description for e in ranking] == ["big", "mid", "small"]
    assert [e.original_index for e in ranking] == [1, 2, 0]
    assert [e.item_number for e in ranking] == [2, 3, 1]


def test_ties_keep_input_order():
    rows = [Contributor(description=name, tol=0.1) for name in ("A", "B", "C", "D")]
    ranking = _rank(rows)

    assert [e.original_index for e in ranking] == [0, 1, 2, 3]
    assert all(e.percent == pytest.approx(25.0) for e in ranking)


def test_vital_few_split_at_80_percent():
    # Variances 0.7, 0.1, 0.1, 0.1 of the total (same Cpk for all rows).
    tols = [0.7 ** 0.5, 0.1 ** 0.5, 0.1 ** 0.5, 0.1 ** 0.5]
    rows = [Contributor(description=f"R{i}", tol=t, cpk=1.0) for i, t in enumerate(tols)]
    ranking = _rank(rows)

    assert [e.category for e in ranking] == [VITAL_FEW, VITAL_FEW, TRIVIAL_MANY, TRIVIAL_MANY]
    assert [e.description for e in ranking.vital_few()] == ["R0", "R1"]


def test_cpk_weights_contribution():
    rows = [
        Contributor(description="capable", tol=0.2, cpk=2.0),
        Contributor(description="poor", tol=0.2, cpk=1.0),
    ]
    ranking = _rank(rows)
    assert ranking.entries[0].description == "poor"
    assert ranking.entries[0].percent == pytest.approx(80.0)


def test_zero_variance_gives_placeholder():
    rows = [Contributor(description="no tol", nominal=3.0, tol="")]
    ranking = rank(rows, 0.0)

    assert not ranking.has_data
    assert len(ranking) == 0
    assert ranking.message == NO_DATA_MESSAGE
    assert not rank([], 0.0).has_data


def test_unnamed_rows_get_a_label():
    ranking = _rank([{"tol": 0.1}, {"description": "", "tol": 0.2}])
    assert all(e.description == "Unnamed" for e in ranking)
