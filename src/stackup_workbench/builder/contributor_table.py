from typing import Any, List, Sequence
import pandas as pd

from stackup_workbench.engine.stack_models import Contributor, TOLERANCE_TYPES
from stackup_workbench.engine.stack_utils import coerce_float

COLUMNS = ["description", "nominal", "direction", "tol", "tolType", "cpk", "floatShifted"]
REQUIRED_COLUMNS = ["nominal", "tol"]
NUMERIC_KEYS = {"nominal", "cpk"}

_FIELD_BY_KEY = {
    "description": "description",
    "nominal": "nominal",
    "direction": "direction",
    "tol": "tol",
    "tolType": "tol_type",
    "cpk": "cpk",
    "floatShifted": "float_shifted",
}


def new_contributor() -> Contributor:
    """A blank row as added by the "Add row" action."""
    return Contributor(description="", nominal=0.0, tol=0, tol_type="Linear", cpk=1.33, float_shifted=False)


def add_contributor(contributors: Sequence[Contributor], contributor: Contributor = None) -> List[Contributor]:
    return list(contributors) + [contributor or new_contributor()]


def _check_index(contributors: Sequence[Contributor], index: int):
    if not 0 <= index < len(contributors):
        raise ValueError(f"Row index {index} is out of range for a stack of {len(contributors)} rows.")


def update_cell(contributors: Sequence[Contributor], index: int, key: str, value: Any) -> List[Contributor]:
    """
    Returns a copy of the stack with one cell edited.

    Args:
        contributors: The current rows.
        index: 0-based row index.
        key: Column key as saved in a stack file (e.g. "tol", "tolType").
        value: The raw cell value. Numeric cells that cannot be read become 0.

    Raises:
        ValueError: If the index is out of range.
        KeyError: If the key is not a known column.
    """
    _check_index(contributors, index)
    if key not in _FIELD_BY_KEY:
        raise KeyError(f"Unknown column '{key}'.")

    if key in NUMERIC_KEYS:
        value = coerce_float(value, 0.0)
    elif key == "floatShifted":
        value = bool(value)
    elif key == "tolType" and value not in TOLERANCE_TYPES:
        value = "Linear"

    rows = list(contributors)
    rows[index] = rows[index].with_changes(**{_FIELD_BY_KEY[key]: value})
    return rows


def move_contributor(contributors: Sequence[Contributor], from_index: int, to_index: int) -> List[Contributor]:
    """Drag-and-drop reorder: the row at from_index ends up at to_index."""
    _check_index(contributors, from_index)
    _check_index(contributors, to_index)
    rows = list(contributors)
    rows.insert(to_index, rows.pop(from_index))
    return rows


def remove_contributor(contributors: Sequence[Contributor], index: int) -> List[Contributor]:
    _check_index(contributors, index)
    rows = list(contributors)
    del rows[index]
    return rows


def contributors_to_frame(contributors: Sequence[Contributor]) -> pd.DataFrame:
    df = pd.DataFrame([c.to_dict() for c in contributors], columns=COLUMNS)
    df.insert(0, "Item", range(1, len(df) + 1))
    return df


def validate_contributor_frame(df: pd.DataFrame) -> pd.DataFrame:
    """
    Returns a sanitized copy of df:
      - checks the required columns are present
      - fills optional columns with their defaults
      - drops rows that are entirely empty
    """
    for col in REQUIRED_COLUMNS:
        if col not in df.columns:
            raise KeyError(f"Column '{col}' missing from contributor table.")

    df2 = df.dropna(how="all").copy()
    defaults = {"description": "", "direction": "+", "tolType": "Linear", "cpk": None, "floatShifted": False}
    for col, default in defaults.items():
        if col not in df2.columns:
            df2[col] = default

    df2 = df2.astype(object).where(pd.notna(df2), None)
    return df2


def contributors_from_frame(df: pd.DataFrame) -> List[Contributor]:
    df2 = validate_contributor_frame(df)
    rows = []
    for rec in df2.to_dict(orient="records"):
        tol = rec.get("tol")
        # Plain numbers read as text are still symmetric tolerances.
        if isinstance(tol, str):
            try:
                tol = float(tol)
            except ValueError:
                pass
        rec["tol"] = tol
        rec["floatShifted"] = _as_bool(rec.get("floatShifted"))
        rows.append(Contributor.from_dict(rec))
    return rows


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "y")
    return bool(value)


def read_contributors_csv(path: str) -> List[Contributor]:
    df = pd.read_csv(path, dtype={"tol": str, "description": str})
    return contributors_from_frame(df)


def export_contributors_csv(contributors: Sequence[Contributor], path: str):
    """
    Exports the stack to a CSV file.

    Args:
        contributors: The rows to export.
        path: The file path to save to.
    """
    contributors_to_frame(contributors).to_csv(path, index=False, encoding="utf-8")
