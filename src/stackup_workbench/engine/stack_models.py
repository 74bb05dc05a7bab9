# stack_models.py
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Mapping, Optional

from .stack_utils import coerce_float, optional_float, parse_leading_float
from .tolerance import Tolerance, EmptyTolerance, parse_tolerance

TOLERANCE_TYPES = ("Linear", "GD&T", "Float")


# =========================
# Stack rows
# =========================

@dataclass(frozen=True)
class Contributor:
    description: str = ""
    nominal: float = 0.0
    direction: str = "+"
    tol: Tolerance = field(default_factory=EmptyTolerance)
    cpk: Optional[float] = None
    tol_type: str = "Linear"
    float_shifted: bool = False

    def __post_init__(self):
        # Raw cell values are classified here, once.
        object.__setattr__(self, "tol", parse_tolerance(self.tol))
        object.__setattr__(self, "direction", "-" if str(self.direction).strip() == "-" else "+")

    @classmethod
    def from_dict(cls, row: Mapping[str, Any]) -> "Contributor":
        """Build from a saved stack row; absent keys fall back to defaults."""
        return cls(
            description=str(row.get("description") or ""),
            nominal=coerce_float(row.get("nominal"), 0.0),
            direction=row.get("direction") or "+",
            tol=row.get("tol"),
            cpk=parse_leading_float(row.get("cpk")),
            tol_type=row.get("tolType") or "Linear",
            float_shifted=bool(row.get("floatShifted", False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "description": self.description,
            "nominal": self.nominal,
            "direction": self.direction,
            "tol": self.tol.raw,
            "tolType": self.tol_type,
            "cpk": self.cpk,
            "floatShifted": self.float_shifted,
        }

    def with_changes(self, **changes) -> "Contributor":
        return replace(self, **changes)


# =========================
# Analysis setup
# =========================

@dataclass(frozen=True)
class SpecLimits:
    nominal_target: Optional[float] = None
    lsl: Optional[float] = None
    usl: Optional[float] = None

    @property
    def has_both(self) -> bool:
        return self.lsl is not None and self.usl is not None

    @property
    def is_inverted(self) -> bool:
        return self.has_both and self.lsl > self.usl


@dataclass
class Metadata:
    title: str = ""
    project: str = ""
    part_nr: str = ""
    analyst: str = ""
    creation_date: str = ""


@dataclass
class CriticalRequirement:
    critical_feature: str = ""
    nominal_target: Optional[float] = None
    lsl: Optional[float] = None
    usl: Optional[float] = None
    acceptance_criteria: str = ""

    @property
    def spec_limits(self) -> SpecLimits:
        return SpecLimits(self.nominal_target, self.lsl, self.usl)


@dataclass
class AssumptionsContext:
    functional_description: str = ""


@dataclass
class AnalysisSetup:
    metadata: Metadata = field(default_factory=Metadata)
    critical_requirement: CriticalRequirement = field(default_factory=CriticalRequirement)
    assumptions_context: AssumptionsContext = field(default_factory=AssumptionsContext)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AnalysisSetup":
        meta = data.get("metadata") or {}
        req = data.get("criticalRequirement") or {}
        ctx = data.get("assumptionsContext") or {}
        return cls(
            metadata=Metadata(
                title=meta.get("title") or "",
                project=meta.get("project") or "",
                part_nr=meta.get("partNr") or "",
                analyst=meta.get("analyst") or "",
                creation_date=meta.get("creationDate") or "",
            ),
            critical_requirement=CriticalRequirement(
                critical_feature=req.get("criticalFeature") or "",
                nominal_target=optional_float(req.get("nominalTarget")),
                lsl=optional_float(req.get("lsl")),
                usl=optional_float(req.get("usl")),
                acceptance_criteria=req.get("acceptanceCriteria") or "",
            ),
            assumptions_context=AssumptionsContext(
                functional_description=ctx.get("functionalDescription") or "",
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        m, r, c = self.metadata, self.critical_requirement, self.assumptions_context
        return {
            "metadata": {
                "title": m.title,
                "project": m.project,
                "partNr": m.part_nr,
                "analyst": m.analyst,
                "creationDate": m.creation_date,
            },
            "criticalRequirement": {
                "criticalFeature": r.critical_feature,
                "nominalTarget": r.nominal_target,
                "lsl": r.lsl,
                "usl": r.usl,
                "acceptanceCriteria": r.acceptance_criteria,
            },
            "assumptionsContext": {
                "functionalDescription": c.functional_description,
            },
        }


@dataclass
class Settings:
    advanced_statistical_mode: bool = False
    show_tolerance_type: bool = False
    show_float_shifted: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Settings":
        return cls(
            advanced_statistical_mode=bool(data.get("advancedStatisticalMode", False)),
            show_tolerance_type=bool(data.get("showToleranceType", False)),
            show_float_shifted=bool(data.get("showFloatShifted", False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "advancedStatisticalMode": self.advanced_statistical_mode,
            "showFloatShifted": self.show_float_shifted,
            "showToleranceType": self.show_tolerance_type,
        }
