"""Save and load a whole stack (rows, analysis setup, settings) as flat JSON.

The document layout is the one the stack editor has always written::

    {"version": "1.0", "timestamp": ..., "stackData": [...], "annotations": [...],
     "analysisSetup": {...}, "settings": {...}, "canvasImage": ...}

Annotations and the canvas image belong to the drawing tool; they are carried
through untouched.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional
import json
import logging
import re

from stackup_workbench.engine.stack_models import AnalysisSetup, Contributor, Settings

logger = logging.getLogger(__name__)

FORMAT_VERSION = "1.0"


@dataclass
class StackDocument:
    contributors: List[Contributor] = field(default_factory=list)
    setup: AnalysisSetup = field(default_factory=AnalysisSetup)
    settings: Settings = field(default_factory=Settings)
    annotations: List[Any] = field(default_factory=list)
    canvas_image: Optional[str] = None


def to_payload(doc: StackDocument, timestamp: Optional[datetime] = None) -> Dict[str, Any]:
    timestamp = timestamp or datetime.now(timezone.utc)
    return {
        "version": FORMAT_VERSION,
        "timestamp": timestamp.isoformat(),
        "stackData": [c.to_dict() for c in doc.contributors],
        "annotations": list(doc.annotations),
        "analysisSetup": doc.setup.to_dict(),
        "settings": doc.settings.to_dict(),
        "canvasImage": doc.canvas_image,
    }


def from_payload(data: Any) -> StackDocument:
    if not isinstance(data, dict):
        raise ValueError("Invalid file format")

    rows = data.get("stackData")
    annotations = data.get("annotations")
    setup = data.get("analysisSetup")
    settings = data.get("settings")

    return StackDocument(
        contributors=[Contributor.from_dict(r) for r in rows if isinstance(r, dict)] if isinstance(rows, list) else [],
        setup=AnalysisSetup.from_dict(setup) if isinstance(setup, dict) else AnalysisSetup(),
        settings=Settings.from_dict(settings) if isinstance(settings, dict) else Settings(),
        annotations=list(annotations) if isinstance(annotations, list) else [],
        canvas_image=data.get("canvasImage") or None,
    )


def dump_stack(doc: StackDocument, timestamp: Optional[datetime] = None) -> str:
    return json.dumps(to_payload(doc, timestamp), indent=2)


def parse_stack(text: str) -> StackDocument:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid file format: {exc}") from exc
    return from_payload(data)


def save_stack(doc: StackDocument, path: str):
    with open(path, "w", encoding="utf-8") as f:
        f.write(dump_stack(doc))
    logger.info("Saved %d contributors to %s", len(doc.contributors), path)


def load_stack(path: str) -> StackDocument:
    with open(path, "r", encoding="utf-8") as f:
        doc = parse_stack(f.read())
    logger.info("Loaded %d contributors from %s", len(doc.contributors), path)
    return doc


def suggested_filename(title: Optional[str], on: Optional[date] = None) -> str:
    """``"Gap Analysis #2"`` -> ``"gap_analysis__2_2024-05-01.json"``."""
    on = on or date.today()
    stem = re.sub(r"[^a-z0-9]", "_", title or "", flags=re.IGNORECASE).lower() or "stack"
    return f"{stem}_{on.isoformat()}.json"
