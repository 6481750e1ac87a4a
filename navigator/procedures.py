from __future__ import annotations
import json
import math
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from navigator.models import CourtProcedure, FlowChartConnection, FlowChartNode, StepDocument
from navigator.personalization import Checklist

PROCEDURES_DIR = Path(__file__).parent / "data" / "procedures"


# -----------------------------------------------------------------------------
# Catalog
# -----------------------------------------------------------------------------
def available_procedures() -> List[str]:
    return sorted(p.stem for p in PROCEDURES_DIR.glob("*.json"))


@lru_cache(maxsize=None)
def load_procedure(slug: str) -> CourtProcedure:
    path = PROCEDURES_DIR / f"{slug}.json"
    if not path.is_file():
        raise KeyError(slug)
    return CourtProcedure.model_validate(json.loads(path.read_text(encoding="utf-8")))


# -----------------------------------------------------------------------------
# Flowchart projection (derived on every call, never stored)
# -----------------------------------------------------------------------------
def _node_type(i: int, total: int, has_required_docs: bool) -> str:
    if i == 0:
        return "start"
    if i == total - 1:
        return "end"
    return "document" if has_required_docs else "process"


def flowchart_nodes(procedure: CourtProcedure, current_step_id: Optional[str] = None) -> List[FlowChartNode]:
    steps = procedure.steps
    ids = [s.id for s in steps]
    current = ids.index(current_step_id) if current_step_id in ids else -1
    nodes = []
    for i, step in enumerate(steps):
        if current >= 0 and i < current:
            status = "completed"
        elif i == current:
            status = "current"
        elif step.optional:
            status = "optional"
        else:
            status = "pending"
        nodes.append(FlowChartNode(
            id=step.id,
            label=step.title,
            description=step.description or None,
            status=status,
            type=_node_type(i, len(steps), bool(step.required_documents)),
        ))
    return nodes


def flowchart_connections(nodes: List[FlowChartNode]) -> List[FlowChartConnection]:
    return [FlowChartConnection(from_id=a.id, to_id=b.id) for a, b in zip(nodes, nodes[1:])]


def split_branches(nodes: List[FlowChartNode]) -> Tuple[List[FlowChartNode], List[FlowChartNode]]:
    half = math.ceil(len(nodes) / 2)
    return nodes[:half], nodes[half:]


# -----------------------------------------------------------------------------
# Timeline + documents
# -----------------------------------------------------------------------------
def timeline_range(procedure: CourtProcedure) -> Tuple[int, int]:
    lo = sum(s.timeline.min_days for s in procedure.steps)
    hi = sum(s.timeline.max_days for s in procedure.steps)
    return lo, hi


def document_checklist(procedure: CourtProcedure) -> List[StepDocument]:
    seen: Dict[str, StepDocument] = {}
    for step in procedure.steps:
        for doc in step.documents:
            prior = seen.get(doc.name)
            if prior is None:
                seen[doc.name] = doc
            elif doc.required and not prior.required:
                seen[doc.name] = doc
    return list(seen.values())


def seed_checklist(procedure: CourtProcedure, checklist: Checklist) -> int:
    """Add every required document not already on the checklist; returns how many."""
    existing = {it.text for it in checklist}
    added = 0
    for step in procedure.steps:
        for doc in step.required_documents:
            if doc.name in existing:
                continue
            checklist.add(doc.name, category="documents", step_id=step.id)
            existing.add(doc.name)
            added += 1
    return added
