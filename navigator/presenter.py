from __future__ import annotations
from typing import Callable, Dict, List, Optional

from navigator.i18n import Translator
from navigator.models import AnalysisResult, Risk

SECTIONS = ("summary", "risks", "suggestions", "next_steps")
VISIBILITY_THRESHOLD = 0.2

SEVERITY_COLORS = {
    "high": "#ef4444",  # red
    "medium": "#f59e0b",  # amber
    "low": "#10b981",  # emerald
}
DEFAULT_COLOR = "#64748b"  # slate


class SectionTracker:
    """Which result section is current, and how far along the reader is.

    Scroll observation and the "continue" buttons both go through go_to().
    """

    def __init__(self, on_change: Optional[Callable[[str], None]] = None):
        self.current = SECTIONS[0]
        self._on_change = on_change

    @property
    def index(self) -> int:
        return SECTIONS.index(self.current)

    @property
    def progress(self) -> int:
        return (self.index + 1) * 100 // len(SECTIONS)

    @property
    def is_last(self) -> bool:
        return self.index == len(SECTIONS) - 1

    def go_to(self, section: str) -> bool:
        if section not in SECTIONS:
            raise ValueError(f"unknown section: {section}")
        if section == self.current:
            return False
        self.current = section
        if self._on_change is not None:
            self._on_change(section)
        return True

    def advance(self) -> bool:
        if self.is_last:
            return False
        return self.go_to(SECTIONS[self.index + 1])

    def observe(self, section: str, visible_ratio: float) -> bool:
        if visible_ratio < VISIBILITY_THRESHOLD:
            return False
        return self.go_to(section)

    def reset(self) -> None:
        self.go_to(SECTIONS[0])


def severity_color(severity: Optional[str]) -> str:
    return SEVERITY_COLORS.get((severity or "").lower(), DEFAULT_COLOR)


def risks_by_severity(result: AnalysisResult) -> Dict[str, List[Risk]]:
    groups: Dict[str, List[Risk]] = {"high": [], "medium": [], "low": []}
    for r in result.risks:
        groups.setdefault((r.severity or "low").lower(), []).append(r)
    return groups


def next_steps(result: AnalysisResult, translator: Translator) -> List[str]:
    t = translator.t
    steps: List[str] = []
    for r in result.risks:
        if (r.severity or "").lower() == "high":
            steps.append(t("next_step_fix_risk", clause=r.clause or r.issue))
    for issue in result.jurisdiction_issues or []:
        steps.append(t("next_step_jurisdiction", recommendation=issue.recommendation or issue.issue))
    if not steps:
        steps.append(t("next_step_no_blockers"))
    steps.append(t("next_step_consult_lawyer"))
    return steps
