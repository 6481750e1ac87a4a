from __future__ import annotations
from typing import Optional, Union

from navigator.models import AnalysisResult, ComparisonResult

TABS = ("upload", "compare", "results", "comparison-results", "history")

Result = Union[AnalysisResult, ComparisonResult]


class ResultStore:
    """Page-session holder for the single result on screen.

    Holds one analysis or one comparison, never both. Nothing is persisted.
    """

    def __init__(self):
        self._current: Optional[Result] = None
        self.active_tab = "upload"

    @property
    def current(self) -> Optional[Result]:
        return self._current

    @property
    def kind(self) -> Optional[str]:
        if isinstance(self._current, AnalysisResult):
            return "analysis"
        if isinstance(self._current, ComparisonResult):
            return "comparison"
        return None

    @property
    def analysis(self) -> Optional[AnalysisResult]:
        return self._current if isinstance(self._current, AnalysisResult) else None

    @property
    def comparison(self) -> Optional[ComparisonResult]:
        return self._current if isinstance(self._current, ComparisonResult) else None

    def set_analysis(self, result: AnalysisResult) -> None:
        self._current = result

    def set_comparison(self, result: ComparisonResult) -> None:
        self._current = result

    def clear(self) -> None:
        self._current = None

    def show(self, tab: str) -> None:
        if tab not in TABS:
            raise ValueError(f"unknown tab: {tab}")
        self.active_tab = tab
