from __future__ import annotations
import logging
from datetime import datetime
from typing import Any, Iterable, List, Optional, Union

from pydantic import ValidationError

from navigator.api import ANALYSES_PATH, ApiClient
from navigator.cache import QueryCache
from navigator.errors import ApiError
from navigator.i18n import Translator
from navigator.models import SavedAnalysis
from navigator.notify import Notifier
from navigator.results import ResultStore

logger = logging.getLogger(__name__)

RISK_RANK = {"high": 3, "medium": 2, "low": 1}
SORT_MODES = ("newest", "oldest", "title", "risk")

AnalysisId = Union[int, str]


def filter_analyses(items: Iterable[SavedAnalysis], query: str) -> List[SavedAnalysis]:
    q = (query or "").strip().lower()
    if not q:
        return list(items)
    return [
        a for a in items
        if q in (a.title or "").lower()
        or q in (a.contract_type or "").lower()
        or q in (a.jurisdiction or "").lower()
    ]


def _created(a: SavedAnalysis) -> float:
    return a.created_at.timestamp() if a.created_at else float("-inf")


def sort_analyses(items: Iterable[SavedAnalysis], mode: str = "newest") -> List[SavedAnalysis]:
    items = list(items)
    if mode == "newest":
        return sorted(items, key=_created, reverse=True)
    if mode == "oldest":
        return sorted(items, key=_created)
    if mode == "title":
        return sorted(items, key=lambda a: (a.title or "").casefold())
    if mode == "risk":
        # ties keep newest first
        by_date = sorted(items, key=_created, reverse=True)
        return sorted(by_date, key=lambda a: RISK_RANK.get(a.effective_risk_level, 0), reverse=True)
    raise ValueError(f"unknown sort mode: {mode}")


class HistoryBrowser:
    """Saved analyses for the current user, read through the query cache."""

    def __init__(
        self,
        client: ApiClient,
        store: ResultStore,
        cache: QueryCache,
        notifier: Notifier,
        translator: Optional[Translator] = None,
    ):
        self.client = client
        self.store = store
        self.cache = cache
        self.notifier = notifier
        self.t = (translator or Translator.english()).t
        self.selected_id: Optional[AnalysisId] = None

    def analyses(self) -> List[SavedAnalysis]:
        try:
            raw = self.cache.fetch((ANALYSES_PATH,), self.client.list_analyses)
        except ApiError as e:
            self.notifier.notify(self.t("history_failed"), e.message, "destructive")
            raise
        return self._parse(raw, many=True, title_key="history_failed")

    def visible(self, query: str = "", sort: str = "newest") -> List[SavedAnalysis]:
        return sort_analyses(filter_analyses(self.analyses(), query), sort)

    def select(self, analysis_id: AnalysisId) -> SavedAnalysis:
        try:
            raw = self.cache.fetch((ANALYSES_PATH, analysis_id), lambda: self.client.get_analysis(analysis_id))
        except ApiError as e:
            self.notifier.notify(self.t("history_load_failed"), e.message, "destructive")
            raise
        saved = self._parse(raw, many=False, title_key="history_load_failed")
        self.selected_id = analysis_id
        self.store.set_analysis(saved.analysis_results)
        self.store.show("results")
        return saved

    def delete(self, analysis_id: AnalysisId) -> None:
        try:
            self.client.delete_analysis(analysis_id)
        except ApiError as e:
            self.notifier.notify(self.t("delete_failed"), e.message, "destructive")
            raise
        self.cache.invalidate((ANALYSES_PATH,))
        logger.debug("deleted saved analysis %s", analysis_id)
        if self.selected_id is not None and str(self.selected_id) == str(analysis_id):
            self.selected_id = None
        self.notifier.notify(self.t("analysis_deleted"))

    def _parse(self, raw: Any, many: bool, title_key: str) -> Any:
        try:
            if many:
                return [SavedAnalysis.model_validate(r) for r in raw]
            return SavedAnalysis.model_validate(raw)
        except ValidationError as e:
            logger.warning("unreadable saved analysis: %s", e)
            err = ApiError(200, self.t("malformed_response"), raw)
            self.notifier.notify(self.t(title_key), err.message, "destructive")
            raise err from e

    def refresh(self) -> None:
        self.cache.invalidate((ANALYSES_PATH,))

    @staticmethod
    def format_created(a: SavedAnalysis) -> str:
        if not a.created_at:
            return ""
        return datetime.strftime(a.created_at, "%Y-%m-%d %H:%M")
