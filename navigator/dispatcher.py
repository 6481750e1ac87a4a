from __future__ import annotations
import logging
import threading
from collections import deque
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Callable, Deque, Optional

from pydantic import ValidationError

from navigator.api import ANALYSES_PATH, ApiClient
from navigator.cache import QueryCache
from navigator.errors import ApiError, InputError, is_size_limit_message
from navigator.i18n import Translator
from navigator.intake import ContractDraft, fallback_title
from navigator.models import AnalysisResult, ComparisonResult, SavedAnalysis
from navigator.notify import Notifier
from navigator.results import ResultStore

logger = logging.getLogger(__name__)

TRANSITION_HISTORY = 32  # recent status changes kept for inspection


class RequestStatus(str, Enum):
    IDLE = "idle"
    PENDING = "pending"
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class DispatchOutcome:
    status: RequestStatus
    result: Any = None
    error: Optional[Exception] = None
    ticket: int = 0
    stale: bool = False

    @property
    def ok(self) -> bool:
        return self.status is RequestStatus.SUCCESS and not self.stale


@dataclass
class _Job:
    kind: str  # text | file | compare
    call: Callable[[], Any]
    parse: Callable[[Any], Any]
    tab: str
    saves: bool = False
    context: dict = field(default_factory=dict)


# kind -> (success title, success description, failure title, failure fallback)
_MESSAGES = {
    "text": ("analysis_complete", "analysis_complete_desc", "analysis_failed", "analysis_failed_desc"),
    "file": ("file_analysis_complete", "file_analysis_complete_desc", "file_analysis_failed", "file_analysis_failed_desc"),
    "compare": ("comparison_complete", "comparison_complete_desc", "comparison_failed", "comparison_failed_desc"),
}


class AnalysisDispatcher:
    """Sends analysis/comparison requests and feeds the result store.

    Every dispatch clears the store and takes a new ticket; a response whose
    ticket is no longer the latest is dropped.
    """

    def __init__(
        self,
        client: ApiClient,
        store: ResultStore,
        notifier: Notifier,
        cache: Optional[QueryCache] = None,
        translator: Optional[Translator] = None,
        max_workers: int = 2,
    ):
        self.client = client
        self.store = store
        self.notifier = notifier
        self.cache = cache
        self.t = (translator or Translator.english()).t
        self.status = RequestStatus.IDLE
        self.transitions: Deque[RequestStatus] = deque([RequestStatus.IDLE], maxlen=TRANSITION_HISTORY)
        self.last_context: dict = {}
        self._seq = 0
        self._lock = threading.Lock()
        self._max_workers = max_workers
        self._executor: Optional[ThreadPoolExecutor] = None

    # ---- public API -----------------------------------------------------
    def analyze_text(self, draft: ContractDraft, today: Optional[date] = None) -> DispatchOutcome:
        return self._dispatch(lambda: self._text_job(draft, today))

    def analyze_file(self, draft: ContractDraft, today: Optional[date] = None) -> DispatchOutcome:
        return self._dispatch(lambda: self._file_job(draft, today))

    def compare(self, draft: ContractDraft) -> DispatchOutcome:
        return self._dispatch(lambda: self._compare_job(draft))

    def submit(self, kind: str, draft: ContractDraft, today: Optional[date] = None) -> Future:
        """Run a dispatch on the worker pool. Validation happens before returning."""
        job = self._prepare(kind, draft, today)
        if job is None:
            done: Future = Future()
            done.set_result(DispatchOutcome(self.status))
            return done
        ticket = self._begin()
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=self._max_workers)
        return self._executor.submit(self._run, ticket, job)

    @property
    def latest_ticket(self) -> int:
        return self._seq

    @property
    def is_pending(self) -> bool:
        return self.status is RequestStatus.PENDING

    def save_result(self, title: Optional[str] = None, today: Optional[date] = None) -> Optional[SavedAnalysis]:
        """Persist the analysis currently on screen (POST /api/contract-analyses)."""
        analysis = self.store.analysis
        if analysis is None:
            err = InputError(self.t("nothing_to_save"), self.t("nothing_to_save_desc"))
            self.notifier.notify(err.title, err.description, "destructive")
            raise err
        ctx = self.last_context
        payload = {
            "title": (title or "").strip() or ctx.get("title") or fallback_title(today),
            "analysisResults": analysis.to_wire(),
            "jurisdiction": ctx.get("jurisdiction", "Canada"),
            "contractType": ctx.get("contractType", "general"),
        }
        if ctx.get("fileName"):
            payload["fileName"] = ctx["fileName"]
        try:
            resp = self.client.save_analysis(payload)
        except ApiError as e:
            self.notifier.notify(self.t("save_failed"), e.message or self.t("save_failed_desc"), "destructive")
            raise
        self._invalidate_history()
        self.notifier.notify(self.t("analysis_saved"), self.t("analysis_saved_desc", title=payload["title"]))
        if isinstance(resp, dict) and "id" in resp:
            return SavedAnalysis.model_validate(resp)
        return None

    def shutdown(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    # ---- jobs -----------------------------------------------------------
    def _prepare(self, kind: str, draft: ContractDraft, today: Optional[date]) -> Optional[_Job]:
        builders = {
            "text": lambda: self._text_job(draft, today),
            "file": lambda: self._file_job(draft, today),
            "compare": lambda: self._compare_job(draft),
        }
        if kind not in builders:
            raise ValueError(f"unknown dispatch kind: {kind}")
        try:
            return builders[kind]()
        except InputError as e:
            self.notifier.notify(e.title, e.description, "destructive")
            return None

    def _text_job(self, draft: ContractDraft, today: Optional[date]) -> _Job:
        payload = draft.text_request(today)
        ctx = {
            "title": payload["title"],
            "jurisdiction": payload["jurisdiction"],
            "contractType": payload["contractType"],
        }
        return _Job(
            kind="text",
            call=lambda: self.client.analyze_contract(payload),
            parse=AnalysisResult.model_validate,
            tab="results",
            saves=bool(payload["save"]),
            context=ctx,
        )

    def _file_job(self, draft: ContractDraft, today: Optional[date]) -> _Job:
        fields, upload = draft.file_request(today)
        ctx = {
            "title": fields["title"],
            "jurisdiction": fields["jurisdiction"],
            "contractType": fields["contractType"],
            "fileName": upload[0],
        }
        return _Job(
            kind="file",
            call=lambda: self.client.analyze_contract_file(fields, upload),
            parse=AnalysisResult.model_validate,
            tab="results",
            saves=fields["save"] == "true",
            context=ctx,
        )

    def _compare_job(self, draft: ContractDraft) -> _Job:
        first, second = draft.comparison_request()
        return _Job(
            kind="compare",
            call=lambda: self.client.compare_contracts(first, second),
            parse=ComparisonResult.model_validate,
            tab="comparison-results",
        )

    # ---- state machine --------------------------------------------------
    def _set_status(self, status: RequestStatus) -> None:
        self.status = status
        self.transitions.append(status)

    def _begin(self) -> int:
        with self._lock:
            self._seq += 1
            ticket = self._seq
            self.store.clear()
            self._set_status(RequestStatus.PENDING)
        return ticket

    def _dispatch(self, build: Callable[[], _Job]) -> DispatchOutcome:
        try:
            job = build()
        except InputError as e:
            self.notifier.notify(e.title, e.description, "destructive")
            return DispatchOutcome(self.status, error=e)
        return self._run(self._begin(), job)

    def _run(self, ticket: int, job: _Job) -> DispatchOutcome:
        ok_title, ok_desc, fail_title, fail_desc = _MESSAGES[job.kind]
        try:
            result = job.parse(job.call())
        except ValidationError as e:
            return self._fail(ticket, ApiError(200, self.t("malformed_response")), fail_title, fail_desc, cause=e)
        except ApiError as e:
            return self._fail(ticket, e, fail_title, fail_desc)
        except Exception as e:
            logger.exception("unexpected failure during %s dispatch", job.kind)
            return self._fail(ticket, e, fail_title, fail_desc)

        with self._lock:
            if ticket != self._seq:
                logger.info("dropping stale %s response (ticket %d, latest %d)", job.kind, ticket, self._seq)
                return DispatchOutcome(RequestStatus.SUCCESS, result=result, ticket=ticket, stale=True)
            if isinstance(result, ComparisonResult):
                self.store.set_comparison(result)
            else:
                self.store.set_analysis(result)
            self.store.show(job.tab)
            self.last_context = job.context
            self._set_status(RequestStatus.SUCCESS)

        if job.saves:
            self._invalidate_history()
        self.notifier.notify(self.t(ok_title), self.t(ok_desc))
        return DispatchOutcome(RequestStatus.SUCCESS, result=result, ticket=ticket)

    def _fail(
        self,
        ticket: int,
        error: Exception,
        title_key: str,
        fallback_key: str,
        cause: Optional[Exception] = None,
    ) -> DispatchOutcome:
        with self._lock:
            if ticket != self._seq:
                logger.info("dropping stale failure (ticket %d, latest %d): %s", ticket, self._seq, error)
                return DispatchOutcome(RequestStatus.ERROR, error=error, ticket=ticket, stale=True)
            self._set_status(RequestStatus.ERROR)

        message = getattr(error, "message", None) or str(error) or self.t(fallback_key)
        if cause is not None:
            logger.warning("malformed response: %s", cause)
        self.notifier.notify(self.t(title_key), message, "destructive")
        if is_size_limit_message(message):
            self.notifier.notify(self.t("size_limit_title"), self.t("size_limit_guidance"))
        return DispatchOutcome(RequestStatus.ERROR, error=error, ticket=ticket)

    def _invalidate_history(self) -> None:
        if self.cache is not None:
            self.cache.invalidate((ANALYSES_PATH,))
