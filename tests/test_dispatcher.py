import threading

import pytest

from navigator.api import ANALYSES_PATH, ANALYZE_PATH, ANALYZE_UPLOAD_PATH, COMPARE_PATH
from navigator.dispatcher import TRANSITION_HISTORY, RequestStatus
from navigator.errors import InputError
from navigator.intake import ContractDraft
from navigator.models import AnalysisResult

from conftest import TODAY, FakeResponse, analysis_body

IDLE, PENDING, SUCCESS, ERROR = (
    RequestStatus.IDLE,
    RequestStatus.PENDING,
    RequestStatus.SUCCESS,
    RequestStatus.ERROR,
)


def test_success_goes_through_pending(dispatcher, session, store, notes):
    session.add("POST", ANALYZE_PATH, FakeResponse(200, analysis_body()))
    outcome = dispatcher.analyze_text(ContractDraft(text="Terms"), TODAY)
    assert outcome.ok
    assert list(dispatcher.transitions) == [IDLE, PENDING, SUCCESS]
    assert store.analysis.risk_level == "high"
    assert store.active_tab == "results"
    assert notes.latest.title == "Analysis complete"


def test_failure_goes_through_pending(dispatcher, session, notes):
    session.add("POST", ANALYZE_PATH, FakeResponse(502, {"error": "upstream down"}))
    outcome = dispatcher.analyze_text(ContractDraft(text="Terms"), TODAY)
    assert outcome.status is ERROR
    assert list(dispatcher.transitions) == [IDLE, PENDING, ERROR]
    assert notes.latest.is_error
    assert notes.latest.description == "upstream down"


def test_invalid_input_sends_nothing(dispatcher, session, notes):
    outcome = dispatcher.analyze_text(ContractDraft(text=""), TODAY)
    assert isinstance(outcome.error, InputError)
    assert list(dispatcher.transitions) == [IDLE]
    assert session.calls == []
    assert notes.latest.title == "Empty contract"


def test_save_flag_issues_one_request_with_fallback_title(dispatcher, session, cache):
    cache.set((ANALYSES_PATH,), [{"id": 1}])
    session.add("POST", ANALYZE_PATH, FakeResponse(200, analysis_body()))
    dispatcher.analyze_text(ContractDraft(text="Terms", save=True), TODAY)

    sent = session.calls_to("POST", ANALYZE_PATH)
    assert len(sent) == 1
    assert sent[0]["json"]["save"] is True
    assert sent[0]["json"]["title"] == "Contract Analysis 3/7/2026"
    assert session.calls_to("POST", ANALYSES_PATH) == []
    assert (ANALYSES_PATH,) not in cache


def test_unsaved_analysis_keeps_history_cache(dispatcher, session, cache):
    cache.set((ANALYSES_PATH,), [{"id": 1}])
    session.add("POST", ANALYZE_PATH, FakeResponse(200, analysis_body()))
    dispatcher.analyze_text(ContractDraft(text="Terms"), TODAY)
    assert (ANALYSES_PATH,) in cache


def test_submit_clears_previous_result(dispatcher, session, store):
    store.set_analysis(AnalysisResult(summary="old"))
    session.add("POST", ANALYZE_PATH, FakeResponse(500, {"message": "boom"}))
    dispatcher.analyze_text(ContractDraft(text="Terms"), TODAY)
    assert store.current is None


def test_size_limit_adds_guidance(dispatcher, session, notes):
    session.add("POST", ANALYZE_PATH, FakeResponse(413, {"message": "Request payload too large"}))
    dispatcher.analyze_text(ContractDraft(text="x" * 100), TODAY)
    titles = [n.title for n in notes.drain()]
    assert titles == ["Analysis failed", "Contract too large"]


def test_plain_failure_has_no_guidance(dispatcher, session, notes):
    session.add("POST", ANALYZE_PATH, FakeResponse(500, {"message": "database offline"}))
    dispatcher.analyze_text(ContractDraft(text="x"), TODAY)
    assert len(notes) == 1


def test_malformed_body_is_an_error(dispatcher, session, store, notes):
    session.add("POST", ANALYZE_PATH, FakeResponse(200, {"score": "not-a-number"}))
    outcome = dispatcher.analyze_text(ContractDraft(text="x"), TODAY)
    assert outcome.status is ERROR
    assert store.current is None
    assert "could not be read" in notes.latest.description


def test_file_analysis(dispatcher, session, store):
    session.add("POST", ANALYZE_UPLOAD_PATH, FakeResponse(200, analysis_body(riskLevel="low")))
    draft = ContractDraft(save=True)
    draft.attach_file("nda.pdf", b"%PDF")
    outcome = dispatcher.analyze_file(draft, TODAY)
    assert outcome.ok
    call = session.calls[0]
    assert call["data"]["title"] == "nda"
    assert call["data"]["save"] == "true"
    assert "contractFile" in call["files"]
    assert dispatcher.last_context["fileName"] == "nda.pdf"


def test_compare_fills_comparison_slot(dispatcher, session, store, notes):
    store.set_analysis(AnalysisResult())
    session.add(
        "POST",
        COMPARE_PATH,
        FakeResponse(200, {"summary": "B is stricter", "differences": [{"section": "Term", "first": "1y", "second": "2y"}], "recommendation": "Pick A"}),
    )
    outcome = dispatcher.compare(ContractDraft(text="A", second_text="B"))
    assert outcome.ok
    assert store.kind == "comparison"
    assert store.analysis is None
    assert store.comparison.differences[0].second == "2y"
    assert store.active_tab == "comparison-results"
    assert notes.latest.title == "Comparison complete"


def test_stale_response_is_dropped(dispatcher, session, store):
    started, release = threading.Event(), threading.Event()

    def slow():
        started.set()
        release.wait(5)
        return FakeResponse(200, analysis_body(summary="old"))

    session.add("POST", ANALYZE_PATH, slow)
    session.add("POST", ANALYZE_PATH, FakeResponse(200, analysis_body(summary="new")))

    first = dispatcher.submit("text", ContractDraft(text="first"), TODAY)
    assert started.wait(5)
    second = dispatcher.analyze_text(ContractDraft(text="second"), TODAY)
    release.set()
    old = first.result(timeout=5)

    assert second.ok
    assert old.stale and not old.ok
    assert store.analysis.summary == "new"
    assert dispatcher.status is SUCCESS


def test_submit_validates_before_queueing(dispatcher, session):
    fut = dispatcher.submit("compare", ContractDraft(text="only one"))
    assert fut.done()
    assert session.calls == []
    with pytest.raises(ValueError):
        dispatcher.submit("fax", ContractDraft(text="x"))


def test_save_result_posts_current_analysis(dispatcher, session, cache, notes):
    session.add("POST", ANALYZE_PATH, FakeResponse(200, analysis_body()))
    dispatcher.analyze_text(ContractDraft(text="Terms", title="Lease", jurisdiction="Ontario", contract_type="lease"), TODAY)
    cache.set((ANALYSES_PATH,), [])
    session.add("POST", ANALYSES_PATH, FakeResponse(201, {"id": 9, "contractTitle": "Lease", "riskLevel": "high"}))

    saved = dispatcher.save_result()

    body = session.calls_to("POST", ANALYSES_PATH)[0]["json"]
    assert body["title"] == "Lease"
    assert body["jurisdiction"] == "Ontario"
    assert body["contractType"] == "lease"
    assert body["analysisResults"]["riskLevel"] == "high"
    assert saved.id == 9 and saved.title == "Lease"
    assert (ANALYSES_PATH,) not in cache
    assert notes.latest.title == "Analysis saved"


def test_save_without_result_raises(dispatcher, session):
    with pytest.raises(InputError):
        dispatcher.save_result("anything")
    assert session.calls == []


def test_null_fields_in_result_are_tolerated(dispatcher, session, store):
    body = analysis_body(
        risks=[{"clause": None, "issue": "Auto-renewal", "suggestion": None, "severity": None}],
        suggestions=[{"clause": "Term", "suggestion": None, "reason": None}],
        jurisdictionIssues=None,
    )
    session.add("POST", ANALYZE_PATH, FakeResponse(200, body))
    outcome = dispatcher.analyze_text(ContractDraft(text="Terms"), TODAY)
    assert outcome.ok
    risk = store.analysis.risks[0]
    assert (risk.clause, risk.suggestion, risk.severity) == ("", "", "low")
    assert store.analysis.suggestions[0].reason == ""


def test_transition_log_is_bounded(dispatcher, session):
    session.add("POST", ANALYZE_PATH, FakeResponse(200, analysis_body()))
    for _ in range(TRANSITION_HISTORY):
        dispatcher.analyze_text(ContractDraft(text="Terms"), TODAY)
    assert len(dispatcher.transitions) == TRANSITION_HISTORY
    assert list(dispatcher.transitions)[-2:] == [RequestStatus.PENDING, RequestStatus.SUCCESS]
