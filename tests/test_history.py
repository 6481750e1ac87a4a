import pytest

from navigator.api import ANALYSES_PATH
from navigator.errors import ApiError
from navigator.history import filter_analyses, sort_analyses
from navigator.models import SavedAnalysis

from conftest import FakeResponse, analysis_body


def saved(id, title, risk="low", created="2026-01-01T10:00:00", **kw):
    return SavedAnalysis.model_validate(
        {"id": id, "title": title, "riskLevel": risk, "createdAt": created, **kw}
    )


def titles(items):
    return [a.title for a in items]


def test_filter_by_title_case_insensitive():
    items = [saved(1, "NDA Draft"), saved(2, "Lease Agreement")]
    assert titles(filter_analyses(items, "nda")) == ["NDA Draft"]


def test_filter_matches_type_and_jurisdiction():
    items = [
        saved(1, "A", contractType="employment"),
        saved(2, "B", jurisdiction="Quebec"),
    ]
    assert titles(filter_analyses(items, "EMPLOY")) == ["A"]
    assert titles(filter_analyses(items, "queb")) == ["B"]
    assert titles(filter_analyses(items, "  ")) == ["A", "B"]


def test_sort_by_risk():
    items = [saved(1, "a", "low"), saved(2, "b", "high"), saved(3, "c", "medium")]
    assert [a.effective_risk_level for a in sort_analyses(items, "risk")] == ["high", "medium", "low"]


def test_risk_ties_newest_first():
    items = [
        saved(1, "older", "high", "2026-01-01T00:00:00"),
        saved(2, "newer", "high", "2026-02-01T00:00:00"),
    ]
    assert titles(sort_analyses(items, "risk")) == ["newer", "older"]


def test_risk_level_from_nested_result():
    a = SavedAnalysis.model_validate({"id": 1, "analysisResults": {"riskLevel": "Medium"}})
    assert a.effective_risk_level == "medium"


def test_sort_by_date_and_title():
    items = [
        saved(1, "beta", created="2026-01-02T00:00:00"),
        saved(2, "Alpha", created="2026-01-03T00:00:00"),
        saved(3, "gamma", created=None),
    ]
    assert titles(sort_analyses(items, "newest")) == ["Alpha", "beta", "gamma"]
    assert titles(sort_analyses(items, "oldest")) == ["gamma", "beta", "Alpha"]
    assert titles(sort_analyses(items, "title")) == ["Alpha", "beta", "gamma"]
    with pytest.raises(ValueError):
        sort_analyses(items, "size")


def test_list_is_cached(history, session):
    session.add("GET", ANALYSES_PATH, FakeResponse(200, [{"id": 1, "title": "One"}]))
    history.analyses()
    history.analyses()
    assert len(session.calls_to("GET", ANALYSES_PATH)) == 1


def test_select_loads_into_result_store(history, session, store):
    session.add("GET", f"{ANALYSES_PATH}/4", FakeResponse(200, {"id": 4, "title": "Lease", "analysisResults": analysis_body()}))
    out = history.select(4)
    assert out.title == "Lease"
    assert history.selected_id == 4
    assert store.analysis.summary == "A short services agreement."
    assert store.active_tab == "results"


def test_delete_removes_and_clears_selection(history, session, notes):
    session.add("GET", ANALYSES_PATH, FakeResponse(200, [{"id": 1, "title": "One"}, {"id": 2, "title": "Two"}]))
    session.add("GET", ANALYSES_PATH, FakeResponse(200, [{"id": 2, "title": "Two"}]))
    session.add("GET", f"{ANALYSES_PATH}/1", FakeResponse(200, {"id": 1, "title": "One"}))
    session.add("DELETE", f"{ANALYSES_PATH}/1", FakeResponse(204, text="", content_type=None))

    assert titles(history.analyses()) == ["One", "Two"]
    history.select(1)
    history.delete("1")

    assert history.selected_id is None
    assert titles(history.analyses()) == ["Two"]
    assert notes.latest.title == "Analysis deleted"


def test_delete_other_keeps_selection(history, session):
    session.add("GET", f"{ANALYSES_PATH}/1", FakeResponse(200, {"id": 1, "title": "One"}))
    session.add("DELETE", f"{ANALYSES_PATH}/2", FakeResponse(204, text="", content_type=None))
    history.select(1)
    history.delete(2)
    assert history.selected_id == 1


def test_load_failure_notifies_and_raises(history, session, notes):
    session.add("GET", ANALYSES_PATH, FakeResponse(500, {"message": "db down"}))
    with pytest.raises(ApiError):
        history.analyses()
    assert notes.latest.title == "Could not load history"
    assert notes.latest.description == "db down"


def test_rows_with_null_columns_still_list(history, session):
    session.add("GET", ANALYSES_PATH, FakeResponse(200, [
        {"id": 1, "contractTitle": "NDA Draft", "riskLevel": "high", "jurisdiction": None, "contractType": None},
        {"id": 2, "contractTitle": "Lease Agreement", "riskLevel": None, "createdAt": None},
    ]))
    rows = history.visible("draft", "risk")
    assert titles(rows) == ["NDA Draft"]
    assert (rows[0].jurisdiction, rows[0].contract_type) == ("Canada", "general")
    assert titles(history.visible("", "risk")) == ["NDA Draft", "Lease Agreement"]


def test_unreadable_row_becomes_api_error(history, session, notes):
    session.add("GET", ANALYSES_PATH, FakeResponse(200, [{"title": "no id"}]))
    with pytest.raises(ApiError):
        history.analyses()
    assert notes.latest.title == "Could not load history"
    assert notes.latest.is_error
