import json
from datetime import date

import pytest
import requests

from navigator.api import ApiClient
from navigator.cache import QueryCache
from navigator.config import AppConfig
from navigator.dispatcher import AnalysisDispatcher
from navigator.history import HistoryBrowser
from navigator.i18n import Translator
from navigator.notify import NotificationLog
from navigator.results import ResultStore

BASE = "http://api.test"
TODAY = date(2026, 3, 7)


class FakeResponse:
    def __init__(self, status_code=200, body=None, text=None, reason="OK", content_type="application/json"):
        self.status_code = status_code
        self.reason = reason
        if text is None:
            text = "" if body is None else json.dumps(body)
        self.text = text
        self.headers = {"content-type": content_type} if content_type else {}

    @property
    def ok(self):
        return 200 <= self.status_code < 400

    def json(self):
        return json.loads(self.text)


class FakeSession:
    """Routes (METHOD, path) to canned responses and records every call."""

    def __init__(self):
        self.routes = {}
        self.calls = []

    def add(self, method, path, response):
        self.routes.setdefault((method, path), []).append(response)

    def request(self, method, url, json=None, data=None, files=None, timeout=None):
        path = url[len(BASE):] if url.startswith(BASE) else url
        self.calls.append({"method": method, "path": path, "json": json, "data": data, "files": files, "timeout": timeout})
        queue = self.routes.get((method, path))
        if not queue:
            raise requests.ConnectionError(f"no route for {method} {path}")
        resp = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(resp, Exception):
            raise resp
        if callable(resp):
            return resp()
        return resp

    def calls_to(self, method, path):
        return [c for c in self.calls if c["method"] == method and c["path"] == path]


def analysis_body(**overrides):
    body = {
        "score": 72,
        "riskLevel": "high",
        "risks": [
            {"clause": "Termination", "issue": "No notice period", "suggestion": "Add 30 days notice", "severity": "high"},
            {"clause": "Payment", "issue": "Late fee unclear", "suggestion": "Specify the rate", "severity": "medium"},
        ],
        "suggestions": [{"clause": "Payment", "suggestion": "Net 30", "reason": "Industry standard"}],
        "summary": "A short services agreement.",
    }
    body.update(overrides)
    return body


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def client(session):
    return ApiClient(AppConfig(api_base=BASE, request_timeout=5), session=session)


@pytest.fixture
def notes():
    return NotificationLog()


@pytest.fixture
def store():
    return ResultStore()


@pytest.fixture
def cache():
    return QueryCache(ttl=300)


@pytest.fixture
def translator():
    return Translator.english()


@pytest.fixture
def dispatcher(client, store, notes, cache, translator):
    d = AnalysisDispatcher(client, store, notes, cache=cache, translator=translator)
    yield d
    d.shutdown()


@pytest.fixture
def history(client, store, cache, notes, translator):
    return HistoryBrowser(client, store, cache, notes, translator=translator)
