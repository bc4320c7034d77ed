import pytest
import requests

from crashreport.config import Settings
from crashreport.errors import SubmissionError
from crashreport.utils import send_issue


class FakeResponse:
    def __init__(self, status_code=200, data=None, invalid_json=False):
        self.status_code = status_code
        self._data = data
        self._invalid_json = invalid_json

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Client Error")

    def json(self):
        if self._invalid_json:
            raise ValueError("not json")
        return self._data


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.requests = []

    def post(self, url, **kwargs):
        self.requests.append((url, kwargs))
        if self.error is not None:
            raise self.error
        return self.response


def _settings(**kwargs):
    values = {"github_token": "ghp_test", "gemini_api_key": "gm_test", "repo_owner": "acme", "repo_name": "bugs"}
    values.update(kwargs)
    return Settings(**values)


def test_summary_skipped_without_key():
    session = FakeSession()
    assert send_issue.generate_summary("report", _settings(gemini_api_key=None), session) == send_issue.SUMMARY_SKIPPED
    assert send_issue.generate_summary("report", _settings(gemini_api_key="your_gemini_api_key_here"), session) \
        == send_issue.SUMMARY_SKIPPED
    assert session.requests == []


def test_summary_success():
    data = {"candidates": [{"content": {"parts": [{"text": "Disk "}, {"text": "is failing."}]}}]}
    session = FakeSession(FakeResponse(data=data))
    assert send_issue.generate_summary("the report", _settings(), session) == "Disk is failing."

    url, kwargs = session.requests[0]
    assert url.endswith("/gemini-pro:generateContent")
    assert kwargs["params"] == {"key": "gm_test"}
    assert kwargs["json"] == {"contents": [{"parts": [{"text": "the report"}]}]}


def test_summary_legacy_text_field():
    data = {"candidates": [{"content": {"text": "legacy"}}]}
    assert send_issue.generate_summary("r", _settings(), FakeSession(FakeResponse(data=data))) == "legacy"


def test_summary_request_failure():
    session = FakeSession(error=requests.ConnectionError("offline"))
    assert send_issue.generate_summary("r", _settings(), session) == send_issue.SUMMARY_FAILED


def test_summary_http_error():
    session = FakeSession(FakeResponse(status_code=403))
    assert send_issue.generate_summary("r", _settings(), session) == send_issue.SUMMARY_FAILED


@pytest.mark.parametrize("response", [
    FakeResponse(data={"candidates": []}),
    FakeResponse(data={"error": "quota"}),
    FakeResponse(invalid_json=True),
])
def test_summary_unparseable(response):
    assert send_issue.generate_summary("r", _settings(), FakeSession(response)) == send_issue.SUMMARY_UNPARSEABLE


def test_create_issue_success():
    session = FakeSession(FakeResponse(status_code=201, data={"html_url": "https://github.com/acme/bugs/issues/7"}))
    url = send_issue.create_github_issue("title", "body", _settings(), session)
    assert url == "https://github.com/acme/bugs/issues/7"

    request_url, kwargs = session.requests[0]
    assert request_url == "https://api.github.com/repos/acme/bugs/issues"
    assert kwargs["headers"]["Authorization"] == "token ghp_test"
    assert kwargs["headers"]["User-Agent"] == "AcreetionOS-Crash-Reporter"
    assert kwargs["json"] == {"title": "title", "body": "body"}


def test_create_issue_without_token():
    session = FakeSession()
    with pytest.raises(SubmissionError):
        send_issue.create_github_issue("t", "b", _settings(github_token=None), session)
    assert session.requests == []


def test_create_issue_body_over_limit():
    with pytest.raises(SubmissionError):
        send_issue.create_github_issue("t", "x" * 11, _settings(body_limit=10), FakeSession())


def test_create_issue_body_limit_counts_bytes():
    session = FakeSession()
    with pytest.raises(SubmissionError):
        send_issue.create_github_issue("t", "●" * 4, _settings(body_limit=10), session)
    assert session.requests == []


@pytest.mark.parametrize("session", [
    FakeSession(FakeResponse(status_code=401, data={"message": "Bad credentials"})),
    FakeSession(error=requests.Timeout("slow")),
    FakeSession(FakeResponse(status_code=201, data={"id": 1})),
])
def test_create_issue_failures(session):
    with pytest.raises(SubmissionError):
        send_issue.create_github_issue("t", "b", _settings(), session)
