import json

import pytest
import requests

from lingodeck.core.exceptions import UpstreamServiceError
from lingodeck.services import answer_service
from lingodeck.services.answer_service import AnswerChecker, GeminiAnswerEvaluator

from conftest import make_item


class FakeResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload or {}

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} error", response=self)

    def json(self):
        return self._payload


def _gemini_payload(text):
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def evaluator(sleeps):
    return GeminiAnswerEvaluator(
        api_key="test-key",
        model_name="gemini-test",
        max_retries=3,
        base_delay_ms=1000,
        sleep=sleeps.append,
    )


def test_evaluate_parses_json_answer(monkeypatch, evaluator):
    calls = []

    def fake_post(url, json=None, headers=None, timeout=None):
        calls.append((url, json))
        return FakeResponse(payload=_gemini_payload('{"correct": true, "feedback": "Synonym"}'))

    monkeypatch.setattr(answer_service.requests, "post", fake_post)

    assert evaluator.evaluate("hi", "hello", "arabic") == (True, "Synonym")
    url, payload = calls[0]
    assert "gemini-test:generateContent?key=test-key" in url
    assert '"hello"' in payload["contents"][0]["parts"][0]["text"]


def test_evaluate_strips_code_fences(monkeypatch, evaluator):
    text = "```json\n" + json.dumps({"correct": False, "feedback": "Different word"}) + "\n```"
    monkeypatch.setattr(answer_service.requests, "post", lambda *a, **k: FakeResponse(payload=_gemini_payload(text)))
    assert evaluator.evaluate("dog", "cat", "arabic") == (False, "Different word")


def test_evaluate_retries_with_backoff(monkeypatch, evaluator, sleeps):
    responses = [
        FakeResponse(status_code=503),
        FakeResponse(payload=_gemini_payload("not json")),
        FakeResponse(payload=_gemini_payload('{"correct": true}')),
    ]
    monkeypatch.setattr(answer_service.requests, "post", lambda *a, **k: responses.pop(0))

    assert evaluator.evaluate("hi", "hello", "arabic") == (True, None)
    assert sleeps == [1.0, 2.0]


def test_evaluate_gives_up_after_max_retries(monkeypatch, evaluator, sleeps):
    def fake_post(*args, **kwargs):
        raise requests.exceptions.ConnectionError("offline")

    monkeypatch.setattr(answer_service.requests, "post", fake_post)

    with pytest.raises(UpstreamServiceError):
        evaluator.evaluate("hi", "hello", "arabic")
    assert sleeps == [1.0, 2.0]


def test_evaluate_does_not_retry_auth_failure(monkeypatch, evaluator, sleeps):
    calls = []

    def fake_post(*args, **kwargs):
        calls.append(1)
        return FakeResponse(status_code=401)

    monkeypatch.setattr(answer_service.requests, "post", fake_post)

    with pytest.raises(UpstreamServiceError):
        evaluator.evaluate("hi", "hello", "arabic")
    assert len(calls) == 1
    assert sleeps == []


def test_evaluate_requires_api_key():
    with pytest.raises(UpstreamServiceError):
        GeminiAnswerEvaluator(api_key="").evaluate("hi", "hello", "arabic")


def test_checker_without_evaluator():
    checker = AnswerChecker()
    item = make_item("1", "مرحبا", "hello")
    assert checker.check(item, "Hello").correct
    result = checker.check(item, "goodbye")
    assert not result.correct
    assert result.correct_answer == "hello"
    assert result.feedback is None


def test_checker_falls_back_when_evaluator_fails(monkeypatch, evaluator):
    monkeypatch.setattr(answer_service.requests, "post", lambda *a, **k: FakeResponse(status_code=500))
    result = AnswerChecker(evaluator).check(make_item("1", "مرحبا", "hello"), "hi")
    assert not result.correct
    assert result.feedback == "Unable to verify answer."


@pytest.mark.parametrize("payload", [
    ["not", "an", "object"],
    {"candidates": ["text"]},
    {"candidates": [{"content": "text"}]},
    {"candidates": [{"content": {"parts": [None]}}]},
    {"candidates": [{"content": {"parts": [{"text": 42}]}}]},
])
def test_checker_survives_unexpected_response_shapes(monkeypatch, evaluator, sleeps, payload):
    monkeypatch.setattr(answer_service.requests, "post", lambda *a, **k: FakeResponse(payload=payload))
    result = AnswerChecker(evaluator).check(make_item("1", "مرحبا", "hello"), "hi")
    assert not result.correct
    assert result.feedback == "Unable to verify answer."
    assert len(sleeps) == 2
