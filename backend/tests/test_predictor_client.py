r"""backend/tests/test_predictor_client.py"""

from __future__ import annotations

import pytest
import requests

from backend.app.core.errors import ConfigurationError
from backend.app.services import predictor_client
from backend.app.services.predictor_client import GradioPredictorClient, HttpPredictorClient


class _FakeResponse:
    def __init__(self, status_code: int, payload=None, text_only: bool = False) -> None:
        self.status_code = status_code
        self._payload = payload
        self._text_only = text_only

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self):
        if self._text_only:
            raise ValueError("not json")
        return self._payload


class _FakeSession:
    def __init__(self, response=None, exc: Exception | None = None) -> None:
        self.response = response
        self.exc = exc
        self.calls = []

    def post(self, url, json=None, headers=None, timeout=None):
        self.calls.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        if self.exc is not None:
            raise self.exc
        return self.response


def test_http_client_success() -> None:
    session = _FakeSession(_FakeResponse(200, {"success": True, "data": ["📊 5 units, Low risk, Base"]}))
    client = HttpPredictorClient("http://predictor:8000/", timeout=5, session=session)

    result = client.predict("P001", 12)

    assert result.ok is True
    assert result.data == ["📊 5 units, Low risk, Base"]
    assert session.calls[0]["url"] == "http://predictor:8000/api/v1/predict"
    assert session.calls[0]["json"] == {"productId": "P001", "currentStock": 12}
    assert session.calls[0]["timeout"] == 5


def test_http_client_uses_server_error_message() -> None:
    session = _FakeSession(_FakeResponse(500, {"error": "Prediction failed: model offline"}))
    result = HttpPredictorClient("http://predictor", session=session).predict("P001", 1)

    assert result.ok is False
    assert result.error == "Prediction failed: model offline"
    assert result.status_code == 500


def test_http_client_falls_back_to_status_message() -> None:
    session = _FakeSession(_FakeResponse(503, text_only=True))
    result = HttpPredictorClient("http://predictor", session=session).predict("P001", 1)

    assert result.ok is False
    assert result.error == "HTTP 503"


def test_http_client_transport_failures_are_results() -> None:
    timeout = HttpPredictorClient("http://p", timeout=2, session=_FakeSession(exc=requests.Timeout())).predict("P001", 1)
    refused = HttpPredictorClient(
        "http://p", session=_FakeSession(exc=requests.ConnectionError("connection refused"))
    ).predict("P001", 1)

    assert timeout.ok is False and "timed out" in timeout.error
    assert refused.ok is False and refused.error == "connection refused"


def test_http_client_rejects_bad_inputs_without_calling() -> None:
    session = _FakeSession(_FakeResponse(200, {"data": []}))
    client = HttpPredictorClient("http://p", session=session)

    assert client.predict("", 1).ok is False
    assert client.predict("P001", -1).ok is False
    assert session.calls == []


def test_http_client_requires_base_url() -> None:
    with pytest.raises(ConfigurationError, match="environment variable"):
        HttpPredictorClient(None).predict("P001", 1)


def test_gradio_client_requires_links() -> None:
    with pytest.raises(ConfigurationError, match="GRADIO_LINK"):
        GradioPredictorClient(None, "https://files/train.csv").predict("P001", 1)
    with pytest.raises(ConfigurationError, match="TRAINING_LINK"):
        GradioPredictorClient("owner/space", None).predict("P001", 1)


def test_gradio_client_submits_job(monkeypatch) -> None:
    submitted = {}

    class _Job:
        def result(self, timeout=None):
            submitted["timeout"] = timeout
            return ["📊 80 units, High risk, Festival"]

    class _Client:
        def __init__(self, src, verbose=True):
            submitted["src"] = src

        def submit(self, **kwargs):
            submitted.update(kwargs)
            return _Job()

    monkeypatch.setattr(predictor_client, "Client", _Client)
    monkeypatch.setattr(predictor_client, "handle_file", lambda link: f"file:{link}")

    client = GradioPredictorClient("owner/space", "https://files/train.csv", timeout=7)
    result = client.predict("P007", 33)

    assert result.ok is True
    assert result.data == ["📊 80 units, High risk, Festival"]
    assert submitted["src"] == "owner/space"
    assert submitted["file"] == "file:https://files/train.csv"
    assert submitted["product_id"] == "P007"
    assert submitted["current_stock"] == 33
    assert submitted["api_name"] == "/predict"
    assert submitted["timeout"] == 7


def test_gradio_client_wraps_failures(monkeypatch) -> None:
    class _Client:
        def __init__(self, src, verbose=True):
            raise RuntimeError("space is sleeping")

    monkeypatch.setattr(predictor_client, "Client", _Client)
    result = GradioPredictorClient("owner/space", "https://files/train.csv").predict("P001", 1)

    assert result.ok is False
    assert result.error == "space is sleeping"
