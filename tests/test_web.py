from __future__ import annotations

import re

from fastapi.testclient import TestClient

from sentiment_api.sentiment_pipeline import SentimentAnalyzer
from sentiment_api.sentiment_types import SentenceSentiment
from sentiment_api.settings import SentimentSettings
from sentiment_api import web
from sentiment_api.web import create_app, format_percent

PERCENT_RE = re.compile(r"^\d+\.\d{2}%$")


class _KeywordPipeline:
    """Deterministic stand-in for the transformer model."""

    def annotate(self, text):
        if "boom" in text:
            raise RuntimeError("pipeline failure")
        if "love" in text:
            return [SentenceSentiment(3, (0.0, 0.05, 0.15, 0.6, 0.2))]
        if "hate" in text:
            return [SentenceSentiment(0, (0.7, 0.2, 0.1, 0.0, 0.0))]
        return [SentenceSentiment(2, (0.05, 0.1, 0.7, 0.1, 0.05))]


def _client() -> TestClient:
    app = create_app(settings=SentimentSettings(), analyzer=SentimentAnalyzer(_KeywordPipeline()))
    return TestClient(app)


def test_simple_endpoint_returns_label_and_text():
    resp = _client().get("/api/sentiment", params={"text": "I love this product"})

    assert resp.status_code == 200
    body = resp.json()
    assert body == {"sentiment": "positive", "text": "I love this product"}
    assert body["sentiment"] in {"positive", "neutral", "negative"}


def test_simple_endpoint_requires_text():
    resp = _client().get("/api/sentiment")
    assert resp.status_code == 422


def test_detailed_endpoint_formats_percentages():
    resp = _client().get("/api/sentiment/detailed", params={"text": "I hate waiting"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["text"] == "I hate waiting"
    assert body["sentiment"] == "negative"
    assert body["confidence"] == "70.00%"
    assert set(body["scores"]) == {"veryNegative", "negative", "neutral", "positive", "veryPositive"}
    assert body["scores"]["negative"] == "20.00%"
    for value in body["scores"].values():
        assert PERCENT_RE.match(value)


def test_detailed_endpoint_blank_text_is_fully_neutral():
    body = _client().get("/api/sentiment/detailed", params={"text": "   "}).json()

    assert body["sentiment"] == "neutral"
    assert body["confidence"] == "100.00%"
    assert body["scores"]["neutral"] == "100.00%"
    assert body["scores"]["veryPositive"] == "0.00%"


def test_pipeline_failure_still_returns_200_with_error_label():
    resp = _client().get("/api/sentiment/detailed", params={"text": "boom"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["sentiment"] == "error"
    assert body["confidence"] == "0.00%"


def test_batch_preserves_order_and_counts():
    resp = _client().post("/api/sentiment/batch", json={"texts": ["a", "b", "c"]})

    assert resp.status_code == 200
    body = resp.json()
    assert body["count"] == 3
    assert [r["text"] for r in body["results"]] == ["a", "b", "c"]


def test_batch_confidence_is_raw_float():
    body = _client().post("/api/sentiment/batch", json={"texts": ["I love it", "I hate it", ""]}).json()

    assert [r["sentiment"] for r in body["results"]] == ["positive", "negative", "neutral"]
    assert body["results"][0]["confidence"] == 0.6
    assert body["results"][2]["confidence"] == 1.0


def test_batch_rejects_malformed_body():
    resp = _client().post("/api/sentiment/batch", json={"text": "not a list"})
    assert resp.status_code == 422


def test_health_reports_up():
    body = _client().get("/health").json()
    assert body == {"status": "UP", "details": {"sentiment": "ok"}}


def test_cors_allows_configured_origin():
    resp = _client().get(
        "/api/sentiment",
        params={"text": "hello"},
        headers={"Origin": "http://localhost:5500"},
    )
    assert resp.headers["access-control-allow-origin"] == "http://localhost:5500"


def test_format_percent():
    assert format_percent(0.123456) == "12.35%"
    assert format_percent(0.0) == "0.00%"


def test_format_percent_rounds_ties_half_up():
    assert format_percent(0.40125) == "40.13%"
    assert format_percent(0.30005) == "30.01%"
    assert format_percent(0.00125) == "0.13%"


class _TiePipeline:
    def annotate(self, text):
        return [SentenceSentiment(1, (0.00125, 0.40125, 0.30005, 0.29745, 0.0))]


def test_detailed_endpoint_rounds_ties_half_up():
    app = create_app(settings=SentimentSettings(), analyzer=SentimentAnalyzer(_TiePipeline()))
    body = TestClient(app).get("/api/sentiment/detailed", params={"text": "so so"}).json()

    assert body["sentiment"] == "negative"
    assert body["confidence"] == "40.13%"
    assert body["scores"]["veryNegative"] == "0.13%"
    assert body["scores"]["negative"] == "40.13%"
    assert body["scores"]["neutral"] == "30.01%"
    assert body["scores"]["veryPositive"] == "0.00%"


def test_analyzer_is_built_once_at_startup(monkeypatch):
    built = []

    def _build(settings):
        built.append(settings)
        return SentimentAnalyzer(_KeywordPipeline())

    monkeypatch.setattr(web, "build_analyzer", _build)
    settings = SentimentSettings()

    with TestClient(create_app(settings=settings)) as client:
        assert client.get("/api/sentiment", params={"text": "I love it"}).json()["sentiment"] == "positive"
        assert client.post("/api/sentiment/batch", json={"texts": ["I hate it"]}).json()["count"] == 1

    assert built == [settings]
