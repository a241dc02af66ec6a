from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from sentiment_api.sentiment_model import SentenceSentimentModel, SentimentModelConfig
from sentiment_api.sentiment_pipeline import SentimentAnalyzer
from sentiment_api.sentiment_types import CLASS_NAMES
from sentiment_api.settings import SentimentSettings, load_settings

logger = logging.getLogger(__name__)


# ── Schemas ────────────────────────────────────────────────────────────────────

class SimpleResponse(BaseModel):
    sentiment: str
    text: str


class ScoreBreakdown(BaseModel):
    veryNegative: str
    negative: str
    neutral: str
    positive: str
    veryPositive: str


class DetailedResponse(BaseModel):
    text: str
    sentiment: str
    confidence: str
    scores: ScoreBreakdown


class BatchRequest(BaseModel):
    texts: list[str]


class BatchItem(BaseModel):
    text: str
    sentiment: str
    confidence: float


class BatchResponse(BaseModel):
    results: list[BatchItem]
    count: int


def format_percent(value: float) -> str:
    # two decimals, ties rounded half up on the shortest decimal form (40.125 -> 40.13)
    pct = Decimal(repr(value * 100)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return f"{pct}%"


# ── Endpoints ──────────────────────────────────────────────────────────────────

router = APIRouter()


def get_analyzer(request: Request) -> SentimentAnalyzer:
    return request.app.state.analyzer


@router.get("/health")
def health():
    return {"status": "UP", "details": {"sentiment": "ok"}}


@router.get("/api/sentiment", response_model=SimpleResponse)
def get_sentiment(text: str, analyzer: SentimentAnalyzer = Depends(get_analyzer)):
    return SimpleResponse(sentiment=analyzer.classify(text), text=text)


@router.get("/api/sentiment/detailed", response_model=DetailedResponse)
def get_detailed_sentiment(text: str, analyzer: SentimentAnalyzer = Depends(get_analyzer)):
    result = analyzer.analyze(text)
    scores = {name: format_percent(v) for name, v in zip(CLASS_NAMES, result.class_scores)}
    return DetailedResponse(
        text=text,
        sentiment=result.label,
        confidence=format_percent(result.confidence),
        scores=ScoreBreakdown(**scores),
    )


@router.post("/api/sentiment/batch", response_model=BatchResponse)
def analyze_batch(body: BatchRequest, analyzer: SentimentAnalyzer = Depends(get_analyzer)):
    results = []
    for text in body.texts:
        result = analyzer.analyze(text)
        results.append(BatchItem(text=text, sentiment=result.label, confidence=result.confidence))
    logger.info("Analyzed batch: count=%s", len(results))
    return BatchResponse(results=results, count=len(results))


# ── App ────────────────────────────────────────────────────────────────────────

def build_analyzer(settings: SentimentSettings) -> SentimentAnalyzer:
    model = SentenceSentimentModel(SentimentModelConfig.from_settings(settings))
    return SentimentAnalyzer(model)


def create_app(
        settings: Optional[SentimentSettings] = None,
        analyzer: Optional[SentimentAnalyzer] = None,
) -> FastAPI:
    """
    Build the HTTP app.

    The analyzer is created once at startup (blocking model load) unless one is passed in.
    """
    s = settings or load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "analyzer", None) is None:
            app.state.analyzer = build_analyzer(s)
        yield

    app = FastAPI(title="Sentiment API", version="0.1.0", lifespan=lifespan)
    if analyzer is not None:
        app.state.analyzer = analyzer

    app.add_middleware(
        CORSMiddleware,
        allow_origins=s.cors_origin_list(),
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )
    app.include_router(router)
    return app
