from __future__ import annotations

import logging
import math
from typing import Iterable, Optional, Protocol

from sentiment_api.sentiment_types import (
    EMPTY_RESULT,
    ERROR_RESULT,
    NUM_CLASSES,
    SentenceSentiment,
    SentimentLabel,
    SentimentResult,
)

logger = logging.getLogger(__name__)

# Bounds of the neutral band on the 0..4 scale (both inclusive).
NEGATIVE_THRESHOLD = 1.5
POSITIVE_THRESHOLD = 2.5


class SentencePipeline(Protocol):
    def annotate(self, text: str) -> Iterable[SentenceSentiment]: ...


def label_for_scale(avg_class: float) -> SentimentLabel:
    """Collapse the 0..4 scale into negative/neutral/positive."""
    if avg_class < NEGATIVE_THRESHOLD:
        return "negative"
    if avg_class > POSITIVE_THRESHOLD:
        return "positive"
    return "neutral"


def confidence_index(avg_class: float) -> int:
    # round half up; builtin round() would send 2.5 to 2
    return int(math.floor(avg_class + 0.5))


def aggregate(sentences: Iterable[SentenceSentiment]) -> Optional[tuple[float, tuple[float, ...]]]:
    """
    Average per-sentence predictions.

    Returns (avg_class, mean probability vector), or None when there are no sentences.

    Raises:
        ValueError: on a malformed sentence (bad class or probability vector length)
    """
    count = 0
    class_total = 0
    totals = [0.0] * NUM_CLASSES

    for s in sentences:
        if not 0 <= s.predicted_class < NUM_CLASSES:
            raise ValueError(f"Predicted class out of range: {s.predicted_class}")
        if len(s.probs) != NUM_CLASSES:
            raise ValueError(f"Expected {NUM_CLASSES} probabilities, got {len(s.probs)}")

        class_total += s.predicted_class
        for i, p in enumerate(s.probs):
            totals[i] += p
        count += 1

    if count == 0:
        return None
    return class_total / count, tuple(t / count for t in totals)


class SentimentAnalyzer:
    """
    Document-level sentiment on top of a sentence pipeline.

    - empty/blank -> neutral with full certainty, model not called
    - pipeline failure -> error result, logged, never raised
    """

    def __init__(self, pipeline: SentencePipeline):
        self._pipeline = pipeline

    def analyze(self, text: Optional[str]) -> SentimentResult:
        if text is None or not text.strip():
            return EMPTY_RESULT

        try:
            aggregated = aggregate(self._pipeline.annotate(text))
            if aggregated is None:
                logger.warning("No sentences found; treating as empty text: len=%s", len(text))
                return EMPTY_RESULT

            avg_class, scores = aggregated
            return SentimentResult(
                label=label_for_scale(avg_class),
                confidence=scores[confidence_index(avg_class)],
                class_scores=scores,
            )
        except Exception:
            logger.exception("Error analyzing sentiment for text: %r", text)
            return ERROR_RESULT

    def classify(self, text: Optional[str]) -> SentimentLabel:
        return self.analyze(text).label
