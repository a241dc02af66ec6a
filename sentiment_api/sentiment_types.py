from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

SentimentLabel = Literal["negative", "neutral", "positive", "error"]

NUM_CLASSES = 5

# Fine-grained class order shared by the model output and class_scores.
CLASS_NAMES = ("veryNegative", "negative", "neutral", "positive", "veryPositive")


@dataclass(frozen=True)
class SentenceSentiment:
    """One sentence as scored by the sentence-level classifier."""

    predicted_class: int
    probs: tuple[float, ...]


@dataclass(frozen=True)
class SentimentResult:
    """
    Document-level sentiment output.

    - label: negative|neutral|positive, or error when inference failed
    - confidence: probability mass of the rounded fine-grained class
    - class_scores: 5 probabilities ordered very-negative .. very-positive
    """

    label: SentimentLabel
    confidence: float
    class_scores: tuple[float, ...]


EMPTY_RESULT = SentimentResult(label="neutral", confidence=1.0, class_scores=(0.0, 0.0, 1.0, 0.0, 0.0))
ERROR_RESULT = SentimentResult(label="error", confidence=0.0, class_scores=(0.0, 0.0, 0.0, 0.0, 0.0))
