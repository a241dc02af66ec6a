from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Iterable, Sequence

import nltk
import numpy as np
import torch
from transformers import AutoModelForSequenceClassification, AutoTokenizer

from sentiment_api.sentiment_types import NUM_CLASSES, SentenceSentiment
from sentiment_api.settings import SentimentSettings

logger = logging.getLogger(__name__)

PUNKT_RESOURCE = "tokenizers/punkt_tab"


@dataclass(frozen=True)
class SentimentModelConfig:
    model_path: str
    model_version: str
    batch_size: int
    max_length: int
    device: str  # "auto" | "cpu" | "cuda"
    language: str = "english"
    nltk_download: bool = True

    @staticmethod
    def from_settings(s: SentimentSettings) -> "SentimentModelConfig":
        return SentimentModelConfig(
            model_path=s.sentiment_model_path,
            model_version=s.sentiment_model_version,
            batch_size=s.sentiment_batch_size,
            max_length=s.sentiment_max_length,
            device=s.sentiment_device,
            language=s.sentiment_language,
            nltk_download=s.sentiment_nltk_download,
        )


def _select_device(device: str) -> torch.device:
    if device == "cpu":
        return torch.device("cpu")
    if device == "cuda":
        return torch.device("cuda")
    # auto
    return torch.device("cuda" if torch.cuda.is_available() else "cpu")


def _ensure_punkt(download: bool) -> None:
    """
    Make sure the punkt sentence tokenizer data is available.

    Raises:
        LookupError: if the data is missing and downloads are disabled.
    """
    try:
        nltk.data.find(PUNKT_RESOURCE)
    except LookupError:
        if not download:
            raise
        logger.info("Downloading NLTK sentence tokenizer data: %s", PUNKT_RESOURCE)
        nltk.download("punkt_tab", quiet=True)


@lru_cache(maxsize=1)
def _load_model_and_tokenizer(model_path: str):
    """
    Load once per process. Cached by model_path.

    Raises:
        OSError: if model files are missing or path is invalid.
    """
    logger.info("Loading sentiment model: path=%s", model_path)
    tokenizer = AutoTokenizer.from_pretrained(model_path)
    model = AutoModelForSequenceClassification.from_pretrained(model_path)
    return model, tokenizer


class SentenceSentimentModel:
    """
    Sentence-level 5-class sentiment:
    - model/tokenizer load once (process cache)
    - text split into sentences with NLTK punkt
    - batch inference over sentences, order preserved

    Assumption:
      The model has 5 labels ordered from very negative to very positive
      (e.g. nlptown "1 star" .. "5 stars").
    """

    def __init__(self, cfg: SentimentModelConfig):
        self._cfg = cfg
        self._device = _select_device(cfg.device)

        _ensure_punkt(cfg.nltk_download)

        model, tokenizer = _load_model_and_tokenizer(cfg.model_path)
        num_labels = getattr(model.config, "num_labels", None)
        if num_labels != NUM_CLASSES:
            raise ValueError(f"Sentiment model must have {NUM_CLASSES} labels, got {num_labels}")

        self._model = model.to(self._device)
        self._model.eval()
        self._tokenizer = tokenizer

        logger.info(
            "Sentiment model ready: version=%s device=%s batch=%s max_length=%s",
            cfg.model_version,
            self._device.type,
            cfg.batch_size,
            cfg.max_length,
        )

    @property
    def model_version(self) -> str:
        return self._cfg.model_version

    def split_sentences(self, text: str) -> list[str]:
        return [s for s in nltk.sent_tokenize(text, language=self._cfg.language) if s.strip()]

    def annotate(self, text: str) -> list[SentenceSentiment]:
        """
        Score every sentence of a text.

        Raises:
            ValueError: if batch_size/max_length invalid
        """
        if self._cfg.batch_size <= 0:
            raise ValueError("batch_size must be > 0")
        if self._cfg.max_length <= 0:
            raise ValueError("max_length must be > 0")

        results: list[SentenceSentiment] = []
        for batch in _batched(self.split_sentences(text), self._cfg.batch_size):
            results.extend(self._predict_batch(batch))
        return results

    def _predict_batch(self, sentences: Sequence[str]) -> list[SentenceSentiment]:
        enc = self._tokenizer(
            list(sentences),
            padding=True,
            truncation=True,
            max_length=self._cfg.max_length,
            return_tensors="pt",
        )
        enc = {k: v.to(self._device) for k, v in enc.items()}

        with torch.no_grad():
            logits = self._model(**enc).logits  # (B, 5)
            probs = torch.softmax(logits, dim=-1).cpu().numpy()

        return [
            SentenceSentiment(
                predicted_class=int(np.argmax(p)),
                probs=tuple(float(x) for x in p),
            )
            for p in probs
        ]


def _batched(items: Sequence[str], batch_size: int) -> Iterable[Sequence[str]]:
    for i in range(0, len(items), batch_size):
        yield items[i : i + batch_size]
