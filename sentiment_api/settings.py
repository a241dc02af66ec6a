from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class SentimentSettings(BaseSettings):
    """
    Environment-driven settings for the sentiment model + HTTP service.
    """

    model_config = SettingsConfigDict(env_prefix="", env_file=".env", extra="ignore")

    # ---- Sentiment inference ----
    # Any sequence-classification checkpoint with 5 ordered labels (very negative .. very positive).
    sentiment_model_path: str = Field(
        default="nlptown/bert-base-multilingual-uncased-sentiment",
        alias="SENTIMENT_MODEL_PATH",
    )
    sentiment_model_version: str = Field(default="nlptown-bert-5class-v1", alias="SENTIMENT_MODEL_VERSION")

    sentiment_batch_size: int = Field(default=16, alias="SENTIMENT_BATCH_SIZE")
    sentiment_max_length: int = Field(default=256, alias="SENTIMENT_MAX_LENGTH")

    # Device: "auto" | "cpu" | "cuda"
    sentiment_device: str = Field(default="auto", alias="SENTIMENT_DEVICE")

    # Sentence splitting (NLTK punkt)
    sentiment_language: str = Field(default="english", alias="SENTIMENT_LANGUAGE")
    sentiment_nltk_download: bool = Field(default=True, alias="SENTIMENT_NLTK_DOWNLOAD")

    # ---- HTTP ----
    api_host: str = Field(default="0.0.0.0", alias="SENTIMENT_API_HOST")
    api_port: int = Field(default=8080, alias="SENTIMENT_API_PORT")

    # Comma separated list of allowed origins
    cors_origins: str = Field(
        default="http://127.0.0.1:5500,http://localhost:5500",
        alias="SENTIMENT_CORS_ORIGINS",
    )

    log_level: str = Field(default="INFO", alias="SENTIMENT_LOG_LEVEL")

    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


def load_settings() -> SentimentSettings:
    return SentimentSettings()
