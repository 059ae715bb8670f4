"""Runtime settings resolved from the environment."""

from __future__ import annotations

import os
from functools import lru_cache

from pydantic import BaseModel, Field

from .config import CONFIG, PipelineConfig


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


class AppSettings(BaseModel):
    app_name: str = Field(default="Neurospell")
    version: str = Field(default="0.3.0")
    model_store_dir: str = Field(default=os.getenv("MODEL_STORE_DIR", "data/models"))
    stream_url: str = Field(default=os.getenv("STREAM_URL", "ws://127.0.0.1:6868"))
    stream_client_id: str | None = Field(default=os.getenv("STREAM_CLIENT_ID"))
    stream_client_secret: str | None = Field(default=os.getenv("STREAM_CLIENT_SECRET"))
    stream_autoconnect: bool = Field(default=_flag("STREAM_AUTOCONNECT"))
    sample_rate: int = Field(default=int(os.getenv("SAMPLE_RATE", str(CONFIG.sample_rate))))
    tick_seconds: float = Field(default=float(os.getenv("TICK_SECONDS", "1.0")))
    alphabet: str = Field(default=os.getenv("ALPHABET", CONFIG.alphabet))
    classifier_random_fallback: bool = Field(default=_flag("CLASSIFIER_RANDOM_FALLBACK"))
    openai_api_key: str | None = Field(default=os.getenv("OPENAI_API_KEY"))
    refiner_model: str = Field(default=os.getenv("REFINER_MODEL", "gpt-4o-mini"))
    refiner_strict: bool = Field(default=_flag("REFINER_STRICT"))
    refiner_timeout: float = Field(default=float(os.getenv("REFINER_TIMEOUT", "15")))
    log_level: str = Field(default=os.getenv("LOG_LEVEL", "INFO"))

    def pipeline_config(self) -> PipelineConfig:
        return CONFIG.with_overrides(sample_rate=self.sample_rate, alphabet=self.alphabet)


@lru_cache()
def get_settings() -> AppSettings:
    return AppSettings()
