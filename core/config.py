"""
Core Module - Engine Configuration.

============================================================
RESPONSIBILITY
============================================================
Single configuration object for the fusion, aggregation and
alert components. Values come from environment variables
(a local .env file is honoured) with documented defaults.

============================================================
"""

import os
from dataclasses import dataclass
from typing import List

from dotenv import load_dotenv

from .exceptions import ConfigurationError


# Load environment variables
load_dotenv()


DEFAULT_MODEL_NAME = "distilbert-base-uncased-finetuned-sst-2-english"


@dataclass
class EngineConfig:
    """Runtime configuration for the sentiment engine."""

    # Cache
    cache_ttl_seconds: int = 6 * 60 * 60
    """How long a fused score is replayed from cache."""

    # Lexicon scorer
    lexicon_token_weight: float = 0.25
    """Score contributed by each matched lexicon token."""

    # Learned scorer
    learned_model_name: str = DEFAULT_MODEL_NAME
    """Hugging Face model id for the binary classifier."""

    learned_max_chars: int = 500
    """Input is truncated to this many characters before inference."""

    learned_timeout_seconds: float = 30.0
    """Per-call inference deadline; a timeout uses the fallback heuristic."""

    # Batch
    batch_concurrency: int = 4
    """Max items scored concurrently by the batch processor."""

    # Alerts
    alert_default_threshold: int = 30
    """Default watch-list threshold in percentage points."""

    # Persistence
    database_url: str = "sqlite:///sentiment.db"
    """SQLAlchemy URL for the optional persistence sink."""

    # Logging
    log_level: str = "INFO"
    """Logging level."""

    @classmethod
    def from_env(cls) -> "EngineConfig":
        """Load configuration from environment variables."""
        return cls(
            cache_ttl_seconds=int(os.getenv("SENTIMENT_CACHE_TTL_SECONDS", "21600")),
            lexicon_token_weight=float(os.getenv("SENTIMENT_LEXICON_TOKEN_WEIGHT", "0.25")),
            learned_model_name=os.getenv("SENTIMENT_LEARNED_MODEL", DEFAULT_MODEL_NAME),
            learned_max_chars=int(os.getenv("SENTIMENT_LEARNED_MAX_CHARS", "500")),
            learned_timeout_seconds=float(os.getenv("SENTIMENT_LEARNED_TIMEOUT_SECONDS", "30")),
            batch_concurrency=int(os.getenv("SENTIMENT_BATCH_CONCURRENCY", "4")),
            alert_default_threshold=int(os.getenv("ALERT_DEFAULT_THRESHOLD", "30")),
            database_url=os.getenv("DATABASE_URL", "sqlite:///sentiment.db"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )

    def validate(self) -> List[str]:
        """Validate configuration, return list of errors."""
        errors = []

        if self.cache_ttl_seconds < 1:
            errors.append("cache_ttl_seconds must be at least 1")

        if not 0.0 < self.lexicon_token_weight <= 1.0:
            errors.append("lexicon_token_weight must be in (0, 1]")

        if self.learned_max_chars < 1:
            errors.append("learned_max_chars must be at least 1")

        if self.learned_timeout_seconds <= 0:
            errors.append("learned_timeout_seconds must be positive")

        if self.batch_concurrency < 1:
            errors.append("batch_concurrency must be at least 1")

        if not 10 <= self.alert_default_threshold <= 50:
            errors.append("alert_default_threshold must be between 10 and 50")

        return errors

    def validate_or_raise(self) -> "EngineConfig":
        errors = self.validate()
        if errors:
            raise ConfigurationError("Invalid engine configuration", errors=errors)
        return self
