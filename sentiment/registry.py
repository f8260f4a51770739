"""
Engine Registry - Process-wide default fusion engine.

Collaborators that do not manage their own engine call the
module-level analyze(); tests and embedders inject one with
set_engine().
"""

import logging
from typing import Optional

from core.clock import ClockFactory
from core.config import EngineConfig

from .cache import TTLSentimentCache
from .fusion import FusionEngine
from .learned import LearnedScorer
from .lexicon import LexiconScorer
from .models import ScoredItem


logger = logging.getLogger(__name__)


def build_engine(config: Optional[EngineConfig] = None) -> FusionEngine:
    """Build a fusion engine from configuration."""
    config = (config or EngineConfig.from_env()).validate_or_raise()
    clock = ClockFactory.get_clock()

    return FusionEngine(
        lexicon=LexiconScorer(token_weight=config.lexicon_token_weight),
        learned=LearnedScorer(
            model_name=config.learned_model_name,
            max_chars=config.learned_max_chars,
            timeout_seconds=config.learned_timeout_seconds,
        ),
        cache=TTLSentimentCache(ttl_seconds=config.cache_ttl_seconds, clock=clock),
        clock=clock,
    )


# Singleton instance for convenience
_default_engine: Optional[FusionEngine] = None


def get_engine() -> FusionEngine:
    """Get the default fusion engine."""
    global _default_engine
    if _default_engine is None:
        _default_engine = build_engine()
        logger.info("Default fusion engine created")
    return _default_engine


def set_engine(engine: Optional[FusionEngine]) -> None:
    """Replace (or with None, reset) the default fusion engine."""
    global _default_engine
    _default_engine = engine


async def analyze(text: str, use_cache: bool = True) -> ScoredItem:
    """Convenience function to analyze with the default engine."""
    return await get_engine().analyze(text, use_cache=use_cache)
