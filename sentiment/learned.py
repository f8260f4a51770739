"""
Learned Scorer - Binary sentiment classifier with sticky degradation.

The classifier returns a (label, probability) pair which is mapped to
a signed score: POSITIVE -> +p, NEGATIVE -> -p.

MODEL LIFECYCLE:
    UNINITIALIZED -> INITIALIZING -> READY
                                  -> DEGRADED (sticky)

- The model is loaded lazily, exactly once per scorer, behind a
  single-flight lock. Concurrent first callers wait for the load.
- A load failure flips the scorer into DEGRADED for the rest of
  the process. It is logged once; later calls silently use the
  lexicon-style fallback heuristic.
- A failure or timeout on a single inference uses the fallback
  for that call only. The state stays READY.

Input is truncated to `max_chars` before inference, so long
articles are never fully read by this scorer.
"""

import asyncio
import logging
from functools import partial
from typing import Any, Callable, Optional

from core.config import DEFAULT_MODEL_NAME

from .base import BaseScorer
from .exceptions import ScorerTransientError, ScorerUnavailableError
from .lexicon import LexiconScorer
from .models import ModelState, ScorerResult


logger = logging.getLogger(__name__)


Classifier = Callable[[str], Any]
ModelLoader = Callable[[], Classifier]

POSITIVE_LABELS = frozenset({"POSITIVE", "LABEL_1"})
NEGATIVE_LABELS = frozenset({"NEGATIVE", "LABEL_0"})


def load_transformers_pipeline(model_name: str = DEFAULT_MODEL_NAME) -> Classifier:
    """Load a Hugging Face sentiment-analysis pipeline."""
    from transformers import pipeline

    logger.info(f"Loading sentiment model: {model_name}")
    return pipeline("sentiment-analysis", model=model_name)


def to_signed_score(raw: Any) -> float:
    """
    Map classifier output to a signed score.

    Accepts a single {"label", "score"} dict or a list of them
    (the first entry is the most likely label).
    """
    if isinstance(raw, (list, tuple)):
        result = raw[0] if raw else None
    else:
        result = raw
    if not result:
        return 0.0

    label = str(result.get("label", "")).upper()
    probability = float(result.get("score", 0.0))

    if label in POSITIVE_LABELS:
        return probability
    if label in NEGATIVE_LABELS:
        return -probability
    return 0.0


class LearnedScorer(BaseScorer):
    """Signed-magnitude scorer backed by a lazily loaded classifier."""

    DEFAULT_MAX_CHARS = 500
    DEFAULT_TIMEOUT = 30.0

    def __init__(
        self,
        loader: Optional[ModelLoader] = None,
        model_name: str = DEFAULT_MODEL_NAME,
        max_chars: int = DEFAULT_MAX_CHARS,
        timeout_seconds: Optional[float] = DEFAULT_TIMEOUT,
        fallback: Optional[LexiconScorer] = None,
    ) -> None:
        super().__init__()
        self._loader = loader or partial(load_transformers_pipeline, model_name)
        self._model_name = model_name
        self._max_chars = max_chars
        self._timeout = timeout_seconds
        self._fallback = fallback or LexiconScorer.fallback()

        self._state = ModelState.UNINITIALIZED
        self._model: Optional[Classifier] = None
        self._init_lock = asyncio.Lock()
        self._unavailable: Optional[ScorerUnavailableError] = None

        self._stats.update({
            "model_loads": 0,
            "model_calls": 0,
            "fallback_calls": 0,
            "inference_errors": 0,
            "timeouts": 0,
        })

    @property
    def name(self) -> str:
        return "learned"

    @property
    def state(self) -> ModelState:
        return self._state

    @property
    def is_degraded(self) -> bool:
        return self._state == ModelState.DEGRADED

    @property
    def unavailable_reason(self) -> Optional[ScorerUnavailableError]:
        return self._unavailable

    # ─────────────────────────────────────────────────────────────
    # Model lifecycle
    # ─────────────────────────────────────────────────────────────

    async def ensure_model(self) -> Optional[Classifier]:
        """
        Return the loaded classifier, loading it on first use.

        Returns None once the scorer is degraded.
        """
        if self._state == ModelState.READY:
            return self._model
        if self._state == ModelState.DEGRADED:
            return None

        async with self._init_lock:
            # Another caller may have finished while we waited
            if self._state == ModelState.READY:
                return self._model
            if self._state == ModelState.DEGRADED:
                return None

            self._state = ModelState.INITIALIZING
            self._stats["model_loads"] += 1
            logger.info(f"[{self.name}] Initializing model {self._model_name}")

            try:
                model = await asyncio.to_thread(self._loader)
                if model is None:
                    raise ScorerUnavailableError(
                        "Model loader returned no classifier",
                        scorer_name=self.name,
                    )
            except Exception as e:
                self._state = ModelState.DEGRADED
                if isinstance(e, ScorerUnavailableError):
                    self._unavailable = e
                else:
                    self._unavailable = ScorerUnavailableError(
                        f"Model initialization failed: {e}",
                        scorer_name=self.name,
                        details={"model_name": self._model_name},
                        cause=e,
                    )
                logger.error(
                    f"[{self.name}] Model unavailable, using fallback heuristic "
                    f"for the rest of the process: {e}"
                )
                return None

            self._model = model
            self._state = ModelState.READY
            logger.info(f"[{self.name}] Model ready")
            return model

    # ─────────────────────────────────────────────────────────────
    # Scoring
    # ─────────────────────────────────────────────────────────────

    async def _score(self, text: str) -> ScorerResult:
        if not text or not text.strip():
            return ScorerResult.ok(self.name, 0.0)

        model = await self.ensure_model()
        if model is None:
            return self._fallback_result(text)

        truncated = text[:self._max_chars]
        try:
            raw = await self._infer(model, truncated)
            self._stats["model_calls"] += 1
            return ScorerResult.ok(self.name, to_signed_score(raw))
        except asyncio.TimeoutError:
            self._stats["timeouts"] += 1
            logger.warning(
                f"[{self.name}] Inference timed out after {self._timeout}s, using fallback"
            )
        except Exception as e:
            self._stats["inference_errors"] += 1
            error = ScorerTransientError(
                f"Inference failed: {e}",
                scorer_name=self.name,
                text_preview=truncated,
                cause=e,
            )
            logger.warning(f"[{self.name}] {error.message}, using fallback")

        return self._fallback_result(text)

    async def _infer(self, model: Classifier, text: str) -> Any:
        call = asyncio.to_thread(model, text)
        if self._timeout is None:
            return await call
        return await asyncio.wait_for(call, timeout=self._timeout)

    def _fallback_result(self, text: str) -> ScorerResult:
        self._stats["fallback_calls"] += 1
        return ScorerResult.ok(self.name, self._fallback.polarity(text), used_fallback=True)

    def get_stats(self) -> dict[str, Any]:
        stats = super().get_stats()
        stats["model_state"] = self._state.value
        return stats
