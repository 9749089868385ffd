from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
import logging
import math
import os
from typing import Optional, Protocol

from dotenv import load_dotenv

from emotion_classifier import MIN_CONFIDENCE, ClassificationResult, Emotion, EmotionClassifier

logger = logging.getLogger(__name__)

BACKEND_KEYWORD = "keyword"
BACKEND_GEMINI = "gemini"
BACKEND_VADER = "vader"


class EmotionBackend(Protocol):
    def classify(self, text: str) -> Optional[ClassificationResult]:
        ...


@dataclass
class EmotionDetector:
    """
    Runs an optional model backend and falls back to the keyword classifier
    whenever the backend fails or has no opinion.
    """

    classifier: EmotionClassifier = field(default_factory=EmotionClassifier)
    backend: Optional[EmotionBackend] = None

    @classmethod
    def from_env(cls) -> "EmotionDetector":
        load_dotenv()
        name = (os.getenv("EMOTION_BACKEND") or BACKEND_KEYWORD).strip().lower()
        backend: Optional[EmotionBackend] = None

        try:
            if name == BACKEND_GEMINI:
                from gemini_client import GeminiEmotionClient

                backend = GeminiEmotionClient(api_key=os.getenv("GEMINI_API_KEY", ""))
            elif name == BACKEND_VADER:
                from sentiment_backend import VaderSentimentBackend

                backend = VaderSentimentBackend()
            elif name != BACKEND_KEYWORD:
                logger.warning("Unknown EMOTION_BACKEND %r, using keyword detection only", name)
        except Exception as exc:
            logger.warning("Could not start %s backend, using keyword detection only: %s", name, exc)
            backend = None

        if backend is not None:
            logger.info("Emotion backend: %s", name)
        return cls(backend=backend)

    def detect(self, text: str) -> ClassificationResult:
        if not text or not text.strip():
            return ClassificationResult(Emotion.NEUTRAL, 0.0)

        if self.backend is not None:
            try:
                result = self.backend.classify(text)
                if result is not None:
                    return _normalize(result)
            except Exception as exc:
                logger.warning("Emotion backend failed, using keyword detection: %s", exc)

        return self.classifier.classify(text)

    async def detect_async(self, text: str) -> ClassificationResult:
        return await asyncio.to_thread(self.detect, text)


def _normalize(result) -> ClassificationResult:
    """Coerce a backend answer to a known Emotion with confidence in [0.1, 1.0]."""
    label, confidence = result
    emotion = label if isinstance(label, Emotion) else Emotion.from_label(str(label))
    confidence = float(confidence)
    if not math.isfinite(confidence):
        raise ValueError(f"Backend returned a bad confidence: {confidence!r}")
    return ClassificationResult(emotion, min(max(confidence, MIN_CONFIDENCE), 1.0))
