from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from vaderSentiment.vaderSentiment import SentimentIntensityAnalyzer

from emotion_classifier import MIN_CONFIDENCE, ClassificationResult, Emotion


@dataclass
class VaderSentimentBackend:
    """
    Polarity-only backend: clear positives read as happy, clear negatives as sad.
    Anything in the middle band is left to the keyword classifier.
    """

    positive_threshold: float = 0.45
    negative_threshold: float = -0.35
    analyzer: SentimentIntensityAnalyzer = field(default_factory=SentimentIntensityAnalyzer)

    def classify(self, text: str) -> Optional[ClassificationResult]:
        compound = self.analyzer.polarity_scores(text or "").get("compound", 0.0)

        if compound >= self.positive_threshold:
            emotion = Emotion.HAPPY
        elif compound <= self.negative_threshold:
            emotion = Emotion.SAD
        else:
            return None

        return ClassificationResult(emotion, max(min(abs(compound), 1.0), MIN_CONFIDENCE))
