from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import re
from types import MappingProxyType
from typing import Dict, FrozenSet, List, Mapping, NamedTuple, Tuple, Union


class Emotion(str, Enum):
    """Closed set of emotion labels, declared in canonical tie-break order."""

    HAPPY = "happy"
    SAD = "sad"
    ANGRY = "angry"
    FEAR = "fear"
    SURPRISE = "surprise"
    NEUTRAL = "neutral"

    @classmethod
    def from_label(cls, label: str) -> "Emotion":
        """Resolve a raw model label (``joy``, ``anger``, ``negative``...) to an Emotion."""
        key = (label or "").strip().lower()
        try:
            return cls(key)
        except ValueError:
            pass
        if key in LABEL_ALIASES:
            return LABEL_ALIASES[key]
        raise ValueError(f"Unknown emotion label: {label!r}")


class ClassificationResult(NamedTuple):
    emotion: Emotion
    confidence: float


# Model outputs use a wider vocabulary than ours; disgust folds into angry.
LABEL_ALIASES: Mapping[str, Emotion] = MappingProxyType(
    {
        "joy": Emotion.HAPPY,
        "happiness": Emotion.HAPPY,
        "positive": Emotion.HAPPY,
        "love": Emotion.HAPPY,
        "sadness": Emotion.SAD,
        "negative": Emotion.SAD,
        "anger": Emotion.ANGRY,
        "rage": Emotion.ANGRY,
        "disgust": Emotion.ANGRY,
        "anxiety": Emotion.FEAR,
        "amazement": Emotion.SURPRISE,
    }
)

EMOTION_KEYWORDS: Mapping[Emotion, Tuple[str, ...]] = MappingProxyType(
    {
        Emotion.HAPPY: (
            "happy",
            "joy",
            "excited",
            "great",
            "awesome",
            "amazing",
            "wonderful",
            "fantastic",
            "love",
            "brilliant",
            "excellent",
            "promoted",
            "celebration",
            "congratulations",
            "glad",
            "delighted",
            "thrilled",
            "cheerful",
            "proud",
        ),
        Emotion.SAD: (
            "sad",
            "depressed",
            "crying",
            "hurt",
            "disappointed",
            "lonely",
            "heartbroken",
            "miserable",
            "sorrow",
            "grief",
            "upset",
            "down",
            "unhappy",
            "gloomy",
            "hopeless",
        ),
        Emotion.ANGRY: (
            "angry",
            "mad",
            "furious",
            "annoyed",
            "irritated",
            "frustrated",
            "hate",
            "disgusted",
            "outraged",
            "livid",
            "pissed",
            "rage",
        ),
        Emotion.FEAR: (
            "scared",
            "afraid",
            "terrified",
            "anxious",
            "worried",
            "nervous",
            "panic",
            "frightened",
            "fearful",
            "concerned",
            "dread",
        ),
        Emotion.SURPRISE: (
            "surprised",
            "shocked",
            "amazed",
            "astonished",
            "wow",
            "incredible",
            "unbelievable",
            "unexpected",
            "sudden",
            "can't believe",
            "stunned",
        ),
        Emotion.NEUTRAL: (
            "okay",
            "fine",
            "normal",
            "regular",
            "standard",
            "typical",
            "usual",
            "alright",
        ),
    }
)

INTENSIFIERS: FrozenSet[str] = frozenset(
    {
        "very",
        "really",
        "so",
        "extremely",
        "incredibly",
        "absolutely",
        "totally",
        "completely",
        "super",
        "quite",
        "too",
        "deeply",
        "truly",
        "utterly",
        "highly",
    }
)

NEGATORS: FrozenSet[str] = frozenset(
    {
        "not",
        "no",
        "never",
        "don't",
        "doesn't",
        "didn't",
        "isn't",
        "wasn't",
        "aren't",
        "won't",
        "cannot",
        "nothing",
        "neither",
        "nor",
        "hardly",
        "without",
    }
)

# Matched against the raw input, so case matters for the caps and :D rules.
# ">:(" also satisfies ":(" and both bonuses apply.
PATTERN_RULES: Tuple[Tuple[re.Pattern[str], Emotion, float], ...] = (
    (re.compile(r"!{2,}"), Emotion.SURPRISE, 2.0),
    (re.compile(r"\?{2,}"), Emotion.SURPRISE, 1.5),
    (re.compile(r"\.{3,}"), Emotion.NEUTRAL, 1.0),
    (re.compile(r"[A-Z]{3,}"), Emotion.ANGRY, 1.5),
    (re.compile(r":\)"), Emotion.HAPPY, 2.0),
    (re.compile(r":\("), Emotion.SAD, 2.0),
    (re.compile(r":D"), Emotion.HAPPY, 3.0),
    (re.compile(r">:\("), Emotion.ANGRY, 2.0),
)

INTENSIFIER_MULTIPLIER = 2.0
EXACT_MATCH_MULTIPLIER = 1.5
MIN_CONFIDENCE = 0.1

# Where a negated trigger's score goes instead, and what share of it.
NEGATION_REDIRECTS: Mapping[Emotion, Tuple[Emotion, float]] = MappingProxyType(
    {
        Emotion.HAPPY: (Emotion.SAD, 0.5),
        Emotion.SAD: (Emotion.NEUTRAL, 0.5),
    }
)
DEFAULT_NEGATION_REDIRECT: Tuple[Emotion, float] = (Emotion.NEUTRAL, 0.3)

EMOTION_TO_EMOJI: Mapping[Emotion, str] = MappingProxyType(
    {
        Emotion.HAPPY: "😊",
        Emotion.SAD: "😢",
        Emotion.ANGRY: "😠",
        Emotion.FEAR: "😨",
        Emotion.SURPRISE: "😲",
        Emotion.NEUTRAL: "😐",
    }
)

EMOTION_TO_COLOR: Mapping[Emotion, str] = MappingProxyType(
    {emotion: f"hsl(var(--emotion-{emotion.value}))" for emotion in Emotion}
)


def emotion_to_emoji(emotion: Union[Emotion, str]) -> str:
    return EMOTION_TO_EMOJI[Emotion(emotion)]


def emotion_to_display_color(emotion: Union[Emotion, str]) -> str:
    return EMOTION_TO_COLOR[Emotion(emotion)]


def add_emoji(text: str, emotion: Union[Emotion, str]) -> str:
    emoji = emotion_to_emoji(emotion)
    if emoji not in text:
        return f"{text} {emoji}"
    return text


@dataclass
class EmotionClassifier:
    """
    Keyword-based emotion detector with negation, intensifier and punctuation handling.

    Tokens shorter than ``min_fragment_length`` can still contain a keyword but are
    not themselves looked up inside keywords; set it to 1 for unrestricted matching.
    """

    min_fragment_length: int = 3

    def classify(self, text: str) -> ClassificationResult:
        if not text or not text.strip():
            return ClassificationResult(Emotion.NEUTRAL, 0.0)

        scores = self.score(text)
        # max() keeps the first of equal scores, i.e. the canonical order.
        emotion = max(Emotion, key=lambda e: scores[e])
        top = scores[emotion]
        total = sum(scores.values())

        if top == 0:
            emotion = Emotion.NEUTRAL
        confidence = top / total if total > 0 else 0.0
        return ClassificationResult(emotion, max(confidence, MIN_CONFIDENCE))

    def score(self, text: str) -> Dict[Emotion, float]:
        """Return the raw per-emotion accumulator for ``text`` before normalization."""
        scores: Dict[Emotion, float] = {emotion: 0.0 for emotion in Emotion}
        tokens: List[str] = (text or "").lower().split()

        for i, token in enumerate(tokens):
            neighbours = tokens[max(i - 1, 0) : i] + tokens[i + 1 : i + 2]
            negated = any(word in NEGATORS for word in neighbours)
            intensified = any(word in INTENSIFIERS for word in neighbours)
            multiplier = INTENSIFIER_MULTIPLIER if intensified else 1.0

            for emotion, keywords in EMOTION_KEYWORDS.items():
                for keyword in keywords:
                    if not self._matches(token, keyword):
                        continue
                    value = multiplier
                    if token == keyword:
                        value *= EXACT_MATCH_MULTIPLIER

                    if negated:
                        target, share = NEGATION_REDIRECTS.get(emotion, DEFAULT_NEGATION_REDIRECT)
                        scores[target] += value * share
                    else:
                        scores[emotion] += value

        for pattern, emotion, bonus in PATTERN_RULES:
            if pattern.search(text or ""):
                scores[emotion] += bonus

        return scores

    def _matches(self, token: str, keyword: str) -> bool:
        if keyword in token:
            return True
        return len(token) >= self.min_fragment_length and token in keyword


_default_classifier = EmotionClassifier()


def classify(text: str) -> ClassificationResult:
    return _default_classifier.classify(text)
