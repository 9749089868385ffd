from __future__ import annotations

from dataclasses import dataclass, field
import json
import logging
import math
import os
import re
from typing import Any, Optional, Sequence

import google.generativeai as genai

from emotion_classifier import MIN_CONFIDENCE, ClassificationResult, Emotion

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = (
    "You label the emotional tone of short texts. "
    "Answer with a single JSON object and nothing else, shaped as "
    '{"emotion": <label>, "confidence": <number between 0 and 1>}. '
    "The label must be one of: " + ", ".join(e.value for e in Emotion) + ". "
    "Use neutral when no emotion is clearly expressed."
)

_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


@dataclass
class GeminiEmotionClient:
    """
    Emotion classifier backed by a Gemini model, answering in the same shape as
    the keyword classifier.
    """

    api_key: str
    model: str = "gemini-1.5-flash-latest"
    system_prompt: Optional[str] = None
    generative_model: Any = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if not self.api_key:
            raise ValueError("GEMINI_API_KEY is missing.")

        genai.configure(api_key=self.api_key)
        # Allow overriding the model via env (GEMINI_MODEL) without code edits.
        requested_model = os.getenv("GEMINI_MODEL") or self.model
        candidates: Sequence[str] = (
            requested_model,
            "gemini-1.5-pro-latest",
            "gemini-1.0-pro",
            "gemini-pro",
        )

        last_error: Optional[Exception] = None
        for model_name in candidates:
            try:
                self.generative_model = genai.GenerativeModel(
                    model_name,
                    system_instruction=self.system_prompt or DEFAULT_SYSTEM_PROMPT,
                )
                self.model = model_name  # record which one succeeded
                break
            except Exception as exc:
                logger.debug("Gemini model %s unavailable: %s", model_name, exc)
                last_error = exc
        else:
            raise RuntimeError(f"Failed to init Gemini client. Tried models: {candidates}") from last_error

    def classify(self, text: str) -> ClassificationResult:
        response = self.generative_model.generate_content(text)
        return parse_reply(response.text)


def parse_reply(reply: str) -> ClassificationResult:
    """Turn the model's JSON answer into a ClassificationResult, raising ValueError if malformed."""
    body = _FENCE.sub("", (reply or "").strip())
    try:
        payload = json.loads(body)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Gemini reply is not JSON: {reply!r}") from exc
    if not isinstance(payload, dict) or "emotion" not in payload:
        raise ValueError(f"Gemini reply has no emotion: {reply!r}")

    emotion = Emotion.from_label(str(payload["emotion"]))
    try:
        confidence = float(payload.get("confidence", MIN_CONFIDENCE))
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Gemini reply has a bad confidence: {reply!r}") from exc
    if not math.isfinite(confidence):
        raise ValueError(f"Gemini reply has a bad confidence: {reply!r}")
    return ClassificationResult(emotion, min(max(confidence, MIN_CONFIDENCE), 1.0))
