"""
Gemini emotion backend tests (the SDK is mocked)
"""

from unittest.mock import MagicMock, Mock, patch

import pytest

from emotion_classifier import Emotion
from gemini_client import GeminiEmotionClient, parse_reply


@pytest.fixture
def mock_genai(monkeypatch):
    monkeypatch.delenv("GEMINI_MODEL", raising=False)
    with patch("gemini_client.genai") as genai:
        yield genai


def _reply(text):
    response = Mock()
    response.text = text
    return response


class TestGeminiEmotionClient:
    """Test client construction and classification"""

    def test_missing_api_key(self, mock_genai):
        with pytest.raises(ValueError):
            GeminiEmotionClient(api_key="")

    def test_configures_sdk(self, mock_genai):
        client = GeminiEmotionClient(api_key="secret")
        mock_genai.configure.assert_called_once_with(api_key="secret")
        assert client.model == "gemini-1.5-flash-latest"

    def test_model_from_env(self, mock_genai, monkeypatch):
        monkeypatch.setenv("GEMINI_MODEL", "gemini-2.0-flash")
        client = GeminiEmotionClient(api_key="secret")
        assert client.model == "gemini-2.0-flash"

    def test_falls_through_candidate_models(self, mock_genai):
        model = MagicMock()
        mock_genai.GenerativeModel.side_effect = [RuntimeError("not found"), model]
        client = GeminiEmotionClient(api_key="secret")
        assert client.model == "gemini-1.5-pro-latest"
        assert client.generative_model is model

    def test_no_model_available(self, mock_genai):
        mock_genai.GenerativeModel.side_effect = RuntimeError("not found")
        with pytest.raises(RuntimeError):
            GeminiEmotionClient(api_key="secret")

    def test_classify(self, mock_genai):
        model = mock_genai.GenerativeModel.return_value
        model.generate_content.return_value = _reply('{"emotion": "joy", "confidence": 0.9}')
        client = GeminiEmotionClient(api_key="secret")

        result = client.classify("I just got promoted at work!")

        model.generate_content.assert_called_once_with("I just got promoted at work!")
        assert result == (Emotion.HAPPY, 0.9)


class TestParseReply:
    """Test parsing of model answers"""

    def test_fenced_json(self):
        reply = '```json\n{"emotion": "fear", "confidence": 0.7}\n```'
        assert parse_reply(reply) == (Emotion.FEAR, 0.7)

    def test_confidence_clamped(self):
        assert parse_reply('{"emotion": "sad", "confidence": 3}').confidence == 1.0
        assert parse_reply('{"emotion": "sad", "confidence": 0}').confidence == 0.1

    def test_missing_confidence_uses_floor(self):
        assert parse_reply('{"emotion": "surprise"}') == (Emotion.SURPRISE, 0.1)

    @pytest.mark.parametrize(
        "reply",
        [
            "I think the user is happy",
            '["happy"]',
            '{"confidence": 0.5}',
            '{"emotion": "bored", "confidence": 0.5}',
            '{"emotion": "happy", "confidence": "high"}',
            '{"emotion": "happy", "confidence": NaN}',
            '{"emotion": "happy", "confidence": Infinity}',
            "",
        ],
    )
    def test_malformed_reply(self, reply):
        with pytest.raises(ValueError):
            parse_reply(reply)
