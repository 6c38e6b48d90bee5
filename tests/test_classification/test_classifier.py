"""
Unit tests for clip classifiers.

Note: The Gemini classifier tests use mocked LLM responses to avoid API costs.
"""

import json
from unittest.mock import Mock, patch

import pytest

from feedrank.classification.classifier import GeminiClipClassifier, KeywordClassifier
from feedrank.models.clip import Clip


def _clip(**kwargs):
    return Clip(clip_id="clip-1", created_at="2024-06-15T10:00:00Z", **kwargs)


@pytest.fixture
def mock_classifier():
    """Create classifier with mocked Gemini API."""
    with patch('feedrank.classification.classifier.genai'):
        classifier = GeminiClipClassifier(
            api_key="test-key",
            categories=["comedy", "music"],
            model_name="gemini-1.5-flash",
            max_retries=2
        )
        return classifier


def test_keyword_first_match_wins():
    classifier = KeywordClassifier({"comedy": ["joke"], "music": ["song"]})

    assert classifier.classify(_clip(title="A joke about a song")) == "comedy"
    assert classifier.classify(_clip(tags=["SONG"])) == "music"
    assert classifier.classify(_clip(title="Quiet morning")) is None
    assert classifier.classify(_clip()) is None


def test_keyword_default_categories():
    classifier = KeywordClassifier()

    assert "tech" in classifier.categories
    assert classifier.classify(_clip(captions="breaking news from the council")) == "news"


def test_gemini_empty_clip_skips_api(mock_classifier):
    assert mock_classifier.classify(_clip()) is None
    mock_classifier.model.generate_content.assert_not_called()


def test_gemini_classify(mock_classifier):
    mock_classifier.model.generate_content.return_value = Mock(
        text=json.dumps({"category": "Music"})
    )

    assert mock_classifier.classify(_clip(title="New guitar riff")) == "music"


def test_parse_llm_response_null_category(mock_classifier):
    assert mock_classifier._parse_llm_response(json.dumps({"category": None}), "clip-1") is None


def test_parse_llm_response_unknown_category(mock_classifier):
    """Test categories outside the allowed list are discarded."""
    response = json.dumps({"category": "politics"})
    assert mock_classifier._parse_llm_response(response, "clip-1") is None


def test_parse_llm_response_invalid_json(mock_classifier):
    with pytest.raises(json.JSONDecodeError):
        mock_classifier._parse_llm_response("not json", "clip-1")


def test_gemini_retries_then_gives_up(mock_classifier):
    """Test API errors are retried and the clip is left unclassified."""
    mock_classifier.model.generate_content.side_effect = RuntimeError("quota exceeded")

    assert mock_classifier.classify(_clip(title="funny story")) is None
    assert mock_classifier.model.generate_content.call_count == 2


def test_gemini_recovers_after_bad_json(mock_classifier):
    mock_classifier.model.generate_content.side_effect = [
        Mock(text="{oops"),
        Mock(text=json.dumps({"category": "comedy"})),
    ]

    assert mock_classifier.classify(_clip(title="funny story")) == "comedy"
