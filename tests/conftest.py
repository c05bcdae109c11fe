import json

import pytest

from pipeline.models import UploadedRemoteFile


class FakeGeminiClient:
    """Stands in for GeminiClient; replies are returned in order."""

    model_name = "fake-model"

    def __init__(self, replies=None):
        self.replies = list(replies or [])
        self.uploads = []
        self.calls = []

    def upload_and_reference(self, local_path, mime_type, display_name=None):
        self.uploads.append((local_path, mime_type, display_name))
        return UploadedRemoteFile(name="files/abc", uri="https://files/abc", mime_type=mime_type)

    def generate(self, parts, options):
        self.calls.append((list(parts), options))
        return self.replies.pop(0) if self.replies else ""


TRANSCRIPTION_REPLY = json.dumps(
    {
        "detected_language": " ES ",
        "language_confidence": 0.88,
        "raw_transcription": " Hola a todos. ",
        "translated_transcription": "Hello everyone.",
    }
)

ANALYSIS_REPLY = "```json\n" + json.dumps(
    {
        "dominant_emotion": "joy",
        "emotion_confidence": 0.8,
        "emotion_scores": {"joy": 0.8, "neutral": 0.15, "surprise": 0.05},
        "overall_sentiment": "positive",
        "sentiment_confidence": 0.9,
        "sentiment_breakdown": {"positive": 0.7, "neutral": 0.2, "negative": 0.1},
        "primary_intent": "Entertainment",
        "intent_confidence": 0.6,
        "intent_scores": {"Entertainment": 0.6, "Informative/News": 0.3},
        "secondary_intents": ["Informative/News"],
        "summary": "A friendly greeting.",
        "key_topics": ["greeting"],
        "content_type": "monologue",
    }
) + "\n```"


@pytest.fixture
def make_client():
    return FakeGeminiClient


@pytest.fixture
def fake_client():
    return FakeGeminiClient([TRANSCRIPTION_REPLY, ANALYSIS_REPLY])


@pytest.fixture
def no_ffmpeg(monkeypatch):
    import pipeline.audio_processor as ap

    monkeypatch.delenv("FFMPEG_PATH", raising=False)
    monkeypatch.setattr(ap.shutil, "which", lambda name: None)
