import json

import pytest

from pipeline import analyzer
from pipeline.errors import GenerationError


def test_prepare_text_cuts_at_last_sentence():
    text = "a" * 9500 + "." + "b" * 5499
    assert len(text) == 15000
    assert analyzer.prepare_text(text) == text[:9501]


def test_prepare_text_hard_cut_without_late_period():
    text = "a" * 500 + "." + "b" * 14499
    assert len(text) == 15000
    assert analyzer.prepare_text(text) == text[:12000]


def test_prepare_text_short_text_untouched():
    text = "Short. Text without trimming"
    assert analyzer.prepare_text(text) == text


def test_analyze_full_reply(fake_client, tmp_path):
    fake_client.replies.pop(0)
    result = analyzer.analyze("Hello everyone.", str(tmp_path), fake_client)

    assert result.dominant_emotion == "joy"
    assert result.overall_sentiment == "positive"
    assert result.sentiment_breakdown == {"positive": 0.7, "neutral": 0.2, "negative": 0.1}
    assert result.secondary_intents == ["Informative/News"]
    assert result.key_topics == ["greeting"]
    assert result.content_type == "monologue"
    assert result.defaulted_fields == []
    assert result.report_file_path == str(tmp_path / "detailed_analysis.txt")

    parts, options = fake_client.calls[0]
    assert parts == [analyzer.ANALYZE_PROMPT, "Hello everyone."]
    assert options.max_output_tokens == 2048
    assert options.temperature == 0.2

    report = (tmp_path / "detailed_analysis.txt").read_text(encoding="utf-8")
    assert "Dominant Emotion: joy (Confidence: 80.00%)" in report
    assert report.index("  joy: 80.00%") < report.index("  neutral: 15.00%") < report.index("  surprise: 5.00%")
    assert "Overall Sentiment: POSITIVE (Confidence: 90.00%)" in report
    assert "Secondary Intents: Informative/News" in report
    assert "Content Type: MONOLOGUE" in report
    assert "Key Topics: greeting" in report


def test_missing_emotion_scores(make_client, tmp_path):
    reply = json.dumps({"dominant_emotion": "neutral", "overall_sentiment": "neutral", "summary": "Fine."})
    result = analyzer.analyze("Some text.", str(tmp_path), make_client([reply]))

    assert result.emotion_scores == {}
    assert "emotion_scores" in result.defaulted_fields
    report = (tmp_path / "detailed_analysis.txt").read_text(encoding="utf-8")
    lines = report.splitlines()
    start = lines.index("Emotion Scores:")
    assert lines[start + 1] == ""
    assert lines[start + 2] == ""
    assert lines[start + 3] == "SENTIMENT ANALYSIS"


def test_empty_reply_uses_all_defaults(make_client, tmp_path):
    text = "x" * 400
    result = analyzer.analyze(text, str(tmp_path), make_client(["not json"]))

    assert result.dominant_emotion is None
    assert result.emotion_confidence == 0.0
    assert result.overall_sentiment == "neutral"
    assert result.sentiment_breakdown == {}
    assert result.primary_intent is None
    assert result.intent_scores == {}
    assert result.secondary_intents == []
    assert result.key_topics == []
    assert result.summary == "x" * 300 + "..."
    assert result.content_type == "unknown"
    assert "summary" in result.defaulted_fields
    report = (tmp_path / "detailed_analysis.txt").read_text(encoding="utf-8")
    assert "Dominant Emotion: None (Confidence: 0.00%)" in report
    assert "Content Type: UNKNOWN" in report
    assert "Key Topics" not in report


def test_long_transcript_is_truncated_before_generation(make_client, tmp_path):
    client = make_client(["{}"])
    text = "a" * 9500 + "." + "b" * 5499
    analyzer.analyze(text, str(tmp_path), client)
    parts, _ = client.calls[0]
    assert parts[1] == text[:9501]


def test_sentiment_breakdown_is_not_normalised(make_client, tmp_path):
    reply = json.dumps({"sentiment_breakdown": {"positive": 0.9, "neutral": 0.9, "negative": 0.9}})
    result = analyzer.analyze("Text.", str(tmp_path), make_client([reply]))
    assert result.sentiment_breakdown == {"positive": 0.9, "neutral": 0.9, "negative": 0.9}


def test_wrong_types_are_defaulted(make_client, tmp_path):
    reply = json.dumps({"emotion_scores": [1, 2], "key_topics": "music", "intent_confidence": "high"})
    result = analyzer.analyze("Text.", str(tmp_path), make_client([reply]))
    assert result.emotion_scores == {}
    assert result.key_topics == []
    assert result.intent_confidence == 0.0
    assert {"emotion_scores", "key_topics", "intent_confidence"} <= set(result.defaulted_fields)


def test_generation_failure_propagates(make_client, tmp_path):
    client = make_client()

    def boom(parts, options):
        raise GenerationError("down")

    client.generate = boom
    with pytest.raises(GenerationError):
        analyzer.analyze("Text.", str(tmp_path), client)
    assert not (tmp_path / "detailed_analysis.txt").exists()
