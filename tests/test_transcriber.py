import json

import pytest

from pipeline import transcriber
from pipeline.errors import GenerationError


def test_transcribe_normalises_and_writes_files(fake_client, tmp_path):
    result = transcriber.transcribe(str(tmp_path / "a.mp3"), "audio/mpeg", str(tmp_path), fake_client)

    assert result.detected_language == "es"
    assert result.language_confidence == 0.88
    assert result.raw_text == "Hola a todos."
    assert result.translated_text == "Hello everyone."
    assert result.defaulted_fields == []
    assert (tmp_path / "transcription_raw.txt").read_text(encoding="utf-8") == "Hola a todos."
    assert (tmp_path / "transcription_en.txt").read_text(encoding="utf-8") == "Hello everyone."

    assert fake_client.uploads == [(str(tmp_path / "a.mp3"), "audio/mpeg", "a.mp3")]
    parts, options = fake_client.calls[0]
    assert parts[0] == transcriber.TRANSCRIBE_PROMPT
    assert parts[1].uri == "https://files/abc"
    assert options.max_output_tokens == 4096
    assert options.temperature == 0.1


def test_missing_translation_defaults_to_raw(make_client, tmp_path):
    reply = json.dumps({"detected_language": "en", "raw_transcription": "Hello there."})
    result = transcriber.transcribe("a.mp3", "audio/mpeg", str(tmp_path), make_client([reply]))
    assert result.translated_text == result.raw_text == "Hello there."
    assert (tmp_path / "transcription_en.txt").read_text(encoding="utf-8") == "Hello there."
    assert "translated_transcription" in result.defaulted_fields


def test_bad_confidence_defaults(make_client, tmp_path):
    reply = json.dumps({"detected_language": "FR", "language_confidence": "very", "raw_transcription": "Salut"})
    result = transcriber.transcribe("a.mp3", "audio/mpeg", str(tmp_path), make_client([reply]))
    assert result.detected_language == "fr"
    assert result.language_confidence == 0.95
    assert "language_confidence" in result.defaulted_fields


def test_unparseable_reply_still_produces_result(make_client, tmp_path):
    result = transcriber.transcribe("a.mp3", "audio/mpeg", str(tmp_path), make_client(["I cannot help with that."]))
    assert result.detected_language == "en"
    assert result.raw_text == ""
    assert result.translated_text == ""
    assert set(result.defaulted_fields) == {
        "detected_language",
        "language_confidence",
        "raw_transcription",
        "translated_transcription",
    }
    assert (tmp_path / "transcription_raw.txt").exists()


def test_overwrites_previous_transcripts(fake_client, tmp_path):
    (tmp_path / "transcription_raw.txt").write_text("stale")
    transcriber.transcribe("a.mp3", "audio/mpeg", str(tmp_path), fake_client)
    assert (tmp_path / "transcription_raw.txt").read_text(encoding="utf-8") == "Hola a todos."


def test_generation_failure_propagates(make_client, tmp_path):
    client = make_client()

    def boom(parts, options):
        raise GenerationError("down")

    client.generate = boom
    with pytest.raises(GenerationError):
        transcriber.transcribe("a.mp3", "audio/mpeg", str(tmp_path), client)
    assert not (tmp_path / "transcription_raw.txt").exists()
