"""
Transcription stage.

Uploads the processed media to Gemini and asks for a punctuated transcript,
the spoken language and an idiomatic English translation in one JSON reply.
Both transcripts are written to the request's output directory.
"""

from __future__ import annotations

import logging
import os
from typing import List

from .genai_client import GeminiClient, GenerationOptions
from .models import TranscriptionResult
from .response_parser import as_float, parse_structured

logger = logging.getLogger(__name__)


RAW_TRANSCRIPT_FILENAME = "transcription_raw.txt"
ENGLISH_TRANSCRIPT_FILENAME = "transcription_en.txt"

DEFAULT_LANGUAGE = "en"
DEFAULT_LANGUAGE_CONFIDENCE = 0.95

TRANSCRIBE_OPTIONS = GenerationOptions(max_output_tokens=4096, temperature=0.1)

TRANSCRIBE_PROMPT = """You are an expert audio transcription system. Your task is to:

1. Accurately transcribe the audio with proper punctuation, capitalization, and formatting
2. Detect the spoken language with high confidence
3. If not English, provide a natural, context-aware English translation

CRITICAL INSTRUCTIONS:
- Preserve speaker intent, tone, and nuance
- Use proper sentence structure and paragraph breaks for readability
- Maintain technical terms, names, and domain-specific vocabulary accurately
- For non-English content, translate idiomatically (not word-for-word)
- Handle multiple speakers, background noise, and accents appropriately

OUTPUT FORMAT (strict JSON only, no additional text):
{
  "detected_language": "ISO-639-1 code (e.g., 'en', 'es', 'hi', 'fr')",
  "language_confidence": 0.0-1.0,
  "raw_transcription": "Complete transcription in original language",
  "translated_transcription": "Natural English translation or same as raw if already English"
}"""


def _text_field(data: dict, key: str, defaulted: List[str]) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        defaulted.append(key)
        return ""
    return value.strip()


def normalize_transcription(data: dict) -> dict:
    """Apply defaults to a parsed transcription reply.

    Returns:
        A dict with ``detected_language``, ``language_confidence``,
        ``raw_text``, ``translated_text`` and ``defaulted_fields``.
    """
    defaulted: List[str] = []

    language = data.get("detected_language")
    if isinstance(language, str) and language.strip():
        language = language.strip().lower()
    else:
        defaulted.append("detected_language")
        language = DEFAULT_LANGUAGE

    confidence = as_float(data.get("language_confidence"))
    if confidence is None:
        defaulted.append("language_confidence")
        confidence = DEFAULT_LANGUAGE_CONFIDENCE

    raw_text = _text_field(data, "raw_transcription", defaulted)
    translated_text = _text_field(data, "translated_transcription", defaulted)
    if not translated_text:
        translated_text = raw_text

    return {
        "detected_language": language,
        "language_confidence": confidence,
        "raw_text": raw_text,
        "translated_text": translated_text,
        "defaulted_fields": defaulted,
    }


def _write_text(path: str, text: str) -> None:
    with open(path, "w", encoding="utf-8") as f:
        f.write(text)


def transcribe(media_path: str, mime_type: str, output_dir: str, client: GeminiClient) -> TranscriptionResult:
    """Transcribe and translate a media file.

    Args:
        media_path: Audio (or video) file to submit.
        mime_type: Content type of ``media_path``.
        output_dir: Directory that receives the transcript files.
        client: Gemini client used for upload and generation.

    Returns:
        The normalised :class:`TranscriptionResult`.

    Raises:
        UploadError: If the media cannot be uploaded.
        GenerationError: If the generation request fails.
    """
    remote_file = client.upload_and_reference(media_path, mime_type, os.path.basename(media_path))
    text = client.generate([TRANSCRIBE_PROMPT, remote_file], TRANSCRIBE_OPTIONS)
    if not text:
        logger.warning("Empty transcription reply for %s", media_path)
    data = parse_structured(text) if text else {}
    fields = normalize_transcription(data)

    raw_path = os.path.join(output_dir, RAW_TRANSCRIPT_FILENAME)
    en_path = os.path.join(output_dir, ENGLISH_TRANSCRIPT_FILENAME)
    _write_text(raw_path, fields["raw_text"])
    _write_text(en_path, fields["translated_text"])

    if fields["defaulted_fields"]:
        logger.info("Transcription fields defaulted: %s", ", ".join(fields["defaulted_fields"]))
    logger.info(
        "Transcription complete. Language: %s (%.2f%%)",
        fields["detected_language"],
        fields["language_confidence"] * 100,
    )
    return TranscriptionResult(
        raw_file_path=raw_path,
        translated_file_path=en_path,
        **fields,
    )
