"""
Content analysis stage.

This module sends the English transcript to Gemini with a prompt covering
four dimensions (emotion, sentiment, intent and summary) and normalises the
JSON reply into an :class:`~pipeline.models.AnalysisResult`.  Missing or
unusable fields are replaced with neutral defaults and recorded in
``defaulted_fields``; only failures of the API call itself are raised.

Long transcripts are truncated before they are sent, preferring to cut at
the end of a sentence.  See :func:`prepare_text`.
"""

from __future__ import annotations

import dataclasses
import logging
import os
from typing import Any, Dict, List, Optional

from .genai_client import GeminiClient, GenerationOptions
from .models import AnalysisResult
from .report_formatter import format_report
from .response_parser import as_float, parse_structured

logger = logging.getLogger(__name__)


REPORT_FILENAME = "detailed_analysis.txt"

MAX_ANALYSIS_CHARS = 12_000
MIN_SENTENCE_CUT = 8_000
SUMMARY_FALLBACK_CHARS = 300

ANALYZE_OPTIONS = GenerationOptions(max_output_tokens=2048, temperature=0.2)

ANALYZE_PROMPT = """You are an expert content analyst specializing in emotion recognition, sentiment analysis, intent classification, and content summarization.

ANALYZE the English transcript below across four dimensions:

1. EMOTION ANALYSIS:
   - Identify the dominant emotional tone (joy, sadness, anger, fear, surprise, disgust, neutral, excitement, frustration, contentment)
   - Provide granular scores for all detected emotions (0.0-1.0)
   - Consider subtle emotional cues and tonal shifts

2. SENTIMENT ANALYSIS:
   - Overall sentiment: positive, neutral, or negative
   - Confidence level (0.0-1.0)
   - Detailed breakdown showing proportion of positive/neutral/negative content
   - Account for sarcasm, irony, and mixed sentiments

3. INTENT CLASSIFICATION:
   - Primary intent from: Educational/Tutorial, Entertainment, Informative/News, Motivational,
     Review/Opinion, Story/Narrative, Religious/Spiritual, Political/Opinion, Social Awareness,
     Personal Experience, Technology/Product Demo, Comedy/Satire, Q&A/Interview,
     Marketing/Promotional, Instructional/How-To
   - Provide scores for all relevant intents (0.0-1.0)
   - Consider secondary intents if applicable

4. CONTENT SUMMARY:
   - Create a concise yet comprehensive summary (2-4 sentences)
   - Capture key themes, main points, and core message
   - Preserve important context and takeaways

OUTPUT FORMAT (strict JSON only, no additional text):
{
  "dominant_emotion": "primary emotion or null if unclear",
  "emotion_confidence": 0.0-1.0,
  "emotion_scores": {
    "emotion_name": 0.0-1.0
  },
  "overall_sentiment": "positive|neutral|negative",
  "sentiment_confidence": 0.0-1.0,
  "sentiment_breakdown": {
    "positive": 0.0-1.0,
    "neutral": 0.0-1.0,
    "negative": 0.0-1.0
  },
  "primary_intent": "intent category or null",
  "intent_confidence": 0.0-1.0,
  "intent_scores": {
    "intent_name": 0.0-1.0
  },
  "secondary_intents": ["intent1", "intent2"],
  "summary": "Concise content summary",
  "key_topics": ["topic1", "topic2", "topic3"],
  "content_type": "monologue|dialogue|lecture|conversation|presentation"
}

ENSURE: All score objects contain relevant entries, sentiment_breakdown sums to 1.0, and all confidence scores are realistic."""


def prepare_text(text: str) -> str:
    """Bound the transcript sent for analysis.

    Text longer than :data:`MAX_ANALYSIS_CHARS` is cut to that length and
    then, if the window contains a period after :data:`MIN_SENTENCE_CUT`,
    trimmed back to (and including) the last one.
    """
    window = text[:MAX_ANALYSIS_CHARS]
    if len(text) > MAX_ANALYSIS_CHARS:
        last_period = window.rfind(".")
        if last_period > MIN_SENTENCE_CUT:
            window = window[: last_period + 1]
    return window


class _Normalizer:
    """Reads fields from a parsed reply and remembers which were defaulted."""

    def __init__(self, data: Dict[str, Any]):
        self.data = data
        self.defaulted: List[str] = []

    def _missing(self, key: str, default):
        self.defaulted.append(key)
        return default

    def label(self, key: str, default: Optional[str]) -> Optional[str]:
        value = self.data.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
        return self._missing(key, default)

    def confidence(self, key: str) -> float:
        value = as_float(self.data.get(key))
        return self._missing(key, 0.0) if value is None else value

    def mapping(self, key: str) -> Dict[str, Any]:
        value = self.data.get(key)
        return dict(value) if isinstance(value, dict) else self._missing(key, {})

    def strings(self, key: str) -> List[str]:
        value = self.data.get(key)
        if not isinstance(value, list):
            return self._missing(key, [])
        return [str(item) for item in value if item is not None]


def normalize_analysis(data: Dict[str, Any], analysed_text: str) -> AnalysisResult:
    """Build an :class:`AnalysisResult` from a parsed reply, applying defaults.

    The returned result has no report path yet.
    """
    fields = _Normalizer(data)
    fallback_summary = analysed_text[:SUMMARY_FALLBACK_CHARS] + "..."
    return AnalysisResult(
        dominant_emotion=fields.label("dominant_emotion", None),
        emotion_confidence=fields.confidence("emotion_confidence"),
        emotion_scores=fields.mapping("emotion_scores"),
        overall_sentiment=fields.label("overall_sentiment", "neutral").lower(),
        sentiment_confidence=fields.confidence("sentiment_confidence"),
        sentiment_breakdown=fields.mapping("sentiment_breakdown"),
        primary_intent=fields.label("primary_intent", None),
        intent_confidence=fields.confidence("intent_confidence"),
        intent_scores=fields.mapping("intent_scores"),
        secondary_intents=fields.strings("secondary_intents"),
        summary=fields.label("summary", fallback_summary),
        key_topics=fields.strings("key_topics"),
        content_type=fields.label("content_type", "unknown"),
        defaulted_fields=fields.defaulted,
    )


def analyze(english_text: str, output_dir: str, client: GeminiClient) -> AnalysisResult:
    """Analyse a transcript and write ``detailed_analysis.txt``.

    Args:
        english_text: The English transcript.
        output_dir: Directory that receives the report.
        client: Gemini client used for generation.

    Returns:
        The normalised analysis, including the report path.

    Raises:
        GenerationError: If the generation request fails.
    """
    logger.info("Starting content analysis")
    text_to_analyze = prepare_text(english_text)
    if len(text_to_analyze) < len(english_text):
        logger.info("Transcript truncated from %d to %d characters", len(english_text), len(text_to_analyze))

    reply = client.generate([ANALYZE_PROMPT, text_to_analyze], ANALYZE_OPTIONS)
    if not reply:
        logger.warning("Empty analysis reply from Gemini")
    data = parse_structured(reply) if reply else {}
    analysis = normalize_analysis(data, text_to_analyze)

    report_path = os.path.join(output_dir, REPORT_FILENAME)
    analysis = dataclasses.replace(analysis, report_file_path=report_path)
    with open(report_path, "w", encoding="utf-8") as f:
        f.write(format_report(analysis))

    if analysis.defaulted_fields:
        logger.info("Analysis fields defaulted: %s", ", ".join(analysis.defaulted_fields))
    logger.info("Analysis complete")
    return analysis
