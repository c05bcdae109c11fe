"""
Human-readable analysis report.

Renders an :class:`~pipeline.models.AnalysisResult` into the fixed plain
text layout stored as ``detailed_analysis.txt``.  Emotion and intent scores
are listed highest first; the sentiment breakdown keeps the order the model
returned it in.
"""

from typing import Any, Dict, Iterable, List, Tuple

from .models import AnalysisResult
from .response_parser import as_float

WIDTH = 70
TITLE = "COMPREHENSIVE MEDIA ANALYSIS (Gemini)"


def _percent(value: Any) -> str:
    return f"{(as_float(value) or 0.0) * 100:.2f}%"


def _sorted_scores(scores: Dict[str, Any]) -> List[Tuple[str, Any]]:
    return sorted(scores.items(), key=lambda item: as_float(item[1]) or 0.0, reverse=True)


def _score_lines(items: Iterable[Tuple[str, Any]]) -> List[str]:
    return [f"  {name}: {_percent(value)}" for name, value in items]


def _section(title: str) -> List[str]:
    return [title, "-" * WIDTH]


def format_report(analysis: AnalysisResult) -> str:
    """Render the analysis report.

    Args:
        analysis: The normalised analysis.

    Returns:
        The report text, lines joined with ``\\n``.
    """
    lines: List[str] = ["=" * WIDTH, TITLE, "=" * WIDTH, ""]

    lines += _section("EMOTIONAL ANALYSIS")
    lines.append(
        f"Dominant Emotion: {analysis.dominant_emotion} "
        f"(Confidence: {_percent(analysis.emotion_confidence)})"
    )
    lines += ["", "Emotion Scores:"]
    lines += _score_lines(_sorted_scores(analysis.emotion_scores))

    lines += ["", ""]
    lines += _section("SENTIMENT ANALYSIS")
    lines.append(
        f"Overall Sentiment: {str(analysis.overall_sentiment).upper()} "
        f"(Confidence: {_percent(analysis.sentiment_confidence)})"
    )
    lines += ["", "Sentiment Breakdown:"]
    lines += _score_lines(analysis.sentiment_breakdown.items())

    lines += ["", ""]
    lines += _section("INTENT CLASSIFICATION")
    lines.append(
        f"Primary Intent: {analysis.primary_intent} "
        f"(Confidence: {_percent(analysis.intent_confidence)})"
    )
    if analysis.secondary_intents:
        lines.append(f"Secondary Intents: {', '.join(analysis.secondary_intents)}")
    lines += ["", "Intent Scores:"]
    lines += _score_lines(_sorted_scores(analysis.intent_scores))

    lines += ["", ""]
    lines += _section("CONTENT SUMMARY")
    lines += [f"Content Type: {str(analysis.content_type).upper()}", ""]
    lines += [analysis.summary, ""]
    if analysis.key_topics:
        lines.append(f"Key Topics: {', '.join(analysis.key_topics)}")
    return "\n".join(lines)
