"""
Result types produced by the pipeline stages.

All results are frozen once created.  ``defaulted_fields`` lists the fields
that were filled in because the model omitted them or returned something
unusable, so callers can tell a confident result from a best-effort one.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .media import MediaAsset, ProcessedMedia


@dataclass(frozen=True)
class UploadedRemoteFile:
    name: str
    uri: str
    mime_type: str


@dataclass(frozen=True)
class TranscriptionResult:
    detected_language: str
    language_confidence: float
    raw_text: str
    translated_text: str
    raw_file_path: str
    translated_file_path: str
    defaulted_fields: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class AnalysisResult:
    dominant_emotion: Optional[str]
    emotion_confidence: float
    emotion_scores: Dict[str, Any]
    overall_sentiment: str
    sentiment_confidence: float
    sentiment_breakdown: Dict[str, Any]
    primary_intent: Optional[str]
    intent_confidence: float
    intent_scores: Dict[str, Any]
    secondary_intents: List[str]
    summary: str
    key_topics: List[str]
    content_type: str
    report_file_path: str = ""
    defaulted_fields: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class PipelineResult:
    """Everything produced for one request."""

    request_id: str
    asset: MediaAsset
    processed: ProcessedMedia
    transcription: TranscriptionResult
    analysis: AnalysisResult
    output_dir: str
    model: str
    timestamp: str

    def to_response(self) -> Dict[str, Any]:
        """Render the JSON body returned to HTTP callers."""
        transcription = self.transcription
        analysis = self.analysis
        return {
            "status": "success",
            "model": self.model,
            "device": "gemini-api",
            "compute_type": "cloud",
            "request_id": self.request_id,
            "timestamp": self.timestamp,
            "output_dir": self.output_dir,
            "source": {
                "display_name": self.asset.display_name,
                "kind": self.asset.kind.value,
            },
            "transcription": {
                "detected_language": transcription.detected_language,
                "language_confidence": transcription.language_confidence,
                "raw_transcription": transcription.raw_text,
                "english_transcription": transcription.translated_text,
                "defaulted_fields": list(transcription.defaulted_fields),
            },
            "analysis": {
                "dominant_emotion": analysis.dominant_emotion,
                "emotion_confidence": analysis.emotion_confidence,
                "emotion_scores": analysis.emotion_scores,
                "overall_sentiment": analysis.overall_sentiment,
                "sentiment_confidence": analysis.sentiment_confidence,
                "sentiment_breakdown": analysis.sentiment_breakdown,
                "primary_intent": analysis.primary_intent,
                "intent_confidence": analysis.intent_confidence,
                "intent_scores": analysis.intent_scores,
                "secondary_intents": analysis.secondary_intents,
                "summary": analysis.summary,
                "key_topics": analysis.key_topics,
                "content_type": analysis.content_type,
                "defaulted_fields": list(analysis.defaulted_fields),
            },
            "artifacts": {
                "processed_audio_path": self.processed.path,
                "raw_transcript_path": transcription.raw_file_path,
                "english_transcript_path": transcription.translated_file_path,
                "analysis_report_path": analysis.report_file_path,
            },
        }
