"""
Orchestration layer for the media analysis pipeline.

This module defines the functions called from the HTTP entrypoint in
:mod:`mediainsight.main`.  They coordinate the steps of the pipeline for a
single request:

* Create the request's output directory, named after the display name.
* Classify the media and reject anything that is not audio or video.
* For videos, extract the audio track (or pass the video through when no
  transcoder is available).
* Transcribe and translate the audio with Gemini.
* Analyse the English transcript with Gemini.

Steps run strictly in order and any fatal error aborts the rest; there is
no partial result.  Missing fields in the model output are not fatal.
"""

from __future__ import annotations

import logging
import os
import re
import uuid
from datetime import datetime, timezone
from typing import Optional

from . import analyzer, audio_processor, config, transcriber
from .errors import UnsupportedMediaError
from .genai_client import GeminiClient
from .media import MediaAsset, MediaKind, ProcessedMedia, resolve_mime_type
from .models import PipelineResult

logger = logging.getLogger(__name__)


def derive_output_name(display_name: str) -> str:
    """Derive an output directory name from a display name.

    The directory part and extension are dropped and whitespace and hyphens
    become underscores, e.g. ``"My Talk-01.mp4"`` -> ``"My_Talk_01"``.
    """
    base = os.path.splitext(os.path.basename(display_name))[0]
    if not base.strip("."):
        # "", "." and ".." would resolve to the output root or its parent
        return "media"
    return re.sub(r"[-\s]", "_", base)


def create_output_directory(display_name: str, output_root: str, request_id: Optional[str] = None) -> str:
    """Create (or reuse) the output directory for a request.

    Requests sharing a display name share a directory unless a
    ``request_id`` is given, in which case it is appended to the name.
    """
    name = derive_output_name(display_name)
    if request_id:
        name = f"{name}_{request_id}"
    out_dir = os.path.join(output_root, name)
    os.makedirs(out_dir, exist_ok=True)
    logger.info("Output directory: %s", out_dir)
    return out_dir


def process_media_file(asset: MediaAsset, output_dir: str) -> ProcessedMedia:
    """Turn an asset into the file that will be submitted to Gemini.

    Raises:
        UnsupportedMediaError: If the asset is neither audio nor video.
        ExtractionError: If audio extraction fails.
    """
    logger.info("Detected file type: %s", asset.kind.value)
    if asset.kind is MediaKind.VIDEO:
        audio_path = audio_processor.extract_audio(asset.local_path, output_dir)
        if audio_path != asset.local_path:
            return ProcessedMedia(audio_path, resolve_mime_type(audio_path, MediaKind.AUDIO))
        # no transcoder: the video itself is submitted
    if asset.kind in (MediaKind.AUDIO, MediaKind.VIDEO):
        mime_type = resolve_mime_type(asset.local_path, asset.kind, asset.declared_mime_type)
        return ProcessedMedia(asset.local_path, mime_type)
    raise UnsupportedMediaError(asset.kind.value, asset.local_path)


def run(
    asset: MediaAsset,
    *,
    client: Optional[GeminiClient] = None,
    output_root: Optional[str] = None,
) -> PipelineResult:
    """Run the full pipeline for one media asset.

    Args:
        asset: The media to process.
        client: Gemini client.  A new one is built from the environment
            when omitted, after the media has been validated.
        output_root: Parent of the per-request output directory.  Defaults
            to ``OUTPUT_ROOT``.

    Returns:
        The assembled :class:`PipelineResult`.

    Raises:
        PipelineError: Any fatal failure, unmodified.
    """
    request_id = uuid.uuid4().hex[:8]
    logger.info("Processing %s (request %s)", asset.display_name, request_id)
    output_dir = create_output_directory(
        asset.display_name,
        output_root or config.get_output_root(),
        request_id if config.unique_output_dirs() else None,
    )
    processed = process_media_file(asset, output_dir)
    if client is None:
        client = GeminiClient()

    transcription = transcriber.transcribe(processed.path, processed.mime_type, output_dir, client)
    analysis = analyzer.analyze(transcription.translated_text, output_dir, client)

    return PipelineResult(
        request_id=request_id,
        asset=asset,
        processed=processed,
        transcription=transcription,
        analysis=analysis,
        output_dir=output_dir,
        model=client.model_name,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
