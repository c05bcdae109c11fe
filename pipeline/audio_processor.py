"""
Audio extraction utilities.

Video uploads are reduced to a standalone MP3 track before they are sent to
Gemini.  Conversion runs the `ffmpeg` executable directly: the video stream
is dropped and the audio is re-encoded with libmp3lame, streaming from
input to output.  When no ffmpeg executable can be located the video is
passed through untouched; Gemini accepts video files directly, so this is a
fallback rather than an error.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from typing import List, Optional

from . import config
from .errors import ExtractionError

logger = logging.getLogger(__name__)


EXTRACTED_AUDIO_FILENAME = "extracted_audio.mp3"
# libmp3lame VBR quality 2 (~190 kbps)
MP3_QUALITY = "2"


def find_ffmpeg() -> Optional[str]:
    """Locate the transcoder.

    Returns:
        The ``FFMPEG_PATH`` override if set, otherwise ``ffmpeg`` from
        ``PATH``, otherwise ``None``.  An override is returned even if it
        does not exist so that a misconfiguration fails loudly.
    """
    return config.get_ffmpeg_path() or shutil.which("ffmpeg")


def build_command(ffmpeg: str, video_path: str, out_path: str) -> List[str]:
    # -y overwrites, -vn drops the video stream
    return [
        ffmpeg,
        "-y",
        "-i", video_path,
        "-vn",
        "-acodec", "libmp3lame",
        "-q:a", MP3_QUALITY,
        "-loglevel", "error",
        out_path,
    ]


def extract_audio(video_path: str, output_dir: str, *, output_filename: str = EXTRACTED_AUDIO_FILENAME) -> str:
    """Extract the audio track of a video into ``output_dir``.

    Args:
        video_path: Path to the source video.
        output_dir: Directory that receives the extracted track.  An
            existing file with the same name is overwritten.
        output_filename: Name of the MP3 written into ``output_dir``.

    Returns:
        The path to the extracted MP3, or ``video_path`` unchanged when no
        transcoder is available.

    Raises:
        ExtractionError: If the transcoder is available but fails, including
            when the video has no audio stream.
    """
    ffmpeg = find_ffmpeg()
    if not ffmpeg:
        logger.warning("FFmpeg not available; will upload video directly to Gemini")
        return video_path

    os.makedirs(output_dir, exist_ok=True)
    out_path = os.path.join(output_dir, output_filename)
    cmd = build_command(ffmpeg, video_path, out_path)
    logger.info("Extracting audio: %s", " ".join(cmd))
    try:
        subprocess.run(cmd, check=True, capture_output=True, text=True)
    except subprocess.CalledProcessError as exc:
        error_message = (exc.stderr or "").strip() or f"ffmpeg exited with {exc.returncode}"
        logger.error("Audio extraction failed for %s: %s", video_path, error_message)
        raise ExtractionError(f"Audio extraction failed: {error_message}") from exc
    except OSError as exc:
        logger.error("Could not run %s: %s", ffmpeg, exc)
        raise ExtractionError(f"Audio extraction failed: {exc}") from exc
    logger.info("Extracted audio to %s", out_path)
    return out_path
