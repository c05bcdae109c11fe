"""
Media classification.

Decides whether a file is audio, video or something the pipeline cannot
handle.  The extension is checked first against fixed sets; files with an
unknown extension fall back to the system content-type table and finally to
the content type declared by the uploader.
"""

from __future__ import annotations

import enum
import mimetypes
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional


MIME_TYPES = {
    ".mp3": "audio/mpeg",
    ".wav": "audio/wav",
    ".flac": "audio/flac",
    ".aac": "audio/aac",
    ".ogg": "audio/ogg",
    ".m4a": "audio/mp4",
    ".wma": "audio/x-ms-wma",
    ".mp4": "video/mp4",
    ".avi": "video/x-msvideo",
    ".mkv": "video/x-matroska",
    ".mov": "video/quicktime",
    ".wmv": "video/x-ms-wmv",
    ".flv": "video/x-flv",
    ".webm": "video/webm",
    ".m4v": "video/x-m4v",
}

AUDIO_EXTENSIONS = {ext for ext, mime in MIME_TYPES.items() if mime.startswith("audio/")}
VIDEO_EXTENSIONS = {ext for ext, mime in MIME_TYPES.items() if mime.startswith("video/")}

DEFAULT_AUDIO_MIME = "audio/mpeg"
DEFAULT_MIME = "application/octet-stream"


class MediaKind(str, enum.Enum):
    AUDIO = "audio"
    VIDEO = "video"
    UNSUPPORTED = "unsupported"


def _kind_from_mime(mime_type: Optional[str]) -> Optional[MediaKind]:
    if not mime_type:
        return None
    if mime_type.startswith("audio/"):
        return MediaKind.AUDIO
    if mime_type.startswith("video/"):
        return MediaKind.VIDEO
    return None


def classify(path: str, declared_mime_type: Optional[str] = None) -> MediaKind:
    """Label a file as audio, video or unsupported.

    Args:
        path: Local path or file name.  Only the name is inspected.
        declared_mime_type: Content type supplied with an upload, consulted
            when neither the extension nor the system lookup decides.

    Returns:
        The :class:`MediaKind`.  Never raises.
    """
    ext = Path(path).suffix.lower()
    if ext in AUDIO_EXTENSIONS:
        return MediaKind.AUDIO
    if ext in VIDEO_EXTENSIONS:
        return MediaKind.VIDEO
    guessed, _ = mimetypes.guess_type(path)
    kind = _kind_from_mime(guessed) or _kind_from_mime(declared_mime_type)
    return kind or MediaKind.UNSUPPORTED


def resolve_mime_type(path: str, kind: MediaKind, declared_mime_type: Optional[str] = None) -> str:
    """Return the content type to send with ``path``.

    Checks the built-in extension table, then the system lookup, then the
    declared content type.  Unknown audio is labelled ``audio/mpeg``;
    anything else unknown is sent as ``application/octet-stream``.
    """
    ext = Path(path).suffix.lower()
    if ext in MIME_TYPES:
        return MIME_TYPES[ext]
    guessed, _ = mimetypes.guess_type(path)
    if guessed:
        return guessed
    if declared_mime_type:
        return declared_mime_type
    return DEFAULT_AUDIO_MIME if kind is MediaKind.AUDIO else DEFAULT_MIME


@dataclass(frozen=True)
class MediaAsset:
    """A media file received by the service.

    ``kind`` is derived from the path and declared content type when the
    asset is created.
    """

    local_path: str
    display_name: str
    declared_mime_type: Optional[str] = None
    kind: MediaKind = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, "kind", classify(self.local_path, self.declared_mime_type))

    @classmethod
    def from_path(cls, path: str, declared_mime_type: Optional[str] = None) -> "MediaAsset":
        local_path = os.path.abspath(path)
        return cls(local_path, os.path.basename(local_path), declared_mime_type)


@dataclass(frozen=True)
class ProcessedMedia:
    """The file that is actually submitted for inference."""

    path: str
    mime_type: str
