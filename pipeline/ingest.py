"""
Request ingestion.

Media reaches the pipeline in one of three ways: as an uploaded file, as a
path already on the local filesystem, or as a URL to download.  Each helper
here returns a local path (and for downloads, a display name) suitable for
:class:`~pipeline.media.MediaAsset`.  Uploaded and downloaded files are
stored under a short random name so they never collide.
"""

from __future__ import annotations

import logging
import os
import shutil
import uuid
from typing import BinaryIO, Tuple
from urllib.parse import urlparse

import requests

from . import config
from .errors import DownloadError, MediaNotFoundError

logger = logging.getLogger(__name__)


DOWNLOAD_CHUNK_SIZE = 1 << 20


def _random_name(ext: str) -> str:
    return f"{uuid.uuid4().hex[:8]}{ext}"


def save_upload(stream: BinaryIO, filename: str, upload_root: str) -> str:
    """Persist an uploaded file under ``upload_root``.

    Args:
        stream: Readable binary stream with the upload body.
        filename: Original file name; only its extension is kept.
        upload_root: Directory for uploads.  Created if missing.

    Returns:
        The path of the saved file.
    """
    os.makedirs(upload_root, exist_ok=True)
    out_path = os.path.join(upload_root, _random_name(os.path.splitext(filename)[1]))
    with open(out_path, "wb") as f:
        shutil.copyfileobj(stream, f)
    logger.info("Saved upload: %s", out_path)
    return out_path


def resolve_local_media(path: str) -> str:
    """Return the absolute path of a local media file.

    Raises:
        MediaNotFoundError: If the file does not exist.
    """
    resolved = os.path.abspath(path)
    if not os.path.isfile(resolved):
        raise MediaNotFoundError(f"Media file not found: {resolved}")
    return resolved


def download_media(url: str, upload_root: str) -> Tuple[str, str]:
    """Download remote media into ``upload_root``.

    The request is made once; connection errors, timeouts and HTTP error
    statuses all fail the request.

    Args:
        url: HTTP(S) URL of the media.
        upload_root: Directory for downloads.  Created if missing.

    Returns:
        ``(local_path, display_name)``; the display name is the last path
        segment of the URL, or the local file name if the URL has none.

    Raises:
        MediaNotFoundError: If the server answers 404.
        DownloadError: For any other failure.
    """
    url_path = urlparse(url).path
    ext = os.path.splitext(url_path)[1]
    os.makedirs(upload_root, exist_ok=True)
    out_path = os.path.join(upload_root, _random_name(ext))

    try:
        response = requests.get(url, stream=True, timeout=config.get_download_timeout())
    except requests.RequestException as exc:
        raise DownloadError(f"Failed to download {url}: {exc}") from exc

    with response:
        if response.status_code == 404:
            raise MediaNotFoundError(f"Remote media not found: {url}")
        if not response.ok:
            raise DownloadError(f"Failed to download: {response.status_code}")
        try:
            with open(out_path, "wb") as f:
                for chunk in response.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE):
                    f.write(chunk)
        except (requests.RequestException, OSError) as exc:
            raise DownloadError(f"Failed to download {url}: {exc}") from exc

    logger.info("Downloaded external media: %s", out_path)
    display_name = os.path.basename(url_path) or os.path.basename(out_path)
    return out_path, display_name
