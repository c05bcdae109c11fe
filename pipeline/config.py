"""
Environment configuration for the pipeline.

All settings come from environment variables and are read each time a
helper is called, so a running service picks up the values it was started
with and tests can override them with ``monkeypatch.setenv``.

* ``GOOGLE_API_KEY`` / ``GEMINI_API_KEY`` / ``GENAI_API_KEY`` – credential
  for the Gemini API (first non-empty wins).  Required.
* ``GEMINI_MODEL`` – model identifier (default ``gemini-2.0-flash-exp``).
* ``FFMPEG_PATH`` – explicit location of the ffmpeg executable.
* ``OUTPUT_ROOT`` / ``UPLOAD_ROOT`` – where artifacts and uploads are kept.
* ``INFERENCE_TIMEOUT`` / ``DOWNLOAD_TIMEOUT`` – request timeouts in seconds.
* ``UNIQUE_OUTPUT_DIRS`` – set to ``true`` to suffix output directories with
  the request id.
"""

from __future__ import annotations

import os
from typing import Optional

from .errors import ConfigurationError

DEFAULT_MODEL = "gemini-2.0-flash-exp"
DEFAULT_OUTPUT_ROOT = os.path.join("public", "output")
DEFAULT_UPLOAD_ROOT = os.path.join("public", "uploads")
DEFAULT_INFERENCE_TIMEOUT = 600.0
DEFAULT_DOWNLOAD_TIMEOUT = 120.0

API_KEY_ENV_VARS = ("GOOGLE_API_KEY", "GEMINI_API_KEY", "GENAI_API_KEY")


def get_api_key(api_key: Optional[str] = None) -> str:
    """Resolve the Gemini credential.

    Args:
        api_key: Explicit key.  Returned unchanged when given.

    Returns:
        The API key string.

    Raises:
        ConfigurationError: If no key is configured.
    """
    if api_key:
        return api_key
    for env_var in API_KEY_ENV_VARS:
        value = os.environ.get(env_var, "").strip()
        if value:
            return value
    raise ConfigurationError(
        "Set GOOGLE_API_KEY or GEMINI_API_KEY env var for Gemini API"
    )


def get_model_name() -> str:
    return os.environ.get("GEMINI_MODEL", "").strip() or DEFAULT_MODEL


def get_ffmpeg_path() -> Optional[str]:
    """Return the configured ffmpeg override, or ``None`` when unset."""
    value = os.environ.get("FFMPEG_PATH", "").strip()
    return value or None


def get_output_root() -> str:
    return os.path.abspath(os.environ.get("OUTPUT_ROOT", DEFAULT_OUTPUT_ROOT))


def get_upload_root() -> str:
    return os.path.abspath(os.environ.get("UPLOAD_ROOT", DEFAULT_UPLOAD_ROOT))


def _get_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc


def get_inference_timeout() -> float:
    return _get_float("INFERENCE_TIMEOUT", DEFAULT_INFERENCE_TIMEOUT)


def get_download_timeout() -> float:
    return _get_float("DOWNLOAD_TIMEOUT", DEFAULT_DOWNLOAD_TIMEOUT)


def unique_output_dirs() -> bool:
    return os.environ.get("UNIQUE_OUTPUT_DIRS", "false").lower() == "true"
