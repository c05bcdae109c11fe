"""
Thin wrapper around the Gemini API.

The client uploads media once per request, resolves a stable URI for the
uploaded file and issues generation requests made of text and file parts.
It uses the ``google-generativeai`` library.  Response objects differ
between SDK versions and call types, so text is pulled out through a chain
of small extractor classes; new response shapes only need a new extractor
appended to :data:`TEXT_EXTRACTORS`.

Usage::

    from pipeline.genai_client import GeminiClient, GenerationOptions

    client = GeminiClient()
    ref = client.upload_and_reference("talk.mp3", "audio/mpeg", "talk.mp3")
    text = client.generate(["Transcribe this.", ref], GenerationOptions(4096, 0.1))
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Union

import google.generativeai as genai

from . import config
from .errors import GenerationError, NoRemoteReferenceError, UploadError
from .models import UploadedRemoteFile

logger = logging.getLogger(__name__)

Part = Union[str, UploadedRemoteFile]

FILE_POLL_INTERVAL = 2.0


@dataclass(frozen=True)
class GenerationOptions:
    max_output_tokens: int
    temperature: float

    def as_dict(self) -> Dict[str, Any]:
        return {
            "max_output_tokens": self.max_output_tokens,
            "temperature": self.temperature,
        }


class TextExtractor:
    """Pull the reply text out of one known response shape."""

    def extract(self, response: Any) -> Optional[str]:
        raise NotImplementedError


class OutputTextExtractor(TextExtractor):
    def extract(self, response: Any) -> Optional[str]:
        value = getattr(response, "output_text", None)
        return value if isinstance(value, str) else None


class TextAccessorExtractor(TextExtractor):
    """``response.text`` as a property or a method."""

    def extract(self, response: Any) -> Optional[str]:
        if isinstance(response, (str, dict)):
            return None
        value = getattr(response, "text", None)
        if callable(value):
            value = value()
        return value if isinstance(value, str) else None


class NestedResponseExtractor(TextExtractor):
    """Some call types wrap the payload in a ``response`` attribute."""

    def __init__(self, inner: Sequence[TextExtractor]):
        self.inner = list(inner)

    def extract(self, response: Any) -> Optional[str]:
        nested = getattr(response, "response", None)
        if nested is None:
            return None
        for extractor in self.inner:
            text = extractor.extract(nested)
            if text:
                return text
        return None


class CandidatePartsExtractor(TextExtractor):
    """Join the text parts of the first candidate."""

    def extract(self, response: Any) -> Optional[str]:
        candidates = getattr(response, "candidates", None)
        if not candidates:
            return None
        content = getattr(candidates[0], "content", None)
        parts = getattr(content, "parts", None) or []
        texts = [p.text for p in parts if isinstance(getattr(p, "text", None), str)]
        return "".join(texts) or None


class MappingExtractor(TextExtractor):
    """Plain ``dict`` payloads, e.g. from the REST API."""

    def extract(self, response: Any) -> Optional[str]:
        if isinstance(response, str):
            return response
        if not isinstance(response, dict):
            return None
        for key in ("output_text", "text"):
            if isinstance(response.get(key), str):
                return response[key]
        candidates = response.get("candidates") or []
        if not candidates:
            return None
        parts = (candidates[0].get("content") or {}).get("parts") or []
        texts = [p["text"] for p in parts if isinstance(p.get("text"), str)]
        return "".join(texts) or None


TEXT_EXTRACTORS: List[TextExtractor] = [
    OutputTextExtractor(),
    TextAccessorExtractor(),
    NestedResponseExtractor([OutputTextExtractor(), TextAccessorExtractor()]),
    CandidatePartsExtractor(),
    MappingExtractor(),
]


def extract_text(response: Any, extractors: Sequence[TextExtractor] = TEXT_EXTRACTORS) -> str:
    """Return the reply text of ``response``, or ``""`` if none is found."""
    for extractor in extractors:
        try:
            text = extractor.extract(response)
        except (AttributeError, IndexError, KeyError, TypeError, ValueError) as exc:
            # response.text raises ValueError when a candidate was blocked
            logger.debug("%s could not read response: %s", type(extractor).__name__, exc)
            continue
        if text:
            return text
    logger.warning("No text found in Gemini response of type %s", type(response).__name__)
    return ""


def _state_name(file_meta: Any) -> Optional[str]:
    state = getattr(file_meta, "state", None)
    name = getattr(state, "name", state)
    return name if isinstance(name, str) else None


class GeminiClient:
    """Gemini API access bound to one credential and one model.

    Args:
        api_key: Explicit credential.  Defaults to the environment.
        model_name: Model identifier.  Defaults to ``GEMINI_MODEL``.
        timeout: Per-request timeout in seconds.  Defaults to
            ``INFERENCE_TIMEOUT``.

    Raises:
        ConfigurationError: If no credential is configured.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model_name: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.api_key = config.get_api_key(api_key)
        self.model_name = model_name or config.get_model_name()
        self.timeout = timeout if timeout is not None else config.get_inference_timeout()
        genai.configure(api_key=self.api_key)
        self._model = genai.GenerativeModel(self.model_name)

    def upload_and_reference(
        self, local_path: str, mime_type: str, display_name: Optional[str] = None
    ) -> UploadedRemoteFile:
        """Upload a media file and resolve its URI.

        Args:
            local_path: File to upload.
            mime_type: Content type sent with the upload.
            display_name: Label shown by the provider.  Defaults to the
                file's base name.

        Returns:
            A handle referencing the uploaded file.

        Raises:
            UploadError: If the provider rejects the upload.
            NoRemoteReferenceError: If no URI could be resolved.
        """
        display_name = display_name or os.path.basename(local_path)
        logger.info("Uploading file for transcription: %s", local_path)
        try:
            uploaded = genai.upload_file(local_path, mime_type=mime_type, display_name=display_name)
            name = getattr(uploaded, "name", None)
            file_meta = genai.get_file(name) if name else uploaded
            file_meta = self._wait_until_active(file_meta)
        except UploadError:
            raise
        except Exception as exc:
            raise UploadError(f"Gemini upload failed for {local_path}: {exc}") from exc

        uri = getattr(file_meta, "uri", None)
        if not uri:
            raise NoRemoteReferenceError("Failed to obtain uploaded file URI from Gemini")
        remote_mime = getattr(file_meta, "mime_type", None) or mime_type
        logger.info("Uploaded %s as %s (%s)", display_name, uri, remote_mime)
        return UploadedRemoteFile(name=getattr(file_meta, "name", "") or "", uri=uri, mime_type=remote_mime)

    def _wait_until_active(self, file_meta: Any) -> Any:
        """Poll until the provider has finished processing an upload.

        Video uploads stay in the ``PROCESSING`` state for a while and
        cannot be referenced until they are ``ACTIVE``.
        """
        deadline = time.monotonic() + self.timeout
        while _state_name(file_meta) == "PROCESSING":
            if time.monotonic() > deadline:
                raise UploadError(f"Gemini file {file_meta.name} still processing after {self.timeout}s")
            time.sleep(FILE_POLL_INTERVAL)
            file_meta = genai.get_file(file_meta.name)
        if _state_name(file_meta) == "FAILED":
            raise UploadError(f"Gemini file processing failed for {file_meta.name}")
        return file_meta

    def generate(self, parts: Sequence[Part], options: GenerationOptions) -> str:
        """Run one generation request.

        Args:
            parts: Ordered prompt parts: plain strings and/or uploaded
                file references.
            options: Output ceiling and sampling temperature.

        Returns:
            The reply text, or ``""`` if the response carried none.

        Raises:
            GenerationError: If the request fails.
        """
        contents = [self._to_part(part) for part in parts]
        logger.info(
            "Calling generative model %s (max_output_tokens=%d, temperature=%.2f)",
            self.model_name,
            options.max_output_tokens,
            options.temperature,
        )
        try:
            response = self._model.generate_content(
                contents,
                generation_config=options.as_dict(),
                request_options={"timeout": self.timeout},
            )
        except Exception as exc:
            raise GenerationError(f"Gemini generation failed: {exc}") from exc
        return extract_text(response)

    @staticmethod
    def _to_part(part: Part) -> Any:
        if isinstance(part, UploadedRemoteFile):
            return {"file_data": {"file_uri": part.uri, "mime_type": part.mime_type}}
        return part
