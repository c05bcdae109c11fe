"""
Exception hierarchy for the media analysis pipeline.

Every fatal condition raised by the pipeline derives from
:class:`PipelineError` so the HTTP layer can catch one type and map it to a
status code.  Malformed model output is deliberately absent from this list:
it is absorbed by :mod:`pipeline.response_parser` and the per-field defaults
of the transcription and analysis stages.
"""


class PipelineError(Exception):
    """Base exception for pipeline failures."""

    pass


class ConfigurationError(PipelineError):
    """Raised when the deployment is missing required configuration."""

    pass


class UnsupportedMediaError(PipelineError):
    """Raised when a file is neither audio nor video."""

    def __init__(self, kind: str, path: str):
        super().__init__(f"Unsupported file type: {kind}. Provide audio or video file.")
        self.kind = kind
        self.path = path


class MediaNotFoundError(PipelineError):
    """Raised when the requested media does not exist locally or remotely."""

    pass


class DownloadError(PipelineError):
    """Raised when remote media cannot be fetched."""

    pass


class ExtractionError(PipelineError):
    """Raised when the transcoder fails to extract an audio track."""

    pass


class InferenceError(PipelineError):
    """Base exception for inference provider failures."""

    pass


class UploadError(InferenceError):
    """Raised when the provider rejects an upload."""

    pass


class NoRemoteReferenceError(UploadError):
    """Raised when an upload succeeds but yields no addressable URI."""

    pass


class GenerationError(InferenceError):
    """Raised when a generation request fails."""

    pass
