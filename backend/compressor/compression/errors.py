"""Errors raised by the compression pipeline.

Each error carries the HTTP status and a short ``error_type`` code so the API
layer can tell "bad input" apart from "encoder failed" and "server could not
write files" without inspecting messages.
"""
from typing import Optional


class CompressionError(Exception):
    status_code = 500
    error_type = "compression_failed"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(CompressionError):
    """The request itself is unusable (empty file, unsupported type, bad level)."""

    status_code = 400
    error_type = "invalid_request"


class UploadTooLargeError(ValidationError):
    status_code = 413
    error_type = "upload_too_large"


class StagingError(CompressionError):
    """The upload could not be written to the staging directory."""

    error_type = "staging_failed"


class EncodingError(CompressionError):
    """The encoder exited non-zero or produced no output file."""

    error_type = "encoding_failed"

    def __init__(self, message: str, diagnostics: str = "", exit_code: Optional[int] = None):
        super().__init__(message)
        self.diagnostics = diagnostics
        self.exit_code = exit_code


class EncoderTimeoutError(EncodingError):
    status_code = 504
    error_type = "encoder_timeout"


class EncoderUnavailableError(EncodingError):
    error_type = "encoder_unavailable"


class InternalInvariantError(CompressionError):
    """A state the classifier should have made unreachable."""

    error_type = "internal_error"
