"""
Custom exception hierarchy for VoiceLog.

Provides structured error types so callers can tell local validation failures
apart from backend and transcription failures.
All exceptions inherit from VoiceLogError for easy catching.
"""


class VoiceLogError(Exception):
    """
    Base exception for all VoiceLog errors.
    All custom exceptions should inherit from this class.
    """

    def __init__(self, message: str, context: dict | None = None):
        """
        Initialize VoiceLog error.
        Args:
            message: Error message
            context: Optional context dictionary with additional error details
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}


class ValidationError(VoiceLogError):
    """
    Validation errors.
    Raised before any gateway call when input is invalid (e.g. blank text).
    """

    pass


class CategoryMismatchError(ValidationError):
    """
    Raised when a workflow operation targets a note whose category has no workflow.
    """

    pass


class NotAuthenticatedError(VoiceLogError):
    """
    Raised when a mutation is attempted without a signed-in session.
    """

    pass


class NotAuthorizedError(VoiceLogError):
    """
    Raised when a non-owner tries to edit or delete a note.
    """

    pass


class NotFoundError(VoiceLogError):
    """
    Resource not found errors.
    Raised when a requested note doesn't exist (or no row matched a write).
    """

    pass


class GatewayError(VoiceLogError):
    """
    Persistence gateway errors.
    Raised when the backing store fails on insert, update, delete or query.
    """

    pass


class TranscriptionError(VoiceLogError):
    """
    Base exception for speech-to-text failures.
    Kept separate from GatewayError so the user can re-record instead of re-saving.
    """

    pass


class NoSpeechDetectedError(TranscriptionError):
    """Raised when the transcription service returns no text."""

    pass


class UnsupportedFormatError(TranscriptionError):
    """Raised when the audio MIME type is not accepted."""

    pass


class TranscriptionServiceError(TranscriptionError):
    """Raised when the transcription backend fails (API errors, timeouts, etc.)."""

    pass


class ConfigurationError(VoiceLogError):
    """
    Configuration errors.
    Raised when configuration is invalid or missing required values.
    """

    pass
