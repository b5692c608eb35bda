"""Utility modules for VoiceLog."""

from voicelog.utils.exceptions import (
    CategoryMismatchError,
    ConfigurationError,
    GatewayError,
    NoSpeechDetectedError,
    NotAuthenticatedError,
    NotAuthorizedError,
    NotFoundError,
    TranscriptionError,
    TranscriptionServiceError,
    UnsupportedFormatError,
    ValidationError,
    VoiceLogError,
)
from voicelog.utils.id_generator import generate_note_id, generate_subscription_id
from voicelog.utils.logger import get_logger, setup_logging

__all__ = [
    # Logging
    "get_logger",
    "setup_logging",
    # ID Generators
    "generate_note_id",
    "generate_subscription_id",
    # Exceptions
    "VoiceLogError",
    "ValidationError",
    "CategoryMismatchError",
    "NotAuthenticatedError",
    "NotAuthorizedError",
    "NotFoundError",
    "GatewayError",
    "TranscriptionError",
    "NoSpeechDetectedError",
    "UnsupportedFormatError",
    "TranscriptionServiceError",
    "ConfigurationError",
]
