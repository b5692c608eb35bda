"""
Abstract base class for speech-to-text providers.
"""

from abc import ABC, abstractmethod


class Transcriber(ABC):
    """
    Abstract base for transcription providers.

    Responsibilities:
    - Turn a finished recording into text
    - Report no-speech, format and backend failures as distinct errors
    """

    @abstractmethod
    async def transcribe(self, audio: bytes, mime_type: str = "audio/webm") -> str:
        """
        Transcribe recorded audio.

        Args:
            audio: Encoded audio bytes
            mime_type: Container MIME type (e.g. "audio/webm")

        Returns:
            Transcribed text (never blank)

        Raises:
            NoSpeechDetectedError: If nothing intelligible was said
            UnsupportedFormatError: If the MIME type is not accepted
            TranscriptionServiceError: If the backend fails
        """
        pass

    @abstractmethod
    async def close(self):
        """
        Close any open connections.
        """
