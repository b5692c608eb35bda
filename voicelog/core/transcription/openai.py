"""
OpenAI transcription provider using official SDK.
"""

import openai
from openai import AsyncOpenAI

from voicelog.core.transcription.base import Transcriber
from voicelog.models.audio import AudioClip
from voicelog.utils.exceptions import (
    NoSpeechDetectedError,
    TranscriptionServiceError,
    UnsupportedFormatError,
)
from voicelog.utils.logger import get_logger

logger = get_logger(__name__)


class OpenAITranscriber(Transcriber):
    """
    OpenAI speech-to-text provider.

    Uploads the recording to the audio transcription endpoint (Whisper family).
    """

    def __init__(
        self,
        api_key: str,
        model: str = "whisper-1",
        base_url: str | None = None,
        language: str | None = None,
        timeout: float = 120.0,
    ):
        """
        Initialize OpenAI transcriber.

        Args:
            api_key: OpenAI API key
            model: Model name (e.g., "whisper-1", "gpt-4o-transcribe")
            base_url: Optional custom base URL
            language: Optional ISO-639-1 hint such as "en"
            timeout: Request timeout in seconds
        """
        self.model = model
        self.language = language

        self.client = AsyncOpenAI(api_key=api_key, base_url=base_url, timeout=timeout)

    async def transcribe(self, audio: bytes, mime_type: str = "audio/webm") -> str:
        """
        Transcribe audio using OpenAI.

        Args:
            audio: Encoded audio bytes
            mime_type: Container MIME type
        Returns:
            Transcribed text
        Raises:
            UnsupportedFormatError: If the MIME type is not accepted
            NoSpeechDetectedError: If the recording is empty or silent
            TranscriptionServiceError: If the OpenAI API call fails
        """
        clip = AudioClip(data=audio, mime_type=mime_type)

        if not clip.is_supported:
            raise UnsupportedFormatError(
                f"Unsupported audio format: {mime_type}", context={"mime_type": mime_type}
            )

        if clip.is_empty:
            raise NoSpeechDetectedError("Recording is empty")

        params = {
            "model": self.model,
            "file": (clip.filename, clip.data, mime_type),
        }
        if self.language:
            params["language"] = self.language

        try:
            response = await self.client.audio.transcriptions.create(**params)
        except openai.APIError as e:
            logger.error(
                f"OpenAI transcription error: {e}",
                extra={"model": self.model, "mime_type": mime_type, "error": str(e)},
            )
            raise TranscriptionServiceError(f"OpenAI transcription error: {e}") from e

        text = (response.text or "").strip()
        if not text:
            raise NoSpeechDetectedError("No speech detected in recording")

        logger.debug(f"Transcribed {len(clip.data)} bytes into {len(text)} characters")
        return text

    async def close(self):
        """Close OpenAI client."""
        await self.client.close()
