"""
Transcription providers for VoiceLog.

Provides abstract base and concrete implementations for speech-to-text.
"""

from voicelog.core.transcription.base import Transcriber
from voicelog.core.transcription.openai import OpenAITranscriber

__all__ = [
    "Transcriber",
    "OpenAITranscriber",
]
