"""
Factory for creating transcription providers.
"""

from voicelog.config import TranscriptionConfig
from voicelog.core.transcription.base import Transcriber
from voicelog.core.transcription.openai import OpenAITranscriber
from voicelog.utils.exceptions import ConfigurationError


class TranscriberFactory:
    """Factory for creating transcription providers from configuration."""

    @staticmethod
    def create(config: TranscriptionConfig) -> Transcriber:
        """
        Create transcriber from configuration.

        Args:
            config: Transcription configuration

        Returns:
            Transcriber instance

        Raises:
            ConfigurationError: If provider is not supported or the API key is missing
        """
        if config.provider == "openai":
            if not config.api_key:
                raise ConfigurationError("OpenAI API key is required")
            return OpenAITranscriber(
                api_key=config.api_key,
                model=config.model,
                base_url=config.base_url,
                language=config.language,
                timeout=config.timeout,
            )
        else:
            raise ConfigurationError(f"Unsupported transcription provider: {config.provider}")
