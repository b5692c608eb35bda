"""
Tests for factory classes.

Tests the creation of gateways and transcribers from configuration.
"""

import pytest

from voicelog.config import PersistenceConfig, TranscriptionConfig
from voicelog.core.factory import GatewayFactory, TranscriberFactory
from voicelog.core.persistence.base import NoteGateway
from voicelog.core.persistence.sqlite_store import SQLiteNoteGateway
from voicelog.core.transcription.base import Transcriber
from voicelog.core.transcription.openai import OpenAITranscriber
from voicelog.utils.exceptions import ConfigurationError


class TestGatewayFactory:
    """Test persistence gateway factory."""

    def test_create_sqlite_gateway(self, tmp_path):
        config = PersistenceConfig(backend="sqlite", db_path=str(tmp_path / "notes.db"))

        gateway = GatewayFactory.create(config)

        assert isinstance(gateway, SQLiteNoteGateway)
        assert isinstance(gateway, NoteGateway)
        assert gateway.db_path == str(tmp_path / "notes.db")

    def test_unsupported_backend(self):
        with pytest.raises(ConfigurationError, match="Unsupported persistence backend"):
            GatewayFactory.create(PersistenceConfig(backend="postgres"))


class TestTranscriberFactory:
    """Test transcriber factory."""

    def test_create_openai_transcriber(self):
        config = TranscriptionConfig(provider="openai", model="gpt-4o-transcribe", api_key="sk-test")

        transcriber = TranscriberFactory.create(config)

        assert isinstance(transcriber, OpenAITranscriber)
        assert isinstance(transcriber, Transcriber)
        assert transcriber.model == "gpt-4o-transcribe"

    def test_openai_without_api_key(self):
        with pytest.raises(ConfigurationError, match="API key is required"):
            TranscriberFactory.create(TranscriptionConfig(provider="openai", api_key=None))

    def test_unsupported_provider(self):
        with pytest.raises(ConfigurationError, match="Unsupported transcription provider"):
            TranscriberFactory.create(TranscriptionConfig(provider="carrier-pigeon", api_key="k"))
