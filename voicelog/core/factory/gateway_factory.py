"""
Factory for creating persistence gateways.
"""

from voicelog.config import PersistenceConfig
from voicelog.core.persistence.base import NoteGateway
from voicelog.core.persistence.sqlite_store import SQLiteNoteGateway
from voicelog.utils.exceptions import ConfigurationError


class GatewayFactory:
    """Factory for creating persistence gateways from configuration."""

    @staticmethod
    def create(config: PersistenceConfig) -> NoteGateway:
        """
        Create persistence gateway from configuration.

        Args:
            config: Persistence configuration

        Returns:
            Gateway instance

        Raises:
            ConfigurationError: If backend is not supported
        """
        if config.backend == "sqlite":
            return SQLiteNoteGateway(db_path=config.db_path)
        else:
            raise ConfigurationError(f"Unsupported persistence backend: {config.backend}")
