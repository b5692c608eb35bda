"""
Factory modules for creating VoiceLog components.

Provides modular factories for the persistence gateway and the transcriber.
"""

from voicelog.core.factory.gateway_factory import GatewayFactory
from voicelog.core.factory.transcriber_factory import TranscriberFactory

__all__ = [
    "GatewayFactory",
    "TranscriberFactory",
]
