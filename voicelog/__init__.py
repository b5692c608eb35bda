"""
VoiceLog - voice-note capture with a complaint follow-up workflow.
"""

__version__ = "0.1.0"
