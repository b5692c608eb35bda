"""Core infrastructure: persistence, transcription and factories."""
