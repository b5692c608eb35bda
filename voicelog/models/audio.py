"""Captured audio handed to the transcription service."""

from pydantic import BaseModel, Field

# MIME type -> file extension accepted by the transcription backend
SUPPORTED_AUDIO_TYPES: dict[str, str] = {
    "audio/webm": "webm",
    "audio/ogg": "ogg",
    "audio/wav": "wav",
    "audio/x-wav": "wav",
    "audio/mpeg": "mp3",
    "audio/mp3": "mp3",
    "audio/mp4": "mp4",
    "audio/m4a": "m4a",
    "audio/x-m4a": "m4a",
    "audio/flac": "flac",
}


def normalize_mime_type(mime_type: str) -> str:
    """Strip parameters such as ``;codecs=opus`` and lowercase."""
    return mime_type.split(";", 1)[0].strip().lower()


class AudioClip(BaseModel):
    """A finished recording."""

    data: bytes = Field(..., description="Encoded audio bytes")
    mime_type: str = Field(default="audio/webm", description="Container MIME type")

    @property
    def is_supported(self) -> bool:
        return normalize_mime_type(self.mime_type) in SUPPORTED_AUDIO_TYPES

    @property
    def filename(self) -> str:
        """Synthetic upload filename; the extension tells the backend the format."""
        extension = SUPPORTED_AUDIO_TYPES.get(normalize_mime_type(self.mime_type), "bin")
        return f"recording.{extension}"

    @property
    def is_empty(self) -> bool:
        return len(self.data) == 0
