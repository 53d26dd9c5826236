"""Inference request and input payload models."""

from dataclasses import dataclass
from enum import StrEnum


class Modality(StrEnum):
    """Input channel of a food-logging request."""

    TEXT = "text"
    IMAGE = "image"
    AUDIO = "audio"


@dataclass(frozen=True)
class ImagePayload:
    """Raw image bytes with the declared media type and optional filename."""

    data: bytes
    media_type: str = "image/jpeg"
    filename: str | None = None


@dataclass(frozen=True)
class AudioClip:
    """Recorded audio ready for transcription."""

    data: bytes
    media_type: str = "audio/webm"
    filename: str = "audio.webm"


@dataclass(frozen=True)
class InferenceRequest:
    """Input of a single pipeline invocation."""

    modality: Modality
    payload: str | ImagePayload | AudioClip
    credential: str | None = None


@dataclass(frozen=True)
class NormalizedImage:
    """JPEG image prepared for a vision model."""

    data_uri: str
    width: int
    height: int
    quality: int
    size_bytes: int
