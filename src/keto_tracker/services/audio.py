"""Audio capture and serialization for voice logging."""

import asyncio
import logging
from typing import Protocol

from keto_tracker.domain.errors import EmptyInputError, InvalidRequestError
from keto_tracker.domain.inference import AudioClip
from keto_tracker.services.payloads import decode_data_uri, to_data_uri

_logger = logging.getLogger(__name__)

DEFAULT_AUDIO_MEDIA_TYPE = "audio/webm"
_EXTENSIONS = {
    "audio/webm": "webm",
    "audio/ogg": "ogg",
    "audio/mp4": "m4a",
    "audio/mpeg": "mp3",
    "audio/wav": "wav",
    "audio/x-wav": "wav",
}


class AudioRecorder(Protocol):
    """Microphone handle held for the duration of one capture session."""

    async def start(self) -> None:
        """Begin recording."""

    async def stop(self) -> bytes:
        """Stop recording and return the encoded audio."""

    def release(self) -> None:
        """Stop all device tracks and free the microphone."""


def audio_from_data_uri(value: str, max_bytes: int | None = None) -> AudioClip:
    """Decode a recorded clip submitted as a data URI."""
    try:
        media_type, data = decode_data_uri(value, DEFAULT_AUDIO_MEDIA_TYPE)
    except ValueError as exc:
        raise InvalidRequestError(str(exc)) from exc
    return build_clip(data, media_type, max_bytes=max_bytes)


def build_clip(
    data: bytes, media_type: str = DEFAULT_AUDIO_MEDIA_TYPE, max_bytes: int | None = None
) -> AudioClip:
    """Validate raw audio bytes and wrap them for transport."""
    if not data:
        raise EmptyInputError("Audio recording is empty")
    if max_bytes is not None and len(data) > max_bytes:
        raise InvalidRequestError(
            f"Audio is {len(data)} bytes, limit is {max_bytes}"
        )
    extension = _EXTENSIONS.get(media_type, "webm")
    return AudioClip(data=data, media_type=media_type, filename=f"audio.{extension}")


def clip_to_data_uri(clip: AudioClip) -> str:
    return to_data_uri(clip.data, clip.media_type)


def transport_file(clip: AudioClip) -> tuple[str, bytes, str]:
    """Return the multipart ``file`` tuple for the transcription endpoint."""
    return clip.filename, clip.data, clip.media_type


async def capture_clip(
    recorder: AudioRecorder,
    max_seconds: float,
    stop_event: asyncio.Event | None = None,
) -> AudioClip:
    """Record until ``stop_event`` is set or ``max_seconds`` elapse.

    The recorder is released on every exit path, including cancellation.
    """
    try:
        await recorder.start()
        if stop_event is None:
            await asyncio.sleep(max_seconds)
        else:
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=max_seconds)
            except TimeoutError:
                _logger.info("Recording reached the %ss limit", max_seconds)
        data = await recorder.stop()
    finally:
        recorder.release()
    return build_clip(data)
