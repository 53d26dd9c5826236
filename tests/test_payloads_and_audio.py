"""Tests for data URI payloads and audio capture."""

import asyncio
import base64
from dataclasses import dataclass

import pytest

from keto_tracker.domain.errors import (
    EmptyInputError,
    ImageLoadError,
    InvalidRequestError,
)
from keto_tracker.domain.inference import AudioClip
from keto_tracker.services.audio import (
    AudioRecorder,
    audio_from_data_uri,
    capture_clip,
    clip_to_data_uri,
    transport_file,
)
from keto_tracker.services.payloads import decode_data_uri, image_from_data_uri
from tests.conftest import AUDIO_DATA_URI


def test_decode_data_uri_reads_media_type() -> None:
    encoded = base64.b64encode(b"png-bytes").decode()

    media_type, data = decode_data_uri(f"data:image/PNG;base64,{encoded}", "image/jpeg")

    assert media_type == "image/png"
    assert data == b"png-bytes"


def test_bare_base64_uses_default_media_type() -> None:
    encoded = base64.b64encode(b"raw").decode()

    media_type, data = decode_data_uri(encoded, "image/jpeg")

    assert media_type == "image/jpeg"
    assert data == b"raw"


def test_invalid_base64_raises_value_error() -> None:
    with pytest.raises(ValueError, match="Invalid base64"):
        decode_data_uri("data:image/jpeg;base64,@@@not-base64@@@", "image/jpeg")


def test_image_from_data_uri_wraps_decode_errors() -> None:
    with pytest.raises(ImageLoadError):
        image_from_data_uri("%%%")


def test_image_from_data_uri_prefers_declared_media_type() -> None:
    encoded = base64.b64encode(b"heic").decode()

    payload = image_from_data_uri(
        f"data:application/octet-stream;base64,{encoded}",
        filename="IMG_1.HEIC",
        media_type="image/HEIC",
    )

    assert payload.media_type == "image/heic"
    assert payload.filename == "IMG_1.HEIC"


def test_audio_data_uri_with_codec_parameters() -> None:
    clip = audio_from_data_uri(AUDIO_DATA_URI)

    assert clip.media_type == "audio/webm"
    assert clip.filename == "audio.webm"
    assert transport_file(clip) == ("audio.webm", clip.data, "audio/webm")
    assert clip_to_data_uri(clip).startswith("data:audio/webm;base64,")


def test_empty_audio_is_rejected() -> None:
    with pytest.raises(EmptyInputError):
        audio_from_data_uri("data:audio/webm;base64,")


def test_oversized_audio_is_rejected() -> None:
    with pytest.raises(InvalidRequestError):
        audio_from_data_uri(AUDIO_DATA_URI, max_bytes=4)


@dataclass
class FakeRecorder(AudioRecorder):
    data: bytes = b"recorded-audio"
    fail_on_stop: bool = False
    started: bool = False
    released: int = 0

    async def start(self) -> None:
        self.started = True

    async def stop(self) -> bytes:
        if self.fail_on_stop:
            raise RuntimeError("microphone disconnected")
        return self.data

    def release(self) -> None:
        self.released += 1


def test_capture_clip_releases_device_after_recording() -> None:
    recorder = FakeRecorder()

    clip = asyncio.run(capture_clip(recorder, max_seconds=0.01))

    assert clip == AudioClip(data=b"recorded-audio")
    assert recorder.released == 1


def test_capture_clip_stops_early_on_event() -> None:
    recorder = FakeRecorder()

    async def run() -> AudioClip:
        stop_event = asyncio.Event()
        stop_event.set()
        return await capture_clip(recorder, max_seconds=30, stop_event=stop_event)

    clip = asyncio.run(run())

    assert clip.data == b"recorded-audio"
    assert recorder.released == 1


def test_capture_clip_releases_device_on_error() -> None:
    recorder = FakeRecorder(fail_on_stop=True)

    with pytest.raises(RuntimeError):
        asyncio.run(capture_clip(recorder, max_seconds=0.01))

    assert recorder.released == 1


def test_capture_clip_releases_device_on_cancellation() -> None:
    recorder = FakeRecorder()

    async def run() -> None:
        task = asyncio.create_task(capture_clip(recorder, max_seconds=30))
        await asyncio.sleep(0.01)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(run())

    assert recorder.started
    assert recorder.released == 1


def test_line_wrapped_base64_is_accepted() -> None:
    encoded = base64.encodebytes(b"x" * 200).decode()
    assert "\n" in encoded

    media_type, data = decode_data_uri(f"data:image/png;base64,{encoded}", "image/jpeg")

    assert media_type == "image/png"
    assert data == b"x" * 200
