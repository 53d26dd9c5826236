"""Data URI helpers for image and audio payloads."""

import base64
import binascii
import re

from keto_tracker.domain.errors import ImageLoadError
from keto_tracker.domain.inference import ImagePayload

_DATA_URI_PATTERN = re.compile(
    r"^data:(?P<media_type>[\w.+-]+/[\w.+-]+)?(?P<params>(;[^;,]+)*?);base64,",
    re.IGNORECASE,
)


def decode_data_uri(value: str, default_media_type: str) -> tuple[str, bytes]:
    """Decode a base64 data URI, or bare base64, into media type and bytes.

    Raises ``ValueError`` when the payload is not valid base64.
    """
    stripped = value.strip()
    media_type = default_media_type
    match = _DATA_URI_PATTERN.match(stripped)
    if match:
        media_type = (match.group("media_type") or default_media_type).lower()
        stripped = stripped[match.end() :]
    stripped = "".join(stripped.split())
    try:
        data = base64.b64decode(stripped, validate=True)
    except binascii.Error as exc:
        raise ValueError(f"Invalid base64 payload: {exc}") from exc
    return media_type, data


def to_data_uri(data: bytes, media_type: str) -> str:
    """Encode bytes as a base64 data URI."""
    encoded = base64.b64encode(data).decode("utf-8")
    return f"data:{media_type};base64,{encoded}"


def image_from_data_uri(
    value: str, filename: str | None = None, media_type: str | None = None
) -> ImagePayload:
    """Build an image payload from a data URI submitted by a client."""
    try:
        detected_type, data = decode_data_uri(value, "image/jpeg")
    except ValueError as exc:
        raise ImageLoadError(str(exc)) from exc
    return ImagePayload(
        data=data,
        media_type=(media_type or detected_type).lower(),
        filename=filename,
    )
