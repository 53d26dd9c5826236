"""Image preparation for vision models.

Any uploaded photo, HEIC/HEIF included, is decoded, scaled down and
re-encoded as JPEG so the request stays within the provider's payload
limits. Quality values use Pillow's 1-95 JPEG scale.
"""

import io
import logging
from dataclasses import dataclass

import pillow_heif
from PIL import Image, ImageOps, UnidentifiedImageError

from keto_tracker.domain.errors import (
    FormatUnsupportedError,
    ImageLoadError,
    ImageTooLargeError,
)
from keto_tracker.domain.inference import ImagePayload, NormalizedImage
from keto_tracker.services.payloads import to_data_uri

_logger = logging.getLogger(__name__)

HEIC_EXTENSIONS = (".heic", ".heif")
HEIC_MEDIA_TYPES = frozenset(
    {"image/heic", "image/heif", "image/heic-sequence", "image/heif-sequence"}
)


def is_heic(payload: ImagePayload) -> bool:
    """Detect HEIC/HEIF from the filename or declared media type."""
    filename = (payload.filename or "").lower()
    media_type = (payload.media_type or "").lower()
    return filename.endswith(HEIC_EXTENSIONS) or media_type in HEIC_MEDIA_TYPES


@dataclass
class ImageNormalizer:
    """Resize and recompress images under a pixel and byte budget."""

    max_edge: int = 800
    max_bytes: int = 180 * 1024
    initial_quality: int = 60
    quality_step: int = 10
    min_quality: int = 15
    high_res_pixels: int = 5_000_000
    high_res_scale: float = 0.4
    upload_limit_bytes: int = 100 * 1024 * 1024
    heic_conversion_quality: int = 70

    def normalize(self, payload: ImagePayload) -> NormalizedImage:
        """Return a JPEG data URI within the configured limits."""
        if len(payload.data) > self.upload_limit_bytes:
            raise ImageTooLargeError(
                f"Image is {len(payload.data)} bytes, limit is "
                f"{self.upload_limit_bytes}"
            )
        if not payload.data:
            raise ImageLoadError("Image payload is empty")

        data = payload.data
        if is_heic(payload):
            data = self._convert_heic(data)

        image = _decode(data)
        source_width, source_height = image.size
        if source_width <= 0 or source_height <= 0:
            raise ImageLoadError("Image has no usable dimensions")

        width, height = self._target_size(source_width, source_height)
        if (width, height) != (source_width, source_height):
            image = image.resize((width, height), Image.Resampling.BICUBIC)
        _logger.info(
            "Resizing image: %sx%s -> %sx%s",
            source_width,
            source_height,
            width,
            height,
        )

        encoded, quality = self._encode_within_budget(image)
        _logger.info(
            "Normalized image: %sx%s, %s bytes, quality=%s",
            width,
            height,
            len(encoded),
            quality,
        )
        return NormalizedImage(
            data_uri=to_data_uri(encoded, "image/jpeg"),
            width=width,
            height=height,
            quality=quality,
            size_bytes=len(encoded),
        )

    def _target_size(self, width: int, height: int) -> tuple[int, int]:
        scale = min(self.max_edge / width, self.max_edge / height, 1.0)
        if width * height > self.high_res_pixels:
            scale = min(scale, self.high_res_scale)
        return max(1, round(width * scale)), max(1, round(height * scale))

    def _encode_within_budget(self, image: Image.Image) -> tuple[bytes, int]:
        quality = self.initial_quality
        encoded = _encode_jpeg(image, quality)
        while len(encoded) > self.max_bytes and quality > self.min_quality:
            quality = max(self.min_quality, quality - self.quality_step)
            encoded = _encode_jpeg(image, quality)
        if len(encoded) > self.max_bytes:
            _logger.warning(
                "Image still %s bytes at minimum quality %s", len(encoded), quality
            )
        return encoded, quality

    def _convert_heic(self, data: bytes) -> bytes:
        try:
            heif_file = pillow_heif.open_heif(io.BytesIO(data))
            converted = heif_file.to_pillow()
            return _encode_jpeg(converted, self.heic_conversion_quality)
        except Exception as exc:
            _logger.warning("HEIC conversion failed: %s", exc)
            raise FormatUnsupportedError(f"HEIC conversion failed: {exc}") from exc


def _decode(data: bytes) -> Image.Image:
    """Open image bytes as an upright RGB image."""
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
        image = ImageOps.exif_transpose(image)
    except (
        UnidentifiedImageError,
        Image.DecompressionBombError,
        OSError,
        ValueError,
        KeyError,
        TypeError,
        SyntaxError,
    ) as exc:
        raise ImageLoadError(f"Failed to load image: {exc}") from exc
    if image.mode != "RGB":
        image = image.convert("RGB")
    return image


def _encode_jpeg(image: Image.Image, quality: int) -> bytes:
    if image.mode != "RGB":
        image = image.convert("RGB")
    buffer = io.BytesIO()
    image.save(buffer, format="JPEG", quality=quality, optimize=True)
    return buffer.getvalue()
