"""Error taxonomy for the food-logging pipeline."""

from typing import ClassVar


class AnalysisError(Exception):
    """Base class for failures raised while analyzing a meal.

    ``code`` is the stable identifier used to pick a user-facing message.
    ``fallback_eligible`` marks failures after which the photo pipeline may
    try another attempt or candidate model.
    """

    code: ClassVar[str] = "analysis_error"
    fallback_eligible: ClassVar[bool] = False


class MissingCredentialError(AnalysisError):
    """No API credential was supplied for the call."""

    code = "missing_credential"


class InvalidCredentialError(AnalysisError):
    """The provider rejected the credential (HTTP 401/403)."""

    code = "invalid_credential"


class RateLimitedError(AnalysisError):
    """The provider throttled the request (HTTP 429)."""

    code = "rate_limited"
    fallback_eligible = True


class InvalidRequestError(AnalysisError):
    """The provider rejected the payload (HTTP 4xx other than auth/429)."""

    code = "invalid_request"
    fallback_eligible = True


class ProviderUnavailableError(AnalysisError):
    """Server-side failure (HTTP >= 500) or network error."""

    code = "provider_unavailable"
    fallback_eligible = True


class RequestTimeoutError(AnalysisError):
    """The call did not complete before its deadline."""

    code = "request_timeout"


class ImageLoadError(AnalysisError):
    """The image could not be decoded or has no usable dimensions."""

    code = "image_load_error"


class ImageTooLargeError(ImageLoadError):
    """The upload exceeds the ceiling and was rejected before decoding."""

    code = "image_too_large"


class FormatUnsupportedError(AnalysisError):
    """HEIC/HEIF conversion did not produce a decodable image."""

    code = "format_unsupported"


class MalformedResponseError(AnalysisError):
    """The model reply did not contain a usable foods object."""

    code = "malformed_response"


class NoItemsDetectedError(AnalysisError):
    """The model reply was well formed but listed no foods."""

    code = "no_items_detected"


class EmptyInputError(AnalysisError):
    """The caller supplied a blank description or an empty recording."""

    code = "empty_input"


class EmptyTranscriptionError(AnalysisError):
    """Transcription succeeded but produced no text."""

    code = "empty_transcription"
