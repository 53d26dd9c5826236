"""Food-logging pipeline orchestration for text, photo and voice input."""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field, replace
from typing import Protocol

from keto_tracker.domain.analysis import AnalysisOutcome, OutcomeStatus
from keto_tracker.domain.errors import (
    AnalysisError,
    EmptyInputError,
    EmptyTranscriptionError,
    MissingCredentialError,
    NoItemsDetectedError,
    ProviderUnavailableError,
)
from keto_tracker.domain.inference import (
    AudioClip,
    ImagePayload,
    InferenceRequest,
    Modality,
)
from keto_tracker.domain.nutrition import AnalysisResult
from keto_tracker.services.audio import audio_from_data_uri, build_clip
from keto_tracker.services.extraction import extract_foods_payload
from keto_tracker.services.images import ImageNormalizer
from keto_tracker.services.messages import DEFAULT_LOCALE, user_message
from keto_tracker.services.nutrition import normalize_foods
from keto_tracker.services.payloads import image_from_data_uri
from keto_tracker.services.prompts import (
    TEXT_SYSTEM_PROMPT,
    VISION_SYSTEM_PROMPT,
    text_user_prompt,
    vision_user_content,
)

_logger = logging.getLogger(__name__)


class InferenceGateway(Protocol):
    """Interface for the LLM provider's chat and transcription endpoints."""

    async def complete_chat(  # noqa: PLR0913
        self,
        *,
        model: str,
        system_prompt: str,
        user_content: str | list[dict[str, object]],
        temperature: float,
        max_tokens: int,
        credential: str | None,
        timeout: float,
    ) -> str:
        """Return the raw text of the first completion choice."""

    async def transcribe(  # noqa: PLR0913
        self,
        *,
        audio: AudioClip,
        model: str,
        language: str,
        credential: str | None,
        timeout: float,
    ) -> str:
        """Return the raw transcript text."""


@dataclass
class AnalysisService:
    """Runs one stateless pipeline invocation per user action.

    Failures never escape the public ``analyze_*`` methods; they are turned
    into an ``AnalysisOutcome`` with a localized message.
    """

    gateway: InferenceGateway
    image_normalizer: ImageNormalizer = field(default_factory=ImageNormalizer)
    text_model: str = "llama-3.3-70b-versatile"
    vision_models: Sequence[str] = ("meta-llama/llama-4-scout-17b-16e-instruct",)
    vision_attempts_per_model: int = 2
    vision_retry_delay_seconds: float = 0.5
    transcription_model: str = "whisper-large-v3-turbo"
    transcription_language: str = "es"
    text_timeout_seconds: float = 30.0
    vision_timeout_seconds: float = 60.0
    transcription_timeout_seconds: float = 30.0
    temperature: float = 0.3
    max_tokens: int = 1000
    audio_max_bytes: int | None = None
    locale: str = DEFAULT_LOCALE

    async def analyze_text(
        self, description: str, credential: str | None
    ) -> AnalysisOutcome:
        """Analyze a free-text meal description."""
        request = InferenceRequest(Modality.TEXT, description, credential)
        return await self._run(request, self._text_pipeline)

    async def analyze_photo(
        self,
        image: str | ImagePayload,
        credential: str | None,
        filename: str | None = None,
        media_type: str | None = None,
    ) -> AnalysisOutcome:
        """Analyze a meal photo given as a data URI or a decoded payload."""

        async def pipeline(req: InferenceRequest) -> AnalysisResult:
            payload = req.payload
            if isinstance(payload, str):
                payload = image_from_data_uri(
                    payload, filename=filename, media_type=media_type
                )
            return await self._photo_pipeline(payload, req.credential)

        request = InferenceRequest(Modality.IMAGE, image, credential)
        return await self._run(request, pipeline)

    async def analyze_voice(
        self, audio: str | AudioClip, credential: str | None
    ) -> AnalysisOutcome:
        """Transcribe a recorded clip, then analyze the transcript."""
        transcripts: list[str] = []

        async def pipeline(req: InferenceRequest) -> AnalysisResult:
            payload = req.payload
            if isinstance(payload, str):
                clip = audio_from_data_uri(payload, max_bytes=self.audio_max_bytes)
            elif isinstance(payload, AudioClip):
                clip = build_clip(
                    payload.data, payload.media_type, max_bytes=self.audio_max_bytes
                )
            else:
                raise EmptyInputError("Unsupported audio payload")
            transcript = await self._transcribe(clip, req.credential)
            transcripts.append(transcript)
            return await self._analyze_description(transcript, req.credential)

        request = InferenceRequest(Modality.AUDIO, audio, credential)
        outcome = await self._run(request, pipeline)
        if transcripts:
            return replace(outcome, transcription=transcripts[-1])
        return outcome

    async def _run(
        self,
        request: InferenceRequest,
        pipeline: Callable[[InferenceRequest], Awaitable[AnalysisResult]],
    ) -> AnalysisOutcome:
        try:
            if not request.credential:
                raise MissingCredentialError("No API credential configured")
            result = await pipeline(request)
        except NoItemsDetectedError as exc:
            _logger.info("No foods detected (%s): %s", request.modality, exc)
            return self._failure(request.modality, exc, OutcomeStatus.NO_ITEMS)
        except AnalysisError as exc:
            _logger.warning(
                "Analysis failed (%s, %s): %s", request.modality, exc.code, exc
            )
            return self._failure(request.modality, exc, OutcomeStatus.FAILED)
        except Exception as exc:
            _logger.exception("Unexpected analysis failure (%s)", request.modality)
            return self._failure(request.modality, exc, OutcomeStatus.FAILED)
        _logger.info(
            "Analysis succeeded (%s): %s foods", request.modality, len(result.foods)
        )
        return AnalysisOutcome(
            modality=request.modality, status=OutcomeStatus.OK, result=result
        )

    def _failure(
        self, modality: Modality, exc: Exception, status: OutcomeStatus
    ) -> AnalysisOutcome:
        code = exc.code if isinstance(exc, AnalysisError) else AnalysisError.code
        return AnalysisOutcome(
            modality=modality,
            status=status,
            error_code=code,
            message=user_message(code, modality, self.locale),
            detail=f"{type(exc).__name__}: {exc}",
        )

    async def _text_pipeline(self, request: InferenceRequest) -> AnalysisResult:
        if not isinstance(request.payload, str):
            raise EmptyInputError("Text analysis needs a description")
        return await self._analyze_description(request.payload, request.credential)

    async def _analyze_description(
        self, description: str, credential: str | None
    ) -> AnalysisResult:
        if not description.strip():
            raise EmptyInputError("Description is blank")
        raw = await self.gateway.complete_chat(
            model=self.text_model,
            system_prompt=TEXT_SYSTEM_PROMPT,
            user_content=text_user_prompt(description),
            temperature=self.temperature,
            max_tokens=self.max_tokens,
            credential=credential,
            timeout=self.text_timeout_seconds,
        )
        return normalize_foods(extract_foods_payload(raw))

    async def _photo_pipeline(
        self, payload: ImagePayload, credential: str | None
    ) -> AnalysisResult:
        normalized = await asyncio.to_thread(self.image_normalizer.normalize, payload)
        raw = await self._complete_vision(normalized.data_uri, credential)
        return normalize_foods(extract_foods_payload(raw))

    async def _complete_vision(self, image_data_uri: str, credential: str | None) -> str:
        """Try each candidate model in order, a few attempts each.

        Only fallback-eligible errors move on to the next attempt; anything
        else, invalid credentials included, ends the run immediately. A
        timeout is terminal too: it has already spent the whole vision
        deadline, so another attempt would double the wait.
        """
        last_error: AnalysisError | None = None
        for model, attempt in self._vision_plan():
            if last_error is not None and attempt > 1:
                await asyncio.sleep(self.vision_retry_delay_seconds)
            try:
                return await self.gateway.complete_chat(
                    model=model,
                    system_prompt=VISION_SYSTEM_PROMPT,
                    user_content=vision_user_content(image_data_uri),
                    temperature=self.temperature,
                    max_tokens=self.max_tokens,
                    credential=credential,
                    timeout=self.vision_timeout_seconds,
                )
            except AnalysisError as exc:
                if not exc.fallback_eligible:
                    raise
                last_error = exc
                _logger.warning(
                    "Vision model %s attempt %s failed (%s): %s",
                    model,
                    attempt,
                    exc.code,
                    exc,
                )
        if last_error is None:
            raise ProviderUnavailableError("No vision models configured")
        raise last_error

    def _vision_plan(self) -> list[tuple[str, int]]:
        return [
            (model, attempt)
            for model in self.vision_models
            for attempt in range(1, self.vision_attempts_per_model + 1)
        ]

    async def _transcribe(self, clip: AudioClip, credential: str | None) -> str:
        transcript = await self.gateway.transcribe(
            audio=clip,
            model=self.transcription_model,
            language=self.transcription_language,
            credential=credential,
            timeout=self.transcription_timeout_seconds,
        )
        if not transcript.strip():
            raise EmptyTranscriptionError("Transcription returned no text")
        return transcript.strip()

