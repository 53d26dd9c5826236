"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from keto_tracker.adapters.openai_inference_client import OpenAIInferenceGateway
from keto_tracker.config import Settings
from keto_tracker.services.analysis import AnalysisService, InferenceGateway
from keto_tracker.services.images import ImageNormalizer


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    inference_gateway: InferenceGateway
    image_normalizer: ImageNormalizer
    analysis_service: AnalysisService
    close_resources: Callable[[], Awaitable[None]]


def build_image_normalizer(settings: Settings) -> ImageNormalizer:
    return ImageNormalizer(
        max_edge=settings.image_max_edge,
        max_bytes=settings.image_max_bytes,
        initial_quality=settings.image_initial_quality,
        quality_step=settings.image_quality_step,
        min_quality=settings.image_min_quality,
        high_res_pixels=settings.image_high_res_pixels,
        high_res_scale=settings.image_high_res_scale,
        upload_limit_bytes=settings.image_upload_limit_bytes,
        heic_conversion_quality=settings.heic_conversion_quality,
    )


def build_analysis_service(
    settings: Settings,
    gateway: InferenceGateway,
    image_normalizer: ImageNormalizer,
) -> AnalysisService:
    """Create the pipeline orchestrator from settings."""
    return AnalysisService(
        gateway=gateway,
        image_normalizer=image_normalizer,
        text_model=settings.text_model,
        vision_models=tuple(settings.vision_models),
        vision_attempts_per_model=settings.vision_attempts_per_model,
        vision_retry_delay_seconds=settings.vision_retry_delay_seconds,
        transcription_model=settings.transcription_model,
        transcription_language=settings.transcription_language,
        text_timeout_seconds=settings.text_timeout_seconds,
        vision_timeout_seconds=settings.vision_timeout_seconds,
        transcription_timeout_seconds=settings.transcription_timeout_seconds,
        temperature=settings.temperature,
        max_tokens=settings.max_tokens,
        audio_max_bytes=settings.audio_max_bytes,
        locale=settings.locale,
    )


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    gateway = OpenAIInferenceGateway.create(resolved_settings.inference_base_url)
    image_normalizer = build_image_normalizer(resolved_settings)
    analysis_service = build_analysis_service(
        resolved_settings, gateway, image_normalizer
    )

    async def close_resources() -> None:
        await gateway.close()

    return AppContainer(
        settings=resolved_settings,
        inference_gateway=gateway,
        image_normalizer=image_normalizer,
        analysis_service=analysis_service,
        close_resources=close_resources,
    )
