"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Header, Request
from fastapi.responses import JSONResponse

from keto_tracker.api.schemas import (
    AnalysisResponse,
    AnalyzePhotoRequest,
    AnalyzeTextRequest,
    AnalyzeVoiceRequest,
)
from keto_tracker.app_logging import configure_logging
from keto_tracker.config import Settings, resolve_credential
from keto_tracker.containers import AppContainer
from keto_tracker.domain.analysis import AnalysisOutcome

CREDENTIAL_HEADER = "X-Groq-API-Key"


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post(
        "/api/analyze-text",
        response_model=AnalysisResponse,
        response_model_exclude_none=True,
    )
    async def analyze_text(
        body: AnalyzeTextRequest,
        request: Request,
        api_key: str | None = Header(default=None, alias=CREDENTIAL_HEADER),
    ) -> AnalysisResponse:
        """Analyze a free-text meal description."""
        state_container: AppContainer = request.app.state.container
        outcome = await state_container.analysis_service.analyze_text(
            body.resolved_description,
            _credential(state_container.settings, api_key),
        )
        return _to_response(state_container.settings, outcome)

    @app.post(
        "/api/analyze-photo",
        response_model=AnalysisResponse,
        response_model_exclude_none=True,
    )
    async def analyze_photo(
        body: AnalyzePhotoRequest,
        request: Request,
        api_key: str | None = Header(default=None, alias=CREDENTIAL_HEADER),
    ) -> AnalysisResponse | JSONResponse:
        """Analyze a meal photo submitted as a data URI."""
        state_container: AppContainer = request.app.state.container
        if not body.image_base64:
            return _bad_request("Se requiere una imagen")
        logger.info("Analyzing image: %sKB", round(len(body.image_base64) / 1024))
        outcome = await state_container.analysis_service.analyze_photo(
            body.image_base64,
            _credential(state_container.settings, api_key),
            filename=body.file_name,
            media_type=body.media_type,
        )
        return _to_response(state_container.settings, outcome)

    @app.post(
        "/api/analyze-voice",
        response_model=AnalysisResponse,
        response_model_exclude_none=True,
    )
    async def analyze_voice(
        body: AnalyzeVoiceRequest,
        request: Request,
        api_key: str | None = Header(default=None, alias=CREDENTIAL_HEADER),
    ) -> AnalysisResponse | JSONResponse:
        """Transcribe recorded audio and analyze the transcript."""
        state_container: AppContainer = request.app.state.container
        if not body.audio_base64:
            return _bad_request("Se requiere audio")
        outcome = await state_container.analysis_service.analyze_voice(
            body.audio_base64,
            _credential(state_container.settings, api_key),
        )
        return _to_response(state_container.settings, outcome)

    return app


def _credential(settings: Settings, override: str | None) -> str | None:
    return resolve_credential(settings.groq_api_key, override)


def _to_response(settings: Settings, outcome: AnalysisOutcome) -> AnalysisResponse:
    """Convert a pipeline outcome into the wire envelope."""
    if outcome.success and outcome.result is not None:
        return AnalysisResponse(
            success=True,
            data=outcome.result.to_dict(),
            transcription=outcome.transcription,
        )
    return AnalysisResponse(
        success=False,
        error=outcome.message,
        error_code=outcome.error_code,
        transcription=outcome.transcription,
        debug=_debug_detail(settings, outcome),
    )


def _debug_detail(settings: Settings, outcome: AnalysisOutcome) -> str | None:
    """Expose the underlying error only in local environments."""
    if settings.environment == "local":
        return outcome.detail
    return None


def _bad_request(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=400, content={"success": False, "error": message}
    )
