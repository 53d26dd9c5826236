"""Request and response models for the analysis API."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class AnalyzeTextRequest(BaseModel):
    """Free-text meal description; ``text`` is accepted as an alias."""

    description: str | None = None
    text: str | None = None

    @property
    def resolved_description(self) -> str:
        return self.description or self.text or ""


class AnalyzePhotoRequest(BaseModel):
    """Photo submitted as a base64 data URI."""

    model_config = ConfigDict(populate_by_name=True)

    image_base64: str | None = Field(default=None, alias="imageBase64")
    file_name: str | None = Field(default=None, alias="fileName")
    media_type: str | None = Field(default=None, alias="mediaType")


class AnalyzeVoiceRequest(BaseModel):
    """Recorded audio submitted as a base64 data URI."""

    model_config = ConfigDict(populate_by_name=True)

    audio_base64: str | None = Field(default=None, alias="audioBase64")


class AnalysisResponse(BaseModel):
    """Envelope returned by every analysis endpoint."""

    success: bool
    data: dict[str, Any] | None = None
    error: str | None = None
    error_code: str | None = Field(default=None, serialization_alias="errorCode")
    transcription: str | None = None
    debug: str | None = None
